from pathlib import Path

from fastapi.testclient import TestClient
from setuptools import find_namespace_packages

from equiduty.main import app

ROOT = Path(__file__).resolve().parent.parent


def test_health_has_no_security_headers():
    response = TestClient(app).get("/health")
    assert response.json() == {"status": "healthy"}
    assert "Content-Security-Policy" not in response.headers


def test_api_responses_carry_security_headers(client, login, make_user):
    login(make_user("user@example.com"))
    response = client.get("/api/v1/tiers")

    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Cache-Control"] == "no-store"
    assert "default-src 'none'" in response.headers["Content-Security-Policy"]
    assert "Strict-Transport-Security" not in response.headers


def test_redis_health_when_cache_disabled():
    assert TestClient(app).get("/health/redis").json() == {"status": "disabled", "redis": {"connected": False}}


def test_malformed_bearer_token_is_unauthorized():
    response = TestClient(app).get("/api/v1/tiers", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_every_domain_package_is_installed():
    packages = find_namespace_packages(where=str(ROOT), include=["equiduty*"])
    domains = {path.name for path in (ROOT / "equiduty" / "domain").iterdir() if path.is_dir() and path.name != "__pycache__"}

    assert "equiduty.shared" in packages
    assert {f"equiduty.domain.{name}" for name in domains} <= set(packages)
    assert "equiduty.domain.selection" in packages
