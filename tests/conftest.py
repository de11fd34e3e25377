import os

# Must be set before the app modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["SECURITY_HEADERS_ENABLED"] = "true"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from equiduty.auth import get_current_user
from equiduty.database import Base, SessionLocal, engine, get_db
from equiduty.main import app
from equiduty.models import Organization, OrganizationMember, Stable, User

_current = {"user_id": None}


def _override_current_user(db: Session = Depends(get_db)) -> User:
    return db.get(User, _current["user_id"])


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    app.dependency_overrides[get_current_user] = _override_current_user
    _current["user_id"] = None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login():
    """Make later requests run as the given user"""

    def _login(user: User) -> None:
        _current["user_id"] = user.id

    return _login


@pytest.fixture
def make_user(db):
    def _make_user(email: str, name: str = None, system_admin: bool = False) -> User:
        user = User(
            firebase_uid=f"uid-{email}",
            email=email,
            full_name=name,
            system_role="system_admin" if system_admin else "user",
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_org(db):
    def _make_org(owner: User, name: str = "Sunny Meadows", tier: str = "pro") -> Organization:
        organization = Organization(name=name, owner_id=owner.id, subscription_tier=tier)
        db.add(organization)
        db.flush()
        db.add(
            OrganizationMember(
                organization_id=organization.id,
                user_id=owner.id,
                roles=["administrator"],
                primary_role="administrator",
                status="active",
            )
        )
        db.commit()
        db.refresh(organization)
        return organization

    return _make_org


@pytest.fixture
def add_member(db):
    def _add_member(organization: Organization, user: User, roles=None, status: str = "active") -> OrganizationMember:
        roles = roles or ["groom"]
        member = OrganizationMember(
            organization_id=organization.id,
            user_id=user.id,
            roles=roles,
            primary_role=roles[0],
            status=status,
        )
        db.add(member)
        db.commit()
        db.refresh(member)
        return member

    return _add_member


@pytest.fixture
def make_stable(db):
    def _make_stable(organization: Organization, name: str = "Main Barn") -> Stable:
        stable = Stable(organization_id=organization.id, name=name)
        db.add(stable)
        db.commit()
        db.refresh(stable)
        return stable

    return _make_stable


@pytest.fixture
def stable_setup(make_user, make_org, add_member, make_stable):
    """An owner, a planner and two grooms sharing one stable on the pro tier"""
    owner = make_user("owner@example.com", "Olivia Owner")
    planner = make_user("planner@example.com", "Paul Planner")
    anna = make_user("anna@example.com", "Anna Groom")
    bert = make_user("bert@example.com", "Bert Groom")
    organization = make_org(owner)
    add_member(organization, planner, ["schedule_planner"])
    add_member(organization, anna, ["groom"])
    add_member(organization, bert, ["groom"])
    stable = make_stable(organization)
    return {
        "owner": owner,
        "planner": planner,
        "anna": anna,
        "bert": bert,
        "organization": organization,
        "stable": stable,
    }
