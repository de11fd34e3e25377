from datetime import date, timedelta

from equiduty.domain.inventory.service import calculate_inventory_status, scan_expiring_items
from equiduty.models import InventoryAlert

API = "/api/v1/inventory"


def create_item(client, stable, **overrides):
    payload = {
        "stableId": stable.id,
        "feedType": "Hay",
        "unit": "bale",
        "currentQuantity": 20,
        "minimumStockLevel": 5,
        "unitCost": 45,
    }
    payload.update(overrides)
    return client.post(API, json=payload)


def test_inventory_status_thresholds():
    assert calculate_inventory_status(0, 5) == "out-of-stock"
    assert calculate_inventory_status(5, 5) == "low-stock"
    assert calculate_inventory_status(5.5, 5) == "in-stock"


def test_create_item_records_initial_stock(client, login, stable_setup):
    login(stable_setup["owner"])
    response = create_item(client, stable_setup["stable"])

    assert response.status_code == 201
    item = response.json()
    assert item["status"] == "in-stock"
    assert item["currency"] == "SEK"

    transactions = client.get(f"{API}/{item['id']}/transactions").json()
    assert len(transactions) == 1
    assert transactions[0]["type"] == "restock"
    assert transactions[0]["totalCost"] == 900


def test_duplicate_feed_type_conflicts(client, login, stable_setup):
    login(stable_setup["owner"])
    create_item(client, stable_setup["stable"])
    assert create_item(client, stable_setup["stable"]).status_code == 409


def test_grooms_cannot_create_items(client, login, stable_setup):
    login(stable_setup["anna"])
    assert create_item(client, stable_setup["stable"]).status_code == 403


def test_usage_and_restock_drive_alerts(client, login, stable_setup):
    login(stable_setup["owner"])
    item_id = create_item(client, stable_setup["stable"]).json()["id"]
    stable_id = stable_setup["stable"].id

    login(stable_setup["anna"])
    low = client.post(f"{API}/{item_id}/usage", json={"quantity": 16}).json()
    assert low["inventory"]["currentQuantity"] == 4
    assert low["inventory"]["status"] == "low-stock"
    assert low["transaction"]["quantity"] == -16
    assert low["transaction"]["previousQuantity"] == 20

    out = client.post(f"{API}/{item_id}/usage", json={"quantity": 10}).json()
    assert out["inventory"]["currentQuantity"] == 0
    assert out["inventory"]["status"] == "out-of-stock"

    alerts = client.get(API + "/alerts", params={"stableId": stable_id}).json()
    assert len(alerts) == 1
    assert alerts[0]["alertType"] == "low-stock"

    restocked = client.post(f"{API}/{item_id}/restock", json={"quantity": 30, "unitCost": 50}).json()
    assert restocked["inventory"]["status"] == "in-stock"
    assert restocked["transaction"]["totalCost"] == 1500
    assert client.get(API + "/alerts", params={"stableId": stable_id}).json() == []

    history = client.get(API + "/alerts", params={"stableId": stable_id, "includeResolved": True}).json()
    assert [a["isResolved"] for a in history] == [True]

    login(stable_setup["owner"])
    notifications = client.get("/api/v1/notifications").json()["notifications"]
    assert [n["type"] for n in notifications] == ["inventory_alert"]


def test_adjust_requires_manager_and_reason(client, login, stable_setup):
    login(stable_setup["owner"])
    item_id = create_item(client, stable_setup["stable"]).json()["id"]

    login(stable_setup["anna"])
    assert client.post(f"{API}/{item_id}/adjust", json={"newQuantity": 3, "reason": "Count"}).status_code == 403

    login(stable_setup["owner"])
    assert client.post(f"{API}/{item_id}/adjust", json={"newQuantity": 3}).status_code == 400
    adjusted = client.post(f"{API}/{item_id}/adjust", json={"newQuantity": 12, "reason": "Stock count"}).json()
    assert adjusted["transaction"]["type"] == "adjustment"
    assert adjusted["transaction"]["quantity"] == -8
    assert adjusted["transaction"]["reason"] == "Stock count"
    assert adjusted["inventory"]["currentQuantity"] == 12


def test_raising_minimum_level_opens_alert(client, login, stable_setup):
    login(stable_setup["owner"])
    item_id = create_item(client, stable_setup["stable"]).json()["id"]

    updated = client.put(f"{API}/{item_id}", json={"minimumStockLevel": 25}).json()

    assert updated["status"] == "low-stock"
    assert updated["currentQuantity"] == 20
    alerts = client.get(API + "/alerts", params={"stableId": stable_setup["stable"].id}).json()
    assert [a["alertType"] for a in alerts] == ["low-stock"]


def test_acknowledge_and_resolve_alert(client, login, stable_setup):
    login(stable_setup["owner"])
    create_item(client, stable_setup["stable"], feedType="Oats", currentQuantity=0)
    alert = client.get(API + "/alerts", params={"stableId": stable_setup["stable"].id}).json()[0]
    assert alert["alertType"] == "out-of-stock"

    login(stable_setup["anna"])
    acknowledged = client.post(f"{API}/alerts/{alert['id']}/acknowledge").json()
    assert acknowledged["isAcknowledged"] is True
    assert acknowledged["acknowledgedBy"] == stable_setup["anna"].id
    assert client.post(f"{API}/alerts/{alert['id']}/resolve").status_code == 403

    login(stable_setup["owner"])
    resolved = client.post(f"{API}/alerts/{alert['id']}/resolve").json()
    assert resolved["isResolved"] is True
    assert resolved["resolvedAt"] is not None


def test_summary_counts_and_value(client, login, stable_setup):
    login(stable_setup["owner"])
    stable = stable_setup["stable"]
    create_item(client, stable)
    create_item(client, stable, feedType="Oats", currentQuantity=2, unitCost=10)
    create_item(client, stable, feedType="Carrots", currentQuantity=0, unitCost=None)
    create_item(
        client,
        stable,
        feedType="Pellets",
        currentQuantity=10,
        unitCost=None,
        expiryDate=(date.today() + timedelta(days=10)).isoformat(),
    )

    summary = client.get(API + "/summary", params={"stableId": stable.id}).json()

    assert summary["totalItems"] == 4
    assert summary["lowStockCount"] == 1
    assert summary["outOfStockCount"] == 1
    assert summary["expiringSoonCount"] == 1
    assert summary["totalValue"] == 920
    assert summary["currency"] == "SEK"
    assert len(summary["alerts"]) == 2


def test_delete_item_removes_history(client, login, stable_setup, db):
    login(stable_setup["owner"])
    item_id = create_item(client, stable_setup["stable"], currentQuantity=0).json()["id"]

    assert client.delete(f"{API}/{item_id}").status_code == 204
    assert client.get(f"{API}/{item_id}").status_code == 404
    assert db.query(InventoryAlert).count() == 0


def test_scan_expiring_items_raises_one_alert(client, login, stable_setup, db):
    login(stable_setup["owner"])
    create_item(
        client,
        stable_setup["stable"],
        feedType="Silage",
        expiryDate=(date.today() + timedelta(days=5)).isoformat(),
    )
    create_item(
        client,
        stable_setup["stable"],
        feedType="Straw",
        expiryDate=(date.today() + timedelta(days=90)).isoformat(),
    )

    assert scan_expiring_items(db) == 1
    assert scan_expiring_items(db) == 0
    alerts = client.get(API + "/alerts", params={"stableId": stable_setup["stable"].id}).json()
    assert [(a["alertType"], a["feedType"]) for a in alerts] == [("expiring", "Silage")]


def test_inventory_module_not_on_standard_tier(client, login, make_user, make_org, make_stable):
    owner = make_user("standard@example.com")
    stable = make_stable(make_org(owner, tier="standard"))
    login(owner)
    assert create_item(client, stable).status_code == 403
