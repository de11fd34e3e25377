from equiduty.domain.notifications.service import notify

API = "/api/v1/notifications"


def seed(db, user, count=3, notification_type="routine_assigned", stable_id=None):
    for n in range(count):
        notify(db, user.id, notification_type, f"Routine {n}", stable_id=stable_id)
    db.commit()


def test_list_newest_first_and_unread_count(client, login, db, make_user):
    user = make_user("groom@example.com")
    seed(db, user)
    login(user)

    titles = [n["title"] for n in client.get(API).json()["notifications"]]

    assert titles == ["Routine 2", "Routine 1", "Routine 0"]
    assert client.get(f"{API}/unread-count").json() == {"count": 3}
    assert len(client.get(API, params={"limit": 2}).json()["notifications"]) == 2
    assert client.get(API, params={"limit": 0}).status_code == 400


def test_mark_read_and_clear(client, login, db, make_user):
    user = make_user("groom@example.com")
    seed(db, user)
    login(user)
    first_id = client.get(API).json()["notifications"][0]["id"]

    read = client.patch(f"{API}/{first_id}/read").json()
    assert read["read"] is True
    assert read["readAt"] is not None
    assert len(client.get(API, params={"unreadOnly": True}).json()["notifications"]) == 2

    assert client.patch(f"{API}/read-all").json() == {"success": True, "updated": 2}
    assert client.delete(f"{API}/clear-read").json() == {"success": True, "deleted": 3}
    assert client.get(API).json() == {"notifications": []}


def test_notifications_are_private(client, login, db, make_user):
    owner = make_user("groom@example.com")
    other = make_user("other@example.com")
    seed(db, owner, count=1)
    login(owner)
    notification_id = client.get(API).json()["notifications"][0]["id"]

    login(other)
    assert client.patch(f"{API}/{notification_id}/read").status_code == 403
    assert client.delete(f"{API}/{notification_id}").status_code == 403
    assert client.delete(f"{API}/424242").status_code == 404


def test_muted_types_are_not_stored(client, login, db, make_user):
    user = make_user("groom@example.com")
    login(user)

    prefs = client.put(f"{API}/preferences", json={"routineUpdates": False}).json()
    assert prefs["routineUpdates"] is False
    assert prefs["inventoryAlerts"] is True

    db.expire_all()
    seed(db, user, count=2)
    seed(db, user, count=1, notification_type="inventory_alert")

    types = [n["type"] for n in client.get(API).json()["notifications"]]
    assert types == ["inventory_alert"]
    assert client.get(f"{API}/preferences").json()["routineUpdates"] is False


def test_filter_by_stable(client, login, db, stable_setup):
    anna = stable_setup["anna"]
    seed(db, anna, count=1, stable_id=stable_setup["stable"].id)
    seed(db, anna, count=2)
    login(anna)

    scoped = client.get(API, params={"stableId": stable_setup["stable"].id}).json()["notifications"]
    assert len(scoped) == 1


def test_notify_unknown_recipient_is_skipped(db):
    assert notify(db, 999, "routine_assigned", "Nobody home") is None
