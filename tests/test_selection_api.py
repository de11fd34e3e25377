from datetime import date, timedelta

API = "/api/v1/selection-processes"
ROUTINES = "/api/v1/routines"


def create_process(client, stable, member_ids, algorithm="manual", **extra):
    payload = {
        "stableId": stable.id,
        "name": "March weekends",
        "algorithm": algorithm,
        "selectionStartDate": date.today().isoformat(),
        "selectionEndDate": (date.today() + timedelta(days=14)).isoformat(),
        "memberIds": member_ids,
    }
    payload.update(extra)
    return client.post(API, json=payload)


def schedule_routine(client, setup, scheduled_date=None, points=2):
    template = client.post(
        f"{ROUTINES}/templates",
        json={
            "organizationId": setup["organization"].id,
            "name": f"Evening check {points}",
            "defaultStartTime": "18:00",
            "pointsValue": points,
        },
    ).json()
    return client.post(
        f"{ROUTINES}/instances",
        json={
            "templateId": template["id"],
            "stableId": setup["stable"].id,
            "scheduledDate": (scheduled_date or date.today()).isoformat(),
        },
    ).json()


def test_manual_process_keeps_given_order(client, login, stable_setup):
    anna, bert = stable_setup["anna"], stable_setup["bert"]
    login(stable_setup["planner"])

    response = create_process(client, stable_setup["stable"], [bert.id, anna.id])

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "draft"
    assert [turn["userId"] for turn in body["turns"]] == [bert.id, anna.id]
    assert body["currentTurnUserId"] is None


def test_groom_cannot_create_process(client, login, stable_setup):
    login(stable_setup["anna"])
    assert create_process(client, stable_setup["stable"], [stable_setup["anna"].id]).status_code == 403


def test_inverted_window_is_invalid_input(client, login, stable_setup):
    login(stable_setup["planner"])
    response = create_process(
        client,
        stable_setup["stable"],
        [stable_setup["anna"].id],
        selectionStartDate=date.today().isoformat(),
        selectionEndDate=(date.today() - timedelta(days=1)).isoformat(),
    )
    assert response.status_code == 400


def test_outsiders_cannot_take_part(client, login, stable_setup, make_user):
    stranger = make_user("stranger@example.com")
    login(stable_setup["planner"])
    assert create_process(client, stable_setup["stable"], [stranger.id]).status_code == 400


def test_full_selection_round(client, login, stable_setup):
    anna, bert = stable_setup["anna"], stable_setup["bert"]
    login(stable_setup["planner"])
    routine = schedule_routine(client, stable_setup)
    process_id = create_process(client, stable_setup["stable"], [bert.id, anna.id]).json()["id"]

    started = client.post(f"{API}/{process_id}/start").json()
    assert started["status"] == "active"
    assert started["currentTurnUserId"] == bert.id

    login(anna)
    not_yet = client.post(f"{API}/{process_id}/select", json={"routineInstanceId": routine["id"]})
    assert not_yet.status_code == 403

    login(bert)
    assert [n["type"] for n in client.get("/api/v1/notifications").json()["notifications"]] == [
        "selection_turn_started"
    ]
    picked = client.post(f"{API}/{process_id}/select", json={"routineInstanceId": routine["id"]})
    assert picked.status_code == 200
    assert picked.json()["assignedTo"] == bert.id

    again = client.post(f"{API}/{process_id}/select", json={"routineInstanceId": routine["id"]})
    assert again.status_code == 409

    after_bert = client.post(f"{API}/{process_id}/complete-turn").json()
    assert after_bert["currentTurnUserId"] == anna.id
    assert after_bert["turns"][0]["selectionsCount"] == 1
    assert after_bert["turns"][0]["status"] == "completed"

    login(anna)
    finished = client.post(f"{API}/{process_id}/complete-turn").json()
    assert finished["status"] == "completed"
    assert finished["currentTurnIndex"] == -1
    assert finished["currentTurnUserId"] is None
    notification_types = [n["type"] for n in client.get("/api/v1/notifications").json()["notifications"]]
    assert "selection_process_completed" in notification_types


def test_routine_outside_window_cannot_be_selected(client, login, stable_setup):
    anna = stable_setup["anna"]
    login(stable_setup["planner"])
    routine = schedule_routine(client, stable_setup, scheduled_date=date.today() + timedelta(days=30))
    process_id = create_process(client, stable_setup["stable"], [anna.id]).json()["id"]
    client.post(f"{API}/{process_id}/start")

    login(anna)
    response = client.post(f"{API}/{process_id}/select", json={"routineInstanceId": routine["id"]})
    assert response.status_code == 400


def test_fair_rotation_moves_first_picker_to_the_end(client, login, stable_setup):
    anna, bert = stable_setup["anna"], stable_setup["bert"]
    login(stable_setup["planner"])
    first_id = create_process(client, stable_setup["stable"], [bert.id, anna.id]).json()["id"]
    client.post(f"{API}/{first_id}/start")
    login(bert)
    client.post(f"{API}/{first_id}/complete-turn")
    login(anna)
    client.post(f"{API}/{first_id}/complete-turn")

    login(stable_setup["planner"])
    rotated = create_process(client, stable_setup["stable"], [bert.id, anna.id], algorithm="fair_rotation").json()
    assert [turn["userId"] for turn in rotated["turns"]] == [anna.id, bert.id]


def test_points_balance_lets_least_loaded_pick_first(client, login, stable_setup):
    anna, bert = stable_setup["anna"], stable_setup["bert"]
    login(stable_setup["planner"])
    routine = schedule_routine(client, stable_setup, points=5)

    login(anna)
    client.post(f"{ROUTINES}/instances/{routine['id']}/start")
    client.post(f"{ROUTINES}/instances/{routine['id']}/complete")

    login(stable_setup["planner"])
    process = create_process(client, stable_setup["stable"], [anna.id, bert.id], algorithm="points_balance").json()
    assert [turn["userId"] for turn in process["turns"]] == [bert.id, anna.id]


def test_only_draft_processes_can_be_deleted(client, login, stable_setup):
    login(stable_setup["planner"])
    draft_id = create_process(client, stable_setup["stable"], [stable_setup["anna"].id]).json()["id"]
    active_id = create_process(client, stable_setup["stable"], [stable_setup["anna"].id]).json()["id"]
    client.post(f"{API}/{active_id}/start")

    assert client.delete(f"{API}/{draft_id}").status_code == 204
    assert client.delete(f"{API}/{active_id}").status_code == 400

    cancelled = client.post(f"{API}/{active_id}/cancel").json()
    assert cancelled["status"] == "cancelled"
    assert cancelled["currentTurnUserId"] is None

    listed = client.get(API, params={"stableId": stable_setup["stable"].id}).json()
    assert [p["id"] for p in listed] == [active_id]


def test_selection_module_not_on_free_tier(client, login, make_user, make_org, make_stable):
    owner = make_user("free@example.com")
    stable = make_stable(make_org(owner, tier="free"))
    login(owner)
    assert create_process(client, stable, [owner.id]).status_code == 403


def test_quota_based_reverses_last_order_and_shares_open_points(client, login, stable_setup):
    anna, bert = stable_setup["anna"], stable_setup["bert"]
    login(stable_setup["planner"])
    first_id = create_process(client, stable_setup["stable"], [bert.id, anna.id]).json()["id"]
    client.post(f"{API}/{first_id}/start")
    login(bert)
    client.post(f"{API}/{first_id}/complete-turn")
    login(anna)
    client.post(f"{API}/{first_id}/complete-turn")

    login(stable_setup["planner"])
    for points in (2, 3, 4):
        schedule_routine(client, stable_setup, points=points)
    schedule_routine(client, stable_setup, scheduled_date=date.today() + timedelta(days=30), points=5)

    response = create_process(client, stable_setup["stable"], [bert.id, anna.id], algorithm="quota_based")

    assert response.status_code == 201
    body = response.json()
    assert body["algorithm"] == "quota_based"
    assert [turn["userId"] for turn in body["turns"]] == [anna.id, bert.id]
    assert body["quotaPerMember"] == 4.5


def test_quota_is_only_set_for_quota_based_processes(client, login, stable_setup):
    login(stable_setup["planner"])
    body = create_process(client, stable_setup["stable"], [stable_setup["anna"].id]).json()
    assert body["quotaPerMember"] is None
