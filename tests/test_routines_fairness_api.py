from datetime import date, datetime, time, timedelta

from equiduty.models import OrganizationMember, RoutineInstance

ROUTINES = "/api/v1/routines"
FAIRNESS = "/api/v1/fairness"


def create_template(client, organization, **extra):
    payload = {
        "organizationId": organization.id,
        "name": "Morning feed",
        "type": "morning",
        "defaultStartTime": "06:30",
        "pointsValue": 3,
        "steps": [{"name": "Hay"}, {"name": "Water"}],
    }
    payload.update(extra)
    return client.post(f"{ROUTINES}/templates", json=payload)


def schedule_instance(client, template_id, stable, assigned_to=None):
    payload = {"templateId": template_id, "stableId": stable.id, "scheduledDate": date.today().isoformat()}
    if assigned_to is not None:
        payload["assignedTo"] = assigned_to
    response = client.post(f"{ROUTINES}/instances", json=payload)
    assert response.status_code == 201
    return response.json()


def complete_routine(client, login, stable_setup, worker):
    login(stable_setup["planner"])
    template_id = create_template(client, stable_setup["organization"]).json()["id"]
    instance = schedule_instance(client, template_id, stable_setup["stable"], assigned_to=worker.id)

    login(worker)
    client.post(f"{ROUTINES}/instances/{instance['id']}/start")
    return client.post(f"{ROUTINES}/instances/{instance['id']}/complete", json={"notes": "All fed"})


def test_planner_creates_template(client, login, stable_setup):
    login(stable_setup["planner"])
    response = create_template(client, stable_setup["organization"])

    assert response.status_code == 201
    body = response.json()
    assert body["defaultStartTime"] == "06:30"
    assert [step["name"] for step in body["steps"]] == ["Hay", "Water"]
    assert body["isActive"] is True


def test_groom_cannot_create_template(client, login, stable_setup):
    login(stable_setup["anna"])
    assert create_template(client, stable_setup["organization"]).status_code == 403


def test_invalid_start_time_is_invalid_input(client, login, stable_setup):
    login(stable_setup["planner"])
    response = create_template(client, stable_setup["organization"], defaultStartTime="25:00")
    assert response.status_code == 400


def test_template_limit_on_free_tier(client, login, make_user, make_org):
    owner = make_user("small@example.com")
    organization = make_org(owner, tier="free")
    login(owner)

    assert create_template(client, organization, name="One").status_code == 201
    assert create_template(client, organization, name="Two").status_code == 201
    assert create_template(client, organization, name="Three").status_code == 403


def test_deleting_template_deactivates_it(client, login, stable_setup):
    org = stable_setup["organization"]
    login(stable_setup["planner"])
    template_id = create_template(client, org).json()["id"]

    assert client.delete(f"{ROUTINES}/templates/{template_id}").status_code == 204
    assert client.get(f"{ROUTINES}/templates", params={"organizationId": org.id}).json() == []

    listed = client.get(f"{ROUTINES}/templates", params={"organizationId": org.id, "includeInactive": True}).json()
    assert [t["isActive"] for t in listed] == [False]


def test_instance_copies_template_and_notifies_assignee(client, login, stable_setup):
    anna = stable_setup["anna"]
    login(stable_setup["planner"])
    template_id = create_template(client, stable_setup["organization"]).json()["id"]

    instance = schedule_instance(client, template_id, stable_setup["stable"], assigned_to=anna.id)

    assert instance["templateName"] == "Morning feed"
    assert instance["scheduledStartTime"] == "06:30"
    assert instance["pointsValue"] == 3
    assert instance["stepsTotal"] == 2
    assert instance["assignedToName"] == "Anna Groom"

    login(anna)
    notifications = client.get("/api/v1/notifications").json()["notifications"]
    assert [n["type"] for n in notifications] == ["routine_assigned"]


def test_routine_lifecycle_awards_points(client, login, stable_setup):
    anna, bert = stable_setup["anna"], stable_setup["bert"]
    login(stable_setup["planner"])
    template_id = create_template(client, stable_setup["organization"]).json()["id"]
    instance = schedule_instance(client, template_id, stable_setup["stable"], assigned_to=anna.id)
    instance_url = f"{ROUTINES}/instances/{instance['id']}"

    login(bert)
    assert client.post(f"{instance_url}/start").status_code == 403

    login(anna)
    assert client.post(f"{instance_url}/complete").status_code == 400
    assert client.post(f"{instance_url}/start").json()["status"] == "started"

    progress = client.patch(f"{instance_url}/progress", json={"stepsCompleted": 5})
    assert progress.json()["status"] == "in_progress"
    assert progress.json()["stepsCompleted"] == 2

    completed = client.post(f"{instance_url}/complete", json={"notes": "All fed"}).json()
    assert completed["status"] == "completed"
    assert completed["pointsAwarded"] == 3
    assert completed["completedByName"] == "Anna Groom"
    assert completed["notes"] == "All fed"


def test_member_can_claim_unassigned_routine_once(client, login, stable_setup):
    anna, bert = stable_setup["anna"], stable_setup["bert"]
    login(stable_setup["planner"])
    template_id = create_template(client, stable_setup["organization"]).json()["id"]
    instance = schedule_instance(client, template_id, stable_setup["stable"])

    login(bert)
    claimed = client.post(f"{ROUTINES}/instances/{instance['id']}/assign", json={"userId": bert.id})
    assert claimed.status_code == 200
    assert claimed.json()["assignedTo"] == bert.id

    login(anna)
    response = client.post(f"{ROUTINES}/instances/{instance['id']}/assign", json={"userId": anna.id})
    assert response.status_code == 403


def test_cancelled_routine_cannot_start(client, login, stable_setup):
    login(stable_setup["planner"])
    template_id = create_template(client, stable_setup["organization"]).json()["id"]
    instance = schedule_instance(client, template_id, stable_setup["stable"])

    cancelled = client.post(f"{ROUTINES}/instances/{instance['id']}/cancel", json={"reason": "Show day"})
    assert cancelled.json()["status"] == "cancelled"
    assert cancelled.json()["cancellationReason"] == "Show day"
    assert client.post(f"{ROUTINES}/instances/{instance['id']}/start").status_code == 400


def test_distribution_reflects_completed_routines(client, login, stable_setup):
    anna, stable = stable_setup["anna"], stable_setup["stable"]
    assert complete_routine(client, login, stable_setup, anna).status_code == 200

    response = client.get(f"{FAIRNESS}/stables/{stable.id}/distribution", params={"period": "week"})

    assert response.status_code == 200
    body = response.json()
    assert body["stableName"] == "Main Barn"
    assert body["period"] == "week"
    assert body["totalPoints"] == 3
    assert body["activeMemberCount"] == 1
    assert body["fairnessIndex"] == 100
    member = body["members"][0]
    assert member["userId"] == anna.id
    assert member["fairnessScore"] == 50
    assert member["percentageOfTotal"] == 100.0
    assert member["estimatedHoursWorked"] == 1.5


def test_distribution_rejects_unknown_period(client, login, stable_setup):
    login(stable_setup["anna"])
    response = client.get(f"{FAIRNESS}/stables/{stable_setup['stable'].id}/distribution", params={"period": "decade"})
    assert response.status_code == 400


def test_member_history(client, login, stable_setup):
    anna, stable = stable_setup["anna"], stable_setup["stable"]
    complete_routine(client, login, stable_setup, anna)

    response = client.get(f"{FAIRNESS}/stables/{stable.id}/members/{anna.id}/history", params={"days": 30})

    assert response.status_code == 200
    body = response.json()
    assert body["displayName"] == "Anna Groom"
    assert body["totalPoints"] == 3
    assert body["history"][0]["cumulativePoints"] == 3
    assert body["averagePointsPerDay"] == 0.1


def test_member_history_counts_whole_first_day(client, login, stable_setup, db):
    anna, stable = stable_setup["anna"], stable_setup["stable"]
    instance_id = complete_routine(client, login, stable_setup, anna).json()["id"]
    first_day = (datetime.utcnow() - timedelta(days=30)).date()
    instance = db.query(RoutineInstance).filter(RoutineInstance.id == instance_id).one()
    instance.completed_at = datetime.combine(first_day, time(0, 0, 1))
    db.commit()

    body = client.get(f"{FAIRNESS}/stables/{stable.id}/members/{anna.id}/history", params={"days": 30}).json()

    assert body["totalPoints"] == 3
    assert body["history"][0]["date"] == first_day.isoformat()


def test_suggestions_put_busiest_member_last(client, login, stable_setup):
    anna, stable = stable_setup["anna"], stable_setup["stable"]
    complete_routine(client, login, stable_setup, anna)

    response = client.get(f"{FAIRNESS}/stables/{stable.id}/suggestions", params={"limit": 10})

    body = response.json()
    assert body["totalMembers"] == 4
    assert body["suggestions"][-1]["userId"] == anna.id
    assert body["suggestions"][-1]["historicalPoints"] == 3
    assert body["suggestions"][0]["priority"] == 1


def test_outsider_cannot_see_distribution(client, login, stable_setup, make_user):
    login(make_user("stranger@example.com"))
    response = client.get(f"{FAIRNESS}/stables/{stable_setup['stable'].id}/distribution")
    assert response.status_code == 403


def test_suggestions_keep_completers_who_left(client, login, stable_setup, db):
    anna, stable = stable_setup["anna"], stable_setup["stable"]
    complete_routine(client, login, stable_setup, anna)
    membership = db.query(OrganizationMember).filter(OrganizationMember.user_id == anna.id).one()
    membership.status = "inactive"
    db.commit()

    login(stable_setup["planner"])
    body = client.get(f"{FAIRNESS}/stables/{stable.id}/suggestions", params={"limit": 10}).json()

    assert body["totalMembers"] == 4
    assert body["suggestions"][-1]["userId"] == anna.id
    assert body["suggestions"][-1]["displayName"] == "Anna Groom"
    assert body["suggestions"][-1]["historicalPoints"] == 3
