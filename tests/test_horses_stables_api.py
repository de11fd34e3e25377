from datetime import date, timedelta

HORSES = "/api/v1/horses"
GROUPS = "/api/v1/horse-groups"
STABLES = "/api/v1/stables"


def register_horse(client, organization, name="Blixten", **extra):
    payload = {"organizationId": organization.id, "name": name}
    payload.update(extra)
    return client.post(HORSES, json=payload)


def test_member_registers_own_horse(client, login, stable_setup):
    login(stable_setup["anna"])
    response = register_horse(
        client, stable_setup["organization"], stableId=stable_setup["stable"].id, gender="mare"
    )

    assert response.status_code == 201
    horse = response.json()
    assert horse["ownerId"] == stable_setup["anna"].id
    assert horse["status"] == "active"
    assert horse["stableId"] == stable_setup["stable"].id


def test_horse_validation(client, login, stable_setup):
    login(stable_setup["anna"])
    organization = stable_setup["organization"]
    assert register_horse(client, organization, gender="unicorn").status_code == 400
    future = (date.today() + timedelta(days=3)).isoformat()
    assert register_horse(client, organization, dateOfBirth=future).status_code == 400


def test_horse_in_foreign_stable_rejected(client, login, stable_setup, make_user, make_org, make_stable):
    other_stable = make_stable(make_org(make_user("other@example.com"), name="Elsewhere"))
    login(stable_setup["anna"])
    assert register_horse(client, stable_setup["organization"], stableId=other_stable.id).status_code == 400


def test_only_owner_or_admin_edits_horse(client, login, stable_setup):
    login(stable_setup["anna"])
    horse_id = register_horse(client, stable_setup["organization"]).json()["id"]

    login(stable_setup["bert"])
    assert client.patch(f"{HORSES}/{horse_id}", json={"color": "bay"}).status_code == 403
    assert client.get(f"{HORSES}/{horse_id}").status_code == 200

    login(stable_setup["owner"])
    assert client.patch(f"{HORSES}/{horse_id}", json={"color": "bay"}).json()["color"] == "bay"


def test_list_filters_and_sorting(client, login, stable_setup):
    organization = stable_setup["organization"]
    login(stable_setup["anna"])
    register_horse(client, organization, name="Zorro", stableId=stable_setup["stable"].id)
    register_horse(client, organization, name="Ada")
    retired_id = register_horse(client, organization, name="Mira").json()["id"]
    client.patch(f"{HORSES}/{retired_id}", json={"status": "inactive"})

    names = [h["name"] for h in client.get(HORSES, params={"organizationId": organization.id}).json()]
    assert names == ["Ada", "Mira", "Zorro"]
    in_stable = client.get(HORSES, params={"organizationId": organization.id, "stableId": stable_setup["stable"].id})
    assert [h["name"] for h in in_stable.json()] == ["Zorro"]
    active = client.get(HORSES, params={"organizationId": organization.id, "status": "active"})
    assert [h["name"] for h in active.json()] == ["Ada", "Zorro"]


def test_free_tier_horse_limit_counts_active_horses(client, login, make_user, make_org):
    owner = make_user("free@example.com")
    organization = make_org(owner, tier="free")
    login(owner)
    ids = [register_horse(client, organization, name=f"Horse {n}").json()["id"] for n in range(5)]

    assert register_horse(client, organization, name="One too many").status_code == 403

    client.patch(f"{HORSES}/{ids[0]}", json={"status": "inactive"})
    assert register_horse(client, organization, name="Replacement").status_code == 201
    assert client.patch(f"{HORSES}/{ids[0]}", json={"status": "active"}).status_code == 403


def test_groups_assign_and_delete(client, login, stable_setup):
    organization = stable_setup["organization"]
    login(stable_setup["anna"])
    horse_id = register_horse(client, organization).json()["id"]
    assert client.post(GROUPS, json={"organizationId": organization.id, "name": "Paddock A"}).status_code == 403

    login(stable_setup["owner"])
    group = client.post(
        GROUPS, json={"organizationId": organization.id, "name": "Paddock A", "color": "#22AA44"}
    ).json()

    assigned = client.post(f"{HORSES}/{horse_id}/assign-to-group", json={"horseGroupId": group["id"]}).json()
    assert assigned["horseGroupId"] == group["id"]
    assert assigned["horseGroupName"] == "Paddock A"
    assert client.get(f"{GROUPS}/{group['id']}").json()["horseCount"] == 1

    deleted = client.delete(f"{GROUPS}/{group['id']}").json()
    assert deleted == {"success": True, "unassignedHorses": 1}
    assert client.get(f"{HORSES}/{horse_id}").json()["horseGroupId"] is None


def test_unassign_from_stable(client, login, stable_setup):
    login(stable_setup["anna"])
    horse_id = register_horse(client, stable_setup["organization"], stableId=stable_setup["stable"].id).json()["id"]

    assert client.post(f"{HORSES}/{horse_id}/unassign-from-stable").json()["stableId"] is None


def test_only_admins_create_stables(client, login, stable_setup):
    organization_id = stable_setup["organization"].id
    login(stable_setup["planner"])
    assert client.post(STABLES, json={"organizationId": organization_id, "name": "Annex"}).status_code == 403

    login(stable_setup["owner"])
    created = client.post(STABLES, json={"organizationId": organization_id, "name": "Annex"})
    assert created.status_code == 201
    names = {s["name"] for s in client.get(STABLES, params={"organizationId": organization_id}).json()}
    assert names == {"Main Barn", "Annex"}


def test_free_tier_allows_one_stable(client, login, make_user, make_org, make_stable):
    owner = make_user("free@example.com")
    organization = make_org(owner, tier="free")
    make_stable(organization)
    login(owner)
    assert client.post(STABLES, json={"organizationId": organization.id, "name": "Second"}).status_code == 403


def test_stable_access_for_outsiders(client, login, make_user, stable_setup):
    login(make_user("stranger@example.com"))
    assert client.get(f"{STABLES}/{stable_setup['stable'].id}").status_code == 403
    assert client.get(f"{STABLES}/999").status_code == 404
