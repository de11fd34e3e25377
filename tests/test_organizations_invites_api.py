from datetime import datetime, timedelta

from jose import jwt

from equiduty.config import INVITE_TOKEN_ALGORITHM, SECRET_KEY

ORGS = "/api/v1/organizations"


def test_create_organization_makes_owner_administrator(client, login, make_user):
    owner = make_user("founder@example.com", "Frida Founder")
    login(owner)

    response = client.post(ORGS, json={"name": "Hill Farm", "contactEmail": "Info@HillFarm.se"})

    assert response.status_code == 201
    organization = response.json()
    assert organization["ownerId"] == owner.id
    assert organization["subscriptionTier"] == "free"

    members = client.get(f"{ORGS}/{organization['id']}/members").json()
    assert len(members) == 1
    assert members[0]["isOwner"] is True
    assert members[0]["roles"] == ["administrator"]

    assert [o["id"] for o in client.get(ORGS).json()] == [organization["id"]]


def test_invalid_contact_email_rejected(client, login, make_user):
    login(make_user("founder@example.com"))
    assert client.post(ORGS, json={"name": "Hill Farm", "contactEmail": "not-an-email"}).status_code == 400


def test_outsider_cannot_read_organization(client, login, make_user, stable_setup):
    login(make_user("stranger@example.com"))
    assert client.get(f"{ORGS}/{stable_setup['organization'].id}").status_code == 403


def test_only_admins_update_organization(client, login, stable_setup):
    org_id = stable_setup["organization"].id
    login(stable_setup["anna"])
    assert client.patch(f"{ORGS}/{org_id}", json={"name": "Renamed"}).status_code == 403

    login(stable_setup["owner"])
    assert client.patch(f"{ORGS}/{org_id}", json={"name": "Renamed"}).json()["name"] == "Renamed"


def test_stats_count_active_members(client, login, stable_setup):
    login(stable_setup["anna"])
    stats = client.get(f"{ORGS}/{stable_setup['organization'].id}/stats").json()
    assert stats == {"stableCount": 1, "memberCount": 4, "horseCount": 0, "contactCount": 0}


def test_promoting_primary_role_grants_it(client, login, stable_setup):
    org_id = stable_setup["organization"].id
    anna = stable_setup["anna"]
    login(stable_setup["owner"])

    member = client.patch(f"{ORGS}/{org_id}/members/{anna.id}", json={"primaryRole": "rider"}).json()

    assert member["primaryRole"] == "rider"
    assert member["roles"] == ["groom", "rider"]


def test_owner_cannot_be_removed(client, login, stable_setup):
    login(stable_setup["owner"])
    owner_id = stable_setup["owner"].id
    assert client.delete(f"{ORGS}/{stable_setup['organization'].id}/members/{owner_id}").status_code == 400


def test_member_can_leave_but_not_remove_others(client, login, stable_setup):
    org_id = stable_setup["organization"].id
    login(stable_setup["anna"])
    assert client.delete(f"{ORGS}/{org_id}/members/{stable_setup['bert'].id}").status_code == 403
    assert client.delete(f"{ORGS}/{org_id}/members/{stable_setup['anna'].id}").status_code == 204
    assert client.get(f"{ORGS}/{org_id}").status_code == 403


def test_only_owner_deletes_organization(client, login, stable_setup):
    org_id = stable_setup["organization"].id
    login(stable_setup["planner"])
    assert client.delete(f"{ORGS}/{org_id}").status_code == 403

    login(stable_setup["owner"])
    assert client.delete(f"{ORGS}/{org_id}").status_code == 204
    assert client.get(ORGS).json() == []


def test_invite_flow_for_existing_user(client, login, make_user, stable_setup):
    org_id = stable_setup["organization"].id
    vera = make_user("vera@example.com", "Vera Vet")
    login(stable_setup["owner"])

    created = client.post(f"{ORGS}/{org_id}/invites", json={"email": "Vera@Example.com", "roles": ["veterinarian"]})
    assert created.status_code == 201
    invite = created.json()
    assert invite["email"] == "vera@example.com"
    assert invite["status"] == "pending"
    assert invite["inviteUrl"].endswith(invite["token"])

    duplicate = client.post(f"{ORGS}/{org_id}/invites", json={"email": "vera@example.com", "roles": ["farrier"]})
    assert duplicate.status_code == 409

    login(vera)
    assert [n["type"] for n in client.get("/api/v1/notifications").json()["notifications"]] == [
        "organization_invite"
    ]
    assert [i["id"] for i in client.get("/api/v1/invites/pending").json()] == [invite["id"]]
    assert client.get(f"/api/v1/invites/{invite['token']}").json()["organizationName"] == "Sunny Meadows"

    member = client.post(f"/api/v1/invites/{invite['token']}/accept").json()
    assert member["userId"] == vera.id
    assert member["roles"] == ["veterinarian"]
    assert client.post(f"/api/v1/invites/{invite['token']}/accept").status_code == 400
    assert client.get(f"{ORGS}/{org_id}").status_code == 200


def test_invite_for_someone_else_is_forbidden(client, login, make_user, stable_setup):
    login(stable_setup["owner"])
    invite = client.post(
        f"{ORGS}/{stable_setup['organization'].id}/invites", json={"email": "vera@example.com", "roles": ["groom"]}
    ).json()

    login(stable_setup["anna"])
    assert client.post(f"/api/v1/invites/{invite['token']}/accept").status_code == 403


def test_decline_and_revoke(client, login, make_user, stable_setup):
    org_id = stable_setup["organization"].id
    carl = make_user("carl@example.com")
    login(stable_setup["owner"])
    declined_invite = client.post(f"{ORGS}/{org_id}/invites", json={"email": "carl@example.com", "roles": ["rider"]}).json()
    revoked_invite = client.post(f"{ORGS}/{org_id}/invites", json={"email": "dora@example.com", "roles": ["rider"]}).json()

    login(carl)
    assert client.post(f"/api/v1/invites/{declined_invite['token']}/decline").json()["status"] == "declined"

    login(stable_setup["owner"])
    assert client.delete(f"{ORGS}/{org_id}/invites/{revoked_invite['id']}").status_code == 204
    assert client.delete(f"{ORGS}/{org_id}/invites/{declined_invite['id']}").status_code == 400

    statuses = {i["email"]: i["status"] for i in client.get(f"{ORGS}/{org_id}/invites").json()}
    assert statuses == {"carl@example.com": "declined", "dora@example.com": "revoked"}


def test_inviting_active_member_conflicts(client, login, stable_setup):
    login(stable_setup["owner"])
    response = client.post(
        f"{ORGS}/{stable_setup['organization'].id}/invites", json={"email": "anna@example.com", "roles": ["rider"]}
    )
    assert response.status_code == 409


def test_groom_cannot_invite(client, login, stable_setup):
    login(stable_setup["anna"])
    response = client.post(
        f"{ORGS}/{stable_setup['organization'].id}/invites", json={"email": "new@example.com", "roles": ["groom"]}
    )
    assert response.status_code == 403


def test_free_tier_member_limit(client, login, make_user, make_org, add_member):
    owner = make_user("free@example.com")
    organization = make_org(owner, tier="free")
    add_member(organization, make_user("one@example.com"))
    add_member(organization, make_user("two@example.com"))
    login(owner)

    response = client.post(f"{ORGS}/{organization.id}/invites", json={"email": "three@example.com", "roles": ["groom"]})

    assert response.status_code == 403


def test_tampered_token_is_not_found(client, login, stable_setup):
    login(stable_setup["anna"])
    assert client.get("/api/v1/invites/not-a-token").status_code == 404

    forged = jwt.encode({"sub": "1", "type": "organization_invite"}, "wrong-key", algorithm=INVITE_TOKEN_ALGORITHM)
    assert client.get(f"/api/v1/invites/{forged}").status_code == 404


def test_expired_token_is_gone(client, login, stable_setup):
    login(stable_setup["anna"])
    expired = jwt.encode(
        {"sub": "1", "type": "organization_invite", "exp": datetime.utcnow() - timedelta(days=1)},
        SECRET_KEY,
        algorithm=INVITE_TOKEN_ALGORITHM,
    )
    assert client.get(f"/api/v1/invites/{expired}").status_code == 410
