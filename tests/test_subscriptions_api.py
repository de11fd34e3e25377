TIERS = "/api/v1/tiers"


def test_tiers_listed_in_order(client, login, make_user):
    login(make_user("user@example.com"))
    tiers = client.get(TIERS).json()

    assert [t["tier"] for t in tiers] == ["free", "standard", "pro", "enterprise"]
    free = tiers[0]
    assert free["limits"]["members"] == 3
    assert free["modules"]["inventory"] is False
    assert tiers[3]["limits"]["horses"] == -1


def test_only_system_admins_edit_tiers(client, login, make_user):
    login(make_user("user@example.com"))
    assert client.put(f"{TIERS}/free", json={"price": 10}).status_code == 403


def test_tier_override_and_reset(client, login, make_user, make_org, add_member):
    admin = make_user("root@example.com", system_admin=True)
    owner = make_user("free@example.com")
    organization = make_org(owner, tier="free")
    add_member(organization, make_user("one@example.com"))
    add_member(organization, make_user("two@example.com"))
    login(admin)

    updated = client.put(f"{TIERS}/free", json={"limits": {"members": 4}, "modules": {"inventory": True}}).json()
    assert updated["limits"]["members"] == 4
    assert updated["limits"]["horses"] == 5
    assert updated["modules"]["inventory"] is True

    login(owner)
    invite = client.post(
        f"/api/v1/organizations/{organization.id}/invites", json={"email": "three@example.com", "roles": ["groom"]}
    )
    assert invite.status_code == 201

    login(admin)
    reset = client.post(f"{TIERS}/free/reset").json()
    assert reset["limits"]["members"] == 3
    assert reset["modules"]["inventory"] is False


def test_tier_validation(client, login, make_user):
    login(make_user("root@example.com", system_admin=True))
    assert client.put(f"{TIERS}/platinum", json={"price": 10}).status_code == 400
    assert client.put(f"{TIERS}/free", json={"limits": {"members": -5}}).status_code == 400
    assert client.put(f"{TIERS}/free", json={"price": -1}).status_code == 400


def test_organization_subscription_usage(client, login, stable_setup):
    login(stable_setup["anna"])
    subscription = client.get(f"/api/v1/organizations/{stable_setup['organization'].id}/subscription").json()

    assert subscription["tier"] == "pro"
    assert subscription["tierName"] == "Pro"
    assert subscription["usage"]["members"] == 4
    assert subscription["usage"]["stables"] == 1
    assert subscription["modules"]["leaveManagement"] is True


def test_system_admin_changes_organization_tier(client, login, make_user, stable_setup):
    org_id = stable_setup["organization"].id
    url = f"/api/v1/organizations/{org_id}/subscription"

    login(stable_setup["owner"])
    assert client.put(url, json={"tier": "free"}).status_code == 403

    login(make_user("root@example.com", system_admin=True))
    assert client.put(url, json={"tier": "gold"}).status_code == 400
    downgraded = client.put(url, json={"tier": "standard"}).json()
    assert downgraded["tier"] == "standard"
    assert downgraded["modules"]["inventory"] is False

    login(stable_setup["owner"])
    response = client.get("/api/v1/inventory", params={"stableId": stable_setup["stable"].id})
    assert response.status_code == 403
