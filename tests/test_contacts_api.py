CONTACTS = "/api/v1/contacts"


def add_contact(client, organization, **fields):
    payload = {"organizationId": organization.id, "firstName": "Sara", "lastName": "Smed", "email": "sara@smed.se"}
    payload.update(fields)
    return client.post(CONTACTS, json=payload)


def test_create_personal_and_business_contacts(client, login, stable_setup):
    organization = stable_setup["organization"]
    login(stable_setup["anna"])

    personal = add_contact(client, organization).json()
    business = add_contact(
        client, organization, contactType="Business", firstName=None, lastName=None, businessName="Vet Clinic AB"
    ).json()

    assert personal["displayName"] == "Sara Smed"
    assert business["displayName"] == "Vet Clinic AB"


def test_contact_name_rules(client, login, stable_setup):
    organization = stable_setup["organization"]
    login(stable_setup["anna"])
    assert add_contact(client, organization, lastName=None).status_code == 400
    assert add_contact(client, organization, contactType="Business", businessName=None).status_code == 400
    assert add_contact(client, organization, contactType="Supplier").status_code == 400


def test_search_and_type_filter(client, login, stable_setup):
    organization = stable_setup["organization"]
    login(stable_setup["anna"])
    add_contact(client, organization)
    add_contact(client, organization, contactType="Business", businessName="Hay Traders", email="order@hay.se")

    found = client.get(CONTACTS, params={"organizationId": organization.id, "search": "hay"}).json()
    assert [c["businessName"] for c in found] == ["Hay Traders"]
    personal = client.get(CONTACTS, params={"organizationId": organization.id, "contactType": "Personal"}).json()
    assert [c["firstName"] for c in personal] == ["Sara"]


def test_check_duplicate_match_types(client, login, stable_setup):
    organization = stable_setup["organization"]
    login(stable_setup["anna"])
    add_contact(client, organization)
    add_contact(client, organization, contactType="Business", businessName="Hay Traders", email=None)

    def check(**fields):
        return client.post(f"{CONTACTS}/check-duplicate", json={"organizationId": organization.id, **fields}).json()

    assert check(email="SARA@smed.se") == {"isDuplicate": True, "matchType": "email"}
    assert check(firstName="Sara", lastName="Smed") == {"isDuplicate": True, "matchType": "name"}
    assert check(businessName="Hay Traders") == {"isDuplicate": True, "matchType": "businessName"}
    assert check(email="new@example.com", firstName="Nils") == {"isDuplicate": False, "matchType": None}


def test_only_creator_or_admin_deletes(client, login, stable_setup):
    login(stable_setup["anna"])
    contact_id = add_contact(client, stable_setup["organization"]).json()["id"]

    login(stable_setup["bert"])
    assert client.delete(f"{CONTACTS}/{contact_id}").status_code == 403

    login(stable_setup["owner"])
    assert client.delete(f"{CONTACTS}/{contact_id}").status_code == 204
    assert client.get(f"{CONTACTS}/{contact_id}").status_code == 404


def test_free_tier_contact_limit(client, login, make_user, make_org):
    owner = make_user("free@example.com")
    organization = make_org(owner, tier="free")
    login(owner)
    for n in range(5):
        assert add_contact(client, organization, email=f"c{n}@example.com").status_code == 201
    assert add_contact(client, organization, email="c5@example.com").status_code == 403
