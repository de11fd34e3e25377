from sqlalchemy.orm import configure_mappers

from equiduty.models import OrganizationMember, User


def test_all_mappers_configure():
    configure_mappers()


def test_user_memberships_join_on_member_user(db, make_user, make_org):
    owner = make_user("owner@example.com")
    inviter = make_user("inviter@example.com")
    organization = make_org(owner)
    db.add(
        OrganizationMember(
            organization_id=organization.id,
            user_id=make_user("groom@example.com").id,
            roles=["groom"],
            primary_role="groom",
            status="active",
            invited_by=inviter.id,
        )
    )
    db.commit()

    assert db.get(User, inviter.id).memberships == []
    assert [m.organization_id for m in db.get(User, owner.id).memberships] == [organization.id]
