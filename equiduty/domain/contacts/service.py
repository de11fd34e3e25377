"""Contact service - Business logic for contacts"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...authorization import (
    get_organization_or_404,
    is_organization_admin,
    require_organization_access,
)
from ...models import Contact, User
from ...plan_limits import ensure_can_add
from ...shared.validators import validate_email
from .repository import ContactRepository
from .schemas import ContactCreate, ContactUpdate, DuplicateCheckRequest

logger = logging.getLogger(__name__)


def contact_display_name(contact: Contact) -> str:
    if contact.contact_type == "Business" and contact.business_name:
        return contact.business_name
    full_name = " ".join(part for part in (contact.first_name, contact.last_name) if part)
    return full_name or contact.business_name or contact.email or "Unnamed contact"


class ContactService:
    """Service layer for contact business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ContactRepository()

    def list_contacts(
        self, organization_id: int, user: User, search: Optional[str], contact_type: Optional[str]
    ) -> list[Contact]:
        require_organization_access(self.db, user, organization_id)
        return self.repo.list_contacts(self.db, organization_id, search, contact_type)

    def get_contact(self, contact_id: int, user: User) -> Contact:
        contact = self.repo.get_contact(self.db, contact_id)
        if not contact:
            raise HTTPException(status_code=404, detail="Contact not found")
        require_organization_access(self.db, user, contact.organization_id)
        return contact

    def create_contact(self, data: ContactCreate, user: User) -> Contact:
        logger.info(f"📥 Creating contact in organization {data.organizationId}")
        organization = require_organization_access(self.db, user, data.organizationId)
        ensure_can_add(self.db, organization, "contacts")

        return self.repo.create_contact(
            self.db,
            organization_id=organization.id,
            contact_type=data.contactType,
            first_name=data.firstName,
            last_name=data.lastName,
            business_name=data.businessName,
            email=data.email,
            phone=data.phone,
            address=data.address,
            notes=data.notes,
            created_by=user.id,
        )

    def update_contact(self, contact_id: int, data: ContactUpdate, user: User) -> Contact:
        contact = self.get_contact(contact_id, user)
        return self.repo.update_contact(
            self.db,
            contact,
            first_name=data.firstName,
            last_name=data.lastName,
            business_name=data.businessName,
            email=data.email,
            phone=data.phone,
            address=data.address,
            notes=data.notes,
        )

    def delete_contact(self, contact_id: int, user: User) -> None:
        contact = self.get_contact(contact_id, user)
        if contact.created_by != user.id and not is_organization_admin(
            self.db, user, get_organization_or_404(self.db, contact.organization_id)
        ):
            raise HTTPException(status_code=403, detail="You do not have permission to delete this contact")
        self.repo.delete_contact(self.db, contact)
        logger.info(f"🗑️ Contact {contact_id} deleted by user {user.id}")

    def check_duplicate(self, data: DuplicateCheckRequest, user: User) -> dict:
        """Report whether a matching contact exists: by email, then full name, then business name"""
        require_organization_access(self.db, user, data.organizationId)

        if data.email:
            try:
                email = validate_email(data.email)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e)) from e
            if self.repo.exists(self.db, data.organizationId, email=email):
                return {"isDuplicate": True, "matchType": "email"}

        if data.firstName and data.lastName:
            if self.repo.exists(
                self.db, data.organizationId, first_name=data.firstName, last_name=data.lastName
            ):
                return {"isDuplicate": True, "matchType": "name"}

        if data.businessName:
            if self.repo.exists(self.db, data.organizationId, business_name=data.businessName):
                return {"isDuplicate": True, "matchType": "businessName"}

        return {"isDuplicate": False, "matchType": None}
