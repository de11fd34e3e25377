"""Contact repository - Database operations for contacts"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Contact


class ContactRepository:
    """Repository for contact database operations"""

    @staticmethod
    def list_contacts(
        db: Session,
        organization_id: int,
        search: Optional[str] = None,
        contact_type: Optional[str] = None,
    ) -> list[Contact]:
        query = db.query(Contact).filter(Contact.organization_id == organization_id)

        if contact_type:
            query = query.filter(Contact.contact_type == contact_type)

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Contact.first_name.ilike(pattern),
                    Contact.last_name.ilike(pattern),
                    Contact.business_name.ilike(pattern),
                    Contact.email.ilike(pattern),
                )
            )

        return query.order_by(Contact.created_at.desc(), Contact.id.desc()).all()

    @staticmethod
    def get_contact(db: Session, contact_id: int) -> Optional[Contact]:
        return db.query(Contact).filter(Contact.id == contact_id).first()

    @staticmethod
    def create_contact(db: Session, **contact_data) -> Contact:
        contact = Contact(**contact_data)
        db.add(contact)
        db.commit()
        db.refresh(contact)
        return contact

    @staticmethod
    def update_contact(db: Session, contact: Contact, **updates) -> Contact:
        for key, value in updates.items():
            if value is not None and hasattr(contact, key):
                setattr(contact, key, value)
        db.commit()
        db.refresh(contact)
        return contact

    @staticmethod
    def delete_contact(db: Session, contact: Contact) -> None:
        db.delete(contact)
        db.commit()

    @staticmethod
    def exists(db: Session, organization_id: int, **filters) -> bool:
        query = db.query(Contact.id).filter(Contact.organization_id == organization_id)
        for column, value in filters.items():
            query = query.filter(getattr(Contact, column) == value)
        return query.first() is not None
