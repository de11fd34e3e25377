"""Contact router - FastAPI endpoints for contacts"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Contact, User
from .schemas import (
    ContactCreate,
    ContactResponse,
    ContactUpdate,
    DuplicateCheckRequest,
    DuplicateCheckResponse,
)
from .service import ContactService, contact_display_name

router = APIRouter(prefix="/contacts", tags=["Contacts"])


def get_contact_service(db: Session = Depends(get_db)) -> ContactService:
    """Dependency injection for ContactService"""
    return ContactService(db)


def _to_response(c: Contact) -> ContactResponse:
    return ContactResponse(
        id=c.id,
        organizationId=c.organization_id,
        contactType=c.contact_type,
        firstName=c.first_name,
        lastName=c.last_name,
        businessName=c.business_name,
        displayName=contact_display_name(c),
        email=c.email,
        phone=c.phone,
        address=c.address,
        notes=c.notes,
        createdAt=c.created_at,
        updatedAt=c.updated_at,
    )


@router.get("", response_model=list[ContactResponse])
async def list_contacts(
    organizationId: int = Query(...),
    search: Optional[str] = Query(None),
    contactType: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: ContactService = Depends(get_contact_service),
):
    contacts = service.list_contacts(organizationId, current_user, search, contactType)
    return [_to_response(c) for c in contacts]


@router.post("", response_model=ContactResponse, status_code=201)
async def create_contact(
    data: ContactCreate,
    current_user: User = Depends(get_current_user),
    service: ContactService = Depends(get_contact_service),
):
    return _to_response(service.create_contact(data, current_user))


@router.post("/check-duplicate", response_model=DuplicateCheckResponse)
async def check_duplicate(
    data: DuplicateCheckRequest,
    current_user: User = Depends(get_current_user),
    service: ContactService = Depends(get_contact_service),
):
    return service.check_duplicate(data, current_user)


@router.get("/{contact_id}", response_model=ContactResponse)
async def get_contact(
    contact_id: int,
    current_user: User = Depends(get_current_user),
    service: ContactService = Depends(get_contact_service),
):
    return _to_response(service.get_contact(contact_id, current_user))


@router.patch("/{contact_id}", response_model=ContactResponse)
async def update_contact(
    contact_id: int,
    data: ContactUpdate,
    current_user: User = Depends(get_current_user),
    service: ContactService = Depends(get_contact_service),
):
    return _to_response(service.update_contact(contact_id, data, current_user))


@router.delete("/{contact_id}", status_code=204)
async def delete_contact(
    contact_id: int,
    current_user: User = Depends(get_current_user),
    service: ContactService = Depends(get_contact_service),
):
    service.delete_contact(contact_id, current_user)
    return Response(status_code=204)
