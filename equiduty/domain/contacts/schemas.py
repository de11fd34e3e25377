"""Contact domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...shared.validators import validate_email, validate_phone

CONTACT_TYPES = ("Personal", "Business")


class ContactCreate(BaseModel):
    """Schema for creating a new contact"""

    organizationId: int
    contactType: str = "Personal"
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    businessName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("contactType")
    @classmethod
    def check_type(cls, v):
        if v not in CONTACT_TYPES:
            raise ValueError("Contact type must be 'Personal' or 'Business'")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)

    @model_validator(mode="after")
    def check_names(self):
        if self.contactType == "Business" and not self.businessName:
            raise ValueError("Business contacts need a business name")
        if self.contactType == "Personal" and not (self.firstName and self.lastName):
            raise ValueError("Personal contacts need a first and last name")
        return self


class ContactUpdate(BaseModel):
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    businessName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)


class ContactResponse(BaseModel):
    id: int
    organizationId: int
    contactType: str
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    businessName: Optional[str] = None
    displayName: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class DuplicateCheckRequest(BaseModel):
    organizationId: int
    email: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    businessName: Optional[str] = None


class DuplicateCheckResponse(BaseModel):
    """Deliberately reveals only whether a match exists, never the matching contact"""

    isDuplicate: bool
    matchType: Optional[str] = None
