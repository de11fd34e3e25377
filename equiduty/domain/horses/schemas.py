"""Horse domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_hex_color, validate_ueln

HORSE_GENDERS = ("mare", "stallion", "gelding")


def _check_gender(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in HORSE_GENDERS:
        raise ValueError(f"Gender must be one of: {', '.join(HORSE_GENDERS)}")
    return v


class HorseCreate(BaseModel):
    """Schema for registering a horse"""

    organizationId: int
    name: str = Field(..., min_length=1, max_length=255)
    stableId: Optional[int] = None
    horseGroupId: Optional[int] = None
    breed: Optional[str] = None
    color: Optional[str] = None
    gender: Optional[str] = None
    dateOfBirth: Optional[date] = None
    ueln: Optional[str] = None
    microchip: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("gender")
    @classmethod
    def check_gender(cls, v):
        return _check_gender(v)

    @field_validator("ueln")
    @classmethod
    def check_ueln(cls, v):
        return validate_ueln(v)

    @field_validator("dateOfBirth")
    @classmethod
    def check_date_of_birth(cls, v):
        if v and v > date.today():
            raise ValueError("Date of birth cannot be in the future")
        return v


class HorseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    stableId: Optional[int] = None
    breed: Optional[str] = None
    color: Optional[str] = None
    gender: Optional[str] = None
    dateOfBirth: Optional[date] = None
    ueln: Optional[str] = None
    microchip: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None

    @field_validator("gender")
    @classmethod
    def check_gender(cls, v):
        return _check_gender(v)

    @field_validator("ueln")
    @classmethod
    def check_ueln(cls, v):
        return validate_ueln(v)

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        if v is not None and v not in ("active", "inactive"):
            raise ValueError("Status must be 'active' or 'inactive'")
        return v


class HorseResponse(BaseModel):
    id: int
    organizationId: int
    stableId: Optional[int] = None
    horseGroupId: Optional[int] = None
    horseGroupName: Optional[str] = None
    ownerId: Optional[int] = None
    name: str
    breed: Optional[str] = None
    color: Optional[str] = None
    gender: Optional[str] = None
    dateOfBirth: Optional[date] = None
    ueln: Optional[str] = None
    microchip: Optional[str] = None
    notes: Optional[str] = None
    status: str
    createdAt: Optional[datetime] = None


class AssignGroupRequest(BaseModel):
    horseGroupId: int


class HorseGroupCreate(BaseModel):
    organizationId: int
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    color: Optional[str] = None

    @field_validator("color")
    @classmethod
    def check_color(cls, v):
        return validate_hex_color(v)


class HorseGroupUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    color: Optional[str] = None

    @field_validator("color")
    @classmethod
    def check_color(cls, v):
        return validate_hex_color(v)


class HorseGroupResponse(BaseModel):
    id: int
    organizationId: int
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    horseCount: int = 0
    createdAt: Optional[datetime] = None
