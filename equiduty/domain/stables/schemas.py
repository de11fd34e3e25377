"""Stable domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class StableCreate(BaseModel):
    organizationId: int
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    address: Optional[str] = None
    facilityNumber: Optional[str] = None


class StableUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    address: Optional[str] = None
    facilityNumber: Optional[str] = None


class StableResponse(BaseModel):
    id: int
    organizationId: int
    name: str
    description: Optional[str] = None
    address: Optional[str] = None
    facilityNumber: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
