"""Partner application schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import PartnerApplication
from ...shared.validators import validate_email, validate_phone

APPLICATION_STATUSES = ("pending", "approved", "rejected")


class PartnerApplicationCreate(BaseModel):
    """Schema for the public "partner with us" form"""

    labName: str = Field(..., min_length=1, max_length=255)
    ownerName: str = Field(..., min_length=1, max_length=255)
    email: str
    phone: Optional[str] = None
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, v):
        if v:
            return validate_phone(v)
        return v


class PartnerApplicationResponse(BaseModel):
    id: str
    labName: str
    ownerName: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    status: str
    createdAt: Optional[datetime] = None


def application_to_response(application: PartnerApplication) -> PartnerApplicationResponse:
    return PartnerApplicationResponse(
        id=application.id,
        labName=application.lab_name,
        ownerName=application.owner_name,
        email=application.email,
        phone=application.phone,
        address=application.address,
        city=application.city,
        status=application.status,
        createdAt=application.created_at,
    )
