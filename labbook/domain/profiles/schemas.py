"""Profile domain schemas"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import Profile
from ...shared.validators import validate_phone


class ProfileUpdate(BaseModel):
    """Schema for updating the current user's profile"""

    fullName: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = None
    gender: Optional[str] = Field(None, max_length=20)
    dob: Optional[date] = None
    address: Optional[str] = Field(None, max_length=500)

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, v):
        if v:
            return validate_phone(v)
        return v

    @field_validator("dob")
    @classmethod
    def dob_not_in_future(cls, v):
        if v and v > date.today():
            raise ValueError("Date of birth cannot be in the future")
        return v


class ProfileResponse(BaseModel):
    id: str
    email: Optional[str] = None
    fullName: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    dob: Optional[date] = None
    address: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


def profile_to_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        email=profile.email,
        fullName=profile.full_name,
        phone=profile.phone,
        gender=profile.gender,
        dob=profile.dob,
        address=profile.address,
        createdAt=profile.created_at,
        updatedAt=profile.updated_at,
    )
