"""Catalog domain schemas - Pydantic models for labs and tests"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ...models import DiagnosticTest, Lab


class LabCreate(BaseModel):
    """Schema for creating a lab"""

    name: str = Field(..., min_length=1, max_length=255)
    address: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    hours: Optional[str] = Field(None, max_length=100)


class LabUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    address: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    hours: Optional[str] = Field(None, max_length=100)


class LabResponse(BaseModel):
    """Schema for lab response"""

    id: str
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    rating: Optional[float] = None
    hours: Optional[str] = None
    createdAt: Optional[datetime] = None


class LabTestCreate(BaseModel):
    """Schema for creating a diagnostic test"""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    cost: int = Field(..., ge=0)
    labId: Optional[str] = None


class LabTestUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    cost: Optional[int] = Field(None, ge=0)
    labId: Optional[str] = None


class LabTestResponse(BaseModel):
    """Schema for test response, with the offering lab's name"""

    id: str
    name: str
    description: Optional[str] = None
    cost: int
    labId: Optional[str] = None
    labName: Optional[str] = None
    createdAt: Optional[datetime] = None


def lab_to_response(lab: Lab) -> LabResponse:
    return LabResponse(
        id=lab.id,
        name=lab.name,
        address=lab.address,
        phone=lab.phone,
        rating=lab.rating,
        hours=lab.hours,
        createdAt=lab.created_at,
    )


def lab_test_to_response(test: DiagnosticTest) -> LabTestResponse:
    return LabTestResponse(
        id=test.id,
        name=test.name,
        description=test.description,
        cost=test.cost,
        labId=test.lab_id,
        labName=test.lab.name if test.lab else None,
        createdAt=test.created_at,
    )
