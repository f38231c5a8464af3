"""Booking domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...models import Booking
from ...shared.validators import normalize_time_slot, validate_email, validate_phone


class BookingCreate(BaseModel):
    """Schema for a patient booking submission"""

    testId: str
    labId: Optional[str] = None
    appointmentDate: date
    appointmentTime: str
    patientName: str
    patientAge: Optional[int] = Field(None, ge=0, le=120)
    patientGender: str
    patientPhone: str
    patientEmail: str
    sampleType: Literal["home", "lab"]
    address: Optional[str] = None
    # Pay-now flow settles payment at submission; otherwise payment stays pending
    payNow: bool = False

    @field_validator("appointmentTime")
    @classmethod
    def normalize_time(cls, v):
        return normalize_time_slot(v)

    @field_validator("patientPhone")
    @classmethod
    def normalize_phone(cls, v):
        if v:
            return validate_phone(v)
        return v

    @field_validator("patientEmail")
    @classmethod
    def normalize_email(cls, v):
        if v:
            return validate_email(v)
        return v


class StatusUpdateRequest(BaseModel):
    """Schema for an admin status change"""

    status: str


class PaymentUpdateRequest(BaseModel):
    paymentStatus: str


class BookingResponse(BaseModel):
    """Schema for booking response"""

    id: str
    userId: str
    testId: str
    testName: str
    labId: Optional[str] = None
    labName: Optional[str] = None
    appointmentDate: date
    appointmentTime: str
    patientName: str
    patientAge: Optional[int] = None
    patientGender: str
    patientPhone: str
    patientEmail: str
    sampleType: str
    address: Optional[str] = None
    price: int
    paymentStatus: str
    status: str
    createdAt: Optional[datetime] = None


def booking_to_response(booking: Booking) -> BookingResponse:
    """Map a bookings row to its API shape"""
    return BookingResponse(
        id=booking.id,
        userId=booking.user_id,
        testId=booking.test_id,
        testName=booking.test_name,
        labId=booking.lab_id,
        labName=booking.lab_name,
        appointmentDate=booking.appointment_date,
        appointmentTime=booking.appointment_time,
        patientName=booking.patient_name,
        patientAge=booking.patient_age,
        patientGender=booking.patient_gender,
        patientPhone=booking.patient_phone,
        patientEmail=booking.patient_email,
        sampleType=booking.sample_type,
        address=booking.address,
        price=booking.price,
        paymentStatus=booking.payment_status,
        status=booking.status,
        createdAt=booking.created_at,
    )


def booking_to_record(booking: Booking) -> dict:
    """JSON-ready record for realtime change events"""
    return booking_to_response(booking).model_dump(mode="json")
