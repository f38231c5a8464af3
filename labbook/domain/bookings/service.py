"""Booking service - admission, conflict guard and lifecycle transitions"""

import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import AuthSession
from ...config import ALLOW_SELF_CANCEL
from ...models import Booking
from ...shared.errors import (
    BackendUnavailable,
    BookingConflict,
    BookingValidationError,
    InvalidTransition,
    Unauthorized,
)
from ...utils.sanitization import clean_text_input
from ..realtime.broker import publish_change
from .lifecycle import SELF_CANCELLABLE, validate_payment_transition, validate_transition
from .pricing import compute_total
from .repository import BookingRepository
from .schemas import BookingCreate, booking_to_record

logger = logging.getLogger(__name__)

REQUIRED_PATIENT_FIELDS = {
    "patientName": "patient name",
    "patientGender": "gender",
    "patientPhone": "phone number",
    "patientEmail": "email address",
}


def validate_booking_request(data: BookingCreate, today: Optional[date] = None) -> None:
    """
    Reject incomplete submissions before anything is written.
    Home collection needs an address; the slot may not be in the past.
    """
    missing = [
        label
        for field, label in REQUIRED_PATIENT_FIELDS.items()
        if not (getattr(data, field) or "").strip()
    ]
    if missing:
        raise BookingValidationError(f"Please fill in all required fields: {', '.join(missing)}")

    if data.sampleType == "home" and not (data.address or "").strip():
        raise BookingValidationError("Address is required for home sample collection")

    if data.appointmentDate < (today or date.today()):
        raise BookingValidationError("Appointment date cannot be in the past")


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session, allow_self_cancel: bool = ALLOW_SELF_CANCEL):
        self.db = db
        self.repo = BookingRepository()
        self.allow_self_cancel = allow_self_cancel

    # ------------------------------------------------------------------
    # Admission
    # ------------------------------------------------------------------

    def create_booking(self, data: BookingCreate, session: AuthSession) -> Booking:
        """Create a pending booking; the slot constraint decides conflicts"""
        validate_booking_request(data)

        test = self.repo.get_test(self.db, data.testId)
        if not test:
            raise HTTPException(status_code=404, detail="Test not found")

        if data.labId and test.lab_id and data.labId != test.lab_id:
            raise BookingValidationError("The selected lab does not offer this test")

        lab_id = data.labId or test.lab_id
        lab = None
        if lab_id:
            lab = self.repo.get_lab(self.db, lab_id)
            if not lab:
                raise HTTPException(status_code=404, detail="Lab not found")

        price = compute_total(test.cost, data.sampleType)

        try:
            patient_name = clean_text_input(data.patientName, max_length=255)
            address = clean_text_input(data.address) if data.sampleType == "home" else None
        except ValueError as e:
            raise BookingValidationError(str(e)) from e

        booking_data = {
            "user_id": session.user_id,
            "test_id": test.id,
            "test_name": test.name,
            "lab_id": lab.id if lab else None,
            "lab_name": lab.name if lab else None,
            "appointment_date": data.appointmentDate,
            "appointment_time": data.appointmentTime,
            "patient_name": patient_name,
            "patient_age": data.patientAge,
            "patient_gender": data.patientGender.strip(),
            "patient_phone": data.patientPhone,
            "patient_email": data.patientEmail,
            "sample_type": data.sampleType,
            "address": address,
            "price": price,
            "payment_status": "paid" if data.payNow else "pending",
            "status": "pending",
        }

        try:
            booking = self.repo.insert_booking(self.db, **booking_data)
        except IntegrityError as e:
            self.db.rollback()
            logger.info(
                f"⚠️ Slot conflict for user {session.user_id} at "
                f"{data.appointmentDate} {data.appointmentTime}"
            )
            raise BookingConflict() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Booking insert failed for user {session.user_id}: {e}")
            raise BackendUnavailable() from e

        logger.info(
            f"✅ Booking {booking.id} created for user {session.user_id}: "
            f"{booking.test_name} on {booking.appointment_date} {booking.appointment_time} "
            f"({booking.sample_type}, ₹{booking.price})"
        )
        publish_change("bookings", "insert", booking_to_record(booking))
        return booking

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_my_bookings(self, session: AuthSession) -> list[Booking]:
        return self.repo.get_user_bookings(self.db, session.user_id)

    def get_booking(self, booking_id: str, session: AuthSession) -> Booking:
        """Get a booking visible to this session (owner or admin)"""
        booking = self.repo.get_booking(self.db, booking_id)
        if not booking or (booking.user_id != session.user_id and not session.is_admin):
            raise HTTPException(status_code=404, detail="Booking not found")
        return booking

    def list_bookings(
        self,
        session: AuthSession,
        status: Optional[str] = None,
        lab_id: Optional[str] = None,
    ) -> list[Booking]:
        """Get all bookings (admin only)"""
        if not session.is_admin:
            raise Unauthorized()
        return self.repo.search_bookings(self.db, status, lab_id)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def transition_status(self, booking_id: str, new_status: str, session: AuthSession) -> Booking:
        """Move a booking to a new status (admin only)"""
        if not session.is_admin:
            logger.warning(
                f"⚠️ Non-admin {session.user_id} attempted to set booking {booking_id} to {new_status}"
            )
            raise Unauthorized()

        booking = self._get_or_404(booking_id)
        validate_transition(booking.status, new_status)

        return self._apply(booking, "status", booking.status, new_status, session)

    def mark_payment(self, booking_id: str, payment_status: str, session: AuthSession) -> Booking:
        """Record payment for a booking (admin only)"""
        if not session.is_admin:
            raise Unauthorized()

        booking = self._get_or_404(booking_id)
        validate_payment_transition(booking.payment_status, payment_status)

        return self._apply(booking, "payment_status", booking.payment_status, payment_status, session)

    def cancel_own_booking(self, booking_id: str, session: AuthSession) -> Booking:
        """Let the owner cancel a booking that has not been completed"""
        if not self.allow_self_cancel:
            raise Unauthorized("Self-service cancellation is disabled. Please contact support.")

        booking = self.repo.get_booking(self.db, booking_id)
        if not booking or booking.user_id != session.user_id:
            raise HTTPException(status_code=404, detail="Booking not found")

        if booking.status not in SELF_CANCELLABLE:
            raise InvalidTransition(f"A {booking.status} booking cannot be cancelled")

        return self._apply(booking, "status", booking.status, "cancelled", session)

    def _get_or_404(self, booking_id: str) -> Booking:
        booking = self.repo.get_booking(self.db, booking_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        return booking

    def _apply(
        self, booking: Booking, field: str, expected: str, new_value: str, session: AuthSession
    ) -> Booking:
        """Compare-and-set a single column, then publish the updated record"""
        try:
            applied = self.repo.compare_and_set(self.db, booking.id, field, expected, new_value)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update {field} on booking {booking.id}: {e}")
            raise BackendUnavailable() from e

        self.db.refresh(booking)

        if not applied:
            logger.warning(
                f"⚠️ Booking {booking.id} {field} changed concurrently "
                f"(expected {expected}, now {getattr(booking, field)})"
            )
            raise InvalidTransition(
                f"Booking was updated by someone else and is now {getattr(booking, field)}"
            )

        logger.info(
            f"✅ Booking {booking.id} {field}: {expected} → {new_value} (by {session.user_id})"
        )
        publish_change("bookings", "update", booking_to_record(booking))
        return booking


def confirmation_email_payload(booking: Booking) -> dict:
    """Fields the booking confirmation email needs"""
    return {
        "to": booking.patient_email,
        "booking_id": booking.id,
        "patient_name": booking.patient_name,
        "test_name": booking.test_name,
        "appointment_date": booking.appointment_date,
        "appointment_time": booking.appointment_time,
        "lab_name": booking.lab_name,
        "sample_type": booking.sample_type,
        "address": booking.address,
        "price": booking.price,
    }
