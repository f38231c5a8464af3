"""Booking router - FastAPI endpoints for patient and admin booking operations"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...auth import AuthSession, get_admin_session, get_current_session
from ...database import get_db
from ...email_service import send_booking_confirmation
from ...rate_limiter import create_rate_limiter
from .schemas import (
    BookingCreate,
    BookingResponse,
    PaymentUpdateRequest,
    StatusUpdateRequest,
    booking_to_response,
)
from .service import BookingService, confirmation_email_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])
admin_router = APIRouter(prefix="/admin/bookings", tags=["Admin Bookings"])

rate_limit_bookings = create_rate_limiter(limit=20, window_seconds=3600, key_prefix="booking_create")


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


# ============================================================================
# PATIENT ROUTES
# ============================================================================


@router.post("", response_model=BookingResponse, status_code=201)
def create_booking(
    data: BookingCreate,
    background_tasks: BackgroundTasks,
    session: AuthSession = Depends(get_current_session),
    service: BookingService = Depends(get_booking_service),
    _: None = Depends(rate_limit_bookings),
):
    """Book a test; the confirmation email goes out after the booking is saved"""
    booking = service.create_booking(data, session)

    background_tasks.add_task(send_booking_confirmation, **confirmation_email_payload(booking))

    return booking_to_response(booking)


@router.get("/me", response_model=list[BookingResponse])
def get_my_bookings(
    session: AuthSession = Depends(get_current_session),
    service: BookingService = Depends(get_booking_service),
):
    """Get the current user's bookings, newest first"""
    return [booking_to_response(b) for b in service.get_my_bookings(session)]


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: str,
    session: AuthSession = Depends(get_current_session),
    service: BookingService = Depends(get_booking_service),
):
    return booking_to_response(service.get_booking(booking_id, session))


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: str,
    session: AuthSession = Depends(get_current_session),
    service: BookingService = Depends(get_booking_service),
):
    """Cancel one of the current user's pending or confirmed bookings"""
    return booking_to_response(service.cancel_own_booking(booking_id, session))


# ============================================================================
# ADMIN ROUTES
# ============================================================================


@admin_router.get("", response_model=list[BookingResponse])
def list_bookings(
    status: Optional[str] = Query(None, description="Filter by booking status"),
    lab_id: Optional[str] = Query(None, description="Filter by lab"),
    session: AuthSession = Depends(get_admin_session),
    service: BookingService = Depends(get_booking_service),
):
    """Get all bookings across users"""
    return [booking_to_response(b) for b in service.list_bookings(session, status, lab_id)]


@admin_router.patch("/{booking_id}/status", response_model=BookingResponse)
def update_booking_status(
    booking_id: str,
    data: StatusUpdateRequest,
    session: AuthSession = Depends(get_current_session),
    service: BookingService = Depends(get_booking_service),
):
    """Move a booking through its lifecycle (the service rejects non-admins)"""
    return booking_to_response(service.transition_status(booking_id, data.status, session))


@admin_router.patch("/{booking_id}/payment", response_model=BookingResponse)
def update_payment_status(
    booking_id: str,
    data: PaymentUpdateRequest,
    session: AuthSession = Depends(get_admin_session),
    service: BookingService = Depends(get_booking_service),
):
    """Record payment for a booking"""
    return booking_to_response(service.mark_payment(booking_id, data.paymentStatus, session))
