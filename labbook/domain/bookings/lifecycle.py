"""
Booking status and payment state machines

Booking statuses: pending → confirmed → completed, with cancelled reachable
from pending and confirmed. completed and cancelled are terminal.
Payment statuses: pending → paid.
"""

from ...shared.errors import InvalidTransition

BOOKING_STATUSES = ("pending", "confirmed", "completed", "cancelled")
PAYMENT_STATUSES = ("pending", "paid")

VALID_TRANSITIONS = {
    "pending": ("confirmed", "cancelled"),
    "confirmed": ("completed", "cancelled"),
    "completed": (),  # Terminal state
    "cancelled": (),  # Terminal state
}

VALID_PAYMENT_TRANSITIONS = {
    "pending": ("paid",),
    "paid": (),
}

# Statuses from which the booking owner may cancel their own booking
SELF_CANCELLABLE = ("pending", "confirmed")


def is_terminal(status: str) -> bool:
    return not VALID_TRANSITIONS.get(status)


def can_transition(current_status: str, new_status: str) -> bool:
    return new_status in VALID_TRANSITIONS.get(current_status, ())


def validate_transition(current_status: str, new_status: str) -> None:
    """Raise InvalidTransition unless current_status → new_status is allowed"""
    if new_status not in BOOKING_STATUSES:
        raise InvalidTransition(f"Unknown booking status: {new_status}")

    if is_terminal(current_status):
        raise InvalidTransition(f"Booking is already {current_status} and cannot be changed")

    if not can_transition(current_status, new_status):
        raise InvalidTransition(f"Cannot change booking from {current_status} to {new_status}")


def validate_payment_transition(current_status: str, new_status: str) -> None:
    if new_status not in PAYMENT_STATUSES:
        raise InvalidTransition(f"Unknown payment status: {new_status}")

    if new_status not in VALID_PAYMENT_TRANSITIONS.get(current_status, ()):
        raise InvalidTransition(f"Cannot change payment from {current_status} to {new_status}")
