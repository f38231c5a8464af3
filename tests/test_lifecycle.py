"""Tests for booking status and payment transitions."""

import pytest

from labbook.domain.bookings.lifecycle import (
    BOOKING_STATUSES,
    can_transition,
    is_terminal,
    validate_payment_transition,
    validate_transition,
)
from labbook.shared.errors import InvalidTransition


class TestValidateTransition:
    """Tests for the booking status machine."""

    @pytest.mark.parametrize(
        "current,new",
        [
            ("pending", "confirmed"),
            ("pending", "cancelled"),
            ("confirmed", "completed"),
            ("confirmed", "cancelled"),
        ],
    )
    def test_allowed_moves(self, current, new):
        validate_transition(current, new)
        assert can_transition(current, new)

    @pytest.mark.parametrize("terminal", ["completed", "cancelled"])
    @pytest.mark.parametrize("new", BOOKING_STATUSES)
    def test_terminal_states_never_move(self, terminal, new):
        with pytest.raises(InvalidTransition):
            validate_transition(terminal, new)

    def test_cancelled_to_confirmed_rejected(self):
        with pytest.raises(InvalidTransition) as exc:
            validate_transition("cancelled", "confirmed")
        assert "cancelled" in exc.value.message

    def test_pending_cannot_skip_to_completed(self):
        with pytest.raises(InvalidTransition):
            validate_transition("pending", "completed")

    def test_same_status_rejected(self):
        with pytest.raises(InvalidTransition):
            validate_transition("pending", "pending")

    def test_unknown_status_rejected(self):
        with pytest.raises(InvalidTransition) as exc:
            validate_transition("pending", "shipped")
        assert "Unknown" in exc.value.message

    def test_terminal_flags(self):
        assert is_terminal("completed")
        assert is_terminal("cancelled")
        assert not is_terminal("pending")
        assert not is_terminal("confirmed")


class TestValidatePaymentTransition:
    def test_pending_to_paid(self):
        validate_payment_transition("pending", "paid")

    def test_paid_is_final(self):
        with pytest.raises(InvalidTransition):
            validate_payment_transition("paid", "pending")
        with pytest.raises(InvalidTransition):
            validate_payment_transition("paid", "paid")

    def test_unknown_payment_status(self):
        with pytest.raises(InvalidTransition):
            validate_payment_transition("pending", "refunded")
