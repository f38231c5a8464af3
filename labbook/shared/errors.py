"""Domain errors shared by the booking, catalog, role and partner services.

Each error carries the HTTP status it maps to; ``main.py`` registers a single
exception handler that renders them as ``{"detail": message}``.
"""


class LabBookError(Exception):
    """Base class for user-facing, non-fatal domain failures"""

    status_code = 400
    default_message = "Request could not be completed"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BookingValidationError(LabBookError):
    """A required field is missing or invalid; raised before any write"""

    status_code = 422
    default_message = "Please fill in all required fields"


class BookingConflict(LabBookError):
    """The user already holds a booking for this date and time"""

    status_code = 409
    default_message = "You already have a booking at this date and time"


class InvalidTransition(LabBookError):
    status_code = 400
    default_message = "This status change is not allowed"


class Unauthorized(LabBookError):
    status_code = 403
    default_message = "Administrator access required"


class BackendUnavailable(LabBookError):
    status_code = 503
    default_message = "Service temporarily unavailable. Please try again."
