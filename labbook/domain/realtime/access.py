"""Who may watch which change feed"""

from ...auth import AuthSession
from .events import ChangeEvent

ADMIN_ONLY_TABLES = ("partner_applications", "user_roles")


def can_subscribe(table: str, session: AuthSession) -> bool:
    return session.is_admin or table not in ADMIN_ONLY_TABLES


def is_visible(event: ChangeEvent, session: AuthSession) -> bool:
    """Booking events reach their owner and admins; catalog events reach everyone"""
    if session.is_admin:
        return True
    if event.table == "bookings":
        return event.record.get("userId") == session.user_id
    return event.table not in ADMIN_ONLY_TABLES
