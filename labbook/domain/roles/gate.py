"""Role gate - decides whether a user holds the admin role.

Fail-closed: any lookup problem is logged and answered with ``False``.
There is no hardcoded administrator; the first admin is provisioned with
``provision_admin.py``.
"""

import logging

from sqlalchemy.orm import Session

from ...models import UserRole

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


def is_admin(db: Session, user_id: str) -> bool:
    """Return True only when a user_roles row grants ``admin`` to this user"""
    if not user_id:
        return False

    try:
        roles = db.query(UserRole.role).filter(UserRole.user_id == user_id).all()
        return any(role == ADMIN_ROLE for (role,) in roles)
    except Exception as e:
        logger.error(f"❌ Admin role lookup failed for user {user_id}, denying: {e}")
        try:
            db.rollback()
        except Exception as rollback_error:
            logger.error(f"❌ Rollback after role lookup failure failed: {rollback_error}")
        return False
