"""
Grant the admin role to an existing auth user.
There is no built-in administrator; run this once to bootstrap the first one.
Usage: python provision_admin.py <user_id> [email]
"""
import sys
import logging
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).parent))

from labbook import models  # noqa: F401
from labbook.auth import ensure_profile
from labbook.database import Base, SessionLocal, engine
from labbook.domain.roles.gate import ADMIN_ROLE, is_admin
from labbook.domain.roles.repository import RoleRepository

logging.basicConfig(level=logging.INFO, format='%(message)s')
logger = logging.getLogger(__name__)


def provision_admin(user_id: str, email: Optional[str] = None) -> bool:
    """Make user_id an admin. Returns False if they already were one."""
    Base.metadata.create_all(bind=engine, checkfirst=True)

    db = SessionLocal()
    try:
        if is_admin(db, user_id):
            logger.info(f"User {user_id} is already an admin")
            return False

        ensure_profile(db, user_id, email)
        RoleRepository.upsert_role(db, user_id, ADMIN_ROLE)
        logger.info(f"✅ User {user_id} is now an admin")
        return True
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        logger.error("Usage: python provision_admin.py <user_id> [email]")
        sys.exit(1)

    try:
        provision_admin(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None)
    except Exception as e:
        logger.error(f"❌ Provisioning failed: {e}")
        sys.exit(1)
