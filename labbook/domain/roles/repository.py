"""Role repository - Database operations for user roles and the admin user list"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Booking, Profile, UserRole


class RoleRepository:
    """Repository for user role database operations"""

    @staticmethod
    def get_role(db: Session, user_id: str) -> Optional[UserRole]:
        return db.query(UserRole).filter(UserRole.user_id == user_id).first()

    @staticmethod
    def upsert_role(db: Session, user_id: str, role: str) -> UserRole:
        """Assign a role, replacing any existing one"""
        user_role = db.query(UserRole).filter(UserRole.user_id == user_id).first()
        if user_role:
            user_role.role = role
        else:
            user_role = UserRole(user_id=user_id, role=role)
            db.add(user_role)

        db.commit()
        db.refresh(user_role)
        return user_role

    @staticmethod
    def delete_role(db: Session, user_role: UserRole) -> None:
        db.delete(user_role)
        db.commit()

    @staticmethod
    def get_profile(db: Session, user_id: str) -> Optional[Profile]:
        return db.query(Profile).filter(Profile.id == user_id).first()

    @staticmethod
    def list_users_with_roles(db: Session) -> list[tuple[Profile, Optional[str], int]]:
        """Get every profile with its role and number of bookings"""
        booking_counts = (
            db.query(Booking.user_id, func.count(Booking.id).label("bookings_count"))
            .group_by(Booking.user_id)
            .subquery()
        )

        rows = (
            db.query(Profile, UserRole.role, booking_counts.c.bookings_count)
            .outerjoin(UserRole, UserRole.user_id == Profile.id)
            .outerjoin(booking_counts, booking_counts.c.user_id == Profile.id)
            .order_by(Profile.created_at.desc())
            .all()
        )
        return [(profile, role, count or 0) for profile, role, count in rows]
