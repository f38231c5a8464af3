"""Role service - admin role checks and role management"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import AuthSession
from ...models import UserRole
from ...shared.errors import LabBookError, Unauthorized
from ..realtime.broker import publish_change
from .gate import ADMIN_ROLE, is_admin
from .repository import RoleRepository
from .schemas import AdminUserResponse, UserRoleResponse

logger = logging.getLogger(__name__)


def user_role_to_response(user_role: UserRole) -> UserRoleResponse:
    return UserRoleResponse(
        id=user_role.id,
        userId=user_role.user_id,
        role=user_role.role,
        createdAt=user_role.created_at,
    )


class RoleService:
    """Service layer for user roles"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = RoleRepository()

    def check_admin(self, session: AuthSession) -> bool:
        """Re-check the admin role against the database"""
        return is_admin(self.db, session.user_id)

    def list_users(self, session: AuthSession) -> list[AdminUserResponse]:
        """Get every user with role and booking count (admin only)"""
        if not session.is_admin:
            raise Unauthorized()

        return [
            AdminUserResponse(
                id=profile.id,
                email=profile.email,
                fullName=profile.full_name,
                phone=profile.phone,
                role=role,
                bookingsCount=count,
                createdAt=profile.created_at,
            )
            for profile, role, count in self.repo.list_users_with_roles(self.db)
        ]

    def assign_role(self, user_id: str, role: str, session: AuthSession) -> UserRole:
        """Give a user a role, replacing the one they had"""
        if not session.is_admin:
            raise Unauthorized()

        if user_id == session.user_id and role != ADMIN_ROLE:
            raise LabBookError("You cannot remove your own admin role")

        if not self.repo.get_profile(self.db, user_id):
            raise HTTPException(status_code=404, detail="User not found")

        existed = self.repo.get_role(self.db, user_id) is not None
        user_role = self.repo.upsert_role(self.db, user_id, role)

        logger.info(f"✅ Role '{role}' assigned to user {user_id} by {session.user_id}")
        publish_change(
            "user_roles",
            "update" if existed else "insert",
            user_role_to_response(user_role).model_dump(mode="json"),
        )
        return user_role

    def remove_role(self, user_id: str, session: AuthSession) -> dict:
        if not session.is_admin:
            raise Unauthorized()

        if user_id == session.user_id:
            raise LabBookError("You cannot remove your own admin role")

        user_role = self.repo.get_role(self.db, user_id)
        if not user_role:
            raise HTTPException(status_code=404, detail="User has no role assigned")

        record = user_role_to_response(user_role).model_dump(mode="json")
        self.repo.delete_role(self.db, user_role)

        logger.info(f"🗑️ Role removed from user {user_id} by {session.user_id}")
        publish_change("user_roles", "delete", record)
        return {"message": "Role removed"}
