"""Role router - admin status lookup and user role management"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import AuthSession, get_admin_session, get_current_session
from ...database import get_db
from .schemas import AdminUserResponse, RoleAssignRequest, RoleStatusResponse, UserRoleResponse
from .service import RoleService, user_role_to_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/roles", tags=["Roles"])
admin_router = APIRouter(prefix="/admin/users", tags=["Admin Users"])


def get_role_service(db: Session = Depends(get_db)) -> RoleService:
    """Dependency injection for RoleService"""
    return RoleService(db)


@router.get("/me", response_model=RoleStatusResponse)
def get_my_role(
    session: AuthSession = Depends(get_current_session),
    service: RoleService = Depends(get_role_service),
):
    """Whether the current user is an administrator"""
    return RoleStatusResponse(isAdmin=service.check_admin(session))


@admin_router.get("", response_model=list[AdminUserResponse])
def list_users(
    session: AuthSession = Depends(get_admin_session),
    service: RoleService = Depends(get_role_service),
):
    """Get all users with their role and booking count"""
    return service.list_users(session)


@admin_router.put("/{user_id}/role", response_model=UserRoleResponse)
def assign_role(
    user_id: str,
    data: RoleAssignRequest,
    session: AuthSession = Depends(get_admin_session),
    service: RoleService = Depends(get_role_service),
):
    return user_role_to_response(service.assign_role(user_id, data.role, session))


@admin_router.delete("/{user_id}/role")
def remove_role(
    user_id: str,
    session: AuthSession = Depends(get_admin_session),
    service: RoleService = Depends(get_role_service),
):
    """Remove a user's role (admins cannot remove their own)"""
    return service.remove_role(user_id, session)
