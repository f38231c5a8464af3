"""Role domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

RoleName = Literal["admin", "moderator", "user"]


class RoleAssignRequest(BaseModel):
    """Schema for assigning a role to a user"""

    role: RoleName


class RoleStatusResponse(BaseModel):
    isAdmin: bool


class AdminUserResponse(BaseModel):
    """Schema for a row in the admin user list"""

    id: str
    email: Optional[str] = None
    fullName: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    bookingsCount: int = 0
    createdAt: Optional[datetime] = None


class UserRoleResponse(BaseModel):
    id: str
    userId: str
    role: str
    createdAt: Optional[datetime] = None
