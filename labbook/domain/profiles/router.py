"""Profile router - view and edit the current user's profile"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import AuthSession, get_current_session
from ...database import get_db
from .schemas import ProfileResponse, ProfileUpdate, profile_to_response
from .service import ProfileService

router = APIRouter(prefix="/profile", tags=["Profile"])


def get_profile_service(db: Session = Depends(get_db)) -> ProfileService:
    return ProfileService(db)


@router.get("", response_model=ProfileResponse)
def get_profile(
    session: AuthSession = Depends(get_current_session),
    service: ProfileService = Depends(get_profile_service),
):
    return profile_to_response(service.get_profile(session))


@router.patch("", response_model=ProfileResponse)
def update_profile(
    data: ProfileUpdate,
    session: AuthSession = Depends(get_current_session),
    service: ProfileService = Depends(get_profile_service),
):
    """Update the current user's profile"""
    return profile_to_response(service.update_profile(data, session))
