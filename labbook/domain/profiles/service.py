"""Profile service - the signed-in user's own profile"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import AuthSession
from ...models import Profile
from ...utils.sanitization import clean_text_input
from .schemas import ProfileUpdate

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, db: Session):
        self.db = db

    def get_profile(self, session: AuthSession) -> Profile:
        profile = self.db.query(Profile).filter(Profile.id == session.user_id).first()
        if not profile:
            raise HTTPException(status_code=404, detail="Profile not found")
        return profile

    def update_profile(self, data: ProfileUpdate, session: AuthSession) -> Profile:
        """Apply the provided fields; omitted fields are left unchanged"""
        profile = self.get_profile(session)

        updates = data.model_dump(exclude_unset=True)
        if "fullName" in updates:
            profile.full_name = clean_text_input(updates["fullName"], max_length=255)
        if "phone" in updates:
            profile.phone = updates["phone"]
        if "gender" in updates:
            profile.gender = clean_text_input(updates["gender"], max_length=20)
        if "dob" in updates:
            profile.dob = updates["dob"]
        if "address" in updates:
            profile.address = clean_text_input(updates["address"])

        self.db.commit()
        self.db.refresh(profile)
        logger.info(f"✅ Profile updated for user {session.user_id}")
        return profile
