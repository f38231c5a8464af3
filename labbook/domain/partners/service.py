"""Partner service - lab partnership applications and their one-way review"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import AuthSession
from ...models import PartnerApplication
from ...shared.errors import InvalidTransition, Unauthorized
from ...utils.sanitization import clean_text_input
from ..realtime.broker import publish_change
from .repository import PartnerRepository
from .schemas import PartnerApplicationCreate, application_to_response

logger = logging.getLogger(__name__)


def _record(application: PartnerApplication) -> dict:
    return application_to_response(application).model_dump(mode="json")


class PartnerService:
    """Service layer for partner applications"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PartnerRepository()

    def submit_application(self, data: PartnerApplicationCreate) -> PartnerApplication:
        """Record a new application from the public form"""
        application = self.repo.create_application(
            self.db,
            lab_name=clean_text_input(data.labName, max_length=255),
            owner_name=clean_text_input(data.ownerName, max_length=255),
            email=data.email,
            phone=data.phone,
            address=clean_text_input(data.address),
            city=clean_text_input(data.city, max_length=100),
            status="pending",
        )
        logger.info(f"📥 Partner application {application.id} received for {application.lab_name}")
        publish_change("partner_applications", "insert", _record(application))
        return application

    def list_applications(
        self, session: AuthSession, status: Optional[str] = None
    ) -> list[PartnerApplication]:
        if not session.is_admin:
            raise Unauthorized()
        return self.repo.get_applications(self.db, status)

    def approve(self, application_id: str, session: AuthSession) -> PartnerApplication:
        return self._review(application_id, "approved", session)

    def reject(self, application_id: str, session: AuthSession) -> PartnerApplication:
        return self._review(application_id, "rejected", session)

    def _review(self, application_id: str, new_status: str, session: AuthSession) -> PartnerApplication:
        """Decide a pending application; decisions are final"""
        if not session.is_admin:
            raise Unauthorized()

        application = self.repo.get_application(self.db, application_id)
        if not application:
            raise HTTPException(status_code=404, detail="Application not found")

        if application.status != "pending":
            raise InvalidTransition(f"Application has already been {application.status}")

        if not self.repo.set_status_if_pending(self.db, application_id, new_status):
            self.db.refresh(application)
            raise InvalidTransition(f"Application has already been {application.status}")

        self.db.refresh(application)
        logger.info(f"✅ Partner application {application_id} {new_status} by {session.user_id}")
        publish_change("partner_applications", "update", _record(application))
        return application
