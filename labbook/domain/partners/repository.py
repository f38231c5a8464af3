"""Partner application repository"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import PartnerApplication


class PartnerRepository:
    @staticmethod
    def create_application(db: Session, **data) -> PartnerApplication:
        application = PartnerApplication(**data)
        db.add(application)
        db.commit()
        db.refresh(application)
        return application

    @staticmethod
    def get_application(db: Session, application_id: str) -> Optional[PartnerApplication]:
        return db.query(PartnerApplication).filter(PartnerApplication.id == application_id).first()

    @staticmethod
    def get_applications(db: Session, status: Optional[str] = None) -> list[PartnerApplication]:
        """Get applications, newest first, optionally by status"""
        query = db.query(PartnerApplication)
        if status and status != "all":
            query = query.filter(PartnerApplication.status == status)
        return query.order_by(PartnerApplication.created_at.desc()).all()

    @staticmethod
    def set_status_if_pending(db: Session, application_id: str, new_status: str) -> bool:
        """Move a pending application to new_status; False if it was no longer pending"""
        updated = (
            db.query(PartnerApplication)
            .filter(
                PartnerApplication.id == application_id,
                PartnerApplication.status == "pending",
            )
            .update({PartnerApplication.status: new_status}, synchronize_session=False)
        )
        db.commit()
        return updated == 1
