"""Partner router - public application form and admin review"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...auth import AuthSession, get_admin_session
from ...database import get_db
from ...email_service import send_partner_application_decision, send_partner_application_received
from ...rate_limiter import create_rate_limiter
from .schemas import PartnerApplicationCreate, PartnerApplicationResponse, application_to_response
from .service import PartnerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/partner-applications", tags=["Partners"])
admin_router = APIRouter(prefix="/admin/partner-applications", tags=["Admin Partners"])

rate_limit_5_per_hour = create_rate_limiter(limit=5, window_seconds=3600, key_prefix="partner_apply")


def get_partner_service(db: Session = Depends(get_db)) -> PartnerService:
    """Dependency injection for PartnerService"""
    return PartnerService(db)


@router.post("", response_model=PartnerApplicationResponse, status_code=201)
def submit_application(
    data: PartnerApplicationCreate,
    background_tasks: BackgroundTasks,
    service: PartnerService = Depends(get_partner_service),
    _: None = Depends(rate_limit_5_per_hour),
):
    """Apply to list a lab on the marketplace"""
    application = service.submit_application(data)

    background_tasks.add_task(
        send_partner_application_received,
        to=application.email,
        owner_name=application.owner_name,
        lab_name=application.lab_name,
    )

    return application_to_response(application)


@admin_router.get("", response_model=list[PartnerApplicationResponse])
def list_applications(
    status: Optional[str] = Query(None, description="Filter by application status"),
    session: AuthSession = Depends(get_admin_session),
    service: PartnerService = Depends(get_partner_service),
):
    return [application_to_response(a) for a in service.list_applications(session, status)]


@admin_router.post("/{application_id}/approve", response_model=PartnerApplicationResponse)
def approve_application(
    application_id: str,
    background_tasks: BackgroundTasks,
    session: AuthSession = Depends(get_admin_session),
    service: PartnerService = Depends(get_partner_service),
):
    application = service.approve(application_id, session)
    background_tasks.add_task(
        send_partner_application_decision,
        to=application.email,
        owner_name=application.owner_name,
        lab_name=application.lab_name,
        approved=True,
    )
    return application_to_response(application)


@admin_router.post("/{application_id}/reject", response_model=PartnerApplicationResponse)
def reject_application(
    application_id: str,
    background_tasks: BackgroundTasks,
    session: AuthSession = Depends(get_admin_session),
    service: PartnerService = Depends(get_partner_service),
):
    application = service.reject(application_id, session)
    background_tasks.add_task(
        send_partner_application_decision,
        to=application.email,
        owner_name=application.owner_name,
        lab_name=application.lab_name,
        approved=False,
    )
    return application_to_response(application)
