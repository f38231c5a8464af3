"""Catalog router - FastAPI endpoints for browsing and managing labs and tests"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import AuthSession, get_admin_session
from ...database import get_db
from .schemas import (
    LabCreate,
    LabResponse,
    LabTestCreate,
    LabTestResponse,
    LabTestUpdate,
    LabUpdate,
    lab_test_to_response,
    lab_to_response,
)
from .service import CatalogService

logger = logging.getLogger(__name__)

labs_router = APIRouter(prefix="/labs", tags=["Labs"])
tests_router = APIRouter(prefix="/tests", tags=["Tests"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(db)


# ============================================================================
# LABS
# ============================================================================


@labs_router.get("", response_model=list[LabResponse])
def list_labs(
    search: Optional[str] = Query(None, description="Match lab name or address"),
    service: CatalogService = Depends(get_catalog_service),
):
    """Get all partner labs"""
    return [lab_to_response(lab) for lab in service.list_labs(search)]


@labs_router.get("/{lab_id}", response_model=LabResponse)
def get_lab(lab_id: str, service: CatalogService = Depends(get_catalog_service)):
    return lab_to_response(service.get_lab(lab_id))


@labs_router.get("/{lab_id}/tests", response_model=list[LabTestResponse])
def list_lab_tests(lab_id: str, service: CatalogService = Depends(get_catalog_service)):
    """Get the tests a lab offers"""
    return [lab_test_to_response(t) for t in service.list_lab_tests(lab_id)]


@labs_router.post("", response_model=LabResponse, status_code=201)
def create_lab(
    data: LabCreate,
    session: AuthSession = Depends(get_admin_session),
    service: CatalogService = Depends(get_catalog_service),
):
    return lab_to_response(service.create_lab(data, session))


@labs_router.patch("/{lab_id}", response_model=LabResponse)
def update_lab(
    lab_id: str,
    data: LabUpdate,
    session: AuthSession = Depends(get_admin_session),
    service: CatalogService = Depends(get_catalog_service),
):
    return lab_to_response(service.update_lab(lab_id, data, session))


@labs_router.delete("/{lab_id}")
def delete_lab(
    lab_id: str,
    session: AuthSession = Depends(get_admin_session),
    service: CatalogService = Depends(get_catalog_service),
):
    """Delete a lab (its tests are kept without a lab)"""
    return service.delete_lab(lab_id, session)


# ============================================================================
# TESTS
# ============================================================================


@tests_router.get("", response_model=list[LabTestResponse])
def list_tests(
    search: Optional[str] = Query(None, description="Match test name or description"),
    lab_id: Optional[str] = Query(None, description="Only tests offered by this lab"),
    service: CatalogService = Depends(get_catalog_service),
):
    """Get all diagnostic tests"""
    return [lab_test_to_response(t) for t in service.list_tests(search, lab_id)]


@tests_router.get("/{test_id}", response_model=LabTestResponse)
def get_test(test_id: str, service: CatalogService = Depends(get_catalog_service)):
    return lab_test_to_response(service.get_test(test_id))


@tests_router.post("", response_model=LabTestResponse, status_code=201)
def create_test(
    data: LabTestCreate,
    session: AuthSession = Depends(get_admin_session),
    service: CatalogService = Depends(get_catalog_service),
):
    return lab_test_to_response(service.create_test(data, session))


@tests_router.patch("/{test_id}", response_model=LabTestResponse)
def update_test(
    test_id: str,
    data: LabTestUpdate,
    session: AuthSession = Depends(get_admin_session),
    service: CatalogService = Depends(get_catalog_service),
):
    return lab_test_to_response(service.update_test(test_id, data, session))


@tests_router.delete("/{test_id}")
def delete_test(
    test_id: str,
    session: AuthSession = Depends(get_admin_session),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.delete_test(test_id, session)
