"""Catalog service - Business logic for labs and the tests they offer"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import AuthSession
from ...models import DiagnosticTest, Lab
from ...shared.errors import Unauthorized
from ...utils.sanitization import clean_text_input
from ..realtime.broker import publish_change
from .repository import CatalogRepository
from .schemas import (
    LabCreate,
    LabTestCreate,
    LabTestUpdate,
    LabUpdate,
    lab_test_to_response,
    lab_to_response,
)

logger = logging.getLogger(__name__)


def _lab_record(lab: Lab) -> dict:
    return lab_to_response(lab).model_dump(mode="json")


def _test_record(test: DiagnosticTest) -> dict:
    return lab_test_to_response(test).model_dump(mode="json")


def _require_admin(session: AuthSession) -> None:
    if not session.is_admin:
        logger.warning(f"⚠️ Non-admin {session.user_id} attempted a catalog change")
        raise Unauthorized()


class CatalogService:
    """Service layer for lab and test management"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CatalogRepository()

    # ------------------------------------------------------------------
    # Labs
    # ------------------------------------------------------------------

    def list_labs(self, search: Optional[str] = None) -> list[Lab]:
        return self.repo.get_labs(self.db, search.strip() if search else None)

    def get_lab(self, lab_id: str) -> Lab:
        lab = self.repo.get_lab(self.db, lab_id)
        if not lab:
            raise HTTPException(status_code=404, detail="Lab not found")
        return lab

    def list_lab_tests(self, lab_id: str) -> list[DiagnosticTest]:
        """Get the tests offered by one lab"""
        self.get_lab(lab_id)
        return self.repo.get_tests(self.db, lab_id=lab_id)

    def create_lab(self, data: LabCreate, session: AuthSession) -> Lab:
        _require_admin(session)

        lab = self.repo.create_lab(
            self.db,
            name=clean_text_input(data.name, max_length=255),
            address=clean_text_input(data.address),
            phone=data.phone.strip() if data.phone else None,
            rating=data.rating,
            hours=clean_text_input(data.hours, max_length=100),
        )
        logger.info(f"✅ Lab created: {lab.name} ({lab.id}) by {session.user_id}")
        publish_change("labs", "insert", _lab_record(lab))
        return lab

    def update_lab(self, lab_id: str, data: LabUpdate, session: AuthSession) -> Lab:
        _require_admin(session)
        lab = self.get_lab(lab_id)

        updates = {
            "name": clean_text_input(data.name, max_length=255),
            "address": clean_text_input(data.address),
            "phone": data.phone.strip() if data.phone else None,
            "rating": data.rating,
            "hours": clean_text_input(data.hours, max_length=100),
        }
        lab = self.repo.update_lab(self.db, lab, **updates)

        logger.info(f"✅ Lab updated: {lab.id}")
        publish_change("labs", "update", _lab_record(lab))
        return lab

    def delete_lab(self, lab_id: str, session: AuthSession) -> dict:
        """Delete a lab; its tests stay listed without a lab"""
        _require_admin(session)
        lab = self.get_lab(lab_id)
        record = _lab_record(lab)

        detached = self.repo.delete_lab(self.db, lab)

        logger.info(f"🗑️ Lab deleted: {lab_id} ({len(detached)} tests detached)")
        publish_change("labs", "delete", record)
        for test in detached:
            publish_change("tests", "update", _test_record(test))
        return {"message": "Lab deleted"}

    # ------------------------------------------------------------------
    # Tests
    # ------------------------------------------------------------------

    def list_tests(self, search: Optional[str] = None, lab_id: Optional[str] = None) -> list[DiagnosticTest]:
        return self.repo.get_tests(self.db, search.strip() if search else None, lab_id)

    def get_test(self, test_id: str) -> DiagnosticTest:
        test = self.repo.get_test(self.db, test_id)
        if not test:
            raise HTTPException(status_code=404, detail="Test not found")
        return test

    def create_test(self, data: LabTestCreate, session: AuthSession) -> DiagnosticTest:
        _require_admin(session)
        if data.labId:
            self.get_lab(data.labId)

        test = self.repo.create_test(
            self.db,
            name=clean_text_input(data.name, max_length=255),
            description=clean_text_input(data.description, max_length=2000),
            cost=data.cost,
            lab_id=data.labId or None,
        )
        logger.info(f"✅ Test created: {test.name} (₹{test.cost}) by {session.user_id}")
        publish_change("tests", "insert", _test_record(test))
        return test

    def update_test(self, test_id: str, data: LabTestUpdate, session: AuthSession) -> DiagnosticTest:
        """Update a test; an empty labId detaches it from its lab"""
        _require_admin(session)
        test = self.get_test(test_id)

        if data.labId:
            self.get_lab(data.labId)
        elif data.labId == "":
            test.lab_id = None

        updates = {
            "name": clean_text_input(data.name, max_length=255),
            "description": clean_text_input(data.description, max_length=2000),
            "cost": data.cost,
            "lab_id": data.labId or None,
        }
        test = self.repo.update_test(self.db, test, **updates)

        logger.info(f"✅ Test updated: {test.id}")
        publish_change("tests", "update", _test_record(test))
        return test

    def delete_test(self, test_id: str, session: AuthSession) -> dict:
        """Delete a test; existing bookings keep their copied test name"""
        _require_admin(session)
        test = self.get_test(test_id)
        record = _test_record(test)

        self.repo.delete_test(self.db, test)

        logger.info(f"🗑️ Test deleted: {test_id}")
        publish_change("tests", "delete", record)
        return {"message": "Test deleted"}
