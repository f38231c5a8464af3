"""Catalog repository - Database operations for labs and tests"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import DiagnosticTest, Lab


class CatalogRepository:
    """Repository for lab and test database operations"""

    # Labs

    @staticmethod
    def get_labs(db: Session, search: Optional[str] = None) -> list[Lab]:
        """Get all labs, optionally filtered by name or address"""
        query = db.query(Lab)

        if search:
            pattern = f"%{search}%"
            query = query.filter(Lab.name.ilike(pattern) | Lab.address.ilike(pattern))

        return query.order_by(Lab.rating.desc(), Lab.name).all()

    @staticmethod
    def get_lab(db: Session, lab_id: str) -> Optional[Lab]:
        return db.query(Lab).filter(Lab.id == lab_id).first()

    @staticmethod
    def create_lab(db: Session, **lab_data) -> Lab:
        lab = Lab(**lab_data)
        db.add(lab)
        db.commit()
        db.refresh(lab)
        return lab

    @staticmethod
    def update_lab(db: Session, lab: Lab, **updates) -> Lab:
        """Update a lab with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(lab, key):
                setattr(lab, key, value)

        db.commit()
        db.refresh(lab)
        return lab

    @staticmethod
    def delete_lab(db: Session, lab: Lab) -> list[DiagnosticTest]:
        """
        Delete a lab and detach its tests.
        Returns the tests whose lab_id was cleared.
        """
        detached = db.query(DiagnosticTest).filter(DiagnosticTest.lab_id == lab.id).all()
        for test in detached:
            test.lab_id = None

        db.delete(lab)
        db.commit()
        for test in detached:
            db.refresh(test)
        return detached

    # Tests

    @staticmethod
    def get_tests(
        db: Session,
        search: Optional[str] = None,
        lab_id: Optional[str] = None,
    ) -> list[DiagnosticTest]:
        """Get all tests with optional name search and lab filter"""
        query = db.query(DiagnosticTest).options(joinedload(DiagnosticTest.lab))

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                DiagnosticTest.name.ilike(pattern) | DiagnosticTest.description.ilike(pattern)
            )

        if lab_id:
            query = query.filter(DiagnosticTest.lab_id == lab_id)

        return query.order_by(DiagnosticTest.name).all()

    @staticmethod
    def get_test(db: Session, test_id: str) -> Optional[DiagnosticTest]:
        return (
            db.query(DiagnosticTest)
            .options(joinedload(DiagnosticTest.lab))
            .filter(DiagnosticTest.id == test_id)
            .first()
        )

    @staticmethod
    def create_test(db: Session, **test_data) -> DiagnosticTest:
        test = DiagnosticTest(**test_data)
        db.add(test)
        db.commit()
        db.refresh(test)
        return test

    @staticmethod
    def update_test(db: Session, test: DiagnosticTest, **updates) -> DiagnosticTest:
        for key, value in updates.items():
            if value is not None and hasattr(test, key):
                setattr(test, key, value)

        db.commit()
        db.refresh(test)
        return test

    @staticmethod
    def delete_test(db: Session, test: DiagnosticTest) -> None:
        db.delete(test)
        db.commit()
