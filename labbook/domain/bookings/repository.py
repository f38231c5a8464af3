"""Booking repository - Database operations for bookings"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Booking, DiagnosticTest, Lab


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_booking(db: Session, booking_id: str) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def get_user_bookings(db: Session, user_id: str) -> list[Booking]:
        """Get all bookings for a user, newest first"""
        return (
            db.query(Booking)
            .filter(Booking.user_id == user_id)
            .order_by(Booking.created_at.desc())
            .all()
        )

    @staticmethod
    def search_bookings(
        db: Session,
        status: Optional[str] = None,
        lab_id: Optional[str] = None,
    ) -> list[Booking]:
        """Get all bookings with optional status and lab filters"""
        query = db.query(Booking)

        if status and status != "all":
            query = query.filter(Booking.status == status)

        if lab_id:
            query = query.filter(Booking.lab_id == lab_id)

        return query.order_by(Booking.created_at.desc()).all()

    @staticmethod
    def insert_booking(db: Session, **booking_data) -> Booking:
        """
        Insert a booking and commit.
        Raises IntegrityError when the (user, date, time) slot is already taken.
        """
        booking = Booking(**booking_data)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def compare_and_set(
        db: Session, booking_id: str, field: str, expected: str, new_value: str
    ) -> bool:
        """
        Set one column only if it still holds the expected value.
        Returns False when another writer changed it first.
        """
        column = getattr(Booking, field)
        updated = (
            db.query(Booking)
            .filter(Booking.id == booking_id, column == expected)
            .update({column: new_value}, synchronize_session=False)
        )
        db.commit()
        return updated == 1

    @staticmethod
    def get_test(db: Session, test_id: str) -> Optional[DiagnosticTest]:
        return db.query(DiagnosticTest).filter(DiagnosticTest.id == test_id).first()

    @staticmethod
    def get_lab(db: Session, lab_id: str) -> Optional[Lab]:
        return db.query(Lab).filter(Lab.id == lab_id).first()
