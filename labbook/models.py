import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_id():
    """Generate an opaque unique row id"""
    return str(uuid.uuid4())


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)  # Auth provider user id
    email = Column(String(255), nullable=True)
    full_name = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    gender = Column(String(20), nullable=True)
    dob = Column(Date, nullable=True)
    address = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), unique=True, index=True, nullable=False)
    role = Column(String(20), nullable=False)  # admin, moderator, user
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'moderator', 'user')", name="check_user_role"),
    )


class Lab(Base):
    __tablename__ = "labs"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False, index=True)
    address = Column(Text, nullable=True)
    phone = Column(String(20), nullable=True)
    rating = Column(Float, nullable=True)
    hours = Column(String(100), nullable=True)  # e.g. "7:00 AM - 9:00 PM"
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    tests = relationship("DiagnosticTest", back_populates="lab")


class DiagnosticTest(Base):
    __tablename__ = "tests"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    cost = Column(Integer, nullable=False, default=0)  # Whole currency units
    lab_id = Column(String(36), ForeignKey("labs.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    lab = relationship("Lab", back_populates="tests")

    __table_args__ = (CheckConstraint("cost >= 0", name="check_test_cost_non_negative"),)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), nullable=False, index=True)
    # No FKs to tests/labs: the denormalized names keep old bookings readable
    test_id = Column(String(36), nullable=False)
    test_name = Column(String(255), nullable=False)
    lab_id = Column(String(36), nullable=True, index=True)
    lab_name = Column(String(255), nullable=True)
    appointment_date = Column(Date, nullable=False)
    appointment_time = Column(String(5), nullable=False)  # HH:MM, 24h
    patient_name = Column(String(255), nullable=False)
    patient_age = Column(Integer, nullable=True)
    patient_gender = Column(String(20), nullable=False)
    patient_phone = Column(String(20), nullable=False)
    patient_email = Column(String(255), nullable=False)
    sample_type = Column(String(10), nullable=False)  # home, lab
    address = Column(Text, nullable=True)
    price = Column(Integer, nullable=False)
    payment_status = Column(String(20), nullable=False, default="pending")  # pending, paid
    status = Column(String(20), nullable=False, default="pending", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        # One booking per user per slot; concurrent double-submits cannot both succeed
        UniqueConstraint(
            "user_id", "appointment_date", "appointment_time", name="uq_booking_user_slot"
        ),
        CheckConstraint("sample_type IN ('home', 'lab')", name="check_booking_sample_type"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'completed', 'cancelled')",
            name="check_booking_status",
        ),
        CheckConstraint(
            "payment_status IN ('pending', 'paid')", name="check_booking_payment_status"
        ),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, user={self.user_id}, slot={self.appointment_date} {self.appointment_time}, status={self.status})>"


class PartnerApplication(Base):
    __tablename__ = "partner_applications"

    id = Column(String(36), primary_key=True, default=generate_id)
    lab_name = Column(String(255), nullable=False)
    owner_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default="pending")  # pending, approved, rejected
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
