"""Shared pytest fixtures."""

import os
import tempfile
import time
from datetime import date, timedelta
from unittest.mock import AsyncMock, patch

# Point the app at a throwaway SQLite file before anything imports labbook.config
_DB_DIR = tempfile.mkdtemp(prefix="labbook-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'labbook.db')}"
os.environ["AUTH_JWT_SECRET"] = "test-secret-for-signing-session-tokens"
os.environ["AUTH_JWT_AUDIENCE"] = "authenticated"
os.environ["REDIS_URL"] = ""
os.environ["REDIS_HOST"] = ""
os.environ["RESEND_API_KEY"] = ""
os.environ["ALLOW_SELF_CANCEL"] = "true"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402

from labbook import rate_limiter  # noqa: E402
from labbook.database import Base, SessionLocal, engine  # noqa: E402
from labbook.main import app  # noqa: E402
from labbook.models import DiagnosticTest, Lab, Profile, UserRole  # noqa: E402

JWT_SECRET = os.environ["AUTH_JWT_SECRET"]

PATIENT_ID = "7d1e4c2a-0b5f-4f43-9a57-1c2f3e4d5a60"
OTHER_PATIENT_ID = "2b8f6e1d-3c4a-4d5e-8f90-a1b2c3d4e5f6"
ADMIN_ID = "9e0d8c7b-6a5f-4e3d-2c1b-0a9f8e7d6c5b"


@pytest.fixture(autouse=True)
def reset_database():
    """Fresh schema and empty rate-limit counters for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    rate_limiter.memory_cache.clear()
    yield
    rate_limiter.memory_cache.clear()


@pytest.fixture(autouse=True)
def mock_emails():
    """Keep background notifications from reaching the email provider."""
    with patch(
        "labbook.domain.bookings.router.send_booking_confirmation", new_callable=AsyncMock
    ) as booking_mail, patch(
        "labbook.domain.partners.router.send_partner_application_received", new_callable=AsyncMock
    ) as received_mail, patch(
        "labbook.domain.partners.router.send_partner_application_decision", new_callable=AsyncMock
    ) as decision_mail:
        yield {
            "booking_confirmation": booking_mail,
            "partner_received": received_mail,
            "partner_decision": decision_mail,
        }


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def make_token(user_id, email=None, expires_in=3600, audience="authenticated", secret=JWT_SECRET):
    """Mint an access token the way the auth provider does."""
    now = int(time.time())
    claims = {
        "sub": user_id,
        "aud": audience,
        "iat": now,
        "exp": now + expires_in,
        "role": "authenticated",
    }
    if email:
        claims["email"] = email
    return jwt.encode(claims, secret, algorithm="HS256")


def auth_headers(user_id, email=None):
    return {"Authorization": f"Bearer {make_token(user_id, email)}"}


@pytest.fixture
def patient_headers():
    return auth_headers(PATIENT_ID, "asha@example.com")


@pytest.fixture
def other_patient_headers():
    return auth_headers(OTHER_PATIENT_ID, "ravi@example.com")


@pytest.fixture
def admin_headers(db):
    db.add(Profile(id=ADMIN_ID, email="ops@drpatho.com", full_name="Ops Admin"))
    db.add(UserRole(user_id=ADMIN_ID, role="admin"))
    db.commit()
    return auth_headers(ADMIN_ID, "ops@drpatho.com")


@pytest.fixture
def lab(db):
    lab = Lab(
        name="City Diagnostics",
        address="45 Park Street, Kolkata",
        phone="+913322334455",
        rating=4.6,
        hours="7:00 AM - 9:00 PM",
    )
    db.add(lab)
    db.commit()
    db.refresh(lab)
    return lab


@pytest.fixture
def cbc_test(db, lab):
    test = DiagnosticTest(
        name="Complete Blood Count (CBC)",
        description="Measures red cells, white cells and platelets",
        cost=399,
        lab_id=lab.id,
    )
    db.add(test)
    db.commit()
    db.refresh(test)
    return test


def future_date(days=3):
    return date.today() + timedelta(days=days)


def booking_payload(test_id, **overrides):
    payload = {
        "testId": test_id,
        "appointmentDate": future_date().isoformat(),
        "appointmentTime": "10:00",
        "patientName": "Asha Rao",
        "patientAge": 34,
        "patientGender": "female",
        "patientPhone": "98765 43210",
        "patientEmail": "asha@example.com",
        "sampleType": "home",
        "address": "12 MG Road, Bengaluru",
    }
    payload.update(overrides)
    return payload
