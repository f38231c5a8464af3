"""Tests for health checks, middleware and input helpers."""

import time
from unittest.mock import patch

import pytest

from labbook.domain.bookings.router import get_booking_service
from labbook.main import app
from labbook.shared.validators import normalize_time_slot, validate_phone


class TestHealth:
    def test_root(self, client):
        assert client.get("/").status_code == 200

    def test_health_checks_database(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": "connected"}

    def test_security_headers(self, client):
        response = client.get("/labs")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "no-store" in response.headers["Cache-Control"]


class SlowBookingService:
    def get_my_bookings(self, session):
        time.sleep(1.0)
        return []


class TestRequestTimeout:
    def test_slow_request_returns_504(self, client, patient_headers):
        app.dependency_overrides[get_booking_service] = SlowBookingService
        try:
            with patch("labbook.main.REQUEST_TIMEOUT_SECONDS", 0.2):
                response = client.get("/bookings/me", headers=patient_headers)
        finally:
            app.dependency_overrides.pop(get_booking_service, None)

        assert response.status_code == 504
        assert "took too long" in response.json()["detail"]

    def test_fast_request_unaffected(self, client, patient_headers):
        response = client.get("/bookings/me", headers=patient_headers)
        assert response.status_code == 200
        assert response.json() == []


class TestNormalizeTimeSlot:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("10:00", "10:00"),
            ("9:30", "09:30"),
            ("10:00 AM", "10:00"),
            ("02:30 pm", "14:30"),
            ("2:30PM", "14:30"),
            ("12:00 AM", "00:00"),
            ("6 pm", "18:00"),
        ],
    )
    def test_formats(self, raw, expected):
        assert normalize_time_slot(raw) == expected

    @pytest.mark.parametrize("raw", ["", "25:00", "noon", "10:75"])
    def test_rejects(self, raw):
        with pytest.raises(ValueError):
            normalize_time_slot(raw)


class TestValidatePhone:
    @pytest.mark.parametrize("raw", ["9876543210", "+91 98765 43210", "098765-43210"])
    def test_normalizes_indian_numbers(self, raw):
        assert validate_phone(raw) == "+919876543210"

    def test_rejects_short_numbers(self):
        with pytest.raises(ValueError):
            validate_phone("12345")
