"""Tests for bearer token verification and profile bootstrap."""

from conftest import PATIENT_ID, make_token
from labbook.models import Profile


class TestAccessTokens:
    def test_valid_token_creates_profile(self, client, db):
        headers = {"Authorization": f"Bearer {make_token(PATIENT_ID, 'asha@example.com')}"}

        response = client.get("/profile", headers=headers)

        assert response.status_code == 200
        assert response.json()["id"] == PATIENT_ID
        assert db.query(Profile).filter(Profile.id == PATIENT_ID).one().email == "asha@example.com"

    def test_expired_token(self, client):
        token = make_token(PATIENT_ID, expires_in=-60)
        response = client.get("/profile", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.headers.get("X-Token-Expired") == "true"

    def test_wrong_audience(self, client):
        token = make_token(PATIENT_ID, audience="anon")
        response = client.get("/profile", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_wrong_signature(self, client):
        token = make_token(PATIENT_ID, secret="someone-elses-secret")
        response = client.get("/profile", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_malformed_token(self, client):
        response = client.get("/profile", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_missing_header(self, client):
        response = client.get("/profile")
        assert response.status_code in (401, 403)


class TestProfile:
    def test_update_profile(self, client, patient_headers):
        response = client.patch(
            "/profile",
            json={"fullName": "Asha Rao", "phone": "+91 98765 43210", "dob": "1990-05-17"},
            headers=patient_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["fullName"] == "Asha Rao"
        assert body["phone"] == "+919876543210"
        assert body["dob"] == "1990-05-17"
        assert body["gender"] is None

    def test_invalid_phone_rejected(self, client, patient_headers):
        response = client.patch("/profile", json={"phone": "12345"}, headers=patient_headers)
        assert response.status_code == 422

    def test_future_dob_rejected(self, client, patient_headers):
        response = client.patch("/profile", json={"dob": "2999-01-01"}, headers=patient_headers)
        assert response.status_code == 422
