"""Tests for partner applications."""

from labbook.models import PartnerApplication


def application(**overrides):
    payload = {
        "labName": "Sunrise Labs",
        "ownerName": "Meera Iyer",
        "email": "Meera@SunriseLabs.in",
        "phone": "09876543210",
        "address": "14 Anna Salai",
        "city": "Chennai",
    }
    payload.update(overrides)
    return payload


class TestSubmitApplication:
    def test_public_submission_is_pending(self, client, mock_emails):
        response = client.post("/partner-applications", json=application())

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["email"] == "meera@sunriselabs.in"
        assert body["phone"] == "+919876543210"
        mock_emails["partner_received"].assert_called_once()

    def test_invalid_email_rejected(self, client, db):
        response = client.post("/partner-applications", json=application(email="not-an-email"))
        assert response.status_code == 422
        assert db.query(PartnerApplication).count() == 0

    def test_rate_limited(self, client):
        for _ in range(5):
            assert client.post("/partner-applications", json=application()).status_code == 201

        response = client.post("/partner-applications", json=application())
        assert response.status_code == 429
        assert "Retry-After" in response.headers


class TestReviewApplication:
    """Admin decisions are one-way."""

    def submit(self, client):
        return client.post("/partner-applications", json=application()).json()

    def test_admin_lists_by_status(self, client, admin_headers):
        self.submit(client)
        pending = client.get("/admin/partner-applications", params={"status": "pending"}, headers=admin_headers)
        assert len(pending.json()) == 1
        approved = client.get("/admin/partner-applications", params={"status": "approved"}, headers=admin_headers)
        assert approved.json() == []

    def test_patient_cannot_list(self, client, patient_headers):
        assert client.get("/admin/partner-applications", headers=patient_headers).status_code == 403

    def test_approve(self, client, admin_headers, mock_emails):
        submitted = self.submit(client)

        response = client.post(f"/admin/partner-applications/{submitted['id']}/approve", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        assert mock_emails["partner_decision"].call_args.kwargs["approved"] is True

    def test_decision_is_final(self, client, admin_headers):
        submitted = self.submit(client)
        client.post(f"/admin/partner-applications/{submitted['id']}/reject", headers=admin_headers)

        again = client.post(f"/admin/partner-applications/{submitted['id']}/approve", headers=admin_headers)

        assert again.status_code == 400
        listed = client.get("/admin/partner-applications", headers=admin_headers).json()
        assert listed[0]["status"] == "rejected"

    def test_unknown_application_is_404(self, client, admin_headers):
        response = client.post("/admin/partner-applications/missing/approve", headers=admin_headers)
        assert response.status_code == 404

    def test_patient_cannot_approve(self, client, patient_headers):
        submitted = self.submit(client)
        response = client.post(f"/admin/partner-applications/{submitted['id']}/approve", headers=patient_headers)
        assert response.status_code == 403
