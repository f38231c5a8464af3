"""Tests for the role gate, role endpoints and admin provisioning."""

from unittest.mock import MagicMock

from conftest import ADMIN_ID, OTHER_PATIENT_ID, PATIENT_ID, auth_headers, booking_payload
from labbook.domain.roles.gate import is_admin
from labbook.models import Profile, UserRole
from provision_admin import provision_admin


class TestRoleGate:
    """is_admin must fail closed."""

    def test_no_role_row_is_not_admin(self, db):
        assert is_admin(db, PATIENT_ID) is False

    def test_admin_row_is_admin(self, db):
        db.add(UserRole(user_id=PATIENT_ID, role="admin"))
        db.commit()
        assert is_admin(db, PATIENT_ID) is True

    def test_moderator_is_not_admin(self, db):
        db.add(UserRole(user_id=PATIENT_ID, role="moderator"))
        db.commit()
        assert is_admin(db, PATIENT_ID) is False

    def test_empty_user_id_is_not_admin(self, db):
        assert is_admin(db, "") is False

    def test_backend_failure_denies(self):
        broken = MagicMock()
        broken.query.side_effect = RuntimeError("connection reset")

        assert is_admin(broken, PATIENT_ID) is False
        broken.rollback.assert_called_once()

    def test_failed_rollback_still_denies(self):
        broken = MagicMock()
        broken.query.side_effect = RuntimeError("connection reset")
        broken.rollback.side_effect = RuntimeError("still down")

        assert is_admin(broken, PATIENT_ID) is False


class TestRoleStatusEndpoint:
    def test_patient_is_not_admin(self, client, patient_headers):
        response = client.get("/roles/me", headers=patient_headers)
        assert response.json() == {"isAdmin": False}

    def test_admin_is_admin(self, client, admin_headers):
        response = client.get("/roles/me", headers=admin_headers)
        assert response.json() == {"isAdmin": True}


class TestAdminUsers:
    """Tests for /admin/users."""

    def test_list_users_with_roles_and_booking_counts(self, client, admin_headers, patient_headers, cbc_test):
        client.post("/bookings", json=booking_payload(cbc_test.id), headers=patient_headers)

        response = client.get("/admin/users", headers=admin_headers)

        assert response.status_code == 200
        users = {u["id"]: u for u in response.json()}
        assert users[ADMIN_ID]["role"] == "admin"
        assert users[ADMIN_ID]["bookingsCount"] == 0
        assert users[PATIENT_ID]["role"] is None
        assert users[PATIENT_ID]["bookingsCount"] == 1
        assert users[PATIENT_ID]["email"] == "asha@example.com"

    def test_patient_cannot_list_users(self, client, patient_headers):
        assert client.get("/admin/users", headers=patient_headers).status_code == 403

    def test_assign_and_replace_role(self, client, admin_headers, patient_headers, db):
        client.get("/roles/me", headers=patient_headers)  # creates the profile

        response = client.put(f"/admin/users/{PATIENT_ID}/role", json={"role": "moderator"}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["role"] == "moderator"

        client.put(f"/admin/users/{PATIENT_ID}/role", json={"role": "admin"}, headers=admin_headers)
        assert db.query(UserRole).filter(UserRole.user_id == PATIENT_ID).count() == 1
        assert client.get("/roles/me", headers=patient_headers).json() == {"isAdmin": True}

    def test_assign_unknown_role_rejected(self, client, admin_headers, patient_headers):
        client.get("/roles/me", headers=patient_headers)
        response = client.put(f"/admin/users/{PATIENT_ID}/role", json={"role": "owner"}, headers=admin_headers)
        assert response.status_code == 422

    def test_assign_role_to_unknown_user(self, client, admin_headers):
        response = client.put("/admin/users/ghost/role", json={"role": "user"}, headers=admin_headers)
        assert response.status_code == 404

    def test_remove_role(self, client, admin_headers, db):
        db.add(Profile(id=OTHER_PATIENT_ID, email="ravi@example.com"))
        db.add(UserRole(user_id=OTHER_PATIENT_ID, role="admin"))
        db.commit()

        response = client.delete(f"/admin/users/{OTHER_PATIENT_ID}/role", headers=admin_headers)

        assert response.status_code == 200
        headers = auth_headers(OTHER_PATIENT_ID, "ravi@example.com")
        assert client.get("/roles/me", headers=headers).json() == {"isAdmin": False}

    def test_admin_cannot_remove_own_role(self, client, admin_headers):
        response = client.delete(f"/admin/users/{ADMIN_ID}/role", headers=admin_headers)
        assert response.status_code == 400
        assert client.get("/roles/me", headers=admin_headers).json() == {"isAdmin": True}

    def test_admin_cannot_demote_self(self, client, admin_headers):
        response = client.put(f"/admin/users/{ADMIN_ID}/role", json={"role": "user"}, headers=admin_headers)
        assert response.status_code == 400

    def test_patient_cannot_assign_roles(self, client, patient_headers):
        response = client.put(f"/admin/users/{PATIENT_ID}/role", json={"role": "admin"}, headers=patient_headers)
        assert response.status_code == 403


class TestProvisionAdmin:
    def test_grants_admin(self, db):
        assert provision_admin(PATIENT_ID, "asha@example.com") is True
        assert is_admin(db, PATIENT_ID) is True
        assert db.query(Profile).filter(Profile.id == PATIENT_ID).one().email == "asha@example.com"

    def test_second_run_is_noop(self, db):
        provision_admin(PATIENT_ID)
        assert provision_admin(PATIENT_ID) is False
        assert db.query(UserRole).filter(UserRole.user_id == PATIENT_ID).count() == 1
