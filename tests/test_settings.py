"""Tests for the institution settings document."""

import pytest

from conftest import enroll


@pytest.fixture
def settings_payload():
    return {
        "institution_name": "Bright Minds",
        "contact_email": "office@brightminds.example.com",
        "primary_currency": "EUR",
        "country": "Ireland",
        "default_timezone": "Europe/Dublin",
        "tax_rate": 0.23,
        "age_groups": ["11-14"],
        "brand_primary_color": "#336699",
    }


class TestSettings:
    """Tests for /api/settings."""

    def test_defaults_created_on_first_read(self, client, student_headers):
        response = client.get("/api/settings", headers=student_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["primary_currency"] == "GBP"
        assert data["default_timezone"] == "Europe/London"
        assert data["tax_rate"] == 0.18
        assert data["is_active"] is True

        again = client.get("/api/settings", headers=student_headers).json()["data"]
        assert again["id"] == data["id"]

    def test_update_replaces_document(self, client, admin_headers, settings_payload):
        response = client.put("/api/settings", json=settings_payload, headers=admin_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["institution_name"] == "Bright Minds"
        assert data["tax_rate"] == 0.23
        assert data["max_group_size"] == 10

    def test_new_enrollments_use_updated_settings(self, client, admin_headers, settings_payload, student, course):
        client.put("/api/settings", json=settings_payload, headers=admin_headers)
        data = enroll(client, admin_headers, student.id, course["id"])
        assert data["currency"] == "EUR"
        assert data["timezone"] == "Europe/Dublin"
        assert data["final_price"] == 123

    def test_tax_rate_above_one(self, client, admin_headers, settings_payload):
        response = client.put("/api/settings", json={**settings_payload, "tax_rate": 1.5}, headers=admin_headers)
        assert response.status_code == 400

    def test_group_size_range(self, client, admin_headers, settings_payload):
        response = client.put(
            "/api/settings",
            json={**settings_payload, "min_group_size": 12, "max_group_size": 4},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_update_requires_admin(self, client, tutor_headers, settings_payload):
        assert client.put("/api/settings", json=settings_payload, headers=tutor_headers).status_code == 403
