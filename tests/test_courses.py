"""Tests for course management, tutor assignment and syllabus structure."""

import pytest

from conftest import auth_headers
from tutorhub.model.enums import UserRole


def course_payload(category_id: int, **overrides) -> dict:
    payload = {
        "title": "Physics 101",
        "short_description": "Forces and motion",
        "category_id": category_id,
    }
    payload.update(overrides)
    return payload


class TestCreateCourse:
    """Tests for POST /api/courses."""

    def test_create_defaults(self, client, admin_headers, category):
        response = client.post("/api/courses", json=course_payload(category["id"]), headers=admin_headers)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["slug"] == "physics-101"
        assert data["status"] == "DRAFT"
        assert data["category"]["id"] == category["id"]
        assert data["tutors"] == []
        assert data["enrollment_count"] == 0
        assert data["phase_count"] == 0

    def test_slug_collision(self, client, admin_headers, category):
        client.post("/api/courses", json=course_payload(category["id"]), headers=admin_headers)
        second = client.post("/api/courses", json=course_payload(category["id"]), headers=admin_headers)
        assert second.json()["data"]["slug"] == "physics-101-1"

    def test_unknown_category(self, client, admin_headers):
        response = client.post("/api/courses", json=course_payload(999), headers=admin_headers)
        assert response.status_code == 400

    def test_unknown_curriculum(self, client, admin_headers, category):
        response = client.post(
            "/api/courses", json=course_payload(category["id"], curriculum_id=42), headers=admin_headers
        )
        assert response.status_code == 400

    def test_missing_required_fields(self, client, admin_headers):
        response = client.post("/api/courses", json={"title": "No category"}, headers=admin_headers)
        assert response.status_code == 400

    def test_prices_round_to_cents(self, client, admin_headers, category):
        response = client.post(
            "/api/courses",
            json=course_payload(category["id"], one_to_one_price=49.999, group_price=20),
            headers=admin_headers,
        )
        data = response.json()["data"]
        assert data["one_to_one_price"] == 50.0
        assert data["group_price"] == 20.0

    def test_tutor_cannot_create(self, client, tutor_headers, category):
        response = client.post("/api/courses", json=course_payload(category["id"]), headers=tutor_headers)
        assert response.status_code == 403


class TestListCourses:
    """Tests for GET /api/courses."""

    def test_search_status_and_category(self, client, admin_headers, category):
        other = client.post("/api/categories", json={"name": "Languages"}, headers=admin_headers).json()["data"]
        client.post("/api/courses", json=course_payload(category["id"], status="PUBLISHED"), headers=admin_headers)
        client.post(
            "/api/courses", json=course_payload(other["id"], title="Spanish A1"), headers=admin_headers
        )

        published = client.get("/api/courses", params={"status": "published"}, headers=admin_headers).json()
        assert [c["title"] for c in published["data"]["items"]] == ["Physics 101"]

        everything = client.get("/api/courses", params={"status": "all"}, headers=admin_headers).json()
        assert everything["data"]["pagination"]["total"] == 2

        languages = client.get("/api/courses", params={"category": "languages"}, headers=admin_headers).json()
        assert [c["title"] for c in languages["data"]["items"]] == ["Spanish A1"]

        found = client.get("/api/courses", params={"search": "span"}, headers=admin_headers).json()
        assert found["data"]["pagination"]["total"] == 1

    def test_tutor_sees_only_assigned(self, client, admin_headers, category, assigned_course, tutor_headers):
        client.post("/api/courses", json=course_payload(category["id"]), headers=admin_headers)

        response = client.get("/api/courses", headers=tutor_headers)
        assert [c["id"] for c in response.json()["data"]["items"]] == [assigned_course["id"]]

    def test_enrollment_count(self, client, admin_headers, course, active_enrollment):
        response = client.get("/api/courses", headers=admin_headers)
        assert response.json()["data"]["items"][0]["enrollment_count"] == 1


class TestUpdateCourse:
    """Tests for GET/PUT/DELETE /api/courses/{id}."""

    def test_get_missing(self, client, admin_headers):
        assert client.get("/api/courses/321", headers=admin_headers).status_code == 404

    def test_title_change_regenerates_slug(self, client, admin_headers, course):
        response = client.put(
            f"/api/courses/{course['id']}", json={"title": "Algebra II"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["slug"] == "algebra-ii"

    def test_partial_update_keeps_other_fields(self, client, admin_headers, course):
        response = client.put(
            f"/api/courses/{course['id']}", json={"long_description": "More"}, headers=admin_headers
        )
        data = response.json()["data"]
        assert data["slug"] == course["slug"]
        assert data["long_description"] == "More"
        assert data["group_price"] == 200

    def test_null_title_or_category_rejected(self, client, admin_headers, course):
        for payload in ({"title": None}, {"category_id": None}, {"status": None}):
            response = client.put(f"/api/courses/{course['id']}", json=payload, headers=admin_headers)
            assert response.status_code == 400, payload

    def test_null_clears_optional_description(self, client, admin_headers, course):
        client.put(f"/api/courses/{course['id']}", json={"long_description": "More"}, headers=admin_headers)
        response = client.put(
            f"/api/courses/{course['id']}", json={"long_description": None}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["long_description"] is None

    def test_delete_archives(self, client, admin_headers, course):
        response = client.delete(f"/api/courses/{course['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "ARCHIVED"


class TestCourseTutors:
    """Tests for /api/courses/{id}/tutors."""

    def test_replace_tutor_set(self, client, db, admin_headers, course, tutor):
        second = db.user(UserRole.TUTOR, name="Second Tutor")
        response = client.put(
            f"/api/courses/{course['id']}/tutors",
            json={"tutor_ids": [tutor.id, second.id], "primary_tutor_id": second.id},
            headers=admin_headers,
        )
        assert response.status_code == 200
        tutors = response.json()["data"]
        assert [t["tutor_id"] for t in tutors] == [second.id, tutor.id]
        assert tutors[0]["is_primary"] is True

        replaced = client.put(
            f"/api/courses/{course['id']}/tutors", json={"tutor_ids": [tutor.id]}, headers=admin_headers
        )
        assert [t["tutor_id"] for t in replaced.json()["data"]] == [tutor.id]

        listed = client.get(f"/api/courses/{course['id']}/tutors", headers=admin_headers).json()["data"]
        assert [t["tutor_id"] for t in listed] == [tutor.id]

    def test_primary_must_be_selected(self, client, db, admin_headers, course, tutor):
        other = db.user(UserRole.TUTOR)
        response = client.put(
            f"/api/courses/{course['id']}/tutors",
            json={"tutor_ids": [tutor.id], "primary_tutor_id": other.id},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_non_tutor_rejected(self, client, admin_headers, course, student):
        response = client.put(
            f"/api/courses/{course['id']}/tutors", json={"tutor_ids": [student.id]}, headers=admin_headers
        )
        assert response.status_code == 400


class TestBulkCourses:
    """Tests for POST /api/courses/bulk."""

    def test_publish_and_archive(self, client, admin_headers, category):
        first = client.post("/api/courses", json=course_payload(category["id"]), headers=admin_headers)
        second = client.post(
            "/api/courses", json=course_payload(category["id"], title="Chemistry 101"), headers=admin_headers
        )
        ids = [first.json()["data"]["id"], second.json()["data"]["id"]]

        published = client.post(
            "/api/courses/bulk", json={"action": "publish", "course_ids": ids + ids[:1]}, headers=admin_headers
        )
        assert published.status_code == 200
        assert published.json()["data"] == {"count": 2}
        assert published.json()["message"] == "Bulk publish completed successfully"
        for course_id in ids:
            detail = client.get(f"/api/courses/{course_id}", headers=admin_headers).json()["data"]
            assert detail["status"] == "PUBLISHED"

        archived = client.post(
            "/api/courses/bulk", json={"action": "archive", "course_ids": ids[:1]}, headers=admin_headers
        )
        assert archived.json()["data"] == {"count": 1}
        detail = client.get(f"/api/courses/{ids[0]}", headers=admin_headers).json()["data"]
        assert detail["status"] == "ARCHIVED"

    def test_delete_with_active_enrollment_rejected(self, client, admin_headers, active_enrollment):
        response = client.post(
            "/api/courses/bulk",
            json={"action": "delete", "course_ids": [active_enrollment["course_id"]]},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert "archive instead" in response.json()["message"]

        detail = client.get(f"/api/courses/{active_enrollment['course_id']}", headers=admin_headers).json()["data"]
        assert detail["status"] == "PUBLISHED"

    def test_delete_archives_course(self, client, admin_headers, course):
        response = client.post(
            "/api/courses/bulk", json={"action": "delete", "course_ids": [course["id"]]}, headers=admin_headers
        )
        assert response.status_code == 200
        detail = client.get(f"/api/courses/{course['id']}", headers=admin_headers).json()["data"]
        assert detail["status"] == "ARCHIVED"

    def test_assign_tutors(self, client, db, admin_headers, category, assigned_course, tutor):
        other = client.post(
            "/api/courses", json=course_payload(category["id"]), headers=admin_headers
        ).json()["data"]
        second = db.user(UserRole.TUTOR, name="Second Tutor")

        response = client.post(
            "/api/courses/bulk",
            json={
                "action": "assign-tutors",
                "course_ids": [assigned_course["id"], other["id"]],
                "tutor_ids": [second.id],
                "primary_tutor_id": second.id,
            },
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"] == {"count": 2}

        for course_id in (assigned_course["id"], other["id"]):
            tutors = client.get(f"/api/courses/{course_id}/tutors", headers=admin_headers).json()["data"]
            assert [(t["tutor_id"], t["is_primary"]) for t in tutors] == [(second.id, True)]

    def test_assign_tutors_requires_tutors(self, client, admin_headers, course):
        response = client.post(
            "/api/courses/bulk", json={"action": "assign-tutors", "course_ids": [course["id"]]}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Tutor IDs are required for assign-tutors action"

    def test_unknown_course(self, client, admin_headers, course):
        response = client.post(
            "/api/courses/bulk", json={"action": "publish", "course_ids": [course["id"], 999]}, headers=admin_headers
        )
        assert response.status_code == 404

    @pytest.mark.parametrize("body", [
        {"action": "publish", "course_ids": []},
        {"action": "rename", "course_ids": [1]},
    ])
    def test_invalid_request(self, client, admin_headers, body):
        assert client.post("/api/courses/bulk", json=body, headers=admin_headers).status_code == 400

    def test_tutor_forbidden(self, client, tutor_headers, course):
        response = client.post(
            "/api/courses/bulk", json={"action": "publish", "course_ids": [course["id"]]}, headers=tutor_headers
        )
        assert response.status_code == 403


class TestSyllabusStructure:
    """Tests for /api/courses/{id}/syllabus."""

    @pytest.fixture
    def phase(self, client, admin_headers, course):
        response = client.post(
            f"/api/courses/{course['id']}/syllabus/phases", json={"name": "Foundations"}, headers=admin_headers
        )
        assert response.status_code == 201
        return response.json()["data"]

    def test_phase_order_defaults_to_next(self, client, admin_headers, course, phase):
        assert phase["order"] == 0
        second = client.post(
            f"/api/courses/{course['id']}/syllabus/phases", json={"name": "Practice"}, headers=admin_headers
        )
        assert second.json()["data"]["order"] == 1

    def test_items_order_within_phase(self, client, admin_headers, course, phase):
        url = f"/api/courses/{course['id']}/syllabus/items"
        first = client.post(url, json={"phase_id": phase["id"], "title": "Variables"}, headers=admin_headers)
        second = client.post(url, json={"phase_id": phase["id"], "title": "Equations"}, headers=admin_headers)
        assert first.status_code == 201
        assert [first.json()["data"]["order"], second.json()["data"]["order"]] == [0, 1]

        syllabus = client.get(f"/api/courses/{course['id']}/syllabus/phases", headers=admin_headers).json()["data"]
        assert [p["name"] for p in syllabus["phases"]] == ["Foundations"]
        assert [i["title"] for i in syllabus["phases"][0]["items"]] == ["Variables", "Equations"]
        assert len(syllabus["items"]) == 2

    def test_item_phase_must_belong_to_course(self, client, admin_headers, category, course, phase):
        other = client.post(
            "/api/courses", json=course_payload(category["id"]), headers=admin_headers
        ).json()["data"]
        response = client.post(
            f"/api/courses/{other['id']}/syllabus/items",
            json={"phase_id": phase["id"], "title": "Stray"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_delete_phase_cascades_items(self, client, admin_headers, course, phase):
        client.post(
            f"/api/courses/{course['id']}/syllabus/items",
            json={"phase_id": phase["id"], "title": "Variables"},
            headers=admin_headers,
        )
        response = client.delete(f"/api/courses/{course['id']}/syllabus/phases/{phase['id']}", headers=admin_headers)
        assert response.status_code == 200

        syllabus = client.get(f"/api/courses/{course['id']}/syllabus/phases", headers=admin_headers).json()["data"]
        assert syllabus == {"phases": [], "items": []}

    def test_delete_phase_of_other_course(self, client, admin_headers, category, phase):
        other = client.post(
            "/api/courses", json=course_payload(category["id"]), headers=admin_headers
        ).json()["data"]
        response = client.delete(f"/api/courses/{other['id']}/syllabus/phases/{phase['id']}", headers=admin_headers)
        assert response.status_code == 404

    def test_syllabus_of_missing_course(self, client, admin_headers):
        assert client.get("/api/courses/999/syllabus/phases", headers=admin_headers).status_code == 404

    def test_phase_count_in_details(self, client, admin_headers, course, phase):
        detail = client.get(f"/api/courses/{course['id']}", headers=admin_headers).json()["data"]
        assert detail["phase_count"] == 1

    def test_tutor_cannot_edit_structure(self, client, tutor, course):
        response = client.post(
            f"/api/courses/{course['id']}/syllabus/phases", json={"name": "X"}, headers=auth_headers(tutor)
        )
        assert response.status_code == 403
