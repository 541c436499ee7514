"""Tests for two-sided syllabus confirmation and progress views."""

import pytest

from conftest import auth_headers
from tutorhub.model.enums import UserRole


@pytest.fixture
def syllabus(client, admin_headers, category, active_enrollment):
    """
    One phase with two items in the enrolled course.

    A throwaway phase and items in another course come first so that phase
    and item ids of the enrolled course never coincide.
    """
    course_id = active_enrollment["course_id"]
    other = client.post(
        "/api/courses",
        json={"title": "Other", "short_description": "Other", "category_id": category["id"]},
        headers=admin_headers,
    ).json()["data"]
    other_phase = client.post(
        f"/api/courses/{other['id']}/syllabus/phases", json={"name": "Elsewhere"}, headers=admin_headers
    ).json()["data"]
    for title in ("Elsewhere 1", "Elsewhere 2"):
        client.post(
            f"/api/courses/{other['id']}/syllabus/items",
            json={"phase_id": other_phase["id"], "title": title},
            headers=admin_headers,
        )

    phase = client.post(
        f"/api/courses/{course_id}/syllabus/phases", json={"name": "Linear equations"}, headers=admin_headers
    ).json()["data"]
    items = [
        client.post(
            f"/api/courses/{course_id}/syllabus/items",
            json={"phase_id": phase["id"], "title": title},
            headers=admin_headers,
        ).json()["data"]
        for title in ("One unknown", "Two unknowns")
    ]
    return {"course_id": course_id, "phase": phase, "items": items}


def student_confirm(client, headers, course_id, target_id):
    return client.post(f"/api/student/courses/{course_id}/syllabus/{target_id}/confirm", headers=headers)


def tutor_confirm(client, headers, course_id, student_id, target_id):
    return client.post(
        f"/api/tutor/courses/{course_id}/students/{student_id}/syllabus/{target_id}/confirm", headers=headers
    )


class TestItemConfirmation:
    """Confirming items rolls up into the phase."""

    def test_student_side_completes_after_every_item(self, client, student_headers, syllabus):
        first, second = syllabus["items"]

        partial = student_confirm(client, student_headers, syllabus["course_id"], first["id"]).json()["data"]
        assert partial["target"] == "item"
        assert partial["item_id"] == first["id"]
        assert partial["phase_id"] == syllabus["phase"]["id"]
        assert partial["completed_by_student"] is False

        done = student_confirm(client, student_headers, syllabus["course_id"], second["id"]).json()["data"]
        assert done["completed_by_student"] is True
        assert done["completed_by_tutor"] is False
        assert done["completed_at"] is None

    def test_both_sides_complete_phase(self, client, student, student_headers, tutor_headers, syllabus):
        course_id = syllabus["course_id"]
        for item in syllabus["items"]:
            student_confirm(client, student_headers, course_id, item["id"])
            result = tutor_confirm(client, tutor_headers, course_id, student.id, item["id"])
        data = result.json()["data"]
        assert data["completed_by_student"] is True
        assert data["completed_by_tutor"] is True
        assert data["completed_at"] is not None

        progress = client.get(
            f"/api/student/courses/{course_id}/syllabus/progress", headers=student_headers
        ).json()["data"]
        assert len(progress) == 1
        assert progress[0]["completed_by_student"] is True
        assert progress[0]["completed_by_tutor"] is True
        assert [i["completed_by_tutor"] for i in progress[0]["items"]] == [True, True]

    def test_tutor_keeps_phase_confirmation(self, client, student, tutor_headers, syllabus):
        course_id = syllabus["course_id"]
        phase_level = tutor_confirm(client, tutor_headers, course_id, student.id, syllabus["phase"]["id"])
        assert phase_level.json()["data"]["target"] == "phase"
        assert phase_level.json()["data"]["completed_by_tutor"] is True

        item_level = tutor_confirm(client, tutor_headers, course_id, student.id, syllabus["items"][0]["id"])
        assert item_level.json()["data"]["completed_by_tutor"] is True

    def test_client_supplied_completion_time(self, client, student_headers, syllabus):
        course_id = syllabus["course_id"]
        first, second = syllabus["items"]
        response = client.post(
            f"/api/student/courses/{course_id}/syllabus/{first['id']}/confirm",
            json={"completed_at": "2024-02-01T10:00:00+01:00"},
            headers=student_headers,
        )
        assert response.status_code == 200
        student_confirm(client, student_headers, course_id, second["id"])

        progress = client.get(
            f"/api/student/courses/{course_id}/syllabus/progress", headers=student_headers
        ).json()["data"]
        items = progress[0]["items"]
        assert items[0]["completed_at"] == "2024-02-01T09:00:00"
        assert items[1]["completed_at"] is not None
        assert items[1]["completed_at"] != items[0]["completed_at"]

    def test_unknown_target(self, client, student_headers, syllabus):
        response = student_confirm(client, student_headers, syllabus["course_id"], 999)
        assert response.status_code == 404


class TestPhaseConfirmation:
    """Phases without items carry their own confirmation."""

    def test_empty_phase_uses_stored_flags(self, client, admin_headers, student_headers, active_enrollment):
        course_id = active_enrollment["course_id"]
        phase = client.post(
            f"/api/courses/{course_id}/syllabus/phases", json={"name": "Orientation"}, headers=admin_headers
        ).json()["data"]

        result = student_confirm(client, student_headers, course_id, phase["id"]).json()["data"]
        assert result["target"] == "phase"
        assert result["completed_by_student"] is True

        progress = client.get(
            f"/api/student/courses/{course_id}/syllabus/progress", headers=student_headers
        ).json()["data"]
        assert progress[0]["completed_by_student"] is True
        assert progress[0]["completed_by_tutor"] is False
        assert progress[0]["items"] == []


class TestAccess:
    """Who may confirm and view progress."""

    def test_unenrolled_student(self, client, db, syllabus):
        outsider = auth_headers(db.user(UserRole.STUDENT))
        course_id = syllabus["course_id"]
        assert student_confirm(client, outsider, course_id, syllabus["phase"]["id"]).status_code == 403
        assert client.get(
            f"/api/student/courses/{course_id}/syllabus/progress", headers=outsider
        ).status_code == 403

    def test_unassigned_tutor(self, client, db, student, syllabus):
        outsider = auth_headers(db.user(UserRole.TUTOR))
        response = tutor_confirm(client, outsider, syllabus["course_id"], student.id, syllabus["phase"]["id"])
        assert response.status_code == 403

    def test_tutor_for_unenrolled_student(self, client, db, tutor_headers, syllabus):
        stranger = db.user(UserRole.STUDENT)
        response = tutor_confirm(client, tutor_headers, syllabus["course_id"], stranger.id, syllabus["phase"]["id"])
        assert response.status_code == 403


class TestStudentProgressReport:
    """Tests for the tutor's per-student progress report."""

    def test_report_combines_syllabus_attendance_and_work(
            self, client, student, student_headers, tutor_headers, syllabus
    ):
        course_id = syllabus["course_id"]
        student_confirm(client, student_headers, course_id, syllabus["items"][0]["id"])
        client.post(
            "/api/tutor/attendance/bulk",
            json={"date": "2024-03-05", "course_id": course_id,
                  "attendance": [{"student_id": student.id, "status": "present"}]},
            headers=tutor_headers,
        )
        client.post(
            "/api/tutor/attendance/bulk",
            json={"date": "2024-03-12", "course_id": course_id,
                  "attendance": [{"student_id": student.id, "status": "absent"}]},
            headers=tutor_headers,
        )
        client.post(
            "/api/assignments",
            json={"title": "Homework", "course_id": course_id, "target_type": "COURSES",
                  "target_course_ids": [course_id]},
            headers=tutor_headers,
        )

        report = client.get(
            f"/api/tutor/courses/{course_id}/students/{student.id}/progress", headers=tutor_headers
        ).json()["data"]
        assert report["student"]["id"] == student.id
        assert report["attendance"] == {"total": 2, "present": 1, "absent": 1, "late": 0, "excused": 0, "rate": 50}
        assert [i["completed_by_student"] for i in report["syllabus"][0]["items"]] == [True, False]
        assert [s["status"] for s in report["submissions"]] == ["PENDING"]
