"""Tests for bulk attendance, the tutor's sessions, calendar and stats."""

import pytest

from conftest import auth_headers
from tutorhub.model import ClassSession
from tutorhub.model.enums import SessionStatus, SessionType, UserRole
from tutorhub.utils.date_utils import utcnow

DAY = "2024-03-05"


@pytest.fixture
def mark(client, tutor_headers, active_enrollment):
    """Post bulk attendance for the enrolled course on DAY."""

    def post(**body):
        payload = {"date": DAY, "course_id": active_enrollment["course_id"], **body}
        return client.post("/api/tutor/attendance/bulk", json=payload, headers=tutor_headers)

    return post


def view_day(client, headers, course_id, day=DAY):
    response = client.get(
        "/api/tutor/attendance/bulk", params={"course_id": course_id, "date": day}, headers=headers
    )
    assert response.status_code == 200
    return response.json()["data"]


class TestBulkAttendance:
    """Tests for /api/tutor/attendance/bulk."""

    def test_mark_creates_completed_session(self, client, mark, student, tutor_headers, active_enrollment):
        response = mark(
            attendance=[{"student_id": student.id, "status": "present", "activity": "Worksheet 3", "remarks": "Good"}]
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Attendance marked successfully"
        assert body["data"]["session_status"] == "COMPLETED"
        assert body["data"]["records"] == 1

        day = view_day(client, tutor_headers, active_enrollment["course_id"])
        assert day["session"]["title"] == "Class Session"
        assert day["session"]["scheduled_at"] == "2024-03-05T09:00:00"
        assert day["session"]["ended_at"] is not None
        assert day["session"]["attendance_count"] == 1
        record = day["records"][0]
        assert record["status"] == "present"
        assert record["student_name"] == "Sam Student"
        assert record["activity"] == "Worksheet 3"
        assert record["remarks"] == "Good"

    def test_resubmitting_replaces_records(self, client, db, mark, student, tutor_headers, active_enrollment):
        classmate = db.user(UserRole.STUDENT)
        first = mark(
            attendance=[
                {"student_id": student.id, "status": "present", "activity": "Reading"},
                {"student_id": classmate.id, "status": "present"},
            ]
        )
        second = mark(attendance=[{"student_id": student.id, "status": "excused"}])
        assert second.json()["data"]["session_id"] == first.json()["data"]["session_id"]

        day = view_day(client, tutor_headers, active_enrollment["course_id"])
        assert [(r["student_id"], r["status"], r["activity"]) for r in day["records"]] == [
            (student.id, "excused", None)
        ]

    def test_absence_reason_recorded(self, client, mark, student, tutor_headers, active_enrollment):
        mark(attendance=[{"student_id": student.id, "status": "absent", "absence_reason": "Ill"}])
        mark(attendance=[{"student_id": student.id, "status": "ABSENT", "absence_reason": "Dentist"}])

        day = view_day(client, tutor_headers, active_enrollment["course_id"])
        assert len(day["records"]) == 1
        assert day["records"][0]["status"] == "absent"
        assert day["records"][0]["absence_reason"] == "Dentist"
        assert day["records"][0]["activity"] is None

    def test_cancel_then_reactivate(self, client, mark, student, tutor_headers, active_enrollment):
        cancelled = mark(cancel_reason="Tutor unwell")
        assert cancelled.json()["message"] == "Class cancelled successfully"
        assert cancelled.json()["data"]["records"] == 0

        day = view_day(client, tutor_headers, active_enrollment["course_id"])
        assert day["session"]["title"] == "Cancelled Session"
        assert day["session"]["status"] == "CANCELLED"
        assert day["session"]["notes"] == "Tutor unwell"

        mark(attendance=[{"student_id": student.id, "status": "late"}])
        day = view_day(client, tutor_headers, active_enrollment["course_id"])
        assert day["session"]["status"] == "COMPLETED"
        assert day["session"]["id"] == cancelled.json()["data"]["session_id"]
        assert day["session"]["notes"] == (
            "Session reactivated from cancelled state. Original cancellation: Tutor unwell"
        )

    def test_holiday(self, client, mark, tutor_headers, active_enrollment):
        response = mark(holiday_reason="Bank holiday")
        assert response.json()["message"] == "Day marked as holiday successfully"

        day = view_day(client, tutor_headers, active_enrollment["course_id"])
        assert day["session"]["title"] == "Holiday"
        assert day["session"]["status"] == "CANCELLED"

    def test_attendance_required(self, mark):
        assert mark().status_code == 400

    def test_student_listed_twice(self, client, mark, student, tutor_headers, active_enrollment):
        response = mark(
            attendance=[
                {"student_id": student.id, "status": "present"},
                {"student_id": student.id, "status": "absent"},
            ]
        )
        assert response.status_code == 400
        assert f"Student {student.id} appears more than once" in response.json()["message"]
        assert view_day(client, tutor_headers, active_enrollment["course_id"]) == {"session": None, "records": []}

    def test_empty_day(self, client, tutor_headers, assigned_course):
        assert view_day(client, tutor_headers, assigned_course["id"]) == {"session": None, "records": []}

    def test_unassigned_tutor(self, client, db, course):
        outsider = auth_headers(db.user(UserRole.TUTOR))
        response = client.post(
            "/api/tutor/attendance/bulk",
            json={"date": DAY, "course_id": course["id"], "cancel_reason": "x"},
            headers=outsider,
        )
        assert response.status_code == 403

    def test_unknown_course(self, client, tutor_headers):
        response = client.post(
            "/api/tutor/attendance/bulk", json={"date": DAY, "course_id": 999, "attendance": []}, headers=tutor_headers
        )
        assert response.status_code == 404

    def test_students_forbidden(self, client, student_headers, course):
        response = client.get(
            "/api/tutor/attendance/bulk", params={"course_id": course["id"], "date": DAY}, headers=student_headers
        )
        assert response.status_code == 403


class TestTutorPortal:
    """Tests for the tutor's courses, students, sessions, calendar and stats."""

    def test_courses_flag_primary(self, client, tutor_headers, assigned_course):
        courses = client.get("/api/tutor/courses", headers=tutor_headers).json()["data"]
        assert [c["id"] for c in courses] == [assigned_course["id"]]
        assert courses[0]["is_primary"] is True

    def test_unknown_status_filter_is_ignored(self, client, tutor_headers, assigned_course):
        response = client.get("/api/tutor/courses", params={"status": "sleeping"}, headers=tutor_headers)
        assert len(response.json()["data"]) == 1

    def test_course_students(self, client, tutor_headers, active_enrollment, student):
        students = client.get(
            f"/api/tutor/courses/{active_enrollment['course_id']}/students", headers=tutor_headers
        ).json()["data"]
        assert [s["id"] for s in students] == [student.id]

    def test_sessions_and_calendar(self, client, mark, student, tutor_headers, active_enrollment):
        mark(attendance=[{"student_id": student.id, "status": "present"}])

        sessions = client.get(
            f"/api/tutor/courses/{active_enrollment['course_id']}/sessions", headers=tutor_headers
        ).json()["data"]
        assert [s["attendance_count"] for s in sessions] == [1]

        events = client.get("/api/tutor/sessions/calendar", headers=tutor_headers).json()["data"]
        assert len(events) == 1
        assert events[0]["start"] == "2024-03-05T09:00:00"
        assert events[0]["end"] == "2024-03-05T10:00:00"
        assert events[0]["resource"]["status"] == "completed"
        assert events[0]["resource"]["attendance_rate"] == 100

        outside = client.get(
            "/api/tutor/sessions/calendar",
            params={"start": "2024-04-01T00:00:00", "end": "2024-04-30T00:00:00"},
            headers=tutor_headers,
        ).json()["data"]
        assert outside == []

        half_open = client.get(
            "/api/tutor/sessions/calendar", params={"start": "2024-04-01T00:00:00"}, headers=tutor_headers
        ).json()["data"]
        assert len(half_open) == 1

    def test_stats(self, client, db, mark, student, tutor, tutor_headers, active_enrollment):
        db.add(
            ClassSession(
                course_id=active_enrollment["course_id"],
                tutor_id=tutor.id,
                title="Upcoming",
                scheduled_at=utcnow(),
                duration=60,
                type=SessionType.GROUP,
                status=SessionStatus.SCHEDULED,
            )
        )
        mark(attendance=[{"student_id": student.id, "status": "present"}])

        stats = client.get("/api/tutor/stats", headers=tutor_headers).json()["data"]
        assert stats == {
            "total_courses": 1,
            "upcoming_sessions_this_week": 1,
            "completed_sessions_this_month": 1,
        }


class TestSessionAttendance:
    """Tests for /api/tutor/courses/{id}/sessions/{id}/attendance."""

    @pytest.fixture
    def session_url(self, client, mark, tutor_headers, active_enrollment):
        mark(attendance=[])
        course_id = active_enrollment["course_id"]
        sessions = client.get(f"/api/tutor/courses/{course_id}/sessions", headers=tutor_headers).json()["data"]
        return f"/api/tutor/courses/{course_id}/sessions/{sessions[0]['id']}/attendance"

    def test_view_lists_active_students(self, client, session_url, student, tutor_headers):
        response = client.get(session_url, headers=tutor_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["session"]["status"] == "COMPLETED"
        assert [s["id"] for s in data["students"]] == [student.id]
        assert data["students"][0]["current_attendance"] is None

    def test_mark_then_update(self, client, session_url, student, tutor, tutor_headers):
        marked = client.post(
            session_url, json={"student_id": student.id, "status": "present"}, headers=tutor_headers
        )
        assert marked.status_code == 200
        assert marked.json()["message"] == "Attendance marked successfully"
        record = marked.json()["data"]
        assert record["status"] == "PRESENT"
        assert record["marked_by"] == tutor.id
        assert record["marked_at"] is not None

        updated = client.post(
            session_url,
            json={"student_id": student.id, "status": "LATE", "notes": "Bus delay"},
            headers=tutor_headers,
        ).json()["data"]
        assert updated["id"] == record["id"]

        students = client.get(session_url, headers=tutor_headers).json()["data"]["students"]
        assert students[0]["current_attendance"]["status"] == "LATE"
        assert students[0]["current_attendance"]["notes"] == "Bus delay"

    def test_student_without_active_enrollment(self, client, db, session_url, tutor_headers):
        stranger = db.user(UserRole.STUDENT)
        response = client.post(
            session_url, json={"student_id": stranger.id, "status": "PRESENT"}, headers=tutor_headers
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Student not enrolled in this course"

    def test_session_of_another_course(self, client, admin_headers, category, tutor, session_url, tutor_headers):
        other = client.post(
            "/api/courses", json={"title": "Geometry", "short_description": "Shapes", "category_id": category["id"]},
            headers=admin_headers,
        ).json()["data"]
        client.put(f"/api/courses/{other['id']}/tutors", json={"tutor_ids": [tutor.id]}, headers=admin_headers)

        session_id = session_url.rsplit("/", 2)[1]
        response = client.get(
            f"/api/tutor/courses/{other['id']}/sessions/{session_id}/attendance", headers=tutor_headers
        )
        assert response.status_code == 404

    def test_unassigned_tutor(self, client, db, session_url, student):
        outsider = auth_headers(db.user(UserRole.TUTOR))
        assert client.get(session_url, headers=outsider).status_code == 403
        response = client.post(session_url, json={"student_id": student.id, "status": "PRESENT"}, headers=outsider)
        assert response.status_code == 403


class TestReportsAndRoster:
    """Tests for /api/tutor/reports and /api/tutor/students."""

    def test_course_report(self, client, mark, student, student_headers, tutor_headers, active_enrollment):
        mark(attendance=[{"student_id": student.id, "status": "present"}])
        course_id = active_enrollment["course_id"]
        assignment = client.post(
            "/api/assignments",
            json={
                "title": "Worksheet 1",
                "description": "Solve every equation",
                "target_type": "COURSES",
                "target_course_ids": [course_id],
                "course_id": course_id,
            },
            headers=tutor_headers,
        ).json()["data"]
        client.post(
            f"/api/assignments/{assignment['id']}/submit",
            json={"submission_type": "TEXT", "content": "x = 4"},
            headers=student_headers,
        )
        submissions = client.get(
            f"/api/assignments/{assignment['id']}/submissions", headers=tutor_headers
        ).json()["data"]
        client.put(
            f"/api/assignments/submissions/{submissions[0]['id']}/grade", json={"score": 80}, headers=tutor_headers
        )

        response = client.get("/api/tutor/reports", params={"range": "last_7_days"}, headers=tutor_headers)
        assert response.status_code == 200
        assert response.json()["data"] == [
            {
                "course_id": course_id,
                "course_title": "Algebra Basics",
                "total_students": 1,
                "attendance_rate": 1.0,
                "avg_assignment_score": 80.0,
            }
        ]

    def test_report_without_activity(self, client, tutor_headers, active_enrollment):
        rows = client.get("/api/tutor/reports", headers=tutor_headers).json()["data"]
        assert rows[0]["attendance_rate"] == 0
        assert rows[0]["avg_assignment_score"] == 0

    def test_report_without_courses(self, client, db):
        headers = auth_headers(db.user(UserRole.TUTOR))
        assert client.get("/api/tutor/reports", headers=headers).json()["data"] == []

    def test_unknown_range(self, client, tutor_headers):
        response = client.get("/api/tutor/reports", params={"range": "forever"}, headers=tutor_headers)
        assert response.status_code == 400

    def test_roster_groups_courses(self, client, mark, student, tutor_headers, active_enrollment):
        mark(attendance=[{"student_id": student.id, "status": "present"}])

        response = client.get("/api/tutor/students", headers=tutor_headers)
        assert response.status_code == 200
        roster = response.json()["data"]
        assert [s["id"] for s in roster] == [student.id]
        entry = roster[0]
        assert entry["total_attendance_rate"] == 100
        assert entry["total_assignments"] == 0
        assert entry["last_activity"] == "2024-03-05T09:00:00"
        assert entry["courses"] == [
            {
                "course_id": active_enrollment["course_id"],
                "course_title": "Algebra Basics",
                "enrollment_id": active_enrollment["id"],
                "status": "ACTIVE",
                "enrolled_at": entry["courses"][0]["enrolled_at"],
            }
        ]

    @pytest.mark.parametrize("params", [
        {"search": "nobody"},
        {"status": "CANCELLED"},
        {"course_id": 999},
    ])
    def test_roster_filters(self, client, tutor_headers, active_enrollment, params):
        response = client.get("/api/tutor/students", params=params, headers=tutor_headers)
        assert response.json()["data"] == []

    def test_roster_search_matches_email(self, client, tutor_headers, active_enrollment, student):
        roster = client.get("/api/tutor/students", params={"search": "STUDENT@"}, headers=tutor_headers).json()["data"]
        assert [s["id"] for s in roster] == [student.id]
