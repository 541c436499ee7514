"""Tests for enrollments, pricing snapshots and payments."""

from conftest import enroll
from tutorhub.model.enums import UserRole


class TestCreateEnrollment:
    """Tests for POST /api/enrollments."""

    def test_pricing_uses_default_tax(self, client, admin_headers, student, course):
        data = enroll(client, admin_headers, student.id, course["id"])
        assert data["status"] == "PENDING"
        assert data["payment_status"] == "PENDING"
        assert data["base_price"] == 100
        assert data["tax_rate"] == 0.18
        assert data["tax_amount"] == 18
        assert data["final_price"] == 118
        assert data["currency"] == "GBP"
        assert data["timezone"] == "Europe/London"
        assert data["discount_type"] is None
        assert [p["description"] for p in data["payments"]] == ["Full payment for enrollment"]
        assert data["payment_summary"] == {"total": 118, "paid": 0, "pending": 118, "percentage_paid": 0}

    def test_percentage_discount(self, client, admin_headers, student, course):
        data = enroll(
            client, admin_headers, student.id, course["id"],
            base_price=200, discount_type="PERCENTAGE", discount_value=10,
        )
        assert data["discount_type"] == "PERCENTAGE"
        assert data["discount_amount"] == 20
        assert data["subtotal"] == 180
        assert data["final_price"] == 212.4

    def test_installments_with_first_paid(self, client, admin_headers, student, course):
        data = enroll(
            client, admin_headers, student.id, course["id"],
            payment_plan="INSTALLMENTS", installment_count=3,
            mark_first_payment_as_paid=True, first_payment_method="CASH", transaction_id="tx-42",
        )
        payments = data["payments"]
        assert [p["amount"] for p in payments] == [39.33, 39.33, 39.34]
        assert [p["status"] for p in payments] == ["PAID", "PENDING", "PENDING"]
        assert payments[0]["method"] == "CASH"
        assert payments[0]["transaction_id"] == "tx-42"
        assert data["payment_status"] == "PARTIAL"
        assert data["payment_summary"]["paid"] == 39.33
        assert data["payment_summary"]["percentage_paid"] == 33

    def test_duplicate_open_enrollment(self, client, admin_headers, student, course):
        enroll(client, admin_headers, student.id, course["id"])
        response = client.post(
            "/api/enrollments",
            json={
                "student_id": student.id,
                "course_id": course["id"],
                "format": "GROUP",
                "session_count": 5,
                "session_duration": 45,
                "base_price": 50,
            },
            headers=admin_headers,
        )
        assert response.status_code == 409

    def test_other_format_is_allowed(self, client, admin_headers, student, course):
        enroll(client, admin_headers, student.id, course["id"])
        data = enroll(client, admin_headers, student.id, course["id"], format="ONE_TO_ONE")
        assert data["format"] == "ONE_TO_ONE"

    def test_cancelled_enrollment_does_not_block(self, client, admin_headers, student, course):
        first = enroll(client, admin_headers, student.id, course["id"])
        client.delete(f"/api/enrollments/{first['id']}", headers=admin_headers)
        enroll(client, admin_headers, student.id, course["id"])

    def test_unknown_student_or_course(self, client, db, admin_headers, student, course):
        tutor = db.user(UserRole.TUTOR)
        payload = {"course_id": course["id"], "format": "GROUP", "session_count": 1, "session_duration": 30,
                   "base_price": 10}
        assert client.post(
            "/api/enrollments", json={**payload, "student_id": tutor.id}, headers=admin_headers
        ).status_code == 404
        assert client.post(
            "/api/enrollments", json={**payload, "student_id": student.id, "course_id": 999}, headers=admin_headers
        ).status_code == 404

    def test_percentage_over_hundred(self, client, admin_headers, student, course):
        response = client.post(
            "/api/enrollments",
            json={
                "student_id": student.id,
                "course_id": course["id"],
                "format": "GROUP",
                "session_count": 1,
                "session_duration": 30,
                "base_price": 10,
                "discount_type": "PERCENTAGE",
                "discount_value": 150,
            },
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_admin_only(self, client, tutor_headers, student, course):
        response = client.post(
            "/api/enrollments",
            json={"student_id": student.id, "course_id": course["id"], "format": "GROUP",
                  "session_count": 1, "session_duration": 30, "base_price": 10},
            headers=tutor_headers,
        )
        assert response.status_code == 403


class TestManageEnrollment:
    """Tests for list, detail, update and cancel."""

    def test_list_filters(self, client, db, admin_headers, student, course):
        other = db.user(UserRole.STUDENT, name="Olive Other")
        enroll(client, admin_headers, student.id, course["id"])
        enroll(client, admin_headers, other.id, course["id"], format="ONE_TO_ONE")

        everything = client.get("/api/enrollments", headers=admin_headers).json()["data"]
        assert everything["pagination"]["total"] == 2
        assert everything["items"][0]["student"]["name"] == "Olive Other"
        assert everything["items"][0]["course"]["title"] == course["title"]

        group = client.get("/api/enrollments", params={"format": "group"}, headers=admin_headers).json()["data"]
        assert [e["student_id"] for e in group["items"]] == [student.id]

        found = client.get("/api/enrollments", params={"search": "olive"}, headers=admin_headers).json()["data"]
        assert [e["student_id"] for e in found["items"]] == [other.id]

        assert client.get(
            "/api/enrollments", params={"status": "frozen"}, headers=admin_headers
        ).status_code == 400

    def test_missing_enrollment(self, client, admin_headers):
        assert client.get("/api/enrollments/404", headers=admin_headers).status_code == 404
        assert client.delete("/api/enrollments/404", headers=admin_headers).status_code == 404

    def test_update_status(self, client, admin_headers, active_enrollment):
        assert active_enrollment["status"] == "ACTIVE"
        response = client.put(
            f"/api/enrollments/{active_enrollment['id']}",
            json={"notes": "Prefers mornings", "preferred_days": ["Monday"]},
            headers=admin_headers,
        )
        data = response.json()["data"]
        assert data["notes"] == "Prefers mornings"
        assert data["preferred_days"] == ["Monday"]
        assert data["status"] == "ACTIVE"

    def test_cancel_without_payments(self, client, admin_headers, student, course):
        enrollment = enroll(client, admin_headers, student.id, course["id"])
        response = client.delete(f"/api/enrollments/{enrollment['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"] == {"id": enrollment["id"], "status": "CANCELLED", "warning": None}

    def test_cancel_with_paid_payment_warns(self, client, admin_headers, student, course):
        enrollment = enroll(client, admin_headers, student.id, course["id"], mark_first_payment_as_paid=True)
        response = client.delete(f"/api/enrollments/{enrollment['id']}", headers=admin_headers)
        assert "refund" in response.json()["data"]["warning"]


class TestPayments:
    """Tests for enrollment payments and the payments listing."""

    def test_add_payment_updates_status(self, client, admin_headers, student, course):
        enrollment = enroll(client, admin_headers, student.id, course["id"])
        url = f"/api/enrollments/{enrollment['id']}/payments"

        response = client.post(
            url, json={"amount": 118, "method": "BANK_TRANSFER", "status": "PAID"}, headers=admin_headers
        )
        assert response.status_code == 201
        assert response.json()["data"]["currency"] == "GBP"

        detail = client.get(f"/api/enrollments/{enrollment['id']}", headers=admin_headers).json()["data"]
        assert detail["payment_status"] == "PAID"
        assert len(client.get(url, headers=admin_headers).json()["data"]) == 2

    def test_mark_payment_paid_stamps_time(self, client, admin_headers, student, course):
        enrollment = enroll(client, admin_headers, student.id, course["id"])
        payment_id = enrollment["payments"][0]["id"]

        response = client.put(f"/api/payments/{payment_id}", json={"status": "PAID"}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["paid_at"] is not None

        detail = client.get(f"/api/enrollments/{enrollment['id']}", headers=admin_headers).json()["data"]
        assert detail["payment_status"] == "PAID"
        assert detail["payment_summary"]["percentage_paid"] == 100

    def test_update_missing_payment(self, client, admin_headers):
        assert client.put("/api/payments/999", json={"status": "PAID"}, headers=admin_headers).status_code == 404

    def test_search_payments(self, client, admin_headers, student, course):
        enroll(
            client, admin_headers, student.id, course["id"],
            payment_plan="INSTALLMENTS", installment_count=2, mark_first_payment_as_paid=True,
            first_payment_method="CASH",
        )

        paid = client.get("/api/payments", params={"status": "PAID"}, headers=admin_headers).json()["data"]
        assert paid["pagination"]["total"] == 1
        assert paid["items"][0]["student_name"] == student.name
        assert paid["items"][0]["course_title"] == course["title"]

        card = client.get("/api/payments", params={"method": "card"}, headers=admin_headers).json()["data"]
        assert card["pagination"]["total"] == 1


class TestStudentCourses:
    """Tests for GET /api/student/courses."""

    def test_lists_own_enrollments_with_primary_tutor(
            self, client, db, admin_headers, student_headers, student, active_enrollment, tutor
    ):
        other = db.user(UserRole.STUDENT)
        enroll(client, admin_headers, other.id, active_enrollment["course_id"])

        response = client.get("/api/student/courses", headers=student_headers)
        assert response.status_code == 200
        items = response.json()["data"]
        assert len(items) == 1
        assert items[0]["enrollment_id"] == active_enrollment["id"]
        assert items[0]["status"] == "ACTIVE"
        assert items[0]["course"]["title"] == "Algebra Basics"
        assert items[0]["course"]["slug"] == "algebra-basics"
        assert items[0]["primary_tutor"]["name"] == "Tess Tutor"

    def test_without_tutor(self, client, admin_headers, student_headers, student, course):
        enroll(client, admin_headers, student.id, course["id"])
        items = client.get("/api/student/courses", headers=student_headers).json()["data"]
        assert items[0]["primary_tutor"] is None

    def test_students_only(self, client, tutor_headers):
        assert client.get("/api/student/courses", headers=tutor_headers).status_code == 403
