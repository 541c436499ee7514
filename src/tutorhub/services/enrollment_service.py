"""
Enrollment Service - enrollment pricing, payment plans and payment tracking
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from tutorhub.model.enrollment_models import Enrollment, Payment
from tutorhub.model.enums import (
    DiscountType,
    EnrollmentFormat,
    EnrollmentStatus,
    PaymentMethod,
    PaymentPlan,
    PaymentStatus,
    UserRole,
)
from tutorhub.model.user_models import User
from tutorhub.repositories.course_repo import CourseRepository, CourseTutorRepository
from tutorhub.repositories.enrollment_repo import EnrollmentRepository, PaymentRepository
from tutorhub.repositories.user_repo import UserRepository
from tutorhub.schemas.enrollment import (
    CourseRef,
    EnrollmentCancelResponse,
    EnrollmentCreate,
    EnrollmentDetail,
    EnrollmentListItem,
    EnrollmentUpdate,
    PaymentCreate,
    PaymentListItem,
    PaymentResponse,
    PaymentSummary,
    PaymentUpdate,
    StudentCourseItem,
)
from tutorhub.schemas.generic import PaginatedData, Pagination
from tutorhub.schemas.user import UserSummary
from tutorhub.services.settings_service import SettingsService
from tutorhub.utils.date_utils import round_half_up, to_naive_utc, utcnow
from tutorhub.utils.exceptions import ConflictException, ResourceNotFoundException
from tutorhub.utils.money_utils import split_money, to_decimal, to_money

logger = logging.getLogger(__name__)

INSTALLMENT_INTERVAL_DAYS = 30


@dataclass(frozen=True)
class Pricing:
    base_price: Decimal
    discount_amount: Decimal
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    final_price: Decimal


def calculate_pricing(base_price, discount_type: DiscountType, discount_value, tax_rate) -> Pricing:
    """
    Price breakdown for a new enrollment.

    discount = base * value / 100 for PERCENTAGE, value for AMOUNT, else 0;
    tax is charged on the discounted subtotal.
    """
    base = to_decimal(base_price)
    rate = to_decimal(tax_rate)
    value = to_decimal(discount_value or 0)

    if discount_type == DiscountType.PERCENTAGE:
        discount = base * value / 100
    elif discount_type == DiscountType.AMOUNT:
        discount = value
    else:
        discount = Decimal(0)

    subtotal = to_money(base - discount)
    tax = to_money(subtotal * rate)
    return Pricing(
        base_price=to_money(base),
        discount_amount=to_money(discount),
        subtotal=subtotal,
        tax_rate=rate,
        tax_amount=tax,
        final_price=subtotal + tax,
    )


def build_payment_schedule(
        final_price: Decimal,
        plan: PaymentPlan,
        installment_count: int,
        currency: str,
        now: datetime,
        first_method: PaymentMethod = PaymentMethod.CARD,
        first_paid: bool = False,
        transaction_id: Optional[str] = None,
) -> list[dict]:
    """
    Payment rows for a payment plan.

    FULL yields one payment due now. INSTALLMENTS yields installment_count
    payments due every 30 days; shares are rounded down to the cent and the
    remainder goes on the last one, so the schedule always sums to final_price.
    Only the first payment can be recorded as already paid.
    """
    if plan == PaymentPlan.FULL:
        amounts = [final_price]
        descriptions = ["Full payment for enrollment"]
    else:
        amounts = split_money(final_price, installment_count)
        descriptions = [f"Installment {i + 1} of {installment_count}" for i in range(installment_count)]

    schedule = []
    for index, (amount, description) in enumerate(zip(amounts, descriptions)):
        is_first = index == 0
        paid = is_first and first_paid
        schedule.append(
            {
                "amount": amount,
                "currency": currency,
                "method": first_method if is_first else PaymentMethod.CARD,
                "status": PaymentStatus.PAID if paid else PaymentStatus.PENDING,
                "due_date": now + timedelta(days=index * INSTALLMENT_INTERVAL_DAYS),
                "paid_at": now if paid else None,
                "transaction_id": transaction_id if is_first else None,
                "description": description,
            }
        )
    return schedule


def payment_status_for(paid_total: Decimal, final_price) -> PaymentStatus:
    if paid_total >= to_decimal(final_price):
        return PaymentStatus.PAID
    if paid_total > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.PENDING


def summarize_payments(payments, final_price) -> PaymentSummary:
    total = to_decimal(final_price)
    paid = sum((to_decimal(p.amount) for p in payments if p.status == PaymentStatus.PAID), Decimal(0))
    return PaymentSummary(
        total=float(total),
        paid=float(paid),
        pending=float(total - paid),
        percentage_paid=round_half_up(float(paid / total * 100)) if total else 0,
    )


class EnrollmentService:
    def __init__(
            self,
            enrollment_repository: EnrollmentRepository,
            payment_repository: PaymentRepository,
            user_repository: UserRepository,
            course_repository: CourseRepository,
            course_tutor_repository: CourseTutorRepository,
            settings_service: SettingsService,
    ):
        self._enrollment_repository = enrollment_repository
        self._payment_repository = payment_repository
        self._user_repository = user_repository
        self._course_repository = course_repository
        self._course_tutor_repository = course_tutor_repository
        self._settings_service = settings_service

    async def list_enrollments(
            self,
            search: Optional[str],
            status: Optional[EnrollmentStatus],
            format: Optional[EnrollmentFormat],
            page: int,
            limit: int,
    ) -> PaginatedData[EnrollmentListItem]:
        enrollments, total = await self._enrollment_repository.search(
            search=search,
            status=status,
            format=format,
            skip=(page - 1) * limit,
            limit=limit,
        )
        return PaginatedData[EnrollmentListItem](
            items=[EnrollmentListItem.model_validate(e) for e in enrollments],
            pagination=Pagination.build(page, limit, total),
        )

    async def create_enrollment(self, request: EnrollmentCreate) -> EnrollmentDetail:
        """
        Enroll a student, snapshot the pricing and fan out the payment plan.

        Raises:
            ResourceNotFoundException: unknown student or course
            ConflictException: an open enrollment with the same format exists
        """
        student = await self._user_repository.get_by_id(request.student_id)
        if not student or student.role != UserRole.STUDENT:
            raise ResourceNotFoundException("Student not found")
        if not await self._course_repository.get_by_id(request.course_id):
            raise ResourceNotFoundException("Course not found")

        if await self._enrollment_repository.find_open_duplicate(
            request.student_id, request.course_id, request.format
        ):
            raise ConflictException("Student is already enrolled in this course with the same format")

        currency, timezone = await self._settings_service.currency_and_timezone()
        pricing = calculate_pricing(
            request.base_price,
            request.discount_type,
            request.discount_value,
            await self._settings_service.tax_rate(),
        )
        has_discount = request.discount_type != DiscountType.NONE

        enrollment = await self._enrollment_repository.add(
            {
                "student_id": request.student_id,
                "course_id": request.course_id,
                "format": request.format,
                "session_count": request.session_count,
                "session_duration": request.session_duration,
                "base_price": pricing.base_price,
                "discount_type": request.discount_type if has_discount else None,
                "discount_value": to_money(request.discount_value) if has_discount and request.discount_value else None,
                "discount_amount": pricing.discount_amount,
                "subtotal": pricing.subtotal,
                "tax_rate": pricing.tax_rate,
                "tax_amount": pricing.tax_amount,
                "final_price": pricing.final_price,
                "currency": currency,
                "timezone": timezone,
                "preferred_days": request.preferred_days,
                "preferred_times": request.preferred_times,
                "status": EnrollmentStatus.PENDING,
                "payment_status": (
                    PaymentStatus.PARTIAL if request.mark_first_payment_as_paid else PaymentStatus.PENDING
                ),
                "payment_method": request.first_payment_method,
                "notes": request.notes,
            }
        )

        schedule = build_payment_schedule(
            pricing.final_price,
            request.payment_plan,
            request.installment_count,
            currency,
            utcnow(),
            first_method=request.first_payment_method,
            first_paid=request.mark_first_payment_as_paid,
            transaction_id=request.transaction_id,
        )
        await self._payment_repository.add_many(
            [{**row, "enrollment_id": enrollment.id} for row in schedule]
        )
        await self._enrollment_repository.commit()
        logger.info(
            f"Enrollment {enrollment.id} created for student {request.student_id} "
            f"in course {request.course_id} with {len(schedule)} payment(s)"
        )
        return await self.get_enrollment(enrollment.id)

    async def get_enrollment(self, enrollment_id: int) -> EnrollmentDetail:
        enrollment = await self._require(enrollment_id)
        payments = sorted(enrollment.payments, key=_due_date_key)
        return EnrollmentDetail(
            **EnrollmentListItem.model_validate(enrollment).model_dump(),
            payments=[PaymentResponse.model_validate(p) for p in payments],
            payment_summary=summarize_payments(payments, enrollment.final_price),
        )

    async def update_enrollment(self, enrollment_id: int, request: EnrollmentUpdate) -> EnrollmentDetail:
        enrollment = await self._require(enrollment_id)
        await self._enrollment_repository.update(enrollment, request.model_dump(exclude_unset=True))
        logger.info(f"Enrollment {enrollment_id} updated")
        return await self.get_enrollment(enrollment_id)

    async def cancel_enrollment(self, enrollment_id: int) -> EnrollmentCancelResponse:
        enrollment = await self._require(enrollment_id)
        has_paid = await self._payment_repository.count_paid(enrollment_id) > 0

        await self._enrollment_repository.update(enrollment, {"status": EnrollmentStatus.CANCELLED})
        logger.info(f"Enrollment {enrollment_id} cancelled")
        return EnrollmentCancelResponse(
            id=enrollment.id,
            status=EnrollmentStatus.CANCELLED,
            warning=(
                "This enrollment has paid payments. Please process refund if applicable."
                if has_paid else None
            ),
        )

    # =============================
    #   Payments
    # =============================
    async def list_payments(self, enrollment_id: int) -> list[PaymentResponse]:
        await self._require(enrollment_id)
        payments = await self._payment_repository.list_for_enrollment(enrollment_id)
        return [PaymentResponse.model_validate(p) for p in payments]

    async def add_payment(self, enrollment_id: int, request: PaymentCreate) -> PaymentResponse:
        enrollment = await self._require(enrollment_id)

        data = request.model_dump()
        data["amount"] = to_money(data["amount"])
        data["currency"] = enrollment.currency
        data["enrollment_id"] = enrollment.id
        for field in ("due_date", "paid_at"):
            if data[field] is not None:
                data[field] = to_naive_utc(data[field])

        payment = await self._payment_repository.add(data)
        await self._sync_payment_status(enrollment)
        await self._payment_repository.commit()
        logger.info(f"Payment {payment.id} of {payment.amount} added to enrollment {enrollment_id}")
        return PaymentResponse.model_validate(payment)

    async def search_payments(
            self,
            status: Optional[PaymentStatus],
            method: Optional[PaymentMethod],
            page: int,
            limit: int,
    ) -> PaginatedData[PaymentListItem]:
        payments, total = await self._payment_repository.search(
            status=status, method=method, skip=(page - 1) * limit, limit=limit
        )
        items = []
        for payment in payments:
            item = PaymentListItem.model_validate(payment)
            item.student_name = payment.enrollment.student.name
            item.course_title = payment.enrollment.course.title
            items.append(item)
        return PaginatedData[PaymentListItem](items=items, pagination=Pagination.build(page, limit, total))

    async def update_payment(self, payment_id: int, request: PaymentUpdate) -> PaymentResponse:
        payment = await self._payment_repository.get_by_id(payment_id)
        if not payment:
            raise ResourceNotFoundException(f"Payment not found with ID: {payment_id}")

        data = request.model_dump(exclude_unset=True)
        if data.get("amount") is not None:
            data["amount"] = to_money(data["amount"])
        for field in ("due_date", "paid_at"):
            if data.get(field) is not None:
                data[field] = to_naive_utc(data[field])
        if data.get("status") == PaymentStatus.PAID and not data.get("paid_at") and not payment.paid_at:
            data["paid_at"] = utcnow()

        for field, value in data.items():
            setattr(payment, field, value)
        await self._payment_repository.flush()

        enrollment = await self._enrollment_repository.get_by_id(payment.enrollment_id)
        await self._sync_payment_status(enrollment)
        await self._payment_repository.commit()
        logger.info(f"Payment {payment_id} updated")
        return PaymentResponse.model_validate(payment)

    # =============================
    #   Student portal
    # =============================
    async def student_courses(self, student: User) -> list[StudentCourseItem]:
        enrollments = await self._enrollment_repository.for_student(student.id)
        primaries = await self._course_tutor_repository.primary_tutors(
            list({e.course_id for e in enrollments})
        )

        items = []
        for enrollment in enrollments:
            link = primaries.get(enrollment.course_id)
            items.append(
                StudentCourseItem(
                    enrollment_id=enrollment.id,
                    status=enrollment.status,
                    format=enrollment.format,
                    payment_status=enrollment.payment_status,
                    enrolled_at=enrollment.enrolled_at,
                    course=CourseRef.model_validate(enrollment.course),
                    primary_tutor=UserSummary.model_validate(link.tutor) if link else None,
                )
            )
        return items

    async def _sync_payment_status(self, enrollment: Enrollment) -> None:
        paid_total = await self._payment_repository.paid_total(enrollment.id)
        enrollment.payment_status = payment_status_for(paid_total, enrollment.final_price)

    async def _require(self, enrollment_id: int) -> Enrollment:
        enrollment = await self._enrollment_repository.get_details(enrollment_id)
        if not enrollment:
            raise ResourceNotFoundException(f"Enrollment not found with ID: {enrollment_id}")
        return enrollment


def _due_date_key(payment: Payment):
    return payment.due_date or datetime.max, payment.id
