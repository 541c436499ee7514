import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from tutorhub.dependencies.auth import require_admin
from tutorhub.dependencies.services import get_enrollment_service
from tutorhub.model.enums import EnrollmentFormat, EnrollmentStatus, PaymentMethod, PaymentStatus
from tutorhub.model.user_models import User
from tutorhub.schemas.enrollment import (
    EnrollmentCancelResponse,
    EnrollmentCreate,
    EnrollmentDetail,
    EnrollmentListItem,
    EnrollmentUpdate,
    PaymentCreate,
    PaymentListItem,
    PaymentResponse,
    PaymentUpdate,
)
from tutorhub.schemas.generic import ApiResponse, PaginatedData
from tutorhub.services.enrollment_service import EnrollmentService
from tutorhub.utils.parser_utils import ParserUtils

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/enrollments", tags=["Enrollments"])
payments_router = APIRouter(prefix="/payments", tags=["Payments"])


@router.get("", response_model=ApiResponse[PaginatedData[EnrollmentListItem]], summary="List enrollments")
async def list_enrollments(
        search: Optional[str] = Query(None, description="Student name, email or course title"),
        enrollment_status: Optional[str] = Query(None, alias="status"),
        enrollment_format: Optional[str] = Query(None, alias="format"),
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        _: User = Depends(require_admin),
        enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[PaginatedData[EnrollmentListItem]]:
    result = await enrollment_service.list_enrollments(
        search=search,
        status=ParserUtils.enum_filter(EnrollmentStatus, enrollment_status),
        format=ParserUtils.enum_filter(EnrollmentFormat, enrollment_format),
        page=page,
        limit=limit,
    )
    return ApiResponse[PaginatedData[EnrollmentListItem]].ok(data=result)


@router.post(
    "",
    response_model=ApiResponse[EnrollmentDetail],
    status_code=status.HTTP_201_CREATED,
    summary="Enroll a student",
    description="Snapshots pricing from the active settings and creates the payment plan.",
)
async def create_enrollment(
        request: EnrollmentCreate,
        _: User = Depends(require_admin),
        enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[EnrollmentDetail]:
    """
    Raises:
        - 404 Not Found: unknown student or course
        - 409 Conflict: the student already has an open enrollment in this course and format
    """
    logger.info(
        f"Enrolling student {request.student_id} in course {request.course_id} "
        f"({request.format.value}, {request.payment_plan.value})"
    )
    enrollment = await enrollment_service.create_enrollment(request)
    return ApiResponse[EnrollmentDetail].ok(data=enrollment, message="Enrollment created successfully")


@router.get("/{enrollment_id}", response_model=ApiResponse[EnrollmentDetail])
async def get_enrollment(
        enrollment_id: int,
        _: User = Depends(require_admin),
        enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[EnrollmentDetail]:
    return ApiResponse[EnrollmentDetail].ok(data=await enrollment_service.get_enrollment(enrollment_id))


@router.put("/{enrollment_id}", response_model=ApiResponse[EnrollmentDetail])
async def update_enrollment(
        enrollment_id: int,
        request: EnrollmentUpdate,
        _: User = Depends(require_admin),
        enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[EnrollmentDetail]:
    enrollment = await enrollment_service.update_enrollment(enrollment_id, request)
    return ApiResponse[EnrollmentDetail].ok(data=enrollment, message="Enrollment updated successfully")


@router.delete("/{enrollment_id}", response_model=ApiResponse[EnrollmentCancelResponse], summary="Cancel enrollment")
async def cancel_enrollment(
        enrollment_id: int,
        _: User = Depends(require_admin),
        enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[EnrollmentCancelResponse]:
    result = await enrollment_service.cancel_enrollment(enrollment_id)
    return ApiResponse[EnrollmentCancelResponse].ok(data=result, message="Enrollment cancelled successfully")


# =============================
#   Payments
# =============================
@router.get("/{enrollment_id}/payments", response_model=ApiResponse[List[PaymentResponse]])
async def list_enrollment_payments(
        enrollment_id: int,
        _: User = Depends(require_admin),
        enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[List[PaymentResponse]]:
    return ApiResponse[List[PaymentResponse]].ok(data=await enrollment_service.list_payments(enrollment_id))


@router.post(
    "/{enrollment_id}/payments",
    response_model=ApiResponse[PaymentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_payment(
        enrollment_id: int,
        request: PaymentCreate,
        _: User = Depends(require_admin),
        enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[PaymentResponse]:
    logger.info(f"Recording payment of {request.amount} for enrollment {enrollment_id}")
    payment = await enrollment_service.add_payment(enrollment_id, request)
    return ApiResponse[PaymentResponse].ok(data=payment, message="Payment added successfully")


@payments_router.get("", response_model=ApiResponse[PaginatedData[PaymentListItem]])
async def list_payments(
        payment_status: Optional[str] = Query(None, alias="status"),
        method: Optional[str] = None,
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        _: User = Depends(require_admin),
        enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[PaginatedData[PaymentListItem]]:
    result = await enrollment_service.search_payments(
        status=ParserUtils.enum_filter(PaymentStatus, payment_status),
        method=ParserUtils.enum_filter(PaymentMethod, method),
        page=page,
        limit=limit,
    )
    return ApiResponse[PaginatedData[PaymentListItem]].ok(data=result)


@payments_router.put(
    "/{payment_id}",
    response_model=ApiResponse[PaymentResponse],
    description="Marking a payment PAID without paid_at stamps the current time.",
)
async def update_payment(
        payment_id: int,
        request: PaymentUpdate,
        _: User = Depends(require_admin),
        enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[PaymentResponse]:
    payment = await enrollment_service.update_payment(payment_id, request)
    return ApiResponse[PaymentResponse].ok(data=payment, message="Payment updated successfully")
