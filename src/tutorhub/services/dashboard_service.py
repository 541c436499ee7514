"""
Dashboard Service - admin statistics with month-over-month growth and recent activity
"""
import logging
from datetime import datetime

from tutorhub.clients.redis_client import RedisClient
from tutorhub.model.enums import UserRole, UserStatus
from tutorhub.repositories.course_repo import CourseRepository
from tutorhub.repositories.enrollment_repo import EnrollmentRepository, PaymentRepository
from tutorhub.repositories.user_repo import UserRepository
from tutorhub.schemas.dashboard import (
    DashboardStatistics,
    DashboardStats,
    GrowthStat,
    RecentActivity,
)
from tutorhub.utils.date_utils import growth_percentage, month_windows, time_ago, utcnow

logger = logging.getLogger(__name__)

CACHE_KEY = "dashboard:stats"
ACTIVITY_LIMIT = 3


class DashboardService:
    def __init__(
            self,
            user_repository: UserRepository,
            course_repository: CourseRepository,
            enrollment_repository: EnrollmentRepository,
            payment_repository: PaymentRepository,
            redis_client: RedisClient,
    ):
        self._user_repository = user_repository
        self._course_repository = course_repository
        self._enrollment_repository = enrollment_repository
        self._payment_repository = payment_repository
        self._redis_client = redis_client

    async def get_stats(self) -> DashboardStats:
        cached = await self._redis_client.get_json(CACHE_KEY)
        if cached:
            logger.debug("Dashboard stats served from cache")
            return DashboardStats.model_validate(cached)

        stats = await self._compute(utcnow())
        await self._redis_client.set_json(CACHE_KEY, stats.model_dump(mode="json"))
        return stats

    async def _compute(self, now: datetime) -> DashboardStats:
        start_current, start_previous, end_previous = month_windows(now)

        users = GrowthStat(
            count=await self._user_repository.count_active(),
            growth=growth_percentage(
                await self._user_repository.count_since(start_current),
                await self._user_repository.count_since(start_previous, end_previous),
            ),
        )
        courses = GrowthStat(
            count=await self._course_repository.count_all(),
            growth=growth_percentage(
                await self._course_repository.count_created_between(start_current),
                await self._course_repository.count_created_between(start_previous, end_previous),
            ),
        )
        enrollments = GrowthStat(
            count=await self._enrollment_repository.count_all(),
            growth=growth_percentage(
                await self._enrollment_repository.count_enrolled_between(start_current),
                await self._enrollment_repository.count_enrolled_between(start_previous, end_previous),
            ),
        )
        admins = GrowthStat(
            count=await self._user_repository.count_active(roles=(UserRole.ADMIN, UserRole.SUPER_ADMIN)),
            growth=0,
        )

        return DashboardStats(
            statistics=DashboardStatistics(
                total_users=users,
                total_courses=courses,
                total_enrollments=enrollments,
                system_admins=admins,
            ),
            users_by_role=await self._user_repository.count_by_role(status=UserStatus.ACTIVE),
            recent_activity=await self._recent_activity(now),
        )

    async def _recent_activity(self, now: datetime) -> list[RecentActivity]:
        """Newest events across users, courses, enrollments and payments."""
        events = []

        for user in await self._user_repository.recent_active(2):
            role = user.role.value.lower().replace("_", " ")
            events.append((user.created_date, "user_registered", f"{user.name} registered as {role}", "green"))

        for course in await self._course_repository.recent_published(2):
            links = sorted(course.course_tutors, key=lambda link: (not link.is_primary, link.id))
            tutor_name = links[0].tutor.name if links else "Unknown"
            events.append((course.created_date, "course_created", f"{course.title} created by {tutor_name}", "blue"))

        for enrollment in await self._enrollment_repository.recent(2):
            events.append(
                (
                    enrollment.enrolled_at,
                    "enrollment_created",
                    f"{enrollment.student.name} enrolled in {enrollment.course.title}",
                    "purple",
                )
            )

        for payment in await self._payment_repository.latest_paid(1):
            events.append(
                (
                    payment.paid_at,
                    "payment_completed",
                    f"£{payment.amount} payment received from {payment.enrollment.student.name}",
                    "emerald",
                )
            )

        events.sort(key=lambda event: event[0], reverse=True)
        return [
            RecentActivity(type=kind, message=message, timestamp=time_ago(when, now), color=color)
            for when, kind, message, color in events[:ACTIVITY_LIMIT]
        ]
