"""
User Repository - accounts, students and password reset tokens
"""
from datetime import datetime
from typing import Optional, Sequence, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tutorhub.model.enums import UserRole, UserStatus
from tutorhub.model.user_models import PasswordResetToken, User
from tutorhub.repositories.base_repo import BaseRepository

SORTABLE_FIELDS = {"name", "email", "role", "status", "created_date", "last_login"}


class UserRepository(BaseRepository[User]):
    """
    Repository for User entity
    """

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self.get_by_field("email", email.lower())

    async def search(
        self,
        search: Optional[str] = None,
        role: Optional[UserRole] = None,
        status: Optional[UserStatus] = None,
        sort_by: str = "created_date",
        sort_desc: bool = True,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[Sequence[User], int]:
        """
        Filter users for the admin listing.

        Args:
            search: Case-insensitive match on name, email or phone
            role: Restrict to one role
            status: Restrict to one status
            sort_by: Column name (falls back to created_date)
            sort_desc: Descending order when True
            skip: Offset
            limit: Page size

        Returns:
            (users on the page, total matches)
        """
        query = select(User)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                or_(
                    func.lower(User.name).like(pattern),
                    func.lower(User.email).like(pattern),
                    func.lower(User.phone).like(pattern),
                )
            )
        if role:
            query = query.where(User.role == role)
        if status:
            query = query.where(User.status == status)

        column = getattr(User, sort_by if sort_by in SORTABLE_FIELDS else "created_date")
        query = query.order_by(column.desc() if sort_desc else column.asc(), User.id)
        return await self.paginate(query, skip, limit)

    async def count_by_role(self, status: Optional[UserStatus] = None) -> dict[str, int]:
        """Counts keyed by role name, every role present."""
        query = select(User.role, func.count(User.id)).group_by(User.role)
        if status:
            query = query.where(User.status == status)
        rows = (await self.session.execute(query)).all()
        counts = {role.value: 0 for role in UserRole}
        for role, count in rows:
            counts[UserRole(role).value] = count
        return counts

    async def list_students(self, search: Optional[str] = None) -> Sequence[User]:
        query = select(User).where(User.role == UserRole.STUDENT)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern))
            )
        return await self.execute_query(query.order_by(User.name.asc()))

    async def get_many(self, ids: Sequence[int], role: Optional[UserRole] = None) -> Sequence[User]:
        if not ids:
            return []
        query = select(User).where(User.id.in_(set(ids)))
        if role:
            query = query.where(User.role == role)
        return await self.execute_query(query)

    async def count_since(
        self,
        start: datetime,
        end: Optional[datetime] = None,
        status: Optional[UserStatus] = UserStatus.ACTIVE,
    ) -> int:
        query = select(func.count(User.id)).where(User.created_date >= start)
        if end is not None:
            query = query.where(User.created_date <= end)
        if status:
            query = query.where(User.status == status)
        return (await self.session.execute(query)).scalar() or 0

    async def count_active(self, roles: Optional[Sequence[UserRole]] = None) -> int:
        query = select(func.count(User.id)).where(User.status == UserStatus.ACTIVE)
        if roles:
            query = query.where(User.role.in_(roles))
        return (await self.session.execute(query)).scalar() or 0

    async def recent_active(self, limit: int) -> Sequence[User]:
        query = (
            select(User)
            .where(User.status == UserStatus.ACTIVE)
            .order_by(User.created_date.desc())
            .limit(limit)
        )
        return await self.execute_query(query)


class PasswordResetTokenRepository(BaseRepository[PasswordResetToken]):
    def __init__(self, session: AsyncSession):
        super().__init__(PasswordResetToken, session)

    async def get_by_token(self, token: str) -> Optional[PasswordResetToken]:
        return await self.get_by_field("token", token)

    async def purge_expired(self, user_id: int, now: datetime) -> int:
        """Drop unused tokens of the user that already expired."""
        stmt = delete(PasswordResetToken).where(
            PasswordResetToken.user_id == user_id,
            PasswordResetToken.used_at.is_(None),
            PasswordResetToken.expires_at < now,
        )
        result = await self.session.execute(stmt)
        return result.rowcount
