"""
Catalog repositories - categories, course types, course formats, curricula
"""
from typing import Optional, Sequence, Type

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tutorhub.model.catalog_models import Category, CourseFormat, CourseType, Curriculum
from tutorhub.model.course_models import Course
from tutorhub.repositories.base_repo import BaseRepository, ModelType


class CatalogRepository(BaseRepository[ModelType]):
    """
    Shared queries for sluggable lookup tables.

    course_fk names the Course column that points at this table, used to
    count the courses filed under each entry.
    """

    course_fk: str

    def __init__(self, model: Type[ModelType], session: AsyncSession, course_fk: str):
        super().__init__(model, session)
        self.course_fk = course_fk

    async def list_entries(self, include_inactive: bool = False) -> Sequence[ModelType]:
        query = select(self.model)
        if not include_inactive:
            query = query.where(self.model.is_active.is_(True))
        query = query.order_by(self.model.sort_order.asc(), self.model.name.asc())
        return await self.execute_query(query)

    async def get_by_slug(self, slug: str) -> Optional[ModelType]:
        return await self.get_by_field("slug", slug)

    async def course_counts(self, ids: Sequence[int]) -> dict[int, int]:
        if not ids:
            return {}
        fk = getattr(Course, self.course_fk)
        query = select(fk, func.count(Course.id)).where(fk.in_(ids)).group_by(fk)
        return {entry_id: count for entry_id, count in (await self.session.execute(query)).all()}


class CategoryRepository(CatalogRepository[Category]):
    def __init__(self, session: AsyncSession):
        super().__init__(Category, session, course_fk="category_id")


class CourseTypeRepository(CatalogRepository[CourseType]):
    def __init__(self, session: AsyncSession):
        super().__init__(CourseType, session, course_fk="course_type_id")


class CourseFormatRepository(CatalogRepository[CourseFormat]):
    def __init__(self, session: AsyncSession):
        super().__init__(CourseFormat, session, course_fk="course_format_id")


class CurriculumRepository(BaseRepository[Curriculum]):
    def __init__(self, session: AsyncSession):
        super().__init__(Curriculum, session)

    async def list_active(self) -> Sequence[Curriculum]:
        query = (
            select(Curriculum)
            .where(Curriculum.is_active.is_(True))
            .order_by(Curriculum.name.asc())
        )
        return await self.execute_query(query)

    async def find_duplicate(
        self, name: str, type_: str, level: str, exclude_id: Optional[int] = None
    ) -> Optional[Curriculum]:
        query = select(Curriculum).where(
            Curriculum.name == name,
            Curriculum.type == type_,
            Curriculum.level == level,
        )
        if exclude_id is not None:
            query = query.where(Curriculum.id != exclude_id)
        return (await self.session.execute(query.limit(1))).scalars().first()
