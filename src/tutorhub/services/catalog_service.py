"""
Catalog Service - categories, course types, course formats and curricula
"""
import logging
from typing import Optional, Sequence, Type

from pydantic import BaseModel

from tutorhub.model.catalog_models import Curriculum
from tutorhub.repositories.catalog_repo import CatalogRepository, CurriculumRepository
from tutorhub.schemas.catalog import (
    CatalogEntryResponse,
    CurriculumCreate,
    CurriculumUpdate,
)
from tutorhub.utils.exceptions import (
    BadRequestException,
    ConflictException,
    ResourceNotFoundException,
)
from tutorhub.utils.text_utils import slugify, with_suffix

logger = logging.getLogger(__name__)


async def unique_slug(repository, name: str, exclude_id: Optional[int] = None, slug_fn=slugify) -> str:
    """
    Slug for name that no other row uses, adding -1, -2, ... on collision.

    Args:
        repository: Repository of a model with a slug column
        name: Source text
        exclude_id: Row being renamed, whose own slug does not count as taken
        slug_fn: Slug builder for the model
    """
    base_slug = slug_fn(name)
    if not base_slug:
        raise BadRequestException("Name must contain at least one letter or digit")

    taken = await repository.slugs_like(base_slug, exclude_id=exclude_id)
    counter = 0
    while with_suffix(base_slug, counter) in taken:
        counter += 1
    return with_suffix(base_slug, counter)


class CatalogService:
    """
    CRUD for one sluggable lookup table.

    The same service drives categories, course types and course formats;
    entity_name and response_model select the wording and the shape.
    """

    def __init__(
            self,
            repository: CatalogRepository,
            entity_name: str,
            response_model: Type[CatalogEntryResponse],
    ):
        self._repository = repository
        self._entity_name = entity_name
        self._response_model = response_model

    async def list_entries(self, include_inactive: bool = False) -> list[CatalogEntryResponse]:
        entries = await self._repository.list_entries(include_inactive)
        counts = await self._repository.course_counts([e.id for e in entries])
        return [self._to_response(e, counts.get(e.id, 0)) for e in entries]

    async def get_entry(self, entry_id: int) -> CatalogEntryResponse:
        entry = await self._get_or_404(entry_id)
        counts = await self._repository.course_counts([entry.id])
        return self._to_response(entry, counts.get(entry.id, 0))

    async def create_entry(self, request: BaseModel) -> CatalogEntryResponse:
        data = request.model_dump()
        data["slug"] = await unique_slug(self._repository, request.name)
        entry = await self._repository.create(data)
        logger.info(f"{self._entity_name} {entry.id} created with slug {entry.slug}")
        return self._to_response(entry, 0)

    async def update_entry(self, entry_id: int, request: BaseModel) -> CatalogEntryResponse:
        entry = await self._get_or_404(entry_id)
        data = request.model_dump(exclude_unset=True)
        if data.get("name") and data["name"] != entry.name:
            data["slug"] = await unique_slug(self._repository, data["name"], exclude_id=entry.id)

        entry = await self._repository.update(entry, data)
        counts = await self._repository.course_counts([entry.id])
        return self._to_response(entry, counts.get(entry.id, 0))

    async def archive_entry(self, entry_id: int) -> CatalogEntryResponse:
        entry = await self._get_or_404(entry_id)
        entry = await self._repository.update(entry, {"is_active": False})
        logger.info(f"{self._entity_name} {entry.id} archived")
        counts = await self._repository.course_counts([entry.id])
        return self._to_response(entry, counts.get(entry.id, 0))

    async def _get_or_404(self, entry_id: int):
        entry = await self._repository.get_by_id(entry_id)
        if not entry:
            raise ResourceNotFoundException(f"{self._entity_name} not found with ID: {entry_id}")
        return entry

    def _to_response(self, entry, course_count: int) -> CatalogEntryResponse:
        response = self._response_model.model_validate(entry)
        response.course_count = course_count
        return response


class CurriculumService:
    def __init__(self, repository: CurriculumRepository):
        self._repository = repository

    async def list_curricula(self) -> Sequence[Curriculum]:
        return await self._repository.list_active()

    async def create_curriculum(self, request: CurriculumCreate) -> Curriculum:
        if await self._repository.find_duplicate(request.name, request.type, request.level):
            raise ConflictException("A curriculum with this name, type and level already exists")
        return await self._repository.create(request.model_dump())

    async def update_curriculum(self, curriculum_id: int, request: CurriculumUpdate) -> Curriculum:
        curriculum = await self._get_or_404(curriculum_id)
        data = request.model_dump(exclude_unset=True)

        name = data.get("name") or curriculum.name
        type_ = data.get("type") or curriculum.type
        level = data.get("level") or curriculum.level
        if await self._repository.find_duplicate(name, type_, level, exclude_id=curriculum.id):
            raise ConflictException("A curriculum with this name, type and level already exists")

        return await self._repository.update(curriculum, data)

    async def archive_curriculum(self, curriculum_id: int) -> Curriculum:
        curriculum = await self._get_or_404(curriculum_id)
        return await self._repository.update(curriculum, {"is_active": False})

    async def _get_or_404(self, curriculum_id: int) -> Curriculum:
        curriculum = await self._repository.get_by_id(curriculum_id)
        if not curriculum:
            raise ResourceNotFoundException(f"Curriculum not found with ID: {curriculum_id}")
        return curriculum
