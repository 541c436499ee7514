"""
Seed reference data: super admin, institution settings, catalog lookups and a curriculum.

Safe to run repeatedly; rows that already exist (by slug or unique key) are skipped.

    python -m tutorhub.db.seed
"""
import asyncio
import logging

from tutorhub.config import get_settings
from tutorhub.db.session import AsyncSessionLocal, close_db, create_schema
from tutorhub.repositories.catalog_repo import (
    CatalogRepository,
    CategoryRepository,
    CourseFormatRepository,
    CourseTypeRepository,
    CurriculumRepository,
)
from tutorhub.repositories.settings_repo import SettingsRepository
from tutorhub.repositories.user_repo import PasswordResetTokenRepository, UserRepository
from tutorhub.services.auth_service import AuthService
from tutorhub.services.settings_service import SettingsService
from tutorhub.utils.log import setup_logging
from tutorhub.utils.text_utils import slugify

logger = logging.getLogger(__name__)

CATEGORIES = [
    {"name": "Mathematics", "icon": "calculator", "color": "#3B82F6", "sort_order": 0},
    {"name": "English", "icon": "book-open", "color": "#10B981", "sort_order": 1},
    {"name": "Science", "icon": "flask", "color": "#8B5CF6", "sort_order": 2},
    {"name": "Computer Science", "icon": "code", "color": "#F59E0B", "sort_order": 3},
]

COURSE_TYPES = [
    {"name": "Regular", "sort_order": 0},
    {"name": "Exam Preparation", "sort_order": 1},
    {"name": "Intensive", "sort_order": 2},
]

COURSE_FORMATS = [
    {"name": "Online", "sort_order": 0},
    {"name": "In Person", "sort_order": 1},
    {"name": "Hybrid", "sort_order": 2},
]

CURRICULA = [
    {"name": "National Curriculum", "type": "UK", "level": "GCSE"},
    {"name": "National Curriculum", "type": "UK", "level": "A-Level"},
]


async def seed_catalog(repository: CatalogRepository, rows: list[dict]) -> int:
    created = 0
    for row in rows:
        slug = slugify(row["name"])
        if await repository.get_by_slug(slug):
            continue
        await repository.add({**row, "slug": slug, "is_active": True})
        created += 1
    await repository.commit()
    return created


async def seed_curricula(repository: CurriculumRepository) -> int:
    created = 0
    for row in CURRICULA:
        if await repository.find_duplicate(row["name"], row["type"], row["level"]):
            continue
        await repository.add({**row, "is_active": True})
        created += 1
    await repository.commit()
    return created


async def seed():
    settings = get_settings()

    await create_schema()

    async with AsyncSessionLocal() as session:
        auth_service = AuthService(
            settings=settings,
            user_repository=UserRepository(session),
            token_repository=PasswordResetTokenRepository(session),
        )
        admin, created = await auth_service.setup_super_admin()
        logger.info(f"Super admin {admin.email} {'created' if created else 'already present'}")

        institution = await SettingsService(settings, SettingsRepository(session)).get_settings()
        logger.info(f"Institution settings {institution.id} ready")

        logger.info(f"Categories created: {await seed_catalog(CategoryRepository(session), CATEGORIES)}")
        logger.info(f"Course types created: {await seed_catalog(CourseTypeRepository(session), COURSE_TYPES)}")
        logger.info(f"Course formats created: {await seed_catalog(CourseFormatRepository(session), COURSE_FORMATS)}")
        logger.info(f"Curricula created: {await seed_curricula(CurriculumRepository(session))}")

    await close_db()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(seed())
