from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tutorhub.model.settings_models import InstitutionSettings
from tutorhub.repositories.base_repo import BaseRepository


class SettingsRepository(BaseRepository[InstitutionSettings]):
    def __init__(self, session: AsyncSession):
        super().__init__(InstitutionSettings, session)

    async def get_active(self) -> Optional[InstitutionSettings]:
        query = (
            select(InstitutionSettings)
            .where(InstitutionSettings.is_active.is_(True))
            .order_by(InstitutionSettings.id.desc())
            .limit(1)
        )
        return (await self.session.execute(query)).scalars().first()
