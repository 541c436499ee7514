"""
Settings Service - the institution settings row and the defaults derived from it
"""
import logging
from decimal import Decimal

from tutorhub.config import Settings
from tutorhub.model.settings_models import InstitutionSettings
from tutorhub.repositories.settings_repo import SettingsRepository
from tutorhub.schemas.settings import SettingsUpdate
from tutorhub.utils.money_utils import price_fields_to_money, to_decimal

logger = logging.getLogger(__name__)


class SettingsService:
    def __init__(self, settings: Settings, settings_repository: SettingsRepository):
        self._settings = settings
        self._settings_repository = settings_repository

    async def get_settings(self) -> InstitutionSettings:
        """Active settings row, created with defaults on first access."""
        current = await self._settings_repository.get_active()
        if current:
            return current

        current = await self._settings_repository.create(self._default_values())
        logger.info(f"Created default institution settings {current.id}")
        return current

    async def update_settings(self, request: SettingsUpdate) -> InstitutionSettings:
        data = price_fields_to_money(request.model_dump(), "min_course_price", "max_course_price")
        data["tax_rate"] = to_decimal(data["tax_rate"])
        if data.get("contact_email"):
            data["contact_email"] = str(data["contact_email"])
        if data.get("email_from_address"):
            data["email_from_address"] = str(data["email_from_address"])

        current = await self._settings_repository.get_active()
        if current:
            current = await self._settings_repository.update(current, data)
        else:
            current = await self._settings_repository.create({**data, "is_active": True})
        logger.info(f"Institution settings {current.id} updated")
        return current

    # =============================
    #   Pricing defaults
    # =============================
    async def tax_rate(self) -> Decimal:
        current = await self._settings_repository.get_active()
        if current and current.tax_rate is not None:
            return to_decimal(current.tax_rate)
        return to_decimal(self._settings.default_tax_rate)

    async def currency_and_timezone(self) -> tuple[str, str]:
        current = await self._settings_repository.get_active()
        if current:
            return current.primary_currency, current.default_timezone
        return self._settings.default_currency, self._settings.default_timezone

    def _default_values(self) -> dict:
        return {
            "primary_currency": self._settings.default_currency,
            "default_timezone": self._settings.default_timezone,
            "tax_rate": to_decimal(self._settings.default_tax_rate),
            "age_groups": ["5-10", "11-14", "15-18", "Adults"],
            "qualification_levels": ["GCSE", "A-Level", "Undergraduate"],
            "payment_methods": ["CARD", "BANK_TRANSFER", "CASH"],
            "is_active": True,
        }
