import logging
from enum import Enum
from typing import Optional, Type, TypeVar

from tutorhub.utils.exceptions import BadRequestException

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

ALL = "ALL"


class ParserUtils:
    """Parsing of loosely typed query-string filters."""

    @staticmethod
    def enum_filter(enum_cls: Type[E], value: Optional[str], strict: bool = True) -> Optional[E]:
        """
        Case-insensitive enum filter where empty or "all" means no filter.

        Unknown values raise 400 when strict, otherwise they are ignored.
        """
        if not value or value.upper() == ALL:
            return None

        member = enum_cls.__members__.get(value.upper())
        if member is None:
            if strict:
                allowed = ", ".join(enum_cls.__members__)
                raise BadRequestException(f"Invalid filter value '{value}'. Allowed: {allowed}")
            logger.debug(f"Ignoring unknown {enum_cls.__name__} filter {value!r}")
        return member

    @staticmethod
    def active_filter(value: Optional[str]) -> Optional[bool]:
        """active (default) -> True, inactive -> False, all -> None"""
        normalized = (value or "active").lower()
        if normalized == "active":
            return True
        if normalized == "inactive":
            return False
        if normalized == "all":
            return None
        raise BadRequestException("status must be one of: active, inactive, all")
