from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import declarative_base, declared_attr

from tutorhub.utils.date_utils import utcnow

Base = declarative_base()


# --- Mixin ---
class TimestampMixin:
    """Adds created_date and updated_date (naive UTC)."""

    created_date = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_date = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


# --- Base class for every model ---
class BaseMixin(TimestampMixin):
    """Integer primary key plus timestamps."""

    id = Column(Integer, primary_key=True, index=True)

    # Default table name: User -> users
    @declared_attr
    def __tablename__(cls):
        return cls.__name__.lower() + "s"

    def __repr__(self):
        return f"<{self.__class__.__name__}(id={self.id})>"
