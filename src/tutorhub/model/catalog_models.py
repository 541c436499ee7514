"""
Catalog lookups: categories, course types, course formats and curricula
"""
from sqlalchemy import Boolean, Column, Integer, String, Text, UniqueConstraint

from tutorhub.model.base import Base, BaseMixin


class CatalogMixin:
    """Columns shared by sluggable lookup tables."""

    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    sort_order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class Category(Base, BaseMixin, CatalogMixin):
    __tablename__ = "categories"

    icon = Column(String(100), nullable=True)
    color = Column(String(7), nullable=True)

    def __repr__(self):
        return f"<Category(id={self.id}, slug={self.slug})>"


class CourseType(Base, BaseMixin, CatalogMixin):
    __tablename__ = "course_types"


class CourseFormat(Base, BaseMixin, CatalogMixin):
    __tablename__ = "course_formats"


class Curriculum(Base, BaseMixin):
    __tablename__ = "curricula"
    __table_args__ = (
        UniqueConstraint("name", "type", "level", name="uq_curriculum_name_type_level"),
    )

    name = Column(String(255), nullable=False)
    type = Column(String(100), nullable=False)
    level = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
