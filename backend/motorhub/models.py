import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    Index,
    Integer,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from .categories import BusinessCategory, canonical_categories
from .database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CategoryList(TypeDecorator):
    """JSON array of category values, always distinct and in canonical order."""

    impl = JSON
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return []
        return [category.value for category in canonical_categories(value)]

    def process_result_value(self, value, dialect):
        if not value:
            return []
        return canonical_categories(value)


class Business(Base):
    __tablename__ = "businesses"
    __table_args__ = (
        CheckConstraint("latitude >= -90 AND latitude <= 90", name="businesses_latitude_range"),
        CheckConstraint("longitude >= -180 AND longitude <= 180", name="businesses_longitude_range"),
        CheckConstraint("created_at <= updated_at", name="businesses_timestamps_ordered"),
        Index("ix_businesses_latitude", "latitude"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    external_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True, unique=True)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    name_en: Mapped[str | None] = mapped_column(Text, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    city: Mapped[str | None] = mapped_column(Text, nullable=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    categories: Mapped[list[BusinessCategory]] = mapped_column(CategoryList, nullable=False, default=list)
    specializations: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    logo_map_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_registered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    average_rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )

    def matches_search_term(self, term: str) -> bool:
        needle = term.strip().lower()
        if not needle:
            return True
        if self.name and needle in self.name.lower():
            return True
        if self.address and needle in self.address.lower():
            return True
        return any(needle in category.display_name.lower() for category in self.categories or [])
