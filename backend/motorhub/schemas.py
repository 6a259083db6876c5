from __future__ import annotations

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .categories import BusinessCategory, canonical_categories


class RawElement(BaseModel):
    """One element of the external geodata feed."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    element_type: str = Field(default="node", alias="type")
    id: int
    lat: float | None = None
    lon: float | None = None
    tags: dict[str, str] = Field(default_factory=dict)

    @field_validator("tags", mode="before")
    @classmethod
    def _stringify_tags(cls, value: Any) -> dict[str, str]:
        if not isinstance(value, dict):
            return {}
        return {str(key): str(item) for key, item in value.items() if item is not None}

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None


class BusinessRegistration(BaseModel):
    """Full record supplied by a user registering or claiming a business."""

    id: uuid.UUID
    name: str | None = None
    name_en: str | None = None
    address: str | None = None
    city: str | None = None
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    categories: list[BusinessCategory] = Field(default_factory=list)
    specializations: list[str] | None = None
    logo_map_url: str | None = None
    average_rating: float | None = Field(default=None, ge=0, le=5)
    rating_count: int | None = Field(default=None, ge=0)

    @field_validator("categories", mode="before")
    @classmethod
    def _parse_categories(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return canonical_categories(value)


class LocationView(BaseModel):
    address: str | None = None
    city: str | None = None
    latitude: float
    longitude: float


class MediaView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    map_logo: str | None = Field(default=None, serialization_alias="mapLogo")


class RatingView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    average_reviews: float = Field(serialization_alias="averageReviews")
    num_reviews: int = Field(serialization_alias="numReviews")


class BusinessView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: uuid.UUID
    name: str | None = None
    location: LocationView
    categories: list[str]
    specializations: list[str] | None = None
    media: MediaView
    is_registered: bool = Field(serialization_alias="isRegistered")
    rating: RatingView

    @classmethod
    def from_business(cls, business: Any) -> BusinessView:
        return cls(
            id=business.id,
            name=business.name,
            location=LocationView(
                address=business.address,
                city=business.city,
                latitude=business.latitude,
                longitude=business.longitude,
            ),
            categories=[category.display_name for category in canonical_categories(business.categories or [])],
            specializations=business.specializations,
            media=MediaView(map_logo=business.logo_map_url),
            is_registered=bool(business.is_registered),
            rating=RatingView(
                average_reviews=float(business.average_rating or 0.0),
                num_reviews=int(business.rating_count or 0),
            ),
        )


class SyncResponse(BaseModel):
    businesses_synced: int
    message: str


class HealthResponse(BaseModel):
    status: str


class ErrorResponse(BaseModel):
    error: str
    detail: Any
    retryable: bool
