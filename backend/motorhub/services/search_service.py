from __future__ import annotations

import math
from dataclasses import dataclass

from sqlalchemy.orm import Session

from ..categories import BusinessCategory
from ..errors import ValidationFailure
from ..models import Business
from ..repositories.business_repository import BusinessRepository
from ..telemetry import get_current_trace

DEFAULT_LIMIT = 50


@dataclass(frozen=True, slots=True)
class RadiusQuery:
    lat: float
    lon: float
    radius_km: float
    limit: int
    category: BusinessCategory | None = None


def _record_trace_results(result_count: int) -> None:
    trace = get_current_trace()
    if trace is None:
        return
    trace.set_result_count(result_count)


def build_radius_query(
    lat: float,
    lon: float,
    radius_km: float,
    category: BusinessCategory | str | None = None,
    limit: int | None = None,
    *,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int | None = None,
) -> RadiusQuery:
    """Validate raw search inputs before anything reaches the datastore."""
    if lat is None or lon is None:
        raise ValidationFailure("Both latitude and longitude are required")
    if not (math.isfinite(lat) and -90.0 <= lat <= 90.0):
        raise ValidationFailure(f"Latitude must be within [-90, 90], got {lat}")
    if not (math.isfinite(lon) and -180.0 <= lon <= 180.0):
        raise ValidationFailure(f"Longitude must be within [-180, 180], got {lon}")
    if radius_km is None or not math.isfinite(radius_km) or radius_km <= 0:
        raise ValidationFailure(f"radius_km must be a positive number, got {radius_km}")

    resolved_limit = default_limit if limit is None else limit
    if isinstance(resolved_limit, bool) or not isinstance(resolved_limit, int) or resolved_limit <= 0:
        raise ValidationFailure(f"limit must be a positive integer, got {limit!r}")
    if max_limit is not None and resolved_limit > max_limit:
        raise ValidationFailure(f"limit must not exceed {max_limit}, got {resolved_limit}")

    resolved_category: BusinessCategory | None = None
    if category is not None:
        try:
            resolved_category = BusinessCategory.parse(category)
        except ValueError:
            raise ValidationFailure(f"Unknown category {category!r}") from None

    return RadiusQuery(
        lat=float(lat),
        lon=float(lon),
        radius_km=float(radius_km),
        limit=resolved_limit,
        category=resolved_category,
    )


class SearchEngine:
    """Proximity search; distance is computed by the datastore."""

    def __init__(
        self,
        session: Session,
        repository: BusinessRepository | None = None,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int | None = None,
    ) -> None:
        self.repository = repository or BusinessRepository(session)
        self.default_limit = default_limit
        self.max_limit = max_limit

    def search_by_radius_and_category(
        self,
        lat: float,
        lon: float,
        radius_km: float,
        category: BusinessCategory | str,
        limit: int | None = None,
    ) -> list[Business]:
        if category is None:
            raise ValidationFailure("category is required")
        query = build_radius_query(
            lat,
            lon,
            radius_km,
            category,
            limit,
            default_limit=self.default_limit,
            max_limit=self.max_limit,
        )
        return self._run(query)

    def search_by_radius(
        self,
        lat: float,
        lon: float,
        radius_km: float,
        limit: int | None = None,
    ) -> list[Business]:
        query = build_radius_query(
            lat,
            lon,
            radius_km,
            None,
            limit,
            default_limit=self.default_limit,
            max_limit=self.max_limit,
        )
        return self._run(query)

    def _run(self, query: RadiusQuery) -> list[Business]:
        results = self.repository.search_by_radius(
            query.lat,
            query.lon,
            query.radius_km,
            query.limit,
            category=query.category,
        )
        _record_trace_results(len(results))
        return results
