from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.orm import Session

from ..categories import BusinessCategory
from ..errors import ValidationFailure
from ..models import Business
from ..repositories.business_repository import BusinessRepository
from ..schemas import BusinessRegistration
from .overpass_client import OverpassClient, normalize_country_code
from .reconciliation import ReconciliationEngine
from .search_service import DEFAULT_LIMIT, SearchEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SyncResult:
    count: int
    message: str


class BusinessService:
    """Caller-facing operations over one datastore session.

    The session and feed client are owned by the caller and passed in.
    """

    def __init__(
        self,
        session: Session,
        feed_client: OverpassClient | None = None,
        *,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int | None = None,
    ) -> None:
        self.session = session
        self.feed_client = feed_client
        self.repository = BusinessRepository(session)
        self.reconciliation = ReconciliationEngine(session, self.repository)
        self.search = SearchEngine(session, self.repository, default_limit=default_limit, max_limit=max_limit)
        self.default_limit = default_limit
        self.max_limit = max_limit

    def sync_external(self, country_code: str) -> SyncResult:
        if self.feed_client is None:
            raise RuntimeError("BusinessService was built without a feed client")
        code = normalize_country_code(country_code)
        logger.info("Starting business sync for country: %s", code)

        # UpstreamFetchFailure propagates: nothing has been written yet.
        elements = self.feed_client.fetch(code)
        synced_count = self.reconciliation.sync(elements)

        logger.info("Successfully synced %s businesses for %s", synced_count, code)
        return SyncResult(count=synced_count, message=f"Successfully synced {synced_count} businesses")

    def register_business(self, registration: BusinessRegistration) -> Business:
        return self.reconciliation.register(registration)

    def search_by_radius_and_category(
        self,
        lat: float,
        lon: float,
        radius_km: float,
        category: BusinessCategory | str,
        limit: int | None = None,
    ) -> list[Business]:
        return self.search.search_by_radius_and_category(lat, lon, radius_km, category, limit)

    def search_by_radius(self, lat: float, lon: float, radius_km: float, limit: int | None = None) -> list[Business]:
        return self.search.search_by_radius(lat, lon, radius_km, limit)

    def get_business(self, business_id: uuid.UUID) -> Business | None:
        return self.repository.get_by_id(business_id)

    def list_businesses(
        self,
        category: BusinessCategory | str | None = None,
        search_term: str | None = None,
        limit: int | None = None,
    ) -> list[Business]:
        resolved_limit = self.default_limit if limit is None else limit
        if resolved_limit <= 0:
            raise ValidationFailure(f"limit must be a positive integer, got {resolved_limit}")
        if self.max_limit is not None and resolved_limit > self.max_limit:
            raise ValidationFailure(f"limit must not exceed {self.max_limit}, got {resolved_limit}")
        resolved_category = None
        if category is not None:
            try:
                resolved_category = BusinessCategory.parse(category)
            except ValueError:
                raise ValidationFailure(f"Unknown category {category!r}") from None
        term = search_term.strip() if search_term else None
        return self.repository.list_businesses(resolved_limit, category=resolved_category, search_term=term)

    def delete_business(self, business_id: uuid.UUID) -> bool:
        """Delete an unregistered business; registered ones are kept."""
        deleted = self.repository.delete_unregistered(business_id)
        self.repository.commit()
        if deleted:
            logger.info("Deleted unregistered business %s", business_id)
        return deleted
