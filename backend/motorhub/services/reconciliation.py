from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.orm import Session

from ..categories import classify
from ..errors import BusinessNotFound, PersistenceFailure
from ..models import Business
from ..repositories.business_repository import BusinessRepository
from ..schemas import BusinessRegistration, RawElement
from .normalizer import normalize

logger = logging.getLogger(__name__)

PROGRESS_LOG_EVERY = 100


class ReconciliationEngine:
    """Merges feed elements and user registrations into the business table.

    Registered records are only ever written by `register`; the sync path
    leaves them untouched through the datastore-side guard.
    """

    def __init__(self, session: Session, repository: BusinessRepository | None = None) -> None:
        self.session = session
        self.repository = repository or BusinessRepository(session)

    def sync(self, elements: Iterable[RawElement]) -> int:
        """Upsert every car-related element; returns how many records were written.

        Each element commits on its own. A failed element is logged and
        rolled back without affecting the others.
        """
        synced_count = 0
        for element in elements:
            if not element.has_coordinates:
                logger.debug("Skipping element %s without coordinates", element.id)
                continue

            categories = classify(element.tags)
            if not categories:
                continue

            candidate = normalize(element.id, element.lat, element.lon, element.tags, categories=categories)
            try:
                written_id = self.repository.upsert_external(candidate)
                self.repository.commit()
            except PersistenceFailure:
                self.session.rollback()
                logger.exception("Failed to upsert business %s", element.id)
                continue

            if written_id is None:
                logger.debug("Element %s belongs to a registered business; left unchanged", element.id)
                continue

            synced_count += 1
            if synced_count % PROGRESS_LOG_EVERY == 0:
                logger.info("Synced %s businesses so far", synced_count)

        logger.info("Sync pass finished with %s businesses written", synced_count)
        return synced_count

    def register(self, registration: BusinessRegistration) -> Business:
        try:
            business_id = self.repository.upsert_registered(registration)
            self.repository.commit()
        except PersistenceFailure:
            self.session.rollback()
            raise

        business = self.repository.get_by_id(business_id)
        if business is None:
            raise BusinessNotFound(f"Business {business_id} missing after registration")
        return business
