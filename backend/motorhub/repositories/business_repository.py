from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import ColumnElement, Float, delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..categories import BusinessCategory
from ..errors import PersistenceFailure
from ..models import Business, utcnow
from ..schemas import BusinessRegistration
from ..services.distance_service import latitude_window
from ..services.normalizer import BusinessCandidate
from ..telemetry import timed_stage

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

# Table-valued function that expands a JSON array into rows of `value`.
_JSON_ELEMENTS_BY_DIALECT = {
    "postgresql": func.json_array_elements_text,
    "sqlite": func.json_each,
}


@contextmanager
def datastore_call(operation: str) -> Iterator[None]:
    try:
        with timed_stage("db"):
            yield
    except OperationalError as exc:
        raise PersistenceFailure(f"{operation} failed: {exc.orig}", retryable=True) from exc
    except SQLAlchemyError as exc:
        raise PersistenceFailure(f"{operation} failed: {exc}") from exc


def distance_km_expr(lat: float, lon: float) -> ColumnElement[float]:
    return func.haversine_km(lat, lon, Business.latitude, Business.longitude, type_=Float)


class BusinessRepository:
    """Datastore operations on the `businesses` table.

    Writes are single conditional statements; callers own the transaction.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    @property
    def dialect_name(self) -> str:
        return self.session.get_bind().dialect.name

    def _insert(self):
        insert = _INSERT_BY_DIALECT.get(self.dialect_name)
        if insert is None:
            raise PersistenceFailure(f"Upserts are not supported on dialect {self.dialect_name!r}")
        return insert(Business)

    def _has_category(self, category: BusinessCategory) -> ColumnElement[bool]:
        elements_fn = _JSON_ELEMENTS_BY_DIALECT.get(self.dialect_name)
        if elements_fn is None:
            raise PersistenceFailure(f"Category filters are not supported on dialect {self.dialect_name!r}")
        elements = elements_fn(Business.categories).table_valued("value").alias("category_values")
        return select(elements.c.value).where(elements.c.value == category.value).exists()

    def upsert_external(self, candidate: BusinessCandidate) -> uuid.UUID | None:
        """Insert by external id, or update an unregistered record with the same external id.

        Returns the affected id, or None when the existing record is
        registered and the guard left it untouched.
        """
        now = utcnow()
        stmt = self._insert().values(
            id=uuid.uuid4(),
            external_id=candidate.external_id,
            name=candidate.name,
            name_en=candidate.name_en,
            address=candidate.address,
            city=candidate.city,
            latitude=candidate.latitude,
            longitude=candidate.longitude,
            categories=list(candidate.categories),
            is_registered=False,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Business.external_id],
            set_={
                "name": stmt.excluded.name,
                "name_en": stmt.excluded.name_en,
                "address": stmt.excluded.address,
                "city": stmt.excluded.city,
                "latitude": stmt.excluded.latitude,
                "longitude": stmt.excluded.longitude,
                "categories": stmt.excluded.categories,
                "updated_at": now,
            },
            where=Business.is_registered.is_(False),
        ).returning(Business.id)

        with datastore_call(f"Upsert of external element {candidate.external_id}"):
            return self.session.execute(stmt).scalar_one_or_none()

    def upsert_registered(self, registration: BusinessRegistration) -> uuid.UUID:
        """Insert or fully overwrite the record with the caller's id, marking it registered."""
        now = utcnow()
        stmt = self._insert().values(
            id=registration.id,
            name=registration.name,
            name_en=registration.name_en,
            address=registration.address,
            city=registration.city,
            latitude=registration.latitude,
            longitude=registration.longitude,
            categories=list(registration.categories),
            specializations=registration.specializations,
            logo_map_url=registration.logo_map_url,
            is_registered=True,
            average_rating=registration.average_rating if registration.average_rating is not None else 0.0,
            rating_count=registration.rating_count if registration.rating_count is not None else 0,
            created_at=now,
            updated_at=now,
        )
        overwrite = {
            "name": stmt.excluded.name,
            "name_en": stmt.excluded.name_en,
            "address": stmt.excluded.address,
            "city": stmt.excluded.city,
            "latitude": stmt.excluded.latitude,
            "longitude": stmt.excluded.longitude,
            "categories": stmt.excluded.categories,
            "specializations": stmt.excluded.specializations,
            "logo_map_url": stmt.excluded.logo_map_url,
            "is_registered": True,
            "updated_at": now,
        }
        # Ratings are only overwritten when the caller supplies them.
        if registration.average_rating is not None:
            overwrite["average_rating"] = stmt.excluded.average_rating
        if registration.rating_count is not None:
            overwrite["rating_count"] = stmt.excluded.rating_count
        stmt = stmt.on_conflict_do_update(index_elements=[Business.id], set_=overwrite).returning(Business.id)

        with datastore_call(f"Registration of business {registration.id}"):
            return self.session.execute(stmt).scalar_one()

    def commit(self) -> None:
        with datastore_call("Commit"):
            self.session.commit()

    def get_by_id(self, business_id: uuid.UUID) -> Business | None:
        with datastore_call(f"Lookup of business {business_id}"):
            return self.session.get(Business, business_id, populate_existing=True)

    def search_by_radius(
        self,
        lat: float,
        lon: float,
        radius_km: float,
        limit: int,
        category: BusinessCategory | None = None,
    ) -> list[Business]:
        """Businesses within radius_km of the point, nearest first.

        Equal distances fall back to creation time, then id.
        """
        distance = distance_km_expr(lat, lon)
        min_lat, max_lat = latitude_window(lat, radius_km)
        stmt = select(Business).where(
            Business.latitude.between(min_lat, max_lat),
            distance <= radius_km,
        )
        if category is not None:
            stmt = stmt.where(self._has_category(category))
        stmt = stmt.order_by(distance.asc(), Business.created_at.asc(), Business.id.asc()).limit(limit)

        with datastore_call("Radius search"):
            return list(self.session.execute(stmt).scalars().all())

    def list_businesses(
        self,
        limit: int,
        category: BusinessCategory | None = None,
        search_term: str | None = None,
    ) -> list[Business]:
        stmt = select(Business)
        if category is not None:
            stmt = stmt.where(self._has_category(category))
        stmt = stmt.order_by(Business.created_at.desc(), Business.id.asc())
        if not search_term:
            stmt = stmt.limit(limit)

        results: list[Business] = []
        with datastore_call("Business listing"):
            for business in self.session.execute(stmt).scalars():
                if search_term and not business.matches_search_term(search_term):
                    continue
                results.append(business)
                if len(results) >= limit:
                    break
        return results

    def delete_unregistered(self, business_id: uuid.UUID) -> bool:
        stmt = (
            delete(Business)
            .where(Business.id == business_id, Business.is_registered.is_(False))
            .execution_options(synchronize_session=False)
        )
        with datastore_call(f"Deletion of business {business_id}"):
            result = self.session.execute(stmt)
        return bool(result.rowcount)
