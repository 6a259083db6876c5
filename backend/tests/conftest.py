from __future__ import annotations

import uuid
from collections.abc import Generator

import pytest
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from motorhub.database import build_session_factory, create_db_engine, init_schema
from motorhub.schemas import BusinessRegistration, RawElement

SOFIA_LAT = 42.6977
SOFIA_LON = 23.3219


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    db_engine = create_db_engine("sqlite://")
    init_schema(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture()
def session(engine: Engine) -> Generator[Session, None, None]:
    factory = build_session_factory(engine)
    with factory() as db:
        yield db


def make_element(
    element_id: int,
    tags: dict[str, str],
    lat: float | None = SOFIA_LAT,
    lon: float | None = SOFIA_LON,
) -> RawElement:
    return RawElement(type="node", id=element_id, lat=lat, lon=lon, tags=tags)


def make_registration(business_id: uuid.UUID | None = None, **overrides) -> BusinessRegistration:
    payload = {
        "id": business_id or uuid.uuid4(),
        "name": "Shine Car Wash",
        "latitude": SOFIA_LAT,
        "longitude": SOFIA_LON,
        "categories": ["CarWash"],
    }
    payload.update(overrides)
    return BusinessRegistration.model_validate(payload)
