from __future__ import annotations

from typing import Any

from sqlalchemy import DDL, Engine, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .services.distance_service import POSTGRES_HAVERSINE_FUNCTION, sql_haversine_km


class Base(DeclarativeBase):
    pass


event.listen(
    Base.metadata,
    "before_create",
    DDL(POSTGRES_HAVERSINE_FUNCTION).execute_if(dialect="postgresql"),
)


def _register_sqlite_functions(dbapi_connection, connection_record) -> None:
    dbapi_connection.create_function("haversine_km", 4, sql_haversine_km, deterministic=True)


def create_db_engine(
    database_url: str,
    *,
    pool_timeout_seconds: float = 30.0,
    statement_timeout_ms: int = 15000,
) -> Engine:
    url = make_url(database_url)
    backend = url.get_backend_name()
    kwargs: dict[str, Any] = {"future": True, "pool_pre_ping": True}

    if backend == "sqlite":
        kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": statement_timeout_ms / 1000.0,
        }
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_timeout"] = pool_timeout_seconds
    else:
        kwargs["pool_timeout"] = pool_timeout_seconds
        if backend == "postgresql":
            kwargs["connect_args"] = {"options": f"-c statement_timeout={int(statement_timeout_ms)}"}

    engine = create_engine(url, **kwargs)
    if backend == "sqlite":
        event.listen(engine, "connect", _register_sqlite_functions)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)


def init_schema(engine: Engine) -> None:
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
