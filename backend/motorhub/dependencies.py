from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .config import Settings
from .services.business_service import BusinessService
from .services.overpass_client import OverpassClient


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_feed_client(request: Request) -> OverpassClient:
    return request.app.state.feed_client


def get_business_service(
    db: Session = Depends(get_db),
    feed_client: OverpassClient = Depends(get_feed_client),
    settings: Settings = Depends(get_app_settings),
) -> BusinessService:
    return BusinessService(
        db,
        feed_client,
        default_limit=settings.default_search_limit,
        max_limit=settings.max_search_limit,
    )
