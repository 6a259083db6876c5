from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import Engine, text
from sqlalchemy.orm import Session

from .config import Settings, get_settings
from .database import build_session_factory, create_db_engine
from .dependencies import get_db
from .errors import register_exception_handlers
from .routes.businesses import router as businesses_router
from .schemas import HealthResponse
from .services.overpass_client import OverpassClient
from .telemetry.logging_utils import configure_logging
from .telemetry.middleware import TelemetryMiddleware


def create_app(
    settings: Settings | None = None,
    feed_client: OverpassClient | None = None,
    engine: Engine | None = None,
) -> FastAPI:
    """Build the API; resources passed in are used as-is and left open on shutdown."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.perf_log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db_engine = engine or create_db_engine(
            settings.database_url,
            pool_timeout_seconds=settings.db_pool_timeout_seconds,
            statement_timeout_ms=settings.db_statement_timeout_ms,
        )
        client = feed_client or OverpassClient(
            base_url=settings.overpass_api_url,
            timeout_seconds=settings.overpass_timeout_seconds,
        )
        app.state.settings = settings
        app.state.engine = db_engine
        app.state.session_factory = build_session_factory(db_engine)
        app.state.feed_client = client
        try:
            yield
        finally:
            if feed_client is None:
                client.close()
            if engine is None:
                db_engine.dispose()

    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(TelemetryMiddleware)
    register_exception_handlers(app)

    app.include_router(businesses_router, prefix="/api")

    @app.get("/health", response_model=HealthResponse)
    def healthcheck(db: Session = Depends(get_db)) -> HealthResponse:
        db.execute(text("SELECT 1"))
        return HealthResponse(status="ok")

    return app


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(create_app(_settings), host=_settings.host, port=_settings.port)
