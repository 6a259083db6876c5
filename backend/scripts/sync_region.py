#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from motorhub.config import get_settings
from motorhub.database import build_session_factory, create_db_engine
from motorhub.errors import MotorhubError
from motorhub.services.business_service import BusinessService
from motorhub.services.overpass_client import OverpassClient
from motorhub.telemetry.logging_utils import configure_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Sync car-related businesses from Overpass into the directory.")
    parser.add_argument(
        "country_code",
        nargs="?",
        default=settings.default_country_code,
        help="ISO 3166-1 alpha-2 country code (default: %(default)s)",
    )
    parser.add_argument("--overpass-url", default=settings.overpass_api_url)
    parser.add_argument("--timeout", type=int, default=settings.overpass_timeout_seconds)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level, settings.perf_log_level)

    engine = create_db_engine(
        settings.database_url,
        pool_timeout_seconds=settings.db_pool_timeout_seconds,
        statement_timeout_ms=settings.db_statement_timeout_ms,
    )
    session_factory = build_session_factory(engine)
    try:
        with OverpassClient(base_url=args.overpass_url, timeout_seconds=args.timeout) as client:
            with session_factory() as session:
                result = BusinessService(session, client).sync_external(args.country_code)
    except MotorhubError as exc:
        print(f"Sync failed ({exc.category}, retryable={exc.retryable}): {exc.message}", file=sys.stderr)
        return 1
    finally:
        engine.dispose()

    print(result.message)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
