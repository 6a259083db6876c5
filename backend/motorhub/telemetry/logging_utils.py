from __future__ import annotations

import logging

PERF_LEVEL_NUM = 25
PERF_LEVEL_NAME = "PERF"
PERF_LOGGER_NAME = "motorhub.perf"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def register_perf_level() -> None:
    if logging.getLevelName(PERF_LEVEL_NUM) != PERF_LEVEL_NAME:
        logging.addLevelName(PERF_LEVEL_NUM, PERF_LEVEL_NAME)


def resolve_log_level(value: str | None, fallback: int = logging.INFO) -> int:
    """Map a level name, including PERF, to its number; unknown names use ``fallback``."""
    if not value:
        return fallback
    normalized = value.strip().upper()
    if normalized == PERF_LEVEL_NAME:
        return PERF_LEVEL_NUM
    resolved = logging.getLevelName(normalized)
    return resolved if isinstance(resolved, int) else fallback


def configure_logging(app_level: str, perf_level: str) -> None:
    """Set the root level and the perf logger's own level.

    Handlers are only installed when the root logger has none, so a host
    process (uvicorn, pytest) keeps its own.
    """
    register_perf_level()
    app_log_level = resolve_log_level(app_level)
    perf_log_level = resolve_log_level(perf_level, fallback=PERF_LEVEL_NUM)

    root = logging.getLogger()
    if root.handlers:
        root.setLevel(app_log_level)
    else:
        logging.basicConfig(level=app_log_level, format=LOG_FORMAT)

    logging.getLogger(PERF_LOGGER_NAME).setLevel(perf_log_level)
