"""Request tracing and logging helpers."""

from .instrumentation import timed_stage
from .trace import (
    RequestTrace,
    get_current_trace,
    reset_current_trace,
    set_current_trace,
)

__all__ = [
    "RequestTrace",
    "get_current_trace",
    "reset_current_trace",
    "set_current_trace",
    "timed_stage",
]
