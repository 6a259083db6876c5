from __future__ import annotations

from contextlib import contextmanager
from time import perf_counter

from .trace import get_current_trace


@contextmanager
def timed_stage(stage: str):
    started = perf_counter()
    try:
        yield
    finally:
        trace = get_current_trace()
        if trace is not None:
            trace.record_stage_time(stage, (perf_counter() - started) * 1000.0)
