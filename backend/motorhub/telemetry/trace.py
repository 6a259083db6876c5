from __future__ import annotations

import json
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from datetime import datetime, timezone
from time import perf_counter
from uuid import UUID, uuid4

_TRACE_CONTEXT: ContextVar["RequestTrace | None"] = ContextVar("request_trace", default=None)

TRACKED_STAGES = ("fetch", "db")


def _round_or_none(value: float | None) -> float | None:
    if value is None:
        return None
    return round(value, 3)


@dataclass
class RequestTrace:
    request_id: UUID = field(default_factory=uuid4)
    path: str = ""
    method: str = "GET"
    request_start_timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    stage_times_ms: dict[str, float] = field(default_factory=dict)
    total_time_ms: float | None = None
    result_count: int | None = None
    _request_perf_counter_start: float = field(default_factory=perf_counter, repr=False)

    def record_stage_time(self, stage: str, duration_ms: float) -> None:
        if stage not in TRACKED_STAGES:
            return
        self.stage_times_ms[stage] = self.stage_times_ms.get(stage, 0.0) + duration_ms

    def set_result_count(self, result_count: int) -> None:
        self.result_count = result_count

    def finalize(self) -> None:
        if self.total_time_ms is None:
            self.total_time_ms = (perf_counter() - self._request_perf_counter_start) * 1000.0

    def stage_time(self, stage: str) -> float:
        return self.stage_times_ms.get(stage, 0.0)

    def to_header_value(self) -> str:
        payload = {
            "request_id": str(self.request_id),
            "fetch_time_ms": _round_or_none(self.stage_times_ms.get("fetch")),
            "db_time_ms": _round_or_none(self.stage_times_ms.get("db")),
            "total_time_ms": _round_or_none(self.total_time_ms),
            "result_count": self.result_count,
        }
        return json.dumps(payload, separators=(",", ":"))


def get_current_trace() -> RequestTrace | None:
    return _TRACE_CONTEXT.get()


def set_current_trace(trace: RequestTrace) -> Token:
    return _TRACE_CONTEXT.set(trace)


def reset_current_trace(token: Token) -> None:
    _TRACE_CONTEXT.reset(token)
