from __future__ import annotations

import logging

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from .logging_utils import PERF_LEVEL_NUM, PERF_LOGGER_NAME
from .trace import RequestTrace, reset_current_trace, set_current_trace

perf_logger = logging.getLogger(PERF_LOGGER_NAME)


class TelemetryMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace = RequestTrace(path=request.url.path, method=request.method)
        request.state.request_id = str(trace.request_id)
        token = set_current_trace(trace)

        response: Response | None = None
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            trace.finalize()
            if response is not None and request.url.path.startswith("/api/"):
                response.headers["X-Request-Timing"] = trace.to_header_value()
                response.headers["X-Request-Id"] = str(trace.request_id)
                self._log_trace(trace, status_code)
            reset_current_trace(token)

    def _log_trace(self, trace: RequestTrace, status_code: int) -> None:
        perf_logger.log(
            PERF_LEVEL_NUM,
            "request_trace request_id=%s method=%s path=%s status=%s fetch_ms=%.3f db_ms=%.3f total_ms=%.3f results=%s",
            trace.request_id,
            trace.method,
            trace.path,
            status_code,
            trace.stage_time("fetch"),
            trace.stage_time("db"),
            trace.total_time_ms or 0.0,
            trace.result_count,
        )
