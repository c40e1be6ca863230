"""Custom FastAPI middleware."""
from __future__ import annotations

import logging
from time import perf_counter
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from campus_agent.core.context import enter_request, exit_request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"
RESPONSE_TIME_HEADER = "X-Response-Time-Ms"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Bind a request id (client supplied or generated) for the request's logs and traces.

    GET routes identify the student through ``?user_id=``; it is bound here so
    log lines carry it from the first record.
    """

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
        token = enter_request(request_id, user_id=request.query_params.get("user_id"))
        started = perf_counter()

        try:
            response = await call_next(request)
        finally:
            exit_request(token)

        elapsed_ms = (perf_counter() - started) * 1000
        logger.debug("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[RESPONSE_TIME_HEADER] = f"{elapsed_ms:.1f}"
        return response
