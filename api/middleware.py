"""
Request middleware: per-request id, timing and an access log line.

The user id is only known when the request gate ran for the route, so it
is read back from ``request.state`` after the handler returns.
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import FastAPI, Request

logger = logging.getLogger("api.access")

REQUEST_ID_HEADER = "X-Request-ID"


def register_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def access_log(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id

        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.info(
            "%s %s %d user=%s rid=%s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            getattr(request.state, "user_id", "-"),
            request_id,
            elapsed * 1000,
        )
        return response
