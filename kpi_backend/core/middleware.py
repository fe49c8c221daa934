"""CORS, API-key gate, request-id, and logging middleware."""

import logging
import re
import time
import uuid

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from kpi_backend.core.config import Settings

logger = logging.getLogger("kpi_backend")

API_KEY_HEADER = "x-api-key"
REQUEST_ID_HEADER = "x-request-id"

# Caller-supplied ids longer than this, or with characters outside the set, are replaced.
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def resolve_request_id(supplied) -> str:
    """Reuse a well-formed caller id so gateway and backend logs correlate; else mint one."""
    supplied = (supplied or "").strip()
    if _REQUEST_ID_PATTERN.match(supplied):
        return supplied
    return uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id, time it, and log one line per request."""

    async def dispatch(self, request: Request, call_next):
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response: Response = await call_next(request)
        except Exception:
            logger.exception(
                "[%s] %s %s failed after %sms",
                request_id,
                request.method,
                request.url.path,
                round((time.perf_counter() - started) * 1000, 2),
            )
            raise

        duration = round((time.perf_counter() - started) * 1000, 2)
        response.headers["X-Request-Id"] = request_id
        response.headers["X-Response-Time-Ms"] = str(duration)

        logger.info(
            "[%s] %s %s %s %sms",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration,
        )
        return response


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Reject requests whose x-api-key header does not match the configured secret.

    Pre-flight requests always pass. With no secret configured the gate is open.
    """

    def __init__(self, app, api_key=None):
        super().__init__(app)
        self.api_key = api_key

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or not self.api_key:
            return await call_next(request)
        if request.headers.get(API_KEY_HEADER) != self.api_key:
            logger.warning("Rejected %s %s: invalid API key", request.method, request.url.path)
            return JSONResponse(status_code=401, content={"ok": False, "error": "INVALID_API_KEY"})
        return await call_next(request)


def setup_middleware(app: FastAPI, app_settings: Settings) -> None:
    """Configure all middleware for the application.

    Starlette runs the last added middleware first, so CORS wraps the gate
    and its headers reach 401 responses too.
    """
    app.add_middleware(ApiKeyMiddleware, api_key=app_settings.API_KEY)

    # Request ID + timing
    app.add_middleware(RequestIdMiddleware)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[app_settings.ALLOW_ORIGIN],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", API_KEY_HEADER, "authorization", REQUEST_ID_HEADER],
        expose_headers=["X-Request-Id", "X-Response-Time-Ms"],
    )
