"""ASGI middleware: request logging and the catch-all error handler.

Both use the ASGI interface directly (no ``BaseHTTPMiddleware``).
"""

import logging
import time
from datetime import datetime, timezone

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from levante_catalog.server.schemas import ErrorResponse

logger = logging.getLogger(__name__)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def error_json(error: str, message: str, status_code: int) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, timestamp=_utc_timestamp())
    return JSONResponse(body.model_dump(), status_code=status_code)


async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    """JSON 404 for routes that do not exist."""
    return error_json(
        "Not Found",
        f"Route {request.method} {request.url.path} not found",
        404,
    )


class RequestLogMiddleware:
    """Logs ``METHOD path - status (ms)`` for every HTTP request."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code = 500

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "%s %s - %d (%.0fms)",
                scope.get("method", "?"),
                scope.get("path", "/"),
                status_code,
                elapsed_ms,
            )


class ErrorHandlerMiddleware:
    """Maps unhandled exceptions to a 500 JSON body.

    If the response has already started the exception is re-raised, since
    no second response can be sent.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            logger.exception("Error handling request %s: %s", scope.get("path", "/"), exc)
            if response_started:
                raise
            response = error_json("Internal Server Error", str(exc), 500)
            await response(scope, receive, send)
