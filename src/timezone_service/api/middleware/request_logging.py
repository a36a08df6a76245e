"""
Request middleware - access logging and write timeout

Every request produces exactly one log line with its method and path
(uvicorn's own access log is turned off in the server wrapper).

Handling is bounded by the configured write timeout. A request that has not
started its response in time is cancelled and answered with 503.

Written as a plain ASGI middleware so a timeout cancels the downstream app
directly instead of leaving it blocked on a half-read response stream.
"""

import asyncio

from fastapi import FastAPI, status
from fastapi.responses import PlainTextResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from timezone_service.utils.logger import get_logger
from timezone_service.models.enums import LogCategory

log = get_logger().for_category(LogCategory.API)

TIMEOUT_MESSAGE = "request timed out"


class RequestMiddleware:
    """Logs each HTTP request and bounds its handling time."""

    def __init__(self, app: ASGIApp, write_timeout: float = 10.0):
        self.app = app
        self.write_timeout = write_timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method, path = scope["method"], scope["path"]
        log.info(f"method:{method}, path:{path}")

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, send_wrapper), timeout=self.write_timeout)
        except asyncio.TimeoutError:
            log.warn(
                f"Request exceeded write timeout ({self.write_timeout}s)",
                method=method,
                path=path
            )
            if response_started:
                # Headers are already out; the connection is dropped by the server
                return
            response = PlainTextResponse(
                f"{TIMEOUT_MESSAGE}\n",
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE
            )
            await response(scope, receive, send)


def register_request_middleware(app: FastAPI, write_timeout: float) -> None:
    """Attach the access-log and write-timeout middleware to the app."""
    app.add_middleware(RequestMiddleware, write_timeout=write_timeout)
