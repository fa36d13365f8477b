"""Local web server that receives the OAuth authorization callback."""

from __future__ import annotations

import queue
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response


@dataclass(frozen=True)
class CallbackResult:
    """What the browser redirect delivered: a code, or an error."""

    code: str | None = None
    error: str | None = None


def create_app(
    expected_state: str,
    results: queue.Queue[CallbackResult] | None = None,
) -> FastAPI:
    """Create a FastAPI app that accepts one OAuth redirect.

    Args:
        expected_state: The ``state`` value sent with the authorization
            request; callbacks carrying anything else are rejected.
        results: Queue receiving a :class:`CallbackResult` per callback.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="jiranav oauth callback",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.state.expected_state = expected_state
    app.state.results = results if results is not None else queue.Queue()

    from starlette.middleware.base import BaseHTTPMiddleware

    class SecurityHeadersMiddleware(BaseHTTPMiddleware):
        async def dispatch(self, request: Request, call_next: Any) -> Response:
            response = await call_next(request)
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["Cache-Control"] = "no-store"
            return response

    app.add_middleware(SecurityHeadersMiddleware)

    from jiranav.web.callback.routes import router

    app.include_router(router)

    return app


__all__ = ["CallbackResult", "create_app"]
