"""
HTTP middleware for the high score API: CORS, security headers,
body size cap and per-client request rate limiting.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.config import settings
from app.services.rate_limiter import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}

request_limiter = SlidingWindowRateLimiter(
    max_requests=settings.RATE_LIMIT_REQUESTS,
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS
)


def get_client_address(request: Request) -> str:
    """Network origin of a request, as seen by the server."""
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


async def security_headers_middleware(request: Request, call_next):
    response = await call_next(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    return response


class BodySizeLimitMiddleware:
    """
    Reject request bodies larger than MAX_BODY_BYTES with a 413.

    The body is buffered while counting the bytes actually received, so
    chunked requests without a Content-Length header are capped as well.
    Buffered messages are replayed to the application unchanged.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        max_bytes = settings.MAX_BODY_BYTES
        content_length = Headers(scope=scope).get("content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                response = JSONResponse(
                    status_code=400,
                    content={"error": "Invalid Content-Length header", "error_code": "INVALID_CONTENT_LENGTH"}
                )
                await response(scope, receive, send)
                return
            if declared > max_bytes:
                await self._reject(scope, receive, send)
                return

        messages = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            messages.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > max_bytes:
                await self._reject(scope, receive, send)
                return
            more_body = message.get("more_body", False)

        async def replay_receive() -> Message:
            if messages:
                return messages.pop(0)
            return await receive()

        await self.app(scope, replay_receive, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        logger.warning(f"Rejected request body over {settings.MAX_BODY_BYTES} bytes on {scope.get('path')}")
        response = JSONResponse(
            status_code=413,
            content={"error": "Request body too large", "error_code": "PAYLOAD_TOO_LARGE"}
        )
        await response(scope, receive, send)


async def rate_limit_middleware(request: Request, call_next):
    if not settings.RATE_LIMIT_ENABLED or not request.url.path.startswith("/api"):
        return await call_next(request)

    client = get_client_address(request)
    if not request_limiter.allow(client):
        logger.warning(f"Rate limit hit for {client} on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=429,
            content={"error": "Too many requests, please try again later.", "error_code": "RATE_LIMITED"},
            headers={"Retry-After": str(request_limiter.retry_after(client))}
        )
    return await call_next(request)


def register_middleware(app: FastAPI) -> None:
    """Register all middleware with the FastAPI app.

    Starlette runs the last registered middleware first: security headers
    wrap every response, including 429s from the rate limiter, and the rate
    limiter sees a request before the body size check.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type"],
    )
    app.add_middleware(BodySizeLimitMiddleware)
    app.middleware("http")(rate_limit_middleware)
    app.middleware("http")(security_headers_middleware)
