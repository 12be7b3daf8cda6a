"""
Request body size guard.

Rejects requests whose declared Content-Length exceeds the configured cap
before the body is read or parsed. Chunked bodies without a length are
capped again by ``read_body_capped`` in the chat route.
"""

from __future__ import annotations

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from chat_relay.errors import error_response, payload_too_large
from chat_relay.logging_config import logger


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        max_body_bytes: int,
        methods: tuple[str, ...] = ("POST", "PUT", "PATCH"),
    ):
        super().__init__(app)
        self.max_body_bytes = max_body_bytes
        self.methods = {m.upper() for m in methods}

    def _declared_length(self, request: Request) -> int | None:
        raw = request.headers.get("content-length")
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            return None

    async def dispatch(self, request: Request, call_next):
        if request.method.upper() in self.methods:
            declared = self._declared_length(request)
            if declared is not None and declared > self.max_body_bytes:
                logger.warning(
                    "body_limit: rejected request path=%s content_length=%d limit=%d",
                    request.url.path,
                    declared,
                    self.max_body_bytes,
                )
                return error_response(payload_too_large(self.max_body_bytes))

        return await call_next(request)


async def read_body_capped(request: Request, max_body_bytes: int) -> bytes:
    """Read the request body, stopping as soon as it grows past the cap."""
    chunks: list[bytes] = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > max_body_bytes:
            raise payload_too_large(max_body_bytes)
        chunks.append(chunk)
    return b"".join(chunks)


__all__ = ["BodySizeLimitMiddleware", "read_body_capped"]
