"""
Relay error taxonomy.

Every failure a caller can observe is a ``RelayError`` subclass carrying its
HTTP status and the JSON body it renders to. Routes raise them; the
exception handler installed by ``create_app`` turns them into responses.
"""

from __future__ import annotations

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse


class RelayError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Proxy internal error"

    def __init__(
        self,
        error: str | None = None,
        *,
        message: str | None = None,
        details: Any = None,
    ) -> None:
        self.error = error or self.error
        self.message = message
        self.details = details
        super().__init__(message or self.error)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error}
        if self.details is not None:
            payload["details"] = self.details
        if self.message:
            payload["message"] = self.message
        return payload


class ClientInputError(RelayError):
    """Missing or invalid request field."""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "Missing prompt"


class PayloadTooLarge(RelayError):
    status_code = 413
    error = "Request body too large"


class ModerationBlocked(RelayError):
    """Content denied by the moderation check."""

    status_code = status.HTTP_403_FORBIDDEN
    error = "Content blocked by moderation"


class UpstreamUnconfigured(RelayError):
    """Neither the named provider nor the generic forward is set up."""

    error = "No upstream provider configured on server"


class UpstreamCallFailed(RelayError):
    """Network, status or parse failure while talking to an upstream."""

    error = "Upstream provider call failed"


class InternalError(RelayError):
    error = "Proxy internal error"


def bad_request(error: str, *, details: Any = None) -> ClientInputError:
    return ClientInputError(error, details=details)


def forbidden(details: Any = None) -> ModerationBlocked:
    return ModerationBlocked(details=details)


def payload_too_large(limit: int) -> PayloadTooLarge:
    return PayloadTooLarge(details={"limit_bytes": limit})


def error_response(exc: RelayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def relay_error_handler(_request: Request, exc: RelayError) -> JSONResponse:
    return error_response(exc)


__all__ = [
    "ClientInputError",
    "InternalError",
    "ModerationBlocked",
    "PayloadTooLarge",
    "RelayError",
    "UpstreamCallFailed",
    "UpstreamUnconfigured",
    "bad_request",
    "error_response",
    "forbidden",
    "payload_too_large",
    "relay_error_handler",
]
