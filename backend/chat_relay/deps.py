from __future__ import annotations

import httpx
from fastapi import Depends, Request

from .api.chat.request_handler import ChatRequestHandler
from .services.forward_service import ProviderForwarder
from .services.moderation_service import ModerationChecker
from .services.usage_log_service import UsageLogger
from .settings import Settings


def get_settings(request: Request) -> Settings:
    """The immutable settings object the app was created with."""
    return request.app.state.settings


def get_http_client(request: Request) -> httpx.AsyncClient:
    """
    Shared upstream HTTP client.

    Opened once in the application lifespan; tests override this dependency
    with a client bound to ``httpx.MockTransport``.
    """
    return request.app.state.http_client


def get_usage_logger(request: Request) -> UsageLogger:
    return request.app.state.usage_logger


def get_moderation_checker(
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> ModerationChecker:
    return ModerationChecker(settings=settings, client=client)


def get_provider_forwarder(
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
    usage_logger: UsageLogger = Depends(get_usage_logger),
) -> ProviderForwarder:
    return ProviderForwarder(settings=settings, client=client, usage_logger=usage_logger)


def get_chat_handler(
    moderation: ModerationChecker = Depends(get_moderation_checker),
    forwarder: ProviderForwarder = Depends(get_provider_forwarder),
) -> ChatRequestHandler:
    return ChatRequestHandler(moderation=moderation, forwarder=forwarder)
