"""
FastAPI app factory and HTTP endpoints.

Endpoints are mounted both at the root and under ``/api``:
- GET  /health
- POST /chat
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.chat.request_handler import ChatRequestHandler, decode_chat_body
from .deps import get_chat_handler, get_settings
from .errors import InternalError, RelayError, error_response, relay_error_handler
from .logging_config import logger, setup_logging
from .middleware.body_limit import BodySizeLimitMiddleware, read_body_capped
from .schemas import HealthResponse
from .services.usage_log_service import UsageLogger
from .settings import Settings, load_settings

router = APIRouter(tags=["Chat Relay"])


@router.get("/health", response_model=HealthResponse)
async def health(settings: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(ok=True, proxy=True, provider=settings.provider_label)


@router.post("/chat")
async def chat(
    request: Request,
    settings: Settings = Depends(get_settings),
    handler: ChatRequestHandler = Depends(get_chat_handler),
) -> Any:
    try:
        body = await read_body_capped(request, settings.max_body_bytes)
        data = decode_chat_body(body, request.headers.get("content-type"))
        result = await handler.handle(data)
    except RelayError as exc:
        if exc.status_code >= 500:
            logger.warning(
                "chat: request failed status=%s error=%s message=%s",
                exc.status_code,
                exc.error,
                exc.message,
            )
        raise
    except Exception as exc:
        # 单个请求的任何异常都不能影响进程
        logger.exception("chat: proxy internal error")
        return error_response(InternalError(message=str(exc) or exc.__class__.__name__))
    return JSONResponse(content=result)


async def _unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("routes: unhandled error", exc_info=exc)
    return error_response(InternalError(message=str(exc) or exc.__class__.__name__))


def _build_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.usage_logger.ensure_log_dir()
        async with httpx.AsyncClient(timeout=settings.upstream_timeout) as client:
            app.state.http_client = client
            logger.info("Chat relay listening on port %s", settings.port)
            logger.info("Configured provider: %s", settings.provider_label)
            if not (settings.named_provider_enabled or settings.generic_forward_enabled):
                logger.warning("routes: no upstream provider configured, /chat will return 500")
            yield
        logger.info("Chat relay shut down")

    return lifespan


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="Chat Relay", lifespan=_build_lifespan(settings))
    app.state.settings = settings
    app.state.usage_logger = UsageLogger(settings.usage_log_path)

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RelayError, relay_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    app.include_router(router)
    app.include_router(router, prefix="/api")
    return app


__all__ = ["create_app", "router"]
