"""
Provider forwarding.

Exactly one upstream path is used per process, chosen by configuration:
1. named provider (OpenAI chat completions) when PROVIDER=openai and a key is set;
2. generic forward to PROVIDER_CHAT_URL when URL and key are both set.
No retries. Network and parse failures surface as UpstreamCallFailed; an
upstream error status is only logged and its JSON body is returned as-is.
"""

from __future__ import annotations

from typing import Any

import httpx

from chat_relay.errors import UpstreamCallFailed, UpstreamUnconfigured
from chat_relay.logging_config import logger
from chat_relay.schemas import ProviderReply, UsageRecord
from chat_relay.services.reply_adapters import parse_openai_reply, passthrough_reply
from chat_relay.services.usage_log_service import UsageLogger
from chat_relay.settings import NAMED_PROVIDER_OPENAI, Settings


def _bearer_headers(token: str) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {token}",
    }


class ProviderForwarder:
    def __init__(
        self,
        *,
        settings: Settings,
        client: httpx.AsyncClient,
        usage_logger: UsageLogger,
    ) -> None:
        self.settings = settings
        self.client = client
        self.usage_logger = usage_logger

    @property
    def chat_completions_url(self) -> str:
        return f"{self.settings.openai_base_url.rstrip('/')}/chat/completions"

    async def forward(self, prompt: str, model: str | None = None) -> ProviderReply:
        if self.settings.named_provider_enabled:
            return await self._forward_named(prompt, model)
        if self.settings.generic_forward_enabled:
            return await self._forward_generic(prompt, model)
        raise UpstreamUnconfigured()

    async def _forward_named(self, prompt: str, model: str | None) -> ProviderReply:
        payload = {
            "model": model or self.settings.default_model,
            "messages": [{"role": "user", "content": prompt}],
        }
        logger.info(
            "forward: sending request to provider=%s model=%s",
            NAMED_PROVIDER_OPENAI,
            payload["model"],
        )
        data = await self._post_json(
            self.chat_completions_url,
            token=self.settings.openai_api_key,
            payload=payload,
        )

        if isinstance(data, dict) and data.get("usage"):
            await self.usage_logger.record(
                UsageRecord(
                    provider=NAMED_PROVIDER_OPENAI,
                    model=payload["model"],
                    usage=data["usage"],
                )
            )
        return parse_openai_reply(data)

    async def _forward_generic(self, prompt: str, model: str | None) -> ProviderReply:
        url = self.settings.provider_chat_url
        logger.info("forward: sending generic request url=%s model=%s", url, model)
        data = await self._post_json(
            url,
            token=self.settings.provider_api_key,
            payload={"prompt": prompt, "model": model},
        )
        await self.usage_logger.record(
            UsageRecord(
                provider="generic",
                model=model,
                extra={
                    "url": url,
                    "response_keys": list(data.keys()) if isinstance(data, dict) else [],
                },
            )
        )
        return passthrough_reply(data)

    async def _post_json(self, url: str, *, token: str, payload: dict[str, Any]) -> Any:
        try:
            r = await self.client.post(url, headers=_bearer_headers(token), json=payload)
        except httpx.HTTPError as exc:
            logger.warning("forward: upstream request error for %s: %s", url, exc)
            raise UpstreamCallFailed(message=str(exc) or exc.__class__.__name__) from exc

        logger.info(
            "forward: upstream response status=%s url=%s body_length=%d",
            r.status_code,
            url,
            len(r.content or b""),
        )

        if r.is_error:
            # error bodies are passed on to the caller like any other reply
            logger.warning("forward: upstream returned status=%s url=%s", r.status_code, url)

        try:
            return r.json()
        except ValueError as exc:
            logger.warning("forward: upstream returned non-JSON body from %s", url)
            raise UpstreamCallFailed(
                message="Upstream returned a non-JSON body",
                details={"upstream_status": r.status_code},
            ) from exc


__all__ = ["ProviderForwarder"]
