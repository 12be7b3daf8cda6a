"""
输入内容审核

Policy:
- moderation disabled -> always allowed;
- moderation service configured -> ask the provider's moderation endpoint;
  any network/parse failure is logged and falls through (fail-open) to the
  keyword blocklist rather than rejecting the request;
- blocklist: case-insensitive substring match.
"""

from __future__ import annotations

from typing import Any

import httpx

from chat_relay.logging_config import logger
from chat_relay.schemas import ModerationResult
from chat_relay.settings import Settings

BLOCKLIST: tuple[str, ...] = ("<script>", "kill(", "rm -rf", "bomb", "terrorist")

BLOCKLIST_REASON = "blocklist"


def check_blocklist(text: str, blocklist: tuple[str, ...] = BLOCKLIST) -> ModerationResult:
    lowered = (text or "").lower()
    for term in blocklist:
        if term in lowered:
            return ModerationResult(allowed=False, details={"reason": BLOCKLIST_REASON})
    return ModerationResult(allowed=True)


def _interpret_moderation_payload(payload: Any) -> ModerationResult | None:
    if not isinstance(payload, dict):
        return None
    results = payload.get("results")
    if not isinstance(results, list) or not results:
        return None
    first = results[0]
    if not isinstance(first, dict):
        return None
    return ModerationResult(allowed=not bool(first.get("flagged")), details=first)


class ModerationChecker:
    def __init__(
        self,
        *,
        settings: Settings,
        client: httpx.AsyncClient,
        blocklist: tuple[str, ...] = BLOCKLIST,
    ) -> None:
        self.settings = settings
        self.client = client
        self.blocklist = blocklist

    @property
    def moderation_url(self) -> str:
        return f"{self.settings.openai_base_url.rstrip('/')}/moderations"

    async def check(self, text: str) -> ModerationResult:
        if not self.settings.moderation_enabled:
            return ModerationResult(allowed=True)

        if self.settings.moderation_service_enabled:
            result = await self._check_upstream(text)
            if result is not None:
                return result

        return check_blocklist(text, self.blocklist)

    async def _check_upstream(self, text: str) -> ModerationResult | None:
        try:
            r = await self.client.post(
                self.moderation_url,
                headers={"Authorization": f"Bearer {self.settings.openai_api_key}"},
                json={"input": text},
            )
        except httpx.HTTPError as exc:
            logger.warning("moderation: upstream request failed, using blocklist: %s", exc)
            return None

        if r.is_error:
            logger.warning("moderation: endpoint returned status=%s", r.status_code)

        try:
            payload = r.json()
        except ValueError as exc:
            logger.warning("moderation: unparseable upstream response, using blocklist: %s", exc)
            return None

        return _interpret_moderation_payload(payload)


__all__ = ["BLOCKLIST", "BLOCKLIST_REASON", "ModerationChecker", "check_blocklist"]
