"""
聊天请求处理协调器

单个请求的状态流转：
Received -> Validated -> Moderated -> Forwarded -> Responded

- Validated 失败：ClientInputError（400），不发起任何上游调用
- Moderated 拦截：ModerationBlocked（403），携带审核 details
- Forwarded 失败：UpstreamUnconfigured / UpstreamCallFailed（500）

顶层兜底（任意未预期异常 -> 500）由路由层负责。
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from chat_relay.errors import bad_request, forbidden
from chat_relay.logging_config import logger
from chat_relay.schemas import ChatRequest, ProviderReply
from chat_relay.services.forward_service import ProviderForwarder
from chat_relay.services.moderation_service import ModerationChecker

MISSING_PROMPT = "Missing prompt"
INVALID_PROMPT = "Invalid prompt"
INVALID_MODEL = "Invalid model"
INVALID_JSON = "Invalid JSON body"


def _is_json_content_type(content_type: str | None) -> bool:
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


def decode_chat_body(body: bytes, content_type: str | None) -> Any:
    """
    Decode the raw request body.

    Non-JSON content types are treated as an empty body, the same as a
    request with no body at all.
    """
    if not body or not _is_json_content_type(content_type):
        return {}
    try:
        return json.loads(body)
    except (UnicodeDecodeError, ValueError) as exc:
        raise bad_request(INVALID_JSON) from exc


def _is_valid_unicode(value: str) -> bool:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def validate_chat_request(data: Any) -> ChatRequest:
    if not isinstance(data, dict):
        raise bad_request(MISSING_PROMPT)
    prompt = data.get("prompt")
    # 有内容但无法编码（如孤立代理字符）的 prompt 与缺失 prompt 区分开
    if isinstance(prompt, str) and prompt and not _is_valid_unicode(prompt):
        raise bad_request(INVALID_PROMPT)
    try:
        return ChatRequest.model_validate(data)
    except ValidationError as exc:
        failed_fields = {str(err["loc"][0]) for err in exc.errors() if err.get("loc")}
        if "prompt" in failed_fields or not failed_fields:
            raise bad_request(MISSING_PROMPT) from exc
        raise bad_request(INVALID_MODEL) from exc


def render_reply(reply: ProviderReply) -> Any:
    if reply.is_passthrough:
        return reply.raw
    return {"text": reply.text, "raw": reply.raw}


class ChatRequestHandler:
    """Moderation then forwarding for one inbound chat request."""

    def __init__(
        self,
        *,
        moderation: ModerationChecker,
        forwarder: ProviderForwarder,
    ) -> None:
        self.moderation = moderation
        self.forwarder = forwarder

    async def handle(self, data: Any) -> Any:
        req = validate_chat_request(data)

        result = await self.moderation.check(req.prompt)
        if not result.allowed:
            logger.info("chat: prompt blocked by moderation details=%s", result.details)
            raise forbidden(details=result.details)

        reply = await self.forwarder.forward(req.prompt, req.model)
        logger.debug("chat: upstream reply kind=%s", reply.kind)
        return render_reply(reply)


__all__ = [
    "ChatRequestHandler",
    "decode_chat_body",
    "render_reply",
    "validate_chat_request",
]
