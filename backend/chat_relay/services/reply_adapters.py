"""
上游响应适配：把 provider 的原始 JSON 归一化为 ProviderReply
"""

from __future__ import annotations

import json
from typing import Any

from chat_relay.logging_config import logger
from chat_relay.schemas import ProviderReply


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def _first_choice(payload: dict[str, Any]) -> Any:
    choices = payload.get("choices")
    if isinstance(choices, list) and choices:
        return choices[0]
    return None


def parse_openai_reply(payload: Any) -> ProviderReply:
    """
    Map an OpenAI-style chat completion onto a ProviderReply.

    Shapes, in order: ``choices[0].message.content`` -> ``message``,
    ``choices[0].text`` -> ``text``, a top-level ``output`` -> ``output``.
    Anything else is ``unparsed`` with the JSON of the first choice (or of the
    whole payload) as its text.
    """
    if not isinstance(payload, dict):
        return ProviderReply(kind="unparsed", text=_dump(payload), raw=payload)

    choice = _first_choice(payload)
    if choice is not None:
        if isinstance(choice, dict):
            message = choice.get("message")
            if isinstance(message, dict) and isinstance(message.get("content"), str):
                return ProviderReply(kind="message", text=message["content"], raw=payload)
            if isinstance(choice.get("text"), str):
                return ProviderReply(kind="text", text=choice["text"], raw=payload)
        logger.debug("reply_adapter: unrecognised choice shape, serializing choice")
        return ProviderReply(kind="unparsed", text=_dump(choice), raw=payload)

    if "output" in payload and payload["output"] is not None:
        output = payload["output"]
        text = output if isinstance(output, str) else _dump(output)
        return ProviderReply(kind="output", text=text, raw=payload)

    logger.debug("reply_adapter: no choices/output in reply, serializing payload")
    return ProviderReply(kind="unparsed", text=_dump(payload), raw=payload)


def passthrough_reply(payload: Any) -> ProviderReply:
    return ProviderReply(kind="passthrough", text=None, raw=payload)


__all__ = ["parse_openai_reply", "passthrough_reply"]
