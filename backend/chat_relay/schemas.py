from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr

ReplyKind = Literal["message", "text", "output", "unparsed", "passthrough"]


class ChatRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    prompt: StrictStr = Field(..., min_length=1, description="用户输入（必填，非空字符串）")
    model: StrictStr | None = Field(default=None, description="上游模型 ID，缺省时使用 DEFAULT_MODEL")


class HealthResponse(BaseModel):
    ok: bool = True
    proxy: bool = True
    provider: str | None = None


@dataclass(frozen=True)
class ModerationResult:
    """审核结果：allowed 为 False 时 details 说明原因"""

    allowed: bool
    details: dict[str, Any] | None = None


@dataclass(frozen=True)
class ProviderReply:
    """
    Normalized upstream reply.

    ``kind`` records which reply shape the adapter recognised; ``passthrough``
    replies carry the upstream JSON untouched and no extracted text.
    """

    kind: ReplyKind
    text: str | None
    raw: Any = None

    @property
    def is_passthrough(self) -> bool:
        return self.kind == "passthrough"


@dataclass
class UsageRecord:
    provider: str
    model: str | None = None
    usage: Any = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: dt.datetime = field(default_factory=lambda: dt.datetime.now(dt.timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "provider": self.provider,
            "model": self.model,
            "usage": self.usage,
        }
        data.update(self.extra)
        return data


__all__ = [
    "ChatRequest",
    "HealthResponse",
    "ModerationResult",
    "ProviderReply",
    "ReplyKind",
    "UsageRecord",
]
