"""
Usage log: best-effort side channel.

Each call appends one JSON line to ``<LOG_DIR>/usage.log``. Writing is never
allowed to fail or hold up the request being logged: the file write runs in a
worker thread and every error is reported to the diagnostic logger and dropped.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import anyio

from chat_relay.logging_config import logger
from chat_relay.schemas import UsageRecord


def _json_default(value: Any) -> str:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def serialize_usage_record(record: UsageRecord) -> str:
    return json.dumps(record.to_dict(), ensure_ascii=False, default=_json_default) + "\n"


def _to_usage_record(info: UsageRecord | dict[str, Any]) -> UsageRecord:
    if isinstance(info, UsageRecord):
        return info
    data = dict(info)
    return UsageRecord(
        provider=str(data.pop("provider", "unknown")),
        model=data.pop("model", None),
        usage=data.pop("usage", None),
        extra=data,
    )


def append_line(path: Path, line: bytes) -> None:
    # O_APPEND + a single write keeps concurrent records from interleaving.
    fd = os.open(path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o644)
    try:
        os.write(fd, line)
    finally:
        os.close(fd)


class UsageLogger:
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def ensure_log_dir(self) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("usage_log: failed to create log dir %s: %s", self.path.parent, exc)
            return False
        return True

    async def record(self, info: UsageRecord | dict[str, Any]) -> None:
        try:
            line = serialize_usage_record(_to_usage_record(info)).encode("utf-8")
            await anyio.to_thread.run_sync(append_line, self.path, line)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("usage_log: failed to write usage record to %s: %s", self.path, exc)


__all__ = ["UsageLogger", "append_line", "serialize_usage_record"]
