"""
聊天路由模块

- request_handler: 请求校验 -> 内容审核 -> 上游转发 的协调器
"""

from .request_handler import (
    ChatRequestHandler,
    decode_chat_body,
    render_reply,
    validate_chat_request,
)

__all__ = [
    "ChatRequestHandler",
    "decode_chat_body",
    "render_reply",
    "validate_chat_request",
]
