from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx

from chat_relay.settings import Settings

ResponseFactory = Callable[[httpx.Request], httpx.Response]


def make_settings(tmp_log_dir: str, **overrides: Any) -> Settings:
    """
    Build settings without consulting the process environment or a .env file.

    Every field is passed explicitly so a developer's exported OPENAI_API_KEY
    or PROVIDER_CHAT_URL never leaks into tests.
    """
    values: dict[str, Any] = {
        "host": "127.0.0.1",
        "port": 3000,
        "provider": "openai",
        "openai_api_key": "",
        "openai_base_url": "https://api.openai.test/v1",
        "default_model": "gpt-4o",
        "provider_chat_url": "",
        "provider_api_key": "",
        "moderation_enabled": False,
        "moderation_api": "",
        "log_dir": tmp_log_dir,
        "log_level": "DEBUG",
        "max_body_bytes": 128 * 1024,
        "upstream_timeout": 5.0,
        "cors_allow_origins": "*",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class RecordingUpstream:
    """
    In-memory upstream keyed by URL path.

    Every request that reaches the transport is recorded, so tests can assert
    how many outbound calls a code path made.
    """

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []
        self._routes: dict[str, ResponseFactory] = {}

    def on(self, path: str, response: httpx.Response | ResponseFactory) -> None:
        if isinstance(response, httpx.Response):
            fixed = response
            self._routes[path] = lambda _request: fixed
        else:
            self._routes[path] = response

    def reply_json(self, path: str, payload: Any, status_code: int = 200) -> None:
        self.on(path, lambda _request: httpx.Response(status_code, json=payload))

    def fail(self, path: str, exc: Exception | None = None) -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise exc or httpx.ConnectError("boom", request=request)

        self._routes[path] = _raise

    def calls_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.calls if r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        factory = self._routes.get(request.url.path)
        if factory is None:
            return httpx.Response(404, json={"error": "no route"})
        return factory(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
