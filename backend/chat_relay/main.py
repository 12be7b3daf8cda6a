from __future__ import annotations

import uvicorn

from chat_relay.routes import create_app
from chat_relay.settings import load_settings

settings = load_settings()
app = create_app(settings)


def run() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
