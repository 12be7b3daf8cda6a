"""
Application package for the chat relay.

This package contains:
- settings: immutable configuration read once at process start
- logging_config: shared logging setup
- errors: relay error taxonomy and HTTP payload mapping
- deps: FastAPI dependencies (settings, HTTP client, components)
- services: moderation, provider forwarding, usage logging
- api: chat request orchestration
- routes: FastAPI app factory and HTTP endpoints
"""
