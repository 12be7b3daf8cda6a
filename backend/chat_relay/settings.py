from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

NAMED_PROVIDER_OPENAI = "openai"


class Settings(BaseSettings):
    """
    Relay configuration, read once from the environment at process start.

    The object is frozen; components receive it explicitly instead of
    reading module-level globals.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")

    # Named provider routing; empty string means "unset".
    provider: str = Field(default=NAMED_PROVIDER_OPENAI, alias="PROVIDER")
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    openai_base_url: str = Field(default="https://api.openai.com/v1", alias="OPENAI_BASE_URL")
    default_model: str = Field(default="gpt-4o", alias="DEFAULT_MODEL")

    # Generic forward
    provider_chat_url: str = Field(default="", alias="PROVIDER_CHAT_URL")
    provider_api_key: str = Field(default="", alias="PROVIDER_API_KEY")

    # Moderation
    moderation_enabled: bool = Field(default=True, alias="MODERATION_ENABLED")
    moderation_api: str = Field(default="", alias="MODERATION_API")

    # Usage log / diagnostics
    log_dir: str = Field(default="logs", alias="LOG_DIR")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # HTTP surface
    max_body_bytes: int = Field(default=128 * 1024, alias="MAX_BODY_BYTES", gt=0)
    upstream_timeout: float = Field(default=60.0, alias="UPSTREAM_TIMEOUT", gt=0)
    cors_allow_origins: str = Field(default="*", alias="CORS_ALLOW_ORIGINS")

    @field_validator("provider", mode="before")
    @classmethod
    def _normalize_provider(cls, value: object) -> str:
        return str(value or "").strip().lower()

    @property
    def named_provider_enabled(self) -> bool:
        return self.provider == NAMED_PROVIDER_OPENAI and bool(self.openai_api_key)

    @property
    def generic_forward_enabled(self) -> bool:
        return bool(self.provider_chat_url and self.provider_api_key)

    @property
    def moderation_service_enabled(self) -> bool:
        # The moderation endpoint lives on the named provider and shares its key.
        return bool(self.moderation_api) and self.named_provider_enabled

    @property
    def provider_label(self) -> str | None:
        return self.provider or None

    @property
    def usage_log_path(self) -> Path:
        return Path(self.log_dir) / "usage.log"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


def load_settings() -> Settings:
    return Settings()


__all__ = ["NAMED_PROVIDER_OPENAI", "Settings", "load_settings"]
