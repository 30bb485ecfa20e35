"""Application-wide configuration loading and validation."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    environment: Literal["local", "dev", "prod"] = Field(default="local")
    log_level: str = Field(default="INFO")

    # Vonage application (JWT) credentials
    vonage_application_id: str | None = Field(default=None)
    vonage_private_key: str | None = Field(
        default=None,
        description="PEM encoded RSA private key. Literal '\\n' sequences are accepted.",
    )
    vonage_private_key_path: Path | None = Field(
        default=None,
        description="Path to a PEM file; used when VONAGE_PRIVATE_KEY is not set.",
    )

    # Vonage key pair (basic auth) credentials
    vonage_api_key: str | None = Field(default=None)
    vonage_api_secret: str | None = Field(default=None)
    vonage_phone_number: str | None = Field(default=None, description="E.164 without '+', e.g. 8150...")

    # Endpoints
    vonage_api_base_url: str = Field(default="https://api.nexmo.com")
    vonage_video_base_url: str = Field(default="https://video.api.vonage.com")
    vonage_http_timeout_seconds: float = Field(default=30.0, gt=0.0)
    public_base_url: str | None = Field(
        default=None,
        description="Public base URL for Vonage webhooks (e.g. https://<ngrok>.ngrok-free.app).",
    )

    service_api_key: str | None = Field(
        default=None,
        description="Optional API key required to call the outbound call/SMS endpoints.",
    )

    # Video sessions
    video_session_ttl_hours: float = Field(default=24.0, gt=0.0)
    video_session_fail_open: bool = Field(
        default=True,
        description="If true, remote session failures degrade to locally generated mock sessions.",
    )

    # Voice call programs
    voice_language: str = Field(default="ja-JP")
    voice_name: str = Field(default="Mizuki")
    voice_greeting: str = Field(default="お電話ありがとうございます。ご用件をお話しください。")
    voice_acknowledgement: str = Field(default="ありがとうございました。担当者より折り返しご連絡いたします。")
    voice_end_on_silence: float = Field(default=1.5, ge=0.0)
    voice_start_timeout: int = Field(default=5, ge=0)
    voice_max_duration: int = Field(default=30, ge=0)

    @field_validator("vonage_private_key")
    @classmethod
    def unescape_private_key(cls, value: str | None) -> str | None:
        # .env files usually carry the PEM on a single line.
        if value and "\\n" in value:
            return value.replace("\\n", "\n")
        return value

    @field_validator("vonage_api_base_url", "vonage_video_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
