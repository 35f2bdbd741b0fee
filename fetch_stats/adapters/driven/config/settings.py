"""Configuration loading from environment variables."""

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, HttpUrl, TypeAdapter, field_validator

from fetch_stats.ports.settings import (
    DEFAULT_STORAGE_LIMIT,
    DEFAULT_TIMEOUT_MS,
    MIN_STORAGE_LIMIT,
    MIN_TIMEOUT_MS,
    SettingsPort,
)

__all__ = ["Settings", "load_settings"]

load_dotenv()

logger = logging.getLogger(__name__)
_http_url_adapter = TypeAdapter(HttpUrl)


class Settings(BaseModel):
    """Runtime configuration for the stat tracker.

    Attributes:
        timeout_ms: Deadline for each tracked request in milliseconds.
        storage_limit: Records kept per outcome category.
        target_urls: URLs the entrypoint sends tracked requests to.
    """

    timeout_ms: float = Field(
        default=DEFAULT_TIMEOUT_MS,
        ge=MIN_TIMEOUT_MS,
        allow_inf_nan=False,
        description="Milliseconds before a pending request is declared timed out.",
    )
    storage_limit: int = Field(
        default=DEFAULT_STORAGE_LIMIT,
        ge=MIN_STORAGE_LIMIT,
        description="Maximum records kept per outcome category.",
    )
    target_urls: list[str] = Field(
        default_factory=list,
        description="HTTP(S) URLs requested by the entrypoint.",
    )

    @field_validator("target_urls")
    @classmethod
    def validate_target_urls(cls, v: list[str]) -> list[str]:
        """Validate that every target is a valid HTTP(S) URL.

        Args:
            v: URLs to validate.

        Returns:
            The validated URLs.

        Raises:
            ValueError: If a URL is invalid or not http(s).
        """
        for raw in v:
            try:
                _http_url_adapter.validate_python(raw)
            except Exception as e:
                raise ValueError(f"Invalid target URL {raw!r}: {e}") from e
        return v

    def to_port(self) -> SettingsPort:
        return SettingsPort(timeout_ms=self.timeout_ms, storage_limit=self.storage_limit)


def _read_number(name: str, parse: type[int] | type[float], default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return parse(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be a number (got: {raw})") from e


def load_settings() -> Settings:
    """Load and validate settings from environment.

    Optional environment variables:
    - FETCH_STATS_TIMEOUT_MS: Request deadline in milliseconds (>= 100).
    - FETCH_STATS_STORAGE_LIMIT: Records kept per category (>= 1).
    - FETCH_STATS_TARGET_URLS: Comma-separated URLs for the entrypoint.

    Returns:
        Validated Settings object.

    Raises:
        RuntimeError: If a numeric variable cannot be parsed.
        ValueError: If configuration is invalid.
    """
    timeout_ms = _read_number("FETCH_STATS_TIMEOUT_MS", float, DEFAULT_TIMEOUT_MS)
    storage_limit = _read_number("FETCH_STATS_STORAGE_LIMIT", int, DEFAULT_STORAGE_LIMIT)
    target_urls = [
        url.strip()
        for url in os.getenv("FETCH_STATS_TARGET_URLS", "").split(",")
        if url.strip()
    ]

    settings = Settings(
        timeout_ms=timeout_ms,
        storage_limit=storage_limit,
        target_urls=target_urls,
    )

    logger.info(
        f"Tracker configured: timeout={settings.timeout_ms:g}ms, "
        f"storage_limit={settings.storage_limit}, "
        f"targets={len(settings.target_urls)}"
    )

    return settings
