"""Settings port definition (DTO)."""

from dataclasses import dataclass

__all__ = [
    "SettingsPort",
    "DEFAULT_TIMEOUT_MS",
    "DEFAULT_STORAGE_LIMIT",
    "MIN_TIMEOUT_MS",
    "MIN_STORAGE_LIMIT",
]

DEFAULT_TIMEOUT_MS = 2_000
DEFAULT_STORAGE_LIMIT = 20
MIN_TIMEOUT_MS = 100
MIN_STORAGE_LIMIT = 1


@dataclass
class SettingsPort:
    """Runtime settings for the stat tracker.

    Decouples core from concrete configuration sources, enabling
    easy testing and implementation swapping.

    Attributes:
        timeout_ms: Milliseconds before a pending request is declared timed out.
        storage_limit: Maximum records kept per outcome category.
    """

    timeout_ms: float = DEFAULT_TIMEOUT_MS
    storage_limit: int = DEFAULT_STORAGE_LIMIT
