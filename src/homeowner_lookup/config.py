from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple


DEFAULT_BATCH_DATA_API_URL = "https://api.batchdata.com/api/v1/property/skip-trace"
DEFAULT_DB_PATH = "./homeowner_lookups.sqlite"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = str(raw).strip().lower()
    if v in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if v in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


def _env_str(name: str, default: Optional[str]) -> Optional[str]:
    raw = (os.getenv(name) or "").strip()
    return raw or default


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    values = tuple(v.strip() for v in raw.split(",") if v.strip())
    return values or default


@dataclass(frozen=True)
class Settings:
    """Process configuration.

    Built once at startup and handed to the app, service and client. Nothing
    below this layer reads the environment.
    """

    batch_data_api_key: Optional[str] = None
    batch_data_api_url: str = DEFAULT_BATCH_DATA_API_URL
    db_path: str = DEFAULT_DB_PATH
    cors_origins: Tuple[str, ...] = ("*",)
    log_json: bool = False

    @property
    def provider_configured(self) -> bool:
        return bool(self.batch_data_api_key)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            batch_data_api_key=_env_str("BATCH_DATA_API_KEY", None),
            batch_data_api_url=_env_str(
                "BATCH_DATA_API_URL", DEFAULT_BATCH_DATA_API_URL
            ),
            db_path=_env_str("HOMEOWNER_LOOKUP_DB", DEFAULT_DB_PATH),
            cors_origins=_env_list("HOMEOWNER_LOOKUP_CORS_ORIGINS", ("*",)),
            log_json=_env_bool("HOMEOWNER_LOOKUP_LOG_JSON", False),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def reset_settings_cache() -> None:
    """Test helper to force env re-read."""

    get_settings.cache_clear()
