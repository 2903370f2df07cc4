"""Application configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))

STORE_BACKENDS = ("sql", "local", "rest")


class Settings(BaseModel):
    """Global application settings loaded from environment variables or .env files."""

    store_backend: str = Field(
        default="sql",
        description="Persistence backend for recipes and shopping items (sql/local/rest).",
    )
    database_path: Path = Field(
        default=Path("./data/chefmate.db"),
        description="SQLite database location used by the sql backend.",
    )
    local_store_path: Path = Field(
        default=Path("./data/chefmate.json"),
        description="JSON blob location used by the local backend.",
    )
    rest_base_url: Optional[str] = Field(
        default=None,
        description="Base URL of the PostgREST-compatible table API (rest backend).",
    )
    rest_api_key: Optional[str] = Field(
        default=None,
        description="API key sent as apikey and bearer token to the table API.",
    )
    rest_timeout: float = Field(
        default=10.0,
        description="Seconds before a table API request times out.",
    )
    default_course: str = Field(
        default="main",
        description="Course assigned to recipes persisted without one.",
    )
    default_unit: str = Field(
        default="db",
        description="Unit used for manually added shopping items without one.",
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token required for mutating endpoints.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    log_requests: bool = Field(
        default=True,
        description="Emit request access logs when true.",
    )

    model_config = ConfigDict(frozen=True)


def _coerce_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_env_file(path: Path) -> dict[str, str]:
    payload: dict[str, str] = {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                payload[key.strip()] = raw_value.strip()
    except FileNotFoundError:
        return {}
    return payload


def _load_env_file_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        values.update(_parse_env_file(candidate))
    return values


def _load_from_env() -> dict[str, object]:
    """Load optional overrides from env vars (with .env fallbacks)."""

    file_values = _load_env_file_values()

    def _env(key: str) -> Optional[str]:
        return os.environ.get(key) or file_values.get(key)

    payload: dict[str, object] = {}
    if (backend := _env("CHEFMATE_STORE_BACKEND")):
        normalized = backend.strip().lower()
        if normalized in STORE_BACKENDS:
            payload["store_backend"] = normalized
    if (db_path := _env("CHEFMATE_DATABASE_PATH")):
        payload["database_path"] = Path(db_path)
    if (local_path := _env("CHEFMATE_LOCAL_STORE_PATH")):
        payload["local_store_path"] = Path(local_path)
    # Hosted projects often paste the URL with a trailing label; keep the first token.
    if (rest_url := _env("CHEFMATE_REST_URL")):
        payload["rest_base_url"] = rest_url.split()[0].strip()
    if (rest_key := _env("CHEFMATE_REST_API_KEY")):
        payload["rest_api_key"] = rest_key.split()[0].strip()
    if (rest_timeout := _env("CHEFMATE_REST_TIMEOUT")):
        try:
            payload["rest_timeout"] = float(rest_timeout)
        except ValueError:
            pass
    if (default_course := _env("CHEFMATE_DEFAULT_COURSE")):
        payload["default_course"] = default_course
    if (default_unit := _env("CHEFMATE_DEFAULT_UNIT")):
        payload["default_unit"] = default_unit
    if (api_token := _env("CHEFMATE_API_TOKEN")):
        payload["api_token"] = api_token
    if (log_level := _env("CHEFMATE_LOG_LEVEL")):
        payload["log_level"] = log_level
    if (log_format := _env("CHEFMATE_LOG_FORMAT")):
        payload["log_format"] = log_format
    if (log_requests := _env("CHEFMATE_LOG_REQUESTS")):
        payload["log_requests"] = _coerce_bool(log_requests)
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
