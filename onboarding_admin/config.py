"""Configuration for the onboarding questions admin service and client.

This module loads application configuration with the following rules:
- Primary source: `onboarding_config.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG_FILE = Path("onboarding_config.json")
DEFAULT_DSN = "sqlite+pysqlite:///:memory:"
DEFAULT_API_BASE = "http://127.0.0.1:8000/api/v1"
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


class StoreConfig(BaseModel):
    backend: str = Field(default="memory")

    @field_validator("backend")
    @classmethod
    def backend_must_be_allowed(cls, v: str) -> str:
        allowed = {"memory", "sql"}
        v = (v or "").strip().lower()
        if v not in allowed:
            raise ValueError(f"store.backend must be one of {sorted(allowed)}")
        return v


class DatabaseConfig(BaseModel):
    dsn: str = Field(default=DEFAULT_DSN)

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v.strip()


class CorsConfig(BaseModel):
    allow_origins: list[str] = Field(default_factory=lambda: ["*"])


class ClientConfig(BaseModel):
    api_base: str = Field(default=DEFAULT_API_BASE)
    timeout_seconds: float = Field(default=10.0, gt=0)

    @field_validator("api_base")
    @classmethod
    def api_base_must_be_http(cls, v: str) -> str:
        v = (v or "").strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("client.api_base must be an http(s) URL")
        return v


class AppConfig(BaseModel):
    store: StoreConfig = Field(default_factory=StoreConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    cors: CorsConfig = Field(default_factory=CorsConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    log_level: str = Field(default="INFO")


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            return data if isinstance(data, dict) else {}
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def load_config(config_file: Path | None = None) -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) onboarding_config.json at project root (primary base)
    4) Safe defaults for development
    """

    base = _read_json_file(config_file or ROOT_CONFIG_FILE)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        if isinstance(cur, list):
            return ",".join(str(item) for item in cur)
        return str(cur) if cur is not None else default

    backend = _env("QUESTION_STORE_BACKEND") or _read_config_file("store.backend") or _base("store.backend", "memory")
    dsn = _env("DATABASE_URL") or _read_config_file("database.url") or _base("database.dsn", DEFAULT_DSN)
    origins_text = _env("CORS_ALLOW_ORIGINS") or _read_config_file("cors.allow_origins") or _base("cors.allow_origins", "*")
    api_base = _env("ONBOARDING_API_BASE") or _read_config_file("client.api_base") or _base("client.api_base", DEFAULT_API_BASE)
    timeout_text = _env("ONBOARDING_API_TIMEOUT") or _read_config_file("client.timeout_seconds") or _base("client.timeout_seconds", "10")
    log_level = _env("LOG_LEVEL") or _base("log_level", "INFO")

    try:
        cfg = AppConfig(
            store=StoreConfig(backend=str(backend)),
            database=DatabaseConfig(dsn=str(dsn)),
            cors=CorsConfig(allow_origins=_split_csv(str(origins_text)) or ["*"]),
            client=ClientConfig(api_base=str(api_base), timeout_seconds=float(str(timeout_text).strip())),
            log_level=str(log_level).strip().upper(),
        )
        return cfg
    except (PydanticValidationError, ValueError) as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "StoreConfig",
    "DatabaseConfig",
    "CorsConfig",
    "ClientConfig",
    "load_config",
]
