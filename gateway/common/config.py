from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

ENV_FILE = Path(".env")

ADDRESSING_STYLES: frozenset[str] = frozenset({"path", "virtual", "auto"})
DEFAULT_MAX_UPLOAD_BYTES = 100 * 1024 * 1024


def _load_env_file() -> None:
    if not ENV_FILE.exists():
        return
    for raw_line in ENV_FILE.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


def _as_list(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _as_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass
class Settings:
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 5000
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"
    ENABLE_METRICS: bool = True
    TRACE_HTTP: bool = False
    API_KEY_ENABLED: bool = False
    API_KEY: str | None = None
    CORS_ENABLED: bool = False
    CORS_ORIGINS: list[str] = field(default_factory=list)
    STORAGE_BACKEND: str = "s3"
    STORAGE_MAX_UPLOAD_BYTES: int = DEFAULT_MAX_UPLOAD_BYTES
    S3_BUCKET: str | None = None
    S3_ENDPOINT_URL: str | None = None
    S3_REGION: str | None = None
    S3_ACCESS_KEY_ID: str | None = None
    S3_SECRET_ACCESS_KEY: str | None = None
    S3_USE_SSL: bool = True
    S3_ADDRESSING_STYLE: str = "path"
    S3_MAX_ATTEMPTS: int = 3

    def __post_init__(self) -> None:
        prefix = (self.API_PREFIX or "").strip()
        if prefix and not prefix.startswith("/"):
            prefix = f"/{prefix}"
        self.API_PREFIX = prefix.rstrip("/")
        self.LOG_LEVEL = self.LOG_LEVEL.upper()
        self.S3_ADDRESSING_STYLE = self.S3_ADDRESSING_STYLE.strip().lower()

        if self.STORAGE_MAX_UPLOAD_BYTES <= 0:
            raise ValueError("STORAGE_MAX_UPLOAD_BYTES must be a positive integer.")
        if self.S3_ADDRESSING_STYLE not in ADDRESSING_STYLES:
            raise ValueError(
                "S3_ADDRESSING_STYLE must be one of: "
                + ", ".join(sorted(ADDRESSING_STYLES))
            )
        if self.S3_MAX_ATTEMPTS < 1:
            raise ValueError("S3_MAX_ATTEMPTS must be at least 1.")

    @classmethod
    def from_environment(cls) -> "Settings":
        _load_env_file()
        return cls(
            APP_HOST=os.environ.get("APP_HOST", cls.APP_HOST),
            APP_PORT=int(os.environ.get("APP_PORT", cls.APP_PORT)),
            API_PREFIX=os.environ.get("API_PREFIX", cls.API_PREFIX),
            LOG_LEVEL=os.environ.get("LOG_LEVEL", cls.LOG_LEVEL),
            ENABLE_METRICS=_as_bool(
                os.environ.get("ENABLE_METRICS"), cls.ENABLE_METRICS
            ),
            TRACE_HTTP=_as_bool(os.environ.get("TRACE_HTTP"), cls.TRACE_HTTP),
            API_KEY_ENABLED=_as_bool(
                os.environ.get("API_KEY_ENABLED"), cls.API_KEY_ENABLED
            ),
            API_KEY=_as_optional(os.environ.get("API_KEY")),
            CORS_ENABLED=_as_bool(os.environ.get("CORS_ENABLED"), cls.CORS_ENABLED),
            CORS_ORIGINS=_as_list(os.environ.get("CORS_ORIGINS")),
            STORAGE_BACKEND=os.environ.get("STORAGE_BACKEND", cls.STORAGE_BACKEND),
            STORAGE_MAX_UPLOAD_BYTES=int(
                os.environ.get(
                    "STORAGE_MAX_UPLOAD_BYTES", cls.STORAGE_MAX_UPLOAD_BYTES
                )
            ),
            S3_BUCKET=_as_optional(os.environ.get("S3_BUCKET")),
            S3_ENDPOINT_URL=_as_optional(os.environ.get("S3_ENDPOINT_URL")),
            S3_REGION=_as_optional(os.environ.get("S3_REGION")),
            S3_ACCESS_KEY_ID=_as_optional(os.environ.get("S3_ACCESS_KEY_ID")),
            S3_SECRET_ACCESS_KEY=_as_optional(
                os.environ.get("S3_SECRET_ACCESS_KEY")
            ),
            S3_USE_SSL=_as_bool(os.environ.get("S3_USE_SSL"), cls.S3_USE_SSL),
            S3_ADDRESSING_STYLE=os.environ.get(
                "S3_ADDRESSING_STYLE", cls.S3_ADDRESSING_STYLE
            ),
            S3_MAX_ATTEMPTS=int(
                os.environ.get("S3_MAX_ATTEMPTS", cls.S3_MAX_ATTEMPTS)
            ),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_environment()
