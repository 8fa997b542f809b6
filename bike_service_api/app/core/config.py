"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables, without ``pydantic_settings``.  Defaults are
provided for all fields so the service starts in a development setup
with a local SQLite file and an in‑process cache.  In production
override them via environment variables.

A ``Settings`` instance is created by the process entry point and
passed explicitly to ``create_app``; nothing else in the package reads
the environment.
"""

import os
from dataclasses import dataclass


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Bike Service API")
    api_version: str = os.getenv("API_VERSION", "1.1.0")
    debug: bool = _env_bool("DEBUG")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # HMAC secret shared with the user service, which issues the tokens.
    secret_key: str = os.getenv("TOKEN_SECRET", "change_me")

    # Path to the SQLite database.  Relative paths are resolved against
    # the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "bikes.db")

    # Redis connection URL, e.g. ``redis://localhost:6379/0``.  When empty
    # a process‑local cache is used instead.
    redis_url: str = os.getenv("REDIS_URL", "")
    bike_cache_ttl_seconds: int = int(os.getenv("BIKE_CACHE_TTL_SECONDS", str(15 * 60)))

    # Comma‑separated list of origins allowed by CORS.
    allowed_origins: str = os.getenv("ALLOWED_ORIGINS", "*")

    http_host: str = os.getenv("HTTP_HOST", "0.0.0.0")
    http_port: int = int(os.getenv("HTTP_PORT", "8081"))
    rpc_host: str = os.getenv("RPC_HOST", "0.0.0.0")
    rpc_port: int = int(os.getenv("RPC_PORT", "50052"))

    # Base URL of the user service used to enrich bike responses.  When
    # empty, enrichment is skipped and ``user`` is returned as ``null``.
    user_service_url: str = os.getenv("USER_SERVICE_URL", "")
    user_service_timeout: float = float(os.getenv("USER_SERVICE_TIMEOUT", "5"))
    user_service_retries: int = int(os.getenv("USER_SERVICE_RETRIES", "3"))

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]
