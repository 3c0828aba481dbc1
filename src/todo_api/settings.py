from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - HOST / PORT: bind address for the uvicorn entry point. Default 0.0.0.0:8000
    - PERSISTENCE_BACKEND: 'memory' (default) or 'mongo'
    - MONGODB_URI: MongoDB connection string. Default 'mongodb://localhost:27017'
    - MONGODB_DATABASE: database name. Default 'todos'
    - MONGODB_COLLECTION: collection holding the todos. Default 'todos'
    - UPLOAD_DIR: directory for temporary CSV uploads. Default './uploads'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: logging level name. Default 'INFO'

    Only the process environment is read; no .env file is loaded.
    """

    host: str
    port: int
    persistence_backend: str
    mongodb_uri: str
    mongodb_database: str
    mongodb_collection: str
    upload_dir: str
    cors_allow_origins: List[str]
    log_level: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "mongo"}:
        # Fallback to memory if unsupported
        backend = "memory"

    return Settings(
        host=_get_env("HOST", "0.0.0.0").strip(),
        port=_parse_int(_get_env("PORT", "8000"), 8000),
        persistence_backend=backend,
        mongodb_uri=_get_env("MONGODB_URI", "mongodb://localhost:27017").strip(),
        mongodb_database=_get_env("MONGODB_DATABASE", "todos").strip(),
        mongodb_collection=_get_env("MONGODB_COLLECTION", "todos").strip(),
        upload_dir=_get_env("UPLOAD_DIR", "./uploads").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
