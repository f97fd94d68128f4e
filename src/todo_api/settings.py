from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

BACKENDS = {"mongo", "memory"}


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables (and a local .env file).

    Env vars:
    - HOST: bind address for the HTTP server. Default '0.0.0.0'
    - PORT: listen port. Default 3000
    - PERSISTENCE_BACKEND: 'mongo' (default) or 'memory'
    - MONGODB_URI: MongoDB connection string. Default 'mongodb://localhost:27017'
    - MONGODB_DATABASE: database holding the todos collection. Default 'todo_app'
    - MONGODB_TIMEOUT_MS: server selection timeout in milliseconds. Default 5000
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: logging level name. Default 'INFO'
    - LOG_FILE: optional path of a log file written in addition to stderr
    """

    host: str = "0.0.0.0"
    port: int = 3000
    persistence_backend: str = "mongo"
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "todo_app"
    mongodb_timeout_ms: int = 5000
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    log_file: Optional[str] = None


def _env(name: str, default: str) -> str:
    """Stripped value of ``name``; unset or blank variables yield ``default``."""
    raw = (os.environ.get(name) or "").strip()
    return raw or default


def _parse_int(value: str, default: int) -> int:
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _split_origins(raw: str) -> List[str]:
    # '*' (or a list containing it) means any origin
    origins = [part.strip() for part in raw.split(",")]
    origins = [o for o in origins if o]
    if not origins or "*" in origins:
        return ["*"]
    return origins


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    load_dotenv()

    backend = _env("PERSISTENCE_BACKEND", "mongo").lower()
    if backend not in BACKENDS:
        backend = "mongo"

    return Settings(
        host=_env("HOST", "0.0.0.0"),
        port=_parse_int(_env("PORT", "3000"), 3000),
        persistence_backend=backend,
        mongodb_uri=_env("MONGODB_URI", "mongodb://localhost:27017"),
        mongodb_database=_env("MONGODB_DATABASE", "todo_app"),
        mongodb_timeout_ms=_parse_int(_env("MONGODB_TIMEOUT_MS", "5000"), 5000),
        cors_allow_origins=_split_origins(_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_env("LOG_LEVEL", "INFO").upper(),
        log_file=_env("LOG_FILE", "") or None,
    )
