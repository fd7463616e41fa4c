"""
Configuration for the Reality Show API.

Values are read from environment variables (a local ``.env`` file is
loaded first if present).  Defaults are provided for everything except
the database URL.
"""
import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    database_url: str = field(
        default_factory=lambda: os.getenv("DATABASE_URL") or os.getenv("MONGODB_URI", "")
    )
    database_name: str = field(default_factory=lambda: os.getenv("DATABASE_NAME", "reality_show"))
    collection_name: str = field(default_factory=lambda: os.getenv("COLLECTION_NAME", "reality_shows"))
    # Bound for both the TCP connect and server selection
    connect_timeout_ms: int = field(default_factory=lambda: int(os.getenv("CONNECT_TIMEOUT_MS", "10000")))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "3000")))
    cors_origins: List[str] = field(default_factory=lambda: _split_origins(os.getenv("CORS_ORIGINS", "*")))


settings = Settings()
