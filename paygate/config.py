from __future__ import annotations

import sys
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


_DEFAULT_CREDENTIALS_PATH = str(Path(__file__).parent / "data" / "credentials.yml")
_PRODUCTION_MIN_ROUNDS = 12


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./paygate.db"
    log_sql: bool = False

    # Server
    environment: str = "development"
    log_level: str = "info"
    log_format: str = "json"
    host: str = "0.0.0.0"
    port: int = 4000
    ssl_keyfile: Optional[str] = None
    ssl_certfile: Optional[str] = None
    allow_cors_origins: List[str] = ["https://localhost:5173"]

    # Credentials
    credentials_path: str = _DEFAULT_CREDENTIALS_PATH
    bcrypt_rounds: int = 12

    # Rate limiting (login + payments only)
    rate_limit_max_requests: int = 100
    rate_limit_window_seconds: int = 15 * 60
    rate_limit_storage_uri: str = "memory://"

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int, info) -> int:
        """bcrypt accepts 4..31; refuse a cheap cost outside development."""
        if not 4 <= v <= 31:
            raise ValueError("bcrypt_rounds must be between 4 and 31.")
        env = info.data.get("environment", "development")
        if env != "development" and v < _PRODUCTION_MIN_ROUNDS:
            print(
                f"\nFATAL: PAYGATE_BCRYPT_ROUNDS={v} is below the minimum of "
                f"{_PRODUCTION_MIN_ROUNDS} for the '{env}' environment.\n",
                file=sys.stderr,
            )
            raise ValueError(
                f"bcrypt_rounds must be at least {_PRODUCTION_MIN_ROUNDS} "
                "in non-development environments."
            )
        return v

    @field_validator("rate_limit_max_requests", "rate_limit_window_seconds")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Rate limit settings must be positive integers.")
        return v

    class Config:
        env_prefix = "PAYGATE_"


@lru_cache
def get_settings() -> Settings:
    return Settings()


# Module-level singleton for convenience
settings = get_settings()
