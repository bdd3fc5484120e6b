"""
Application Configuration
Reads settings from the environment (and a local .env file)
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


@dataclass(frozen=True)
class Settings:
    min_interval_ms: int
    max_interval_ms: int
    random_seed: Optional[int]
    jwt_secret_key: str
    jwt_algorithm: str
    access_token_expire_hours: int
    log_level: str
    cors_origins: List[str]


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    return int(value)


@lru_cache()
def get_settings() -> Settings:
    """Build settings from environment variables, cached after first call"""
    min_interval_ms = int(os.getenv("DISPATCH_MIN_INTERVAL_MS", "30000"))
    max_interval_ms = int(os.getenv("DISPATCH_MAX_INTERVAL_MS", "60000"))
    if max_interval_ms < min_interval_ms:
        raise ValueError(
            "DISPATCH_MAX_INTERVAL_MS must not be lower than DISPATCH_MIN_INTERVAL_MS"
        )

    return Settings(
        min_interval_ms=min_interval_ms,
        max_interval_ms=max_interval_ms,
        random_seed=_optional_int(os.getenv("DISPATCH_RANDOM_SEED")),
        jwt_secret_key=os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production"),
        jwt_algorithm="HS256",
        access_token_expire_hours=int(os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", "24")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=[
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ],
    )
