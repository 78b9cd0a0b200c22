from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
import logging
import os

from .errors import ConfigurationError


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default)


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    """Runtime configuration values resolved once at process startup."""

    app_name: str = "account-identity"
    version: str = "0.1.0"
    database_url: str = field(default_factory=lambda: _env("POSTGRES_URL"))
    jwt_secret: str = field(default_factory=lambda: _env("JWT_SECRET"))
    jwt_issuer: str = field(default_factory=lambda: _env("JWT_ISSUER", "account-identity"))
    jwt_ttl_seconds: int = field(default_factory=lambda: _env_int("JWT_TTL_SECONDS", "3600"))
    # argon2-cffi RFC 9106 low-memory profile; the counterpart of bcrypt cost 10
    password_hash_time_cost: int = field(
        default_factory=lambda: _env_int("PASSWORD_HASH_TIME_COST", "3")
    )
    password_hash_memory_cost: int = field(
        default_factory=lambda: _env_int("PASSWORD_HASH_MEMORY_COST", "65536")
    )
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO").upper())

    def __post_init__(self) -> None:
        """Reject configurations the process must not start with."""
        if not self.jwt_secret:
            raise ConfigurationError("JWT_SECRET is required")
        if self.jwt_ttl_seconds <= 0:
            raise ConfigurationError("JWT_TTL_SECONDS must be positive")
        if self.password_hash_time_cost < 1:
            raise ConfigurationError("PASSWORD_HASH_TIME_COST must be at least 1")
        # argon2 needs 8 KiB per lane and the default profile runs four lanes
        if self.password_hash_memory_cost < 32:
            raise ConfigurationError("PASSWORD_HASH_MEMORY_COST must be at least 32 KiB")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigurationError(f"LOG_LEVEL {self.log_level!r} is not a logging level")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached Settings instance for the running process."""
    return Settings()
