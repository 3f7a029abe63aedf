"""Configuration management - Centralized configuration for IntelliSOC.

Provides environment-aware configuration with sensible defaults.
All configuration is loaded from environment variables with fallbacks.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import List, Optional

from intellisoc.common.constants import APIConstants, SessionConstants
from intellisoc.common.exceptions import ConfigurationError


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _env_enum(enum_cls, name: str, default: str):
    raw = os.getenv(name, default)
    try:
        return enum_cls(raw)
    except ValueError:
        raise ConfigurationError(
            f"Invalid value for {name}: {raw!r}",
            details={"allowed": [member.value for member in enum_cls]},
        )


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name, str(default))
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_list(name: str) -> List[str]:
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Config:
    """Central configuration object for IntelliSOC.

    All settings can be overridden via environment variables prefixed
    with INTELLISOC_.

    Example:
        INTELLISOC_ENVIRONMENT=production
        INTELLISOC_DATA_DIR=/var/lib/intellisoc
        INTELLISOC_SESSION_TTL_HOURS=12
    """

    # Core settings
    environment: Environment = field(
        default_factory=lambda: _env_enum(
            Environment, "INTELLISOC_ENVIRONMENT", "development"
        )
    )
    debug: bool = field(default_factory=lambda: _env_bool("INTELLISOC_DEBUG"))
    log_level: LogLevel = field(
        default_factory=lambda: _env_enum(LogLevel, "INTELLISOC_LOG_LEVEL", "INFO")
    )

    # Storage settings
    data_dir: Path = field(
        default_factory=lambda: Path(os.getenv("INTELLISOC_DATA_DIR", "./data"))
    )
    fsync_on_write: bool = field(
        default_factory=lambda: _env_bool("INTELLISOC_FSYNC_ON_WRITE")
    )

    # Ledger settings
    session_ttl_hours: int = field(
        default_factory=lambda: _env_int(
            "INTELLISOC_SESSION_TTL_HOURS",
            SessionConstants.DEFAULT_TTL_HOURS,
            minimum=1,
        )
    )
    remaining_attempts_hint: int = field(
        default_factory=lambda: _env_int(
            "INTELLISOC_REMAINING_ATTEMPTS_HINT",
            APIConstants.DEFAULT_REMAINING_ATTEMPTS_HINT,
        )
    )

    # API settings
    api_host: str = field(
        default_factory=lambda: os.getenv("INTELLISOC_API_HOST", "0.0.0.0")
    )
    api_port: int = field(
        default_factory=lambda: _env_int("INTELLISOC_API_PORT", 5000, minimum=1)
    )
    cors_origins: List[str] = field(
        default_factory=lambda: _env_list("INTELLISOC_CORS_ORIGINS")
    )

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.environment == Environment.PRODUCTION and self.debug:
            import warnings
            warnings.warn(
                "Debug mode is enabled in production environment",
                RuntimeWarning,
                stacklevel=2
            )

    @property
    def session_ttl(self) -> timedelta:
        """Session validity window."""
        return timedelta(hours=self.session_ttl_hours)

    @property
    def allowed_origins(self) -> List[str]:
        """CORS origins; permissive only outside production."""
        if self.cors_origins:
            return self.cors_origins
        if self.is_production:
            return []
        return ["*"]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT


# Singleton instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance.

    Returns:
        Config: The global configuration singleton.
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
