"""Common utilities - logging, config, exceptions."""

from intellisoc.common.logging.logger import get_logger
from intellisoc.common.config import Config, get_config, reset_config
from intellisoc.common.exceptions import (
    IntelliSOCException,
    ConfigurationError,
    ValidationError,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Logging
    "get_logger",
    # Config
    "Config",
    "get_config",
    "reset_config",
    # Exceptions
    "IntelliSOCException",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
]
