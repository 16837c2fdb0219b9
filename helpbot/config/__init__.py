"""
Configuration - Application settings, error taxonomy, and logging setup.
"""

from .errors import (
    CrawlError,
    ErrorCode,
    HelpBotError,
    LLMError,
    RetrievalError,
    StorageError,
    ValidationError,
)
from .logging import setup_logging
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "setup_logging",
    # Errors
    "ErrorCode",
    "HelpBotError",
    "RetrievalError",
    "LLMError",
    "StorageError",
    "CrawlError",
    "ValidationError",
]
