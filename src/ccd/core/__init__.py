"""Core module exports."""

from ccd.core.errors import (
    CcdError,
    ConfigError,
    ErrorCode,
    IndexLoadError,
    KeywordParseError,
    NoMatchError,
    SelectorUnavailableError,
    TraversalError,
)
from ccd.core.logging import (
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)
from ccd.core.progress import pluralize, spinner, status

__all__ = [
    # Errors
    "CcdError",
    "ConfigError",
    "ErrorCode",
    "IndexLoadError",
    "KeywordParseError",
    "NoMatchError",
    "SelectorUnavailableError",
    "TraversalError",
    # Logging
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
    # Progress
    "pluralize",
    "spinner",
    "status",
]
