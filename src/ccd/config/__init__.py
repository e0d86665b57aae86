"""Config module exports."""

from ccd.config.loader import load_config
from ccd.config.models import (
    CcdConfig,
    IndexConfig,
    LoggingConfig,
    PatternsConfig,
    SelectorConfig,
)

__all__ = [
    "load_config",
    "CcdConfig",
    "IndexConfig",
    "LoggingConfig",
    "PatternsConfig",
    "SelectorConfig",
]
