"""Configuration defaults, loading and validation."""

from .defaults import (
    BatchParams,
    DefaultConfig,
    FetchParams,
    SignalParams,
    ValueAreaParams,
    get_default_config,
)
from .loader import ConfigLoader
from .validation import ConfigValidator, ValidationError

__all__ = [
    "BatchParams",
    "DefaultConfig",
    "FetchParams",
    "SignalParams",
    "ValueAreaParams",
    "get_default_config",
    "ConfigLoader",
    "ConfigValidator",
    "ValidationError",
]
