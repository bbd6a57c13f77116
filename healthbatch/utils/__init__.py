"""Shared utilities for the healthbatch pipeline."""

from healthbatch.utils.config import (
    Settings,
    get_settings,
    override_settings,
    validate_config,
)
from healthbatch.utils.logger import configure_root_logger, get_logger

__all__ = [
    "Settings",
    "get_settings",
    "override_settings",
    "validate_config",
    "get_logger",
    "configure_root_logger",
]
