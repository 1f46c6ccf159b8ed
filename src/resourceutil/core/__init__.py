"""Core utilities shared across :mod:`resourceutil` modules.

The core namespace holds configuration loading and logging setup so the
accessor modules stay focused on resource lookup.

Example:
    >>> from resourceutil.core import get_logger
    >>> logger = get_logger(__name__)
    >>> isinstance(logger, object)
    True
"""

from __future__ import annotations

from .config import (
    ResourceSettings,
    load_settings,
    read_settings_file,
    settings_from_env,
)
from .logging import configure_logging, get_logger

__all__ = [
    "ResourceSettings",
    "configure_logging",
    "get_logger",
    "load_settings",
    "read_settings_file",
    "settings_from_env",
]
