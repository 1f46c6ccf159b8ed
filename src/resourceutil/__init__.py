"""Top-level package for :mod:`resourceutil`.

Helpers for locating and reading resources bundled with an application,
whether they ship in a plain directory or inside a zip archive.

Example:
    >>> from resourceutil import __version__
    >>> __version__.split(".")[0]
    '0'
"""

import logging
from importlib import metadata

from .accessor import ResourceAccessor, ResourcePath
from .archives import ArchiveCache
from .core.config import ResourceSettings, load_settings
from .errors import (
    NotFoundError,
    ParseError,
    ReadError,
    ResolutionError,
    ResourceError,
)
from .properties import parse_properties
from .roots import ResourceRoot

try:
    __version__ = metadata.version("resourceutil")
except metadata.PackageNotFoundError:  # pragma: no cover - source checkout
    __version__ = "0.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ArchiveCache",
    "NotFoundError",
    "ParseError",
    "ReadError",
    "ResolutionError",
    "ResourceAccessor",
    "ResourceError",
    "ResourcePath",
    "ResourceRoot",
    "ResourceSettings",
    "__version__",
    "load_settings",
    "parse_properties",
]
