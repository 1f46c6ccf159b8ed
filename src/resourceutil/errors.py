"""Exception hierarchy for :mod:`resourceutil`."""

from __future__ import annotations


class ResourceError(Exception):
    """Base error raised when a bundled resource cannot be served.

    The originating exception, when there is one, is chained as
    ``__cause__``.
    """

    def __init__(self, message: str, *, resource: str) -> None:
        super().__init__(message)
        self.resource = resource


class NotFoundError(ResourceError):
    """Raised when a resource name does not resolve to any byte source."""


class ReadError(ResourceError):
    """Raised when a located resource cannot be read, copied or parsed."""


class ParseError(ReadError):
    """Raised when a resource is not a well-formed XML document."""


class ResolutionError(ReadError):
    """Raised when a resource root or path cannot be resolved."""


__all__ = [
    "ResourceError",
    "NotFoundError",
    "ReadError",
    "ParseError",
    "ResolutionError",
]
