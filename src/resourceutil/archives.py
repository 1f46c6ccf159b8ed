"""Shared archive handles backing archive-packaged resource roots."""

from __future__ import annotations

import os
import threading
import zipfile
from pathlib import Path
from typing import Callable

from resourceutil.core.logging import get_logger

__all__ = ["ArchiveCache", "ArchiveOpener"]

ArchiveOpener = Callable[[Path], zipfile.ZipFile]


def _archive_key(location: str | os.PathLike[str]) -> str:
    return os.fspath(Path(location).expanduser().resolve(strict=False))


class ArchiveCache:
    """Keep one open :class:`zipfile.ZipFile` per archive location.

    Handles are created lazily on first use and stay open until
    :meth:`close` is called, so paths derived from them remain usable for
    the lifetime of the cache. Creation is serialized so concurrent callers
    for the same archive always share a single handle.

    Example:
        >>> cache = ArchiveCache()
        >>> len(cache)
        0
    """

    def __init__(self, opener: ArchiveOpener = zipfile.ZipFile) -> None:
        self._opener = opener
        self._lock = threading.Lock()
        self._archives: dict[str, zipfile.ZipFile] = {}
        self._logger = get_logger(__name__)

    def get(self, location: str | os.PathLike[str]) -> zipfile.ZipFile:
        """Return the shared handle for ``location``, opening it if needed.

        Raises:
            OSError: If the archive file cannot be opened.
            zipfile.BadZipFile: If the file is not a readable zip archive.
        """

        key = _archive_key(location)
        handle = self._archives.get(key)
        if handle is not None:
            return handle

        with self._lock:
            handle = self._archives.get(key)
            if handle is None:
                handle = self._opener(Path(key))
                self._archives[key] = handle
                self._logger.debug("archive-open", archive=key)
        return handle

    def close(self) -> None:
        """Close and forget every cached handle."""

        with self._lock:
            archives = list(self._archives.values())
            self._archives.clear()
        for handle in archives:
            handle.close()

    def __contains__(self, location: object) -> bool:
        if not isinstance(location, (str, os.PathLike)):
            return False
        return _archive_key(location) in self._archives

    def __len__(self) -> int:
        return len(self._archives)

    def __enter__(self) -> "ArchiveCache":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
