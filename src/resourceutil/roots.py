"""Resource root locations for :mod:`resourceutil`."""

from __future__ import annotations

import os
import zipfile
from dataclasses import dataclass
from importlib import resources
from pathlib import Path, PurePosixPath
from typing import Iterable

from resourceutil.errors import ResolutionError

__all__ = [
    "DEFAULT_ARCHIVE_SUFFIXES",
    "ResourceRoot",
]

DEFAULT_ARCHIVE_SUFFIXES: tuple[str, ...] = (
    ".zip",
    ".jar",
    ".pyz",
    ".whl",
    ".egg",
)


def _has_archive_suffix(name: str, suffixes: Iterable[str]) -> bool:
    lowered = name.lower()
    return any(lowered.endswith(suffix.lower()) for suffix in suffixes)


def _normalize_prefix(prefix: str) -> str:
    parts = PurePosixPath(prefix).parts
    return "/".join(part for part in parts if part != "/")


@dataclass(frozen=True, slots=True)
class ResourceRoot:
    """Location that resource names are resolved against.

    ``location`` is either a directory or an archive file. ``prefix`` is a
    posix path inside that location and is empty when resources sit at the
    top level.

    Example:
        >>> root = ResourceRoot.from_location("/srv/app/bundle.ZIP")
        >>> root.is_archive((".zip",))
        True
        >>> root.prefix
        ''
    """

    location: Path
    prefix: str = ""

    def is_archive(
        self,
        suffixes: Iterable[str] = DEFAULT_ARCHIVE_SUFFIXES,
    ) -> bool:
        """Return ``True`` when ``location`` names an archive file.

        Only the file name suffix is inspected, case-insensitively.
        """

        return _has_archive_suffix(self.location.name, suffixes)

    def describe(self) -> str:
        """Return a display string for logs and error messages."""

        if not self.prefix:
            return str(self.location)
        return f"{self.location}!/{self.prefix}"

    @classmethod
    def from_location(
        cls,
        location: str | os.PathLike[str],
        *,
        prefix: str = "",
    ) -> "ResourceRoot":
        """Build a root from a directory or archive location.

        Raises:
            ResolutionError: If ``location`` is empty or not a valid path.
        """

        raw = os.fspath(location)
        if not raw.strip() or "\x00" in raw:
            raise ResolutionError(
                f"Invalid resource root location: {raw!r}",
                resource=raw,
            )
        return cls(
            location=Path(raw).expanduser(),
            prefix=_normalize_prefix(prefix),
        )

    @classmethod
    def for_package(cls, package: str) -> "ResourceRoot":
        """Build a root from the location an importable package lives in.

        Regular packages resolve to their directory. Packages imported from
        a zip archive on ``sys.path`` resolve to the archive file, with the
        package's directory inside the archive as ``prefix``.

        Raises:
            ResolutionError: If the package cannot be imported or is not
                backed by a directory or archive on disk.
        """

        try:
            traversable = resources.files(package)
        except (ImportError, TypeError, ValueError) as exc:
            raise ResolutionError(
                f"Unable to locate package {package!r}",
                resource=package,
            ) from exc

        if isinstance(traversable, Path):
            return cls(location=traversable)
        if isinstance(traversable, zipfile.Path):
            archive = traversable.root
            try:
                return cls(
                    location=Path(archive.filename),
                    prefix=_normalize_prefix(traversable.at),
                )
            finally:
                archive.close()
        raise ResolutionError(
            f"Package {package!r} has no location on disk",
            resource=package,
        )
