"""Read bundled resources from a directory or archive resource root."""

from __future__ import annotations

import io
import os
import shutil
import tempfile
import zipfile
import zlib
from collections import ChainMap
from pathlib import Path
from typing import BinaryIO, Mapping, TextIO
from xml.etree import ElementTree

from resourceutil.archives import ArchiveCache
from resourceutil.core.config import ResourceSettings
from resourceutil.core.logging import get_logger
from resourceutil.errors import (
    NotFoundError,
    ParseError,
    ReadError,
    ResolutionError,
)
from resourceutil.properties import load_properties
from resourceutil.roots import ResourceRoot

__all__ = ["ResourcePath", "ResourceAccessor"]

ResourcePath = Path | zipfile.Path

# Failures raised while pulling bytes out of an already located resource.
_READ_FAILURES: tuple[type[Exception], ...] = (
    OSError,
    ValueError,
    EOFError,
    zipfile.BadZipFile,
    zlib.error,
)
_ARCHIVE_FAILURES: tuple[type[Exception], ...] = (OSError, zipfile.BadZipFile)


def _entry_parts(name: str) -> tuple[str, ...] | None:
    """Split ``name`` into path segments below the resource root.

    Returns ``None`` when the name tries to step outside the root.
    """

    parts = tuple(part for part in name.split("/") if part not in ("", "."))
    if ".." in parts:
        return None
    return parts


class ResourceAccessor:
    """Resolve logical resource names against a single resource root.

    Names are slash separated and conventionally start with ``/``; both
    ``"/config/app.properties"`` and ``"config/app.properties"`` resolve
    from the root. The root is either a plain directory or an archive file,
    chosen purely by the location's file name suffix.

    Example:
        >>> import tempfile
        >>> from pathlib import Path
        >>> root = Path(tempfile.mkdtemp())
        >>> _ = (root / "greeting.txt").write_text("hello", encoding="utf-8")
        >>> ResourceAccessor(root).read_string("/greeting.txt")
        'hello'
    """

    def __init__(
        self,
        root: ResourceRoot | str | os.PathLike[str],
        *,
        settings: ResourceSettings | None = None,
        archives: ArchiveCache | None = None,
    ) -> None:
        if not isinstance(root, ResourceRoot):
            root = ResourceRoot.from_location(root)
        self._root = root
        self._settings = settings or ResourceSettings()
        self._archives = archives if archives is not None else ArchiveCache()
        self._logger = get_logger(__name__, root=root.describe())

    @classmethod
    def for_package(
        cls,
        package: str,
        *,
        settings: ResourceSettings | None = None,
        archives: ArchiveCache | None = None,
    ) -> "ResourceAccessor":
        """Build an accessor rooted at an importable package.

        Raises:
            ResolutionError: If the package has no identifiable location.
        """

        return cls(
            ResourceRoot.for_package(package),
            settings=settings,
            archives=archives,
        )

    @classmethod
    def from_settings(
        cls,
        settings: ResourceSettings,
        *,
        archives: ArchiveCache | None = None,
    ) -> "ResourceAccessor":
        """Build an accessor rooted at ``settings.root``.

        Raises:
            ResolutionError: If no root is configured.
        """

        if settings.root is None:
            raise ResolutionError(
                "No resource root configured",
                resource="",
            )
        return cls(settings.root, settings=settings, archives=archives)

    @property
    def root(self) -> ResourceRoot:
        return self._root

    @property
    def settings(self) -> ResourceSettings:
        return self._settings

    @property
    def archives(self) -> ArchiveCache:
        return self._archives

    @property
    def is_archive(self) -> bool:
        """Return ``True`` when the root is served from an archive file."""

        return self._root.is_archive(self._settings.archive_suffixes)

    def _archive_base(self) -> zipfile.Path:
        handle = self._archives.get(self._root.location)
        base = zipfile.Path(handle)
        if self._root.prefix:
            base = base.joinpath(*self._root.prefix.split("/"))
        return base

    def _not_found(self, name: str) -> NotFoundError:
        self._logger.debug("resource-missing", resource=name)
        return NotFoundError(
            f"Unable to locate resource {name}",
            resource=name,
        )

    def _read_failed(
        self,
        error_type: type[ReadError],
        message: str,
        name: str,
        exc: BaseException,
    ) -> ReadError:
        self._logger.warning(
            "resource-read-failed",
            resource=name,
            error=str(exc),
        )
        return error_type(message, resource=name)

    def _locate(self, name: str) -> ResourcePath:
        """Return the path of a readable resource file.

        Raises:
            NotFoundError: If ``name`` does not match a resource file.
        """

        parts = _entry_parts(name)
        if not parts:
            raise self._not_found(name)

        candidate: ResourcePath
        if self.is_archive:
            try:
                candidate = self._archive_base().joinpath(*parts)
            except _ARCHIVE_FAILURES as exc:
                raise self._not_found(name) from exc
        else:
            candidate = self._root.location.joinpath(self._root.prefix, *parts)

        if not candidate.is_file():
            raise self._not_found(name)
        return candidate

    def exists(self, name: str) -> bool:
        """Return ``True`` when ``name`` matches a readable resource."""

        try:
            self._locate(name)
        except NotFoundError:
            return False
        return True

    def open_stream(self, name: str) -> BinaryIO:
        """Return an open binary stream for ``name``.

        The caller owns the stream and is responsible for closing it.

        Raises:
            NotFoundError: If no resource matches ``name``.
            ReadError: If an archive entry is encrypted or uses an
                unsupported compression method.
        """

        candidate = self._locate(name)
        try:
            stream = candidate.open("rb")
        except (*_ARCHIVE_FAILURES, KeyError) as exc:
            raise self._not_found(name) from exc
        except RuntimeError as exc:  # includes NotImplementedError
            raise self._read_failed(
                ReadError,
                f"Resource {name} cannot be extracted from its archive",
                name,
                exc,
            ) from exc
        self._logger.debug("resource-open", resource=name)
        return stream

    def open_text_reader(self, name: str) -> TextIO:
        """Return an open text stream decoding ``name`` with the configured
        encoding (UTF-8 by default).

        Raises:
            NotFoundError: If no resource matches ``name``.
        """

        return io.TextIOWrapper(
            self.open_stream(name),
            encoding=self._settings.encoding,
        )

    def read_bytes(self, name: str) -> bytes:
        """Return the raw contents of ``name``.

        Raises:
            NotFoundError: If no resource matches ``name``.
            ReadError: If the contents cannot be read.
        """

        with self.open_stream(name) as stream:
            try:
                return stream.read()
            except _READ_FAILURES as exc:
                raise self._read_failed(
                    ReadError,
                    f"Error reading resource {name}",
                    name,
                    exc,
                ) from exc

    def read_string(self, name: str) -> str:
        """Return the decoded contents of ``name``.

        Raises:
            NotFoundError: If no resource matches ``name``.
            ReadError: If the contents cannot be read or decoded.
        """

        with self.open_stream(name) as stream:
            try:
                return stream.read().decode(self._settings.encoding)
            except _READ_FAILURES as exc:
                raise self._read_failed(
                    ReadError,
                    f"Error reading resource {name} to string",
                    name,
                    exc,
                ) from exc

    def extract_to_temp_file(self, name: str) -> Path:
        """Copy ``name`` into a new temporary file and return its path.

        The file is not removed automatically; the caller owns it and may
        move, rename or delete it as needed.

        Raises:
            NotFoundError: If no resource matches ``name``.
            ReadError: If the copy cannot be completed.
        """

        with self.open_stream(name) as stream:
            try:
                handle, raw_path = tempfile.mkstemp(
                    prefix=self._settings.temp_prefix,
                    suffix=self._settings.temp_suffix,
                )
            except OSError as exc:
                raise self._read_failed(
                    ReadError,
                    f"Unable to create a temporary file for resource {name}",
                    name,
                    exc,
                ) from exc

            target_path = Path(raw_path)
            try:
                with os.fdopen(handle, "wb") as target:
                    shutil.copyfileobj(stream, target)
            except _READ_FAILURES as exc:
                target_path.unlink(missing_ok=True)
                raise self._read_failed(
                    ReadError,
                    f"Error copying resource {name} to file",
                    name,
                    exc,
                ) from exc

        self._logger.debug(
            "resource-extracted",
            resource=name,
            path=str(target_path),
        )
        return target_path

    def resolve_path(self, name: str) -> ResourcePath:
        """Return a path object for ``name`` without copying its bytes.

        Directory roots yield a :class:`pathlib.Path`. Archive roots yield a
        :class:`zipfile.Path` backed by the shared archive handle, which
        stays valid for as long as the accessor's archive cache is open.

        Raises:
            ResolutionError: If the root or ``name`` cannot be resolved.
            NotFoundError: If nothing exists at the resolved location.
        """

        parts = _entry_parts(name)
        if parts is None:
            raise ResolutionError(
                f"Invalid resource locator {name!r}",
                resource=name,
            )

        candidate: ResourcePath
        if self.is_archive:
            try:
                candidate = self._archive_base().joinpath(*parts)
            except _ARCHIVE_FAILURES as exc:
                raise self._read_failed(
                    ResolutionError,
                    f"Unable to open resource archive {self._root.location}",
                    name,
                    exc,
                ) from exc
        else:
            if not self._root.location.is_dir():
                raise ResolutionError(
                    f"Resource root {self._root.location} is not a directory",
                    resource=name,
                )
            candidate = self._root.location.joinpath(self._root.prefix, *parts)

        if (parts or self._root.prefix) and not candidate.exists():
            raise self._not_found(name)

        self._logger.debug("resource-resolved", resource=name)
        return candidate

    def read_properties(
        self,
        name: str,
        defaults: Mapping[str, str] | None = None,
    ) -> ChainMap[str, str]:
        """Parse ``name`` as a properties file layered over ``defaults``.

        Lookups fall back to ``defaults`` for keys the resource does not
        define; writes only touch the loaded layer.

        Raises:
            NotFoundError: If no resource matches ``name``.
            ReadError: If the content is malformed or cannot be read.
        """

        with self.open_stream(name) as stream:
            try:
                loaded = load_properties(
                    stream,
                    encoding=self._settings.properties_encoding,
                )
            except _READ_FAILURES as exc:
                raise self._read_failed(
                    ReadError,
                    f"Error reading properties resource {name}",
                    name,
                    exc,
                ) from exc

        if defaults is None:
            return ChainMap(loaded)
        return ChainMap(loaded, defaults)

    def read_xml(self, name: str) -> ElementTree.ElementTree:
        """Parse ``name`` as an XML document.

        Raises:
            NotFoundError: If no resource matches ``name``.
            ParseError: If the document is malformed or cannot be read.
        """

        with self.open_stream(name) as stream:
            try:
                return ElementTree.parse(stream)
            except (ElementTree.ParseError, *_READ_FAILURES) as exc:
                raise self._read_failed(
                    ParseError,
                    f"Error reading XML resource: {name}",
                    name,
                    exc,
                ) from exc
