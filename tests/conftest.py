"""Shared pytest fixtures for resource accessor tests."""

from __future__ import annotations

import random
import zipfile
from collections.abc import Iterator
from pathlib import Path
from typing import Mapping

import pytest

from resourceutil import ArchiveCache, ResourceAccessor

QUOTE = (
    "Antoine de Saint-Exupéry, author of The Little Prince, said, "
    '"If you want to build a ship, don\'t drum up the men to gather wood, '
    "divide the work and give orders. Instead, teach them to yearn for the "
    'vast and endless sea."'
)

NOTE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<note>
  <to>Tove</to>
  <from>Jani</from>
  <heading>Reminder</heading>
  <body>Don't forget me this weekend!</body>
</note>
"""

NOTE_INVALID_XML = """<?xml version="1.0" encoding="UTF-8"?>
<note>
  <to>Tove</to>
  <from>Jani</Ffrom>
  <heading>Reminder</heading>
</note>
"""

APP_PROPERTIES = b"""# application settings
name = resourceutil
greeting: hello\\u0020world
empty
"""


def _image_bytes() -> bytes:
    rng = random.Random(11)
    return b"\x89PNG\r\n\x1a\n" + rng.randbytes(8192)


def _resource_files() -> Mapping[str, bytes]:
    return {
        "stream.txt": b"stream contents\n",
        "quote.txt": QUOTE.encode("utf-8"),
        "holiday11-hp.png": _image_bytes(),
        "note.xml": NOTE_XML.encode("utf-8"),
        "note_invalid.xml": NOTE_INVALID_XML.encode("utf-8"),
        "config/app.properties": APP_PROPERTIES,
        "config/broken.properties": b"key = \\u12G4\n",
        "config/latin.txt": "caf\u00e9".encode("latin-1"),
    }


@pytest.fixture
def resource_files() -> Mapping[str, bytes]:
    """Return the relative name to bytes mapping used by every root."""

    return _resource_files()


@pytest.fixture
def resource_dir(tmp_path: Path, resource_files: Mapping[str, bytes]) -> Path:
    """Lay the resource files out in a plain directory."""

    root = tmp_path / "resources"
    for relative, payload in resource_files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(payload)
    return root


@pytest.fixture
def resource_archive(
    tmp_path: Path,
    resource_files: Mapping[str, bytes],
) -> Path:
    """Pack the resource files into a zip archive."""

    archive = tmp_path / "bundle.zip"
    with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for relative, payload in resource_files.items():
            zf.writestr(relative, payload)
    return archive


@pytest.fixture
def archive_cache() -> Iterator[ArchiveCache]:
    """Provide an isolated archive cache closed after the test."""

    with ArchiveCache() as cache:
        yield cache


@pytest.fixture(params=["directory", "archive"])
def accessor(
    request: pytest.FixtureRequest,
    resource_dir: Path,
    resource_archive: Path,
    archive_cache: ArchiveCache,
) -> ResourceAccessor:
    """Accessor over the same resources packaged either way."""

    if request.param == "directory":
        return ResourceAccessor(resource_dir, archives=archive_cache)
    return ResourceAccessor(resource_archive, archives=archive_cache)
