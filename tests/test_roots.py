"""Tests for :mod:`resourceutil.roots`."""

from __future__ import annotations

import sys
import zipfile
from collections.abc import Iterator
from pathlib import Path

import pytest

from resourceutil import ResolutionError, ResourceAccessor, ResourceRoot


@pytest.fixture
def isolated_import_path() -> Iterator[None]:
    """Restore ``sys.path`` and drop test packages after each test."""

    saved_path = list(sys.path)
    saved_modules = set(sys.modules)
    try:
        yield
    finally:
        sys.path[:] = saved_path
        for name in set(sys.modules) - saved_modules:
            del sys.modules[name]


def test_from_location_expands_user(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))

    root = ResourceRoot.from_location("~/bundle")

    assert root.location == tmp_path / "bundle"
    assert root.prefix == ""


@pytest.mark.parametrize("location", ["", "   ", "bad\x00path"])
def test_from_location_rejects_invalid_locations(location: str) -> None:
    with pytest.raises(ResolutionError):
        ResourceRoot.from_location(location)


@pytest.mark.parametrize(
    ("prefix", "expected"),
    [("/app/data/", "app/data"), ("./app", "app"), ("", ""), ("/", "")],
)
def test_from_location_normalizes_prefix(prefix: str, expected: str) -> None:
    root = ResourceRoot.from_location("/srv/bundle.zip", prefix=prefix)

    assert root.prefix == expected


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("bundle.zip", True),
        ("bundle.ZIP", True),
        ("app.Jar", True),
        ("bundle.zip.d", False),
        ("resources", False),
    ],
)
def test_is_archive_uses_suffix_only(name: str, expected: bool) -> None:
    root = ResourceRoot.from_location(Path("/srv") / name)

    assert root.is_archive() is expected


def test_describe_includes_prefix() -> None:
    root = ResourceRoot.from_location("/srv/app.zip", prefix="pkg/data")

    assert root.describe() == "/srv/app.zip!/pkg/data"
    assert ResourceRoot.from_location("/srv/res").describe() == "/srv/res"


def test_for_package_resolves_directory_package(
    tmp_path: Path,
    isolated_import_path: None,
) -> None:
    package = tmp_path / "site" / "dirpkg_fixture"
    package.mkdir(parents=True)
    (package / "__init__.py").write_text("", encoding="utf-8")
    (package / "hello.txt").write_text("hi", encoding="utf-8")
    sys.path.insert(0, str(tmp_path / "site"))

    root = ResourceRoot.for_package("dirpkg_fixture")

    assert root.location == package
    assert root.prefix == ""
    assert not root.is_archive()


def test_for_package_resolves_zip_imported_package(
    tmp_path: Path,
    isolated_import_path: None,
) -> None:
    archive = tmp_path / "app.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("zippkg_fixture/__init__.py", "")
        zf.writestr("zippkg_fixture/data/hello.txt", "hi from zip")
    sys.path.insert(0, str(archive))

    root = ResourceRoot.for_package("zippkg_fixture")

    assert root.location == archive
    assert root.prefix == "zippkg_fixture"

    accessor = ResourceAccessor.for_package("zippkg_fixture")
    try:
        assert accessor.is_archive
        assert accessor.read_string("/data/hello.txt") == "hi from zip"
    finally:
        accessor.archives.close()


def test_for_package_uses_nested_package_directory_as_prefix(
    tmp_path: Path,
    isolated_import_path: None,
) -> None:
    archive = tmp_path / "nested.pyz"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("outerpkg_fixture/__init__.py", "")
        zf.writestr("outerpkg_fixture/inner/__init__.py", "")
        zf.writestr("outerpkg_fixture/inner/hello.txt", "nested")
    sys.path.insert(0, str(archive))

    root = ResourceRoot.for_package("outerpkg_fixture.inner")

    assert root.location == archive
    assert root.prefix == "outerpkg_fixture/inner"
    assert root.describe() == f"{archive}!/outerpkg_fixture/inner"


def test_for_package_rejects_unknown_package() -> None:
    with pytest.raises(ResolutionError):
        ResourceRoot.for_package("resourceutil_no_such_package")


def test_for_package_rejects_missing_parent_package() -> None:
    with pytest.raises(ResolutionError):
        ResourceRoot.for_package("resourceutil_missing_parent.child")


def test_for_package_rejects_packages_without_location() -> None:
    with pytest.raises(ResolutionError):
        ResourceRoot.for_package("sys")
