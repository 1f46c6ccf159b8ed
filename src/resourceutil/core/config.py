"""Configuration models and loaders for :mod:`resourceutil`."""

from __future__ import annotations

import codecs
import os
from collections.abc import Mapping as MappingABC
from pathlib import Path
from typing import Any, Mapping

import tomllib
from pydantic import BaseModel, Field, field_validator

from resourceutil.roots import DEFAULT_ARCHIVE_SUFFIXES

__all__ = [
    "ENV_PREFIX",
    "ResourceSettings",
    "load_settings",
    "read_settings_file",
    "settings_from_env",
]

ENV_PREFIX = "RESOURCEUTIL_"
SETTINGS_TABLE = "resourceutil"


class ResourceSettings(BaseModel):
    """Settings shared by every :class:`~resourceutil.ResourceAccessor`."""

    root: Path | None = Field(
        default=None,
        description="Directory or archive file that resources resolve from.",
    )
    encoding: str = Field(
        default="utf-8",
        description="Text encoding used for readers and strings.",
    )
    properties_encoding: str = Field(
        default="iso-8859-1",
        description="Encoding used to decode properties resources.",
    )
    temp_prefix: str = Field(
        default="extracted",
        description="File name prefix for extracted temporary files.",
    )
    temp_suffix: str = Field(
        default="resource",
        description="File name suffix for extracted temporary files.",
    )
    archive_suffixes: tuple[str, ...] = Field(
        default=DEFAULT_ARCHIVE_SUFFIXES,
        description="File name suffixes that mark a root as an archive.",
    )
    log_level: str = Field(
        default="INFO",
        description="Default logging level used by configure_logging.",
    )

    model_config = {
        "str_strip_whitespace": True,
        "validate_assignment": True,
    }

    @field_validator("root", mode="before")
    @classmethod
    def _blank_root_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("root")
    @classmethod
    def _expand_root(cls, value: Path | None) -> Path | None:
        return value.expanduser() if value is not None else None

    @field_validator("encoding", "properties_encoding")
    @classmethod
    def _validate_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as exc:
            raise ValueError(f"Unknown text encoding: {value!r}") from exc
        return value

    @field_validator("archive_suffixes", mode="before")
    @classmethod
    def _split_suffixes(cls, value: Any) -> Any:
        if isinstance(value, str):
            return tuple(part for part in value.split(",") if part.strip())
        return value

    @field_validator("archive_suffixes")
    @classmethod
    def _normalize_suffixes(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        normalized: list[str] = []
        for suffix in value:
            cleaned = suffix.strip().lower()
            if not cleaned:
                continue
            if not cleaned.startswith("."):
                cleaned = f".{cleaned}"
            normalized.append(cleaned)
        if not normalized:
            raise ValueError("At least one archive suffix is required.")
        return tuple(dict.fromkeys(normalized))

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


def _deep_merge(
    base: Mapping[str, Any],
    overlay: Mapping[str, Any],
) -> dict[str, Any]:
    """Recursively merge ``overlay`` into ``base`` returning a new dict."""

    merged: dict[str, Any] = dict(base)
    for key, value in overlay.items():
        if (
            key in merged
            and isinstance(merged[key], MappingABC)
            and isinstance(value, MappingABC)
        ):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(
    *,
    defaults: Mapping[str, Any] | None = None,
    user_config: Mapping[str, Any] | None = None,
    env_config: Mapping[str, Any] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ResourceSettings:
    """Load settings according to the precedence stack.

    Later layers win: ``overrides`` > ``env_config`` > ``user_config`` >
    ``defaults`` > model defaults.

    Example:
        >>> settings = load_settings(
        ...     user_config={"encoding": "latin-1"},
        ...     overrides={"temp_prefix": "copy"},
        ... )
        >>> (settings.encoding, settings.temp_prefix)
        ('latin-1', 'copy')

    Raises:
        pydantic.ValidationError: If the merged values are invalid.
    """

    stack: dict[str, Any] = {}
    for layer in (defaults, user_config, env_config, overrides):
        if layer:
            stack = _deep_merge(stack, layer)
    return ResourceSettings(**stack)


def settings_from_env(
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Collect ``RESOURCEUTIL_*`` variables into a settings layer.

    Example:
        >>> settings_from_env({"RESOURCEUTIL_ENCODING": "utf-16"})
        {'encoding': 'utf-16'}
    """

    source = os.environ if environ is None else environ
    layer: dict[str, Any] = {}
    for field_name in ResourceSettings.model_fields:
        raw = source.get(f"{ENV_PREFIX}{field_name.upper()}")
        if raw is not None:
            layer[field_name] = raw
    return layer


def read_settings_file(path: str | Path) -> dict[str, Any]:
    """Parse a TOML settings file into a settings layer.

    Values may live at the top level or under a ``[resourceutil]`` table.
    A missing file yields an empty layer.

    Raises:
        ValueError: If the file is not valid TOML.
    """

    settings_path = Path(path).expanduser()
    if not settings_path.exists():
        return {}

    try:
        data = tomllib.loads(settings_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(
            f"Invalid settings file {settings_path}: {exc}"
        ) from exc

    table = data.get(SETTINGS_TABLE)
    if isinstance(table, MappingABC):
        return dict(table)
    return data
