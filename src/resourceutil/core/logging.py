"""Logging helpers for :mod:`resourceutil`."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable

from rich.console import Console
from rich.logging import RichHandler
import structlog

from resourceutil.core.config import ResourceSettings

Logger = structlog.stdlib.BoundLogger

_CONSOLE_PROCESSOR = structlog.dev.ConsoleRenderer(colors=False)
_FILE_PROCESSOR = structlog.processors.JSONRenderer(sort_keys=True)
_TIMESTAMPER = structlog.processors.TimeStamper(fmt="iso", utc=True)

_DEFAULT_LOG_FILENAME = "resourceutil.log"


def _normalize_level(level: str) -> int:
    """Return the logging module level constant for ``level``.

    Raises:
        ValueError: If the level name is not recognized.
    """

    normalized = level.strip().upper()
    value = logging.getLevelName(normalized)
    if isinstance(value, str):  # ``getLevelName`` echoes unknown names.
        raise ValueError(f"Unsupported log level: {level!r}")
    return value


def _foreign_pre_chain() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        _TIMESTAMPER,
    ]


def _install_handlers(
    root: logging.Logger,
    handlers: Iterable[logging.Handler],
) -> None:
    """Swap the root logger's handlers for ``handlers``."""

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)


def _configure_structlog() -> None:
    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            _TIMESTAMPER,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _build_file_handler(log_file: Path, level: int) -> logging.FileHandler:
    """Return a handler writing one JSON document per record."""

    handler = logging.FileHandler(log_file, encoding="utf-8", delay=True)
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_FILE_PROCESSOR,
            foreign_pre_chain=_foreign_pre_chain(),
        )
    )
    return handler


def _build_console_handler(
    level: int,
    console: Console | None = None,
) -> RichHandler:
    """Return a Rich-backed console handler for structured logging."""

    handler = RichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        markup=False,
        log_time_format="%Y-%m-%d %H:%M:%S",
    )
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_CONSOLE_PROCESSOR,
            foreign_pre_chain=_foreign_pre_chain(),
        )
    )
    return handler


def configure_logging(
    *,
    level: str | None = None,
    log_dir: str | Path | None = None,
    console: Console | None = None,
    settings: ResourceSettings | None = None,
) -> None:
    """Configure structlog on top of stdlib logging.

    Libraries embedding :mod:`resourceutil` usually own their logging setup;
    this helper is for applications that want the package defaults.

    Args:
        level: Log level name applied to the root logger (case-insensitive).
            Falls back to ``settings.log_level`` and then ``INFO``.
        log_dir: Optional directory receiving ``resourceutil.log``.
        console: Optional Rich console override, primarily for testing.
        settings: Optional settings supplying the default level.

    Raises:
        ValueError: If the level is not a recognized log level name.
    """

    if level is None:
        level = settings.log_level if settings is not None else "INFO"
    log_level = _normalize_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    _configure_structlog()

    handlers: list[logging.Handler] = [
        _build_console_handler(log_level, console=console)
    ]

    if log_dir is not None:
        directory = Path(log_dir).expanduser().resolve(strict=False)
        directory.mkdir(parents=True, exist_ok=True)
        handlers.append(
            _build_file_handler(directory / _DEFAULT_LOG_FILENAME, log_level)
        )

    _install_handlers(root_logger, handlers)


def _configure_library_defaults() -> None:
    """Route events to stdlib logging when the host left structlog alone.

    structlog's own defaults print to stdout, which a library must never
    do. These defaults hand every event to the stdlib logger of the same
    name, so the host's handlers (or the package ``NullHandler``) decide
    where it ends up.
    """

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None, **initial_context: Any) -> Logger:
    """Return a structured logger bound to an optional context.

    A structlog configuration installed by the host application or by
    :func:`configure_logging` is used as is.

    Example:
        >>> logger = get_logger(__name__, root="/srv/app")
        >>> hasattr(logger, "debug")
        True
    """

    if not structlog.is_configured():
        _configure_library_defaults()
    return structlog.stdlib.get_logger(name).bind(**initial_context)


__all__ = ["Logger", "configure_logging", "get_logger"]
