"""Reader for the line-oriented ``key=value`` properties format."""

from __future__ import annotations

import re
from string import hexdigits
from typing import BinaryIO, Iterator

__all__ = ["load_properties", "parse_properties"]

_WHITESPACE = " \t\f"
_SEPARATORS = "=:"
_COMMENT_MARKERS = "#!"
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def _trailing_backslashes(line: str) -> int:
    return len(line) - len(line.rstrip("\\"))


def _logical_lines(text: str) -> Iterator[str]:
    """Yield logical lines with comments, blanks and continuations folded."""

    pending: str | None = None
    for natural in _LINE_BREAK.split(text):
        stripped = natural.lstrip(_WHITESPACE)
        if pending is None and (
            not stripped or stripped[0] in _COMMENT_MARKERS
        ):
            continue

        if _trailing_backslashes(stripped) % 2 == 1:
            pending = (pending or "") + stripped[:-1]
            continue

        yield (pending or "") + stripped
        pending = None

    if pending is not None:
        yield pending


def _split_entry(line: str) -> tuple[str, str]:
    """Split a logical line into its raw (still escaped) key and value."""

    length = len(line)
    end = 0
    while end < length:
        char = line[end]
        if char == "\\":
            end += 2
            continue
        if char in _SEPARATORS or char in _WHITESPACE:
            break
        end += 1
    end = min(end, length)

    start = end
    while start < length and line[start] in _WHITESPACE:
        start += 1
    if start < length and line[start] in _SEPARATORS:
        start += 1
        while start < length and line[start] in _WHITESPACE:
            start += 1

    return line[:end], line[start:]


def _unescape(chunk: str) -> str:
    """Resolve backslash escapes in ``chunk``.

    Raises:
        ValueError: If a ``\\uXXXX`` escape is malformed.
    """

    if "\\" not in chunk:
        return chunk

    out: list[str] = []
    index = 0
    length = len(chunk)
    while index < length:
        char = chunk[index]
        index += 1
        if char != "\\":
            out.append(char)
            continue
        if index >= length:
            break
        char = chunk[index]
        index += 1
        if char == "u":
            digits = chunk[index : index + 4]
            if len(digits) < 4 or any(d not in hexdigits for d in digits):
                raise ValueError(f"Malformed \\uxxxx encoding: {digits!r}")
            out.append(chr(int(digits, 16)))
            index += 4
        else:
            out.append(_ESCAPES.get(char, char))
    return "".join(out)


def parse_properties(text: str) -> dict[str, str]:
    """Parse properties ``text`` into a dictionary.

    Later duplicate keys replace earlier ones.

    Example:
        >>> parse_properties("# greeting\\nname = world\\npath=/a:b\\n")
        {'name': 'world', 'path': '/a:b'}

    Raises:
        ValueError: If the content holds a malformed unicode escape.
    """

    entries: dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split_entry(line)
        entries[_unescape(key)] = _unescape(value)
    return entries


def load_properties(
    stream: BinaryIO,
    *,
    encoding: str = "iso-8859-1",
) -> dict[str, str]:
    """Decode ``stream`` with ``encoding`` and parse it as properties.

    Raises:
        ValueError: If decoding fails or the content is malformed.
        OSError: If reading the stream fails.
    """

    return parse_properties(stream.read().decode(encoding))
