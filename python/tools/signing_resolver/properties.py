#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Reader for Java-style ``.properties`` files.

The parser follows the rules of ``java.util.Properties.load`` so that
``local.properties`` and ``key.properties`` read here yield the same values the
Android toolchain sees: comment and continuation handling, the ``=``/``:``/
whitespace separators, and backslash escapes including ``\\uXXXX``.
"""

from __future__ import annotations

import re
import string
from pathlib import Path
from types import MappingProxyType
from collections.abc import Iterator, Mapping
from typing import Dict, Optional, Tuple, Union

from loguru import logger

from .exceptions import MalformedPropertiesError, PropertyFileError

# Properties.load(InputStream) decodes bytes as ISO-8859-1
PROPERTIES_ENCODING = "latin-1"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_WHITESPACE = " \t\f"
_SEPARATORS = "=:"
_COMMENT_MARKERS = "#!"
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


class PropertySource(Mapping[str, str]):
    """
    Read-only, ordered view of the key/value pairs loaded from one file.

    A source whose file did not exist is empty and reports ``exists == False``.
    """

    def __init__(
        self,
        values: Optional[Mapping[str, str]] = None,
        *,
        path: Optional[Path] = None,
        exists: bool = False,
    ) -> None:
        self._values = MappingProxyType(dict(values or {}))
        self.path = path
        self.exists = exists

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"PropertySource(path={self.path!r}, exists={self.exists}, keys={list(self._values)!r})"

    @property
    def directory(self) -> Optional[Path]:
        """Directory containing the source file, used to resolve relative paths."""
        return self.path.parent if self.path is not None else None

    def get_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return the value for ``key``, or ``default`` when it is absent."""
        return self._values.get(key, default)


def _ends_with_continuation(line: str) -> bool:
    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def _iter_logical_lines(text: str) -> Iterator[Tuple[int, str]]:
    """Yield ``(line_number, logical_line)`` pairs with continuations joined."""
    natural_lines = _LINE_BREAK.split(text)
    index = 0
    while index < len(natural_lines):
        line_number = index + 1
        line = natural_lines[index].lstrip(_WHITESPACE)
        index += 1
        if not line or line[0] in _COMMENT_MARKERS:
            continue

        while _ends_with_continuation(line):
            line = line[:-1]
            if index >= len(natural_lines):
                break
            line += natural_lines[index].lstrip(_WHITESPACE)
            index += 1

        yield line_number, line


def _split_entry(line: str) -> Tuple[str, str]:
    """Split a logical line into its raw (still escaped) key and value."""
    key_end = len(line)
    value_start = len(line)
    has_separator = False
    escaped = False

    for position, char in enumerate(line):
        if escaped:
            escaped = False
            continue
        if char == "\\":
            escaped = True
            continue
        if char in _SEPARATORS:
            key_end, value_start = position, position + 1
            has_separator = True
            break
        if char in _WHITESPACE:
            key_end, value_start = position, position + 1
            break

    while value_start < len(line) and line[value_start] in _WHITESPACE:
        value_start += 1
    if not has_separator and value_start < len(line) and line[value_start] in _SEPARATORS:
        value_start += 1
        while value_start < len(line) and line[value_start] in _WHITESPACE:
            value_start += 1

    return line[:key_end], line[value_start:]


def _unescape(
    raw: str, source: Optional[Path], line_number: int
) -> str:
    chars = []
    index = 0
    while index < len(raw):
        char = raw[index]
        index += 1
        if char != "\\":
            chars.append(char)
            continue
        if index >= len(raw):
            break

        char = raw[index]
        index += 1
        if char == "u":
            digits = raw[index:index + 4]
            if len(digits) < 4 or any(d not in string.hexdigits for d in digits):
                raise MalformedPropertiesError(
                    f"Malformed \\uxxxx encoding: '\\u{digits}'",
                    file_path=source,
                    line_number=line_number,
                )
            chars.append(chr(int(digits, 16)))
            index += 4
        else:
            chars.append(_ESCAPES.get(char, char))

    return "".join(chars)


def parse_properties(text: str, source: Optional[Path] = None) -> Dict[str, str]:
    """
    Parse the contents of a ``.properties`` file.

    Args:
        text: Decoded file contents.
        source: Path the text came from, used in error reports.

    Returns:
        Ordered mapping of keys to values. Later duplicates override earlier ones.

    Raises:
        MalformedPropertiesError: If an escape sequence is invalid.
    """
    values: Dict[str, str] = {}
    for line_number, line in _iter_logical_lines(text):
        raw_key, raw_value = _split_entry(line)
        key = _unescape(raw_key, source, line_number)
        values[key] = _unescape(raw_value, source, line_number)
    return values


def load_properties(file_path: Union[Path, str]) -> PropertySource:
    """
    Load a property file that may or may not exist.

    A missing file is the normal case on machines without local configuration
    and yields an empty source.

    Raises:
        PropertyFileError: If the file exists but cannot be read.
        MalformedPropertiesError: If the file has invalid syntax.
    """
    path = Path(file_path)
    if not path.exists():
        logger.debug(f"Property file not found, using empty source: {path}")
        return PropertySource(path=path, exists=False)

    try:
        text = path.read_text(encoding=PROPERTIES_ENCODING)
    except OSError as e:
        logger.error(f"Failed to read property file {path}: {e}")
        raise PropertyFileError(
            f"Failed to read property file: {e}",
            error_code="UNREADABLE_PROPERTIES",
            file_path=path,
            original_error=e,
        ) from e

    values = parse_properties(text, source=path)
    logger.debug(f"Loaded {len(values)} properties from {path}")
    return PropertySource(values, path=path, exists=True)
