"""Reader and writer for the ``.properties`` text format.

Implements the line grammar used by site configuration files:

- ``#`` and ``!`` start a comment line; blank lines are ignored
- keys end at the first unescaped ``=``, ``:`` or whitespace
- a line ending in an odd number of backslashes continues on the next line,
  whose leading whitespace is dropped
- ``\\t``, ``\\n``, ``\\r``, ``\\f`` and ``\\uXXXX`` escapes are decoded; any
  other escaped character stands for itself

Values are always returned as text. Typed interpretation happens at read time.
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union

from core.exceptions import PropertiesParseError

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_HEX4 = re.compile(r"[0-9a-fA-F]{4}")
_WHITESPACE = " \t\f"
_SEPARATORS = "=:"
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def parse_properties(text: str, source: Optional[str] = None) -> Dict[str, str]:
    """Parse properties text into an ordered dict.

    Args:
        text: Raw file content
        source: Name used in error messages (usually the file path)

    Returns:
        Mapping of key to value; later duplicates win

    Raises:
        PropertiesParseError: On a malformed ``\\uXXXX`` escape
    """
    properties: Dict[str, str] = {}
    for line_number, line in _logical_lines(text):
        key, value = _split_entry(line)
        properties[_unescape(key, source, line_number)] = _unescape(value, source, line_number)
    return properties


def load_properties(path: Union[str, Path], encoding: str = "utf-8") -> Dict[str, str]:
    """Read and parse a properties file.

    Raises:
        OSError: If the file cannot be read (including when it vanished)
        PropertiesParseError: If the content is not valid properties text
    """
    path = Path(path)
    try:
        text = path.read_text(encoding=encoding)
    except UnicodeDecodeError as e:
        raise PropertiesParseError(f"not valid {encoding}: {e.reason}", str(path)) from e
    return parse_properties(text, str(path))


def format_properties(properties: Mapping[str, str]) -> str:
    """Render a mapping as properties text, one ``key=value`` per line, sorted by key."""
    lines = [
        f"{_escape(key, is_key=True)}={_escape(value, is_key=False)}"
        for key, value in sorted(properties.items())
    ]
    return "\n".join(lines) + ("\n" if lines else "")


def _logical_lines(text: str) -> Iterator[Tuple[int, str]]:
    buffer: Optional[str] = None
    start = 0
    for number, raw in enumerate(_LINE_BREAK.split(text), 1):
        line = raw.lstrip(_WHITESPACE)
        if buffer is None:
            if not line or line[0] in "#!":
                continue
            start = number
            buffer = ""
        if _continues(line):
            buffer += line[:-1]
            continue
        buffer += line
        yield start, buffer
        buffer = None
    if buffer is not None:
        yield start, buffer


def _continues(line: str) -> bool:
    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def _split_entry(line: str) -> Tuple[str, str]:
    length = len(line)
    index = 0
    while index < length:
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in _SEPARATORS or char in _WHITESPACE:
            break
        index += 1
    key_end = min(index, length)

    index = key_end
    while index < length and line[index] in _WHITESPACE:
        index += 1
    if index < length and line[index] in _SEPARATORS:
        index += 1
        while index < length and line[index] in _WHITESPACE:
            index += 1
    return line[:key_end], line[index:]


def _unescape(text: str, source: Optional[str], line_number: int) -> str:
    if "\\" not in text:
        return text
    out = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char != "\\":
            out.append(char)
            index += 1
            continue
        index += 1
        if index >= length:
            break
        char = text[index]
        if char == "u":
            digits = text[index + 1:index + 5]
            if not _HEX4.fullmatch(digits):
                raise PropertiesParseError("malformed \\uxxxx encoding", source, line_number)
            out.append(chr(int(digits, 16)))
            index += 5
            continue
        out.append(_ESCAPES.get(char, char))
        index += 1
    return "".join(out)


def _escape(text: str, is_key: bool) -> str:
    out = []
    for position, char in enumerate(text):
        if char == "\\":
            out.append("\\\\")
        elif char == "\t":
            out.append("\\t")
        elif char == "\n":
            out.append("\\n")
        elif char == "\r":
            out.append("\\r")
        elif char == "\f":
            out.append("\\f")
        elif char == " " and (is_key or position == 0):
            out.append("\\ ")
        elif char in "=:#!" and (is_key or position == 0):
            out.append("\\" + char)
        else:
            out.append(char)
    return "".join(out)
