#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/utils/text.py
"""Text helpers shared by the reader and the block parser."""

from __future__ import annotations

import re

_INVALID_ATTRIBUTE_NAME_CHARS = re.compile(r"[^\w\-]")
_LEADING_INT = re.compile(r"^[ \t]*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^[ \t]*([+-]?\d*\.?\d+(?:[eE][+-]?\d+)?)")
_URI_SNIFF = re.compile(r"^[A-Za-z][A-Za-z0-9.+-]+:/{0,2}")
_ROMAN_DIGITS = {"i": 1, "v": 5, "x": 10, "l": 50, "c": 100, "d": 500, "m": 1000}
_ROMAN_TABLE = (
    (1000, "m"),
    (900, "cm"),
    (500, "d"),
    (400, "cd"),
    (100, "c"),
    (90, "xc"),
    (50, "l"),
    (40, "xl"),
    (10, "x"),
    (9, "ix"),
    (5, "v"),
    (4, "iv"),
    (1, "i"),
)

BOM = "﻿"


def prepare_source_lines(data: str | list[str], normalize: bool = True) -> list[str]:
    """Split source text into lines.

    When ``normalize`` is set, a leading byte order mark is dropped and
    trailing whitespace is stripped from every line.
    """
    if isinstance(data, str):
        if data.startswith(BOM):
            data = data[1:]
        lines = data.splitlines()
    else:
        lines = [line.rstrip("\r\n") for line in data]
        if lines and lines[0].startswith(BOM):
            lines[0] = lines[0][1:]
    if normalize:
        lines = [line.rstrip() for line in lines]
    return lines


def adjust_indentation(lines: list[str], indent: int = 0, tab_size: int = 0) -> list[str]:
    """Expand tabs and strip the common leading indentation of a block of lines.

    Parameters
    ----------
    lines : list of str
        Lines to adjust in place
    indent : int, default 0
        Indentation to apply after the common indent is removed; a negative
        value skips the indentation pass
    tab_size : int, default 0
        Tab stop width; tabs are only expanded when positive

    Returns
    -------
    list of str
        The same list, adjusted

    """
    if not lines:
        return lines

    if tab_size > 0 and any("\t" in line for line in lines):
        lines[:] = [line.expandtabs(tab_size) if "\t" in line else line for line in lines]

    if indent < 0:
        return lines

    block_indent: int | None = None
    for line in lines:
        if not line:
            continue
        line_indent = len(line) - len(line.lstrip())
        if line_indent == 0:
            block_indent = None
            break
        if block_indent is None or line_indent < block_indent:
            block_indent = line_indent

    padding = " " * indent
    if block_indent:
        lines[:] = [f"{padding}{line[block_indent:]}" if line else line for line in lines]
    elif indent:
        lines[:] = [f"{padding}{line}" if line else line for line in lines]
    return lines


def sanitize_attribute_name(name: str) -> str:
    """Lowercase ``name`` and drop characters not allowed in attribute names."""
    return _INVALID_ATTRIBUTE_NAME_CHARS.sub("", name).lower()


def roman_numeral_to_int(value: str) -> int:
    """Convert a roman numeral (either case) to an integer."""
    value = value.lower()
    result = 0
    for index, char in enumerate(value):
        digit = _ROMAN_DIGITS[char]
        if index + 1 < len(value) and _ROMAN_DIGITS[value[index + 1]] > digit:
            result -= digit
        else:
            result += digit
    return result


def int_to_roman_numeral(value: int) -> str:
    """Convert a positive integer to a lowercase roman numeral."""
    result = []
    for number, numeral in _ROMAN_TABLE:
        while value >= number:
            result.append(numeral)
            value -= number
    return "".join(result)


def split_delimited_value(value: str) -> list[str]:
    """Split a value on ``;`` when present, else on ``,``."""
    if "," in value and ";" not in value:
        return value.split(",")
    return value.split(";")


def to_int(value: str) -> int:
    """Leading integer of ``value``; 0 when there is none."""
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else 0


def to_float(value: str) -> float:
    """Leading decimal number of ``value``; 0.0 when there is none."""
    match = _LEADING_FLOAT.match(value)
    return float(match.group(1)) if match else 0.0


def is_uriish(target: str) -> bool:
    return "://" in target and bool(_URI_SNIFF.match(target))


def rootname(path: str) -> str:
    """Strip the extension from the last segment of a path."""
    last_dot = path.rfind(".")
    if last_dot == -1 or "/" in path[last_dot:]:
        return path
    return path[:last_dot]


def basename(path: str, drop_extension: bool = False) -> str:
    name = path.replace("\\", "/").rsplit("/", 1)[-1]
    return rootname(name) if drop_extension else name
