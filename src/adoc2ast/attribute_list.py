#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/attribute_list.py
"""Parser for bracketed attribute lists.

Turns the interior of ``[...]`` into a mapping of attributes. Positional
values are stored under their 1-based index and, when a name was supplied
for that position, under the name too.

Examples
--------
>>> AttributeList('quote, Albert Einstein, title="Relativity"').parse(["style", "attribution"])
{'style': 'quote', 1: 'quote', 'attribution': 'Albert Einstein', 2: 'Albert Einstein', 'title': 'Relativity'}

"""

from __future__ import annotations

import re
from typing import Any, Callable, Optional, Sequence

_BOUNDARY_PATTERNS = {
    '"': re.compile(r'.*?[^\\](?=")'),
    "'": re.compile(r".*?[^\\](?=')"),
    ",": re.compile(r".*?(?=[ \t]*(,|$))"),
}

_ESCAPED_QUOTE_PATTERNS = {
    '"': re.compile(r'\\"'),
    "'": re.compile(r"\\'"),
}

_NAME_PATTERN = re.compile(r"\w[\w\-.]*")
_BLANK_PATTERN = re.compile(r"[ \t]+")
_DELIMITER_SKIP_PATTERN = re.compile(r"[ \t]*(,|$)")

AttributeMap = dict[Any, Any]


class _Scanner:
    """Minimal forward-only string scanner."""

    def __init__(self, source: str):
        self.source = source
        self.pos = 0

    @property
    def eos(self) -> bool:
        return self.pos >= len(self.source)

    def peek(self) -> str:
        return self.source[self.pos : self.pos + 1]

    def get_char(self) -> Optional[str]:
        if self.eos:
            return None
        char = self.source[self.pos]
        self.pos += 1
        return char

    def scan(self, pattern: re.Pattern[str]) -> Optional[str]:
        match = pattern.match(self.source, self.pos)
        if match is None:
            return None
        self.pos = match.end()
        return match.group(0)

    def skip(self, pattern: re.Pattern[str]) -> int:
        match = pattern.match(self.source, self.pos)
        if match is None:
            return 0
        self.pos = match.end()
        return match.end() - match.start()


class AttributeList:
    """Parse an attribute list such as ``source,python,linenums`` into a mapping.

    Parameters
    ----------
    source : str
        The text between the square brackets
    normal_subs : callable, optional
        Applied to single-quoted values. Double-quoted and unquoted values
        are never substituted.

    Notes
    -----
    ``options`` (alias ``opts``) fans out into ``<option>-option`` flags:
    ``options="header,footer"`` sets ``header-option`` and ``footer-option``.
    A named value of ``None`` is skipped. An unterminated quote degrades to an
    unquoted value that keeps the opening quote.

    """

    def __init__(self, source: str, normal_subs: Optional[Callable[[str], str]] = None):
        self._scanner = _Scanner(source)
        self._normal_subs = normal_subs
        self._attributes: Optional[AttributeMap] = None

    def parse(self, posattrs: Sequence[Optional[str]] = ()) -> AttributeMap:
        """Parse the source once and return the attributes."""
        if self._attributes is not None:
            return self._attributes

        self._attributes = {}
        index = 0
        while self._parse_attribute(index, posattrs):
            if self._scanner.eos:
                break
            self._scanner.skip(_DELIMITER_SKIP_PATTERN)
            index += 1
        return self._attributes

    def parse_into(self, attributes: AttributeMap, posattrs: Sequence[Optional[str]] = ()) -> AttributeMap:
        """Parse and merge the result into an existing mapping."""
        attributes.update(self.parse(posattrs))
        return attributes

    def rekey(self, posattrs: Sequence[Optional[str]]) -> AttributeMap:
        return AttributeList.rekey_attributes(self.parse(), posattrs)

    @staticmethod
    def rekey_attributes(attributes: AttributeMap, posattrs: Sequence[Optional[str]]) -> AttributeMap:
        """Assign names to positional attributes that were parsed without them."""
        for index, key in enumerate(posattrs):
            if not key:
                continue
            value = attributes.get(index + 1)
            if value is not None:
                attributes[key] = value
        return attributes

    def _parse_attribute(self, index: int, posattrs: Sequence[Optional[str]]) -> bool:
        scanner = self._scanner
        single_quoted = False
        value: Optional[str] = None
        self._skip_blank()

        first = scanner.peek()
        if first == '"':
            name: Optional[str] = self._parse_attribute_value(scanner.get_char() or '"')
        elif first == "'":
            name = self._parse_attribute_value(scanner.get_char() or "'")
            single_quoted = True
        else:
            name = scanner.scan(_NAME_PATTERN)
            skipped = 0
            char: Optional[str] = None
            if scanner.eos:
                if not name:
                    return False
            else:
                skipped = self._skip_blank()
                char = scanner.get_char()

            if char is None or char == ",":
                value = None
            elif char != "=" or not name:
                name = f"{name or ''}{' ' * skipped}{char}{self._scan_to_delimiter()}"
                value = None
            else:
                self._skip_blank()
                if scanner.peek():
                    char = scanner.get_char()
                    if char == '"':
                        value = self._parse_attribute_value(char)
                    elif char == "'":
                        value = self._parse_attribute_value(char)
                        single_quoted = True
                    elif char == ",":
                        value = None
                    else:
                        value = f"{char}{self._scan_to_delimiter()}"
                        if value == "None":
                            return True

        attributes = self._attributes if self._attributes is not None else {}
        if value is not None:
            if name in ("options", "opts"):
                for option in value.replace(" ", "").split(","):
                    if option:
                        attributes[f"{option}-option"] = ""
                attributes["options"] = value
            elif name == "title":
                attributes[name] = value
            else:
                attributes[name] = self._apply_subs(value) if single_quoted else value
        else:
            resolved = name or ""
            if single_quoted:
                resolved = self._apply_subs(resolved)
            if index < len(posattrs) and posattrs[index]:
                attributes[posattrs[index]] = resolved
            attributes[index + 1] = resolved
        return True

    def _apply_subs(self, text: str) -> str:
        if text and self._normal_subs is not None:
            return self._normal_subs(text)
        return text

    def _parse_attribute_value(self, quote: str) -> str:
        scanner = self._scanner
        if scanner.peek() == quote:
            scanner.get_char()
            return ""
        value = scanner.scan(_BOUNDARY_PATTERNS[quote])
        if value is not None:
            scanner.get_char()
            return _ESCAPED_QUOTE_PATTERNS[quote].sub(quote, value)
        return f"{quote}{self._scan_to_delimiter()}"

    def _skip_blank(self) -> int:
        return self._scanner.skip(_BLANK_PATTERN)

    def _scan_to_delimiter(self) -> str:
        return self._scanner.scan(_BOUNDARY_PATTERNS[","]) or ""
