#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/parsers/_lines.py
"""Line classification for the AsciiDoc block parser.

This private module holds the regular expressions that recognize block
boundaries, metadata lines, section titles and list markers, together with
small classifier functions that return structured records instead of raw
match objects. The block parser dispatches on these records.

"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from adoc2ast.constants import DELIMITED_BLOCK_HEADS, DELIMITED_BLOCKS, SETEXT_SECTION_LEVELS
from adoc2ast.utils.text import int_to_roman_numeral

__all__ = [
    "DelimiterMatch",
    "ListMarker",
    "SectionTitle",
    "atx_section_level",
    "classify_list_line",
    "is_delimited_block",
    "is_section_title",
    "is_sibling_list_item",
    "match_section_title",
    "resolve_list_marker",
    "resolve_ordered_list_marker",
    "setext_section_level",
]

# Letters, or a colon, may start an id; ``[^\W\d]`` is a letter or underscore
_ID = r"(?:[^\W\d]|:)[\w:.-]*"

# -- metadata lines ------------------------------------------------------------

ATTRIBUTE_ENTRY_RE = re.compile(r"^:(!?\w.*?):(?:[ \t]+(.*))?$")
BLOCK_ANCHOR_RE = re.compile(rf"^\[\[(?:|({_ID})(?:, *(.+))?)\]\]$")
BLOCK_ATTRIBUTE_LIST_RE = re.compile(r"^\[(|[\w{,.#\"'%].*)\]$")
BLOCK_ATTRIBUTE_LINE_RE = re.compile(rf"^\[(?:|[\w{{,.#\"'%].*|\[(?:|{_ID}(?:, *.+)?)\])\]$")
BLOCK_TITLE_RE = re.compile(r"^\.(\.?[^ \t.].*)$")
COMMENT_BLOCK_RE = re.compile(r"^/{4,}$")
COMMENT_LINE_RE = re.compile(r"^//(?:[^/]|$)")

# -- paragraphs ----------------------------------------------------------------

ADMONITION_PARAGRAPH_RE = re.compile(r"^(NOTE|TIP|IMPORTANT|WARNING|CAUTION):[ \t]+")
LITERAL_PARAGRAPH_RE = re.compile(r"^([ \t]+.*)$")

# -- sections ------------------------------------------------------------------

ATX_SECTION_TITLE_RE = re.compile(r"^(=={0,5}|#\#{0,5})[ \t]+(.+?)(?:[ \t]+\1)?$")
SETEXT_SECTION_TITLE_RE = re.compile(r"^((?!\.).*?[^\W_].*)$")
INLINE_SECTION_ANCHOR_RE = re.compile(rf"[ \t]+(\\)?\[\[({_ID})(?:, *(.+))?\]\]$")
INVALID_SECTION_ID_CHARS_RE = re.compile(
    r"<[^>]+>|&(?:[a-z][a-z]+\d{0,2}|#\d\d\d{0,4}|#x[\da-f][\da-f][\da-f]{0,3});|[^ \w\-.]+?"
)
SECTION_LEVEL_STYLE_RE = re.compile(r"^sect\d$")

# -- lists ---------------------------------------------------------------------

UNORDERED_LIST_RE = re.compile(r"^[ \t]*(-|\*{1,5}|\u2022{1,5})[ \t]+(.*)$")
ORDERED_LIST_RE = re.compile(r"^[ \t]*(\.{1,5}|\d+\.|[a-zA-Z]\.|[IVXivx]+\))[ \t]+(.*)$")
DESCRIPTION_LIST_RE = re.compile(r"^(?!//[^/])[ \t]*([^ \t].*?)(:::{0,2}|;;)(?:$|[ \t]+(.*)$)")
CALLOUT_LIST_RE = re.compile(r"^<(\d+|\.)>[ \t]+(.*)$")
ANY_LIST_RE = re.compile(
    r"^(?:[ \t]*(?:-|\*+|\.+|\u2022+|\d+\.|[a-zA-Z]\.|[IVXivx]+\))[ \t]"
    r"|(?!//[^/])[ \t]*[^ \t].*?(?::::{0,2}|;;)(?:$|[ \t])"
    r"|<(?:\d+|\.)>[ \t])"
)

DESCRIPTION_LIST_SIBLING_RES = {
    "::": re.compile(r"^(?!//[^/])[ \t]*([^ \t].*?[^:]|[^ \t:])(::)(?:$|[ \t]+(.*)$)"),
    ":::": re.compile(r"^(?!//[^/])[ \t]*([^ \t].*?[^:]|[^ \t:])(:::)(?:$|[ \t]+(.*)$)"),
    "::::": re.compile(r"^(?!//[^/])[ \t]*([^ \t].*?[^:]|[^ \t:])(::::)(?:$|[ \t]+(.*)$)"),
    ";;": re.compile(r"^(?!//[^/])[ \t]*([^ \t].*?)(;;)(?:$|[ \t]+(.*)$)"),
}

LIST_RES = {
    "ulist": UNORDERED_LIST_RE,
    "olist": ORDERED_LIST_RE,
    "dlist": DESCRIPTION_LIST_RE,
    "colist": CALLOUT_LIST_RE,
}

ORDERED_LIST_MARKER_RES = {
    "arabic": re.compile(r"^\d+\.$"),
    "loweralpha": re.compile(r"^[a-z]\.$"),
    "lowerroman": re.compile(r"^[ivx]+\)$"),
    "upperalpha": re.compile(r"^[A-Z]\.$"),
    "upperroman": re.compile(r"^[IVX]+\)$"),
}

# -- block macros and breaks ---------------------------------------------------

GENERIC_BLOCK_MACRO_RE = re.compile(r"^(\w[\w-]*)::(|\S|\S.*?\S)\[(.+)?\]$")
MEDIA_BLOCK_MACRO_RE = re.compile(r"^(image|video|audio)::(\S|\S.*?\S)\[(.+)?\]$")
TOC_BLOCK_MACRO_RE = re.compile(r"^toc::\[(.+)?\]$")
MARKDOWN_THEMATIC_BREAK_RE = re.compile(r"^ {0,3}([-*_])( *)\1\2\1$")
LAYOUT_BREAK_RE = re.compile(r"^(?:'{3,}|<{3,}|([-*_])( *)\1\2\1)$")

# -- inline scans run at parse time --------------------------------------------

CALLOUT_SCAN_RE = re.compile(r"\\?<!?(|--)(\d+|\.)\1>(?=(?: ?\\?<!?\1(?:\d+|\.)\1>)*$)", re.M)
INLINE_ANCHOR_SCAN_RE = re.compile(
    rf"(?:^|[^\\\[])\[\[({_ID})(?:, *(.+?))?\]\]|(?:^|[^\\])anchor:({_ID})\[(?:\]|(.*?[^\\])\])", re.M
)
LEADING_INLINE_ANCHOR_RE = re.compile(rf"^\[\[({_ID})(?:, *(.+?))?\]\]")
INLINE_BIBLIO_ANCHOR_RE = re.compile(rf"^\[\[\[({_ID})(?:, *(.+?))?\]\]\]")

# -- document header -----------------------------------------------------------

AUTHOR_INFO_RE = re.compile(r"^(\w[\w\-'.]*)(?: +(\w[\w\-'.]*))?(?: +(\w[\w\-'.]*))?(?: +<([^>]+)>)?$")
AUTHOR_DELIMITER_RE = re.compile(r";\s*")
REVISION_INFO_RE = re.compile(r"^(?:[^\d{]*(.*?),)? *(?!:)(.*?)(?: *(?!^),?: *(.*))?$")
XML_TAG_RE = re.compile(r"<[^>]+>")


@dataclass(frozen=True)
class DelimiterMatch:
    """An opening line of a delimited block.

    Parameters
    ----------
    context : str
        Block context the delimiter opens (``listing``, ``table``, ...)
    masq : frozenset of str
        Styles that may masquerade as this block
    tip : str
        The canonical delimiter the line was matched against
    terminator : str
        The exact line that closes the block

    """

    context: str
    masq: frozenset[str]
    tip: str
    terminator: str


@dataclass(frozen=True)
class SectionTitle:
    """A parsed section title line (or line pair)."""

    level: int
    title: str
    id: Optional[str] = None
    reftext: Optional[str] = None
    atx: bool = True


@dataclass(frozen=True)
class ListMarker:
    """A line that starts a list item."""

    context: str
    marker: str
    text: Optional[str]
    match: re.Match[str]


def is_delimited_block(line: str) -> Optional[DelimiterMatch]:
    """Return the delimited block a line opens, or None.

    A delimiter is its canonical tip (``----``, ``|===``, ...) optionally
    extended with more of its final character. The two-character open block
    delimiter and the three-character fenced code marker must match
    exactly; a fenced code line may carry a language after the backticks.
    """
    line_len = len(line)
    if line_len < 2 or line[:2] not in DELIMITED_BLOCK_HEADS:
        return None
    if line_len == 2:
        tip = line
        tip_len = 2
    else:
        if line_len < 5:
            tip = line
            tip_len = line_len
        else:
            tip = line[:4]
            tip_len = 4
        if tip.startswith("`"):
            if tip_len == 4:
                if tip == "````" or tip[:3] != "```":
                    return None
                tip = line = "```"
                line_len = tip_len = 3
            elif tip != "```":
                return None
        elif tip_len == 3:
            return None

    entry = DELIMITED_BLOCKS.get(tip)
    if entry is None:
        return None
    if line_len == tip_len or line[1:].count(tip[-1]) == line_len - 1:
        context, masq = entry
        return DelimiterMatch(context, masq, tip, line)
    return None


def atx_section_level(line: str) -> Optional[int]:
    """Return the level of a single-line (``==`` or ``##``) section title."""
    if line[:1] in ("=", "#"):
        match = ATX_SECTION_TITLE_RE.match(line)
        if match:
            return len(match.group(1)) - 1
    return None


def setext_section_level(line1: str, line2: Optional[str]) -> Optional[int]:
    """Return the level of a two-line section title (text over an underline)."""
    if not line2:
        return None
    level = SETEXT_SECTION_LEVELS.get(line2[0])
    if level is None or line2.count(line2[0]) != len(line2):
        return None
    if SETEXT_SECTION_TITLE_RE.match(line1) and abs(len(line1) - len(line2)) < 2:
        return level
    return None


def is_section_title(line1: str, line2: Optional[str] = None) -> Optional[int]:
    level = atx_section_level(line1)
    if level is not None:
        return level
    return setext_section_level(line1, line2)


def match_section_title(line1: str, line2: Optional[str]) -> Optional[SectionTitle]:
    """Parse a section title from its first line and the line after it.

    Returns
    -------
    SectionTitle or None
        The title record; ``atx`` is False when the title used an underline
        (so the second line belongs to it as well)

    """
    title: Optional[str] = None
    atx = True
    if line1[:1] in ("=", "#"):
        match = ATX_SECTION_TITLE_RE.match(line1)
        if match:
            level = len(match.group(1)) - 1
            title = match.group(2)
    if title is None:
        setext_level = setext_section_level(line1, line2)
        if setext_level is None:
            return None
        level, title, atx = setext_level, line1, False

    section_id = reftext = None
    if title.endswith("]]"):
        anchor = INLINE_SECTION_ANCHOR_RE.search(title)
        if anchor and not anchor.group(1):
            title = title[: anchor.start()]
            section_id, reftext = anchor.group(2), anchor.group(3)
    return SectionTitle(level, title, section_id, reftext, atx)


def classify_list_line(line: str, contexts: tuple[str, ...] = ("ulist", "olist", "dlist")) -> Optional[ListMarker]:
    """Return the first list kind among ``contexts`` whose marker starts ``line``."""
    for context in contexts:
        match = LIST_RES[context].match(line)
        if match:
            text = match.group(3) if context == "dlist" else match.group(2)
            return ListMarker(context, match.group(1), text, match)
    return None


def resolve_ordered_list_marker(marker: str, ordinal: int = 0) -> tuple[str, Optional[str], Optional[str], Optional[str]]:
    """Normalize an ordered list marker to the first marker of its series.

    Parameters
    ----------
    marker : str
        The marker as written (``3.``, ``b.``, ``iv)``, ``..``)
    ordinal : int
        Zero-based position of the item, used to compute the expected marker

    Returns
    -------
    tuple
        The canonical marker, the numbering style (None for ``.`` markers),
        the expected and the actual marker value

    """
    if marker.startswith("."):
        return marker, None, None, None
    for style, pattern in ORDERED_LIST_MARKER_RES.items():
        if not pattern.match(marker):
            continue
        if style == "arabic":
            return "1.", style, str(ordinal + 1), str(int(marker[:-1]))
        if style == "loweralpha":
            return "a.", style, chr(ord("a") + ordinal), marker[:-1]
        if style == "upperalpha":
            return "A.", style, chr(ord("A") + ordinal), marker[:-1]
        if style == "lowerroman":
            return "i)", style, int_to_roman_numeral(ordinal + 1).lower(), marker[:-1]
        return "I)", style, int_to_roman_numeral(ordinal + 1).upper(), marker[:-1]
    return marker, None, None, None


def resolve_list_marker(list_type: str, marker: str) -> str:
    if list_type == "olist":
        return resolve_ordered_list_marker(marker)[0]
    if list_type == "colist":
        return "<1>"
    return marker


def is_sibling_list_item(line: str, list_type: str, sibling_trait: str | re.Pattern[str]) -> bool:
    """Return True if ``line`` starts another item of the same list.

    For description lists the trait is the sibling pattern of the delimiter
    in use; for other lists it is the canonical marker of the first item.
    """
    if isinstance(sibling_trait, re.Pattern):
        return sibling_trait.match(line) is not None
    match = LIST_RES[list_type].match(line)
    return match is not None and sibling_trait == resolve_list_marker(list_type, match.group(1))
