#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/constants.py
"""Constants and default values for the adoc2ast library.

This module centralizes the hardcoded values, lookup tables and default
configuration constants used by the reader, parser and substitution
pipeline.

Constants are organized by category:
1. Type Definitions - All Literal types and type aliases
2. Safe Mode - Ordered security levels
3. Parser Defaults - Default option values
4. Block Syntax Tables - Delimiters, styles and list markers
5. Attribute Tables - Intrinsic and default document attributes
6. Table Constants - Table formats and cell styles
"""

from __future__ import annotations

from enum import IntEnum
from typing import Literal

# =============================================================================
# Type Definitions - All Literal Types and Type Aliases
# =============================================================================

AttributeMissingPolicy = Literal["skip", "drop", "drop-line", "warn"]
AttributeUndefinedPolicy = Literal["drop", "drop-line"]
DocType = Literal["article", "book", "manpage", "inline"]
TableFormat = Literal["psv", "dsv", "csv"]

ATTRIBUTE_MISSING_POLICIES: tuple[str, ...] = ("skip", "drop", "drop-line", "warn")
ATTRIBUTE_UNDEFINED_POLICIES: tuple[str, ...] = ("drop", "drop-line")
DOCTYPES: tuple[str, ...] = ("article", "book", "manpage", "inline")

# =============================================================================
# Safe Mode
# =============================================================================


class SafeMode(IntEnum):
    """Ordered safe mode levels gating file access and document attribute control.

    UNSAFE disables every restriction. SAFE confines include directives to the
    base directory. SERVER additionally turns a jail escape into a fatal error
    and locks security-relevant attributes. SECURE disables include directives
    entirely. PARANOID is reserved and behaves like SECURE.
    """

    UNSAFE = 0
    SAFE = 1
    SERVER = 10
    SECURE = 20
    PARANOID = 100

    @classmethod
    def coerce(cls, value: "SafeMode | int | str") -> "SafeMode":
        """Resolve a safe mode from an enum member, integer level or name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown safe mode name: {value!r}") from None
        return cls(int(value))


# =============================================================================
# Parser Defaults
# =============================================================================

DEFAULT_SAFE_MODE = SafeMode.SECURE
DEFAULT_ATTRIBUTE_MISSING: AttributeMissingPolicy = "skip"
DEFAULT_ATTRIBUTE_UNDEFINED: AttributeUndefinedPolicy = "drop-line"
DEFAULT_DOCTYPE: DocType = "article"
DEFAULT_MAX_INCLUDE_DEPTH = 64
DEFAULT_MAX_NESTING_DEPTH = 64
DEFAULT_MAX_PASSTHROUGH_PASSES = 64
DEFAULT_PARSE_HEADER_ONLY = False
DEFAULT_SOURCEMAP = False
DEFAULT_COMPAT_MODE = False
DEFAULT_STDIN_PATH = "<stdin>"

# =============================================================================
# Block Syntax Tables
# =============================================================================

ADMONITION_STYLES = frozenset({"NOTE", "TIP", "IMPORTANT", "WARNING", "CAUTION"})

PARAGRAPH_STYLES = frozenset(
    {
        "comment",
        "example",
        "literal",
        "listing",
        "normal",
        "open",
        "pass",
        "quote",
        "sidebar",
        "source",
        "verse",
        "abstract",
        "partintro",
    }
)

VERBATIM_STYLES = frozenset({"literal", "listing", "source", "verse"})

# tip -> (context, styles that may masquerade as this block)
DELIMITED_BLOCKS: dict[str, tuple[str, frozenset[str]]] = {
    "--": (
        "open",
        frozenset(
            {
                "comment",
                "example",
                "literal",
                "listing",
                "pass",
                "quote",
                "sidebar",
                "source",
                "verse",
                "admonition",
                "abstract",
                "partintro",
            }
        ),
    ),
    "----": ("listing", frozenset({"literal", "source"})),
    "....": ("literal", frozenset({"listing", "source"})),
    "====": ("example", frozenset({"admonition"})),
    "****": ("sidebar", frozenset()),
    "____": ("quote", frozenset({"verse"})),
    "++++": ("pass", frozenset({"stem", "latexmath", "asciimath"})),
    "|===": ("table", frozenset()),
    ",===": ("table", frozenset()),
    ":===": ("table", frozenset()),
    "!===": ("table", frozenset()),
    "////": ("comment", frozenset()),
    "```": ("fenced_code", frozenset()),
}

DELIMITED_BLOCK_HEADS = frozenset(tip[:2] for tip in DELIMITED_BLOCKS)

LAYOUT_BREAK_CHARS = {"'": "thematic_break", "<": "page_break"}

MARKDOWN_THEMATIC_BREAK_CHARS = {"-": "thematic_break", "*": "thematic_break", "_": "thematic_break"}

ORDERED_LIST_STYLES: tuple[str, ...] = ("arabic", "loweralpha", "lowerroman", "upperalpha", "upperroman")

ASCIIDOC_EXTENSIONS: tuple[str, ...] = (".adoc", ".asciidoc", ".asc", ".ad", ".txt")

LIST_CONTINUATION = "+"
LINE_BREAK = " +"
LINE_CONTINUATION = " \\"
LINE_CONTINUATION_LEGACY = " +"

SETEXT_SECTION_LEVELS = {"=": 0, "-": 1, "~": 2, "^": 3, "+": 4}

STEM_TYPE_ALIASES = {"latexmath": "latexmath", "latex": "latexmath", "tex": "latexmath", "asciimath": "asciimath"}
DEFAULT_STEM_TYPE = "asciimath"

# =============================================================================
# Attribute Tables
# =============================================================================

INTRINSIC_ATTRIBUTES: dict[str, str] = {
    "startsb": "[",
    "endsb": "]",
    "vbar": "|",
    "caret": "^",
    "asterisk": "*",
    "tilde": "~",
    "plus": "&#43;",
    "backslash": "\\",
    "backtick": "`",
    "blank": "",
    "empty": "",
    "sp": " ",
    "two-colons": "::",
    "two-semicolons": ";;",
    "nbsp": "&#160;",
    "deg": "&#176;",
    "zwsp": "&#8203;",
    "quot": "&#34;",
    "apos": "&#39;",
    "lsquo": "&#8216;",
    "rsquo": "&#8217;",
    "ldquo": "&#8220;",
    "rdquo": "&#8221;",
    "wj": "&#8288;",
    "brvbar": "&#166;",
    "cpp": "C++",
    "amp": "&",
    "lt": "<",
    "gt": ">",
}

DEFAULT_DOCUMENT_ATTRIBUTES: dict[str, str] = {
    "sectids": "",
    "idprefix": "_",
    "idseparator": "_",
    "toc-placement": "auto",
    "table-caption": "Table",
    "example-caption": "Example",
    "figure-caption": "Figure",
    "appendix-caption": "Appendix",
    "caution-caption": "Caution",
    "important-caption": "Important",
    "note-caption": "Note",
    "tip-caption": "Tip",
    "warning-caption": "Warning",
    "outfilesuffix": ".html",
    "stem": "",
}

# Attributes a document may still change in its body after the header
FLEXIBLE_ATTRIBUTES = frozenset({"sectnums"})

# Attributes the document may not assign at SafeMode.SERVER and above
SAFE_MODE_LOCKED_ATTRIBUTES = frozenset({"allow-uri-read", "docdir", "max-include-depth"})

# =============================================================================
# Table Constants
# =============================================================================

DEFAULT_TABLE_FORMAT: TableFormat = "psv"

TABLE_FORMAT_DELIMITERS: dict[str, str] = {"psv": "|", "dsv": ":", "csv": ","}

TABLE_CELL_STYLES: dict[str, str] = {
    "d": "none",
    "s": "strong",
    "e": "emphasis",
    "m": "monospaced",
    "h": "header",
    "l": "literal",
    "v": "verse",
    "a": "asciidoc",
}

TABLE_HALIGNS = {"<": "left", ">": "right", "^": "center"}
TABLE_VALIGNS = {"<": "top", ">": "bottom", "^": "middle"}
