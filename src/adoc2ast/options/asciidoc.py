#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/options/asciidoc.py
"""Configuration options for AsciiDoc parsing.

This module defines the options class consulted by the reader, the block
parser and the substitution pipeline for a single conversion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from adoc2ast.constants import (
    ATTRIBUTE_MISSING_POLICIES,
    ATTRIBUTE_UNDEFINED_POLICIES,
    DEFAULT_ATTRIBUTE_MISSING,
    DEFAULT_ATTRIBUTE_UNDEFINED,
    DEFAULT_COMPAT_MODE,
    DEFAULT_DOCTYPE,
    DEFAULT_MAX_INCLUDE_DEPTH,
    DEFAULT_MAX_NESTING_DEPTH,
    DEFAULT_MAX_PASSTHROUGH_PASSES,
    DEFAULT_PARSE_HEADER_ONLY,
    DEFAULT_SAFE_MODE,
    DEFAULT_SOURCEMAP,
    DOCTYPES,
    AttributeMissingPolicy,
    AttributeUndefinedPolicy,
    DocType,
    SafeMode,
)
from adoc2ast.options.base import BaseParserOptions

if TYPE_CHECKING:
    from adoc2ast.extensions import ExtensionRegistry
    from adoc2ast.inline import InlineConverter


@dataclass(frozen=True)
class AsciiDocOptions(BaseParserOptions):
    """Configuration options for AsciiDoc-to-AST parsing.

    Parameters
    ----------
    safe_mode : SafeMode, default SafeMode.SECURE
        Security level. Accepts an enum member, an integer level or a name
        such as ``"server"``. Include directives are only honored below SECURE.
    attributes : dict, default empty
        API-level attribute overrides. A value ending in ``@`` is a soft
        default the document may reassign; a value of None (or a name ending
        in ``!``) unsets the attribute.
    attribute_missing : {"skip", "drop", "drop-line", "warn"}, default "skip"
        What to do with a reference to an attribute that is not defined.
    attribute_undefined : {"drop", "drop-line"}, default "drop-line"
        What to do with an attribute entry that unsets an attribute inline.
    doctype : {"article", "book", "manpage", "inline"}, default "article"
        Document type; only books may contain level-0 sections.
    base_dir : str or None, default None
        Directory include targets are resolved against and jailed to.
        Defaults to the input file's directory, else the working directory.
    max_include_depth : int, default 64
        Maximum depth of nested include directives.
    max_nesting_depth : int, default 64
        Maximum depth of nested delimited blocks and list items.
    max_passthrough_passes : int, default 64
        Maximum passes the passthrough restore worklist runs.
    parse_header_only : bool, default False
        Stop after the document header.
    sourcemap : bool, default False
        Record source locations on every block.
    compat_mode : bool, default False
        Enable legacy quoting rules.
    extensions : ExtensionRegistry or None
        Registry of block, block macro and inline macro processors.
    converter : InlineConverter or None
        Converter used to turn inline nodes into text.

    """

    safe_mode: SafeMode = field(
        default=DEFAULT_SAFE_MODE,
        metadata={"help": "Safe mode level (unsafe, safe, server, secure, paranoid)", "importance": "security"},
    )
    attributes: dict[str, Optional[str]] = field(
        default_factory=dict,
        metadata={"help": "Document attribute overrides", "importance": "core"},
    )
    attribute_missing: AttributeMissingPolicy = field(
        default=DEFAULT_ATTRIBUTE_MISSING,
        metadata={
            "help": "Policy for references to undefined attributes",
            "choices": list(ATTRIBUTE_MISSING_POLICIES),
            "importance": "core",
        },
    )
    attribute_undefined: AttributeUndefinedPolicy = field(
        default=DEFAULT_ATTRIBUTE_UNDEFINED,
        metadata={
            "help": "Policy for inline attribute entries that unset an attribute",
            "choices": list(ATTRIBUTE_UNDEFINED_POLICIES),
            "importance": "advanced",
        },
    )
    doctype: DocType = field(
        default=DEFAULT_DOCTYPE,
        metadata={"help": "Document type", "choices": list(DOCTYPES), "importance": "core"},
    )
    base_dir: Optional[str] = field(
        default=None,
        metadata={"help": "Directory include targets are resolved against", "importance": "security"},
    )
    max_include_depth: int = field(
        default=DEFAULT_MAX_INCLUDE_DEPTH,
        metadata={"help": "Maximum nesting of include directives", "type": int, "importance": "security"},
    )
    max_nesting_depth: int = field(
        default=DEFAULT_MAX_NESTING_DEPTH,
        metadata={"help": "Maximum nesting of delimited blocks", "type": int, "importance": "security"},
    )
    max_passthrough_passes: int = field(
        default=DEFAULT_MAX_PASSTHROUGH_PASSES,
        metadata={"help": "Maximum passthrough restoration passes", "type": int, "importance": "security"},
    )
    parse_header_only: bool = field(
        default=DEFAULT_PARSE_HEADER_ONLY,
        metadata={"help": "Only parse the document header", "importance": "advanced"},
    )
    sourcemap: bool = field(
        default=DEFAULT_SOURCEMAP,
        metadata={"help": "Record source locations on blocks", "importance": "advanced"},
    )
    compat_mode: bool = field(
        default=DEFAULT_COMPAT_MODE,
        metadata={"help": "Enable legacy (compat-mode) quoting rules", "importance": "advanced"},
    )
    extensions: Optional["ExtensionRegistry"] = field(
        default=None,
        metadata={"help": "Registry of extension processors", "exclude_from_cli": True, "importance": "advanced"},
    )
    converter: Optional["InlineConverter"] = field(
        default=None,
        metadata={"help": "Inline node converter", "exclude_from_cli": True, "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate option values and normalize the safe mode.

        Raises
        ------
        ValueError
            If any field value is outside its valid range.

        """
        super().__post_init__()
        object.__setattr__(self, "safe_mode", SafeMode.coerce(self.safe_mode))
        if not isinstance(self.attributes, dict):
            object.__setattr__(self, "attributes", dict(self.attributes))

        if self.attribute_missing not in ATTRIBUTE_MISSING_POLICIES:
            raise ValueError(
                f"attribute_missing must be one of {ATTRIBUTE_MISSING_POLICIES}, got {self.attribute_missing!r}"
            )
        if self.attribute_undefined not in ATTRIBUTE_UNDEFINED_POLICIES:
            raise ValueError(
                f"attribute_undefined must be one of {ATTRIBUTE_UNDEFINED_POLICIES}, got {self.attribute_undefined!r}"
            )
        if self.doctype not in DOCTYPES:
            raise ValueError(f"doctype must be one of {DOCTYPES}, got {self.doctype!r}")

        for name in ("max_include_depth", "max_nesting_depth", "max_passthrough_passes"):
            value: Any = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
