#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/options/__init__.py
"""Configuration options for the AsciiDoc parser.

Options are frozen dataclasses. Use ``create_updated`` to derive a modified
copy instead of mutating an instance.
"""

from __future__ import annotations

from adoc2ast.options.asciidoc import AsciiDocOptions
from adoc2ast.options.base import BaseParserOptions, CloneFrozenMixin

__all__ = [
    "AsciiDocOptions",
    "BaseParserOptions",
    "CloneFrozenMixin",
]
