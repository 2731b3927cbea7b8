#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/parsers/__init__.py
"""Parsers package initialization.

:class:`~adoc2ast.parsers.asciidoc.AsciiDocParser` is the entry point; it
drives :class:`~adoc2ast.parsers.blocks.BlockParser`, whose header, section,
list and table rules live in the private modules of this package.
"""

from adoc2ast.parsers.asciidoc import AsciiDocParser
from adoc2ast.parsers.base import BaseParser
from adoc2ast.parsers.blocks import BlockParser

__all__ = ["AsciiDocParser", "BaseParser", "BlockParser"]
