#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/utils/__init__.py
"""Utility modules for adoc2ast package.

This package contains helpers for text handling, source decoding, include
path confinement and metadata extraction.
"""

from adoc2ast.utils.encoding import decode_source, read_source_file
from adoc2ast.utils.metadata import DocumentMetadata
from adoc2ast.utils.text import adjust_indentation, basename, int_to_roman_numeral, roman_numeral_to_int

__all__ = [
    "decode_source",
    "read_source_file",
    "DocumentMetadata",
    "adjust_indentation",
    "basename",
    "int_to_roman_numeral",
    "roman_numeral_to_int",
]
