#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/__init__.py
"""adoc2ast - parse AsciiDoc into a block-level abstract syntax tree.

adoc2ast reads AsciiDoc source and builds a tree of sections, paragraphs,
delimited blocks, lists and tables. The preprocessor resolves include and
conditional directives as lines are read; the block parser records block
metadata (ids, roles, titles, options) and the substitutions each block's
text is subject to, and the serialization module runs those substitutions
when the tree is rendered.

Key Features
------------
- Document header with author and revision lines and attribute entries
- Sections with automatic ids and numbering, discrete headings, book parts
- Every delimited block type, markdown-style fences and blockquotes
- Ordered, unordered, description, check and callout lists
- psv, csv and dsv tables with column specs, spans and nested documents
- ``include::`` with line ranges and tags, ``ifdef``/``ifndef``/``ifeval``
- Safe modes that confine includes to the base directory
- Extension hooks for custom blocks, block macros and inline macros

Requirements
------------
- Python 3.10+

Examples
--------
Parse text and walk the sections:

    >>> from adoc2ast import load
    >>> doc = load("= Guide\\n\\n== Install\\n\\nRun the installer.")
    >>> [section.title for section in doc.sections]
    ['Install']

Parse a file and render it with substitutions applied:

    >>> from adoc2ast import load_file
    >>> from adoc2ast.ast.serialization import document_to_json
    >>> doc = load_file("guide.adoc", safe_mode="safe")
    >>> print(document_to_json(doc, indent=2))

See Also
--------
adoc2ast.ast : AST node definitions, visitors and serialization
adoc2ast.options : Parser options

"""

# Check Python version before any imports
import sys

if sys.version_info < (3, 10):
    raise ImportError(
        "adoc2ast requires Python 3.10 or later. "
        f"You are using Python {sys.version_info.major}.{sys.version_info.minor}."
    )

__version__ = "1.0.0"

from adoc2ast.api import load, load_file
from adoc2ast.ast.nodes import Document
from adoc2ast.constants import SafeMode
from adoc2ast.exceptions import (
    Adoc2AstError,
    IncludeSecurityError,
    NestingDepthError,
    ParsingError,
    SecurityError,
    UnsupportedBlockError,
)
from adoc2ast.extensions import ExtensionRegistry
from adoc2ast.options.asciidoc import AsciiDocOptions
from adoc2ast.progress import ProgressCallback, ProgressEvent

__all__ = [
    "__version__",
    "load",
    "load_file",
    "Document",
    "AsciiDocOptions",
    "SafeMode",
    "ExtensionRegistry",
    "ProgressCallback",
    "ProgressEvent",
    "Adoc2AstError",
    "ParsingError",
    "UnsupportedBlockError",
    "NestingDepthError",
    "SecurityError",
    "IncludeSecurityError",
]
