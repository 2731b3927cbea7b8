#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/ast/__init__.py
"""Abstract Syntax Tree (AST) module for parsed AsciiDoc documents.

The module consists of several components:

- nodes: the block tree (Document, Section, Block, List, ListItem, Table,
  Column, Cell) and the document-wide state owned by Document
- visitors: Visitor pattern implementation for AST traversal
- serialization: the render pass that turns a tree into dictionaries or JSON

Examples
--------
Find every source listing in a document:

    >>> from adoc2ast import load
    >>> from adoc2ast.ast import BlockContext
    >>> doc = load("[source,python]\\n----\\nprint('hi')\\n----")
    >>> [block.attr("language") for block in doc.find_by(context=BlockContext.LISTING)]
    ['python']

"""

from __future__ import annotations

from adoc2ast.ast.nodes import (
    AbstractBlock,
    AttributeEntry,
    Block,
    BlockContext,
    Catalog,
    Cell,
    Column,
    ContentModel,
    DescriptionListEntry,
    Document,
    Footnote,
    List,
    ListItem,
    Node,
    Section,
    SourceLocation,
    Table,
    TableRows,
)
from adoc2ast.ast.serialization import document_to_dict, document_to_json
from adoc2ast.ast.visitors import NodeVisitor

__all__ = [
    "AbstractBlock",
    "AttributeEntry",
    "Block",
    "BlockContext",
    "Catalog",
    "Cell",
    "Column",
    "ContentModel",
    "DescriptionListEntry",
    "Document",
    "Footnote",
    "List",
    "ListItem",
    "Node",
    "Section",
    "SourceLocation",
    "Table",
    "TableRows",
    "NodeVisitor",
    "document_to_dict",
    "document_to_json",
]
