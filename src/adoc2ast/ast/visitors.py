#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/ast/visitors.py
"""Visitor pattern implementation for AST traversal.

This module provides the visitor base class for traversing and processing
the block tree. Every node's ``accept`` method dispatches to the matching
``visit_*`` method, so algorithms (the render pass in
:mod:`adoc2ast.ast.serialization`, reference checks, statistics) stay
separate from the node classes.

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from adoc2ast.ast.nodes import (
    AbstractBlock,
    Block,
    Cell,
    Column,
    DescriptionListEntry,
    Document,
    List,
    ListItem,
    Node,
    Section,
    Table,
)


class NodeVisitor(ABC):
    """Abstract base class for AST node visitors.

    Subclasses implement the ``visit_*`` methods for the structural nodes.
    Lists, list items, tables, columns and cells fall back to
    :meth:`generic_visit`, which visits the children and returns None.

    Examples
    --------
    Visitor that collects section titles:

        >>> class TitleCollector(NodeVisitor):
        ...     def __init__(self):
        ...         self.titles = []
        ...
        ...     def visit_document(self, node):
        ...         self.generic_visit(node)
        ...
        ...     def visit_section(self, node):
        ...         self.titles.append(node.title)
        ...         self.generic_visit(node)
        ...
        ...     def visit_block(self, node):
        ...         self.generic_visit(node)
        ...
        >>> collector = TitleCollector()
        >>> document.accept(collector)
        >>> collector.titles
        ['Introduction', 'Usage']

    """

    @abstractmethod
    def visit_document(self, node: Document) -> Any:
        """Visit a Document node.

        Parameters
        ----------
        node : Document
            The document node to visit

        Returns
        -------
        Any
            Result of processing this node

        """
        pass

    @abstractmethod
    def visit_section(self, node: Section) -> Any:
        """Visit a Section node.

        Parameters
        ----------
        node : Section
            The section node to visit

        Returns
        -------
        Any
            Result of processing this node

        """
        pass

    @abstractmethod
    def visit_block(self, node: Block) -> Any:
        """Visit a Block node (paragraphs, delimited blocks, media, breaks).

        Parameters
        ----------
        node : Block
            The block node to visit

        Returns
        -------
        Any
            Result of processing this node

        """
        pass

    def visit_list(self, node: List) -> Any:
        """Visit a List node."""
        return self.generic_visit(node)

    def visit_list_item(self, node: ListItem) -> Any:
        """Visit a ListItem node (including description list terms)."""
        return self.generic_visit(node)

    def visit_table(self, node: Table) -> Any:
        """Visit a Table node."""
        return self.generic_visit(node)

    def visit_column(self, node: Column) -> Any:
        return self.generic_visit(node)

    def visit_cell(self, node: Cell) -> Any:
        return self.generic_visit(node)

    def generic_visit(self, node: Node) -> Any:
        """Visit the children of a node.

        Blocks visit their child blocks, lists their items (terms before the
        description for description lists), tables their columns and then
        their cells row by row, and ``asciidoc`` cells their nested
        document.

        Parameters
        ----------
        node : Node
            The node whose children are visited

        Returns
        -------
        Any
            Result of processing (default: None)

        """
        if isinstance(node, List):
            for item in node.items:
                if isinstance(item, DescriptionListEntry):
                    for term in item.terms:
                        term.accept(self)
                    if item.description is not None:
                        item.description.accept(self)
                else:
                    item.accept(self)
        elif isinstance(node, Table):
            for column in node.columns:
                column.accept(self)
            for _, rows in node.rows.by_section():
                for row in rows:
                    for cell in row:
                        cell.accept(self)
        elif isinstance(node, Cell):
            if node.inner_document is not None:
                node.inner_document.accept(self)
        elif isinstance(node, AbstractBlock):
            for child in node.blocks:
                child.accept(self)
        return None
