#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/ast/serialization.py
"""JSON serialization of parsed documents.

Serializing a document is a render pass: inline text is substituted while
the tree is walked, so the output carries converted titles, paragraph
content, list item text and cell text next to the block structure.

The pass follows the rules a converter would:

- the attributes saved after the header are restored first, and the
  attribute entries recorded on each block are played back when the walk
  reaches it, so ``{name}`` references see the value in effect at that point
  of the document
- callout ids are handed out again from the start, moving to the next
  callout list after each ``colist``
- footnotes are collected afresh, so passes over the same document are
  idempotent

Examples
--------
Serialize a document to JSON:

    >>> from adoc2ast import load
    >>> from adoc2ast.ast.serialization import document_to_json
    >>>
    >>> doc = load("= Title\\n\\nHello *world*")
    >>> print(document_to_json(doc, indent=2))

"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from adoc2ast.ast.nodes import (
    AbstractBlock,
    AttributeEntry,
    Block,
    BlockContext,
    Cell,
    Column,
    ContentModel,
    DescriptionListEntry,
    Document,
    List,
    ListItem,
    Section,
    SourceLocation,
    Table,
)
from adoc2ast.ast.visitors import NodeVisitor

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


def _serialize_attributes(attributes: dict[Any, Any]) -> dict[str, Any]:
    """Convert block attributes to JSON-safe form.

    Positional keys become strings and the recorded attribute entries are
    left out (they are replayed, not reported).
    """
    result: dict[str, Any] = {}
    for key, value in attributes.items():
        if key == "attribute_entries":
            continue
        if isinstance(value, AttributeEntry):
            continue
        result[str(key)] = value
    return result


def _serialize_source_location(location: Optional[SourceLocation]) -> Optional[dict[str, Any]]:
    if location is None:
        return None
    result: dict[str, Any] = {"format": location.format}
    if location.line is not None:
        result["line"] = location.line
    if location.path is not None:
        result["path"] = location.path
    if location.metadata:
        result["metadata"] = location.metadata
    return result


class _RenderVisitor(NodeVisitor):
    """Walk a document in tree order, substituting text into plain dictionaries."""

    def __init__(self, document: Document):
        self.document = document
        self.substitutor = document.substitutor

    def _common(self, node: AbstractBlock, node_type: str) -> dict[str, Any]:
        self.document.playback_attributes(node.attributes)
        result: dict[str, Any] = {
            "node_type": node_type,
            "context": node.context.value,
            "content_model": node.content_model.value,
        }
        if node.id is not None:
            result["id"] = node.id
        if node.style is not None:
            result["style"] = node.style
        if node.title:
            result["title"] = self.substitutor.title(node)
        if node.caption is not None:
            result["caption"] = node.caption
        if node.numeral is not None:
            result["numeral"] = node.numeral
        attributes = _serialize_attributes(node.attributes)
        if attributes:
            result["attributes"] = attributes
        if node.metadata:
            result["metadata"] = node.metadata
        if node.source_location is not None:
            result["source_location"] = _serialize_source_location(node.source_location)
        return result

    def _children(self, node: AbstractBlock) -> list[dict[str, Any]]:
        return [child.accept(self) for child in node.blocks]

    def visit_document(self, node: Document) -> dict[str, Any]:
        result: dict[str, Any] = {"node_type": "Document", "doctype": node.doctype}
        if node.id is not None:
            result["id"] = node.id
        if node.header is not None:
            result["header"] = {
                "title": self.substitutor.title(node.header),
                "id": node.header.id,
            }
        result["attributes"] = dict(node.header_attributes or node.document_attributes)
        result["blocks"] = self._children(node)
        if node.footnotes:
            result["footnotes"] = [
                {"index": footnote.index, "id": footnote.id, "text": footnote.text} for footnote in node.footnotes
            ]
        if node.metadata:
            result["metadata"] = node.metadata
        return result

    def visit_section(self, node: Section) -> dict[str, Any]:
        result = self._common(node, "Section")
        result.update(
            {
                "level": node.level,
                "index": node.index,
                "sectname": node.sectname,
                "special": node.special,
                "numbered": node.numbered,
            }
        )
        if node.number is not None:
            result["number"] = node.number
        result["blocks"] = self._children(node)
        return result

    def visit_block(self, node: Block) -> dict[str, Any]:
        result = self._common(node, "Block")
        if node.context is BlockContext.FLOATING_TITLE:
            result["level"] = node.level
        if node.content_model is ContentModel.COMPOUND:
            result["blocks"] = self._children(node)
        elif node.content_model is not ContentModel.EMPTY:
            result["content"] = self.substitutor.content(node)
        return result

    def visit_list(self, node: List) -> dict[str, Any]:
        result = self._common(node, "List")
        result["level"] = node.level
        items: list[Any] = []
        for item in node.items:
            if isinstance(item, DescriptionListEntry):
                items.append(
                    {
                        "terms": [term.accept(self) for term in item.terms],
                        "description": item.description.accept(self) if item.description is not None else None,
                    }
                )
            else:
                items.append(item.accept(self))
        result["items"] = items
        if node.context is BlockContext.COLIST:
            self.document.callouts.next_list()
        return result

    def visit_list_item(self, node: ListItem) -> dict[str, Any]:
        result = self._common(node, "ListItem")
        if node.marker is not None:
            result["marker"] = node.marker
        result["text"] = self.substitutor.list_item_text(node)
        if node.blocks:
            result["blocks"] = self._children(node)
        return result

    def visit_table(self, node: Table) -> dict[str, Any]:
        result = self._common(node, "Table")
        result["columns"] = [column.accept(self) for column in node.columns]
        result["rows"] = {
            section: [[cell.accept(self) for cell in row] for row in rows] for section, rows in node.rows.by_section()
        }
        return result

    def visit_column(self, node: Column) -> dict[str, Any]:
        result: dict[str, Any] = {"node_type": "Column", "attributes": dict(node.attributes)}
        if node.style is not None:
            result["style"] = node.style
        return result

    def visit_cell(self, node: Cell) -> dict[str, Any]:
        result: dict[str, Any] = {"node_type": "Cell", "colspan": node.colspan, "rowspan": node.rowspan}
        if node.style is not None:
            result["style"] = node.style
        if node.inner_document is not None:
            result["document"] = document_to_dict(node.inner_document)
        else:
            result["text"] = self.substitutor.cell_text(node)
        attributes = _serialize_attributes(node.attributes)
        if attributes:
            result["attributes"] = attributes
        if node.source_location is not None:
            result["source_location"] = _serialize_source_location(node.source_location)
        return result


def _prepare_render(document: Document) -> None:
    """Reset the state a previous pass left on the document."""
    document.catalog.footnotes.clear()
    for block in document.iter_blocks():
        block.converted_title = None
    if document.header is not None:
        document.header.converted_title = None
    document.restore_attributes()


def document_to_dict(document: Document) -> dict[str, Any]:
    """Render a parsed document to a dictionary.

    Parameters
    ----------
    document : Document
        Document returned by :func:`adoc2ast.load`

    Returns
    -------
    dict
        Nested dictionaries, one per node, with substituted text

    """
    logger.debug("Rendering document to dict")
    _prepare_render(document)
    return _RenderVisitor(document).visit_document(document)


def document_to_json(document: Document, indent: int | None = None) -> str:
    """Render a parsed document to a JSON string with a schema version.

    Parameters
    ----------
    document : Document
        Document to render
    indent : int or None, default = None
        Number of spaces for indentation (None for compact format)

    Returns
    -------
    str
        JSON text of the form ``{"schema_version": 1, "node_type": "Document", ...}``

    """
    versioned = {"schema_version": SCHEMA_VERSION, **document_to_dict(document)}
    # ensure_ascii=False keeps typographic replacements readable
    return json.dumps(versioned, indent=indent, ensure_ascii=False)
