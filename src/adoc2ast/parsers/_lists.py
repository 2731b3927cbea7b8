#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/parsers/_lists.py
"""List parsing.

This private module contains the part of the block parser that reads
unordered, ordered, checklist and description lists. Each item's lines are
gathered first (its text, blocks attached by a ``+`` continuation, nested
lists and adjacent literal paragraphs), then parsed as blocks of their own
with the item as parent.

"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Optional, Union

from adoc2ast.ast.nodes import AbstractBlock, BlockContext, DescriptionListEntry, List, ListItem
from adoc2ast.constants import LIST_CONTINUATION, ORDERED_LIST_STYLES
from adoc2ast.logging_utils import log_at
from adoc2ast.parsers._lines import (
    ATTRIBUTE_ENTRY_RE,
    BLOCK_ATTRIBUTE_LINE_RE,
    BLOCK_TITLE_RE,
    CALLOUT_LIST_RE,
    DESCRIPTION_LIST_SIBLING_RES,
    INLINE_BIBLIO_ANCHOR_RE,
    LEADING_INLINE_ANCHOR_RE,
    LIST_RES,
    LITERAL_PARAGRAPH_RE,
    classify_list_line,
    is_delimited_block,
    is_sibling_list_item,
    resolve_list_marker,
    resolve_ordered_list_marker,
)
from adoc2ast.reader import LineReader

if TYPE_CHECKING:
    from adoc2ast.ast.nodes import Document

__all__ = ["ListParsingMixin", "implicit_ordered_list_style"]

logger = logging.getLogger(__name__)

# Outside of a nested list any list kind may start one; inside, only a
# description list can start a further level
_NESTABLE_LISTS = ("ulist", "olist", "dlist")
_NESTABLE_LISTS_WITHIN_NESTED = ("dlist",)

_CHECKBOXES = {"[ ] ": False, "[x] ": True, "[*] ": True}

SiblingTrait = Union[str, "re.Pattern[str]"]


def implicit_ordered_list_style(marker: str) -> str:
    """Return the numbering style implied by the first marker of an ordered list.

    Explicit markers carry their style (``b.`` is ``loweralpha``); a run of
    dots picks the style for its depth, cycling through arabic, loweralpha,
    lowerroman, upperalpha and upperroman.
    """
    style = resolve_ordered_list_marker(marker)[1]
    if style:
        return style
    depth = len(marker)
    return ORDERED_LIST_STYLES[depth - 1] if 0 < depth <= len(ORDERED_LIST_STYLES) else "arabic"


class ListParsingMixin:
    """List parsing for :class:`~adoc2ast.parsers.blocks.BlockParser`."""

    document: "Document"

    def next_item_list(
        self, reader: LineReader, list_type: str, parent: AbstractBlock, style: Optional[str] = None
    ) -> List:
        """Parse an unordered or ordered list (including checklists).

        Items whose marker differs from the first item's marker belong to a
        nested list, which is attached to the previous item; a marker already
        used by an enclosing list of the same kind ends this list.
        """
        context = BlockContext(list_type)
        list_block = List(context=context, style=style)
        list_block.parent = parent
        owner = parent.parent if isinstance(parent, ListItem) else parent
        list_block.level = owner.level + 1 if isinstance(owner, List) and owner.context is context else 1

        pattern = LIST_RES[list_type]
        while reader.has_more_lines():
            match = pattern.match(reader.peek_line() or "")
            if match is None:
                break
            marker = resolve_list_marker(list_type, match.group(1))

            this_item_level = list_block.level
            if list_block.items and marker != list_block.items[0].marker:
                this_item_level = list_block.level + 1
                ancestor: Optional[AbstractBlock] = parent
                while isinstance(ancestor, List) and ancestor.context is context:
                    if ancestor.items and ancestor.items[0].marker == marker:
                        this_item_level = ancestor.level
                        break
                    ancestor = ancestor.parent

            if not list_block.items or this_item_level == list_block.level:
                list_block.add_item(self.next_list_item(reader, list_block, match))
            elif this_item_level < list_block.level:
                break
            else:
                nested = self.next_block(reader, list_block)  # type: ignore[attr-defined]
                if nested is not None:
                    list_block.items[-1].append(nested)

            reader.skip_blank_lines()

        return list_block

    def resolve_validated_list_marker(self, reader: LineReader, list_block: List, marker: str) -> str:
        """Return the canonical marker of a new item, reporting out-of-sequence ordinals."""
        if list_block.context is BlockContext.OLIST:
            canonical, _style, expected, actual = resolve_ordered_list_marker(marker, len(list_block.items))
            if expected is not None and expected != actual:
                log_at(logger, logging.WARNING, f"list item index: expected {expected}, got {actual}", reader.cursor)
            return canonical
        return resolve_list_marker(list_block.context_name, marker)

    def next_list_item(
        self,
        reader: LineReader,
        list_block: List,
        match: re.Match[str],
        sibling_trait: Optional[SiblingTrait] = None,
    ) -> Any:
        """Parse one list item, including its attached and nested blocks.

        Returns
        -------
        ListItem or tuple
            The item; for a description list, the ``(term, description)``
            pair, where the description is None when the term has neither
            text nor blocks of its own

        """
        list_type = list_block.context_name
        list_term: Optional[ListItem] = None
        if list_type == "dlist":
            list_term = ListItem(text=match.group(1), marker=match.group(2))
            list_term.parent = list_block
            list_item = ListItem(text=match.group(3), marker=match.group(2))
            has_text = bool(match.group(3))
        else:
            text = match.group(2)
            checked: Optional[bool] = None
            bibliography = list_type == "ulist" and list_block.style == "bibliography"
            if list_type == "ulist" and not bibliography and text[:4] in _CHECKBOXES:
                checked = _CHECKBOXES[text[:4]]
                text = text[3:].lstrip()
            list_item = ListItem(text=text)
            if checked is not None:
                list_block.attributes["checklist-option"] = ""
                list_item.attributes["checkbox"] = ""
                if checked:
                    list_item.attributes["checked"] = ""
            if list_type == "olist" and not list_block.items and not list_block.style:
                list_block.style = implicit_ordered_list_style(match.group(1))
            if sibling_trait is None:
                sibling_trait = self.resolve_validated_list_marker(reader, list_block, match.group(1))
            list_item.marker = sibling_trait  # type: ignore[assignment]
            has_text = True
            if bibliography:
                anchor = INLINE_BIBLIO_ANCHOR_RE.match(text)
                if anchor:
                    self.catalog_inline_biblio_anchor(  # type: ignore[attr-defined]
                        anchor.group(1), anchor.group(2), list_item, reader
                    )
            elif text.startswith("[["):
                anchor = LEADING_INLINE_ANCHOR_RE.match(text)
                if anchor:
                    self.catalog_inline_anchor(anchor.group(1), anchor.group(2), list_item, reader.cursor)  # type: ignore[attr-defined]
        list_item.parent = list_block
        if self.document.options.sourcemap:
            list_item.source_location = self._source_location(reader.cursor)  # type: ignore[attr-defined]

        reader.advance()
        cursor = reader.cursor
        item_reader = LineReader(self.read_lines_for_list_item(reader, list_type, sibling_trait, has_text), cursor)

        if item_reader.has_more_lines():
            comment_lines = item_reader.skip_line_comments()
            subsequent_line = item_reader.peek_line()
            if subsequent_line is not None:
                if comment_lines:
                    item_reader.unshift_lines(comment_lines)
                continuation_connects_first_block = subsequent_line == ""
                content_adjacent = not continuation_connects_first_block
                if content_adjacent and list_type != "dlist":
                    has_text = False
            else:
                continuation_connects_first_block = content_adjacent = False

            # text-only parsing holds until a block is preceded by a blank line
            text_only = not has_text
            with self._nested():  # type: ignore[attr-defined]
                while item_reader.has_more_lines():
                    if text_only and item_reader.peek_line() == "":
                        text_only = False
                    block = self.next_block(item_reader, list_item, {}, text_only=text_only)  # type: ignore[attr-defined]
                    if block is not None:
                        list_item.append(block)

            list_item.fold_first(continuation_connects_first_block, content_adjacent)

        if list_type == "dlist":
            if list_item.has_text() or list_item.blocks:
                return list_term, list_item
            return list_term, None
        return list_item

    def next_description_list(self, reader: LineReader, match: re.Match[str], parent: AbstractBlock) -> List:
        """Parse a description list; consecutive terms share one description."""
        list_block = List(context=BlockContext.DLIST)
        list_block.parent = parent
        previous: Optional[DescriptionListEntry] = None
        sibling_pattern = DESCRIPTION_LIST_SIBLING_RES[match.group(2)]

        current: Optional[re.Match[str]] = match
        while True:
            if current is None:
                if not reader.has_more_lines():
                    break
                current = sibling_pattern.match(reader.peek_line() or "")
                if current is None:
                    break
            term, item = self.next_list_item(reader, list_block, current, sibling_pattern)
            if previous is not None and previous.description is None:
                term.parent = list_block
                previous.terms.append(term)
                previous.description = item
                if item is not None:
                    item.parent = list_block
            else:
                previous = DescriptionListEntry(terms=[term], description=item)
                list_block.add_item(previous)
            current = None

        return list_block

    def next_callout_list(self, reader: LineReader, parent: AbstractBlock) -> List:
        """Parse a callout list and link each item to the marks registered for it.

        Items are expected in sequence (``<.>`` takes the next number). The
        ids of the marks with the item's number are stored in its ``coids``
        attribute; the document then moves on to the next list of marks.
        """
        callouts = self.document.callouts
        list_block = List(context=BlockContext.COLIST)
        list_block.parent = parent
        next_index = 1
        autonum = 0

        while reader.has_more_lines():
            match = CALLOUT_LIST_RE.match(reader.peek_line() or "")
            if match is None:
                break
            reader.mark()
            num = match.group(1)
            if num == ".":
                autonum += 1
                num = str(autonum)
            if num != str(next_index):
                log_at(
                    logger,
                    logging.WARNING,
                    f"callout list item index: expected {next_index}, got {num}",
                    reader.cursor_at_mark(),
                )
            list_item = self.next_list_item(reader, list_block, match, "<1>")
            list_block.add_item(list_item)
            ordinal = len(list_block.items)
            coids = callouts.callout_ids(ordinal)
            if coids:
                list_item.attributes["coids"] = coids
            else:
                log_at(logger, logging.WARNING, f"no callouts refer to list item {ordinal}", reader.cursor_at_mark())
            next_index += 1
            reader.skip_blank_lines()

        callouts.next_list()
        return list_block

    def read_lines_for_list_item(
        self,
        reader: LineReader,
        list_type: str,
        sibling_trait: Optional[SiblingTrait] = None,
        has_text: bool = True,
    ) -> list[str]:
        """Collect the lines that belong to the current list item.

        Reading stops at the next sibling item, at a delimited block that is
        not attached with a ``+`` continuation, and at content after a blank
        line that is neither a nested list, an indented literal paragraph nor
        attached by a detached continuation. A description list without
        inline text keeps reading past blank lines until it finds some.

        Continuation states: ``inactive``, ``active`` once a ``+`` is seen,
        and ``frozen`` after two ``+`` lines in a row.
        """
        buffer: list[str] = []
        continuation = "inactive"
        within_nested_list = False
        detached_continuation: Optional[int] = None
        this_line: Optional[str] = None

        def is_sibling(line: str) -> bool:
            return sibling_trait is not None and is_sibling_list_item(line, list_type, sibling_trait)

        def stop_at_dlist_sibling(line: str) -> bool:
            return list_type == "dlist" and is_sibling(line)

        def nested_list_kind(line: str, kinds: tuple[str, ...]) -> Optional[str]:
            nonlocal within_nested_list, has_text
            found = classify_list_line(line, kinds)
            if found is None:
                return None
            within_nested_list = True
            if found.context == "dlist" and not found.text:
                has_text = False
            return found.context

        def read_literal_paragraph() -> list[str]:
            return reader.read_lines_until(
                predicate=stop_at_dlist_sibling,
                break_on_blank_lines=True,
                break_on_list_continuation=True,
                preserve_last_line=True,
            )

        while reader.has_more_lines():
            this_line = reader.read_line()
            if this_line is None:
                break
            if is_sibling(this_line):
                break

            prev_line = buffer[-1] if buffer else None

            if prev_line == LIST_CONTINUATION:
                if continuation == "inactive":
                    continuation = "active"
                    has_text = True
                    if not within_nested_list:
                        buffer[-1] = ""
                if this_line == LIST_CONTINUATION:
                    if continuation != "frozen":
                        continuation = "frozen"
                        buffer.append(this_line)
                    this_line = None
                    continue

            delimiter = is_delimited_block(this_line)
            if delimiter is not None:
                if continuation != "active":
                    break
                buffer.append(this_line)
                buffer.extend(reader.read_lines_until(terminator=delimiter.terminator, read_last_line=True))
                continuation = "inactive"
            elif list_type == "dlist" and continuation != "active" and BLOCK_ATTRIBUTE_LINE_RE.match(this_line):
                break
            elif continuation == "active" and this_line:
                if LITERAL_PARAGRAPH_RE.match(this_line):
                    reader.unshift_line(this_line)
                    buffer.extend(read_literal_paragraph())
                    continuation = "inactive"
                elif (
                    BLOCK_TITLE_RE.match(this_line)
                    or BLOCK_ATTRIBUTE_LINE_RE.match(this_line)
                    or ATTRIBUTE_ENTRY_RE.match(this_line)
                ):
                    buffer.append(this_line)
                else:
                    nested_list_kind(this_line, _NESTABLE_LISTS_WITHIN_NESTED if within_nested_list else _NESTABLE_LISTS)
                    buffer.append(this_line)
                    continuation = "inactive"
            elif prev_line == "":
                if not this_line:
                    reader.skip_blank_lines()
                    this_line = reader.read_line()
                    if this_line is None or is_sibling(this_line):
                        break

                if this_line == LIST_CONTINUATION:
                    detached_continuation = len(buffer)
                    buffer.append(this_line)
                elif has_text:
                    if is_sibling(this_line):
                        break
                    if nested_list_kind(this_line, _NESTABLE_LISTS):
                        buffer.append(this_line)
                    elif LITERAL_PARAGRAPH_RE.match(this_line):
                        reader.unshift_line(this_line)
                        buffer.extend(read_literal_paragraph())
                    else:
                        break
                else:
                    # a description list still looking for its text takes this line
                    if not within_nested_list:
                        buffer.pop()
                    buffer.append(this_line)
                    has_text = True
            else:
                if this_line:
                    has_text = True
                nested_list_kind(this_line, _NESTABLE_LISTS_WITHIN_NESTED if within_nested_list else _NESTABLE_LISTS)
                buffer.append(this_line)
            this_line = None

        if this_line is not None:
            reader.unshift_line(this_line)

        if detached_continuation is not None:
            del buffer[detached_continuation]

        while buffer and not buffer[-1]:
            buffer.pop()
        if buffer and buffer[-1] == LIST_CONTINUATION:
            buffer.pop()
        return buffer
