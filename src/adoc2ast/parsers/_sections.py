#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/parsers/_sections.py
"""Section parsing, id generation and numbering.

This private module contains the part of the block parser that builds the
section tree. Sections nest by level; a title whose level skips ahead of
the expected one is still nested but reported. Content before the first
section of a document with a header (or of a book) is gathered into a
preamble, which is unwrapped again when the document turns out to have no
sections.

"""

from __future__ import annotations

import dataclasses
import logging
import re
from typing import TYPE_CHECKING, Any, Optional

from adoc2ast.ast.nodes import AbstractBlock, Block, BlockContext, ContentModel, Document, Section
from adoc2ast.exceptions import ParsingError
from adoc2ast.logging_utils import log_at
from adoc2ast.parsers._lines import (
    INVALID_SECTION_ID_CHARS_RE,
    SECTION_LEVEL_STYLE_RE,
    SectionTitle,
    is_section_title,
    match_section_title,
)
from adoc2ast.utils.text import to_int

if TYPE_CHECKING:
    from adoc2ast.reader import LineReader

__all__ = ["SectionParsingMixin", "generate_id"]

logger = logging.getLogger(__name__)

_FLOATING_TITLE_STYLE_RE = re.compile(r"^(?:float|discrete)\b")


def generate_id(title: str, document: Document) -> str:
    """Derive a section id from its title.

    The title is lowercased, markup and characters that are not valid in an
    id are removed, and runs of spaces, dots and hyphens collapse into the
    ``idseparator``. The ``idprefix`` is prepended and a numeric suffix
    (starting at 2) keeps the id unique within the document.

    Examples
    --------
    With the default ``idprefix`` and ``idseparator`` of ``_``, the title
    ``"Getting Started"`` yields ``_getting_started``.

    """
    attrs = document.document_attributes
    prefix = attrs.get("idprefix")
    if prefix is None:
        prefix = "_"
    separator = attrs.get("idseparator")
    if separator is None:
        separator = "_"
    separator = separator[:1]

    gen_id = prefix + INVALID_SECTION_ID_CHARS_RE.sub("", title.lower())
    if separator:
        squeeze_chars = " .-" if separator in ("-", ".") else f" {separator}.-"
        gen_id = re.sub(f"[{re.escape(squeeze_chars)}]+", separator, gen_id)
        if gen_id.endswith(separator):
            gen_id = gen_id[:-1]
        if not prefix and gen_id.startswith(separator):
            gen_id = gen_id[1:]
    else:
        gen_id = gen_id.replace(" ", "")

    ids = document.catalog.ids
    if gen_id not in ids:
        return gen_id
    count = 2
    while f"{gen_id}{separator}{count}" in ids:
        count += 1
    return f"{gen_id}{separator}{count}"


class SectionParsingMixin:
    """Section parsing for :class:`~adoc2ast.parsers.blocks.BlockParser`."""

    document: Document

    # -- detection ------------------------------------------------------------

    def is_next_line_section(self, reader: "LineReader", attributes: dict[Any, Any]) -> Optional[int]:
        """Return the level of the section title on the next line(s), if any.

        A ``float`` or ``discrete`` style turns a section title into a
        floating title, so no level is returned for it.
        """
        style = attributes.get(1)
        if style and _FLOATING_TITLE_STYLE_RE.match(style):
            return None
        if not reader.has_more_lines():
            return None
        lines = reader.peek_lines(2)
        if not lines:
            return None
        return is_section_title(lines[0], lines[1] if len(lines) > 1 else None)

    def is_next_line_doctitle(
        self, reader: "LineReader", attributes: dict[Any, Any], leveloffset: Optional[str]
    ) -> bool:
        level = self.is_next_line_section(reader, attributes)
        if level is None:
            return False
        if leveloffset:
            level += to_int(leveloffset)
        return level == 0

    def parse_section_title(self, reader: "LineReader") -> SectionTitle:
        """Consume a section title (one line, or two with an underline).

        Raises
        ------
        ParsingError
            If the lines do not form a section title

        """
        line1 = reader.read_line() or ""
        parsed = match_section_title(line1, reader.peek_line(direct=True))
        if parsed is None:
            raise ParsingError(
                f"Unrecognized section at {reader.cursor_at_prev_line().line_info}", parsing_stage="section"
            )
        if not parsed.atx:
            reader.advance()
        leveloffset = self.document.doc_attr("leveloffset")
        if leveloffset:
            parsed = dataclasses.replace(parsed, level=max(0, parsed.level + to_int(leveloffset)))
        return parsed

    # -- building -------------------------------------------------------------

    def next_section(
        self, reader: "LineReader", parent: AbstractBlock, attributes: dict[Any, Any]
    ) -> tuple[Optional[Section], dict[Any, Any]]:
        """Parse the next section and everything nested in it.

        On the first call for a document (``parent`` is the document and it
        has no blocks yet) the content before the first section is parsed
        into the document itself, behind a preamble when appropriate.

        Returns
        -------
        tuple
            The new section (None when the content went into the document)
            and block attributes left dangling at the end of the section,
            which carry over to the next one

        """
        document = self.document
        book = document.doctype == "book"
        preamble: Optional[Block] = None
        intro: Optional[Block] = None
        part = False
        expected_next_level: Optional[int]
        expected_next_level_alt: Optional[int] = None
        sectname = None

        if (
            parent is document
            and not document.blocks
            and (
                document.header is not None
                or attributes.pop("invalid-header", None)
                or self.is_next_line_section(reader, attributes) is None
            )
        ):
            if document.header is not None or (book and attributes.get(1) != "abstract"):
                preamble = intro = Block(context=BlockContext.PREAMBLE, content_model=ContentModel.COMPOUND)
                if book and document.doc_attr("preface-title"):
                    preamble.title = document.doc_attr("preface-title")
                document.append(preamble)
            section: AbstractBlock = document
            current_level = 0
            if document.has_doc_attr("fragment"):
                expected_next_level = -1
            elif book:
                expected_next_level, expected_next_level_alt = 1, 0
            else:
                expected_next_level = 1
        else:
            section = self.initialize_section(reader, parent, attributes)
            title = attributes.get("title")
            attributes = {"title": title} if title else {}
            current_level = section.level
            expected_next_level = current_level + 1
            if current_level == 0:
                part = book
            elif current_level == 1 and section.special:
                sectname = section.sectname
                if sectname not in ("appendix", "preface", "abstract"):
                    expected_next_level = None

        reader.skip_blank_lines()

        while reader.has_more_lines():
            self.parse_block_metadata_lines(reader, attributes)  # type: ignore[attr-defined]
            next_level = self.is_next_line_section(reader, attributes)
            if next_level is not None:
                leveloffset = document.doc_attr("leveloffset")
                if leveloffset:
                    next_level = max(0, next_level + to_int(leveloffset))
                if next_level > current_level:
                    if expected_next_level is not None:
                        if not (
                            next_level == expected_next_level
                            or next_level == expected_next_level_alt
                            or expected_next_level < 0
                        ):
                            if expected_next_level_alt is not None:
                                condition = f"expected levels {expected_next_level_alt} or {expected_next_level}"
                            else:
                                condition = f"expected level {expected_next_level}"
                            log_at(
                                logger,
                                logging.WARNING,
                                f"section title out of sequence: {condition}, got level {next_level}",
                                reader.cursor,
                            )
                    else:
                        log_at(
                            logger, logging.ERROR, f"{sectname} sections do not support nested sections", reader.cursor
                        )
                    new_section, attributes = self.next_section(reader, section, attributes)
                    if new_section is not None:
                        self.append_section(section, new_section)
                elif next_level == 0 and section is document:
                    if not book:
                        log_at(
                            logger, logging.ERROR, "level 0 sections can only be used when doctype is book", reader.cursor
                        )
                    new_section, attributes = self.next_section(reader, section, attributes)
                    if new_section is not None:
                        self.append_section(section, new_section)
                else:
                    break
            else:
                block_cursor = reader.cursor
                new_block = self.next_block(  # type: ignore[attr-defined]
                    reader, intro or section, attributes, parse_metadata=False
                )
                if new_block is not None:
                    if part:
                        intro = self._place_in_partintro(section, intro, new_block, block_cursor)
                    (intro or section).append(new_block)
                    attributes = {}

            if reader.skip_blank_lines() is None:
                break

        if part:
            if not (section.blocks and isinstance(section.blocks[-1], Section)):
                log_at(
                    logger,
                    logging.ERROR,
                    "invalid part, must have at least one section (e.g., chapter, appendix, etc.)",
                    reader.cursor,
                )
        elif preamble is not None:
            if preamble.blocks:
                if not book and len(document.blocks) == 1:
                    document.blocks.pop(0)
                    for child in preamble.blocks:
                        document.append(child)
                    preamble.blocks = []
            else:
                document.blocks.pop(0)

        return (section if section is not parent else None), dict(attributes)

    def _place_in_partintro(
        self, section: AbstractBlock, intro: Optional[Block], new_block: AbstractBlock, block_cursor: Any
    ) -> Optional[Block]:
        # content that opens a part becomes its partintro, declared or not
        if not section.blocks:
            if new_block.style != "partintro":
                if new_block.context is BlockContext.PARAGRAPH:
                    new_block.context = BlockContext.OPEN
                    new_block.style = "partintro"
                else:
                    intro = Block(context=BlockContext.OPEN, content_model=ContentModel.COMPOUND, style="partintro")
                    section.append(intro)
        elif len(section.blocks) == 1:
            first_block = section.blocks[0]
            if intro is None and first_block.content_model is ContentModel.COMPOUND:
                log_at(logger, logging.ERROR, "illegal block content outside of partintro block", block_cursor)
            elif first_block.content_model is not ContentModel.COMPOUND:
                intro = Block(context=BlockContext.OPEN, content_model=ContentModel.COMPOUND, style="partintro")
                section.blocks.pop(0)
                if first_block.style == "partintro":
                    first_block.context = BlockContext.PARAGRAPH
                    first_block.style = None
                intro.append(first_block)
                section.append(intro)
        return intro

    def initialize_section(self, reader: "LineReader", parent: AbstractBlock, attributes: dict[Any, Any]) -> Section:
        """Consume a section title and create the section it opens."""
        document = self.document
        doctype = document.doctype
        book = doctype == "book"
        cursor = reader.cursor
        style = self.parse_style_attribute(attributes, reader) if 1 in attributes else None  # type: ignore[attr-defined]
        parsed = self.parse_section_title(reader)
        level = parsed.level

        reftext = parsed.reftext
        if reftext:
            attributes["reftext"] = reftext
        else:
            reftext = attributes.get("reftext")

        special = numbered = False
        if style:
            if book and style == "abstract":
                sectname, level = "chapter", 1
            elif style.startswith("sect") and SECTION_LEVEL_STYLE_RE.match(style):
                sectname = "section"
            else:
                sectname, special = style, True
                if level == 0:
                    level = 1
                numbered = sectname == "appendix"
        elif book:
            sectname = "part" if level == 0 else ("section" if level > 1 else "chapter")
        elif doctype == "manpage" and parsed.title.lower() == "synopsis":
            sectname, special = "synopsis", True
        else:
            sectname = "section"

        if not special and level > 0 and document.has_doc_attr("sectnums"):
            numbered = True

        section = Section(level=level, title=parsed.title, sectname=sectname, special=special, numbered=numbered)
        section.parent = parent
        section.style = attributes.get("style")
        if document.options.sourcemap:
            section.source_location = self._source_location(cursor)  # type: ignore[attr-defined]

        section_id = parsed.id or attributes.get("id")
        if not section_id and document.has_doc_attr("sectids"):
            section_id = generate_id(parsed.title, document)
        if section_id:
            section.id = section_id
            if not document.register_id(section_id, reftext or parsed.title, section):
                log_at(
                    logger,
                    logging.WARNING,
                    f"id assigned to section already in use: {section_id}",
                    reader.cursor_at_line(reader.lineno - (1 if parsed.atx else 2)),
                )

        section.attributes.update(attributes)
        reader.skip_blank_lines()
        return section

    @staticmethod
    def append_section(parent: AbstractBlock, section: Section) -> Section:
        section.index = sum(1 for block in parent.blocks if isinstance(block, Section))
        parent.append(section)
        return section

    # -- numbering ------------------------------------------------------------

    def assign_section_numbers(self, node: Optional[AbstractBlock] = None) -> None:
        """Number the numbered sections of the tree in document order.

        Appendices are lettered from the ``appendix-number`` counter and get
        an ``appendix-caption`` based caption; book chapters are numbered
        from the ``chapter-number`` counter so numbering runs across parts.
        Other sections are numbered among their siblings and their number is
        prefixed with the number of the enclosing section. Sections deeper
        than ``sectnumlevels`` get a numeral but no full number.
        """
        document = self.document
        if node is None:
            node = document
        max_level = to_int(document.doc_attr("sectnumlevels") or "3")
        ordinal = 1
        for block in node.blocks:
            if not isinstance(block, Section):
                continue
            if block.numbered:
                if block.sectname == "appendix":
                    block.numeral = str(document.counter("appendix-number", "A"))
                    caption = document.doc_attr("appendix-caption")
                    block.caption = f"{caption} {block.numeral}: " if caption else f"{block.numeral}. "
                elif block.sectname == "chapter":
                    block.numeral = str(document.counter("chapter-number", "1"))
                else:
                    block.numeral = str(ordinal)
                    ordinal += 1
                if block.level <= max_level:
                    prefix = node.number if isinstance(node, Section) and node.level > 0 and node.number else ""
                    block.number = f"{prefix}{block.numeral}."
            self.assign_section_numbers(block)
