#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/parsers/blocks.py
"""Block parser for AsciiDoc documents.

This module contains :class:`BlockParser`, which reads lines from a
:class:`~adoc2ast.reader.LineReader` and builds the tree of sections and
blocks on a :class:`~adoc2ast.ast.nodes.Document`. It dispatches on the
first line of each block: a delimiter line opens a delimited block, a list
marker starts a list, a block macro line becomes a media, toc or extension
block and anything else is a paragraph. Metadata lines (block titles,
attribute lists, anchors and attribute entries) are gathered first and
applied to the block that follows them.

The header, section, list and table rules live in the private mixin modules
of this package; this module holds the dispatch and the shared helpers.

"""

from __future__ import annotations

import dataclasses
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from adoc2ast.ast.nodes import (
    AbstractBlock,
    Block,
    BlockContext,
    ContentModel,
    Document,
    ListItem,
    Node,
    Section,
    SourceLocation,
)
from adoc2ast.attribute_list import AttributeList
from adoc2ast.constants import (
    ADMONITION_STYLES,
    DEFAULT_STEM_TYPE,
    LAYOUT_BREAK_CHARS,
    MARKDOWN_THEMATIC_BREAK_CHARS,
    PARAGRAPH_STYLES,
    STEM_TYPE_ALIASES,
    VERBATIM_STYLES,
)
from adoc2ast.exceptions import NestingDepthError, UnsupportedBlockError
from adoc2ast.extensions import BlockProcessor
from adoc2ast.logging_utils import log_at
from adoc2ast.parsers._header import HeaderParsingMixin
from adoc2ast.parsers._lines import (
    ADMONITION_PARAGRAPH_RE,
    ANY_LIST_RE,
    ATTRIBUTE_ENTRY_RE,
    BLOCK_ANCHOR_RE,
    BLOCK_ATTRIBUTE_LINE_RE,
    BLOCK_ATTRIBUTE_LIST_RE,
    BLOCK_TITLE_RE,
    CALLOUT_LIST_RE,
    CALLOUT_SCAN_RE,
    DESCRIPTION_LIST_RE,
    GENERIC_BLOCK_MACRO_RE,
    INLINE_ANCHOR_SCAN_RE,
    LAYOUT_BREAK_RE,
    MARKDOWN_THEMATIC_BREAK_RE,
    MEDIA_BLOCK_MACRO_RE,
    ORDERED_LIST_RE,
    TOC_BLOCK_MACRO_RE,
    UNORDERED_LIST_RE,
    DelimiterMatch,
    is_delimited_block,
    is_section_title,
)
from adoc2ast.parsers._lists import ListParsingMixin
from adoc2ast.parsers._sections import SectionParsingMixin, generate_id
from adoc2ast.parsers._tables import TableParsingMixin
from adoc2ast.reader import Cursor, LineReader
from adoc2ast.utils.text import adjust_indentation, basename, to_int

logger = logging.getLogger(__name__)

_LAYOUT_BREAKS = {**LAYOUT_BREAK_CHARS, **MARKDOWN_THEMATIC_BREAK_CHARS}

_MEDIA_POSITIONAL_ATTRIBUTES: dict[str, tuple[str, ...]] = {
    "image": ("alt", "width", "height"),
    "video": ("poster", "width", "height"),
    "audio": (),
}

# Contexts whose titled blocks receive a numbered caption
_CAPTIONED_CONTEXTS = frozenset({"example", "figure", "listing", "table"})

_ADMONITION_HEADS = frozenset(style[0] for style in ADMONITION_STYLES)


def _starts_block(line: str) -> bool:
    return bool(line.startswith("[") and BLOCK_ATTRIBUTE_LINE_RE.match(line)) or is_delimited_block(line) is not None


def _starts_block_or_list(line: str) -> bool:
    return _starts_block(line) or ANY_LIST_RE.match(line) is not None


@dataclass
class _BlockStart:
    """A block recognized by its first line whose body is read by :meth:`BlockParser.build_styled_block`."""

    context: str
    cloaked_context: Optional[str] = None
    terminator: Optional[str] = None
    style: Optional[str] = None


class BlockParser(HeaderParsingMixin, SectionParsingMixin, ListParsingMixin, TableParsingMixin):
    """Parse AsciiDoc lines into the block tree of a document.

    Parameters
    ----------
    document : Document
        The document to populate; its options, attributes and catalog are
        read and updated while parsing
    depth : int, default 0
        Nesting depth the parser starts at (non-zero for the nested
        documents of ``asciidoc`` table cells)

    Notes
    -----
    A parser instance is bound to one document. Nested documents get a
    parser of their own that continues counting depth, so the
    ``max_nesting_depth`` limit covers the whole tree.

    """

    def __init__(self, document: Document, depth: int = 0):
        self.document = document
        self.substitutor = document.substitutor
        self.extensions = document.options.extensions
        self.depth = depth
        self.max_depth = document.options.max_nesting_depth

    def parse(self, reader: LineReader) -> Document:
        """Parse the header and body of the document from ``reader``.

        Returns
        -------
        Document
            The document given to the constructor, now populated

        Raises
        ------
        NestingDepthError
            If blocks nest deeper than ``max_nesting_depth``

        """
        document = self.document
        block_attrs = self.parse_document_header(reader)
        if document.options.parse_header_only and not document.nested:
            logger.debug("Stopping after the document header")
        else:
            while reader.has_more_lines():
                new_section, block_attrs = self.next_section(reader, document, block_attrs)
                if new_section is not None:
                    self.append_section(document, new_section)
        self.assign_section_numbers()
        return document

    @contextmanager
    def _nested(self) -> Iterator[None]:
        if self.max_depth and self.depth >= self.max_depth:
            raise NestingDepthError(self.depth + 1, self.max_depth)
        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1

    @staticmethod
    def _source_location(cursor: Cursor) -> SourceLocation:
        return SourceLocation(format="asciidoc", line=cursor.lineno, path=cursor.file)

    # -- blocks ---------------------------------------------------------------

    def next_block(
        self,
        reader: LineReader,
        parent: AbstractBlock,
        attributes: Optional[dict[Any, Any]] = None,
        text_only: bool = False,
        parse_metadata: bool = True,
    ) -> Optional[AbstractBlock]:
        """Parse the next block from ``reader``.

        Parameters
        ----------
        reader : LineReader
            Reader positioned at (or before blank lines preceding) the block
        parent : AbstractBlock
            Block the new block will be attached to
        attributes : dict, optional
            Block attributes gathered so far; updated in place
        text_only : bool, default False
            Only accept text (used for the lines of a list item that directly
            follow its marker); cleared when blank lines precede the block
        parse_metadata : bool, default True
            Consume block metadata lines before the block

        Returns
        -------
        AbstractBlock or None
            The block, or None when the lines produced no block (a comment,
            a dropped macro, or the end of the reader)

        """
        if attributes is None:
            attributes = {}
        skipped = reader.skip_blank_lines()
        if skipped is None:
            return None
        if text_only and skipped > 0:
            text_only = False

        if parse_metadata:
            while self.parse_block_metadata_line(reader, attributes, text_only):
                reader.shift()
                if reader.skip_blank_lines() is None:
                    attributes.clear()
                    return None

        reader.mark()
        this_line = reader.read_line()
        if this_line is None:
            return None
        style = attributes.get(1)

        delimiter = is_delimited_block(this_line)
        result: Any
        if delimiter is not None:
            result = self._resolve_delimited_block(delimiter, style, attributes, reader)
        else:
            result = self._next_line_block(reader, parent, attributes, this_line, style, text_only, skipped)
            if result is None:
                attributes.clear()
                return None

        if isinstance(result, _BlockStart):
            block = self.build_styled_block(result, reader, parent, attributes, this_line)
            if block is None:
                attributes.clear()
                return None
        else:
            block = result
        return self._finalize_block(block, reader, parent, attributes)

    def _resolve_delimited_block(
        self, delimiter: DelimiterMatch, style: Optional[str], attributes: dict[Any, Any], reader: LineReader
    ) -> _BlockStart:
        context = delimiter.context
        if style:
            if style != context:
                if style in delimiter.masq:
                    context = style
                elif "admonition" in delimiter.masq and style in ADMONITION_STYLES:
                    context = "admonition"
                elif self._find_block_extension(style, context) is not None:
                    context = style
                else:
                    log_at(
                        logger,
                        logging.WARNING,
                        f"invalid style for {context} block: {style}",
                        reader.cursor_at_mark(),
                    )
                    style = context
        else:
            style = attributes["style"] = context
        return _BlockStart(context, delimiter.context, delimiter.terminator, style)

    def _next_line_block(
        self,
        reader: LineReader,
        parent: AbstractBlock,
        attributes: dict[Any, Any],
        this_line: str,
        style: Optional[str],
        text_only: bool,
        skipped: int,
    ) -> Any:
        # Returns a block, a _BlockStart for a styled paragraph, or None to drop the line
        document = self.document
        doc_attrs = document.document_attributes

        if style and style in VERBATIM_STYLES:
            reader.unshift_line(this_line)
            return _BlockStart(style, "paragraph", None, style)

        ch0 = this_line[:1]
        indented = ch0 in (" ", "\t")
        if not text_only:
            if ch0 == " ":
                if (
                    this_line.lstrip()[:1] in MARKDOWN_THEMATIC_BREAK_CHARS
                    and MARKDOWN_THEMATIC_BREAK_RE.match(this_line)
                ):
                    return Block(context=BlockContext.THEMATIC_BREAK, content_model=ContentModel.EMPTY)
            elif not indented:
                if ch0 in _LAYOUT_BREAKS and LAYOUT_BREAK_RE.match(this_line):
                    return Block(context=BlockContext(_LAYOUT_BREAKS[ch0]), content_model=ContentModel.EMPTY)
                if this_line.endswith("]") and "::" in this_line:
                    matched, macro_block = self._next_block_macro(reader, parent, attributes, this_line, style)
                    if matched:
                        return macro_block

        if not indented and ch0 == "<" and CALLOUT_LIST_RE.match(this_line):
            reader.unshift_line(this_line)
            colist = self.next_callout_list(reader, parent)
            attributes["style"] = "arabic"
            return colist

        if UNORDERED_LIST_RE.match(this_line):
            reader.unshift_line(this_line)
            if not style and isinstance(parent, Section) and parent.sectname == "bibliography":
                attributes["style"] = style = "bibliography"
            return self.next_item_list(reader, "ulist", parent, style)

        if ORDERED_LIST_RE.match(this_line):
            reader.unshift_line(this_line)
            olist = self.next_item_list(reader, "olist", parent, style)
            if olist.style:
                attributes["style"] = olist.style
            return olist

        if "::" in this_line or ";;" in this_line:
            match = DESCRIPTION_LIST_RE.match(this_line)
            if match:
                reader.unshift_line(this_line)
                return self.next_description_list(reader, match, parent)

        if style in ("float", "discrete") and is_section_title(this_line, reader.peek_line()) is not None:
            reader.unshift_line(this_line)
            parsed = self.parse_section_title(reader)
            if parsed.reftext:
                attributes["reftext"] = parsed.reftext
            attributes.pop("title", None)
            floating = Block(
                context=BlockContext.FLOATING_TITLE,
                content_model=ContentModel.EMPTY,
                title=parsed.title,
                level=parsed.level,
            )
            floating.id = parsed.id or attributes.get("id")
            if not floating.id and document.has_doc_attr("sectids"):
                floating.id = generate_id(parsed.title, document)
            return floating

        if style and style != "normal":
            if style in PARAGRAPH_STYLES:
                reader.unshift_line(this_line)
                return _BlockStart(style, "paragraph", None, style)
            if style in ADMONITION_STYLES:
                reader.unshift_line(this_line)
                return _BlockStart("admonition", "paragraph", None, style)
            if self._find_block_extension(style, "paragraph") is not None:
                reader.unshift_line(this_line)
                return _BlockStart(style, "paragraph", None, style)
            log_at(logger, logging.WARNING, f"invalid style for paragraph: {style}", reader.cursor_at_mark())
            style = None

        list_type = parent.parent.context_name if isinstance(parent, ListItem) and parent.parent is not None else None
        content_adjacent = list_type if skipped == 0 else None
        reader.unshift_line(this_line)

        if indented and not style:
            lines = self.read_paragraph_lines(reader, content_adjacent is not None, skip_line_comments=text_only)
            lines = self._ensure_first_line(reader, lines)
            adjust_indentation(lines)
            if text_only or content_adjacent == "dlist":
                block = Block(context=BlockContext.PARAGRAPH, content_model=ContentModel.SIMPLE, lines=lines)
            else:
                block = Block(context=BlockContext.LITERAL, content_model=ContentModel.VERBATIM, lines=lines)
            if list_type is not None:
                block.set_option("listparagraph")
            return block

        lines = self.read_paragraph_lines(reader, content_adjacent is not None, skip_line_comments=True)
        lines = self._ensure_first_line(reader, lines)
        admonition = (
            ADMONITION_PARAGRAPH_RE.match(this_line)
            if not text_only and ch0 in _ADMONITION_HEADS and ":" in this_line
            else None
        )
        credit_line: Optional[str] = None

        if text_only:
            if indented and style == "normal":
                adjust_indentation(lines)
            block = Block(context=BlockContext.PARAGRAPH, content_model=ContentModel.SIMPLE, lines=lines)
        elif admonition is not None:
            lines[0] = this_line[admonition.end() :]
            attributes["style"] = admonition.group(1)
            attributes["name"] = name = admonition.group(1).lower()
            caption = attributes.pop("caption", None)
            attributes["textlabel"] = caption if caption is not None else doc_attrs.get(f"{name}-caption")
            block = Block(context=BlockContext.ADMONITION, content_model=ContentModel.SIMPLE, lines=lines)
        elif ch0 == ">" and this_line.startswith("> "):
            lines = [
                line[1:] if line == ">" else (line[2:] if line.startswith("> ") else line) for line in lines
            ]
            if lines[-1].startswith("-- "):
                credit_line = lines.pop()[3:]
                while lines and not lines[-1]:
                    lines.pop()
            attributes["style"] = "quote"
            quote_reader = LineReader(lines, reader.cursor_at_mark())
            block = self.build_block("quote", "compound", None, parent, quote_reader, attributes, bounded=True)
        elif ch0 == '"' and len(lines) > 1 and lines[-1].startswith("-- ") and lines[-2].endswith('"'):
            lines[0] = this_line[1:]
            credit_line = lines.pop()[3:]
            while lines and not lines[-1]:
                lines.pop()
            lines[-1] = lines[-1][:-1]
            attributes["style"] = "quote"
            block = Block(context=BlockContext.QUOTE, content_model=ContentModel.SIMPLE, lines=lines)
        else:
            if indented and style == "normal":
                adjust_indentation(lines)
            block = Block(context=BlockContext.PARAGRAPH, content_model=ContentModel.SIMPLE, lines=lines)

        if credit_line is not None:
            attribution, _, citetitle = self.substitutor.apply_normal_subs(credit_line).partition(", ")
            if attribution:
                attributes["attribution"] = attribution
            if citetitle:
                attributes["citetitle"] = citetitle

        if block is not None:
            self.catalog_inline_anchors("\n".join(lines), block, reader)
        return block

    @staticmethod
    def _ensure_first_line(reader: LineReader, lines: list[str]) -> list[str]:
        # a line that looks like the start of a block but was not taken as one is still content
        if not lines:
            line = reader.read_line()
            if line is not None:
                lines = [line]
        return lines

    def _next_block_macro(
        self,
        reader: LineReader,
        parent: AbstractBlock,
        attributes: dict[Any, Any],
        this_line: str,
        style: Optional[str],
    ) -> tuple[bool, Optional[AbstractBlock]]:
        """Parse a media, ``toc::[]`` or extension block macro line.

        Returns
        -------
        tuple
            Whether the line is a block macro, and the block it produced
            (None when the macro was dropped)

        """
        doc_attrs = self.document.document_attributes
        ch0 = this_line[:1]

        media = MEDIA_BLOCK_MACRO_RE.match(this_line) if ch0 == "i" or this_line.startswith(("video:", "audio:")) else None
        if media is not None:
            context, target, attrlist = media.group(1), media.group(2), media.group(3)
            block = Block(context=BlockContext(context), content_model=ContentModel.EMPTY)
            block.parent = parent
            if attrlist:
                self.substitutor.parse_attributes(
                    attrlist, _MEDIA_POSITIONAL_ATTRIBUTES[context], sub_input=True, into=attributes
                )
            # a style has no meaning for media macros
            attributes.pop("style", None)
            if "{" in target:
                target = self.substitutor.sub_attributes(target, attribute_missing="drop-line")
                if not target:
                    # kept as text under skip, dropped under any other policy
                    if doc_attrs.get("attribute-missing", "skip") == "skip":
                        paragraph = Block(context=BlockContext.PARAGRAPH, content_model=ContentModel.SIMPLE, lines=[this_line])
                        paragraph.parent = parent
                        return True, paragraph
                    logger.debug(f"Dropping {context} macro with empty target at {reader.cursor_at_mark()}")
                    attributes.clear()
                    return True, None
            if context == "image":
                self.document.catalog.register("images", target)
                if "imagesdir" in doc_attrs:
                    attributes["imagesdir"] = doc_attrs["imagesdir"]
                if "alt" not in attributes:
                    if style:
                        attributes["alt"] = style
                    else:
                        attributes["alt"] = attributes["default-alt"] = (
                            basename(target, drop_extension=True).replace("_", " ").replace("-", " ")
                        )
                scaledwidth = attributes.pop("scaledwidth", None)
                if scaledwidth:
                    attributes["scaledwidth"] = f"{scaledwidth}%" if scaledwidth[-1].isdigit() else scaledwidth
            attributes["target"] = target
            return True, block

        if ch0 == "t" and this_line.startswith("toc:"):
            toc = TOC_BLOCK_MACRO_RE.match(this_line)
            if toc is not None:
                block = Block(context=BlockContext.TOC, content_model=ContentModel.EMPTY)
                if toc.group(1):
                    self.substitutor.parse_attributes(toc.group(1), (), into=attributes)
                return True, block

        macro = GENERIC_BLOCK_MACRO_RE.match(this_line)
        if macro is None:
            return False, None
        processor = self.extensions.find_block_macro(macro.group(1)) if self.extensions is not None else None
        if processor is None:
            logger.debug(f"unknown name for block macro: {macro.group(1)}")
            return False, None

        target = macro.group(2)
        if "{" in target:
            target = self.substitutor.sub_attributes(target)
            if not target:
                return True, None
        if macro.group(3):
            self.substitutor.parse_attributes(
                macro.group(3), processor.positional_attributes, sub_input=True, into=attributes
            )
        logger.debug(f"Invoking block macro processor: {processor.name}")
        result = processor.process(parent, target, attributes)
        if result is None:
            return True, None
        if result.parent is None:
            result.parent = parent
        replacement = dict(result.attributes)
        attributes.clear()
        attributes.update(replacement)
        return True, result

    def build_styled_block(
        self,
        start: _BlockStart,
        reader: LineReader,
        parent: AbstractBlock,
        attributes: dict[Any, Any],
        this_line: str,
    ) -> Optional[AbstractBlock]:
        """Read the body of a delimited block or styled paragraph and build it.

        Raises
        ------
        UnsupportedBlockError
            If the context is neither built in nor claimed by an extension

        """
        doc_attrs = self.document.document_attributes
        context = start.context
        terminator = start.terminator

        if context in ("listing", "source"):
            language: Optional[str] = None
            if context == "source" or (
                not attributes.get(1) and (attributes.get(2) or doc_attrs.get("source-language"))
            ):
                if context != "source":
                    language = attributes.get(2) or doc_attrs.get("source-language")
                if language:
                    attributes["style"] = "source"
                    attributes["language"] = language
                    AttributeList.rekey_attributes(attributes, [None, None, "linenums"])
                else:
                    AttributeList.rekey_attributes(attributes, [None, "language", "linenums"])
                    if "language" not in attributes and "source-language" in doc_attrs:
                        attributes["language"] = doc_attrs["source-language"]
                self._apply_source_defaults(attributes)
            return self.build_block("listing", "verbatim", terminator, parent, reader, attributes)

        if context == "fenced_code":
            attributes["style"] = "source"
            language = None
            line_len = len(this_line)
            if line_len > 3:
                language = this_line[3:]
                comma_idx = language.find(",")
                if comma_idx > 0:
                    language = language[:comma_idx].strip()
                    if comma_idx < line_len - 4:
                        attributes["linenums"] = ""
                elif comma_idx == 0:
                    language = None
                    if line_len > 4:
                        attributes["linenums"] = ""
                else:
                    language = language.lstrip()
            if language:
                attributes["language"] = language
            elif "source-language" in doc_attrs:
                attributes["language"] = doc_attrs["source-language"]
            self._apply_source_defaults(attributes)
            return self.build_block("listing", "verbatim", (terminator or "```")[:3], parent, reader, attributes)

        if context == "table":
            block_cursor = reader.cursor
            lines = reader.read_lines_until(
                terminator=terminator,
                skip_line_comments=True,
                context="table",
                cursor=reader.cursor_at_mark(),
            )
            if terminator and not terminator.startswith(("|", "!")):
                attributes.setdefault("format", "csv" if terminator.startswith(",") else "dsv")
            elif terminator and terminator.startswith("!") and attributes.get("format", "psv") == "psv":
                attributes.setdefault("separator", "!")
            return self.next_table(LineReader(lines, block_cursor), parent, attributes)

        if context == "admonition":
            name = (start.style or "").lower()
            attributes["name"] = name
            caption = attributes.pop("caption", None)
            attributes["textlabel"] = caption if caption is not None else doc_attrs.get(f"{name}-caption")
            return self.build_block("admonition", "compound", terminator, parent, reader, attributes)

        if context == "comment":
            self.build_block("comment", "skip", terminator, parent, reader, attributes)
            return None

        if context in ("example", "sidebar"):
            return self.build_block(context, "compound", terminator, parent, reader, attributes)
        if context == "literal":
            return self.build_block("literal", "verbatim", terminator, parent, reader, attributes)
        if context == "pass":
            return self.build_block("pass", "raw", terminator, parent, reader, attributes)
        if context in ("stem", "latexmath", "asciimath"):
            if context == "stem":
                stem_type = attributes.get(2) or doc_attrs.get("stem") or ""
                attributes["style"] = STEM_TYPE_ALIASES.get(stem_type, DEFAULT_STEM_TYPE)
            return self.build_block("stem", "raw", terminator, parent, reader, attributes)
        if context in ("open", "abstract", "partintro"):
            return self.build_block("open", "compound", terminator, parent, reader, attributes)
        if context in ("quote", "verse"):
            AttributeList.rekey_attributes(attributes, [None, "attribution", "citetitle"])
            content_model = "compound" if context == "quote" else "verbatim"
            return self.build_block(context, content_model, terminator, parent, reader, attributes)

        processor = self._find_block_extension(context, start.cloaked_context or "paragraph")
        if processor is None:
            raise UnsupportedBlockError(context, f"Unsupported block type {context} at {reader.cursor.line_info}")
        content_model = processor.content_model
        if content_model != "skip":
            if processor.positional_attributes:
                AttributeList.rekey_attributes(attributes, [None, *processor.positional_attributes])
            attributes["cloaked-context"] = start.cloaked_context
        return self.build_block(context, content_model, terminator, parent, reader, attributes, extension=processor)

    def _apply_source_defaults(self, attributes: dict[Any, Any]) -> None:
        doc_attrs = self.document.document_attributes
        if "linenums" not in attributes and (
            "linenums-option" in attributes or "source-linenums-option" in doc_attrs
        ):
            attributes["linenums"] = ""
        if "indent" not in attributes and "source-indent" in doc_attrs:
            attributes["indent"] = doc_attrs["source-indent"]

    def build_block(
        self,
        context: str,
        content_model: str,
        terminator: Optional[str],
        parent: AbstractBlock,
        reader: LineReader,
        attributes: dict[Any, Any],
        extension: Optional[BlockProcessor] = None,
        bounded: bool = False,
    ) -> Optional[AbstractBlock]:
        """Read the body of a block and create it.

        Parameters
        ----------
        context : str
            Block context (or the extension name)
        content_model : str
            ``compound``, ``simple``, ``verbatim``, ``raw``, ``empty`` or
            ``skip`` (read and discard)
        terminator : str or None
            Closing delimiter line; None reads a paragraph
        parent : AbstractBlock
            Parent of the new block
        reader : LineReader
            Source of the body lines
        attributes : dict
            Block attributes
        extension : BlockProcessor, optional
            Processor that creates the block instead
        bounded : bool, default False
            ``reader`` holds exactly the body of the block

        Returns
        -------
        AbstractBlock or None
            The block; None when the body is skipped or the extension
            declined to produce one

        """
        skip_processing = content_model == "skip"
        parse_as = "simple" if content_model in ("skip", "raw") else content_model
        lines: Optional[list[str]] = None
        block_reader: Optional[LineReader] = None

        if bounded:
            block_reader = reader
        elif terminator is None:
            if parse_as == "verbatim":
                lines = reader.read_lines_until(break_on_blank_lines=True, break_on_list_continuation=True)
            else:
                if content_model == "compound":
                    content_model = "simple"
                lines = self.read_paragraph_lines(
                    reader, False, skip_line_comments=True, skip_processing=skip_processing
                )
        elif parse_as != "compound":
            lines = reader.read_lines_until(
                terminator=terminator,
                skip_processing=skip_processing,
                context=context,
                cursor=reader.cursor_at_mark(),
            )
        else:
            block_cursor = reader.cursor
            block_reader = LineReader(
                reader.read_lines_until(
                    terminator=terminator,
                    skip_processing=skip_processing,
                    context=context,
                    cursor=reader.cursor_at_mark(),
                ),
                block_cursor,
            )

        if content_model == "verbatim" and lines is not None:
            tab_size = to_int(attributes.get("tabsize") or self.document.doc_attr("tabsize") or "0")
            indent = attributes.get("indent")
            if indent is not None:
                adjust_indentation(lines, to_int(indent), tab_size)
            elif tab_size > 0:
                adjust_indentation(lines, -1, tab_size)
        elif content_model == "skip":
            return None

        block: Optional[AbstractBlock]
        if extension is not None:
            attributes.pop("style", None)
            logger.debug(f"Invoking block processor: {extension.name}")
            block = extension.process(parent, block_reader or LineReader(lines or []), dict(attributes))
            if block is None or block is parent:
                return None
            if block.parent is None:
                block.parent = parent
            replacement = dict(block.attributes)
            attributes.clear()
            attributes.update(replacement)
            # a processor may hand back compound content as lines
            if block.content_model is ContentModel.COMPOUND and isinstance(block, Block) and block.lines:
                content_model = "compound"
                block_reader = LineReader(block.lines)
                block.lines = []
        else:
            block = Block(
                context=BlockContext(context), content_model=ContentModel(content_model), lines=lines or []
            )
            block.parent = parent

        if content_model == "compound" and block_reader is not None:
            with self._nested():
                self.parse_blocks(block_reader, block)
        return block

    def parse_blocks(self, reader: LineReader, parent: AbstractBlock) -> None:
        """Parse blocks from ``reader`` until it is exhausted, appending them to ``parent``."""
        while reader.has_more_lines():
            block = self.next_block(reader, parent)
            if block is not None:
                parent.append(block)

    def _finalize_block(
        self, block: AbstractBlock, reader: LineReader, parent: AbstractBlock, attributes: dict[Any, Any]
    ) -> AbstractBlock:
        document = self.document
        if block.parent is None:
            block.parent = parent
        if document.options.sourcemap:
            block.source_location = self._source_location(reader.cursor_at_mark())

        block_title: Optional[str] = None
        if "title" in attributes:
            block.title = block_title = attributes.pop("title")
            caption_context = "figure" if block.context is BlockContext.IMAGE else None
            self.assign_caption(block, attributes.pop("caption", None), caption_context)

        block.style = attributes.get("style")
        block_id = block.id or attributes.get("id")
        if block_id:
            block.id = block_id
            # resolve attribute references in the title while they are in scope
            if block.title and (block_title is None or "{" in block_title):
                self.substitutor.title(block)
            if not document.register_id(block_id, attributes.get("reftext") or block.title, block):
                log_at(
                    logger,
                    logging.WARNING,
                    f"id assigned to block already in use: {block_id}",
                    reader.cursor_at_mark(),
                )

        if attributes:
            block.attributes.update(attributes)
        self.substitutor.lock_in_subs(block)
        if "callouts" in block.subs and not self.catalog_callouts("\n".join(getattr(block, "lines", []))):
            block.subs.remove("callouts")
        return block

    def assign_caption(
        self, block: AbstractBlock, value: Optional[str] = None, caption_context: Optional[str] = None
    ) -> None:
        """Give a titled block its caption.

        An explicit ``caption`` attribute wins. Otherwise examples, figures,
        listings and tables whose ``<context>-caption`` attribute is set get
        ``"<caption> <n>. "``, numbered by the ``<context>-number`` counter.
        """
        if block.caption is not None or not block.title:
            return
        if value is None:
            value = self.document.doc_attr("caption")
        if value is not None:
            block.caption = value
            return
        context = caption_context or block.context_name
        if context not in _CAPTIONED_CONTEXTS:
            return
        prefix = self.document.doc_attr(f"{context}-caption")
        if prefix:
            block.numeral = str(self.document.counter(f"{context}-number"))
            block.caption = f"{prefix} {block.numeral}. "

    def _find_block_extension(self, name: Optional[str], context: str) -> Optional[BlockProcessor]:
        if self.extensions is None:
            return None
        return self.extensions.find_block(name, context)

    @staticmethod
    def read_paragraph_lines(
        reader: LineReader, break_at_list: bool, skip_line_comments: bool = False, skip_processing: bool = False
    ) -> list[str]:
        """Read the lines of a paragraph.

        A paragraph ends at a blank line, a list continuation, a block
        attribute line or a delimiter line, and, when ``break_at_list`` is
        set, at a list item.
        """
        return reader.read_lines_until(
            predicate=_starts_block_or_list if break_at_list else _starts_block,
            break_on_blank_lines=True,
            break_on_list_continuation=True,
            preserve_last_line=True,
            skip_line_comments=skip_line_comments,
            skip_processing=skip_processing,
        )

    # -- metadata -------------------------------------------------------------

    def parse_block_metadata_lines(
        self, reader: LineReader, attributes: Optional[dict[Any, Any]] = None, text_only: bool = False
    ) -> dict[Any, Any]:
        """Consume consecutive metadata lines, collecting them into ``attributes``."""
        if attributes is None:
            attributes = {}
        while self.parse_block_metadata_line(reader, attributes, text_only):
            reader.shift()
            if reader.skip_blank_lines() is None:
                break
        return attributes

    def parse_block_metadata_line(
        self, reader: LineReader, attributes: dict[Any, Any], text_only: bool = False
    ) -> bool:
        """Apply the metadata line at the reader position, if it is one.

        Recognized are block anchors (``[[id,reftext]]``), attribute lists
        (``[style#id.role%option,...]``), block titles (``.Title``),
        attribute entries (``:name: value``) and comments. A comment block is
        consumed here except for its closing delimiter. In text-only mode
        only attribute lists, anchors and line comments count.

        Returns
        -------
        bool
            True when the line was metadata; the caller discards it

        """
        next_line = reader.peek_line()
        if not next_line:
            return False
        if text_only:
            if not next_line.startswith(("[", "/")):
                return False
            normal = False
        else:
            if not next_line.startswith(("[", ".", "/", ":")):
                return False
            normal = True

        if next_line.startswith("["):
            if next_line.startswith("[["):
                if next_line.endswith("]]"):
                    anchor = BLOCK_ANCHOR_RE.match(next_line)
                    if anchor is not None:
                        if anchor.group(1):
                            attributes["id"] = anchor.group(1)
                        reftext = anchor.group(2)
                        if reftext:
                            attributes["reftext"] = (
                                self.substitutor.sub_attributes(reftext) if "{" in reftext else reftext
                            )
                        return True
            elif next_line.endswith("]"):
                attrlist = BLOCK_ATTRIBUTE_LIST_RE.match(next_line)
                if attrlist is not None:
                    current_style = attributes.get(1)
                    parsed = self.substitutor.parse_attributes(
                        attrlist.group(1), (), sub_input=True, sub_result=True, into=attributes
                    )
                    if parsed.get(1) is not None:
                        attributes[1] = self.parse_style_attribute(attributes, reader) or current_style
                    return True
        elif normal and next_line.startswith("."):
            title = BLOCK_TITLE_RE.match(next_line)
            if title is not None:
                attributes["title"] = title.group(1)
                return True
        elif not normal or next_line.startswith("/"):
            if next_line.startswith("//"):
                if next_line == "//":
                    return True
                if normal and next_line == "/" * len(next_line):
                    if len(next_line) != 3:
                        reader.read_lines_until(
                            terminator=next_line,
                            skip_first_line=True,
                            preserve_last_line=True,
                            skip_processing=True,
                            context="comment",
                        )
                        return True
                elif not next_line.startswith("///"):
                    return True
        elif normal and next_line.startswith(":"):
            entry = ATTRIBUTE_ENTRY_RE.match(next_line)
            if entry is not None:
                self.process_attribute_entry(reader, attributes, entry)
                return True
        return False

    def parse_style_attribute(
        self, attributes: dict[Any, Any], reader: Optional[LineReader] = None
    ) -> Optional[str]:
        """Expand the shorthand in the first positional attribute.

        ``quote#intro.lead%collapsible`` sets the style ``quote``, the id
        ``intro``, adds the role ``lead`` to any existing role and sets the
        ``collapsible-option`` flag.

        Returns
        -------
        str or None
            The style without its shorthand

        """
        raw_style = attributes.get(1)
        if not raw_style:
            return None
        if " " in raw_style:
            attributes["style"] = raw_style
            return raw_style

        name: Optional[str] = None
        accum = ""
        parsed: dict[str, Any] = {}

        def flush() -> None:
            if name is None:
                if accum:
                    parsed["style"] = accum
                return
            cursor = reader.cursor_at_prev_line() if reader is not None else None
            if not accum:
                log_at(logger, logging.WARNING, f"invalid empty {name} detected in style attribute", cursor)
            elif name == "id":
                if "id" in parsed:
                    log_at(logger, logging.WARNING, "multiple ids detected in style attribute", cursor)
                parsed["id"] = accum
            else:
                parsed.setdefault(name, []).append(accum)

        for char in raw_style:
            if char in (".", "#", "%"):
                flush()
                accum = ""
                name = {".": "role", "#": "id", "%": "option"}[char]
            else:
                accum += char

        if name is None:
            attributes["style"] = raw_style
            return raw_style

        flush()
        parsed_style = parsed.get("style")
        if parsed_style:
            attributes["style"] = parsed_style
        if "id" in parsed:
            attributes["id"] = parsed["id"]
        if "role" in parsed:
            roles = " ".join(parsed["role"])
            existing = attributes.get("role")
            attributes["role"] = f"{existing} {roles}" if existing else roles
        for option in parsed.get("option", ()):
            attributes[f"{option}-option"] = ""
        return parsed_style

    # -- references -----------------------------------------------------------

    def catalog_callouts(self, text: str) -> bool:
        """Register the callout marks in verbatim text; return True if any (even escaped) are found."""
        found = False
        if "<" not in text:
            return found
        autonum = 0
        for match in CALLOUT_SCAN_RE.finditer(text):
            if not match.group(0).startswith("\\"):
                if match.group(2) == ".":
                    autonum += 1
                    self.document.callouts.register(autonum)
                else:
                    self.document.callouts.register(match.group(2))
            found = True
        return found

    def catalog_inline_anchors(self, text: str, block: AbstractBlock, reader: LineReader) -> None:
        """Register the ``[[id]]`` and ``anchor:id[]`` anchors found in paragraph text."""
        if "[[" not in text and "or:" not in text:
            return
        for match in INLINE_ANCHOR_SCAN_RE.finditer(text):
            if match.group(1):
                anchor_id, reftext = match.group(1), match.group(2)
            else:
                anchor_id, reftext = match.group(3), match.group(4)
                if reftext and "]" in reftext:
                    reftext = reftext.replace("\\]", "]")
            if reftext and "{" in reftext:
                reftext = self.substitutor.sub_attributes(reftext)
                if not reftext:
                    continue
            if not self.document.register_id(anchor_id, reftext, block):
                cursor = reader.cursor_at_mark()
                offset = text.count("\n", 0, match.start()) + (1 if match.group(0).startswith("\n") else 0)
                if offset:
                    cursor = dataclasses.replace(cursor, lineno=cursor.lineno + offset)
                log_at(logger, logging.WARNING, f"id assigned to anchor already in use: {anchor_id}", cursor)

    def catalog_inline_anchor(
        self, anchor_id: str, reftext: Optional[str], node: Node, cursor: Optional[Cursor] = None
    ) -> None:
        if reftext and "{" in reftext:
            reftext = self.substitutor.sub_attributes(reftext)
        if not self.document.register_id(anchor_id, reftext, node):
            log_at(logger, logging.WARNING, f"id assigned to anchor already in use: {anchor_id}", cursor)

    def catalog_inline_biblio_anchor(
        self, anchor_id: str, reftext: Optional[str], node: Node, reader: LineReader
    ) -> None:
        if not self.document.register_id(anchor_id, f"[{reftext}]" if reftext else None, node):
            log_at(
                logger,
                logging.WARNING,
                f"id assigned to bibliography anchor already in use: {anchor_id}",
                reader.cursor,
            )
