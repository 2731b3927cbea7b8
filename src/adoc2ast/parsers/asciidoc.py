#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/parsers/asciidoc.py
"""AsciiDoc to AST parser.

This module provides the parser front door. It loads the input, sets up a
:class:`~adoc2ast.ast.nodes.Document` and a preprocessing reader, and hands
both to :class:`~adoc2ast.parsers.blocks.BlockParser`, which does the actual
work.

"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional

from adoc2ast.ast.nodes import Document
from adoc2ast.exceptions import Adoc2AstError, ParsingError
from adoc2ast.options.asciidoc import AsciiDocOptions
from adoc2ast.parsers.base import BaseParser, ParserInput
from adoc2ast.parsers.blocks import BlockParser
from adoc2ast.preprocessor import PreprocessingReader
from adoc2ast.progress import ProgressCallback
from adoc2ast.reader import Cursor
from adoc2ast.utils.metadata import DocumentMetadata

logger = logging.getLogger(__name__)

# Attributes reported in named metadata fields rather than in ``custom``
_STANDARD_FIELDS = frozenset(
    {
        "doctitle",
        "author",
        "email",
        "description",
        "keywords",
        "lang",
        "revnumber",
        "revdate",
        "revremark",
        "doctype",
        "docfile",
        "authors",
        "docdir",
        "docname",
        "docfilesuffix",
    }
)


class AsciiDocParser(BaseParser):
    r"""Convert AsciiDoc to an AST.

    The parser runs in two passes over a single reader: the preprocessor
    resolves ``include::``, ``ifdef::``, ``ifndef::`` and ``ifeval::``
    directives lazily as lines are requested, and the block parser builds
    the section and block tree from the lines it receives. Inline content is
    not converted while parsing; block text keeps its source lines and the
    substitutions locked in for it.

    Supported Features
    ------------------
    - Document header: title, author and revision lines, attribute entries
    - Sections (``==`` and ``##`` forms, two-line setext titles), discrete
      headings, section numbering and automatic ids
    - Paragraphs, literal paragraphs, admonition paragraphs, markdown-style
      blockquotes and fenced code
    - Delimited blocks: listing, literal, example, sidebar, quote, verse,
      open, passthrough, stem, comment
    - Unordered, ordered, description, check and callout lists
    - Tables in psv, csv and dsv formats, with column and cell specs and
      nested AsciiDoc cells
    - Block images, video, audio, ``toc::[]`` and registered block macros

    Parameters
    ----------
    options : AsciiDocOptions or None, default = None
        Parser configuration options
    progress_callback : ProgressCallback or None, default = None
        Optional callback for progress updates

    Examples
    --------
    Basic parsing:

        >>> parser = AsciiDocParser()
        >>> doc = parser.parse("= Title\n\n== Section\n\nThis is *bold*.")
        >>> doc.sections[0].title
        'Section'

    With options:

        >>> options = AsciiDocOptions(safe_mode="unsafe", attributes={"env": "test"})
        >>> doc = AsciiDocParser(options).parse(Path("guide.adoc"))

    """

    def __init__(self, options: AsciiDocOptions | None = None, progress_callback: Optional[ProgressCallback] = None):
        """Initialize the AsciiDoc parser."""
        BaseParser._validate_options_type(options, AsciiDocOptions, "asciidoc")
        options = options or AsciiDocOptions()
        super().__init__(options, progress_callback)
        self.options: AsciiDocOptions = options

    def parse(self, input_data: ParserInput) -> Document:
        """Parse AsciiDoc input into an AST Document.

        Parameters
        ----------
        input_data : str, Path, IO, bytes or list of str
            AsciiDoc input to parse. Can be:
            - File path (Path)
            - File-like object in binary or text mode
            - Raw AsciiDoc bytes
            - AsciiDoc string
            - List of lines

        Returns
        -------
        Document
            AST document node

        Raises
        ------
        ParsingError
            If parsing fails
        IncludeSecurityError
            If an include escapes the base directory under the server safe mode

        """
        content, source_path = self._load_text_content(input_data)

        self._emit_progress("started", "Parsing AsciiDoc", current=0, total=100)

        docfile: Optional[str] = None
        base_dir = self.options.base_dir
        if source_path is not None:
            docfile = str(source_path.resolve())
            if base_dir is None:
                base_dir = str(source_path.resolve().parent)
        if base_dir is None:
            base_dir = os.getcwd()
        else:
            base_dir = str(Path(base_dir).resolve())

        document = Document.create(self.options, docfile=docfile, base_dir=base_dir)
        cursor = Cursor(file=docfile, dir=base_dir, path=source_path.name if source_path is not None else None)
        reader = PreprocessingReader(document, content, cursor, base_dir=base_dir)

        try:
            BlockParser(document).parse(reader)
        except Adoc2AstError:
            self._emit_progress("error", "Parsing failed", current=0, total=100)
            raise
        except (RecursionError, ValueError) as e:
            self._emit_progress("error", "Parsing failed", current=0, total=100)
            raise ParsingError(
                f"Failed to parse AsciiDoc at {reader.line_info}: {e}", parsing_stage="block_parsing", original_error=e
            ) from e

        self._emit_progress(
            "item_done",
            "Block parsing complete",
            current=80,
            total=100,
            item_type="blocks",
            sections=len(document.sections),
        )

        if self.options.extract_metadata:
            document.metadata.update(self.extract_metadata(document).to_dict())

        self._emit_progress("finished", "Parsing complete", current=100, total=100)
        return document

    def extract_metadata(self, document: Any) -> DocumentMetadata:
        """Extract metadata from the header of a parsed AsciiDoc document.

        Parameters
        ----------
        document : Document
            Document returned by :meth:`parse`

        Returns
        -------
        DocumentMetadata
            Extracted metadata

        """
        metadata = DocumentMetadata()
        if not isinstance(document, Document):
            return metadata

        attrs = document.header_attributes or document.document_attributes
        metadata.title = document.doctitle
        metadata.author = attrs.get("author")
        metadata.email = attrs.get("email")
        metadata.subject = attrs.get("description")
        if attrs.get("keywords"):
            metadata.keywords = [k.strip() for k in attrs["keywords"].split(",") if k.strip()]
        metadata.language = attrs.get("lang")
        metadata.version = attrs.get("revnumber")
        metadata.revision_date = attrs.get("revdate")
        metadata.revision_remark = attrs.get("revremark")
        metadata.doctype = attrs.get("doctype")
        metadata.source_path = attrs.get("docfile")

        authorcount = int(attrs.get("authorcount") or 0)
        if authorcount > 1:
            metadata.authors = [attrs[f"author_{i}"] for i in range(1, authorcount + 1) if f"author_{i}" in attrs]
        elif metadata.author:
            metadata.authors = [metadata.author]

        # Only attributes the document itself defined; defaults and intrinsics are left out
        defaults = Document.create(document.options).document_attributes
        for key, value in attrs.items():
            if key in _STANDARD_FIELDS or key in defaults:
                continue
            metadata.custom[key] = value

        return metadata
