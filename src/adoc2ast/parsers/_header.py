#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/parsers/_header.py
"""Document header parsing.

This private module contains the part of the block parser that reads the
document header: the level-0 title, the author and revision lines, and the
attribute entries that surround them. Author lines are split into the
``author``, ``firstname``, ``middlename``, ``lastname``, ``authorinitials``
and ``email`` attributes (with ``_N`` suffixes for every author after the
first), and attributes such as ``:author:`` or ``:author_2:`` given in the
header override or stand in for the author line.

"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Optional, Union

from adoc2ast.ast.nodes import Section
from adoc2ast.constants import LINE_BREAK, LINE_CONTINUATION, LINE_CONTINUATION_LEGACY
from adoc2ast.parsers._lines import (
    ATTRIBUTE_ENTRY_RE,
    AUTHOR_DELIMITER_RE,
    AUTHOR_INFO_RE,
    REVISION_INFO_RE,
    XML_TAG_RE,
)

if TYPE_CHECKING:
    from adoc2ast.ast.nodes import Document
    from adoc2ast.reader import LineReader
    from adoc2ast.substitutors import SubstitutionPipeline

__all__ = ["HeaderParsingMixin", "process_authors"]

logger = logging.getLogger(__name__)

_AUTHOR_KEYS = ("author", "authorinitials", "firstname", "middlename", "lastname", "email")
_SPACE_RUN_RE = re.compile(r" {2,}")


def _squeeze(text: str) -> str:
    return _SPACE_RUN_RE.sub(" ", text)


def process_authors(
    author_line: Union[str, list[str]], names_only: bool = False, multiple: bool = True
) -> dict[str, str]:
    """Split an author line into author attributes.

    Parameters
    ----------
    author_line : str or list of str
        The author line, or the author entries already separated
    names_only : bool, default False
        The entries hold names only (they come from an attribute value); an
        ``<email>`` part is removed rather than captured
    multiple : bool, default True
        Entries are separated by semicolons

    Returns
    -------
    dict
        Author attributes. Every author after the first gets its keys with
        an ``_N`` suffix; ``authors`` joins all author names and
        ``authorcount`` holds the number of authors.

    Examples
    --------
    >>> process_authors("Doc Writer <doc@example.org>")["email"]
    'doc@example.org'

    """
    metadata: dict[str, str] = {}
    if isinstance(author_line, list):
        entries = author_line
    elif multiple and ";" in author_line:
        entries = AUTHOR_DELIMITER_RE.split(author_line)
    else:
        entries = [author_line]

    author_idx = 0
    for entry in entries:
        if not entry:
            continue
        author_idx += 1
        if author_idx == 1:
            key_map = {key: key for key in _AUTHOR_KEYS}
        else:
            key_map = {key: f"{key}_{author_idx}" for key in _AUTHOR_KEYS}

        segments: Optional[list[Optional[str]]] = None
        if names_only:
            if "<" in entry:
                metadata[key_map["author"]] = entry.replace("_", " ")
                entry = XML_TAG_RE.sub("", entry)
            parts: list[Optional[str]] = list(entry.split(None, 2))
            if len(parts) == 3:
                parts[2] = _squeeze(parts[2] or "")
            segments = parts
        else:
            match = AUTHOR_INFO_RE.match(entry)
            if match:
                segments = list(match.groups())

        if segments:
            fname = (segments[0] or "").replace("_", " ")
            metadata[key_map["firstname"]] = author = fname
            metadata[key_map["authorinitials"]] = fname[:1]
            second = segments[1] if len(segments) > 1 else None
            third = segments[2] if len(segments) > 2 else None
            if second:
                if third:
                    mname = second.replace("_", " ")
                    lname = third.replace("_", " ")
                    metadata[key_map["middlename"]] = mname
                    metadata[key_map["lastname"]] = lname
                    author = f"{fname} {mname} {lname}"
                    metadata[key_map["authorinitials"]] = f"{fname[:1]}{mname[:1]}{lname[:1]}"
                else:
                    lname = second.replace("_", " ")
                    metadata[key_map["lastname"]] = lname
                    author = f"{fname} {lname}"
                    metadata[key_map["authorinitials"]] = f"{fname[:1]}{lname[:1]}"
            metadata.setdefault(key_map["author"], author)
            email = segments[3] if len(segments) > 3 else None
            if not names_only and email:
                metadata[key_map["email"]] = email
        else:
            fname = _squeeze(entry).strip()
            metadata[key_map["author"]] = metadata[key_map["firstname"]] = fname
            metadata[key_map["authorinitials"]] = fname[:1]

        if author_idx == 1:
            metadata["authors"] = metadata[key_map["author"]]
        else:
            if author_idx == 2:
                for key in _AUTHOR_KEYS:
                    if key in metadata:
                        metadata[f"{key}_1"] = metadata[key]
            metadata["authors"] = f"{metadata['authors']}, {metadata[key_map['author']]}"

    metadata["authorcount"] = str(author_idx)
    return metadata


class HeaderParsingMixin:
    """Header parsing for :class:`~adoc2ast.parsers.blocks.BlockParser`."""

    document: "Document"
    substitutor: "SubstitutionPipeline"

    def parse_document_header(self, reader: "LineReader") -> dict[Any, Any]:
        """Parse the document header and return the block attributes left over.

        Block metadata lines above the title are parsed first; if no level-0
        title follows they belong to the first block of the body and are
        returned. A header is only recognized at the top of the document.
        """
        document = self.document
        block_attrs: dict[Any, Any] = {}
        self.parse_block_metadata_lines(reader, block_attrs)  # type: ignore[attr-defined]
        doc_attrs = document.document_attributes

        implicit_doctitle = self.is_next_line_doctitle(  # type: ignore[attr-defined]
            reader, block_attrs, doc_attrs.get("leveloffset")
        )
        if implicit_doctitle and block_attrs.get("title"):
            return self.finalize_header(block_attrs, valid_header=False)

        assigned_doctitle = doc_attrs.get("doctitle") or None
        section_title: Optional[str] = None

        if implicit_doctitle:
            cursor = reader.cursor
            parsed = self.parse_section_title(reader)  # type: ignore[attr-defined]
            header = Section(level=0, sectname="header", title=assigned_doctitle or parsed.title)
            header.parent = document
            if document.options.sourcemap:
                header.source_location = self._source_location(cursor)  # type: ignore[attr-defined]
            document.header = header

            separator = block_attrs.get("separator")
            if separator is not None and not document.is_attribute_locked("title-separator"):
                doc_attrs["title-separator"] = separator
            doc_attrs["doctitle"] = section_title = parsed.title

            doc_id = parsed.id
            if doc_id:
                block_attrs.pop(1, None)
                block_attrs.pop("id", None)
            else:
                style = block_attrs.pop(1, None)
                if style:
                    style_attrs: dict[Any, Any] = {1: style}
                    self.parse_style_attribute(style_attrs, reader)  # type: ignore[attr-defined]
                    if "id" in style_attrs:
                        block_attrs["id"] = style_attrs["id"]
                doc_id = block_attrs.pop("id", None)
            if doc_id:
                document.id = header.id = doc_id
                document.register_id(doc_id, parsed.reftext or section_title, document)

            self.parse_header_metadata(reader)

        doctitle_attr = doc_attrs.get("doctitle")
        if doctitle_attr and doctitle_attr != section_title:
            assigned_doctitle = doctitle_attr
            if document.header is None:
                document.header = Section(level=0, sectname="header", title=doctitle_attr)
                document.header.parent = document
            else:
                document.header.title = doctitle_attr
        if assigned_doctitle:
            doc_attrs["doctitle"] = assigned_doctitle

        return self.finalize_header(block_attrs)

    def finalize_header(self, attributes: dict[Any, Any], valid_header: bool = True) -> dict[Any, Any]:
        """Snapshot the document attributes now that the header is complete."""
        attributes.pop("attribute_entries", None)
        self.document.save_attributes()
        if not valid_header:
            attributes["invalid-header"] = True
        return attributes

    def parse_header_metadata(self, reader: "LineReader") -> dict[str, str]:
        """Read the author and revision lines that follow the document title.

        Returns
        -------
        dict
            The author and revision metadata found in the header lines

        """
        document = self.document
        doc_attrs = document.document_attributes
        subs = self.substitutor

        self.process_attribute_entries(reader)
        metadata: dict[str, str] = {}
        implicit_author = implicit_authorinitials = implicit_authors = None
        author_metadata: dict[str, str] = {}

        if reader.has_more_lines() and not reader.next_line_empty():
            author_metadata = process_authors(reader.read_line() or "")
            if author_metadata:
                for key, value in author_metadata.items():
                    if key not in doc_attrs:
                        doc_attrs[key] = subs.apply_header_subs(value)
                implicit_author = doc_attrs.get("author")
                implicit_authorinitials = doc_attrs.get("authorinitials")
                implicit_authors = doc_attrs.get("authors")
                metadata = dict(author_metadata)

            self.process_attribute_entries(reader)
            rev_metadata: dict[str, str] = {}
            if reader.has_more_lines() and not reader.next_line_empty():
                rev_line = reader.read_line() or ""
                match = REVISION_INFO_RE.match(rev_line)
                if match:
                    if match.group(1):
                        rev_metadata["revnumber"] = match.group(1).rstrip()
                    component = (match.group(2) or "").strip()
                    if component:
                        if not match.group(1) and component.startswith("v"):
                            rev_metadata["revnumber"] = component[1:]
                        else:
                            rev_metadata["revdate"] = component
                    if match.group(3):
                        rev_metadata["revremark"] = match.group(3).rstrip()
                else:
                    reader.unshift_line(rev_line)
            if rev_metadata:
                for key, value in rev_metadata.items():
                    if key not in doc_attrs:
                        doc_attrs[key] = subs.apply_header_subs(value)
                metadata.update(rev_metadata)

            self.process_attribute_entries(reader)
            reader.skip_blank_lines()
        else:
            author_metadata = {}

        author_line = doc_attrs.get("author")
        authors_line = doc_attrs.get("authors")
        if author_line is not None and author_line != implicit_author:
            author_metadata = process_authors(author_line, names_only=True, multiple=False)
            if doc_attrs.get("authorinitials") != implicit_authorinitials:
                author_metadata.pop("authorinitials", None)
        elif authors_line is not None and authors_line != implicit_authors:
            author_metadata = process_authors(authors_line, names_only=True)
        else:
            author_metadata = self._process_indexed_authors(author_metadata)

        if author_metadata:
            doc_attrs.update(author_metadata)
            if "email" not in doc_attrs and "email_1" in doc_attrs:
                doc_attrs["email"] = doc_attrs["email_1"]
        elif "authorcount" not in metadata:
            doc_attrs["authorcount"] = metadata["authorcount"] = "0"
        return metadata

    def _process_indexed_authors(self, author_metadata: dict[str, str]) -> dict[str, str]:
        # author_1, author_2, ... entries that differ from the author line replace it
        doc_attrs = self.document.document_attributes
        authors: list[Optional[str]] = []
        explicit = sparse = False
        author_idx = 1
        while f"author_{author_idx}" in doc_attrs:
            override = doc_attrs[f"author_{author_idx}"]
            if override == author_metadata.get(f"author_{author_idx}"):
                authors.append(None)
                sparse = True
            else:
                authors.append(override)
                explicit = True
            author_idx += 1

        if not explicit:
            return {}
        if sparse:
            for idx, author in enumerate(authors):
                if author is None:
                    name_idx = idx + 1
                    names = [
                        author_metadata.get(f"{key}_{name_idx}") for key in ("firstname", "middlename", "lastname")
                    ]
                    authors[idx] = " ".join(name.replace(" ", "_") for name in names if name)
        return process_authors([author or "" for author in authors], names_only=True, multiple=False)

    def process_attribute_entries(self, reader: "LineReader", attributes: Optional[dict[Any, Any]] = None) -> None:
        """Consume consecutive attribute entry lines (and comments between them)."""
        reader.skip_comment_lines()
        while self.process_attribute_entry(reader, attributes):
            reader.advance()
            reader.skip_comment_lines()

    def process_attribute_entry(
        self,
        reader: "LineReader",
        attributes: Optional[dict[Any, Any]] = None,
        match: Optional[re.Match[str]] = None,
    ) -> bool:
        """Apply the attribute entry on the next line, if there is one.

        A value ending in `` \\`` (or the legacy `` +``) continues on the
        next line; the continuation is joined with a space, or with a
        newline when the value ends in a hard line break. The line holding
        the entry is left on the reader for the caller to consume.
        """
        if match is None:
            if not reader.has_more_lines():
                return False
            match = ATTRIBUTE_ENTRY_RE.match(reader.peek_line() or "")
            if match is None:
                return False

        value = match.group(2) or ""
        if value.endswith((LINE_CONTINUATION, LINE_CONTINUATION_LEGACY)):
            con = value[-2:]
            value = value[:-2].rstrip()
            while reader.advance():
                next_line = (reader.peek_line() or "").lstrip()
                if not next_line:
                    break
                keep_open = next_line.endswith(con)
                if keep_open:
                    next_line = next_line[:-2].rstrip()
                joiner = "\n" if value.endswith(LINE_BREAK) else " "
                value = f"{value}{joiner}{next_line}"
                if not keep_open:
                    break

        self.document.store_attribute(match.group(1), value, attributes)
        return True
