#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for document header parsing and document attributes."""

import pytest

from adoc2ast import AsciiDocOptions, Document, load
from adoc2ast.ast.nodes import BlockContext
from adoc2ast.parsers._header import process_authors


@pytest.mark.unit
class TestProcessAuthors:
    """Tests for splitting author lines."""

    def test_single_author_with_email(self) -> None:
        """Test the name parts and email of one author."""
        meta = process_authors("Doc Writer <doc@example.org>")

        assert meta["author"] == "Doc Writer"
        assert meta["firstname"] == "Doc"
        assert meta["lastname"] == "Writer"
        assert meta["authorinitials"] == "DW"
        assert meta["email"] == "doc@example.org"
        assert meta["authorcount"] == "1"

    def test_middle_name(self) -> None:
        """Test a three part name."""
        meta = process_authors("Jane Q Public")

        assert meta["middlename"] == "Q"
        assert meta["authorinitials"] == "JQP"

    def test_underscore_joins_name_parts(self) -> None:
        """Test that an underscore keeps a compound name together."""
        meta = process_authors("Mary_Sue Smith")

        assert meta["firstname"] == "Mary Sue"
        assert meta["author"] == "Mary Sue Smith"

    def test_multiple_authors(self) -> None:
        """Test that later authors get suffixed keys."""
        meta = process_authors("Doc Writer <doc@example.org>; Jane Q Public")

        assert meta["authorcount"] == "2"
        assert meta["authors"] == "Doc Writer, Jane Q Public"
        assert meta["author_1"] == "Doc Writer"
        assert meta["email_1"] == "doc@example.org"
        assert meta["author_2"] == "Jane Q Public"
        assert meta["middlename_2"] == "Q"

    def test_unstructured_name(self) -> None:
        """Test a name the author pattern does not recognize."""
        meta = process_authors("The   Team (Ops)")

        assert meta["author"] == "The Team (Ops)"
        assert meta["authorinitials"] == "T"


@pytest.mark.unit
class TestDocumentHeader:
    """Tests for the title, author and revision lines."""

    SOURCE = "= The Title\nDoc Writer <doc@example.org>\nv1.0, 2024-01-01: First draft\n:keywords: a, b\n\nBody."

    def test_title(self) -> None:
        """Test the header title and doctitle attribute."""
        doc = load(self.SOURCE)

        assert doc.header is not None
        assert doc.header.title == "The Title"
        assert doc.doctitle == "The Title"
        assert doc.doc_attr("doctitle") == "The Title"

    def test_author_line(self) -> None:
        """Test that the author line sets author attributes."""
        doc = load(self.SOURCE)

        assert doc.doc_attr("author") == "Doc Writer"
        assert doc.doc_attr("email") == "doc@example.org"
        assert doc.doc_attr("authorcount") == "1"

    def test_revision_line(self) -> None:
        """Test that the revision line is split into its parts."""
        doc = load(self.SOURCE)

        assert doc.doc_attr("revnumber") == "1.0"
        assert doc.doc_attr("revdate") == "2024-01-01"
        assert doc.doc_attr("revremark") == "First draft"

    def test_revision_date_only(self) -> None:
        """Test a revision line holding only a date."""
        doc = load("= T\nA Writer\n2024-02-02")

        assert doc.doc_attr("revdate") == "2024-02-02"
        assert doc.doc_attr("revnumber") is None

    def test_body_follows_header(self) -> None:
        """Test that the first block after the header is in the body."""
        doc = load(self.SOURCE)

        assert doc.blocks[0].lines == ["Body."]

    def test_no_author(self) -> None:
        """Test that a missing author line counts zero authors."""
        doc = load("= Title\n\ntext")

        assert doc.doc_attr("authorcount") == "0"
        assert doc.doc_attr("author") is None

    def test_author_attribute(self) -> None:
        """Test that an author attribute entry stands in for the author line."""
        doc = load("= Title\n:author: Jane Doe\n\ntext")

        assert doc.doc_attr("firstname") == "Jane"
        assert doc.doc_attr("lastname") == "Doe"
        assert doc.doc_attr("authorinitials") == "JD"

    def test_document_id(self) -> None:
        """Test an id assigned to the document title."""
        doc = load("[#manual]\n= Manual\n\ntext")

        assert doc.id == "manual"
        assert "manual" in doc.catalog.ids

    def test_no_header(self) -> None:
        """Test a document without a title."""
        doc = load("Just text.")

        assert doc.header is None
        assert doc.doctitle is None

    def test_doctitle_falls_back_to_first_section(self) -> None:
        """Test the document title of a headerless document with sections."""
        doc = load("== First\n\ntext")

        assert doc.doctitle == "First"

    def test_header_only(self) -> None:
        """Test stopping after the header."""
        doc = load("= Title\n:foo: bar\n\n== Section\n\ntext", parse_header_only=True)

        assert doc.doc_attr("foo") == "bar"
        assert doc.blocks == []


@pytest.mark.unit
class TestPreamble:
    """Tests for content between the header and the first section."""

    def test_preamble_wraps_leading_content(self) -> None:
        """Test that content before the first section goes into a preamble."""
        doc = load("= Title\n\nIntro.\n\n== Section\n\ntext")

        preamble = doc.blocks[0]
        assert preamble.context is BlockContext.PREAMBLE
        assert preamble.blocks[0].lines == ["Intro."]
        assert doc.sections[0].title == "Section"

    def test_preamble_unwrapped_without_sections(self) -> None:
        """Test that a document without sections has no preamble."""
        doc = load("= Title\n\nIntro.")

        assert doc.blocks[0].context is BlockContext.PARAGRAPH

    def test_empty_preamble_removed(self) -> None:
        """Test that no preamble is kept when the body starts with a section."""
        doc = load("= Title\n\n== Section")

        assert len(doc.blocks) == 1
        assert doc.blocks[0].context is BlockContext.SECTION


@pytest.mark.unit
class TestDocumentAttributes:
    """Tests for attribute defaults, entries and API overrides."""

    def test_defaults(self) -> None:
        """Test the attributes every document starts with."""
        document = Document.create()

        assert document.doc_attr("sectids") == ""
        assert document.doc_attr("idprefix") == "_"
        assert document.doc_attr("table-caption") == "Table"
        assert document.doc_attr("safe-mode-name") == "secure"
        assert document.doc_attr("doctype") == "article"

    def test_docfile_attributes(self, tmp_path) -> None:
        """Test the attributes derived from the source file."""
        source = tmp_path / "guide.adoc"
        source.write_text("text\n", encoding="utf-8")

        doc = load(source)

        assert doc.doc_attr("docname") == "guide"
        assert doc.doc_attr("docfilesuffix") == ".adoc"
        assert doc.doc_attr("docdir") == str(tmp_path.resolve())

    def test_entry_in_body(self) -> None:
        """Test that body entries update the attributes but not the header snapshot."""
        doc = load("= Title\n:stage: draft\n\n:stage: final\n\ntext")

        assert doc.doc_attr("stage") == "final"
        assert doc.header_attributes["stage"] == "draft"

    def test_unset_entry(self) -> None:
        """Test both forms of unsetting an attribute."""
        doc = load(":a: 1\n:b: 2\n:a!:\n:!b:\n\ntext")

        assert not doc.has_doc_attr("a")
        assert not doc.has_doc_attr("b")

    def test_multiline_value(self) -> None:
        """Test an entry value continued on the next line."""
        doc = load(":description: one \\\ntwo\n\ntext")

        assert doc.doc_attr("description") == "one two"

    def test_api_attribute_is_locked(self) -> None:
        """Test that an API attribute wins over a document entry."""
        doc = load(":stage: draft\n\ntext", attributes={"stage": "final"})

        assert doc.doc_attr("stage") == "final"

    def test_soft_api_attribute(self) -> None:
        """Test that a trailing at sign lets the document override the value."""
        doc = load(":stage: draft\n\ntext", attributes={"stage": "final@"})

        assert doc.doc_attr("stage") == "draft"

    def test_api_unset(self) -> None:
        """Test that an API value of None unsets and locks the attribute."""
        doc = load(":stage: draft\n\ntext", attributes={"stage": None})

        assert not doc.has_doc_attr("stage")

    def test_server_mode_locks_docdir(self) -> None:
        """Test that security-relevant attributes cannot be assigned in server mode."""
        doc = load(":max-include-depth: 1000\n\ntext", safe_mode="server")

        assert doc.doc_attr("max-include-depth") == "64"

    def test_leveloffset_is_relative(self) -> None:
        """Test that a signed leveloffset adjusts the current offset."""
        document = Document.create(AsciiDocOptions())
        document.store_attribute("leveloffset", "+2")
        document.store_attribute("leveloffset", "-1")

        assert document.doc_attr("leveloffset") == "1"

    def test_hardbreaks_alias(self) -> None:
        """Test that hardbreaks is stored as the option attribute."""
        document = Document.create()

        name, _ = document.store_attribute("hardbreaks", "")

        assert name == "hardbreaks-option"

    def test_counter_advances_letters(self) -> None:
        """Test numeric and letter counters."""
        document = Document.create()

        assert document.counter("n") == 1
        assert document.counter("n") == 2
        assert document.counter("letter", "x") == "x"
        assert document.counter("letter") == "y"
