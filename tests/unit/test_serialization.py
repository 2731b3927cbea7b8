#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for rendering documents to dictionaries and JSON."""

import json

import pytest

from adoc2ast import load
from adoc2ast.ast.serialization import SCHEMA_VERSION, document_to_dict, document_to_json


@pytest.mark.unit
class TestDocumentToDict:
    """Tests for the structure of the rendered tree."""

    def test_document_shape(self) -> None:
        """Test the top level of the rendered document."""
        doc = load("= Title\n\nHello *world*")

        result = document_to_dict(doc)

        assert result["node_type"] == "Document"
        assert result["doctype"] == "article"
        assert result["header"]["title"] == "Title"
        assert result["attributes"]["doctitle"] == "Title"
        assert result["blocks"][0]["node_type"] == "Block"
        assert result["blocks"][0]["context"] == "paragraph"
        assert result["blocks"][0]["content"] == "Hello <strong>world</strong>"

    def test_section(self) -> None:
        """Test section fields and nested blocks."""
        doc = load("= Doc\n:sectnums:\n\n== First\n\ntext")

        section = document_to_dict(doc)["blocks"][0]

        assert section["node_type"] == "Section"
        assert section["title"] == "First"
        assert section["id"] == "_first"
        assert section["number"] == "1."
        assert section["blocks"][0]["content"] == "text"

    def test_verbatim_content_is_escaped(self) -> None:
        """Test that a listing only gets special character substitution."""
        doc = load("----\n<tag> & *x*\n----")

        block = document_to_dict(doc)["blocks"][0]

        assert block["content_model"] == "verbatim"
        assert block["content"] == "&lt;tag&gt; &amp; *x*"

    def test_positional_attributes_use_string_keys(self) -> None:
        """Test that attribute keys are JSON safe."""
        doc = load("[source,python]\n----\nx = 1\n----")

        attributes = document_to_dict(doc)["blocks"][0]["attributes"]

        assert attributes["1"] == "source"
        assert attributes["language"] == "python"

    def test_list_items(self) -> None:
        """Test that list item text is substituted."""
        doc = load("* plain\n* *bold*")

        ulist = document_to_dict(doc)["blocks"][0]

        assert ulist["node_type"] == "List"
        assert [item["text"] for item in ulist["items"]] == ["plain", "<strong>bold</strong>"]
        assert ulist["items"][0]["marker"] == "*"

    def test_description_list(self) -> None:
        """Test terms and descriptions of a description list."""
        doc = load("CPU:: The _brain_")

        entry = document_to_dict(doc)["blocks"][0]["items"][0]

        assert entry["terms"][0]["text"] == "CPU"
        assert entry["description"]["text"] == "The <em>brain</em>"

    def test_table(self) -> None:
        """Test columns, rows and cell text."""
        doc = load('[cols="1,1a"]\n|===\n|*x* |* item\n|===')

        table = document_to_dict(doc)["blocks"][0]

        assert len(table["columns"]) == 2
        text_cell, doc_cell = table["rows"]["body"][0]
        assert text_cell["text"] == "<strong>x</strong>"
        assert doc_cell["style"] == "asciidoc"
        assert doc_cell["document"]["blocks"][0]["context"] == "ulist"
        assert table["rows"]["head"] == []

    def test_footnotes(self) -> None:
        """Test that footnotes are collected while rendering."""
        doc = load("Text.footnote:[A note.]")

        result = document_to_dict(doc)

        assert result["footnotes"] == [{"index": 1, "id": None, "text": "A note."}]

    def test_callouts(self) -> None:
        """Test that callout marks are converted with their ids."""
        doc = load("----\nputs 1 <1>\n----\n<1> Prints one")

        blocks = document_to_dict(doc)["blocks"]

        assert '<b class="conum">(1)</b>' in blocks[0]["content"]
        assert blocks[1]["items"][0]["attributes"]["coids"] == "CO1-1"

    def test_source_locations(self) -> None:
        """Test that source locations are included when recorded."""
        doc = load("= Doc\n\nfirst\n\nsecond", sourcemap=True)

        blocks = document_to_dict(doc)["blocks"]

        assert blocks[0]["source_location"] == {"format": "asciidoc", "line": 3}
        assert blocks[1]["source_location"]["line"] == 5


@pytest.mark.unit
class TestRenderPasses:
    """Tests for attribute playback and repeated rendering."""

    def test_attribute_playback(self) -> None:
        """Test that each block sees the attribute value in effect where it appears."""
        doc = load(":version: 1\n\nv{version}\n\n:version: 2\n\nv{version}")

        blocks = document_to_dict(doc)["blocks"]

        assert [block["content"] for block in blocks] == ["v1", "v2"]
        assert doc.doc_attr("version") == "2"

    def test_playback_of_unset(self) -> None:
        """Test that an unset entry is replayed too."""
        doc = load(":name: Ada\n\nHi {name}\n\n:name!:\n\nHi {name}")

        blocks = document_to_dict(doc)["blocks"]

        assert [block["content"] for block in blocks] == ["Hi Ada", "Hi {name}"]

    def test_attribute_entries_not_reported(self) -> None:
        """Test that recorded entries do not appear among block attributes."""
        doc = load("text\n\n:flag:\n\nmore")

        block = document_to_dict(doc)["blocks"][1]

        assert "attribute_entries" not in block.get("attributes", {})

    def test_rendering_is_idempotent(self) -> None:
        """Test that rendering twice gives the same result."""
        source = (
            "= Doc\n\n== Part\n\nText.footnote:[Note.] {counter:n}\n\n"
            "----\nx <1>\n----\n<1> One\n\n:n: 10\n\nEnd {n}"
        )
        doc = load(source)

        first = document_to_dict(doc)
        second = document_to_dict(doc)

        assert first == second
        assert len(first["footnotes"]) == 1


@pytest.mark.unit
class TestDocumentToJson:
    """Tests for the JSON form."""

    def test_schema_version(self) -> None:
        """Test that the JSON carries the schema version."""
        doc = load("= Title\n\ntext")

        data = json.loads(document_to_json(doc))

        assert data["schema_version"] == SCHEMA_VERSION == 1
        assert data["node_type"] == "Document"

    def test_indent(self) -> None:
        """Test pretty printing."""
        doc = load("text")

        assert "\n  " in document_to_json(doc, indent=2)
        assert "\n" not in document_to_json(doc)

    def test_non_ascii_is_kept(self) -> None:
        """Test that typographic characters are written as is."""
        doc = load("café")

        assert "café" in document_to_json(doc)
