#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for table parsing."""

import pytest

from adoc2ast import load
from adoc2ast.ast.nodes import BlockContext, Table
from adoc2ast.parsers._tables import parse_cellspec, parse_colspecs


def _texts(rows) -> list[list[str]]:
    return [[cell.text for cell in row] for row in rows]


@pytest.mark.unit
class TestParseColspecs:
    """Tests for the cols attribute."""

    def test_column_count(self) -> None:
        """Test that a bare number gives equal columns."""
        assert parse_colspecs("3") == [{"width": 1}, {"width": 1}, {"width": 1}]

    def test_repeat_and_widths(self) -> None:
        """Test relative widths with a multiplier."""
        assert [spec["width"] for spec in parse_colspecs("1,2*3")] == [1, 3, 3]

    def test_alignment(self) -> None:
        """Test horizontal and vertical alignment marks."""
        left, center, bottom = parse_colspecs("<1,^1,^.>1")

        assert left["halign"] == "left"
        assert center["halign"] == "center"
        assert bottom["valign"] == "bottom"

    def test_styles(self) -> None:
        """Test style letters."""
        specs = parse_colspecs("1h,2a,m")

        assert [spec["style"] for spec in specs] == ["header", "asciidoc", "monospaced"]
        assert specs[2]["width"] == 1

    def test_autowidth(self) -> None:
        """Test the automatic width marker."""
        assert parse_colspecs("~,1") == [{"width": 1, "autowidth-option": ""}, {"width": 1}]

    def test_spaces_and_empty_records(self) -> None:
        """Test that spaces are ignored and empty records count as columns."""
        assert parse_colspecs(" 2 , ,1 ") == [{"width": 2}, {"width": 1}, {"width": 1}]


@pytest.mark.unit
class TestParseCellspec:
    """Tests for cell specs in front of a separator."""

    def test_colspan_at_start(self) -> None:
        """Test a column span at the start of a line."""
        assert parse_cellspec("2+|text", "start", "|") == ({"colspan": 2}, "text")

    def test_rowspan_alignment_and_style(self) -> None:
        """Test a spec combining a row span, alignment and style."""
        spec, rest = parse_cellspec(".3+^.^s|x", "start", "|")

        assert spec == {"rowspan": 3, "halign": "center", "valign": "middle", "style": "strong"}
        assert rest == "x"

    def test_no_spec_at_start(self) -> None:
        """Test a line that does not open with a spec."""
        assert parse_cellspec("just text", "start", "|") == (None, "just text")

    def test_repeat_at_end(self) -> None:
        """Test a repeat count in front of the next separator."""
        assert parse_cellspec("a 3*", "end") == ({"repeatcol": 3}, "a")

    def test_plain_text_at_end(self) -> None:
        """Test text without a trailing spec."""
        assert parse_cellspec("plain") == ({}, "plain")


@pytest.mark.unit
class TestTableStructure:
    """Tests for rows, columns and headers."""

    def test_implicit_column_count(self) -> None:
        """Test that the first line sets the number of columns."""
        doc = load("|===\n|a |b\n|c |d\n|===")

        table = doc.blocks[0]
        assert isinstance(table, Table)
        assert table.context is BlockContext.TABLE
        assert len(table.columns) == 2
        assert _texts(table.rows.body) == [["a", "b"], ["c", "d"]]
        assert table.rows.head == []

    def test_implicit_header(self) -> None:
        """Test that a first line followed by a blank line is the header."""
        doc = load("|===\n|Name |Age\n\n|Bob |42\n|===")

        table = doc.blocks[0]
        assert table.has_header_option
        assert _texts(table.rows.head) == [["Name", "Age"]]
        assert _texts(table.rows.body) == [["Bob", "42"]]

    def test_noheader_option(self) -> None:
        """Test that the noheader option suppresses the implicit header."""
        doc = load("[%noheader]\n|===\n|Name |Age\n\n|Bob |42\n|===")

        assert doc.blocks[0].rows.head == []
        assert len(doc.blocks[0].rows.body) == 2

    def test_header_and_footer_options(self) -> None:
        """Test explicit header and footer rows."""
        doc = load("[%header%footer]\n|===\n|h1 |h2\n|b1 |b2\n|f1 |f2\n|===")

        table = doc.blocks[0]
        assert _texts(table.rows.head) == [["h1", "h2"]]
        assert _texts(table.rows.body) == [["b1", "b2"]]
        assert _texts(table.rows.foot) == [["f1", "f2"]]
        assert table.attributes["rowcount"] == 3

    def test_cells_on_separate_lines(self) -> None:
        """Test one cell per line with an explicit column count."""
        doc = load('[cols="1,1"]\n|===\n|a\n|b\n|c\n|d\n|===')

        assert _texts(doc.blocks[0].rows.body) == [["a", "b"], ["c", "d"]]

    def test_multiline_cell(self) -> None:
        """Test that lines without a separator continue the open cell."""
        doc = load("[cols=2]\n|===\n|first\nsecond |other\n|===")

        assert _texts(doc.blocks[0].rows.body) == [["first\nsecond", "other"]]

    def test_escaped_separator(self) -> None:
        """Test that a backslash keeps a separator in the cell text."""
        doc = load("|===\n|a \\| b |c\n|===")

        assert _texts(doc.blocks[0].rows.body) == [["a | b", "c"]]

    def test_column_widths(self) -> None:
        """Test relative widths converted to percentages."""
        doc = load('[cols="1,3"]\n|===\n|a |b\n|===')

        assert [column.attributes["colpcwidth"] for column in doc.blocks[0].columns] == [25, 75]

    def test_equal_widths_add_up(self) -> None:
        """Test that the last column absorbs rounding."""
        doc = load("|===\n|a |b |c\n|===")

        widths = [column.attributes["colpcwidth"] for column in doc.blocks[0].columns]
        assert widths[:2] == [pytest.approx(33.3333), pytest.approx(33.3333)]
        assert widths[2] == pytest.approx(33.3334)
        assert sum(widths) == pytest.approx(100)

    def test_column_style_applies_to_cells(self) -> None:
        """Test that cells take their column's style."""
        doc = load('[cols="1m,1"]\n|===\n|code |text\n|===')

        first, second = doc.blocks[0].rows.body[0]
        assert first.style == "monospaced"
        assert second.style is None

    def test_table_caption(self) -> None:
        """Test the numbered table caption."""
        doc = load(".Results\n|===\n|a\n|===")

        assert doc.blocks[0].title == "Results"
        assert doc.blocks[0].caption == "Table 1. "


@pytest.mark.unit
class TestTableSpans:
    """Tests for column and row spans."""

    def test_rowspan_fills_next_row(self) -> None:
        """Test that a cell spanning two rows counts toward the second row."""
        doc = load("[cols=3]\n|===\n.2+|A |B |C\n|D |E\n|===")

        table = doc.blocks[0]
        assert _texts(table.rows.body) == [["A", "B", "C"], ["D", "E"]]
        assert table.rows.body[0][0].rowspan == 2

    def test_colspan(self) -> None:
        """Test a cell spanning two columns."""
        doc = load("[cols=3]\n|===\n2+|wide |narrow\n|a |b |c\n|===")

        rows = doc.blocks[0].rows.body
        assert rows[0][0].colspan == 2
        assert _texts(rows) == [["wide", "narrow"], ["a", "b", "c"]]

    def test_repeated_cell(self) -> None:
        """Test a cell duplicated by a repeat spec."""
        doc = load("[cols=3]\n|===\n3*|x\n|===")

        assert _texts(doc.blocks[0].rows.body) == [["x", "x", "x"]]

    def test_colspan_past_last_column_warns(self, warnings_log) -> None:
        """Test that a row spanning more columns than declared is reported."""
        load("[cols=2]\n|===\n|a 2+|b\n|===")

        assert "table row spans past the last column" in warnings_log.text


@pytest.mark.unit
class TestTableFormats:
    """Tests for the csv and dsv formats and table errors."""

    def test_csv_block(self) -> None:
        """Test the comma delimited block."""
        doc = load(",===\nName,Age\nBob,42\n,===")

        table = doc.blocks[0]
        assert table.attributes["format"] == "csv"
        assert _texts(table.rows.body) == [["Name", "Age"], ["Bob", "42"]]

    def test_csv_quoted_values(self) -> None:
        """Test a quoted value holding the separator and a doubled quote."""
        doc = load('[format=csv]\n|===\n"Smith, John","say ""hi"""\n|===')

        assert _texts(doc.blocks[0].rows.body) == [["Smith, John", 'say "hi"']]

    def test_dsv_block(self) -> None:
        """Test the colon delimited block."""
        doc = load(":===\nroot:x:0\n:===")

        assert _texts(doc.blocks[0].rows.body) == [["root", "x", "0"]]

    def test_custom_separator(self) -> None:
        """Test a separator override."""
        doc = load("[separator=¦]\n|===\n¦a ¦b\n|===")

        assert _texts(doc.blocks[0].rows.body) == [["a", "b"]]

    def test_illegal_format(self, warnings_log) -> None:
        """Test that an unknown format falls back to psv."""
        doc = load("[format=tsv]\n|===\n|a |b\n|===")

        assert "illegal table format: tsv, using psv" in warnings_log.text
        assert _texts(doc.blocks[0].rows.body) == [["a", "b"]]

    def test_missing_leading_separator(self, warnings_log) -> None:
        """Test recovery when a row does not start with a separator."""
        doc = load("|===\nfoo|bar\n|===")

        assert "table missing leading separator, recovering automatically" in warnings_log.text
        assert _texts(doc.blocks[0].rows.body) == [["foo", "bar"]]


@pytest.mark.unit
class TestAsciiDocCells:
    """Tests for cells parsed as nested documents."""

    def test_nested_document(self) -> None:
        """Test that an asciidoc cell gets its own block tree."""
        doc = load("[cols=2]\n|===\na|* one\n* two\n|plain\n|===")

        nested, plain = doc.blocks[0].rows.body[0]
        assert nested.style == "asciidoc"
        assert nested.inner_document is not None
        assert nested.inner_document.blocks[0].context is BlockContext.ULIST
        assert plain.inner_document is None

    def test_nested_document_inherits_attributes(self) -> None:
        """Test that a nested document sees the parent's attributes."""
        doc = load(":product: Widget\n\n|===\na|{product}\n|===")

        inner = doc.blocks[0].rows.body[0][0].inner_document
        assert inner.parent_document is doc
        assert inner.doc_attr("product") == "Widget"

    def test_nested_table(self) -> None:
        """Test a table inside an asciidoc cell using the nested separator."""
        doc = load("[cols=1]\n|===\na|\n!===\n!x !y\n!===\n|===")

        inner = doc.blocks[0].rows.body[0][0].inner_document
        nested_table = inner.blocks[0]
        assert isinstance(nested_table, Table)
        assert _texts(nested_table.rows.body) == [["x", "y"]]
