#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the line reader."""

import pytest

from adoc2ast.reader import Cursor, LineReader


@pytest.mark.unit
class TestLineReaderPeeking:
    """Tests for look-ahead without consuming lines."""

    def test_peek_does_not_consume(self) -> None:
        """Test that peeking returns the next line and leaves it in place."""
        reader = LineReader("first\nsecond")

        assert reader.peek_line() == "first"
        assert reader.peek_line() == "first"
        assert reader.read_line() == "first"
        assert reader.read_line() == "second"
        assert reader.read_line() is None

    def test_peek_lines_restores_position(self) -> None:
        """Test that peek_lines hands back upcoming lines without advancing."""
        reader = LineReader(["a", "b", "c"])

        assert reader.peek_lines(2) == ["a", "b"]
        assert reader.lineno == 1
        assert reader.lines == ["a", "b", "c"]

    def test_peek_lines_past_end(self) -> None:
        """Test that peek_lines stops at the end of input."""
        reader = LineReader(["only"])

        assert reader.peek_lines(5) == ["only"]
        assert reader.lineno == 1

    def test_empty_reader(self) -> None:
        """Test the state of a reader without lines."""
        reader = LineReader()

        assert reader.is_empty()
        assert not reader.has_more_lines()
        assert reader.peek_line() is None


@pytest.mark.unit
class TestLineReaderConsuming:
    """Tests for consuming, pushing back and skipping lines."""

    def test_unshift_moves_line_number_back(self) -> None:
        """Test that pushing a line back restores the line number."""
        reader = LineReader(["one", "two"])
        line = reader.read_line()
        assert reader.lineno == 2

        reader.unshift_line(line)

        assert reader.lineno == 1
        assert reader.peek_line() == "one"

    def test_skip_blank_lines_counts(self) -> None:
        """Test that skip_blank_lines reports how many lines were skipped."""
        reader = LineReader(["", "", "text"])

        assert reader.skip_blank_lines() == 2
        assert reader.peek_line() == "text"

    def test_skip_blank_lines_at_end(self) -> None:
        """Test that skip_blank_lines returns None when only blank lines remain."""
        reader = LineReader(["", ""])

        assert reader.skip_blank_lines() is None

    def test_skip_comment_lines(self) -> None:
        """Test that line comments and comment blocks are skipped."""
        reader = LineReader(["// note", "////", "hidden", "////", "visible"])

        reader.skip_comment_lines()

        assert reader.peek_line() == "visible"

    def test_skip_line_comments_returns_them(self) -> None:
        """Test that skipped line comments are returned in order."""
        reader = LineReader(["// a", "// b", "text"])

        assert reader.skip_line_comments() == ["// a", "// b"]
        assert reader.peek_line() == "text"

    def test_terminate(self) -> None:
        """Test that terminate discards the remaining lines."""
        reader = LineReader(["a", "b", "c"])

        reader.terminate()

        assert reader.is_empty()
        assert reader.lineno == 4


@pytest.mark.unit
class TestReadLinesUntil:
    """Tests for the general purpose line scanner."""

    def test_break_on_blank_line(self) -> None:
        """Test that a blank line stops the scan."""
        reader = LineReader(["a", "b", "", "c"])

        assert reader.read_lines_until(break_on_blank_lines=True) == ["a", "b"]
        assert reader.peek_line() == "c"

    def test_terminator_with_skip_first_line(self) -> None:
        """Test reading the body of a delimited block."""
        reader = LineReader(["----", "code", "more", "----", "after"])

        lines = reader.read_lines_until(terminator="----", skip_first_line=True)

        assert lines == ["code", "more"]
        assert reader.peek_line() == "after"
        assert not reader.unterminated

    def test_terminator_ignores_blank_lines(self) -> None:
        """Test that blank lines inside a delimited block do not end it."""
        reader = LineReader(["a", "", "b", "===="])

        assert reader.read_lines_until(terminator="====", break_on_blank_lines=True) == ["a", "", "b"]

    def test_unterminated_block_warns(self, warnings_log) -> None:
        """Test that a missing terminator is reported with the block name."""
        reader = LineReader(["code", "more"], Cursor(path="doc.adoc", lineno=3))

        lines = reader.read_lines_until(terminator="----", context="listing")

        assert lines == ["code", "more"]
        assert reader.unterminated
        assert "doc.adoc: line 3: unterminated listing block" in warnings_log.text

    def test_list_continuation_is_preserved(self) -> None:
        """Test that a list continuation after content stops the scan and stays on the reader."""
        reader = LineReader(["text", "+", "more"])

        lines = reader.read_lines_until(break_on_list_continuation=True)

        assert lines == ["text"]
        assert reader.peek_line() == "+"

    def test_predicate_with_preserve_last_line(self) -> None:
        """Test that the line matching the predicate can be pushed back."""
        reader = LineReader(["a", "* item"])

        lines = reader.read_lines_until(predicate=lambda line: line.startswith("*"), preserve_last_line=True)

        assert lines == ["a"]
        assert reader.peek_line() == "* item"

    def test_skip_line_comments(self) -> None:
        """Test that line comments can be dropped from the result."""
        reader = LineReader(["a", "// comment", "b"])

        assert reader.read_lines_until(skip_line_comments=True) == ["a", "b"]


@pytest.mark.unit
class TestCursor:
    """Tests for source positions."""

    def test_line_info_defaults_to_stdin(self) -> None:
        """Test the display path of a cursor without a path."""
        assert Cursor(lineno=7).line_info == "<stdin>: line 7"

    def test_reader_cursor_tracks_lines(self) -> None:
        """Test that the reader cursor follows consumed lines."""
        reader = LineReader(["a", "b"], Cursor(file="/docs/a.adoc", path="a.adoc", lineno=10))
        reader.read_line()

        assert reader.cursor.lineno == 11
        assert reader.cursor.dir == "/docs"
        assert str(reader.cursor) == "a.adoc: line 11"

    def test_mark(self) -> None:
        """Test that a marked position can be recalled after reading on."""
        reader = LineReader(["a", "b", "c"])
        reader.read_line()
        reader.mark()
        reader.read_line()

        assert reader.cursor_at_mark().lineno == 2
        assert reader.cursor_at_prev_line().lineno == 2
