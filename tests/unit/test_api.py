#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the public load functions, options and logging helpers."""

import io
import logging

import pytest

from adoc2ast import Adoc2AstError, AsciiDocOptions, NestingDepthError, SafeMode, load, load_file
from adoc2ast.exceptions import FileNotFoundError as AdocFileNotFoundError
from adoc2ast.exceptions import InvalidOptionsError
from adoc2ast.logging_utils import configure_logging, format_location, log_at
from adoc2ast.options.base import BaseParserOptions
from adoc2ast.parsers.asciidoc import AsciiDocParser
from adoc2ast.reader import Cursor

SOURCE = (
    "= Guide\n"
    "Doc Writer <doc@example.org>\n"
    "v2.1, 2024-05-01\n"
    ":description: A guide\n"
    ":keywords: a, b\n"
    ":product: Widget\n"
    "\n"
    "text"
)


@pytest.mark.unit
class TestLoadSources:
    """Tests for the input types accepted by load."""

    def test_string(self) -> None:
        """Test parsing a string."""
        doc = load("= Title\n\ntext")

        assert doc.doctitle == "Title"

    def test_list_of_lines(self) -> None:
        """Test parsing a list of lines."""
        doc = load(["= Title", "", "text"])

        assert doc.blocks[0].lines == ["text"]

    def test_bytes_with_bom(self) -> None:
        """Test that a UTF-8 byte order mark is dropped."""
        doc = load("\ufeff= Title\n\ntext".encode("utf-8"))

        assert doc.doctitle == "Title"

    def test_latin1_bytes(self) -> None:
        """Test that bytes that are not UTF-8 are still decoded."""
        text = "Le café est très bon. Voilà une élève à la fenêtre."

        doc = load(text.encode("latin-1"))

        assert doc.blocks[0].lines == [text]

    def test_text_stream(self) -> None:
        """Test a text mode file-like object."""
        doc = load(io.StringIO("= Title\n\ntext"))

        assert doc.doctitle == "Title"

    def test_binary_stream(self) -> None:
        """Test a binary mode file-like object."""
        doc = load(io.BytesIO(b"= Title\n\ntext"))

        assert doc.doctitle == "Title"

    def test_open_file_sets_docfile(self, tmp_path) -> None:
        """Test that an open file is read relative to its own location."""
        source = tmp_path / "manual.adoc"
        source.write_text("= Manual\n", encoding="utf-8")

        with open(source, "rb") as f:
            doc = load(f)

        assert doc.doc_attr("docname") == "manual"

    def test_load_file(self, tmp_path) -> None:
        """Test that load_file sets the file attributes."""
        source = tmp_path / "guide.adoc"
        source.write_text("= Guide\n\ntext\n", encoding="utf-8")

        doc = load_file(str(source))

        assert doc.doc_attr("docfile") == str(source.resolve())
        assert doc.doc_attr("docdir") == str(tmp_path.resolve())
        assert doc.metadata["source_path"] == str(source.resolve())

    def test_missing_file(self, tmp_path) -> None:
        """Test that a missing file raises."""
        with pytest.raises(AdocFileNotFoundError):
            load_file(tmp_path / "missing.adoc")

    def test_missing_file_error_is_a_library_error(self, tmp_path) -> None:
        """Test that the missing file error is caught as a library error, not the builtin."""
        with pytest.raises(Adoc2AstError) as exc_info:
            load_file(tmp_path / "missing.adoc")

        assert isinstance(exc_info.value, AdocFileNotFoundError)
        assert not isinstance(exc_info.value, OSError)

    def test_base_dir_for_string_input(self, tmp_path) -> None:
        """Test that an explicit base directory becomes docdir."""
        doc = load("text", base_dir=str(tmp_path))

        assert doc.doc_attr("docdir") == str(tmp_path.resolve())


@pytest.mark.unit
class TestOptions:
    """Tests for option handling."""

    def test_kwargs_override_options(self) -> None:
        """Test that keyword arguments win over an options object."""
        options = AsciiDocOptions(doctype="book")

        doc = load("text", options, doctype="manpage")

        assert doc.doctype == "manpage"
        assert options.doctype == "book"

    def test_unknown_kwargs_are_skipped(self) -> None:
        """Test that unknown keyword arguments are ignored."""
        doc = load("text", not_an_option=True)

        assert doc.blocks[0].lines == ["text"]

    def test_safe_mode_coercion(self) -> None:
        """Test the accepted safe mode forms."""
        assert AsciiDocOptions(safe_mode="server").safe_mode is SafeMode.SERVER
        assert AsciiDocOptions(safe_mode=1).safe_mode is SafeMode.SAFE
        assert AsciiDocOptions().safe_mode is SafeMode.SECURE
        assert SafeMode.UNSAFE < SafeMode.SAFE < SafeMode.SERVER < SafeMode.SECURE < SafeMode.PARANOID

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"safe_mode": "reckless"},
            {"doctype": "novel"},
            {"attribute_missing": "explode"},
            {"max_include_depth": -1},
            {"max_nesting_depth": "deep"},
        ],
    )
    def test_invalid_values(self, kwargs) -> None:
        """Test that out of range values are rejected."""
        with pytest.raises(ValueError):
            AsciiDocOptions(**kwargs)

    def test_wrong_options_type(self) -> None:
        """Test that the parser rejects options of another type."""
        with pytest.raises(InvalidOptionsError):
            AsciiDocParser(BaseParserOptions())

    def test_options_are_frozen(self) -> None:
        """Test that options cannot be changed in place."""
        options = AsciiDocOptions()

        with pytest.raises(AttributeError):
            options.doctype = "book"  # type: ignore[misc]

    def test_create_updated(self) -> None:
        """Test cloning options with changes."""
        options = AsciiDocOptions(attributes={"a": "1"})

        updated = options.create_updated(sourcemap=True)

        assert updated.sourcemap
        assert updated.attributes == {"a": "1"}
        assert not options.sourcemap


@pytest.mark.unit
class TestMetadata:
    """Tests for metadata collected from the header."""

    def test_header_fields(self) -> None:
        """Test the named metadata fields."""
        doc = load(SOURCE)

        assert doc.metadata["title"] == "Guide"
        assert doc.metadata["author"] == "Doc Writer"
        assert doc.metadata["authors"] == ["Doc Writer"]
        assert doc.metadata["email"] == "doc@example.org"
        assert doc.metadata["description"] == "A guide"
        assert doc.metadata["keywords"] == ["a", "b"]
        assert doc.metadata["version"] == "2.1"
        assert doc.metadata["revision_date"] == "2024-05-01"
        assert doc.metadata["doctype"] == "article"

    def test_custom_attributes(self) -> None:
        """Test that document-defined attributes are kept and defaults left out."""
        doc = load(SOURCE)

        assert doc.metadata["product"] == "Widget"
        assert "sectids" not in doc.metadata
        assert "table-caption" not in doc.metadata

    def test_extract_metadata_disabled(self) -> None:
        """Test turning metadata collection off."""
        doc = load(SOURCE, extract_metadata=False)

        assert doc.metadata == {}

    def test_extract_metadata_directly(self) -> None:
        """Test the parser's metadata method."""
        parser = AsciiDocParser()
        doc = parser.parse("= T\nA Writer; B Writer\n\ntext")

        metadata = parser.extract_metadata(doc)

        assert metadata.authors == ["A Writer", "B Writer"]
        assert metadata.to_dict()["title"] == "T"


@pytest.mark.unit
class TestProgress:
    """Tests for progress callbacks."""

    def test_event_sequence(self) -> None:
        """Test the events of a successful parse."""
        events = []

        load("= Doc\n\n== A\n\n== B", progress_callback=events.append)

        assert [event.event_type for event in events] == ["started", "item_done", "finished"]
        assert events[1].metadata == {"item_type": "blocks", "sections": 2}
        assert str(events[-1]) == "[FINISHED] Parsing complete (100/100)"

    def test_error_event(self) -> None:
        """Test that a failing parse reports an error event."""
        events = []

        with pytest.raises(NestingDepthError):
            load("====\n======\nx\n======\n====", progress_callback=events.append, max_nesting_depth=1)

        assert events[-1].event_type == "error"

    def test_failing_callback_does_not_stop_parsing(self, warnings_log) -> None:
        """Test that an exception in the callback is logged and ignored."""

        def explode(event) -> None:
            raise RuntimeError("boom")

        doc = load("text", progress_callback=explode)

        assert doc.blocks[0].lines == ["text"]
        assert "Progress callback raised exception: boom" in warnings_log.text


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.unit
class TestLogging:
    """Tests for the logging helpers."""

    def test_format_location(self) -> None:
        """Test the position prefix."""
        assert format_location(Cursor(path="a.adoc", lineno=3)) == "a.adoc: line 3"
        assert format_location(Cursor(lineno=7)) == "<stdin>: line 7"
        assert format_location(None) == ""

    def test_log_at_prefixes_location(self, caplog) -> None:
        """Test that diagnostics carry their source position."""
        caplog.set_level(logging.WARNING, logger="adoc2ast")

        log_at(logging.getLogger("adoc2ast.test"), logging.WARNING, "odd input", Cursor(path="x.adoc", lineno=2))

        assert caplog.records[-1].getMessage() == "x.adoc: line 2: odd input"

    def test_parser_warnings_name_stdin(self, warnings_log) -> None:
        """Test that warnings for string input are attributed to stdin."""
        load("[#dup]\nOne\n\n[#dup]\nTwo")

        assert "<stdin>: line" in warnings_log.text

    def test_configure_logging(self, restore_root_logger) -> None:
        """Test the console handler and level."""
        root = configure_logging("debug")

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_configure_logging_with_file(self, restore_root_logger, tmp_path) -> None:
        """Test teeing log output to a file."""
        log_file = tmp_path / "adoc2ast.log"

        root = configure_logging(logging.INFO, log_file=str(log_file), trace_mode=True)

        assert len(root.handlers) == 2
        assert log_file.exists()
