#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/parsers/_tables.py
"""Table parsing.

This private module contains the part of the block parser that reads
tables in the prefix-separated (``psv``, the ``|===`` block), delimiter
separated (``dsv``, ``:===``) and comma separated (``csv``, ``,===``)
formats. Column specs come from the ``cols`` attribute or from the cells of
the first row; cell specs in front of a ``|`` carry spans, alignment and
style. Rows are closed once the cells placed in them, together with cells
spanning down from earlier rows, fill every column.

"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Optional

from adoc2ast.ast.nodes import AbstractBlock, Cell, Column, Document, SourceLocation, Table
from adoc2ast.constants import (
    DEFAULT_TABLE_FORMAT,
    TABLE_CELL_STYLES,
    TABLE_FORMAT_DELIMITERS,
    TABLE_HALIGNS,
    TABLE_VALIGNS,
)
from adoc2ast.logging_utils import log_at
from adoc2ast.preprocessor import PreprocessingReader
from adoc2ast.utils.text import to_float, to_int

if TYPE_CHECKING:
    from adoc2ast.reader import Cursor, LineReader

__all__ = ["TableParserContext", "TableParsingMixin", "parse_cellspec", "parse_colspecs"]

logger = logging.getLogger(__name__)

_ALIGN = r"[<^>](?:\.[<^>]?)?|(?:[<^>]?\.)?[<^>]"
_SPAN = r"\d+(?:\.\d*)?|(?:\d*\.)?\d+"

COLUMN_SPEC_RE = re.compile(rf"^(?:(\d+)\*)?({_ALIGN})?(\d+%?|~)?([a-z])?$")
CELL_SPEC_START_RE = re.compile(rf"^[ \t]*(?:({_SPAN})([*+]))?({_ALIGN})?([a-z])?$")
CELL_SPEC_END_RE = re.compile(rf"[ \t]+(?:({_SPAN})([*+]))?({_ALIGN})?([a-z])?$")

_PRECISION = 10000.0


def _apply_alignment(spec: dict[str, Any], alignment: Optional[str]) -> None:
    if not alignment:
        return
    halign, _, valign = alignment.partition(".")
    if halign in TABLE_HALIGNS:
        spec["halign"] = TABLE_HALIGNS[halign]
    if valign in TABLE_VALIGNS:
        spec["valign"] = TABLE_VALIGNS[valign]


def _normalize_width(value: float) -> Any:
    return int(value) if int(value) == value else value


def parse_colspecs(records: str) -> list[dict[str, Any]]:
    """Parse the ``cols`` attribute into one spec per column.

    A bare number asks for that many equal columns. Each comma separated
    record may carry a repeat count (``3*``), an alignment (``^.>``), a
    relative or percentage width, or ``~`` for an automatic width, and a
    style letter. An empty record is a column of width 1.

    Examples
    --------
    >>> [spec["width"] for spec in parse_colspecs("1,2*3")]
    [1, 3, 3]

    """
    records = records.replace(" ", "")
    if not records:
        return []
    if records == str(to_int(records)):
        return [{"width": 1} for _ in range(int(records))]

    specs: list[dict[str, Any]] = []
    for record in records.split(","):
        if not record:
            specs.append({"width": 1})
            continue
        match = COLUMN_SPEC_RE.match(record)
        if match is None:
            continue
        spec: dict[str, Any] = {}
        _apply_alignment(spec, match.group(2))
        width = match.group(3)
        if width == "~":
            spec["width"] = 1
            spec["autowidth-option"] = ""
        else:
            spec["width"] = to_int(width) if width else 1
        style = match.group(4)
        if style and style in TABLE_CELL_STYLES:
            spec["style"] = TABLE_CELL_STYLES[style]
        repeat = int(match.group(1)) if match.group(1) else 1
        specs.extend(dict(spec) for _ in range(repeat))
    return specs


def parse_cellspec(
    line: str, pos: str = "end", delimiter: Optional[str] = None
) -> tuple[Optional[dict[str, Any]], str]:
    """Split a cell spec off a chunk of a ``psv`` row.

    Parameters
    ----------
    line : str
        At ``pos="start"``, a line that may open with ``<spec>|``; at
        ``pos="end"``, the text in front of a separator, whose trailing
        word may be the spec of the next cell
    pos : {"start", "end"}
        Which end of ``line`` to look at
    delimiter : str, optional
        The cell separator, required at ``pos="start"``

    Returns
    -------
    tuple
        The spec (None at the start of a line that does not begin a cell)
        and the remaining text

    Notes
    -----
    ``C+`` spans C columns, ``.R+`` spans R rows and ``C.R+`` does both;
    ``N*`` repeats the cell N times.

    """
    if pos == "start":
        if not delimiter or delimiter not in line:
            return None, line
        spec_part, rest = line.split(delimiter, 1)
        match = CELL_SPEC_START_RE.match(spec_part)
        if match is None:
            return None, line
        if not match.group(0):
            return {}, rest
    else:
        match = CELL_SPEC_END_RE.search(line)
        if match is None:
            return {}, line
        if not match.group(0).lstrip():
            return {}, line.rstrip()
        rest = line[: match.start()]

    spec: dict[str, Any] = {}
    if match.group(1):
        colspec, _, rowspec = match.group(1).partition(".")
        colspan = int(colspec) if colspec else 1
        rowspan = int(rowspec) if rowspec else 1
        if match.group(2) == "+":
            if colspan != 1:
                spec["colspan"] = colspan
            if rowspan != 1:
                spec["rowspan"] = rowspan
        elif match.group(2) == "*" and colspan != 1:
            spec["repeatcol"] = colspan

    _apply_alignment(spec, match.group(3))
    style = match.group(4)
    if style and style in TABLE_CELL_STYLES:
        spec["style"] = TABLE_CELL_STYLES[style]
    return spec, rest


class TableParserContext:
    """Running state of a table while its rows are read.

    Parameters
    ----------
    reader : LineReader
        Reader over the lines between the table delimiters
    table : Table
        The table being filled
    attributes : dict
        Block attributes of the table (``format``, ``separator``)
    document : Document
        The owning document; tables in a nested document use ``!`` as the
        default ``psv`` separator

    """

    def __init__(self, reader: "LineReader", table: Table, attributes: dict[Any, Any], document: Document):
        self.reader = reader
        self.table = table
        self.document = document
        self.last_cursor = reader.cursor

        table_format = attributes.get("format")
        if table_format is None:
            table_format = DEFAULT_TABLE_FORMAT
        elif table_format not in TABLE_FORMAT_DELIMITERS:
            log_at(logger, logging.ERROR, f"illegal table format: {table_format}, using psv", reader.cursor)
            table_format = DEFAULT_TABLE_FORMAT
        self.format = table_format

        if table_format == "psv" and "separator" not in attributes and document.nested:
            self.delimiter = "!"
        else:
            self.delimiter = attributes.get("separator") or TABLE_FORMAT_DELIMITERS[table_format]
        self.delimiter_re = re.compile(re.escape(self.delimiter))

        self.col_count = len(table.columns) if table.columns else -1
        self.buffer = ""
        self.cell_specs: list[Optional[dict[str, Any]]] = []
        self.cell_open = False
        self.active_rowspans = [0]
        self.col_visits = 0
        self.current_row: list[Cell] = []
        self.linenum = -1
        self.cell_cursors: dict[int, "Cursor"] = {}

    def starts_with_delimiter(self, line: str) -> bool:
        return line.startswith(self.delimiter)

    def match_delimiter(self, line: str) -> Optional[re.Match[str]]:
        return self.delimiter_re.search(line)

    def skip_past_delimiter(self, line: str, match: re.Match[str]) -> str:
        self.buffer = f"{self.buffer}{line[: match.start()]}{self.delimiter}"
        return line[match.end() :]

    def skip_past_escaped_delimiter(self, line: str, match: re.Match[str]) -> str:
        self.buffer = f"{self.buffer}{line[: match.start() - 1]}{self.delimiter}"
        return line[match.end() :]

    def buffer_has_unclosed_quotes(self, append: str = "") -> bool:
        record = f"{self.buffer}{append}".strip()
        return record.startswith('"') and not record.startswith('""') and not record.endswith('"')

    def push_cellspec(self, cellspec: Optional[dict[str, Any]] = None) -> None:
        self.cell_specs.append(cellspec or {})

    def keep_cell_open(self) -> None:
        self.cell_open = True

    def close_open_cell(self, next_cellspec: Optional[dict[str, Any]] = None) -> None:
        self.push_cellspec(next_cellspec)
        if self.cell_open:
            self.close_cell(True)
        self.linenum += 1

    def close_cell(self, eol: bool = False) -> None:
        """Turn the buffered text into one cell (or several, for a repeated spec)."""
        cell_text = self.buffer.strip()
        self.buffer = ""
        cellspec: Optional[dict[str, Any]]
        if self.format == "psv":
            cellspec = self.cell_specs.pop(0) if self.cell_specs else None
            if cellspec is not None:
                cellspec = dict(cellspec)
                repeat = int(cellspec.pop("repeatcol", 1))
            else:
                log_at(
                    logger,
                    logging.ERROR,
                    "table missing leading separator, recovering automatically",
                    self.last_cursor,
                )
                cellspec = {}
                repeat = 1
        else:
            cellspec = None
            repeat = 1
            if self.format == "csv" and cell_text and '"' in cell_text:
                if cell_text.startswith('"') and cell_text.endswith('"'):
                    cell_text = cell_text[1:-1].strip()
                cell_text = re.sub('"+', '"', cell_text)

        for i in range(1, repeat + 1):
            if self.col_count == -1:
                column = self._new_column(len(self.table.columns))
                colspan = int((cellspec or {}).get("colspan", 1))
                for _ in range(colspan - 1):
                    self._new_column(len(self.table.columns))
            else:
                if self.col_visits >= len(self.table.columns):
                    log_at(
                        logger,
                        logging.ERROR,
                        "dropping cell because it exceeds specified number of columns",
                        self.last_cursor,
                    )
                    self.cell_open = False
                    return
                column = self.table.columns[self.col_visits]

            cell = self._new_cell(column, cell_text, cellspec)
            self.cell_cursors[id(cell)] = self.last_cursor
            self.last_cursor = self.reader.cursor
            if cell.rowspan > 1:
                self.activate_rowspan(cell.rowspan, cell.colspan)
            self.col_visits += cell.colspan
            self.current_row.append(cell)
            if self.end_of_row() and (self.col_count != -1 or self.linenum > 0 or (eol and i == repeat)):
                self.close_row()
        self.cell_open = False

    def _new_column(self, index: int, spec: Optional[dict[str, Any]] = None) -> Column:
        column = create_column(index, spec or {})
        self.table.columns.append(column)
        return column

    def _new_cell(self, column: Column, text: str, cellspec: Optional[dict[str, Any]]) -> Cell:
        cell = Cell(text=text, column=column, style=column.style)
        cell.attributes.update(column.attributes)
        if cellspec:
            cellspec = dict(cellspec)
            if "style" in cellspec:
                cell.style = cellspec.pop("style")
            cell.attributes.update(cellspec)
        if self.document.options.sourcemap:
            cell.source_location = _location(self.last_cursor)
        return cell

    def close_row(self) -> None:
        if self.col_count != -1 and self.effective_col_visits() > self.col_count:
            log_at(logger, logging.WARNING, "table row spans past the last column", self.last_cursor)
        self.table.rows.body.append(self.current_row)
        if self.col_count == -1:
            self.col_count = self.col_visits
        self.col_visits = 0
        self.current_row = []
        self.active_rowspans.pop(0)
        if not self.active_rowspans:
            self.active_rowspans.append(0)

    def activate_rowspan(self, rowspan: int, colspan: int) -> None:
        for i in range(1, rowspan):
            while len(self.active_rowspans) <= i:
                self.active_rowspans.append(0)
            self.active_rowspans[i] += colspan

    def end_of_row(self) -> bool:
        return self.col_count == -1 or self.effective_col_visits() >= self.col_count

    def effective_col_visits(self) -> int:
        return self.col_visits + self.active_rowspans[0]


def create_column(index: int, spec: dict[str, Any]) -> Column:
    attributes = dict(spec)
    style = attributes.pop("style", None)
    attributes["colnumber"] = index + 1
    attributes.setdefault("width", 1)
    attributes.setdefault("halign", "left")
    attributes.setdefault("valign", "top")
    return Column(attributes=attributes, style=style)


def _location(cursor: "Cursor") -> SourceLocation:
    return SourceLocation(format="asciidoc", line=cursor.lineno, path=cursor.file)


class TableParsingMixin:
    """Table parsing for :class:`~adoc2ast.parsers.blocks.BlockParser`."""

    document: Document
    depth: int

    def next_table(self, reader: "LineReader", parent: AbstractBlock, attributes: dict[Any, Any]) -> Table:
        """Parse the lines between table delimiters into a :class:`Table`.

        When no ``header`` or ``noheader`` option is given, a first line
        followed by a blank line is taken as the header row.
        """
        table = Table(has_header_option="header-option" in attributes)
        table.parent = parent
        self._assign_table_width(table, attributes)
        if "title" in attributes:
            table.title = attributes.pop("title")
            self.assign_caption(table, attributes.pop("caption", None))  # type: ignore[attr-defined]

        explicit_colspecs = False
        if attributes.get("cols"):
            colspecs = parse_colspecs(attributes["cols"])
            if colspecs:
                self.create_columns(table, colspecs)
                explicit_colspecs = True

        skipped = reader.skip_blank_lines() or 0
        ctx = TableParserContext(reader, table, attributes, self.document)
        table_format = ctx.format
        loop_idx = -1
        implicit_header_boundary: Optional[int] = None
        implicit_header = not (skipped > 0 or "header-option" in attributes or "noheader-option" in attributes)

        while True:
            line = reader.read_line()
            if line is None:
                break
            loop_idx += 1
            if loop_idx > 0 and not line:
                line = None
                if implicit_header_boundary is not None:
                    implicit_header_boundary += 1
            elif table_format == "psv":
                if ctx.starts_with_delimiter(line):
                    line = line[len(ctx.delimiter) :]
                    ctx.close_open_cell()
                    implicit_header_boundary = None
                else:
                    next_cellspec, line = parse_cellspec(line, "start", ctx.delimiter)
                    if next_cellspec is not None:
                        ctx.close_open_cell(next_cellspec)
                        implicit_header_boundary = None
                    elif implicit_header_boundary is not None and implicit_header_boundary == loop_idx:
                        implicit_header, implicit_header_boundary = False, None

            if loop_idx == 0 and implicit_header:
                if reader.has_more_lines() and reader.peek_line() == "":
                    implicit_header_boundary = 1
                else:
                    implicit_header = False

            while True:
                match = ctx.match_delimiter(line) if line is not None else None
                if line is not None and match is not None:
                    pre = line[: match.start()]
                    if table_format == "csv":
                        if ctx.buffer_has_unclosed_quotes(pre):
                            line = ctx.skip_past_delimiter(line, match)
                            if not line:
                                break
                            continue
                        ctx.buffer = f"{ctx.buffer}{pre}"
                    else:
                        if pre.endswith("\\"):
                            line = ctx.skip_past_escaped_delimiter(line, match)
                            if not line:
                                ctx.buffer = f"{ctx.buffer}\n"
                                ctx.keep_cell_open()
                                break
                            continue
                        if table_format == "psv":
                            next_cellspec, cell_text = parse_cellspec(pre)
                            ctx.push_cellspec(next_cellspec)
                            ctx.buffer = f"{ctx.buffer}{cell_text}"
                        else:
                            ctx.buffer = f"{ctx.buffer}{pre}"
                    # an empty remainder still closes the cell found at the end of the line
                    line = line[match.end() :] or None
                    ctx.close_cell()
                else:
                    ctx.buffer = f"{ctx.buffer}{line or ''}\n"
                    if table_format == "csv":
                        ctx.buffer = f"{ctx.buffer.rstrip()} "
                        if ctx.buffer_has_unclosed_quotes():
                            if implicit_header_boundary is not None and loop_idx == 0:
                                implicit_header, implicit_header_boundary = False, None
                            ctx.keep_cell_open()
                        else:
                            ctx.close_cell(True)
                    elif table_format == "dsv":
                        ctx.close_cell(True)
                    else:
                        ctx.keep_cell_open()
                    break

            if not ctx.cell_open:
                reader.skip_blank_lines()
            if not reader.has_more_lines() and ctx.cell_open:
                ctx.close_cell(True)

        table.attributes.setdefault("colcount", len(table.columns))
        if table.attributes["colcount"] and not explicit_colspecs:
            self.assign_column_widths(table)

        if implicit_header:
            table.has_header_option = True
            attributes["header-option"] = ""
            attributes["options"] = f"{attributes['options']},header" if "options" in attributes else "header"

        self.partition_header_footer(table, attributes)
        self._parse_cell_documents(table, ctx)
        return table

    # -- columns --------------------------------------------------------------

    def _assign_table_width(self, table: Table, attributes: dict[Any, Any]) -> None:
        width = attributes.get("width")
        pcwidth = abs(to_int(width)) if width else 0
        if (pcwidth == 0 and width != "0") or pcwidth > 100:
            pcwidth = 100
        table.attributes["tablepcwidth"] = pcwidth
        pagewidth = self.document.doc_attr("pagewidth")
        if pagewidth:
            table.attributes["tableabswidth"] = round(pcwidth / 100 * to_float(pagewidth))

    def create_columns(self, table: Table, colspecs: list[dict[str, Any]]) -> None:
        width_base = 0
        columns = []
        for spec in colspecs:
            width_base += spec.get("width", 1)
            columns.append(create_column(len(columns), spec))
        table.columns = columns
        if columns:
            table.attributes["colcount"] = len(columns)
            self.assign_column_widths(table, width_base or None)

    def assign_column_widths(self, table: Table, width_base: Optional[int] = None) -> None:
        """Convert relative column widths into percentages that add up to 100.

        Widths are truncated to four decimal places; the last column absorbs
        the remainder.
        """
        columns = table.columns
        total_width: float = 0
        col_pcwidth: Any = 0
        if width_base:
            for column in columns:
                col_pcwidth = _normalize_width(
                    int(column.attributes["width"] / width_base * 100 * _PRECISION) / _PRECISION
                )
                self._set_column_width(table, column, col_pcwidth)
                total_width += col_pcwidth
        else:
            col_pcwidth = _normalize_width(int(100 * _PRECISION / len(columns)) / _PRECISION)
            for column in columns:
                self._set_column_width(table, column, col_pcwidth)
                total_width += col_pcwidth
        if total_width != 100:
            remainder = round((100 - total_width + col_pcwidth) * _PRECISION) / _PRECISION
            self._set_column_width(table, columns[-1], _normalize_width(remainder))

    @staticmethod
    def _set_column_width(table: Table, column: Column, col_pcwidth: Any) -> None:
        column.attributes["colpcwidth"] = col_pcwidth
        if "tableabswidth" in table.attributes:
            column.attributes["colabswidth"] = round(col_pcwidth / 100 * table.attributes["tableabswidth"])

    # -- rows -----------------------------------------------------------------

    @staticmethod
    def partition_header_footer(table: Table, attributes: dict[Any, Any]) -> None:
        """Move the first body row to the head and, with ``footer``, the last to the foot."""
        rows = table.rows
        table.attributes["rowcount"] = len(rows.body)
        num_body_rows = len(rows.body)
        if num_body_rows > 0 and table.has_header_option:
            head = rows.body.pop(0)
            num_body_rows -= 1
            for cell in head:
                cell.style = None
            rows.head = [head]
        if num_body_rows > 0 and "footer-option" in attributes:
            rows.foot = [rows.body.pop()]

    def _parse_cell_documents(self, table: Table, ctx: TableParserContext) -> None:
        for rows in (table.rows.body, table.rows.foot):
            for row in rows:
                for cell in row:
                    if cell.style == "asciidoc":
                        cell.inner_document = self.parse_cell_document(cell, ctx.cell_cursors.get(id(cell)))

    def parse_cell_document(self, cell: Cell, cursor: Optional["Cursor"] = None) -> Document:
        """Parse the text of an ``asciidoc`` cell as a nested document."""
        inner = Document.create(parent_document=self.document)
        reader = PreprocessingReader(inner, cell.text, cursor, base_dir=self.document.doc_attr("docdir"))
        logger.debug(f"Parsing nested document for table cell at {cursor.line_info if cursor else 'unknown'}")
        with self._nested():  # type: ignore[attr-defined]
            type(self)(inner, depth=self.depth).parse(reader)  # type: ignore[call-arg,attr-defined]
        return inner
