#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/reader.py
"""Line reader with look-ahead, push-back and a lazy per-line hook.

The reader keeps its remaining lines in reverse order so that consuming a
line and pushing one back are both cheap list operations. A look-ahead
counter records how many of the upcoming lines have already been passed
through :meth:`LineReader.process_line`, so peeking at the same line twice
never processes it twice.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional, Union

from adoc2ast.constants import DEFAULT_STDIN_PATH, LIST_CONTINUATION
from adoc2ast.logging_utils import log_at
from adoc2ast.utils.text import prepare_source_lines

logger = logging.getLogger(__name__)

LinePredicate = Callable[[str], bool]


@dataclass(frozen=True)
class Cursor:
    """A position in the source, used for diagnostics and source locations.

    Parameters
    ----------
    file : str or None
        Absolute path of the file being read, None for string input
    dir : str or None
        Directory of ``file`` (or the base directory for string input)
    path : str or None
        Display path used in diagnostics
    lineno : int
        1-based line number

    """

    file: Optional[str] = None
    dir: Optional[str] = None
    path: Optional[str] = None
    lineno: int = 1

    @property
    def line_info(self) -> str:
        return f"{self.path or DEFAULT_STDIN_PATH}: line {self.lineno}"

    def __str__(self) -> str:
        return self.line_info


class LineReader:
    """Read lines of source with look-ahead and push-back.

    Parameters
    ----------
    data : str, list of str or None
        Source text, or the source already split into lines
    cursor : Cursor, optional
        Where the first line of ``data`` sits in its file
    normalize : bool, default False
        Strip trailing whitespace and a leading byte order mark

    """

    def __init__(
        self,
        data: Union[str, list[str], None] = None,
        cursor: Optional[Cursor] = None,
        normalize: bool = False,
    ):
        if cursor is None:
            self.file: Optional[str] = None
            self.dir: Optional[str] = "."
            self.path: Optional[str] = DEFAULT_STDIN_PATH
            self.lineno = 1
        else:
            self.file = cursor.file
            self.dir = cursor.dir or (os.path.dirname(cursor.file) if cursor.file else ".")
            self.path = cursor.path or DEFAULT_STDIN_PATH
            self.lineno = cursor.lineno or 1
        lines = prepare_source_lines(data, normalize=normalize) if data is not None else []
        self._lines: list[str] = list(reversed(lines))
        self.source_lines = lines
        self._mark: Optional[Cursor] = None
        self.look_ahead = 0
        self.process_lines = True
        self.unescape_next_line = False
        self.unterminated = False

    # -- peeking ------------------------------------------------------------

    def has_more_lines(self) -> bool:
        if not self._lines:
            self.look_ahead = 0
            return False
        return True

    def is_empty(self) -> bool:
        return not self.has_more_lines()

    def next_line_empty(self) -> bool:
        line = self.peek_line()
        return not line

    def peek_line(self, direct: bool = False) -> Optional[str]:
        """Return the next line without consuming it.

        The line is passed through :meth:`process_line` the first time it is
        visited; afterwards it is returned as is. Returns None at the end of
        input.
        """
        while True:
            if not self._lines:
                self.look_ahead = 0
                return None
            next_line = self._lines[-1]
            if direct or self.look_ahead > 0:
                return next_line[1:] if self.unescape_next_line else next_line
            line = self.process_line(next_line)
            if line is not None:
                return line

    def peek_lines(self, num: Optional[int] = None, direct: bool = False) -> list[str]:
        """Return up to ``num`` upcoming lines without consuming them."""
        old_look_ahead = self.look_ahead
        result: list[str] = []
        remaining = num if num is not None else -1
        while remaining != 0:
            line = self.shift() if direct else self.read_line()
            if line is None:
                break
            result.append(line)
            remaining -= 1
        if result:
            self.unshift_lines(result)
            if direct:
                self.look_ahead = old_look_ahead
        return result

    # -- consuming ----------------------------------------------------------

    def read_line(self) -> Optional[str]:
        """Consume and return the next line, or None at the end of input."""
        if self.look_ahead > 0 or self.has_more_lines():
            return self.shift()
        return None

    def read_lines(self) -> list[str]:
        """Consume every remaining line."""
        lines = []
        while self.has_more_lines():
            lines.append(self.shift())
        return lines

    def read(self) -> str:
        return "\n".join(self.read_lines())

    def advance(self) -> bool:
        return self.shift() is not None

    def unshift_line(self, line: str) -> None:
        """Push a previously consumed line back onto the reader."""
        self.unshift(line)

    def unshift_lines(self, lines: list[str]) -> None:
        self.lineno -= len(lines)
        self.look_ahead += len(lines)
        self._lines.extend(reversed(lines))

    def replace_next_line(self, replacement: str) -> bool:
        self.shift()
        self.unshift(replacement)
        return True

    def skip_blank_lines(self) -> Optional[int]:
        """Consume blank lines and return how many were skipped (None at the end)."""
        if self.is_empty():
            return None
        skipped = 0
        while True:
            line = self.peek_line()
            if line is None:
                return None
            if line:
                return skipped
            self.shift()
            skipped += 1

    def skip_comment_lines(self) -> None:
        """Consume ``//`` line comments and ``////`` comment blocks."""
        if self.is_empty():
            return
        while True:
            line = self.peek_line()
            if not line or not line.startswith("//"):
                break
            if line.startswith("///"):
                if len(line) > 3 and line == "/" * len(line):
                    self.read_lines_until(
                        terminator=line,
                        skip_first_line=True,
                        read_last_line=True,
                        skip_processing=True,
                        context="comment",
                    )
                else:
                    break
            else:
                self.shift()

    def skip_line_comments(self) -> list[str]:
        """Consume ``//`` line comments and return them."""
        comments: list[str] = []
        if self.is_empty():
            return comments
        while True:
            line = self.peek_line()
            if not line or not line.startswith("//"):
                break
            comments.append(self.shift() or "")
        return comments

    def terminate(self) -> None:
        self.lineno += len(self._lines)
        self._lines.clear()
        self.look_ahead = 0

    def read_lines_until(
        self,
        terminator: Optional[str] = None,
        predicate: Optional[LinePredicate] = None,
        *,
        break_on_blank_lines: bool = False,
        break_on_list_continuation: bool = False,
        skip_first_line: bool = False,
        read_last_line: bool = False,
        preserve_last_line: bool = False,
        skip_line_comments: bool = False,
        skip_processing: bool = False,
        context: Optional[str] = None,
        cursor: Optional[Cursor] = None,
    ) -> list[str]:
        """Consume lines until a stop condition is met.

        Parameters
        ----------
        terminator : str, optional
            Stop at a line equal to this text; blank-line and continuation
            breaks are ignored when a terminator is given
        predicate : callable, optional
            Stop at the first line for which this returns True
        break_on_blank_lines : bool
            Stop at a blank line
        break_on_list_continuation : bool
            Stop at a lone ``+`` that follows content; the ``+`` is restored
        skip_first_line : bool
            Discard the first line before scanning (the opening delimiter)
        read_last_line : bool
            Keep the line that stopped the scan
        preserve_last_line : bool
            Push the line that stopped the scan back onto the reader
        skip_line_comments : bool
            Drop ``//`` line comments from the result
        skip_processing : bool
            Suspend the per-line hook while scanning
        context : str, optional
            Block name used in the unterminated-block warning
        cursor : Cursor, optional
            Position reported in the unterminated-block warning

        Returns
        -------
        list of str
            The lines consumed, minus those excluded by the options

        """
        result: list[str] = []
        restore_process_lines = False
        start_cursor: Optional[Cursor] = None
        if self.process_lines and skip_processing:
            self.process_lines = False
            restore_process_lines = True
        if terminator is not None:
            start_cursor = cursor or self.cursor
            break_on_blank_lines = False
            break_on_list_continuation = False

        line_read = False
        line_restored = False
        if skip_first_line:
            self.shift()

        line: Optional[str] = None
        while True:
            line = self.read_line()
            if line is None:
                break
            if terminator is not None:
                stop = line == terminator
            else:
                stop = False
                if break_on_blank_lines and not line:
                    stop = True
                elif break_on_list_continuation and line_read and line == LIST_CONTINUATION:
                    preserve_last_line = True
                    stop = True
                elif predicate is not None and predicate(line):
                    stop = True
            if stop:
                if read_last_line:
                    result.append(line)
                if preserve_last_line:
                    self.unshift(line)
                    line_restored = True
                break
            if not (skip_line_comments and line.startswith("//") and not line.startswith("///")):
                result.append(line)
                line_read = True

        if restore_process_lines:
            self.process_lines = True
            if line_restored and terminator is None:
                self.look_ahead -= 1

        if terminator is not None and terminator != line:
            log_at(logger, logging.WARNING, f"unterminated {context or terminator} block", start_cursor)
            self.unterminated = True
        return result

    # -- primitives ---------------------------------------------------------

    def process_line(self, line: str) -> Optional[str]:
        """Hook run once per line before it is handed out.

        Returning None drops the line and makes :meth:`peek_line` look again.
        """
        if self.process_lines:
            self.look_ahead += 1
        return line

    def shift(self) -> Optional[str]:
        """Consume the next line without processing it."""
        return self._shift_direct()

    def _shift_direct(self) -> Optional[str]:
        if not self._lines:
            return None
        self.lineno += 1
        if self.look_ahead:
            self.look_ahead -= 1
        return self._lines.pop()

    def unshift(self, line: str) -> None:
        self.lineno -= 1
        self.look_ahead += 1
        self._lines.append(line)

    # -- positions ----------------------------------------------------------

    @property
    def cursor(self) -> Cursor:
        return Cursor(self.file, self.dir, self.path, self.lineno)

    def cursor_at_line(self, lineno: int) -> Cursor:
        return Cursor(self.file, self.dir, self.path, lineno)

    def cursor_at_prev_line(self) -> Cursor:
        return Cursor(self.file, self.dir, self.path, self.lineno - 1)

    def mark(self) -> None:
        self._mark = self.cursor

    def cursor_at_mark(self) -> Cursor:
        return self._mark or self.cursor

    @property
    def line_info(self) -> str:
        return self.cursor.line_info

    @property
    def lines(self) -> list[str]:
        """The remaining lines, in order."""
        return list(reversed(self._lines))

    @property
    def string(self) -> str:
        return "\n".join(self.lines)

    @property
    def source(self) -> str:
        """The original source text given to the reader."""
        return "\n".join(self.source_lines)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.line_info}>"
