#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/parsers/base.py
"""Base classes for document parsers.

This module defines the abstract base class the AsciiDoc parser inherits
from. It validates the options type, reports progress and loads text from
the supported input types.

"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Any, Optional, Union

from adoc2ast.ast.nodes import Document
from adoc2ast.exceptions import FileAccessError, FileNotFoundError, InvalidOptionsError
from adoc2ast.options.base import BaseParserOptions
from adoc2ast.progress import ProgressCallback, ProgressEvent
from adoc2ast.utils.encoding import decode_source, normalize_stream_to_text
from adoc2ast.utils.metadata import DocumentMetadata

logger = logging.getLogger(__name__)

ParserInput = Union[str, Path, IO[bytes], IO[str], bytes, list[str]]


class BaseParser(ABC):
    """Abstract base class for document parsers.

    Parameters
    ----------
    options : BaseParserOptions or None, default = None
        Format-specific parsing options
    progress_callback : ProgressCallback or None, default = None
        Optional callback for progress updates during parsing

    Notes
    -----
    The parse() method should handle all supported input types:
    - str: document text
    - Path: file path to read
    - IO[bytes] / IO[str]: file-like object
    - bytes: raw document bytes
    - list of str: document lines

    """

    def __init__(self, options: BaseParserOptions | None = None, progress_callback: Optional[ProgressCallback] = None):
        self.options: BaseParserOptions | None = options
        self.progress_callback: Optional[ProgressCallback] = progress_callback

    @staticmethod
    def _validate_options_type(options: BaseParserOptions | None, expected_type: type, parser_name: str) -> None:
        """Validate that options are of the correct type for this parser.

        Raises
        ------
        InvalidOptionsError
            If options are not None and not an instance of expected_type

        """
        if options is not None and not isinstance(options, expected_type):
            raise InvalidOptionsError(
                parser_name=parser_name,
                expected_type=expected_type,
                received_type=type(options),
            )

    @abstractmethod
    def parse(self, input_data: ParserInput) -> Document:
        """Parse the input document into an AST.

        Parameters
        ----------
        input_data : str, Path, IO, bytes or list of str
            The input document to parse

        Returns
        -------
        Document
            AST Document node representing the parsed document structure

        Raises
        ------
        ParsingError
            If parsing fails unrecoverably
        SecurityError
            If an include escapes the permitted directory under a strict safe mode

        """
        raise NotImplementedError

    @abstractmethod
    def extract_metadata(self, document: Any) -> DocumentMetadata:
        """Extract metadata from a parsed document."""
        raise NotImplementedError

    def _emit_progress(self, event_type: str, message: str, current: int = 0, total: int = 0, **metadata: Any) -> None:
        """Emit a progress event to the callback if registered.

        Parameters
        ----------
        event_type : str
            Type of progress event (started, item_done, detected, finished, error)
        message : str
            Human-readable description of the event
        current : int, default 0
            Current progress position
        total : int, default 0
            Total items to process
        **metadata
            Additional event-specific information

        Notes
        -----
        If the callback raises an exception, it will be caught and logged to
        prevent interrupting the conversion process.

        """
        if not self.progress_callback:
            return

        try:
            event = ProgressEvent(
                event_type=event_type,  # type: ignore[arg-type]
                message=message,
                current=current,
                total=total,
                metadata=metadata,
            )
            self.progress_callback(event)
        except Exception as e:
            # Log but don't interrupt conversion if callback fails
            logger.warning(f"Progress callback raised exception: {e}", exc_info=True)

    @staticmethod
    def _load_text_content(input_data: ParserInput) -> tuple[Union[str, list[str]], Optional[Path]]:
        """Load content from the supported input types.

        Returns
        -------
        tuple
            The text (or the list of lines as given) and the path it was
            read from, when it came from a file

        Raises
        ------
        FileNotFoundError
            If a Path does not exist
        FileAccessError
            If a Path cannot be read

        """
        if isinstance(input_data, list):
            return input_data, None
        if isinstance(input_data, bytes):
            return decode_source(input_data), None
        if isinstance(input_data, Path):
            return BaseParser._read_path(input_data), input_data
        if isinstance(input_data, str):
            return input_data, None
        # File-like object (handles both binary and text mode)
        name = getattr(input_data, "name", None)
        path = Path(name) if isinstance(name, str) and Path(name).is_file() else None
        return normalize_stream_to_text(input_data), path

    @staticmethod
    def _read_path(path: Path) -> str:
        if not path.exists():
            raise FileNotFoundError(str(path))
        try:
            return decode_source(path.read_bytes())
        except OSError as e:
            raise FileAccessError(str(path), original_error=e) from e
