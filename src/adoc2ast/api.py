#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/api.py
"""The major exported API functions for parsing AsciiDoc."""

from __future__ import annotations

import logging
from dataclasses import fields
from pathlib import Path
from typing import IO, Any, Optional, Union

from adoc2ast.ast.nodes import Document
from adoc2ast.exceptions import Adoc2AstError, ParsingError
from adoc2ast.options.asciidoc import AsciiDocOptions
from adoc2ast.parsers.asciidoc import AsciiDocParser
from adoc2ast.progress import ProgressCallback

logger = logging.getLogger(__name__)

Source = Union[str, Path, IO[bytes], IO[str], bytes, list[str]]


def _create_options_from_kwargs(options: Optional[AsciiDocOptions], **kwargs: Any) -> Optional[AsciiDocOptions]:
    """Merge keyword arguments into an options object.

    Parameters
    ----------
    options : AsciiDocOptions or None
        Pre-configured options the keyword arguments override
    **kwargs
        Individual option values; unknown names are skipped

    Returns
    -------
    AsciiDocOptions or None
        The merged options, or None when neither options nor keyword
        arguments were given (the parser uses its defaults)

    """
    if not kwargs:
        return options

    option_names = {field.name for field in fields(AsciiDocOptions)}
    valid_kwargs = {k: v for k, v in kwargs.items() if k in option_names}
    missing = [k for k in kwargs if k not in valid_kwargs]
    if missing:
        logger.debug(f"Skipping unknown parser options: {missing}")

    if options is not None:
        return options.create_updated(**valid_kwargs)
    return AsciiDocOptions(**valid_kwargs)


def load(
    source: Source,
    options: Optional[AsciiDocOptions] = None,
    *,
    progress_callback: Optional[ProgressCallback] = None,
    **kwargs: Any,
) -> Document:
    """Parse AsciiDoc source into a Document.

    Parameters
    ----------
    source : str, list of str, bytes, Path or file-like object
        AsciiDoc text, its lines, raw bytes (the encoding is detected), a
        path to read, or an open file in text or binary mode
    options : AsciiDocOptions, optional
        Pre-configured parser options
    progress_callback : ProgressCallback, optional
        Callback receiving ProgressEvent objects while parsing
    kwargs : Any
        Individual parser options that override settings in ``options``

    Returns
    -------
    Document
        The parsed document

    Raises
    ------
    ParsingError
        If parsing fails
    IncludeSecurityError
        If an include escapes the base directory under the server safe mode
    ValueError
        If an option value is invalid

    Examples
    --------
    Parse a string:
        >>> from adoc2ast import load
        >>> doc = load("= Title\\n\\n== Section\\n\\ntext")
        >>> doc.sections[0].title
        'Section'

    Override document attributes:
        >>> doc = load("Hello {name}", attributes={"name": "world"})

    """
    final_options = _create_options_from_kwargs(options, **kwargs)
    parser = AsciiDocParser(options=final_options, progress_callback=progress_callback)
    try:
        return parser.parse(source)
    except Adoc2AstError:
        raise
    except (OSError, UnicodeDecodeError) as e:
        raise ParsingError(f"AsciiDoc parsing failed: {e!r}", parsing_stage="input", original_error=e) from e


def load_file(
    path: Union[str, Path],
    options: Optional[AsciiDocOptions] = None,
    *,
    progress_callback: Optional[ProgressCallback] = None,
    **kwargs: Any,
) -> Document:
    """Parse an AsciiDoc file into a Document.

    The file's directory becomes the base directory for includes unless
    ``base_dir`` is set, and ``docfile``, ``docdir`` and ``docname`` are
    set on the document.

    Parameters
    ----------
    path : str or Path
        File to read
    options : AsciiDocOptions, optional
        Pre-configured parser options
    progress_callback : ProgressCallback, optional
        Callback receiving ProgressEvent objects while parsing
    kwargs : Any
        Individual parser options that override settings in ``options``

    Returns
    -------
    Document
        The parsed document

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    FileAccessError
        If the file cannot be read

    """
    return load(Path(path), options, progress_callback=progress_callback, **kwargs)
