#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/utils/encoding.py
"""Character encoding handling for source and include files.

AsciiDoc sources are UTF-8 by definition, so UTF-8 is always tried first.
Files that do not decode as UTF-8 are run through chardet before falling
back to latin-1, which accepts any byte sequence.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO

import chardet

logger = logging.getLogger(__name__)


def detect_encoding(
    data: bytes,
    sample_size: int = 8192,
    confidence_threshold: float = 0.7,
) -> str | None:
    """Detect character encoding of binary data using chardet.

    Parameters
    ----------
    data : bytes
        Binary data to analyze
    sample_size : int, default 8192
        Number of bytes to sample for detection (uses first N bytes)
    confidence_threshold : float, default 0.7
        Minimum confidence level (0.0-1.0) required to trust detection

    Returns
    -------
    str | None
        Detected encoding name, or None when detection fails or the
        confidence is below the threshold

    """
    sample = data[:sample_size]
    result = chardet.detect(sample)
    encoding = result.get("encoding") if result else None
    if not encoding:
        logger.debug("chardet: No encoding detected")
        return None

    confidence = result.get("confidence") or 0.0
    logger.debug("chardet detected encoding: %s (confidence: %.2f)", encoding, confidence)
    if confidence < confidence_threshold:
        logger.debug("chardet confidence %.2f below threshold %s", confidence, confidence_threshold)
        return None
    return encoding


def decode_source(data: bytes, encoding: str | None = None) -> str:
    """Decode source bytes to text.

    Parameters
    ----------
    data : bytes
        Raw file content
    encoding : str, optional
        Encoding requested by the caller (for example the ``encoding``
        attribute of an include directive); tried before anything else

    Returns
    -------
    str
        Decoded text

    """
    candidates: list[str] = []
    if encoding:
        candidates.append(encoding)
    candidates.append("utf-8-sig")

    for candidate in candidates:
        try:
            return data.decode(candidate)
        except UnicodeDecodeError as e:
            logger.debug("Failed to decode with %s: %s", candidate, e)
        except LookupError as e:
            logger.debug("Unknown encoding %s: %s", candidate, e)

    detected = detect_encoding(data)
    if detected:
        try:
            text = data.decode(detected)
            logger.debug("Decoded with chardet-detected encoding: %s", detected)
            return text
        except (UnicodeDecodeError, LookupError) as e:
            logger.debug("Failed to decode with chardet-detected encoding %s: %s", detected, e)

    return data.decode("latin-1")


def read_source_file(path: str | Path, encoding: str | None = None) -> str:
    """Read and decode a source file.

    Raises
    ------
    OSError
        If the file cannot be read

    """
    return decode_source(Path(path).read_bytes(), encoding)


def normalize_stream_to_text(stream: IO[bytes] | IO[str]) -> str:
    """Read a binary or text mode file-like object as text.

    Raises
    ------
    TypeError
        If ``stream.read()`` returns something other than bytes or str

    Examples
    --------
    >>> from io import BytesIO, StringIO
    >>> normalize_stream_to_text(BytesIO(b"= Title"))
    '= Title'
    >>> normalize_stream_to_text(StringIO("= Title"))
    '= Title'

    """
    content = stream.read()

    if isinstance(content, bytes):
        return decode_source(content)
    elif isinstance(content, str):
        return content
    else:
        raise TypeError(f"Stream read() returned unexpected type {type(content).__name__}. Expected bytes or str.")
