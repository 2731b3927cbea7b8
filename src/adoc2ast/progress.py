#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/progress.py
"""Progress callback system for document parsing.

Embedding applications can pass a callback to a parser to follow a long
conversion (large documents, deep include trees).

Examples
--------
    >>> from adoc2ast.parsers.asciidoc import AsciiDocParser
    >>> from adoc2ast.progress import ProgressEvent
    >>>
    >>> def on_progress(event: ProgressEvent) -> None:
    ...     print(event)
    >>>
    >>> document = AsciiDocParser(progress_callback=on_progress).parse("= Title")

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Literal

EventType = Literal["started", "item_done", "detected", "finished", "error"]


@dataclass
class ProgressEvent:
    """Progress event emitted while a document is parsed.

    Parameters
    ----------
    event_type : EventType
        ``started`` when parsing begins, ``item_done`` when a stage (the
        header, a top-level block) completes, ``detected`` for notable
        structures, ``finished`` at the end and ``error`` when a stage fails
    message : str
        Human-readable description of the event
    current : int, default 0
        Current progress position
    total : int, default 0
        Total items to process, 0 if unknown
    metadata : dict, default empty
        Additional event-specific information such as ``item_type``

    """

    event_type: EventType
    message: str
    current: int = 0
    total: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Return human-readable string representation."""
        progress = f"({self.current}/{self.total})" if self.total > 0 else ""
        return f"[{self.event_type.upper()}] {self.message} {progress}".strip()


ProgressCallback = Callable[[ProgressEvent], None]
