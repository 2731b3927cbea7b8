#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/extensions.py
"""Extension hooks consulted by the block parser and the substitution pipeline.

Three kinds of processors can be registered:

- block processors, selected by the style of a paragraph or delimited block
  (``[shout]``) and given a reader over the block content
- block macro processors, selected by the name of a ``name::target[attrs]``
  line
- inline macro processors, matched against text by their own pattern while
  the ``macros`` substitution runs

Processors are plain objects satisfying the protocols below. The parser
invokes them synchronously and splices the result into the tree; a
processor returning None drops the construct.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Protocol, Sequence, Union, runtime_checkable

if TYPE_CHECKING:
    from adoc2ast.ast.nodes import AbstractBlock
    from adoc2ast.inline import InlineNode
    from adoc2ast.reader import LineReader

logger = logging.getLogger(__name__)


@runtime_checkable
class BlockProcessor(Protocol):
    """Handles paragraphs and delimited blocks carrying a registered style.

    Attributes
    ----------
    name : str
        Style name that selects the processor
    contexts : sequence of str
        Block contexts the processor accepts (``paragraph``, ``open``,
        ``example``, ``listing``, ``literal``, ``pass``, ``quote``, ``sidebar``)
    content_model : str
        ``compound``, ``simple``, ``verbatim``, ``raw`` or ``empty``
    positional_attributes : sequence of str
        Names assigned to positional attributes after the style

    """

    name: str
    contexts: Sequence[str]
    content_model: str
    positional_attributes: Sequence[str]

    def process(
        self, parent: "AbstractBlock", reader: "LineReader", attributes: dict[Any, Any]
    ) -> Optional["AbstractBlock"]: ...


@runtime_checkable
class BlockMacroProcessor(Protocol):
    """Handles ``name::target[attributes]`` lines."""

    name: str
    positional_attributes: Sequence[str]

    def process(self, parent: "AbstractBlock", target: str, attributes: dict[Any, Any]) -> Optional["AbstractBlock"]: ...


@runtime_checkable
class InlineMacroProcessor(Protocol):
    """Handles inline macros matched by ``regexp``.

    The pattern's first group (or the named group ``target``) is the target
    and its second group (or ``content``) the bracket content. With a
    ``content_model`` of ``attributes`` the content is parsed as an
    attribute list, otherwise it is passed as the ``text`` attribute.
    """

    name: str
    regexp: re.Pattern[str]
    content_model: str
    positional_attributes: Sequence[str]

    def process(
        self, parent: Optional["AbstractBlock"], target: Optional[str], attributes: dict[Any, Any]
    ) -> Union["InlineNode", str, None]: ...


def inline_macro_pattern(name: str, short_form: bool = False) -> re.Pattern[str]:
    """Build the conventional pattern for an inline macro named ``name``.

    The long form is ``name:target[content]``; the short form is
    ``name:[content]``. A leading backslash escapes the macro.
    """
    escaped = re.escape(name)
    if short_form:
        return re.compile(rf"\\?{escaped}:()\[(|.*?[^\\])\]", re.S)
    return re.compile(rf"\\?{escaped}:(\S+?)\[(|.*?[^\\])\]", re.S)


@dataclass
class ExtensionRegistry:
    """In-memory registry of block, block macro and inline macro processors."""

    blocks: dict[str, BlockProcessor] = field(default_factory=dict)
    block_macros: dict[str, BlockMacroProcessor] = field(default_factory=dict)
    inline_macros: list[InlineMacroProcessor] = field(default_factory=list)

    def register_block(self, processor: BlockProcessor) -> None:
        if processor.name in self.blocks:
            logger.debug(f"Replacing block processor: {processor.name}")
        self.blocks[processor.name] = processor

    def register_block_macro(self, processor: BlockMacroProcessor) -> None:
        if processor.name in self.block_macros:
            logger.debug(f"Replacing block macro processor: {processor.name}")
        self.block_macros[processor.name] = processor

    def register_inline_macro(self, processor: InlineMacroProcessor) -> None:
        self.inline_macros = [existing for existing in self.inline_macros if existing.name != processor.name]
        self.inline_macros.append(processor)

    def unregister(self, name: str) -> bool:
        """Remove every processor registered under ``name``.

        Returns
        -------
        bool
            True if anything was removed

        """
        removed = self.blocks.pop(name, None) is not None
        removed = (self.block_macros.pop(name, None) is not None) or removed
        remaining = [processor for processor in self.inline_macros if processor.name != name]
        removed = removed or len(remaining) != len(self.inline_macros)
        self.inline_macros = remaining
        return removed

    def find_block(self, name: Optional[str], context: str) -> Optional[BlockProcessor]:
        """Return the block processor for a style, if it accepts ``context``."""
        if not name:
            return None
        processor = self.blocks.get(name)
        if processor is not None and context in processor.contexts:
            return processor
        return None

    def has_block(self, name: Optional[str]) -> bool:
        return bool(name) and name in self.blocks

    def find_block_macro(self, name: str) -> Optional[BlockMacroProcessor]:
        return self.block_macros.get(name)

    def has_inline_macros(self) -> bool:
        return bool(self.inline_macros)
