#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/inline.py
"""Inline nodes and the converters that turn them into text.

The substitution pipeline recognizes inline constructs (quoted text,
anchors, images, footnotes and so on) and hands each one to an
:class:`InlineConverter` as an :class:`InlineNode`. The converter decides
how the construct is rendered. :class:`DefaultInlineConverter` emits a
neutral HTML flavored markup so substituted text is observable without a
full output backend.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from adoc2ast.ast.nodes import AbstractBlock

logger = logging.getLogger(__name__)

_QUOTE_TAGS = {
    "emphasis": ("<em>", "</em>"),
    "strong": ("<strong>", "</strong>"),
    "monospaced": ("<code>", "</code>"),
    "superscript": ("<sup>", "</sup>"),
    "subscript": ("<sub>", "</sub>"),
    "mark": ("<mark>", "</mark>"),
    "double": ("&#8220;", "&#8221;"),
    "single": ("&#8216;", "&#8217;"),
    "asciimath": ("\\$", "\\$"),
    "latexmath": ("\\(", "\\)"),
}


@dataclass
class InlineNode:
    """An inline construct found while substituting text.

    Parameters
    ----------
    context : str
        ``quoted``, ``anchor``, ``image``, ``footnote``, ``indexterm``,
        ``kbd``, ``button``, ``menu``, ``callout`` or ``break``
    text : str or None
        Already substituted text of the construct
    type : str or None
        Variant within the context (``strong``, ``link``, ``xref``, ...)
    target : str or None
        Link, image or reference target
    id : str or None
        Id assigned to the construct
    attributes : dict
        Additional attributes parsed from the construct
    parent : AbstractBlock or None
        Block whose text contains the construct

    """

    context: str
    text: Optional[str] = None
    type: Optional[str] = None
    target: Optional[str] = None
    id: Optional[str] = None
    attributes: dict[Any, Any] = field(default_factory=dict)
    parent: Optional["AbstractBlock"] = field(default=None, repr=False, compare=False)

    @property
    def role(self) -> Optional[str]:
        return self.attributes.get("role")

    def attr(self, name: Any, default: Any = None) -> Any:
        return self.attributes.get(name, default)


@runtime_checkable
class InlineConverter(Protocol):
    """Turns inline nodes into text."""

    def convert(self, node: InlineNode) -> str:
        """Render ``node`` as text."""
        ...

    def highlight(self, source: str, language: Optional[str], block: Optional["AbstractBlock"]) -> str:
        """Render verbatim source for the ``highlight`` substitution."""
        ...


class DefaultInlineConverter:
    """Render inline nodes as minimal HTML flavored markup.

    Each context is handled by a ``convert_<context>`` method; unknown
    contexts fall back to the node text.
    """

    def convert(self, node: InlineNode) -> str:
        handler = getattr(self, f"convert_{node.context}", None)
        if handler is None:
            logger.debug("No inline handler for context %r", node.context)
            return node.text or ""
        return handler(node)

    def highlight(self, source: str, language: Optional[str], block: Optional["AbstractBlock"]) -> str:
        return source.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")

    # -- contexts -------------------------------------------------------------

    def convert_quoted(self, node: InlineNode) -> str:
        text = node.text or ""
        anchor = f'<a id="{node.id}"></a>' if node.id else ""
        tags = _QUOTE_TAGS.get(node.type or "")
        if tags is None:
            if node.role:
                return f'{anchor}<span class="{node.role}">{text}</span>'
            return f"{anchor}{text}"
        open_tag, close_tag = tags
        if node.role and open_tag.startswith("<"):
            open_tag = f'{open_tag[:-1]} class="{node.role}">'
        return f"{anchor}{open_tag}{text}{close_tag}"

    def convert_anchor(self, node: InlineNode) -> str:
        if node.type == "link":
            role = f' class="{node.role}"' if node.role else ""
            window = f' target="{node.attr("window")}"' if node.attr("window") else ""
            return f'<a href="{node.target}"{role}{window}>{node.text}</a>'
        if node.type == "xref":
            text = node.text or f"[{node.attr('refid') or node.target}]"
            return f'<a href="{node.target}">{text}</a>'
        if node.type == "ref":
            return f'<a id="{node.id}"></a>'
        if node.type == "bibref":
            return f'<a id="{node.id}"></a>[{node.text or node.id}]'
        logger.warning("Unknown anchor type: %s", node.type)
        return node.text or ""

    def convert_image(self, node: InlineNode) -> str:
        alt = node.attr("alt") or ""
        if node.type == "icon":
            return f'<span class="icon">[{alt}]</span>'
        size = "".join(
            f' {name}="{node.attr(name)}"' for name in ("width", "height") if node.attr(name) is not None
        )
        return f'<span class="image"><img src="{node.target}" alt="{html.escape(alt)}"{size}></span>'

    def convert_footnote(self, node: InlineNode) -> str:
        index = node.attr("index")
        if index is None:
            return f'<sup class="footnoteref">[{node.text}]</sup>'
        return f'<sup class="footnote">[<a href="#_footnotedef_{index}">{index}</a>]</sup>'

    def convert_indexterm(self, node: InlineNode) -> str:
        return node.text or "" if node.type == "visible" else ""

    def convert_kbd(self, node: InlineNode) -> str:
        keys = node.attr("keys") or []
        return "+".join(f"<kbd>{key}</kbd>" for key in keys)

    def convert_button(self, node: InlineNode) -> str:
        return f'<b class="button">{node.text}</b>'

    def convert_menu(self, node: InlineNode) -> str:
        parts = [node.attr("menu")] + list(node.attr("submenus") or [])
        if node.attr("menuitem"):
            parts.append(node.attr("menuitem"))
        return '<span class="menuseq">' + "&#160;&#9656; ".join(f"<b>{part}</b>" for part in parts) + "</span>"

    def convert_callout(self, node: InlineNode) -> str:
        return f'<b class="conum">({node.text})</b>'

    def convert_break(self, node: InlineNode) -> str:
        return f"{node.text}<br>"
