#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/ast/nodes.py
"""AST node classes for parsed AsciiDoc documents.

This module defines the node model produced by the block parser. Every block
carries a ``context`` tag drawn from the closed :class:`BlockContext` set and
a :class:`ContentModel` that decides which default substitutions apply and
whether children may nest.

Node Hierarchy
--------------
All nodes inherit from the base Node class and support the visitor pattern.

Structural nodes:
    - Document, Section, Block
    - List, ListItem, DescriptionListEntry
    - Table, Column, Cell

Records:
    - SourceLocation, AttributeEntry, Footnote, Catalog

Document-wide state (attributes, counters, references and callouts) lives on
the Document only. Parsing and substitution code receives the Document as an
explicit handle; blocks keep a ``parent`` link for structure, never for state.

"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterator, Optional, Union

from adoc2ast.callouts import Callouts
from adoc2ast.constants import (
    DEFAULT_DOCUMENT_ATTRIBUTES,
    FLEXIBLE_ATTRIBUTES,
    SAFE_MODE_LOCKED_ATTRIBUTES,
    SafeMode,
)
from adoc2ast.options.asciidoc import AsciiDocOptions
from adoc2ast.utils.text import sanitize_attribute_name, to_int

if TYPE_CHECKING:
    from adoc2ast.substitutors import SubstitutionPipeline

logger = logging.getLogger(__name__)


class BlockContext(Enum):
    """Closed set of block kinds the parser can produce."""

    DOCUMENT = "document"
    SECTION = "section"
    PREAMBLE = "preamble"
    PARAGRAPH = "paragraph"
    ADMONITION = "admonition"
    LISTING = "listing"
    LITERAL = "literal"
    PASS = "pass"
    STEM = "stem"
    EXAMPLE = "example"
    SIDEBAR = "sidebar"
    OPEN = "open"
    QUOTE = "quote"
    VERSE = "verse"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    TOC = "toc"
    THEMATIC_BREAK = "thematic_break"
    PAGE_BREAK = "page_break"
    FLOATING_TITLE = "floating_title"
    ULIST = "ulist"
    OLIST = "olist"
    DLIST = "dlist"
    COLIST = "colist"
    LIST_ITEM = "list_item"
    TABLE = "table"


class ContentModel(Enum):
    """How the body of a block is treated."""

    COMPOUND = "compound"
    SIMPLE = "simple"
    VERBATIM = "verbatim"
    RAW = "raw"
    EMPTY = "empty"


@dataclass
class SourceLocation:
    """Source location information for AST nodes.

    Parameters
    ----------
    format : str
        Source format, always ``"asciidoc"`` for this parser
    line : int or None, default = None
        1-based line number the node starts on
    path : str or None, default = None
        File the node originated from (None for string input)
    metadata : dict, default = empty dict
        Additional location information

    """

    format: str
    line: Optional[int] = None
    path: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class AttributeEntry:
    """An attribute assignment recorded for playback when its block is reached.

    Parameters
    ----------
    name : str
        Attribute name
    value : str or None
        Assigned value; None when the entry unsets the attribute

    """

    name: str
    value: Optional[str]

    @property
    def negate(self) -> bool:
        return self.value is None

    def save_to(self, attributes: dict[Any, Any]) -> "AttributeEntry":
        """Append this entry to the ``attribute_entries`` list of a block's attributes."""
        attributes.setdefault("attribute_entries", []).append(self)
        return self


@dataclass
class Footnote:
    """A footnote collected while substituting inline text."""

    index: Optional[int]
    id: Optional[str]
    text: str


@dataclass
class Catalog:
    """References collected while a document is parsed and substituted.

    Parameters
    ----------
    ids : dict
        Registered id to reftext (None when no reftext is known)
    footnotes : list of Footnote
        Numbered footnotes in order of appearance
    links, images : list of str
        Link and image targets in order of appearance
    indexterms : list of list of str
        Index term groups
    includes : list of str
        Names (without extension) of included files
    refs : dict
        Registered id to the node that owns it

    """

    ids: dict[str, Optional[str]] = field(default_factory=dict)
    footnotes: list[Footnote] = field(default_factory=list)
    links: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    indexterms: list[list[str]] = field(default_factory=list)
    includes: list[str] = field(default_factory=list)
    refs: dict[str, "Node"] = field(default_factory=dict)

    def register(self, kind: str, value: Any) -> Any:
        """Append ``value`` to the ``kind`` collection unless an equal entry is already there.

        Repeated render passes substitute the same text again, so
        registration must not duplicate entries.
        """
        collection = getattr(self, kind)
        if value not in collection:
            collection.append(value)
        return value


class Node(ABC):
    """Base class for all AST nodes.

    Parameters
    ----------
    metadata : dict, default = empty dict
        Arbitrary metadata associated with this node
    source_location : SourceLocation or None, default = None
        Information about where this node came from in the source

    """

    metadata: dict[str, Any]
    source_location: Optional[SourceLocation]

    @abstractmethod
    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this node.

        Parameters
        ----------
        visitor : Any
            A visitor object with visit_* methods

        Returns
        -------
        Any
            Result from the visitor's processing

        """
        pass


# ============================================================================
# Blocks
# ============================================================================


@dataclass(eq=False)
class AbstractBlock(Node):
    """Common record shared by every block-level node.

    Parameters
    ----------
    context : BlockContext
        The kind of block
    content_model : ContentModel
        Treatment of the block body
    attributes : dict
        Parsed block attributes; positional attributes use integer keys
    id : str or None
        Block id, registered in the document catalog
    style : str or None
        First positional attribute once resolved against known styles
    title : str or None
        Raw (unsubstituted) block title
    blocks : list of AbstractBlock
        Child blocks, in source order
    subs : list of str
        Substitutions locked in for this block
    default_subs : list of str or None
        Substitutions that override the content-model default
    caption : str or None
        Caption prefix assigned to titled blocks, such as ``"Table 1. "``
    numeral : str or None
        Number (or letter) the caption or section number is built from
    parent : AbstractBlock or None
        Structural parent (not part of equality or repr)

    """

    context: BlockContext = BlockContext.PARAGRAPH
    content_model: ContentModel = ContentModel.COMPOUND
    attributes: dict[Any, Any] = field(default_factory=dict)
    id: Optional[str] = None
    style: Optional[str] = None
    title: Optional[str] = None
    blocks: list["AbstractBlock"] = field(default_factory=list)
    subs: list[str] = field(default_factory=list)
    default_subs: Optional[list[str]] = None
    caption: Optional[str] = None
    numeral: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None
    parent: Optional["AbstractBlock"] = field(default=None, repr=False, compare=False)
    converted_title: Optional[str] = field(default=None, repr=False, compare=False)

    @property
    def context_name(self) -> str:
        return self.context.value

    def append(self, block: "AbstractBlock") -> "AbstractBlock":
        """Attach a child block, setting its parent link."""
        block.parent = self
        self.blocks.append(block)
        return block

    def attr(self, name: Any, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    def option(self, name: str) -> bool:
        """Return True if the ``<name>-option`` flag is set."""
        return f"{name}-option" in self.attributes

    def set_option(self, name: str) -> None:
        self.attributes[f"{name}-option"] = ""

    @property
    def role(self) -> Optional[str]:
        return self.attributes.get("role")

    @property
    def roles(self) -> list[str]:
        role = self.role
        return role.split() if role else []

    def iter_blocks(self) -> Iterator["AbstractBlock"]:
        """Yield this block and every descendant block, depth first in source order."""
        yield self
        for child in self._children():
            yield from child.iter_blocks()

    def find_by(
        self, context: Optional[BlockContext] = None, style: Optional[str] = None, role: Optional[str] = None
    ) -> list["AbstractBlock"]:
        """Collect descendant blocks (including self) matching every given selector."""
        found = []
        for block in self.iter_blocks():
            if context is not None and block.context is not context:
                continue
            if style is not None and block.style != style:
                continue
            if role is not None and role not in block.roles:
                continue
            found.append(block)
        return found

    def _children(self) -> list["AbstractBlock"]:
        return list(self.blocks)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} context={self.context.value} style={self.style!r} id={self.id!r}>"


@dataclass(eq=False, repr=False)
class Block(AbstractBlock):
    """Generic leaf or compound block (paragraph, listing, example, image, ...).

    Parameters
    ----------
    lines : list of str
        Raw source lines for simple, verbatim and raw content
    level : int or None
        Heading level of a floating title

    """

    lines: list[str] = field(default_factory=list)
    level: Optional[int] = None

    @property
    def source(self) -> str:
        """The raw source lines joined with newlines."""
        return "\n".join(self.lines)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor, dispatching to ``visit_block``."""
        return visitor.visit_block(self)


@dataclass(eq=False, repr=False)
class Section(AbstractBlock):
    """A section with a heading level and child blocks.

    Parameters
    ----------
    level : int
        0 for the document title or a book part, otherwise 1-5
    index : int
        Ordinal among sibling sections
    sectname : str
        ``section``, ``part`` or a special section style such as ``appendix``
    special : bool
        Whether the section is a special section
    numbered : bool
        Whether the section participates in numbering
    number : str or None
        Assigned section number such as ``"2.1."``

    """

    context: BlockContext = BlockContext.SECTION
    level: int = 1
    index: int = 0
    sectname: str = "section"
    special: bool = False
    numbered: bool = False
    number: Optional[str] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor, dispatching to ``visit_section``."""
        return visitor.visit_section(self)

    def __repr__(self) -> str:
        return f"<Section level={self.level} title={self.title!r} id={self.id!r}>"


@dataclass(eq=False, repr=False)
class ListItem(AbstractBlock):
    """An item of an unordered, ordered, callout or description list.

    Parameters
    ----------
    marker : str or None
        Canonical sibling marker (``*``, ``.``, ``1.``, ``<1>`` ...), or the
        term delimiter (``::``, ``;;`` ...) in a description list
    text : str or None
        Raw principal text of the item; None when the item has no inline text

    """

    context: BlockContext = BlockContext.LIST_ITEM
    marker: Optional[str] = None
    text: Optional[str] = None

    def has_text(self) -> bool:
        return bool(self.text)

    @property
    def simple(self) -> bool:
        """True when the item has no attached blocks beyond a single nested list."""
        if not self.blocks:
            return True
        return len(self.blocks) == 1 and isinstance(self.blocks[0], List) and self.blocks[0].outline

    @property
    def compound(self) -> bool:
        return not self.simple

    def fold_first(self, continuation_connects_first_block: bool = False, content_adjacent: bool = False) -> None:
        """Fold an adjacent paragraph into the item text."""
        if not self.blocks:
            return
        first = self.blocks[0]
        if not isinstance(first, Block):
            return
        if first.context is BlockContext.PARAGRAPH:
            fold = not continuation_connects_first_block
        elif first.context is BlockContext.LITERAL and first.option("listparagraph"):
            fold = content_adjacent or not continuation_connects_first_block
        else:
            fold = False
        if fold:
            self.blocks.pop(0)
            text = "\n".join(first.lines)
            self.text = f"{self.text}\n{text}" if self.text else text

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor, dispatching to ``visit_list_item``."""
        return visitor.visit_list_item(self)

    def __repr__(self) -> str:
        return f"<ListItem marker={self.marker!r} text={self.text!r}>"


@dataclass(eq=False)
class DescriptionListEntry:
    """A description list entry: one or more terms and an optional description."""

    terms: list[ListItem] = field(default_factory=list)
    description: Optional[ListItem] = None


ListEntry = Union[ListItem, DescriptionListEntry]


@dataclass(eq=False, repr=False)
class List(AbstractBlock):
    """An unordered, ordered, description or callout list.

    Parameters
    ----------
    items : list
        ListItem objects, or DescriptionListEntry objects for description lists
    level : int
        Nesting depth among lists of the same kind, starting at 1

    """

    context: BlockContext = BlockContext.ULIST
    items: list[Any] = field(default_factory=list)
    level: int = 1

    @property
    def outline(self) -> bool:
        return self.context in (BlockContext.ULIST, BlockContext.OLIST)

    def add_item(self, item: ListEntry) -> ListEntry:
        """Append an item (or description list entry), linking its nodes to this list."""
        if isinstance(item, DescriptionListEntry):
            for term in item.terms:
                term.parent = self
            if item.description is not None:
                item.description.parent = self
        else:
            item.parent = self
        self.items.append(item)
        return item

    def _children(self) -> list[AbstractBlock]:
        children: list[AbstractBlock] = []
        for item in self.items:
            if isinstance(item, DescriptionListEntry):
                children.extend(item.terms)
                if item.description is not None:
                    children.append(item.description)
            else:
                children.append(item)
        return children

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor, dispatching to ``visit_list``."""
        return visitor.visit_list(self)

    def __repr__(self) -> str:
        return f"<List context={self.context.value} items={len(self.items)}>"


# ============================================================================
# Tables
# ============================================================================


@dataclass(eq=False)
class Column(Node):
    """A table column.

    Parameters
    ----------
    attributes : dict
        ``colnumber``, ``width``, ``halign``, ``valign``, ``colpcwidth``
    style : str or None
        Default text style for cells in this column

    """

    attributes: dict[str, Any] = field(default_factory=dict)
    style: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor, dispatching to ``visit_column``."""
        return visitor.visit_column(self)


@dataclass(eq=False)
class Cell(Node):
    """A table cell.

    Parameters
    ----------
    text : str
        Raw (unsubstituted) cell text
    column : Column or None
        The column this cell belongs to
    style : str or None
        Resolved text style (``asciidoc``, ``literal``, ``header``, ...)
    attributes : dict
        ``colspan``, ``rowspan``, ``halign``, ``valign`` and friends
    inner_document : Document or None
        Nested document for ``asciidoc`` styled cells

    """

    text: str = ""
    column: Optional[Column] = field(default=None, repr=False)
    style: Optional[str] = None
    attributes: dict[str, Any] = field(default_factory=dict)
    inner_document: Optional["Document"] = field(default=None, repr=False)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    @property
    def colspan(self) -> int:
        return int(self.attributes.get("colspan", 1))

    @property
    def rowspan(self) -> int:
        return int(self.attributes.get("rowspan", 1))

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor, dispatching to ``visit_cell``."""
        return visitor.visit_cell(self)


@dataclass
class TableRows:
    """The three row groups of a table."""

    head: list[list[Cell]] = field(default_factory=list)
    body: list[list[Cell]] = field(default_factory=list)
    foot: list[list[Cell]] = field(default_factory=list)

    def by_section(self) -> list[tuple[str, list[list[Cell]]]]:
        return [("head", self.head), ("body", self.body), ("foot", self.foot)]


@dataclass(eq=False, repr=False)
class Table(AbstractBlock):
    """A table block with columns and head, body and foot rows."""

    context: BlockContext = BlockContext.TABLE
    columns: list[Column] = field(default_factory=list)
    rows: TableRows = field(default_factory=TableRows)
    has_header_option: bool = False

    def _children(self) -> list[AbstractBlock]:
        children: list[AbstractBlock] = []
        for _, rows in self.rows.by_section():
            for row in rows:
                for cell in row:
                    if cell.inner_document is not None:
                        children.append(cell.inner_document)
        return children

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor, dispatching to ``visit_table``."""
        return visitor.visit_table(self)


# ============================================================================
# Document
# ============================================================================


@dataclass(eq=False, repr=False)
class Document(AbstractBlock):
    """Root node owning document-wide attributes, references, counters and callouts.

    A Document is created once per conversion (and once per ``asciidoc``
    table cell, as a nested document linked to its parent). Attributes
    mutate during parsing; a snapshot is saved after the header and restored
    before every render pass so repeated passes are idempotent.

    Parameters
    ----------
    options : AsciiDocOptions
        Options for this conversion
    document_attributes : dict
        Document attributes (name to text value)
    attribute_overrides : dict
        Attributes locked by the API; None marks a locked unset attribute
    catalog : Catalog
        Collected references
    counters : dict
        Counter name to current value
    callouts : Callouts
        Callout id registry
    parent_document : Document or None
        Enclosing document for nested documents
    header : Section or None
        Level-0 document title section, when the document has a header

    """

    context: BlockContext = BlockContext.DOCUMENT
    options: AsciiDocOptions = field(default_factory=AsciiDocOptions, repr=False)
    document_attributes: dict[str, str] = field(default_factory=dict)
    attribute_overrides: dict[str, Optional[str]] = field(default_factory=dict)
    catalog: Catalog = field(default_factory=Catalog)
    counters: dict[str, Union[int, str]] = field(default_factory=dict)
    callouts: Callouts = field(default_factory=Callouts)
    parent_document: Optional["Document"] = field(default=None, repr=False)
    header: Optional[Section] = None
    saved_attributes: Optional[dict[str, str]] = field(default=None, repr=False)
    header_attributes: Optional[dict[str, str]] = field(default=None, repr=False)
    _substitutor: Optional["SubstitutionPipeline"] = field(default=None, init=False, repr=False)

    @classmethod
    def create(
        cls,
        options: Optional[AsciiDocOptions] = None,
        parent_document: Optional["Document"] = None,
        docfile: Optional[str] = None,
        base_dir: Optional[str] = None,
    ) -> "Document":
        """Create a document with default, safe-mode and API-level attributes applied.

        Parameters
        ----------
        options : AsciiDocOptions, optional
            Conversion options
        parent_document : Document, optional
            Parent document; a nested document inherits its attributes,
            catalog and counters
        docfile : str, optional
            Path of the source file, used for ``docfile``/``docdir``/``docname``
        base_dir : str, optional
            Resolved base directory

        Returns
        -------
        Document
            The new, empty document

        """
        options = options or AsciiDocOptions()
        if parent_document is not None:
            doc = cls(
                options=parent_document.options,
                document_attributes=dict(parent_document.document_attributes),
                attribute_overrides=dict(parent_document.attribute_overrides),
                catalog=parent_document.catalog,
                counters=parent_document.counters,
                callouts=Callouts(),
                parent_document=parent_document,
            )
            for name in ("doctitle", "toc", "notitle", "showtitle"):
                doc.document_attributes.pop(name, None)
            return doc

        doc = cls(options=options)
        attrs = doc.document_attributes
        attrs.update(DEFAULT_DOCUMENT_ATTRIBUTES)
        attrs["attribute-missing"] = options.attribute_missing
        attrs["attribute-undefined"] = options.attribute_undefined
        attrs["doctype"] = options.doctype
        if options.compat_mode:
            attrs["compat-mode"] = ""

        safe_mode = options.safe_mode
        attrs["safe-mode-name"] = safe_mode.name.lower()
        attrs[f"safe-mode-{safe_mode.name.lower()}"] = ""
        attrs["safe-mode-level"] = str(int(safe_mode))
        attrs["max-include-depth"] = str(options.max_include_depth)

        if base_dir is not None:
            attrs["docdir"] = base_dir
        if docfile is not None:
            attrs["docfile"] = docfile
            name = docfile.replace("\\", "/").rsplit("/", 1)[-1]
            attrs["docname"] = name.rsplit(".", 1)[0] if "." in name else name
            attrs["docfilesuffix"] = f".{name.rsplit('.', 1)[1]}" if "." in name else ""

        overrides = doc.attribute_overrides
        if safe_mode >= SafeMode.SERVER:
            for name in SAFE_MODE_LOCKED_ATTRIBUTES:
                overrides.setdefault(name, attrs.get(name))

        for name, value in options.attributes.items():
            if name.endswith("!"):
                name, value = name[:-1], None
            elif name.startswith("!"):
                name, value = name[1:], None
            if value is not None and value.endswith("@"):
                attrs[name] = value[:-1]
                overrides.pop(name, None)
                continue
            overrides[name] = value
            if value is None:
                attrs.pop(name, None)
            else:
                attrs[name] = value
        return doc

    # -- attributes ---------------------------------------------------------

    @property
    def doctype(self) -> str:
        return self.document_attributes.get("doctype", "article")

    @property
    def nested(self) -> bool:
        return self.parent_document is not None

    @property
    def safe_mode(self) -> SafeMode:
        return self.options.safe_mode

    @property
    def compat_mode(self) -> bool:
        return "compat-mode" in self.document_attributes

    def doc_attr(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.document_attributes.get(name, default)

    def has_doc_attr(self, name: str) -> bool:
        return name in self.document_attributes

    def is_attribute_locked(self, name: str) -> bool:
        return name in self.attribute_overrides

    def set_attribute(self, name: str, value: str = "") -> Optional[str]:
        """Assign a document attribute unless it is locked.

        The value goes through the header substitutions, or through the
        substitutions named by a ``pass:<subs>[...]`` wrapper.

        Returns
        -------
        str or None
            The value stored, or None when the attribute is locked

        """
        if self.is_attribute_locked(name):
            return None
        if value:
            value = self.substitutor.apply_attribute_value_subs(value)
        self.document_attributes[name] = value
        return value

    def delete_attribute(self, name: str) -> bool:
        """Unset a document attribute unless it is locked."""
        if self.is_attribute_locked(name):
            return False
        self.document_attributes.pop(name, None)
        return True

    def store_attribute(
        self, name: str, value: Optional[str], attributes: Optional[dict[Any, Any]] = None
    ) -> tuple[str, Optional[str]]:
        """Apply an attribute entry to the document.

        A name starting or ending with ``!`` unsets the attribute. When a
        block ``attributes`` mapping is given, the effective change is also
        recorded there as an :class:`AttributeEntry` for playback.

        Returns
        -------
        tuple of (str, str or None)
            The sanitized name and the stored value (None for an unset)

        """
        if name.endswith("!"):
            name, value = name[:-1], None
        elif name.startswith("!"):
            name, value = name[1:], None

        name = sanitize_attribute_name(name)
        if name == "numbered":
            name = "sectnums"
        elif name == "hardbreaks":
            name = "hardbreaks-option"

        if value is not None:
            if name == "leveloffset" and value[:1] in ("+", "-"):
                current = to_int(self.document_attributes.get("leveloffset", "0"))
                delta = to_int(value[1:])
                value = str(current + delta if value[0] == "+" else current - delta)
            resolved = self.set_attribute(name, value)
            if resolved is not None:
                value = resolved
                if attributes is not None:
                    AttributeEntry(name, value).save_to(attributes)
        elif self.delete_attribute(name) and attributes is not None:
            AttributeEntry(name, None).save_to(attributes)
        return name, value

    def save_attributes(self) -> None:
        """Snapshot the attributes once the header has been parsed."""
        self.header_attributes = dict(self.document_attributes)
        self.saved_attributes = dict(self.document_attributes)
        # API overrides of flexible attributes only bind the header
        for name in FLEXIBLE_ATTRIBUTES:
            self.attribute_overrides.pop(name, None)

    def restore_attributes(self) -> None:
        """Restore the saved header snapshot before a render pass."""
        self.callouts.rewind()
        if self.saved_attributes is not None:
            self.document_attributes = dict(self.saved_attributes)

    def playback_attributes(self, block_attributes: dict[Any, Any]) -> None:
        """Replay attribute entries captured on a block onto the document."""
        for entry in block_attributes.get("attribute_entries", ()):
            if entry.negate:
                self.document_attributes.pop(entry.name, None)
            else:
                self.document_attributes[entry.name] = entry.value

    # -- counters -----------------------------------------------------------

    def counter(self, name: str, seed: Optional[str] = None) -> Union[int, str]:
        """Advance the named counter and return its new value.

        Numeric counters count up by one; single-letter counters advance to
        the next character. A seed sets the first value of a new counter.
        """
        if self.parent_document is not None:
            return self.parent_document.counter(name, seed)
        current = self.counters.get(name)
        if current is not None and self.document_attributes.get(name):
            value = _next_counter_value(current)
        elif seed is not None:
            value = int(seed) if seed.isdigit() else seed
        else:
            value = 1
        self.counters[name] = value
        self.document_attributes[name] = str(value)
        return value

    # -- references ---------------------------------------------------------

    def register_id(self, block_id: str, reftext: Optional[str] = None, node: Optional[Node] = None) -> bool:
        """Register an id in the catalog; return False when it is already taken."""
        if block_id in self.catalog.ids:
            return False
        self.catalog.ids[block_id] = reftext
        if node is not None:
            self.catalog.refs[block_id] = node
        return True

    @property
    def footnotes(self) -> list[Footnote]:
        return self.catalog.footnotes

    @property
    def doctitle(self) -> Optional[str]:
        """Raw document title from the header, or the first section's title."""
        if self.header is not None and self.header.title:
            return self.header.title
        title = self.document_attributes.get("doctitle")
        if title:
            return title
        for block in self.blocks:
            if isinstance(block, Section):
                return block.title
        return None

    @property
    def sections(self) -> list[Section]:
        return [block for block in self.blocks if isinstance(block, Section)]

    @property
    def substitutor(self) -> "SubstitutionPipeline":
        """The substitution pipeline bound to this document."""
        if self._substitutor is None:
            from adoc2ast.substitutors import SubstitutionPipeline

            self._substitutor = SubstitutionPipeline(self)
        return self._substitutor

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor, dispatching to ``visit_document``."""
        return visitor.visit_document(self)

    def __repr__(self) -> str:
        return f"<Document doctype={self.doctype} blocks={len(self.blocks)}>"


def _next_counter_value(current: Union[int, str]) -> Union[int, str]:
    if isinstance(current, int):
        return current + 1
    if current.isdigit():
        return int(current) + 1
    return chr(ord(current[-1]) + 1) if current else 1
