#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/substitutors.py
"""Inline substitution pipeline.

A :class:`SubstitutionPipeline` is bound to one :class:`~adoc2ast.ast.nodes.Document`
and turns raw block text into converted text by running the named
substitutions a block has locked in. Substitutions always run in the
canonical order

    specialcharacters, highlight, quotes, attributes, replacements,
    macros, callouts, post_replacements

regardless of the order they were requested in; ``+``/``-`` modifiers on a
``subs`` attribute only change which of them are selected.

Passthroughs
------------
When ``macros`` is selected, passthrough constructs (``+text+``,
``+++text+++``, ``$$text$$``, ``pass:[text]`` and the stem macros) are cut
out of the text before any other substitution runs. Each is replaced by a
placeholder made of two control characters around a slot index, and its
text is stored together with the substitutions it should receive. After
the pipeline finishes the placeholders are restored from a worklist, so
nested passthroughs never drive native recursion.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Iterable, Match, Optional, Sequence
from urllib.parse import quote

from adoc2ast.attribute_list import AttributeList
from adoc2ast.constants import ASCIIDOC_EXTENSIONS, DEFAULT_STEM_TYPE, INTRINSIC_ATTRIBUTES, STEM_TYPE_ALIASES
from adoc2ast.inline import DefaultInlineConverter, InlineConverter, InlineNode
from adoc2ast.utils.text import basename

if TYPE_CHECKING:
    from adoc2ast.ast.nodes import AbstractBlock, Cell, Document, ListItem

logger = logging.getLogger(__name__)

# -- substitution tables -----------------------------------------------------

BASIC_SUBS: tuple[str, ...] = ("specialcharacters",)
HEADER_SUBS: tuple[str, ...] = ("specialcharacters", "attributes")
NO_SUBS: tuple[str, ...] = ()
NORMAL_SUBS: tuple[str, ...] = (
    "specialcharacters",
    "quotes",
    "attributes",
    "replacements",
    "macros",
    "post_replacements",
)
TITLE_SUBS = NORMAL_SUBS
VERBATIM_SUBS: tuple[str, ...] = ("specialcharacters", "callouts")

SUBSTITUTION_ORDER: tuple[str, ...] = (
    "specialcharacters",
    "highlight",
    "quotes",
    "attributes",
    "replacements",
    "macros",
    "callouts",
    "post_replacements",
)

SUB_GROUPS: dict[str, tuple[str, ...]] = {
    "none": NO_SUBS,
    "normal": NORMAL_SUBS,
    "verbatim": VERBATIM_SUBS,
    "specialchars": BASIC_SUBS,
}

SUB_HINTS = {
    "a": "attributes",
    "m": "macros",
    "n": "normal",
    "p": "post_replacements",
    "q": "quotes",
    "r": "replacements",
    "c": "specialcharacters",
    "v": "verbatim",
}

SUB_OPTIONS: dict[str, frozenset[str]] = {
    "block": frozenset(NORMAL_SUBS) | {"callouts"},
    "inline": frozenset(NORMAL_SUBS),
}

# -- passthrough markers -----------------------------------------------------

PASS_START = "\u0096"
PASS_END = "\u0097"
PASS_SLOT_RE = re.compile(PASS_START + r"(\d+)" + PASS_END)

# line drop markers used by the attributes substitution
_DROP = "\u007f"
_DROP_LINE = "\u0018"

# -- patterns ----------------------------------------------------------------

SPECIAL_CHARS_RE = re.compile(r"[<&>]")
SPECIAL_CHARS = {"&": "&amp;", "<": "&lt;", ">": "&gt;"}

ATTRIBUTE_REFERENCE_RE = re.compile(r"(\\)?\{(\w[\w-]*|(set|counter2?):.+?)(\\)?\}")
ATTRIBUTE_VALUE_PASS_RE = re.compile(r"^pass:([a-z]+(?:,[a-z-]+)*)?\[(.*)\]$", re.S)

PASS_MACRO_RE = re.compile(
    r"(?:(?:(\\?)\[([^\]]+)\])?(\\{0,2})(\+\+\+?|\$\$)(.*?)\4|(\\?)pass:([a-z]+(?:,[a-z-]+)*)?\[(|.*?[^\\])\])",
    re.S,
)
PASS_INLINE_RE = {
    False: re.compile(r"(^|[^\w;:\\])(?:\[([^\]]+)\])?(\\?\+(\S|\S.*?\S)\+)(?!\w)", re.M | re.S),
    True: re.compile(r"(^|[^`\w])(?:\[([^\]]+)\])?(\\?`([^`\s]|[^`\s].*?\S)`)(?![`\w])", re.M | re.S),
}
STEM_MACRO_RE = re.compile(r"\\?(stem|(?:latex|ascii)math):([a-z]+(?:,[a-z-]+)*)?\[(.*?[^\\])\]", re.S)

_QS = re.M | re.S
QUOTE_SUBS: dict[bool, list[tuple[str, str, re.Pattern[str]]]] = {
    False: [
        ("strong", "unconstrained", re.compile(r"\\?(?:\[([^\]]+)\])?\*\*(.+?)\*\*", _QS)),
        ("strong", "constrained", re.compile(r"(^|[^\w;:}])(?:\[([^\]]+)\])?\*(\S|\S.*?\S)\*(?!\w)", _QS)),
        ("double", "constrained", re.compile(r'(^|[^\w;:}])(?:\[([^\]]+)\])?"`(\S|\S.*?\S)`"(?!\w)', _QS)),
        ("single", "constrained", re.compile(r"(^|[^\w;:`}])(?:\[([^\]]+)\])?'`(\S|\S.*?\S)`'(?!\w)", _QS)),
        ("monospaced", "unconstrained", re.compile(r"\\?(?:\[([^\]]+)\])?``(.+?)``", _QS)),
        ("monospaced", "constrained", re.compile(r"(^|[^\w;:\"'`}])(?:\[([^\]]+)\])?`(\S|\S.*?\S)`(?![\w\"'`])", _QS)),
        ("emphasis", "unconstrained", re.compile(r"\\?(?:\[([^\]]+)\])?__(.+?)__", _QS)),
        ("emphasis", "constrained", re.compile(r"(^|[^\w;:}])(?:\[([^\]]+)\])?_(\S|\S.*?\S)_(?!\w)", _QS)),
        ("mark", "unconstrained", re.compile(r"\\?(?:\[([^\]]+)\])?##(.+?)##", _QS)),
        ("mark", "constrained", re.compile(r"(^|[^\w&;:}])(?:\[([^\]]+)\])?#(\S|\S.*?\S)#(?!\w)", _QS)),
        ("superscript", "unconstrained", re.compile(r"\\?(?:\[([^\]]+)\])?\^(\S+?)\^")),
        ("subscript", "unconstrained", re.compile(r"\\?(?:\[([^\]]+)\])?~(\S+?)~")),
    ],
}
_compat_quotes = list(QUOTE_SUBS[False])
_compat_quotes[2] = ("double", "constrained", re.compile(r"(^|[^\w;:}])(?:\[([^\]]+)\])?``(\S|\S.*?\S)''(?!\w)", _QS))
_compat_quotes[3] = ("single", "constrained", re.compile(r"(^|[^\w;:}])(?:\[([^\]]+)\])?`(\S|\S.*?\S)'(?!\w)", _QS))
_compat_quotes[4] = ("monospaced", "unconstrained", re.compile(r"\\?(?:\[([^\]]+)\])?\+\+(.+?)\+\+", _QS))
_compat_quotes[5] = ("monospaced", "constrained", re.compile(r"(^|[^\w;:}])(?:\[([^\]]+)\])?\+(\S|\S.*?\S)\+(?!\w)", _QS))
_compat_quotes.insert(
    3, ("emphasis", "constrained", re.compile(r"(^|[^\w;:}])(?:\[([^\]]+)\])?'(\S|\S.*?\S)'(?!\w)", _QS))
)
QUOTE_SUBS[True] = _compat_quotes

QUOTED_TEXT_SNIFF_RE = {False: re.compile(r"[*_`#^~]"), True: re.compile(r"[*'_+#^~]")}

# (pattern, replacement, restore mode)
REPLACEMENTS: list[tuple[re.Pattern[str], str, str]] = [
    (re.compile(r"\\?\(C\)"), "&#169;", "none"),
    (re.compile(r"\\?\(R\)"), "&#174;", "none"),
    (re.compile(r"\\?\(TM\)"), "&#8482;", "none"),
    (re.compile(r"(^|\n| |\\)--( |\n|$)", re.M), "&#8201;&#8212;&#8201;", "none"),
    (re.compile(r"(\w)\\?--(?=\w)"), "&#8212;&#8203;", "leading"),
    (re.compile(r"\\?\.\.\."), "&#8230;&#8203;", "none"),
    (re.compile(r"\\?`'"), "&#8217;", "none"),
    (re.compile(r"([^\W_])\\?'(?=[^\W\d_])"), "&#8217;", "leading"),
    (re.compile(r"\\?-&gt;"), "&#8594;", "none"),
    (re.compile(r"\\?=&gt;"), "&#8658;", "none"),
    (re.compile(r"\\?&lt;-"), "&#8592;", "none"),
    (re.compile(r"\\?&lt;="), "&#8656;", "none"),
    (
        re.compile(r"\\?(&)amp;((?:[a-zA-Z][a-zA-Z]+\d{0,2}|#\d\d\d{0,4}|#x[\da-fA-F][\da-fA-F][\da-fA-F]{0,3});)"),
        "",
        "bounding",
    ),
]

KBD_BTN_MACRO_RE = re.compile(r"(\\)?(kbd|btn):\[(.*?[^\\])\]", re.S)
MENU_MACRO_RE = re.compile(r"\\?menu:(\w|[\w&][^\n\[]*[^\s\[])\[ *(.*?[^\\])?\]", re.S)
MENU_INLINE_RE = re.compile(r'\\?"([\w&][^"]*?[ \n]+&gt;[ \n]+[^"]*)"')
IMAGE_MACRO_RE = re.compile(r"\\?i(?:mage|con):([^:\s\[](?:[^\n\[]*[^\s\[])?)\[(|.*?[^\\])\]", re.S)
INDEXTERM_MACRO_RE = re.compile(r"\\?(?:(indexterm2?):\[(.*?[^\\])\]|\(\((.+?)\)\)(?!\)))", re.S)
LINK_RE = re.compile(
    r"(^|link:|[ \t]|&lt;|[>\(\)\[\];\"'])(\\?(?:https?|file|ftp|irc)://)"
    r"(?:([^\s\[\]]+)\[(|.*?[^\\])\]|([^\s\[\]<]*([^\s,.?!\[\]<\)])))",
    re.M | re.S,
)
LINK_MACRO_RE = re.compile(r"\\?(?:link|(mailto)):(|[^:\s\[][^\s\[]*)\[(|.*?[^\\])\]", re.S)
EMAIL_RE = re.compile(r"([\\>:/])?\w(?:&amp;|[\w\-.%+])*@[^\W_][\w\-]*(?:\.[\w\-]+)*\.[^\W\d_]{2,}(?![\w\-])")
URI_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9.+-]+:/{0,2}")
BIBLIO_ANCHOR_RE = re.compile(r"^\[\[\[((?:[^\W\d]|:)[\w\-:.]*)(?:, *(.+?))?\]\]\]", re.S)
ANCHOR_RE = re.compile(
    r"(\\)?(?:\[\[((?:[^\W\d]|:)[\w\-:.]*)(?:, *(.+?))?\]\]|anchor:((?:[^\W\d]|:)[\w\-:.]*)\[(?:\]|(.*?[^\\])\]))",
    re.S,
)
XREF_MACRO_RE = re.compile(r"\\?(?:&lt;&lt;([\w\"#/.:{].*?)&gt;&gt;|xref:([\w#/.:{].*?)\[(?:\]|(.*?[^\\])\]))", re.S)
FOOTNOTE_MACRO_RE = re.compile(r"\\?footnote(?:(ref):|:([\w-]+)?)\[(?:|(.*?[^\\]))\](?!</a>)", re.S)

HARD_LINE_BREAK = " +"
HARD_LINE_BREAK_RE = re.compile(r"^(.*) \+$", re.M)

CALLOUT_SOURCE_RE = re.compile(
    r"((?://|#|--|;;) ?)?(\\)?&lt;!?(|--)(\d+|\.)\3&gt;(?=(?: ?\\?&lt;!?\3(?:\d+|\.)\3&gt;)*$)", re.M
)
_CALLOUT_SOURCE_TAIL = r"(\\)?&lt;()(\d+|\.)&gt;(?=(?: ?\\?&lt;(?:\d+|\.)&gt;)*$)"

ESCAPED_CLOSE_BRACKET = "\\]"


@dataclass
class Passthrough:
    """Text cut out of a line, waiting to be restored.

    Parameters
    ----------
    text : str
        The protected text, exactly as written
    subs : tuple of str
        Substitutions the text receives when it is restored
    type : str or None
        Quote type the restored text is wrapped in (``monospaced``,
        ``unquoted``, ``latexmath``, ``asciimath``)
    attributes : dict
        Attributes parsed from a ``[role]`` prefix

    """

    text: str
    subs: tuple[str, ...] = ()
    type: Optional[str] = None
    attributes: dict[Any, Any] = field(default_factory=dict)


def normalize_text(text: str, normalize_whitespace: bool = False, unescape_closing_square_brackets: bool = False) -> str:
    """Collapse newlines in macro content and unescape ``\\]``."""
    if not text:
        return text
    if normalize_whitespace:
        text = text.strip().replace("\n", " ")
    if unescape_closing_square_brackets and "]" in text:
        text = text.replace(ESCAPED_CLOSE_BRACKET, "]")
    return text


def split_simple_csv(text: str) -> list[str]:
    """Split a comma separated list honoring double quotes around an entry."""
    if not text:
        return []
    if '"' not in text:
        return [value.strip() for value in text.split(",")]
    values: list[str] = []
    accum = []
    quote_open = False
    for char in text:
        if char == "," and not quote_open:
            values.append("".join(accum).strip())
            accum = []
        elif char == '"':
            quote_open = not quote_open
        else:
            accum.append(char)
    values.append("".join(accum).strip())
    return values


def parse_quoted_text_attributes(text: str, sub_attributes: Optional[Callable[[str], str]] = None) -> dict[str, str]:
    """Parse the ``[#id.role]`` shorthand that may precede quoted text.

    Only the first positional attribute is considered. Anything that does
    not start with ``#`` or ``.`` is taken as a role.

    Examples
    --------
    >>> parse_quoted_text_attributes("#note.big.red")
    {'id': 'note', 'role': 'big red'}
    >>> parse_quoted_text_attributes("underline")
    {'role': 'underline'}

    """
    if sub_attributes is not None and "{" in text:
        text = sub_attributes(text)
    if "," in text:
        text = text[: text.index(",")]
    text = text.strip()
    if not text:
        return {}
    if not text.startswith((".", "#")):
        return {"role": text}

    before, _, after = text.partition("#")
    attributes: dict[str, str] = {}
    if not after:
        if len(before) > 1:
            attributes["role"] = before.replace(".", " ").lstrip()
        return attributes

    element_id, _, roles = after.partition(".")
    if element_id:
        attributes["id"] = element_id
    if not roles:
        if len(before) > 1:
            attributes["role"] = before.replace(".", " ").lstrip()
    elif len(before) > 1:
        attributes["role"] = f"{before}.{roles}".replace(".", " ").lstrip()
    else:
        attributes["role"] = roles.replace(".", " ")
    return attributes


class SubstitutionPipeline:
    """Apply substitutions to text in the context of a document.

    Parameters
    ----------
    document : Document
        The document whose attributes, counters, catalog and callouts the
        substitutions read and update

    """

    def __init__(self, document: "Document"):
        self.document = document
        options = document.options
        self.converter: InlineConverter = options.converter or DefaultInlineConverter()
        self.extensions = options.extensions
        self.max_passthrough_passes = options.max_passthrough_passes
        self._passthroughs: list[Passthrough] = []
        self._passthroughs_locked = False
        self._block: Optional["AbstractBlock"] = None

    # ------------------------------------------------------------------
    # Substitution resolution
    # ------------------------------------------------------------------

    def resolve_subs(
        self,
        subs: Optional[str],
        scope: str = "block",
        defaults: Optional[Sequence[str]] = None,
        subject: Optional[str] = None,
    ) -> Optional[list[str]]:
        """Resolve a ``subs`` attribute value into a list of substitution names.

        Parameters
        ----------
        subs : str
            Comma separated names, groups (``normal``, ``verbatim``, ...) or,
            for inline macros, single letter hints. A leading ``+`` appends
            to ``defaults``, a trailing ``+`` prepends, ``-`` removes.
        scope : {"block", "inline"}
            Which substitution names are valid
        defaults : sequence of str, optional
            The set the modifiers apply to
        subject : str, optional
            Description of the construct, used in the warning for invalid names

        Returns
        -------
        list of str or None
            The resolved names, None when ``subs`` is empty

        """
        if not subs:
            return None
        subs = subs.replace(" ", "")
        modifiers_present = "+" in subs or "-" in subs
        candidates: Optional[list[str]] = None

        for key in subs.split(","):
            operation = None
            if modifiers_present:
                if key.startswith("+"):
                    operation, key = "append", key[1:]
                elif key.startswith("-"):
                    operation, key = "remove", key[1:]
                elif key.endswith("+"):
                    operation, key = "prepend", key[:-1]

            resolved_keys: Sequence[str]
            if scope == "inline" and key in ("verbatim", "v"):
                resolved_keys = BASIC_SUBS
            elif key in SUB_GROUPS:
                resolved_keys = SUB_GROUPS[key]
            elif scope == "inline" and len(key) == 1 and key in SUB_HINTS:
                hinted = SUB_HINTS[key]
                resolved_keys = SUB_GROUPS.get(hinted, (hinted,))
            else:
                resolved_keys = (key,)

            if operation is None:
                candidates = (candidates or []) + list(resolved_keys)
                continue
            if candidates is None:
                candidates = list(defaults or ())
            if operation == "append":
                candidates = candidates + list(resolved_keys)
            elif operation == "prepend":
                candidates = list(resolved_keys) + candidates
            else:
                candidates = [candidate for candidate in candidates if candidate not in resolved_keys]

        if candidates is None:
            return None

        valid = SUB_OPTIONS[scope]
        resolved: list[str] = []
        invalid: list[str] = []
        for candidate in candidates:
            if candidate in valid:
                if candidate not in resolved:
                    resolved.append(candidate)
            elif candidate not in invalid:
                invalid.append(candidate)
        if invalid:
            plural = "s" if len(invalid) > 1 else ""
            target = f" for {subject}" if subject else ""
            logger.warning(f"invalid substitution type{plural}{target}: {', '.join(invalid)}")
        return resolved

    def resolve_block_subs(self, subs: str, defaults: Sequence[str], subject: Optional[str] = None) -> Optional[list[str]]:
        return self.resolve_subs(subs, "block", defaults, subject)

    def resolve_pass_subs(self, subs: str) -> tuple[str, ...]:
        return tuple(self.resolve_subs(subs, "inline", None, "passthrough macro") or ())

    def lock_in_subs(self, block: "AbstractBlock") -> list[str]:
        """Compute the substitutions of a block once and store them on it.

        The content model picks the default set; an explicit ``subs``
        attribute replaces or modifies it. Source listings get ``highlight``
        in place of ``specialcharacters`` when a source highlighter is set.
        """
        from adoc2ast.ast.nodes import BlockContext, ContentModel

        defaults: Optional[Sequence[str]] = block.default_subs
        if defaults is None:
            model = block.content_model
            if model is ContentModel.SIMPLE:
                defaults = NORMAL_SUBS
            elif model is ContentModel.VERBATIM:
                if block.context is BlockContext.VERSE:
                    defaults = NORMAL_SUBS
                elif block.context is BlockContext.LISTING or (
                    block.context is BlockContext.LITERAL and not block.option("listparagraph")
                ):
                    defaults = VERBATIM_SUBS
                else:
                    defaults = BASIC_SUBS
            elif model is ContentModel.RAW:
                defaults = BASIC_SUBS if block.context is BlockContext.STEM else NO_SUBS
            else:
                return block.subs

        custom = block.attributes.get("subs")
        if custom:
            block.subs = self.resolve_block_subs(custom, defaults, block.context_name) or []
        else:
            block.subs = list(defaults)

        if (
            block.context is BlockContext.LISTING
            and block.style == "source"
            and block.attr("language")
            and self.document.has_doc_attr("source-highlighter")
            and "specialcharacters" in block.subs
        ):
            block.subs[block.subs.index("specialcharacters")] = "highlight"
        return block.subs

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def apply(self, text: str, subs: Iterable[str] = NORMAL_SUBS, block: Optional["AbstractBlock"] = None) -> str:
        """Apply the selected substitutions to ``text``.

        Parameters
        ----------
        text : str
            Raw text; may span several lines
        subs : iterable of str
            Substitution names; they run in canonical order
        block : AbstractBlock, optional
            Block that owns the text, consulted for block-level attributes
            (``hardbreaks-option``, ``line-comment``, ``language``)

        Returns
        -------
        str
            The converted text

        """
        selected = set(subs)
        if not text or not selected:
            return text

        previous_block = self._block
        if block is not None:
            self._block = block
        outermost = not self._passthroughs_locked
        self._passthroughs_locked = True
        try:
            text = self._apply_subs(text, selected)
            if PASS_START in text:
                text = self.restore_passthroughs(text)
        finally:
            if outermost:
                self._passthroughs.clear()
                self._passthroughs_locked = False
            self._block = previous_block
        return text

    def _apply_subs(self, text: str, selected: set[str]) -> str:
        if "macros" in selected:
            text = self.extract_passthroughs(text)
            if not text:
                return text

        for name in SUBSTITUTION_ORDER:
            if name not in selected:
                continue
            if name == "specialcharacters":
                text = self.sub_specialchars(text)
            elif name == "highlight":
                text = self.highlight(text)
            elif name == "quotes":
                text = self.sub_quotes(text)
            elif name == "attributes":
                if "{" in text:
                    text = self.sub_attributes(text)
            elif name == "replacements":
                text = self.sub_replacements(text)
            elif name == "macros":
                text = self.sub_macros(text)
            elif name == "callouts":
                text = self.sub_callouts(text)
            elif name == "post_replacements":
                text = self.sub_post_replacements(text)
        return text

    def content(self, block: "AbstractBlock") -> str:
        """Return the converted text of a simple, verbatim or raw block."""
        lines = getattr(block, "lines", None) or []
        return self.apply("\n".join(lines), block.subs, block)

    def title(self, block: "AbstractBlock") -> Optional[str]:
        """Return the converted title of a block, converting it once."""
        if not block.title:
            return None
        if block.converted_title is None:
            block.converted_title = self.apply(block.title, TITLE_SUBS, block)
        return block.converted_title

    def list_item_text(self, item: "ListItem") -> Optional[str]:
        if item.text is None:
            return None
        return self.apply(item.text, item.subs or NORMAL_SUBS, item)

    def cell_text(self, cell: "Cell") -> str:
        subs = BASIC_SUBS if cell.style == "literal" else NORMAL_SUBS
        return self.apply(cell.text.strip(), subs)

    def apply_normal_subs(self, text: str) -> str:
        return self.apply(text, NORMAL_SUBS)

    def apply_header_subs(self, text: str) -> str:
        return self.apply(text, HEADER_SUBS)

    def apply_attribute_value_subs(self, value: str) -> str:
        """Substitute the value of an attribute entry.

        ``pass:<subs>[value]`` applies only the named substitutions (none
        when omitted); any other value receives the header substitutions.
        """
        match = ATTRIBUTE_VALUE_PASS_RE.match(value)
        if match is None:
            return self.apply_header_subs(value)
        value = match.group(2)
        if match.group(1):
            value = self.apply(value, self.resolve_pass_subs(match.group(1)))
        return value

    # ------------------------------------------------------------------
    # Passthroughs
    # ------------------------------------------------------------------

    def extract_passthroughs(self, text: str) -> str:
        """Replace passthrough constructs with placeholders."""
        compat_mode = self.document.compat_mode

        if "++" in text or "$$" in text or "ss:" in text:
            text = PASS_MACRO_RE.sub(lambda match: self._extract_pass_macro(match, compat_mode), text)

        marker = "`" if compat_mode else "+"
        if marker in text:
            text = PASS_INLINE_RE[compat_mode].sub(lambda match: self._extract_inline_pass(match, compat_mode), text)

        if ":" in text and ("stem:" in text or "math:" in text):
            text = STEM_MACRO_RE.sub(self._extract_stem, text)
        return text

    def _store_passthrough(self, passthrough: Passthrough) -> str:
        index = len(self._passthroughs)
        self._passthroughs.append(passthrough)
        logger.debug("Extracted passthrough %d: %r", index, passthrough.text)
        return f"{PASS_START}{index}{PASS_END}"

    def _extract_pass_macro(self, match: Match[str], compat_mode: bool) -> str:
        boundary = match.group(4)
        if boundary is None:
            # pass:[]
            if match.group(6):
                return match.group(0)[1:]
            content = normalize_text(match.group(8), unescape_closing_square_brackets=True)
            subs = self.resolve_pass_subs(match.group(7)) if match.group(7) else NO_SUBS
            return self._store_passthrough(Passthrough(content, subs))

        escape, attrlist, escapes, content = match.group(1), match.group(2), match.group(3), match.group(5)
        if compat_mode and boundary == "++":
            return match.group(0)

        preceding = ""
        attributes: Optional[dict[Any, Any]] = None
        if attrlist is not None:
            if escapes:
                return f"{escape}[{attrlist}]{escapes[1:]}{boundary}{content}{boundary}"
            if escape == "\\":
                preceding = f"[{attrlist}]"
            else:
                attributes = parse_quoted_text_attributes(attrlist, self.sub_attributes)
        elif escapes:
            return f"{escapes[1:]}{boundary}{content}{boundary}"

        subs = NO_SUBS if boundary == "+++" else BASIC_SUBS
        if attributes is not None:
            passthrough = Passthrough(content, subs, "unquoted", attributes)
        else:
            passthrough = Passthrough(content, subs)
        return preceding + self._store_passthrough(passthrough)

    def _extract_inline_pass(self, match: Match[str], compat_mode: bool) -> str:
        preceding, attrlist, quoted_text, content = match.groups()
        escaped = quoted_text.startswith("\\")
        if escaped:
            prefix = f"[{attrlist}]" if attrlist else ""
            return f"{preceding}{prefix}{quoted_text[1:]}"

        attributes = parse_quoted_text_attributes(attrlist, self.sub_attributes) if attrlist else {}
        if compat_mode:
            passthrough = Passthrough(content, BASIC_SUBS, "monospaced", attributes)
        elif attributes:
            passthrough = Passthrough(content, BASIC_SUBS, "unquoted", attributes)
        else:
            passthrough = Passthrough(content, BASIC_SUBS)
        return preceding + self._store_passthrough(passthrough)

    def _extract_stem(self, match: Match[str]) -> str:
        if match.group(0).startswith("\\"):
            return match.group(0)[1:]
        stem_type = match.group(1)
        if stem_type == "stem":
            stem_type = STEM_TYPE_ALIASES.get(self.document.doc_attr("stem") or "", DEFAULT_STEM_TYPE)
        content = normalize_text(match.group(3), unescape_closing_square_brackets=True)
        if stem_type == "latexmath" and len(content) > 1 and content.startswith("$") and content.endswith("$"):
            content = content[1:-1]
        subs = self.resolve_pass_subs(match.group(2)) if match.group(2) else BASIC_SUBS
        return self._store_passthrough(Passthrough(content, subs, stem_type))

    def restore_passthroughs(self, text: str) -> str:
        """Replace placeholders with their converted passthrough text.

        Restored text may itself contain placeholders (a passthrough whose
        own substitutions include ``macros``); those are resolved on the
        next pass. The number of passes is bounded by the
        ``max_passthrough_passes`` option.
        """
        passes = 0
        while PASS_START in text:
            if passes >= self.max_passthrough_passes:
                logger.error(f"passthrough nesting exceeds {self.max_passthrough_passes} levels; dropping placeholders")
                return PASS_SLOT_RE.sub("", text)
            text = PASS_SLOT_RE.sub(self._restore_slot, text)
            passes += 1
        return text

    def _restore_slot(self, match: Match[str]) -> str:
        index = int(match.group(1))
        if index >= len(self._passthroughs):
            logger.error(f"unresolved passthrough detected: {index}")
            return "??pass??"
        passthrough = self._passthroughs[index]
        text = passthrough.text
        if passthrough.subs:
            text = self._apply_subs(text, set(passthrough.subs))
        if passthrough.type:
            attributes = dict(passthrough.attributes)
            text = self._convert(
                InlineNode("quoted", text, type=passthrough.type, id=attributes.get("id"), attributes=attributes)
            )
        return text

    # ------------------------------------------------------------------
    # Individual substitutions
    # ------------------------------------------------------------------

    def sub_specialchars(self, text: str) -> str:
        if "<" in text or "&" in text or ">" in text:
            return SPECIAL_CHARS_RE.sub(lambda match: SPECIAL_CHARS[match.group(0)], text)
        return text

    def highlight(self, text: str) -> str:
        language = self._block.attr("language") if self._block is not None else None
        return self.converter.highlight(text, language, self._block)

    def sub_quotes(self, text: str) -> str:
        compat_mode = self.document.compat_mode
        if not QUOTED_TEXT_SNIFF_RE[compat_mode].search(text):
            return text
        for quote_type, scope, pattern in QUOTE_SUBS[compat_mode]:
            text = pattern.sub(lambda match: self._convert_quoted_text(match, quote_type, scope), text)
        return text

    def _convert_quoted_text(self, match: Match[str], quote_type: str, scope: str) -> str:
        unescaped_attrs = None
        if match.group(0).startswith("\\"):
            if scope == "constrained" and match.group(2):
                unescaped_attrs = f"[{match.group(2)}]"
            else:
                return match.group(0)[1:]

        if scope == "constrained":
            if unescaped_attrs:
                return unescaped_attrs + self._convert(InlineNode("quoted", match.group(3), type=quote_type))
            attributes: dict[Any, Any] = {}
            if match.group(2):
                attributes = parse_quoted_text_attributes(match.group(2), self.sub_attributes)
                if quote_type == "mark":
                    quote_type = "unquoted"
            node = InlineNode("quoted", match.group(3), type=quote_type, id=attributes.get("id"), attributes=attributes)
            return match.group(1) + self._convert(node)

        attributes = {}
        if match.group(1):
            attributes = parse_quoted_text_attributes(match.group(1), self.sub_attributes)
            if quote_type == "mark":
                quote_type = "unquoted"
        node = InlineNode("quoted", match.group(2), type=quote_type, id=attributes.get("id"), attributes=attributes)
        return self._convert(node)

    def sub_attributes(
        self,
        text: str,
        attribute_missing: Optional[str] = None,
        drop_line_severity: int = logging.INFO,
    ) -> str:
        """Replace attribute references with document attribute values.

        Parameters
        ----------
        text : str
            Text that may contain ``{name}`` references
        attribute_missing : str, optional
            Policy for unresolved references; defaults to the document's
            ``attribute-missing`` attribute. ``skip`` leaves the reference,
            ``drop`` removes it, ``drop-line`` removes the whole line and
            ``warn`` leaves it and logs a warning.
        drop_line_severity : int, default = logging.INFO
            Level at which a dropped line is reported

        Returns
        -------
        str
            The substituted text

        Notes
        -----
        ``{set:name:value}`` and ``{counter2:name}`` expand to nothing; a
        line left empty by them is removed. ``{counter:name}`` expands to
        the new counter value. Multi-line text is handled line by line so a
        dropped line never takes its neighbours with it.

        """
        if "{" not in text:
            return text

        document = self.document
        attrs = document.document_attributes
        policy = attribute_missing or attrs.get("attribute-missing") or "skip"
        state = {"drop": False, "drop_line": False, "drop_empty_line": False}

        def replace(match: Match[str]) -> str:
            if match.group(1) or match.group(4):
                return "{" + match.group(2) + "}"

            if match.group(3):
                args = match.group(2).split(":", 2)
                directive = args.pop(0)
                if directive == "set":
                    _, value = document.store_attribute(args[0], args[1] if len(args) > 1 else "")
                    undefined_policy = attrs.get("attribute-undefined") or "drop-line"
                    if value is not None or undefined_policy != "drop-line":
                        state["drop"] = state["drop_empty_line"] = True
                        return _DROP
                    state["drop"] = state["drop_line"] = True
                    return _DROP_LINE
                if directive == "counter2":
                    document.counter(*args[:2])
                    state["drop"] = state["drop_empty_line"] = True
                    return _DROP
                return str(document.counter(*args[:2]))

            key = match.group(2).lower()
            if key in attrs:
                return attrs[key]
            if key in INTRINSIC_ATTRIBUTES:
                return INTRINSIC_ATTRIBUTES[key]

            if policy == "drop":
                state["drop"] = state["drop_empty_line"] = True
                return _DROP
            if policy == "drop-line":
                logger.log(drop_line_severity, f"dropping line containing reference to missing attribute: {key}")
                state["drop"] = state["drop_line"] = True
                return _DROP_LINE
            if policy == "warn":
                logger.warning(f"skipping reference to missing attribute: {key}")
            return match.group(0)

        text = ATTRIBUTE_REFERENCE_RE.sub(replace, text)
        if not state["drop"]:
            return text

        if state["drop_empty_line"]:
            lines = re.sub(_DROP + "+", _DROP, text).split("\n")
            if state["drop_line"]:
                lines = [line for line in lines if line != _DROP and _DROP_LINE not in line]
            else:
                lines = [line for line in lines if line != _DROP]
            return "\n".join(lines).replace(_DROP, "")
        if "\n" in text:
            return "\n".join(line for line in text.split("\n") if _DROP_LINE not in line)
        return ""

    def sub_replacements(self, text: str) -> str:
        """Replace typographic shorthands such as ``(C)``, ``--`` and ``...``."""
        for pattern, replacement, restore in REPLACEMENTS:
            text = pattern.sub(lambda match: self._do_replacement(match, replacement, restore), text)
        return text

    @staticmethod
    def _do_replacement(match: Match[str], replacement: str, restore: str) -> str:
        captured = match.group(0)
        if "\\" in captured:
            return captured.replace("\\", "", 1)
        if restore == "none":
            return replacement
        if restore == "bounding":
            return match.group(1) + match.group(2)
        return match.group(1) + replacement

    def sub_post_replacements(self, text: str) -> str:
        """Convert hard line breaks (a trailing `` +``, or every line under ``hardbreaks``)."""
        if self._block_attr("hardbreaks-option") is not None:
            lines = text.split("\n")
            if len(lines) < 2:
                return text
            last = lines.pop()
            converted = [
                self._convert(
                    InlineNode("break", line[:-2] if line.endswith(HARD_LINE_BREAK) else line, type="line")
                )
                for line in lines
            ]
            return "\n".join(converted + [last])
        if "+" in text and HARD_LINE_BREAK in text:
            return HARD_LINE_BREAK_RE.sub(
                lambda match: self._convert(InlineNode("break", match.group(1), type="line")), text
            )
        return text

    def sub_callouts(self, text: str) -> str:
        """Convert callout marks in verbatim text, assigning their registered ids."""
        line_comment = self._block_attr("line-comment")
        if line_comment is not None:
            prefix = f"{re.escape(line_comment)} ?" if line_comment else ""
            pattern = re.compile(f"({prefix})?{_CALLOUT_SOURCE_TAIL}", re.M)
        else:
            pattern = CALLOUT_SOURCE_RE
        autonum = 0

        def replace(match: Match[str]) -> str:
            nonlocal autonum
            if match.group(2):
                return match.group(0).replace("\\", "", 1)
            number = match.group(4)
            if number == ".":
                autonum += 1
                number = str(autonum)
            guard: Any = match.group(1)
            if guard is None and match.group(3) == "--":
                guard = ["<!--", "-->"]
            node = InlineNode(
                "callout", number, id=self.document.callouts.read_next_id(), attributes={"guard": guard}
            )
            return self._convert(node)

        return pattern.sub(replace, text)

    # ------------------------------------------------------------------
    # Macros
    # ------------------------------------------------------------------

    def sub_macros(self, text: str) -> str:
        """Convert inline macros, links, anchors, cross references and footnotes."""
        found_square_bracket = "[" in text
        found_colon = ":" in text
        found_macroish = found_square_bracket and found_colon
        found_macroish_short = found_macroish and ":[" in text
        attrs = self.document.document_attributes

        if self.extensions is not None and self.extensions.has_inline_macros():
            for processor in self.extensions.inline_macros:
                text = processor.regexp.sub(lambda match, p=processor: self._process_inline_macro(p, match), text)

        if "experimental" in attrs:
            if found_macroish_short and ("kbd:" in text or "btn:" in text):
                text = KBD_BTN_MACRO_RE.sub(self._convert_kbd_btn, text)
            if found_macroish and "menu:" in text:
                text = MENU_MACRO_RE.sub(self._convert_menu_macro, text)
            if '"' in text and "&gt;" in text:
                text = MENU_INLINE_RE.sub(self._convert_inline_menu, text)

        if found_macroish and ("image:" in text or "icon:" in text):
            text = IMAGE_MACRO_RE.sub(self._convert_image, text)

        if ("((" in text and "))" in text) or (found_macroish_short and "dexterm" in text):
            text = INDEXTERM_MACRO_RE.sub(self._convert_indexterm, text)

        if found_colon and "://" in text:
            text = LINK_RE.sub(self._convert_link, text)

        if found_macroish and ("link:" in text or "ilto:" in text):
            text = LINK_MACRO_RE.sub(self._convert_link_macro, text)

        if "@" in text:
            text = EMAIL_RE.sub(self._convert_email, text)

        if found_square_bracket and self._in_bibliography():
            text = BIBLIO_ANCHOR_RE.sub(
                lambda match: self._convert(InlineNode("anchor", match.group(2), type="bibref", id=match.group(1))),
                text,
                count=1,
            )

        if (found_square_bracket and "[[" in text) or (found_macroish and "or:" in text):
            text = ANCHOR_RE.sub(self._convert_anchor, text)

        if ("&" in text and ";&l" in text) or (found_macroish and "xref:" in text):
            text = XREF_MACRO_RE.sub(self._convert_xref, text)

        if found_macroish and ("tnote" in text or "ootnote:" in text):
            text = FOOTNOTE_MACRO_RE.sub(self._convert_footnote, text)
        return text

    def _process_inline_macro(self, processor: Any, match: Match[str]) -> str:
        source = match.group(0)
        if source.startswith("\\"):
            return source[1:]
        if match.re.groupindex:
            target = match.groupdict().get("target")
            content = match.groupdict().get("content")
        else:
            target = match.group(1) if match.re.groups >= 1 else None
            content = match.group(2) if match.re.groups >= 2 else None

        attributes: dict[Any, Any] = {}
        content_model = getattr(processor, "content_model", "text")
        if content is not None:
            if content:
                content = normalize_text(content, True, True)
                if content_model == "attributes":
                    self.parse_attributes(content, getattr(processor, "positional_attributes", ()), into=attributes)
                else:
                    attributes["text"] = content
            elif content_model != "attributes":
                attributes["text"] = content
            if not target:
                target = content or target

        replacement = processor.process(self._block, target, attributes)
        if isinstance(replacement, InlineNode):
            inline_subs = replacement.attributes.pop("subs", None)
            if inline_subs:
                resolved = self.resolve_subs(inline_subs, "inline", None, "custom inline macro")
                if resolved and replacement.text:
                    replacement.text = self.apply(replacement.text, resolved)
            return self._convert(replacement)
        if replacement is None:
            return ""
        logger.info(f"expected inline macro {processor.name} to return an InlineNode; got {type(replacement).__name__}")
        return str(replacement)

    def _convert_kbd_btn(self, match: Match[str]) -> str:
        if match.group(1):
            return match.group(0)[1:]
        if match.group(2) == "btn":
            return self._convert(InlineNode("button", normalize_text(match.group(3), True, True)))

        keys_text = match.group(3).strip()
        if "]" in keys_text:
            keys_text = keys_text.replace(ESCAPED_CLOSE_BRACKET, "]")
        delim_idx = None
        if len(keys_text) > 1:
            candidates = [idx for idx in (keys_text.find(",", 1), keys_text.find("+", 1)) if idx != -1]
            delim_idx = min(candidates) if candidates else None
        if delim_idx is None:
            keys = [keys_text]
        else:
            delim = keys_text[delim_idx]
            if keys_text.endswith(delim):
                keys = [key.strip() for key in keys_text[:-1].split(delim)]
                keys[-1] += delim
            else:
                keys = [key.strip() for key in keys_text.split(delim)]
        return self._convert(InlineNode("kbd", attributes={"keys": keys}))

    def _convert_menu_macro(self, match: Match[str]) -> str:
        if match.group(0).startswith("\\"):
            return match.group(0)[1:]
        menu = match.group(1)
        items = match.group(2)
        submenus: list[str] = []
        menuitem = None
        if items:
            items = items.replace(ESCAPED_CLOSE_BRACKET, "]")
            delim = "&gt;" if "&gt;" in items else ("," if "," in items else None)
            if delim:
                submenus = [item.strip() for item in items.split(delim)]
                menuitem = submenus.pop()
            else:
                menuitem = items.rstrip()
        node = InlineNode("menu", attributes={"menu": menu, "submenus": submenus, "menuitem": menuitem})
        return self._convert(node)

    def _convert_inline_menu(self, match: Match[str]) -> str:
        if match.group(0).startswith("\\"):
            return match.group(0)[1:]
        parts = [part.strip() for part in match.group(1).split("&gt;")]
        menu, submenus = parts[0], parts[1:]
        menuitem = submenus.pop() if submenus else None
        node = InlineNode("menu", attributes={"menu": menu, "submenus": submenus, "menuitem": menuitem})
        return self._convert(node)

    def _convert_image(self, match: Match[str]) -> str:
        source = match.group(0)
        if source.startswith("\\"):
            return source[1:]
        if source.startswith("icon:"):
            image_type, posattrs = "icon", ("size",)
        else:
            image_type, posattrs = "image", ("alt", "width", "height")
        target = match.group(1)
        attributes = self.parse_attributes(match.group(2), posattrs, unescape_input=True)
        if image_type != "icon":
            self.document.catalog.register("images", target)
            attributes["imagesdir"] = self.document.doc_attr("imagesdir")
        if not attributes.get("alt"):
            attributes["default-alt"] = basename(target, drop_extension=True).replace("_", " ").replace("-", " ")
            attributes["alt"] = attributes["default-alt"]
        return self._convert(InlineNode("image", type=image_type, target=target, attributes=attributes))

    def _convert_indexterm(self, match: Match[str]) -> str:
        source = match.group(0)
        macro = match.group(1)
        catalog = self.document.catalog

        if macro == "indexterm":
            if source.startswith("\\"):
                return source[1:]
            terms = split_simple_csv(normalize_text(match.group(2), True, True))
            catalog.register("indexterms", terms)
            return self._convert(InlineNode("indexterm", attributes={"terms": terms}))
        if macro == "indexterm2":
            if source.startswith("\\"):
                return source[1:]
            term = normalize_text(match.group(2), True, True)
            catalog.register("indexterms", [term])
            return self._convert(InlineNode("indexterm", term, type="visible"))

        text = match.group(3)
        before = after = ""
        if source.startswith("\\"):
            # an escaped concealed term still converts the nested flow term
            if text.startswith("(") and text.endswith(")"):
                text, visible, before, after = text[1:-1], True, "(", ")"
            else:
                return source[1:]
        else:
            visible = True
            if text.startswith("("):
                if text.endswith(")"):
                    text, visible = text[1:-1], False
                else:
                    text, before = text[1:], "("
            elif text.endswith(")"):
                text, after = text[:-1], ")"

        if visible:
            term = normalize_text(text, True)
            catalog.register("indexterms", [term])
            converted = self._convert(InlineNode("indexterm", term, type="visible"))
        else:
            terms = split_simple_csv(normalize_text(text, True))
            catalog.register("indexterms", terms)
            converted = self._convert(InlineNode("indexterm", attributes={"terms": terms}))
        return f"{before}{converted}{after}"

    def _convert_link(self, match: Match[str]) -> str:
        prefix = match.group(1)
        target = match.group(2) + (match.group(3) or match.group(5))
        if target.startswith("\\"):
            source = match.group(0)
            return source[: len(prefix)] + source[len(prefix) + 1 :]

        suffix = ""
        link_text: Optional[str] = None
        attributes: Optional[dict[Any, Any]] = None
        link_id = None
        bare = False

        if match.group(4) is not None:
            if prefix == "link:":
                prefix = ""
            link_text = match.group(4) or None
        else:
            if prefix in ("link:", '"', "'"):
                return match.group(0)
            last_char = match.group(6)
            if last_char == ";":
                if prefix.startswith("&lt;") and target.endswith("&gt"):
                    prefix = prefix[4:]
                    target = target[:-3]
                else:
                    target = target[:-1]
                    if target.endswith(")"):
                        target, suffix = target[:-1], ");"
                    else:
                        suffix = ";"
                if target.endswith("://"):
                    return match.group(0)
            elif last_char == ":":
                target = target[:-1]
                if target.endswith(")"):
                    target, suffix = target[:-1], "):"
                else:
                    suffix = ":"
                if target.endswith("://"):
                    return match.group(0)

        if link_text:
            link_text = link_text.replace(ESCAPED_CLOSE_BRACKET, "]")
            if not self.document.compat_mode and "=" in link_text:
                link_text, attributes = self.extract_attributes_from_text(link_text, "")
                link_id = attributes.get("id")
            if link_text and link_text.endswith("^"):
                link_text = link_text[:-1]
                attributes = attributes if attributes is not None else {}
                attributes.setdefault("window", "_blank")
            if not link_text:
                bare = True
        else:
            bare = True

        if bare:
            link_text = self._bare_link_text(target)
            attributes = attributes if attributes is not None else {}
            attributes["role"] = f"bare {attributes['role']}" if attributes.get("role") else "bare"

        self.document.catalog.register("links", target)
        node = InlineNode("anchor", link_text, type="link", target=target, id=link_id, attributes=attributes or {})
        return f"{prefix}{self._convert(node)}{suffix}"

    def _bare_link_text(self, target: str) -> str:
        if self.document.has_doc_attr("hide-uri-scheme"):
            return URI_SCHEME_RE.sub("", target) or target
        return target

    def _convert_link_macro(self, match: Match[str]) -> str:
        source = match.group(0)
        if source.startswith("\\"):
            return source[1:]
        mailto = match.group(1)
        mailto_text = match.group(2)
        target = f"mailto:{mailto_text}" if mailto else match.group(2)
        text = match.group(3)
        attributes: Optional[dict[Any, Any]] = None
        link_id = None

        if text:
            text = text.replace(ESCAPED_CLOSE_BRACKET, "]")
            if mailto:
                if not self.document.compat_mode and "," in text:
                    text, attributes = self.extract_attributes_from_text(text, "")
                    link_id = attributes.get("id")
                    if 2 in attributes:
                        target = f"{target}?subject={_encode_uri_component(attributes[2])}"
                        if 3 in attributes:
                            target = f"{target}&amp;body={_encode_uri_component(attributes[3])}"
            elif not self.document.compat_mode and "=" in text:
                text, attributes = self.extract_attributes_from_text(text, "")
                link_id = attributes.get("id")
            if text and text.endswith("^"):
                text = text[:-1]
                attributes = attributes if attributes is not None else {}
                attributes.setdefault("window", "_blank")

        if not text:
            if mailto:
                text = mailto_text
            else:
                text = self._bare_link_text(target)
                attributes = attributes if attributes is not None else {}
                attributes["role"] = f"bare {attributes['role']}" if attributes.get("role") else "bare"

        self.document.catalog.register("links", target)
        node = InlineNode("anchor", text, type="link", target=target, id=link_id, attributes=attributes or {})
        return self._convert(node)

    def _convert_email(self, match: Match[str]) -> str:
        lead = match.group(1)
        if lead:
            return match.group(0)[1:] if lead == "\\" else match.group(0)
        address = match.group(0)
        target = f"mailto:{address}"
        self.document.catalog.register("links", target)
        return self._convert(InlineNode("anchor", address, type="link", target=target))

    def _in_bibliography(self) -> bool:
        from adoc2ast.ast.nodes import BlockContext

        block = self._block
        return (
            block is not None
            and block.context is BlockContext.LIST_ITEM
            and block.parent is not None
            and block.parent.style == "bibliography"
        )

    def _convert_anchor(self, match: Match[str]) -> str:
        if match.group(1):
            return match.group(0)[1:]
        if match.group(2):
            anchor_id, reftext = match.group(2), match.group(3)
        else:
            anchor_id, reftext = match.group(4), match.group(5)
            if reftext and "]" in reftext:
                reftext = reftext.replace(ESCAPED_CLOSE_BRACKET, "]")
        return self._convert(InlineNode("anchor", reftext, type="ref", id=anchor_id))

    def _convert_xref(self, match: Match[str]) -> str:
        source = match.group(0)
        if source.startswith("\\"):
            return source[1:]

        document = self.document
        attributes: dict[Any, Any] = {}
        macro = False
        text: Optional[str]
        if match.group(1):
            refid_text, _, text = match.group(1).partition(",")
            xref_id = refid_text
            text = text.lstrip() if text else None
        else:
            macro = True
            xref_id = match.group(2)
            text = match.group(3)
            if text:
                text = text.replace(ESCAPED_CLOSE_BRACKET, "]")
                if not document.compat_mode and "=" in text:
                    text, attributes = self.extract_attributes_from_text(text)

        path: Optional[str] = None
        fragment: Optional[str] = None
        internal = False
        if document.compat_mode or "#" not in xref_id:
            if macro and xref_id.endswith(".adoc"):
                path = xref_id[:-5]
            else:
                fragment = xref_id
        else:
            path, _, fragment = xref_id.partition("#")
            fragment = fragment or None
            if not path:
                path = None
            elif macro and path.endswith(".adoc"):
                path = path[:-5]
            elif path.endswith(ASCIIDOC_EXTENSIONS):
                path = path[: path.rindex(".")]

        if path is not None and (path == document.doc_attr("docname") or path in document.catalog.includes):
            path, internal = None, True

        if path is None:
            refid = self._resolve_xref_id(fragment) if fragment else None
            target = f"#{refid}" if refid else "#"
            if refid and refid not in document.catalog.ids:
                logger.info(f"possible invalid reference: {refid}")
        else:
            suffix = document.doc_attr("relfilesuffix") or document.doc_attr("outfilesuffix") or ""
            refid = f"{path}#{fragment}" if fragment else path
            path = f"{document.doc_attr('relfileprefix') or ''}{path}{suffix}"
            target = f"{path}#{fragment}" if fragment else path

        attributes.update({"path": path, "fragment": fragment, "refid": refid, "internal": internal})
        return self._convert(InlineNode("anchor", text, type="xref", target=target, attributes=attributes))

    def _resolve_xref_id(self, fragment: str) -> str:
        """Resolve a natural cross reference (``<<Section Title>>``) to an id when possible."""
        ids = self.document.catalog.ids
        if fragment in ids or (" " not in fragment and fragment.lower() == fragment):
            return fragment
        for candidate, reftext in ids.items():
            if reftext == fragment:
                return candidate
        return fragment

    def _convert_footnote(self, match: Match[str]) -> str:
        from adoc2ast.ast.nodes import Footnote

        source = match.group(0)
        if source.startswith("\\"):
            return source[1:]

        document = self.document
        if match.group(1):
            if not match.group(3):
                return source
            footnote_id, _, content = match.group(3).partition(",")
            content = content or None
            if not document.compat_mode:
                logger.warning(f"found deprecated footnoteref macro: {source}; use footnote macro with target instead")
        else:
            footnote_id, content = match.group(2), match.group(3)

        target = None
        footnote_type: Optional[str]
        if footnote_id:
            existing = next((note for note in document.footnotes if note.id == footnote_id), None)
            if existing is not None:
                index, content = existing.index, existing.text
                footnote_type, target, footnote_id = "xref", footnote_id, None
            elif content:
                content = self.restore_passthroughs(normalize_text(content, True, True))
                index = document.counter("footnote-number")
                document.catalog.register("footnotes", Footnote(int(index), footnote_id, content))
                footnote_type = "ref"
            else:
                logger.warning(f"invalid footnote reference: {footnote_id}")
                footnote_type, target, content, footnote_id, index = "xref", footnote_id, footnote_id, None, None
        elif content:
            content = self.restore_passthroughs(normalize_text(content, True, True))
            index = document.counter("footnote-number")
            document.catalog.register("footnotes", Footnote(int(index), None, content))
            footnote_type = None
        else:
            return source

        node = InlineNode(
            "footnote", content, type=footnote_type, target=target, id=footnote_id, attributes={"index": index}
        )
        return self._convert(node)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def parse_attributes(
        self,
        attrlist: Optional[str],
        posattrs: Sequence[Optional[str]] = (),
        sub_input: bool = False,
        unescape_input: bool = False,
        sub_result: bool = False,
        into: Optional[dict[Any, Any]] = None,
    ) -> dict[Any, Any]:
        """Parse an attribute list found in text, optionally substituting it first."""
        if not attrlist:
            return into if into is not None else {}
        if unescape_input:
            attrlist = normalize_text(attrlist, True, True)
        if sub_input and "{" in attrlist:
            attrlist = self.sub_attributes(attrlist)
        parser = AttributeList(attrlist, self.apply_normal_subs if sub_result else None)
        if into is not None:
            return parser.parse_into(into, posattrs)
        return parser.parse(posattrs)

    def extract_attributes_from_text(
        self, text: str, default_text: Optional[str] = None
    ) -> tuple[Optional[str], dict[Any, Any]]:
        """Split ``text, name=value`` macro content into text and attributes.

        Returns
        -------
        tuple
            The text (the first positional attribute, or ``default_text``)
            and the parsed attributes. When parsing does not change the text
            the attributes are discarded.

        """
        attrlist = text.replace("\n", " ") if "\n" in text else text
        attributes = AttributeList(attrlist, self.apply_normal_subs).parse()
        resolved = attributes.get(1)
        if resolved is None:
            return default_text, attributes
        if resolved == attrlist:
            return text, {}
        return resolved, attributes

    def _block_attr(self, name: str) -> Optional[str]:
        if self._block is not None and name in self._block.attributes:
            return self._block.attributes[name]
        return self.document.document_attributes.get(name)

    def _convert(self, node: InlineNode) -> str:
        if node.parent is None:
            node.parent = self._block
        return self.converter.convert(node)


def _encode_uri_component(value: str) -> str:
    return quote(str(value), safe="~()*!.'")
