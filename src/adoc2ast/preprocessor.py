#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/preprocessor.py
"""Reader that expands preprocessor directives as lines are visited.

:class:`PreprocessingReader` extends :class:`~adoc2ast.reader.LineReader`
with a :meth:`process_line` hook that handles

- conditional directives (``ifdef``, ``ifndef``, ``ifeval``, ``endif``),
  tracked on a stack of frames so nested conditionals un-skip correctly
- include directives, expanded in place by pushing the current line buffer
  onto an explicit include stack whose depth is bounded

A backslash in front of either directive escapes it; the line is handed
out without the backslash and is not processed again.
"""

from __future__ import annotations

import logging
import math
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Union

from adoc2ast.attribute_list import AttributeList
from adoc2ast.constants import ASCIIDOC_EXTENSIONS, SafeMode
from adoc2ast.ifeval import evaluate_expression
from adoc2ast.logging_utils import log_at
from adoc2ast.reader import Cursor, LineReader
from adoc2ast.utils.encoding import read_source_file
from adoc2ast.utils.security import resolve_include_path
from adoc2ast.utils.text import (
    adjust_indentation,
    is_uriish,
    prepare_source_lines,
    rootname,
    split_delimited_value,
    to_int,
)

if TYPE_CHECKING:
    from adoc2ast.ast.nodes import Document

logger = logging.getLogger(__name__)

CONDITIONAL_DIRECTIVE_RE = re.compile(r"^(\\)?(ifdef|ifndef|ifeval|endif)::(\S*?(?:([,+])\S*?)?)\[(.+)?\]$")
INCLUDE_DIRECTIVE_RE = re.compile(r"^(\\)?include::([^\s\[](?:[^\[]*[^\s\[])?)\[(.+)?\]$")
TAG_DIRECTIVE_RE = re.compile(r"\b(?:tag|(e)nd)::(\S+?)\[\](?=$|[ \r])")


@dataclass
class _Conditional:
    target: str
    skip: bool
    skipping: bool
    cursor: Cursor


@dataclass
class _MaxDepth:
    absolute: int
    current: int
    relative: int


@dataclass
class _IncludeFrame:
    lines: list[str]
    file: Optional[str]
    dir: Optional[str]
    path: Optional[str]
    lineno: int
    max_depth: Optional[_MaxDepth]
    process_lines: bool


class PreprocessingReader(LineReader):
    """Line reader that evaluates conditionals and expands includes.

    Parameters
    ----------
    document : Document
        Document whose attributes drive conditionals and whose catalog
        records included files
    data : str, list of str or None
        Source text
    cursor : Cursor, optional
        Position of the first line
    base_dir : str, optional
        Root directory for include resolution; defaults to the ``docdir``
        attribute, then the working directory

    """

    def __init__(
        self,
        document: "Document",
        data: Union[str, list[str], None] = None,
        cursor: Optional[Cursor] = None,
        base_dir: Optional[str] = None,
    ):
        self.document = document
        super().__init__(data, cursor, normalize=True)
        self._condense_leading_blank_lines()
        self.base_dir = base_dir or document.doc_attr("docdir") or os.getcwd()
        if cursor is None or cursor.dir is None:
            self.dir = self.base_dir

        default_depth = to_int(document.doc_attr("max-include-depth") or str(document.options.max_include_depth))
        self._max_depth: Optional[_MaxDepth] = (
            _MaxDepth(default_depth, default_depth, default_depth) if default_depth > 0 else None
        )
        self._include_stack: list[_IncludeFrame] = []
        self._conditional_stack: list[_Conditional] = []
        self._skipping = False

    def _condense_leading_blank_lines(self) -> None:
        while self._lines and not self._lines[-1]:
            self._lines.pop()
            self.lineno += 1
        while self._lines and not self._lines[0]:
            self._lines.pop(0)

    # -- reader overrides ---------------------------------------------------

    def has_more_lines(self) -> bool:
        return self.peek_line() is not None

    def is_empty(self) -> bool:
        return self.peek_line() is None

    def peek_line(self, direct: bool = False) -> Optional[str]:
        while True:
            line = super().peek_line(direct)
            if line is not None:
                return line
            if not self._include_stack:
                self._warn_unterminated_conditionals()
                return None
            self._pop_include()

    def shift(self) -> Optional[str]:
        if self.unescape_next_line:
            self.unescape_next_line = False
            line = super().shift()
            return line[1:] if line is not None else None
        return super().shift()

    # -- line hook ----------------------------------------------------------

    def process_line(self, line: str) -> Optional[str]:
        if not self.process_lines:
            return line

        if not line:
            if self._skipping:
                self.shift()
                return None
            self.look_ahead += 1
            return line

        if line.endswith("]") and not line.startswith("[") and "::" in line:
            match = CONDITIONAL_DIRECTIVE_RE.match(line) if "if" in line else None
            if match:
                if match.group(1):
                    self.unescape_next_line = True
                    self.look_ahead += 1
                    return line[1:]
                if self._preprocess_conditional_directive(
                    match.group(2), match.group(3), match.group(4), match.group(5)
                ):
                    self.shift()
                    return None
                self.look_ahead += 1
                return line

            if self._skipping:
                self.shift()
                return None

            match = INCLUDE_DIRECTIVE_RE.match(line) if line.startswith(("inc", "\\inc")) else None
            if match:
                if match.group(1):
                    self.unescape_next_line = True
                    self.look_ahead += 1
                    return line[1:]
                if self._preprocess_include_directive(match.group(2), match.group(3)):
                    return None
                self.look_ahead += 1
                return line

            self.look_ahead += 1
            return line

        if self._skipping:
            self.shift()
            return None

        self.look_ahead += 1
        return line

    # -- conditionals -------------------------------------------------------

    def _preprocess_conditional_directive(
        self, keyword: str, target: str, delimiter: Optional[str], text: Optional[str]
    ) -> bool:
        """Evaluate a conditional directive.

        Returns
        -------
        bool
            True when the directive line was consumed, False when it is not a
            valid directive in this position and must be kept as text

        """
        no_target = not target
        if not no_target:
            target = target.lower()

        if keyword == "endif":
            if text:
                log_at(
                    logger,
                    logging.WARNING,
                    f"malformed preprocessor directive - text not permitted: endif::{target}[{text}]",
                    self.cursor,
                )
            elif not self._conditional_stack:
                log_at(logger, logging.WARNING, f"unmatched preprocessor directive: endif::{target}[]", self.cursor)
            elif no_target or target == self._conditional_stack[-1].target:
                self._conditional_stack.pop()
                self._skipping = self._conditional_stack[-1].skipping if self._conditional_stack else False
            else:
                expected = self._conditional_stack[-1].target
                log_at(
                    logger,
                    logging.WARNING,
                    f"mismatched preprocessor directive: endif::{target}[], expected endif::{expected}[]",
                    self.cursor,
                )
            return True

        if self._skipping:
            if keyword == "ifeval":
                if not no_target:
                    return False
            elif no_target:
                return False
            skip = False
        elif keyword == "ifeval":
            if not no_target:
                log_at(
                    logger,
                    logging.WARNING,
                    f"malformed preprocessor directive - target not permitted: ifeval::{target}[{text or ''}]",
                    self.cursor,
                )
                return True
            try:
                skip = not evaluate_expression(text or "", self._sub_expression_attributes)
            except ValueError:
                reason = "invalid expression" if text else "missing expression"
                log_at(
                    logger,
                    logging.WARNING,
                    f"malformed preprocessor directive - {reason}: ifeval::[{text or ''}]",
                    self.cursor,
                )
                return True
        else:
            if no_target:
                log_at(
                    logger,
                    logging.WARNING,
                    f"malformed preprocessor directive - missing target: {keyword}::[{text or ''}]",
                    self.cursor,
                )
                return True
            skip = self._evaluate_defined(keyword, target, delimiter)

        if keyword == "ifeval" or not text:
            if skip:
                self._skipping = True
            self._conditional_stack.append(_Conditional(target, skip, self._skipping, self.cursor))
            logger.debug("%s::%s[] %s", keyword, target, "skipping" if skip else "including")
        elif not (self._skipping or skip):
            self.replace_next_line(text.rstrip())
            # stand-in for the directive line, which the caller drops
            self.unshift("")
            if text.startswith("include::"):
                self.look_ahead -= 1
        return True

    def _evaluate_defined(self, keyword: str, target: str, delimiter: Optional[str]) -> bool:
        """Return True when an ``ifdef``/``ifndef`` directive should skip its content."""
        attributes = self.document.document_attributes
        if delimiter == ",":
            names = target.split(",")
            if keyword == "ifdef":
                return not any(name in attributes for name in names)
            return any(name in attributes for name in names)
        if delimiter == "+":
            names = target.split("+")
            if keyword == "ifdef":
                return not all(name in attributes for name in names)
            return all(name in attributes for name in names)
        defined = target in attributes
        return not defined if keyword == "ifdef" else defined

    def _sub_expression_attributes(self, text: str) -> str:
        return self.document.substitutor.sub_attributes(text, attribute_missing="drop")

    def _warn_unterminated_conditionals(self) -> None:
        while self._conditional_stack:
            frame = self._conditional_stack.pop(0)
            log_at(
                logger,
                logging.WARNING,
                f"unterminated preprocessor conditional directive: {frame.target or 'ifeval'}",
                frame.cursor,
            )
        self._skipping = False

    # -- includes -----------------------------------------------------------

    def _preprocess_include_directive(self, target: str, attrlist: Optional[str]) -> Optional[bool]:
        """Expand an include directive.

        Returns
        -------
        bool or None
            True when the directive was consumed (expanded, replaced or
            dropped); None when it was rejected and must stay as text

        """
        doc = self.document
        substitutor = doc.substitutor
        expanded_target = target
        if "{" in target:
            attribute_missing = doc.doc_attr("attribute-missing") or "skip"
            policy = "drop-line" if attribute_missing == "warn" else attribute_missing
            expanded_target = substitutor.sub_attributes(target, attribute_missing=policy)
            if not expanded_target:
                if self._parse_include_attributes(attrlist).get("optional-option") is not None:
                    log_at(logger, logging.INFO, f"optional include dropped: include::{target}[{attrlist or ''}]", self.cursor)
                else:
                    log_at(
                        logger,
                        logging.WARNING,
                        f"include dropped due to missing attribute: include::{target}[{attrlist or ''}]",
                        self.cursor,
                    )
                self.shift()
                return True

        if doc.safe_mode >= SafeMode.SECURE:
            return self.replace_next_line(f"link:{expanded_target}[role=include]")

        if is_uriish(expanded_target):
            log_at(logger, logging.WARNING, f"cannot include contents of URI: {expanded_target}", self.cursor)
            return self.replace_next_line(f"link:{expanded_target}[]")

        if self._max_depth is None:
            return None
        if len(self._include_stack) >= self._max_depth.current:
            log_at(
                logger,
                logging.ERROR,
                f"maximum include depth of {self._max_depth.relative} exceeded",
                self.cursor,
            )
            return None

        parsed_attrs = self._parse_include_attributes(attrlist)
        inc_path = resolve_include_path(expanded_target, self.dir, self.base_dir, doc.safe_mode)
        if inc_path is None:
            self.shift()
            return True

        if not inc_path.is_file():
            if "optional-option" in parsed_attrs:
                log_at(logger, logging.INFO, f"optional include dropped because include file not found: {inc_path}", self.cursor)
            else:
                log_at(logger, logging.WARNING, f"include file not found: {inc_path}", self.cursor)
            self.shift()
            return True

        try:
            content = read_source_file(inc_path, parsed_attrs.get("encoding"))
        except OSError as e:
            log_at(logger, logging.WARNING, f"include file not readable: {inc_path} ({e})", self.cursor)
            self.shift()
            return True

        relpath = self._relative_path(inc_path)
        inc_lines = content.splitlines()

        if attrlist and "lines" in parsed_attrs:
            selected, offset = self._select_lines(inc_lines, parsed_attrs["lines"])
            self.shift()
            if offset is not None:
                parsed_attrs["partial-option"] = ""
                self.push_include(selected, str(inc_path), relpath, offset, parsed_attrs)
        elif attrlist and ("tag" in parsed_attrs or "tags" in parsed_attrs):
            inc_tags = self._parse_tag_selection(parsed_attrs)
            if inc_tags is None:
                self.shift()
                self.push_include(inc_lines, str(inc_path), relpath, 1, parsed_attrs)
            else:
                selected, offset, partial = self._select_tagged_lines(inc_lines, inc_tags, inc_path)
                self.shift()
                if offset is not None:
                    if partial:
                        parsed_attrs["partial-option"] = ""
                    self.push_include(selected, str(inc_path), relpath, offset, parsed_attrs)
        else:
            self.shift()
            self.push_include(inc_lines, str(inc_path), relpath, 1, parsed_attrs)
        logger.debug("included %s at depth %d", relpath, len(self._include_stack))
        return True

    def _parse_include_attributes(self, attrlist: Optional[str]) -> dict[Any, Any]:
        if not attrlist:
            return {}
        if "{" in attrlist:
            attrlist = self.document.substitutor.sub_attributes(attrlist)
        return AttributeList(attrlist).parse()

    def _relative_path(self, inc_path: Path) -> str:
        try:
            return inc_path.relative_to(Path(self.base_dir).resolve()).as_posix()
        except ValueError:
            return inc_path.as_posix()

    @staticmethod
    def _select_lines(lines: list[str], spec: str) -> tuple[list[str], Optional[int]]:
        """Select lines by 1-based ranges such as ``1..3;7;10..``."""
        linenos: list[float] = []
        for linedef in split_delimited_value(spec):
            if ".." in linedef:
                start, _, end = linedef.partition("..")
                if not end or to_int(end) < 0:
                    linenos.extend((to_int(start), math.inf))
                else:
                    linenos.extend(range(to_int(start), to_int(end) + 1))
            else:
                linenos.append(to_int(linedef))
        wanted = sorted(set(linenos))

        selected: list[str] = []
        offset: Optional[int] = None
        select_remaining = False
        for lineno, line in enumerate(lines, start=1):
            if not wanted and not select_remaining:
                break
            if select_remaining or wanted[0] == math.inf:
                select_remaining = True
                offset = offset or lineno
                selected.append(line)
            elif wanted[0] == lineno:
                offset = offset or lineno
                selected.append(line)
                wanted.pop(0)
        return selected, offset

    @staticmethod
    def _parse_tag_selection(parsed_attrs: dict[Any, Any]) -> Optional[dict[str, bool]]:
        if "tag" in parsed_attrs:
            tag = parsed_attrs["tag"] or ""
            if not tag or tag == "!":
                return None
            return {tag[1:]: False} if tag.startswith("!") else {tag: True}

        inc_tags: dict[str, bool] = {}
        for tagdef in split_delimited_value(parsed_attrs.get("tags") or ""):
            if not tagdef or tagdef == "!":
                continue
            if tagdef.startswith("!"):
                inc_tags[tagdef[1:]] = False
            else:
                inc_tags[tagdef] = True
        return inc_tags or None

    def _select_tagged_lines(
        self, lines: list[str], inc_tags: dict[str, bool], inc_path: Path
    ) -> tuple[list[str], Optional[int], bool]:
        """Select the lines inside the requested tagged regions.

        ``*`` selects every tagged region and ``**`` every line, tagged or
        not; a ``!`` prefix excludes a tag. Tag directive lines themselves are
        never included.
        """
        inc_tags = dict(inc_tags)
        wildcard: Optional[bool]
        if "**" in inc_tags:
            base_select = inc_tags.pop("**")
            wildcard = inc_tags.pop("*") if "*" in inc_tags else base_select
        else:
            base_select = True not in inc_tags.values()
            wildcard = inc_tags.pop("*", None)
        select = base_select

        selected: list[str] = []
        offset: Optional[int] = None
        tag_stack: list[tuple[str, bool, int]] = []
        tags_used: set[str] = set()
        active_tag: Optional[str] = None

        for lineno, line in enumerate(lines, start=1):
            match = TAG_DIRECTIVE_RE.search(line) if "::" in line and "[]" in line else None
            if match is None:
                if select:
                    offset = offset or lineno
                    selected.append(line)
                continue

            this_tag = match.group(2)
            if match.group(1):
                if this_tag == active_tag:
                    tag_stack.pop()
                    if tag_stack:
                        active_tag, select, _ = tag_stack[-1]
                    else:
                        active_tag, select = None, base_select
                elif this_tag in inc_tags:
                    index = next((i for i in range(len(tag_stack) - 1, -1, -1) if tag_stack[i][0] == this_tag), None)
                    if index is not None:
                        del tag_stack[index]
                        message = (
                            f"mismatched end tag (expected '{active_tag}' but found '{this_tag}') "
                            f"at line {lineno} of include file: {inc_path}"
                        )
                    else:
                        message = f"unexpected end tag '{this_tag}' at line {lineno} of include file: {inc_path}"
                    log_at(logger, logging.WARNING, message, self.cursor)
            elif this_tag in inc_tags:
                tags_used.add(this_tag)
                active_tag, select = this_tag, inc_tags[this_tag]
                tag_stack.append((active_tag, select, lineno))
            elif wildcard is not None:
                select = False if active_tag and not select else wildcard
                active_tag = this_tag
                tag_stack.append((active_tag, select, lineno))

        for tag_name, _, tag_lineno in tag_stack:
            log_at(
                logger,
                logging.WARNING,
                f"detected unclosed tag '{tag_name}' starting at line {tag_lineno} of include file: {inc_path}",
                self.cursor,
            )
        missing = [name for name in inc_tags if name not in tags_used]
        if missing:
            plural = "s" if len(missing) > 1 else ""
            log_at(
                logger,
                logging.WARNING,
                f"tag{plural} '{', '.join(missing)}' not found in include file: {inc_path}",
                self.cursor,
            )
        partial = not (base_select and wildcard and not inc_tags)
        return selected, offset, partial

    def push_include(
        self,
        data: Union[str, list[str]],
        file: Optional[str] = None,
        path: Optional[str] = None,
        lineno: int = 1,
        attributes: Optional[dict[Any, Any]] = None,
    ) -> "PreprocessingReader":
        """Push the current buffer onto the include stack and read ``data`` next."""
        attributes = attributes or {}
        self._include_stack.append(
            _IncludeFrame(
                lines=self._lines,
                file=self.file,
                dir=self.dir,
                path=self.path,
                lineno=self.lineno,
                max_depth=self._max_depth,
                process_lines=self.process_lines,
            )
        )

        includes = self.document.catalog.includes
        self.file = file
        if file is not None:
            self.dir = os.path.dirname(file)
            self.path = path or os.path.basename(file)
            self.process_lines = file.lower().endswith(ASCIIDOC_EXTENSIONS)
        else:
            self.dir = self.base_dir
            self.process_lines = True
            self.path = path or "<stdin>"
        if self.process_lines and path and "partial-option" not in attributes:
            name = rootname(path)
            if name not in includes:
                includes.append(name)

        self.lineno = lineno
        if self._max_depth is not None and "depth" in attributes:
            relative = to_int(str(attributes["depth"]))
            if relative > 0:
                current = len(self._include_stack) + relative
                if current > self._max_depth.absolute:
                    current = relative = self._max_depth.absolute
                self._max_depth = _MaxDepth(self._max_depth.absolute, current, relative)
            else:
                self._max_depth = _MaxDepth(self._max_depth.absolute, len(self._include_stack), 0)

        lines = prepare_source_lines(data, normalize=self.process_lines)
        if attributes.get("indent") is not None:
            tab_size = to_int(self.document.doc_attr("tabsize") or "0")
            adjust_indentation(lines, to_int(str(attributes["indent"])), tab_size)

        if not lines:
            self._pop_include()
            return self

        if "leveloffset" in attributes:
            previous = self.document.doc_attr("leveloffset")
            restore = f":leveloffset: {previous}" if previous is not None else ":leveloffset!:"
            lines = [f":leveloffset: {attributes['leveloffset']}", "", *lines, "", restore]
            self.lineno -= 2
        self._lines = list(reversed(lines))
        self.look_ahead = 0
        return self

    def _pop_include(self) -> None:
        if not self._include_stack:
            return
        frame = self._include_stack.pop()
        self._lines = frame.lines
        self.file = frame.file
        self.dir = frame.dir
        self.path = frame.path
        self.lineno = frame.lineno
        self._max_depth = frame.max_depth
        self.process_lines = frame.process_lines
        self.look_ahead = 0
