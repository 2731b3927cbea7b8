#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/callouts.py
"""Callout registry shared by a document.

Callout marks (``<1>``) found in verbatim content are registered here while
the block is parsed, then matched against the items of the callout list that
follows. Ids are sequential per list: ``CO<list>-<n>``.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class _CalloutEntry:
    ordinal: int
    id: str


@dataclass
class Callouts:
    """Sequential callout id registry, one sub-list per callout list."""

    lists: list[list[_CalloutEntry]] = field(default_factory=lambda: [[]])
    list_index: int = 1
    co_index: int = 1

    def register(self, ordinal: int | str) -> str:
        """Register a callout mark and return the id assigned to it."""
        callout_id = self._generate_id(self.list_index, self.co_index)
        self.current_list.append(_CalloutEntry(int(ordinal), callout_id))
        self.co_index += 1
        return callout_id

    def read_next_id(self) -> str | None:
        """Return the next registered id of the current list, in order."""
        current = self.current_list
        callout_id = current[self.co_index - 1].id if self.co_index <= len(current) else None
        self.co_index += 1
        return callout_id

    def callout_ids(self, ordinal: int) -> str:
        """Return the space-separated ids of all marks with the given ordinal."""
        return " ".join(entry.id for entry in self.current_list if entry.ordinal == ordinal)

    @property
    def current_list(self) -> list[_CalloutEntry]:
        return self.lists[self.list_index - 1]

    def next_list(self) -> None:
        """Advance to the next callout list."""
        self.list_index += 1
        if len(self.lists) < self.list_index:
            self.lists.append([])
        self.co_index = 1

    def rewind(self) -> None:
        """Reset the read position to the first list, before a render pass."""
        self.list_index = 1
        self.co_index = 1

    @staticmethod
    def _generate_id(list_index: int, co_index: int) -> str:
        return f"CO{list_index}-{co_index}"
