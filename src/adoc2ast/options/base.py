#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/options/base.py
"""Base classes for parser options.

This module defines the foundation classes for the option objects used
throughout the adoc2ast parsing pipeline.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, replace
from typing import Any

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities.

    This mixin adds the ability to create modified copies of frozen dataclass
    instances, which is useful for immutable configuration objects.
    """

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        """
        return replace(self, **kwargs)


@dataclass(frozen=True)
class BaseParserOptions(CloneFrozenMixin):
    """Base class for all parser options.

    Parameters
    ----------
    extract_metadata : bool
        Whether to collect header attributes into ``Document.metadata``

    Notes
    -----
    Subclasses should define format-specific parsing options as frozen dataclass fields.

    """

    extract_metadata: bool = field(
        default=True,
        metadata={"help": "Collect document header attributes into the document metadata", "importance": "core"},
    )

    def __post_init__(self) -> None:
        """Validate base parser options (nothing to check at this level)."""
        pass
