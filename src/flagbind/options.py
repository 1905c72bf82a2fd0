#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Configuration for the binder.

``BindOptions`` controls which dataclass metadata keys the binder reads and
which fields it skips. Options are frozen; derive variants with
``create_updated``.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, replace
from typing import Any

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from flagbind.constants import (
    DEFAULT_ATTRS_KEY,
    DEFAULT_NAME_KEY,
    DEFAULT_SHORTHAND_KEY,
    DEFAULT_SKIP_PRIVATE,
    DEFAULT_USAGE_KEY,
)


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities."""

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
class BindOptions(CloneFrozenMixin):
    """Options controlling how record fields are read.

    Parameters
    ----------
    name_key : str, default="name"
        Metadata key overriding the derived option name
    shorthand_key : str, default="shorthand"
        Metadata key holding the one-letter alias
    usage_key : str, default="usage"
        Metadata key holding the help text
    attrs_key : str, default="flagbind"
        Metadata key holding the attribute list (``persistent``, ``required``)
    skip_private : bool, default=True
        Skip fields whose name starts with an underscore

    """

    name_key: str = field(default=DEFAULT_NAME_KEY)
    shorthand_key: str = field(default=DEFAULT_SHORTHAND_KEY)
    usage_key: str = field(default=DEFAULT_USAGE_KEY)
    attrs_key: str = field(default=DEFAULT_ATTRS_KEY)
    skip_private: bool = field(default=DEFAULT_SKIP_PRIVATE)

    def __post_init__(self) -> None:
        """Validate that metadata keys are non-empty and distinct.

        Raises
        ------
        ValueError
            If a key is empty or two keys collide.

        """
        keys = [self.name_key, self.shorthand_key, self.usage_key, self.attrs_key]
        if not all(keys):
            raise ValueError("metadata keys must be non-empty")
        if len(set(keys)) != len(keys):
            raise ValueError(f"metadata keys must be distinct, got {keys}")
