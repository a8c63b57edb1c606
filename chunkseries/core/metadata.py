# chunkseries/core/metadata.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .exceptions import InvalidChannel, InvalidSettings


@dataclass(frozen=True, slots=True)
class ChannelMeta:
    """
    Catalog metadata attached to a Channel.

    Carried as opaque pass-through data; the reader never interprets it:
    - unit: physical unit string, kept verbatim (" V" stays " V")
    - groups: group tags used by the catalog layer
    - description: human-friendly description
    - attrs: arbitrary additional fields
    """
    unit: str | None = None
    groups: tuple[str, ...] = ()
    description: str | None = None
    attrs: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.attrs is None:
            object.__setattr__(self, "attrs", {})
        elif not isinstance(self.attrs, dict):
            raise InvalidChannel("ChannelMeta.attrs must be a dict.")

        if self.groups is None:
            object.__setattr__(self, "groups", ())
        elif isinstance(self.groups, str):
            object.__setattr__(self, "groups", (self.groups,))
        else:
            groups = tuple(self.groups)
            if not all(isinstance(g, str) for g in groups):
                raise InvalidChannel("ChannelMeta.groups must contain strings only.")
            object.__setattr__(self, "groups", groups)


@dataclass(frozen=True, slots=True)
class CatalogMeta:
    """
    Metadata attached to a Catalog (all channels stored in one chunk file set).
    """
    description: str | None = None
    source: str | None = None
    attrs: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.attrs is None:
            object.__setattr__(self, "attrs", {})
        elif not isinstance(self.attrs, dict):
            raise InvalidSettings("CatalogMeta.attrs must be a dict.")
