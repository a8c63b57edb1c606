# chunkseries/core/catalog.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping

from .channel import Channel
from .exceptions import ChannelNotFound, InvalidSettings
from .metadata import CatalogMeta


@dataclass(frozen=True, slots=True)
class Catalog:
    """
    Read-only view of one chunk file set and the channels stored in it.

    Design goals:
    - easy access: catalog["WEA10_ACC_Y"]
    - safe: validate channel container and ids
    - predictable: immutable, insertion order preserved (resource order)
    """
    id: str
    channels: Mapping[str, Channel] = field(default_factory=dict, repr=False)
    meta: CatalogMeta = field(default_factory=CatalogMeta, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise InvalidSettings("Catalog.id must be a non-empty string.")
        if not isinstance(self.channels, Mapping):
            raise InvalidSettings("Catalog.channels must be a mapping (e.g., dict).")
        if not isinstance(self.meta, CatalogMeta):
            raise InvalidSettings("Catalog.meta must be a CatalogMeta instance.")

        normalized: dict[str, Channel] = {}
        for key, ch in self.channels.items():
            if not isinstance(ch, Channel):
                raise InvalidSettings("Catalog.channels values must be Channel instances.")
            if ch.id != key:
                raise InvalidSettings(
                    f"Channel id mismatch: key '{key}' but Channel.id is '{ch.id}'."
                )
            normalized[key] = ch

        object.__setattr__(self, "channels", normalized)

    @classmethod
    def from_channels(
        cls,
        id: str,
        channels: Iterable[Channel],
        meta: CatalogMeta | None = None,
    ) -> "Catalog":
        mapping: dict[str, Channel] = {}
        for ch in channels:
            if ch.id in mapping:
                raise InvalidSettings(f"Duplicate channel id '{ch.id}' in catalog '{id}'.")
            mapping[ch.id] = ch
        return cls(id=id, channels=mapping, meta=meta or CatalogMeta())

    # ---- dict-like API ----
    def __len__(self) -> int:
        return len(self.channels)

    def __iter__(self) -> Iterator[str]:
        return iter(self.channels)

    def __contains__(self, channel_id: object) -> bool:
        return channel_id in self.channels

    def __getitem__(self, channel_id: str) -> Channel:
        try:
            return self.channels[channel_id]
        except KeyError as e:
            raise ChannelNotFound(channel_id) from e

    def keys(self) -> Iterable[str]:
        return self.channels.keys()

    def values(self) -> Iterable[Channel]:
        return self.channels.values()

    def items(self) -> Iterable[tuple[str, Channel]]:
        return self.channels.items()

    def get(self, channel_id: str, default: Channel | None = None) -> Channel | None:
        return self.channels.get(channel_id, default)

    # ---- resource view (pass-through metadata) ----
    @property
    def resource_ids(self) -> list[str]:
        return list(self.channels)

    @property
    def units(self) -> list[str | None]:
        return [ch.unit for ch in self.channels.values()]

    @property
    def groups(self) -> list[tuple[str, ...]]:
        return [ch.groups for ch in self.channels.values()]

    @property
    def primary(self) -> Channel:
        """First channel; all channels of a catalog share its chunk files."""
        if not self.channels:
            raise ChannelNotFound(f"catalog '{self.id}' has no channels")
        return next(iter(self.channels.values()))
