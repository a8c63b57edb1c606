from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from threading import Event
from typing import Iterable, Mapping, Protocol
import logging

from chunkseries.core import Catalog, CatalogNotFound, Channel, TimeRange

from .availability import availability as channel_availability
from .availability import time_range as channel_time_range
from .reader import ProgressCallback, ReadRequest, create_buffers, validate_request
from .reader import read as read_channel

logger = logging.getLogger(__name__)


class DataSource(Protocol):
    """Protocol for chunked data sources.

    Implementations expose a catalog view plus the time range /
    availability / read contract for the channels of each catalog.
    """

    @property
    def catalog_ids(self) -> list[str]:
        ...

    def get_catalog(self, catalog_id: str) -> Catalog:
        ...

    def time_range(self, catalog_id: str) -> TimeRange | None:
        ...

    def availability(self, catalog_id: str, begin: datetime, end: datetime) -> float:
        ...

    def read(
        self,
        catalog_id: str,
        begin: datetime,
        end: datetime,
        requests: Iterable["ChannelRead"],
    ) -> None:
        ...


@dataclass
class ChannelRead:
    """One channel of a multi-channel read and its output buffers."""

    channel_id: str
    request: ReadRequest


def _scaled(progress: ProgressCallback, i: int, n: int) -> ProgressCallback:
    def report(fraction: float) -> None:
        progress((i + fraction) / n)
    return report


class ChunkedSource:
    """Concrete DataSource over catalogs of calendar-chunked binary files.

    All channels of a catalog share the same chunk files, so catalog-level
    availability is computed from the catalog's first channel.
    """

    def __init__(
        self,
        catalogs: Mapping[str, Catalog],
        *,
        max_workers: int = 1,
    ):
        self._catalogs: dict[str, Catalog] = dict(catalogs)
        self.max_workers = max_workers

    # ------------------------------------------------------------------
    # Catalog view
    # ------------------------------------------------------------------
    @property
    def catalog_ids(self) -> list[str]:
        return list(self._catalogs)

    def get_catalog(self, catalog_id: str) -> Catalog:
        try:
            return self._catalogs[catalog_id]
        except KeyError as e:
            raise CatalogNotFound(catalog_id) from e

    def get_channel(self, catalog_id: str, channel_id: str) -> Channel:
        return self.get_catalog(catalog_id)[channel_id]

    # ------------------------------------------------------------------
    # Time range / availability
    # ------------------------------------------------------------------
    def time_range(
        self,
        catalog_id: str,
        search_begin: datetime | None = None,
        search_end: datetime | None = None,
        *,
        cancel: Event | None = None,
    ) -> TimeRange | None:
        """Union of the time ranges of all channels of the catalog."""
        result: TimeRange | None = None
        for ch in self.get_catalog(catalog_id).values():
            tr = channel_time_range(ch, search_begin, search_end, cancel=cancel)
            if tr is None:
                continue
            result = tr if result is None else result.union(tr)
        return result

    def availability(
        self,
        catalog_id: str,
        begin: datetime,
        end: datetime,
        *,
        cancel: Event | None = None,
    ) -> float:
        catalog = self.get_catalog(catalog_id)
        return channel_availability(catalog.primary, begin, end, cancel=cancel)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------
    def create_request(self, catalog_id: str, channel_id: str, begin: datetime, end: datetime) -> ChannelRead:
        channel = self.get_channel(catalog_id, channel_id)
        return ChannelRead(channel_id=channel_id, request=create_buffers(channel, begin, end))

    def read(
        self,
        catalog_id: str,
        begin: datetime,
        end: datetime,
        requests: Iterable[ChannelRead],
        *,
        cancel: Event | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        """Read several channels of one catalog over the same window.

        Channels are resolved and every buffer is checked before the first
        read, so an unknown id or an undersized buffer fails before any
        buffer is written. Progress is reported over the whole batch.
        """
        catalog = self.get_catalog(catalog_id)
        resolved = [(catalog[r.channel_id], r.request) for r in requests]
        for channel, request in resolved:
            validate_request(channel, begin, end, request)
        n = len(resolved)

        logger.debug("reading %d channel(s) of %s", n, catalog_id)

        for i, (channel, request) in enumerate(resolved):
            sub_progress = None if progress is None else _scaled(progress, i, n)
            read_channel(
                channel,
                begin,
                end,
                request,
                max_workers=self.max_workers,
                cancel=cancel,
                progress=sub_progress,
            )
