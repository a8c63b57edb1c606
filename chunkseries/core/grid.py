# chunkseries/core/grid.py
"""
Grid indexer: maps a channel and a time window to calendar-aligned chunk slots.

Slot k of a channel covers [ORIGIN + k*D, ORIGIN + (k+1)*D) where D is the
channel's chunk duration and ORIGIN is midnight UTC of the Unix epoch. D
divides one day, so every day starts on a slot boundary.

Pure computation: nothing here touches the file system.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterator, overload

from .channel import Channel
from .exceptions import InvalidWindow


ORIGIN = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_utc(t: datetime) -> datetime:
    """Naive datetimes are taken as UTC; aware ones are converted."""
    if not isinstance(t, datetime):
        raise TypeError(f"expected a datetime, got {type(t).__name__}")
    if t.tzinfo is None:
        return t.replace(tzinfo=timezone.utc)
    return t.astimezone(timezone.utc)


@dataclass(frozen=True, slots=True)
class TimeRange:
    """Half-open UTC interval [begin, end)."""
    begin: datetime
    end: datetime

    def __post_init__(self) -> None:
        begin, end = to_utc(self.begin), to_utc(self.end)
        if end < begin:
            raise InvalidWindow(f"TimeRange ends before it begins: {begin} > {end}")
        object.__setattr__(self, "begin", begin)
        object.__setattr__(self, "end", end)

    def __iter__(self) -> Iterator[datetime]:
        # allows `begin, end = time_range`
        yield self.begin
        yield self.end

    @property
    def duration(self) -> timedelta:
        return self.end - self.begin

    def union(self, other: "TimeRange") -> "TimeRange":
        return TimeRange(min(self.begin, other.begin), max(self.end, other.end))


@dataclass(frozen=True, slots=True)
class ChunkSlot:
    index: int               # slots since ORIGIN
    start: datetime
    end: datetime
    expected_samples: int
    path: Path

    def overlap(self, begin: datetime, end: datetime) -> tuple[datetime, datetime]:
        return max(self.start, begin), min(self.end, end)


def slot_index(channel: Channel, t: datetime) -> int:
    """Index of the slot containing `t` (floor division on the grid)."""
    return (to_utc(t) - ORIGIN) // channel.chunk_duration


def slot_start(channel: Channel, index: int) -> datetime:
    return ORIGIN + index * channel.chunk_duration


def slot_path(channel: Channel, start: datetime) -> Path:
    """Expected file path of the slot starting at `start`."""
    return channel.root / channel.naming(to_utc(start))


def make_slot(channel: Channel, index: int) -> ChunkSlot:
    start = slot_start(channel, index)
    return ChunkSlot(
        index=index,
        start=start,
        end=start + channel.chunk_duration,
        expected_samples=channel.samples_per_chunk,
        path=slot_path(channel, start),
    )


class SlotGrid:
    """
    Lazy, restartable sequence of the chunk slots intersecting [begin, end).

    Iterating twice yields identical slots; nothing is materialized up front.
    """

    __slots__ = ("channel", "begin", "end", "first", "stop")

    def __init__(self, channel: Channel, begin: datetime, end: datetime):
        begin, end = to_utc(begin), to_utc(end)
        if end < begin:
            raise InvalidWindow(f"Window ends before it begins: {begin} > {end}")

        self.channel = channel
        self.begin = begin
        self.end = end

        if begin == end:
            self.first = self.stop = slot_index(channel, begin)
        else:
            self.first = slot_index(channel, begin)
            # ceil division: a slot starting exactly at `end` is excluded
            self.stop = -((ORIGIN - end) // channel.chunk_duration)

    def __len__(self) -> int:
        return self.stop - self.first

    def __iter__(self) -> Iterator[ChunkSlot]:
        for index in range(self.first, self.stop):
            yield make_slot(self.channel, index)

    def __reversed__(self) -> Iterator[ChunkSlot]:
        for index in range(self.stop - 1, self.first - 1, -1):
            yield make_slot(self.channel, index)

    @overload
    def __getitem__(self, i: int) -> ChunkSlot: ...

    @overload
    def __getitem__(self, i: slice) -> list[ChunkSlot]: ...

    def __getitem__(self, i):
        if isinstance(i, slice):
            return [make_slot(self.channel, k) for k in range(self.first, self.stop)[i]]
        return make_slot(self.channel, range(self.first, self.stop)[i])

    def __repr__(self) -> str:
        return (
            f"SlotGrid(channel={self.channel.id!r}, begin={self.begin.isoformat()}, "
            f"end={self.end.isoformat()}, n={len(self)})"
        )


def enumerate_slots(channel: Channel, begin: datetime, end: datetime) -> SlotGrid:
    """All slots whose interval intersects [begin, end), ascending."""
    return SlotGrid(channel, begin, end)
