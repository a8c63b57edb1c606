from __future__ import annotations

from datetime import datetime, timedelta
from threading import Event
from typing import Iterable
import logging

from chunkseries.core import (
    Channel,
    ChunkSlot,
    InvalidChannel,
    OperationCancelled,
    ParsableNaming,
    TimeRange,
    enumerate_slots,
    slot_index,
    to_utc,
)
from chunkseries.core.grid import make_slot

from .decoder import probe

logger = logging.getLogger(__name__)


def _check_cancel(cancel: Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise OperationCancelled("operation cancelled")


def is_present(channel: Channel, slot: ChunkSlot) -> bool:
    return probe(slot.path, channel, slot.expected_samples)


def availability(
    channel: Channel,
    begin: datetime,
    end: datetime,
    *,
    cancel: Event | None = None,
) -> float:
    """Fraction of the slots intersecting [begin, end) backed by a decodable chunk.

    Slots only partially covered by the window count as whole slots. An
    empty window yields 0.0.
    """
    grid = enumerate_slots(channel, begin, end)
    total = len(grid)
    if total == 0:
        return 0.0

    present = 0
    for slot in grid:
        _check_cancel(cancel)
        if is_present(channel, slot):
            present += 1

    logger.debug(
        "availability %s [%s, %s): %d/%d slots",
        channel.id, grid.begin.isoformat(), grid.end.isoformat(), present, total,
    )
    return present / total


def discover_slots(channel: Channel) -> list[ChunkSlot]:
    """Slots whose file name exists under the channel root, ascending.

    Names are mapped back to slot starts with the channel's naming template;
    files that do not parse or do not start on the slot grid are ignored.
    Presence is not checked here.
    """
    naming = channel.naming
    if not isinstance(naming, ParsableNaming):
        raise InvalidChannel(
            f"Channel '{channel.id}': naming function cannot parse paths; "
            "pass explicit search bounds to time_range()."
        )

    root = channel.root
    if not root.is_dir():
        logger.debug("data root missing for %s: %s", channel.id, root)
        return []

    indices: set[int] = set()
    for p in root.rglob("*"):
        if not p.is_file():
            continue
        start = naming.parse(p.relative_to(root))
        if start is None:
            continue
        index = slot_index(channel, start)
        if make_slot(channel, index).start != start:
            logger.debug("ignoring off-grid chunk file: %s", p)
            continue
        indices.add(index)

    return [make_slot(channel, i) for i in sorted(indices)]


def _first_present(channel: Channel, slots: Iterable[ChunkSlot], cancel: Event | None) -> ChunkSlot | None:
    for slot in slots:
        _check_cancel(cancel)
        if is_present(channel, slot):
            return slot
    return None


def time_range(
    channel: Channel,
    search_begin: datetime | None = None,
    search_end: datetime | None = None,
    *,
    cancel: Event | None = None,
) -> TimeRange | None:
    """First present slot start to last present slot end, or None without data.

    With both search bounds the slot grid between them is scanned from each
    end. Without bounds candidate files are discovered under the channel
    root (requires a parsable naming template).
    """
    if (search_begin is None) != (search_end is None):
        raise ValueError("search_begin and search_end must be given together")

    if search_begin is not None:
        grid = enumerate_slots(channel, search_begin, search_end)
        first = _first_present(channel, grid, cancel)
        last = _first_present(channel, reversed(grid), cancel) if first is not None else None
    else:
        candidates = discover_slots(channel)
        first = _first_present(channel, candidates, cancel)
        last = _first_present(channel, reversed(candidates), cancel) if first is not None else None

    if first is None or last is None:
        logger.info("no data found for channel %s", channel.id)
        return None

    result = TimeRange(first.start, last.end)
    logger.info(
        "time range %s: %s .. %s", channel.id, result.begin.isoformat(), result.end.isoformat()
    )
    return result


def daily_availability(
    channel: Channel,
    begin: datetime,
    end: datetime,
    *,
    cancel: Event | None = None,
) -> dict[datetime, float]:
    """Availability of each consecutive one-day window from `begin` up to `end`."""
    current = to_utc(begin)
    end = to_utc(end)
    result: dict[datetime, float] = {}
    while current < end:
        result[current] = availability(channel, current, current + timedelta(days=1), cancel=cancel)
        current += timedelta(days=1)
    return result
