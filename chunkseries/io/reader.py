from __future__ import annotations

from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from threading import Event
from typing import Any, Callable, Iterator
import logging

import numpy as np

from chunkseries.core import (
    BufferTooSmall,
    Channel,
    ChunkSlot,
    OperationCancelled,
    SlotGrid,
    enumerate_slots,
)

from .decoder import DecodedChunk, decode

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


def _as_bytes(buffer: Any, name: str) -> np.ndarray:
    """Writable uint8 view over a caller buffer (bytearray, memoryview, ndarray)."""
    mv = memoryview(buffer)
    if mv.readonly:
        raise TypeError(f"{name} buffer must be writable")
    return np.frombuffer(mv.cast("B"), dtype=np.uint8)


@dataclass(slots=True)
class ReadRequest:
    """
    Caller-owned output targets of one read.

    samples: byte buffer receiving samples in the channel's dtype (host order)
    status:  one byte per chunk slot of the window: 1 = present, 0 = gap
    """

    samples: Any
    status: Any

    def values(self, channel: Channel) -> np.ndarray:
        """Typed view of the sample buffer (no copy)."""
        raw = _as_bytes(self.samples, "samples")
        usable = raw.size - raw.size % channel.sample_size
        return raw[:usable].view(channel.dtype)

    def status_array(self) -> np.ndarray:
        return _as_bytes(self.status, "status")


def sample_count(channel: Channel, begin: datetime, end: datetime) -> int:
    grid = enumerate_slots(channel, begin, end)
    return channel.samples_in(grid.end - grid.begin)


def slot_count(channel: Channel, begin: datetime, end: datetime) -> int:
    return len(enumerate_slots(channel, begin, end))


def create_buffers(channel: Channel, begin: datetime, end: datetime) -> ReadRequest:
    """Zero-initialized buffers sized for reading [begin, end)."""
    n_samples = sample_count(channel, begin, end)
    return ReadRequest(
        samples=bytearray(n_samples * channel.sample_size),
        status=np.zeros(slot_count(channel, begin, end), dtype=np.uint8),
    )


@dataclass(frozen=True, slots=True)
class _Placement:
    """Where the overlap of one slot with the window lands."""
    position: int     # slot position within the window
    slot: ChunkSlot
    src_lo: int       # first sample inside the chunk
    dst_lo: int       # first sample inside the output
    length: int       # samples to copy


def _placements(channel: Channel, grid: SlotGrid) -> Iterator[_Placement]:
    n_samples = channel.samples_in(grid.end - grid.begin)
    for position, slot in enumerate(grid):
        lo, hi = slot.overlap(grid.begin, grid.end)
        dst_lo = channel.samples_in(lo - grid.begin)
        dst_hi = min(channel.samples_in(hi - grid.begin), n_samples)
        src_lo = channel.samples_in(lo - slot.start)
        length = max(0, min(dst_hi - dst_lo, slot.expected_samples - src_lo))
        yield _Placement(position, slot, src_lo, dst_lo, length)


def _check_cancel(cancel: Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise OperationCancelled("read cancelled")


def _decoded(
    channel: Channel,
    placements: Iterator[_Placement],
    max_workers: int,
    cancel: Event | None,
) -> Iterator[tuple[_Placement, DecodedChunk]]:
    """Decode slots in order; with several workers, keep a bounded window in flight."""
    if max_workers <= 1:
        for p in placements:
            _check_cancel(cancel)
            yield p, decode(p.slot.path, channel, p.slot.expected_samples)
        return

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="chunkseries") as pool:
        pending: deque[tuple[_Placement, Future[DecodedChunk]]] = deque()

        def submit_next() -> None:
            p = next(placements, None)
            if p is not None:
                pending.append((p, pool.submit(decode, p.slot.path, channel, p.slot.expected_samples)))

        for _ in range(2 * max_workers):
            submit_next()

        while pending:
            if cancel is not None and cancel.is_set():
                for _, fut in pending:
                    fut.cancel()
                raise OperationCancelled("read cancelled")
            p, fut = pending.popleft()
            yield p, fut.result()
            submit_next()


def validate_request(
    channel: Channel,
    begin: datetime,
    end: datetime,
    output: ReadRequest,
) -> tuple[np.ndarray, np.ndarray]:
    """Check that `output` can hold [begin, end) of `channel`.

    Returns the writable byte views of the sample and status buffers.
    Raises BufferTooSmall (or TypeError for read-only buffers) without
    writing anything.
    """
    grid = enumerate_slots(channel, begin, end)
    n_slots = len(grid)
    n_samples = channel.samples_in(grid.end - grid.begin)
    size = channel.sample_size

    out = _as_bytes(output.samples, "samples")
    status = _as_bytes(output.status, "status")

    if out.size < n_samples * size:
        raise BufferTooSmall(
            f"sample buffer holds {out.size} bytes, window needs {n_samples * size} "
            f"({n_samples} x {size})"
        )
    if status.size < n_slots:
        raise BufferTooSmall(f"status buffer holds {status.size} entries, window has {n_slots} slots")
    return out, status


def read(
    channel: Channel,
    begin: datetime,
    end: datetime,
    output: ReadRequest,
    *,
    max_workers: int = 1,
    cancel: Event | None = None,
    progress: ProgressCallback | None = None,
) -> int:
    """Read [begin, end) of `channel` into caller buffers.

    Present chunks are copied to their offset in ``output.samples`` (edge
    chunks only contribute the part overlapping the window) and flagged 1
    in ``output.status``; gaps are flagged 0 and their sample range is left
    untouched.

    Returns the number of present slots. Raises BufferTooSmall before any
    write when the buffers cannot hold the window, and OperationCancelled
    when `cancel` is set between two slots.
    """
    if max_workers < 1:
        raise ValueError("max_workers must be >= 1")

    grid = enumerate_slots(channel, begin, end)
    n_slots = len(grid)
    size = channel.sample_size
    out, status = validate_request(channel, begin, end, output)

    present = 0
    for done, (p, chunk) in enumerate(_decoded(channel, _placements(channel, grid), max_workers, cancel), start=1):
        if chunk.success:
            if p.length > 0:
                src = chunk.samples[p.src_lo:p.src_lo + p.length].view(np.uint8)
                out[p.dst_lo * size:(p.dst_lo + p.length) * size] = src
            status[p.position] = 1
            present += 1
        else:
            status[p.position] = 0

        if progress is not None:
            progress(done / n_slots)

    logger.info(
        "read %s [%s, %s): %d/%d slots present",
        channel.id, grid.begin.isoformat(), grid.end.isoformat(), present, n_slots,
    )
    return present


def expand_status(channel: Channel, begin: datetime, end: datetime, status: Any) -> np.ndarray:
    """Per-sample presence (uint8) from per-slot status of a read over [begin, end)."""
    grid = enumerate_slots(channel, begin, end)
    slot_status = np.frombuffer(memoryview(status).cast("B"), dtype=np.uint8)
    if slot_status.size < len(grid):
        raise BufferTooSmall(f"status holds {slot_status.size} entries, window has {len(grid)} slots")

    per_sample = np.zeros(channel.samples_in(grid.end - grid.begin), dtype=np.uint8)
    for p in _placements(channel, grid):
        per_sample[p.dst_lo:p.dst_lo + p.length] = 1 if slot_status[p.position] else 0
    return per_sample
