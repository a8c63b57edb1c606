from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, TypeVar
import logging
import os

import numpy as np

from chunkseries.core import Channel

logger = logging.getLogger(__name__)

T = TypeVar("T")

STATE_OK = "ok"
STATE_MISSING = "missing"          # no file for the slot (steady state, not an error)
STATE_CORRUPT = "corrupt"          # size / record count mismatch
STATE_UNREADABLE = "unreadable"    # I/O error persisted after one retry


@dataclass(frozen=True, slots=True)
class DecodedChunk:
    """
    Result of decoding one chunk file for one channel.

    `samples` is empty unless `success` is True; partial content of a
    corrupt file is never exposed.
    """

    path: Path
    state: str
    samples: np.ndarray = field(repr=False)

    @property
    def success(self) -> bool:
        return self.state == STATE_OK

    @property
    def count(self) -> int:
        return int(self.samples.size)

    @classmethod
    def failed(cls, path: Path, channel: Channel, state: str) -> "DecodedChunk":
        return cls(path=path, state=state, samples=np.empty(0, dtype=channel.dtype))


def _with_retry(path: Path, op: Callable[[Path], T]) -> T:
    """Run `op(path)`, retrying once on I/O errors other than a missing file."""
    try:
        return op(path)
    except FileNotFoundError:
        raise
    except OSError as e:
        logger.warning("I/O error on %s (%s), retrying once", path, e)
    return op(path)


def decode(path: str | Path, channel: Channel, expected_samples: int | None = None) -> DecodedChunk:
    """Decode the samples of `channel` from one chunk file.

    Parameters
    ----------
    path:
        Chunk file location (usually ``ChunkSlot.path``).
    channel:
        Channel whose layout selects the bytes of each record.
    expected_samples:
        Sample count the file must hold; defaults to the channel's
        samples per chunk.

    Returns
    -------
    DecodedChunk
        Never raises for missing, truncated or unreadable files; those are
        reported through ``state``.
    """
    path = Path(path)
    layout = channel.layout
    expected = channel.samples_per_chunk if expected_samples is None else int(expected_samples)

    try:
        data = _with_retry(path, Path.read_bytes)
    except FileNotFoundError:
        logger.debug("chunk missing: %s", path)
        return DecodedChunk.failed(path, channel, STATE_MISSING)
    except OSError as e:
        logger.warning("chunk unreadable after retry: %s (%s)", path, e)
        return DecodedChunk.failed(path, channel, STATE_UNREADABLE)

    body = len(data) - layout.header_size
    if body < 0 or body % layout.record_size != 0:
        logger.warning(
            "chunk corrupt: %s (%d bytes is not header %d + whole %d-byte records)",
            path, len(data), layout.header_size, layout.record_size,
        )
        return DecodedChunk.failed(path, channel, STATE_CORRUPT)

    n_records = body // layout.record_size
    if n_records != expected:
        logger.warning(
            "chunk corrupt: %s (%d records, expected %d)", path, n_records, expected
        )
        return DecodedChunk.failed(path, channel, STATE_CORRUPT)

    # Strided view over this channel's bytes in every record, then an owned
    # copy in host byte order.
    view = np.ndarray(
        shape=(n_records,),
        dtype=layout.dtype,
        buffer=data,
        offset=layout.header_size + layout.offset,
        strides=(layout.record_size,),
    )
    samples = view.astype(layout.native_dtype, copy=True)

    return DecodedChunk(path=path, state=STATE_OK, samples=samples)


def probe(path: str | Path, channel: Channel, expected_samples: int | None = None) -> bool:
    """Cheap presence check agreeing with ``decode(...).success``.

    A file decodes successfully exactly when its size equals the header plus
    `expected_samples` whole records, so a stat is enough.
    """
    path = Path(path)
    expected = channel.samples_per_chunk if expected_samples is None else int(expected_samples)

    try:
        st = _with_retry(path, os.stat)
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning("chunk unreadable after retry: %s (%s)", path, e)
        return False

    if not path.is_file():
        return False
    return st.st_size == channel.layout.file_size(expected)
