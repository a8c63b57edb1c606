# chunkseries/core/channel.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from fractions import Fraction
from pathlib import Path

import numpy as np

from .exceptions import InvalidChannel
from .layout import RecordLayout
from .metadata import ChannelMeta
from .naming import NamingFunction, PathTemplate


ONE_DAY = timedelta(days=1)
_US = timedelta(microseconds=1)


def _as_rate(value: object) -> Fraction:
    # str() keeps decimal floats exact (0.1 -> 1/10)
    if isinstance(value, bool):
        raise InvalidChannel("Channel.sample_rate must be a number.")
    if isinstance(value, Fraction):
        return value
    if isinstance(value, (int, float, str)):
        try:
            return Fraction(str(value))
        except (ValueError, ZeroDivisionError) as e:
            raise InvalidChannel(f"Invalid sample rate: {value!r}") from e
    raise InvalidChannel("Channel.sample_rate must be a number.")


@dataclass(frozen=True, slots=True)
class Channel:
    """
    One logical measurement stream stored as fixed-duration chunk files.

    Files live under `root`, one per chunk slot, at `naming(slot_start)`.
    Chunk slots are aligned to multiples of `chunk_duration` from midnight
    UTC, so `chunk_duration` must divide one day evenly and hold a whole
    number of samples.
    """
    id: str
    sample_rate: float | str | Fraction
    layout: RecordLayout = field(default_factory=RecordLayout)
    chunk_duration: timedelta = timedelta(minutes=10)
    root: Path = Path(".")
    naming: NamingFunction = PathTemplate("%Y-%m/%Y-%m-%d_%H-%M-%S.dat")
    meta: ChannelMeta = field(default_factory=ChannelMeta)

    rate: Fraction = field(default=None, init=False, repr=False, compare=False)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise InvalidChannel("Channel.id must be a non-empty string.")

        rate = _as_rate(self.sample_rate)
        if rate <= 0:
            raise InvalidChannel(f"Channel '{self.id}': sample rate must be > 0, got {self.sample_rate}.")
        object.__setattr__(self, "rate", rate)

        if not isinstance(self.layout, RecordLayout):
            raise InvalidChannel("Channel.layout must be a RecordLayout instance.")
        if not isinstance(self.meta, ChannelMeta):
            raise InvalidChannel("Channel.meta must be a ChannelMeta instance.")

        if not isinstance(self.chunk_duration, timedelta):
            raise InvalidChannel("Channel.chunk_duration must be a timedelta.")
        if self.chunk_duration <= timedelta(0):
            raise InvalidChannel(f"Channel '{self.id}': chunk duration must be > 0.")
        if ONE_DAY % self.chunk_duration:
            raise InvalidChannel(
                f"Channel '{self.id}': chunk duration {self.chunk_duration} does not divide one day."
            )

        samples = Fraction(self.chunk_duration // _US) * rate / 1_000_000
        if samples.denominator != 1:
            raise InvalidChannel(
                f"Channel '{self.id}': chunk duration {self.chunk_duration} holds "
                f"{float(samples)} samples at {self.sample_rate} Hz (must be whole)."
            )

        if isinstance(self.naming, str):
            object.__setattr__(self, "naming", PathTemplate(self.naming))
        elif not callable(self.naming):
            raise InvalidChannel("Channel.naming must be a template string or a callable.")

        object.__setattr__(self, "root", Path(self.root))

    # Convenience accessors
    @property
    def dtype(self) -> np.dtype:
        return self.layout.native_dtype

    @property
    def sample_size(self) -> int:
        return self.layout.sample_size

    @property
    def samples_per_chunk(self) -> int:
        return self.samples_in(self.chunk_duration)

    @property
    def unit(self) -> str | None:
        return self.meta.unit

    @property
    def groups(self) -> tuple[str, ...]:
        return self.meta.groups

    def samples_in(self, span: timedelta) -> int:
        """Number of whole sample periods in `span` (floored)."""
        us = span // _US
        return (us * self.rate.numerator) // (1_000_000 * self.rate.denominator)

