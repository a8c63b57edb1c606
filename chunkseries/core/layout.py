# chunkseries/core/layout.py
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .exceptions import InvalidChannel


# Closed set of numeric type tags -> numpy type codes (byte order added later).
SAMPLE_TYPES: dict[str, str] = {
    "int8": "i1",
    "uint8": "u1",
    "int16": "i2",
    "uint16": "u2",
    "int32": "i4",
    "uint32": "u4",
    "int64": "i8",
    "uint64": "u8",
    "float32": "f4",
    "float64": "f8",
}

_BYTE_ORDERS: dict[str, str] = {
    "little": "<",
    "big": ">",
}


@dataclass(frozen=True, slots=True)
class RecordLayout:
    """
    Binary layout of one channel inside a chunk file.

    A chunk file is `header_size` bytes followed by fixed-size records of
    `record_size` bytes. Each record holds one sample of this channel at
    `offset`, possibly next to samples of sibling channels.
    """
    sample_type: str = "float32"
    byte_order: str = "little"
    record_size: int | None = None
    offset: int = 0
    header_size: int = 0

    # Resolved once from (sample_type, byte_order)
    dtype: np.dtype = field(default=None, init=False, repr=False, compare=False)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        code = SAMPLE_TYPES.get(self.sample_type)
        if code is None:
            known = ", ".join(SAMPLE_TYPES)
            raise InvalidChannel(
                f"Unknown sample type '{self.sample_type}' (expected one of: {known})."
            )

        prefix = _BYTE_ORDERS.get(self.byte_order)
        if prefix is None:
            raise InvalidChannel(
                f"Unknown byte order '{self.byte_order}' (expected 'little' or 'big')."
            )

        dtype = np.dtype(prefix + code)
        object.__setattr__(self, "dtype", dtype)

        # A non-multiplexed file is just a packed sample array.
        if self.record_size is None:
            object.__setattr__(self, "record_size", dtype.itemsize)

        if not isinstance(self.record_size, int) or self.record_size <= 0:
            raise InvalidChannel("RecordLayout.record_size must be a positive integer.")
        if not isinstance(self.offset, int) or self.offset < 0:
            raise InvalidChannel("RecordLayout.offset must be a non-negative integer.")
        if not isinstance(self.header_size, int) or self.header_size < 0:
            raise InvalidChannel("RecordLayout.header_size must be a non-negative integer.")
        if self.offset + dtype.itemsize > self.record_size:
            raise InvalidChannel(
                f"Sample at offset {self.offset} ({dtype.itemsize} bytes) does not fit "
                f"in a {self.record_size}-byte record."
            )

    @property
    def sample_size(self) -> int:
        return int(self.dtype.itemsize)

    @property
    def native_dtype(self) -> np.dtype:
        """Dtype used for samples handed to callers (host byte order)."""
        return self.dtype.newbyteorder("=")

    def file_size(self, n_records: int) -> int:
        return self.header_size + n_records * self.record_size
