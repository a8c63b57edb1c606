# chunkseries/core/__init__.py
"""
Core domain objects for chunkseries.

This module defines the file-format-agnostic data model:
- Channel: one measurement stream (sample rate, record layout, chunk grid)
- RecordLayout: binary layout of a channel inside a chunk file
- ChunkSlot / SlotGrid: calendar-aligned chunk slots of a time window
- Catalog: channels sharing one chunk file set, with pass-through metadata

The core layer performs no I/O.
"""

from .layout import RecordLayout, SAMPLE_TYPES
from .naming import PathTemplate, NamingFunction, ParsableNaming
from .channel import Channel
from .grid import (
    ORIGIN,
    ChunkSlot,
    SlotGrid,
    TimeRange,
    enumerate_slots,
    slot_index,
    slot_path,
    to_utc,
)
from .catalog import Catalog
from .metadata import ChannelMeta, CatalogMeta
from .exceptions import (
    CoreError,
    ConfigurationError,
    InvalidChannel,
    InvalidSettings,
    InvalidWindow,
    BufferTooSmall,
    OperationCancelled,
    ChannelNotFound,
    CatalogNotFound,
)


__all__ = [
    # layout / naming
    "RecordLayout",
    "SAMPLE_TYPES",
    "PathTemplate",
    "NamingFunction",
    "ParsableNaming",

    # domain objects
    "Channel",
    "Catalog",

    # grid
    "ORIGIN",
    "ChunkSlot",
    "SlotGrid",
    "TimeRange",
    "enumerate_slots",
    "slot_index",
    "slot_path",
    "to_utc",

    # metadata
    "ChannelMeta",
    "CatalogMeta",

    # exceptions
    "CoreError",
    "ConfigurationError",
    "InvalidChannel",
    "InvalidSettings",
    "InvalidWindow",
    "BufferTooSmall",
    "OperationCancelled",
    "ChannelNotFound",
    "CatalogNotFound",
]
