# chunkseries/core/exceptions.py
from __future__ import annotations


class CoreError(Exception):
    """Base error for all chunkseries exceptions."""


# ---- Configuration errors (fatal, no slot arithmetic possible) ----
class ConfigurationError(CoreError):
    """Raised when a channel or its source settings cannot be resolved."""


class InvalidChannel(ConfigurationError):
    """Raised when a Channel / RecordLayout / ChannelMeta is constructed with invalid inputs."""


class InvalidSettings(ConfigurationError):
    """Raised when a settings file or mapping is malformed."""


# ---- Request errors ----
class InvalidWindow(CoreError, ValueError):
    """Raised when a requested time window ends before it begins."""


class BufferTooSmall(CoreError, ValueError):
    """Raised before any write when caller buffers cannot hold the computed extent."""


class OperationCancelled(CoreError):
    """Raised when a read or availability scan observes its cancellation signal."""


# ---- Lookup errors (also behave like KeyError for dict-like APIs) ----
class ChannelNotFound(CoreError, KeyError):
    """Raised when a requested channel id is not present."""


class CatalogNotFound(CoreError, KeyError):
    """Raised when a requested catalog id is not present."""
