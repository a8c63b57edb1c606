# test/test_exceptions.py
import pytest

from chunkseries.core import (
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


def test_exception_inheritance_configuration():
    assert issubclass(ConfigurationError, CoreError)
    assert issubclass(InvalidChannel, ConfigurationError)
    assert issubclass(InvalidSettings, ConfigurationError)


def test_exception_inheritance_request_errors():
    assert issubclass(InvalidWindow, CoreError)
    assert issubclass(InvalidWindow, ValueError)
    assert issubclass(BufferTooSmall, CoreError)
    assert issubclass(BufferTooSmall, ValueError)
    assert issubclass(OperationCancelled, CoreError)


def test_exception_inheritance_lookup_keyerror():
    assert issubclass(ChannelNotFound, KeyError)
    assert issubclass(ChannelNotFound, CoreError)
    assert issubclass(CatalogNotFound, KeyError)
    assert issubclass(CatalogNotFound, CoreError)


def test_lookup_errors_can_be_raised_and_caught_as_keyerror():
    with pytest.raises(KeyError):
        raise ChannelNotFound("WEA10_ACC_Y")

    with pytest.raises(KeyError):
        raise CatalogNotFound("/A/B/C")
