import pytest

from kelk.errors import (
    CollectionError,
    CollectionHostError,
    HostError,
    InvalidOffsetError,
    OutOfCapacityError,
)


def test_host_error_keeps_code_and_message():
    err = HostError(7)
    assert err.code == 7
    assert str(err) == "Host error. Code: 7"


def test_host_error_negative_code():
    err = HostError(-5)
    assert isinstance(err, Exception)
    assert err.code == -5
    assert str(err) == "Host error. Code: -5"


def test_collection_host_error_message():
    err = CollectionHostError(3)
    assert err.code == 3
    assert str(err) == "host error code: 3"


def test_invalid_offset_message():
    err = InvalidOffsetError(512)
    assert err.offset == 512
    assert str(err) == "invalid offset: 512"


def test_out_of_capacity_message():
    assert str(OutOfCapacityError()) == "Capacity is full"


@pytest.mark.parametrize(
    "err, message",
    [
        (CollectionHostError(1), "host error code: 1"),
        (InvalidOffsetError(0), "invalid offset: 0"),
        (OutOfCapacityError(), "Capacity is full"),
    ],
)
def test_collection_errors_share_base(err, message):
    assert isinstance(err, CollectionError)
    assert str(err) == message


def test_host_error_is_not_collection_error():
    err = HostError(1)
    assert not isinstance(err, CollectionError)
    assert str(err) == "Host error. Code: 1"