import pytest

from kelk.errors import HostError
from kelk.mock import MockStorage, mock_storage


def test_new_storage_is_zero_filled():
    storage = mock_storage(8)
    assert storage.sread(0, 8) == bytes(8)


def test_write_then_read_round_trip():
    storage = MockStorage(16)
    storage.swrite(4, b"test")
    assert storage.sread(4, 4) == b"test"
    assert storage.sread(0, 4) == bytes(4)


def test_write_up_to_end_succeeds():
    storage = mock_storage(4)
    storage.swrite(2, b"ab")
    assert storage.sread(2, 2) == b"ab"


def test_write_past_end_raises_code_one():
    storage = mock_storage(4)
    with pytest.raises(HostError) as info:
        storage.swrite(3, b"ab")
    assert info.value.code == 1
    assert storage.sread(0, 4) == bytes(4)


def test_read_past_end_raises_code_one():
    storage = mock_storage(4)
    with pytest.raises(HostError) as info:
        storage.sread(2, 3)
    assert info.value.code == 1


def test_storage_size():
    assert len(mock_storage(10)) == 10