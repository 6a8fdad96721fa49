"""In-memory storage for testing contracts."""

from __future__ import annotations

from kelk.errors import HostError
from kelk.storage import Storage


class MockStorage(Storage):
    """Storage held in a fixed-size, zero-filled byte array."""

    def __init__(self, size: int) -> None:
        self._data = bytearray(size)

    def __len__(self) -> int:
        return len(self._data)

    def _check(self, offset: int, length: int) -> None:
        if offset < 0 or length < 0 or offset + length > len(self._data):
            raise HostError(1)

    def sread(self, offset: int, length: int) -> bytes:
        self._check(offset, length)
        return bytes(self._data[offset : offset + length])

    def swrite(self, offset: int, data: bytes) -> None:
        self._check(offset, len(data))
        self._data[offset : offset + len(data)] = data


def mock_storage(storage_size: int) -> MockStorage:
    """Create a zero-filled mock storage of the given size."""
    return MockStorage(storage_size)