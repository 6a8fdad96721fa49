"""Vector kept in contract storage instead of memory."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, ClassVar

from kelk.errors import CollectionHostError, HostError, InvalidOffsetError, OutOfCapacityError
from kelk.storage import Storage, StructLayout, sread_struct, swrite_struct

BOOM = 0xB3000000


@contextmanager
def _host_errors() -> Iterator[None]:
    try:
        yield
    except HostError as exc:
        raise CollectionHostError(exc.code) from exc


@dataclass
class VecHeader:
    """Header stored in front of the vector's elements."""

    LAYOUT: ClassVar[StructLayout] = StructLayout("I", "H", "H", "I", "I")

    boom: int
    reserved: int
    value_len: int
    size: int
    capacity: int

    @classmethod
    def read(cls, storage: Storage, offset: int) -> VecHeader:
        """Read a header stored at ``offset``."""
        with _host_errors():
            return cls(*sread_struct(storage, offset, cls.LAYOUT))

    def _write(self, storage: Storage, offset: int) -> None:
        swrite_struct(
            storage,
            offset,
            self.LAYOUT,
            (self.boom, self.reserved, self.value_len, self.size, self.capacity),
        )


class StorageVec:
    """A fixed-capacity vector whose header and elements live in a storage file.

    Elements are described by a ``struct`` format item such as ``"i"`` or ``"q"``.
    """

    def __init__(
        self, storage: Storage, offset: int, header: VecHeader, value_format: str
    ) -> None:
        self._storage = storage
        self._offset = offset
        self._header = header
        self._value_layout = StructLayout(value_format)

    @classmethod
    def create(
        cls, storage: Storage, offset: int, capacity: int, value_format: str
    ) -> StorageVec:
        """Create an empty vector at ``offset`` and store its header."""
        header = VecHeader(
            boom=BOOM,
            reserved=0,
            value_len=StructLayout(value_format).size,
            size=0,
            capacity=capacity,
        )
        with _host_errors():
            header._write(storage, offset)
        return cls(storage, offset, header, value_format)

    @classmethod
    def lazy_load(cls, storage: Storage, offset: int, value_format: str) -> StorageVec:
        """Load a vector previously created at ``offset``."""
        header = VecHeader.read(storage, offset)
        if header.value_len != StructLayout(value_format).size:
            raise InvalidOffsetError(offset)
        return cls(storage, offset, header, value_format)

    def __len__(self) -> int:
        return self._header.size

    def _element_offset(self, index: int) -> int:
        return self._offset + VecHeader.LAYOUT.size + index * self._header.value_len

    def push(self, value: Any) -> None:
        """Append ``value`` to the end of the vector."""
        header = self._header
        if header.size >= header.capacity:
            raise OutOfCapacityError()
        data = self._value_layout.pack(value)
        offset = self._element_offset(header.size)
        header.size += 1
        with _host_errors():
            header._write(self._storage, self._offset)
            self._storage.swrite(offset, data)

    def get(self, index: int) -> Any | None:
        """Return the element at ``index``, or None if it is out of bounds."""
        if index < 0 or index >= self._header.size:
            return None
        with _host_errors():
            (value,) = sread_struct(
                self._storage, self._element_offset(index), self._value_layout
            )
        return value