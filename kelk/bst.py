"""Binary search tree kept in contract storage instead of memory."""

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


def _format_size(fmt: str) -> int:
    return StructLayout(fmt).size


@dataclass
class BSTHeader:
    """Header stored in front of the tree's nodes."""

    LAYOUT: ClassVar[StructLayout] = StructLayout("I", "H", "H", "I", "I")

    boom: int
    key_len: int
    value_len: int
    size: int
    capacity: int

    @classmethod
    def read(cls, storage: Storage, offset: int) -> BSTHeader:
        """Read a header stored at ``offset``."""
        with _host_errors():
            return cls(*sread_struct(storage, offset, cls.LAYOUT))

    def _write(self, storage: Storage, offset: int) -> None:
        swrite_struct(
            storage,
            offset,
            self.LAYOUT,
            (self.boom, self.key_len, self.value_len, self.size, self.capacity),
        )


@dataclass
class _Node:
    left: int
    right: int
    key: Any
    value: Any


class StorageBST:
    """A binary search tree whose header and nodes live in a storage file.

    Keys and values are described by ``struct`` format items such as
    ``"i"``, ``"q"`` or ``"4s"``.
    """

    def __init__(
        self,
        storage: Storage,
        offset: int,
        header: BSTHeader,
        key_format: str,
        value_format: str,
    ) -> None:
        self._storage = storage
        self._offset = offset
        self._header = header
        self._node_layout = StructLayout("I", "I", key_format, value_format)

    @classmethod
    def create(
        cls,
        storage: Storage,
        offset: int,
        capacity: int,
        key_format: str,
        value_format: str,
    ) -> StorageBST:
        """Create an empty tree at ``offset`` and store its header."""
        header = BSTHeader(
            boom=BOOM,
            key_len=_format_size(key_format),
            value_len=_format_size(value_format),
            size=0,
            capacity=capacity,
        )
        with _host_errors():
            header._write(storage, offset)
        return cls(storage, offset, header, key_format, value_format)

    @classmethod
    def lazy_load(
        cls, storage: Storage, offset: int, key_format: str, value_format: str
    ) -> StorageBST:
        """Load a tree previously created at ``offset``."""
        header = BSTHeader.read(storage, offset)
        if header.key_len != _format_size(key_format):
            raise InvalidOffsetError(offset)
        if header.value_len != _format_size(value_format):
            raise InvalidOffsetError(offset)
        return cls(storage, offset, header, key_format, value_format)

    @property
    def _root_offset(self) -> int:
        return self._offset + BSTHeader.LAYOUT.size

    def _read_node(self, offset: int) -> _Node:
        return _Node(*sread_struct(self._storage, offset, self._node_layout))

    def _write_node(self, offset: int, node: _Node) -> None:
        swrite_struct(
            self._storage,
            offset,
            self._node_layout,
            (node.left, node.right, node.key, node.value),
        )

    def _write_header(self) -> None:
        self._header._write(self._storage, self._offset)

    def insert(self, key: Any, value: Any) -> Any | None:
        """Insert a key-value pair.

        Returns None if the key was new, otherwise the replaced value.
        """
        self._node_layout.pack(0, 0, key, value)
        header = self._header
        with _host_errors():
            if header.size == 0:
                header.size = 1
                self._write_header()
                self._write_node(self._root_offset, _Node(0, 0, key, value))
                return None
            if header.size >= header.capacity:
                raise OutOfCapacityError()

            offset = self._root_offset
            node = self._read_node(offset)
            while True:
                if node.key == key:
                    old_value = node.value
                    node.value = value
                    self._write_node(offset, node)
                    return old_value
                go_left = node.key < key
                child = node.left if go_left else node.right
                if child == 0:
                    header.size += 1
                    new_offset = self._root_offset + header.size * self._node_layout.size
                    self._write_header()
                    if go_left:
                        node.left = new_offset
                    else:
                        node.right = new_offset
                    self._write_node(offset, node)
                    self._write_node(new_offset, _Node(0, 0, key, value))
                    return None
                offset = child
                node = self._read_node(offset)

    def find(self, key: Any) -> Any | None:
        """Return the value stored for ``key``, or None if it is absent."""
        if self._header.size == 0:
            return None
        with _host_errors():
            node = self._read_node(self._root_offset)
            while True:
                if node.key == key:
                    return node.value
                child = node.left if node.key < key else node.right
                if child == 0:
                    return None
                node = self._read_node(child)

    def contains_key(self, key: Any) -> bool:
        """Return True if the tree holds a value for ``key``."""
        return self.find(key) is not None