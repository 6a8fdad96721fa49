"""Byte-addressed contract storage and helpers to read and write values in it."""

from __future__ import annotations

import re
import struct
from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import Enum
from typing import Any

_FIELD_RE = re.compile(r"^(\d*)([xcbB?hHiIlLqQnNefdsp])$")


class NumKind(Enum):
    """Fixed-width integer kinds, stored big-endian."""

    U8 = (1, False)
    U16 = (2, False)
    U32 = (4, False)
    U64 = (8, False)
    I8 = (1, True)
    I16 = (2, True)
    I32 = (4, True)
    I64 = (8, True)

    @property
    def size(self) -> int:
        return self.value[0]

    @property
    def signed(self) -> bool:
        return self.value[1]

    def to_bytes(self, value: int) -> bytes:
        return int(value).to_bytes(self.size, "big", signed=self.signed)

    def from_bytes(self, data: bytes) -> int:
        if len(data) != self.size:
            raise ValueError(f"expected {self.size} byte(s), got {len(data)}")
        return int.from_bytes(data, "big", signed=self.signed)


class StructLayout:
    """A C-style record layout: fields aligned to their natural boundary, little-endian.

    Each field is a ``struct`` format item such as ``"I"``, ``"h"`` or ``"4s"``.
    """

    def __init__(self, *fields: str) -> None:
        if not fields:
            raise ValueError("a layout needs at least one field")
        parts = ["<"]
        position = 0
        max_align = 1
        for field in fields:
            match = _FIELD_RE.match(field)
            if match is None:
                raise ValueError(f"unsupported field format: {field!r}")
            code = match.group(2)
            align = 1 if code in "sp" else struct.calcsize("<" + code)
            max_align = max(max_align, align)
            pad = -position % align
            if pad:
                parts.append(f"{pad}x")
                position += pad
            parts.append(field)
            position += struct.calcsize("<" + field)
        tail = -position % max_align
        if tail:
            parts.append(f"{tail}x")
        self.fields: tuple[str, ...] = tuple(fields)
        self._struct = struct.Struct("".join(parts))
        self._count = len(self._struct.unpack(bytes(self._struct.size)))

    @property
    def size(self) -> int:
        """Size in bytes, including padding."""
        return self._struct.size

    def pack(self, *args: Any) -> bytes:
        if len(args) != self._count:
            raise ValueError(f"expected {self._count} value(s), got {len(args)}")
        try:
            return self._struct.pack(*args)
        except struct.error as exc:
            raise ValueError(str(exc)) from exc

    def unpack(self, data: bytes) -> tuple[Any, ...]:
        if len(data) != self.size:
            raise ValueError(f"expected {self.size} byte(s), got {len(data)}")
        return self._struct.unpack(bytes(data))

    def __repr__(self) -> str:
        return f"StructLayout({', '.join(map(repr, self.fields))})"


class Storage(ABC):
    """Byte-addressed storage file of a contract."""

    @abstractmethod
    def sread(self, offset: int, length: int) -> bytes:
        """Read ``length`` bytes at ``offset``; raises HostError on failure."""

    @abstractmethod
    def swrite(self, offset: int, data: bytes) -> None:
        """Write ``data`` at ``offset``; raises HostError on failure."""

    def sread_num(self, offset: int, kind: NumKind) -> int:
        """Read an integer of the given kind, big-endian."""
        return kind.from_bytes(self.sread(offset, kind.size))

    def swrite_num(self, offset: int, kind: NumKind, value: int) -> None:
        """Write an integer of the given kind, big-endian."""
        self.swrite(offset, kind.to_bytes(value))

    def sread_bool(self, offset: int) -> bool:
        """Read one byte; any non-zero value is true."""
        return self.sread_num(offset, NumKind.I8) != 0

    def swrite_bool(self, offset: int, value: bool) -> None:
        """Write a boolean as a single byte, 1 or 0."""
        self.swrite_num(offset, NumKind.I8, 1 if value else 0)


def sread_struct(storage: Storage, offset: int, layout: StructLayout) -> tuple[Any, ...]:
    """Read a record of the given layout at ``offset``."""
    return layout.unpack(storage.sread(offset, layout.size))


def swrite_struct(
    storage: Storage, offset: int, layout: StructLayout, values: Sequence[Any]
) -> None:
    """Write a record of the given layout at ``offset``."""
    storage.swrite(offset, layout.pack(*values))