"""Execution context handed to contracts, its mock, and parameter values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import cbor2

from kelk.mock import MockStorage
from kelk.storage import Storage

PARAM_CALLER_ADDRESS = 0x0010
PARAM_CALLER_ID = 0x0011

_RANGES: dict[int, tuple[int, int]] = {
    0: (-(2**31), 2**31 - 1),
    1: (-(2**63), 2**63 - 1),
}


@dataclass(frozen=True)
class ParamType:
    """A parameter value: a 32-bit (``I32``) or 64-bit (``I64``) integer.

    Encoded in CBOR as ``[kind, [value]]``.
    """

    I32: ClassVar[int] = 0
    I64: ClassVar[int] = 1

    kind: int
    value: int

    def __post_init__(self) -> None:
        if self.kind not in _RANGES:
            raise ValueError(f"unknown parameter kind: {self.kind!r}")
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"parameter value must be an integer, got {self.value!r}")
        low, high = _RANGES[self.kind]
        if not low <= self.value <= high:
            raise ValueError(f"value {self.value} out of range for kind {self.kind}")

    def encode(self) -> bytes:
        """Encode the parameter as CBOR."""
        return cbor2.dumps([self.kind, [self.value]])

    @classmethod
    def decode(cls, data: bytes) -> ParamType:
        """Decode a parameter from CBOR; raises ValueError on malformed data."""
        try:
            item = cbor2.loads(data)
        except cbor2.CBORDecodeError as exc:
            raise ValueError(f"invalid CBOR: {exc}") from exc
        if not isinstance(item, list) or len(item) != 2:
            raise ValueError("expected a two-element array")
        kind, fields = item
        if not isinstance(kind, int) or not isinstance(fields, list) or len(fields) != 1:
            raise ValueError("malformed parameter")
        (value,) = fields
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError("parameter value is not an integer")
        return cls(kind, value)


@dataclass(frozen=True)
class Context:
    """A borrowed view of the API a contract talks to."""

    api: Storage


@dataclass
class OwnedContext:
    """Owns the API instance; lets the API be injected, e.g. mocked in tests."""

    api: Storage

    def as_ref(self) -> Context:
        """Return a context referring to the owned API."""
        return Context(self.api)


class MockContextAPI(Storage):
    """Context API backed by in-memory mock storage."""

    def __init__(self, size: int) -> None:
        self._storage = MockStorage(size)

    def sread(self, offset: int, length: int) -> bytes:
        return self._storage.sread(offset, length)

    def swrite(self, offset: int, data: bytes) -> None:
        self._storage.swrite(offset, data)


def mock_context(storage_size: int) -> OwnedContext:
    """Create a context whose storage is a zero-filled mock of the given size."""
    return OwnedContext(MockContextAPI(storage_size))