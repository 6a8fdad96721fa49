"""Errors raised by the host storage and by the storage collections."""

from __future__ import annotations


class HostError(Exception):
    """Error reported by the host, carrying its numeric code."""

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code

    def __str__(self) -> str:
        return f"Host error. Code: {self.code}"

    def __repr__(self) -> str:
        return f"HostError(code={self.code!r})"


class CollectionError(Exception):
    """Base class for errors raised by storage collections."""


class CollectionHostError(CollectionError):
    """A host error surfaced through a storage collection."""

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code

    def __str__(self) -> str:
        return f"host error code: {self.code}"


class InvalidOffsetError(CollectionError):
    """No collection of the expected shape is stored at the offset."""

    def __init__(self, offset: int) -> None:
        super().__init__(offset)
        self.offset = offset

    def __str__(self) -> str:
        return f"invalid offset: {self.offset}"


class OutOfCapacityError(CollectionError):
    """The collection has reached its capacity."""

    def __init__(self) -> None:
        super().__init__("Capacity is full")

    def __str__(self) -> str:
        return "Capacity is full"