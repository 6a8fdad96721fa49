"""A calculator contract that keeps the result of its last operation in storage."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import cbor2

from kelk.context import Context
from kelk.errors import HostError
from kelk.export import ContractError
from kelk.storage import NumKind

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_RESULT_OFFSET = 0


class CalcError(Enum):
    """Failures reported by the calculator contract."""

    KELK_ERROR = 0
    DIV_BY_ZERO = 1

    def encode(self) -> bytes:
        """Encode the error as CBOR, ``[index, []]``."""
        return cbor2.dumps([self.value, []])


class Operation(Enum):
    """Arithmetic operations the calculator can perform."""

    ADD = 0
    SUB = 1
    MUL = 2
    DIV = 3


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_i32(value: Any, name: str) -> None:
    if not _is_int(value):
        raise TypeError(f"{name} must be an integer, got {value!r}")
    if not _I32_MIN <= value <= _I32_MAX:
        raise ValueError(f"{name} out of 32-bit range: {value}")


def _load(data: bytes) -> Any:
    try:
        return cbor2.loads(data)
    except cbor2.CBORDecodeError as exc:
        raise ValueError(f"invalid CBOR: {exc}") from exc


def _split_variant(item: Any) -> tuple[int, list[Any]]:
    if not isinstance(item, list) or len(item) != 2:
        raise ValueError("expected a two-element array")
    index, fields = item
    if not _is_int(index) or not isinstance(fields, list):
        raise ValueError("malformed message")
    return index, fields


@dataclass(frozen=True)
class ProcMsg:
    """A request to apply ``op`` to ``a`` and ``b``.

    Encoded in CBOR as ``[op, [a, b]]``.
    """

    op: Operation
    a: int
    b: int

    def __post_init__(self) -> None:
        if not isinstance(self.op, Operation):
            raise TypeError(f"op must be an Operation, got {self.op!r}")
        _check_i32(self.a, "a")
        _check_i32(self.b, "b")

    def encode(self) -> bytes:
        """Encode the message as CBOR."""
        return cbor2.dumps([self.op.value, [self.a, self.b]])

    @classmethod
    def decode(cls, data: bytes) -> ProcMsg:
        """Decode a message from CBOR; raises ValueError on malformed data."""
        return cls._from_item(_load(data))

    @classmethod
    def _from_item(cls, item: Any) -> ProcMsg:
        index, fields = _split_variant(item)
        try:
            op = Operation(index)
        except ValueError as exc:
            raise ValueError(f"unknown operation: {index}") from exc
        if len(fields) != 2 or not all(_is_int(field) for field in fields):
            raise ValueError("operation needs two integer operands")
        try:
            return cls(op, *fields)
        except (TypeError, ValueError) as exc:
            raise ValueError(str(exc)) from exc


class QueryMsg(Enum):
    """Queries the calculator answers."""

    LAST_RESULT = 0

    def encode(self) -> bytes:
        """Encode the query as CBOR, ``[index, []]``."""
        return cbor2.dumps([self.value, []])

    @classmethod
    def _from_item(cls, item: Any) -> QueryMsg:
        index, fields = _split_variant(item)
        if fields:
            raise ValueError("query takes no fields")
        try:
            return cls(index)
        except ValueError as exc:
            raise ValueError(f"unknown query: {index}") from exc


@dataclass(frozen=True)
class QueryRsp:
    """Answer to a query: the last stored result, encoded as ``[0, [res]]``."""

    res: int

    def encode(self) -> bytes:
        """Encode the response as CBOR."""
        return cbor2.dumps([0, [self.res]])


def _store(ctx: Context, value: int) -> None:
    try:
        ctx.api.swrite_num(_RESULT_OFFSET, NumKind.I32, value)
    except HostError as exc:
        raise ContractError(CalcError.KELK_ERROR) from exc


def add(ctx: Context, a: int, b: int) -> None:
    """Store ``a + b``."""
    _store(ctx, a + b)


def sub(ctx: Context, a: int, b: int) -> None:
    """Store ``a - b``."""
    _store(ctx, a - b)


def mul(ctx: Context, a: int, b: int) -> None:
    """Store ``a * b``."""
    _store(ctx, a * b)


def div(ctx: Context, a: int, b: int) -> None:
    """Store ``a / b`` truncated toward zero; division by zero is an error."""
    if b == 0:
        raise ContractError(CalcError.DIV_BY_ZERO)
    quotient = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        quotient = -quotient
    _store(ctx, quotient)


def query_result(ctx: Context) -> int:
    """Return the last stored result."""
    try:
        return ctx.api.sread_num(_RESULT_OFFSET, NumKind.I32)
    except HostError as exc:
        raise ContractError(CalcError.KELK_ERROR) from exc


_HANDLERS: dict[Operation, Callable[[Context, int, int], None]] = {
    Operation.ADD: add,
    Operation.SUB: sub,
    Operation.MUL: mul,
    Operation.DIV: div,
}


def process_msg(ctx: Context, msg: ProcMsg | Any) -> None:
    """Apply the requested operation and store its result."""
    if not isinstance(msg, ProcMsg):
        msg = ProcMsg._from_item(msg)
    _HANDLERS[msg.op](ctx, msg.a, msg.b)


def query(ctx: Context, msg: QueryMsg | Any) -> QueryRsp:
    """Answer a query about the calculator's state."""
    if not isinstance(msg, QueryMsg):
        msg = QueryMsg._from_item(msg)
    return QueryRsp(res=query_result(ctx))