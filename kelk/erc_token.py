"""A token contract that keeps account balances in a storage binary search tree."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import cbor2

from kelk.bst import StorageBST
from kelk.context import Context
from kelk.errors import HostError
from kelk.export import ContractError
from kelk.storage import NumKind

ADDRESS_LEN = 4
_BALANCES_OFFSET = 0
_KEY_FORMAT = f"{ADDRESS_LEN}s"
_VALUE_FORMAT = "q"
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


class TokenError(Enum):
    """Failures reported by the token contract."""

    KELK_ERROR = 0
    INSUFFICIENT_AMOUNT = 1

    def encode(self) -> bytes:
        """Encode the error as CBOR, ``[index, []]``."""
        return cbor2.dumps([self.value, []])


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _address(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        address = bytes(value)
    elif isinstance(value, (list, tuple)) and all(
        _is_int(b) and 0 <= b <= 255 for b in value
    ):
        address = bytes(value)
    else:
        raise ValueError(f"invalid address: {value!r}")
    if len(address) != ADDRESS_LEN:
        raise ValueError(f"address must be {ADDRESS_LEN} bytes, got {len(address)}")
    return address


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
class Transfer:
    """Move ``amount`` from ``sender`` to ``receiver``.

    Encoded in CBOR as ``[4, [sender, receiver, amount]]`` with each address
    an array of bytes.
    """

    INDEX = 4

    sender: bytes
    receiver: bytes
    amount: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "sender", _address(self.sender))
        object.__setattr__(self, "receiver", _address(self.receiver))
        if not _is_int(self.amount):
            raise TypeError(f"amount must be an integer, got {self.amount!r}")
        if not _I64_MIN <= self.amount <= _I64_MAX:
            raise ValueError(f"amount out of 64-bit range: {self.amount}")

    def encode(self) -> bytes:
        """Encode the message as CBOR."""
        return cbor2.dumps(
            [self.INDEX, [list(self.sender), list(self.receiver), self.amount]]
        )

    @classmethod
    def decode(cls, data: bytes) -> Transfer:
        """Decode a message from CBOR; raises ValueError on malformed data."""
        return cls._from_item(_load(data))

    @classmethod
    def _from_item(cls, item: Any) -> Transfer:
        index, fields = _split_variant(item)
        if index != cls.INDEX:
            raise ValueError(f"unknown message: {index}")
        if len(fields) != 3:
            raise ValueError("transfer needs sender, receiver and amount")
        sender, receiver, amount = fields
        try:
            return cls(sender, receiver, amount)
        except (TypeError, ValueError) as exc:
            raise ValueError(str(exc)) from exc


class QueryMsg(Enum):
    """Queries the token contract answers."""

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
    """Answer to a query, encoded as ``[0, [res]]``."""

    res: int

    def encode(self) -> bytes:
        """Encode the response as CBOR."""
        return cbor2.dumps([0, [self.res]])


def open_balances(ctx: Context) -> StorageBST:
    """Load the balance tree stored at the start of the contract's storage."""
    return StorageBST.lazy_load(ctx.api, _BALANCES_OFFSET, _KEY_FORMAT, _VALUE_FORMAT)


def transfer(ctx: Context, sender: Any, receiver: Any, amount: int) -> None:
    """Move ``amount`` from ``sender`` to ``receiver``.

    Raises ContractError with INSUFFICIENT_AMOUNT if the sender's balance is too low.
    """
    sender = _address(sender)
    receiver = _address(receiver)
    balances = open_balances(ctx)
    tx_balance = balances.find(sender) or 0
    rx_balance = balances.find(receiver) or 0
    if tx_balance < amount:
        raise ContractError(TokenError.INSUFFICIENT_AMOUNT)
    balances.insert(sender, tx_balance - amount)
    balances.insert(receiver, rx_balance + amount)


def query_result(ctx: Context) -> int:
    """Return the 32-bit integer stored at the start of the storage."""
    try:
        return ctx.api.sread_num(0, NumKind.I32)
    except HostError as exc:
        raise ContractError(TokenError.KELK_ERROR) from exc


def process_msg(ctx: Context, msg: Transfer | Any) -> None:
    """Process a transfer message."""
    if not isinstance(msg, Transfer):
        msg = Transfer._from_item(msg)
    transfer(ctx, msg.sender, msg.receiver, msg.amount)


def query(ctx: Context, msg: QueryMsg | Any) -> QueryRsp:
    """Answer a query about the contract's state."""
    if not isinstance(msg, QueryMsg):
        msg = QueryMsg._from_item(msg)
    return QueryRsp(res=query_result(ctx))