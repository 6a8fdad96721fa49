"""Entry points that decode a message, run a contract function and encode its result.

A result is encoded in CBOR as ``[0, value]`` on success and ``[1, error]`` on
failure. A contract function signals failure by raising ContractError.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import cbor2

from kelk.context import Context, OwnedContext

_OK = b"\x82\x00"
_ERR = b"\x82\x01"


class ContractError(Exception):
    """Failure of a contract function, carrying the value reported to the caller."""

    def __init__(self, value: Any) -> None:
        super().__init__(value)
        self.value = value


def _encode_value(value: Any) -> bytes:
    if value is None:
        return b"\x80"
    encode = getattr(value, "encode", None)
    if callable(encode) and not isinstance(value, (str, bytes, bytearray)):
        return encode()
    return cbor2.dumps(value)


def encode_result(value: Any) -> bytes:
    """Encode a successful result; None stands for the unit value."""
    return _OK + _encode_value(value)


def encode_error(error: Any) -> bytes:
    """Encode a failed result; a ContractError is encoded by its value."""
    if isinstance(error, ContractError):
        error = error.value
    return _ERR + _encode_value(error)


def _as_context(context: OwnedContext | Context) -> Context:
    return context.as_ref() if isinstance(context, OwnedContext) else context


def _execute(
    func: Callable[[Context, Any], Any], msg: bytes, context: OwnedContext | Context
) -> bytes:
    try:
        decoded = cbor2.loads(msg)
    except cbor2.CBORDecodeError as exc:
        raise ValueError(f"decoding failed: {exc}") from exc
    try:
        result = func(_as_context(context), decoded)
    except ContractError as exc:
        return encode_error(exc)
    return encode_result(result)


def do_instantiate(
    instantiate_fn: Callable[[Context, Any], None],
    msg: bytes,
    context: OwnedContext | Context,
) -> bytes:
    """Run an instantiate function on a CBOR message and return the encoded result."""
    return _execute(instantiate_fn, msg, context)


def do_process_msg(
    process_msg_fn: Callable[[Context, Any], None],
    msg: bytes,
    context: OwnedContext | Context,
) -> bytes:
    """Run a message-processing function on a CBOR message and return the encoded result."""
    return _execute(process_msg_fn, msg, context)


def do_query(
    query_fn: Callable[[Context, Any], Any],
    msg: bytes,
    context: OwnedContext | Context,
) -> bytes:
    """Run a query function on a CBOR message and return the encoded result."""
    return _execute(query_fn, msg, context)