# kelk

Kelk gives contracts a byte-addressed storage and two collections that live
directly in that storage. It also has helpers that decode a CBOR message,
call a contract function with a context, and encode the outcome as CBOR.
Two example contracts are included: a calculator and a token transfer.

## Installation

```
pip install .
```

The tests need the `test` extra:

```
pip install ".[test]"
pytest
```

## Storage

`kelk.storage.Storage` is an abstract class: anything that implements
`sread(offset, length)` and `swrite(offset, data)` gets the helpers on top.

- `sread_num(offset, kind)` / `swrite_num(offset, kind, value)` read and
  write integers of a `NumKind` (`U8`, `U16`, `U32`, `U64`, `I8`, `I16`,
  `I32`, `I64`), big-endian.
- `sread_bool(offset)` / `swrite_bool(offset, value)` use one byte; any
  non-zero byte reads as true.
- `sread_struct(storage, offset, layout)` and
  `swrite_struct(storage, offset, layout, values)` read and write records
  described by a `StructLayout`: C-style, little-endian fields aligned to
  their natural boundary, each field a `struct` format item such as `"I"`,
  `"h"` or `"4s"`.

`kelk.mock.MockStorage` (or `kelk.mock.mock_storage(size)`) keeps a
zero-filled byte array in memory. A read or write that goes past its end
raises `kelk.errors.HostError` with code 1.

```python
from kelk.mock import mock_storage
from kelk.storage import NumKind, StructLayout, sread_struct, swrite_struct

storage = mock_storage(64)
storage.swrite_num(0, NumKind.I32, -3)
assert storage.sread_num(0, NumKind.I32) == -3

storage.swrite_bool(4, True)
assert storage.sread_bool(4)

layout = StructLayout("h", "b", "i")   # 8 bytes with padding
swrite_struct(storage, 13, layout, (123, 7, 1024))
assert sread_struct(storage, 13, layout) == (123, 7, 1024)
```

## Collections

Both collections write a 16-byte header at their offset; `create` starts a
new one and `lazy_load` opens one that is already stored there. Element
types are given as `struct` format items.

- `kelk.vector.StorageVec`: an append-only vector with a fixed capacity.
  `len(vec)`, `push(value)`, and `get(index)`, which returns `None` when the
  index is out of bounds.
- `kelk.bst.StorageBST`: a binary search tree mapping keys to values.
  `insert(key, value)` returns `None` for a new key and the replaced value
  otherwise; `find(key)` returns the value or `None`; `contains_key(key)`.

```python
from kelk.mock import mock_storage
from kelk.vector import StorageVec
from kelk.bst import StorageBST

storage = mock_storage(1024)

vec = StorageVec.create(storage, 512, 16, "i")
vec.push(10)
vec.push(11)
assert len(vec) == 2
assert vec.get(1) == 11
assert vec.get(5) is None

tree = StorageBST.create(storage, 0, 16, "i", "i")
assert tree.insert(3, 30) is None
assert tree.insert(3, 31) == 30
assert tree.find(3) == 31
assert not tree.contains_key(8)

again = StorageBST.lazy_load(storage, 0, "i", "i")
assert again.find(3) == 31
```

Errors raised by the collections derive from `kelk.errors.CollectionError`:

- `OutOfCapacityError` when the collection is full;
- `InvalidOffsetError` from `lazy_load` when the stored element sizes do not
  match the requested formats;
- `CollectionHostError` when the underlying storage raised a `HostError`.

The headers can be read directly with `kelk.vector.VecHeader.read` and
`kelk.bst.BSTHeader.read`.

## Contexts and entry points

`kelk.context.OwnedContext` owns a storage API; `as_ref()` returns the
`Context` handed to contract functions. `kelk.context.mock_context(size)`
builds one backed by in-memory storage. `kelk.context.ParamType` is an
`I32` or `I64` parameter value with CBOR `encode` / `decode`.

`kelk.export.do_instantiate`, `do_process_msg` and `do_query` take a
contract function, a CBOR-encoded message and a context (owned or borrowed).
They decode the message, call the function, and return CBOR bytes:
`[0, value]` on success (`None` is encoded as an empty array) or
`[1, error]` when the function raised `kelk.export.ContractError`. A message
that is not valid CBOR raises `ValueError`. Values with an `encode()` method
are encoded by it. `encode_result` and `encode_error` are available on their
own.

```python
from kelk.context import mock_context
from kelk.export import ContractError, do_process_msg

ctx = mock_context(1)

def ok(context, msg):
    return None

def fail(context, msg):
    raise ContractError(0x0E)

assert do_process_msg(ok, b"\x00", ctx) == b"\x82\x00\x80"
assert do_process_msg(fail, b"\x00", ctx) == b"\x82\x01\x0e"
```

## Example contracts

`kelk.calculator` stores the result of its last operation as a 32-bit
integer at offset 0. `add`, `sub`, `mul` and `div` (truncating toward zero;
division by zero raises `ContractError(CalcError.DIV_BY_ZERO)`) can be called
directly, or through `process_msg` with a `ProcMsg(Operation, a, b)`;
`query` with `QueryMsg.LAST_RESULT` answers `QueryRsp(res=...)`.

```python
from kelk.context import mock_context
from kelk.export import do_process_msg, do_query
from kelk import calculator

ctx = mock_context(10)
calculator.add(ctx.as_ref(), 1, 2)
assert calculator.query_result(ctx.as_ref()) == 3

msg = calculator.ProcMsg(calculator.Operation.MUL, 2, 5).encode()
assert do_process_msg(calculator.process_msg, msg, ctx) == b"\x82\x00\x80"
rsp = do_query(calculator.query, calculator.QueryMsg.LAST_RESULT.encode(), ctx)
assert rsp == b"\x82\x00" + calculator.QueryRsp(res=10).encode()
```

`kelk.erc_token` keeps balances in a `StorageBST` at offset 0, keyed by
4-byte addresses with 64-bit values. The tree must already exist there;
`open_balances(ctx)` loads it. `transfer(ctx, sender, receiver, amount)`
moves an amount and raises `ContractError(TokenError.INSUFFICIENT_AMOUNT)`
when the sender's balance is too low. `process_msg` accepts a `Transfer`
message.

```python
from kelk.bst import StorageBST
from kelk.context import mock_context
from kelk import erc_token

ctx = mock_context(1024 * 1024)
tree = StorageBST.create(ctx.as_ref().api, 0, 1024, "4s", "q")
tree.insert(b"\x01" * 4, 11)
erc_token.transfer(ctx.as_ref(), b"\x01" * 4, b"\x02" * 4, 10)
assert tree.find(b"\x01" * 4) == 1
assert tree.find(b"\x02" * 4) == 10
```

## What this package does not do

The only storage provided is the in-memory `MockStorage`; there is no storage
that persists to disk or talks to an external host. To keep data between
runs, subclass `kelk.storage.Storage` and implement `sread` and `swrite`.
Contexts carry only storage: there is no lookup of parameter values such as
the caller's address, although the `ParamType` value type and the
`PARAM_CALLER_ADDRESS` / `PARAM_CALLER_ID` identifiers are defined.