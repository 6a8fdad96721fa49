import pytest

from kelk.bst import StorageBST
from kelk.context import mock_context
from kelk.erc_token import (
    QueryMsg,
    QueryRsp,
    TokenError,
    Transfer,
    open_balances,
    process_msg,
    query,
    query_result,
    transfer,
)
from kelk.errors import InvalidOffsetError
from kelk.export import ContractError, do_process_msg

SENDER = bytes([1] * 4)
RECEIVER = bytes([2] * 4)


def _setup(size=1024 * 1024):
    ctx = mock_context(size)
    bst = StorageBST.create(ctx.as_ref().api, 0, 1024, "4s", "q")
    return ctx, bst


def test_transfer():
    ctx, bst = _setup()

    with pytest.raises(ContractError) as info:
        transfer(ctx.as_ref(), SENDER, RECEIVER, 10)
    assert info.value.value is TokenError.INSUFFICIENT_AMOUNT

    bst.insert(SENDER, 11)
    transfer(ctx.as_ref(), SENDER, RECEIVER, 10)
    assert bst.find(SENDER) == 1
    assert bst.find(RECEIVER) == 10


def test_transfer_accepts_byte_lists():
    ctx, bst = _setup()
    bst.insert(SENDER, 5)
    transfer(ctx.as_ref(), [1, 1, 1, 1], [2, 2, 2, 2], 5)
    assert bst.find(SENDER) == 0
    assert bst.find(RECEIVER) == 5


def test_transfer_rejects_bad_address():
    ctx, _ = _setup()
    with pytest.raises(ValueError):
        transfer(ctx.as_ref(), b"\x01\x02", RECEIVER, 1)


def test_open_balances_without_tree():
    ctx = mock_context(1024)
    with pytest.raises(InvalidOffsetError):
        open_balances(ctx.as_ref())


def test_transfer_encoding():
    msg = Transfer(SENDER, RECEIVER, 10)
    assert msg.encode() == bytes(
        [0x82, 0x04, 0x83, 0x84, 1, 1, 1, 1, 0x84, 2, 2, 2, 2, 0x0A]
    )


def test_transfer_round_trip():
    msg = Transfer(SENDER, RECEIVER, -42)
    assert Transfer.decode(msg.encode()) == msg


def test_transfer_decode_rejects_wrong_index():
    with pytest.raises(ValueError):
        Transfer.decode(bytes([0x82, 0x00, 0x83, 0x84, 1, 1, 1, 1, 0x84, 2, 2, 2, 2, 0x0A]))


def test_error_encoding():
    assert TokenError.INSUFFICIENT_AMOUNT.encode() == bytes([0x82, 0x01, 0x80])


def test_do_process_msg_ok():
    ctx, bst = _setup()
    bst.insert(SENDER, 30)
    out = do_process_msg(process_msg, Transfer(SENDER, RECEIVER, 12).encode(), ctx)
    assert out == bytes([0x82, 0x00, 0x80])
    assert bst.find(SENDER) == 18
    assert bst.find(RECEIVER) == 12


def test_do_process_msg_insufficient():
    ctx, _ = _setup()
    out = do_process_msg(process_msg, Transfer(SENDER, RECEIVER, 1).encode(), ctx)
    assert out == bytes([0x82, 0x01, 0x82, 0x01, 0x80])


def test_query_reads_first_word():
    ctx, _ = _setup()
    assert query_result(ctx.as_ref()) == 0xB3
    assert query(ctx.as_ref(), QueryMsg.LAST_RESULT) == QueryRsp(0xB3)


def test_query_rsp_encoding():
    assert QueryRsp(3).encode() == bytes([0x82, 0x00, 0x81, 0x03])


def test_query_on_tiny_storage_is_kelk_error():
    ctx = mock_context(2)
    with pytest.raises(ContractError) as info:
        query_result(ctx.as_ref())
    assert info.value.value is TokenError.KELK_ERROR