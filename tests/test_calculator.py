import pytest

from kelk.calculator import (
    CalcError,
    Operation,
    ProcMsg,
    QueryMsg,
    QueryRsp,
    add,
    div,
    mul,
    process_msg,
    query,
    query_result,
    sub,
)
from kelk.context import mock_context
from kelk.export import ContractError, do_process_msg, do_query


def test_add():
    ctx = mock_context(10)
    add(ctx.as_ref(), 1, 2)
    assert query_result(ctx.as_ref()) == 3


def test_sub():
    ctx = mock_context(10)
    sub(ctx.as_ref(), 1, 2)
    assert query_result(ctx.as_ref()) == -1


def test_mul():
    ctx = mock_context(10)
    mul(ctx.as_ref(), 2, 2)
    assert query_result(ctx.as_ref()) == 4


def test_div():
    ctx = mock_context(10)
    div(ctx.as_ref(), 4, 2)
    assert query_result(ctx.as_ref()) == 2

    with pytest.raises(ContractError) as info:
        div(ctx.as_ref(), 4, 0)
    assert info.value.value is CalcError.DIV_BY_ZERO


@pytest.mark.parametrize("a, b, expected", [(7, 2, 3), (-7, 2, -3), (7, -2, -3), (-7, -2, 3)])
def test_div_truncates_toward_zero(a, b, expected):
    ctx = mock_context(10)
    div(ctx.as_ref(), a, b)
    assert query_result(ctx.as_ref()) == expected


def test_storage_too_small_is_kelk_error():
    ctx = mock_context(2)
    with pytest.raises(ContractError) as info:
        add(ctx.as_ref(), 1, 2)
    assert info.value.value is CalcError.KELK_ERROR


def test_query_result_on_small_storage_is_kelk_error():
    ctx = mock_context(2)
    with pytest.raises(ContractError) as info:
        query_result(ctx.as_ref())
    assert info.value.value is CalcError.KELK_ERROR


def test_error_encoding():
    assert CalcError.KELK_ERROR.encode() == bytes([0x82, 0x00, 0x80])
    assert CalcError.DIV_BY_ZERO.encode() == bytes([0x82, 0x01, 0x80])


def test_proc_msg_encoding():
    assert ProcMsg(Operation.ADD, 1, 2).encode() == bytes([0x82, 0x00, 0x82, 0x01, 0x02])


@pytest.mark.parametrize("op", list(Operation))
def test_proc_msg_round_trip(op):
    msg = ProcMsg(op, -5, 9)
    assert ProcMsg.decode(msg.encode()) == msg


def test_proc_msg_rejects_unknown_operation():
    with pytest.raises(ValueError):
        ProcMsg.decode(bytes([0x82, 0x09, 0x82, 0x01, 0x02]))


def test_proc_msg_rejects_out_of_range():
    with pytest.raises(ValueError):
        ProcMsg(Operation.ADD, 2**31, 0)


def test_query_rsp_encoding():
    assert QueryRsp(3).encode() == bytes([0x82, 0x00, 0x81, 0x03])


def test_process_msg_and_query():
    ctx = mock_context(10)
    process_msg(ctx.as_ref(), ProcMsg(Operation.MUL, 6, 7))
    assert query(ctx.as_ref(), QueryMsg.LAST_RESULT) == QueryRsp(42)


def test_process_msg_accepts_decoded_item():
    ctx = mock_context(10)
    process_msg(ctx.as_ref(), [1, [10, 4]])
    assert query(ctx.as_ref(), [0, []]).res == 6


def test_do_process_msg_ok():
    ctx = mock_context(10)
    out = do_process_msg(process_msg, ProcMsg(Operation.SUB, 5, 8).encode(), ctx)
    assert out == bytes([0x82, 0x00, 0x80])
    assert query_result(ctx.as_ref()) == -3


def test_do_process_msg_div_by_zero():
    ctx = mock_context(10)
    out = do_process_msg(process_msg, ProcMsg(Operation.DIV, 5, 0).encode(), ctx)
    assert out == bytes([0x82, 0x01, 0x82, 0x01, 0x80])


def test_do_query():
    ctx = mock_context(10)
    add(ctx.as_ref(), 1, 2)
    out = do_query(query, QueryMsg.LAST_RESULT.encode(), ctx)
    assert out == bytes([0x82, 0x00, 0x82, 0x00, 0x81, 0x03])