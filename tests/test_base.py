import json
import operator

import pytest

from dbmscore.base import DataType, DataTypeMeta, Operator, TypeCode
from dbmscore.numeric import FloatMeta, IntegerMeta

SYMBOLS = {
    "=": operator.eq,
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
    "!=": operator.ne,
}


def _int(value, signed=True, size=8):
    return IntegerMeta(signed=signed, byte_size=size).new_value().set(value)


@pytest.mark.parametrize("symbol", sorted(SYMBOLS))
def test_from_symbol_round_trips(symbol):
    assert Operator.from_symbol(symbol).value == symbol


def test_from_symbol_accepts_member():
    assert Operator.from_symbol(Operator.LESS) is Operator.LESS


def test_from_symbol_rejects_unknown():
    with pytest.raises(ValueError, match="invalid operator"):
        Operator.from_symbol("<>")


@pytest.mark.parametrize("symbol", sorted(SYMBOLS))
@pytest.mark.parametrize("left, right", [(1, 2), (5, 5), (9, 3)])
def test_compare_op_agrees_with_python(symbol, left, right):
    result = _int(left, signed=False).compare_op(symbol, _int(right, signed=False))
    assert result == SYMBOLS[symbol](left, right)


def test_compare_op_rejects_unknown_operator():
    with pytest.raises(ValueError):
        _int(1).compare_op("~", _int(2))


def test_abstract_classes_cannot_be_instantiated():
    with pytest.raises(TypeError):
        DataType(IntegerMeta())
    with pytest.raises(TypeError):
        DataTypeMeta()


def test_size_and_fixedness_follow_meta():
    value = _int(5, size=4)
    assert value.size() == value.meta.size() == 4
    assert value.is_fixed_size() is value.meta.is_fixed_size()


def test_default_delegates_to_meta():
    meta = FloatMeta(byte_size=8)
    value = meta.new_value().set(2.5)
    assert value.default().value() == meta.default().value()


def test_meta_copy_is_equal_but_distinct():
    value = _int(3, size=2)
    copied = value.meta_copy()
    assert copied == value.meta
    assert copied is not value.meta


def test_to_json_encodes_value():
    assert json.loads(_int(-7).to_json()) == -7


def test_code_reflects_meta():
    assert _int(1).code is TypeCode.INTEGER
    assert FloatMeta().new_value().code is TypeCode.FLOAT