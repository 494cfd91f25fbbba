import pytest

from dbmscore.errors import CastError, InvalidDataTypeError
from dbmscore.numeric import FloatMeta, IntegerMeta
from dbmscore.temporal import DateTime, DateTimeMeta, format_time, parse_time


def _dt(value):
    return DateTimeMeta().new_value().set(value)


def test_epoch_formatting():
    assert format_time(0) == "1970-01-01 00:00:00"
    assert parse_time("1970-01-01 00:00:00") == 0


@pytest.mark.parametrize("timestamp", [1, 86399, 1711386906, -3600, 4102444800])
def test_format_parse_round_trip(timestamp):
    assert parse_time(format_time(timestamp)) == timestamp


@pytest.mark.parametrize("text", ["not a date", "2024-13-01 00:00:00", "2024-01-01"])
def test_parse_rejects_bad_text(text):
    with pytest.raises(InvalidDataTypeError):
        parse_time(text)


def test_set_from_string_keeps_text():
    text = "2024-03-25 17:15:06"
    assert _dt(text).value() == text


def test_binary_round_trip():
    original = _dt(1711386906)
    data = original.marshal_binary()
    assert len(data) == original.meta.size()
    restored = DateTimeMeta().new_value()
    restored.unmarshal_binary(data)
    assert restored.compare(original) == 0
    assert restored.value() == original.value()


def test_unmarshal_rejects_short_data():
    with pytest.raises(ValueError):
        DateTimeMeta().new_value().unmarshal_binary(b"\x00\x01")


def test_ordering():
    early, late = _dt(5), _dt(10)
    assert early.compare(late) == -1
    assert late.compare(early) == 1
    assert early.compare(_dt(5)) == 0
    assert early.compare_op("<", late)


def test_key_bytes_order_matches_compare():
    values = [_dt(n) for n in (100, 3, 70000, 0)]
    by_key = sorted(values, key=lambda v: v.key_bytes())
    assert all(a.compare(b) <= 0 for a, b in zip(by_key, by_key[1:]))


def test_fill_and_zero():
    assert _dt(42).fill().key_bytes() == b"\xff" * 8
    assert _dt(42).zero().compare(DateTimeMeta().default()) == 0


def test_negative_wraps_to_filled():
    assert _dt(-1).compare(DateTimeMeta().new_value().fill()) == 0


@pytest.mark.parametrize("bad", [1.5, None, True])
def test_set_rejects_other_types(bad):
    with pytest.raises(InvalidDataTypeError):
        DateTimeMeta().new_value().set(bad)


def test_cast_to_integer_keeps_seconds():
    cast = _dt(1711386906).cast(IntegerMeta(signed=False, byte_size=8))
    assert cast.value() == 1711386906


@pytest.mark.parametrize("meta", [FloatMeta(byte_size=8), DateTimeMeta()])
def test_cast_to_unsupported_type(meta):
    with pytest.raises(CastError):
        _dt(1).cast(meta)


def test_default_is_epoch():
    assert DateTimeMeta().default().value() == format_time(0)


def test_copy_is_independent():
    original = _dt(10)
    duplicate = original.copy()
    original.set(20)
    assert isinstance(duplicate, DateTime)
    assert duplicate.value() == format_time(10)
    assert original.value() == format_time(20)


def test_meta_dict_round_trip():
    meta = DateTimeMeta()
    assert DateTimeMeta.from_dict(meta.to_dict()) == meta
    assert meta.copy() == meta