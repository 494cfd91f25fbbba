"""Construction of type metas and values from codes, declarations and JSON."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from typing import Any

from .base import DataType, DataTypeMeta, TypeCode
from .errors import InvalidDataTypeError, TypeSyntaxError
from .numeric import AutoIncrement, FloatMeta, IntegerMeta
from .temporal import DateTimeMeta
from .text import StringMeta, VarcharMeta

_META_CLASSES = {
    TypeCode.INTEGER: IntegerMeta,
    TypeCode.STRING: StringMeta,
    TypeCode.VARCHAR: VarcharMeta,
    TypeCode.FLOAT: FloatMeta,
    TypeCode.DATETIME: DateTimeMeta,
}

_INT_TYPE = re.compile(r"U?Int(8|16|32|64)")
_FLOAT_TYPE = re.compile(r"Float(32|64)")


def _type_code(code: Any) -> TypeCode:
    try:
        return TypeCode(code)
    except ValueError:
        raise InvalidDataTypeError(f"unknown type code => {code!r}") from None


def meta_for(code: TypeCode | int, *args: Any) -> DataTypeMeta:
    """Build the meta for ``code`` from positional parameters.

    INTEGER takes (signed, byte_size, auto_increment), FLOAT takes (byte_size,),
    VARCHAR takes (cap,); the other types take none.
    """
    code = _type_code(code)
    if code == TypeCode.INTEGER:
        if not args:
            return IntegerMeta()
        if len(args) < 3:
            raise TypeError("integer meta needs signed, byte_size and auto_increment")
        signed, byte_size, auto = args[:3]
        return IntegerMeta(
            signed=bool(signed),
            byte_size=int(byte_size),
            auto_increment=AutoIncrement(enabled=bool(auto)),
        )
    if code == TypeCode.FLOAT:
        return FloatMeta(byte_size=int(args[0])) if args else FloatMeta()
    if code == TypeCode.VARCHAR:
        return VarcharMeta(cap=int(args[0])) if args else VarcharMeta()
    return _META_CLASSES[code]()


def meta_from_dict(code: TypeCode | int, data: Mapping[str, Any] | None) -> DataTypeMeta:
    """Rebuild the meta of type ``code`` from its dictionary form."""
    return _META_CLASSES[_type_code(code)].from_dict(dict(data or {}))


def new_value(meta: DataTypeMeta) -> DataType:
    """An empty value of the type ``meta`` describes."""
    return meta.new_value()


def _parse_int(tokens: Sequence[str]) -> IntegerMeta:
    name = tokens[0]
    parts = name.split("Int")
    signed = parts[0] != "U"
    size = int(parts[-1])
    auto = len(tokens) > 2 and tokens[1] == "AUTO" and tokens[2] == "INCREMENT"
    return IntegerMeta(signed=signed, byte_size=size // 8, auto_increment=AutoIncrement(enabled=auto))


def _parse_float(tokens: Sequence[str]) -> FloatMeta:
    return FloatMeta(byte_size=int(tokens[0].split("Float")[-1]) // 8)


def _parse_varchar(tokens: Sequence[str]) -> VarcharMeta:
    if len(tokens) < 4 or tokens[1] != "(" or tokens[-1] != ")":
        raise TypeSyntaxError()
    try:
        cap = int(tokens[2])
    except ValueError as exc:
        raise TypeSyntaxError(f"invalid varchar capacity {tokens[2]!r}") from exc
    return VarcharMeta(cap=cap)


_NAMED_PARSERS = {
    "VARCHAR": _parse_varchar,
    "STRING": lambda tokens: StringMeta(),
    "DATETIME": lambda tokens: DateTimeMeta(),
}


def parse_type(tokens: Sequence[str]) -> DataTypeMeta:
    """Parse a tokenised column type declaration such as ``["UInt32", "AUTO", "INCREMENT"]``."""
    if not tokens:
        raise TypeSyntaxError("empty type declaration")
    name = tokens[0]
    if _INT_TYPE.fullmatch(name):
        return _parse_int(tokens)
    if _FLOAT_TYPE.fullmatch(name):
        return _parse_float(tokens)
    parser = _NAMED_PARSERS.get(name)
    if parser is None:
        raise TypeSyntaxError(f"unknown type {name!r}")
    return parser(tokens)


def parse_json_value(item: Any) -> DataType:
    """Turn a decoded JSON scalar into a value: whole numbers become INTEGER."""
    if isinstance(item, bool):
        raise InvalidDataTypeError("invalid item type")
    if isinstance(item, int):
        return IntegerMeta(signed=True, byte_size=8).new_value().set(item)
    if isinstance(item, float):
        if math.isfinite(item) and item.is_integer():
            return IntegerMeta(signed=True, byte_size=8).new_value().set(int(item))
        return FloatMeta(byte_size=8).new_value().set(item)
    if isinstance(item, str):
        return StringMeta().new_value().set(item)
    raise InvalidDataTypeError("invalid item type")


def compare_rows(left: Mapping[str, DataType], right: Mapping[str, DataType], keys: Sequence[str]) -> int:
    """Compare two rows column by column over ``keys``; the first difference decides."""
    for key in keys:
        result = left[key].compare(right[key])
        if result in (-1, 1):
            return result
    return 0