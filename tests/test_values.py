import datetime
import struct
from dataclasses import dataclass
from enum import IntEnum

import pytest

from pgargs.types import ConnInfo, DataType, FormatCode, Value
from pgargs.values import (
    SerializationError,
    choose_parameter_format_code,
    convert_simple_argument,
    encode_prepared_statement_argument,
)


def _convert_int4(src):
    if isinstance(src, bool) or not isinstance(src, int):
        raise TypeError(f"cannot convert {src!r} to int4")
    return src


def _int4_value():
    return Value(
        _convert_int4,
        text=lambda v: str(v).encode(),
        binary=lambda v: struct.pack("!i", v),
    )


@dataclass
class Point:
    x: float
    y: float


def _conn_info():
    ci = ConnInfo()
    ci.register_data_type(DataType("int4", 23, _int4_value))
    ci.register_data_type(DataType("text", 25, lambda: Value(str, text=lambda v: v.encode())))
    ci.register_data_type(
        DataType(
            "point",
            600,
            lambda: Value(lambda p: p, text=lambda p: f"({p.x},{p.y})".encode()),
            (Point,),
        )
    )
    return ci


class Color(IntEnum):
    RED = 3


class Name(str):
    pass


class Ratio(float):
    pass


class Wrapped:
    def __init__(self, inner):
        self.inner = inner

    def value(self):
        return self.inner


class TextOnly:
    def __init__(self, data):
        self.data = data

    def encode_text(self, ci):
        return self.data


class BinaryOnly:
    def __init__(self, data):
        self.data = data

    def encode_binary(self, ci):
        return self.data


class Both(Wrapped):
    def encode_text(self, ci):
        return b"from-encoder"


class Preferring:
    def preferred_param_format(self):
        return 1

    def encode_text(self, ci):
        return b"x"


def _unframe(out):
    (length,) = struct.unpack("!i", out[:4])
    assert length == len(out) - 4
    return out[4:]


# simple protocol


def test_simple_none():
    assert convert_simple_argument(_conn_info(), None) is None


@pytest.mark.parametrize(
    "arg",
    [1.23, True, "test", b"\x00\x01", datetime.datetime(2015, 1, 1), datetime.date(1970, 1, 1)],
)
def test_simple_native_passthrough(arg):
    assert convert_simple_argument(_conn_info(), arg) is arg


def test_simple_bytearray_becomes_bytes():
    result = convert_simple_argument(_conn_info(), bytearray(b"abc"))
    assert result == b"abc"
    assert type(result) is bytes


def test_simple_timedelta():
    result = convert_simple_argument(_conn_info(), datetime.timedelta(microseconds=1500))
    assert result == "1500 microsecond"


def test_simple_int_limits():
    ci = _conn_info()
    assert convert_simple_argument(ci, 2**63 - 1) == 2**63 - 1
    with pytest.raises(OverflowError, match="arg too big for int64"):
        convert_simple_argument(ci, 2**63)


def test_simple_valuer():
    assert convert_simple_argument(_conn_info(), Wrapped("inner")) == "inner"


def test_simple_valuer_preferred_over_text_encoder():
    assert convert_simple_argument(_conn_info(), Both("inner")) == "inner"


def test_simple_text_encoder():
    ci = _conn_info()
    assert convert_simple_argument(ci, TextOnly(b"abc")) == "abc"
    assert convert_simple_argument(ci, TextOnly(None)) is None


def test_simple_registered_value_type():
    assert convert_simple_argument(_conn_info(), Point(1.5, 2.5)) == "(1.5,2.5)"


def test_simple_int_subclass_stripped():
    result = convert_simple_argument(_conn_info(), Color.RED)
    assert result == 3
    assert type(result) is int


def test_simple_str_subclass_stripped():
    result = convert_simple_argument(_conn_info(), Name("foo"))
    assert result == "foo"
    assert type(result) is str


def test_simple_unsupported_type():
    with pytest.raises(SerializationError, match="Cannot encode object in simple protocol"):
        convert_simple_argument(_conn_info(), object())


def test_simple_float_subclass_not_stripped():
    with pytest.raises(SerializationError):
        convert_simple_argument(_conn_info(), Ratio(0.5))


# extended protocol


def test_prepared_none_is_null():
    assert encode_prepared_statement_argument(_conn_info(), 23, None) == struct.pack("!i", -1)


def test_prepared_string():
    out = encode_prepared_statement_argument(_conn_info(), 25, "Jack")
    assert _unframe(out) == b"Jack"


def test_prepared_string_length_is_byte_length():
    text = "h\u00e9llo"
    out = encode_prepared_statement_argument(_conn_info(), 25, text)
    assert _unframe(out) == text.encode("utf-8")


def test_prepared_binary_encoder():
    ci = _conn_info()
    assert _unframe(encode_prepared_statement_argument(ci, 0, BinaryOnly(b"\x01\x02"))) == b"\x01\x02"
    assert encode_prepared_statement_argument(ci, 0, BinaryOnly(None)) == struct.pack("!i", -1)


def test_prepared_text_encoder():
    out = encode_prepared_statement_argument(_conn_info(), 0, TextOnly(b"abc"))
    assert _unframe(out) == b"abc"


def test_prepared_registered_oid_binary():
    out = encode_prepared_statement_argument(_conn_info(), 23, 42)
    assert struct.unpack("!i", _unframe(out))[0] == 42


def test_prepared_value_set_error_falls_back_to_valuer():
    out = encode_prepared_statement_argument(_conn_info(), 23, Wrapped(7))
    assert struct.unpack("!i", _unframe(out))[0] == 7


def test_prepared_value_set_error_without_valuer():
    with pytest.raises(TypeError, match="cannot convert"):
        encode_prepared_statement_argument(_conn_info(), 23, 1.5)


def test_prepared_unknown_oid():
    with pytest.raises(SerializationError, match="into oid 999"):
        encode_prepared_statement_argument(_conn_info(), 999, 42)


def test_prepared_str_subclass_unknown_oid_is_stripped():
    out = encode_prepared_statement_argument(_conn_info(), 999, Name("foo"))
    assert _unframe(out) == b"foo"


def test_prepared_int_subclass_registered_oid():
    out = encode_prepared_statement_argument(_conn_info(), 23, Color.RED)
    assert struct.unpack("!i", _unframe(out))[0] == Color.RED


def test_prepared_text_only_type_cannot_encode_binary():
    with pytest.raises(TypeError):
        encode_prepared_statement_argument(_conn_info(), 25, 5)


# format choice


def test_format_preferrer_wins():
    assert choose_parameter_format_code(_conn_info(), 25, Preferring()) is FormatCode.BINARY


def test_format_binary_encoder():
    assert choose_parameter_format_code(_conn_info(), 25, BinaryOnly(b"")) is FormatCode.BINARY


def test_format_string_is_text_even_for_binary_oid():
    assert choose_parameter_format_code(_conn_info(), 23, "42") is FormatCode.TEXT


def test_format_text_encoder():
    assert choose_parameter_format_code(_conn_info(), 23, TextOnly(b"")) is FormatCode.TEXT


def test_format_falls_back_to_oid():
    ci = _conn_info()
    assert choose_parameter_format_code(ci, 23, 42) is FormatCode.BINARY
    assert choose_parameter_format_code(ci, 999, 42) is FormatCode.TEXT