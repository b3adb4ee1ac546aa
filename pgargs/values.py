"""Conversion and encoding of query arguments for the simple and extended protocols."""

from __future__ import annotations

import datetime
import struct
from typing import Any, Optional

from .types import (
    BinaryEncoder,
    ConnInfo,
    FormatCode,
    ParamFormatPreferrer,
    TextEncoder,
    Value,
    Valuer,
)

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_NULL = struct.pack("!i", -1)


class SerializationError(Exception):
    """Raised when a value cannot be encoded or decoded."""


def _implements(obj: Any, protocol: type, method: str) -> bool:
    return isinstance(obj, protocol) and callable(getattr(obj, method, None))


def _is_valuer(arg: Any) -> bool:
    return _implements(arg, Valuer, "value")


def _is_text_encoder(arg: Any) -> bool:
    if not _implements(arg, TextEncoder, "encode_text"):
        return False
    return not isinstance(arg, Value) or arg.supports_text


def _is_binary_encoder(arg: Any) -> bool:
    if not _implements(arg, BinaryEncoder, "encode_binary"):
        return False
    return not isinstance(arg, Value) or arg.supports_binary


def _decode(buf: Optional[bytes]) -> Optional[str]:
    return None if buf is None else bytes(buf).decode("utf-8")


def _frame(data: Optional[bytes]) -> bytes:
    if data is None:
        return _NULL
    data = bytes(data)
    return struct.pack("!i", len(data)) + data


def _strip_named_type(arg: Any) -> Optional[Any]:
    """Reduce a subclass of int or str to the plain base value."""
    kind = type(arg)
    if isinstance(arg, int) and kind is not int and kind is not bool:
        return int.__index__(arg)
    if isinstance(arg, str) and kind is not str:
        return str.__str__(arg)
    return None


def convert_simple_argument(ci: ConnInfo, arg: Any) -> Any:
    """Convert ``arg`` into a plain value for the simple query protocol."""
    if arg is None:
        return None
    if _is_valuer(arg):
        return arg.value()
    if _is_text_encoder(arg):
        return _decode(arg.encode_text(ci))

    kind = type(arg)
    if kind in (float, bool, str, bytes, datetime.datetime, datetime.date):
        return arg
    if kind in (bytearray, memoryview):
        return bytes(arg)
    if kind is datetime.timedelta:
        micros = (arg.days * 86400 + arg.seconds) * 1_000_000 + arg.microseconds
        return f"{micros} microsecond"
    if kind is int:
        if arg > _INT64_MAX:
            raise OverflowError(f"arg too big for int64: {arg}")
        if arg < _INT64_MIN:
            raise OverflowError(f"arg too small for int64: {arg}")
        return arg

    data_type = ci.data_type_for_value(arg)
    if data_type is not None:
        value = data_type.new_value()
        value.set(arg)
        return _decode(value.encode_text(ci))

    stripped = _strip_named_type(arg)
    if stripped is not None:
        return convert_simple_argument(ci, stripped)

    name = kind.__name__
    raise SerializationError(
        f"Cannot encode {name} in simple protocol - {name} must implement "
        "Valuer, TextEncoder, or be a native type"
    )


def encode_prepared_statement_argument(ci: ConnInfo, oid: int, arg: Any) -> bytes:
    """Encode ``arg`` as a length-prefixed parameter for a prepared statement.

    NULL is sent as a length of -1 with no data.
    """
    if arg is None:
        return _NULL
    if _is_binary_encoder(arg):
        return _frame(arg.encode_binary(ci))
    if _is_text_encoder(arg):
        return _frame(arg.encode_text(ci))
    if type(arg) is str:
        return _frame(arg.encode("utf-8"))

    data_type = ci.data_type_for_oid(oid)
    if data_type is not None:
        value = data_type.new_value()
        try:
            value.set(arg)
        except Exception:
            if not _is_valuer(arg):
                raise
            return encode_prepared_statement_argument(ci, oid, arg.value())
        return _frame(value.encode_binary(ci))

    stripped = _strip_named_type(arg)
    if stripped is not None:
        return encode_prepared_statement_argument(ci, oid, stripped)

    name = type(arg).__name__
    raise SerializationError(
        f"Cannot encode {name} into oid {oid} - {name} must implement "
        "Encoder or be converted to a string"
    )


def choose_parameter_format_code(ci: ConnInfo, oid: int, arg: Any) -> FormatCode:
    """Pick the wire format for a prepared statement argument."""
    if _implements(arg, ParamFormatPreferrer, "preferred_param_format"):
        return FormatCode(arg.preferred_param_format())
    if _is_binary_encoder(arg):
        return FormatCode.BINARY
    if isinstance(arg, str) or _is_text_encoder(arg):
        return FormatCode.TEXT
    return ci.param_format_code_for_oid(oid)