# pgargs

`pgargs` turns Python values into query arguments ready to send to a
PostgreSQL server. It covers both ways of sending them:

* the **simple protocol**, where each argument becomes a plain Python value
  or its text form, ready to be interpolated into the query text;
* the **extended protocol**, where each argument becomes a length-prefixed
  byte string for a parameter of a known type OID.

It also picks the parameter format code (text or binary) for each argument.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Types and the type registry

`pgargs.types` holds the pieces the encoders work with.

* `FormatCode`: an `IntEnum` of the PostgreSQL format codes, `TEXT` (0) and
  `BINARY` (1).
* `TextEncoder`, `BinaryEncoder`, `Valuer`, `ParamFormatPreferrer`:
  runtime-checkable protocols an object can implement to take control of its
  own encoding.
  * `encode_text(ci)` / `encode_binary(ci)` return `bytes`, or `None` for
    SQL NULL.
  * `value()` returns a plain value to use in the object's place.
  * `preferred_param_format()` returns the format code the object wants.
* `Value`: a holder for one value of a PostgreSQL type, built from a
  `convert` callable and optional `text` and `binary` codecs:
  `Value(convert, text=..., binary=...)`.
  * `set(src)` stores `convert(src)`; `set(None)` makes the value NULL.
    Whatever `convert` raises propagates.
  * `encode_text(ci)` / `encode_binary(ci)` render the held value with the
    matching codec, return `None` when the value is NULL, and raise
    `TypeError` when that codec was not given.
  * `current` is the held value (or `None`); `supports_text` and
    `supports_binary` tell which codecs are present.
* `DataType`: a frozen dataclass with `name`, `oid`, `value_factory` (a
  callable returning a fresh `Value`) and `value_types`, a tuple of Python
  types this data type handles. `new_value()` calls the factory.
* `ConnInfo`: the registry of data types. It starts empty.
  * `register_data_type(data_type)` indexes it by OID, by name and by each
    of its `value_types`; a later registration replaces an earlier one.
  * `data_type_for_oid(oid)`, `data_type_for_name(name)` return the
    registered `DataType` or `None`.
  * `data_type_for_value(value)` looks up the exact type of `value` (not its
    base classes) among the registered `value_types`.
  * `param_format_code_for_oid(oid)` returns `FormatCode.BINARY` when the
    OID is registered and its values have a binary codec, otherwise
    `FormatCode.TEXT`.

```python
import struct
from pgargs.types import ConnInfo, DataType, Value

def to_int4(src):
    n = int(src)
    if not -(2**31) <= n < 2**31:
        raise ValueError(f"{n} is out of range for int4")
    return n

int4 = DataType(
    name="int4",
    oid=23,
    value_factory=lambda: Value(
        to_int4,
        text=lambda n: str(n).encode(),
        binary=lambda n: struct.pack("!i", n),
    ),
)

ci = ConnInfo()
ci.register_data_type(int4)
ci.data_type_for_name("int4") is int4    # True
ci.param_format_code_for_oid(23)         # FormatCode.BINARY
ci.param_format_code_for_oid(25)         # FormatCode.TEXT (not registered)
```

## Encoding arguments

`pgargs.values` holds the encoders.

### `convert_simple_argument(ci, arg)`

Returns a plain value for the simple protocol, checking in this order:

1. `None` gives `None`.
2. A `Valuer` gives the result of `arg.value()`.
3. A `TextEncoder` gives its text encoding decoded as UTF-8 (or `None`).
4. `float`, `bool`, `str`, `bytes`, `datetime.datetime` and `datetime.date`
   pass through; `bytearray` and `memoryview` become `bytes`.
5. A `datetime.timedelta` becomes a string such as `"1500000 microsecond"`.
6. An `int` passes through if it fits in a signed 64-bit integer, otherwise
   `OverflowError` is raised.
7. A value whose exact type is registered with `ConnInfo` is set into a new
   `Value` of that type and given as its text encoding.
8. A subclass of `int` or `str` is reduced to the plain `int` or `str` and
   converted again.

Anything else raises `SerializationError`.

### `encode_prepared_statement_argument(ci, oid, arg)`

Returns the parameter as a 4-byte big-endian signed length followed by the
data; NULL is a length of -1 with no data.

1. `None` gives NULL.
2. A `BinaryEncoder` is framed from its binary encoding, then a
   `TextEncoder` from its text encoding (a `None` encoding gives NULL).
3. A `str` is framed as UTF-8.
4. If `oid` is registered, `arg` is set into a new `Value` of that type and
   its binary encoding is framed. If `set` raises and `arg` is a `Valuer`,
   `arg.value()` is encoded instead; otherwise the error propagates.
5. A subclass of `int` or `str` is reduced to the plain value and encoded
   again.

Anything else raises `SerializationError`.

### `choose_parameter_format_code(ci, oid, arg)`

Returns the `FormatCode` to send `arg` in: the preference of a
`ParamFormatPreferrer`, `BINARY` for a `BinaryEncoder`, `TEXT` for a `str`
or a `TextEncoder`, and otherwise `ci.param_format_code_for_oid(oid)`.

```python
from pgargs.values import (
    choose_parameter_format_code,
    convert_simple_argument,
    encode_prepared_statement_argument,
)

convert_simple_argument(ci, 42)                       # 42
convert_simple_argument(ci, None)                     # None

encode_prepared_statement_argument(ci, 25, "abc")     # b"\x00\x00\x00\x03abc"
encode_prepared_statement_argument(ci, 25, None)      # b"\xff\xff\xff\xff"
encode_prepared_statement_argument(ci, 23, 7)         # b"\x00\x00\x00\x04\x00\x00\x00\x07"

choose_parameter_format_code(ci, 25, "abc")           # FormatCode.TEXT
choose_parameter_format_code(ci, 23, 7)               # FormatCode.BINARY
```

## What this package does not do

`pgargs` only prepares arguments. It does not open connections, speak the
wire protocol, send queries or decode result rows, and it ships no
PostgreSQL types of its own: a `ConnInfo` knows only the data types you
register with it.