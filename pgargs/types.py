"""Type registry and encoder interfaces used when sending query arguments."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Optional, Protocol, runtime_checkable


class FormatCode(IntEnum):
    """PostgreSQL wire format codes."""

    TEXT = 0
    BINARY = 1


@runtime_checkable
class TextEncoder(Protocol):
    """An object that can render itself in the PostgreSQL text format."""

    def encode_text(self, ci: ConnInfo) -> Optional[bytes]:
        """Return the text encoding, or None for SQL NULL."""
        ...


@runtime_checkable
class BinaryEncoder(Protocol):
    """An object that can render itself in the PostgreSQL binary format."""

    def encode_binary(self, ci: ConnInfo) -> Optional[bytes]:
        """Return the binary encoding, or None for SQL NULL."""
        ...


@runtime_checkable
class Valuer(Protocol):
    """An object that can reduce itself to a plain driver value."""

    def value(self) -> Any:
        """Return a plain value that stands for this object."""
        ...


@runtime_checkable
class ParamFormatPreferrer(Protocol):
    """An object that states which format it wants to be sent in."""

    def preferred_param_format(self) -> int:
        """Return the preferred format code."""
        ...


Codec = Callable[[Any], bytes]


class Value:
    """A holder for one value of a PostgreSQL type.

    ``convert`` turns an arbitrary Python object into the held value and
    raises when it cannot. ``text`` and ``binary`` render the held value.
    """

    def __init__(
        self,
        convert: Callable[[Any], Any],
        *,
        text: Optional[Codec] = None,
        binary: Optional[Codec] = None,
    ) -> None:
        self._convert = convert
        self._text = text
        self._binary = binary
        self._current: Any = None
        self._present = False

    @property
    def supports_text(self) -> bool:
        return self._text is not None

    @property
    def supports_binary(self) -> bool:
        return self._binary is not None

    @property
    def current(self) -> Any:
        """The held value, or None when the value is NULL."""
        return self._current if self._present else None

    def set(self, src: Any) -> None:
        """Store ``src``; None means SQL NULL."""
        if src is None:
            self._current = None
            self._present = False
            return
        converted = self._convert(src)
        self._current = converted
        self._present = True

    def encode_text(self, ci: ConnInfo) -> Optional[bytes]:
        if self._text is None:
            raise TypeError(f"{type(self).__name__} has no text encoding")
        if not self._present:
            return None
        return self._text(self._current)

    def encode_binary(self, ci: ConnInfo) -> Optional[bytes]:
        if self._binary is None:
            raise TypeError(f"{type(self).__name__} has no binary encoding")
        if not self._present:
            return None
        return self._binary(self._current)


@dataclass(frozen=True)
class DataType:
    """A registered PostgreSQL type: its name, OID and value factory."""

    name: str
    oid: int
    value_factory: Callable[[], Value]
    value_types: tuple[type, ...] = ()

    def new_value(self) -> Value:
        """Return a fresh, empty value of this type."""
        return self.value_factory()


class ConnInfo:
    """Registry of data types known to a connection."""

    def __init__(self) -> None:
        self._by_oid: dict[int, DataType] = {}
        self._by_name: dict[str, DataType] = {}
        self._by_type: dict[type, DataType] = {}

    def register_data_type(self, data_type: DataType) -> None:
        self._by_oid[data_type.oid] = data_type
        self._by_name[data_type.name] = data_type
        for python_type in data_type.value_types:
            self._by_type[python_type] = data_type

    def data_type_for_oid(self, oid: int) -> Optional[DataType]:
        return self._by_oid.get(oid)

    def data_type_for_name(self, name: str) -> Optional[DataType]:
        return self._by_name.get(name)

    def data_type_for_value(self, value: Any) -> Optional[DataType]:
        """Return the data type registered for the exact type of ``value``."""
        return self._by_type.get(type(value))

    def param_format_code_for_oid(self, oid: int) -> FormatCode:
        data_type = self._by_oid.get(oid)
        if data_type is not None and data_type.new_value().supports_binary:
            return FormatCode.BINARY
        return FormatCode.TEXT