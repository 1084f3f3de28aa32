"""
Column value kinds and the bindings that connect columns to object attributes.

This module provides:
- ColumnKind: the supported column value kinds with database -> Python conversion
- Binding: a non-owning reference to one attribute of a caller-owned object
- infer_kind: pick a ColumnKind from an attribute's current value
- SQLite converters for date/datetime columns
"""
import datetime
from decimal import Decimal
from enum import Enum
from numbers import Real
from typing import Any, Protocol

import dateutil.parser
from rowbind.exceptions import ScanError


class Converter(Protocol):
    """Storage/retrieval conversion used by value-transform types."""

    def to_db(self, value: Any) -> Any:
        ...

    def from_db(self, value: Any) -> Any:
        ...


def _to_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value).decode('utf-8')
    raise TypeError


def _to_integer(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError
    if isinstance(value, int):
        return value
    if isinstance(value, float | Decimal):
        if value != int(value):
            raise ValueError(f'{value!r} is not integral')
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError
    if isinstance(value, Real | Decimal):
        return float(value)
    if isinstance(value, str):
        return float(value.strip())
    raise TypeError


def _to_timestamp(value: Any) -> datetime.datetime | datetime.date:
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, bytes):
        value = value.decode()
    if isinstance(value, str):
        return dateutil.parser.isoparse(value)
    raise TypeError


def _to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in {0, 1}:
        return bool(value)
    raise TypeError


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value)
    raise TypeError


class ColumnKind(Enum):
    """Supported column value kinds.

    Each kind knows how to turn a value produced by the driver into the Python
    value stored on the bound attribute. SQL NULL is stored as None for every
    kind.
    """
    TEXT = 'text'
    INTEGER = 'integer'
    FLOAT = 'float'
    TIMESTAMP = 'timestamp'
    BOOLEAN = 'boolean'
    BYTES = 'bytes'
    ANY = 'any'

    def convert(self, value: Any) -> Any:
        """Convert a database value for this kind.

        Raises ScanError if the value cannot be represented.
        """
        if value is None or self is ColumnKind.ANY:
            return value
        try:
            return _CONVERTERS[self](value)
        except (TypeError, ValueError, OverflowError) as err:
            raise ScanError(
                f'Cannot convert {type(value).__name__} value {value!r} to {self.value}'
            ) from err


_CONVERTERS = {
    ColumnKind.TEXT: _to_text,
    ColumnKind.INTEGER: _to_integer,
    ColumnKind.FLOAT: _to_float,
    ColumnKind.TIMESTAMP: _to_timestamp,
    ColumnKind.BOOLEAN: _to_boolean,
    ColumnKind.BYTES: _to_bytes,
}


def infer_kind(value: Any) -> ColumnKind:
    """Pick the column kind matching a Python value.

    bool is checked before int since bool is an int subclass.
    """
    if isinstance(value, bool):
        return ColumnKind.BOOLEAN
    if isinstance(value, int):
        return ColumnKind.INTEGER
    if isinstance(value, float):
        return ColumnKind.FLOAT
    if isinstance(value, str):
        return ColumnKind.TEXT
    if isinstance(value, datetime.datetime | datetime.date):
        return ColumnKind.TIMESTAMP
    if isinstance(value, bytes | bytearray | memoryview):
        return ColumnKind.BYTES
    return ColumnKind.ANY


class Binding:
    """Non-owning reference to one attribute of a caller-owned object.

    Reading a binding observes the attribute's current value; setting it
    mutates the owner in place. The binding never copies the value.
    """

    __slots__ = ('owner', 'attr', 'kind', 'converter')

    def __init__(self, owner: Any, attr: str, kind: ColumnKind = ColumnKind.ANY,
                 converter: Converter | None = None) -> None:
        if not hasattr(owner, attr):
            raise AttributeError(f'{type(owner).__name__} has no attribute {attr!r}')
        self.owner = owner
        self.attr = attr
        self.kind = kind
        self.converter = converter

    def __repr__(self) -> str:
        return f'Binding({type(self.owner).__name__}.{self.attr}, {self.kind.name})'

    def get(self) -> Any:
        """Return the attribute's current value."""
        return getattr(self.owner, self.attr)

    def set(self, value: Any) -> None:
        """Store an already converted value on the owner."""
        setattr(self.owner, self.attr, value)

    def to_db(self) -> Any:
        """Return the current value in the form sent to the database."""
        value = self.get()
        if self.converter is not None:
            return self.converter.to_db(value)
        return value

    def from_db(self, value: Any) -> Any:
        """Convert a database value without storing it.

        Raises ScanError if the value cannot be converted.
        """
        value = self.kind.convert(value)
        if self.converter is not None:
            try:
                value = self.converter.from_db(value)
            except (TypeError, ValueError) as err:
                raise ScanError(f'Cannot convert value for {self.attr}: {err}') from err
        return value


def convert_date(val: bytes) -> datetime.date:
    """Convert ISO 8601 date string to date object."""
    return dateutil.parser.isoparse(val.decode()).date()


def convert_datetime(val: bytes) -> datetime.datetime:
    """Convert ISO 8601 datetime string to datetime object."""
    return dateutil.parser.isoparse(val.decode())
