"""Unit tests for column kinds and bindings.
"""
import datetime
from dataclasses import dataclass
from decimal import Decimal

import pytest
from rowbind import Binding, ColumnKind, ScanError
from rowbind.types import convert_date, convert_datetime, infer_kind


@dataclass
class Holder:
    value: object = None


class Cents:
    """Stores dollars as integer cents."""

    def to_db(self, value):
        return round(value * 100)

    def from_db(self, value):
        return value / 100


class TestColumnKind:

    @pytest.mark.parametrize(('kind', 'value', 'expected'), [
        (ColumnKind.TEXT, 'abc', 'abc'),
        (ColumnKind.TEXT, b'abc', 'abc'),
        (ColumnKind.INTEGER, 42, 42),
        (ColumnKind.INTEGER, 42.0, 42),
        (ColumnKind.INTEGER, Decimal('7'), 7),
        (ColumnKind.INTEGER, ' 12 ', 12),
        (ColumnKind.FLOAT, 1.5, 1.5),
        (ColumnKind.FLOAT, 3, 3.0),
        (ColumnKind.FLOAT, Decimal('2.25'), 2.25),
        (ColumnKind.BOOLEAN, True, True),
        (ColumnKind.BOOLEAN, 0, False),
        (ColumnKind.BOOLEAN, 1, True),
        (ColumnKind.BYTES, b'\x00\x01', b'\x00\x01'),
        (ColumnKind.BYTES, memoryview(b'ab'), b'ab'),
        (ColumnKind.ANY, object, object),
    ])
    def test_convert(self, kind, value, expected):
        assert kind.convert(value) == expected

    @pytest.mark.parametrize('kind', list(ColumnKind))
    def test_null_passes_through(self, kind):
        assert kind.convert(None) is None

    @pytest.mark.parametrize(('kind', 'value'), [
        (ColumnKind.TEXT, 12),
        (ColumnKind.INTEGER, 'abc'),
        (ColumnKind.INTEGER, 1.5),
        (ColumnKind.INTEGER, True),
        (ColumnKind.FLOAT, 'x'),
        (ColumnKind.BOOLEAN, 2),
        (ColumnKind.BOOLEAN, 'yes'),
        (ColumnKind.BYTES, 'abc'),
        (ColumnKind.TIMESTAMP, 'not a date'),
        (ColumnKind.TIMESTAMP, 12),
    ])
    def test_unconvertible_value(self, kind, value):
        with pytest.raises(ScanError, match=f'to {kind.value}'):
            kind.convert(value)

    def test_timestamp_from_text(self):
        assert ColumnKind.TIMESTAMP.convert('2024-01-02T03:04:05') == \
            datetime.datetime(2024, 1, 2, 3, 4, 5)
        assert ColumnKind.TIMESTAMP.convert(b'2024-01-02 03:04:05') == \
            datetime.datetime(2024, 1, 2, 3, 4, 5)

    def test_timestamp_keeps_dates(self):
        day = datetime.date(2024, 1, 2)
        moment = datetime.datetime(2024, 1, 2, 3, 4, 5, tzinfo=datetime.timezone.utc)
        assert ColumnKind.TIMESTAMP.convert(day) is day
        assert ColumnKind.TIMESTAMP.convert(moment) is moment


@pytest.mark.parametrize(('value', 'expected'), [
    (True, ColumnKind.BOOLEAN),
    (0, ColumnKind.INTEGER),
    (0.0, ColumnKind.FLOAT),
    ('', ColumnKind.TEXT),
    (b'', ColumnKind.BYTES),
    (datetime.date(2024, 1, 1), ColumnKind.TIMESTAMP),
    (datetime.datetime(2024, 1, 1), ColumnKind.TIMESTAMP),
    (None, ColumnKind.ANY),
    ([], ColumnKind.ANY),
])
def test_infer_kind(value, expected):
    assert infer_kind(value) is expected


class TestBinding:

    def test_reads_current_value(self):
        holder = Holder(1)
        binding = Binding(holder, 'value')
        holder.value = 2
        assert binding.get() == 2
        assert binding.to_db() == 2

    def test_set_mutates_owner(self):
        holder = Holder(1)
        Binding(holder, 'value').set(5)
        assert holder.value == 5

    def test_missing_attribute(self):
        with pytest.raises(AttributeError, match='no attribute'):
            Binding(Holder(), 'missing')

    def test_from_db_does_not_store(self):
        holder = Holder(1)
        binding = Binding(holder, 'value', ColumnKind.INTEGER)
        assert binding.from_db('9') == 9
        assert holder.value == 1

    def test_from_db_kind_error(self):
        binding = Binding(Holder(1), 'value', ColumnKind.INTEGER)
        with pytest.raises(ScanError):
            binding.from_db('nine')

    def test_converter_round_trip(self):
        holder = Holder(12.34)
        binding = Binding(holder, 'value', ColumnKind.INTEGER, Cents())
        assert binding.to_db() == 1234
        assert binding.from_db(1234) == pytest.approx(12.34)

    def test_converter_error(self):
        binding = Binding(Holder(1), 'value', ColumnKind.ANY, Cents())
        with pytest.raises(ScanError, match='Cannot convert value for value'):
            binding.from_db('abc')

    def test_repr(self):
        assert repr(Binding(Holder(), 'value', ColumnKind.TEXT)) == 'Binding(Holder.value, TEXT)'


def test_sqlite_converters():
    assert convert_date(b'2024-03-01') == datetime.date(2024, 3, 1)
    assert convert_datetime(b'2024-03-01T10:30:00') == datetime.datetime(2024, 3, 1, 10, 30)
