"""
Row binding for Python objects on PostgreSQL and SQLite.

An object describes itself as an Entity: a table name, a key and an ordered
list of fields bound to its own attributes. rowbind generates the SQL to read
and write that one row and scans results straight back into the object.

All operations can be called either as:
- Module functions: rowbind.get(cn, customer)
- Entity methods: customer.entity().get(cn)

The module functions are facades over the Entity methods.
"""
__version__ = '0.1.0'

from typing import Any

from rowbind.collection import EntityCollection
from rowbind.connection import ConnectionWrapper, connect
from rowbind.entity import Entity, EntityDefiner, Field, column
from rowbind.exceptions import DatabaseError, ExecutionError
from rowbind.exceptions import IdentifierUnavailableError, NotFoundError
from rowbind.exceptions import PrepareError, ScanError, ValidationError
from rowbind.generator import Operation, Statement, generate
from rowbind.options import DatabaseOptions
from rowbind.query import fetch_many, fetch_one, scan_row, write_only
from rowbind.query import write_returning_identifier
from rowbind.types import Binding, ColumnKind


def get(cn: ConnectionWrapper, obj: EntityDefiner) -> None:
    """Load the row matching ``obj``'s key into ``obj``.

    Raises NotFoundError if no row matches.
    """
    obj.entity().get(cn)


def where(cn: ConnectionWrapper, obj: EntityDefiner, clause: str, *args: Any) -> None:
    """Load the first row matched by a raw clause into ``obj``.
    """
    obj.entity().where(cn, clause, *args)


def insert(cn: ConnectionWrapper, obj: EntityDefiner) -> Any:
    """Insert ``obj`` and return its key.
    """
    return obj.entity().insert(cn)


def update(cn: ConnectionWrapper, obj: EntityDefiner) -> None:
    """Write ``obj``'s current values to its row.
    """
    obj.entity().update(cn)


def delete(cn: ConnectionWrapper, obj: EntityDefiner) -> None:
    """Delete the row matching ``obj``'s key.
    """
    obj.entity().delete(cn)


def select(cn: ConnectionWrapper, factory: Any, clause: str = '',
           *args: Any) -> list[EntityDefiner]:
    """Return a new instance from ``factory`` for every row matched by ``clause``.
    """
    return EntityCollection(factory).select(cn, clause, *args)


__all__ = [
    'connect',
    'ConnectionWrapper',
    'DatabaseOptions',
    'Entity',
    'EntityDefiner',
    'EntityCollection',
    'Field',
    'column',
    'Binding',
    'ColumnKind',
    'Operation',
    'Statement',
    'generate',
    'get',
    'where',
    'insert',
    'update',
    'delete',
    'select',
    'scan_row',
    'fetch_one',
    'fetch_many',
    'write_returning_identifier',
    'write_only',
    'DatabaseError',
    'ValidationError',
    'PrepareError',
    'ExecutionError',
    'ScanError',
    'NotFoundError',
    'IdentifierUnavailableError',
]
