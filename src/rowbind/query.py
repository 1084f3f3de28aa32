"""
Execution primitives for generated and hand-written statements.

Every primitive prepares a statement on the handle, executes it with
positional arguments and releases it before returning, on success and on
failure alike. The handle is anything with ``prepare(sql)`` returning a
PreparedStatement-like context manager; ConnectionWrapper is the standard one.

- fetch_one(cn, sql, bindings, *args) - scan the first row into bindings
- fetch_many(cn, sql, callback, *args) - call back once per row
- write_returning_identifier(cn, sql, *args) - execute and return the new row id
- write_only(cn, sql, *args) - execute and discard the row count
"""
import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from rowbind.exceptions import NotFoundError, ScanError

if TYPE_CHECKING:
    from rowbind.types import Binding

logger = logging.getLogger(__name__)

__all__ = [
    'scan_row',
    'fetch_one',
    'fetch_many',
    'write_returning_identifier',
    'write_only',
]


def scan_row(row: Sequence[Any], bindings: Sequence['Binding']) -> None:
    """Write the columns of ``row`` into ``bindings`` positionally.

    Every column is converted before any binding is assigned, so a failed
    scan leaves the bound objects untouched.

    Raises
        ScanError: If the column count differs from the binding count or a
            value cannot be converted
    """
    if len(row) != len(bindings):
        raise ScanError(f'Row has {len(row)} columns but {len(bindings)} bindings were given')
    values = [binding.from_db(value) for binding, value in zip(bindings, row)]
    for binding, value in zip(bindings, values):
        binding.set(value)


def fetch_one(cn: Any, sql: str, bindings: Sequence['Binding'], *args: Any) -> None:
    """Execute a query and scan its first row into ``bindings``.

    Raises
        NotFoundError: If the query returns no rows
        ScanError: If the row cannot populate the bindings
    """
    with cn.prepare(sql) as stmt:
        row = stmt.execute(*args).fetchone()
        if row is None:
            raise NotFoundError(f'No row returned by: {sql}')
        scan_row(row, bindings)


def fetch_many(cn: Any, sql: str, callback: Callable[[Sequence[Any]], None],
               *args: Any) -> None:
    """Execute a query and invoke ``callback`` with each row in order.

    The first exception raised by the callback stops iteration and
    propagates.
    """
    count = 0
    with cn.prepare(sql) as stmt:
        for row in stmt.execute(*args):
            callback(row)
            count += 1
    logger.debug(f'Query streamed {count} rows')


def write_returning_identifier(cn: Any, sql: str, *args: Any,
                               returning: str | None = None) -> Any:
    """Execute a write and return the backend identifier of the new row.

    ``returning`` names the key column. Backends without an out-of-band
    insert id (PostgreSQL) need it to report the key.

    Raises
        IdentifierUnavailableError: If the backend cannot supply one
    """
    with cn.prepare(sql, returning=returning) as stmt:
        return stmt.execute(*args).last_identifier()


def write_only(cn: Any, sql: str, *args: Any) -> None:
    """Execute a write, discarding the affected row count."""
    with cn.prepare(sql) as stmt:
        rowcount = stmt.execute(*args).rowcount
    logger.debug(f'Statement affected {rowcount} rows')
