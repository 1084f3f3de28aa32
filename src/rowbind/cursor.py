"""
Prepared statements over DB-API 2.0 cursors (PEP-249).

A PreparedStatement owns one cursor for the lifetime of one operation. It is
created by ConnectionWrapper.prepare, executed once, read, and released. Use it
as a context manager so the cursor is closed on every exit path.
"""
import logging
import time
from collections.abc import Iterator, Sequence
from functools import wraps
from typing import Any, Self

from rowbind.exceptions import DriverError, ExecutionError, PrepareError
from rowbind.exceptions import ScanError
from rowbind.sql import count_placeholders

logger = logging.getLogger(__name__)

FETCH_SIZE = 500


def dumpsql(func):
    """Decorator for logging SQL statements and parameters."""
    @wraps(func)
    def wrapper(self, *args: Any, **kwargs: Any):
        start = time.time()
        logger.debug(f'SQL:\n{self.sql}\nargs: {args}')
        try:
            return func(self, *args, **kwargs)
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{self.sql}\nargs: {args}')
            raise
        finally:
            elapsed = time.time() - start
            self.connwrapper.addcall(elapsed)
            logger.debug(f'Query time: {elapsed:.4f}s')
    return wrapper


class PreparedStatement:
    """One SQL statement bound to its own cursor.

    Driver errors raised while executing are translated: the dialect strategy
    decides whether the backend rejected the statement text (PrepareError) or
    failed with arguments bound (ExecutionError).
    """

    def __init__(self, connwrapper: Any, sql: str, cursor: Any, strategy: Any,
                 returning: str | None = None) -> None:
        """Initialize statement wrapper.

        Args:
            connwrapper: The connection wrapper that prepared this statement
            sql: Statement text already in the dialect's placeholder style
            cursor: The underlying database cursor
            strategy: Dialect strategy of the connection
            returning: Key column the statement reports back for an insert
        """
        self.connwrapper = connwrapper
        self.sql = sql
        self.dbapi_cursor = cursor
        self.strategy = strategy
        self.returning = returning
        self.placeholders = count_placeholders(sql)
        self.released = False

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None,
                 exc_tb: Any | None) -> None:
        self.release()

    def __iter__(self) -> Iterator[Sequence[Any]]:
        """Iterate remaining result rows in backend order."""
        while True:
            chunk = self._fetch(self.dbapi_cursor.fetchmany, FETCH_SIZE)
            if not chunk:
                break
            yield from chunk

    def _translate(self, err: BaseException) -> Exception:
        if self.strategy.is_prepare_error(err):
            return PrepareError(f'Cannot prepare statement: {err}')
        return ExecutionError(f'Statement failed: {err}')

    def _fetch(self, method, *args: Any) -> Any:
        try:
            return method(*args)
        except DriverError as err:
            raise ExecutionError(f'Cannot fetch results: {err}') from err
        except (ValueError, TypeError, OverflowError) as err:
            # driver-side column converters run while rows are fetched
            raise ScanError(f'Cannot convert fetched row: {err}') from err

    @dumpsql
    def execute(self, *args: Any) -> Self:
        """Execute the statement with positional arguments.

        Raises ExecutionError without reaching the driver when the argument
        count differs from the placeholder count.
        """
        if len(args) != self.placeholders:
            raise ExecutionError(
                f'Statement has {self.placeholders} placeholders but {len(args)} arguments were given')
        try:
            self.dbapi_cursor.execute(self.sql, args)
        except DriverError as err:
            raise self._translate(err) from err
        return self

    def fetchone(self) -> Sequence[Any] | None:
        """Fetch next row, or None when exhausted."""
        return self._fetch(self.dbapi_cursor.fetchone)

    @property
    def rowcount(self) -> int:
        """Number of rows affected by the last execution."""
        return self.dbapi_cursor.rowcount

    def last_identifier(self) -> Any:
        """Return the backend identifier of the inserted row.

        Raises IdentifierUnavailableError if the backend cannot supply one.
        """
        return self.strategy.last_identifier(self.dbapi_cursor, self.returning)

    def release(self) -> None:
        """Close the cursor. Safe to call more than once."""
        if self.released:
            return
        self.released = True
        try:
            self.dbapi_cursor.close()
        except DriverError as err:
            logger.debug(f'Error closing cursor: {err}')
