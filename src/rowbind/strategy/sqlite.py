"""
SQLite-specific strategy implementation.

This module implements the DatabaseStrategy interface for the standard library
sqlite3 driver:
- qmark (?) placeholders
- Row identifiers from cursor.lastrowid
- Compile errors reported as OperationalError with a descriptive message
- ISO 8601 adapters and converters for date/datetime columns
"""
import datetime
import logging
import re
import sqlite3
from typing import TYPE_CHECKING, Any

from rowbind.exceptions import IdentifierUnavailableError
from rowbind.strategy.base import DatabaseStrategy, register_strategy
from rowbind.types import convert_date, convert_datetime

if TYPE_CHECKING:
    from rowbind.options import DatabaseOptions

logger = logging.getLogger(__name__)

# Messages sqlite3_prepare reports before any parameter is bound
PREPARE_PATTERNS = [
    r'syntax error',
    r'incomplete input',
    r'unrecognized token',
    r'no such table',
    r'no such column',
    r'no such function',
    r'has no column named',
    r'ambiguous column name',
    r'one statement at a time',
]

_PREPARE_REGEX = re.compile('|'.join(PREPARE_PATTERNS), re.IGNORECASE)


@register_strategy('sqlite')
class SQLiteStrategy(DatabaseStrategy):
    """SQLite-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for SQLite."""
        return 'sqlite'

    @property
    def paramstyle(self) -> str:
        return 'qmark'

    def build_connection_url(self, options: 'DatabaseOptions') -> str:
        """Build the SQLAlchemy connection URL for SQLite."""
        return f'sqlite:///{options.database}'

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for SQLite."""
        connect_args: dict[str, Any] = {
            'detect_types': sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES
        }
        if options.timeout:
            connect_args['timeout'] = options.timeout
        return {'connect_args': connect_args}

    def configure_connection(self, raw_conn: Any) -> None:
        """Register date/datetime adapters and converters for SQLite.

        sqlite3 has no native timestamp type, so values travel as ISO 8601
        text and are parsed back for columns declared DATE, DATETIME or
        TIMESTAMP.
        """
        # Adapters (Python -> SQLite)
        sqlite3.register_adapter(datetime.datetime, datetime.datetime.isoformat)
        sqlite3.register_adapter(datetime.date, datetime.date.isoformat)

        # Converters (SQLite -> Python)
        sqlite3.register_converter('date', convert_date)
        sqlite3.register_converter('datetime', convert_datetime)
        sqlite3.register_converter('timestamp', convert_datetime)

    def enable_autocommit(self, raw_conn: Any) -> None:
        """Enable auto-commit mode for SQLite.
        """
        raw_conn.isolation_level = None

    def disable_autocommit(self, raw_conn: Any) -> None:
        """Disable auto-commit mode for SQLite.
        """
        raw_conn.isolation_level = 'DEFERRED'

    def is_prepare_error(self, exc: BaseException) -> bool:
        """SQLite reports compile failures as OperationalError/ProgrammingError
        with a recognisable message.
        """
        if not isinstance(exc, sqlite3.OperationalError | sqlite3.ProgrammingError | sqlite3.Warning):
            return False
        return bool(_PREPARE_REGEX.search(str(exc)))

    def last_identifier(self, cursor: Any, returning: str | None = None) -> int:
        """Return the rowid of the last inserted row.

        The rowid is the key of tables declaring an INTEGER PRIMARY KEY.
        """
        rowid = cursor.lastrowid
        if rowid is None:
            raise IdentifierUnavailableError('SQLite did not report a rowid for the statement')
        return rowid

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for SQLite connections."""
        return ['database']
