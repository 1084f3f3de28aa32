"""
PostgreSQL-specific strategy implementation.

This module implements the DatabaseStrategy interface for psycopg 3:
- format (%s) placeholders
- Row identifiers from a RETURNING clause on the insert
- Prepare-time failures identified by SQLSTATE class 42
  (syntax error or access rule violation)
"""
import logging
from typing import TYPE_CHECKING, Any

import psycopg
from rowbind.exceptions import IdentifierUnavailableError
from rowbind.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from rowbind.options import DatabaseOptions

logger = logging.getLogger(__name__)

PREPARE_SQLSTATE_CLASS = '42'


@register_strategy('postgresql')
class PostgresStrategy(DatabaseStrategy):
    """PostgreSQL-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for PostgreSQL."""
        return 'postgresql'

    @property
    def paramstyle(self) -> str:
        return 'format'

    def build_connection_url(self, options: 'DatabaseOptions') -> str:
        """Build the SQLAlchemy connection URL for PostgreSQL."""
        query_parts = []
        if options.timeout:
            query_parts.append(f'connect_timeout={options.timeout}')

        url = (f'postgresql+psycopg://{options.username}:{options.password}'
               f'@{options.hostname}:{options.port}/{options.database}')

        if query_parts:
            url += '?' + '&'.join(query_parts)

        return url

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for PostgreSQL."""
        return {}

    def configure_connection(self, raw_conn: Any) -> None:
        """PostgreSQL with psycopg doesn't need special adapters.
        """

    def enable_autocommit(self, raw_conn: Any) -> None:
        """Enable auto-commit mode for PostgreSQL.
        """
        raw_conn.autocommit = True

    def disable_autocommit(self, raw_conn: Any) -> None:
        """Disable auto-commit mode for PostgreSQL.
        """
        raw_conn.autocommit = False

    def is_prepare_error(self, exc: BaseException) -> bool:
        """Syntax errors, undefined tables/columns and privilege failures all
        fall in SQLSTATE class 42.
        """
        if not isinstance(exc, psycopg.Error):
            return False
        return (exc.sqlstate or '').startswith(PREPARE_SQLSTATE_CLASS)

    def returning_sql(self, sql: str, column: str) -> str:
        """Append a RETURNING clause for the key column."""
        return f'{sql} RETURNING {column}'

    def last_identifier(self, cursor: Any, returning: str | None = None) -> Any:
        """Return the key reported by the statement's RETURNING clause.

        Session state such as LASTVAL() is never consulted: it may belong to
        another table or to a trigger's sequence.
        """
        if returning is None:
            raise IdentifierUnavailableError(
                'PostgreSQL reports inserted keys only through RETURNING')
        try:
            row = cursor.fetchone()
        except psycopg.Error as err:
            raise IdentifierUnavailableError(f'Cannot read RETURNING {returning}: {err}') from err
        if row is None or row[0] is None:
            raise IdentifierUnavailableError(f'RETURNING {returning} produced no value')
        return row[0]

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for PostgreSQL connections."""
        return ['hostname', 'username', 'password', 'database', 'port']
