"""
Base strategy interface for dialect-specific behaviour.

Defines the abstract base class that all database-specific strategy implementations
must inherit from. A strategy tells the rest of the package how a backend spells
placeholders, how it reports the identifier of an inserted row, which driver
errors mean a statement was rejected before its arguments were bound, and how
its connections are created and configured.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from rowbind.exceptions import ValidationError
from rowbind.sql import standardize_placeholders

if TYPE_CHECKING:
    from rowbind.options import DatabaseOptions

# Registry of dialect name -> strategy class
# Defined here to avoid circular imports (concrete strategies import from base)
_STRATEGY_REGISTRY: dict[str, type['DatabaseStrategy']] = {}


def register_strategy(dialect: str):
    """Decorator to register a strategy class for a dialect.

    Usage:
        @register_strategy('postgresql')
        class PostgresStrategy(DatabaseStrategy):
            ...
    """
    def decorator(cls: type['DatabaseStrategy']) -> type['DatabaseStrategy']:
        _STRATEGY_REGISTRY[dialect] = cls
        return cls
    return decorator


class DatabaseStrategy(ABC):
    """Base class for database-specific operations.
    """

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier (e.g. 'postgresql', 'sqlite')."""

    @property
    @abstractmethod
    def paramstyle(self) -> str:
        """Return the DB-API paramstyle used by the driver."""

    @abstractmethod
    def build_connection_url(self, options: 'DatabaseOptions') -> str:
        """Build the SQLAlchemy connection URL for this dialect.

        Args:
            options: DatabaseOptions containing connection parameters

        Returns
            Connection URL string suitable for SQLAlchemy
        """

    @abstractmethod
    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for this dialect.
        """

    @abstractmethod
    def configure_connection(self, raw_conn: Any) -> None:
        """Register adapters and converters on a new raw DBAPI connection.
        """

    @abstractmethod
    def enable_autocommit(self, raw_conn: Any) -> None:
        """Enable auto-commit mode on a raw database connection.
        """

    @abstractmethod
    def disable_autocommit(self, raw_conn: Any) -> None:
        """Disable auto-commit mode on a raw database connection.
        """

    @abstractmethod
    def is_prepare_error(self, exc: BaseException) -> bool:
        """Return True if a driver error means the statement was rejected
        before any argument was bound (syntax, unknown table or column).
        """

    def returning_sql(self, sql: str, column: str) -> str:
        """Return ``sql`` extended to report ``column`` of the inserted row.

        Backends that read identifiers out of band return ``sql`` unchanged.
        """
        return sql

    @abstractmethod
    def last_identifier(self, cursor: Any, returning: str | None = None) -> Any:
        """Return the backend identifier of the row inserted through ``cursor``.

        ``returning`` names the key column when the statement was prepared
        through ``returning_sql``.

        Raises
            IdentifierUnavailableError: If the backend cannot supply one
        """

    @classmethod
    @abstractmethod
    def get_required_options(cls) -> list[str]:
        """Return list of required option field names for this dialect.
        """

    @classmethod
    def validate_options(cls, options: 'DatabaseOptions') -> None:
        """Validate options for this dialect.

        Raises
            ValidationError: If any required field is None or 0
        """
        for field in cls.get_required_options():
            if not getattr(options, field):
                raise ValidationError(f'field {field} cannot be None or 0')

    def standardize_sql(self, sql: str) -> str:
        """Convert ``?``/``%s`` placeholders to this dialect's style.
        """
        return standardize_placeholders(sql, self.paramstyle)
