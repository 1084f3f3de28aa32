"""
Database connection handling with SQLAlchemy.

This module provides:
1. The `connect()` function for creating new database connections
2. The `ConnectionWrapper` class that prepares statements on a SQLAlchemy connection
3. Engine creation and management through a thread-safe registry

The ConnectionWrapper is the execution handle passed to every entity
operation. Its `prepare(sql)` returns a PreparedStatement over a fresh DBAPI
cursor; the primitives in rowbind.query release it before returning.
"""
import atexit
import logging
import threading
from collections.abc import Callable
from typing import Any, Self

import sqlalchemy as sa
from rowbind.cursor import PreparedStatement
from rowbind.exceptions import DriverError, PrepareError
from rowbind.options import DatabaseOptions, load_options
from rowbind.strategy import get_strategy
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool

__all__ = [
    'ConnectionWrapper',
    'connect',
    'get_engine_for_options',
    'dispose_all_engines',
]

logger = logging.getLogger(__name__)

_engine_registry: dict[str, Engine] = {}
_engine_registry_lock = threading.RLock()


def get_engine_for_options(options: DatabaseOptions,
                           engine_factory: Callable[..., Engine] = sa.create_engine,
                           **kwargs: Any) -> Engine:
    """Get or create a SQLAlchemy engine for the given options.
    """
    key = repr(options)

    with _engine_registry_lock:
        if key in _engine_registry:
            logger.debug(f'Using existing engine for {options.drivername}')
            return _engine_registry[key]

        strategy = get_strategy(options.drivername)
        url = strategy.build_connection_url(options)

        engine_kwargs: dict[str, Any] = {'echo': False}
        engine_kwargs.update(strategy.get_engine_kwargs(options))

        if not options.use_pool:
            engine_kwargs['poolclass'] = NullPool
        else:
            engine_kwargs['pool_size'] = options.pool_max_connections
            engine_kwargs['pool_recycle'] = options.pool_max_idle_time
            engine_kwargs['pool_timeout'] = options.pool_wait_timeout
            engine_kwargs['max_overflow'] = 10
            engine_kwargs['pool_pre_ping'] = True
            engine_kwargs['pool_reset_on_return'] = 'rollback'

        engine_kwargs.update(kwargs)

        engine = engine_factory(url, **engine_kwargs)

        _engine_registry[key] = engine
        logger.debug(f'Created new engine for {options.drivername}')

        return engine


def dispose_all_engines() -> None:
    """Dispose all engines in the registry.
    """
    with _engine_registry_lock:
        for engine in _engine_registry.values():
            engine.dispose()
        _engine_registry.clear()
        logger.debug('All database engines disposed')


atexit.register(dispose_all_engines)


class ConnectionWrapper:
    """Wraps a SQLAlchemy connection to prepare statements and track calls

    This class provides a thin wrapper around SQLAlchemy connection objects that:
    1. Prepares statements in the dialect's placeholder style
    2. Tracks query execution counts and timing
    3. Supports context manager protocol for explicit resource management
    """

    def __init__(self, sa_connection: sa.engine.Connection | None = None,
                 options: DatabaseOptions | None = None) -> None:
        """Initialize a connection wrapper
        """
        self.sa_connection = sa_connection
        self.engine = sa_connection.engine if sa_connection else None
        self.options = options
        self.dbapi_connection = sa_connection.connection if sa_connection else None
        self._dialect = sa_connection.dialect.name if sa_connection else None
        self.calls = 0
        self.time = 0

    def __enter__(self) -> Self:
        """Support for context manager protocol
        """
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        """Return the connection to the pool when exiting the context manager
        """
        self.close()

    @property
    def dialect(self) -> str:
        """Return the dialect name ('postgresql' or 'sqlite')."""
        return self._dialect

    @property
    def strategy(self):
        """Return the strategy for this connection's dialect."""
        return get_strategy(self.dialect)

    @property
    def paramstyle(self) -> str:
        """Placeholder style generated statements must use."""
        return self.strategy.paramstyle

    @property
    def closed(self) -> bool:
        return self.sa_connection is None or self.sa_connection.closed

    def prepare(self, sql: str, returning: str | None = None) -> PreparedStatement:
        """Prepare ``sql`` on a new cursor.

        ``returning`` names the key column an INSERT must report; the dialect
        decides how the statement is extended to report it.

        Raises PrepareError if the text is empty or no cursor can be opened.
        """
        if not sql or not sql.strip():
            raise PrepareError('Cannot prepare an empty statement')
        if self.closed:
            raise PrepareError('Cannot prepare a statement on a closed connection')
        strategy = self.strategy
        try:
            cursor = self.dbapi_connection.cursor()
        except DriverError as err:
            raise PrepareError(f'Cannot open cursor: {err}') from err
        sql = strategy.standardize_sql(sql)
        if returning is not None:
            sql = strategy.returning_sql(sql, returning)
        return PreparedStatement(self, sql, cursor, strategy, returning)

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics
        """
        self.time += elapsed
        self.calls += 1

    @property
    def is_pooled(self) -> bool:
        """Check if this connection is using SQLAlchemy's connection pooling
        """
        return not isinstance(self.engine.pool, sa.pool.NullPool)

    def commit(self) -> None:
        """Commit the current transaction when autocommit is off.
        """
        self.dbapi_connection.commit()

    def rollback(self) -> None:
        """Roll back the current transaction when autocommit is off.
        """
        self.dbapi_connection.rollback()

    def close(self) -> None:
        """Close the SQLAlchemy connection, returning it to the pool
        """
        if self.closed:
            return
        self.sa_connection.close()
        logger.debug(f'Connection closed: {self.calls} queries in {self.time:.2f}s (avg: {self.time/max(1,self.calls):.3f}s per query)')


def configure_connection(sa_connection: sa.engine.Connection,
                         options: DatabaseOptions) -> None:
    """Configure a SQLAlchemy connection with database-specific settings.
    """
    strategy = get_strategy(sa_connection.dialect.name)
    raw_conn = sa_connection.connection.driver_connection
    strategy.configure_connection(raw_conn)
    if options.autocommit:
        strategy.enable_autocommit(raw_conn)
    else:
        strategy.disable_autocommit(raw_conn)


def connect(options: DatabaseOptions | dict[str, Any] | None = None,
            **kw: Any) -> ConnectionWrapper:
    """Connect to a database using SQLAlchemy for connection management

    Args:
        options: Can be:
                - DatabaseOptions object
                - Dictionary of options
                - None, with options specified as keyword arguments
        **kw: Additional keyword arguments to override options

    Returns
        ConnectionWrapper object for connecting to the database
    """
    options = load_options(options, **kw)
    engine = get_engine_for_options(options)

    sa_connection = engine.connect()
    configure_connection(sa_connection, options)

    return ConnectionWrapper(sa_connection, options)
