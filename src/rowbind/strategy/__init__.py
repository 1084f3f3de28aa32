"""
Dialect strategies, looked up by SQLAlchemy dialect name.

Importing this package registers the SQLite and PostgreSQL strategies.
"""
from functools import lru_cache

from rowbind.strategy.base import _STRATEGY_REGISTRY
from rowbind.strategy.base import DatabaseStrategy as DatabaseStrategy
from rowbind.strategy.base import register_strategy as register_strategy
from rowbind.strategy.postgres import PostgresStrategy as PostgresStrategy
from rowbind.strategy.sqlite import SQLiteStrategy as SQLiteStrategy


def get_available_dialects() -> list[str]:
    """Registered dialect names."""
    return list(_STRATEGY_REGISTRY)


def is_supported_dialect(dialect: str) -> bool:
    return dialect in _STRATEGY_REGISTRY


def get_strategy_class(dialect: str) -> type[DatabaseStrategy]:
    """Return the registered strategy class without instantiating it.

    Raises ValueError for an unregistered dialect.
    """
    try:
        return _STRATEGY_REGISTRY[dialect]
    except KeyError:
        raise ValueError(
            f'Unsupported dialect: {dialect}. Available: {get_available_dialects()}'
        ) from None


@lru_cache(maxsize=8)
def get_strategy(dialect: str) -> DatabaseStrategy:
    """Return the shared strategy instance for ``dialect``."""
    return get_strategy_class(dialect)()
