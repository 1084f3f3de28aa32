from dataclasses import dataclass, fields
from typing import Any

from rowbind.exceptions import ValidationError
from rowbind.strategy import get_available_dialects, get_strategy_class
from rowbind.strategy import is_supported_dialect

__all__ = ['DatabaseOptions', 'load_options']


@dataclass
class DatabaseOptions:
    """Options

    supported driver names: `postgresql`, `sqlite`

    autocommit: commit every statement as it executes (default: True). When
    False the caller commits or rolls back through the connection.

    Connection pooling options:
    - use_pool: Whether to use connection pooling (default: False)
    - pool_max_connections: Maximum connections in pool (default: 5)
    - pool_max_idle_time: Maximum seconds a connection can be idle (default: 300)
    - pool_wait_timeout: Maximum seconds to wait for a connection (default: 30)
    """
    drivername: str = 'postgresql'
    hostname: str = None
    username: str = None
    password: str = None
    database: str = None
    port: int = 0
    timeout: int = 0
    autocommit: bool = True
    # Connection pooling parameters
    use_pool: bool = False
    pool_max_connections: int = 5
    pool_max_idle_time: int = 300
    pool_wait_timeout: int = 30

    def __post_init__(self):
        if not is_supported_dialect(self.drivername):
            available = get_available_dialects()
            raise ValidationError(f'drivername must be one of: {available}')
        strategy_cls = get_strategy_class(self.drivername)
        strategy_cls.validate_options(self)

    def __str__(self) -> str:
        # password is left out of log lines
        shown = ', '.join(f'{f.name}={getattr(self, f.name)!r}' for f in fields(self)
                          if f.name != 'password')
        return f'DatabaseOptions({shown})'


def load_options(options: DatabaseOptions | dict[str, Any] | None = None,
                 **kw: Any) -> DatabaseOptions:
    """Build DatabaseOptions from an instance, a dict and/or keyword overrides.

    Keyword arguments override values from ``options``.
    """
    if isinstance(options, DatabaseOptions):
        if not kw:
            return options
        values = {f.name: getattr(options, f.name) for f in fields(options)}
    else:
        values = dict(options or {})

    known = {f.name for f in fields(DatabaseOptions)}
    values.update(kw)
    unknown = set(values) - known
    if unknown:
        raise ValidationError(f'Unknown options: {sorted(unknown)}')
    return DatabaseOptions(**values)
