"""
Exception classes raised by entity binding and statement execution.
"""
import sqlite3

import psycopg

__all__ = [
    'DatabaseError',
    'ValidationError',
    'PrepareError',
    'ExecutionError',
    'ScanError',
    'NotFoundError',
    'IdentifierUnavailableError',
    'DriverError',
]


class DatabaseError(Exception):
    """Base class for all rowbind errors.
    """


class ValidationError(DatabaseError, ValueError):
    """Invalid entity descriptor or options.
    """


class PrepareError(DatabaseError):
    """Statement rejected by the backend before arguments were bound.
    """


class ExecutionError(DatabaseError):
    """Statement failed while executing with bound arguments.
    """


class ScanError(DatabaseError):
    """Result row could not populate the requested bindings.
    """


class NotFoundError(DatabaseError):
    """A single-row fetch matched zero rows.
    """


class IdentifierUnavailableError(DatabaseError):
    """The backend could not supply an identifier for the inserted row.
    """


# Driver exception roots that the execution layer translates
DriverError = (
    psycopg.Error,    # Postgres base error
    sqlite3.Error,    # SQLite base error
)
