"""
Statement generation for entity descriptors.

Every builder is a pure function of the descriptor and the requested
placeholder style. Column lists, argument lists and result bindings are all
produced from one traversal (key first when it applies, then fields in
declared order) so placeholders, arguments and scanned columns line up
positionally.

    Get     SELECT k,f1,f2 FROM t WHERE k=?
    Where   SELECT k,f1,f2 FROM t <clause>
    Insert  INSERT INTO t(f1,f2) VALUES (?,?)
    Update  UPDATE t SET f1=?,f2=? WHERE k=?
    Delete  DELETE FROM t WHERE k=?

Read-only fields are skipped by Insert and Update only. The key is written
by Insert and Update only when it is non-incrementing; an incrementing key
is never assigned by Update.
"""
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from rowbind.exceptions import ValidationError
from rowbind.sql import make_placeholders, placeholder

if TYPE_CHECKING:
    from rowbind.entity import Entity
    from rowbind.types import Binding

__all__ = [
    'Operation',
    'Statement',
    'generate',
    'build_get',
    'build_where',
    'build_insert',
    'build_update',
    'build_delete',
]


class Operation(Enum):
    """Statement shapes the generator can emit."""
    GET = 'get'
    WHERE = 'where'
    INSERT = 'insert'
    UPDATE = 'update'
    DELETE = 'delete'


@dataclass(frozen=True)
class Statement:
    """Generated SQL with its positional arguments and result bindings.

    ``args`` are the values read through the bindings when the statement was
    built. ``bindings`` receive the result columns of a read, in column order,
    and are empty for writes.
    """
    sql: str
    args: tuple[Any, ...] = ()
    bindings: tuple['Binding', ...] = field(default=())


def _select_prefix(entity: 'Entity') -> str:
    return f"SELECT {','.join(entity.columns())} FROM {entity.name}"


def build_get(entity: 'Entity', paramstyle: str = 'qmark') -> Statement:
    """Select every column of the row matching the key value.
    """
    entity.validate()
    sql = f'{_select_prefix(entity)} WHERE {entity.key.name}={placeholder(paramstyle, 1)}'
    return Statement(sql, (entity.key.binding.to_db(),), tuple(entity.bindings()))


def build_where(entity: 'Entity', clause: str = '', args: Sequence[Any] = (),
                paramstyle: str = 'qmark') -> Statement:
    """Select every column with a caller-written clause after the table name.

    The clause and its arguments are passed through unchanged; ``paramstyle``
    is accepted for symmetry with the other builders.
    """
    entity.validate()
    sql = _select_prefix(entity)
    if clause and clause.strip():
        sql = f'{sql} {clause.strip()}'
    return Statement(sql, tuple(args), tuple(entity.bindings()))


def build_insert(entity: 'Entity', paramstyle: str = 'qmark') -> Statement:
    """Insert the writable columns of the descriptor.

    Raises ValidationError if nothing is writable.
    """
    entity.validate()
    written = entity.writable()
    if not written:
        raise ValidationError(f'Entity {entity.name} has no writable columns to insert')

    columns = ','.join(f.name for f in written)
    params = ','.join(make_placeholders(len(written), paramstyle))
    sql = f'INSERT INTO {entity.name}({columns}) VALUES ({params})'
    return Statement(sql, tuple(f.binding.to_db() for f in written))


def build_update(entity: 'Entity', paramstyle: str = 'qmark') -> Statement:
    """Assign the writable columns of the row matching the key value.

    The key value is appended after the assigned values for the WHERE
    clause, so a non-incrementing key appears twice in the arguments.

    Raises ValidationError if nothing is writable.
    """
    entity.validate()
    written = entity.writable()
    if not written:
        raise ValidationError(f'Entity {entity.name} has no writable columns to update')

    params = make_placeholders(len(written) + 1, paramstyle)
    sets = ','.join(f'{f.name}={p}' for f, p in zip(written, params))
    sql = f'UPDATE {entity.name} SET {sets} WHERE {entity.key.name}={params[-1]}'
    args = [f.binding.to_db() for f in written]
    args.append(entity.key.binding.to_db())
    return Statement(sql, tuple(args))


def build_delete(entity: 'Entity', paramstyle: str = 'qmark') -> Statement:
    """Delete the row matching the key value.
    """
    entity.validate()
    sql = f'DELETE FROM {entity.name} WHERE {entity.key.name}={placeholder(paramstyle, 1)}'
    return Statement(sql, (entity.key.binding.to_db(),))


def generate(entity: 'Entity', operation: Operation, clause: str = '',
             args: Sequence[Any] = (), paramstyle: str = 'qmark') -> Statement:
    """Build the statement for ``operation``.

    ``clause`` and ``args`` only apply to Operation.WHERE.
    """
    if operation is Operation.WHERE:
        return build_where(entity, clause, args, paramstyle)
    builders = {
        Operation.GET: build_get,
        Operation.INSERT: build_insert,
        Operation.UPDATE: build_update,
        Operation.DELETE: build_delete,
    }
    return builders[operation](entity, paramstyle)
