"""
Row descriptors: the mapping between one object instance and one table row.

An Entity names a table, a key field and an ordered list of fields. Each
field binds a column name to an attribute of the instance that produced the
descriptor, so scanning a row writes straight into that instance and writing
a row reads its current values.

Example:
    @dataclass
    class Customer(EntityDefiner):
        id: int = 0
        name: str = ''
        email: str = ''

        def entity(self) -> Entity:
            return Entity('customers', key=column(self, 'id'), fields=[
                column(self, 'name'),
                column(self, 'email'),
            ])

    customer = Customer(name='John Doe', email='john@example.com')
    customer.entity().insert(cn)     # customer.id now holds the new key
"""
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Self

from rowbind.exceptions import ValidationError
from rowbind.generator import build_delete, build_get, build_insert
from rowbind.generator import build_update, build_where
from rowbind.query import fetch_one, write_only, write_returning_identifier
from rowbind.types import Binding, ColumnKind, Converter, infer_kind

__all__ = ['Field', 'Entity', 'EntityDefiner', 'column']

logger = logging.getLogger(__name__)


@dataclass
class Field:
    """A column name bound to an attribute.

    read_only fields are selected but never written. non_incrementing only
    matters on the key: it marks a caller-assigned key that INSERT and UPDATE
    must write.
    """
    name: str
    binding: Binding
    read_only: bool = False
    non_incrementing: bool = False


def column(owner: Any, attr: str, name: str | None = None,
           kind: ColumnKind | None = None, read_only: bool = False,
           non_incrementing: bool = False,
           converter: Converter | None = None) -> Field:
    """Build a Field bound to ``owner.attr``.

    The column name defaults to the attribute name and the kind is inferred
    from the attribute's current value when not given.
    """
    if kind is None:
        kind = infer_kind(getattr(owner, attr))
    binding = Binding(owner, attr, kind, converter)
    return Field(name or attr, binding, read_only, non_incrementing)


@dataclass
class Entity:
    """Descriptor relating one instance to one row of ``name``.
    """
    name: str
    key: Field | None = None
    fields: list[Field] = field(default_factory=list)

    def __iter__(self) -> Iterator[Field]:
        """Iterate key then fields, the canonical column order."""
        if self.key is not None:
            yield self.key
        yield from self.fields

    def validate(self) -> None:
        """Raise ValidationError unless the descriptor is usable.
        """
        if not self.name:
            raise ValidationError('Entity requires a table name')
        if self.key is None:
            raise ValidationError(f'Entity {self.name} has no key field')
        seen: set[str] = set()
        for f in self:
            if f.name in seen:
                raise ValidationError(f'Duplicate column {f.name} in entity {self.name}')
            seen.add(f.name)

    def columns(self) -> list[str]:
        """Column names in read order."""
        return [f.name for f in self]

    def bindings(self) -> list[Binding]:
        """Bindings in read order."""
        return [f.binding for f in self]

    def writable(self) -> list[Field]:
        """Fields written by INSERT and UPDATE, in order.

        The key leads only when it is caller-assigned; read-only fields are
        skipped.
        """
        written = [self.key] if self.key is not None and self.key.non_incrementing else []
        written.extend(f for f in self.fields if not f.read_only)
        return written

    def get(self, cn: Any) -> None:
        """Load the row identified by the key value into the bound instance.

        Raises NotFoundError if no row matches.
        """
        stmt = build_get(self, cn.paramstyle)
        fetch_one(cn, stmt.sql, stmt.bindings, *stmt.args)

    def where(self, cn: Any, clause: str, *args: Any) -> None:
        """Load the first row matched by a raw clause into the bound instance.

        The clause follows the table name verbatim, e.g. ``WHERE email=?``.
        """
        stmt = build_where(self, clause, args, cn.paramstyle)
        fetch_one(cn, stmt.sql, stmt.bindings, *stmt.args)

    def insert(self, cn: Any) -> Any:
        """Insert the bound instance and return its key.

        A database-generated key is read back and stored on the instance. A
        caller-assigned key is returned as is.
        """
        stmt = build_insert(self, cn.paramstyle)
        if self.key.non_incrementing:
            write_only(cn, stmt.sql, *stmt.args)
            return self.key.binding.get()

        identifier = write_returning_identifier(cn, stmt.sql, *stmt.args,
                                                returning=self.key.name)
        identifier = self.key.binding.from_db(identifier)
        self.key.binding.set(identifier)
        logger.debug(f'Inserted {self.name} row with {self.key.name}={identifier}')
        return identifier

    def update(self, cn: Any) -> None:
        """Write the bound instance's current values to its row."""
        stmt = build_update(self, cn.paramstyle)
        write_only(cn, stmt.sql, *stmt.args)

    def delete(self, cn: Any) -> None:
        """Delete the row identified by the key value."""
        stmt = build_delete(self, cn.paramstyle)
        write_only(cn, stmt.sql, *stmt.args)


class EntityDefiner(ABC):
    """Capability of types that persist as a single table row.

    Subclasses return a fresh Entity bound to their own attributes from
    ``entity()``. ``new()`` builds an empty instance for each row of a
    collection query; override it when the constructor needs arguments.
    """

    @abstractmethod
    def entity(self) -> Entity:
        """Return a descriptor bound to this instance."""

    @classmethod
    def new(cls) -> Self:
        """Return a fresh instance to scan a row into."""
        return cls()
