"""
Collection queries: one SELECT producing many freshly built instances.
"""
import logging
from collections.abc import Callable, Sequence
from typing import Any

from rowbind.entity import EntityDefiner
from rowbind.generator import build_where
from rowbind.query import fetch_many, scan_row

__all__ = ['EntityCollection']

logger = logging.getLogger(__name__)


class EntityCollection:
    """Select many rows of one entity type.

    ``factory`` builds an empty instance per row: either an EntityDefiner
    subclass (its ``new()`` is used) or any zero-argument callable returning
    a definer.

    Example:
        customers = EntityCollection(Customer).select(
            cn, "WHERE email LIKE ?", '%@example.com')
    """

    def __init__(self, factory: type[EntityDefiner] | Callable[[], EntityDefiner]) -> None:
        if isinstance(factory, type) and issubclass(factory, EntityDefiner):
            factory = factory.new
        self.factory = factory

    def select(self, cn: Any, clause: str = '', *args: Any) -> list[EntityDefiner]:
        """Return one new instance per row matched by ``clause``, in row order.

        Returns an empty list when nothing matches. The first execution or
        scan error propagates and no partial result is returned.
        """
        prototype = self.factory().entity()
        stmt = build_where(prototype, clause, args, cn.paramstyle)
        results: list[EntityDefiner] = []

        def scan(row: Sequence[Any]) -> None:
            definer = self.factory()
            scan_row(row, definer.entity().bindings())
            results.append(definer)

        fetch_many(cn, stmt.sql, scan, *stmt.args)
        logger.debug(f'Selected {len(results)} {prototype.name} rows')
        return results
