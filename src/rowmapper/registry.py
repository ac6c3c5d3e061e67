"""
Explicit mapper registry.

Associations name their target by table. The registry resolves that table
name to the mapper class that owns it. It is populated at import time, with
the register decorator, rather than looked up dynamically per call.
"""

import logging

from rowmapper.errors import ConfigurationError

logger = logging.getLogger(__name__)


class MapperRegistry:
    """Maps table names to RecordMapper subclasses."""

    def __init__(self):
        self._mappers: dict[str, type] = {}

    def register(self, mapper_cls: type) -> type:
        """
        Register a mapper class under its table_name.

        Returns the class unchanged so this can be used as a decorator:

            @mappers.register
            class CustomerMapper(RecordMapper):
                table_name = "customers"
                ...
        """
        table = getattr(mapper_cls, "table_name", None)
        if not table:
            raise ConfigurationError(f"{mapper_cls.__name__} has no table_name to register")
        existing = self._mappers.get(table)
        if existing is not None and existing is not mapper_cls:
            raise ConfigurationError(
                f"Table {table!r} is already mapped by {existing.__name__}"
            )
        self._mappers[table] = mapper_cls
        logger.debug("Registered %s for table %s", mapper_cls.__name__, table)
        return mapper_cls

    def get(self, table: str) -> type:
        """Get the mapper class for a table."""
        try:
            return self._mappers[table]
        except KeyError:
            raise ConfigurationError(f"No mapper registered for table {table!r}") from None

    def entity_for(self, table: str) -> type:
        """Get the entity class bound to a table's mapper."""
        entity = getattr(self.get(table), "entity", None)
        if entity is None:
            raise ConfigurationError(f"The mapper for table {table!r} has no entity")
        return entity

    def tables(self) -> list[str]:
        return sorted(self._mappers)

    def clear(self) -> None:
        self._mappers.clear()

    def __contains__(self, table: str) -> bool:
        return table in self._mappers

    def __len__(self) -> int:
        return len(self._mappers)


# Default registry used by mappers constructed without one
mappers = MapperRegistry()
