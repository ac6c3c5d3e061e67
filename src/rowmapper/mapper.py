"""
RecordMapper: maps rows of one table to entity objects.

A concrete mapper declares its table and how columns land on the entity:

    @mappers.register
    class CustomerMapper(RecordMapper):
        table_name = "customers"
        alias = "c"
        primary_key = "id"
        fields = {"id": "id", "full_name": "name", "email": None}
        entity = Customer
        associations = [
            Association(table="orders", field="customer_id", property="orders"),
        ]

The find* operations keep a shape-by-row-count contract: one matching row
gives an entity, several give a list in database order, none raises
NotFound. get/get_one_by and list_by/list_all have a fixed shape instead.
"""

import logging
import re
from typing import Any, Mapping

import pandas as pd

from rowmapper.association import Association, AssociationKind
from rowmapper.binding import binding_table, normalize_fields, settable_properties
from rowmapper.db import QueryExecutor, rows_to_dataframe
from rowmapper.errors import (
    ConfigurationError,
    InvalidArgument,
    MultipleResultsFound,
    NotFound,
)
from rowmapper.registry import MapperRegistry, mappers

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_CRITERIA_KEY = re.compile(r"^(?:[A-Za-z_][A-Za-z0-9_]*\.)?[A-Za-z_][A-Za-z0-9_]*$")


def _check_identifier(value: Any, what: str) -> str:
    if not isinstance(value, str) or not _IDENTIFIER.match(value):
        raise ConfigurationError(f"Invalid {what}: {value!r}")
    return value


class RecordMapper:
    """Base class for table mappers. Subclasses set the class attributes below."""

    table_name: str | None = None
    alias: str | None = None
    primary_key: str = "id"
    fields: Mapping[str, str | None] | list[str] | None = None
    entity: type | None = None
    associations: list[Association | dict] = []
    # How many levels of loaded entities get their associations resolved
    association_depth: int = 1

    def __init__(self, connection, registry: MapperRegistry | None = None):
        if not connection:
            raise ConfigurationError("Bad constructor's parameters")
        if hasattr(connection, "fetch_all"):
            self.executor = connection
        else:
            self.executor = QueryExecutor(connection)
        self.registry = registry if registry is not None else mappers
        self._levels = self.association_depth

        name = type(self).__name__
        if not self.table_name:
            raise ConfigurationError(f"{name} has no table_name")
        _check_identifier(self.table_name, "table name")
        if self.alias is not None:
            _check_identifier(self.alias, "table alias")
        if not self.primary_key:
            raise ConfigurationError(f"{name} has no primary_key")
        if not self.fields:
            raise ConfigurationError(f"{name} has no fields")
        if self.entity is None:
            raise ConfigurationError("The object instance must be set")

        self._bindings = binding_table(self.entity, normalize_fields(self.fields))
        for column, _ in self._bindings:
            _check_identifier(column, "column name")
        self._properties = dict(self._bindings)
        if self.primary_key not in self._properties:
            raise ConfigurationError(
                f"Primary key {self.primary_key!r} is not one of the {name} fields"
            )

        settable = settable_properties(self.entity)
        self._associations = []
        for link in self.associations:
            association = link if isinstance(link, Association) else Association.from_dict(link)
            if association.property not in settable:
                raise ConfigurationError(
                    f"{self.entity.__name__} has no settable property {association.property!r}"
                )
            self._associations.append(association)

    # =========================================================================
    # Source-compatible lookups
    # =========================================================================

    def find(self, id: int):
        """Alias for find_one_by on the primary key."""
        self._check_id(id)
        return self.find_one_by({self.primary_key: id})

    def find_one_by(self, criteria: Mapping[str, Any]):
        """
        Request entities by equality criteria.

        Returns:
            The entity when one row matches, a list of entities in database
            order when several match.

        Raises:
            InvalidArgument: if criteria is empty or has a non-identifier key
            NotFound: if no row matches
        """
        return self._shaped(self._fetch(criteria), criteria)

    def find_by(self, criteria: Mapping[str, Any]):
        """Same contract as find_one_by."""
        return self._shaped(self._fetch(criteria), criteria)

    def find_all(self):
        """Every row of the table, shaped like find_one_by."""
        return self._shaped(self._fetch_all(), None)

    # =========================================================================
    # Fixed-shape lookups
    # =========================================================================

    def get(self, id: int):
        """Get exactly one entity by primary key."""
        self._check_id(id)
        return self.get_one_by({self.primary_key: id})

    def get_one_by(self, criteria: Mapping[str, Any]):
        """
        Get exactly one entity matching criteria.

        Raises:
            NotFound: if no row matches
            MultipleResultsFound: if more than one row matches
        """
        rows = self._fetch(criteria)
        if not rows:
            raise NotFound(self.table_name, criteria)
        if len(rows) > 1:
            raise MultipleResultsFound(self.table_name, len(rows), criteria)
        return self.hydrate(rows[0])

    def list_by(self, criteria: Mapping[str, Any]) -> list:
        """List entities matching criteria, empty list if none match."""
        return [self.hydrate(row) for row in self._fetch(criteria)]

    def list_all(self) -> list:
        """List every entity of the table."""
        return [self.hydrate(row) for row in self._fetch_all()]

    def frame_by(self, criteria: Mapping[str, Any] | None = None) -> pd.DataFrame:
        """
        Matching rows as a DataFrame keyed by property name.

        Associations are not resolved. With no criteria every row is returned.
        """
        rows = self._fetch_all() if criteria is None else self._fetch(criteria)
        return rows_to_dataframe(
            [{prop: row.get(column) for column, prop in self._bindings} for row in rows],
            [prop for _, prop in self._bindings],
        )

    # =========================================================================
    # Hydration
    # =========================================================================

    def hydrate(self, row: Mapping[str, Any]):
        """Build an entity from one row and attach its associations."""
        if not row:
            raise InvalidArgument("The row must not be empty")
        try:
            instance = self.entity()
        except TypeError as e:
            raise ConfigurationError(
                f"{self.entity.__name__} cannot be constructed empty: {e}"
            ) from e
        for column, prop in self._bindings:
            if column in row:
                setattr(instance, prop, row[column])
        if self._levels > 0:
            self.resolve_associations(instance)
        return instance

    def resolve_associations(self, instance):
        """Load every declared association of instance and set it on its property."""
        for association in self._associations:
            value = self._resolve(association, instance)
            setattr(instance, association.property, value)
        return instance

    def _resolve(self, association: Association, instance):
        target = self._target(association)
        identity = getattr(instance, self._properties[self.primary_key])
        logger.debug(
            "Resolving %s %s.%s",
            association.kind.value,
            self.table_name,
            association.property,
            extra={"table": association.table},
        )

        if association.kind is AssociationKind.MANY_TO_ONE:
            if association.field in self._properties:
                foreign_key = getattr(instance, self._properties[association.field])
                if foreign_key is None:
                    return None
                return target.get_one_by({target.primary_key: foreign_key})
            related = target.list_by({association.field: identity})
            return related[0] if related else None

        if association.kind is AssociationKind.MANY_TO_MANY and association.through:
            through = _check_identifier(association.through, "join table")
            field = _check_identifier(association.field, "join column")
            target_field = _check_identifier(association.target_field, "join column")
            links = self.executor.fetch_all(
                f"SELECT {target_field} FROM {through} WHERE {field} = %(id)s",
                {"id": identity},
            )
            related = []
            for link in links:
                if link[target_field] is None:
                    continue
                found = target.list_by({target.primary_key: link[target_field]})
                if not found:
                    logger.warning(
                        "%s row for %s=%r points at missing %s %r",
                        through,
                        field,
                        identity,
                        association.table,
                        link[target_field],
                        extra={"table": through},
                    )
                related.extend(found)
            return related

        return target.list_by({association.field: identity})

    def _target(self, association: Association) -> "RecordMapper":
        mapper_cls = self.registry.get(association.table)
        target = mapper_cls(self.executor, registry=self.registry)
        target._levels = self._levels - 1
        return target

    # =========================================================================
    # Query building
    # =========================================================================

    def _select(self) -> str:
        columns = ", ".join(column for column, _ in self._bindings)
        source = f"{self.table_name} {self.alias}" if self.alias else self.table_name
        return f"SELECT {columns} FROM {source}"

    def _fetch(self, criteria: Mapping[str, Any]) -> list[dict]:
        if not isinstance(criteria, Mapping) and criteria is not None:
            raise InvalidArgument(f"Criteria must be a mapping of column to value, got {type(criteria).__name__}")
        if not criteria:
            raise InvalidArgument("Criteria must be specified and cannot be empty")
        clauses = ["TRUE"]
        params = {}
        for column, value in criteria.items():
            if not isinstance(column, str) or not _CRITERIA_KEY.match(column):
                raise InvalidArgument(f"Invalid criteria column: {column!r}")
            name = column.replace(".", "__")
            if name in params:
                raise InvalidArgument(f"Criteria column {column!r} collides with another criteria column")
            clauses.append(f"{column} = %({name})s")
            params[name] = value
        query = f"{self._select()} WHERE {' AND '.join(clauses)}"
        rows = self.executor.fetch_all(query, params)
        logger.debug("Loaded %d %s row(s)", len(rows), self.table_name, extra={"table": self.table_name})
        return rows

    def _fetch_all(self) -> list[dict]:
        rows = self.executor.fetch_all(self._select(), None)
        logger.debug("Loaded %d %s row(s)", len(rows), self.table_name, extra={"table": self.table_name})
        return rows

    def _shaped(self, rows: list[dict], criteria: Mapping[str, Any] | None):
        if not rows:
            raise NotFound(self.table_name, criteria)
        if len(rows) == 1:
            return self.hydrate(rows[0])
        return [self.hydrate(row) for row in rows]

    @staticmethod
    def _check_id(id: Any) -> None:
        if isinstance(id, bool) or not isinstance(id, int) or id <= 0:
            raise InvalidArgument(f"The identifier must be a positive integer, got {id!r}")
