"""
Static column-to-property binding tables.

A binding table is the ordered list of (column, property) pairs a mapper
uses to hydrate its entity. It is computed once per (entity, fields) pair
and reused for every row.
"""

import dataclasses
import functools
from typing import Mapping, Sequence

from rowmapper.errors import ConfigurationError
from rowmapper.naming import camelize


def settable_properties(entity: type) -> tuple[str, ...]:
    """
    Names of the properties that can be assigned on instances of entity.

    Dataclass fields, class-level annotations and properties with a setter,
    in declaration order with base classes first.
    """
    names: dict[str, None] = {}
    if dataclasses.is_dataclass(entity):
        for f in dataclasses.fields(entity):
            names[f.name] = None
    for klass in reversed(entity.__mro__):
        for name in getattr(klass, "__annotations__", {}):
            if not name.startswith("_"):
                names.setdefault(name, None)
        for name, attr in vars(klass).items():
            if isinstance(attr, property) and attr.fset is not None:
                names.setdefault(name, None)
    return tuple(names)


def normalize_fields(fields: Mapping[str, str | None] | Sequence[str]) -> tuple[tuple[str, str | None], ...]:
    """Turn a fields declaration into (column, property-or-None) pairs."""
    if isinstance(fields, Mapping):
        return tuple((column, prop) for column, prop in fields.items())
    if isinstance(fields, str):
        raise ConfigurationError("fields must be a mapping or a sequence of column names")
    return tuple((column, None) for column in fields)


@functools.lru_cache(maxsize=256)
def binding_table(entity: type, fields: tuple[tuple[str, str | None], ...]) -> tuple[tuple[str, str], ...]:
    """
    Resolve every column of fields to a settable property of entity.

    An explicit property name is used as given; otherwise the column binds to
    the property whose camelized name equals the camelized column name.

    Raises:
        ConfigurationError: if a column matches no settable property
    """
    properties = settable_properties(entity)
    by_accessor = {camelize(name): name for name in properties}
    table = []
    for column, prop in fields:
        if prop is None:
            prop = by_accessor.get(camelize(column))
        if prop is None or prop not in properties:
            raise ConfigurationError(
                f"Column {column!r} has no settable property on {entity.__name__}"
            )
        table.append((column, prop))
    return tuple(table)
