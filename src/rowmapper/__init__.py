"""
rowmapper

Maps relational rows to entity objects and resolves declared associations
(one-to-many, many-to-one, many-to-many) at read time.
"""

from rowmapper.association import Association, AssociationKind
from rowmapper.db import QueryExecutor, get_connection
from rowmapper.errors import (
    ConfigurationError,
    DatabaseError,
    InvalidArgument,
    MapperError,
    MultipleResultsFound,
    NotFound,
)
from rowmapper.mapper import RecordMapper
from rowmapper.naming import camelize
from rowmapper.registry import MapperRegistry, mappers

__all__ = [
    "Association",
    "AssociationKind",
    "ConfigurationError",
    "DatabaseError",
    "InvalidArgument",
    "MapperError",
    "MapperRegistry",
    "MultipleResultsFound",
    "NotFound",
    "QueryExecutor",
    "RecordMapper",
    "camelize",
    "get_connection",
    "mappers",
]
