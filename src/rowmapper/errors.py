"""
Error hierarchy for rowmapper.

Every failure raised by a mapper, the registry or the executor is a
MapperError. Driver errors are wrapped in DatabaseError with the driver's
message kept verbatim and the original exception chained as __cause__.
"""

from typing import Any, Mapping


class MapperError(Exception):
    """Base exception for all rowmapper errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(MapperError):
    """Bad or missing caller input (empty criteria, non-positive id, ...)."""


class ConfigurationError(MapperError):
    """A mapper, the registry or the runtime configuration is incomplete."""


class NotFound(MapperError):
    """A lookup matched zero rows where one or more were expected."""

    def __init__(self, table: str, criteria: Mapping[str, Any] | None = None):
        self.table = table
        self.criteria = dict(criteria or {})
        if self.criteria:
            where = ", ".join(f"{k}={v!r}" for k, v in self.criteria.items())
            message = f"No {table} row matches {where}"
        else:
            message = f"No {table} rows found"
        super().__init__(message)


class MultipleResultsFound(MapperError):
    """A lookup matched more than one row where exactly one was expected."""

    def __init__(self, table: str, count: int, criteria: Mapping[str, Any] | None = None):
        self.table = table
        self.count = count
        self.criteria = dict(criteria or {})
        super().__init__(f"Expected one {table} row, found {count}")


class DatabaseError(MapperError):
    """The underlying driver failed while executing a query."""
