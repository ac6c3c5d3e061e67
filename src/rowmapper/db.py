"""
Database connection and query utilities.

Provides the QueryExecutor used by every mapper: a thin wrapper over a
psycopg connection that runs parameterized queries and returns rows as
dictionaries (or pandas DataFrames).

For testing, use set_connection_override() to inject a connection
that will be used instead of creating new ones. This enables
transaction rollback between tests.
"""

import decimal
import logging
from contextlib import contextmanager
from typing import Any, Mapping, Sequence

import pandas as pd
import psycopg
from psycopg.rows import dict_row

from rowmapper.config import config
from rowmapper.errors import ConfigurationError, DatabaseError

logger = logging.getLogger(__name__)

# =============================================================================
# Connection Override (for testing)
# =============================================================================

_connection_override: psycopg.Connection | None = None


def set_connection_override(conn: psycopg.Connection) -> None:
    """
    Set a connection to use instead of creating new ones.

    Used by test fixtures to ensure all database operations run
    within a single transaction that can be rolled back.

    Args:
        conn: The connection to use for all subsequent operations
    """
    global _connection_override
    _connection_override = conn


def clear_connection_override() -> None:
    """Clear the connection override, restoring normal behavior."""
    global _connection_override
    _connection_override = None


# =============================================================================
# Connection Management
# =============================================================================


@contextmanager
def get_connection():
    """
    Context manager for database connections.

    In normal operation:
        - Opens a new connection to config.database_url
        - Commits on successful exit
        - Rolls back on exception
        - Closes connection when done

    With override set (testing):
        - Returns the override connection
        - Does NOT commit, rollback, or close
        - Caller (test fixture) manages the transaction

    Usage:
        with get_connection() as conn:
            customers = CustomerMapper(conn).find_all()
    """
    if _connection_override is not None:
        yield _connection_override
        return

    if not config.database_url:
        raise ConfigurationError("DATABASE_URL is not configured")

    conn = psycopg.connect(config.database_url)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


# =============================================================================
# Query Execution
# =============================================================================


class QueryExecutor:
    """
    Runs parameterized queries over a single psycopg connection.

    Queries use named placeholders (%(name)s) and params is a mapping of
    those names to values. The connection is owned by the caller; the
    executor never commits, rolls back or closes it.
    """

    def __init__(self, connection: psycopg.Connection):
        if connection is None:
            raise ConfigurationError("Bad constructor's parameters")
        self.connection = connection

    def _run(self, query: str, params: Mapping[str, Any] | None) -> list[dict[str, Any]]:
        logger.debug("Executing query", extra={"query": " ".join(query.split()), "params": params})
        try:
            with self.connection.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params or None)
                return cur.fetchall()
        except psycopg.Error as e:
            logger.error("Query failed: %s", e)
            raise DatabaseError(str(e)) from e

    def fetch_all(self, query: str, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """
        Execute a query and return all rows as list of dicts.

        Args:
            query: SQL query with %(name)s placeholders
            params: Mapping of placeholder names to values

        Returns:
            List of dicts, empty list if no rows found

        Raises:
            DatabaseError: if the driver fails, with the driver's message
        """
        return self._run(query, params)

    def fetch_one(self, query: str, params: Mapping[str, Any] | None = None) -> dict[str, Any] | None:
        """Execute a query and return the first row as dict, or None if no row found."""
        rows = self._run(query, params)
        return rows[0] if rows else None

    def fetch_dataframe(self, query: str, params: Mapping[str, Any] | None = None) -> pd.DataFrame:
        """Execute a query and return results as pandas DataFrame."""
        rows = self._run(query, params)
        columns = list(rows[0].keys()) if rows else []
        return rows_to_dataframe(rows, columns)


def rows_to_dataframe(rows: Sequence[Mapping[str, Any]], columns: Sequence[str]) -> pd.DataFrame:
    """
    Build a DataFrame from dict rows.

    Columns holding only decimal.Decimal values are converted to float for
    numeric compatibility.
    """
    df = pd.DataFrame(list(rows), columns=list(columns))
    if df.empty:
        return df
    for col in df.columns:
        if df[col].apply(lambda x: isinstance(x, decimal.Decimal)).all():
            df[col] = df[col].astype(float)
    return df
