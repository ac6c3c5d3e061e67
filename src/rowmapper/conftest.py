# src/rowmapper/conftest.py
"""
Pytest configuration and shared fixtures.

Tests are co-located with implementation files using the *_test.py suffix.
Unit tests run mappers against FakeExecutor, an in-memory stand-in for
QueryExecutor that filters seeded rows by the equality criteria of each
query and records what it was asked to run.
"""

import os

# Set environment BEFORE importing any app modules
os.environ["ROWMAPPER_ENV"] = "test"

import re
from dataclasses import dataclass, field
from decimal import Decimal

import pytest

from rowmapper import Association, AssociationKind, MapperRegistry, RecordMapper

# =============================================================================
# Fake Executor
# =============================================================================

_SELECT = re.compile(r"SELECT (?P<columns>.+?) FROM (?P<table>\w+)", re.DOTALL)
_EQUALS = re.compile(r"(?P<column>[\w.]+) = %\((?P<param>\w+)\)s")


class FakeExecutor:
    """Answers the SELECTs a mapper emits from seeded in-memory tables."""

    def __init__(self, tables: dict[str, list[dict]]):
        self.tables = tables
        self.queries: list[tuple[str, dict | None]] = []
        self.error: Exception | None = None

    def fetch_all(self, query: str, params: dict | None = None) -> list[dict]:
        self.queries.append((query, params))
        if self.error is not None:
            raise self.error

        select = _SELECT.search(query)
        columns = [c.strip() for c in select.group("columns").split(",")]
        rows = self.tables.get(select.group("table"), [])
        for match in _EQUALS.finditer(query):
            column = match.group("column").split(".")[-1]
            value = params[match.group("param")]
            rows = [row for row in rows if row.get(column) == value]
        return [{c: row.get(c) for c in columns} for row in rows]


# =============================================================================
# Sample Entities and Mappers
# =============================================================================


@dataclass
class Customer:
    id: int | None = None
    full_name: str | None = None
    email: str | None = None
    orders: list = field(default_factory=list)


@dataclass
class Product:
    id: int | None = None
    sku: str | None = None
    name: str | None = None


@dataclass
class Order:
    id: int | None = None
    customer_id: int | None = None
    total: Decimal | None = None
    customer: Customer | None = None
    products: list = field(default_factory=list)


class CustomerMapper(RecordMapper):
    table_name = "customers"
    alias = "c"
    primary_key = "id"
    fields = {"id": None, "full_name": None, "email_address": "email"}
    entity = Customer
    associations = [
        Association(table="orders", field="customer_id", property="orders"),
    ]


class OrderMapper(RecordMapper):
    table_name = "orders"
    fields = ["id", "customer_id", "total"]
    entity = Order
    associations = [
        Association(
            table="customers",
            field="customer_id",
            property="customer",
            kind=AssociationKind.MANY_TO_ONE,
        ),
        Association(
            table="products",
            field="order_id",
            property="products",
            kind=AssociationKind.MANY_TO_MANY,
            through="order_products",
            target_field="product_id",
        ),
    ]


class ProductMapper(RecordMapper):
    table_name = "products"
    fields = ["id", "sku", "name"]
    entity = Product


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def sample_tables() -> dict[str, list[dict]]:
    """Three customers (the last without orders), three orders, two products."""
    return {
        "customers": [
            {"id": 1, "full_name": "Ada Lovelace", "email_address": "ada@example.com"},
            {"id": 2, "full_name": "Grace Hopper", "email_address": "grace@example.com"},
            {"id": 3, "full_name": "Linus Torvalds", "email_address": None},
        ],
        "orders": [
            {"id": 10, "customer_id": 1, "total": Decimal("12.50")},
            {"id": 11, "customer_id": 1, "total": Decimal("7.25")},
            {"id": 12, "customer_id": 2, "total": Decimal("99.00")},
        ],
        "products": [
            {"id": 100, "sku": "SKU-1", "name": "Widget"},
            {"id": 101, "sku": "SKU-2", "name": "Gadget"},
        ],
        "order_products": [
            {"order_id": 10, "product_id": 101},
            {"order_id": 10, "product_id": 100},
            {"order_id": 12, "product_id": 100},
        ],
    }


@pytest.fixture
def executor(sample_tables) -> FakeExecutor:
    return FakeExecutor(sample_tables)


@pytest.fixture
def registry() -> MapperRegistry:
    """A registry holding the sample mappers."""
    registry = MapperRegistry()
    registry.register(CustomerMapper)
    registry.register(OrderMapper)
    registry.register(ProductMapper)
    return registry


@pytest.fixture
def customer_mapper(executor, registry) -> CustomerMapper:
    return CustomerMapper(executor, registry=registry)


@pytest.fixture
def order_mapper(executor, registry) -> OrderMapper:
    return OrderMapper(executor, registry=registry)


@pytest.fixture
def product_mapper(executor, registry) -> ProductMapper:
    return ProductMapper(executor, registry=registry)
