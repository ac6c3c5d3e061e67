"""
Tests for Association and AssociationKind.

Run with: pytest src/rowmapper/association_test.py -v
"""
import pytest

from rowmapper.association import Association, AssociationKind
from rowmapper.errors import ConfigurationError


class TestAssociationKind:
    """Tests for AssociationKind.parse()"""

    @pytest.mark.parametrize("value,expected", [
        (AssociationKind.MANY_TO_ONE, AssociationKind.MANY_TO_ONE),
        ("one_to_many", AssociationKind.ONE_TO_MANY),
        ("oneToMany", AssociationKind.ONE_TO_MANY),
        ("manyToOne", AssociationKind.MANY_TO_ONE),
        ("many-to-many", AssociationKind.MANY_TO_MANY),
        ("ManyToMany", AssociationKind.MANY_TO_MANY),
    ])
    def test_parse(self, value, expected):
        assert AssociationKind.parse(value) is expected

    def test_parse_unknown(self):
        with pytest.raises(ConfigurationError, match="Unknown association kind"):
            AssociationKind.parse("oneToOne")


class TestAssociation:
    """Tests for Association construction"""

    def test_defaults_to_one_to_many(self):
        association = Association(table="orders", field="customer_id", property="orders")

        assert association.kind is AssociationKind.ONE_TO_MANY
        assert association.through is None

    def test_kind_string_is_normalized(self):
        association = Association("customers", "customer_id", "customer", kind="manyToOne")

        assert association.kind is AssociationKind.MANY_TO_ONE

    @pytest.mark.parametrize("table,field,prop", [
        ("", "customer_id", "orders"),
        ("orders", "", "orders"),
        ("orders", "customer_id", ""),
    ])
    def test_missing_metadata(self, table, field, prop):
        with pytest.raises(ConfigurationError):
            Association(table=table, field=field, property=prop)

    def test_through_requires_target_field(self):
        with pytest.raises(ConfigurationError, match="target_field"):
            Association(
                "products", "order_id", "products",
                kind=AssociationKind.MANY_TO_MANY, through="order_products",
            )

    def test_from_dict(self):
        association = Association.from_dict(
            {"table": "ger_operation", "field": "id_programme", "type": "manyToOne", "property": "operations"}
        )

        assert association == Association(
            "ger_operation", "id_programme", "operations", kind=AssociationKind.MANY_TO_ONE
        )

    def test_from_dict_missing_keys(self):
        with pytest.raises(ConfigurationError, match="field, property"):
            Association.from_dict({"table": "orders"})
