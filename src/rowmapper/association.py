"""
Association descriptors.

An Association declares that rows of another table must be attached to a
property of every entity a mapper loads. Example:

    Association(table="orders", field="customer_id", property="orders")

loads every order whose customer_id equals the customer's primary key and
sets the resulting list on customer.orders.
"""

from dataclasses import dataclass
from enum import Enum

from rowmapper.errors import ConfigurationError


class AssociationKind(str, Enum):
    ONE_TO_MANY = "one_to_many"
    MANY_TO_ONE = "many_to_one"
    MANY_TO_MANY = "many_to_many"

    @classmethod
    def parse(cls, value: "AssociationKind | str") -> "AssociationKind":
        """Accept enum members, snake case ("many_to_one") or camel case ("manyToOne")."""
        if isinstance(value, cls):
            return value
        normalized = str(value).replace("-", "_").lower()
        aliases = {
            "onetomany": cls.ONE_TO_MANY,
            "manytoone": cls.MANY_TO_ONE,
            "manytomany": cls.MANY_TO_MANY,
        }
        try:
            return cls(normalized)
        except ValueError:
            pass
        if normalized in aliases:
            return aliases[normalized]
        raise ConfigurationError(f"Unknown association kind: {value}")


@dataclass(frozen=True)
class Association:
    table: str
    field: str
    property: str
    kind: AssociationKind = AssociationKind.ONE_TO_MANY
    # Join table and its column referencing the target, for many-to-many
    through: str | None = None
    target_field: str | None = None

    def __post_init__(self):
        if not self.table or not self.field or not self.property:
            raise ConfigurationError(
                "An association needs a table, a field and a property"
            )
        object.__setattr__(self, "kind", AssociationKind.parse(self.kind))
        if self.through and not self.target_field:
            raise ConfigurationError(
                f"Association {self.property!r} goes through {self.through!r} but has no target_field"
            )

    @classmethod
    def from_dict(cls, link: dict) -> "Association":
        """Build an association from a {'table', 'field', 'type', 'property'} dict."""
        missing = [key for key in ("table", "field", "property") if not link.get(key)]
        if missing:
            raise ConfigurationError(f"Association metadata is missing {', '.join(missing)}")
        return cls(
            table=link["table"],
            field=link["field"],
            property=link["property"],
            kind=link.get("kind") or link.get("type") or AssociationKind.ONE_TO_MANY,
            through=link.get("through"),
            target_field=link.get("target_field"),
        )
