"""Data classes for family tree entities."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class RelationshipType(str, Enum):
    PARENT = "Parent"  # directed: source is the parent, target the child
    PARTNER = "Partner"
    MARRIED = "Married"
    DIVORCED = "Divorced"
    SIBLING = "Sibling"


# Undirected relationships that put two people side by side
PARTNER_TYPES = frozenset(
    {RelationshipType.PARTNER, RelationshipType.MARRIED, RelationshipType.DIVORCED}
)

_RELATIONSHIP_KEYS = ("parents", "children", "partners")


@dataclass
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass
class PersonData:
    parents: list[str] | None = None  # at most two
    children: list[str] | None = None
    partners: list[str] | None = None
    attributes: dict[str, Any] = field(default_factory=dict)  # name, dateOfBirth, ...


@dataclass
class PersonNode:
    id: str
    position: Position = field(default_factory=Position)
    data: PersonData = field(default_factory=PersonData)

    def moved(self, x: float, y: float) -> "PersonNode":
        """Return a copy of this node placed at (x, y)."""
        return replace(self, position=Position(x, y))

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "PersonNode":
        position = raw.get("position") or {}
        raw_data = dict(raw.get("data") or {})
        relations = {key: raw_data.pop(key, None) for key in _RELATIONSHIP_KEYS}
        data = PersonData(
            parents=list(relations["parents"]) if relations["parents"] else None,
            children=list(relations["children"]) if relations["children"] else None,
            partners=list(relations["partners"]) if relations["partners"] else None,
            attributes=raw_data,
        )
        return cls(
            id=str(raw["id"]),
            position=Position(float(position.get("x", 0.0)), float(position.get("y", 0.0))),
            data=data,
        )

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.data.attributes)
        for key in _RELATIONSHIP_KEYS:
            value = getattr(self.data, key)
            if value:
                data[key] = list(value)
        return {
            "id": self.id,
            "position": {"x": self.position.x, "y": self.position.y},
            "data": data,
        }


@dataclass
class EdgeData:
    relationship: RelationshipType
    date_of_marriage: str | None = None
    date_of_divorce: str | None = None


@dataclass
class RelationshipEdge:
    id: str
    source: str
    target: str
    data: EdgeData | None = None

    @property
    def relationship(self) -> RelationshipType | None:
        return self.data.relationship if self.data else None

    @property
    def is_parent(self) -> bool:
        return self.relationship == RelationshipType.PARENT

    @property
    def is_partner(self) -> bool:
        return self.relationship in PARTNER_TYPES

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "RelationshipEdge":
        raw_data = raw.get("data") or {}
        data = None
        if raw_data.get("relationship"):
            data = EdgeData(
                relationship=RelationshipType(raw_data["relationship"]),
                date_of_marriage=raw_data.get("dateOfMarriage"),
                date_of_divorce=raw_data.get("dateOfDivorce"),
            )
        return cls(id=str(raw["id"]), source=str(raw["source"]), target=str(raw["target"]), data=data)

    def to_dict(self) -> dict[str, Any]:
        edge: dict[str, Any] = {"id": self.id, "source": self.source, "target": self.target}
        if self.data:
            data: dict[str, Any] = {"relationship": self.data.relationship.value}
            if self.data.date_of_marriage is not None:
                data["dateOfMarriage"] = self.data.date_of_marriage
            if self.data.date_of_divorce is not None:
                data["dateOfDivorce"] = self.data.date_of_divorce
            edge["data"] = data
        return edge
