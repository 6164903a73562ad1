"""Relationship edge constructors used by the editing surface."""

from models import EdgeData, PersonNode, RelationshipEdge, RelationshipType
from relationships import sync_node_relationships, validate_parent_addition


def partner_edge(source: str, target: str, date_of_marriage: str = "") -> RelationshipEdge:
    """Partner edge; becomes a Married edge when a marriage date is given."""
    relationship = RelationshipType.MARRIED if date_of_marriage else RelationshipType.PARTNER
    return RelationshipEdge(
        id=f"partner-{source}-{target}",
        source=source,
        target=target,
        data=EdgeData(relationship, date_of_marriage=date_of_marriage),
    )


def divorced_edge(
    source: str, target: str, date_of_marriage: str, date_of_divorce: str
) -> RelationshipEdge:
    return RelationshipEdge(
        id=f"divorced-{source}-{target}",
        source=source,
        target=target,
        data=EdgeData(
            RelationshipType.DIVORCED,
            date_of_marriage=date_of_marriage,
            date_of_divorce=date_of_divorce,
        ),
    )


def parent_edge(child: str, parent: str) -> RelationshipEdge:
    """Parent -> child edge (source is the parent)."""
    return RelationshipEdge(
        id=f"parent-{parent}-{child}",
        source=parent,
        target=child,
        data=EdgeData(RelationshipType.PARENT),
    )


def sibling_edge(source: str, target: str) -> RelationshipEdge:
    return RelationshipEdge(
        id=f"sibling-{source}-{target}",
        source=source,
        target=target,
        data=EdgeData(RelationshipType.SIBLING),
    )


def sibling_parent_edges(target: str, parent_edges: list[RelationshipEdge]) -> list[RelationshipEdge]:
    """
    Give a new sibling the same parents as an existing child.

    Args:
        target: ID of the person being added as a sibling
        parent_edges: Parent edges pointing at the existing sibling

    Returns:
        One Parent edge from each of those parents to `target`
    """
    return [parent_edge(target, edge.source) for edge in parent_edges]


def add_parent_edge(
    nodes: list[PersonNode],
    edges: list[RelationshipEdge],
    child: str,
    parent: str,
) -> tuple[list[PersonNode], list[RelationshipEdge]]:
    """
    Record `parent` as a parent of `child`, enforcing the two-parent limit.

    Raises:
        ValueError: If the child is unknown, already has this parent, or already
            has two parents.

    Returns:
        The resynchronized node list and the extended edge list
    """
    result = validate_parent_addition(child, parent, nodes)
    if not result.valid:
        raise ValueError(result.error)

    new_edges = [*edges, parent_edge(child, parent)]
    return sync_node_relationships(nodes, new_edges), new_edges
