"""Keep each person's embedded parents/children/partners lists in sync with the edges."""

from dataclasses import dataclass, replace

from models import PersonNode, RelationshipEdge


@dataclass
class ParentValidation:
    valid: bool
    error: str | None = None


def sync_node_relationships(
    nodes: list[PersonNode], edges: list[RelationshipEdge]
) -> list[PersonNode]:
    """
    Rebuild the parents, children, and partners lists of every node from the edges.

    The edge list is the source of truth: any id not backed by an edge is dropped and
    empty lists become None. Edges naming unknown nodes only update the known side.

    Args:
        nodes: All nodes in the tree
        edges: All edges in the tree

    Returns:
        New node objects with synchronized relationship lists (sorted)
    """
    parent_map: dict[str, set[str]] = {node.id: set() for node in nodes}
    child_map: dict[str, set[str]] = {node.id: set() for node in nodes}
    partner_map: dict[str, set[str]] = {node.id: set() for node in nodes}

    for edge in edges:
        if edge.is_parent:
            if edge.source in child_map:
                child_map[edge.source].add(edge.target)
            if edge.target in parent_map:
                parent_map[edge.target].add(edge.source)
        elif edge.is_partner:
            if edge.source in partner_map:
                partner_map[edge.source].add(edge.target)
            if edge.target in partner_map:
                partner_map[edge.target].add(edge.source)

    synced = []
    for node in nodes:
        data = replace(
            node.data,
            parents=sorted(parent_map[node.id]) or None,
            children=sorted(child_map[node.id]) or None,
            partners=sorted(partner_map[node.id]) or None,
            attributes=dict(node.data.attributes),
        )
        synced.append(replace(node, position=replace(node.position), data=data))
    return synced


def validate_parent_addition(
    child_id: str, parent_id: str, nodes: list[PersonNode]
) -> ParentValidation:
    """Check that adding `parent_id` to `child_id` keeps the two-parent limit."""
    child = next((n for n in nodes if n.id == child_id), None)
    if child is None:
        return ParentValidation(False, "Child node not found")

    current_parents = child.data.parents or []
    if parent_id in current_parents:
        return ParentValidation(False, "This parent relationship already exists")
    if len(current_parents) >= 2:
        return ParentValidation(False, "Cannot add more than 2 parents to a node")

    return ParentValidation(True)


def validate_max_parents(node_id: str, nodes: list[PersonNode]) -> bool:
    """Return True if the node has at most two parents (or does not exist)."""
    node = next((n for n in nodes if n.id == node_id), None)
    if node is None:
        return True
    return len(node.data.parents or []) <= 2


def count_parent_edges(child_id: str, edges: list[RelationshipEdge]) -> int:
    """Number of distinct parents recorded for `child_id` in the edge list."""
    return len({e.source for e in edges if e.is_parent and e.target == child_id})
