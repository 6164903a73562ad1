"""Group a parent's child edges into shared connector handles."""

from dataclasses import dataclass, field

from models import PersonNode, RelationshipEdge

DEFAULT_CHILD_HANDLE = "child-0"
_NO_OTHER_PARENT = "none"


@dataclass
class ChildHandleGroup:
    """Children of one parent that share the same other parent, drawn from one handle."""

    handle_id: str
    child_ids: list[str] = field(default_factory=list)
    other_parent_id: str | None = None  # None for single-parent children


def get_child_handle_groups(
    parent_id: str, nodes: list[PersonNode], edges: list[RelationshipEdge]
) -> list[ChildHandleGroup]:
    """
    Compute the handle groups for the children of `parent_id`.

    Children are grouped by their other recorded parent, in the order the Parent edges
    are first seen, and numbered child-0, child-1, ...

    Args:
        parent_id: The parent whose outgoing child edges are grouped
        nodes: All nodes in the tree (children must have synchronized `parents`)
        edges: All edges in the tree

    Returns:
        Handle groups for this parent's children, empty if it has none
    """
    nodes_by_id = {node.id: node for node in nodes}
    groups_by_other_parent: dict[str, list[str]] = {}

    for edge in edges:
        if not edge.is_parent or edge.source != parent_id:
            continue
        child = nodes_by_id.get(edge.target)
        if child is None:
            continue

        other_parent = next((p for p in child.data.parents or [] if p != parent_id), None)
        key = other_parent or _NO_OTHER_PARENT
        group = groups_by_other_parent.setdefault(key, [])
        if child.id not in group:
            group.append(child.id)

    return [
        ChildHandleGroup(
            handle_id=f"child-{index}",
            child_ids=child_ids,
            other_parent_id=None if key == _NO_OTHER_PARENT else key,
        )
        for index, (key, child_ids) in enumerate(groups_by_other_parent.items())
    ]


def get_child_handle_id(
    parent_id: str, child_id: str, nodes: list[PersonNode], edges: list[RelationshipEdge]
) -> str:
    """Return the handle a parent -> child edge should attach to (child-0 if unknown)."""
    for group in get_child_handle_groups(parent_id, nodes, edges):
        if child_id in group.child_ids:
            return group.handle_id
    return DEFAULT_CHILD_HANDLE
