"""Structural validation for family tree data."""

import networkx as nx

from graph import build_graph, build_parent_graph
from models import PersonNode, RelationshipEdge
from relationships import count_parent_edges, sync_node_relationships


def validate_graph(nodes: list[PersonNode], edges: list[RelationshipEdge]) -> list[str]:
    """
    Validate the family tree for:
    - Cycles in parent-child relationships
    - People with more than two parents
    - Edges that reference people who are not in the tree
    - Partner lists that are not symmetric
    - Relationship lists that no longer match the edges

    Returns a list of warning messages.
    """
    warnings: list[str] = []
    node_ids = {node.id for node in nodes}

    # Check for cycles
    parent_graph = build_parent_graph(build_graph(nodes, edges))
    try:
        cycle = nx.find_cycle(parent_graph, orientation="original")
        cycle_nodes = [edge[0] for edge in cycle]
        warnings.append(f"Cycle detected in parent-child relationships: {cycle_nodes}")
    except nx.NetworkXNoCycle:
        pass  # No cycle found, which is good

    # Check parent cardinality
    for node in nodes:
        parent_count = count_parent_edges(node.id, edges)
        if parent_count > 2:
            warnings.append(f"Too many parents: {node.id} has {parent_count} parents")

    # Check dangling edges
    for edge in edges:
        missing = [end for end in (edge.source, edge.target) if end not in node_ids]
        if missing:
            warnings.append(f"Edge {edge.id} references unknown people: {missing}")

    # Check partner symmetry
    nodes_by_id = {node.id: node for node in nodes}
    for node in nodes:
        for partner_id in node.data.partners or []:
            partner = nodes_by_id.get(partner_id)
            if partner is not None and node.id not in (partner.data.partners or []):
                warnings.append(f"Asymmetric partners: {node.id} lists {partner_id} but not vice versa")

    # Check embedded lists against the edges
    for node, synced in zip(nodes, sync_node_relationships(nodes, edges)):
        for key in ("parents", "children", "partners"):
            recorded = sorted(getattr(node.data, key) or [])
            expected = getattr(synced.data, key) or []
            if recorded != expected:
                warnings.append(f"Stale {key} on {node.id}: {recorded} (edges say {expected})")

    return warnings
