"""NetworkX graph building and relationship lookups."""

import networkx as nx

from models import PARTNER_TYPES, PersonNode, RelationshipEdge, RelationshipType


def build_graph(nodes: list[PersonNode], edges: list[RelationshipEdge]) -> nx.MultiDiGraph:
    """
    Build a NetworkX multigraph from the node and edge lists.

    Every edge keeps its direction and carries `relationship_type` and `edge_id`.
    Edges without relationship data are skipped. Endpoints missing from the node
    list are still added (with `known=False`) so traversals see the same
    relationships the edge list records.
    """
    G = nx.MultiDiGraph()

    for node in nodes:
        G.add_node(node.id, known=True)

    for edge in edges:
        if edge.relationship is None:
            continue
        for endpoint in (edge.source, edge.target):
            if endpoint not in G:
                G.add_node(endpoint, known=False)
        G.add_edge(
            edge.source,
            edge.target,
            key=edge.id,
            edge_id=edge.id,
            relationship_type=edge.relationship,
        )

    return G


def build_parent_graph(G: nx.MultiDiGraph) -> nx.DiGraph:
    """Directed parent -> child graph containing only Parent edges."""
    return nx.DiGraph(
        [
            (u, v)
            for u, v, d in G.edges(data=True)
            if d.get("relationship_type") == RelationshipType.PARENT
        ]
    )


def _unique(ids) -> list[str]:
    return list(dict.fromkeys(ids))


def parents_of(G: nx.MultiDiGraph, node_id: str) -> list[str]:
    if node_id not in G:
        return []
    return _unique(
        u
        for u, _, d in G.in_edges(node_id, data=True)
        if d.get("relationship_type") == RelationshipType.PARENT
    )


def children_of(G: nx.MultiDiGraph, node_id: str) -> list[str]:
    if node_id not in G:
        return []
    return _unique(
        v
        for _, v, d in G.out_edges(node_id, data=True)
        if d.get("relationship_type") == RelationshipType.PARENT
    )


def _undirected_neighbors(G: nx.MultiDiGraph, node_id: str, kinds) -> list[str]:
    if node_id not in G:
        return []
    outgoing = (v for _, v, d in G.out_edges(node_id, data=True) if d.get("relationship_type") in kinds)
    incoming = (u for u, _, d in G.in_edges(node_id, data=True) if d.get("relationship_type") in kinds)
    return [n for n in _unique([*outgoing, *incoming]) if n != node_id]


def partners_of(G: nx.MultiDiGraph, node_id: str) -> list[str]:
    """Partners in either direction; Partner, Married and Divorced count alike."""
    return _undirected_neighbors(G, node_id, PARTNER_TYPES)


def siblings_of(G: nx.MultiDiGraph, node_id: str) -> list[str]:
    """
    Siblings of a person: explicit Sibling edges first, then anyone who shares
    a recorded parent (half-siblings included).
    """
    explicit = _undirected_neighbors(G, node_id, {RelationshipType.SIBLING})
    shared_parent = (
        child
        for parent in parents_of(G, node_id)
        for child in children_of(G, parent)
        if child != node_id
    )
    return _unique([*explicit, *shared_parent])
