"""Generation levels relative to a selected person, and generation-based filtering."""

from dataclasses import dataclass

from graph import build_graph, children_of, parents_of, partners_of, siblings_of
from models import PersonNode, RelationshipEdge


@dataclass
class GenerationInfo:
    generation: int  # 0 = selected, positive = ancestors, negative = descendants
    via_sibling: bool = False  # reached through a sibling rather than direct lineage


def calculate_generation_levels(
    nodes: list[PersonNode], edges: list[RelationshipEdge], selected_node_id: str
) -> dict[str, int]:
    """
    Calculate the generation level of each person relative to a selected person.

    1 = parents, 2 = grandparents, -1 = children, and so on. The selected person,
    their partners and their siblings are at 0. Partners always share a generation.

    Args:
        nodes: All nodes in the tree
        edges: All edges in the tree
        selected_node_id: The reference person

    Returns:
        Mapping of node ID to generation level; empty if the person is unknown
    """
    levels = _classify(nodes, edges, selected_node_id, mark_siblings=False)
    return {node_id: info.generation for node_id, info in levels.items()}


def classify_generations(
    nodes: list[PersonNode], edges: list[RelationshipEdge], selected_node_id: str
) -> dict[str, GenerationInfo]:
    """
    Like `calculate_generation_levels`, but also reaches the siblings of every
    ancestor and descendant (aunts, great-uncles, nephews) and flags them with
    `via_sibling` so a grandparent can be told apart from a great-aunt.
    """
    return _classify(nodes, edges, selected_node_id, mark_siblings=True)


def _classify(
    nodes: list[PersonNode],
    edges: list[RelationshipEdge],
    selected_node_id: str,
    mark_siblings: bool,
) -> dict[str, GenerationInfo]:
    if not any(node.id == selected_node_id for node in nodes):
        return {}

    G = build_graph(nodes, edges)
    levels: dict[str, GenerationInfo] = {selected_node_id: GenerationInfo(0)}

    def assign(node_id: str, generation: int, via_sibling: bool = False) -> None:
        # First discovery wins
        if node_id not in levels:
            levels[node_id] = GenerationInfo(generation, via_sibling)

    def add_siblings(discovered: list[str], generation: int) -> None:
        # Siblings are recorded but never join the lineage frontier
        for node_id in discovered:
            for sibling in siblings_of(G, node_id):
                if sibling in levels:
                    continue
                assign(sibling, generation, via_sibling=True)
                for partner in partners_of(G, sibling):
                    assign(partner, generation, via_sibling=True)

    for step, relatives_of in ((1, parents_of), (-1, children_of)):
        # Each direction has its own visited set so cycles cannot loop forever
        visited = {selected_node_id}
        frontier = [selected_node_id]
        generation = 0

        while frontier:
            generation += step
            next_frontier: list[str] = []

            for node_id in frontier:
                for relative in relatives_of(G, node_id):
                    if relative in visited:
                        continue
                    visited.add(relative)
                    assign(relative, generation)
                    next_frontier.append(relative)

                    # Partners of ancestors/descendants share their generation
                    for partner in partners_of(G, relative):
                        if partner not in visited:
                            visited.add(partner)
                            assign(partner, generation)
                            next_frontier.append(partner)

            if mark_siblings:
                add_siblings(next_frontier, generation)
            frontier = next_frontier

    for partner in partners_of(G, selected_node_id):
        assign(partner, 0)

    for sibling in siblings_of(G, selected_node_id):
        if sibling in levels:
            continue
        assign(sibling, 0, via_sibling=mark_siblings)
        for partner in partners_of(G, sibling):
            assign(partner, 0, via_sibling=mark_siblings)

    return levels


def filter_by_generation_level(
    nodes: list[PersonNode],
    edges: list[RelationshipEdge],
    selected_node_id: str | None,
    ancestor_generations: int,
    descendant_generations: int,
    sibling_hops: int | None = None,
) -> tuple[list[PersonNode], list[RelationshipEdge]]:
    """
    Filter nodes and edges to the generations around a selected person.

    Args:
        nodes: All nodes in the tree
        edges: All edges in the tree
        selected_node_id: The reference person; None disables filtering
        ancestor_generations: Ancestor generations to show (1 = parents, 2 = grandparents)
        descendant_generations: Descendant generations to show (1 = children)
        sibling_hops: How far sibling branches reach (1 = own siblings, 2 = aunts and
            uncles). None keeps every sibling branch inside the generation range.

    Returns:
        The visible nodes, and the edges whose endpoints are both visible
    """
    if not selected_node_id or (ancestor_generations <= 0 and descendant_generations <= 0):
        return nodes, edges

    levels = classify_generations(nodes, edges, selected_node_id)

    def visible(node: PersonNode) -> bool:
        info = levels.get(node.id)
        if info is None:
            return False
        if not -descendant_generations <= info.generation <= ancestor_generations:
            return False
        if info.via_sibling and sibling_hops is not None:
            return sibling_hops > abs(info.generation)
        return True

    filtered_nodes = [node for node in nodes if visible(node)]
    visible_ids = {node.id for node in filtered_nodes}
    filtered_edges = [e for e in edges if e.source in visible_ids and e.target in visible_ids]

    return filtered_nodes, filtered_edges
