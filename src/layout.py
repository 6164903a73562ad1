"""
Auto-layout for family trees.

Layout rules:
- Parents are positioned above their children
- Partners are positioned next to each other at the same Y level
- Siblings (people with the same parents) share a Y level
- Everyone in the same generation shares a Y level
- Nodes never overlap

A layered layout provider places the Parent hierarchy first; the correction passes
below then run in a fixed order, each taking the previous pass's output. Later passes
win: generation alignment overrides partner and sibling alignment, and collision
resolution has the final say on X.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable

from config import LayoutOptions
from layout_provider import (
    GraphvizLayoutProvider,
    LayoutEdge,
    LayoutNode,
    LayoutProvider,
    LayoutProviderError,
    LayoutRequest,
    LayoutResponse,
)
from models import PersonNode, RelationshipEdge

logger = logging.getLogger(__name__)


@dataclass
class LayoutContext:
    edges: list[RelationshipEdge]
    depths: dict[str, int] = field(default_factory=dict)
    options: LayoutOptions = field(default_factory=LayoutOptions)


LayoutPass = Callable[[list[PersonNode], LayoutContext], list[PersonNode]]


async def auto_layout_family_tree(
    nodes: list[PersonNode],
    edges: list[RelationshipEdge],
    provider: LayoutProvider | None = None,
    options: LayoutOptions | None = None,
) -> list[PersonNode]:
    """
    Lay out the whole tree.

    Args:
        nodes: Nodes with synchronized relationship data
        edges: All edges in the tree
        provider: Layered layout provider (Graphviz by default)
        options: Sizes and spacings (defaults from config)

    Returns:
        New nodes with updated positions, or `nodes` itself if layout failed
    """
    if not nodes:
        return nodes

    provider = provider or GraphvizLayoutProvider()
    options = options or LayoutOptions()

    try:
        laid_out = await _base_layout(nodes, edges, provider, options)
        context = LayoutContext(edges, compute_generation_depths(laid_out, edges), options)
        for layout_pass in LAYOUT_PASSES:
            laid_out = layout_pass(laid_out, context)
        return laid_out
    except Exception:
        logger.exception("Auto-layout failed; keeping original positions")
        return nodes


async def _base_layout(
    nodes: list[PersonNode],
    edges: list[RelationshipEdge],
    provider: LayoutProvider,
    options: LayoutOptions,
) -> list[PersonNode]:
    # Only Parent edges drive the hierarchy; partners and siblings are handled by
    # the correction passes
    request = LayoutRequest(
        nodes=[LayoutNode(node.id, options.node_width, options.node_height) for node in nodes],
        edges=[LayoutEdge(edge.id, [edge.source], [edge.target]) for edge in edges if edge.is_parent],
        direction="DOWN",
        spacing=options.base_spacing,
        layer_spacing=options.base_spacing,
    )
    response = await provider.layout(request)
    if not isinstance(response, LayoutResponse):
        raise LayoutProviderError(f"Unexpected layout response: {response!r}")

    laid_out = []
    for node in nodes:
        position = response.positions.get(node.id)
        if position is None:
            laid_out.append(node.moved(node.position.x, node.position.y))
        else:
            laid_out.append(node.moved(float(position[0]), float(position[1])))
    return laid_out


def compute_generation_depths(
    nodes: list[PersonNode], edges: list[RelationshipEdge]
) -> dict[str, int]:
    """
    Absolute generation depth of every node: 0 for people without recorded parents,
    otherwise one more than their deepest parent. Partners are then raised to the
    deeper of the two so a couple never straddles generations, and anyone below a
    raised partner is pushed down with them.

    Parent cycles are broken by ignoring the link back to a parent that is still
    being resolved.
    """
    parents = {
        node.id: [p for p in node.data.parents or [] if p != node.id] for node in nodes
    }
    depths: dict[str, int] = {}
    cycle_links: set[tuple[str, str]] = set()

    for root in parents:
        if root in depths:
            continue
        stack = [root]
        visiting = {root}
        while stack:
            current = stack[-1]
            pending = [
                p for p in parents[current] if p in parents and p not in depths and p not in visiting
            ]
            if pending:
                stack.append(pending[0])
                visiting.add(pending[0])
                continue
            # Parents still in `visiting` are part of a cycle
            cycle_links.update((p, current) for p in parents[current] if p in visiting)
            resolved = [depths[p] for p in parents[current] if p in depths]
            depths[current] = 1 + max(resolved) if resolved else 0
            stack.pop()
            visiting.discard(current)

    parent_links = [
        (p, child)
        for child, ps in parents.items()
        for p in ps
        if p in depths and (p, child) not in cycle_links
    ]
    partner_pairs = [
        (e.source, e.target)
        for e in edges
        if e.is_partner and e.source in depths and e.target in depths
    ]

    # A partner who is also their partner's descendant can never settle
    for _ in range(len(depths) + 1):
        changed = False
        for a, b in partner_pairs:
            deeper = max(depths[a], depths[b])
            if depths[a] != deeper or depths[b] != deeper:
                depths[a] = depths[b] = deeper
                changed = True
        for parent, child in parent_links:
            if depths[child] < depths[parent] + 1:
                depths[child] = depths[parent] + 1
                changed = True
        if not changed:
            break

    return depths


def _copy_nodes(nodes: list[PersonNode]) -> list[PersonNode]:
    return [node.moved(node.position.x, node.position.y) for node in nodes]


def _partnered_ids(edges: list[RelationshipEdge]) -> set[str]:
    ids: set[str] = set()
    for edge in edges:
        if edge.is_partner:
            ids.update((edge.source, edge.target))
    return ids


def adjust_partner_positions(nodes: list[PersonNode], context: LayoutContext) -> list[PersonNode]:
    """Place each couple side by side at their average Y, left partner first."""
    adjusted = _copy_nodes(nodes)
    by_id = {node.id: node for node in adjusted}
    processed: set[str] = set()

    for edge in context.edges:
        if not edge.is_partner:
            continue
        source, target = by_id.get(edge.source), by_id.get(edge.target)
        if source is None or target is None or source is target:
            continue
        if source.id in processed and target.id in processed:
            continue

        left, right = (source, target) if source.position.x < target.position.x else (target, source)
        avg_y = (left.position.y + right.position.y) / 2
        left.position.y = avg_y
        right.position.y = avg_y
        right.position.x = left.position.x + context.options.partner_spacing

        processed.update((source.id, target.id))

    return adjusted


def align_siblings(nodes: list[PersonNode], context: LayoutContext) -> list[PersonNode]:
    """
    Give siblings (same parent pair) one Y. Partnered siblings were already placed
    by the partner pass, so when any exist the group follows their average.
    """
    adjusted = _copy_nodes(nodes)
    partnered = _partnered_ids(context.edges)

    groups: dict[tuple[str, ...], list[PersonNode]] = {}
    for node in adjusted:
        if node.data.parents:
            groups.setdefault(tuple(sorted(node.data.parents)), []).append(node)

    for siblings in groups.values():
        if len(siblings) < 2:
            continue
        anchors = [s for s in siblings if s.id in partnered] or siblings
        target_y = sum(s.position.y for s in anchors) / len(anchors)
        for sibling in siblings:
            sibling.position.y = target_y

    return adjusted


def align_generations(nodes: list[PersonNode], context: LayoutContext) -> list[PersonNode]:
    """Move every member of a generation to that generation's average Y."""
    adjusted = _copy_nodes(nodes)

    generations: dict[int, list[PersonNode]] = {}
    for node in adjusted:
        generations.setdefault(context.depths.get(node.id, 0), []).append(node)

    for members in generations.values():
        avg_y = sum(m.position.y for m in members) / len(members)
        for member in members:
            member.position.y = avg_y

    return adjusted


def resolve_collisions(nodes: list[PersonNode], context: LayoutContext) -> list[PersonNode]:
    """
    Spread out nodes in the same row until every gap is at least the base spacing.
    Whenever two neighbours are too close, the right one and everything after it
    in the row shift right by the deficit.
    """
    adjusted = _copy_nodes(nodes)
    options = context.options

    rows: dict[int, list[PersonNode]] = {}
    for node in adjusted:
        rows.setdefault(row_key(node.position.y, options.row_tolerance), []).append(node)

    for row in rows.values():
        row.sort(key=lambda n: n.position.x)
        for i in range(len(row) - 1):
            gap = row[i + 1].position.x - (row[i].position.x + options.node_width)
            if gap < options.base_spacing:
                shift = options.base_spacing - gap
                for node in row[i + 1 :]:
                    node.position.x += shift

    return adjusted


def row_key(y: float, tolerance: float) -> int:
    """Index of the row a Y coordinate falls in (rounded to the nearest tolerance step)."""
    return math.floor(y / tolerance + 0.5)


LAYOUT_PASSES: tuple[LayoutPass, ...] = (
    adjust_partner_positions,
    align_siblings,
    align_generations,
    resolve_collisions,
)
