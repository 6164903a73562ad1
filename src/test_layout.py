import asyncio
import itertools

import pytest

from config import BASE_SPACING, NODE_WIDTH, PARTNER_SPACING, LayoutOptions
from edges import divorced_edge, parent_edge, partner_edge, sibling_edge
from layout import (
    LayoutContext,
    align_generations,
    align_siblings,
    auto_layout_family_tree,
    compute_generation_depths,
    resolve_collisions,
    row_key,
)
from layout_provider import StaticLayoutProvider
from models import PersonNode, Position
from relationships import sync_node_relationships


def tree(edges, extra_ids=()):
    ids = dict.fromkeys([*extra_ids, *(i for e in edges for i in (e.source, e.target))])
    return sync_node_relationships([PersonNode(i) for i in ids], edges), edges


def run_layout(nodes, edges, positions, **kwargs):
    provider = StaticLayoutProvider(positions)
    return asyncio.run(auto_layout_family_tree(nodes, edges, provider=provider, **kwargs))


def positions(nodes):
    return {n.id: (n.position.x, n.position.y) for n in nodes}


def assert_no_overlap(nodes, options=LayoutOptions()):
    for a, b in itertools.combinations(nodes, 2):
        if row_key(a.position.y, options.row_tolerance) == row_key(b.position.y, options.row_tolerance):
            assert abs(a.position.x - b.position.x) >= options.node_width, (a.id, b.id)


class FailingProvider:
    async def layout(self, request):
        raise RuntimeError("provider exploded")


class MalformedProvider:
    async def layout(self, request):
        return {"a": (1, 2)}


def test_empty_input_returns_empty_list():
    assert run_layout([], [], {}) == []


def test_single_node_gets_a_position():
    nodes, edges = tree([], extra_ids=["person1"])

    result = asyncio.run(auto_layout_family_tree(nodes, edges))

    assert len(result) == 1
    assert isinstance(result[0].position.x, float)
    assert isinstance(result[0].position.y, float)


def test_only_parent_edges_reach_the_provider():
    nodes, edges = tree(
        [parent_edge("c", "p"), partner_edge("p", "q"), sibling_edge("c", "d")]
    )
    provider = StaticLayoutProvider({})

    asyncio.run(auto_layout_family_tree(nodes, edges, provider=provider))

    request = provider.requests[0]
    assert [(e.sources, e.targets) for e in request.edges] == [(["p"], ["c"])]
    assert {n.id for n in request.nodes} == {"p", "c", "q", "d"}
    assert all(n.width == NODE_WIDTH for n in request.nodes)
    assert request.direction == "DOWN"


def test_partners_are_adjacent_at_same_level():
    nodes, edges = tree([partner_edge("a", "b")])

    result = positions(run_layout(nodes, edges, {"a": (0, 0), "b": (500, 40)}))

    assert result["a"][1] == result["b"][1] == 20
    assert result["b"][0] - result["a"][0] == PARTNER_SPACING


def test_right_partner_moves_next_to_left_partner():
    nodes, edges = tree([divorced_edge("a", "b", "2000", "2005")])

    result = positions(run_layout(nodes, edges, {"a": (700, 0), "b": (100, 0)}))

    assert result["b"] == (100, 0)
    assert result["a"] == (100 + PARTNER_SPACING, 0)


def test_parent_is_above_child():
    nodes, edges = tree([parent_edge("child", "parent")])

    result = positions(run_layout(nodes, edges, {"parent": (0, 0), "child": (0, 400)}))

    assert result["parent"][1] < result["child"][1]


def test_siblings_share_a_level():
    nodes, edges = tree(
        [parent_edge("c1", "p"), parent_edge("c2", "p"), parent_edge("c3", "p")]
    )

    result = positions(
        run_layout(
            nodes, edges, {"p": (0, 0), "c1": (0, 380), "c2": (300, 400), "c3": (600, 420)}
        )
    )

    assert result["c1"][1] == result["c2"][1] == result["c3"][1] == 400


def test_partner_positioning_wins_over_sibling_average():
    nodes, edges = tree(
        [
            partner_edge("p1", "p2"),
            parent_edge("c1", "p1"),
            parent_edge("c1", "p2"),
            parent_edge("c2", "p1"),
            parent_edge("c2", "p2"),
            partner_edge("c1", "spouse"),
        ]
    )

    result = positions(
        run_layout(
            nodes,
            edges,
            {"p1": (0, 0), "p2": (300, 0), "c1": (0, 400), "spouse": (600, 500), "c2": (700, 380)},
        )
    )

    assert result["c1"][1] == result["spouse"][1] == result["c2"][1] == 450
    assert result["spouse"][0] - result["c1"][0] == PARTNER_SPACING
    assert result["p1"][1] < result["c1"][1]


def test_unrelated_families_align_by_generation():
    nodes, edges = tree([parent_edge("p1", "gp1"), parent_edge("p2", "gp2")])

    result = positions(
        run_layout(
            nodes,
            edges,
            {"gp1": (0, 0), "gp2": (400, 100), "p1": (0, 400), "p2": (400, 600)},
        )
    )

    assert result["gp1"][1] == result["gp2"][1] == 50
    assert result["p1"][1] == result["p2"][1] == 500


def test_partner_without_parents_joins_partners_generation():
    nodes, edges = tree(
        [parent_edge("dad", "gp"), partner_edge("dad", "mum"), parent_edge("me", "dad")]
    )

    result = positions(
        run_layout(
            nodes,
            edges,
            {"gp": (0, 0), "dad": (0, 400), "mum": (0, 0), "me": (0, 800)},
        )
    )

    assert result["dad"][1] == result["mum"][1]
    assert result["gp"][1] < result["dad"][1] < result["me"][1]


def test_crowded_row_never_overlaps():
    nodes, edges = tree([parent_edge(f"c{i}", "p") for i in range(6)])
    start = {"p": (0, 0), **{f"c{i}": (i * 20, 400) for i in range(6)}}

    result = run_layout(nodes, edges, start)

    assert_no_overlap(result)
    row = sorted(n.position.x for n in result if n.id != "p")
    gaps = [b - (a + NODE_WIDTH) for a, b in zip(row, row[1:])]
    assert all(gap >= BASE_SPACING - 1e-9 for gap in gaps)


def test_everything_stacked_on_one_point_gets_spread_out():
    nodes, edges = tree(
        [
            partner_edge("a", "b"),
            parent_edge("c", "a"),
            parent_edge("c", "b"),
            parent_edge("d", "a"),
            partner_edge("d", "e"),
        ]
    )

    result = run_layout(nodes, edges, {n.id: (0, 0) for n in nodes})

    assert_no_overlap(result)


def test_compact_options_tighten_partner_spacing():
    nodes, edges = tree([partner_edge("a", "b")])
    options = LayoutOptions.compact()

    result = positions(run_layout(nodes, edges, {"a": (0, 0), "b": (50, 0)}, options=options))

    assert result["b"][0] - result["a"][0] == options.partner_spacing
    assert options.partner_spacing < PARTNER_SPACING


def test_nodes_missing_from_response_keep_their_position():
    nodes, edges = tree([], extra_ids=["a", "b"])
    nodes[1] = nodes[1].moved(900, 0)

    result = positions(run_layout(nodes, edges, {"a": (0, 0)}))

    assert result["b"] == (900, 0)


def test_input_nodes_are_not_mutated():
    nodes, edges = tree([partner_edge("a", "b")])

    run_layout(nodes, edges, {"a": (0, 0), "b": (500, 40)})

    assert all(n.position == Position(0, 0) for n in nodes)


@pytest.mark.parametrize("provider", [FailingProvider(), MalformedProvider()])
def test_returns_original_nodes_if_layout_fails(provider):
    nodes, edges = tree([parent_edge("b", "a")])

    result = asyncio.run(auto_layout_family_tree(nodes, edges, provider=provider))

    assert result is nodes


def test_generation_depths_follow_deepest_parent():
    nodes, edges = tree(
        [
            parent_edge("p", "gp"),
            parent_edge("c", "p"),
            parent_edge("c", "other"),
            partner_edge("other", "p"),
        ]
    )

    depths = compute_generation_depths(nodes, edges)

    assert depths == {"p": 1, "gp": 0, "c": 2, "other": 1}


def test_generation_depths_terminate_on_cycles():
    nodes, edges = tree([parent_edge("a", "b"), parent_edge("b", "a"), parent_edge("c", "b")])

    depths = compute_generation_depths(nodes, edges)

    assert set(depths) == {"a", "b", "c"}
    assert depths["c"] == depths["b"] + 1


def test_generation_depths_propagate_along_partner_chains():
    nodes, edges = tree(
        [parent_edge("a", "r1"), parent_edge("r1", "r0"), partner_edge("a", "b"), partner_edge("b", "c")]
    )

    depths = compute_generation_depths(nodes, edges)

    assert depths["a"] == depths["b"] == depths["c"] == 2


def test_align_siblings_ignores_single_children():
    nodes, edges = tree([parent_edge("c", "p")])
    nodes = [n.moved(0, 123) if n.id == "c" else n for n in nodes]

    result = positions(align_siblings(nodes, LayoutContext(edges)))

    assert result["c"] == (0, 123)


def test_align_generations_uses_depth_map():
    nodes, _ = tree([], extra_ids=["a", "b", "c"])
    nodes = [n.moved(0, y) for n, y in zip(nodes, (0, 100, 700))]
    context = LayoutContext([], depths={"a": 0, "b": 0, "c": 1})

    result = positions(align_generations(nodes, context))

    assert result == {"a": (0, 50), "b": (0, 50), "c": (0, 700)}


def test_resolve_collisions_pushes_later_nodes_right():
    nodes, _ = tree([], extra_ids=["a", "b", "c", "far"])
    nodes = [n.moved(x, y) for n, (x, y) in zip(nodes, [(0, 0), (100, 2), (1000, 0), (0, 500)])]

    result = positions(resolve_collisions(nodes, LayoutContext([])))

    assert result["a"] == (0, 0)
    assert result["b"] == (NODE_WIDTH + BASE_SPACING, 2)
    assert result["c"] == (1000 + NODE_WIDTH + BASE_SPACING - 100, 0)
    assert result["far"] == (0, 500)


def test_row_key_rounds_to_tolerance():
    assert row_key(0, 5) == row_key(2.4, 5)
    assert row_key(2.6, 5) == row_key(5, 5)
    assert row_key(0, 5) != row_key(8, 5)


def test_child_of_raised_partner_moves_below_them():
    # mum has no parents of her own but is raised to dad's generation
    nodes, edges = tree(
        [parent_edge("dad", "gp"), partner_edge("dad", "mum"), parent_edge("stepkid", "mum")]
    )

    assert compute_generation_depths(nodes, edges) == {"gp": 0, "dad": 1, "mum": 1, "stepkid": 2}

    result = positions(
        run_layout(
            nodes,
            edges,
            {"gp": (0, 0), "dad": (0, 400), "mum": (300, 0), "stepkid": (300, 400)},
        )
    )

    assert result["gp"][1] < result["mum"][1] < result["stepkid"][1]
    assert result["dad"][1] == result["mum"][1]


def test_generation_depths_terminate_when_partner_is_own_descendant():
    nodes, edges = tree([parent_edge("b", "a"), partner_edge("a", "b")])

    depths = compute_generation_depths(nodes, edges)

    assert set(depths) == {"a", "b"}
