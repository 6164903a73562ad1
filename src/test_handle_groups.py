from edges import parent_edge, partner_edge
from handle_groups import get_child_handle_groups, get_child_handle_id
from models import PersonNode
from relationships import sync_node_relationships


def synced_tree(ids, edges):
    return sync_node_relationships([PersonNode(i) for i in ids], edges), edges


def test_no_children_gives_no_groups():
    nodes, edges = synced_tree(["p"], [])
    assert get_child_handle_groups("p", nodes, edges) == []


def test_children_with_same_two_parents_share_one_group():
    nodes, edges = synced_tree(
        ["p1", "p2", "c1", "c2"],
        [
            partner_edge("p1", "p2"),
            parent_edge("c1", "p1"),
            parent_edge("c1", "p2"),
            parent_edge("c2", "p1"),
            parent_edge("c2", "p2"),
        ],
    )

    groups = get_child_handle_groups("p1", nodes, edges)

    assert len(groups) == 1
    assert groups[0].handle_id == "child-0"
    assert groups[0].child_ids == ["c1", "c2"]
    assert groups[0].other_parent_id == "p2"


def test_children_are_partitioned_by_other_parent():
    nodes, edges = synced_tree(
        ["p1", "p2", "p3", "c1", "c2", "c3"],
        [
            parent_edge("c1", "p1"),
            parent_edge("c1", "p2"),
            parent_edge("c2", "p1"),
            parent_edge("c2", "p2"),
            parent_edge("c3", "p1"),
            parent_edge("c3", "p3"),
        ],
    )

    groups = get_child_handle_groups("p1", nodes, edges)

    assert [(g.handle_id, g.child_ids, g.other_parent_id) for g in groups] == [
        ("child-0", ["c1", "c2"], "p2"),
        ("child-1", ["c3"], "p3"),
    ]


def test_single_parent_children_have_no_other_parent():
    nodes, edges = synced_tree(
        ["p1", "p2", "c1", "c2"],
        [parent_edge("c1", "p1"), parent_edge("c2", "p1"), parent_edge("c2", "p2")],
    )

    groups = get_child_handle_groups("p1", nodes, edges)

    assert groups[0].child_ids == ["c1"]
    assert groups[0].other_parent_id is None
    assert groups[1].other_parent_id == "p2"


def test_handle_id_for_specific_child():
    nodes, edges = synced_tree(
        ["p1", "p2", "p3", "c1", "c2"],
        [
            parent_edge("c1", "p1"),
            parent_edge("c1", "p2"),
            parent_edge("c2", "p1"),
            parent_edge("c2", "p3"),
        ],
    )

    assert get_child_handle_id("p1", "c1", nodes, edges) == "child-0"
    assert get_child_handle_id("p1", "c2", nodes, edges) == "child-1"


def test_handle_id_defaults_to_child_0():
    nodes, edges = synced_tree(["p1", "c1"], [])
    assert get_child_handle_id("p1", "c1", nodes, edges) == "child-0"


def test_duplicate_parent_edges_list_the_child_once():
    duplicate = parent_edge("c1", "p1")
    duplicate.id = "parent-p1-c1-copy"
    nodes, edges = synced_tree(["p1", "c1"], [parent_edge("c1", "p1"), duplicate])

    groups = get_child_handle_groups("p1", nodes, edges)

    assert len(groups) == 1
    assert groups[0].child_ids == ["c1"]
