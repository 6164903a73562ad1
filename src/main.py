"""
1) Load a family tree (nodes + edges) from JSON, or use the built-in sample family.
2) Synchronize each person's parents/children/partners lists from the edges.
3) Validate the tree structure.
4) Optionally filter it to the generations around one person.
5) Auto-layout the tree with Graphviz and write the positioned nodes as JSON.
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path

from config import LayoutOptions
from edges import divorced_edge, parent_edge, partner_edge
from generations import filter_by_generation_level
from handle_groups import get_child_handle_groups
from layout import auto_layout_family_tree
from models import PersonNode, RelationshipEdge
from relationships import sync_node_relationships
from validation import validate_graph


def sample_family() -> tuple[list[PersonNode], list[RelationshipEdge]]:
    """Three generations, one remarriage, and a half-sibling."""
    names = {
        "grandpa": "Arthur",
        "grandma": "Beatrice",
        "dad": "Charles",
        "mum": "Diana",
        "stepmum": "Eleanor",
        "me": "Felix",
        "sister": "Grace",
        "half_brother": "Henry",
    }
    nodes = [PersonNode.from_dict({"id": i, "data": {"name": n}}) for i, n in names.items()]
    edges = [
        partner_edge("grandpa", "grandma", "1950-06-01"),
        parent_edge("dad", "grandpa"),
        parent_edge("dad", "grandma"),
        divorced_edge("dad", "mum", "1980-05-10", "1995-02-01"),
        partner_edge("dad", "stepmum"),
        parent_edge("me", "dad"),
        parent_edge("me", "mum"),
        parent_edge("sister", "dad"),
        parent_edge("sister", "mum"),
        parent_edge("half_brother", "dad"),
        parent_edge("half_brother", "stepmum"),
    ]
    return nodes, edges


def load_tree(path: Path) -> tuple[list[PersonNode], list[RelationshipEdge]]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    nodes = [PersonNode.from_dict(n) for n in raw.get("nodes", [])]
    edges = [RelationshipEdge.from_dict(e) for e in raw.get("edges", [])]
    return nodes, edges


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Auto-layout a family tree")
    parser.add_argument("tree", nargs="?", type=Path, help="JSON file with 'nodes' and 'edges'")
    parser.add_argument("-o", "--output", type=Path, help="Where to write the laid-out tree")
    parser.add_argument("--focus", help="Person to filter generations around")
    parser.add_argument("--ancestors", type=int, default=0)
    parser.add_argument("--descendants", type=int, default=0)
    parser.add_argument("--sibling-hops", type=int, default=None)
    parser.add_argument("--compact", action="store_true", help="Use compact spacing")
    parser.add_argument("--log-level", default="WARNING")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.tree:
        print(f"Loading tree: {args.tree}")
        nodes, edges = load_tree(args.tree)
    else:
        print("Using the sample family")
        nodes, edges = sample_family()
    print(f"  Found {len(nodes)} people and {len(edges)} relationships")

    print("Synchronizing relationships...")
    nodes = sync_node_relationships(nodes, edges)

    print("Validating tree...")
    warnings = validate_graph(nodes, edges)
    if warnings:
        print(f"  Found {len(warnings)} validation warnings:")
        for w in warnings[:10]:  # Show first 10 warnings
            print(f"    - {w}")
        if len(warnings) > 10:
            print(f"    ... and {len(warnings) - 10} more")
    else:
        print("  No validation issues found")

    if args.focus:
        nodes, edges = filter_by_generation_level(
            nodes, edges, args.focus, args.ancestors, args.descendants, args.sibling_hops
        )
        print(f"Filtered around {args.focus}: {len(nodes)} people visible")

    print("Computing layout...")
    options = LayoutOptions.compact() if args.compact else LayoutOptions()
    laid_out = asyncio.run(auto_layout_family_tree(nodes, edges, options=options))
    if laid_out is nodes:
        print("  Auto layout failed; positions unchanged")

    for node in laid_out:
        groups = get_child_handle_groups(node.id, laid_out, edges)
        handles = ", ".join(f"{g.handle_id}={g.child_ids}" for g in groups)
        print(f"  {node.id:>14}  x={node.position.x:8.1f}  y={node.position.y:8.1f}  {handles}")

    if args.output:
        payload = {
            "nodes": [n.to_dict() for n in laid_out],
            "edges": [e.to_dict() for e in edges],
        }
        args.output.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"Tree saved to {args.output}")

    print("Done!")


if __name__ == "__main__":
    main()
