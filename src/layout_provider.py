"""Layered graph layout providers: the hierarchy-only first pass of auto-layout."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

import pydot

logger = logging.getLogger(__name__)

POINTS_PER_INCH = 72  # Graphviz sizes are in inches, positions in points


@dataclass
class LayoutNode:
    id: str
    width: float
    height: float


@dataclass
class LayoutEdge:
    id: str
    sources: list[str]
    targets: list[str]


@dataclass
class LayoutRequest:
    nodes: list[LayoutNode]
    edges: list[LayoutEdge]
    direction: str = "DOWN"
    spacing: float = 30  # between nodes of one layer
    layer_spacing: float = 30  # between layers


@dataclass
class LayoutResponse:
    # Top-left corner of each laid-out node, keyed by node ID
    positions: dict[str, tuple[float, float]] = field(default_factory=dict)


class LayoutProviderError(RuntimeError):
    """The layout provider could not produce positions."""


class LayoutProvider(Protocol):
    async def layout(self, request: LayoutRequest) -> LayoutResponse: ...


class StaticLayoutProvider:
    """Provider that returns fixed positions; nodes it does not know are omitted."""

    def __init__(self, positions: dict[str, tuple[float, float]]):
        self.positions = dict(positions)
        self.requests: list[LayoutRequest] = []

    async def layout(self, request: LayoutRequest) -> LayoutResponse:
        self.requests.append(request)
        return LayoutResponse(
            {node.id: self.positions[node.id] for node in request.nodes if node.id in self.positions}
        )


_RANKDIR = {"DOWN": "TB", "UP": "BT", "RIGHT": "LR", "LEFT": "RL"}


class GraphvizLayoutProvider:
    """
    Lay out the hierarchy with Graphviz `dot` through pydot.

    Node IDs are replaced with short synthetic names so arbitrary IDs never need
    DOT quoting. Graphviz runs in a worker thread because pydot blocks on the
    subprocess.
    """

    def __init__(self, prog: str = "dot"):
        self.prog = prog

    async def layout(self, request: LayoutRequest) -> LayoutResponse:
        return await asyncio.to_thread(self._layout_sync, request)

    def build_dot(self, request: LayoutRequest) -> tuple[pydot.Dot, dict[str, str]]:
        """Build the pydot graph for a request; also returns synthetic name -> node ID."""
        P = pydot.Dot("layout", graph_type="digraph")
        P.set("rankdir", _RANKDIR.get(request.direction, "TB"))
        P.set("nodesep", _inches(request.spacing))
        P.set("ranksep", _inches(request.layer_spacing))
        P.set_node_defaults(shape="box", fixedsize="true", label="")

        names: dict[str, str] = {}
        for i, node in enumerate(request.nodes):
            name = f"n{i}"
            names[node.id] = name
            P.add_node(pydot.Node(name, width=_inches(node.width), height=_inches(node.height)))

        for edge in request.edges:
            for source in edge.sources:
                for target in edge.targets:
                    # Edges to unknown nodes would make Graphviz invent nodes
                    if source in names and target in names:
                        P.add_edge(pydot.Edge(names[source], names[target]))

        return P, {name: node_id for node_id, name in names.items()}

    def _layout_sync(self, request: LayoutRequest) -> LayoutResponse:
        if not request.nodes:
            return LayoutResponse()

        P, ids_by_name = self.build_dot(request)
        try:
            output = P.create(prog=self.prog, format="plain")
        except Exception as exc:
            raise LayoutProviderError(f"Graphviz '{self.prog}' failed: {exc}") from exc

        text = output.decode("utf-8") if isinstance(output, bytes) else str(output)
        positions = parse_plain_output(text, ids_by_name)
        logger.debug("Graphviz placed %d of %d nodes", len(positions), len(request.nodes))
        return LayoutResponse(positions)


def parse_plain_output(text: str, ids_by_name: dict[str, str]) -> dict[str, tuple[float, float]]:
    """
    Parse Graphviz `-Tplain` output into top-left positions in points.

    Plain output gives node centres in inches with the origin at the bottom left,
    so Y is flipped against the graph height.
    """
    graph_height = None
    positions: dict[str, tuple[float, float]] = {}

    for line in text.splitlines():
        parts = line.split()
        if not parts:
            continue
        if parts[0] == "graph":
            graph_height = float(parts[3])
        elif parts[0] == "node":
            if graph_height is None or len(parts) < 6:
                raise LayoutProviderError(f"Malformed Graphviz output line: {line!r}")
            name = parts[1].strip('"')
            if name not in ids_by_name:
                continue
            x, y, width, height = (float(p) for p in parts[2:6])
            left = (x - width / 2) * POINTS_PER_INCH
            top = (graph_height - y - height / 2) * POINTS_PER_INCH
            positions[ids_by_name[name]] = (left, top)

    return positions


def _inches(points: float) -> str:
    return f"{points / POINTS_PER_INCH:.4f}"
