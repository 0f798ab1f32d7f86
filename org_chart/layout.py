"""Layout request shaping and layout engine adapters.

The chart does not position nodes itself. It turns the extracted subgraph
into a layout request (fixed-size nodes plus manager edges), hands it to a
``LayoutEngine`` and reads positions back from the resulting ``ChartLayout``.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field

import networkx as nx
import structlog

from org_chart.extractor import display_employees, extract_subgraph
from org_chart.models import Employee, Subgraph

logger = structlog.get_logger()

NODE_WIDTH = 220
NODE_HEIGHT = 80
CANVAS_MARGIN = 100

DIRECTIONS = ("DOWN", "UP", "RIGHT", "LEFT")


@dataclass(frozen=True)
class LayoutOptions:
    """Layout engine settings."""

    algorithm: str = "layered"
    direction: str = "DOWN"
    spacing: float = 50
    layer_spacing: float = 80


@dataclass
class LayoutNode:
    id: str
    width: float = NODE_WIDTH
    height: float = NODE_HEIGHT
    x: float | None = None
    y: float | None = None


@dataclass
class LayoutEdge:
    id: str
    sources: list[str]
    targets: list[str]


@dataclass
class LayoutRequest:
    nodes: list[LayoutNode]
    edges: list[LayoutEdge]
    options: LayoutOptions = field(default_factory=LayoutOptions)


@dataclass
class ChartLayout:
    """Positioned nodes and edges, with the canvas size when the engine reports one."""

    nodes: list[LayoutNode]
    edges: list[LayoutEdge]
    width: float | None = None
    height: float | None = None

    def node(self, node_id: str) -> LayoutNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def dimensions(self) -> tuple[float, float]:
        """Return the canvas size, falling back to the node bounding box plus a margin."""
        placed = [node for node in self.nodes if node.x is not None and node.y is not None]
        if placed:
            min_x = min(node.x for node in placed)
            min_y = min(node.y for node in placed)
            max_x = max(node.x + node.width for node in placed)
            max_y = max(node.y + node.height for node in placed)
        else:
            min_x = min_y = max_x = max_y = 0

        width = self.width or (max_x - min_x + CANVAS_MARGIN)
        height = self.height or (max_y - min_y + CANVAS_MARGIN)
        return width, height


def build_layout_request(
    full_employees: Sequence[Employee],
    subgraph: Subgraph,
    options: LayoutOptions | None = None,
) -> LayoutRequest:
    """Shape a layout request for the employees and edges of a subgraph."""
    nodes = [LayoutNode(id=employee.id) for employee in display_employees(full_employees, subgraph)]
    # Referenced but unknown managers are nodes without a record, so they get no box.
    node_ids = {node.id for node in nodes}
    edges = [
        LayoutEdge(id=edge.id, sources=[edge.source], targets=[edge.target])
        for edge in sorted(subgraph.edges, key=lambda edge: (edge.source, edge.target))
        if edge.source in node_ids and edge.target in node_ids
    ]
    return LayoutRequest(nodes=nodes, edges=edges, options=options or LayoutOptions())


class LayoutEngine(ABC):
    """Abstract base class for engines that assign node positions."""

    @abstractmethod
    async def layout(self, request: LayoutRequest) -> ChartLayout:
        """Compute positions for every node of the request."""
        pass


class LayeredLayoutEngine(LayoutEngine):
    """Tree-shaped layered layout built on networkx.

    Each manager chain becomes a layer per depth. Reports are laid out in
    request order and every manager is centred over its reports.
    """

    async def layout(self, request: LayoutRequest) -> ChartLayout:
        options = request.options
        if options.algorithm != "layered":
            raise ValueError(f"Unsupported layout algorithm: '{options.algorithm}'. Supported: 'layered'")
        direction = options.direction.upper()
        if direction not in DIRECTIONS:
            raise ValueError(f"Unsupported layout direction: '{options.direction}'. Supported: {list(DIRECTIONS)}")

        index = {node.id: position for position, node in enumerate(request.nodes)}
        links = [(source, target) for edge in request.edges for source in edge.sources for target in edge.targets]

        graph = nx.DiGraph()
        graph.add_nodes_from(index)
        # Reports are inserted in request order, so successors come back in that order.
        graph.add_edges_from(sorted(links, key=lambda link: index.get(link[1], len(index))))

        if not nx.is_directed_acyclic_graph(graph):
            raise ValueError("Layered layout requires an acyclic graph")

        breadth: dict[str, float] = {}
        depth: dict[str, int] = {}
        cursor = 0

        roots = [node_id for node_id, degree in graph.in_degree() if degree == 0]
        roots.sort(key=lambda node_id: index.get(node_id, len(index)))
        for root in roots:
            depth.update(nx.single_source_shortest_path_length(graph, root))
            for node_id in nx.dfs_postorder_nodes(graph, root):
                children = list(graph.successors(node_id))
                if children:
                    breadth[node_id] = (breadth[children[0]] + breadth[children[-1]]) / 2
                else:
                    breadth[node_id] = cursor
                    cursor += 1

        nodes = [self._position(node, breadth[node.id], depth[node.id], options, direction) for node in request.nodes]
        max_depth = max(depth.values(), default=0)
        if direction == "UP":
            for node in nodes:
                node.y = max_depth * (node.height + options.layer_spacing) - node.y
        elif direction == "LEFT":
            for node in nodes:
                node.x = max_depth * (node.width + options.layer_spacing) - node.x

        width = max((node.x + node.width for node in nodes), default=0)
        height = max((node.y + node.height for node in nodes), default=0)
        logger.debug("Layered layout computed", node_count=len(nodes), width=width, height=height)
        return ChartLayout(nodes=nodes, edges=list(request.edges), width=width, height=height)

    def _position(
        self, node: LayoutNode, breadth: float, depth: int, options: LayoutOptions, direction: str
    ) -> LayoutNode:
        if direction in ("DOWN", "UP"):
            x = breadth * (node.width + options.spacing)
            y = depth * (node.height + options.layer_spacing)
        else:
            x = depth * (node.width + options.layer_spacing)
            y = breadth * (node.height + options.spacing)
        return LayoutNode(id=node.id, width=node.width, height=node.height, x=x, y=y)


class LayoutAdapter:
    """Runs the extraction + layout pipeline against an engine.

    Never raises: an empty visible set or a failing engine gives None.
    """

    def __init__(self, engine: LayoutEngine, options: LayoutOptions | None = None) -> None:
        self.engine = engine
        self.options = options or LayoutOptions()

    async def compute(
        self,
        full_employees: Sequence[Employee],
        visible_employees: Sequence[Employee],
    ) -> ChartLayout | None:
        subgraph = extract_subgraph(full_employees, visible_employees)
        if subgraph is None:
            return None

        request = build_layout_request(full_employees, subgraph, self.options)
        if not request.nodes:
            return None

        try:
            result = await self.engine.layout(request)
        except Exception as e:
            logger.error("Layout calculation failed", error=str(e), node_count=len(request.nodes))
            return None

        logger.debug("Layout computed", node_count=len(result.nodes), edge_count=len(result.edges))
        return result
