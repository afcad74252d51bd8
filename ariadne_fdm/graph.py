"""Graph construction from unordered line segments."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .logging_utils import apply_debug_logging
from .tolerance import ToleranceIndex
from .types import NodeIndex, Point3, PointLike, coerce_point, coerce_tolerance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Segment:
    """Input line segment with an optional provenance reference."""

    start: Point3
    end: Point3
    source: Optional[Hashable] = None

    @classmethod
    def coerce(cls, value: Union["Segment", Sequence[Any]]) -> "Segment":
        if isinstance(value, Segment):
            return cls(coerce_point(value.start), coerce_point(value.end), value.source)
        if isinstance(value, (list, tuple, np.ndarray)) and len(value) in (2, 3):
            source = value[2] if len(value) == 3 else None
            return cls(coerce_point(value[0]), coerce_point(value[1]), source)
        raise TypeError(f"Expected a segment (start, end[, source]), got {value!r}")


@dataclass
class Node:
    position: Point3
    anchor: bool = False
    neighbors: List[NodeIndex] = field(default_factory=list)


@dataclass
class Edge:
    start: NodeIndex
    end: NodeIndex
    source: Optional[Hashable] = None
    q: float = 0.0

    @property
    def is_loop(self) -> bool:
        return self.start == self.end


@dataclass
class Graph:
    """Nodes and edges of a merged segment network.

    Nodes are addressed by their position in ``nodes``; edges and adjacency
    lists hold indices only, so the only way to move a node is
    :meth:`reorder`, which rewrites every reference consistently.
    """

    tolerance: float
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)

    @property
    def nn(self) -> int:
        return len(self.nodes)

    @property
    def ne(self) -> int:
        return len(self.edges)

    def positions(self) -> np.ndarray:
        if not self.nodes:
            return np.zeros((0, 3), dtype=float)
        return np.array([node.position for node in self.nodes], dtype=float)

    def force_densities(self) -> np.ndarray:
        return np.array([edge.q for edge in self.edges], dtype=float)

    def edge_indices(self) -> List[List[int]]:
        return [[edge.start, edge.end] for edge in self.edges]

    def adjacency_list(self) -> List[List[int]]:
        return [list(node.neighbors) for node in self.nodes]

    def reorder(self, order: Sequence[NodeIndex]) -> None:
        """Permute nodes so that ``nodes[i]`` becomes the old ``nodes[order[i]]``."""

        if sorted(order) != list(range(self.nn)):
            raise ValueError("reorder requires a permutation of the node indices")
        remap = {old: new for new, old in enumerate(order)}
        self.nodes = [self.nodes[old] for old in order]
        for node in self.nodes:
            node.neighbors = [remap[idx] for idx in node.neighbors]
        for edge in self.edges:
            edge.start = remap[edge.start]
            edge.end = remap[edge.end]

    def duplicate(self) -> "Graph":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tolerance": self.tolerance,
            "nodes": [list(node.position) for node in self.nodes],
            "anchors": [idx for idx, node in enumerate(self.nodes) if node.anchor],
            "edges": self.edge_indices(),
            "adjacency": self.adjacency_list(),
            "q": [edge.q for edge in self.edges],
        }


def construct_graph(segments: Iterable[Union[Segment, Sequence[Any]]], tolerance: float) -> Graph:
    """Merge segment endpoints closer than ``tolerance`` into shared nodes.

    Segments are processed in input order and nodes are numbered in creation
    order.  A segment whose endpoints collapse onto one node becomes a
    self-loop edge rather than an error.
    """

    tol = coerce_tolerance(tolerance)
    index = ToleranceIndex(tol)
    graph = Graph(tolerance=tol)

    for raw in segments:
        segment = Segment.coerce(raw)

        istart, created = index.find_or_add(segment.start)
        if created:
            graph.nodes.append(Node(position=segment.start))

        iend, created = index.find_or_add(segment.end)
        if created:
            graph.nodes.append(Node(position=segment.end))

        graph.edges.append(Edge(start=istart, end=iend, source=segment.source))
        graph.nodes[istart].neighbors.append(iend)
        graph.nodes[iend].neighbors.append(istart)

    loops = sum(1 for edge in graph.edges if edge.is_loop)
    logger.info(
        "Constructed graph with %d node(s), %d edge(s) at tolerance=%s",
        graph.nn,
        graph.ne,
        tol,
    )
    if loops:
        logger.info("Graph contains %d zero-length self-loop edge(s)", loops)
    return graph


def find_node(graph: Graph, point: PointLike, tol: Optional[float] = None) -> Tuple[bool, int]:
    """Look up ``point`` among the graph's nodes (default: the build tolerance)."""

    index = ToleranceIndex(graph.tolerance if tol is None else tol, [node.position for node in graph.nodes])
    return index.find(point)


__all__ = ["Edge", "Graph", "Node", "Segment", "construct_graph", "find_node"]

apply_debug_logging(globals(), logger=logger, skip={"Graph.positions", "Graph.force_densities"})
