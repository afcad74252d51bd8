"""Free/fixed partition of a graph into a force density network."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .config import get_network_defaults
from .graph import Graph, Segment, construct_graph
from .logging_utils import apply_debug_logging
from .measures import NetworkState
from .tolerance import within_tolerance
from .types import (
    CardinalityError,
    NodeIndex,
    Point3,
    PointLike,
    broadcast_values,
    coerce_point,
    coerce_tolerance,
)

logger = logging.getLogger(__name__)

MIN_ANCHORS = 2


def partition(
    graph: Graph, anchors: Sequence[PointLike], anchor_tolerance: float
) -> Tuple[List[NodeIndex], List[NodeIndex]]:
    """Classify nodes as fixed or free and reorder ``graph`` to ``free ++ fixed``.

    Fixed nodes follow anchor input order; anchors that match nothing, or
    match a node already claimed by an earlier anchor, are dropped.  Free
    nodes keep their original relative order.  The graph is modified in
    place and the returned index lists refer to the new order.
    """

    tol = coerce_tolerance(anchor_tolerance, "anchor tolerance")
    points = [node.position for node in graph.nodes]
    for node in graph.nodes:
        node.anchor = False

    fixed_old: List[NodeIndex] = []
    for anchor in anchors:
        found, idx = within_tolerance(points, anchor, tol)
        if not found:
            logger.info("Anchor %s matched no node within %s", coerce_point(anchor), tol)
            continue
        if idx in fixed_old:
            logger.info("Anchor %s matched node %d which is already fixed", coerce_point(anchor), idx)
            continue
        graph.nodes[idx].anchor = True
        fixed_old.append(idx)

    fixed_set = set(fixed_old)
    free_old = [idx for idx in range(graph.nn) if idx not in fixed_set]
    graph.reorder(free_old + fixed_old)

    free = list(range(len(free_old)))
    fixed = list(range(len(free_old), graph.nn))
    return free, fixed


def valid_check(anchor_count: int, free: Sequence[int], fixed: Sequence[int], node_count: int) -> bool:
    if anchor_count < MIN_ANCHORS:
        return False
    if len(fixed) != anchor_count or len(fixed) + len(free) != node_count:
        return False
    return True


@dataclass
class Network:
    """A graph partitioned into free and fixed nodes.

    ``valid`` must be checked before the partition is handed to a solver;
    an invalid network is a normal outcome of construction, not an error.
    """

    graph: Graph
    anchors: List[Point3] = field(default_factory=list)
    anchor_tolerance: float = 0.01
    free_nodes: List[NodeIndex] = field(default_factory=list)
    fixed_nodes: List[NodeIndex] = field(default_factory=list)
    valid: bool = False

    @classmethod
    def from_graph(
        cls,
        graph: Graph,
        anchors: Iterable[PointLike],
        anchor_tolerance: Optional[float] = None,
    ) -> "Network":
        if anchor_tolerance is None:
            anchor_tolerance = get_network_defaults().anchor_tolerance
        anchor_points = [coerce_point(a) for a in anchors]
        tol = coerce_tolerance(anchor_tolerance, "anchor tolerance")
        free, fixed = partition(graph, anchor_points, tol)
        network = cls(
            graph=graph,
            anchors=anchor_points,
            anchor_tolerance=tol,
            free_nodes=free,
            fixed_nodes=fixed,
        )
        network.valid = valid_check(len(anchor_points), free, fixed, graph.nn)
        logger.info(
            "Partitioned network: %d free, %d fixed, %d anchor(s), valid=%s",
            len(free),
            len(fixed),
            len(anchor_points),
            network.valid,
        )
        if not network.valid:
            if not network.anchor_check():
                logger.warning("Network is invalid: at least %d anchors are required", MIN_ANCHORS)
            else:
                logger.warning(
                    "Network is invalid: %d of %d anchor(s) matched a distinct node",
                    len(fixed),
                    len(anchor_points),
                )
        return network

    @property
    def nn(self) -> int:
        return self.graph.nn

    @property
    def ne(self) -> int:
        return self.graph.ne

    def anchor_check(self) -> bool:
        return len(self.anchors) >= MIN_ANCHORS

    def nf_check(self) -> bool:
        return (
            len(self.fixed_nodes) == len(self.anchors)
            and len(self.fixed_nodes) + len(self.free_nodes) == self.graph.nn
        )

    def state(self) -> NetworkState:
        return NetworkState.create(
            self.graph.positions(),
            self.graph.force_densities(),
            self.graph.edge_indices(),
            self.free_nodes,
        )

    def rebind(
        self,
        positions: Optional[Sequence[PointLike]] = None,
        q: Optional[Union[float, Sequence[float]]] = None,
    ) -> None:
        """Store solver output on the network's nodes and edges.

        ``positions`` may cover every node or only the free block; ``q`` may
        be a single shared force density or one value per edge.
        """

        # validate both inputs before writing either
        points: List[Point3] = []
        targets: Sequence[int] = ()
        if positions is not None:
            points = [coerce_point(p) for p in positions]
            if len(points) == self.graph.nn:
                targets = range(self.graph.nn)
            elif len(points) == len(self.free_nodes):
                targets = self.free_nodes
            else:
                raise CardinalityError("positions", self.graph.nn, len(points))

        densities: List[float] = []
        if q is not None:
            values = [q] if np.ndim(q) == 0 else list(q)  # type: ignore[arg-type]
            densities = [float(v) for v in broadcast_values(values, self.graph.ne, "q")]

        for idx, point in zip(targets, points):
            self.graph.nodes[idx].position = point
        if q is not None:
            for edge, value in zip(self.graph.edges, densities):
                edge.q = value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "graph": self.graph.to_dict(),
            "free_nodes": list(self.free_nodes),
            "fixed_nodes": list(self.fixed_nodes),
            "valid": self.valid,
        }


def build_network(
    segments: Iterable[Union[Segment, Sequence[Any]]],
    edge_tolerance: Optional[float] = None,
    anchors: Iterable[PointLike] = (),
    anchor_tolerance: Optional[float] = None,
) -> Network:
    """Build a graph from ``segments`` and partition it against ``anchors``.

    Every call starts from the supplied inputs only, so identical inputs
    always produce identical node order and index lists.
    """

    defaults = get_network_defaults()
    if edge_tolerance is None:
        edge_tolerance = defaults.edge_tolerance
    if anchor_tolerance is None:
        anchor_tolerance = defaults.anchor_tolerance
    graph = construct_graph(segments, edge_tolerance)
    return Network.from_graph(graph, anchors, anchor_tolerance)


__all__ = ["MIN_ANCHORS", "Network", "build_network", "partition", "valid_check"]

apply_debug_logging(globals(), logger=logger, skip={"Network.state"})
