"""Data handed to, and derived for, the external equilibrium solver."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from scipy import sparse

from .graph import Graph
from .network import Network
from .types import CardinalityError, InvalidNetworkError, PointLike, broadcast_values, coerce_point

logger = logging.getLogger(__name__)

LOAD_SKIP_LENGTH = 0.1


def connectivity_matrix(graph: Graph) -> sparse.csr_matrix:
    """Edge-node incidence matrix, ``-1`` at the start node and ``+1`` at the end.

    Self-loop rows cancel to zero.
    """

    rows: List[int] = []
    cols: List[int] = []
    data: List[float] = []
    for row, edge in enumerate(graph.edges):
        rows.extend((row, row))
        cols.extend((edge.start, edge.end))
        data.extend((-1.0, 1.0))
    matrix = sparse.coo_matrix((data, (rows, cols)), shape=(graph.ne, graph.nn))
    return matrix.tocsr()


@dataclass
class SolverInputs:
    """Partitioned system for a force density solve.

    ``cn`` and ``cf`` are the free and fixed column blocks of the
    connectivity matrix; they are contiguous because the network keeps
    free nodes before fixed ones.
    """

    cn: sparse.csr_matrix
    cf: sparse.csr_matrix
    q: np.ndarray
    loads: np.ndarray
    fixed_positions: np.ndarray
    free_nodes: List[int]
    fixed_nodes: List[int]


def solver_inputs(
    network: Network,
    q: Optional[Union[float, Sequence[float]]] = None,
    loads: Optional[Sequence[PointLike]] = None,
) -> SolverInputs:
    """Assemble solver inputs; ``q`` defaults to the edges' stored densities.

    ``loads`` may be one shared vector or one vector per free node.
    """

    if not network.valid:
        raise InvalidNetworkError(
            f"Network is not solver-ready: {len(network.fixed_nodes)} fixed node(s) "
            f"for {len(network.anchors)} anchor(s)"
        )

    graph = network.graph
    if q is None:
        q_values = graph.force_densities()
    else:
        raw = [q] if np.ndim(q) == 0 else list(q)  # type: ignore[arg-type]
        q_values = np.asarray(broadcast_values(raw, graph.ne, "q"), dtype=float)

    n_free = len(network.free_nodes)
    if loads is None:
        load_values = np.zeros((n_free, 3), dtype=float)
    else:
        vectors = [coerce_point(v) for v in loads]
        load_values = np.asarray(broadcast_values(vectors, n_free, "loads"), dtype=float).reshape(-1, 3)

    conn = connectivity_matrix(graph)
    positions = graph.positions()
    inputs = SolverInputs(
        cn=conn[:, :n_free],
        cf=conn[:, n_free:],
        q=q_values,
        loads=load_values,
        fixed_positions=positions[n_free:],
        free_nodes=list(network.free_nodes),
        fixed_nodes=list(network.fixed_nodes),
    )
    logger.info(
        "Prepared solver inputs: %d edge(s), %d free node(s), %d fixed node(s)",
        graph.ne,
        n_free,
        len(network.fixed_nodes),
    )
    return inputs


def load_vectors(
    network: Network, loads: Sequence[PointLike], scale: float = 1.0
) -> List[Tuple[np.ndarray, np.ndarray]]:
    """Arrow origin and vector for each applied load on a free node.

    A single shared load is drawn with unit direction times ``scale`` at
    every free node.  Per-node loads are scaled relative to the largest
    magnitude, and loads shorter than ``LOAD_SKIP_LENGTH`` are left out.
    """

    vectors = [np.asarray(coerce_point(v), dtype=float) for v in loads]
    free = network.free_nodes
    if len(vectors) != 1 and len(vectors) != len(free):
        raise CardinalityError("loads", len(free), len(vectors))

    arrows: List[Tuple[np.ndarray, np.ndarray]] = []
    if len(vectors) == 1:
        magnitude = float(np.linalg.norm(vectors[0]))
        direction = vectors[0] / magnitude if magnitude > 0.0 else vectors[0]
        for idx in free:
            origin = np.asarray(network.graph.nodes[idx].position, dtype=float)
            arrows.append((origin, direction * scale))
        return arrows

    normalizer = max((float(np.linalg.norm(v)) for v in vectors), default=0.0)
    if normalizer <= 0.0:
        return arrows
    for idx, vector in zip(free, vectors):
        if float(np.linalg.norm(vector)) < LOAD_SKIP_LENGTH:
            continue
        origin = np.asarray(network.graph.nodes[idx].position, dtype=float)
        arrows.append((origin, vector * scale / normalizer))
    return arrows


def anchor_reactions(network: Network) -> np.ndarray:
    """Member force resultants at the fixed nodes, shape ``(len(fixed), 3)``.

    Computed as ``Cf^T diag(q) C X`` from the network's current positions and
    force densities.
    """

    graph = network.graph
    conn = connectivity_matrix(graph)
    n_free = len(network.free_nodes)
    if graph.ne == 0:
        return np.zeros((len(network.fixed_nodes), 3), dtype=float)
    member = sparse.diags(graph.force_densities()) @ (conn @ graph.positions())
    reactions = conn[:, n_free:].T @ member
    return np.asarray(reactions, dtype=float).reshape(-1, 3)


__all__ = [
    "LOAD_SKIP_LENGTH",
    "SolverInputs",
    "anchor_reactions",
    "connectivity_matrix",
    "load_vectors",
    "solver_inputs",
]
