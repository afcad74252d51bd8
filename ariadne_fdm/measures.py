"""Read-only network snapshots and per-edge measures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np


def _frozen(values: np.ndarray) -> np.ndarray:
    arr = np.array(values, dtype=float, copy=True)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class NetworkState:
    """Positions and force densities of a network at one solver iteration.

    ``positions`` is ``(nn, 3)`` in the network's node order, ``q`` and
    ``edges`` are per edge.  Arrays are copied and marked read-only.
    """

    positions: np.ndarray
    q: np.ndarray
    edges: np.ndarray
    free_nodes: Tuple[int, ...] = ()

    @classmethod
    def create(
        cls,
        positions: Sequence[Sequence[float]],
        q: Sequence[float],
        edges: Sequence[Sequence[int]],
        free_nodes: Sequence[int] = (),
    ) -> "NetworkState":
        pos = _frozen(np.asarray(positions, dtype=float).reshape(-1, 3))
        dens = _frozen(np.asarray(q, dtype=float).reshape(-1))
        conn = np.array(edges, dtype=int).reshape(-1, 2)
        conn.setflags(write=False)
        if len(dens) != len(conn):
            raise ValueError(f"q has {len(dens)} value(s) for {len(conn)} edge(s)")
        return cls(positions=pos, q=dens, edges=conn, free_nodes=tuple(int(i) for i in free_nodes))

    @property
    def nn(self) -> int:
        return int(self.positions.shape[0])

    @property
    def ne(self) -> int:
        return int(self.edges.shape[0])


def edge_vectors(state: NetworkState) -> np.ndarray:
    """End minus start position for every edge, shape ``(ne, 3)``."""

    if state.ne == 0:
        return np.zeros((0, 3), dtype=float)
    return state.positions[state.edges[:, 1]] - state.positions[state.edges[:, 0]]


def edge_lengths(state: NetworkState) -> np.ndarray:
    return np.linalg.norm(edge_vectors(state), axis=1)


def edge_forces(state: NetworkState) -> np.ndarray:
    """Axial force per edge under the force density formulation (``q * L``)."""

    return state.q * edge_lengths(state)


__all__ = ["NetworkState", "edge_forces", "edge_lengths", "edge_vectors"]
