"""Weighted objective terms evaluated against network states."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, ClassVar, Dict, Iterable, Optional, Sequence, Tuple, Union

import numpy as np

from .graph import find_node
from .measures import NetworkState, edge_lengths, edge_vectors
from .network import Network
from .types import CardinalityError, Point3, PointLike, coerce_point

logger = logging.getLogger(__name__)

ForceFormula = Callable[[np.ndarray, np.ndarray], np.ndarray]


def density_force(q: np.ndarray, lengths: np.ndarray) -> np.ndarray:
    return q * lengths


@dataclass(frozen=True)
class ObjectiveResult:
    """Weighted contribution of one or more objectives.

    ``gradient`` is the sensitivity with respect to free node positions,
    shape ``(len(free_nodes), 3)``, or ``None`` when it is not available.
    """

    value: float
    gradient: Optional[np.ndarray] = None


@dataclass(frozen=True)
class PerformanceObjective:
    """Minimize ``sum(|force| * length)`` over all edges."""

    kind: ClassVar[str] = "performance"

    weight: float = 1.0
    force: ForceFormula = field(default=density_force, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "weight", float(self.weight))


@dataclass(frozen=True)
class TargetObjective:
    """Minimize the squared deviation of ``nodes`` from ``targets``.

    With no nodes the objective contributes zero.
    """

    kind: ClassVar[str] = "target"

    weight: float = 1.0
    nodes: Tuple[int, ...] = ()
    targets: Tuple[Point3, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "weight", float(self.weight))
        object.__setattr__(self, "nodes", tuple(int(n) for n in self.nodes))
        object.__setattr__(self, "targets", tuple(coerce_point(t) for t in self.targets))
        if len(self.nodes) != len(self.targets):
            raise CardinalityError("targets", len(self.nodes), len(self.targets))

    @classmethod
    def from_network(
        cls, network: Network, nodes: Sequence[int] = (), weight: float = 1.0
    ) -> "TargetObjective":
        """Record the current positions of ``nodes`` as their targets."""

        targets = [network.graph.nodes[idx].position for idx in nodes]
        return cls(weight=weight, nodes=tuple(nodes), targets=tuple(targets))

    @classmethod
    def from_points(
        cls,
        network: Network,
        points: Iterable[PointLike],
        weight: float = 1.0,
        tol: Optional[float] = None,
    ) -> "TargetObjective":
        """Target the nodes found at ``points``; points matching no node are skipped."""

        nodes = []
        for point in points:
            found, idx = find_node(network.graph, point, tol)
            if not found:
                logger.warning("Target point %s matched no node", coerce_point(point))
                continue
            if idx not in nodes:
                nodes.append(idx)
        return cls.from_network(network, nodes, weight)


Objective = Union[PerformanceObjective, TargetObjective]


def _free_rows(state: NetworkState, gradient: np.ndarray) -> np.ndarray:
    return gradient[list(state.free_nodes)] if state.free_nodes else np.zeros((0, 3), dtype=float)


def _evaluate_performance(objective: PerformanceObjective, state: NetworkState) -> ObjectiveResult:
    lengths = edge_lengths(state)
    forces = np.asarray(objective.force(state.q, lengths), dtype=float)
    value = objective.weight * float(np.sum(np.abs(forces) * lengths))

    if objective.force is not density_force:
        return ObjectiveResult(value=value)

    # d(|q| L^2)/dx_end = 2 |q| v, opposite sign at the start node
    vectors = edge_vectors(state)
    contrib = 2.0 * objective.weight * np.abs(state.q)[:, None] * vectors
    gradient = np.zeros_like(state.positions)
    if state.ne:
        np.add.at(gradient, state.edges[:, 1], contrib)
        np.subtract.at(gradient, state.edges[:, 0], contrib)
    return ObjectiveResult(value=value, gradient=_free_rows(state, gradient))


def _evaluate_target(objective: TargetObjective, state: NetworkState) -> ObjectiveResult:
    gradient = np.zeros_like(state.positions)
    if not objective.nodes:
        return ObjectiveResult(value=0.0, gradient=_free_rows(state, gradient))

    idx = np.asarray(objective.nodes, dtype=int)
    deviation = state.positions[idx] - np.asarray(objective.targets, dtype=float)
    value = objective.weight * float(np.sum(deviation * deviation))
    np.add.at(gradient, idx, 2.0 * objective.weight * deviation)
    return ObjectiveResult(value=value, gradient=_free_rows(state, gradient))


_EVALUATORS: Dict[str, Callable[..., ObjectiveResult]] = {
    PerformanceObjective.kind: _evaluate_performance,
    TargetObjective.kind: _evaluate_target,
}


def evaluate(objective: Objective, state: NetworkState) -> ObjectiveResult:
    evaluator = _EVALUATORS.get(getattr(objective, "kind", None))  # type: ignore[arg-type]
    if evaluator is None:
        raise TypeError(f"Unsupported objective {objective!r}")
    return evaluator(objective, state)


def total_cost(objectives: Iterable[Objective], state: NetworkState) -> ObjectiveResult:
    """Sum the weighted contributions of ``objectives`` in order.

    The gradient is summed as well and is ``None`` as soon as one objective
    cannot provide it.
    """

    value = 0.0
    gradient: Optional[np.ndarray] = np.zeros((len(state.free_nodes), 3), dtype=float)
    count = 0
    for objective in objectives:
        result = evaluate(objective, state)
        value += result.value
        if gradient is not None and result.gradient is not None:
            gradient = gradient + result.gradient
        else:
            gradient = None
        count += 1

    logger.info("Evaluated %d objective(s): total=%.6g", count, value)
    return ObjectiveResult(value=value, gradient=gradient)


__all__ = [
    "ForceFormula",
    "Objective",
    "ObjectiveResult",
    "PerformanceObjective",
    "TargetObjective",
    "density_force",
    "evaluate",
    "total_cost",
]
