"""Shared aliases, coercion helpers and error types."""

from __future__ import annotations

import math
import numbers
from typing import Any, List, Sequence, Tuple, Union

import numpy as np

Point3 = Tuple[float, float, float]
PointLike = Union[Sequence[float], np.ndarray]
NodeIndex = int


class CardinalityError(ValueError):
    """Raised when a per-item value list does not match its target count."""

    def __init__(self, label: str, expected: int, actual: int):
        super().__init__(f"{label}: got {actual} value(s) for {expected} target(s)")
        self.label = label
        self.expected = expected
        self.actual = actual


class InvalidNetworkError(RuntimeError):
    """Raised by solver glue when handed a network that failed validation."""


def coerce_point(value: PointLike) -> Point3:
    """Return ``value`` as a fresh float 3-tuple (2D input gets ``z = 0``)."""

    if hasattr(value, "X") and hasattr(value, "Y"):
        # host point objects expose X/Y/Z attributes
        return (float(value.X), float(value.Y), float(getattr(value, "Z", 0.0)))
    try:
        coords = [float(c) for c in value]  # type: ignore[union-attr]
    except (TypeError, ValueError) as exc:
        raise TypeError(f"Expected a 2D or 3D point, got {value!r}") from exc
    if len(coords) == 2:
        coords.append(0.0)
    if len(coords) != 3:
        raise TypeError(f"Expected a 2D or 3D point, got {len(coords)} coordinate(s)")
    return (coords[0], coords[1], coords[2])


def broadcast_values(values: Sequence[Any], count: int, label: str) -> List[Any]:
    """Return one value per target, broadcasting a single shared value.

    Any length other than 1 or ``count`` raises :class:`CardinalityError`;
    values are never truncated or repeated cyclically.
    """

    items = list(values)
    if len(items) == 1:
        return items * count
    if len(items) != count:
        raise CardinalityError(label, count, len(items))
    return items


def coerce_tolerance(value: object, label: str = "tolerance") -> float:
    if not isinstance(value, numbers.Real):
        raise TypeError(f"{label} must be a real number, got {value!r}")
    tol = float(value)
    if math.isnan(tol) or tol < 0.0:
        raise ValueError(f"{label} must be a non-negative number, got {tol}")
    return tol


__all__ = [
    "CardinalityError",
    "InvalidNetworkError",
    "NodeIndex",
    "broadcast_values",
    "Point3",
    "PointLike",
    "coerce_point",
    "coerce_tolerance",
]
