"""Proximity lookup used to merge coincident points."""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence, Tuple

from .types import Point3, PointLike, coerce_point, coerce_tolerance


def within_tolerance(points: Iterable[Point3], query: PointLike, tol: float) -> Tuple[bool, int]:
    """Return ``(True, index)`` of the first point within ``tol`` of ``query``.

    Points are scanned in their existing order and the distance test is
    inclusive, so the first qualifying point wins even when a later one is
    closer.  ``(False, -1)`` is returned when nothing qualifies.
    """

    target = coerce_point(query)
    for idx, point in enumerate(points):
        if math.dist(point, target) <= tol:
            return True, idx
    return False, -1


class ToleranceIndex:
    """Growing list of points queried with :func:`within_tolerance`."""

    def __init__(self, tol: float, points: Sequence[PointLike] = ()):
        self.tol = coerce_tolerance(tol)
        self._points: List[Point3] = [coerce_point(p) for p in points]

    def __len__(self) -> int:
        return len(self._points)

    @property
    def points(self) -> List[Point3]:
        return list(self._points)

    def find(self, point: PointLike) -> Tuple[bool, int]:
        return within_tolerance(self._points, point, self.tol)

    def add(self, point: PointLike) -> int:
        self._points.append(coerce_point(point))
        return len(self._points) - 1

    def find_or_add(self, point: PointLike) -> Tuple[int, bool]:
        """Return the index of a matching point, appending one if none matches.

        The second element is ``True`` when a new point was created.
        """

        found, idx = self.find(point)
        if found:
            return idx, False
        return self.add(point), True


__all__ = ["ToleranceIndex", "within_tolerance"]
