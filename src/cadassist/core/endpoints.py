"""
Free endpoints of a set of curves.

An endpoint shared (within tolerance) by two or more curve ends is a joint;
an endpoint that occurs exactly once is free. For three segments forming an
open triangle, the two points at the break are free and the shared corner
is not.

Two points match when every coordinate differs by less than the tolerance.
Points are bucketed on a grid of tolerance-sized cells so a lookup only
inspects the 27 cells around a point.
"""

import logging
import math
from itertools import product
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..errors import HostOperationError, InvalidInputError
from ..host.protocol import Point3d
from .listing import log_error

logger = logging.getLogger(__name__)

Cell = Tuple[int, int, int]


class EndpointCounter:
    """Counts occurrences of points, merging points closer than ``tolerance``."""

    def __init__(self, tolerance: float):
        if tolerance <= 0:
            raise ValueError(f"Tolerance must be positive, got {tolerance}")
        self.tolerance = tolerance
        self._points: List[Point3d] = []
        self._counts: List[int] = []
        self._grid: Dict[Cell, List[int]] = {}

    def _cell(self, point: Point3d) -> Cell:
        return (
            math.floor(point.x / self.tolerance),
            math.floor(point.y / self.tolerance),
            math.floor(point.z / self.tolerance),
        )

    def _matches(self, a: Point3d, b: Point3d) -> bool:
        return (abs(a.x - b.x) < self.tolerance
                and abs(a.y - b.y) < self.tolerance
                and abs(a.z - b.z) < self.tolerance)

    def _find(self, point: Point3d, cell: Cell) -> Optional[int]:
        cx, cy, cz = cell
        for dx, dy, dz in product((-1, 0, 1), repeat=3):
            for index in self._grid.get((cx + dx, cy + dy, cz + dz), ()):
                if self._matches(self._points[index], point):
                    return index
        return None

    def add(self, point: Point3d) -> None:
        cell = self._cell(point)
        index = self._find(point, cell)
        if index is None:
            self._grid.setdefault(cell, []).append(len(self._points))
            self._points.append(point)
            self._counts.append(1)
        else:
            self._counts[index] += 1

    def count(self, point: Point3d) -> int:
        index = self._find(point, self._cell(point))
        return 0 if index is None else self._counts[index]

    def unique(self) -> List[Point3d]:
        """Points seen exactly once, in first-seen order."""
        return [p for p, n in zip(self._points, self._counts) if n == 1]


def unique_curve_endpoints(document: Any, curve_arrays: Sequence[Sequence[Any]],
                           tolerance: float) -> List[Point3d]:
    """
    Endpoints that terminate exactly one curve across all curve arrays.

    Args:
        document: Host document
        curve_arrays: Groups of curves, typically one group per sketch or chain
        tolerance: Coordinate tolerance for treating two endpoints as the same

    Returns:
        Free endpoints in the order they were first encountered

    Raises:
        InvalidInputError: If curve_arrays or any group in it is None/empty,
            or tolerance is not positive
        HostOperationError: If the host cannot evaluate a curve
    """
    operation = "unique_curve_endpoints"
    if curve_arrays is None or len(curve_arrays) == 0:
        raise InvalidInputError("The input curve arrays cannot be None or empty.",
                                operation=operation)
    for curves in curve_arrays:
        if curves is None or len(curves) == 0:
            raise InvalidInputError("One of the curve arrays is None or empty.",
                                    operation=operation)
    if tolerance is None or tolerance <= 0:
        raise InvalidInputError(f"Tolerance must be positive, got {tolerance}",
                                operation=operation)

    counter = EndpointCounter(tolerance)
    try:
        for curves in curve_arrays:
            for curve in curves:
                start, end = document.curve_ends(curve)
                counter.add(Point3d(*start))
                counter.add(Point3d(*end))
    except Exception as e:
        log_error(logger, operation, e)
        raise HostOperationError(str(e), operation=operation) from e

    return counter.unique()
