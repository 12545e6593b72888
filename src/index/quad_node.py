"""
Quadtree Node Module
====================

Region records of the polar quadtree. Nodes live in an arena (a plain
list) and refer to their children by index, so subtrees built by
independent workers can be relinked by offsetting indices.

A node covers the polar box [min_angle, max_angle) x [min_r, max_r) of
the Poincaré disk. Internal nodes have exactly four children split at
(mid_angle, mid_r); the child slot of a point is
``(angle >= mid_angle) + 2 * (radius >= mid_r)``.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

LeafArrays = Tuple[NDArray[np.int64], NDArray[np.float64], NDArray[np.float64]]


def radial_split(min_r: float, max_r: float, alpha: float, balance: float) -> float:
    """
    Euclidean radius splitting [min_r, max_r) into rings of balanced
    hyperbolic content.

    With balance 0.5 both rings hold the same expected number of points
    when radii follow the density of dispersion ``alpha``.
    """
    inner = 2.0 * math.atanh(min_r)
    outer = 2.0 * math.atanh(max_r)
    middle = math.acosh(
        (1.0 - balance) * math.cosh(alpha * outer) + balance * math.cosh(alpha * inner)
    ) / alpha
    return math.tanh(middle / 2.0)


@dataclass
class QuadNode:
    """One region of the quadtree arena."""

    min_angle: float
    max_angle: float
    min_r: float
    max_r: float
    mid_angle: float = math.nan
    mid_r: float = math.nan
    children: List[int] = field(default_factory=list)
    elements: List[int] = field(default_factory=list)
    angles: List[float] = field(default_factory=list)
    radii: List[float] = field(default_factory=list)
    _arrays: Optional[LeafArrays] = field(default=None, repr=False, compare=False)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def __len__(self) -> int:
        return len(self.elements)

    def child_slot(self, angle: float, radius: float) -> int:
        return int(angle >= self.mid_angle) + 2 * int(radius >= self.mid_r)

    def split_values(self, alpha: float, balance: float) -> Optional[Tuple[float, float]]:
        """
        Split values for this region, or None once a split value collapses
        onto a bound in floating point.
        """
        mid_angle = (self.max_angle - self.min_angle) / 2.0 + self.min_angle
        mid_r = radial_split(self.min_r, self.max_r, alpha, balance)
        if not (self.min_angle < mid_angle < self.max_angle):
            return None
        if not (self.min_r < mid_r < self.max_r):
            return None
        return mid_angle, mid_r

    def child_regions(self, mid_angle: float, mid_r: float) -> List["QuadNode"]:
        """Empty child records in slot order."""
        return [
            QuadNode(self.min_angle, mid_angle, self.min_r, mid_r),
            QuadNode(mid_angle, self.max_angle, self.min_r, mid_r),
            QuadNode(self.min_angle, mid_angle, mid_r, self.max_r),
            QuadNode(mid_angle, self.max_angle, mid_r, self.max_r),
        ]

    def add_content(self, point_id: int, angle: float, radius: float) -> None:
        self.elements.append(point_id)
        self.angles.append(angle)
        self.radii.append(radius)
        self._arrays = None

    def remove_content(self, point_id: int) -> bool:
        try:
            position = self.elements.index(point_id)
        except ValueError:
            return False
        del self.elements[position]
        del self.angles[position]
        del self.radii[position]
        self._arrays = None
        return True

    def take_content(self) -> Tuple[List[int], List[float], List[float]]:
        """Detach and return the leaf content."""
        content = (self.elements, self.angles, self.radii)
        self.elements, self.angles, self.radii = [], [], []
        self._arrays = None
        return content

    def set_content(self, elements: List[int], angles: List[float], radii: List[float]) -> None:
        self.elements, self.angles, self.radii = list(elements), list(angles), list(radii)
        self._arrays = None

    def leaf_arrays(self) -> LeafArrays:
        """Leaf content as numpy arrays, cached until the next mutation."""
        arrays = self._arrays
        if arrays is None:
            arrays = (
                np.asarray(self.elements, dtype=np.int64),
                np.asarray(self.angles, dtype=np.float64),
                np.asarray(self.radii, dtype=np.float64),
            )
            self._arrays = arrays
        return arrays

    def sort_content(self) -> None:
        """Order leaf content by angle, then radius, then id."""
        if len(self.elements) < 2:
            return
        order = sorted(
            range(len(self.elements)),
            key=lambda i: (self.angles[i], self.radii[i], self.elements[i]),
        )
        self.set_content(
            [self.elements[i] for i in order],
            [self.angles[i] for i in order],
            [self.radii[i] for i in order],
        )

    def distance_lower_bound(self, angle: float, radius: float) -> float:
        """
        Euclidean distance from the point (angle, radius) to the closest
        point of this region.

        If the angle lies inside the sector the closest point is on the
        same ray; otherwise it lies on one of the two boundary rays.
        """
        if self.min_angle <= angle < self.max_angle:
            if radius < self.min_r:
                return self.min_r - radius
            if radius > self.max_r:
                return radius - self.max_r
            return 0.0

        best = math.inf
        for boundary in (self.min_angle, self.max_angle):
            delta = angle - boundary
            projection = radius * math.cos(delta)
            projection = min(max(projection, self.min_r), self.max_r)
            half_sin = math.sin(delta / 2.0)
            gap = radius - projection
            distance_sq = gap * gap + 4.0 * radius * projection * half_sin * half_sin
            if distance_sq < best:
                best = distance_sq
        return math.sqrt(max(best, 0.0))
