"""
Polar Quadtree Module
=====================

This module implements the spatial index used by the hyperbolic
generators: a quadtree over the Poincaré disk whose regions are polar
boxes. Angular splits halve a sector, radial splits balance the
hyperbolic content of the two rings, so a tree over points sampled from
the generator's distribution stays balanced.

Range queries exploit that a hyperbolic circle in the Poincaré disk is a
Euclidean circle: a region is only visited if its closest point lies
within that circle, and candidate leaves are verified with the exact
hyperbolic distance.

Concurrency
-----------
The tree is single-writer / multi-reader: any number of threads may run
``range_query`` concurrently as long as no ``insert``, ``remove``,
``update``, ``trim`` or ``reindex`` is in flight. ``bulk_build`` uses a
thread pool internally; workers build disjoint subtrees in private
arenas that are relinked after all of them finish.

References
----------
.. [1] von Looz, M., Meyerhenke, H. & Prutkin, R. Generating random
       hyperbolic graphs in subquadratic time. ISAAC 2015.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from ..config import DEFAULT_BALANCE, DEFAULT_LEAF_CAPACITY, DEFAULT_N_WORKERS
from ..geometry.hyperbolic_space import TWO_PI, get_euclidean_circle, poincare_metric
from .quad_node import QuadNode

logger = logging.getLogger(__name__)

# Relative and absolute slack on the pruning radius; leaves are verified exactly
_PRUNE_RELATIVE_SLACK = 1e-9
_PRUNE_ABSOLUTE_SLACK = 1e-12

PendingBuild = Tuple[int, NDArray[np.int64], NDArray[np.float64], NDArray[np.float64]]


def _all_coincident(angles: NDArray[np.float64], radii: NDArray[np.float64]) -> bool:
    return bool(np.all(angles == angles[0]) and np.all(radii == radii[0]))


def _build_subtree(
    region: QuadNode,
    ids: NDArray[np.int64],
    angles: NDArray[np.float64],
    radii: NDArray[np.float64],
    capacity: int,
    alpha: float,
    balance: float,
    max_depth: Optional[int] = None,
) -> Tuple[List[QuadNode], List[PendingBuild]]:
    """
    Build a subtree top-down in a private arena.

    A node is split iff it holds more than ``capacity`` points and can be
    split, the same rule incremental insertion follows, so both produce
    the same layout. Nodes at ``max_depth`` that still need splitting are
    returned as pending work instead of being expanded.

    Returns
    -------
    Tuple[List[QuadNode], List[PendingBuild]]
        (arena with the region at index 0, pending (index, ids, angles, radii))
    """
    arena = [region]
    pending: List[PendingBuild] = []
    stack = [(0, 0, ids, angles, radii)]

    while stack:
        index, depth, node_ids, node_angles, node_radii = stack.pop()
        node = arena[index]
        count = len(node_ids)

        if count <= capacity or _all_coincident(node_angles, node_radii):
            node.set_content(node_ids.tolist(), node_angles.tolist(), node_radii.tolist())
            continue
        split = node.split_values(alpha, balance)
        if split is None:
            node.set_content(node_ids.tolist(), node_angles.tolist(), node_radii.tolist())
            continue
        if max_depth is not None and depth >= max_depth:
            pending.append((index, node_ids, node_angles, node_radii))
            continue

        mid_angle, mid_r = split
        node.mid_angle, node.mid_r = mid_angle, mid_r
        first = len(arena)
        arena.extend(node.child_regions(mid_angle, mid_r))
        node.children = list(range(first, first + 4))

        slots = (node_angles >= mid_angle).astype(np.int64) + 2 * (node_radii >= mid_r).astype(np.int64)
        for slot in reversed(range(4)):
            mask = slots == slot
            stack.append((first + slot, depth + 1, node_ids[mask], node_angles[mask], node_radii[mask]))

    return arena, pending


class Quadtree:
    """
    Quadtree over the Poincaré disk holding integer point ids.

    Parameters
    ----------
    max_r : float
        Euclidean radius of the indexed disk, in (0, 1). Points may lie
        anywhere in [0, max_r].
    capacity : int, optional
        Maximum number of points per leaf before it splits (default: 1000)
    alpha : float, optional
        Radial dispersion used to balance radial splits (default: 1.0)
    balance : float, optional
        Share of hyperbolic content assigned to the inner ring of each
        radial split (default: 0.5)

    Examples
    --------
    >>> tree = Quadtree(max_r=0.9, capacity=4)
    >>> tree.insert(0, 0.5, 0.3)
    >>> sorted(tree.range_query(0.5, 0.3, 0.1))
    [0]
    """

    def __init__(
        self,
        max_r: float,
        capacity: int = DEFAULT_LEAF_CAPACITY,
        alpha: float = 1.0,
        balance: float = DEFAULT_BALANCE,
    ):
        if not 0 < max_r < 1:
            raise ValueError(f"Disk radius must lie in (0, 1), got {max_r}")
        if capacity < 1:
            raise ValueError(f"Leaf capacity must be positive, got {capacity}")
        if alpha <= 0:
            raise ValueError(f"Dispersion alpha must be positive, got {alpha}")
        if not 0 < balance < 1:
            raise ValueError(f"Balance must lie in (0, 1), got {balance}")

        self.max_r = float(max_r)
        self.capacity = int(capacity)
        self.alpha = float(alpha)
        self.balance = float(balance)
        self._nodes: List[QuadNode] = [self._root_region()]
        self._coordinates: Dict[int, Tuple[float, float]] = {}

    @classmethod
    def from_points(
        cls,
        angles: Sequence[float],
        radii: Sequence[float],
        max_r: float,
        capacity: int = DEFAULT_LEAF_CAPACITY,
        alpha: float = 1.0,
        balance: float = DEFAULT_BALANCE,
        ids: Optional[Sequence[int]] = None,
        n_workers: int = DEFAULT_N_WORKERS,
    ) -> "Quadtree":
        """Create a tree and bulk-build it from the given points."""
        tree = cls(max_r, capacity=capacity, alpha=alpha, balance=balance)
        tree.bulk_build(angles, radii, ids=ids, n_workers=n_workers)
        return tree

    def _root_region(self) -> QuadNode:
        return QuadNode(0.0, TWO_PI, 0.0, self.max_r)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate_point(self, angle: float, radius: float) -> None:
        if not (0.0 <= angle < TWO_PI):
            raise ValueError(f"Angle {angle} outside [0, 2π)")
        if not (0.0 <= radius <= self.max_r):
            raise ValueError(f"Radius {radius} outside the disk [0, {self.max_r}]")

    def _validate_arrays(
        self, angles: NDArray[np.float64], radii: NDArray[np.float64]
    ) -> None:
        if angles.shape != radii.shape or angles.ndim != 1:
            raise ValueError(
                f"Angles and radii must be 1-d arrays of equal length, got {angles.shape} and {radii.shape}"
            )
        if not np.all((angles >= 0.0) & (angles < TWO_PI)):
            raise ValueError("All angles must lie in [0, 2π)")
        if not np.all((radii >= 0.0) & (radii <= self.max_r)):
            raise ValueError(f"All radii must lie in the disk [0, {self.max_r}]")

    @staticmethod
    def _validate_query(angle: float, radius: float, threshold: float) -> None:
        if not (threshold >= 0.0):
            raise ValueError(f"Query threshold must be non-negative, got {threshold}")
        if not (0.0 <= radius < 1.0):
            raise ValueError(f"Query radius {radius} outside the unit disk")
        if not (0.0 <= angle < TWO_PI):
            raise ValueError(f"Query angle {angle} outside [0, 2π)")

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def _find_leaf(self, angle: float, radius: float) -> int:
        index = 0
        node = self._nodes[0]
        while node.children:
            index = node.children[node.child_slot(angle, radius)]
            node = self._nodes[index]
        return index

    def _split(self, index: int) -> None:
        node = self._nodes[index]
        if _all_coincident(np.asarray(node.angles), np.asarray(node.radii)):
            return
        split = node.split_values(self.alpha, self.balance)
        if split is None:
            return

        mid_angle, mid_r = split
        elements, angles, radii = node.take_content()
        node.mid_angle, node.mid_r = mid_angle, mid_r
        first = len(self._nodes)
        self._nodes.extend(node.child_regions(mid_angle, mid_r))
        node.children = list(range(first, first + 4))

        for point_id, angle, radius in zip(elements, angles, radii):
            self._nodes[first + node.child_slot(angle, radius)].add_content(point_id, angle, radius)
        for child in node.children:
            if len(self._nodes[child]) > self.capacity:
                self._split(child)

    def insert(self, point_id: int, angle: float, radius: float) -> None:
        """
        Add one point, splitting its leaf if it exceeds the capacity.

        Raises
        ------
        ValueError
            If the point lies outside the disk or the id is already present
        """
        point_id = int(point_id)
        angle, radius = float(angle), float(radius)
        self._validate_point(angle, radius)
        if point_id in self._coordinates:
            raise ValueError(f"Point {point_id} is already indexed")

        index = self._find_leaf(angle, radius)
        self._nodes[index].add_content(point_id, angle, radius)
        self._coordinates[point_id] = (angle, radius)
        if len(self._nodes[index]) > self.capacity:
            self._split(index)

    def remove(self, point_id: int) -> bool:
        """
        Remove a point. Regions left empty stay in place until ``trim``.

        Returns
        -------
        bool
            True if the point was present
        """
        point_id = int(point_id)
        coordinates = self._coordinates.pop(point_id, None)
        if coordinates is None:
            return False
        index = self._find_leaf(*coordinates)
        if not self._nodes[index].remove_content(point_id):
            raise RuntimeError(f"Point {point_id} missing from its leaf; index is corrupt")
        return True

    def update(self, point_id: int, angle: float, radius: float) -> None:
        """Move an indexed point to new coordinates."""
        point_id = int(point_id)
        if point_id not in self._coordinates:
            raise ValueError(f"Point {point_id} is not indexed")
        angle, radius = float(angle), float(radius)
        self._validate_point(angle, radius)
        self.remove(point_id)
        self.insert(point_id, angle, radius)

    def bulk_build(
        self,
        angles: Sequence[float],
        radii: Sequence[float],
        ids: Optional[Sequence[int]] = None,
        n_workers: int = DEFAULT_N_WORKERS,
    ) -> None:
        """
        Build the tree from a full point set.

        The top of the tree is built sequentially down to a frame depth
        of ceil(log4(n_workers)). Frame nodes that still need splitting
        are ordered by angle and handed out as contiguous sectors to the
        workers, each of which builds its subtrees in a private arena.
        After all workers finish, the arenas are relinked into the tree.

        Parameters
        ----------
        angles, radii : Sequence[float]
            Coordinates of all points
        ids : Sequence[int], optional
            Point ids (default: 0..n-1)
        n_workers : int, optional
            Number of worker threads (default: 1)

        Raises
        ------
        ValueError
            If the tree is not empty, ids repeat, or a point lies outside the disk
        """
        if self._coordinates:
            raise ValueError("bulk_build requires an empty tree")
        angles = np.asarray(angles, dtype=np.float64)
        radii = np.asarray(radii, dtype=np.float64)
        self._validate_arrays(angles, radii)
        n = len(angles)
        if ids is None:
            ids = np.arange(n, dtype=np.int64)
        else:
            ids = np.asarray(ids, dtype=np.int64)
            if ids.shape != angles.shape:
                raise ValueError("ids must match the coordinate arrays in length")
            if len(np.unique(ids)) != n:
                raise ValueError("Point ids must be unique")

        n_workers = max(1, int(n_workers))
        if n_workers == 1 or n <= self.capacity * n_workers:
            arena, _ = _build_subtree(
                self._root_region(), ids, angles, radii, self.capacity, self.alpha, self.balance
            )
            self._nodes = arena
        else:
            frame_depth = max(1, math.ceil(math.log(n_workers, 4)))
            arena, pending = _build_subtree(
                self._root_region(), ids, angles, radii,
                self.capacity, self.alpha, self.balance, max_depth=frame_depth,
            )
            pending.sort(key=lambda item: (arena[item[0]].min_angle, arena[item[0]].min_r))
            chunk = math.ceil(len(pending) / n_workers) if pending else 1
            sectors = [pending[i:i + chunk] for i in range(0, len(pending), chunk)]

            def build_sector(sector: List[PendingBuild]) -> List[Tuple[int, List[QuadNode]]]:
                results = []
                for index, node_ids, node_angles, node_radii in sector:
                    region = arena[index]
                    subtree, _ = _build_subtree(
                        QuadNode(region.min_angle, region.max_angle, region.min_r, region.max_r),
                        node_ids, node_angles, node_radii,
                        self.capacity, self.alpha, self.balance,
                    )
                    results.append((index, subtree))
                return results

            with ThreadPoolExecutor(max_workers=n_workers) as pool:
                built = list(pool.map(build_sector, sectors))

            for sector_results in built:
                for index, subtree in sector_results:
                    offset = len(arena) - 1
                    for node in subtree:
                        node.children = [index if c == 0 else c + offset for c in node.children]
                    arena[index] = subtree[0]
                    arena.extend(subtree[1:])
            self._nodes = arena
            logger.debug(f"Bulk build merged {len(pending)} subtrees from {len(sectors)} sectors")

        self._coordinates = {
            int(point_id): (float(angle), float(radius))
            for point_id, angle, radius in zip(ids.tolist(), angles.tolist(), radii.tolist())
        }
        logger.debug(f"Built quadtree: {n} points, {len(self._nodes)} nodes, height {self.height()}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _candidate_leaves(self, angle: float, radius: float, threshold: float) -> List[QuadNode]:
        center_angle, center_r, euclidean_radius = get_euclidean_circle(angle, radius, threshold)
        limit = euclidean_radius * (1.0 + _PRUNE_RELATIVE_SLACK) + _PRUNE_ABSOLUTE_SLACK
        nodes = self._nodes
        leaves = []
        stack = [0]
        while stack:
            node = nodes[stack.pop()]
            if node.distance_lower_bound(center_angle, center_r) > limit:
                continue
            if node.children:
                stack.extend(reversed(node.children))
            elif node.elements:
                leaves.append(node)
        return leaves

    def range_query(self, angle: float, radius: float, threshold: float) -> Iterator[int]:
        """
        Lazily yield ids of all points within hyperbolic distance
        ``threshold`` of the query point (inclusive).

        Arguments are validated eagerly; leaves are evaluated as the
        iterator is consumed.

        Raises
        ------
        ValueError
            If the threshold is negative or NaN, the query angle lies
            outside [0, 2π) or the query radius outside the unit disk
        """
        angle, radius, threshold = float(angle), float(radius), float(threshold)
        self._validate_query(angle, radius, threshold)
        return self._iter_query(angle, radius, threshold)

    def _iter_query(self, angle: float, radius: float, threshold: float) -> Iterator[int]:
        for leaf in self._candidate_leaves(angle, radius, threshold):
            leaf_ids, leaf_angles, leaf_radii = leaf.leaf_arrays()
            distances = poincare_metric(angle, radius, leaf_angles, leaf_radii)
            yield from leaf_ids[distances <= threshold].tolist()

    def query_array(self, angle: float, radius: float, threshold: float) -> NDArray[np.int64]:
        """Same result as ``range_query`` as a numpy array."""
        angle, radius, threshold = float(angle), float(radius), float(threshold)
        self._validate_query(angle, radius, threshold)
        leaves = self._candidate_leaves(angle, radius, threshold)
        if not leaves:
            return np.empty(0, dtype=np.int64)
        arrays = [leaf.leaf_arrays() for leaf in leaves]
        leaf_ids = np.concatenate([a[0] for a in arrays])
        leaf_angles = np.concatenate([a[1] for a in arrays])
        leaf_radii = np.concatenate([a[2] for a in arrays])
        distances = poincare_metric(angle, radius, leaf_angles, leaf_radii)
        return leaf_ids[distances <= threshold]

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def _iter_leaves(self) -> Iterator[QuadNode]:
        """Leaves in traversal order (depth first, children in slot order)."""
        stack = [0]
        while stack:
            node = self._nodes[stack.pop()]
            if node.children:
                stack.extend(reversed(node.children))
            else:
                yield node

    def _subtree_counts(self) -> List[int]:
        counts = [0] * len(self._nodes)

        def count(index: int) -> int:
            node = self._nodes[index]
            total = len(node) if node.is_leaf else sum(count(c) for c in node.children)
            counts[index] = total
            return total

        count(0)
        return counts

    def _collect(self, index: int) -> Tuple[List[int], List[float], List[float]]:
        elements: List[int] = []
        angles: List[float] = []
        radii: List[float] = []
        stack = [index]
        while stack:
            node = self._nodes[stack.pop()]
            if node.children:
                stack.extend(reversed(node.children))
            else:
                elements.extend(node.elements)
                angles.extend(node.angles)
                radii.extend(node.radii)
        return elements, angles, radii

    def trim(self) -> None:
        """
        Collapse subtrees holding at most ``capacity`` points into single
        leaves and compact the arena.
        """
        counts = self._subtree_counts()
        compacted: List[QuadNode] = []

        def copy(index: int) -> int:
            node = self._nodes[index]
            new_index = len(compacted)
            compacted.append(node)
            if node.children:
                if counts[index] <= self.capacity:
                    elements, angles, radii = self._collect(index)
                    node.children = []
                    node.mid_angle = node.mid_r = math.nan
                    node.set_content(elements, angles, radii)
                else:
                    node.children = [copy(child) for child in node.children]
            return new_index

        before = len(self._nodes)
        copy(0)
        self._nodes = compacted
        logger.debug(f"Trimmed quadtree from {before} to {len(compacted)} nodes")

    def sort_points_in_leaves(self) -> None:
        """Order every leaf's content by angle, then radius."""
        for leaf in self._iter_leaves():
            leaf.sort_content()

    def reindex(self) -> Dict[int, int]:
        """
        Trim, then relabel all points 0..m-1 in leaf traversal order.

        Calling it twice in a row makes the second call the identity.

        Returns
        -------
        Dict[int, int]
            Mapping from old id to new id
        """
        self.trim()
        mapping: Dict[int, int] = {}
        coordinates: Dict[int, Tuple[float, float]] = {}
        for leaf in self._iter_leaves():
            new_ids = []
            for point_id, angle, radius in zip(leaf.elements, leaf.angles, leaf.radii):
                new_id = len(mapping)
                mapping[point_id] = new_id
                coordinates[new_id] = (angle, radius)
                new_ids.append(new_id)
            leaf.set_content(new_ids, leaf.angles, leaf.radii)
        self._coordinates = coordinates
        return mapping

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def extract_coordinates(self) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """
        Coordinates of all points ordered by id.

        Raises
        ------
        ValueError
            If the ids are not exactly 0..m-1 (call ``reindex`` first)
        """
        m = len(self._coordinates)
        angles = np.empty(m, dtype=np.float64)
        radii = np.empty(m, dtype=np.float64)
        for point_id, (angle, radius) in self._coordinates.items():
            if not 0 <= point_id < m:
                raise ValueError("Point ids are not contiguous; call reindex() first")
            angles[point_id] = angle
            radii[point_id] = radius
        return angles, radii

    def get_elements(self) -> List[int]:
        """Point ids in leaf traversal order."""
        elements: List[int] = []
        for leaf in self._iter_leaves():
            elements.extend(leaf.elements)
        return elements

    def get_coordinates(self, point_id: int) -> Tuple[float, float]:
        return self._coordinates[int(point_id)]

    def size(self) -> int:
        return len(self._coordinates)

    def __len__(self) -> int:
        return len(self._coordinates)

    def __contains__(self, point_id: object) -> bool:
        return point_id in self._coordinates

    def height(self) -> int:
        def depth(index: int) -> int:
            node = self._nodes[index]
            if not node.children:
                return 1
            return 1 + max(depth(child) for child in node.children)

        return depth(0)

    def count_leaves(self) -> int:
        return sum(1 for _ in self._iter_leaves())

    def count_nodes(self) -> int:
        return len(self._nodes)
