"""
Dynamic Hyperbolic Generator
============================

This module implements a hyperbolic random graph whose points move and
whose connection threshold grows over time. Each call to ``generate``
advances the model by a number of rounds and returns the graph events
that turn the previous graph into the new one.

Each round runs four sequential phases:

1. Displace - a share of the points takes a bounded random step
2. Grow - the threshold factor advances by ``factor_growth``
3. Reindex - moved points are relocated in the quadtree
4. Diff - the new edge set is compared with the previous one

Replaying all emitted events onto the initial graph yields exactly the
graph that :class:`~src.generators.hyperbolic.HyperbolicGenerator`
builds from the final coordinates and threshold.
"""

import logging
import math
from typing import List, Optional, Sequence, Set, Tuple, Union

import networkx as nx
import numpy as np
from numpy.typing import NDArray

from ..config import (
    DEFAULT_FACTOR_GROWTH,
    DEFAULT_INITIAL_FACTOR,
    DEFAULT_LEAF_CAPACITY,
    DEFAULT_MOVE_DISTANCE,
    DEFAULT_MOVED_SHARE,
    DEFAULT_N_WORKERS,
)
from ..dynamic.graph_event import GraphEvent
from ..geometry.hyperbolic_space import TWO_PI, to_cartesian_points
from ..index.quadtree import Quadtree
from .base import DynamicGraphSource, _check_steps
from .hyperbolic import Edge, edges_to_graph, unit_disk_edges

logger = logging.getLogger(__name__)


class DynamicHyperbolicGenerator(DynamicGraphSource):
    """
    Hyperbolic random graph with moving points and a growing threshold.

    Parameters
    ----------
    angles, radii : Sequence[float]
        Initial coordinates of points 0..n-1 in the Poincaré disk
    R : float
        Hyperbolic radius of the disk; all radii must lie within
        ``tanh(R / 2)``
    initial_factor : float, optional
        Initial threshold as a fraction of R (default: 1.0)
    moved_share : float, optional
        Fraction of points displaced per round, in [0, 1] (default: 0.0)
    factor_growth : float, optional
        Change of the threshold factor per round (default: 0.0); the
        factor is clamped at 0
    move_distance : float, optional
        Bound of the per-round step. Angles move by U(-d, d) radians and
        wrap around; radii move by U(-d, d) in the radial CDF coordinate,
        pass through the origin and are clamped to the rim (default: 0.0)
    alpha : float, optional
        Radial dispersion of the point distribution (default: 1.0)
    capacity : int, optional
        Quadtree leaf capacity (default: 1000)
    n_workers : int, optional
        Threads for index rebuilds and full edge recomputation (default: 1)
    seed : int or np.random.Generator, optional
        Random source for displacements

    Examples
    --------
    >>> from src.geometry import sample_points_in_radius
    >>> angles, radii = sample_points_in_radius(100, 1.0, 8.0, seed=42)
    >>> gen = DynamicHyperbolicGenerator(angles, radii, 8.0, initial_factor=0.5,
    ...                                  factor_growth=0.05)
    >>> stream = gen.generate(3)
    >>> str(stream[-1])
    'st'
    """

    def __init__(
        self,
        angles: Sequence[float],
        radii: Sequence[float],
        R: float,
        initial_factor: float = DEFAULT_INITIAL_FACTOR,
        moved_share: float = DEFAULT_MOVED_SHARE,
        factor_growth: float = DEFAULT_FACTOR_GROWTH,
        move_distance: float = DEFAULT_MOVE_DISTANCE,
        alpha: float = 1.0,
        capacity: int = DEFAULT_LEAF_CAPACITY,
        n_workers: int = DEFAULT_N_WORKERS,
        seed: Optional[Union[int, np.random.Generator]] = None,
    ):
        self._angles = np.array(angles, dtype=np.float64)
        self._radii = np.array(radii, dtype=np.float64)
        if self._angles.shape != self._radii.shape or self._angles.ndim != 1:
            raise ValueError(f"Got {len(self._angles)} angles but {len(self._radii)} radii")
        if not 0 <= moved_share <= 1:
            raise ValueError(f"Moved share must lie in [0, 1], got {moved_share}")
        if move_distance < 0:
            raise ValueError(f"Move distance must be non-negative, got {move_distance}")
        if initial_factor < 0:
            raise ValueError(f"Initial factor must be non-negative, got {initial_factor}")
        if alpha <= 0:
            raise ValueError(f"Dispersion alpha must be positive, got {alpha}")

        self.n = len(self._angles)
        if self.n > 0 and not R > 0:
            raise ValueError(f"Disk radius must be positive, got {R}")

        self.R = float(R)
        self.max_r = math.tanh(self.R / 2.0)
        self.factor = float(initial_factor)
        self.moved_share = float(moved_share)
        self.factor_growth = float(factor_growth)
        self.move_distance = float(move_distance)
        self.alpha = float(alpha)
        if self.n > 0 and self.alpha * self.R > 700:
            raise ValueError(
                f"alpha * R = {self.alpha * self.R:.1f} is too large for the radial distribution"
            )
        self.capacity = capacity
        self.n_workers = n_workers
        self.time = 0
        self._rng = np.random.default_rng(seed)
        self._max_cdf = math.cosh(self.alpha * self.R)

        self._tree: Optional[Quadtree] = self._build_tree() if self.n else None
        self._neighbors: List[Set[int]] = [set() for _ in range(self.n)]
        self._edges: Set[Edge] = set()
        self._add_edges(set(self._full_edges()))

        logger.info(
            f"Initialized dynamic hyperbolic generator: n={self.n}, R={self.R:.4f}, "
            f"factor={self.factor}, moved_share={self.moved_share}, "
            f"factor_growth={self.factor_growth}, move_distance={self.move_distance}, "
            f"{len(self._edges)} initial edges"
        )

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def threshold(self) -> float:
        return self.factor * self.R

    def get_graph(self) -> nx.Graph:
        """Graph of the current configuration."""
        G = edges_to_graph(self.n, sorted(self._edges), self._angles, self._radii)
        G.graph["R"] = self.threshold
        return G

    def get_coordinates(self) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Copies of the current (angles, radii)."""
        return self._angles.copy(), self._radii.copy()

    def get_hyperbolic_coordinates(self) -> List[Tuple[float, float]]:
        """Current cartesian coordinates in the Poincaré disk."""
        return to_cartesian_points(self._angles, self._radii)

    def current_edges(self) -> List[Edge]:
        return sorted(self._edges)

    # ------------------------------------------------------------------
    # Event generation
    # ------------------------------------------------------------------

    def initialize(self) -> List[GraphEvent]:
        """Events that build the current graph from an empty one."""
        events = [GraphEvent.node_addition(u) for u in range(self.n)]
        events.extend(GraphEvent.edge_addition(u, v) for u, v in sorted(self._edges))
        events.append(GraphEvent.time_step())
        return events

    def generate(self, n_steps: int = 1) -> List[GraphEvent]:
        """
        Advance the model by ``n_steps`` rounds.

        Each round contributes its EDGE_REMOVAL events, then its
        EDGE_ADDITION events (both sorted), then one TIME_STEP.

        Returns
        -------
        List[GraphEvent]
            Events of all rounds in order
        """
        events: List[GraphEvent] = []
        for _ in range(_check_steps(n_steps)):
            events.extend(self._step())
        return events

    def _step(self) -> List[GraphEvent]:
        moved = self._displace()
        previous_threshold = self.threshold
        self.factor = max(0.0, self.factor + self.factor_growth)
        self._reindex(moved)

        if self.n == 0:
            added: Set[Edge] = set()
            removed: Set[Edge] = set()
        elif self.threshold != previous_threshold or len(moved) == self.n:
            new_edges = set(self._full_edges())
            removed = self._edges - new_edges
            added = new_edges - self._edges
        else:
            removed, added = self._local_diff(moved)

        for u, v in removed:
            self._remove_edge(u, v)
        for u, v in added:
            self._add_edge(u, v)

        self.time += 1
        logger.debug(
            f"Round {self.time}: moved {len(moved)} points, threshold {self.threshold:.4f}, "
            f"+{len(added)} -{len(removed)} edges"
        )
        events = [GraphEvent.edge_removal(u, v) for u, v in sorted(removed)]
        events.extend(GraphEvent.edge_addition(u, v) for u, v in sorted(added))
        events.append(GraphEvent.time_step())
        return events

    # ------------------------------------------------------------------
    # Round phases
    # ------------------------------------------------------------------

    def _displace(self) -> NDArray[np.int64]:
        """Move a random share of points; returns the sorted moved ids."""
        n_moved = int(round(self.moved_share * self.n))
        if n_moved == 0 or self.move_distance == 0:
            return np.empty(0, dtype=np.int64)

        moved = np.sort(self._rng.choice(self.n, size=n_moved, replace=False))
        angular_steps = self._rng.uniform(-self.move_distance, self.move_distance, size=n_moved)
        radial_steps = self._rng.uniform(-self.move_distance, self.move_distance, size=n_moved)

        new_angles = np.mod(self._angles[moved] + angular_steps, TWO_PI)
        new_angles[new_angles >= TWO_PI] = 0.0

        # Steps in the radial CDF coordinate keep the radial distribution stationary.
        # A step past the origin comes out on the far side; a step past the rim is
        # clamped to the rim.
        hyperbolic = 2.0 * np.arctanh(self._radii[moved])
        quantiles = (np.cosh(self.alpha * hyperbolic) - 1.0) / (self._max_cdf - 1.0)
        quantiles = np.minimum(np.abs(quantiles + radial_steps), 1.0)
        hyperbolic = np.arccosh(1.0 + quantiles * (self._max_cdf - 1.0)) / self.alpha
        new_radii = np.minimum(np.tanh(hyperbolic / 2.0), self.max_r)

        self._angles[moved] = new_angles
        self._radii[moved] = new_radii
        return moved

    def _build_tree(self) -> Quadtree:
        return Quadtree.from_points(
            self._angles, self._radii, self.max_r,
            capacity=self.capacity, alpha=self.alpha, n_workers=self.n_workers,
        )

    def _reindex(self, moved: NDArray[np.int64]) -> None:
        if self._tree is None or len(moved) == 0:
            return
        if len(moved) == self.n:
            self._tree = self._build_tree()
            return
        for u in moved.tolist():
            self._tree.update(u, self._angles[u], self._radii[u])

    def _full_edges(self) -> List[Edge]:
        if self._tree is None:
            return []
        return unit_disk_edges(self._tree, self._angles, self._radii, self.threshold, n_workers=self.n_workers)

    def _local_diff(self, moved: NDArray[np.int64]) -> Tuple[Set[Edge], Set[Edge]]:
        """Recompute only edges incident to moved points (threshold unchanged)."""
        old_incident: Set[Edge] = set()
        new_incident: Set[Edge] = set()
        threshold = self.threshold
        for u in moved.tolist():
            for v in self._neighbors[u]:
                old_incident.add((u, v) if u < v else (v, u))
            if threshold == 0:
                continue
            for v in self._tree.query_array(self._angles[u], self._radii[u], threshold).tolist():
                if v != u:
                    new_incident.add((u, v) if u < v else (v, u))
        return old_incident - new_incident, new_incident - old_incident

    def _add_edges(self, edges: Set[Edge]) -> None:
        for u, v in edges:
            self._add_edge(u, v)

    def _add_edge(self, u: int, v: int) -> None:
        self._edges.add((u, v))
        self._neighbors[u].add(v)
        self._neighbors[v].add(u)

    def _remove_edge(self, u: int, v: int) -> None:
        self._edges.discard((u, v))
        self._neighbors[u].discard(v)
        self._neighbors[v].discard(u)
