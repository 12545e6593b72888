"""
Hyperbolic Random Graph Generator
=================================

This module implements the static hyperbolic random graph generator in
the threshold (zero temperature) model: points are placed in a
hyperbolic disk and two points are connected iff their hyperbolic
distance is at most the threshold radius.

Instead of testing all pairs, the generator builds a polar quadtree
over the points and issues one range query per point, keeping only
neighbors with a larger id so each undirected edge is emitted once.

References
----------
.. [1] Krioukov, D. et al. Hyperbolic geometry of complex networks.
       Phys. Rev. E 82, 036106 (2010).
.. [2] von Looz, M., Meyerhenke, H. & Prutkin, R. Generating random
       hyperbolic graphs in subquadratic time. ISAAC 2015.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import networkx as nx
import numpy as np
from numpy.typing import NDArray

from ..config import (
    DEFAULT_AVERAGE_DEGREE,
    DEFAULT_EXPONENT,
    DEFAULT_LEAF_CAPACITY,
    DEFAULT_N,
    DEFAULT_N_WORKERS,
)
from ..geometry.hyperbolic_space import (
    alpha_from_exponent,
    expected_number_of_edges,
    hyperbolic_area_to_radius,
    hyperbolic_radius_to_euclidean,
    sample_points_in_radius,
    target_radius,
)
from ..index.quadtree import Quadtree
from .base import GraphGenerator

logger = logging.getLogger(__name__)

Edge = Tuple[int, int]


def unit_disk_edges(
    quadtree: Quadtree,
    angles: Sequence[float],
    radii: Sequence[float],
    threshold: float,
    n_workers: int = DEFAULT_N_WORKERS,
) -> List[Edge]:
    """
    All pairs (u, v), u < v, within hyperbolic distance ``threshold``.

    The quadtree must index exactly the points ``0..n-1`` with the given
    coordinates. Points are processed in increasing id order and each
    query keeps only strictly larger ids. A zero threshold yields no
    edges.

    Parameters
    ----------
    quadtree : Quadtree
        Index over the points
    angles, radii : Sequence[float]
        Coordinates indexed by point id
    threshold : float
        Hyperbolic connection threshold
    n_workers : int, optional
        Threads issuing queries against the read-only index (default: 1)

    Returns
    -------
    List[Edge]
        Edges sorted by (u, v)
    """
    threshold = float(threshold)
    if not threshold >= 0:
        raise ValueError(f"Threshold must be non-negative, got {threshold}")
    angle_list = np.asarray(angles, dtype=np.float64).tolist()
    radius_list = np.asarray(radii, dtype=np.float64).tolist()
    n = len(angle_list)
    if len(radius_list) != n:
        raise ValueError(f"Got {n} angles but {len(radius_list)} radii")
    if n == 0 or threshold == 0:
        return []

    def edges_for(block: range) -> List[Edge]:
        block_edges: List[Edge] = []
        for u in block:
            neighbors = quadtree.query_array(angle_list[u], radius_list[u], threshold)
            neighbors = np.sort(neighbors[neighbors > u])
            block_edges.extend((u, v) for v in neighbors.tolist())
        return block_edges

    n_workers = max(1, int(n_workers))
    if n_workers == 1:
        return edges_for(range(n))

    block_size = math.ceil(n / n_workers)
    blocks = [range(start, min(start + block_size, n)) for start in range(0, n, block_size)]
    with ThreadPoolExecutor(max_workers=n_workers) as pool:
        results = list(pool.map(edges_for, blocks))
    return [edge for block_edges in results for edge in block_edges]


def edges_to_graph(
    n: int,
    edges: Sequence[Edge],
    angles: Optional[NDArray[np.float64]] = None,
    radii: Optional[NDArray[np.float64]] = None,
) -> nx.Graph:
    """Graph with nodes 0..n-1 and the given edges; coordinates go to ``G.graph``."""
    G = nx.Graph()
    G.add_nodes_from(range(n))
    G.add_edges_from(edges)
    if angles is not None:
        G.graph["angles"] = np.asarray(angles, dtype=np.float64)
    if radii is not None:
        G.graph["radii"] = np.asarray(radii, dtype=np.float64)
    return G


class HyperbolicGenerator(GraphGenerator):
    """
    Threshold hyperbolic random graph generator.

    Parameters
    ----------
    n : int, optional
        Number of nodes (default: 10000)
    average_degree : float, optional
        Target average degree k (default: 6.0)
    exponent : float, optional
        Power-law exponent gamma of the degree distribution, > 2
        (default: 3.0); the radial dispersion is alpha = (gamma - 1) / 2
    capacity : int, optional
        Quadtree leaf capacity (default: 1000)
    n_workers : int, optional
        Worker threads for index construction and queries (default: 1)
    seed : int or np.random.Generator, optional
        Random source for point sampling

    Examples
    --------
    >>> gen = HyperbolicGenerator(n=1000, average_degree=6, seed=42)
    >>> G = gen.generate()
    >>> G.number_of_nodes()
    1000

    Notes
    -----
    The disk radius R is chosen so that the expected average degree
    equals k (see :func:`~src.geometry.hyperbolic_space.target_radius`);
    the edge count matches k * n / 2 only in expectation.
    """

    def __init__(
        self,
        n: int = DEFAULT_N,
        average_degree: float = DEFAULT_AVERAGE_DEGREE,
        exponent: float = DEFAULT_EXPONENT,
        capacity: int = DEFAULT_LEAF_CAPACITY,
        n_workers: int = DEFAULT_N_WORKERS,
        seed: Optional[Union[int, np.random.Generator]] = None,
    ):
        if n < 0:
            raise ValueError(f"Number of nodes must be non-negative, got {n}")
        if average_degree <= 0:
            raise ValueError(f"Average degree must be positive, got {average_degree}")
        self.n = int(n)
        self.average_degree = float(average_degree)
        self.exponent = float(exponent)
        self.alpha = alpha_from_exponent(exponent)
        self.capacity = capacity
        self.n_workers = n_workers
        self.seed = seed

    def disk_radius(self) -> float:
        """Hyperbolic disk radius R for the configured n and k."""
        if self.n < 2:
            return hyperbolic_area_to_radius(max(self.n, 1))
        return target_radius(self.n, self.average_degree, self.alpha)

    def sample_coordinates(self) -> Tuple[NDArray[np.float64], NDArray[np.float64], float]:
        """Sample point coordinates; returns (angles, radii, R)."""
        radius = self.disk_radius()
        angles, radii = sample_points_in_radius(self.n, self.alpha, radius, seed=self.seed)
        return angles, radii, radius

    def generate_edges(self) -> Tuple[List[Edge], Dict[str, Any]]:
        """
        Sample points and compute the edge list without building a graph.

        Returns
        -------
        Tuple[List[Edge], Dict[str, Any]]
            (edges, info) where info holds 'angles', 'radii' and 'R'
        """
        logger.info(
            f"Generating hyperbolic graph: n={self.n}, k={self.average_degree}, "
            f"gamma={self.exponent}, alpha={self.alpha:.3f}"
        )
        angles, radii, radius = self.sample_coordinates()
        info = {"angles": angles, "radii": radii, "R": radius}
        if self.n == 0:
            return [], info

        max_r = hyperbolic_radius_to_euclidean(radius)
        tree = Quadtree.from_points(
            angles, radii, max_r, capacity=self.capacity, alpha=self.alpha, n_workers=self.n_workers
        )
        edges = unit_disk_edges(tree, angles, radii, radius, n_workers=self.n_workers)
        logger.info(f"Generated {len(edges)} edges (target {self.n * self.average_degree / 2:.0f}), R={radius:.4f}")
        return edges, info

    def generate(self) -> nx.Graph:
        """
        Generate a graph from the model parameters.

        Returns
        -------
        nx.Graph
            Graph with nodes 0..n-1; ``G.graph`` holds 'params', 'angles',
            'radii' and 'R'
        """
        edges, info = self.generate_edges()
        G = edges_to_graph(self.n, edges, info["angles"], info["radii"])
        G.graph["R"] = info["R"]
        G.graph["params"] = {
            "n": self.n,
            "average_degree": self.average_degree,
            "exponent": self.exponent,
            "alpha": self.alpha,
            "seed": self.seed if not isinstance(self.seed, np.random.Generator) else None,
        }
        return G

    def generate_from_coordinates(
        self,
        angles: Sequence[float],
        radii: Sequence[float],
        euclidean_radius: float,
        threshold_radius: float,
    ) -> nx.Graph:
        """
        Generate the threshold graph of explicitly given points.

        Parameters
        ----------
        angles, radii : Sequence[float]
            Coordinates of points 0..n-1 in the Poincaré disk
        euclidean_radius : float
            Euclidean radius of the disk containing all points
        threshold_radius : float
            Hyperbolic connection threshold

        Returns
        -------
        nx.Graph
            Unit-disk graph of the points
        """
        angles = np.asarray(angles, dtype=np.float64)
        radii = np.asarray(radii, dtype=np.float64)
        if angles.shape != radii.shape:
            raise ValueError(f"Got {len(angles)} angles but {len(radii)} radii")
        if not threshold_radius >= 0:
            raise ValueError(f"Threshold must be non-negative, got {threshold_radius}")
        tree = Quadtree.from_points(
            angles, radii, euclidean_radius,
            capacity=self.capacity, alpha=self.alpha, n_workers=self.n_workers,
        )
        return self.generate_from_index(angles, radii, tree, threshold_radius)

    def generate_from_index(
        self,
        angles: Sequence[float],
        radii: Sequence[float],
        quadtree: Quadtree,
        threshold_radius: float,
    ) -> nx.Graph:
        """Generate the threshold graph using a prebuilt quadtree over points 0..n-1."""
        angles = np.asarray(angles, dtype=np.float64)
        radii = np.asarray(radii, dtype=np.float64)
        if len(quadtree) != len(angles):
            raise ValueError(f"Quadtree holds {len(quadtree)} points, coordinates describe {len(angles)}")
        edges = unit_disk_edges(quadtree, angles, radii, threshold_radius, n_workers=self.n_workers)
        G = edges_to_graph(len(angles), edges, angles, radii)
        G.graph["R"] = float(threshold_radius)
        return G

    @staticmethod
    def expected_number_of_edges(n: int, stretch: float) -> float:
        """Asymptotic edge count for alpha = 1 and R = stretch * area_to_radius(n)."""
        return expected_number_of_edges(n, stretch)
