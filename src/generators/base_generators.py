"""
Base Generators Module
======================

This module provides classic random graph models behind the
:class:`~src.generators.base.GraphGenerator` interface. They serve as
baselines next to the hyperbolic generator and share its conventions:
nodes are labelled 0..n-1 and every model is seeded explicitly.
"""

import heapq
import logging
from typing import List, Optional, Sequence, Union

import networkx as nx
import numpy as np

from ..dynamic.graph_updater import GraphUpdater
from .base import GraphGenerator
from .dynamic_generators import DynamicDorogovtsevMendesGenerator

logger = logging.getLogger(__name__)

Seed = Optional[Union[int, np.random.Generator]]


def _nx_seed(seed: Seed) -> Optional[int]:
    """networkx accepts ints; draw one from a Generator when given."""
    if isinstance(seed, np.random.Generator):
        return int(seed.integers(0, 2**31 - 1))
    return seed


def _check_probability(name: str, p: float) -> float:
    if not 0 <= p <= 1:
        raise ValueError(f"{name} must lie in [0, 1], got {p}")
    return float(p)


def _check_degree_sequence(sequence: Sequence[int]) -> List[int]:
    sequence = [int(d) for d in sequence]
    if any(d < 0 for d in sequence):
        raise ValueError("Degree sequence must be non-negative")
    return sequence


class ErdosRenyiGenerator(GraphGenerator):
    """
    G(n, p) random graph: every pair is connected independently with
    probability p.

    Examples
    --------
    >>> G = ErdosRenyiGenerator(100, 0.1, seed=42).generate()
    >>> G.number_of_nodes()
    100
    """

    def __init__(self, n: int, p: float, seed: Seed = None):
        if n < 0:
            raise ValueError(f"Number of nodes must be non-negative, got {n}")
        self.n = int(n)
        self.p = _check_probability("Edge probability", p)
        self.seed = seed

    def generate(self) -> nx.Graph:
        logger.info(f"Generating Erdos-Renyi graph: n={self.n}, p={self.p}")
        return nx.fast_gnp_random_graph(self.n, self.p, seed=_nx_seed(self.seed))


class BarabasiAlbertGenerator(GraphGenerator):
    """
    Preferential attachment graph grown from a path.

    Parameters
    ----------
    k : int
        Edges added with each new node
    n_max : int
        Final number of nodes
    n0 : int, optional
        Length of the initial path, at least k (default: k)
    seed : int or np.random.Generator, optional
        Random seed for reproducibility

    Notes
    -----
    The result has ``(n0 - 1) + (n_max - n0) * k`` edges.
    """

    def __init__(self, k: int, n_max: int, n0: Optional[int] = None, seed: Seed = None):
        n0 = k if n0 is None else n0
        if k < 1:
            raise ValueError(f"Attachment count k must be at least 1, got {k}")
        if not k <= n0 <= n_max:
            raise ValueError(f"Need k <= n0 <= n_max, got k={k}, n0={n0}, n_max={n_max}")
        self.k = int(k)
        self.n_max = int(n_max)
        self.n0 = int(n0)
        self.seed = seed

    def generate(self) -> nx.Graph:
        logger.info(f"Generating Barabasi-Albert graph: k={self.k}, n_max={self.n_max}, n0={self.n0}")
        initial = nx.path_graph(self.n0)
        if self.n_max == self.n0:
            return initial
        return nx.barabasi_albert_graph(
            self.n_max, self.k, seed=_nx_seed(self.seed), initial_graph=initial
        )


class RegularRingLatticeGenerator(GraphGenerator):
    """
    Ring of n nodes, each connected to its ``neighbors`` nearest nodes on
    either side.
    """

    def __init__(self, n: int, neighbors: int):
        if neighbors < 0 or 2 * neighbors >= max(n, 1):
            raise ValueError(f"Need 0 <= 2 * neighbors < n, got n={n}, neighbors={neighbors}")
        self.n = int(n)
        self.neighbors = int(neighbors)

    def generate(self) -> nx.Graph:
        logger.info(f"Generating ring lattice: n={self.n}, neighbors={self.neighbors}")
        return nx.circulant_graph(self.n, range(1, self.neighbors + 1))


class WattsStrogatzGenerator(GraphGenerator):
    """
    Small-world graph: a ring lattice whose edges are rewired with
    probability p. The edge count ``n * neighbors`` is preserved and
    p = 0 returns the lattice itself.
    """

    def __init__(self, n: int, neighbors: int, p: float, seed: Seed = None):
        if neighbors < 0 or 2 * neighbors >= max(n, 1):
            raise ValueError(f"Need 0 <= 2 * neighbors < n, got n={n}, neighbors={neighbors}")
        self.n = int(n)
        self.neighbors = int(neighbors)
        self.p = _check_probability("Rewiring probability", p)
        self.seed = seed

    def generate(self) -> nx.Graph:
        logger.info(f"Generating Watts-Strogatz graph: n={self.n}, neighbors={self.neighbors}, p={self.p}")
        return nx.watts_strogatz_graph(self.n, 2 * self.neighbors, self.p, seed=_nx_seed(self.seed))


class DorogovtsevMendesGenerator(GraphGenerator):
    """
    Static counterpart of
    :class:`~src.generators.dynamic_generators.DynamicDorogovtsevMendesGenerator`:
    a triangle grown by attaching each new node to both ends of a random
    edge, yielding ``2n - 3`` edges.
    """

    def __init__(self, n: int, seed: Seed = None):
        if n < 3:
            raise ValueError(f"Dorogovtsev-Mendes graphs need at least 3 nodes, got {n}")
        self.n = int(n)
        self.seed = seed

    def generate(self) -> nx.Graph:
        logger.info(f"Generating Dorogovtsev-Mendes graph: n={self.n}")
        source = DynamicDorogovtsevMendesGenerator(seed=self.seed)
        updater = GraphUpdater(nx.Graph())
        updater.update(source.generate(self.n - 3))
        return updater.G


class HavelHakimiGenerator(GraphGenerator):
    """
    Deterministic graph realizing a degree sequence.

    Repeatedly connects the node with the largest remaining degree to the
    nodes with the next largest remaining degrees.

    Parameters
    ----------
    sequence : Sequence[int]
        Degree of node i at position i
    ignore_if_unrealizable : bool, optional
        If True, a non-graphical sequence is realized as far as possible
        instead of raising (default: False)

    Raises
    ------
    ValueError
        If the sequence is not graphical and ``ignore_if_unrealizable`` is
        False
    """

    def __init__(self, sequence: Sequence[int], ignore_if_unrealizable: bool = False):
        self.sequence = _check_degree_sequence(sequence)
        self.ignore_if_unrealizable = ignore_if_unrealizable

    def is_realizable(self) -> bool:
        return nx.is_graphical(self.sequence, method="hh")

    def generate(self) -> nx.Graph:
        n = len(self.sequence)
        logger.info(f"Generating Havel-Hakimi graph: n={n}, volume={sum(self.sequence)}")
        if self.is_realizable():
            return nx.havel_hakimi_graph(self.sequence)
        if not self.ignore_if_unrealizable:
            raise ValueError("Degree sequence is not realizable")
        return self._truncated_realization()

    def _truncated_realization(self) -> nx.Graph:
        # Heap of (-remaining degree, node); popping yields the largest
        # remaining degree, ties broken by the smaller node id.
        G = nx.Graph()
        G.add_nodes_from(range(len(self.sequence)))
        heap = [(-d, u) for u, d in enumerate(self.sequence) if d > 0]
        heapq.heapify(heap)
        while heap:
            neg_degree, u = heapq.heappop(heap)
            wanted = -neg_degree
            targets = [heapq.heappop(heap) for _ in range(min(wanted, len(heap)))]
            if len(targets) < wanted:
                logger.debug(f"Node {u} keeps {wanted - len(targets)} unmatched stubs")
            for neg_remaining, v in targets:
                G.add_edge(u, v)
                if neg_remaining + 1 < 0:
                    heapq.heappush(heap, (neg_remaining + 1, v))
        return G


class ConfigurationModelGenerator(GraphGenerator):
    """
    Uniformly shuffled simple graph with exactly the given degrees.

    A Havel-Hakimi realization is randomized with degree-preserving
    double edge swaps, so no self-loops or parallel edges are introduced.

    Parameters
    ----------
    sequence : Sequence[int]
        Degree of node i at position i
    swaps_per_edge : int, optional
        Number of attempted swaps per edge (default: 10)
    seed : int or np.random.Generator, optional
        Random seed for reproducibility
    """

    def __init__(self, sequence: Sequence[int], swaps_per_edge: int = 10, seed: Seed = None):
        self.sequence = _check_degree_sequence(sequence)
        self.swaps_per_edge = int(swaps_per_edge)
        self.seed = seed

    def generate(self) -> nx.Graph:
        G = HavelHakimiGenerator(self.sequence).generate()
        m = G.number_of_edges()
        n_swaps = self.swaps_per_edge * m
        if m < 2 or G.number_of_nodes() < 4 or n_swaps == 0:
            return G
        try:
            nx.double_edge_swap(G, nswap=n_swaps, max_tries=100 * n_swaps, seed=_nx_seed(self.seed))
        except nx.NetworkXAlgorithmError as e:
            logger.warning(f"Edge swapping stopped early: {e}")
        return G


class StochasticBlockmodel(GraphGenerator):
    """
    Stochastic blockmodel with explicit node membership.

    Parameters
    ----------
    n : int
        Number of nodes
    n_blocks : int
        Number of blocks
    membership : Sequence[int]
        Block of node i at position i
    affinity : array-like of shape (n_blocks, n_blocks)
        Symmetric matrix of edge probabilities between blocks
    seed : int or np.random.Generator, optional
        Random seed for reproducibility

    Examples
    --------
    >>> sbm = StochasticBlockmodel(10, 2, [0] * 5 + [1] * 5, [[1.0, 0.0], [0.0, 1.0]])
    >>> sbm.generate().number_of_edges()
    20
    """

    def __init__(
        self,
        n: int,
        n_blocks: int,
        membership: Sequence[int],
        affinity: Sequence[Sequence[float]],
        seed: Seed = None,
    ):
        self.membership = np.asarray(membership, dtype=np.int64)
        self.affinity = np.asarray(affinity, dtype=np.float64)
        if len(self.membership) != n:
            raise ValueError(f"Membership has {len(self.membership)} entries, expected {n}")
        if self.affinity.shape != (n_blocks, n_blocks):
            raise ValueError(f"Affinity must be {n_blocks}x{n_blocks}, got shape {self.affinity.shape}")
        if not np.allclose(self.affinity, self.affinity.T):
            raise ValueError("Affinity matrix must be symmetric")
        if np.any((self.affinity < 0) | (self.affinity > 1)):
            raise ValueError("Affinities must lie in [0, 1]")
        if n and (self.membership.min() < 0 or self.membership.max() >= n_blocks):
            raise ValueError(f"Block ids must lie in [0, {n_blocks})")
        self.n = int(n)
        self.n_blocks = int(n_blocks)
        self.seed = seed

    def generate(self) -> nx.Graph:
        logger.info(f"Generating stochastic blockmodel: n={self.n}, blocks={self.n_blocks}")
        sizes = np.bincount(self.membership, minlength=self.n_blocks).tolist()
        nodelist = np.argsort(self.membership, kind="stable").tolist()

        blocks = nx.stochastic_block_model(
            sizes=sizes,
            p=self.affinity.tolist(),
            nodelist=nodelist,
            seed=_nx_seed(self.seed),
        )

        # Nodes in id order; block ids live in the membership list only
        G = nx.Graph()
        G.add_nodes_from(range(self.n))
        G.add_edges_from(blocks.edges())
        G.graph["membership"] = self.membership.tolist()
        logger.info(f"Generated SBM with {G.number_of_nodes()} nodes, {G.number_of_edges()} edges")
        return G


class ChungLuGenerator(GraphGenerator):
    """
    Chung-Lu random graph: nodes u and v are connected with probability
    ``min(1, w_u * w_v / sum(w))``, so node i has expected degree close to
    ``sequence[i]``. Self-loops are not generated.

    Examples
    --------
    >>> G = ChungLuGenerator([3, 2, 2, 1], seed=1).generate()
    >>> G.number_of_nodes()
    4
    """

    def __init__(self, sequence: Sequence[int], seed: Seed = None):
        self.sequence = _check_degree_sequence(sequence)
        self.seed = seed

    def generate(self) -> nx.Graph:
        logger.info(
            f"Generating Chung-Lu graph: n={len(self.sequence)}, "
            f"expected volume={sum(self.sequence)}"
        )
        G = nx.expected_degree_graph(self.sequence, seed=_nx_seed(self.seed), selfloops=False)
        logger.info(f"Generated Chung-Lu graph with {G.number_of_edges()} edges")
        return G


class RmatGenerator(GraphGenerator):
    """
    Recursive matrix (R-MAT) graph on ``2**scale`` nodes.

    Each of ``edge_factor * 2**scale`` edge samples descends ``scale``
    levels of the adjacency matrix, picking one of the four quadrants with
    probabilities (a, b, c, d). Self-loops and repeated samples are
    dropped, so the result has at most ``edge_factor * 2**scale`` edges.

    Parameters
    ----------
    scale : int
        Base-2 logarithm of the number of nodes
    edge_factor : int
        Edge samples per node
    a, b, c, d : float
        Quadrant probabilities, summing to 1
    seed : int or np.random.Generator, optional
        Random seed for reproducibility
    """

    def __init__(
        self,
        scale: int,
        edge_factor: int,
        a: float,
        b: float,
        c: float,
        d: float,
        seed: Seed = None,
    ):
        if scale < 0 or edge_factor < 0:
            raise ValueError(f"Need scale >= 0 and edge_factor >= 0, got {scale}, {edge_factor}")
        probabilities = [_check_probability("Quadrant probability", q) for q in (a, b, c, d)]
        if not np.isclose(sum(probabilities), 1.0):
            raise ValueError(f"Quadrant probabilities must sum to 1, got {sum(probabilities)}")
        self.scale = int(scale)
        self.edge_factor = int(edge_factor)
        self.probabilities = np.asarray(probabilities) / sum(probabilities)
        self.seed = seed

    def generate(self) -> nx.Graph:
        n = 1 << self.scale
        n_samples = self.edge_factor * n
        logger.info(f"Generating R-MAT graph: n={n}, samples={n_samples}")
        rng = np.random.default_rng(self.seed)

        rows = np.zeros(n_samples, dtype=np.int64)
        cols = np.zeros(n_samples, dtype=np.int64)
        for level in range(self.scale):
            quadrant = rng.choice(4, size=n_samples, p=self.probabilities)
            bit = 1 << (self.scale - 1 - level)
            rows += bit * (quadrant >= 2)
            cols += bit * (quadrant % 2)

        keep = rows != cols
        G = nx.Graph()
        G.add_nodes_from(range(n))
        G.add_edges_from(zip(rows[keep].tolist(), cols[keep].tolist()))
        logger.info(f"Generated R-MAT graph with {G.number_of_edges()} edges")
        return G
