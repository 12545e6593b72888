"""
Dynamic Generators Module
=========================

Small growth models that emit graph event streams. Each round adds one
node together with its edges and is closed by a TIME_STEP event.
"""

import logging
from collections import deque
from typing import List, Optional, Set, Tuple, Union

import numpy as np

from ..dynamic.graph_event import GraphEvent
from .base import DynamicGraphSource, _check_steps

logger = logging.getLogger(__name__)

Seed = Optional[Union[int, np.random.Generator]]


class DynamicBarabasiAlbertGenerator(DynamicGraphSource):
    """
    Preferential attachment on a growing graph.

    The initial graph is a path of ``k`` nodes. Every round adds one node
    connected to ``k`` distinct existing nodes chosen with probability
    proportional to their degree.

    Parameters
    ----------
    k : int
        Edges per new node
    seed : int or np.random.Generator, optional
        Random source

    Notes
    -----
    If ``generate`` is called before ``initialize``, the initial path
    events are prepended to the first stream.
    """

    def __init__(self, k: int, seed: Seed = None):
        if k < 1:
            raise ValueError(f"Attachment count k must be at least 1, got {k}")
        self.k = int(k)
        self._rng = np.random.default_rng(seed)
        self.n = 0
        # Each edge contributes both endpoints, so sampling uniformly from
        # this list is sampling proportional to degree.
        self._endpoints: List[int] = []
        self._initialized = False

    def initialize(self) -> List[GraphEvent]:
        if self._initialized:
            raise ValueError("Generator is already initialized")
        self._initialized = True
        events = [GraphEvent.node_addition(u) for u in range(self.k)]
        for u in range(1, self.k):
            events.append(GraphEvent.edge_addition(u - 1, u))
            self._endpoints.extend((u - 1, u))
        self.n = self.k
        events.append(GraphEvent.time_step())
        logger.debug(f"Initialized Barabasi-Albert path with {self.k} nodes")
        return events

    def _targets(self) -> List[int]:
        targets: Set[int] = set()
        while len(targets) < self.k:
            if self._endpoints:
                targets.add(self._endpoints[self._rng.integers(len(self._endpoints))])
            else:
                targets.add(int(self._rng.integers(self.n)))
        return sorted(targets)

    def generate(self, n_steps: int = 1) -> List[GraphEvent]:
        n_steps = _check_steps(n_steps)
        events = [] if self._initialized else self.initialize()
        for _ in range(n_steps):
            u = self.n
            events.append(GraphEvent.node_addition(u))
            for v in self._targets():
                events.append(GraphEvent.edge_addition(v, u))
                self._endpoints.extend((v, u))
            self.n += 1
            events.append(GraphEvent.time_step())
        return events


class DynamicDorogovtsevMendesGenerator(DynamicGraphSource):
    """
    Dorogovtsev-Mendes growth: each new node is attached to both endpoints
    of a uniformly chosen edge.

    The first round creates the triangle 0-1-2 before adding its node, so
    ``generate(n - 3)`` yields n nodes and ``2n - 3`` edges.
    """

    def __init__(self, seed: Seed = None):
        self._rng = np.random.default_rng(seed)
        self._edges: List[Tuple[int, int]] = []
        self.n = 0

    def initialize(self) -> List[GraphEvent]:
        return []

    def _triangle(self) -> List[GraphEvent]:
        events = [GraphEvent.node_addition(u) for u in range(3)]
        for u, v in ((0, 1), (0, 2), (1, 2)):
            events.append(GraphEvent.edge_addition(u, v))
            self._edges.append((u, v))
        self.n = 3
        return events

    def generate(self, n_steps: int = 1) -> List[GraphEvent]:
        events: List[GraphEvent] = []
        for _ in range(_check_steps(n_steps)):
            if self.n == 0:
                events.extend(self._triangle())
            u = self.n
            a, b = self._edges[self._rng.integers(len(self._edges))]
            events.append(GraphEvent.node_addition(u))
            events.append(GraphEvent.edge_addition(a, u))
            events.append(GraphEvent.edge_addition(b, u))
            self._edges.extend(((a, u), (b, u)))
            self.n += 1
            events.append(GraphEvent.time_step())
        return events


class DynamicPathGenerator(DynamicGraphSource):
    """Grows a path: each round adds a node linked to its predecessor."""

    def __init__(self):
        self.n = 0

    def initialize(self) -> List[GraphEvent]:
        return []

    def generate(self, n_steps: int = 1) -> List[GraphEvent]:
        events: List[GraphEvent] = []
        for _ in range(_check_steps(n_steps)):
            u = self.n
            events.append(GraphEvent.node_addition(u))
            if u > 0:
                events.append(GraphEvent.edge_addition(u - 1, u))
            self.n += 1
            events.append(GraphEvent.time_step())
        return events


class DynamicForestFireGenerator(DynamicGraphSource):
    """
    Forest fire growth.

    Each round adds one node that picks a uniformly random ambassador
    among the existing nodes and "burns" outward from it: every burning
    node ignites a geometrically distributed number of its not yet burnt
    neighbors, with mean ``p / (1 - p)``. The new node links to every
    burnt node. With p = 0 the result is a random recursive tree; with
    p = 1 every round burns the whole (connected) graph, giving a clique.

    Parameters
    ----------
    p : float
        Forward burning probability in [0, 1]
    seed : int or np.random.Generator, optional
        Random source
    """

    def __init__(self, p: float, seed: Seed = None):
        if not 0 <= p <= 1:
            raise ValueError(f"Burning probability must lie in [0, 1], got {p}")
        self.p = float(p)
        self._rng = np.random.default_rng(seed)
        self._adjacency: List[Set[int]] = []

    @property
    def n(self) -> int:
        return len(self._adjacency)

    def initialize(self) -> List[GraphEvent]:
        return []

    def _spread(self, unburnt: List[int]) -> List[int]:
        if self.p >= 1.0:
            return unburnt
        count = min(len(unburnt), int(self._rng.geometric(1.0 - self.p)) - 1)
        if count == 0:
            return []
        return self._rng.choice(unburnt, size=count, replace=False).tolist()

    def _burn(self) -> List[int]:
        ambassador = int(self._rng.integers(self.n))
        burnt = {ambassador}
        fire = deque([ambassador])
        while fire:
            x = fire.popleft()
            unburnt = sorted(self._adjacency[x] - burnt)
            if not unburnt:
                continue
            for v in self._spread(unburnt):
                burnt.add(v)
                fire.append(v)
        return sorted(burnt)

    def generate(self, n_steps: int = 1) -> List[GraphEvent]:
        events: List[GraphEvent] = []
        for _ in range(_check_steps(n_steps)):
            u = self.n
            targets = self._burn() if u > 0 else []
            events.append(GraphEvent.node_addition(u))
            self._adjacency.append(set())
            for v in targets:
                events.append(GraphEvent.edge_addition(v, u))
                self._adjacency[v].add(u)
                self._adjacency[u].add(v)
            events.append(GraphEvent.time_step())
        logger.debug(f"Forest fire graph has {self.n} nodes")
        return events
