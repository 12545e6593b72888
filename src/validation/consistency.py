"""
Consistency Validation Module
=============================

Ground-truth checks for the generators:

- ``brute_force_edges``: the unit-disk graph by testing all pairs
- ``compare_event_streams``: multiset comparison of two event streams
- ``replay_events`` / ``replay_matches_static``: replay a dynamic stream
  and compare the result with a freshly generated static graph
"""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import networkx as nx
import numpy as np

from ..dynamic.graph_event import GraphEvent
from ..dynamic.graph_updater import GraphUpdater
from ..geometry.hyperbolic_space import poincare_metric

logger = logging.getLogger(__name__)


def brute_force_edges(
    angles: Sequence[float],
    radii: Sequence[float],
    threshold: float,
) -> List[Tuple[int, int]]:
    """
    All pairs (u, v), u < v, within hyperbolic distance ``threshold``.

    Quadratic reference implementation using the same distance function
    as the quadtree. A zero threshold yields no edges.

    Examples
    --------
    >>> brute_force_edges([0.0, 0.1, 3.0], [0.5, 0.5, 0.5], 1.0)
    [(0, 1)]
    """
    angles = np.asarray(angles, dtype=np.float64)
    radii = np.asarray(radii, dtype=np.float64)
    if angles.shape != radii.shape:
        raise ValueError(f"Got {len(angles)} angles but {len(radii)} radii")
    if not threshold >= 0:
        raise ValueError(f"Threshold must be non-negative, got {threshold}")
    if threshold == 0:
        return []

    edges: List[Tuple[int, int]] = []
    for u in range(len(angles) - 1):
        distances = poincare_metric(angles[u], radii[u], angles[u + 1:], radii[u + 1:])
        neighbors = np.nonzero(distances <= threshold)[0] + u + 1
        edges.extend((u, int(v)) for v in neighbors)
    return edges


def compare_event_streams(
    a: Iterable[GraphEvent],
    b: Iterable[GraphEvent],
) -> Dict[str, Counter]:
    """
    Compare two event streams as multisets.

    Returns
    -------
    Dict[str, Counter]
        'only_in_a' and 'only_in_b': events with their surplus counts
    """
    count_a = Counter(a)
    count_b = Counter(b)
    return {"only_in_a": count_a - count_b, "only_in_b": count_b - count_a}


def event_streams_equal(a: Iterable[GraphEvent], b: Iterable[GraphEvent]) -> bool:
    """True if both streams contain the same events, ignoring order."""
    diff = compare_event_streams(a, b)
    return not diff["only_in_a"] and not diff["only_in_b"]


def replay_events(events: Iterable[GraphEvent], G: Optional[nx.Graph] = None) -> nx.Graph:
    """
    Apply events to ``G`` (or a new empty graph) and return it.

    Raises
    ------
    GraphConsistencyError
        If the stream contradicts the graph state
    """
    G = nx.Graph() if G is None else G
    GraphUpdater(G).update(events)
    return G


def replay_matches_static(
    G: nx.Graph,
    angles: Sequence[float],
    radii: Sequence[float],
    threshold: float,
) -> bool:
    """
    Check that ``G`` equals the threshold graph of the given points.

    Compares node sets and edge sets against :func:`brute_force_edges`;
    differences are logged at WARNING.
    """
    expected = set(brute_force_edges(angles, radii, threshold))
    actual = {(u, v) if u < v else (v, u) for u, v in G.edges()}
    if set(G.nodes()) != set(range(len(angles))):
        logger.warning(f"Node sets differ: graph has {G.number_of_nodes()}, expected {len(angles)}")
        return False
    if actual != expected:
        logger.warning(
            f"Edge sets differ: {len(actual - expected)} unexpected, "
            f"{len(expected - actual)} missing"
        )
        return False
    return True
