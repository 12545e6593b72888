"""
Graph Updater Module
====================

Consumer side of the event protocol: replays a stream of
:class:`~src.dynamic.graph_event.GraphEvent` against a ``networkx.Graph``.

Events that contradict the graph state (adding an existing edge,
removing an absent one, touching a missing node, adding an existing
node) are consistency violations and raise
:class:`GraphConsistencyError` instead of being ignored.
"""

import logging
from typing import Iterable, Optional

import networkx as nx

from .graph_event import GraphEvent, GraphEventType

logger = logging.getLogger(__name__)


class GraphConsistencyError(RuntimeError):
    """An event stream contradicts the state of the graph it is applied to."""


class GraphUpdater:
    """
    Apply event streams to a mutable graph in stream order.

    Parameters
    ----------
    G : nx.Graph
        Graph to update in place

    Attributes
    ----------
    time : int
        Number of TIME_STEP events applied so far

    Examples
    --------
    >>> G = nx.Graph()
    >>> updater = GraphUpdater(G)
    >>> updater.update([GraphEvent.node_addition(0), GraphEvent.node_addition(1),
    ...                 GraphEvent.edge_addition(0, 1), GraphEvent.time_step()])
    >>> G.number_of_edges(), updater.time
    (1, 1)
    """

    def __init__(self, G: nx.Graph):
        self.G = G
        self.time = 0

    def _require_nodes(self, event: GraphEvent) -> None:
        for node in (event.u, event.v):
            if node not in self.G:
                raise GraphConsistencyError(f"{event} refers to missing node {node}")

    def apply(self, event: GraphEvent) -> None:
        """Apply a single event."""
        G = self.G
        if event.type == GraphEventType.NODE_ADDITION:
            if event.u in G:
                raise GraphConsistencyError(f"{event}: node {event.u} already exists")
            G.add_node(event.u)
        elif event.type == GraphEventType.EDGE_ADDITION:
            self._require_nodes(event)
            if event.u == event.v:
                raise GraphConsistencyError(f"{event}: self-loops are not allowed")
            if G.has_edge(event.u, event.v):
                raise GraphConsistencyError(f"{event}: edge already present")
            G.add_edge(event.u, event.v)
        elif event.type == GraphEventType.EDGE_REMOVAL:
            self._require_nodes(event)
            if not G.has_edge(event.u, event.v):
                raise GraphConsistencyError(f"{event}: edge not present")
            G.remove_edge(event.u, event.v)
        elif event.type == GraphEventType.TIME_STEP:
            self.time += 1
        else:
            raise GraphConsistencyError(f"Unknown event type: {event.type}")

    def update(self, stream: Iterable[GraphEvent]) -> None:
        """Apply all events of a stream in order."""
        applied = 0
        for event in stream:
            self.apply(event)
            applied += 1
        logger.debug(
            f"Applied {applied} events; graph has {self.G.number_of_nodes()} nodes, "
            f"{self.G.number_of_edges()} edges at time {self.time}"
        )


def check_consistency(G: nx.Graph, n: Optional[int] = None) -> bool:
    """
    Check structural consistency of a simple undirected graph.

    Verifies symmetric adjacency, absence of self-loops and, if ``n`` is
    given, that the nodes are exactly 0..n-1.

    Parameters
    ----------
    G : nx.Graph
        Graph to check
    n : int, optional
        Expected number of nodes with contiguous ids

    Returns
    -------
    bool
        True if all checks pass
    """
    if G.is_directed() or G.is_multigraph():
        return False
    if nx.number_of_selfloops(G) > 0:
        return False
    for u, neighbors in G.adj.items():
        for v in neighbors:
            if u not in G.adj[v]:
                return False
    if n is not None and set(G.nodes()) != set(range(n)):
        return False
    return True
