"""
Generator Interfaces
====================

Every static model implements :class:`GraphGenerator`, every evolving
model implements :class:`DynamicGraphSource`. Implementations are
independent of each other; the interfaces carry no shared state.
"""

from abc import ABC, abstractmethod
from typing import List

import networkx as nx

from ..dynamic.graph_event import GraphEvent


class GraphGenerator(ABC):
    """A model that produces one graph per ``generate`` call."""

    @abstractmethod
    def generate(self) -> nx.Graph:
        """Generate a graph with nodes 0..n-1."""


class DynamicGraphSource(ABC):
    """
    A model that produces graph mutations as event streams.

    ``initialize`` returns the events that build the starting graph from
    an empty one; ``generate`` advances the model by ``n_steps`` rounds,
    each closed by exactly one TIME_STEP event.
    """

    @abstractmethod
    def initialize(self) -> List[GraphEvent]:
        """Events that build the initial graph."""

    @abstractmethod
    def generate(self, n_steps: int = 1) -> List[GraphEvent]:
        """Events of the next ``n_steps`` rounds."""


def _check_steps(n_steps: int) -> int:
    if n_steps < 0:
        raise ValueError(f"Number of steps must be non-negative, got {n_steps}")
    return int(n_steps)
