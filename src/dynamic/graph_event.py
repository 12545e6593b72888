"""
Graph Event Module
==================

Typed records describing graph mutations. Dynamic generators never hold
a graph; they emit ordered lists of events that a consumer (see
``graph_updater``) replays against a mutable graph.

Events are immutable and totally ordered by (type, u, v), so two
streams can be compared as multisets by sorting them.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, List

NO_NODE = -1


class GraphEventType(IntEnum):
    """Kinds of graph mutation."""

    NODE_ADDITION = 0
    EDGE_ADDITION = 1
    EDGE_REMOVAL = 2
    TIME_STEP = 3


@dataclass(frozen=True, order=True)
class GraphEvent:
    """
    One graph mutation.

    Attributes
    ----------
    type : GraphEventType
        Kind of mutation
    u : int
        Node for NODE_ADDITION, first endpoint for edge events
    v : int
        Second endpoint for edge events
    """

    type: GraphEventType
    u: int = NO_NODE
    v: int = NO_NODE

    @classmethod
    def node_addition(cls, u: int) -> "GraphEvent":
        return cls(GraphEventType.NODE_ADDITION, int(u))

    @classmethod
    def edge_addition(cls, u: int, v: int) -> "GraphEvent":
        return cls(GraphEventType.EDGE_ADDITION, int(u), int(v))

    @classmethod
    def edge_removal(cls, u: int, v: int) -> "GraphEvent":
        return cls(GraphEventType.EDGE_REMOVAL, int(u), int(v))

    @classmethod
    def time_step(cls) -> "GraphEvent":
        return cls(GraphEventType.TIME_STEP)

    @property
    def is_edge_event(self) -> bool:
        return self.type in (GraphEventType.EDGE_ADDITION, GraphEventType.EDGE_REMOVAL)

    def __str__(self) -> str:
        if self.type == GraphEventType.NODE_ADDITION:
            return f"+n({self.u})"
        if self.type == GraphEventType.EDGE_ADDITION:
            return f"+e({self.u},{self.v})"
        if self.type == GraphEventType.EDGE_REMOVAL:
            return f"-e({self.u},{self.v})"
        return "st"


def count_time_steps(events: Iterable[GraphEvent]) -> int:
    """Number of TIME_STEP events in a stream."""
    return sum(1 for event in events if event.type == GraphEventType.TIME_STEP)


def format_stream(events: Iterable[GraphEvent]) -> str:
    """Compact one-line representation of a stream, e.g. ``+e(0,1) st``."""
    return " ".join(str(event) for event in events)


def split_rounds(events: Iterable[GraphEvent]) -> List[List[GraphEvent]]:
    """
    Split a stream into rounds, each ending with its TIME_STEP.

    Trailing events without a closing TIME_STEP form a final round.
    """
    rounds: List[List[GraphEvent]] = []
    current: List[GraphEvent] = []
    for event in events:
        current.append(event)
        if event.type == GraphEventType.TIME_STEP:
            rounds.append(current)
            current = []
    if current:
        rounds.append(current)
    return rounds
