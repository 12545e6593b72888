"""
Dynamic Module
==============

Graph-event protocol shared by all dynamic generators.

Submodules
----------
graph_event
    Immutable, ordered event records
graph_updater
    Replays event streams into a networkx graph with consistency checks
"""

from .graph_event import (
    NO_NODE,
    GraphEvent,
    GraphEventType,
    count_time_steps,
    format_stream,
    split_rounds,
)
from .graph_updater import GraphConsistencyError, GraphUpdater, check_consistency

__all__ = [
    "GraphEvent",
    "GraphEventType",
    "NO_NODE",
    "count_time_steps",
    "format_stream",
    "split_rounds",
    "GraphUpdater",
    "GraphConsistencyError",
    "check_consistency",
]
