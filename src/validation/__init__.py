"""
Validation Module
=================

This module provides ground-truth checks for the generators.

Submodules
----------
consistency
    Brute-force edge sets, event stream comparison and replay checks
"""

from .consistency import (
    brute_force_edges,
    compare_event_streams,
    event_streams_equal,
    replay_events,
    replay_matches_static,
)

__all__ = [
    "brute_force_edges",
    "compare_event_streams",
    "event_streams_equal",
    "replay_events",
    "replay_matches_static",
]
