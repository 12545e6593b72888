"""
Metrics Module
==============

This module provides statistics for checking generated graphs against
their model parameters.

Submodules
----------
graph_statistics
    Degree distribution statistics and edge-count tolerance checks
"""

from .graph_statistics import (
    compute_degree_distribution_stats,
    edge_count_deviation,
    edge_count_within_tolerance,
)

__all__ = [
    "compute_degree_distribution_stats",
    "edge_count_deviation",
    "edge_count_within_tolerance",
]
