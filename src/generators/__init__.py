"""
Generators Module
=================

This module provides the hyperbolic random graph generators and a set of
classic baseline models.

Submodules
----------
base
    GraphGenerator and DynamicGraphSource interfaces
hyperbolic
    Static threshold hyperbolic generator and unit-disk edge search
dynamic_hyperbolic
    Hyperbolic generator with moving points and a growing threshold
base_generators
    Erdos-Renyi, Barabasi-Albert, Chung-Lu, R-MAT and other static models
dynamic_generators
    Growth models emitting event streams
"""

from .base import DynamicGraphSource, GraphGenerator
from .hyperbolic import HyperbolicGenerator, edges_to_graph, unit_disk_edges
from .dynamic_hyperbolic import DynamicHyperbolicGenerator
from .base_generators import (
    BarabasiAlbertGenerator,
    ChungLuGenerator,
    ConfigurationModelGenerator,
    DorogovtsevMendesGenerator,
    ErdosRenyiGenerator,
    HavelHakimiGenerator,
    RegularRingLatticeGenerator,
    RmatGenerator,
    StochasticBlockmodel,
    WattsStrogatzGenerator,
)
from .dynamic_generators import (
    DynamicBarabasiAlbertGenerator,
    DynamicDorogovtsevMendesGenerator,
    DynamicForestFireGenerator,
    DynamicPathGenerator,
)

__all__ = [
    # Interfaces
    "GraphGenerator",
    "DynamicGraphSource",
    # Hyperbolic
    "HyperbolicGenerator",
    "DynamicHyperbolicGenerator",
    "unit_disk_edges",
    "edges_to_graph",
    # Static baselines
    "ErdosRenyiGenerator",
    "BarabasiAlbertGenerator",
    "WattsStrogatzGenerator",
    "RegularRingLatticeGenerator",
    "DorogovtsevMendesGenerator",
    "HavelHakimiGenerator",
    "ConfigurationModelGenerator",
    "StochasticBlockmodel",
    "ChungLuGenerator",
    "RmatGenerator",
    # Dynamic baselines
    "DynamicBarabasiAlbertGenerator",
    "DynamicDorogovtsevMendesGenerator",
    "DynamicForestFireGenerator",
    "DynamicPathGenerator",
]
