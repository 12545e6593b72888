"""
Hyperbolic Random Graphs
========================

Generators for random hyperbolic graphs in the threshold model, built on
a polar quadtree over the Poincaré disk, plus a dynamic variant that
emits graph event streams.

Modules
-------
geometry
    Poincaré disk coordinates, distances and point sampling
index
    Polar quadtree for hyperbolic range queries
generators
    Static and dynamic hyperbolic generators and baseline models
dynamic
    Graph events and the updater that replays them
metrics
    Degree distribution statistics and edge-count checks
validation
    Brute-force and replay consistency checks
"""

__version__ = "0.1.0"

from . import geometry
from . import index
from . import dynamic
from . import generators
from . import metrics
from . import validation

__all__ = [
    "geometry",
    "index",
    "dynamic",
    "generators",
    "metrics",
    "validation",
    "__version__",
]
