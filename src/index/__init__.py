"""
Index Module
============

Spatial index over the Poincaré disk.

Submodules
----------
quad_node
    Arena records for quadtree regions
quadtree
    Polar quadtree with range queries, bulk construction and reindexing
"""

from .quad_node import QuadNode, radial_split
from .quadtree import Quadtree

__all__ = [
    "Quadtree",
    "QuadNode",
    "radial_split",
]
