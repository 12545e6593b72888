"""
Experiments Module
==================

This module provides command-line runners for the generators.

Scripts
-------
run_static_generation
    Generate a static hyperbolic graph and check its edge count
run_dynamic_generation
    Run the dynamic hyperbolic generator and replay its events
"""

__all__ = [
    "run_static_generation",
    "run_dynamic_generation",
]
