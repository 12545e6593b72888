"""
Configuration constants for the Hyperbolic Graph Generation Framework.
======================================================================

This module contains all configuration constants used throughout
the framework. Centralizing these ensures consistency and
reproducibility.
"""

# Random seed for all stochastic operations
RANDOM_SEED = 42

# Quadtree defaults
DEFAULT_LEAF_CAPACITY = 1000  # points per leaf before splitting
DEFAULT_BALANCE = 0.5  # share of hyperbolic content in the inner ring of a split
DEFAULT_N_WORKERS = 1

# Hyperbolic generator defaults
DEFAULT_N = 10000
DEFAULT_AVERAGE_DEGREE = 6.0
DEFAULT_EXPONENT = 3.0  # degree power-law exponent gamma, alpha = (gamma - 1) / 2
DEFAULT_STRETCH = 1.0

# Dynamic generator defaults
DEFAULT_INITIAL_FACTOR = 1.0
DEFAULT_MOVED_SHARE = 0.0
DEFAULT_FACTOR_GROWTH = 0.0
DEFAULT_MOVE_DISTANCE = 0.0

# Validation
EDGE_COUNT_TOLERANCE = 0.1  # relative deviation accepted for edge counts

# File paths
DEFAULT_RESULTS_DIR = "data/results"
