"""
Geometry Module
===============

Pure geometric kernel for hyperbolic random graphs.

Submodules
----------
hyperbolic_space
    Radius conversions, distances, point sampling and degree/radius relations
"""

from .hyperbolic_space import (
    TWO_PI,
    alpha_from_exponent,
    approximate_average_degree,
    cartesian_to_polar,
    connection_probability,
    euclidean_radius_to_hyperbolic,
    expected_average_degree,
    expected_number_of_edges,
    get_euclidean_circle,
    hyperbolic_area_to_radius,
    hyperbolic_distance,
    hyperbolic_radius_to_euclidean,
    native_distance,
    poincare_metric,
    polar_to_cartesian,
    radius_to_hyperbolic_area,
    sample_points,
    sample_points_in_radius,
    target_radius,
    to_cartesian_points,
)

__all__ = [
    "TWO_PI",
    # Conversions
    "hyperbolic_area_to_radius",
    "radius_to_hyperbolic_area",
    "hyperbolic_radius_to_euclidean",
    "euclidean_radius_to_hyperbolic",
    "polar_to_cartesian",
    "cartesian_to_polar",
    "to_cartesian_points",
    # Distances
    "native_distance",
    "poincare_metric",
    "hyperbolic_distance",
    "get_euclidean_circle",
    # Sampling
    "alpha_from_exponent",
    "sample_points",
    "sample_points_in_radius",
    # Degree / radius relations
    "connection_probability",
    "approximate_average_degree",
    "expected_average_degree",
    "target_radius",
    "expected_number_of_edges",
]
