"""
Hyperbolic Space Module
=======================

This module provides the geometric kernel for hyperbolic random graphs:
radius conversions between the native hyperbolic representation and
the Poincaré disk, numerically safe distance functions, point sampling,
and the relation between disk radius and expected average degree.

All functions are pure. Randomness enters only through an explicitly
passed seed or ``np.random.Generator``.

Coordinates
-----------
Points are stored as (angle, radius) pairs where the angle lies in
[0, 2π) and the radius is the *Euclidean* radius inside the Poincaré
disk, i.e. ``tanh(h / 2)`` for a hyperbolic radius ``h``. Distance
thresholds are always given in hyperbolic units.

References
----------
.. [1] Krioukov, D. et al. Hyperbolic geometry of complex networks.
       Phys. Rev. E 82, 036106 (2010).
.. [2] von Looz, M., Meyerhenke, H. & Prutkin, R. Generating random
       hyperbolic graphs in subquadratic time. ISAAC 2015.
"""

import logging
import math
from typing import List, Optional, Tuple, Union

import numpy as np
from numpy.typing import NDArray
from scipy import optimize

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi

ArrayLike = Union[float, NDArray[np.float64]]

# Gauss-Legendre order used for the expected-degree integral
_QUADRATURE_ORDER = 400


def _as_result(value: NDArray[np.float64]) -> ArrayLike:
    """Return a Python float for 0-d results and the array otherwise."""
    if np.ndim(value) == 0:
        return float(value)
    return value


def hyperbolic_area_to_radius(area: float) -> float:
    """
    Radius of a hyperbolic disk with the given area (curvature -1).

    Parameters
    ----------
    area : float
        Disk area; for random graphs this is usually the node count n

    Returns
    -------
    float
        R = acosh(area / 2π + 1)

    Examples
    --------
    >>> hyperbolic_area_to_radius(0.0)
    0.0
    """
    if area < 0 or math.isnan(area):
        raise ValueError(f"Area must be non-negative, got {area}")
    return math.acosh(area / TWO_PI + 1.0)


def radius_to_hyperbolic_area(radius: float) -> float:
    """Area of a hyperbolic disk of the given radius."""
    return TWO_PI * (math.cosh(radius) - 1.0)


def hyperbolic_radius_to_euclidean(hyperbolic_radius: ArrayLike) -> ArrayLike:
    """
    Convert a native hyperbolic radius to a Poincaré-disk radius.

    Uses ``tanh(h / 2)``, which equals ``sqrt((cosh h - 1) / (cosh h + 1))``
    without the cancellation of the latter form for large h.
    """
    h = np.asarray(hyperbolic_radius, dtype=np.float64)
    if np.any(h < 0) or np.any(np.isnan(h)):
        raise ValueError("Hyperbolic radius must be non-negative")
    return _as_result(np.tanh(h / 2.0))


def euclidean_radius_to_hyperbolic(euclidean_radius: ArrayLike) -> ArrayLike:
    """
    Convert a Poincaré-disk radius to the native hyperbolic radius.

    Raises
    ------
    ValueError
        If the radius is outside [0, 1)
    """
    r = np.asarray(euclidean_radius, dtype=np.float64)
    if np.any(r < 0) or np.any(r >= 1) or np.any(np.isnan(r)):
        raise ValueError("Euclidean radius must lie in [0, 1)")
    return _as_result(2.0 * np.arctanh(r))


def polar_to_cartesian(angle: ArrayLike, radius: ArrayLike) -> Tuple[ArrayLike, ArrayLike]:
    """Convert polar coordinates to cartesian (x, y)."""
    angle = np.asarray(angle, dtype=np.float64)
    radius = np.asarray(radius, dtype=np.float64)
    return _as_result(radius * np.cos(angle)), _as_result(radius * np.sin(angle))


def cartesian_to_polar(x: ArrayLike, y: ArrayLike) -> Tuple[ArrayLike, ArrayLike]:
    """Convert cartesian coordinates to polar (angle in [0, 2π), radius)."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    angle = np.mod(np.arctan2(y, x), TWO_PI)
    # arctan2 of a tiny negative y can round up to exactly 2π
    angle = np.where(angle >= TWO_PI, 0.0, angle)
    return _as_result(angle), _as_result(np.hypot(x, y))


def native_distance(
    angle_a: ArrayLike,
    radius_a: ArrayLike,
    angle_b: ArrayLike,
    radius_b: ArrayLike,
) -> ArrayLike:
    """
    Hyperbolic distance between points in native polar coordinates.

    Uses the hyperbolic law of cosines::

        cosh d = cosh r_a cosh r_b - sinh r_a sinh r_b cos(φ_a - φ_b)

    The right-hand side is clamped to [1, inf) before taking acosh, so
    rounding that overshoots the valid domain yields distance 0 instead
    of NaN.

    Parameters
    ----------
    angle_a, radius_a : float or NDArray
        First point (radius in hyperbolic units)
    angle_b, radius_b : float or NDArray
        Second point; arrays broadcast against the first point

    Returns
    -------
    float or NDArray
        Hyperbolic distance
    """
    angle_a = np.asarray(angle_a, dtype=np.float64)
    radius_a = np.asarray(radius_a, dtype=np.float64)
    angle_b = np.asarray(angle_b, dtype=np.float64)
    radius_b = np.asarray(radius_b, dtype=np.float64)

    # cosh(a)cosh(b) - sinh(a)sinh(b)cos(x) rewritten without cancellation
    half_sin = np.sin((angle_a - angle_b) / 2.0)
    cosh_arg = np.cosh(radius_a - radius_b) + 2.0 * np.sinh(radius_a) * np.sinh(radius_b) * half_sin * half_sin
    cosh_arg = np.maximum(cosh_arg, 1.0)
    return _as_result(np.arccosh(cosh_arg))


def poincare_metric(
    angle_a: ArrayLike,
    radius_a: ArrayLike,
    angle_b: ArrayLike,
    radius_b: ArrayLike,
) -> ArrayLike:
    """
    Hyperbolic distance between two points of the Poincaré disk.

    Computes ``acosh(1 + 2|a - b|^2 / ((1 - |a|^2)(1 - |b|^2)))`` with the
    squared Euclidean separation taken from the law of cosines. The
    separation is clamped at 0 and the acosh argument at 1, so the result
    is never NaN for radii in [0, 1). A point on the unit circle is at
    infinite distance from every other point.

    Parameters
    ----------
    angle_a, radius_a : float or NDArray
        First point (Euclidean radius in the Poincaré disk)
    angle_b, radius_b : float or NDArray
        Second point; arrays broadcast against the first point

    Returns
    -------
    float or NDArray
        Hyperbolic distance

    Examples
    --------
    >>> poincare_metric(0.0, 0.0, 1.0, 0.0)
    0.0
    """
    angle_a = np.asarray(angle_a, dtype=np.float64)
    radius_a = np.asarray(radius_a, dtype=np.float64)
    angle_b = np.asarray(angle_b, dtype=np.float64)
    radius_b = np.asarray(radius_b, dtype=np.float64)

    # law of cosines as (r_a - r_b)^2 + 4 r_a r_b sin^2(dφ/2); stable near the boundary
    half_sin = np.sin((angle_a - angle_b) / 2.0)
    radial_gap = radius_a - radius_b
    delta_sq = radial_gap * radial_gap + 4.0 * radius_a * radius_b * half_sin * half_sin
    delta_sq = np.maximum(delta_sq, 0.0)
    # grouped so that swapping the two points gives bit-identical results
    denominator = ((1.0 - radius_a) * (1.0 + radius_a)) * ((1.0 - radius_b) * (1.0 + radius_b))

    with np.errstate(divide="ignore", invalid="ignore"):
        cosh_arg = 1.0 + 2.0 * delta_sq / denominator
    # 0/0 happens only for two coincident boundary points
    cosh_arg = np.where(np.isnan(cosh_arg), np.inf, cosh_arg)
    cosh_arg = np.maximum(cosh_arg, 1.0)
    return _as_result(np.arccosh(cosh_arg))


# The Poincaré disk is the coordinate convention used across the package
hyperbolic_distance = poincare_metric


def get_euclidean_circle(
    angle: float,
    radius: float,
    hyperbolic_radius: float,
) -> Tuple[float, float, float]:
    """
    Euclidean circle matching a hyperbolic circle in the Poincaré disk.

    Hyperbolic circles of the Poincaré model are Euclidean circles, but
    with a center shifted towards the origin.

    Parameters
    ----------
    angle : float
        Angle of the hyperbolic center
    radius : float
        Euclidean radius of the hyperbolic center, in [0, 1)
    hyperbolic_radius : float
        Radius of the hyperbolic circle

    Returns
    -------
    Tuple[float, float, float]
        (center_angle, center_radius, euclidean_radius)
    """
    if hyperbolic_radius > 700:
        # Threshold so large that the circle covers the whole disk
        return angle, 0.0, 2.0
    a = math.cosh(hyperbolic_radius) - 1.0
    b = (1.0 - radius) * (1.0 + radius)
    denominator = a * b + 2.0
    center_radius = 2.0 * radius / denominator
    # sqrt(center^2 - (2r^2 - ab) / (ab + 2)) simplified to avoid cancellation
    euclidean_radius = b * math.sinh(hyperbolic_radius) / denominator
    return angle, center_radius, euclidean_radius


def alpha_from_exponent(exponent: float) -> float:
    """
    Radial dispersion alpha producing degree power-law exponent gamma.

    gamma = 2 * alpha + 1, hence alpha = (gamma - 1) / 2.
    """
    if exponent <= 2:
        raise ValueError(f"Power-law exponent must be > 2, got {exponent}")
    return (exponent - 1.0) / 2.0


def sample_points_in_radius(
    n: int,
    alpha: float,
    radius: float,
    seed: Optional[Union[int, np.random.Generator]] = None,
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Sample n points in a hyperbolic disk of the given radius.

    Angles are uniform in [0, 2π). Hyperbolic radii follow the density
    ``alpha * sinh(alpha * r) / (cosh(alpha * R) - 1)``, drawn by inverse
    transform sampling, and are returned as Poincaré-disk radii strictly
    below ``hyperbolic_radius_to_euclidean(R)``.

    Parameters
    ----------
    n : int
        Number of points
    alpha : float
        Radial dispersion (> 0); smaller values place more points near
        the center and produce heavier degree tails
    radius : float
        Hyperbolic radius R of the disk
    seed : int or np.random.Generator, optional
        Random source

    Returns
    -------
    Tuple[NDArray, NDArray]
        (angles, radii)
    """
    if n < 0:
        raise ValueError(f"Number of points must be non-negative, got {n}")
    if alpha <= 0 or math.isnan(alpha):
        raise ValueError(f"Dispersion alpha must be positive, got {alpha}")
    if radius < 0 or math.isnan(radius):
        raise ValueError(f"Disk radius must be non-negative, got {radius}")

    rng = np.random.default_rng(seed)
    angles = np.mod(rng.uniform(0.0, TWO_PI, size=n), TWO_PI)
    max_cdf = math.cosh(alpha * radius)
    cdf_values = rng.uniform(1.0, max_cdf, size=n)
    hyperbolic_radii = np.arccosh(cdf_values) / alpha
    radii = np.tanh(hyperbolic_radii / 2.0)

    max_r = math.tanh(radius / 2.0)
    if max_r > 0:
        radii = np.minimum(radii, np.nextafter(max_r, 0.0))
    return angles, radii


def sample_points(
    n: int,
    alpha: float,
    stretch: float = 1.0,
    seed: Optional[Union[int, np.random.Generator]] = None,
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Sample n points in a disk of radius ``stretch * hyperbolic_area_to_radius(n)``.

    See :func:`sample_points_in_radius` for the distribution.
    """
    if stretch <= 0:
        raise ValueError(f"Stretch must be positive, got {stretch}")
    radius = stretch * hyperbolic_area_to_radius(n)
    return sample_points_in_radius(n, alpha, radius, seed=seed)


def approximate_average_degree(n: int, alpha: float, radius: float) -> float:
    """
    Closed-form asymptotic average degree of a threshold hyperbolic graph.

    k ≈ (2/π) ξ² n (e^{-R/2} + e^{-αR}(α R/2 (π/(4α²) - (π-1)/α + π - 2) - 1))
    with ξ = α / (α - 1/2). Only meaningful for alpha > 1/2.
    """
    if alpha <= 0.5:
        raise ValueError(f"Closed form requires alpha > 0.5, got {alpha}")
    xi = alpha / (alpha - 0.5)
    first_term = math.exp(-radius / 2.0)
    second_term = math.exp(-alpha * radius) * (
        alpha * (radius / 2.0) * ((math.pi / 4.0) / alpha ** 2 - (math.pi - 1.0) / alpha + (math.pi - 2.0))
        - 1.0
    )
    return (2.0 / math.pi) * xi * xi * n * (first_term + second_term)


def _quadrature_radii(alpha: float, radius: float) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Radii at Gauss-Legendre nodes of the radial CDF, with weights on [0, 1]."""
    nodes, weights = np.polynomial.legendre.leggauss(_QUADRATURE_ORDER)
    quantiles = (nodes + 1.0) / 2.0
    weights = weights / 2.0
    max_cdf = math.cosh(alpha * radius)
    radii = np.arccosh(1.0 + quantiles * (max_cdf - 1.0)) / alpha
    return radii, weights


def connection_probability(r_a: ArrayLike, r_b: ArrayLike, threshold: float) -> ArrayLike:
    """
    Probability that two points at hyperbolic radii r_a, r_b are connected.

    With uniform angles, the points are within ``threshold`` iff their
    angular difference is below θ_max, so the probability is θ_max / π.
    """
    r_a = np.asarray(r_a, dtype=np.float64)
    r_b = np.asarray(r_b, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        cos_theta = (np.cosh(r_a) * np.cosh(r_b) - math.cosh(threshold)) / (
            np.sinh(r_a) * np.sinh(r_b)
        )
    # A point at the origin is within threshold of everything up to it
    at_origin = (r_a == 0) | (r_b == 0)
    cos_theta = np.where(at_origin, np.where(r_a + r_b <= threshold, -1.0, 1.0), cos_theta)
    cos_theta = np.clip(cos_theta, -1.0, 1.0)
    return _as_result(np.arccos(cos_theta) / math.pi)


def expected_average_degree(n: int, alpha: float, radius: float, threshold: Optional[float] = None) -> float:
    """
    Expected average degree of a threshold hyperbolic random graph.

    Integrates the connection probability over both radial distributions
    with Gauss-Legendre quadrature in CDF space, where the integrand is
    bounded and the radial density cancels.

    Parameters
    ----------
    n : int
        Number of points
    alpha : float
        Radial dispersion
    radius : float
        Disk radius R
    threshold : float, optional
        Connection threshold (default: R)

    Returns
    -------
    float
        Expected degree of a node, (n - 1) * P(connected)
    """
    if n < 2:
        return 0.0
    if threshold is None:
        threshold = radius
    if alpha * radius > 700:
        raise ValueError(f"alpha * R = {alpha * radius:.1f} is too large for the degree integral")
    radii, weights = _quadrature_radii(alpha, radius)
    probabilities = connection_probability(radii[:, None], radii[None, :], threshold)
    return float((n - 1) * weights @ probabilities @ weights)


def target_radius(n: int, average_degree: float, alpha: float) -> float:
    """
    Disk radius R for which a threshold graph has the given average degree.

    The expected degree decreases monotonically in R; the root is
    bracketed around the asymptotic estimate and refined with Brent's
    method.

    Parameters
    ----------
    n : int
        Number of points
    average_degree : float
        Target average degree k, 0 < k < n - 1
    alpha : float
        Radial dispersion

    Returns
    -------
    float
        Disk radius R (threshold radius equals R)
    """
    if n < 2:
        raise ValueError(f"Need at least two points to target a degree, got n={n}")
    if not 0 < average_degree < n - 1:
        raise ValueError(f"Average degree must lie in (0, n - 1), got {average_degree}")

    def residual(radius: float) -> float:
        return expected_average_degree(n, alpha, radius) - average_degree

    xi = alpha / (alpha - 0.5) if alpha > 0.5 else 1.0
    estimate = 2.0 * math.log(max(n * 2.0 * xi * xi / (math.pi * average_degree), 2.0))
    lower, upper = estimate / 2.0, estimate * 2.0

    for _ in range(60):
        if residual(lower) > 0:
            break
        lower /= 2.0
    else:
        raise ValueError(f"Could not bracket radius for n={n}, k={average_degree}")
    for _ in range(60):
        if alpha * upper > 350 or residual(upper) < 0:
            break
        upper *= 2.0

    radius = optimize.brentq(residual, lower, upper, xtol=1e-10)
    logger.debug(f"Target radius for n={n}, k={average_degree}, alpha={alpha}: R={radius:.6f}")
    return float(radius)


def expected_number_of_edges(n: int, stretch: float) -> float:
    """
    Asymptotic edge count of a threshold graph with alpha = 1.

    R = stretch * hyperbolic_area_to_radius(n); m ≈ (8/π) n e^{-R/2} * n/2.
    """
    radius = stretch * hyperbolic_area_to_radius(n)
    return (8.0 / math.pi) * n * math.exp(-radius / 2.0) * (n / 2.0)


def to_cartesian_points(
    angles: NDArray[np.float64], radii: NDArray[np.float64]
) -> List[Tuple[float, float]]:
    """List of (x, y) tuples for the given polar coordinates."""
    xs, ys = polar_to_cartesian(np.asarray(angles), np.asarray(radii))
    return list(zip(np.atleast_1d(xs).tolist(), np.atleast_1d(ys).tolist()))
