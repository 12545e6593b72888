#!/usr/bin/env python3
"""
Static Generation Runner
========================

Generates one threshold hyperbolic random graph, reports its degree
distribution and checks the edge count against ``n * k / 2``.

Usage:
    python run_static_generation.py [--preset PRESET] [--n N] [--k K] [--gamma GAMMA]
"""

import argparse
import logging
import sys
import time
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from experiments.common import optional_seed, resolve_params, save_results, setup_logging
from src.config import DEFAULT_RESULTS_DIR, EDGE_COUNT_TOLERANCE, RANDOM_SEED
from src.generators.hyperbolic import HyperbolicGenerator
from src.metrics.graph_statistics import (
    compute_degree_distribution_stats,
    edge_count_deviation,
    edge_count_within_tolerance,
)

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Generate a static hyperbolic random graph")
    parser.add_argument("--preset", type=str, default="default", help="Preset from generator_params.yaml")
    parser.add_argument("--n", type=int, default=None, help="Number of nodes")
    parser.add_argument("--k", dest="average_degree", type=float, default=None, help="Target average degree")
    parser.add_argument("--gamma", dest="exponent", type=float, default=None, help="Power-law exponent (> 2)")
    parser.add_argument("--capacity", type=int, default=None, help="Quadtree leaf capacity")
    parser.add_argument("--workers", dest="n_workers", type=int, default=None, help="Worker threads")
    parser.add_argument("--seed", type=int, default=RANDOM_SEED, help=f"Random seed (default: {RANDOM_SEED}, negative for none)")
    parser.add_argument(
        "--tolerance",
        type=float,
        default=EDGE_COUNT_TOLERANCE,
        help=f"Relative edge-count tolerance (default: {EDGE_COUNT_TOLERANCE})",
    )
    parser.add_argument("--no-powerlaw", action="store_true", help="Skip the power-law fit")
    parser.add_argument("--output", type=str, default=f"{DEFAULT_RESULTS_DIR}/static", help="Output directory")
    parser.add_argument("--no-save", action="store_true", help="Do not write a JSON summary")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def run(params, seed, tolerance, fit_powerlaw=True):
    """Generate a graph and summarize it."""
    generator = HyperbolicGenerator(seed=seed, **params)
    start = time.perf_counter()
    G = generator.generate()
    elapsed = time.perf_counter() - start

    expected_edges = params["n"] * params["average_degree"] / 2
    results = {
        "params": params,
        "seed": seed,
        "R": G.graph["R"],
        "n_nodes": G.number_of_nodes(),
        "n_edges": G.number_of_edges(),
        "expected_edges": expected_edges,
        "elapsed_seconds": elapsed,
    }
    if expected_edges > 0:
        results["edge_deviation"] = edge_count_deviation(G.number_of_edges(), expected_edges)
        results["within_tolerance"] = edge_count_within_tolerance(G.number_of_edges(), expected_edges, tolerance)
    if G.number_of_nodes() > 0:
        degree_stats = compute_degree_distribution_stats(G, fit_powerlaw=fit_powerlaw)
        degree_stats.pop("degrees")
        results["degree_stats"] = degree_stats
    return results


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        params = resolve_params(
            "static",
            args.preset,
            {
                "n": args.n,
                "average_degree": args.average_degree,
                "exponent": args.exponent,
                "capacity": args.capacity,
                "n_workers": args.n_workers,
            },
        )
        results = run(params, optional_seed(args.seed), args.tolerance, fit_powerlaw=not args.no_powerlaw)
    except ValueError as e:
        logger.error(f"Generation failed: {e}")
        return 1

    logger.info(
        f"Generated {results['n_edges']} edges on {results['n_nodes']} nodes "
        f"in {results['elapsed_seconds']:.2f}s (expected {results['expected_edges']:.0f})"
    )
    if not args.no_save:
        save_results(results, args.output, "static_generation")
    return 0 if results.get("within_tolerance", True) else 2


if __name__ == "__main__":
    sys.exit(main())
