#!/usr/bin/env python3
"""
Dynamic Generation Runner
=========================

Runs the dynamic hyperbolic generator for a number of rounds, replays
the event stream and reports per-round edge changes. With ``--verify``
the replayed graph is compared against a brute-force graph on the final
coordinates.

Usage:
    python run_dynamic_generation.py [--preset PRESET] [--steps STEPS] [--verify]
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from experiments.common import optional_seed, resolve_params, save_results, setup_logging
from src.config import DEFAULT_RESULTS_DIR, RANDOM_SEED
from src.dynamic.graph_event import GraphEventType, split_rounds
from src.dynamic.graph_updater import GraphConsistencyError
from src.generators.dynamic_hyperbolic import DynamicHyperbolicGenerator
from src.generators.hyperbolic import HyperbolicGenerator
from src.validation.consistency import replay_events, replay_matches_static

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Run the dynamic hyperbolic generator")
    parser.add_argument("--preset", type=str, default="default", help="Preset from generator_params.yaml")
    parser.add_argument("--n", type=int, default=None, help="Number of nodes")
    parser.add_argument("--k", dest="average_degree", type=float, default=None, help="Target average degree")
    parser.add_argument("--gamma", dest="exponent", type=float, default=None, help="Power-law exponent (> 2)")
    parser.add_argument("--initial-factor", type=float, default=None, help="Initial threshold as fraction of R")
    parser.add_argument("--moved-share", type=float, default=None, help="Share of points moved per round")
    parser.add_argument("--factor-growth", type=float, default=None, help="Threshold factor change per round")
    parser.add_argument("--move-distance", type=float, default=None, help="Bound of the per-round step")
    parser.add_argument("--steps", dest="n_steps", type=int, default=None, help="Number of rounds")
    parser.add_argument("--seed", type=int, default=RANDOM_SEED, help=f"Random seed (default: {RANDOM_SEED}, negative for none)")
    parser.add_argument("--verify", action="store_true", help="Check the replayed graph by brute force")
    parser.add_argument("--output", type=str, default=f"{DEFAULT_RESULTS_DIR}/dynamic", help="Output directory")
    parser.add_argument("--no-save", action="store_true", help="Do not write a JSON summary")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def run(params, seed, verify=False):
    """Run the generator and summarize each round."""
    static = HyperbolicGenerator(
        n=params["n"], average_degree=params["average_degree"], exponent=params["exponent"], seed=seed
    )
    angles, radii, R = static.sample_coordinates()
    generator = DynamicHyperbolicGenerator(
        angles,
        radii,
        R,
        initial_factor=params["initial_factor"],
        moved_share=params["moved_share"],
        factor_growth=params["factor_growth"],
        move_distance=params["move_distance"],
        alpha=static.alpha,
        seed=seed,
    )

    G = replay_events(generator.initialize())
    initial_edges = G.number_of_edges()
    stream = generator.generate(params["n_steps"])
    replay_events(stream, G)

    rounds = []
    for events in split_rounds(stream):
        rounds.append(
            {
                "added": sum(1 for e in events if e.type == GraphEventType.EDGE_ADDITION),
                "removed": sum(1 for e in events if e.type == GraphEventType.EDGE_REMOVAL),
            }
        )

    results = {
        "params": params,
        "seed": seed,
        "R": R,
        "initial_edges": initial_edges,
        "final_edges": G.number_of_edges(),
        "final_threshold": generator.threshold,
        "n_events": len(stream),
        "rounds": rounds,
    }
    if verify:
        final_angles, final_radii = generator.get_coordinates()
        results["verified"] = replay_matches_static(G, final_angles, final_radii, generator.threshold)
    return results


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        params = resolve_params(
            "dynamic",
            args.preset,
            {
                "n": args.n,
                "average_degree": args.average_degree,
                "exponent": args.exponent,
                "initial_factor": args.initial_factor,
                "moved_share": args.moved_share,
                "factor_growth": args.factor_growth,
                "move_distance": args.move_distance,
                "n_steps": args.n_steps,
            },
        )
        results = run(params, optional_seed(args.seed), verify=args.verify)
    except (ValueError, GraphConsistencyError) as e:
        logger.error(f"Dynamic generation failed: {e}")
        return 1

    logger.info(
        f"{len(results['rounds'])} rounds: {results['initial_edges']} -> {results['final_edges']} edges, "
        f"final threshold {results['final_threshold']:.4f}"
    )
    if not args.no_save:
        save_results(results, args.output, "dynamic_generation")
    if args.verify and not results["verified"]:
        logger.error("Replayed graph differs from the static graph on the final coordinates")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
