"""
cli.py — ``vc-markov`` console entry point.

Run:
    vc-markov --n-investments 10000 --show-trajectories
    vc-markov --sweep 1 5 20 100 1000 --trials-per-point 2000
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from vc_markov.config import ChainConfig
from vc_markov.errors import MarkovChainError
from vc_markov.report import format_sensitivity_table, format_summary
from vc_markov.simulation import MarkovSimulator, SensitivityAnalysis

logger = logging.getLogger(__name__)


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {text}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vc-markov",
        description="Monte Carlo simulation of startup financing trajectories",
    )
    parser.add_argument(
        "-n", "--n-investments", type=_positive_int, default=10_000,
        help="number of simulated startups (default: 10000)",
    )
    parser.add_argument(
        "--show-trajectories", action="store_true",
        help="print the first 5 simulated trajectories",
    )
    parser.add_argument("--seed", type=int, default=42, help="random seed (default: 42)")
    parser.add_argument("--config", help="JSON file with means/concentrations/horizon")
    parser.add_argument(
        "--bootstrap", type=_positive_int, default=1000,
        help="bootstrap resamples for the confidence interval (default: 1000)",
    )
    parser.add_argument(
        "--confidence", type=float, default=0.95,
        help="confidence level of the interval (default: 0.95)",
    )
    parser.add_argument(
        "--sweep", type=float, nargs="+", metavar="CONCENTRATION",
        help="also run a sensitivity sweep over these concentration values",
    )
    parser.add_argument(
        "--trials-per-point", type=_positive_int, default=2000,
        help="trajectories per sweep point (default: 2000)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log progress")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = ChainConfig.from_json(args.config) if args.config else ChainConfig.default()
        simulator = MarkovSimulator(
            config,
            seed=args.seed,
            n_bootstrap=args.bootstrap,
            confidence=args.confidence,
        )
        result = simulator.run(args.n_investments)
        print(format_summary(result, show_trajectories=args.show_trajectories))

        if args.sweep:
            analysis = SensitivityAnalysis(
                config, trials_per_point=args.trials_per_point, seed=args.seed
            )
            df = analysis.sweep(args.sweep)
            print("\nSensitivity of P(Unicorn) to prior concentration:")
            print(format_sensitivity_table(df))
    except (MarkovChainError, OSError) as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
