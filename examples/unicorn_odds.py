"""
unicorn_odds.py — Monte Carlo odds of a seed-stage startup becoming a unicorn.

Demonstrates:
- Running the driver with the documented default priors
- Reading the tally, percentages and bootstrap intervals
- Stage reach and trajectory inspection
- Outcome and funnel charts

Run:
    python examples/unicorn_odds.py
"""
from __future__ import annotations

from vc_markov import ChainConfig, MarkovSimulator, Stage
from vc_markov import report
from vc_markov import visualization as viz


def main() -> None:
    # -------------------------------------------------------------------
    # 1. Simulate 10,000 seed-stage startups
    # -------------------------------------------------------------------
    simulator = MarkovSimulator(ChainConfig.default(), seed=42)
    result = simulator.run(n=10_000)

    print(report.format_summary(result, show_trajectories=True))

    # -------------------------------------------------------------------
    # 2. Interval table and stage reach
    # -------------------------------------------------------------------
    print("\nTerminal outcomes:")
    print(result.summary().to_string(index=False, float_format=lambda x: f"{x:.4f}"))

    print("\nShare of startups reaching each stage:")
    for stage, share in result.stage_reach().items():
        print(f"  {stage.value:<10} {share:>7.2%}")

    longest = max(result.trajectories, key=len)
    print(f"\nLongest path ({longest.n_periods} periods): {longest}")

    unicorn_paths = [t for t in result.trajectories if t.final_state is Stage.UNICORN]
    print(f"Unicorns that never raised a Series C: "
          f"{sum(not t.visited(Stage.SERIES_C) for t in unicorn_paths)} of {len(unicorn_paths)}")

    # -------------------------------------------------------------------
    # 3. Visualize
    # -------------------------------------------------------------------
    print("\nOpening outcome chart...")
    viz.plot_outcome_distribution(result).show()

    print("\nOpening stage funnel...")
    viz.plot_stage_reach(result).show()


if __name__ == "__main__":
    main()
