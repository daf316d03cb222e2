"""
report.py — Plain-text console rendering of simulation output.

Depends on: simulation.py
"""
from __future__ import annotations

import pandas as pd

from vc_markov.simulation import SimulationResult
from vc_markov.stages import ABSORBING_STAGES, Stage

_WIDTH = 60


def format_summary(
    result: SimulationResult,
    show_trajectories: bool = False,
    n_trajectories: int = 5,
) -> str:
    """
    Render tally, percentages, unicorn probability and its interval.

    With ``show_trajectories`` the first ``n_trajectories`` paths are listed
    as arrow-joined stage sequences.
    """
    lines = [
        "=" * _WIDTH,
        f"  Startup Financing Simulation — {result.n:,} trajectories",
        "=" * _WIDTH,
    ]
    for stage in ABSORBING_STAGES:
        lines.append(
            f"  {stage.value:<10} {result.tally[stage]:>8,}   "
            f"{result.percentages[stage]:>6.2f}%"
        )
    lines.append("-" * _WIDTH)
    lines.append(f"  Unicorn probability:  {result.unicorn_probability:.4f}")
    if Stage.UNICORN in result.confidence_intervals:
        lower, upper = result.confidence_intervals[Stage.UNICORN]
        lines.append(
            f"  {result.confidence:.0%} bootstrap CI:    [{lower:.4f}, {upper:.4f}]"
        )
    lines.append(f"  Mean periods elapsed: {result.mean_periods:.2f}")
    lines.append("=" * _WIDTH)

    if show_trajectories:
        lines.append("")
        lines.append(f"First {min(n_trajectories, result.n)} trajectories:")
        for i, trajectory in enumerate(result.trajectories[:n_trajectories], start=1):
            lines.append(f"  {i}. {trajectory}")

    return "\n".join(lines)


def format_sensitivity_table(df: pd.DataFrame) -> str:
    """Render a SensitivityAnalysis.sweep() frame as an aligned table."""
    table = df.rename(
        columns={"concentration": "Concentration", "unicorn_probability": "P(Unicorn)"}
    )
    return table.to_string(
        index=False,
        formatters={
            "Concentration": lambda x: f"{x:>12g}",
            "P(Unicorn)": lambda x: f"{x:>10.4f}",
        },
    )
