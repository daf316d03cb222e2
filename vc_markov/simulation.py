"""
simulation.py — Monte Carlo driver and concentration sensitivity sweeps.

Depends on: config.py, chain.py, sampling.py
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from vc_markov.chain import Trajectory, simulate_one
from vc_markov.config import ChainConfig, DEFAULT_HORIZON, DEFAULT_MEANS
from vc_markov.errors import (
    InsufficientData,
    InvalidParameter,
    MarkovChainError,
    SimulationError,
)
from vc_markov.sampling import bootstrap_ci
from vc_markov.stages import ABSORBING_STAGES, Outcome, Stage, StageKey, TRANSIENT_STAGES

logger = logging.getLogger(__name__)


def _check_positive_int(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 1:
        raise InvalidParameter(f"{name} must be a positive integer, got {value!r}")


def _simulate_batch(
    config: ChainConfig,
    n: int,
    rng: np.random.Generator,
) -> list[Trajectory]:
    """
    Simulate ``n`` independent entities on one random stream.

    A failing entity is reported as a SimulationError naming its index.
    """
    trajectories = []
    for i in range(n):
        try:
            _, trajectory = simulate_one(
                config.means, config.concentrations, config.horizon, rng
            )
        except MarkovChainError as exc:
            raise SimulationError(exc.detail, entity=i, stage=exc.stage) from exc
        logger.debug("Entity %d: %s", i, trajectory)
        trajectories.append(trajectory)
    return trajectories


# ---------------------------------------------------------------------------
# Simulation results
# ---------------------------------------------------------------------------

@dataclass
class SimulationResult:
    """Outcome tally, trajectories and bootstrap intervals of one driver run."""

    tally: dict[Stage, int]
    trajectories: list[Trajectory]
    confidence_intervals: dict[Stage, tuple[float, float]]
    n: int
    seed: Optional[int] = None
    confidence: float = 0.95

    @property
    def final_states(self) -> list[Stage]:
        return [t.final_state for t in self.trajectories]

    @property
    def percentages(self) -> dict[Stage, float]:
        return {stage: 100.0 * count / self.n for stage, count in self.tally.items()}

    @property
    def unicorn_probability(self) -> float:
        return self.tally[Stage.UNICORN] / self.n

    @property
    def mean_periods(self) -> float:
        return float(np.mean([t.n_periods for t in self.trajectories]))

    def stage_reach(self) -> dict[Stage, float]:
        """Share of entities whose trajectory visited each stage."""
        return {
            stage: sum(t.visited(stage) for t in self.trajectories) / self.n
            for stage in (*TRANSIENT_STAGES, *ABSORBING_STAGES)
        }

    def summary(self) -> pd.DataFrame:
        """
        One row per absorbing stage.

        Columns: stage, count, percentage, ci_lower, ci_upper (both as
        proportions; NaN when the run skipped the bootstrap).
        """
        rows = []
        for stage in ABSORBING_STAGES:
            lower, upper = self.confidence_intervals.get(stage, (np.nan, np.nan))
            rows.append(
                {
                    "stage": stage.value,
                    "count": self.tally[stage],
                    "percentage": self.percentages[stage],
                    "ci_lower": lower,
                    "ci_upper": upper,
                }
            )
        return pd.DataFrame(rows)

    def trajectory_frame(self) -> pd.DataFrame:
        """Long-format frame with columns entity, period, stage."""
        rows = [
            {"entity": i, "period": period, "stage": stage.value}
            for i, trajectory in enumerate(self.trajectories)
            for period, stage in enumerate(trajectory)
        ]
        return pd.DataFrame(rows, columns=["entity", "period", "stage"])

    def as_tuple(
        self,
    ) -> tuple[dict[Stage, int], list[Trajectory], dict[Stage, tuple[float, float]]]:
        return self.tally, self.trajectories, self.confidence_intervals


# ---------------------------------------------------------------------------
# MarkovSimulator
# ---------------------------------------------------------------------------

class MarkovSimulator:
    """
    Monte Carlo driver over the financing-stage Markov chain.

    Every entity gets its own freshly sampled transition matrix; the random
    stream is seeded once per run, so equal seeds give equal results.

    Usage:
        simulator = MarkovSimulator(ChainConfig.default(), seed=42)
        result = simulator.run(n=10_000)
        result.summary()
    """

    def __init__(
        self,
        config: Optional[ChainConfig] = None,
        seed: Optional[int] = 42,
        n_bootstrap: int = 1000,
        confidence: float = 0.95,
    ) -> None:
        _check_positive_int("n_bootstrap", n_bootstrap)
        if not 0 < confidence < 1:
            raise InvalidParameter(f"Confidence must be in (0, 1), got {confidence!r}")
        self.config = config if config is not None else ChainConfig.default()
        self.seed = seed
        self.n_bootstrap = n_bootstrap
        self.confidence = confidence

    def run(self, n: int = 10_000, bootstrap: bool = True) -> SimulationResult:
        """
        Simulate ``n`` entities and aggregate their terminal outcomes.

        Parameters
        ----------
        n:
            Number of entities (positive). Zero raises InsufficientData.
        bootstrap:
            If False, skip the confidence intervals.

        Returns
        -------
        SimulationResult
        """
        if not isinstance(n, bool) and isinstance(n, (int, np.integer)) and n == 0:
            raise InsufficientData("Cannot simulate zero entities")
        _check_positive_int("n", n)
        rng = np.random.default_rng(self.seed)
        logger.info("Simulating %d trajectories (seed=%s)", n, self.seed)

        trajectories = _simulate_batch(self.config, n, rng)
        finals = [t.final_state for t in trajectories]
        tally = {stage: finals.count(stage) for stage in ABSORBING_STAGES}

        intervals: dict[Stage, tuple[float, float]] = {}
        if bootstrap:
            for stage in ABSORBING_STAGES:
                intervals[stage] = bootstrap_ci(
                    finals,
                    stage,
                    n_bootstrap=self.n_bootstrap,
                    confidence=self.confidence,
                    rng=rng,
                )

        logger.info(
            "Finished %d trajectories: %s",
            n,
            ", ".join(f"{stage.value}={count}" for stage, count in tally.items()),
        )
        return SimulationResult(
            tally=tally,
            trajectories=trajectories,
            confidence_intervals=intervals,
            n=n,
            seed=self.seed,
            confidence=self.confidence,
        )


def run(
    n: int,
    means_by_stage: Optional[Mapping[StageKey, Mapping[Outcome, float]]] = None,
    concentration_by_stage: Optional[Mapping[StageKey, float]] = None,
    seed: Optional[int] = 42,
    n_bootstrap: int = 1000,
    confidence: float = 0.95,
    horizon: int = DEFAULT_HORIZON,
) -> tuple[dict[Stage, int], list[Trajectory], dict[Stage, tuple[float, float]]]:
    """
    Functional form of MarkovSimulator.run.

    Returns
    -------
    (tally, trajectories, confidence_intervals) tuple
    """
    kwargs = {"horizon": horizon}
    if means_by_stage is not None:
        kwargs["means"] = means_by_stage
    if concentration_by_stage is not None:
        kwargs["concentrations"] = concentration_by_stage
    simulator = MarkovSimulator(
        ChainConfig(**kwargs), seed=seed, n_bootstrap=n_bootstrap, confidence=confidence
    )
    return simulator.run(n).as_tuple()


# ---------------------------------------------------------------------------
# SensitivityAnalysis
# ---------------------------------------------------------------------------

class SensitivityAnalysis:
    """
    How prior certainty (Dirichlet concentration) moves the unicorn rate.

    Usage:
        sa = SensitivityAnalysis(ChainConfig.default(), trials_per_point=2000)
        df = sa.sweep([1, 5, 20, 100, 1000])
    """

    def __init__(
        self,
        config: Optional[ChainConfig] = None,
        trials_per_point: int = 2_000,
        seed: Optional[int] = 42,
    ) -> None:
        _check_positive_int("trials_per_point", trials_per_point)
        self.config = config if config is not None else ChainConfig.default()
        self.trials_per_point = trials_per_point
        self.seed = seed

    def sweep(self, concentration_values: Sequence[float]) -> pd.DataFrame:
        """
        Re-run the chain with every stage at each concentration value.

        One random stream is seeded for the whole sweep and continued from
        point to point.

        Returns
        -------
        DataFrame with columns: concentration, unicorn_probability
        """
        rng = np.random.default_rng(self.seed)
        rows = []
        for value in concentration_values:
            config = self.config.with_concentration(float(value))
            finals = [
                t.final_state
                for t in _simulate_batch(config, self.trials_per_point, rng)
            ]
            unicorn_probability = finals.count(Stage.UNICORN) / self.trials_per_point
            logger.info(
                "Concentration %g: unicorn probability %.4f", value, unicorn_probability
            )
            rows.append(
                {"concentration": float(value), "unicorn_probability": unicorn_probability}
            )
        return pd.DataFrame(rows, columns=["concentration", "unicorn_probability"])


def sweep(
    concentration_values: Sequence[float],
    trials_per_point: int = 2000,
    means_by_stage: Optional[Mapping[StageKey, Mapping[Outcome, float]]] = None,
    seed: Optional[int] = 42,
    horizon: int = DEFAULT_HORIZON,
) -> list[tuple[float, float]]:
    """Functional form of SensitivityAnalysis.sweep, as (concentration, p) pairs."""
    config = ChainConfig(
        means=means_by_stage if means_by_stage is not None else DEFAULT_MEANS,
        horizon=horizon,
    )
    df = SensitivityAnalysis(config, trials_per_point, seed).sweep(concentration_values)
    return list(zip(df["concentration"].tolist(), df["unicorn_probability"].tolist()))
