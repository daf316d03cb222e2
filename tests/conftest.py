"""
conftest.py — Shared pytest fixtures for vc_markov test suite.
"""
from __future__ import annotations

import numpy as np
import pytest

from vc_markov.config import ChainConfig
from vc_markov.simulation import MarkovSimulator, SimulationResult
from vc_markov.stages import FINAL, Outcome, Stage


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(12345)


@pytest.fixture(scope="session")
def seed_means() -> dict[str, float]:
    """Seed-stage prior means used throughout the docs."""
    return {"NextStage": 0.27, "Bankrupt": 0.50, "Operating": 0.22, "Unicorn": 0.01}


@pytest.fixture(scope="session")
def default_config() -> ChainConfig:
    return ChainConfig.default()


@pytest.fixture(scope="session")
def small_result(default_config: ChainConfig) -> SimulationResult:
    """A 2,000-entity run with a fixed seed."""
    return MarkovSimulator(default_config, seed=7, n_bootstrap=500).run(n=2_000)


def _deterministic_means(
    seed: Outcome = Outcome.NEXT_STAGE,
    series: Outcome = Outcome.NEXT_STAGE,
    final: Outcome = Outcome.ZOMBIE,
) -> dict:
    """
    Degenerate transition table: every row puts all mass on one outcome.

    Zero means give zero Dirichlet shape, so every sampled matrix is exactly
    this table regardless of concentration.
    """
    def row(hit: Outcome, labels: tuple[Outcome, ...]) -> dict[Outcome, float]:
        return {label: 1.0 if label is hit else 0.0 for label in labels}

    transient = (Outcome.NEXT_STAGE, Outcome.BANKRUPT, Outcome.OPERATING, Outcome.UNICORN)
    return {
        Stage.SEED: row(seed, transient),
        Stage.SERIES_A: row(series, transient),
        Stage.SERIES_B: row(series, transient),
        Stage.SERIES_C: row(series, transient),
        FINAL: row(final, (Outcome.BANKRUPT, Outcome.ZOMBIE, Outcome.UNICORN)),
    }


@pytest.fixture
def deterministic_means():
    """Factory for degenerate transition tables, see _deterministic_means."""
    return _deterministic_means


@pytest.fixture
def flat_concentrations() -> dict:
    return {Stage.SEED: 10.0, Stage.SERIES_A: 10.0, Stage.SERIES_B: 10.0,
            Stage.SERIES_C: 10.0, FINAL: 10.0}
