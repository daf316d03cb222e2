"""
chain.py — Per-entity transition matrices and single-trajectory simulation.

Depends on: stages.py, sampling.py, config.py
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

import numpy as np

from vc_markov.config import normalize_concentrations, normalize_means
from vc_markov.errors import InvalidParameter, MarkovChainError
from vc_markov.sampling import sample_dirichlet
from vc_markov.stages import (
    FINAL,
    STAGE_KEYS,
    Outcome,
    Stage,
    StageKey,
    advance,
)

TransitionMatrix = dict[StageKey, dict[Outcome, float]]


@dataclass(frozen=True)
class Trajectory:
    """Ordered stages visited by one entity, from Seed to an absorbing stage."""

    stages: tuple[Stage, ...]

    @property
    def final_state(self) -> Stage:
        return self.stages[-1]

    @property
    def n_periods(self) -> int:
        """Periods elapsed (one per transition after the initial Seed)."""
        return len(self.stages) - 1

    def visited(self, stage: Stage) -> bool:
        return stage in self.stages

    def __len__(self) -> int:
        return len(self.stages)

    def __iter__(self):
        return iter(self.stages)

    def __str__(self) -> str:
        return " -> ".join(s.value for s in self.stages)


# ---------------------------------------------------------------------------
# Transition matrix generation
# ---------------------------------------------------------------------------

def generate_matrices(
    means_by_stage: Mapping[StageKey, Mapping[Outcome, float]],
    concentration_by_stage: Mapping[StageKey, float],
    rng: Optional[np.random.Generator] = None,
) -> TransitionMatrix:
    """
    Draw one noisy transition vector per stage for a single entity.

    Stages are sampled independently, in the iteration order of
    ``means_by_stage``, so a seeded Generator always yields the same matrix.
    Errors are re-raised with the offending stage attached.
    """
    rng = rng if rng is not None else np.random.default_rng()
    matrix: TransitionMatrix = {}
    for stage, means in means_by_stage.items():
        if stage not in concentration_by_stage:
            raise InvalidParameter("No concentration configured", stage=str(stage))
        try:
            matrix[stage] = sample_dirichlet(means, concentration_by_stage[stage], rng)
        except MarkovChainError as exc:
            raise type(exc)(exc.detail, stage=str(stage)) from exc
    return matrix


def _draw_outcome(
    probs: Mapping[Outcome, float],
    rng: np.random.Generator,
) -> Outcome:
    """Weighted draw; a label with probability 0 is never returned."""
    labels = list(probs)
    weights = np.array([probs[label] for label in labels], dtype=np.float64)
    return labels[int(rng.choice(len(labels), p=weights))]


# ---------------------------------------------------------------------------
# Trajectory simulation
# ---------------------------------------------------------------------------

def walk(
    matrix: Mapping[StageKey, Mapping[Outcome, float]],
    horizon: int,
    rng: np.random.Generator,
) -> Trajectory:
    """
    Step one entity through the chain using an already drawn matrix.

    Each period draws from the current stage's row; the horizon period draws
    from the Final row instead. Operating repeats the stage in the
    trajectory, and Bankrupt/Unicorn stop the walk immediately.
    """
    state = Stage.SEED
    stages = [state]
    for t in range(1, horizon + 1):
        if state.is_absorbing:
            break
        row = matrix[FINAL] if t == horizon else matrix[state]
        state = advance(state, _draw_outcome(row, rng))
        stages.append(state)
    return Trajectory(tuple(stages))


def simulate_one(
    means_by_stage: Mapping[StageKey, Mapping[Outcome, float]],
    concentration_by_stage: Mapping[StageKey, float],
    horizon: int = 10,
    rng: Optional[np.random.Generator] = None,
) -> tuple[Stage, Trajectory]:
    """
    Simulate one entity from Seed with a freshly generated matrix.

    Parameters
    ----------
    means_by_stage:
        Prior mean transition vectors, keyed by transient stage and FINAL.
    concentration_by_stage:
        Dirichlet concentration per stage key.
    horizon:
        Maximum number of periods; the last one always ends the walk.
    rng:
        Random source.

    Returns
    -------
    (final_state, trajectory) tuple
    """
    if isinstance(horizon, bool) or not isinstance(horizon, int) or horizon < 1:
        raise InvalidParameter(f"Horizon must be a positive integer, got {horizon!r}")
    rng = rng if rng is not None else np.random.default_rng()
    means = normalize_means(means_by_stage)
    missing = [str(k) for k in STAGE_KEYS if k not in means]
    if missing:
        raise InvalidParameter(f"No transition means configured for {missing}")

    matrix = generate_matrices(means, normalize_concentrations(concentration_by_stage), rng)
    trajectory = walk(matrix, horizon, rng)
    return trajectory.final_state, trajectory
