"""
stages.py — Financing stages, transition outcomes and the advancement table.

No imports from within this library except errors.py.
"""
from __future__ import annotations

from enum import Enum
from typing import Union

from vc_markov.errors import InvalidParameter


class Stage(str, Enum):
    """Financing phase of a startup or its terminal outcome."""

    SEED = "Seed"
    SERIES_A = "SeriesA"
    SERIES_B = "SeriesB"
    SERIES_C = "SeriesC"
    BANKRUPT = "Bankrupt"
    UNICORN = "Unicorn"
    ZOMBIE = "Zombie"

    @property
    def is_absorbing(self) -> bool:
        return self in ABSORBING_STAGES

    def __str__(self) -> str:
        return self.value


class Outcome(str, Enum):
    """Label drawn from a stage's transition vector."""

    NEXT_STAGE = "NextStage"
    BANKRUPT = "Bankrupt"
    OPERATING = "Operating"
    UNICORN = "Unicorn"
    ZOMBIE = "Zombie"

    def __str__(self) -> str:
        return self.value


# Pseudo-stage drawn from at the horizon period
FINAL = "Final"

StageKey = Union[Stage, str]

TRANSIENT_STAGES: tuple[Stage, ...] = (
    Stage.SEED,
    Stage.SERIES_A,
    Stage.SERIES_B,
    Stage.SERIES_C,
)

ABSORBING_STAGES: tuple[Stage, ...] = (
    Stage.BANKRUPT,
    Stage.UNICORN,
    Stage.ZOMBIE,
)

# All keys a full transition table must define, in draw order
STAGE_KEYS: tuple[StageKey, ...] = (*TRANSIENT_STAGES, FINAL)

TRANSIENT_OUTCOMES: tuple[Outcome, ...] = (
    Outcome.NEXT_STAGE,
    Outcome.BANKRUPT,
    Outcome.OPERATING,
    Outcome.UNICORN,
)

FINAL_OUTCOMES: tuple[Outcome, ...] = (
    Outcome.BANKRUPT,
    Outcome.ZOMBIE,
    Outcome.UNICORN,
)

# SeriesC maps to itself: there is no round beyond it
NEXT_STAGE: dict[Stage, Stage] = {
    Stage.SEED: Stage.SERIES_A,
    Stage.SERIES_A: Stage.SERIES_B,
    Stage.SERIES_B: Stage.SERIES_C,
    Stage.SERIES_C: Stage.SERIES_C,
}

_ABSORBING_OUTCOMES: dict[Outcome, Stage] = {
    Outcome.BANKRUPT: Stage.BANKRUPT,
    Outcome.UNICORN: Stage.UNICORN,
    Outcome.ZOMBIE: Stage.ZOMBIE,
}


def coerce_stage_key(key: StageKey) -> StageKey:
    """Map ``"Seed"``/``Stage.SEED``/``"Final"`` style keys to canonical keys."""
    if isinstance(key, Stage):
        return key
    if key == FINAL:
        return FINAL
    try:
        return Stage(key)
    except ValueError:
        raise InvalidParameter(f"Unknown stage key {key!r}") from None


def coerce_outcome(label: Union[Outcome, str]) -> Outcome:
    """Map ``"NextStage"``/``Outcome.NEXT_STAGE`` style labels to Outcome."""
    if isinstance(label, Outcome):
        return label
    try:
        return Outcome(label)
    except ValueError:
        raise InvalidParameter(f"Unknown outcome label {label!r}") from None


def expected_outcomes(key: StageKey) -> tuple[Outcome, ...]:
    """Label set a transition row for ``key`` must carry."""
    return FINAL_OUTCOMES if key == FINAL else TRANSIENT_OUTCOMES


def advance(state: Stage, outcome: Outcome) -> Stage:
    """
    Apply one drawn outcome to a transient stage.

    NextStage follows the NEXT_STAGE table, Operating keeps the stage, and
    Bankrupt/Unicorn/Zombie move to the matching absorbing stage.
    """
    if state not in NEXT_STAGE:
        raise InvalidParameter(f"Cannot advance from absorbing stage {state}")
    if outcome is Outcome.NEXT_STAGE:
        return NEXT_STAGE[state]
    if outcome is Outcome.OPERATING:
        return state
    if outcome in _ABSORBING_OUTCOMES:
        return _ABSORBING_OUTCOMES[outcome]
    raise InvalidParameter(f"Unhandled outcome {outcome!r}")
