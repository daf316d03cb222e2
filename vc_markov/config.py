"""
config.py — Explicit transition-table configuration for a simulation run.

Depends on: stages.py, sampling.py
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, Union

from vc_markov.errors import InvalidDistribution, InvalidParameter, MarkovChainError
from vc_markov.sampling import update_priors, validate_concentration, validate_distribution
from vc_markov.stages import (
    FINAL,
    STAGE_KEYS,
    Outcome,
    Stage,
    StageKey,
    coerce_outcome,
    coerce_stage_key,
    expected_outcomes,
)

logger = logging.getLogger(__name__)

MeansTable = dict[StageKey, dict[Outcome, float]]
ConcentrationTable = dict[StageKey, float]


# Prior mean transition probabilities per period, calibrated so that roughly
# 3% of seed-stage companies end as unicorns over a 10-period horizon.
DEFAULT_MEANS: MeansTable = {
    Stage.SEED: {
        Outcome.NEXT_STAGE: 0.27,
        Outcome.BANKRUPT: 0.50,
        Outcome.OPERATING: 0.22,
        Outcome.UNICORN: 0.01,
    },
    Stage.SERIES_A: {
        Outcome.NEXT_STAGE: 0.30,
        Outcome.BANKRUPT: 0.35,
        Outcome.OPERATING: 0.34,
        Outcome.UNICORN: 0.01,
    },
    Stage.SERIES_B: {
        Outcome.NEXT_STAGE: 0.30,
        Outcome.BANKRUPT: 0.25,
        Outcome.OPERATING: 0.435,
        Outcome.UNICORN: 0.015,
    },
    Stage.SERIES_C: {
        Outcome.NEXT_STAGE: 0.22,
        Outcome.BANKRUPT: 0.18,
        Outcome.OPERATING: 0.57,
        Outcome.UNICORN: 0.03,
    },
    FINAL: {
        Outcome.BANKRUPT: 0.30,
        Outcome.ZOMBIE: 0.62,
        Outcome.UNICORN: 0.08,
    },
}

# Later stages are better documented, so their rates are held more tightly
DEFAULT_CONCENTRATIONS: ConcentrationTable = {
    Stage.SEED: 20.0,
    Stage.SERIES_A: 25.0,
    Stage.SERIES_B: 30.0,
    Stage.SERIES_C: 35.0,
    FINAL: 40.0,
}

DEFAULT_HORIZON = 10


def _check_transient_key(key: StageKey) -> None:
    if key not in STAGE_KEYS:
        raise InvalidParameter(f"Absorbing stage {key} has no transition row")


def normalize_means(means: Mapping[Any, Mapping[Any, float]]) -> MeansTable:
    """
    Coerce string keys to Stage/Outcome and check each row's label set.

    Raises InvalidDistribution when a row carries the wrong labels or is not
    a probability vector.
    """
    table: MeansTable = {}
    for raw_key, row in means.items():
        key = coerce_stage_key(raw_key)
        _check_transient_key(key)
        try:
            parsed = {coerce_outcome(label): float(p) for label, p in row.items()}
        except InvalidParameter as exc:
            raise InvalidDistribution(exc.detail, stage=str(key)) from exc
        except (AttributeError, TypeError, ValueError) as exc:
            raise InvalidDistribution(
                f"Malformed probability row: {exc}", stage=str(key)
            ) from exc
        expected = set(expected_outcomes(key))
        if set(parsed) != expected:
            raise InvalidDistribution(
                f"Expected labels {sorted(o.value for o in expected)}, "
                f"got {sorted(o.value for o in parsed)}",
                stage=str(key),
            )
        try:
            validate_distribution(parsed)
        except InvalidDistribution as exc:
            raise InvalidDistribution(exc.detail, stage=str(key)) from exc
        table[key] = parsed
    return table


def normalize_concentrations(concentrations: Mapping[Any, float]) -> ConcentrationTable:
    """Coerce string keys to stage keys and check every value is positive."""
    table: ConcentrationTable = {}
    for raw_key, value in concentrations.items():
        key = coerce_stage_key(raw_key)
        _check_transient_key(key)
        try:
            value = float(value)
        except (TypeError, ValueError) as exc:
            raise InvalidParameter(
                f"Concentration must be a number, got {value!r}", stage=str(key)
            ) from exc
        try:
            validate_concentration(value)
        except InvalidParameter as exc:
            raise InvalidParameter(exc.detail, stage=str(key)) from exc
        table[key] = value
    return table


@dataclass(frozen=True)
class ChainConfig:
    """
    Transition means, concentrations and horizon for one simulation run.

    Passed explicitly to the driver and the sensitivity analyzer, so runs
    with different parameter sets never share state.

        config = ChainConfig.default().with_concentration(50.0)
    """

    means: MeansTable = field(default_factory=lambda: DEFAULT_MEANS)
    concentrations: ConcentrationTable = field(
        default_factory=lambda: DEFAULT_CONCENTRATIONS
    )
    horizon: int = DEFAULT_HORIZON

    def __post_init__(self) -> None:
        means = normalize_means(self.means)
        concentrations = normalize_concentrations(self.concentrations)

        missing = [str(k) for k in STAGE_KEYS if k not in means]
        if missing:
            raise InvalidDistribution(f"Missing transition means for {missing}")
        missing = [str(k) for k in means if k not in concentrations]
        if missing:
            raise InvalidParameter(f"Missing concentration for {missing}")
        if isinstance(self.horizon, bool) or not isinstance(self.horizon, int) or self.horizon < 1:
            raise InvalidParameter(f"Horizon must be a positive integer, got {self.horizon!r}")

        # Frozen dataclass: store the canonical tables, in draw order
        object.__setattr__(self, "means", {k: means[k] for k in STAGE_KEYS})
        object.__setattr__(
            self, "concentrations", {k: concentrations[k] for k in STAGE_KEYS}
        )

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def default(cls) -> "ChainConfig":
        return cls()

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, Any]) -> "ChainConfig":
        """
        Build a config from plain keys, e.g. parsed JSON.

        Missing sections fall back to the defaults. Keys starting with ``_``
        are treated as comments.
        """
        config_dict = {k: v for k, v in config_dict.items() if not k.startswith("_")}
        unknown = set(config_dict) - {"means", "concentrations", "horizon"}
        if unknown:
            raise InvalidParameter(f"Unknown config keys: {sorted(unknown)}")
        for section in ("means", "concentrations"):
            if not isinstance(config_dict.get(section, {}), Mapping):
                raise InvalidParameter(f"Config section {section!r} must be a mapping")
        return cls(
            means=config_dict.get("means", DEFAULT_MEANS),
            concentrations=config_dict.get("concentrations", DEFAULT_CONCENTRATIONS),
            horizon=config_dict.get("horizon", DEFAULT_HORIZON),
        )

    @classmethod
    def from_json(cls, filepath: Union[str, Path]) -> "ChainConfig":
        """Load a config from a JSON file."""
        with open(filepath, "r") as f:
            try:
                config_dict = json.load(f)
            except json.JSONDecodeError as exc:
                raise InvalidParameter(f"Malformed config file {filepath}: {exc}") from exc
        if not isinstance(config_dict, dict):
            raise InvalidParameter(f"Config file {filepath} must hold a JSON object")
        logger.info("Loaded chain config from %s", filepath)
        return cls.from_dict(config_dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "means": {
                str(key): {o.value: p for o, p in row.items()}
                for key, row in self.means.items()
            },
            "concentrations": {str(k): v for k, v in self.concentrations.items()},
            "horizon": self.horizon,
        }

    def to_json(self, filepath: Union[str, Path], indent: int = 2) -> None:
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=indent)

    # ------------------------------------------------------------------
    # Derived configs
    # ------------------------------------------------------------------

    def with_concentration(self, concentration: float) -> "ChainConfig":
        """Copy of this config using one concentration for every stage."""
        return replace(
            self, concentrations={k: concentration for k in self.concentrations}
        )

    def with_updated_stage(
        self,
        stage: StageKey,
        observed_counts: Mapping[Any, float],
        pseudo_count_total: float = 100,
    ) -> "ChainConfig":
        """
        Copy of this config with one stage's means replaced by the posterior
        mean after observing ``observed_counts``.
        """
        key = coerce_stage_key(stage)
        counts = {coerce_outcome(label): c for label, c in observed_counts.items()}
        try:
            posterior = update_priors(self.means[key], counts, pseudo_count_total)
        except MarkovChainError as exc:
            raise type(exc)(exc.detail, stage=str(key)) from exc
        means = dict(self.means)
        means[key] = posterior
        logger.info("Updated %s priors with %d observations", key, sum(counts.values()))
        return replace(self, means=means)
