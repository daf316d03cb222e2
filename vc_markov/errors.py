"""
errors.py — Exception hierarchy for chain validation and simulation failures.

All errors subclass ValueError so callers that already guard numeric input
with ``except ValueError`` keep working.
"""
from __future__ import annotations

from typing import Optional


class MarkovChainError(ValueError):
    """Base class for all vc_markov validation errors."""

    def __init__(self, message: str, stage: Optional[str] = None) -> None:
        self.stage = stage
        self.detail = message
        if stage is not None:
            message = f"[{stage}] {message}"
        super().__init__(message)


class InvalidDistribution(MarkovChainError):
    """A probability mapping is negative, mislabelled, or does not sum to 1."""


class InvalidParameter(MarkovChainError):
    """A scalar parameter (concentration, n, horizon, confidence) is out of range."""


class InsufficientData(MarkovChainError):
    """Not enough observations to compute a statistic."""


class SimulationError(MarkovChainError):
    """
    Batch-level failure raised by the driver.

    Records which entity (0-based index) and which stage failed validation.
    The underlying error is available as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        entity: int,
        stage: Optional[str] = None,
    ) -> None:
        self.entity = entity
        super().__init__(f"entity {entity}: {message}", stage=stage)
