"""
sampling.py — Pure probability routines: Dirichlet draws, bootstrap
intervals and conjugate prior updates.

Stateless apart from the numpy Generator passed in. Safe to import from any
module.
"""
from __future__ import annotations

import math
from typing import Hashable, Mapping, Optional, Sequence, TypeVar

import numpy as np
from scipy import stats

from vc_markov.errors import InsufficientData, InvalidDistribution, InvalidParameter

L = TypeVar("L", bound=Hashable)

# Max resampled indices held in memory at once by bootstrap_ci.
_BOOTSTRAP_BLOCK = 2_000_000

# Allowed drift of an input probability row from 1.0
PROB_TOLERANCE = 1e-6


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_distribution(
    probs: Mapping[L, float],
    tol: float = PROB_TOLERANCE,
) -> None:
    """
    Raise InvalidDistribution unless ``probs`` is a probability vector.

    Values must be finite, non-negative and sum to 1.0 within ``tol``.
    The mapping is never renormalized.
    """
    if not probs:
        raise InvalidDistribution("Probability mapping is empty")
    values = np.array([float(v) for v in probs.values()], dtype=np.float64)
    if not np.all(np.isfinite(values)):
        raise InvalidDistribution(f"Non-finite probability in {dict(probs)}")
    if np.any(values < 0):
        raise InvalidDistribution(f"Negative probability in {dict(probs)}")
    total = float(values.sum())
    if abs(total - 1.0) > tol:
        raise InvalidDistribution(f"Probabilities sum to {total:.6f}, expected 1.0")


def validate_concentration(concentration: float) -> None:
    """Raise InvalidParameter unless concentration is finite and > 0."""
    if not math.isfinite(concentration) or concentration <= 0:
        raise InvalidParameter(
            f"Concentration must be positive, got {concentration!r}"
        )


# ---------------------------------------------------------------------------
# Dirichlet sampler
# ---------------------------------------------------------------------------

def sample_dirichlet(
    means: Mapping[L, float],
    concentration: float,
    rng: Optional[np.random.Generator] = None,
) -> dict[L, float]:
    """
    Draw one probability vector from Dirichlet(means × concentration).

    Uses the Gamma construction: independent Gamma(alpha_i, 1) variates
    normalized by their sum. A mean of 0 gives alpha 0, and that component
    is exactly 0 in the sample.

    Parameters
    ----------
    means:
        Mapping of label → prior mean probability. Must sum to 1.0.
    concentration:
        Scalar multiplying the means into shape parameters. Higher values
        draw tighter around the means.
    rng:
        Random source. A fresh unseeded Generator is used when omitted.

    Returns
    -------
    dict
        Same labels, same order, values summing to 1.0.
    """
    validate_distribution(means)
    validate_concentration(concentration)
    rng = rng if rng is not None else np.random.default_rng()

    labels = list(means)
    alpha = np.array([means[label] for label in labels], dtype=np.float64) * concentration

    draws = np.zeros(len(labels), dtype=np.float64)
    positive = alpha > 0
    draws[positive] = rng.standard_gamma(alpha[positive])

    total = float(draws.sum())
    if total <= 0.0:
        # All variates underflowed: fall back to the small-concentration
        # limit, a point mass on one label chosen with weights alpha.
        draws[rng.choice(len(labels), p=alpha / alpha.sum())] = 1.0
        total = 1.0

    return {label: float(x) for label, x in zip(labels, draws / total)}


# ---------------------------------------------------------------------------
# Bootstrap confidence interval
# ---------------------------------------------------------------------------

def bootstrap_ci(
    outcomes: Sequence[Hashable],
    target: Hashable,
    n_bootstrap: int = 1000,
    confidence: float = 0.95,
    rng: Optional[np.random.Generator] = None,
) -> tuple[float, float]:
    """
    Nonparametric bootstrap interval for the proportion of ``target``.

    Resamples the outcomes with replacement ``n_bootstrap`` times, takes the
    share of ``target`` in each resample, and returns the [α/2, 1 − α/2]
    empirical quantiles of those shares.

    Parameters
    ----------
    outcomes:
        Observed outcomes (e.g. final stages of every simulated entity).
    target:
        Outcome whose proportion is estimated.
    n_bootstrap:
        Number of resamples.
    confidence:
        Confidence level in (0, 1), e.g. 0.95.
    rng:
        Random source.

    Returns
    -------
    (lower, upper) tuple
    """
    n = len(outcomes)
    if n == 0:
        raise InsufficientData("Cannot bootstrap an empty outcome set")
    if not 0 < confidence < 1:
        raise InvalidParameter(f"Confidence must be in (0, 1), got {confidence!r}")
    if n_bootstrap < 1:
        raise InvalidParameter(f"n_bootstrap must be positive, got {n_bootstrap!r}")
    rng = rng if rng is not None else np.random.default_rng()

    hits = np.fromiter((o == target for o in outcomes), dtype=np.float64, count=n)
    proportions = np.empty(n_bootstrap, dtype=np.float64)
    # Resamples are drawn as (rows, n) index blocks, rows in order.
    rows = max(1, _BOOTSTRAP_BLOCK // n)
    for start in range(0, n_bootstrap, rows):
        stop = min(start + rows, n_bootstrap)
        idx = rng.integers(0, n, size=(stop - start, n))
        proportions[start:stop] = hits[idx].mean(axis=1)

    alpha = 1.0 - confidence
    lower, upper = np.quantile(proportions, [alpha / 2, 1 - alpha / 2])
    return float(lower), float(upper)


# ---------------------------------------------------------------------------
# Conjugate prior update
# ---------------------------------------------------------------------------

def _align_labels(
    prior_probs: Mapping[L, float],
    observed_counts: Mapping[Hashable, float],
) -> dict[L, float]:
    # Match by equality so plain strings line up with str-valued enum labels.
    aligned: dict[L, float] = {}
    unknown = []
    for label, count in observed_counts.items():
        match = [p for p in prior_probs if p == label]
        if not match:
            unknown.append(label)
        elif match[0] in aligned:
            raise InvalidParameter(f"Observed label {label} given more than once")
        else:
            aligned[match[0]] = count
    if unknown:
        raise InvalidParameter(f"Observed labels not in prior: {sorted(map(str, unknown))}")
    return aligned


def update_priors(
    prior_probs: Mapping[L, float],
    observed_counts: Mapping[L, float],
    pseudo_count_total: float = 100,
) -> dict[L, float]:
    """
    Posterior mean of a Dirichlet prior after multinomial observations.

    The prior is expressed as ``pseudo_count_total`` pseudo-observations
    spread according to ``prior_probs``; observed counts are added and the
    result normalized. Labels missing from ``observed_counts`` count as 0.
    Observed labels are matched to prior labels by equality, so plain strings
    and str-valued enum members may be mixed. The result is keyed like the
    prior.

    Example
    -------
    >>> update_priors(
    ...     {"NextStage": 0.27, "Bankrupt": 0.50, "Operating": 0.22, "Unicorn": 0.01},
    ...     {"NextStage": 2, "Bankrupt": 0, "Operating": 8, "Unicorn": 0},
    ... )  # doctest: +SKIP
    {'NextStage': 0.2636..., 'Bankrupt': 0.4545..., 'Operating': 0.2727..., 'Unicorn': 0.0090...}
    """
    validate_distribution(prior_probs)
    if not math.isfinite(pseudo_count_total) or pseudo_count_total <= 0:
        raise InvalidParameter(
            f"pseudo_count_total must be positive, got {pseudo_count_total!r}"
        )
    for label, count in observed_counts.items():
        if not math.isfinite(count) or count < 0:
            raise InvalidParameter(f"Observed count for {label} must be non-negative")
    observed_counts = _align_labels(prior_probs, observed_counts)

    if not any(observed_counts.values()):
        return dict(prior_probs)

    updated = {
        label: prior_probs[label] * pseudo_count_total + observed_counts.get(label, 0)
        for label in prior_probs
    }
    total = sum(updated.values())
    return {label: count / total for label, count in updated.items()}


def posterior_interval(
    probs: Mapping[L, float],
    pseudo_count_total: float,
    confidence: float = 0.95,
) -> dict[L, tuple[float, float]]:
    """
    Equal-tailed credible interval per label of Dirichlet(probs × total).

    Each marginal of a Dirichlet is Beta(alpha_i, alpha_0 − alpha_i).
    """
    validate_distribution(probs)
    if not 0 < confidence < 1:
        raise InvalidParameter(f"Confidence must be in (0, 1), got {confidence!r}")
    validate_concentration(pseudo_count_total)

    tail = (1.0 - confidence) / 2
    intervals: dict[L, tuple[float, float]] = {}
    for label, p in probs.items():
        a = p * pseudo_count_total
        b = pseudo_count_total - a
        if a <= 0:
            intervals[label] = (0.0, 0.0)
        elif b <= 0:
            intervals[label] = (1.0, 1.0)
        else:
            lo, hi = stats.beta.ppf([tail, 1 - tail], a, b)
            intervals[label] = (float(lo), float(hi))
    return intervals
