"""
vc_markov — Monte Carlo simulation of startup financing as a Markov chain.

Public API surface:

    from vc_markov import ChainConfig, MarkovSimulator, SensitivityAnalysis
    from vc_markov import Stage, Outcome, FINAL
    from vc_markov import sample_dirichlet, update_priors, bootstrap_ci
    from vc_markov import generate_matrices, simulate_one, run, sweep
    from vc_markov import visualization as viz
"""
from __future__ import annotations

# Core types and engines
from vc_markov.chain import Trajectory, generate_matrices, simulate_one
from vc_markov.config import (
    DEFAULT_CONCENTRATIONS,
    DEFAULT_HORIZON,
    DEFAULT_MEANS,
    ChainConfig,
)
from vc_markov.errors import (
    InsufficientData,
    InvalidDistribution,
    InvalidParameter,
    MarkovChainError,
    SimulationError,
)
from vc_markov.sampling import (
    bootstrap_ci,
    posterior_interval,
    sample_dirichlet,
    update_priors,
)
from vc_markov.simulation import (
    MarkovSimulator,
    SensitivityAnalysis,
    SimulationResult,
    run,
    sweep,
)
from vc_markov.stages import FINAL, Outcome, Stage

# Submodules available for direct import
from vc_markov import report
from vc_markov import visualization

__version__ = "0.1.0"

__all__ = [
    # Stages
    "Stage",
    "Outcome",
    "FINAL",
    # Configuration
    "ChainConfig",
    "DEFAULT_MEANS",
    "DEFAULT_CONCENTRATIONS",
    "DEFAULT_HORIZON",
    # Sampling
    "sample_dirichlet",
    "bootstrap_ci",
    "update_priors",
    "posterior_interval",
    # Chain
    "Trajectory",
    "generate_matrices",
    "simulate_one",
    # Simulation
    "MarkovSimulator",
    "SensitivityAnalysis",
    "SimulationResult",
    "run",
    "sweep",
    # Errors
    "MarkovChainError",
    "InvalidDistribution",
    "InvalidParameter",
    "InsufficientData",
    "SimulationError",
    # Submodules
    "report",
    "visualization",
    # Version
    "__version__",
]
