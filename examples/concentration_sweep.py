"""
concentration_sweep.py — How prior certainty moves the unicorn rate.

Low concentration means wide Dirichlet draws: every startup gets very
different transition rates. High concentration pins every startup to the
prior means.

Run:
    python examples/concentration_sweep.py
"""
from __future__ import annotations

from vc_markov import ChainConfig, SensitivityAnalysis
from vc_markov import report
from vc_markov import visualization as viz


def main() -> None:
    values = [0.5, 1, 2, 5, 10, 20, 50, 100, 500, 1000]

    analysis = SensitivityAnalysis(ChainConfig.default(), trials_per_point=2_000, seed=42)
    df = analysis.sweep(values)

    print("Sensitivity of P(Unicorn) to prior concentration")
    print("-" * 30)
    print(report.format_sensitivity_table(df))

    print("\nOpening sensitivity chart...")
    viz.plot_sensitivity(df).show()


if __name__ == "__main__":
    main()
