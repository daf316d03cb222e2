"""
prior_update.py — Bayesian update of seed-stage transition rates.

Demonstrates:
- Conjugate Dirichlet-multinomial update of one stage's priors
- Credible intervals before and after the update
- Re-running the simulation with the updated stage

Run:
    python examples/prior_update.py
"""
from __future__ import annotations

from vc_markov import ChainConfig, MarkovSimulator, Stage
from vc_markov import posterior_interval, update_priors
from vc_markov import visualization as viz


def main() -> None:
    config = ChainConfig.default()
    prior = {o.value: p for o, p in config.means[Stage.SEED].items()}

    # Ten seed companies tracked for one period: two raised, eight kept operating
    observed = {"NextStage": 2, "Bankrupt": 0, "Operating": 8, "Unicorn": 0}
    pseudo_count_total = 100

    posterior = update_priors(prior, observed, pseudo_count_total)
    prior_ci = posterior_interval(prior, pseudo_count_total)
    post_ci = posterior_interval(posterior, pseudo_count_total + sum(observed.values()))

    print(f"  {'Outcome':<10} {'Prior':>8} {'Posterior':>10}   95% credible (post)")
    print(f"  {'─' * 54}")
    for label in prior:
        lo, hi = post_ci[label]
        print(
            f"  {label:<10} {prior[label]:>8.4f} {posterior[label]:>10.4f}   "
            f"[{lo:.4f}, {hi:.4f}]  (prior [{prior_ci[label][0]:.4f}, {prior_ci[label][1]:.4f}])"
        )

    # -------------------------------------------------------------------
    # Re-run with the updated seed-stage priors
    # -------------------------------------------------------------------
    updated = config.with_updated_stage(Stage.SEED, observed, pseudo_count_total)
    before = MarkovSimulator(config, seed=42).run(10_000, bootstrap=False)
    after = MarkovSimulator(updated, seed=42).run(10_000, bootstrap=False)
    print(f"\n  P(Unicorn) before update: {before.unicorn_probability:.4f}")
    print(f"  P(Unicorn) after update:  {after.unicorn_probability:.4f}")

    print("\nOpening prior vs posterior chart...")
    viz.plot_prior_update(
        prior, posterior, pseudo_count_total, observed_total=sum(observed.values())
    ).show()


if __name__ == "__main__":
    main()
