"""
visualization.py — Plotly figure factories for simulation output.

Depends on: simulation.py, sampling.py
All functions return plotly.graph_objects.Figure objects.
"""
from __future__ import annotations

from typing import Mapping, Optional

import numpy as np
import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots
from scipy.stats import beta

from vc_markov.sampling import validate_distribution
from vc_markov.simulation import SimulationResult
from vc_markov.stages import ABSORBING_STAGES, TRANSIENT_STAGES, Stage


# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------

_COLORS = {
    "background": "#0D1117",
    "paper": "#161B22",
    "grid": "#21262D",
    "text": "#C9D1D9",
    "text_secondary": "#8B949E",
    "accent": "#58A6FF",
    "positive": "#3FB950",
    "negative": "#F85149",
    "neutral": "#FFA657",
}

_STAGE_COLORS = {
    Stage.SEED: "#79C0FF",
    Stage.SERIES_A: "#58A6FF",
    Stage.SERIES_B: "#388BFD",
    Stage.SERIES_C: "#1F6FEB",
    Stage.BANKRUPT: _COLORS["negative"],
    Stage.UNICORN: _COLORS["positive"],
    Stage.ZOMBIE: _COLORS["neutral"],
}

_PLOTLY_TEMPLATE = "plotly_dark"


def _apply_theme(fig: go.Figure) -> go.Figure:
    """Dark-background styling shared by every figure; returns fig for chaining."""
    fig.update_layout(
        template=_PLOTLY_TEMPLATE,
        paper_bgcolor=_COLORS["paper"],
        plot_bgcolor=_COLORS["background"],
        font=dict(
            family="Inter, -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif",
            color=_COLORS["text"],
            size=12,
        ),
        title_font=dict(size=16, color=_COLORS["text"]),
        legend=dict(
            bgcolor=_COLORS["paper"],
            bordercolor=_COLORS["grid"],
            borderwidth=1,
            font=dict(color=_COLORS["text_secondary"]),
        ),
    )
    fig.update_xaxes(gridcolor=_COLORS["grid"], zerolinecolor=_COLORS["grid"])
    fig.update_yaxes(gridcolor=_COLORS["grid"], zerolinecolor=_COLORS["grid"])
    return fig


# ---------------------------------------------------------------------------
# Terminal outcomes
# ---------------------------------------------------------------------------

def plot_outcome_distribution(
    result: SimulationResult,
    title: Optional[str] = None,
) -> go.Figure:
    """
    Bar chart of terminal-outcome percentages with bootstrap error bars.

    Parameters
    ----------
    result:
        Output of MarkovSimulator.run().
    title:
        Chart title.

    Returns
    -------
    go.Figure
    """
    df = result.summary()
    has_ci = df["ci_lower"].notna().all()

    error_y = None
    if has_ci:
        error_y = dict(
            type="data",
            symmetric=False,
            array=(df["ci_upper"] * 100 - df["percentage"]).clip(lower=0),
            arrayminus=(df["percentage"] - df["ci_lower"] * 100).clip(lower=0),
            color=_COLORS["text_secondary"],
        )

    fig = go.Figure(
        go.Bar(
            x=df["stage"],
            y=df["percentage"],
            marker_color=[_STAGE_COLORS[s] for s in ABSORBING_STAGES],
            error_y=error_y,
            text=[f"{p:.2f}%" for p in df["percentage"]],
            textposition="outside",
            hovertemplate="%{x}<br>%{y:.2f}%<extra></extra>",
        )
    )
    fig.update_layout(
        title=title or f"Terminal Outcomes — {result.n:,} trajectories",
        xaxis_title="Outcome",
        yaxis_title="Share of entities (%)",
        showlegend=False,
    )
    return _apply_theme(fig)


def plot_stage_reach(result: SimulationResult) -> go.Figure:
    """Funnel of the share of entities that reached each financing stage."""
    reach = result.stage_reach()
    stages = list(TRANSIENT_STAGES) + [Stage.UNICORN]
    fig = go.Figure(
        go.Funnel(
            y=[s.value for s in stages],
            x=[reach[s] * 100 for s in stages],
            marker=dict(color=[_STAGE_COLORS[s] for s in stages]),
            texttemplate="%{x:.1f}%",
            hovertemplate="%{y}<br>%{x:.2f}% reached<extra></extra>",
        )
    )
    fig.update_layout(title="Stage Reach")
    return _apply_theme(fig)


# ---------------------------------------------------------------------------
# Sensitivity
# ---------------------------------------------------------------------------

def plot_sensitivity(
    df: pd.DataFrame,
    title: str = "Unicorn Probability vs Prior Concentration",
) -> go.Figure:
    """
    Line chart of a SensitivityAnalysis.sweep() frame on a log x-axis.
    """
    if df.empty:
        return go.Figure()

    fig = go.Figure(
        go.Scatter(
            x=df["concentration"],
            y=df["unicorn_probability"],
            mode="lines+markers",
            line=dict(color=_COLORS["accent"], width=2),
            marker=dict(size=8),
            hovertemplate="Concentration %{x:g}<br>P(Unicorn) %{y:.4f}<extra></extra>",
        )
    )
    fig.update_layout(
        title=title,
        xaxis_title="Concentration (all stages)",
        yaxis_title="P(Unicorn)",
        xaxis_type="log" if (df["concentration"] > 0).all() else "linear",
    )
    return _apply_theme(fig)


# ---------------------------------------------------------------------------
# Prior update
# ---------------------------------------------------------------------------

def plot_prior_update(
    prior: Mapping[object, float],
    posterior: Mapping[object, float],
    pseudo_count_total: float = 100,
    observed_total: float = 0,
) -> go.Figure:
    """
    Beta marginal densities of each label before and after an update.

    The prior is Dirichlet(prior × pseudo_count_total); the posterior carries
    ``observed_total`` additional observations.
    """
    validate_distribution(prior)
    validate_distribution(posterior)
    labels = list(prior)
    fig = make_subplots(
        rows=1,
        cols=len(labels),
        subplot_titles=[str(label) for label in labels],
    )
    x = np.linspace(0.0005, 0.9995, 400)
    weights = (
        (pseudo_count_total, _COLORS["text_secondary"], "Prior", prior),
        (pseudo_count_total + observed_total, _COLORS["accent"], "Posterior", posterior),
    )
    for col, label in enumerate(labels, start=1):
        for total, color, name, probs in weights:
            a = probs[label] * total
            b = total - a
            if a <= 0 or b <= 0:
                continue
            fig.add_trace(
                go.Scatter(
                    x=x,
                    y=beta.pdf(x, a, b),
                    name=name,
                    legendgroup=name,
                    showlegend=col == 1,
                    line=dict(color=color, width=2),
                    hoverinfo="skip",
                ),
                row=1,
                col=col,
            )
    fig.update_layout(title="Transition Probabilities — Prior vs Posterior")
    return _apply_theme(fig)
