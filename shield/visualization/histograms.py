"""Frequency histograms of per-trial Monte Carlo outputs.

Bins the raw per-trial sequences the engine exposes (penetrated real
warheads, total shots fired) and draws them as Plotly bar charts.  The
engine has no opinion on bin count; callers choose it.

Typical usage::

    figs = plot_trial_histograms(results, bins=20)
    figs["penetrated"].write_html("penetrated.html")
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import plotly.graph_objects as go
from loguru import logger

from shield.engine.monte_carlo import MonteCarloResults

BAR_COLOUR = "rgba(38, 50, 56, 0.70)"


@dataclass(frozen=True)
class Histogram:
    """Equal-width bin counts over ``[lower, upper]``.

    Attributes:
        counts: Observations per bin.
        lower: Left edge of the first bin.
        upper: Right edge of the last bin.
    """

    counts: list[int]
    lower: float
    upper: float

    @property
    def bins(self) -> int:
        return len(self.counts)

    @property
    def width(self) -> float:
        return (self.upper - self.lower) / self.bins

    def edges(self) -> list[float]:
        return [self.lower + i * self.width for i in range(self.bins + 1)]


def histogram_counts(values: Sequence[float], bins: int) -> Histogram:
    """Bin *values* into *bins* equal-width bins spanning their range.

    A constant sequence is widened to ``[v - 0.5, v + 0.5]`` so it lands in
    a single visible bin.  The maximum falls into the last bin.

    Args:
        values: Per-trial observations.
        bins: Number of bins (>= 1).

    Returns:
        A :class:`Histogram`; empty input gives all-zero counts over
        ``[0, 0]``.

    Raises:
        ValueError: If *bins* < 1.
    """
    if bins < 1:
        raise ValueError(f"bins must be >= 1, got {bins}")

    if len(values) == 0:
        return Histogram(counts=[0] * bins, lower=0.0, upper=0.0)

    counts, edges = np.histogram(np.asarray(values, dtype=np.float64), bins=bins)
    return Histogram(
        counts=counts.tolist(),
        lower=float(edges[0]),
        upper=float(edges[-1]),
    )


def plot_histogram(
    values: Sequence[float],
    bins: int,
    title: str,
    x_label: str = "Value per trial",
    height: int = 360,
    width: int = 560,
) -> go.Figure:
    """Draw a frequency histogram of *values* as a bar chart.

    Args:
        values: Per-trial observations.
        bins: Number of bins.
        title: Chart title.
        x_label: X-axis label.
        height: Figure height in pixels.
        width: Figure width in pixels.

    Returns:
        Plotly Figure object ("No data" annotation for empty input).
    """
    fig = go.Figure()

    if len(values) == 0:
        fig.add_annotation(
            text="No data",
            showarrow=False,
            xref="paper",
            yref="paper",
            x=0.5,
            y=0.5,
        )
    else:
        hist = histogram_counts(values, bins)
        edges = hist.edges()
        centres = [(lo + hi) / 2.0 for lo, hi in zip(edges[:-1], edges[1:])]
        labels = [f"{lo:.1f}-{hi:.1f}" for lo, hi in zip(edges[:-1], edges[1:])]
        fig.add_trace(
            go.Bar(
                x=centres,
                y=hist.counts,
                width=[hist.width] * hist.bins,
                customdata=labels,
                marker={"color": BAR_COLOUR},
                hovertemplate="Bin: %{customdata}<br>Count: %{y}<extra></extra>",
                name=title,
            )
        )

    fig.update_layout(
        title=title,
        xaxis_title=x_label,
        yaxis_title="Trials",
        height=height,
        width=width,
        template="plotly_white",
        bargap=0.02,
        showlegend=False,
    )
    return fig


def plot_trial_histograms(
    results: MonteCarloResults,
    bins: int = 20,
) -> dict[str, go.Figure]:
    """Histograms of penetrated real warheads and total shots per trial.

    Returns:
        Mapping with keys ``"penetrated"`` and ``"shots"``.
    """
    figs = {
        "penetrated": plot_histogram(
            results.penetrated,
            bins,
            "Histogram: penetrated real warheads (per trial)",
            x_label="Penetrated real warheads",
        ),
        "shots": plot_histogram(
            results.shots_total,
            bins,
            "Histogram: total shots fired (per trial)",
            x_label="Interceptors fired",
        ),
    }
    logger.info("Trial histograms created: {} trials, {} bins", len(results.trials), bins)
    return figs
