"""Tests for histogram binning and the Plotly histogram figures."""

from __future__ import annotations

import numpy as np
import plotly.graph_objects as go
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from numpy.testing import assert_allclose

from shield.core.config import SimulationConfig
from shield.engine.monte_carlo import MonteCarloEngine
from shield.visualization.histograms import (
    histogram_counts,
    plot_histogram,
    plot_trial_histograms,
)


# ---------------------------------------------------------------------------
# Tests: histogram_counts
# ---------------------------------------------------------------------------

class TestHistogramCounts:

    def test_one_per_bin(self) -> None:
        hist = histogram_counts([0, 1, 2, 3, 4], 5)
        assert hist.counts == [1, 1, 1, 1, 1]
        assert hist.lower == 0.0
        assert hist.upper == 4.0

    def test_max_in_last_bin(self) -> None:
        assert histogram_counts([0, 10], 3).counts == [1, 0, 1]

    def test_constant_sequence_widened(self) -> None:
        hist = histogram_counts([3, 3, 3], 4)
        assert hist.lower == 2.5
        assert hist.upper == 3.5
        assert hist.counts == [0, 0, 3, 0]

    def test_empty(self) -> None:
        hist = histogram_counts([], 3)
        assert hist.counts == [0, 0, 0]
        assert hist.lower == hist.upper == 0.0

    def test_edges(self) -> None:
        hist = histogram_counts([0, 4], 2)
        assert hist.edges() == [0.0, 2.0, 4.0]
        assert hist.width == 2.0

    @pytest.mark.parametrize("bins", [0, -3])
    def test_invalid_bins(self, bins: int) -> None:
        with pytest.raises(ValueError, match="bins"):
            histogram_counts([1, 2], bins)

    @given(
        values=st.lists(st.integers(min_value=0, max_value=200), max_size=300),
        bins=st.integers(min_value=1, max_value=50),
    )
    @settings(max_examples=60, deadline=5000)
    def test_counts_sum_to_length(self, values: list[int], bins: int) -> None:
        hist = histogram_counts(values, bins)
        assert len(hist.counts) == bins
        assert sum(hist.counts) == len(values)

    @given(
        values=st.lists(
            st.integers(min_value=-50, max_value=300), min_size=1, max_size=300
        ),
        bins=st.integers(min_value=1, max_value=30),
    )
    @settings(max_examples=60, deadline=5000)
    def test_matches_numpy_histogram(self, values: list[int], bins: int) -> None:
        hist = histogram_counts(values, bins)
        counts, edges = np.histogram(values, bins=bins)
        assert hist.counts == counts.tolist()
        assert_allclose(hist.edges(), edges, atol=1e-9)


# ---------------------------------------------------------------------------
# Tests: figures
# ---------------------------------------------------------------------------

class TestPlotHistogram:

    def test_returns_bar_figure(self) -> None:
        fig = plot_histogram([1, 2, 2, 3], bins=3, title="Shots")
        assert isinstance(fig, go.Figure)
        assert len(fig.data) == 1
        assert list(fig.data[0].y) == [1, 2, 1]
        assert fig.layout.title.text == "Shots"

    def test_no_data_annotation(self) -> None:
        fig = plot_histogram([], bins=5, title="Empty")
        assert len(fig.data) == 0
        assert fig.layout.annotations[0].text == "No data"

    def test_trial_histograms(self) -> None:
        cfg = SimulationConfig(n_missiles=2, mirvs_per_missile=2, n_trials=40)
        results = MonteCarloEngine(seed=8).run(cfg)
        figs = plot_trial_histograms(results, bins=10)
        assert set(figs) == {"penetrated", "shots"}
        assert sum(figs["penetrated"].data[0].y) == 40
        assert sum(figs["shots"].data[0].y) == 40
        assert len(figs["shots"].data[0].y) == 10
