"""Tests for the trial-level common-mode degradation draw."""

from __future__ import annotations

import pytest

from shield.core.config import SimulationConfig
from shield.core.random_draws import ReplaySource
from shield.engine.degradation import draw_trial_degradation
from shield.engine.salvo import TargetKind


@pytest.fixture
def config() -> SimulationConfig:
    return SimulationConfig(
        p_system_up=0.9,
        p_detect_track=0.8,
        pk_warhead=0.6,
        pk_decoy=0.8,
        detect_degrade_factor=0.5,
        pk_degrade_factor=0.7,
    )


class TestDrawTrialDegradation:
    """Tests for system-up and system-down parameter sets."""

    def test_system_up_keeps_nominal(self, config: SimulationConfig) -> None:
        deg = draw_trial_degradation(config, ReplaySource([0.1]))
        assert deg.system_up is True
        assert deg.p_detect_track == pytest.approx(0.8)
        assert deg.kill_probability(TargetKind.WARHEAD) == pytest.approx(0.6)
        assert deg.kill_probability(TargetKind.DECOY) == pytest.approx(0.8)

    def test_system_down_scales(self, config: SimulationConfig) -> None:
        deg = draw_trial_degradation(config, ReplaySource([0.95]))
        assert deg.system_up is False
        assert deg.p_detect_track == pytest.approx(0.4)
        assert deg.pk_warhead == pytest.approx(0.42)
        assert deg.pk_decoy == pytest.approx(0.56)

    def test_consumes_one_draw(self, config: SimulationConfig) -> None:
        src = ReplaySource([0.5, 0.5])
        draw_trial_degradation(config, src)
        assert src.consumed == 1

    def test_never_up_when_p_zero(self) -> None:
        cfg = SimulationConfig(p_system_up=0.0)
        assert draw_trial_degradation(cfg, ReplaySource([0.0])).system_up is False

    def test_unit_factors_leave_values(self) -> None:
        cfg = SimulationConfig(
            p_system_up=0.0, detect_degrade_factor=1.0, pk_degrade_factor=1.0
        )
        deg = draw_trial_degradation(cfg, ReplaySource([0.3]))
        assert deg.p_detect_track == pytest.approx(cfg.p_detect_track)
        assert deg.pk_warhead == pytest.approx(cfg.pk_warhead)
