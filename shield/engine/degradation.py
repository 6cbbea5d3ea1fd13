"""Trial-level common-mode reliability.

One Bernoulli draw per trial decides whether the defense is fully up.
When it is down, detection and both kill probabilities are scaled by
their degrade factors for every object in that trial.
"""

from __future__ import annotations

from dataclasses import dataclass

from shield.core.config import SimulationConfig
from shield.core.random_draws import RandomSource, bernoulli, clamp01
from shield.engine.salvo import TargetKind


@dataclass(frozen=True)
class TrialDegradation:
    """Operative probabilities shared by every object in one trial.

    Attributes:
        system_up: Whether the common-mode draw succeeded.
        p_detect_track: Detection probability in effect this trial.
        pk_warhead: Per-shot kill probability against true warheads.
        pk_decoy: Per-shot kill probability against true decoys.
    """

    system_up: bool
    p_detect_track: float
    pk_warhead: float
    pk_decoy: float

    def kill_probability(self, kind: TargetKind) -> float:
        """Kill probability for an object of TRUE kind *kind*."""
        return self.pk_warhead if kind is TargetKind.WARHEAD else self.pk_decoy


def draw_trial_degradation(
    config: SimulationConfig,
    rng: RandomSource,
) -> TrialDegradation:
    """Draw the common-mode system state for one trial.

    Must be called exactly once per trial, before any per-object draw.
    """
    if bernoulli(rng, config.p_system_up):
        return TrialDegradation(
            system_up=True,
            p_detect_track=config.p_detect_track,
            pk_warhead=config.pk_warhead,
            pk_decoy=config.pk_decoy,
        )

    return TrialDegradation(
        system_up=False,
        p_detect_track=clamp01(config.p_detect_track * config.detect_degrade_factor),
        pk_warhead=clamp01(config.pk_warhead * config.pk_degrade_factor),
        pk_decoy=clamp01(config.pk_decoy * config.pk_degrade_factor),
    )
