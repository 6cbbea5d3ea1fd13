"""Single-trial orchestration for the SHIELD engine.

One trial: generate and shuffle the salvo, draw the common-mode system
state, then walk the objects strictly in order.  Each object is detected,
classified, and (if it became a warhead track) engaged against the one
interceptor inventory that this trial owns.  Every engagement sees the
inventory left behind by all earlier objects in the same trial, so the
loop must never be reordered or batched.

Typical usage::

    orchestrator = TrialOrchestrator(config)
    result = orchestrator.run(np.random.default_rng(7))
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from loguru import logger

from shield.core.config import SimulationConfig
from shield.core.random_draws import RandomSource
from shield.engine.degradation import draw_trial_degradation
from shield.engine.detection import assess_target
from shield.engine.doctrine import barrage, shoot_look_shoot  # noqa: F401  (registers doctrines)
from shield.engine.doctrine.base import EngagementDoctrine
from shield.engine.doctrine.registry import create_doctrine
from shield.engine.salvo import generate_salvo


class Inventory:
    """Interceptor counter owned by exactly one running trial.

    Args:
        size: Interceptors available at trial start.
    """

    def __init__(self, size: int) -> None:
        self._remaining = size

    @property
    def remaining(self) -> int:
        return self._remaining

    def apply(self, remaining: int) -> None:
        """Adopt the remainder reported by an engagement.

        Raises:
            RuntimeError: If *remaining* is negative or exceeds the current
                count (inventory only ever depletes within a trial).
        """
        if remaining < 0 or remaining > self._remaining:
            raise RuntimeError(
                f"Invalid inventory transition {self._remaining} -> {remaining}"
            )
        self._remaining = remaining


@dataclass(frozen=True)
class TrialResult:
    """Counters accumulated over one trial.

    Attributes:
        real_warheads: Warheads in the salvo.
        penetrated_real_warheads: Warheads undetected, misclassified, or
            engaged and missed.
        intercepted_real_warheads: Warheads engaged and killed.
        detected_objects: Detected objects of either kind.
        detected_real_warheads: Detected warheads.
        true_positives: Warheads classified as warhead tracks.
        false_negatives: Detected warheads classified as not-warhead.
        false_positives: Decoys classified as warhead tracks.
        shots_total: Interceptors expended.
        shots_at_warheads: Interceptors expended on true warheads.
        shots_at_decoys: Interceptors expended on true decoys.
        inventory_remaining: Interceptors left at trial end.
        system_up: Common-mode state of this trial.
    """

    real_warheads: int
    penetrated_real_warheads: int
    intercepted_real_warheads: int
    detected_objects: int
    detected_real_warheads: int
    true_positives: int
    false_negatives: int
    false_positives: int
    shots_total: int
    shots_at_warheads: int
    shots_at_decoys: int
    inventory_remaining: int
    system_up: bool

    def to_row(self) -> dict[str, Any]:
        """Flatten into a mapping suitable for a polars row."""
        return asdict(self)


class TrialOrchestrator:
    """Runs independent trials of one configuration.

    The doctrine is resolved once from ``config.doctrine_mode``; the
    inventory is created fresh inside every :meth:`run` call and never
    leaves it.

    Args:
        config: Run configuration.
    """

    def __init__(self, config: SimulationConfig) -> None:
        self.config = config
        self.doctrine: EngagementDoctrine = create_doctrine(config)

    def run(self, rng: RandomSource) -> TrialResult:
        """Execute one complete trial.

        Args:
            rng: Entropy source dedicated to this trial.

        Returns:
            The trial's :class:`TrialResult`.

        Raises:
            RuntimeError: If a warhead escapes both outcome counters.
        """
        cfg = self.config
        salvo = generate_salvo(
            cfg.n_missiles, cfg.mirvs_per_missile, cfg.decoys_per_warhead, rng
        )
        degradation = draw_trial_degradation(cfg, rng)
        inventory = Inventory(cfg.n_inventory)

        penetrated = intercepted = 0
        detected_objects = detected_real = 0
        true_positives = false_negatives = false_positives = 0
        shots_total = shots_at_warheads = shots_at_decoys = 0

        for target in salvo.targets:
            track = assess_target(
                target,
                degradation.p_detect_track,
                cfg.p_classify_warhead,
                cfg.p_false_alarm_decoy,
                rng,
            )

            if not track.detected:
                if target.is_warhead:
                    penetrated += 1
                continue

            detected_objects += 1
            if target.is_warhead:
                detected_real += 1
                if track.classified_as_warhead:
                    true_positives += 1
                else:
                    false_negatives += 1
            elif track.classified_as_warhead:
                false_positives += 1

            if not track.classified_as_warhead:
                if target.is_warhead:
                    penetrated += 1
                continue

            outcome = self.doctrine.engage(
                degradation.kill_probability(target.kind),
                inventory.remaining,
                rng,
            )
            inventory.apply(outcome.inventory_remaining)

            shots_total += outcome.shots_fired
            if target.is_warhead:
                shots_at_warheads += outcome.shots_fired
                if outcome.killed:
                    intercepted += 1
                else:
                    penetrated += 1
            else:
                shots_at_decoys += outcome.shots_fired

        if penetrated + intercepted != salvo.real_warheads:
            raise RuntimeError(
                f"Warhead accounting broken: {penetrated} penetrated + "
                f"{intercepted} intercepted != {salvo.real_warheads}"
            )

        result = TrialResult(
            real_warheads=salvo.real_warheads,
            penetrated_real_warheads=penetrated,
            intercepted_real_warheads=intercepted,
            detected_objects=detected_objects,
            detected_real_warheads=detected_real,
            true_positives=true_positives,
            false_negatives=false_negatives,
            false_positives=false_positives,
            shots_total=shots_total,
            shots_at_warheads=shots_at_warheads,
            shots_at_decoys=shots_at_decoys,
            inventory_remaining=inventory.remaining,
            system_up=degradation.system_up,
        )
        logger.trace(
            "Trial done: penetrated={}/{} shots={} inventory_left={} up={}",
            penetrated,
            salvo.real_warheads,
            shots_total,
            inventory.remaining,
            degradation.system_up,
        )
        return result


def run_trial(config: SimulationConfig, rng: RandomSource) -> TrialResult:
    """Convenience wrapper: one trial of *config* with *rng*."""
    return TrialOrchestrator(config).run(rng)
