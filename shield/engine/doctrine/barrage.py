"""Barrage doctrine: commit the whole per-track allocation at once.

The allocation is charged to inventory atomically.  Shots are drawn only
until the first kill; the unused remainder of the allocation stays
charged.
"""

from __future__ import annotations

from shield.core.config import DoctrineMode
from shield.core.random_draws import RandomSource, bernoulli
from shield.engine.doctrine.base import EngagementDoctrine, EngagementOutcome
from shield.engine.doctrine.registry import register_doctrine


@register_doctrine(DoctrineMode.BARRAGE)
class BarrageDoctrine(EngagementDoctrine):
    """Allocate ``min(shots_per_target, inventory)`` interceptors per track."""

    def _resolve(
        self,
        kill_probability: float,
        inventory: int,
        rng: RandomSource,
    ) -> EngagementOutcome:
        alloc = min(self.config.shots_per_target, inventory)
        if alloc <= 0:
            return self._no_engagement(inventory)

        killed = False
        for _ in range(alloc):
            if bernoulli(rng, kill_probability):
                killed = True
                break

        return EngagementOutcome(
            killed=killed,
            shots_fired=alloc,
            inventory_remaining=inventory - alloc,
        )
