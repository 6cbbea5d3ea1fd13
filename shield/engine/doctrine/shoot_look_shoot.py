"""Shoot-Look-Shoot doctrine: one shot at a time, assess, maybe re-engage.

Each shot is charged individually.  After a miss, a separate Bernoulli
draw decides whether another shot is still feasible (a stand-in for
geometry and time-to-go); that draw is taken after every miss, including
the last one the cap allows.
"""

from __future__ import annotations

from shield.core.config import DoctrineMode
from shield.core.random_draws import RandomSource, bernoulli
from shield.engine.doctrine.base import EngagementDoctrine, EngagementOutcome
from shield.engine.doctrine.registry import register_doctrine


@register_doctrine(DoctrineMode.SHOOT_LOOK_SHOOT)
class ShootLookShootDoctrine(EngagementDoctrine):
    """Fire up to ``min(max_shots_per_target, inventory)`` sequential shots."""

    def _resolve(
        self,
        kill_probability: float,
        inventory: int,
        rng: RandomSource,
    ) -> EngagementOutcome:
        cap = min(self.config.max_shots_per_target, inventory)
        shots_fired = 0

        for _ in range(cap):
            shots_fired += 1
            if bernoulli(rng, kill_probability):
                return EngagementOutcome(
                    killed=True,
                    shots_fired=shots_fired,
                    inventory_remaining=inventory - shots_fired,
                )
            if not bernoulli(rng, self.config.p_reengage):
                break

        return EngagementOutcome(
            killed=False,
            shots_fired=shots_fired,
            inventory_remaining=inventory - shots_fired,
        )
