"""Abstract engagement-doctrine interface for the SHIELD engine.

A doctrine resolves the shot sequence against ONE engaged track, given the
kill probability for the object's true kind and the interceptors still
available.  Concrete doctrines share the same input/output contract so the
trial orchestrator never branches on doctrine type.

Typical usage::

    class MyDoctrine(EngagementDoctrine):
        def _resolve(self, kill_probability, inventory, rng) -> EngagementOutcome: ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from loguru import logger

from shield.core.config import SimulationConfig
from shield.core.random_draws import RandomSource


@dataclass(frozen=True)
class EngagementOutcome:
    """Result of resolving one engaged object.

    Attributes:
        killed: Whether any shot destroyed the object.
        shots_fired: Interceptors charged to this engagement.
        inventory_remaining: Inventory left for subsequent objects.
    """

    killed: bool
    shots_fired: int
    inventory_remaining: int


class EngagementDoctrine(ABC):
    """Abstract base for all shot-allocation doctrines.

    Subclasses **must** implement :meth:`_resolve`.  The base class applies
    the rule shared by every doctrine: with no inventory left the track is
    not engaged at all (a miss with zero shots, no draws consumed).

    Args:
        config: Run configuration; each doctrine reads its own fields.
    """

    name: str = "abstract"

    def __init__(self, config: SimulationConfig) -> None:
        self.config = config
        logger.debug("Initialized doctrine '{}'", self.name)

    def engage(
        self,
        kill_probability: float,
        inventory: int,
        rng: RandomSource,
    ) -> EngagementOutcome:
        """Resolve one engagement against the shared inventory.

        Args:
            kill_probability: Per-shot Pk for the object's TRUE kind.
            inventory: Interceptors available before this engagement.
            rng: Entropy source.

        Returns:
            The :class:`EngagementOutcome`; ``inventory_remaining`` is never
            negative and never exceeds *inventory*.
        """
        if inventory <= 0:
            return self._no_engagement(inventory)
        return self._resolve(kill_probability, inventory, rng)

    @abstractmethod
    def _resolve(
        self,
        kill_probability: float,
        inventory: int,
        rng: RandomSource,
    ) -> EngagementOutcome:
        """Doctrine-specific shot sequence; called only with ``inventory > 0``."""

    @staticmethod
    def _no_engagement(inventory: int) -> EngagementOutcome:
        return EngagementOutcome(killed=False, shots_fired=0, inventory_remaining=inventory)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
