"""Salvo generator: missiles -> MIRVs (real warheads) -> decoys-as-objects.

Expands the attack into a flat population of trackable objects and
shuffles it, so that the shared interceptor inventory is not
systematically exhausted on one kind before the other is reached.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from shield.core.random_draws import RandomSource, permute


class TargetKind(str, Enum):
    """True nature of a trackable object."""

    WARHEAD = "warhead"
    DECOY = "decoy"


@dataclass(frozen=True)
class Target:
    """One trackable object.

    Attributes:
        kind: True object kind, fixed at generation.
        id: Traceability label (``W3``, ``D17``); no semantic effect.
    """

    kind: TargetKind
    id: str

    @property
    def is_warhead(self) -> bool:
        return self.kind is TargetKind.WARHEAD


@dataclass
class Salvo:
    """Shuffled object population for one trial.

    Attributes:
        targets: Objects in processing order.
        real_warheads: Number of warhead-kind objects.
        decoys: Number of decoy-kind objects.
    """

    targets: list[Target]
    real_warheads: int
    decoys: int

    @property
    def total_objects(self) -> int:
        return self.real_warheads + self.decoys


def generate_salvo(
    n_missiles: int,
    mirvs_per_missile: int,
    decoys_per_warhead: int,
    rng: RandomSource,
) -> Salvo:
    """Build and shuffle the object population for one trial.

    Args:
        n_missiles: Incoming missiles (>= 0).
        mirvs_per_missile: Warheads per missile (>= 1).
        decoys_per_warhead: Decoys per real warhead (>= 0).
        rng: Entropy source for the permutation.

    Returns:
        A :class:`Salvo` whose ``targets`` are in uniformly random order.
    """
    real_warheads = n_missiles * mirvs_per_missile
    decoys = real_warheads * decoys_per_warhead

    targets = [Target(TargetKind.WARHEAD, f"W{w}") for w in range(real_warheads)]
    targets.extend(Target(TargetKind.DECOY, f"D{d}") for d in range(decoys))

    permute(rng, targets)
    return Salvo(targets=targets, real_warheads=real_warheads, decoys=decoys)
