"""Random draw primitives and small statistics helpers for the SHIELD engine.

Every stochastic decision in the engine routes through :func:`bernoulli`
(and therefore :func:`uniform`), so a single injectable entropy source is
enough to make any trial reproducible.  Production runs use
``numpy.random.Generator`` streams; tests and replays can substitute any
object exposing ``random() -> float``.

Typical usage::

    rng = np.random.default_rng(42)
    if bernoulli(rng, 0.8):
        ...
    order = permute(rng, targets)
    p90 = percentile(penetrated, 90)
"""

from __future__ import annotations

import math
from collections.abc import MutableSequence, Sequence
from typing import Any, Protocol, TypeVar

import numpy as np

T = TypeVar("T")


class RandomSource(Protocol):
    """Minimal entropy interface: uniform floats in ``[0, 1)``."""

    def random(self) -> float:
        ...


class ReplaySource:
    """Entropy source that replays a fixed sequence of uniform draws.

    Drives the engine through an exact, scripted draw sequence (e.g. to
    reproduce one trial or to pin a doctrine's shot-by-shot behaviour).

    Args:
        values: Uniform draws in ``[0, 1)``, consumed in order.

    Raises:
        RuntimeError: From :meth:`random` once the sequence is exhausted.
    """

    def __init__(self, values: Sequence[float]) -> None:
        self._values = [float(v) for v in values]
        self._cursor = 0

    @property
    def consumed(self) -> int:
        """Number of draws handed out so far."""
        return self._cursor

    @property
    def remaining(self) -> int:
        return len(self._values) - self._cursor

    def random(self) -> float:
        if self._cursor >= len(self._values):
            raise RuntimeError(
                f"ReplaySource exhausted after {self._cursor} draws."
            )
        value = self._values[self._cursor]
        self._cursor += 1
        return value


def clamp01(x: float) -> float:
    """Clamp *x* into ``[0, 1]``; NaN maps to 0."""
    x = float(x)
    if math.isnan(x):
        return 0.0
    return max(0.0, min(1.0, x))


def uniform(rng: RandomSource) -> float:
    """Draw one float in ``[0, 1)`` from *rng*."""
    return float(rng.random())


def bernoulli(rng: RandomSource, p: float) -> bool:
    """Return ``True`` with probability ``clamp01(p)``."""
    return uniform(rng) < clamp01(p)


def permute(rng: RandomSource, items: MutableSequence[T]) -> MutableSequence[T]:
    """Shuffle *items* in place (Fisher-Yates) and return it.

    Consumes exactly ``len(items) - 1`` draws (none for 0 or 1 items).
    """
    for i in range(len(items) - 1, 0, -1):
        j = int(uniform(rng) * (i + 1))
        items[i], items[j] = items[j], items[i]
    return items


def percentile(values: Sequence[float], p: float) -> float:
    """Linear-interpolation percentile of *values* at *p* (0-100).

    The rank index is ``p / 100 * (n - 1)``; fractional indices interpolate
    between the two neighbouring order statistics.  The input is not
    modified.

    Args:
        values: Numeric observations (any order).
        p: Percentile in ``[0, 100]``.

    Returns:
        The interpolated percentile, or NaN for an empty sequence.

    Raises:
        ValueError: If *p* lies outside ``[0, 100]``.
    """
    if len(values) == 0:
        return math.nan
    arr = np.asarray(values, dtype=np.float64)
    return float(np.percentile(arr, p, method="linear"))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean of *values*, or NaN for an empty sequence."""
    if len(values) == 0:
        return math.nan
    return float(np.mean(np.asarray(values, dtype=np.float64)))


def spawn_generators(
    seed: int | None,
    n: int,
) -> tuple[list[np.random.Generator], Any]:
    """Derive *n* independent generators from one seed.

    Each trial gets its own child of a single ``SeedSequence`` so results do
    not depend on whether trials run sequentially or in parallel.

    Args:
        seed: Root seed; ``None`` draws fresh OS entropy.
        n: Number of child streams.

    Returns:
        Tuple of (generators, root entropy).  The entropy reproduces the same
        streams when passed back as *seed*.
    """
    root = np.random.SeedSequence(seed)
    children = root.spawn(n)
    return [np.random.default_rng(child) for child in children], root.entropy
