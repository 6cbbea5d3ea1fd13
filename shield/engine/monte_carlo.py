"""Monte Carlo engine for the SHIELD missile-defense model.

Repeats the trial orchestrator over many independent trials, collects the
per-trial counters into a polars DataFrame, and reduces them to a
:class:`MonteCarloSummary` (means of every counter, p10/median/p90 of
penetrated real warheads, penetration rate).

Trials are independent: each gets its own child stream of a single
``numpy.random.SeedSequence``, so a run can be fanned out over joblib
workers and still produce exactly the sequential result.

Typical usage::

    engine = MonteCarloEngine(seed=42)
    results = engine.run(config)
    print(results.summary.mean_penetrated)
"""

from __future__ import annotations

import math
import time
from dataclasses import asdict, dataclass, field
from typing import Any

import polars as pl
from joblib import Parallel, delayed
from loguru import logger

from shield.core.config import SimulationConfig
from shield.core.random_draws import RandomSource, mean, percentile, spawn_generators
from shield.engine.trial import TrialOrchestrator, TrialResult

TRIAL_SCHEMA: dict[str, pl.DataType] = {
    "real_warheads": pl.Int64,
    "penetrated_real_warheads": pl.Int64,
    "intercepted_real_warheads": pl.Int64,
    "detected_objects": pl.Int64,
    "detected_real_warheads": pl.Int64,
    "true_positives": pl.Int64,
    "false_negatives": pl.Int64,
    "false_positives": pl.Int64,
    "shots_total": pl.Int64,
    "shots_at_warheads": pl.Int64,
    "shots_at_decoys": pl.Int64,
    "inventory_remaining": pl.Int64,
    "system_up": pl.Boolean,
}


@dataclass(frozen=True)
class MonteCarloSummary:
    """Distributional statistics over all trials of one run.

    Attributes:
        n_trials: Trials aggregated.
        real_warheads: Real warheads per trial (constant within a run).
        mean_penetrated: Mean penetrated real warheads.
        p10_penetrated: 10th percentile of penetrated real warheads.
        median_penetrated: 50th percentile of penetrated real warheads.
        p90_penetrated: 90th percentile of penetrated real warheads.
        mean_intercepted: Mean intercepted real warheads.
        mean_detected_objects: Mean detected objects (all kinds).
        mean_detected_real_warheads: Mean detected real warheads.
        mean_true_positives: Mean warheads classified as warhead tracks.
        mean_false_negatives: Mean detected warheads classified as not-warhead.
        mean_false_positives: Mean decoys classified as warhead tracks.
        mean_shots_total: Mean interceptors expended.
        mean_shots_at_warheads: Mean interceptors expended on true warheads.
        mean_shots_at_decoys: Mean interceptors expended on decoys.
        mean_inventory_remaining: Mean interceptors left at trial end.
        mean_system_up: Share of trials with the system up.
        penetration_rate: ``mean_penetrated / real_warheads`` (0 when there
            are no real warheads).
    """

    n_trials: int
    real_warheads: int
    mean_penetrated: float
    p10_penetrated: float
    median_penetrated: float
    p90_penetrated: float
    mean_intercepted: float
    mean_detected_objects: float
    mean_detected_real_warheads: float
    mean_true_positives: float
    mean_false_negatives: float
    mean_false_positives: float
    mean_shots_total: float
    mean_shots_at_warheads: float
    mean_shots_at_decoys: float
    mean_inventory_remaining: float
    mean_system_up: float
    penetration_rate: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class MonteCarloResults:
    """Everything one engine run produces.

    Attributes:
        summary: Aggregate statistics.
        trials: Per-trial results, in trial order.
        frame: The same trials as a polars DataFrame (``TRIAL_SCHEMA``).
        metadata: Seed entropy, worker count, doctrine, trial count.
    """

    summary: MonteCarloSummary
    trials: list[TrialResult]
    frame: pl.DataFrame
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def penetrated(self) -> list[int]:
        """Penetrated real warheads per trial (histogram input)."""
        return self.frame.get_column("penetrated_real_warheads").to_list()

    @property
    def intercepted(self) -> list[int]:
        return self.frame.get_column("intercepted_real_warheads").to_list()

    @property
    def shots_total(self) -> list[int]:
        """Total shots fired per trial (histogram input)."""
        return self.frame.get_column("shots_total").to_list()

    @property
    def false_positives(self) -> list[int]:
        return self.frame.get_column("false_positives").to_list()


def trials_frame(trials: list[TrialResult]) -> pl.DataFrame:
    """Collect trial results into a DataFrame with a fixed schema."""
    return pl.DataFrame([t.to_row() for t in trials], schema=TRIAL_SCHEMA)


def _column_mean(frame: pl.DataFrame, name: str) -> float:
    return mean(frame.get_column(name).cast(pl.Float64).to_list())


def summarize_trials(trials: list[TrialResult]) -> MonteCarloSummary:
    """Reduce per-trial results to a :class:`MonteCarloSummary`.

    Args:
        trials: Trial results of one run (may be empty).

    Returns:
        Summary statistics.  With no trials every mean and percentile is NaN,
        the real-warhead count is 0 and the penetration rate is 0.
    """
    return summarize_frame(trials_frame(trials))


def summarize_frame(frame: pl.DataFrame) -> MonteCarloSummary:
    """Same as :func:`summarize_trials`, starting from a ``TRIAL_SCHEMA`` frame."""
    penetrated = frame.get_column("penetrated_real_warheads").to_list()
    real_warheads = int(frame.get_column("real_warheads")[0]) if frame.height else 0

    mean_penetrated = mean(penetrated)
    penetration_rate = mean_penetrated / real_warheads if real_warheads > 0 else 0.0

    return MonteCarloSummary(
        n_trials=frame.height,
        real_warheads=real_warheads,
        mean_penetrated=mean_penetrated,
        p10_penetrated=percentile(penetrated, 10),
        median_penetrated=percentile(penetrated, 50),
        p90_penetrated=percentile(penetrated, 90),
        mean_intercepted=_column_mean(frame, "intercepted_real_warheads"),
        mean_detected_objects=_column_mean(frame, "detected_objects"),
        mean_detected_real_warheads=_column_mean(frame, "detected_real_warheads"),
        mean_true_positives=_column_mean(frame, "true_positives"),
        mean_false_negatives=_column_mean(frame, "false_negatives"),
        mean_false_positives=_column_mean(frame, "false_positives"),
        mean_shots_total=_column_mean(frame, "shots_total"),
        mean_shots_at_warheads=_column_mean(frame, "shots_at_warheads"),
        mean_shots_at_decoys=_column_mean(frame, "shots_at_decoys"),
        mean_inventory_remaining=_column_mean(frame, "inventory_remaining"),
        mean_system_up=_column_mean(frame, "system_up"),
        penetration_rate=penetration_rate,
    )


class MonteCarloEngine:
    """Monte Carlo driver over independent SHIELD trials.

    Args:
        seed: Root seed for the per-trial streams; ``None`` uses fresh OS
            entropy (recorded in the results metadata).
        n_jobs: joblib worker count; ``1`` runs in-process, ``-1`` uses all
            CPUs.  The output does not depend on this value.
        backend: joblib backend used when ``n_jobs != 1``.

    Example::

        engine = MonteCarloEngine(seed=42, n_jobs=-1)
        results = engine.run(config)
        stats = results.summary.to_dict()
    """

    def __init__(
        self,
        seed: int | None = 42,
        n_jobs: int = 1,
        backend: str = "loky",
    ) -> None:
        self._seed = seed
        self._n_jobs = n_jobs
        self._backend = backend

    def run(
        self,
        config: SimulationConfig,
        rng: RandomSource | None = None,
    ) -> MonteCarloResults:
        """Run ``config.n_trials`` independent trials and summarise them.

        Args:
            config: Run configuration.
            rng: Optional single entropy stream shared by all trials, consumed
                sequentially.  When given, the engine seed and worker count
                are ignored.

        Returns:
            :class:`MonteCarloResults` with the summary, per-trial results,
            their DataFrame, and run metadata.
        """
        orchestrator = TrialOrchestrator(config)
        n_trials = config.n_trials
        t0 = time.monotonic()

        logger.info(
            "Running {} trials: {} real warheads + {} decoys, doctrine={}, inventory={}",
            n_trials,
            config.real_warheads,
            config.decoys,
            config.doctrine_mode.value,
            config.n_inventory,
        )

        metadata: dict[str, Any] = {
            "n_trials": n_trials,
            "doctrine": config.doctrine_mode.value,
        }

        if rng is not None:
            if self._n_jobs != 1:
                logger.warning(
                    "Injected entropy stream is sequential; ignoring n_jobs={}",
                    self._n_jobs,
                )
            trials = [orchestrator.run(rng) for _ in range(n_trials)]
            metadata.update({"seed": None, "n_jobs": 1, "entropy": "injected"})
        else:
            generators, entropy = spawn_generators(self._seed, n_trials)
            if self._n_jobs == 1:
                trials = [orchestrator.run(gen) for gen in generators]
            else:
                trials = Parallel(n_jobs=self._n_jobs, backend=self._backend)(
                    delayed(orchestrator.run)(gen) for gen in generators
                )
            metadata.update({"seed": entropy, "n_jobs": self._n_jobs})

        frame = trials_frame(trials)
        summary = summarize_frame(frame)
        elapsed = time.monotonic() - t0

        logger.info(
            "Monte Carlo done in {:.2f}s: mean penetrated {:.2f}/{} ({:.1f}%), "
            "p10/p50/p90 = {}/{}/{}",
            elapsed,
            summary.mean_penetrated,
            summary.real_warheads,
            100.0 * summary.penetration_rate,
            _fmt_count(summary.p10_penetrated),
            _fmt_count(summary.median_penetrated),
            _fmt_count(summary.p90_penetrated),
        )

        return MonteCarloResults(
            summary=summary,
            trials=list(trials),
            frame=frame,
            metadata=metadata,
        )


def _fmt_count(value: float) -> str:
    return "NaN" if math.isnan(value) else f"{value:.0f}"
