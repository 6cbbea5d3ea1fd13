"""Plain-text run report for SHIELD Monte Carlo results.

Formats the inputs, the headline penetration statistics, and the
detection / classification / consumption diagnostics as a fixed-width
text block for terminals and log files.

Typical usage::

    results = MonteCarloEngine(seed=42).run(config)
    print(render_summary(config, results.summary))
"""

from __future__ import annotations

import math

from shield.core.config import DoctrineMode, SimulationConfig
from shield.engine.monte_carlo import MonteCarloSummary

LABEL_WIDTH = 37


def fmt(x: float, digits: int = 2) -> str:
    """Fixed-point format; non-finite values print as ``NaN``."""
    if not math.isfinite(x):
        return "NaN"
    return f"{x:.{digits}f}"


def _line(label: str, value: str) -> str:
    return f"  {label:<{LABEL_WIDTH}}{value}"


def describe_doctrine(config: SimulationConfig) -> str:
    """One-line description of the configured doctrine."""
    if config.doctrine_mode is DoctrineMode.BARRAGE:
        return f"Barrage, shots/track={config.shots_per_target}"
    return (
        f"SLS, maxShots/track={config.max_shots_per_target}, "
        f"pReengage={fmt(config.p_reengage)}"
    )


def render_summary(config: SimulationConfig, summary: MonteCarloSummary) -> str:
    """Render a multi-section text report.

    Args:
        config: Configuration the run used.
        summary: Aggregate statistics of that run.

    Returns:
        The report as a single newline-joined string.
    """
    s = summary
    real_warheads = config.real_warheads
    total_objects = config.total_objects
    sanity = s.mean_penetrated + s.mean_intercepted

    lines = [
        "Inputs:",
        _line("Missiles:", str(config.n_missiles)),
        _line("MIRVs per missile:", str(config.mirvs_per_missile)),
        _line("Decoys per real warhead:", str(config.decoys_per_warhead)),
        _line("==> Real warheads:", str(real_warheads)),
        _line("==> Decoys:", str(config.decoys)),
        _line("==> Total trackable objects:", str(total_objects)),
        "",
        _line("Detection + tracking probability:", fmt(config.p_detect_track)),
        _line("Classifier TPR (warhead->warhead):", fmt(config.p_classify_warhead)),
        _line("Classifier FPR (decoy->warhead):", fmt(config.p_false_alarm_decoy)),
        "",
        _line("Doctrine:", describe_doctrine(config)),
        _line("Pk per shot vs TRUE warhead:", fmt(config.pk_warhead)),
        _line("Pk per shot vs TRUE decoy:", fmt(config.pk_decoy)),
        _line("Inventory (interceptors):", str(config.n_inventory)),
        _line("Trials:", str(config.n_trials)),
        "",
        "Common-mode reliability (trial-level):",
        _line(
            "P(system up):",
            f"{fmt(config.p_system_up)} (observed ~ {fmt(s.mean_system_up)})",
        ),
        _line("If down: detect degrade factor:", fmt(config.detect_degrade_factor)),
        _line("If down: Pk degrade factor:", fmt(config.pk_degrade_factor)),
        "",
        "Key output (REAL warheads only):",
        _line(
            "Mean penetrated real warheads:",
            f"{fmt(s.mean_penetrated)} ({fmt(100.0 * s.penetration_rate, 1)}%)",
        ),
        _line(
            "Penetrated p10/median/p90:",
            f"{fmt(s.p10_penetrated, 0)} / {fmt(s.median_penetrated, 0)} / "
            f"{fmt(s.p90_penetrated, 0)}",
        ),
        _line("Mean intercepted real warheads:", fmt(s.mean_intercepted)),
        "",
        "Detection diagnostics:",
        _line(
            "Mean detected objects (all):",
            f"{fmt(s.mean_detected_objects)} of {total_objects}",
        ),
        _line(
            "Mean detected real warheads:",
            f"{fmt(s.mean_detected_real_warheads)} of {real_warheads}",
        ),
        "",
        "Classifier diagnostics (means):",
        _line("True positives (warheads->warhead):", fmt(s.mean_true_positives)),
        _line("False negatives (warheads->not):", fmt(s.mean_false_negatives)),
        _line("False positives (decoys->warhead):", fmt(s.mean_false_positives)),
        "",
        "Engagement / consumption (means):",
        _line("Mean total shots fired:", fmt(s.mean_shots_total)),
        _line("Mean shots at TRUE warheads:", fmt(s.mean_shots_at_warheads)),
        _line("Mean shots at decoys:", fmt(s.mean_shots_at_decoys)),
        _line("Mean inventory remaining:", fmt(s.mean_inventory_remaining)),
        "",
        "Sanity check:",
        _line(
            "Mean (penetrated + intercepted):",
            f"{fmt(sanity)} (should equal real warheads = {real_warheads})",
        ),
    ]
    return "\n".join(lines)
