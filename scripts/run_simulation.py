#!/usr/bin/env python3
"""Command-line runner for the SHIELD Monte Carlo model.

Loads a simulation config, applies command-line overrides, runs the
engine, prints the text summary and optionally writes machine-readable
outputs (summary JSON, per-trial Parquet, HTML histograms).

Usage::

    # Defaults from config/shield.yaml
    python scripts/run_simulation.py

    # Shoot-look-shoot with a smaller inventory, outputs to results/
    python scripts/run_simulation.py --doctrine sls --set n_inventory=80 \\
        --output-dir results/

    # Parallel run, reproducible seed
    python scripts/run_simulation.py --trials 20000 --n-jobs -1 --seed 7
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from loguru import logger

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "shield.yaml"

# Ensure the shield package is importable when running as a script.
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from shield.core.config import (  # noqa: E402
    SimulationConfig,
    load_simulation_config,
    normalize_user_input,
)
from shield.engine.monte_carlo import MonteCarloEngine, MonteCarloResults  # noqa: E402
from shield.reporting.summary_report import render_summary  # noqa: E402
from shield.visualization.histograms import plot_trial_histograms  # noqa: E402


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def _configure_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure loguru sinks for console and optional file output.

    Args:
        level: Minimum log level for all sinks.
        log_file: Optional path to a rotating log file.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        ),
        colorize=True,
    )
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_path),
            level=level,
            rotation="10 MB",
            retention="30 days",
            compression="gz",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
        )
    logger.debug("Logging configured at level={}", level)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def _parse_overrides(pairs: list[str]) -> dict[str, str]:
    """Turn ``KEY=VALUE`` strings into a mapping.

    Raises:
        ValueError: If an entry has no ``=`` or an empty key.
    """
    overrides: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Override must look like KEY=VALUE, got {pair!r}")
        overrides[key] = value.strip()
    return overrides


def build_config(args: argparse.Namespace) -> SimulationConfig:
    """Load the YAML config and layer the command-line overrides on top."""
    config = load_simulation_config(args.config)

    raw: dict[str, Any] = config.model_dump()
    raw.update(_parse_overrides(args.overrides))
    if args.trials is not None:
        raw["n_trials"] = args.trials
    if args.doctrine is not None:
        raw["doctrine_mode"] = args.doctrine

    return normalize_user_input(raw)


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

def write_outputs(
    results: MonteCarloResults,
    config: SimulationConfig,
    output_dir: Path,
    bins: int,
    charts: bool = True,
) -> list[Path]:
    """Persist summary, per-trial table and (optionally) histograms.

    Returns:
        Paths of every file written.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []

    summary_path = output_dir / "summary.json"
    payload = {
        "config": config.model_dump(mode="json"),
        "summary": results.summary.to_dict(),
        "metadata": results.metadata,
    }
    with open(summary_path, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, default=str)
    written.append(summary_path)

    trials_path = output_dir / "trials.parquet"
    results.frame.write_parquet(trials_path)
    written.append(trials_path)

    if charts:
        figs = plot_trial_histograms(results, bins=bins)
        for name, fig in figs.items():
            chart_path = output_dir / f"{name}_histogram.html"
            fig.write_html(str(chart_path), include_plotlyjs="cdn")
            written.append(chart_path)

    logger.info("Wrote {} output file(s) to {}", len(written), output_dir)
    return written


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for the simulation runner.

    Args:
        argv: Argument list (defaults to ``sys.argv[1:]``).

    Returns:
        Parsed :class:`argparse.Namespace`.
    """
    parser = argparse.ArgumentParser(
        prog="run_simulation",
        description="SHIELD: missile-defense Monte Carlo simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python scripts/run_simulation.py\n"
            "  python scripts/run_simulation.py --doctrine sls --set p_reengage=0.7\n"
            "  python scripts/run_simulation.py --trials 20000 --n-jobs -1\n"
        ),
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help="Path to the YAML file holding the 'simulation' section.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override one simulation parameter (repeatable).",
    )
    parser.add_argument(
        "--trials",
        type=int,
        default=None,
        help="Number of Monte Carlo trials (overrides config).",
    )
    parser.add_argument(
        "--doctrine",
        choices=["barrage", "sls", "shoot-look-shoot"],
        default=None,
        help="Engagement doctrine (overrides config).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Root seed for the per-trial random streams.",
    )
    parser.add_argument(
        "--n-jobs",
        type=int,
        default=1,
        help="Number of parallel joblib workers (-1 = all CPUs).",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for summary.json, trials.parquet and charts.",
    )
    parser.add_argument(
        "--bins",
        type=int,
        default=20,
        help="Histogram bin count.",
    )
    parser.add_argument(
        "--no-charts",
        action="store_true",
        default=False,
        help="Skip the HTML histograms.",
    )
    parser.add_argument(
        "--log-level",
        choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Minimum log level.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional rotating log file.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the SHIELD simulation.

    Args:
        argv: Optional CLI argument list (for testing).

    Returns:
        Exit code (0 on success, non-zero on failure).
    """
    args = parse_args(argv)
    _configure_logging(level=args.log_level, log_file=args.log_file)

    try:
        config = build_config(args)
    except (FileNotFoundError, ValueError) as exc:
        # pydantic.ValidationError is a ValueError subclass
        logger.critical("Failed to load configuration: {}", exc)
        return 1

    if args.bins < 1:
        logger.critical("--bins must be >= 1, got {}", args.bins)
        return 1

    try:
        engine = MonteCarloEngine(seed=args.seed, n_jobs=args.n_jobs)
        results = engine.run(config)

        print(render_summary(config, results.summary))

        if args.output_dir is not None:
            write_outputs(
                results,
                config,
                args.output_dir,
                bins=args.bins,
                charts=not args.no_charts,
            )
        return 0

    except Exception as exc:
        logger.exception("Simulation failed with unexpected error: {}", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
