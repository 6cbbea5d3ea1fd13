"""Simulation configuration for the SHIELD missile-defense engine.

:class:`SimulationConfig` is the single immutable record the engine
consumes.  Probabilities are clamped into ``[0, 1]`` on construction;
counts are bounded by pydantic field constraints.  Raw user input (YAML
files, CLI overrides, form values) goes through :func:`normalize_user_input`
first, which applies the lenient parsing rules of the input surface.

Typical usage::

    config = load_simulation_config("config/shield.yaml")
    config = normalize_user_input({"n_missiles": "30", "pk_warhead": 1.2})
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import BaseModel, Field, field_validator

from shield.core.random_draws import clamp01


class DoctrineMode(str, Enum):
    """Shot-allocation doctrine applied to every engaged track."""

    BARRAGE = "barrage"
    SHOOT_LOOK_SHOOT = "sls"

    @classmethod
    def _missing_(cls, value: object) -> DoctrineMode | None:
        # Accepts " SLS ", "Barrage", "shoot-look-shoot", "shoot_look_shoot".
        if not isinstance(value, str):
            return None
        key = value.strip().lower().replace("_", "-")
        if key == "shoot-look-shoot":
            return cls.SHOOT_LOOK_SHOOT
        for member in cls:
            if member.value == key:
                return member
        return None


PROBABILITY_FIELDS: tuple[str, ...] = (
    "p_detect_track",
    "p_classify_warhead",
    "p_false_alarm_decoy",
    "p_reengage",
    "pk_warhead",
    "pk_decoy",
    "p_system_up",
    "detect_degrade_factor",
    "pk_degrade_factor",
)

# (lower bound, fallback for unparsable input)
COUNT_FIELDS: dict[str, tuple[int, int]] = {
    "n_missiles": (0, 0),
    "mirvs_per_missile": (1, 1),
    "decoys_per_warhead": (0, 0),
    "shots_per_target": (0, 0),
    "max_shots_per_target": (0, 0),
    "n_inventory": (0, 0),
    "n_trials": (1, 1000),
}


class SimulationConfig(BaseModel):
    """Immutable parameter set for one Monte Carlo run.

    Attributes:
        n_missiles: Incoming missiles in the salvo.
        mirvs_per_missile: Real warheads carried by each missile.
        decoys_per_warhead: Decoy objects deployed per real warhead.
        p_detect_track: Per-object detection + tracking probability.
        p_classify_warhead: Classifier true-positive rate.
        p_false_alarm_decoy: Classifier false-positive rate on decoys.
        doctrine_mode: Barrage or shoot-look-shoot.
        shots_per_target: Barrage allocation per engaged track.
        max_shots_per_target: SLS shot cap per engaged track.
        p_reengage: SLS probability that another shot is feasible after a miss.
        pk_warhead: Per-shot kill probability against a true warhead.
        pk_decoy: Per-shot kill probability against a true decoy.
        n_inventory: Interceptors available at the start of each trial.
        n_trials: Independent Monte Carlo trials.
        p_system_up: Probability the defense is fully functional in a trial.
        detect_degrade_factor: Detection multiplier when the system is down.
        pk_degrade_factor: Kill-probability multiplier when the system is down.
    """

    model_config = {"frozen": True}

    n_missiles: int = Field(default=20, ge=0)
    mirvs_per_missile: int = Field(default=5, ge=1)
    decoys_per_warhead: int = Field(default=2, ge=0)

    p_detect_track: float = 0.80
    p_classify_warhead: float = 0.80
    p_false_alarm_decoy: float = 0.20

    doctrine_mode: DoctrineMode = DoctrineMode.BARRAGE
    shots_per_target: int = Field(default=2, ge=0)
    max_shots_per_target: int = Field(default=4, ge=0)
    p_reengage: float = 0.85

    pk_warhead: float = 0.60
    pk_decoy: float = 0.80

    n_inventory: int = Field(default=200, ge=0)
    n_trials: int = Field(default=2000, ge=1)

    p_system_up: float = 0.90
    detect_degrade_factor: float = 0.50
    pk_degrade_factor: float = 0.70

    @field_validator(*PROBABILITY_FIELDS, mode="before")
    @classmethod
    def _clamp_probability(cls, value: Any) -> float:
        return clamp01(float(value))

    @property
    def real_warheads(self) -> int:
        return self.n_missiles * self.mirvs_per_missile

    @property
    def decoys(self) -> int:
        return self.real_warheads * self.decoys_per_warhead

    @property
    def total_objects(self) -> int:
        return self.real_warheads + self.decoys


# ---------------------------------------------------------------------------
# Input normalisation
# ---------------------------------------------------------------------------

def _parse_int(value: Any, fallback: int) -> int:
    """Parse an integer leniently: ``"3.7"`` -> 3, junk -> *fallback*."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(parsed):
        return fallback
    return int(parsed)


def _parse_probability(value: Any) -> float:
    try:
        return clamp01(float(value))
    except (TypeError, ValueError):
        return 0.0


def normalize_user_input(raw: Mapping[str, Any]) -> SimulationConfig:
    """Build a :class:`SimulationConfig` from loosely typed user input.

    Counts are parsed leniently and raised to their lower bound (unparsable
    entries fall back to 0, MIRVs to 1 and trials to 1000); probabilities
    that cannot be parsed become 0 and all probabilities are clamped to
    ``[0, 1]``.  Keys that are absent keep the model default.

    Args:
        raw: Mapping of field name to user-supplied value.

    Returns:
        A validated, frozen configuration.

    Raises:
        ValueError: If *raw* contains keys that are not simulation fields.
    """
    known = set(SimulationConfig.model_fields)
    unknown = set(raw) - known
    if unknown:
        raise ValueError(
            f"Unknown simulation parameter(s): {sorted(unknown)}. "
            f"Available: {sorted(known)}"
        )

    values: dict[str, Any] = {}
    for name, value in raw.items():
        if name in COUNT_FIELDS:
            lower, fallback = COUNT_FIELDS[name]
            values[name] = max(lower, _parse_int(value, fallback))
        elif name in PROBABILITY_FIELDS:
            values[name] = _parse_probability(value)
        elif name == "doctrine_mode" and not isinstance(value, DoctrineMode):
            values[name] = DoctrineMode(str(value).strip().lower())
        else:
            values[name] = value

    return SimulationConfig(**values)


def load_simulation_config(path: str | Path) -> SimulationConfig:
    """Load the ``simulation`` section of a YAML file.

    Args:
        path: Path to a YAML file.  A top-level ``simulation`` mapping is
            used when present, otherwise the whole document.

    Returns:
        Normalised configuration.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the document contains unknown parameters.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Simulation config not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}

    section = raw.get("simulation", raw)
    config = normalize_user_input(section)
    logger.info(
        "Loaded simulation config from {}: {} real warheads, {} decoys, "
        "doctrine={}, inventory={}, trials={}",
        config_path,
        config.real_warheads,
        config.decoys,
        config.doctrine_mode.value,
        config.n_inventory,
        config.n_trials,
    )
    return config
