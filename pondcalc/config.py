# pondcalc/config.py
"""Equipment defaults, validation ranges and fleet limits.

The configuration is a JSON file shipped with the app
(``config/equipment-defaults.json``). It is read once per process; there is
no live reload. Set POND_CALC_CONFIG to point at a different file.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .models import FieldKind
from .settings import CONFIG_PATH_ENV, CONFIG_FILENAME

logger = logging.getLogger(__name__)

# Project root (parent of 'pondcalc')
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CONFIG_PATH = os.path.join(PROJECT_ROOT, "config", CONFIG_FILENAME)


class ConfigError(ValueError):
    """Raised when the equipment configuration is missing or invalid."""


@dataclass(frozen=True)
class Range:
    min: float
    max: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


@dataclass(frozen=True)
class FleetLimits:
    max_excavators: int = 10
    max_trucks: int = 20
    min_units: int = 1


@dataclass(frozen=True)
class Efficiency:
    excavator: float = 0.85
    truck: float = 0.80


@dataclass(frozen=True)
class ExcavatorPreset:
    name: str
    bucket_capacity: float
    cycle_time: float


@dataclass(frozen=True)
class TruckPreset:
    name: str
    capacity: float
    round_trip_time: float


@dataclass(frozen=True)
class PondDefaults:
    length: float
    width: float
    depth: float
    work_hours_per_day: float


@dataclass(frozen=True)
class AppConfig:
    version: str
    excavator_presets: Tuple[ExcavatorPreset, ...]
    truck_presets: Tuple[TruckPreset, ...]
    pond: PondDefaults
    ranges: Dict[FieldKind, Range]
    fleet_limits: FleetLimits = field(default_factory=FleetLimits)
    efficiency: Efficiency = field(default_factory=Efficiency)
    debounce_ms: int = 300
    breakpoints: Dict[str, int] = field(default_factory=lambda: {"tablet": 768, "desktop": 1024})

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    @property
    def default_excavator(self) -> ExcavatorPreset:
        return self.excavator_presets[0]

    @property
    def default_truck(self) -> TruckPreset:
        return self.truck_presets[0]

    def range_for(self, kind: FieldKind) -> Range:
        return self.ranges[kind]


# -------------------------
# Parsing / Validation
# -------------------------

def _number(raw, where: str, problems: List[str], *, positive: bool = True) -> Optional[float]:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        problems.append(f"{where}: expected a number, got {raw!r}")
        return None
    value = float(raw)
    if positive and value <= 0:
        problems.append(f"{where}: must be greater than zero (got {value:g})")
        return None
    return value


def _section(data: dict, key: str, problems: List[str]) -> dict:
    value = data.get(key)
    if not isinstance(value, dict):
        problems.append(f"Missing section '{key}'")
        return {}
    return value


def _optional_section(data: dict, key: str, problems: List[str]) -> dict:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        problems.append(f"Section '{key}' must be an object, got {type(value).__name__}")
        return {}
    return value


def _presets(raw, where: str, fields: Tuple[str, str], problems: List[str]) -> List[tuple]:
    if not isinstance(raw, list) or not raw:
        problems.append(f"{where}: at least one preset is required")
        return []
    out = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            problems.append(f"{where}[{i}]: expected an object")
            continue
        name = str(item.get("name") or "").strip()
        if not name:
            problems.append(f"{where}[{i}]: missing name")
        a = _number(item.get(fields[0]), f"{where}[{i}].{fields[0]}", problems)
        b = _number(item.get(fields[1]), f"{where}[{i}].{fields[1]}", problems)
        if name and a is not None and b is not None:
            out.append((name, a, b))
    return out


def parse_config(data) -> AppConfig:
    """Turn the decoded JSON document into an AppConfig.

    All problems are collected and reported together in one ConfigError.
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a JSON object.")

    problems: List[str] = []
    defaults = _section(data, "defaults", problems)

    excavators = [
        ExcavatorPreset(name, cap, cycle)
        for name, cap, cycle in _presets(
            defaults.get("excavators"), "defaults.excavators", ("bucketCapacity", "cycleTime"), problems
        )
    ]
    trucks = [
        TruckPreset(name, cap, trip)
        for name, cap, trip in _presets(
            defaults.get("trucks"), "defaults.trucks", ("capacity", "roundTripTime"), problems
        )
    ]

    project = defaults.get("project") if isinstance(defaults.get("project"), dict) else {}
    if not project:
        problems.append("Missing section 'defaults.project'")
    pond_values = [
        _number(project.get(k), f"defaults.project.{k}", problems)
        for k in ("pondLength", "pondWidth", "pondDepth", "workHoursPerDay")
    ] if project else []

    ranges: Dict[FieldKind, Range] = {}
    validation = _section(data, "validation", problems)
    for kind in FieldKind:
        bounds = validation.get(kind.value)
        if not isinstance(bounds, dict):
            problems.append(f"validation.{kind.value}: missing range")
            continue
        lo = _number(bounds.get("min"), f"validation.{kind.value}.min", problems, positive=False)
        hi = _number(bounds.get("max"), f"validation.{kind.value}.max", problems, positive=False)
        if lo is None or hi is None:
            continue
        if lo > hi:
            problems.append(f"validation.{kind.value}: min {lo:g} is greater than max {hi:g}")
            continue
        ranges[kind] = Range(lo, hi)

    limits_raw = _section(data, "fleetLimits", problems)
    max_exc = limits_raw.get("maxExcavators")
    max_trk = limits_raw.get("maxTrucks")
    for name, value in (("maxExcavators", max_exc), ("maxTrucks", max_trk)):
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            problems.append(f"fleetLimits.{name}: expected a whole number >= 1, got {value!r}")

    eff_raw = _optional_section(data, "efficiency", problems)
    eff_exc = _number(eff_raw.get("excavator", 0.85), "efficiency.excavator", problems)
    eff_trk = _number(eff_raw.get("truck", 0.80), "efficiency.truck", problems)
    for name, value in (("excavator", eff_exc), ("truck", eff_trk)):
        if value is not None and value > 1.0:
            problems.append(f"efficiency.{name}: must not exceed 1.0 (got {value:g})")

    ui = _optional_section(data, "ui", problems)
    debounce_ms = ui.get("debounceMs", 300)
    if isinstance(debounce_ms, bool) or not isinstance(debounce_ms, int) or debounce_ms < 0:
        problems.append(f"ui.debounceMs: expected a whole number >= 0, got {debounce_ms!r}")
    breakpoints = ui.get("breakpoints", {"tablet": 768, "desktop": 1024})
    if (
        not isinstance(breakpoints, dict)
        or not all(isinstance(breakpoints.get(k), int) for k in ("tablet", "desktop"))
        or breakpoints["tablet"] >= breakpoints["desktop"]
    ):
        problems.append("ui.breakpoints: expected integer 'tablet' < 'desktop'")

    # Defaults must themselves pass validation, otherwise a fresh app starts invalid
    checks = [(FieldKind.BUCKET_CAPACITY, p.bucket_capacity, p.name) for p in excavators]
    checks += [(FieldKind.CYCLE_TIME, p.cycle_time, p.name) for p in excavators]
    checks += [(FieldKind.TRUCK_CAPACITY, p.capacity, p.name) for p in trucks]
    checks += [(FieldKind.ROUND_TRIP_TIME, p.round_trip_time, p.name) for p in trucks]
    if len(pond_values) == 4 and None not in pond_values:
        pond_kinds = (FieldKind.POND_LENGTH, FieldKind.POND_WIDTH, FieldKind.POND_DEPTH, FieldKind.WORK_HOURS)
        checks += [(k, v, "defaults.project") for k, v in zip(pond_kinds, pond_values)]
    for kind, value, owner in checks:
        rng = ranges.get(kind)
        if rng is not None and not rng.contains(value):
            problems.append(f"{owner}: {kind.value}={value:g} is outside [{rng.min:g}, {rng.max:g}]")

    if problems:
        raise ConfigError("Configuration validation failed:\n- " + "\n- ".join(problems))

    return AppConfig(
        version=str(data.get("version", "0")),
        excavator_presets=tuple(excavators),
        truck_presets=tuple(trucks),
        pond=PondDefaults(*pond_values),
        ranges=ranges,
        fleet_limits=FleetLimits(max_excavators=max_exc, max_trucks=max_trk),
        efficiency=Efficiency(excavator=eff_exc, truck=eff_trk),
        debounce_ms=debounce_ms,
        breakpoints=dict(breakpoints),
    )


def load_config(path: str) -> AppConfig:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found: {path}") from exc
    except (ValueError, RecursionError) as exc:
        raise ConfigError(f"Configuration file is not valid JSON: {path} ({exc})") from exc
    return parse_config(data)


# -------------------------
# Public API
# -------------------------
_config: AppConfig | None = None


def ensure_loaded(force: bool = False) -> AppConfig:
    """
    Load configuration using this precedence:
      1) POND_CALC_CONFIG (env) -> absolute/relative path
      2) bundled config/equipment-defaults.json
    """
    global _config
    if (not force) and (_config is not None):
        return _config

    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        path = env_path if os.path.isabs(env_path) else os.path.join(PROJECT_ROOT, env_path)
        if os.path.isfile(path):
            _config = load_config(path)
            logger.info("Loaded configuration %s from %s", _config.version, path)
            return _config
        logger.warning("%s points to a missing file: %s", CONFIG_PATH_ENV, path)

    _config = load_config(DEFAULT_CONFIG_PATH)
    logger.info("Loaded configuration %s", _config.version)
    return _config


def get_config() -> AppConfig:
    if _config is None:
        return ensure_loaded()
    return _config
