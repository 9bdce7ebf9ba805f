# pondcalc/storage.py
"""Saved-state persistence.

The store mimics browser localStorage: string keys, string values, kept in
one JSON file on disk. The calculator writes a single JSON blob under
STORAGE_KEY.

Reading never takes the app down. An unreadable file, corrupted JSON, or a
blob of an unknown shape all produce the default state (logged at WARNING).
The old flat-field format is migrated into one-unit fleets.

Usage:
    store = KeyValueStore.from_env()
    state = load_state(store, config)
    ...
    save_state(store, state)
"""
from __future__ import annotations

import json
import math
import logging
import os
from dataclasses import replace
from types import MappingProxyType
from typing import Dict, List, Optional

from . import fleet as fl
from .config import AppConfig
from .models import Excavator, PondDimensions, Truck
from .settings import (
    DEFAULT_STORAGE_PATH, STORAGE_KEY, STORAGE_PATH_ENV, STORAGE_SCHEMA_VERSION,
)
from .state import AppState, default_pond, initial_state, recalculate, set_preference

logger = logging.getLogger(__name__)

# Old single-equipment format -> (section, field)
LEGACY_FIELDS = {
    "excavatorCapacity": ("excavator", "bucket_capacity"),
    "excavatorCycleTime": ("excavator", "cycle_time"),
    "truckCapacity": ("truck", "capacity"),
    "truckRoundTripTime": ("truck", "round_trip_time"),
    "pondLength": ("pond", "length"),
    "pondWidth": ("pond", "width"),
    "pondDepth": ("pond", "depth"),
    "workHours": ("pond", "work_hours_per_day"),
}

# Preferences that survive a reload (the info banner flag does not)
PERSISTED_PREFERENCES = ("ui_dark",)


class StoredStateError(ValueError):
    """A stored blob that can't be turned into an AppState."""


# ------------------------------- Key/value ---------------------------------

class KeyValueStore:
    """localStorage-style string store backed by a JSON file."""

    def __init__(self, path: str):
        self.path = os.path.expanduser(path)

    @classmethod
    def from_env(cls) -> "KeyValueStore":
        return cls(os.environ.get(STORAGE_PATH_ENV) or DEFAULT_STORAGE_PATH)

    def _read_all(self) -> Dict[str, str]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError, RecursionError) as exc:
            logger.warning("Storage file %s is unreadable (%s); treating as empty", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Storage file %s is not a key/value object; treating as empty", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: Dict[str, str]) -> bool:
        tmp = self.path + ".tmp"
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp, self.path)
        except OSError as exc:
            logger.warning("Could not write storage file %s: %s", self.path, exc)
            return False
        return True

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> bool:
        data = self._read_all()
        data[key] = value
        return self._write_all(data)

    def remove_item(self, key: str) -> bool:
        data = self._read_all()
        if key not in data:
            return True
        del data[key]
        return self._write_all(data)


# ----------------------------- Serialization --------------------------------

def _unit_to_dict(unit) -> dict:
    d = {"id": unit.id, "name": unit.name, "isActive": unit.is_active}
    if isinstance(unit, Excavator):
        d.update(bucketCapacity=unit.bucket_capacity, cycleTime=unit.cycle_time)
    else:
        d.update(capacity=unit.capacity, roundTripTime=unit.round_trip_time)
    return d


def serialize_state(state: AppState) -> dict:
    return {
        "version": STORAGE_SCHEMA_VERSION,
        "excavators": [_unit_to_dict(u) for u in state.excavators],
        "trucks": [_unit_to_dict(u) for u in state.trucks],
        "pond": {
            "length": state.pond.length,
            "width": state.pond.width,
            "depth": state.pond.depth,
            "workHoursPerDay": state.pond.work_hours_per_day,
        },
        "preferences": {k: state.preferences[k] for k in PERSISTED_PREFERENCES if k in state.preferences},
    }


def _num(raw, where: str) -> float:
    if isinstance(raw, bool):
        raise StoredStateError(f"{where}: expected a number, got {raw!r}")
    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError) as exc:
        raise StoredStateError(f"{where}: expected a number, got {_preview(raw)}") from exc
    if not math.isfinite(value):
        raise StoredStateError(f"{where}: expected a finite number, got {_preview(raw)}")
    return value


def _flag(raw, where: str) -> bool:
    if raw is None:
        return True
    if not isinstance(raw, bool):
        raise StoredStateError(f"{where}: expected true or false, got {_preview(raw)}")
    return raw


def _preview(raw) -> str:
    text = repr(raw)
    return text if len(text) <= 40 else text[:37] + "..."


def _unit_id(raw, where: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
        raise StoredStateError(f"{where}.id: expected a positive integer, got {raw!r}")
    return raw


def _units(raw, label: str, build) -> List:
    if not isinstance(raw, list) or not raw:
        raise StoredStateError(f"{label}: expected a non-empty list")
    units, ids = [], set()
    for i, item in enumerate(raw):
        where = f"{label}[{i}]"
        if not isinstance(item, dict):
            raise StoredStateError(f"{where}: expected an object")
        unit = build(item, where)
        if unit.id in ids:
            raise StoredStateError(f"{where}: duplicate id {unit.id}")
        ids.add(unit.id)
        units.append(unit)
    return units


def _excavator(item: dict, where: str) -> Excavator:
    return Excavator(
        id=_unit_id(item.get("id"), where),
        name=str(item.get("name") or ""),
        is_active=_flag(item.get("isActive"), f"{where}.isActive"),
        bucket_capacity=_num(item.get("bucketCapacity"), f"{where}.bucketCapacity"),
        cycle_time=_num(item.get("cycleTime"), f"{where}.cycleTime"),
    )


def _truck(item: dict, where: str) -> Truck:
    return Truck(
        id=_unit_id(item.get("id"), where),
        name=str(item.get("name") or ""),
        is_active=_flag(item.get("isActive"), f"{where}.isActive"),
        capacity=_num(item.get("capacity"), f"{where}.capacity"),
        round_trip_time=_num(item.get("roundTripTime"), f"{where}.roundTripTime"),
    )


def _preferences(raw) -> dict:
    if not isinstance(raw, dict):
        return {}
    return {k: raw[k] for k in PERSISTED_PREFERENCES if k in raw}


def is_legacy_blob(data: dict) -> bool:
    return "excavators" not in data and "trucks" not in data and any(k in data for k in LEGACY_FIELDS)


def migrate_legacy(data: dict, config: AppConfig) -> AppState:
    """Seed a one-unit fleet of each type from the old flat fields."""
    exc = config.default_excavator
    trk = config.default_truck
    pond = default_pond(config)
    values = {
        "excavator": {"bucket_capacity": exc.bucket_capacity, "cycle_time": exc.cycle_time},
        "truck": {"capacity": trk.capacity, "round_trip_time": trk.round_trip_time},
        "pond": {
            "length": pond.length, "width": pond.width,
            "depth": pond.depth, "work_hours_per_day": pond.work_hours_per_day,
        },
    }
    for key, (section, attr) in LEGACY_FIELDS.items():
        if key in data and data[key] not in (None, ""):
            values[section][attr] = _num(data[key], key)

    return AppState(
        excavators=fl.fleet_of(Excavator(id=1, name=exc.name, **values["excavator"])),
        trucks=fl.fleet_of(Truck(id=1, name=trk.name, **values["truck"])),
        pond=PondDimensions(**values["pond"]),
    )


def deserialize_state(data, config: AppConfig) -> AppState:
    """Decoded JSON -> AppState (not yet recalculated). Raises StoredStateError."""
    if not isinstance(data, dict):
        raise StoredStateError("stored state is not an object")
    if is_legacy_blob(data):
        logger.info("Migrating legacy flat-field saved state")
        return migrate_legacy(data, config)
    if "excavators" not in data or "trucks" not in data:
        raise StoredStateError("stored state has no fleet data")

    pond_raw = data.get("pond")
    if not isinstance(pond_raw, dict):
        raise StoredStateError("pond: expected an object")
    pond = PondDimensions(
        length=_num(pond_raw.get("length"), "pond.length"),
        width=_num(pond_raw.get("width"), "pond.width"),
        depth=_num(pond_raw.get("depth"), "pond.depth"),
        work_hours_per_day=_num(pond_raw.get("workHoursPerDay"), "pond.workHoursPerDay"),
    )
    state = AppState(
        excavators=fl.fleet_of(*_units(data["excavators"], "excavators", _excavator)),
        trucks=fl.fleet_of(*_units(data["trucks"], "trucks", _truck)),
        pond=pond,
    )
    prefs = _preferences(data.get("preferences"))
    if prefs:
        state = replace(state, preferences=MappingProxyType(prefs))
    return state


# --------------------------------- Public -----------------------------------

def load_state(store: KeyValueStore, config: AppConfig) -> AppState:
    """Saved state if there is a usable one, otherwise the defaults. Never raises."""
    blob = store.get_item(STORAGE_KEY)
    if blob is None:
        return initial_state(config)
    try:
        data = json.loads(blob)
        state = deserialize_state(data, config)
    except (ValueError, TypeError, RecursionError) as exc:
        # StoredStateError and json.JSONDecodeError are both ValueErrors;
        # pathologically nested JSON blows the decoder stack
        logger.warning("Ignoring saved state (%s); starting from defaults", exc)
        return initial_state(config)
    return recalculate(state, config)


def save_state(store: KeyValueStore, state: AppState) -> bool:
    return store.set_item(STORAGE_KEY, json.dumps(serialize_state(state)))


def clear_state(store: KeyValueStore) -> bool:
    return store.remove_item(STORAGE_KEY)


def save_preference(store: KeyValueStore, state: AppState, name: str, value) -> AppState:
    """Set one preference and write the state straight away (no recalculation)."""
    state = set_preference(state, name, value)
    save_state(store, state)
    return state
