# pondcalc/state.py
"""Application state and the pure functions that move it forward.

The page keeps exactly one AppState in ``st.session_state`` and swaps it
wholesale after every event; nothing here touches Streamlit.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from . import fleet as fl
from .calculations import calculate_timeline
from .config import AppConfig, ExcavatorPreset, TruckPreset
from .models import (
    CalculationResult, Excavator, FieldKind, PondDimensions, POND_FIELDS,
    Truck, UNIT_FIELDS, UnitKind, ValidationError,
)
from .validation import validate_field, validate_inputs

logger = logging.getLogger(__name__)

_EMPTY: Mapping = MappingProxyType({})


def _frozen(d: dict) -> Mapping:
    return MappingProxyType(dict(d))


@dataclass(frozen=True)
class AppState:
    excavators: fl.Fleet
    trucks: fl.Fleet
    pond: PondDimensions
    # Text the user typed, keyed by field key; only kept while it differs from the stored value
    raw_inputs: Mapping[str, str] = field(default_factory=lambda: _EMPTY)
    field_errors: Mapping[str, ValidationError] = field(default_factory=lambda: _EMPTY)
    errors: Tuple[ValidationError, ...] = ()
    result: Optional[CalculationResult] = None
    last_valid_result: Optional[CalculationResult] = None
    preferences: Mapping[str, object] = field(default_factory=lambda: _EMPTY)
    # Session-only: never written to storage
    info_banner_dismissed: bool = False

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def is_stale(self) -> bool:
        """True when the page should be showing last_valid_result instead of result."""
        return self.result is None and self.last_valid_result is not None

    def fleet(self, kind: UnitKind) -> fl.Fleet:
        return self.excavators if kind is UnitKind.EXCAVATOR else self.trucks

    def error_for(self, key: str) -> Optional[ValidationError]:
        if key in self.field_errors:
            return self.field_errors[key]
        for err in self.errors:
            if err.field == key:
                return err
        return None


# ------------------------------ Construction --------------------------------

def excavator_from_preset(unit_id: int, preset: ExcavatorPreset, name: str = "") -> Excavator:
    return Excavator(
        id=unit_id,
        name=name or preset.name,
        bucket_capacity=preset.bucket_capacity,
        cycle_time=preset.cycle_time,
    )


def truck_from_preset(unit_id: int, preset: TruckPreset, name: str = "") -> Truck:
    return Truck(
        id=unit_id,
        name=name or preset.name,
        capacity=preset.capacity,
        round_trip_time=preset.round_trip_time,
    )


def default_pond(config: AppConfig) -> PondDimensions:
    p = config.pond
    return PondDimensions(p.length, p.width, p.depth, p.work_hours_per_day)


def initial_state(config: AppConfig) -> AppState:
    """One default excavator, one default truck, default pond, already calculated."""
    state = AppState(
        excavators=fl.fleet_of(excavator_from_preset(1, config.default_excavator)),
        trucks=fl.fleet_of(truck_from_preset(1, config.default_truck)),
        pond=default_pond(config),
    )
    return recalculate(state, config)


# ------------------------------- Fleet edits --------------------------------

def _with_fleet(state: AppState, kind: UnitKind, new_fleet: fl.Fleet) -> AppState:
    if kind is UnitKind.EXCAVATOR:
        return replace(state, excavators=new_fleet)
    return replace(state, trucks=new_fleet)


def _max_units(kind: UnitKind, config: AppConfig) -> int:
    limits = config.fleet_limits
    return limits.max_excavators if kind is UnitKind.EXCAVATOR else limits.max_trucks


def add_unit(state: AppState, kind: UnitKind, config: AppConfig) -> AppState:
    if kind is UnitKind.EXCAVATOR:
        make = lambda uid: excavator_from_preset(uid, config.default_excavator, f"Excavator {uid}")
    else:
        make = lambda uid: truck_from_preset(uid, config.default_truck, f"Truck {uid}")
    return _with_fleet(state, kind, fl.add_unit(state.fleet(kind), make, _max_units(kind, config)))


def remove_unit(state: AppState, kind: UnitKind, unit_id: int) -> AppState:
    new_fleet = fl.remove_unit(state.fleet(kind), unit_id)
    if new_fleet is state.fleet(kind):
        return state
    # Drop any in-progress text/errors that belonged to the removed unit
    prefix = f"{kind.value}s.{unit_id}."
    raw = {k: v for k, v in state.raw_inputs.items() if not k.startswith(prefix)}
    errs = {k: v for k, v in state.field_errors.items() if not k.startswith(prefix)}
    return replace(_with_fleet(state, kind, new_fleet), raw_inputs=_frozen(raw), field_errors=_frozen(errs))


def add_excavator(state: AppState, config: AppConfig) -> AppState:
    return add_unit(state, UnitKind.EXCAVATOR, config)


def add_truck(state: AppState, config: AppConfig) -> AppState:
    return add_unit(state, UnitKind.TRUCK, config)


def remove_excavator(state: AppState, unit_id: int) -> AppState:
    return remove_unit(state, UnitKind.EXCAVATOR, unit_id)


def remove_truck(state: AppState, unit_id: int) -> AppState:
    return remove_unit(state, UnitKind.TRUCK, unit_id)


def set_unit_active(state: AppState, kind: UnitKind, unit_id: int, active: bool) -> AppState:
    return _with_fleet(state, kind, fl.update_unit(state.fleet(kind), unit_id, is_active=bool(active)))


def rename_unit(state: AppState, kind: UnitKind, unit_id: int, name: str) -> AppState:
    return _with_fleet(state, kind, fl.update_unit(state.fleet(kind), unit_id, name=(name or "").strip()))


def apply_preset(state: AppState, kind: UnitKind, unit_id: int, preset) -> AppState:
    """Overwrite a unit's specs (and name) with a configured preset."""
    if kind is UnitKind.EXCAVATOR:
        changes = dict(name=preset.name, bucket_capacity=preset.bucket_capacity, cycle_time=preset.cycle_time)
    else:
        changes = dict(name=preset.name, capacity=preset.capacity, round_trip_time=preset.round_trip_time)
    state = _with_fleet(state, kind, fl.update_unit(state.fleet(kind), unit_id, **changes))
    prefix = f"{kind.value}s.{unit_id}."
    raw = {k: v for k, v in state.raw_inputs.items() if not k.startswith(prefix)}
    errs = {k: v for k, v in state.field_errors.items() if not k.startswith(prefix)}
    return replace(state, raw_inputs=_frozen(raw), field_errors=_frozen(errs))


# ------------------------------- Field edits --------------------------------

def parse_field_key(key: str) -> Tuple[Optional[UnitKind], Optional[int], str]:
    """'pond.depth' -> (None, None, 'depth'); 'trucks.3.capacity' -> (TRUCK, 3, 'capacity')."""
    parts = key.split(".")
    if len(parts) == 2 and parts[0] == "pond":
        return None, None, parts[1]
    if len(parts) == 3:
        for kind in UnitKind:
            if parts[0] == f"{kind.value}s":
                try:
                    return kind, int(parts[1]), parts[2]
                except ValueError:
                    break
    raise KeyError(f"Unknown field key: {key!r}")


def field_kind_for(key: str) -> FieldKind:
    unit_kind, _, attr = parse_field_key(key)
    mapping = POND_FIELDS if unit_kind is None else UNIT_FIELDS[unit_kind]
    if attr not in mapping:
        raise KeyError(f"Unknown field key: {key!r}")
    return mapping[attr]


def field_value(state: AppState, key: str) -> Optional[float]:
    unit_kind, unit_id, attr = parse_field_key(key)
    if unit_kind is None:
        return getattr(state.pond, attr)
    unit = state.fleet(unit_kind).get(unit_id)
    return getattr(unit, attr) if unit is not None else None


def edit_field(state: AppState, key: str, raw: str, config: AppConfig) -> AppState:
    """Validate typed text for one field.

    A good value is written into the pond/unit and the field's error is
    cleared. A bad value leaves the stored number alone and records the
    error together with the text so the page can show both.
    """
    kind = field_kind_for(key)
    unit_kind, unit_id, attr = parse_field_key(key)
    if unit_kind is not None and state.fleet(unit_kind).get(unit_id) is None:
        return state

    outcome = validate_field(kind, raw, config, field=key)
    raw_inputs = dict(state.raw_inputs)
    field_errors = dict(state.field_errors)

    if outcome.ok:
        raw_inputs.pop(key, None)
        field_errors.pop(key, None)
        if unit_kind is None:
            state = replace(state, pond=replace(state.pond, **{attr: outcome.value}))
        else:
            state = _with_fleet(state, unit_kind, fl.update_unit(state.fleet(unit_kind), unit_id, **{attr: outcome.value}))
    else:
        raw_inputs[key] = raw
        field_errors[key] = outcome.error

    return replace(state, raw_inputs=_frozen(raw_inputs), field_errors=_frozen(field_errors))


def display_text(state: AppState, key: str) -> str:
    """What the input box for ``key`` should show."""
    if key in state.raw_inputs:
        return state.raw_inputs[key]
    value = field_value(state, key)
    return "" if value is None else f"{value:g}"


# ------------------------------ Preferences ---------------------------------

def dismiss_banner(state: AppState) -> AppState:
    return replace(state, info_banner_dismissed=True)


def set_preference(state: AppState, name: str, value) -> AppState:
    prefs = dict(state.preferences)
    prefs[name] = value
    return replace(state, preferences=_frozen(prefs))


# ------------------------------- Calculation --------------------------------

def collect_errors(state: AppState, config: AppConfig) -> Tuple[ValidationError, ...]:
    errors = list(state.field_errors.values())
    seen = set(state.field_errors)
    for err in validate_inputs(state.pond, state.excavators.units, state.trucks.units, config):
        # A field already failing on its typed text reports that error, not the stale value's
        if err.field not in seen:
            errors.append(err)
    return tuple(errors)


def recalculate(state: AppState, config: AppConfig) -> AppState:
    """Validate everything, then calculate if (and only if) nothing failed."""
    errors = collect_errors(state, config)
    if errors:
        logger.debug("Calculation suppressed: %d validation error(s)", len(errors))
        return replace(state, errors=errors, result=None)

    result = calculate_timeline(state.pond, state.excavators.units, state.trucks.units, config.efficiency)
    last_valid = result if result.is_valid else state.last_valid_result
    return replace(state, errors=(), result=result if result.is_valid else None, last_valid_result=last_valid)
