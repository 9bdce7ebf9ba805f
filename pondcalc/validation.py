# pondcalc/validation.py
"""Input validation.

Nothing here raises for bad user input: problems come back as
ValidationError values so the page can show every one of them inline.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .config import AppConfig, FleetLimits
from .models import (
    ErrorKind, Excavator, FieldKind, PondDimensions, POND_FIELDS, Truck,
    UNIT_FIELDS, UnitKind, ValidationError,
)

# Plain decimal only: rejects "8.", "12.34.56", "1e3", "nan", "inf".
# Commas are allowed as thousands separators ("1,200"), never elsewhere ("1,2,3").
_NUMBER_RE = re.compile(r"[+-]?((\d{1,3}(,\d{3})+|\d+)(\.\d+)?|\.\d+)")


@dataclass(frozen=True)
class FieldResult:
    value: Optional[float] = None
    error: Optional[ValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _clean(raw: str) -> str:
    return (raw or "").strip()


def check_range(kind: FieldKind, value: float, config: AppConfig, field: str | None = None) -> Optional[ValidationError]:
    rng = config.range_for(kind)
    if rng.contains(value):
        return None
    return ValidationError(
        field=field or kind.value,
        kind=ErrorKind.OUT_OF_RANGE,
        bounds=(rng.min, rng.max),
    )


def validate_field(kind: FieldKind, raw: str, config: AppConfig, field: str | None = None) -> FieldResult:
    """Parse one text input and range-check it against the configured bounds."""
    name = field or kind.value
    text = _clean(raw)
    if not text:
        return FieldResult(error=ValidationError(field=name, kind=ErrorKind.REQUIRED))
    if not _NUMBER_RE.fullmatch(text):
        return FieldResult(error=ValidationError(field=name, kind=ErrorKind.INVALID_FORMAT))
    value = float(text.replace(",", ""))
    err = check_range(kind, value, config, field=name)
    if err:
        return FieldResult(error=err)
    return FieldResult(value=value)


def _fleet_errors(units: Sequence, label: str, field: str, max_units: int, min_units: int) -> List[ValidationError]:
    errors: List[ValidationError] = []
    count = len(units)
    if count < min_units:
        errors.append(ValidationError(
            field=field, kind=ErrorKind.FLEET_CONSTRAINT, bounds=(min_units, max_units),
            detail=f"At least {min_units} {label} is required.",
        ))
    elif not any(u.is_active for u in units):
        errors.append(ValidationError(
            field=field, kind=ErrorKind.FLEET_CONSTRAINT, bounds=(min_units, max_units),
            detail=f"At least one {label} must be active.",
        ))
    if count > max_units:
        errors.append(ValidationError(
            field=field, kind=ErrorKind.FLEET_CONSTRAINT, bounds=(min_units, max_units),
            detail=f"No more than {max_units} {label}s are allowed (have {count}).",
        ))
    return errors


def validate_fleet(excavators: Sequence[Excavator], trucks: Sequence[Truck], limits: FleetLimits) -> List[ValidationError]:
    """Fleet size rules. All violations are reported, not just the first."""
    errors = _fleet_errors(excavators, "excavator", "excavators", limits.max_excavators, limits.min_units)
    errors += _fleet_errors(trucks, "truck", "trucks", limits.max_trucks, limits.min_units)
    return errors


def unit_field_key(kind: UnitKind, unit_id: int, attr: str) -> str:
    return f"{kind.value}s.{unit_id}.{attr}"


def pond_field_key(attr: str) -> str:
    return f"pond.{attr}"


def validate_inputs(
    pond: PondDimensions,
    excavators: Sequence[Excavator],
    trucks: Sequence[Truck],
    config: AppConfig,
) -> List[ValidationError]:
    """Range-check every numeric value currently held, plus the fleet rules."""
    errors: List[ValidationError] = []
    for attr, kind in POND_FIELDS.items():
        err = check_range(kind, getattr(pond, attr), config, field=pond_field_key(attr))
        if err:
            errors.append(err)
    for units in (excavators, trucks):
        for unit in units:
            for attr, kind in UNIT_FIELDS[unit.kind].items():
                err = check_range(kind, getattr(unit, attr), config, field=unit_field_key(unit.kind, unit.id, attr))
                if err:
                    errors.append(err)
    errors += validate_fleet(excavators, trucks, config.fleet_limits)
    return errors
