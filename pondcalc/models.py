# pondcalc/models.py
"""Value types shared by validation, calculation, fleet and state code.

Every record here is a frozen dataclass; edits go through
``dataclasses.replace`` so callers never see in-place mutation.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .settings import MINUTES_PER_HOUR


class UnitKind(str, Enum):
    EXCAVATOR = "excavator"
    TRUCK = "truck"


class FieldKind(str, Enum):
    """Every numeric input the calculator accepts.

    Values match the keys of the ``validation`` block in the config file.
    """
    BUCKET_CAPACITY = "excavatorCapacity"
    CYCLE_TIME = "cycleTime"
    TRUCK_CAPACITY = "truckCapacity"
    ROUND_TRIP_TIME = "roundTripTime"
    POND_LENGTH = "pondLength"
    POND_WIDTH = "pondWidth"
    POND_DEPTH = "pondDepth"
    WORK_HOURS = "workHours"


FIELD_LABELS = {
    FieldKind.BUCKET_CAPACITY: "Bucket capacity",
    FieldKind.CYCLE_TIME: "Cycle time",
    FieldKind.TRUCK_CAPACITY: "Truck capacity",
    FieldKind.ROUND_TRIP_TIME: "Round-trip time",
    FieldKind.POND_LENGTH: "Pond length",
    FieldKind.POND_WIDTH: "Pond width",
    FieldKind.POND_DEPTH: "Pond depth",
    FieldKind.WORK_HOURS: "Work hours per day",
}

FIELD_UNITS = {
    FieldKind.BUCKET_CAPACITY: "cubic yards",
    FieldKind.CYCLE_TIME: "minutes",
    FieldKind.TRUCK_CAPACITY: "cubic yards",
    FieldKind.ROUND_TRIP_TIME: "minutes",
    FieldKind.POND_LENGTH: "feet",
    FieldKind.POND_WIDTH: "feet",
    FieldKind.POND_DEPTH: "feet",
    FieldKind.WORK_HOURS: "hours",
}


class ErrorKind(str, Enum):
    REQUIRED = "required"
    OUT_OF_RANGE = "out_of_range"
    INVALID_FORMAT = "invalid_format"
    FLEET_CONSTRAINT = "fleet_constraint"


class Bottleneck(str, Enum):
    EXCAVATION = "excavation"
    HAULING = "hauling"


# ------------------------------- Equipment ---------------------------------

@dataclass(frozen=True)
class EquipmentUnit:
    """Common base for anything that moves dirt at an hourly rate."""
    id: int
    name: str = ""
    is_active: bool = True

    kind = None  # type: Optional[UnitKind]

    @property
    def volume_per_trip(self) -> float:
        raise NotImplementedError

    @property
    def minutes_per_trip(self) -> float:
        raise NotImplementedError

    def hourly_rate(self, efficiency_factor: float) -> float:
        """Derated cubic yards per hour. 0.0 when the trip time is not positive."""
        minutes = self.minutes_per_trip
        if minutes <= 0:
            return 0.0
        return (MINUTES_PER_HOUR / minutes) * self.volume_per_trip * efficiency_factor

    @property
    def label(self) -> str:
        return self.name or f"{self.kind.value.title()} {self.id}"


@dataclass(frozen=True)
class Excavator(EquipmentUnit):
    bucket_capacity: float = 0.0     # cubic yards per bucket
    cycle_time: float = 0.0          # minutes per dig-swing-dump cycle

    kind = UnitKind.EXCAVATOR

    @property
    def volume_per_trip(self) -> float:
        return self.bucket_capacity

    @property
    def minutes_per_trip(self) -> float:
        return self.cycle_time


@dataclass(frozen=True)
class Truck(EquipmentUnit):
    capacity: float = 0.0            # cubic yards per load
    round_trip_time: float = 0.0     # minutes to load, haul, dump and return

    kind = UnitKind.TRUCK

    @property
    def volume_per_trip(self) -> float:
        return self.capacity

    @property
    def minutes_per_trip(self) -> float:
        return self.round_trip_time


# Which FieldKind backs each editable attribute, per unit type
UNIT_FIELDS = {
    UnitKind.EXCAVATOR: {
        "bucket_capacity": FieldKind.BUCKET_CAPACITY,
        "cycle_time": FieldKind.CYCLE_TIME,
    },
    UnitKind.TRUCK: {
        "capacity": FieldKind.TRUCK_CAPACITY,
        "round_trip_time": FieldKind.ROUND_TRIP_TIME,
    },
}


# --------------------------------- Pond ------------------------------------

@dataclass(frozen=True)
class PondDimensions:
    length: float                    # feet
    width: float                     # feet
    depth: float                     # feet
    work_hours_per_day: float


POND_FIELDS = {
    "length": FieldKind.POND_LENGTH,
    "width": FieldKind.POND_WIDTH,
    "depth": FieldKind.POND_DEPTH,
    "work_hours_per_day": FieldKind.WORK_HOURS,
}


# ------------------------------- Outcomes ----------------------------------

@dataclass(frozen=True)
class ValidationError:
    field: str
    kind: ErrorKind
    bounds: Optional[Tuple[float, float]] = None
    detail: str = ""

    @property
    def message(self) -> str:
        if self.detail:
            return self.detail
        if self.kind is ErrorKind.REQUIRED:
            return "A value is required."
        if self.kind is ErrorKind.INVALID_FORMAT:
            return "Enter a valid number."
        if self.kind is ErrorKind.OUT_OF_RANGE and self.bounds:
            lo, hi = self.bounds
            return f"Must be between {lo:g} and {hi:g}."
        return "Invalid value."


@dataclass(frozen=True)
class CalculationResult:
    total_volume: float              # cubic yards
    excavation_rate: float           # cubic yards / hour, whole fleet
    hauling_rate: float              # cubic yards / hour, whole fleet
    bottleneck: Bottleneck
    timeline_days: int
    is_valid: bool

    @property
    def bottleneck_rate(self) -> float:
        return min(self.excavation_rate, self.hauling_rate)
