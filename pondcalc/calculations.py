import math
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import Efficiency
from .models import (
    Bottleneck, CalculationResult, EquipmentUnit, Excavator, PondDimensions,
    Truck, UnitKind,
)
from .settings import CUBIC_FEET_PER_CUBIC_YARD


def pond_volume_cubic_feet(pond: PondDimensions) -> float:
    return pond.length * pond.width * pond.depth


def cubic_feet_to_yards(cubic_feet: float) -> float:
    return cubic_feet / CUBIC_FEET_PER_CUBIC_YARD


def efficiency_for(kind: UnitKind, efficiency: Efficiency) -> float:
    return efficiency.excavator if kind is UnitKind.EXCAVATOR else efficiency.truck


def unit_rate(unit: EquipmentUnit, efficiency: Efficiency) -> float:
    return unit.hourly_rate(efficiency_for(unit.kind, efficiency))


def fleet_rate(units: Iterable[EquipmentUnit], efficiency: Efficiency) -> float:
    return sum(unit_rate(u, efficiency) for u in units if u.is_active)


def hourly_breakdown(units: Sequence[EquipmentUnit], efficiency: Efficiency) -> List[Tuple[EquipmentUnit, float]]:
    """(unit, rate) pairs in fleet order; inactive units report 0.0."""
    return [(u, unit_rate(u, efficiency) if u.is_active else 0.0) for u in units]


def pick_bottleneck(excavation_rate: float, hauling_rate: float) -> Bottleneck:
    # Ties report excavation
    return Bottleneck.EXCAVATION if excavation_rate <= hauling_rate else Bottleneck.HAULING


def timeline_days(volume_cy: float, bottleneck_rate: float, work_hours_per_day: float) -> int:
    return math.ceil(volume_cy / bottleneck_rate / work_hours_per_day) if volume_cy > 0 else 0


def _usable(*values: float) -> bool:
    return all(math.isfinite(v) and v > 0 for v in values)


def calculate_timeline(
    pond: PondDimensions,
    excavators: Sequence[Excavator],
    trucks: Sequence[Truck],
    efficiency: Optional[Efficiency] = None,
) -> CalculationResult:
    """Days to dig and haul the pond with the given fleets.

    Volume is reported in cubic yards; rates are cubic yards per hour.
    Inputs are expected to be validated already. Anything that would divide
    by zero or produce NaN yields ``is_valid=False`` and 0 days instead.
    """
    efficiency = efficiency or Efficiency()
    volume_cy = cubic_feet_to_yards(pond_volume_cubic_feet(pond))
    excavation = fleet_rate(excavators, efficiency)
    hauling = fleet_rate(trucks, efficiency)
    bottleneck = pick_bottleneck(excavation, hauling)

    if not _usable(volume_cy, excavation, hauling, pond.work_hours_per_day):
        return CalculationResult(
            total_volume=volume_cy if math.isfinite(volume_cy) else 0.0,
            excavation_rate=excavation if math.isfinite(excavation) else 0.0,
            hauling_rate=hauling if math.isfinite(hauling) else 0.0,
            bottleneck=bottleneck,
            timeline_days=0,
            is_valid=False,
        )

    return CalculationResult(
        total_volume=volume_cy,
        excavation_rate=excavation,
        hauling_rate=hauling,
        bottleneck=bottleneck,
        timeline_days=timeline_days(volume_cy, min(excavation, hauling), pond.work_hours_per_day),
        is_valid=True,
    )
