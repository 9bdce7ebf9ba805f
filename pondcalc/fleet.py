# pondcalc/fleet.py
"""Fleet list operations.

Every function is total: a rejected change returns the fleet unchanged
rather than raising, and no function mutates its argument.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from typing import Callable, Optional, Tuple

from .models import EquipmentUnit

logger = logging.getLogger(__name__)

MIN_UNITS = 1


@dataclass(frozen=True)
class Fleet:
    units: Tuple[EquipmentUnit, ...] = ()
    next_id: int = 1

    def __len__(self) -> int:
        return len(self.units)

    def __iter__(self):
        return iter(self.units)

    def get(self, unit_id: int) -> Optional[EquipmentUnit]:
        for u in self.units:
            if u.id == unit_id:
                return u
        return None

    @property
    def active_count(self) -> int:
        return sum(1 for u in self.units if u.is_active)


def fleet_of(*units: EquipmentUnit) -> Fleet:
    """Build a fleet from existing units; the id counter continues past the highest id."""
    next_id = max((u.id for u in units), default=0) + 1
    return Fleet(units=tuple(units), next_id=next_id)


def can_add(fleet: Fleet, max_units: int) -> bool:
    return len(fleet) < max_units


def can_remove(fleet: Fleet) -> bool:
    return len(fleet) > MIN_UNITS


def add_unit(fleet: Fleet, make_unit: Callable[[int], EquipmentUnit], max_units: int) -> Fleet:
    if not can_add(fleet, max_units):
        logger.debug("Fleet is full (%d units); add ignored", len(fleet))
        return fleet
    unit = make_unit(fleet.next_id)
    return Fleet(units=fleet.units + (unit,), next_id=fleet.next_id + 1)


def remove_unit(fleet: Fleet, unit_id: int) -> Fleet:
    if fleet.get(unit_id) is None:
        return fleet
    if not can_remove(fleet):
        logger.debug("Refusing to remove unit %s: fleet would be empty", unit_id)
        return fleet
    return replace(fleet, units=tuple(u for u in fleet.units if u.id != unit_id))


def update_unit(fleet: Fleet, unit_id: int, **changes) -> Fleet:
    """Replace fields on the matching unit.

    ``id`` and names the unit type doesn't have are ignored.
    """
    target = fleet.get(unit_id)
    if target is None:
        return fleet
    allowed = {f.name for f in fields(target)} - {"id"}
    changes = {k: v for k, v in changes.items() if k in allowed}
    if not changes:
        return fleet
    units = tuple(replace(u, **changes) if u.id == unit_id else u for u in fleet.units)
    return replace(fleet, units=units)
