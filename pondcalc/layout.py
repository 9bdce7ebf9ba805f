# pondcalc/layout.py
"""Viewport width -> layout, and what each layout allows.

Nothing in here changes a number, only which controls the page draws.
"""
from __future__ import annotations

from enum import Enum
from typing import Mapping, Optional


class Layout(str, Enum):
    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"


DEFAULT_BREAKPOINTS = {"tablet": 768, "desktop": 1024}


def layout_for_width(width: Optional[int], breakpoints: Mapping[str, int] = DEFAULT_BREAKPOINTS) -> Layout:
    if width is None:
        return Layout.DESKTOP
    if width < breakpoints["tablet"]:
        return Layout.MOBILE
    if width < breakpoints["desktop"]:
        return Layout.TABLET
    return Layout.DESKTOP


def parse_width(raw) -> Optional[int]:
    """Query-string width ('?vw=390') to int; junk and non-positive values -> None."""
    if raw is None:
        return None
    if isinstance(raw, list):
        raw = raw[0] if raw else None
        if raw is None:
            return None
    try:
        width = int(str(raw).strip())
    except ValueError:
        return None
    return width if width > 0 else None


def fleet_management_enabled(layout: Layout) -> bool:
    """Add/remove buttons are desktop and tablet only."""
    return layout is not Layout.MOBILE


def editable_unit_count(layout: Layout, fleet_size: int) -> int:
    """How many rows of a fleet the page shows; mobile edits the first unit only."""
    if layout is Layout.MOBILE:
        return min(1, fleet_size)
    return fleet_size
