# pondcalc/report.py
"""Tables and charts for the results panel and the CSV export."""
from __future__ import annotations

import matplotlib.pyplot as plt
import pandas as pd

from .calculations import efficiency_for, hourly_breakdown
from .config import AppConfig
from .models import Bottleneck, CalculationResult, UnitKind
from .state import AppState

RATE_COLUMNS = [
    "Type", "Name", "Active", "Volume / Trip (cy)", "Minutes / Trip",
    "Efficiency", "Rate (cy/hr)", "Share of Fleet",
]

# Chart colors (match the excel panel palette)
BAR_COLOR = "#44a04c"
BOTTLENECK_COLOR = "#cc3232"


def rate_table(state: AppState, config: AppConfig) -> pd.DataFrame:
    """One row per unit, excavators first, in fleet order."""
    rows = []
    for kind in (UnitKind.EXCAVATOR, UnitKind.TRUCK):
        breakdown = hourly_breakdown(state.fleet(kind).units, config.efficiency)
        total = sum(rate for _, rate in breakdown)
        for unit, rate in breakdown:
            rows.append({
                "Type": kind.value.title(),
                "Name": unit.label,
                "Active": unit.is_active,
                "Volume / Trip (cy)": unit.volume_per_trip,
                "Minutes / Trip": unit.minutes_per_trip,
                "Efficiency": efficiency_for(kind, config.efficiency),
                "Rate (cy/hr)": rate,
                "Share of Fleet": (rate / total) if total > 0 else 0.0,
            })
    return pd.DataFrame(rows, columns=RATE_COLUMNS)


def summary_rows(result: CalculationResult) -> list[tuple[str, str]]:
    return [
        ("Total Volume", f"{result.total_volume:,.1f} cy"),
        ("Excavation Rate", f"{result.excavation_rate:,.2f} cy/hr"),
        ("Hauling Rate", f"{result.hauling_rate:,.2f} cy/hr"),
        ("Bottleneck", result.bottleneck.value.title()),
        ("Timeline", f"{result.timeline_days} day{'s' if result.timeline_days != 1 else ''}"),
    ]


def estimate_csv(state: AppState, config: AppConfig) -> bytes:
    """Unit breakdown followed by a blank line and the estimate summary."""
    table = rate_table(state, config).round({"Rate (cy/hr)": 2, "Share of Fleet": 4})
    parts = [table.to_csv(index=False)]
    result = state.result or state.last_valid_result
    if result is not None:
        p = state.pond
        summary = pd.DataFrame(
            [
                ("Pond Length (ft)", f"{p.length:g}"),
                ("Pond Width (ft)", f"{p.width:g}"),
                ("Pond Depth (ft)", f"{p.depth:g}"),
                ("Work Hours / Day", f"{p.work_hours_per_day:g}"),
                *summary_rows(result),
                ("Status", "Current" if state.result is not None else "Last valid (inputs changed)"),
            ],
            columns=["Item", "Value"],
        )
        parts.append(summary.to_csv(index=False))
    return "\n".join(parts).encode("utf-8")


def rate_chart(result: CalculationResult):
    """Excavation vs hauling bars; the bottleneck bar is drawn in red."""
    labels = ["Excavation", "Hauling"]
    values = [result.excavation_rate, result.hauling_rate]
    slow = 0 if result.bottleneck is Bottleneck.EXCAVATION else 1
    colors = [BOTTLENECK_COLOR if i == slow else BAR_COLOR for i in range(2)]

    fig, ax = plt.subplots(figsize=(4, 3))
    ax.bar(labels, values, color=colors, width=0.5, zorder=2)
    ymax = max(values) * 1.2 if max(values) > 0 else 1.0
    ax.set_ylim(0, ymax)
    ax.set_ylabel("Cubic yards / hour")
    for i, v in enumerate(values):
        ax.text(i, v + ymax * 0.02, f"{v:,.1f}", ha="center", va="bottom", fontweight="bold")
    ax.grid(axis="y", linestyle=":", zorder=1)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    fig.tight_layout()
    return fig
