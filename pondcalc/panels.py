# pondcalc/panels.py
"""HTML panels for the results area (excel-like tables, badges, inline errors)."""
from __future__ import annotations

from html import escape as _escape
from typing import Any, Optional

import streamlit as st

from .models import Bottleneck, CalculationResult, ValidationError


def e(value: Any) -> str:
    """HTML-escape a value for markup. None -> ""."""
    if value is None:
        return ""
    return _escape(str(value), quote=True)


def inject_excel_styles(dark: bool) -> None:
    col_bg      = "#132a3a" if dark else "#f3f8fc"
    col_border  = "#1d4660" if dark else "#9cc3e0"
    grid        = "#2a536e" if dark else "#d5e6f3"
    header_bg   = "#1d4660" if dark else "#1f5f8b"
    header_text = "#cfe6f7" if dark else "#ffffff"
    label_col   = "#cfe6f7" if dark else "#0f1d2b"
    alt_row     = "#17334a" if dark else "#eaf2f9"
    shadow      = "0 2px 10px rgba(0,0,0,.28)" if dark else "0 2px 10px rgba(0,0,0,.08)"

    st.markdown(f"""
    <style>
      .excel-col {{ background:{col_bg}; border:2.5px solid {col_border}; border-radius:12px; padding:12px 12px 18px; box-shadow:{shadow}; }}
      .excel-title {{ margin:0 0 14px 0; font-weight:800; color:{label_col}; border-bottom:2px dashed {col_border}; padding-bottom:4px; text-align:center; font-size:26px; }}
      .excel-table {{ width:100%; border-collapse:separate; border-spacing:0; table-layout:fixed; }}
      .excel-table thead th {{ background:{header_bg}; color:{header_text}; text-align:center; padding:0 10px; font-weight:700; border:2px solid {grid}; }}
      .excel-table tbody td {{ padding:8px 10px; border-bottom:2px solid {grid}; border-left:2px solid {grid}; border-right:2px solid {grid}; }}
      .excel-table tbody tr:nth-child(odd) td {{ background:{alt_row}; }}
      .excel-table td:first-child {{ color:{label_col}; font-weight:600; width:55%; white-space:nowrap; }}
      .excel-table td:last-child {{ text-align:right; white-space:nowrap; }}
      .pc-days {{ font-size:56px; font-weight:800; text-align:center; line-height:1.1; margin:6px 0 2px 0; }}
      .pc-days-label {{ text-align:center; margin-bottom:10px; }}
      .pc-stale {{ opacity:.6; }}
    </style>
    """, unsafe_allow_html=True)


def excel_panel(title: str, rows: list[tuple[str, str]], *, stale: bool = False) -> None:
    body = "\n".join(f"<tr><td>{e(lbl)}</td><td>{e(val)}</td></tr>" for lbl, val in rows)
    st.markdown(
        f"""
        <div class="excel-col{' pc-stale' if stale else ''}">
          <h4 class="excel-title">{e(title)}</h4>
          <table class="excel-table" role="table" aria-label="{e(title)}">
            <thead><tr><th>Item</th><th>Value</th></tr></thead>
            <tbody>{body}</tbody>
          </table>
        </div>
        """,
        unsafe_allow_html=True,
    )


def bottleneck_badge(bottleneck: Bottleneck) -> str:
    if bottleneck is Bottleneck.EXCAVATION:
        bg, fg, bd, label = "#fef3c7", "#92400e", "#f59e0b", "EXCAVATION LIMITED"
    else:
        bg, fg, bd, label = "#fee2e2", "#991b1b", "#ef4444", "HAULING LIMITED"
    return (
        f'<span style="display:inline-block; padding:2px 12px; border-radius:999px; '
        f'background:{bg}; color:{fg}; border:3px solid {bd}; font-weight:600;">{label}</span>'
    )


def timeline_headline(result: CalculationResult, *, stale: bool = False) -> None:
    days = result.timeline_days
    note = "Last valid estimate (fix the highlighted inputs to update)" if stale else "Estimated working days"
    st.markdown(
        f"""
        <div class="{'pc-stale' if stale else ''}">
          <div class="pc-days" data-testid="timeline-days">{days}</div>
          <div class="pc-days-label">{e(note)} &middot; day{'s' if days != 1 else ''}</div>
          <div style="text-align:center; margin-bottom:12px;">{bottleneck_badge(result.bottleneck)}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def field_error(err: Optional[ValidationError]) -> None:
    """Inline error text under an input; nothing when err is None."""
    if err is None:
        return
    st.markdown(f'<div class="pc-field-error">{e(err.message)}</div>', unsafe_allow_html=True)
