"""Query-string backed UI preferences for Streamlit pages.

Keeps the dark/light toggle consistent across pages and refreshes by using
st.session_state *and* the URL query string (?theme=dark|light). The same
helpers read the viewport hint (?vw=390) that picks the page layout.

Usage (on every page):

    from pondcalc.theme_persist import init_theme, render_toggle
    from pondcalc.theme import apply_theme

    ui_dark = init_theme(default=False, apply_theme_fn=apply_theme)
    with sidebar_card("Appearance", icon="🌓"):
        ui_dark = render_toggle()
"""
from __future__ import annotations

from typing import Callable
import streamlit as st

# ------------------------------- Internals ---------------------------------

def get_query_param(name: str) -> str | None:
    """Return a single query-string value (first one if repeated)."""
    value = st.query_params.get(name)
    if isinstance(value, list):
        value = value[0] if value else None
    return value


def set_query_param(name: str, value: str) -> None:
    """Write one query-string value, keeping the others intact."""
    if st.query_params.get(name) != value:
        st.query_params[name] = value


# ------------------------------ Public API ---------------------------------

def init_theme(
    default: bool = False,
    apply_theme_fn: Callable[[str], None] | None = None,
) -> bool:
    """Initialize `ui_dark` in session_state and apply the theme.

    Precedence on first load: URL (?theme=) then `default`. Afterwards the
    session value wins.
    """
    if "ui_dark" not in st.session_state:
        qs_theme = get_query_param("theme")
        if qs_theme in {"dark", "light"}:
            st.session_state["ui_dark"] = (qs_theme == "dark")
        else:
            st.session_state["ui_dark"] = bool(default)

    ui_dark: bool = bool(st.session_state["ui_dark"])
    if apply_theme_fn:
        apply_theme_fn("dark" if ui_dark else "light")
    return ui_dark


def render_toggle(
    label: str = "Dark mode",
    state_key: str = "ui_dark",
    widget_key: str = "ui_dark_toggle",
    on_change: Callable[[bool], None] | None = None,
) -> bool:
    """Render a dark-mode toggle and sync it to the URL.

    The widget uses a key distinct from `state_key` so nothing else that
    reads `state_key` collides with the widget's own state.
    """
    current = bool(st.session_state.get(state_key, False))

    def _sync():
        val = bool(st.session_state.get(widget_key, current))
        st.session_state[state_key] = val
        set_query_param("theme", "dark" if val else "light")
        if on_change:
            on_change(val)

    st.toggle(label, value=current, key=widget_key, on_change=_sync)
    return bool(st.session_state[state_key])

