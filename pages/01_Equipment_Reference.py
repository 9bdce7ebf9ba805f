# pages/01_Equipment_Reference.py – configured equipment presets and their rates
import pandas as pd
import streamlit as st

from pondcalc import config as app_config
from pondcalc.calculations import unit_rate
from pondcalc.config import Efficiency
from pondcalc.layout import layout_for_width, parse_width
from pondcalc.models import FIELD_LABELS, FIELD_UNITS, FieldKind
from pondcalc.state import excavator_from_preset, truck_from_preset
from pondcalc.storage import KeyValueStore, load_state, save_preference
from pondcalc.theme import apply_theme, hide_streamlit_chrome
from pondcalc.theme_persist import get_query_param, init_theme, render_toggle
from pondcalc.ui_sidebar import apply_sidebar_shell, sidebar_card, sidebar_style

st.set_page_config(
    page_title="Pond Digging Calculator – Equipment Reference",
    layout="centered",
    initial_sidebar_state="expanded",
)

try:
    cfg = app_config.ensure_loaded()
except app_config.ConfigError as exc:
    st.error(f"Equipment configuration problem:\n\n{exc}")
    st.stop()

# Same session objects as the calculator page, created here if this page is opened first
if "store" not in st.session_state:
    st.session_state["store"] = KeyValueStore.from_env()
store: KeyValueStore = st.session_state["store"]


def on_dark_mode(value: bool) -> None:
    state = st.session_state.get("app_state") or load_state(store, cfg)
    st.session_state["app_state"] = save_preference(store, state, "ui_dark", value)


hide_streamlit_chrome()
ui_dark = init_theme(apply_theme_fn=apply_theme)
with sidebar_card("Appearance", icon="🌓"):
    ui_dark = render_toggle(on_change=on_dark_mode)
apply_theme("dark" if ui_dark else "light")
apply_sidebar_shell(sidebar_style(ui_dark, layout_for_width(parse_width(get_query_param("vw")), cfg.breakpoints)))

PAGES = {
    "Calculator": "Home.py",
    "Equipment Reference": "pages/01_Equipment_Reference.py",
}
CURRENT_PAGE = "Equipment Reference"
with sidebar_card("Navigate", icon="🧭"):
    sel = st.selectbox(
        "Go to page",
        list(PAGES.keys()),
        index=list(PAGES.keys()).index(CURRENT_PAGE),
        key="nav_dd_reference",
    )
    if sel != CURRENT_PAGE:
        st.query_params.update({"theme": "dark" if ui_dark else "light"})
        st.switch_page(PAGES[sel])

# Theoretical rate = same formula with no derating
FULL = Efficiency(excavator=1.0, truck=1.0)

st.markdown("# Equipment Reference")
st.caption(f"Configuration version {cfg.version}")

exc_rows = []
for i, preset in enumerate(cfg.excavator_presets):
    unit = excavator_from_preset(i + 1, preset)
    exc_rows.append({
        "Preset": preset.name,
        "Bucket (cy)": preset.bucket_capacity,
        "Cycle (min)": preset.cycle_time,
        "Theoretical (cy/hr)": unit_rate(unit, FULL),
        f"Derated @ {cfg.efficiency.excavator:.0%} (cy/hr)": unit_rate(unit, cfg.efficiency),
    })

truck_rows = []
for i, preset in enumerate(cfg.truck_presets):
    unit = truck_from_preset(i + 1, preset)
    truck_rows.append({
        "Preset": preset.name,
        "Capacity (cy)": preset.capacity,
        "Round Trip (min)": preset.round_trip_time,
        "Theoretical (cy/hr)": unit_rate(unit, FULL),
        f"Derated @ {cfg.efficiency.truck:.0%} (cy/hr)": unit_rate(unit, cfg.efficiency),
    })

st.markdown("### Excavators")
st.dataframe(pd.DataFrame(exc_rows).round(2), use_container_width=True, hide_index=True)
st.caption(f"The first row is the default for new excavators. Fleet limit: {cfg.fleet_limits.max_excavators}.")

st.markdown("### Trucks")
st.dataframe(pd.DataFrame(truck_rows).round(2), use_container_width=True, hide_index=True)
st.caption(f"The first row is the default for new trucks. Fleet limit: {cfg.fleet_limits.max_trucks}.")

st.markdown("### Accepted input ranges")
range_rows = [
    {
        "Field": FIELD_LABELS[kind],
        "Unit": FIELD_UNITS[kind],
        "Min": cfg.range_for(kind).min,
        "Max": cfg.range_for(kind).max,
    }
    for kind in FieldKind
]
st.dataframe(pd.DataFrame(range_rows), use_container_width=True, hide_index=True)
