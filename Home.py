# Home.py – Pond Digging Calculator
import logging

import matplotlib.pyplot as plt
import streamlit as st

from pondcalc import config as app_config
from pondcalc import fleet as fl
from pondcalc import report
from pondcalc import state as s
from pondcalc.debounce import Debouncer
from pondcalc.layout import (
    Layout, editable_unit_count, fleet_management_enabled, layout_for_width, parse_width,
)
from pondcalc.logging_config import setup_logging
from pondcalc.models import FIELD_LABELS, FIELD_UNITS, POND_FIELDS, UNIT_FIELDS, UnitKind
from pondcalc.panels import excel_panel, field_error, inject_excel_styles, timeline_headline
from pondcalc.settings import RESULTS_POLL_SECONDS
from pondcalc.storage import KeyValueStore, clear_state, load_state, save_preference, save_state
from pondcalc.theme import apply_theme, hide_streamlit_chrome
from pondcalc.theme_persist import get_query_param, init_theme, render_toggle
from pondcalc.ui_sidebar import apply_sidebar_shell, sidebar_card, sidebar_style
from pondcalc.validation import pond_field_key, unit_field_key

# ===== Page config (call once, first) =======================================
st.set_page_config(
    page_title="Pond Digging Calculator",
    layout="wide",
    initial_sidebar_state="expanded",
)

if "logging_ready" not in st.session_state:
    setup_logging()
    st.session_state["logging_ready"] = True
logger = logging.getLogger("pondcalc.page")

try:
    cfg = app_config.ensure_loaded()
except app_config.ConfigError as exc:
    st.error(f"Equipment configuration problem:\n\n{exc}")
    st.stop()

# ===== Session objects ======================================================
if "store" not in st.session_state:
    st.session_state["store"] = KeyValueStore.from_env()
store: KeyValueStore = st.session_state["store"]

if "app_state" not in st.session_state:
    st.session_state["app_state"] = load_state(store, cfg)
    saved_dark = st.session_state["app_state"].preferences.get("ui_dark")
    if saved_dark is not None and "ui_dark" not in st.session_state:
        st.session_state["ui_dark"] = bool(saved_dark)

if "debouncer" not in st.session_state:
    st.session_state["debouncer"] = Debouncer(cfg.debounce_seconds)
debouncer: Debouncer = st.session_state["debouncer"]


def current() -> s.AppState:
    return st.session_state["app_state"]


def widget_key(field_key: str) -> str:
    return f"in:{field_key}"


def _forget_widgets(prefix: str = "") -> None:
    """Drop cached widget text so inputs reseed from state on the next run."""
    for k in [k for k in st.session_state.keys() if str(k).startswith(f"in:{prefix}")]:
        del st.session_state[k]


def _recalculate() -> None:
    new_state = s.recalculate(current(), cfg)
    st.session_state["app_state"] = new_state
    save_state(store, new_state)


def commit(new_state: s.AppState, *, recalc: bool = True) -> None:
    st.session_state["app_state"] = new_state
    if recalc:
        # Every change restarts the window; only the last one within it calculates
        debouncer.schedule(_recalculate)


# ----- widget callbacks -----
def on_field_change(field_key: str) -> None:
    raw = st.session_state.get(widget_key(field_key), "")
    commit(s.edit_field(current(), field_key, raw, cfg))


def on_name_change(kind: UnitKind, unit_id: int) -> None:
    name = st.session_state.get(f"name:{kind.value}:{unit_id}", "")
    commit(s.rename_unit(current(), kind, unit_id, name), recalc=False)
    save_state(store, current())


def on_active_change(kind: UnitKind, unit_id: int) -> None:
    active = st.session_state.get(f"active:{kind.value}:{unit_id}", True)
    commit(s.set_unit_active(current(), kind, unit_id, active))


def on_add(kind: UnitKind) -> None:
    commit(s.add_unit(current(), kind, cfg))


def on_remove(kind: UnitKind, unit_id: int) -> None:
    commit(s.remove_unit(current(), kind, unit_id))
    _forget_widgets(f"{kind.value}s.{unit_id}.")


def on_apply_preset() -> None:
    target = st.session_state.get("preset_target")
    preset_name = st.session_state.get("preset_choice")
    if not target or not preset_name:
        return
    kind_value, unit_id = target.split(":")
    kind = UnitKind(kind_value)
    presets = cfg.excavator_presets if kind is UnitKind.EXCAVATOR else cfg.truck_presets
    preset = next((p for p in presets if p.name == preset_name), None)
    if preset is None:
        return
    commit(s.apply_preset(current(), kind, int(unit_id), preset))
    _forget_widgets(f"{kind.value}s.{unit_id}.")
    st.session_state.pop(f"name:{kind.value}:{unit_id}", None)


def on_dismiss_banner() -> None:
    commit(s.dismiss_banner(current()), recalc=False)


def on_dark_mode(value: bool) -> None:
    st.session_state["app_state"] = save_preference(store, current(), "ui_dark", value)


def on_reset() -> None:
    debouncer.cancel()
    clear_state(store)
    fresh = s.initial_state(cfg)
    st.session_state["app_state"] = fresh
    _forget_widgets()
    for k in [k for k in st.session_state.keys() if str(k).startswith(("name:", "active:"))]:
        del st.session_state[k]
    logger.info("Calculator reset to defaults")


# ===== THEME ================================================================
hide_streamlit_chrome()
ui_dark = init_theme(apply_theme_fn=apply_theme)

with sidebar_card("Appearance", icon="🌓"):
    ui_dark = render_toggle(on_change=on_dark_mode)
apply_theme("dark" if ui_dark else "light")

# ---------- Sidebar: Navigation ----------
PAGES = {
    "Calculator": "Home.py",
    "Equipment Reference": "pages/01_Equipment_Reference.py",
}
CURRENT_PAGE = "Calculator"
with sidebar_card("Navigate", icon="🧭"):
    sel = st.selectbox("Go to page", list(PAGES.keys()), index=0, key="nav_dd_home")
    if sel != CURRENT_PAGE:
        st.query_params.update({"theme": "dark" if ui_dark else "light"})
        st.switch_page(PAGES[sel])

# ---------- Sidebar: Layout ----------
LAYOUT_CHOICES = ["Auto", "Mobile", "Tablet", "Desktop"]
with sidebar_card("Layout", icon="📱"):
    layout_choice = st.selectbox(
        "Screen layout",
        LAYOUT_CHOICES,
        key="layout_choice",
        help="Auto uses the ?vw= width hint from the page URL; otherwise desktop.",
    )
if layout_choice == "Auto":
    layout = layout_for_width(parse_width(get_query_param("vw")), cfg.breakpoints)
else:
    layout = Layout(layout_choice.lower())
manage_fleet = fleet_management_enabled(layout)
apply_sidebar_shell(sidebar_style(ui_dark, layout))

# ---------- Sidebar: Presets ----------
state = current()
with sidebar_card("Equipment Presets", icon="🚜"):
    targets = {
        f"{u.kind.value}:{u.id}": u.label
        for kind in (UnitKind.EXCAVATOR, UnitKind.TRUCK)
        for u in state.fleet(kind).units[:editable_unit_count(layout, len(state.fleet(kind)))]
    }
    target = st.selectbox("Apply to", list(targets), format_func=targets.get, key="preset_target")
    target_kind = UnitKind(target.split(":")[0]) if target else UnitKind.EXCAVATOR
    presets = cfg.excavator_presets if target_kind is UnitKind.EXCAVATOR else cfg.truck_presets
    st.selectbox("Preset", [p.name for p in presets], key="preset_choice")
    st.button("Apply preset", use_container_width=True, on_click=on_apply_preset)

# ---------- Sidebar: Saved state ----------
with sidebar_card("Saved Estimate", icon="💾"):
    st.caption(f"Autosaves to `{store.path}`")
    st.button("Reset to defaults", use_container_width=True, on_click=on_reset)

# ===================== Header ===============================================
st.markdown(
    "<h1 style='margin:0'>Pond Digging Calculator</h1>"
    "<div style='opacity:.75'>Excavation timeline from your fleet and pond size</div>",
    unsafe_allow_html=True,
)
if not state.info_banner_dismissed:
    b1, b2 = st.columns([8, 1], vertical_alignment="center")
    with b1:
        st.info(
            "Estimates assume continuous digging and hauling at derated equipment rates "
            f"(excavators {cfg.efficiency.excavator:.0%}, trucks {cfg.efficiency.truck:.0%}). "
            "Weather, soil and site access are not modelled."
        )
    with b2:
        st.button("Dismiss", key="dismiss_banner", on_click=on_dismiss_banner)

inject_excel_styles(ui_dark)


def number_field(field_key: str, kind, *, label_visibility: str = "visible") -> None:
    wkey = widget_key(field_key)
    if wkey not in st.session_state:
        st.session_state[wkey] = s.display_text(current(), field_key)
    st.text_input(
        f"{FIELD_LABELS[kind]} ({FIELD_UNITS[kind]})",
        key=wkey,
        on_change=on_field_change,
        args=(field_key,),
        label_visibility=label_visibility,
    )
    field_error(current().error_for(field_key))


def fleet_section(kind: UnitKind) -> None:
    fleet = current().fleet(kind)
    limit = cfg.fleet_limits.max_excavators if kind is UnitKind.EXCAVATOR else cfg.fleet_limits.max_trucks
    title = "Excavators" if kind is UnitKind.EXCAVATOR else "Trucks"
    st.markdown(f"### {title}")
    if manage_fleet:
        st.caption(f"{len(fleet)} of {limit} units")

    for unit in fleet.units[:editable_unit_count(layout, len(fleet))]:
        with st.container(border=True):
            c_name, c_a, c_b, c_active, c_del = st.columns([3, 2, 2, 1.2, 0.8], vertical_alignment="center")
            with c_name:
                name_key = f"name:{kind.value}:{unit.id}"
                st.session_state.setdefault(name_key, unit.name)
                st.text_input("Name", key=name_key, on_change=on_name_change, args=(kind, unit.id))
            cols = (c_a, c_b)
            for col, (attr, fkind) in zip(cols, UNIT_FIELDS[kind].items()):
                with col:
                    number_field(unit_field_key(kind, unit.id, attr), fkind)
            with c_active:
                active_key = f"active:{kind.value}:{unit.id}"
                st.session_state.setdefault(active_key, unit.is_active)
                st.toggle("Active", key=active_key, on_change=on_active_change, args=(kind, unit.id))
            with c_del:
                if manage_fleet:
                    st.button(
                        "🗑️", key=f"del:{kind.value}:{unit.id}", help="Remove this unit",
                        disabled=not fl.can_remove(fleet), on_click=on_remove, args=(kind, unit.id),
                    )

    if manage_fleet:
        st.button(
            f"➕ Add {kind.value}", key=f"add:{kind.value}",
            disabled=not fl.can_add(fleet, limit), on_click=on_add, args=(kind,),
        )
    fleet_err = current().error_for(f"{kind.value}s")
    if fleet_err:
        st.warning(fleet_err.message)


# ===================== Inputs ===============================================
col_inputs, col_results = st.columns([3, 2], gap="large") if layout is Layout.DESKTOP else (st.container(), st.container())

with col_inputs:
    st.markdown("### Pond")
    pond_cols = st.columns(2 if layout is Layout.MOBILE else 4)
    for i, (attr, fkind) in enumerate(POND_FIELDS.items()):
        with pond_cols[i % len(pond_cols)]:
            number_field(pond_field_key(attr), fkind)

    fleet_section(UnitKind.EXCAVATOR)
    fleet_section(UnitKind.TRUCK)


# ===================== Results ==============================================
@st.fragment(run_every=RESULTS_POLL_SECONDS if debouncer.pending else None)
def results_panel() -> None:
    fired, _ = debouncer.fire_if_due()
    if fired:
        # Full rerun so inline errors and the polling schedule catch up
        st.rerun()

    state = current()
    result = state.result or state.last_valid_result
    stale = state.is_stale

    st.markdown("### Estimate")
    if debouncer.pending:
        st.caption("Updating…")
    if result is None:
        st.warning("Fix the highlighted inputs to see an estimate.")
        return
    if stale:
        st.warning(f"{len(state.errors)} input problem(s). Showing the last valid estimate.")

    timeline_headline(result, stale=stale)
    excel_panel("Summary", report.summary_rows(result), stale=stale)

    try:
        fig = report.rate_chart(result)
        st.pyplot(fig, clear_figure=True)
        plt.close(fig)
    except Exception as exc:
        logger.warning("Rate chart failed: %s", exc)
        st.caption(f"(Chart error: {exc})")

    with st.expander("Rate breakdown by unit", expanded=layout is Layout.DESKTOP):
        st.dataframe(
            report.rate_table(state, cfg),
            use_container_width=True,
            hide_index=True,
            column_config={
                "Rate (cy/hr)": st.column_config.NumberColumn(format="%.2f"),
                "Share of Fleet": st.column_config.ProgressColumn(min_value=0.0, max_value=1.0),
            },
        )
    st.download_button(
        "⬇️ Download estimate (CSV)",
        data=report.estimate_csv(state, cfg),
        file_name="pond-estimate.csv",
        mime="text/csv",
        use_container_width=True,
    )


with col_results:
    results_panel()
