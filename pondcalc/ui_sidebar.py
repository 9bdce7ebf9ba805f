# pondcalc/ui_sidebar.py
"""Sidebar drawer and cards.

Colors come from the theme palette and the drawer width from the current
layout, so a phone gets a narrow drawer with tighter cards. Cards are keyed
containers (Streamlit renders ``key`` as an ``st-key-<key>`` class) and one
stylesheet per run covers all of them.
"""
from __future__ import annotations

import re
from contextlib import contextmanager
from dataclasses import dataclass

import streamlit as st

from .layout import Layout
from .panels import e
from .theme import palette

CARD_KEY_PREFIX = "pc-card-"

SIDEBAR_WIDTHS = {Layout.MOBILE: 260, Layout.TABLET: 290, Layout.DESKTOP: 320}


@dataclass(frozen=True)
class SidebarStyle:
    width_px: int
    pad_px: int
    bg: str
    text: str
    border_right: str
    card_bg: str
    card_border: str
    title_px: int


def sidebar_style(ui_dark: bool, layout: Layout = Layout.DESKTOP) -> SidebarStyle:
    t = palette("dark" if ui_dark else "light")
    compact = layout is Layout.MOBILE
    return SidebarStyle(
        width_px=SIDEBAR_WIDTHS[layout],
        pad_px=8 if compact else 12,
        bg=t["sidebar_bg"],
        text=t["sidebar_text"],
        border_right=t["sidebar_border"],
        # dark cards sit flush on the drawer; light ones are raised white tiles
        card_bg="transparent" if ui_dark else t["card_bg"],
        card_border=t["card_border"].replace("3px", "2px") if compact else t["card_border"],
        title_px=14 if compact else 16,
    )


def card_key(title: str) -> str:
    """'Equipment Presets' -> 'pc-card-equipment-presets'."""
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return CARD_KEY_PREFIX + (slug or "untitled")


def sidebar_css(style: SidebarStyle) -> str:
    card = f'section[data-testid="stSidebar"] [class*="st-key-{CARD_KEY_PREFIX}"]'
    return f"""
    <style>
      section[data-testid="stSidebar"] {{
        width:{style.width_px}px !important;
        min-width:{style.width_px}px !important;
        background:{style.bg} !important;
        border-right:{style.border_right} !important;
      }}
      section[data-testid="stSidebar"] * {{ color:{style.text} !important; }}
      section[data-testid="stSidebar"] > div {{ padding:{style.pad_px}px; }}
      {card} {{
        background:{style.card_bg};
        border:{style.card_border};
        border-radius:12px;
        padding:{style.pad_px}px;
        margin-bottom:{style.pad_px}px;
      }}
      {card} .pc-card-title {{
        font-size:{style.title_px}px;
        font-weight:700;
        margin:0 0 8px 0;
      }}
    </style>
    """


def apply_sidebar_shell(style: SidebarStyle) -> None:
    st.markdown(sidebar_css(style), unsafe_allow_html=True)


@contextmanager
def sidebar_card(title: str, *, icon: str | None = None):
    """Titled group in the sidebar; the title doubles as the card's key."""
    with st.sidebar.container(key=card_key(title)):
        ico = f"{e(icon)} " if icon else ""
        st.markdown(f"<div class='pc-card-title'>{ico}{e(title)}</div>", unsafe_allow_html=True)
        yield
