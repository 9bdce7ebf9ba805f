# pondcalc/theme.py
import streamlit as st

THEMES = {
    "light": {
        "page_bg":        "#e8f1f8",
        "text":           "#0f1d2b",
        "muted_text":     "#4b6478",
        "accent":         "#1f5f8b",
        "sidebar_bg":     "#c9def0",
        "sidebar_text":   "#17466a",
        "sidebar_border": "3px solid #1f5f8b",
        "card_bg":        "#ffffff",
        "card_border":    "3px solid #1f5f8b",
        "input_bg":       "#ffffff",
        "input_border":   "#1f5f8b",
        "error":          "#b42318",
    },
    "dark": {
        "page_bg":        "#0d1b26",
        "text":           "#dbe7f0",
        "muted_text":     "#8aa3b8",
        "accent":         "#5fb0e6",
        "sidebar_bg":     "#102433",
        "sidebar_text":   "#a9cbe4",
        "sidebar_border": "3px solid #1d4660",
        "card_bg":        "#132a3a",
        "card_border":    "3px solid #5fb0e6",
        "input_bg":       "#183447",
        "input_border":   "#5fb0e6",
        "error":          "#ff8a80",
    },
}


def palette(mode: str = "light") -> dict:
    return THEMES.get(mode, THEMES["light"])


def apply_theme(mode: str = "light") -> None:
    t = palette(mode)
    st.markdown(
        f"""
        <style>
          :root {{
            --pc-page-bg: {t['page_bg']};
            --pc-text: {t['text']};
            --pc-muted-text: {t['muted_text']};
            --pc-accent: {t['accent']};
            --pc-card-bg: {t['card_bg']};
            --pc-card-border: {t['card_border']};
            --pc-error: {t['error']};
          }}

          html, body, .stApp {{
            background: var(--pc-page-bg) !important;
            color: var(--pc-text) !important;
          }}
          .stApp, .stMarkdown, p, span, label, li, small, strong,
          h1, h2, h3, h4, h5, h6 {{
            color: var(--pc-text) !important;
          }}

          /* Text inputs: no spinners, themed box */
          .stApp div[data-baseweb="input"] > div {{
            background: {t['input_bg']} !important;
            border: 2px solid {t['input_border']} !important;
          }}
          input[type=number]::-webkit-inner-spin-button,
          input[type=number]::-webkit-outer-spin-button {{ -webkit-appearance: none; margin: 0; }}
          input[type=number] {{ -moz-appearance: textfield; }}

          .pc-field-error {{ color: var(--pc-error) !important; font-size: .85rem; margin: -6px 0 8px 2px; }}
        </style>
        """,
        unsafe_allow_html=True,
    )


def hide_streamlit_chrome() -> None:
    """Hide header/menu/footer and the built-in page list."""
    st.markdown(
        """
<style>
header[data-testid="stHeader"]{display:none}
#MainMenu{visibility:hidden}
footer{visibility:hidden}
div.block-container{padding-top:1rem}
[data-testid='stSidebarNav']{display:none}
</style>
""",
        unsafe_allow_html=True,
    )
