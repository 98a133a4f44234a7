# Role: Streamlit chat UI for the Rezervo concierge.
# - Backend is authoritative; this page only renders SessionController state and forwards clicks/text.
# - Landing hero before the first message (when auto-greet is off), chat afterwards.

from __future__ import annotations

import streamlit as st

import rezervo.config
rezervo.config.load_env()

from rezervo.api.chat_client import ChatClient
from rezervo.config import CHAT_ANON_KEY_ENV, CHAT_URL_ENV, ChatConfig
from rezervo.core.session_controller import SessionController
from rezervo.core.store import QueryParamsSessionStore
from rezervo.models.message import Message
from rezervo.models.session import Theme
from rezervo.utils.formatting import is_success_message, message_lines
from rezervo.utils.logging import setup_logging

TAGLINE = "Your personal concierge for restaurant bookings in Madrid"
COMPOSER_PLACEHOLDER = "Type here… e.g. 2025-09-05 dinner 4 Salamanca Italian €€"

_TOAST_ICONS = {"error": "⚠️", "info": "ℹ️", "success": "✅"}


# ----------------------------
# Session helpers
# ----------------------------
def ensure_controller() -> SessionController:
    if "controller" not in st.session_state:
        config = ChatConfig.from_env()
        setup_logging("DEBUG" if rezervo.config.DEBUG else "INFO", secrets=[config.anon_key])
        # Key line: persisted slots ride in the page URL, so they outlive a reload of this tab.
        store = QueryParamsSessionStore(st.query_params)
        st.session_state["controller"] = SessionController(
            ChatClient(config),
            store,
            auto_greet=config.auto_greet,
            system_prefers_light=lambda: config.theme_preference == "light",
        )
    return st.session_state["controller"]


# ----------------------------
# UI polish
# ----------------------------
def inject_css(theme: Theme) -> None:
    if theme is Theme.LIGHT:
        bg, fg, bubble, border = "#ffffff", "#1f2330", "rgba(49, 51, 63, 0.04)", "rgba(49, 51, 63, 0.14)"
    else:
        bg, fg, bubble, border = "#0f1117", "#e8e9ee", "rgba(255, 255, 255, 0.04)", "rgba(255, 255, 255, 0.14)"

    st.markdown(
        f"""
<style>
.stApp {{ background: {bg}; color: {fg}; }}
.block-container {{ max-width: 900px; padding-top: 2rem; padding-bottom: 2rem; }}

/* Chips */
.stButton>button {{
  border-radius: 999px !important;
  padding: 0.35rem 0.85rem !important;
  font-weight: 600 !important;
}}

/* Config panel */
.rz-card {{
  border: 1px solid {border};
  border-radius: 16px;
  padding: 14px;
  background: {bubble};
}}
.rz-success {{ border-left: 3px solid #2eb872; padding-left: 10px; }}
.rz-muted {{ opacity: 0.7; font-size: 0.85rem; }}
</style>
""",
        unsafe_allow_html=True,
    )


def render_toast(controller: SessionController) -> None:
    toast = controller.current_toast()
    if toast is None:
        return
    st.toast(toast.message, icon=_TOAST_ICONS.get(toast.type))
    # Key line: st.toast has its own lifetime; hand it over once.
    controller.dismiss_toast()


def render_header(controller: SessionController) -> None:
    col1, col2 = st.columns([5, 1])
    with col1:
        st.markdown("### Rezervo")
        st.caption(TAGLINE)
    with col2:
        label = "Dark mode" if controller.session.theme is Theme.LIGHT else "Light mode"
        st.button(label, key="theme-toggle", on_click=controller.toggle_theme, help="Toggle light/dark theme")


# ----------------------------
# Configuration panel
# ----------------------------
def render_config_needed(controller: SessionController) -> None:
    st.markdown(
        f"""
<div class="rz-card">
<strong>Configuration needed</strong>
<div style="margin-top: 8px">{controller.startup_error}</div>
<div style="margin-top: 8px">Required:
<ul>
<li><code>{CHAT_URL_ENV}</code> = your chat endpoint URL</li>
<li><code>{CHAT_ANON_KEY_ENV}</code> = your bearer key</li>
</ul>
</div>
</div>
""",
        unsafe_allow_html=True,
    )


# ----------------------------
# Landing
# ----------------------------
def render_landing(controller: SessionController) -> None:
    st.markdown("## Rezervo")
    st.caption(TAGLINE)
    with st.form("hero", clear_on_submit=True):
        hero_text = st.text_input("Start conversation", placeholder="Say hello to begin…")
        if st.form_submit_button("Start"):
            controller.start_with_text(hero_text)
            st.rerun()
    label = "Dark" if controller.session.theme is Theme.LIGHT else "Light"
    st.button(label, key="theme-toggle-hero", on_click=controller.toggle_theme)


# ----------------------------
# Chat
# ----------------------------
def render_message(controller: SessionController, message: Message, index: int) -> None:
    with st.chat_message(message.role):
        body = "  \n".join(message_lines(message))
        if message.role == "assistant" and is_success_message(message):
            st.success(body)
        else:
            st.markdown(body)

        if not message.suggestions:
            return

        cols = st.columns(min(len(message.suggestions), 4))
        for idx, suggestion in enumerate(message.suggestions):
            selected = controller.is_selected(suggestion)
            with cols[idx % len(cols)]:
                st.button(
                    suggestion.title,
                    key=f"chip-{index}-{idx}",
                    on_click=controller.handle_chip_click,
                    args=(suggestion,),
                    disabled=controller.sending,
                    type="primary" if selected else "secondary",
                    help=suggestion.title,
                )


def render_chat(controller: SessionController) -> None:
    for index, message in enumerate(controller.transcript):
        render_message(controller, message, index)

    user_input = st.chat_input(COMPOSER_PLACEHOLDER, disabled=controller.sending)
    if not user_input:
        return

    with st.spinner("Typing…"):
        controller.submit_text(user_input)
    st.rerun()


def render_footer(controller: SessionController) -> None:
    st.divider()
    col1, col2 = st.columns([4, 1])
    with col1:
        st.markdown('<div class="rz-muted">MVP demo • Booking emails go to the sandbox inbox</div>', unsafe_allow_html=True)
    with col2:
        st.button("Reset conversation", key="reset", on_click=controller.reset)


# ----------------------------
# Main
# ----------------------------
def main() -> None:
    st.set_page_config(page_title="Rezervo", page_icon="🍽️", layout="centered")

    controller = ensure_controller()
    inject_css(controller.session.theme)
    render_toast(controller)

    if controller.startup_error:
        render_config_needed(controller)
    elif controller.show_landing:
        render_landing(controller)
    else:
        with st.spinner("Typing…"):
            controller.bootstrap()
        render_header(controller)
        render_chat(controller)
        render_toast(controller)

    render_footer(controller)


if __name__ == "__main__":
    main()
