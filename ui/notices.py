# ui/notices.py
import streamlit as st

ICONS = {"success": "✅", "error": "⚠️", "info": "ℹ️"}


def show_notices(state):
    """Flush queued notices as toasts; they survive the rerun that follows a mutation."""
    for n in state.notices.drain():
        text = f"**{n.title}**" + (f" — {n.message}" if n.message else "")
        st.toast(text, icon=ICONS.get(n.level))
