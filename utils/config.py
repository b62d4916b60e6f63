# utils/config.py
import logging
import os

import streamlit as st


def setting(name: str, default=None):
    """st.secrets first, then the environment, then `default`."""
    try:
        value = st.secrets.get(name)
    except Exception:
        # st.secrets raises when no secrets.toml exists
        value = None
    if value is None:
        value = os.getenv(name)
    return default if value is None else value


def int_setting(name: str, default: int) -> int:
    try:
        return int(setting(name, default))
    except (TypeError, ValueError):
        return default


def bool_setting(name: str, default: bool) -> bool:
    raw = setting(name, None)
    if raw is None:
        return default
    return str(raw).strip().lower() in ("1", "true", "yes", "on")


def configure_logging() -> None:
    level = str(setting("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
