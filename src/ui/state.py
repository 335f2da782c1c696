import streamlit as st
from typing import Any, MutableMapping
from utils.constants import Keys

DEFAULT_STATE = {
    Keys.SESSION.value: None,
    Keys.AUTHORIZED.value: False,
    Keys.AUTH_MESSAGE.value: None,
    Keys.AUTH_KEY_INPUT.value: "",
    Keys.TEMP_LOCATION.value: None,
    Keys.FORM_VERSION.value: 0,
    Keys.SAVING.value: False,
    Keys.PENDING_POST.value: None,
    Keys.ERROR_MESSAGE.value: None,
    Keys.ERROR_RAISED_AT.value: 0.0,
    Keys.SELECTED_MEMORY.value: None,
    Keys.IMAGE_URLS.value: None,
    Keys.IMAGE_INDEX.value: 0,
    Keys.LAST_MAP_CLICK.value: None,
    Keys.LAST_MARKER_CLICK.value: None,
    Keys.LIVE_MEMORIES.value: None,
}


def ensure_state(state: MutableMapping[str, Any] | None = None):
    """Ensure default state values exist for this browser session."""
    state = st.session_state if state is None else state
    for key, value in DEFAULT_STATE.items():
        state.setdefault(key, value)


def form_key(state: MutableMapping[str, Any], name: str) -> str:
    """Widget key that changes after each successful post, resetting the form."""
    return f"{name}_{state.get(Keys.FORM_VERSION.value, 0)}"
