import atexit
import streamlit as st
from di.ui_container import UIContainer
from ui.state import ensure_state
from utils.constants import Label
from utils.load_secrets import load_env_vars
from utils.logging import setup_logging
from utils.styling import load_custom_css


@st.cache_resource(show_spinner=False)
def get_container() -> UIContainer:
    """One container per server process, shared by every browser session."""
    load_env_vars()
    container = UIContainer()
    atexit.register(container.shutdown_resources)
    return container


def main():
    st.set_page_config(
        page_title=Label.PAGE_TITLE.value,
        page_icon=":round_pushpin:",
        layout="wide",
    )
    setup_logging()
    ensure_state()
    load_custom_css()
    container = get_container()
    container.memory_map_page().render()


if __name__ == "__main__":
    main()
