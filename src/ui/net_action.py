import logging
import time
import streamlit as st
from contextlib import contextmanager

logger = logging.getLogger(__name__)


@contextmanager
def net_action(text: str):
    """Spinner around a blocking network call."""
    started = time.monotonic()
    try:
        with st.spinner(text, show_time=True):
            yield
    finally:
        logger.debug(f"{text} took {time.monotonic() - started:.2f}s")
