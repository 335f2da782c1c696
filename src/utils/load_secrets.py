import json
import os
import streamlit as st
from collections.abc import Mapping
from typing import Any


def _plain(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items()}
    return value


def load_env_vars():
    """
    Copy Streamlit secrets into the environment without overriding it.

    TOML tables (a pasted service account, for example) become JSON strings.
    """
    if not st.secrets.load_if_toml_exists():
        return
    for k, v in st.secrets.items():
        if isinstance(v, Mapping):
            os.environ.setdefault(k, json.dumps(_plain(v)))
        else:
            os.environ.setdefault(k, str(v))
