import logging
import streamlit as st
from typing import Any, MutableMapping, Optional
from clients.memory_api_client import MemoryApiClient
from ui.net_action import net_action
from ui.posting_flow import PostingFlow
from utils.constants import Keys, Label, Message
from utils.errors import AuthorizationError, MemoryMapError

logger = logging.getLogger(__name__)


def verify_key(
    flow: PostingFlow,
    api_client: MemoryApiClient,
    key: str,
    id_token: Optional[str] = None,
) -> bool:
    """Check a posting key with the backend and record the outcome on the flow."""
    if not key or not key.strip():
        flow.state[Keys.AUTH_MESSAGE.value] = ("info", Message.ENTER_KEY.value)
        return False

    try:
        result = api_client.check_key(key, id_token=id_token)
    except AuthorizationError:
        flow.revoke(Message.AUTH_INVALID.value)
        return False
    except MemoryMapError as e:
        logger.warning(f"Authorization check failed: {e}")
        flow.revoke(Message.AUTH_NETWORK.value)
        return False

    if not result.authorized:
        flow.revoke(result.message or Message.AUTH_INVALID.value)
        return False
    flow.authorize(result.message or Message.AUTH_SUCCESS.value)
    return True


def _on_verify(flow: PostingFlow, api_client: MemoryApiClient, id_token: Optional[str]):
    key = st.session_state.get(Keys.AUTH_KEY_INPUT.value, "")
    with net_action(Message.VERIFYING_KEY.value):
        authorized = verify_key(flow, api_client, key, id_token)
    if authorized:
        st.session_state[Keys.AUTH_KEY_INPUT.value] = ""


def render_auth_message(state: MutableMapping[str, Any]):
    message = state.get(Keys.AUTH_MESSAGE.value)
    if not message:
        return
    kind, text = message
    if kind == "success":
        st.success(text, icon=":material/check_circle:")
    elif kind == "error":
        st.error(text, icon=":material/error:")
    else:
        st.info(text, icon=":material/info:")


def render_authorization_panel(
    flow: PostingFlow,
    api_client: MemoryApiClient,
    id_token: Optional[str] = None,
    disabled: bool = False,
):
    """Key entry shown until this session is authorized to post."""
    with st.container(border=True):
        st.subheader(f":material/key: {Label.AUTH_HEADER.value}")
        st.caption(Label.AUTH_HELP.value)
        st.text_input(
            Label.AUTH_KEY.value,
            type="password",
            key=Keys.AUTH_KEY_INPUT.value,
            disabled=disabled,
        )
        st.button(
            Label.AUTH_BUTTON.value,
            type="primary",
            use_container_width=True,
            disabled=disabled,
            on_click=_on_verify,
            args=(flow, api_client, id_token),
        )
        render_auth_message(flow.state)
