import logging
import streamlit as st
from typing import Callable, Dict, List, Optional
from clients.firestore_client import MemoryStoreClient
from clients.identity_client import IdentityClient
from clients.memory_api_client import MemoryApiClient
from config.config import Settings
from models.models import AnonymousSession, Memory
from ui.auth import render_auth_message, render_authorization_panel
from ui.image_viewer import ImageViewer
from ui.live_memories import LiveMemories
from ui.map_view import MapView, MemoryActions, build_actions, format_date, photo_label
from ui.net_action import net_action
from ui.Page import Page
from ui.posting_flow import PostingFlow, PostingStage
from ui.state import form_key
from utils.constants import ACCEPTED_IMAGE_TYPES, Keys, Label, Message
from utils.errors import MemoryMapError
from utils.image_utils import limit_images
from workflows.post_memory_workflow import PostMemoryWorkflow

logger = logging.getLogger(__name__)


class MemoryMapPage(Page):
    """Shared map of memories, with a sidebar for authorizing and posting."""

    title = Label.PAGE_TITLE.value

    def __init__(
        self,
        settings: Settings,
        identity_client: IdentityClient,
        memory_store_client: Callable[[], MemoryStoreClient],
        memory_api_client: MemoryApiClient,
        post_memory_workflow: PostMemoryWorkflow,
    ):
        self.settings = settings
        self.identity_client = identity_client
        self.memory_store_client = memory_store_client
        self.memory_api_client = memory_api_client
        self.post_memory_workflow = post_memory_workflow
        self.map_view = MapView()

    def _flow(self) -> PostingFlow:
        return PostingFlow(st.session_state, self.settings.error_dismiss_seconds)

    def _session(self, flow: PostingFlow) -> Optional[AnonymousSession]:
        """Anonymous identity for this browser session, refreshed before expiry."""
        session = st.session_state[Keys.SESSION.value]
        try:
            if session is None:
                with net_action(Message.LOADING.value):
                    session = self.identity_client.sign_in_anonymously()
            else:
                session = self.identity_client.ensure_fresh(session)
        except MemoryMapError as e:
            logger.error(f"Anonymous sign-in failed: {e}")
            flow.raise_error(Message.SIGN_IN_FAILED.value)
            return None
        st.session_state[Keys.SESSION.value] = session
        return session

    def _live(self, flow: PostingFlow) -> Optional[LiveMemories]:
        live = st.session_state[Keys.LIVE_MEMORIES.value]
        if live is not None:
            return live
        try:
            live = LiveMemories(self.memory_store_client())
            live.start()
        except MemoryMapError as e:
            logger.error(f"Could not subscribe to memories: {e}")
            flow.raise_error(f"{Message.LISTENER_FAILED.value} {e.message}")
            return None
        st.session_state[Keys.LIVE_MEMORIES.value] = live
        return live

    def _map_fragment(self, live: Optional[LiveMemories]):
        flow = self._flow()
        memories: List[Memory] = live.snapshot()[0] if live else []
        if live is not None and not live.loaded:
            st.caption(Message.LOADING.value)
        event = self.map_view.render(memories, flow.temp_location, st.session_state)
        if event is None:
            return
        if event.kind == "marker":
            st.session_state[Keys.SELECTED_MEMORY.value] = event.memory_id
        else:
            # Refused clicks still leave a message for the sidebar to show.
            flow.select_location(event.location)
        st.rerun()

    def _error_fragment(self, live: Optional[LiveMemories]):
        flow = self._flow()
        message = flow.visible_error()
        if message:
            text_col, close_col = st.columns([5, 1])
            text_col.error(message, icon=":material/error:")
            close_col.button("✕", key="dismiss_error", on_click=flow.clear_error)
        if live is not None and live.error:
            text_col, close_col = st.columns([5, 1])
            text_col.error(
                f"{Message.LISTENER_FAILED.value} {live.error}", icon=":material/wifi_off:"
            )
            close_col.button("✕", key="dismiss_listener_error", on_click=live.dismiss_error)

    def _render_post_form(self, flow: PostingFlow, session: Optional[AnonymousSession]):
        location = flow.temp_location
        if location is None:
            st.info(Message.PICK_LOCATION.value, icon=":material/touch_app:")
            return

        saving = flow.stage == PostingStage.SAVING
        max_images = self.settings.max_images_per_memory
        with st.container(border=True):
            st.subheader(":material/edit_note: Share a memory")
            st.caption(f"Location: {location.lat:.5f}, {location.lng:.5f}")
            with st.form("memory_form"):
                st.text_area(
                    Label.STORY.value + "*",
                    key=form_key(st.session_state, Keys.STORY.value),
                    disabled=saving,
                )
                st.file_uploader(
                    Label.FILE_UPLOAD.value,
                    type=ACCEPTED_IMAGE_TYPES,
                    accept_multiple_files=True,
                    key=form_key(st.session_state, Keys.FILE_UPLOAD.value),
                    help=f"Up to {max_images} photos; extra files are ignored.",
                    disabled=saving,
                )
                st.form_submit_button(
                    Label.SAVING_BUTTON.value if saving else Label.SUBMIT_BUTTON.value,
                    type="primary",
                    disabled=saving,
                    use_container_width=True,
                    on_click=self._on_submit,
                )
            st.button(
                Label.CANCEL_BUTTON.value,
                disabled=saving,
                on_click=flow.clear_location,
                use_container_width=True,
            )

        # The form above already shows the saving state while the upload runs.
        if saving:
            self._save_pending(flow, session)
            st.rerun()

    def _on_submit(self):
        """Form callback: validate the draft and hand it to the next run for saving."""
        flow = self._flow()
        state = st.session_state
        story = state.get(form_key(state, Keys.STORY.value), "")
        files = state.get(form_key(state, Keys.FILE_UPLOAD.value)) or []
        if state.get(Keys.SESSION.value) is None:
            flow.raise_error(Message.SIGN_IN_FAILED.value)
            return
        try:
            cleaned = flow.begin_save(story)
        except MemoryMapError as e:
            flow.raise_error(e.message)
            return
        state[Keys.PENDING_POST.value] = {"story": cleaned, "files": list(files)}

    def _save_pending(self, flow: PostingFlow, session: Optional[AnonymousSession]) -> bool:
        pending = st.session_state[Keys.PENDING_POST.value]
        st.session_state[Keys.PENDING_POST.value] = None
        if pending is None or session is None:
            flow.fail_save(MemoryMapError(Message.SAVE_FAILED.value))
            return False

        try:
            images = limit_images(pending["files"], self.settings.max_images_per_memory)
            with net_action(Label.SAVING_BUTTON.value):
                self.post_memory_workflow.run(
                    {
                        "session": session,
                        "location": flow.temp_location,
                        "story": pending["story"],
                        "files": images,
                    }
                )
        except Exception as e:
            flow.fail_save(e)
            return False
        flow.complete_save()
        return True

    def _view_photos(self, memory: Memory):
        ImageViewer(st.session_state).open(memory.image_urls)

    def _delete(self, memory: Memory):
        flow = self._flow()
        session = st.session_state[Keys.SESSION.value]
        if session is None:
            flow.raise_error(Message.DELETE_FAILED.value)
            return
        try:
            self.memory_api_client.delete_memory(session.id_token, memory.id)
        except MemoryMapError as e:
            logger.warning(f"Delete of memory {memory.id} failed: {e}")
            flow.fail_delete(e)
            return
        st.session_state[Keys.SELECTED_MEMORY.value] = None
        ImageViewer(st.session_state).close()

    def _close_memory(self):
        st.session_state[Keys.SELECTED_MEMORY.value] = None

    def _render_selected_memory(self, flow: PostingFlow, live: Optional[LiveMemories]):
        if live is None:
            return
        memories, _ = live.snapshot()
        memory = live.find(st.session_state[Keys.SELECTED_MEMORY.value])
        if memory is None:
            st.session_state[Keys.SELECTED_MEMORY.value] = None
            return

        actions: Dict[str, MemoryActions] = build_actions(
            memories,
            flow.is_authorized,
            on_view_photos=self._view_photos,
            on_delete=self._delete,
        )
        action = actions.get(memory.id, MemoryActions())
        with st.container(border=True):
            st.subheader(f":material/favorite: {Label.POPUP_TITLE.value}")
            st.text(memory.story)
            st.caption(f"Marked on: {format_date(memory.timestamp)}")
            if action.view_photos:
                st.button(
                    photo_label(len(memory.image_urls)),
                    key=f"view_photos_{memory.id}",
                    on_click=action.view_photos,
                    use_container_width=True,
                )
            if action.delete:
                st.button(
                    Label.DELETE_BUTTON.value,
                    key=f"delete_{memory.id}",
                    on_click=action.delete,
                    use_container_width=True,
                )
            st.button(
                Label.CLOSE_BUTTON.value,
                key=f"close_{memory.id}",
                on_click=self._close_memory,
            )

    def render(self):
        flow = self._flow()
        session = self._session(flow)
        live = self._live(flow)

        map_col, side_col = st.columns([3, 1], gap="medium")
        with side_col:
            st.header(f":material/location_on: {Label.PAGE_TITLE.value}")
            st.fragment(self._error_fragment, run_every=1)(live)
            if not flow.is_authorized:
                render_authorization_panel(
                    flow,
                    self.memory_api_client,
                    id_token=session.id_token if session else None,
                    disabled=session is None,
                )
            else:
                render_auth_message(st.session_state)
                self._render_post_form(flow, session)
            self._render_selected_memory(flow, live)
            ImageViewer(st.session_state).render()

        with map_col:
            st.fragment(self._map_fragment, run_every=self.settings.map_refresh_seconds)(live)
