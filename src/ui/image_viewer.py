import streamlit as st
from typing import Any, List, MutableMapping, Optional
from utils.constants import Keys, Label


class ImageViewer:
    """One-at-a-time photo viewer with wrap-around navigation."""

    def __init__(self, state: MutableMapping[str, Any]):
        self.state = state

    @property
    def urls(self) -> Optional[List[str]]:
        return self.state.get(Keys.IMAGE_URLS.value) or None

    @property
    def index(self) -> int:
        return self.state.get(Keys.IMAGE_INDEX.value, 0)

    def open(self, urls: List[str]):
        self.state[Keys.IMAGE_URLS.value] = list(urls)
        self.state[Keys.IMAGE_INDEX.value] = 0

    def close(self):
        self.state[Keys.IMAGE_URLS.value] = None
        self.state[Keys.IMAGE_INDEX.value] = 0

    def _step(self, delta: int):
        urls = self.urls
        if not urls:
            return
        self.state[Keys.IMAGE_INDEX.value] = (self.index + delta) % len(urls)

    def next(self):
        self._step(1)

    def previous(self):
        self._step(-1)

    def render(self):
        urls = self.urls
        if not urls:
            return
        total = len(urls)
        index = min(self.index, total - 1)
        with st.container(border=True):
            st.image(urls[index], caption=f"Memory photo {index + 1} of {total}")
            if total > 1:
                prev_col, count_col, next_col = st.columns([1, 1, 1])
                prev_col.button("←", key="image_prev", on_click=self.previous)
                count_col.markdown(f"**{index + 1} / {total}**")
                next_col.button("→", key="image_next", on_click=self.next)
            st.button(Label.CLOSE_BUTTON.value, key="image_close", on_click=self.close)
