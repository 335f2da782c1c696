from abc import ABC, abstractmethod


class Page(ABC):
    """A Streamlit page, rendered top to bottom on every script run."""

    title: str = ""

    @abstractmethod
    def render(self):
        pass
