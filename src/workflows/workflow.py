from abc import ABC, abstractmethod
from typing import Any, Dict


class Workflow(ABC):
    """A multi-step operation started from the UI and run in the script thread."""

    @abstractmethod
    def run(self, input: Dict) -> Any:
        pass
