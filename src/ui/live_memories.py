import logging
import threading
import weakref
from typing import List, Optional, Tuple
from clients.firestore_client import MemoryStoreClient
from models.models import Memory
from utils.constants import Message
from utils.errors import MemoryMapError

logger = logging.getLogger(__name__)


class LiveMemories:
    """
    Per-session view of the memories collection.

    The Firestore listener delivers full snapshots on its own thread; the
    Streamlit script reads the last one with ``snapshot()``. Listener errors
    keep the last-known records. A watch that closes on its own is replaced
    on the next read. After ``stop()`` nothing is applied.
    """

    def __init__(self, memory_store_client: MemoryStoreClient):
        self.memory_store_client = memory_store_client
        self._lock = threading.Lock()
        self._memories: List[Memory] = []
        self._version = 0
        self._loaded = False
        self._error: Optional[str] = None
        self._stopped = False
        self._started = False
        self._subscription = None
        self._finalizer = None

    def start(self):
        with self._lock:
            if self._stopped or self._started:
                return
            self._started = True
        self._subscribe()

    def _subscribe(self):
        # Callbacks hold only a weak reference so the finalizer below can run.
        ref = weakref.ref(self)

        def on_records(memories: List[Memory]):
            live = ref()
            if live is not None:
                live._on_records(memories)

        def on_error(error: Exception):
            live = ref()
            if live is not None:
                live._on_error(error)

        subscription = self.memory_store_client.subscribe(on_records, on_error)
        with self._lock:
            stopped = self._stopped
            if not stopped:
                if self._finalizer is not None:
                    self._finalizer.detach()
                self._subscription = subscription
                # Sessions end without a hook; detach when this object is collected.
                self._finalizer = weakref.finalize(self, subscription)
        if stopped:
            subscription()

    def _ensure_listening(self):
        with self._lock:
            subscription = self._subscription
            if self._stopped or not self._started:
                return
            if subscription is not None and subscription.stream_active:
                return
            self._subscription = None
        if subscription is not None:
            self._on_error(MemoryMapError(Message.LISTENER_RECONNECTING.value))
            subscription()
        try:
            self._subscribe()
        except MemoryMapError as e:
            # Left unsubscribed; the next read tries again.
            self._on_error(e)

    def _on_records(self, memories: List[Memory]):
        with self._lock:
            if self._stopped:
                return
            self._memories = list(memories)
            self._version += 1
            self._loaded = True
            self._error = None

    def _on_error(self, error: Exception):
        with self._lock:
            if self._stopped:
                return
            self._error = str(error) or Message.LISTENER_FAILED.value
        logger.warning(f"Memory listener error: {error}")

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def error(self) -> Optional[str]:
        return self._error

    def dismiss_error(self):
        with self._lock:
            self._error = None

    def snapshot(self) -> Tuple[List[Memory], int]:
        self._ensure_listening()
        with self._lock:
            return list(self._memories), self._version

    def find(self, memory_id: Optional[str]) -> Optional[Memory]:
        if not memory_id:
            return None
        memories, _ = self.snapshot()
        return next((m for m in memories if m.id == memory_id), None)

    def stop(self):
        with self._lock:
            self._stopped = True
            finalizer = self._finalizer
        if finalizer is not None:
            finalizer()
