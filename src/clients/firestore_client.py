import json
import logging
import threading
from typing import Any, Callable, Dict, Iterator, List, Optional
import firebase_admin
from firebase_admin import credentials, firestore
from pydantic import ValidationError as PydanticValidationError
from config.config import Settings
from models.models import Memory, NewMemory
from utils.constants import (
    MUTABLE_MEMORY_FIELDS,
    authorized_users_collection_path,
    memories_collection_path,
)
from utils.errors import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)

OnRecords = Callable[[List[Memory]], None]
OnError = Callable[[Exception], None]


def init_firebase_app(settings: Settings) -> Iterator[firebase_admin.App]:
    """Container resource: one firebase-admin app per process, deleted on shutdown."""
    if not settings.firebase_service_account_key:
        raise ConfigurationError("FIREBASE_SERVICE_ACCOUNT_KEY is not set.")
    try:
        service_account = json.loads(settings.firebase_service_account_key)
    except json.JSONDecodeError as e:
        raise ConfigurationError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON.") from e

    app = firebase_admin.initialize_app(
        credentials.Certificate(service_account),
        {"projectId": service_account.get("project_id")},
        name=settings.app_id,
    )
    logger.info(f"Firebase app initialized for project {service_account.get('project_id')}")
    try:
        yield app
    finally:
        firebase_admin.delete_app(app)
        logger.info("Firebase app deleted")


def sort_memories(memories: List[Memory]) -> List[Memory]:
    """Newest first; equal timestamps ordered by id."""
    return sorted(memories, key=lambda m: (-m.timestamp, m.id))


def memory_from_document(doc: Any) -> Optional[Memory]:
    data = doc.to_dict() or {}
    try:
        return Memory.model_validate({**data, "id": doc.id})
    except PydanticValidationError as e:
        logger.warning(f"Skipping incomplete memory document {doc.id}: {e.error_count()} errors")
        return None


class Subscription:
    """Handle returned by ``subscribe``. Calling it detaches the listener; repeat calls are no-ops."""

    def __init__(self):
        self._lock = threading.Lock()
        self._active = True
        self._watch: Any = None

    @property
    def active(self) -> bool:
        return self._active

    @property
    def stream_active(self) -> bool:
        """False once the underlying watch has closed on its own, e.g. after a fatal stream error."""
        watch = self._watch
        return watch is None or bool(watch.is_active)

    def attach(self, watch: Any):
        with self._lock:
            if self._active:
                self._watch = watch
                return
        watch.unsubscribe()

    def __call__(self):
        with self._lock:
            if not self._active:
                return
            self._active = False
            watch, self._watch = self._watch, None
        if watch is not None:
            watch.unsubscribe()
            logger.info("Memory listener detached")


class MemoryStoreClient:
    """Memories collection: live subscription, create, image back-fill and delete."""

    def __init__(self, db: Any, app_id: str):
        self.db = db
        self.app_id = app_id
        self.collection_path = memories_collection_path(app_id)

    def _collection(self):
        return self.db.collection(self.collection_path)

    def subscribe(self, on_records: OnRecords, on_error: OnError) -> Subscription:
        subscription = Subscription()

        def _on_snapshot(docs, changes, read_time):
            if not subscription.active:
                return
            try:
                memories = [m for m in (memory_from_document(d) for d in docs) if m]
                memories = sort_memories(memories)
            except Exception as e:
                logger.exception("Failed to process memory snapshot")
                on_error(e)
                return
            if subscription.active:
                on_records(memories)

        subscription.attach(self._collection().on_snapshot(_on_snapshot))
        logger.info(f"Listening to {self.collection_path}")
        return subscription

    def create(self, new_memory: NewMemory) -> str:
        _, doc_ref = self._collection().add(new_memory.to_document())
        logger.info(f"Memory {doc_ref.id} created by {new_memory.contributor_id}")
        return doc_ref.id

    def update_fields(self, memory_id: str, partial: Dict[str, Any]):
        """Back-fill mutable fields. Story and location never change after creation."""
        illegal = set(partial) - MUTABLE_MEMORY_FIELDS
        if illegal:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(illegal))}")
        self._collection().document(memory_id).update(partial)

    def delete(self, memory_id: str):
        # Firestore treats deleting a missing document as success.
        self._collection().document(memory_id).delete()
        logger.info(f"Memory {memory_id} deleted")


class AuthorizedIdentities:
    """Allow-list of identities that have presented the authorization key."""

    def __init__(self, db: Any, app_id: str):
        self.db = db
        self.collection_path = authorized_users_collection_path(app_id)

    def _document(self, uid: str):
        return self.db.collection(self.collection_path).document(uid)

    def authorize(self, uid: str):
        self._document(uid).set(
            {"authorized": True, "timestamp": firestore.SERVER_TIMESTAMP}
        )
        logger.info(f"Identity {uid} authorized and recorded")

    def is_authorized(self, uid: str) -> bool:
        snapshot = self._document(uid).get()
        if not snapshot.exists:
            return False
        return bool((snapshot.to_dict() or {}).get("authorized"))
