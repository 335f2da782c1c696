import logging
import time
from enum import Enum
from typing import Any, MutableMapping, Optional
from models.models import Location
from utils.constants import Keys, Message
from utils.errors import AuthorizationError, MemoryMapError, ValidationError

logger = logging.getLogger(__name__)


class PostingStage(Enum):
    UNAUTHORIZED = "unauthorized"
    AUTHORIZED = "authorized"
    LOCATION_SELECTED = "location_selected"
    SAVING = "saving"


class PostingFlow:
    """
    Posting state machine over a session-state mapping.

    Unauthorized -> Authorized -> LocationSelected -> Saving -> Authorized,
    or Saving -> LocationSelected on failure. An authorization failure also
    revokes the client-side flag. The flag is a UI hint only: the server
    re-checks every write.
    """

    def __init__(self, state: MutableMapping[str, Any], error_dismiss_seconds: float = 5):
        self.state = state
        self.error_dismiss_seconds = error_dismiss_seconds

    @property
    def stage(self) -> PostingStage:
        if not self.state.get(Keys.AUTHORIZED.value):
            return PostingStage.UNAUTHORIZED
        if self.state.get(Keys.SAVING.value):
            return PostingStage.SAVING
        if self.state.get(Keys.TEMP_LOCATION.value) is not None:
            return PostingStage.LOCATION_SELECTED
        return PostingStage.AUTHORIZED

    @property
    def is_authorized(self) -> bool:
        return bool(self.state.get(Keys.AUTHORIZED.value))

    @property
    def temp_location(self) -> Optional[Location]:
        return self.state.get(Keys.TEMP_LOCATION.value)

    def authorize(self, message: str = Message.AUTH_SUCCESS.value):
        self.state[Keys.AUTHORIZED.value] = True
        self.state[Keys.AUTH_MESSAGE.value] = ("success", message)

    def revoke(self, message: Optional[str] = None):
        self.state[Keys.AUTHORIZED.value] = False
        if message:
            self.state[Keys.AUTH_MESSAGE.value] = ("error", message)

    def select_location(self, location: Location) -> bool:
        """Place the transient pin. Replaces any previous one."""
        if not self.is_authorized:
            self.state[Keys.AUTH_MESSAGE.value] = (
                "info",
                Message.AUTH_REQUIRED_FOR_PIN.value,
            )
            return False
        if self.state.get(Keys.SAVING.value):
            return False
        self.state[Keys.TEMP_LOCATION.value] = location
        return True

    def clear_location(self):
        self.state[Keys.TEMP_LOCATION.value] = None

    def begin_save(self, story: str) -> str:
        if not self.is_authorized:
            raise AuthorizationError(Message.AUTH_REQUIRED_FOR_PIN.value)
        if self.temp_location is None:
            raise ValidationError(Message.PICK_LOCATION.value)
        cleaned = (story or "").strip()
        if not cleaned:
            raise ValidationError(Message.STORY_REQUIRED.value)
        self.state[Keys.SAVING.value] = True
        self.clear_error()
        return cleaned

    def complete_save(self):
        self.state[Keys.SAVING.value] = False
        self.state[Keys.TEMP_LOCATION.value] = None
        # New widget keys give the form a fresh story box and uploader.
        self.state[Keys.FORM_VERSION.value] = self.state.get(Keys.FORM_VERSION.value, 0) + 1
        self.state[Keys.AUTH_MESSAGE.value] = None

    def fail_save(self, error: Exception):
        self.state[Keys.SAVING.value] = False
        if isinstance(error, AuthorizationError):
            self.revoke()
            self.raise_error(Message.AUTH_REVOKED.value)
        elif isinstance(error, ValidationError):
            self.raise_error(error.message)
        else:
            if not isinstance(error, MemoryMapError):
                logger.error(f"Unexpected error while saving memory: {error}")
            self.raise_error(Message.SAVE_FAILED.value)

    def fail_delete(self, error: Exception):
        if isinstance(error, AuthorizationError):
            self.revoke()
            self.raise_error(Message.AUTH_REVOKED.value)
        else:
            self.raise_error(Message.DELETE_FAILED.value)

    def raise_error(self, message: str, now: Optional[float] = None):
        self.state[Keys.ERROR_MESSAGE.value] = message
        self.state[Keys.ERROR_RAISED_AT.value] = time.monotonic() if now is None else now

    def clear_error(self):
        self.state[Keys.ERROR_MESSAGE.value] = None

    def visible_error(self, now: Optional[float] = None) -> Optional[str]:
        """The current error, or ``None`` once it has auto-dismissed."""
        message = self.state.get(Keys.ERROR_MESSAGE.value)
        if not message:
            return None
        now = time.monotonic() if now is None else now
        raised_at = self.state.get(Keys.ERROR_RAISED_AT.value, now)
        if now - raised_at >= self.error_dismiss_seconds:
            self.clear_error()
            return None
        return message
