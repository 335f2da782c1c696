from enum import Enum

MUTABLE_MEMORY_FIELDS = {"imageUrls"}
ACCEPTED_IMAGE_TYPES = ["jpg", "jpeg", "png", "webp"]
TOKEN_REFRESH_MARGIN_SECONDS = 60


def memories_collection_path(app_id: str) -> str:
    return f"artifacts/{app_id}/public/data/memories"


def authorized_users_collection_path(app_id: str) -> str:
    return f"artifacts/{app_id}/authorizedUsers"


class Label(Enum):
    PAGE_TITLE = "Community Memory Map"
    AUTH_HEADER = "Posting Authorization"
    AUTH_HELP = "To contribute memories, you must enter a valid authorization key."
    AUTH_KEY = "Authorization Key"
    AUTH_BUTTON = "Verify Key"
    STORY = "Your memory"
    FILE_UPLOAD = "Photos (optional)"
    SUBMIT_BUTTON = "Post Memory to Map"
    SAVING_BUTTON = "Saving..."
    CANCEL_BUTTON = "Cancel"
    DELETE_BUTTON = "Delete Pin"
    CLOSE_BUTTON = "Close"
    POPUP_TITLE = "A Memory Shared"
    DATE_UNKNOWN = "Date Unknown"


class Message(Enum):
    ENTER_KEY = "Please enter the authorization key."
    VERIFYING_KEY = "Verifying key..."
    AUTH_SUCCESS = "Authorization successful."
    AUTH_INVALID = "Invalid authorization key."
    AUTH_NETWORK = "Network or API error during authorization."
    AUTH_REQUIRED_FOR_PIN = "You must be authorized to select a location for a new pin."
    PICK_LOCATION = "Click the map to choose where your memory happened."
    STORY_REQUIRED = "Please write a few words about this place."
    SAVE_FAILED = "Failed to save memory. Please try again."
    AUTH_REVOKED = "Post failed: Authorization revoked. Please re-authorize."
    DELETE_FAILED = "Failed to delete memory pin."
    SIGN_IN_FAILED = "Could not start an anonymous session. Please reload the page."
    LISTENER_FAILED = "A real-time connection error occurred."
    LISTENER_RECONNECTING = "The live connection was lost. Reconnecting..."
    LOADING = "Loading Map & Authentication..."


class Keys(Enum):
    SESSION = "session"
    AUTHORIZED = "authorized_to_post"
    AUTH_MESSAGE = "auth_message"
    AUTH_KEY_INPUT = "auth_key_input"
    TEMP_LOCATION = "temp_location"
    STORY = "draft_story"
    FILE_UPLOAD = "draft_files"
    FORM_VERSION = "form_version"
    SAVING = "is_saving"
    PENDING_POST = "pending_post"
    ERROR_MESSAGE = "error_message"
    ERROR_RAISED_AT = "error_raised_at"
    SELECTED_MEMORY = "selected_memory_id"
    IMAGE_URLS = "selected_image_urls"
    IMAGE_INDEX = "image_index"
    LAST_MAP_CLICK = "last_map_click"
    LAST_MARKER_CLICK = "last_marker_click"
    LIVE_MEMORIES = "live_memories"


class MapDefaults(Enum):
    CENTER = [20, 0]
    ZOOM = 2
    MAX_ZOOM = 19
    HEIGHT = 640
    POPUP_MAX_WIDTH = 300
    TILES = "OpenStreetMap"
