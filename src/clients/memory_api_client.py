import logging
import requests
from typing import Any, Dict, List, Optional
from models.models import AuthorizeResponse, Location
from utils.errors import (
    AuthorizationError,
    ForbiddenError,
    MemoryMapError,
    TransientIOError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _json_body(response: Any) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


class MemoryApiClient:
    """Client for the key-check and write endpoints."""

    def __init__(self, base_url: str, timeout: float = 10, session: Any = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    def _post(
        self, path: str, payload: Dict[str, Any], id_token: Optional[str] = None
    ) -> Dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if id_token:
            headers["Authorization"] = f"Bearer {id_token}"
        try:
            response = self.http.post(
                f"{self.base_url}{path}",
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"POST {path} failed: {e}")
            raise TransientIOError("Could not reach the memory service.") from e

        body = _json_body(response)
        message = body.get("message") or f"Request failed ({response.status_code})."
        if response.status_code == 401:
            raise AuthorizationError(message)
        if response.status_code == 403:
            raise ForbiddenError(message)
        if response.status_code == 400:
            raise ValidationError(message)
        if not response.ok:
            logger.error(f"POST {path} returned {response.status_code}: {message}")
            raise MemoryMapError(message)
        return body

    def check_key(self, key: str, id_token: Optional[str] = None) -> AuthorizeResponse:
        body = self._post("/authorize", {"key": key}, id_token=id_token)
        return AuthorizeResponse.model_validate(body)

    def save_memory(
        self, id_token: str, location: Location, story: str, image_urls: List[str]
    ) -> str:
        body = self._post(
            "/save-memory",
            {
                "location": location.model_dump(),
                "story": story,
                "imageUrls": image_urls,
            },
            id_token=id_token,
        )
        return body.get("memoryId", "")

    def delete_memory(self, id_token: str, memory_id: str):
        self._post("/delete-memory", {"id": memory_id}, id_token=id_token)
