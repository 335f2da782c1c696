import logging
import time
import requests
from typing import Any, Dict, Optional
from firebase_admin import auth
from models.models import AnonymousSession
from utils.constants import TOKEN_REFRESH_MARGIN_SECONDS
from utils.errors import (
    AuthorizationError,
    ConfigurationError,
    MemoryMapError,
    TransientIOError,
)

logger = logging.getLogger(__name__)

SIGN_UP_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signUp"
REFRESH_URL = "https://securetoken.googleapis.com/v1/token"


class IdentityClient:
    """Anonymous Firebase sessions over the Identity Toolkit REST API."""

    def __init__(self, api_key: str, timeout: float = 10, session: Any = None):
        self.api_key = api_key
        self.timeout = timeout
        self.http = session or requests.Session()

    def _post(self, url: str, **kwargs) -> Dict[str, Any]:
        if not self.api_key:
            raise ConfigurationError("FIREBASE_API_KEY is not set.")
        try:
            response = self.http.post(
                url, params={"key": self.api_key}, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise TransientIOError("Could not reach the identity service.") from e
        if response.status_code in (400, 401, 403):
            raise AuthorizationError("The identity service rejected the request.")
        if not response.ok:
            raise MemoryMapError(f"Identity service error ({response.status_code}).")
        return response.json()

    def sign_in_anonymously(self) -> AnonymousSession:
        data = self._post(SIGN_UP_URL, json={"returnSecureToken": True})
        session = AnonymousSession(
            uid=data["localId"],
            id_token=data["idToken"],
            refresh_token=data["refreshToken"],
            expires_at=time.time() + float(data.get("expiresIn", 3600)),
        )
        logger.info(f"Anonymous session started for {session.uid}")
        return session

    def refresh(self, session: AnonymousSession) -> AnonymousSession:
        data = self._post(
            REFRESH_URL,
            data={"grant_type": "refresh_token", "refresh_token": session.refresh_token},
        )
        return AnonymousSession(
            uid=data.get("user_id", session.uid),
            id_token=data["id_token"],
            refresh_token=data.get("refresh_token", session.refresh_token),
            expires_at=time.time() + float(data.get("expires_in", 3600)),
        )

    def ensure_fresh(
        self, session: AnonymousSession, now: Optional[float] = None
    ) -> AnonymousSession:
        now = time.time() if now is None else now
        if session.is_expiring(now, TOKEN_REFRESH_MARGIN_SECONDS):
            return self.refresh(session)
        return session


class IdentityVerifier:
    """Server-side check of a client's ID token. Returns the verified UID."""

    def __init__(self, app: Any):
        self.app = app

    def verify(self, id_token: str) -> str:
        try:
            decoded = auth.verify_id_token(id_token, app=self.app)
        except auth.CertificateFetchError as e:
            raise TransientIOError("Could not fetch token signing certificates.") from e
        except (auth.InvalidIdTokenError, ValueError) as e:
            raise AuthorizationError(
                "Unauthorized: Invalid or missing identity token."
            ) from e
        return decoded["uid"]
