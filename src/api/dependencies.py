"""Request-scoped identity checks shared by the write endpoints.

Every secured call is re-validated here: the bearer ID token is verified and
its UID must be on the authorized-identity allow-list. The client-held
"authorized" flag is never trusted.
"""

import hashlib
import hmac
import logging
from typing import Callable, Optional
from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Header
from clients.firestore_client import AuthorizedIdentities
from clients.identity_client import IdentityVerifier
from di.container import Container
from utils.errors import AuthorizationError, ForbiddenError

logger = logging.getLogger(__name__)


def token_fingerprint(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8", "surrogatepass")).hexdigest()[:12]


def key_matches(submitted: str, secret: str) -> bool:
    """Constant-time equality over UTF-8 bytes. Total over all strings."""
    return hmac.compare_digest(
        submitted.encode("utf-8", "surrogatepass"),
        secret.encode("utf-8", "surrogatepass"),
    )


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        return None
    return token


def presented_identity(
    authorization: Optional[str], verifier: Callable[[], IdentityVerifier]
) -> Optional[str]:
    """UID of the caller when an ID token is presented, else ``None``."""
    if authorization is None:
        return None
    token = bearer_token(authorization)
    if token is None:
        raise AuthorizationError("Unauthorized: Malformed authorization header.")
    return verifier().verify(token)


@inject
def verified_identity(
    authorization: Optional[str] = Header(default=None),
    verifier: IdentityVerifier = Depends(Provide[Container.identity_verifier]),
) -> str:
    token = bearer_token(authorization)
    if token is None:
        raise AuthorizationError("Unauthorized: Invalid or missing authorization token.")
    return verifier.verify(token)


@inject
def authorized_identity(
    uid: str = Depends(verified_identity),
    identities: AuthorizedIdentities = Depends(
        Provide[Container.authorized_identities]
    ),
) -> str:
    if not identities.is_authorized(uid):
        logger.info(f"Identity {uid} is not on the allow-list")
        raise ForbiddenError("User is not authorized to change memories.")
    return uid
