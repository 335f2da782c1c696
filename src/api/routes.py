"""
Key-check and write endpoints for the memory map
"""
import logging
import time
from typing import Callable, Optional
from dependency_injector.wiring import Provide, Provider, inject
from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse

from api.dependencies import (
    authorized_identity,
    key_matches,
    presented_identity,
    token_fingerprint,
)
from clients.firestore_client import AuthorizedIdentities, MemoryStoreClient
from clients.identity_client import IdentityVerifier
from config.config import Settings
from di.container import Container
from models.models import (
    AuthorizeRequest,
    AuthorizeResponse,
    DeleteMemoryRequest,
    DeleteMemoryResponse,
    NewMemory,
    SaveMemoryRequest,
    SaveMemoryResponse,
)
from utils.constants import Message
from utils.errors import AuthorizationError, ConfigurationError

logger = logging.getLogger(__name__)
router = APIRouter()


def _unauthorized(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content=AuthorizeResponse(authorized=False, message=message).model_dump(),
    )


@router.post("/authorize")
@inject
def authorize(
    request: AuthorizeRequest,
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(Provide[Container.settings]),
    identities: Callable[[], AuthorizedIdentities] = Depends(
        Provider[Container.authorized_identities]
    ),
    verifier: Callable[[], IdentityVerifier] = Depends(
        Provider[Container.identity_verifier]
    ),
):
    """Check a submitted key against the server secret"""
    if not settings.post_authorization_key:
        logger.error("POST_AUTHORIZATION_KEY environment variable is not set.")
        raise ConfigurationError(
            "Server configuration error: Authorization key is missing."
        )

    if not key_matches(request.key, settings.post_authorization_key):
        logger.info(
            f"Invalid authorization key (key_len={len(request.key)}, "
            f"key_fp={token_fingerprint(request.key)})"
        )
        return _unauthorized(Message.AUTH_INVALID.value)

    # Identity is resolved only once the key matches.
    try:
        uid = presented_identity(authorization, verifier)
    except AuthorizationError as e:
        logger.info(f"Correct key with an unusable identity token: {e.message}")
        return _unauthorized(e.message)

    if uid:
        identities().authorize(uid)
    return AuthorizeResponse(authorized=True, message=Message.AUTH_SUCCESS.value).model_dump()


@router.post("/save-memory")
@inject
def save_memory(
    request: SaveMemoryRequest,
    uid: str = Depends(authorized_identity),
    memory_store: MemoryStoreClient = Depends(Provide[Container.memory_store_client]),
):
    """Create one memory on behalf of an authorized identity"""
    new_memory = NewMemory(
        story=request.story,
        location=request.location,
        contributor_id=uid,
        timestamp=int(time.time() * 1000),
        image_urls=request.image_urls,
    )
    memory_id = memory_store.create(new_memory)
    return SaveMemoryResponse(
        success=True,
        message="Memory successfully saved.",
        memory_id=memory_id,
    ).model_dump(by_alias=True)


@router.post("/delete-memory")
@inject
def delete_memory(
    request: DeleteMemoryRequest,
    uid: str = Depends(authorized_identity),
    memory_store: MemoryStoreClient = Depends(Provide[Container.memory_store_client]),
):
    """Delete a memory. Unknown ids succeed."""
    memory_store.delete(request.id)
    logger.info(f"Memory {request.id} deleted by {uid}")
    return DeleteMemoryResponse(
        success=True, message=f"Memory {request.id} successfully deleted."
    ).model_dump()


@router.get("/health")
async def health():
    return {"status": "ok", "service": "memory-map-api"}
