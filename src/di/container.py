from dependency_injector import containers, providers
from firebase_admin import firestore
from clients.firestore_client import (
    AuthorizedIdentities,
    MemoryStoreClient,
    init_firebase_app,
)
from clients.identity_client import IdentityClient, IdentityVerifier
from clients.memory_api_client import MemoryApiClient
from clients.s3_client import S3Client
from config.config import Settings
from workflows.post_memory_workflow import PostMemoryWorkflow


class Container(containers.DeclarativeContainer):
    """Backend services shared by the Streamlit app and the API server. Imports no UI code."""

    settings = providers.Singleton(Settings)

    # Firebase
    firebase_app = providers.Resource(init_firebase_app, settings=settings)
    firestore_db = providers.Singleton(firestore.client, app=firebase_app)
    memory_store_client = providers.Singleton(
        MemoryStoreClient, db=firestore_db, app_id=settings.provided.app_id
    )
    authorized_identities = providers.Singleton(
        AuthorizedIdentities, db=firestore_db, app_id=settings.provided.app_id
    )
    identity_verifier = providers.Singleton(IdentityVerifier, app=firebase_app)

    # Clients
    identity_client = providers.Singleton(
        IdentityClient,
        api_key=settings.provided.firebase_api_key,
        timeout=settings.provided.request_timeout_seconds,
    )
    s3_client = providers.Singleton(
        S3Client,
        bucket=settings.provided.s3_bucket,
        app_id=settings.provided.app_id,
        region=settings.provided.aws_region,
        public_base_url=settings.provided.s3_public_base_url,
    )
    memory_api_client = providers.Singleton(
        MemoryApiClient,
        base_url=settings.provided.api_base_url,
        timeout=settings.provided.request_timeout_seconds,
    )

    # Workflows
    post_memory_workflow = providers.Singleton(
        PostMemoryWorkflow,
        blob_store=s3_client,
        memory_api_client=memory_api_client,
    )

