import logging
from typing import Dict
from clients.memory_api_client import MemoryApiClient
from clients.s3_client import S3Client
from models.models import PostMemoryInput
from workflows.workflow import Workflow

logger = logging.getLogger(__name__)


class PostMemoryWorkflow(Workflow):
    """Upload photos first, then create the memory with the URLs that made it."""

    def __init__(self, blob_store: S3Client, memory_api_client: MemoryApiClient):
        self.blob_store = blob_store
        self.memory_api_client = memory_api_client

    def run(self, input: Dict) -> str:
        payload = PostMemoryInput(**input)
        image_urls = self.blob_store.upload_files(
            owner_id=payload.session.uid, files=payload.files
        )
        # Blobs uploaded before a failed create are left in place.
        memory_id = self.memory_api_client.save_memory(
            id_token=payload.session.id_token,
            location=payload.location,
            story=payload.story,
            image_urls=image_urls,
        )
        logger.info(
            f"Memory {memory_id} posted with {len(image_urls)}/{len(payload.files)} photos"
        )
        return memory_id
