import io
import logging
import time
import uuid
import boto3
from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Optional
from botocore.client import Config
from models.models import UploadedImage
from utils.errors import ConfigurationError
from utils.s3_utils import make_memory_prefix, unique_upload_key, detect_content_type

logger = logging.getLogger(__name__)


class S3Client:
    """Photo storage for memories. Returns public URLs for uploaded files."""

    def __init__(
        self,
        bucket: str,
        app_id: str,
        region: Optional[str] = None,
        public_base_url: str = "",
        s3: Any = None,
        max_workers: int = 4,
    ):
        self.bucket = bucket
        self.app_id = app_id
        self.public_base_url = public_base_url.rstrip("/")
        self.max_workers = max_workers
        self.s3 = s3 or boto3.client(
            "s3", region_name=region, config=Config(s3={"addressing_style": "virtual"})
        )

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def upload(
        self, data: bytes, suggested_path: str, content_type: Optional[str] = None
    ) -> str:
        if not self.bucket:
            raise ConfigurationError("S3 bucket not configured.")
        extra = {"ContentType": content_type or detect_content_type(suggested_path)}
        self.s3.upload_fileobj(
            Fileobj=io.BytesIO(data),
            Bucket=self.bucket,
            Key=suggested_path,
            ExtraArgs=extra,
        )
        return self.public_url(suggested_path)

    def _upload_one(self, prefix: str, image: UploadedImage) -> Optional[str]:
        key = unique_upload_key(
            prefix,
            image.name,
            image.data,
            uploaded_at_ms=int(time.time() * 1000),
            nonce=uuid.uuid4().hex[:8],
        )
        try:
            return self.upload(image.data, key, content_type=image.content_type)
        except Exception:
            # Any failure skips this photo only.
            logger.exception(f"Skipping photo {image.name!r}: upload to {key} failed")
            return None

    def upload_files(self, owner_id: str, files: List[UploadedImage]) -> List[str]:
        """Upload a batch concurrently. Failed files are dropped, not retried."""
        if not files:
            return []
        if not self.bucket:
            raise ConfigurationError("S3 bucket not configured.")
        prefix = make_memory_prefix(self.app_id, owner_id)
        workers = max(1, min(self.max_workers, len(files)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda f: self._upload_one(prefix, f), files))
        urls = [url for url in results if url]
        if len(urls) < len(files):
            logger.warning(f"Uploaded {len(urls)} of {len(files)} photos for {owner_id}")
        return urls
