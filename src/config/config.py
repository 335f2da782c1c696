import os
from dataclasses import dataclass
from typing import List


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


@dataclass(frozen=True)
class Settings:
    firebase_service_account_key: str
    firebase_api_key: str
    app_id: str
    post_authorization_key: str
    api_base_url: str
    api_host: str
    api_port: int
    cors_origins: List[str]
    aws_region: str
    s3_bucket: str
    s3_public_base_url: str
    max_images_per_memory: int
    error_dismiss_seconds: int
    map_refresh_seconds: int
    request_timeout_seconds: int

    def __init__(self):
        object.__setattr__(
            self,
            "firebase_service_account_key",
            os.getenv("FIREBASE_SERVICE_ACCOUNT_KEY", "").strip(),
        )
        object.__setattr__(
            self, "firebase_api_key", os.getenv("FIREBASE_API_KEY", "").strip()
        )
        object.__setattr__(
            self, "app_id", os.getenv("LOCAL_APP_ID", "memory-map-v1").strip()
        )
        # Compared byte for byte, so surrounding whitespace is significant.
        object.__setattr__(
            self, "post_authorization_key", os.getenv("POST_AUTHORIZATION_KEY", "")
        )
        object.__setattr__(
            self,
            "api_base_url",
            os.getenv("MEMORY_API_BASE_URL", "http://localhost:8080").strip().rstrip("/"),
        )
        object.__setattr__(
            self, "api_host", os.getenv("MEMORY_API_HOST", "0.0.0.0").strip()
        )
        object.__setattr__(self, "api_port", _int_env("MEMORY_API_PORT", 8080))
        object.__setattr__(
            self,
            "cors_origins",
            [
                origin.strip()
                for origin in os.getenv("CORS_ORIGINS", "http://localhost:8501").split(",")
                if origin.strip()
            ],
        )
        object.__setattr__(
            self, "aws_region", os.getenv("AWS_REGION", "eu-west-1").strip()
        )
        object.__setattr__(self, "s3_bucket", os.getenv("S3_BUCKET_NAME", "").strip())
        object.__setattr__(
            self,
            "s3_public_base_url",
            os.getenv("S3_PUBLIC_BASE_URL", "").strip().rstrip("/"),
        )
        object.__setattr__(
            self, "max_images_per_memory", _int_env("MAX_IMAGES_PER_MEMORY", 5)
        )
        object.__setattr__(
            self, "error_dismiss_seconds", _int_env("ERROR_DISMISS_SECONDS", 5)
        )
        object.__setattr__(
            self, "map_refresh_seconds", _int_env("MAP_REFRESH_SECONDS", 3)
        )
        object.__setattr__(
            self, "request_timeout_seconds", _int_env("REQUEST_TIMEOUT_SECONDS", 10)
        )
