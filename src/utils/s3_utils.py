import hashlib, mimetypes
from pathlib import Path
from slugify import slugify


def make_memory_prefix(app_id: str, owner_id: str) -> str:
    app = slugify(app_id)
    owner = slugify(owner_id, lowercase=False)
    if not app:
        raise ValueError("App id cannot be empty after sanitization.")
    if not owner:
        raise ValueError("Owner id cannot be empty after sanitization.")
    return f"artifacts/{app}/memories/{owner}/"


def _hash_bytes(b: bytes, n: int = 16) -> str:
    return hashlib.sha256(b).hexdigest()[:n]


def safe_filename(name: str, data: bytes) -> str:
    p = Path(name)
    stem = slugify(p.stem) or "file"
    sig = _hash_bytes(data)
    ext = (p.suffix or "").lower()
    return f"{stem}-{sig}{ext}"


def unique_upload_key(
    prefix: str, name: str, data: bytes, uploaded_at_ms: int, nonce: str
) -> str:
    """
    Key for one upload attempt: ``<prefix><slug>-<hash>_<timestamp>-<nonce><ext>``.

    The nonce keeps two copies of the same photo in one batch apart.
    """
    filename = safe_filename(name, data)
    p = Path(filename)
    return f"{prefix.rstrip('/')}/{p.stem}_{uploaded_at_ms}-{nonce}{p.suffix}"


def detect_content_type(
    filename: str, fallback: str = "application/octet-stream"
) -> str:
    ctype, _ = mimetypes.guess_type(filename)
    return ctype or fallback
