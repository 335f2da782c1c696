from typing import List
from streamlit.runtime.uploaded_file_manager import UploadedFile
from models.models import UploadedImage


def to_uploaded_image(file: UploadedFile) -> UploadedImage:
    file.seek(0)
    data = file.getvalue()
    mime = (getattr(file, "type", None) or "").strip() or None
    return UploadedImage(name=file.name, data=data, content_type=mime)


def limit_images(files: List[UploadedFile] | None, max_images: int) -> List[UploadedImage]:
    """Convert widget files to images, keeping only the first ``max_images``."""
    return [to_uploaded_image(f) for f in (files or [])[:max_images]]
