from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator


class Location(BaseModel):
    lat: float = Field(ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(ge=-180, le=180, allow_inf_nan=False)


class Memory(BaseModel):
    """A story pinned to a place, as read back from the document store."""

    model_config = ConfigDict(populate_by_name=True)
    id: str
    story: str
    location: Location
    contributor_id: str = Field(default="", alias="contributorId")
    timestamp: int = 0
    image_urls: List[str] = Field(default_factory=list, alias="imageUrls")


class NewMemory(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    story: str
    location: Location
    contributor_id: str = Field(alias="contributorId")
    timestamp: int
    image_urls: List[str] = Field(default_factory=list, alias="imageUrls")

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


def _clean_story(value: str) -> str:
    story = value.strip()
    if not story:
        raise ValueError("story must not be empty")
    return story


class AuthorizeRequest(BaseModel):
    key: StrictStr


class AuthorizeResponse(BaseModel):
    authorized: bool
    message: str = ""


class SaveMemoryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    # Ignored by the server: the contributor is the verified identity.
    user_id: Optional[str] = Field(default=None, alias="userId")
    location: Location
    story: StrictStr
    image_urls: List[StrictStr] = Field(default_factory=list, alias="imageUrls")

    @field_validator("story")
    @classmethod
    def _story_not_blank(cls, value: str) -> str:
        return _clean_story(value)


class SaveMemoryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    success: bool
    message: str
    memory_id: str = Field(alias="memoryId")


class DeleteMemoryRequest(BaseModel):
    id: StrictStr

    @field_validator("id")
    @classmethod
    def _id_is_document_name(cls, value: str) -> str:
        memory_id = value.strip()
        if not memory_id:
            raise ValueError("id must not be empty")
        if "/" in memory_id:
            raise ValueError("id must not contain '/'")
        return memory_id


class DeleteMemoryResponse(BaseModel):
    success: bool
    message: str


class AnonymousSession(BaseModel):
    """Per-browser anonymous identity. Attributes contributions only."""

    uid: str
    id_token: str
    refresh_token: str
    expires_at: float

    def is_expiring(self, now: float, margin_seconds: float = 60.0) -> bool:
        return now >= self.expires_at - margin_seconds


class UploadedImage(BaseModel):
    name: str
    data: bytes
    content_type: Optional[str] = None


class PostMemoryInput(BaseModel):
    session: AnonymousSession
    location: Location
    story: str
    files: List[UploadedImage] = Field(default_factory=list)

    @field_validator("story")
    @classmethod
    def _story_not_blank(cls, value: str) -> str:
        return _clean_story(value)
