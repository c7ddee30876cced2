"""
Community collection models for the Metaphor backend.

The whole community gallery lives in one JSON document in a GitHub
repository. Entries are kept newest first.
"""
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

MAX_SVG_LENGTH = 100_000
MAX_TITLE_LENGTH = 100
MAX_PROMPT_LENGTH = 500
MAX_AUTHOR_LENGTH = 50
DEFAULT_AUTHOR = "anonymous"


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2025-01-01T12:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def looks_like_svg(svg: str) -> bool:
    return "<svg" in svg and "</svg>" in svg


class CommunityVotes(BaseModel):
    up: int = 0
    down: int = 0


class CommunityEntry(BaseModel):
    """
    One persisted community metaphor.
    """
    id: str
    title: str = ""
    title_en: str = Field(default="", alias="titleEn")
    description: str = ""
    insight: str = ""
    prompt: str = ""
    svg: str
    author: str = DEFAULT_AUTHOR
    votes: CommunityVotes = Field(default_factory=CommunityVotes)
    created_at: str = Field(default_factory=utc_timestamp, alias="createdAt")
    source: str = "community"

    class Config:
        populate_by_name = True
        # Unknown keys written by other tools survive a rewrite
        extra = "allow"


class CommunityDocument(BaseModel):
    version: int = 1
    updated_at: str = Field(default_factory=utc_timestamp, alias="updatedAt")
    metaphors: List[CommunityEntry] = Field(default_factory=list)

    class Config:
        populate_by_name = True
        extra = "allow"


class RemoteDocumentHandle(BaseModel):
    """
    A community document paired with the blob sha it was read at.

    ``version_token`` is None when the document does not exist yet, in which
    case the next write creates it.
    """
    document: CommunityDocument
    version_token: Optional[str] = None

    class Config:
        frozen = True

    @property
    def exists(self) -> bool:
        return self.version_token is not None


class SaveCommunityRequest(BaseModel):
    """
    Body of POST /save-community.
    """
    svg: str = Field(..., min_length=1, max_length=MAX_SVG_LENGTH)
    title: str = Field(..., min_length=1)
    title_en: str = Field(..., min_length=1, alias="titleEn")
    prompt: str = Field(..., min_length=1)
    author: Optional[str] = Field(default=DEFAULT_AUTHOR)

    class Config:
        populate_by_name = True

    @field_validator("svg")
    @classmethod
    def validate_svg(cls, value: str) -> str:
        if not looks_like_svg(value):
            raise ValueError("Invalid SVG format")
        return value

    @field_validator("author")
    @classmethod
    def default_author(cls, value: Optional[str]) -> str:
        if value is None or not value.strip():
            return DEFAULT_AUTHOR
        return value


class SaveCommunityResponse(BaseModel):
    success: bool = True
    id: str
    message: str = "Metaphor saved to community gallery"
