"""
Generation models for the Metaphor backend.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from config.generation_options import DEFAULT_ANIMATION, DEFAULT_COMPLEXITY, DEFAULT_STYLE

MIN_TEXT_LENGTH = 3
MAX_TEXT_LENGTH = 1000


class VisualStyle(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class ComplexityLevel(str, Enum):
    MINIMAL = "minimal"
    STANDARD = "standard"
    DETAILED = "detailed"


class AnimationLevel(str, Enum):
    NONE = "none"
    SUBTLE = "subtle"
    ACTIVE = "active"


class GenerationRequest(BaseModel):
    """
    Body of POST /generate.
    """
    text: str = Field(..., min_length=MIN_TEXT_LENGTH, max_length=MAX_TEXT_LENGTH, description="Concept to visualize")
    style: VisualStyle = Field(default=VisualStyle(DEFAULT_STYLE))
    model: Optional[str] = Field(default=None, description="Override the configured default model")
    api_key: Optional[str] = Field(default=None, alias="apiKey", description="Caller credential, bypasses rate limiting")
    complexity: ComplexityLevel = Field(default=ComplexityLevel(DEFAULT_COMPLEXITY))
    animation: AnimationLevel = Field(default=AnimationLevel(DEFAULT_ANIMATION))

    class Config:
        populate_by_name = True

    @field_validator("model", "api_key")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


class MetaphorTitles(BaseModel):
    """Localized (Russian) and canonical (English) short titles."""
    title: str
    title_en: str = Field(..., alias="titleEn")

    class Config:
        populate_by_name = True
        frozen = True


class GenerationResult(BaseModel):
    """
    Outcome of one generation request. Never persisted server side.
    """
    svg: str
    model: str
    elapsed_ms: int
    titles: Optional[MetaphorTitles] = None

    class Config:
        frozen = True


class GenerateResponse(BaseModel):
    svg: str
    model: str
    elapsed: int
    title: Optional[str] = None
    title_en: Optional[str] = Field(default=None, alias="titleEn")

    class Config:
        populate_by_name = True

    @classmethod
    def from_result(cls, result: GenerationResult) -> "GenerateResponse":
        titles = result.titles
        return cls(
            svg=result.svg,
            model=result.model,
            elapsed=result.elapsed_ms,
            title=titles.title if titles else None,
            title_en=titles.title_en if titles else None,
        )
