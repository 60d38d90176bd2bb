"""
Extraction data models and per-type configuration.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from ..classification.content_types import ContentType

COMMON_PLACEHOLDER_PATTERNS: Tuple[str, ...] = (
    "extracted",
    "unknown",
    "n/a",
    "none",
    "null",
    "undefined",
    "placeholder",
    "not found",
    "unable to",
    "cannot",
)

TYPE_PLACEHOLDER_PATTERNS: Dict[ContentType, Tuple[str, ...]] = {
    ContentType.MUSIC: ("song title", "artist name"),
    ContentType.MOVIE: ("movie title", "title here"),
    ContentType.BOOK: ("book title", "author name", "title here"),
}


class ExtractedMetadata(BaseModel):
    """Structured title/creator metadata extracted from one screenshot."""

    content_type: ContentType
    title: str
    creator: str = ""
    auxiliary_fields: Dict[str, Any] = Field(default_factory=dict)
    confidence_score: float = 0.0
    raw_text: List[str] = Field(default_factory=list)

    @field_validator('title', 'creator')
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip()

    @field_validator('confidence_score')
    @classmethod
    def clamp_score(cls, v: float) -> float:
        return min(max(float(v), 0.0), 1.0)

    @property
    def search_query(self) -> str:
        """Query string handed to metadata lookup services."""
        return " ".join(part for part in (self.title, self.creator) if part)

    @property
    def display_title(self) -> str:
        if self.content_type == ContentType.MUSIC and self.creator:
            return f"{self.title} - {self.creator}"
        if self.content_type == ContentType.MOVIE and self.auxiliary_fields.get("year"):
            return f"{self.title} ({self.auxiliary_fields['year']})"
        if self.content_type == ContentType.BOOK and self.creator:
            return f"{self.title} by {self.creator}"
        return self.title


@dataclass
class ExtractionConfig:
    """Validation and gating thresholds for one content type."""

    confidence_threshold: float = 0.7
    minimum_title_length: int = 2
    minimum_creator_length: int = 2
    creator_required: bool = True
    placeholder_patterns: Tuple[str, ...] = COMMON_PLACEHOLDER_PATTERNS

    def __post_init__(self):
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError("confidence_threshold must be between 0.0 and 1.0")
        if self.minimum_title_length < 1 or self.minimum_creator_length < 1:
            raise ValueError("minimum lengths must be at least 1")
        self.placeholder_patterns = tuple(p.lower() for p in self.placeholder_patterns)

    @classmethod
    def for_type(cls, content_type: ContentType, **overrides) -> "ExtractionConfig":
        """Default configuration for a content type."""
        values: Dict[str, Any] = {
            "creator_required": content_type != ContentType.MOVIE,
            "placeholder_patterns": TYPE_PLACEHOLDER_PATTERNS.get(content_type, ()) + COMMON_PLACEHOLDER_PATTERNS,
        }
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_dict(cls, content_type: ContentType, data: Optional[Dict[str, Any]]) -> "ExtractionConfig":
        known = {k: v for k, v in (data or {}).items() if k in cls.__dataclass_fields__}
        if "placeholder_patterns" in known:
            known["placeholder_patterns"] = tuple(known["placeholder_patterns"])
        return cls.for_type(content_type, **known)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "confidence_threshold": self.confidence_threshold,
            "minimum_title_length": self.minimum_title_length,
            "minimum_creator_length": self.minimum_creator_length,
            "creator_required": self.creator_required,
            "placeholder_patterns": list(self.placeholder_patterns),
        }


# Structured replies requested from the semantic model

class MusicReply(BaseModel):
    song_title: str = Field(..., description="The song title without any UI elements, timestamps, or extra text")
    artist: str = Field(..., description="The artist or band name")
    confidence: float = Field(..., description="Confidence from 0.0 to 1.0 that this is correct music metadata")


class MovieReply(BaseModel):
    title: str = Field(..., description="The movie or TV show title without any UI elements or extra text")
    year: int = Field(0, description="The year of release if visible, or 0 if not found")
    director: str = Field("", description="The director's name if visible, or empty string if not found")
    confidence: float = Field(..., description="Confidence from 0.0 to 1.0 that this is correct movie metadata")


class BookReply(BaseModel):
    title: str = Field(..., description="The book title without any UI elements or extra text")
    author: str = Field(..., description="The author's name")
    isbn: str = Field("", description="ISBN if visible, or empty string if not found")
    confidence: float = Field(..., description="Confidence from 0.0 to 1.0 that this is correct book metadata")
