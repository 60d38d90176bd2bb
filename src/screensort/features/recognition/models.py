"""
Observation data models.

A screenshot is described by the text fragments a recognizer found in it. Each
fragment carries its recognition confidence and a normalized bounding box whose
origin is the bottom-left corner of the frame, so a larger ``y`` means higher
on screen.
"""

from typing import Iterable, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BoundingBox(BaseModel):
    """Normalized rectangle, all coordinates in [0, 1]."""

    x: float = Field(0.0, ge=0.0, le=1.0)
    y: float = Field(0.0, ge=0.0, le=1.0, description="Bottom edge; bottom-left origin")
    width: float = Field(0.0, ge=0.0, le=1.0)
    height: float = Field(0.0, ge=0.0, le=1.0)

    model_config = ConfigDict(frozen=True)


class TextObservation(BaseModel):
    """One recognized text fragment."""

    text: str
    confidence: float = Field(..., description="Recognition confidence in [0, 1]")
    bounding_box: BoundingBox = Field(default_factory=BoundingBox)

    model_config = ConfigDict(frozen=True)

    @field_validator('confidence')
    @classmethod
    def clamp_confidence(cls, v):
        """Keep confidence inside [0, 1]."""
        return min(max(float(v), 0.0), 1.0)


def reading_order(observations: Iterable[TextObservation]) -> List[TextObservation]:
    """Sort observations top of screen first (descending vertical position)."""
    return sorted(observations, key=lambda o: o.bounding_box.y, reverse=True)


def reading_order_text(observations: Iterable[TextObservation]) -> str:
    """Join fragment text in on-screen reading order, one fragment per line."""
    return "\n".join(o.text for o in reading_order(observations))
