"""
User corrections of processed screenshots.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from .models import Outcome, OutcomeStatus
from ..classification.content_types import ContentType
from ..extraction.models import ExtractedMetadata
from ...core.logging import get_logger
from ...storage.json_files import atomic_write_json, read_json

logger = get_logger(__name__)


class CorrectionReason(str, Enum):
    WRONG_CATEGORY = "wrong_category"
    WRONG_TITLE = "wrong_title"
    WRONG_CREATOR = "wrong_creator"
    WRONG_BOTH = "wrong_both"
    MISSED_CONTENT = "missed_content"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        return {
            CorrectionReason.WRONG_CATEGORY: "Wrong category",
            CorrectionReason.WRONG_TITLE: "Wrong title",
            CorrectionReason.WRONG_CREATOR: "Wrong artist/director/author",
            CorrectionReason.WRONG_BOTH: "Wrong title and creator",
            CorrectionReason.MISSED_CONTENT: "Missed the content",
            CorrectionReason.OTHER: "Other",
        }[self]


class Correction(BaseModel):
    """A user's fix for one screenshot's classification or metadata."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    item_id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    original_type: ContentType
    original_title: Optional[str] = None
    original_creator: Optional[str] = None

    corrected_type: ContentType
    corrected_title: Optional[str] = None
    corrected_creator: Optional[str] = None

    ocr_text_snapshot: List[str] = Field(default_factory=list)
    reason: Optional[CorrectionReason] = None

    @property
    def category_changed(self) -> bool:
        return self.original_type != self.corrected_type

    @property
    def display_title(self) -> str:
        return self.corrected_title or self.original_title or "Unknown"

    @classmethod
    def for_outcome(cls, outcome: Outcome, **corrected) -> "Correction":
        """Start a correction from an outcome's current values."""
        metadata = outcome.metadata
        return cls(
            item_id=outcome.item_id,
            original_type=outcome.content_type,
            original_title=metadata.title if metadata else None,
            original_creator=metadata.creator if metadata else None,
            ocr_text_snapshot=list(metadata.raw_text) if metadata else [],
            **corrected,
        )

    def apply_to(self, outcome: Outcome) -> Outcome:
        """Outcome as it reads after this correction."""
        metadata = None
        title = self.corrected_title or (outcome.metadata.title if outcome.metadata else None)
        if title and self.corrected_type.requires_extraction:
            previous = outcome.metadata
            metadata = ExtractedMetadata(
                content_type=self.corrected_type,
                title=title,
                creator=self.corrected_creator or (previous.creator if previous else ""),
                auxiliary_fields=dict(previous.auxiliary_fields) if previous else {},
                confidence_score=1.0,
                raw_text=list(previous.raw_text) if previous else list(self.ocr_text_snapshot),
            )
        return outcome.model_copy(update={
            "content_type": self.corrected_type,
            "metadata": metadata,
            "status": OutcomeStatus.SUCCESS,
            "message": f"Corrected by user ({self.reason.display_name if self.reason else 'no reason given'})",
            "external_link": outcome.external_link if not self.category_changed else None,
            "corrected": True,
            "retryable": False,
        })


CORRECTIONS_SCHEMA = {
    "type": "object",
    "properties": {
        "version": {"type": "integer"},
        "corrections": {"type": "array", "items": {"type": "object", "required": ["id", "item_id"]}},
    },
    "required": ["version", "corrections"],
}


class CorrectionStore:
    """JSON-backed list of corrections."""

    def __init__(self, file_path: Path):
        self.file_path = Path(file_path)

    def load(self) -> List[Correction]:
        data = read_json(self.file_path, default=None, schema=CORRECTIONS_SCHEMA)
        if not data:
            return []
        return [Correction.model_validate(raw) for raw in data["corrections"]]

    def add(self, correction: Correction) -> None:
        corrections = self.load()
        corrections.append(correction)
        atomic_write_json(
            self.file_path,
            {"version": 1, "corrections": [c.model_dump(mode="json") for c in corrections]},
            schema=CORRECTIONS_SCHEMA,
        )
        logger.info(f"Recorded correction for {correction.item_id}")

    def for_item(self, item_id: str) -> List[Correction]:
        return [c for c in self.load() if c.item_id == item_id]
