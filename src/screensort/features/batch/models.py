"""
Batch processing data models.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..classification.content_types import ContentType
from ..extraction.models import ExtractedMetadata


class OutcomeStatus(str, Enum):
    """Final state of one processed screenshot."""
    SUCCESS = "success"
    FLAGGED = "flagged"
    FAILED = "failed"


class RunState(str, Enum):
    """Batch run lifecycle: idle -> running -> completed | cancelled."""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Outcome(BaseModel):
    """Result record for one processed screenshot, keyed by ``item_id``."""

    item_id: str
    status: OutcomeStatus
    content_type: ContentType = ContentType.UNKNOWN
    metadata: Optional[ExtractedMetadata] = None
    message: str = ""
    external_link: Optional[str] = None
    location: Optional[str] = Field(None, description="Where the item lives after routing")
    retryable: bool = False
    corrected: bool = False
    processed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_success(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS


@dataclass(frozen=True)
class BatchItem:
    """A candidate screenshot: stable identifier plus the handle the recognizer reads."""

    item_id: str
    handle: Any
    captured_at: Optional[datetime] = None


@dataclass
class BatchRun:
    """Ephemeral state of the active run; never persisted."""

    current: int = 0
    total: int = 0
    cancelled: bool = False


@dataclass(frozen=True)
class BatchReport:
    """Summary returned by ``run_batch``."""

    state: RunState
    processed: int
    outcomes_added: int
    skipped: int
