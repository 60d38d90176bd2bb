"""
Deterministic pattern-matching extraction.

Used when the semantic model declines a screenshot on safety grounds. Noise
(app names, control labels, timestamps) is stripped first; then a single
"Creator - Title" line is preferred, and the first substantial lines are the
last resort.
"""

import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .models import ExtractedMetadata
from .profiles import ExtractionProfile, find_isbn, find_year
from ..classification.content_types import ContentType
from ..recognition.models import TextObservation, reading_order
from ...core.exceptions import TitleNotFoundError
from ...core.logging import get_logger

logger = get_logger(__name__)

DASH_SEPARATORS = (" - ", " — ", " – ", " − ")
DASH_SPLIT_CONFIDENCE = 0.7
BY_AUTHOR_CONFIDENCE = 0.7
SUBSTANTIAL_LINES_CONFIDENCE = 0.6
SUBSTANTIAL_LENGTH = 3

# Clock times, durations, counters and battery levels
_NUMERIC_NOISE = re.compile(r"^[\d\s:.,%+\-]+$")

# (title, creator, confidence)
Candidate = Tuple[str, str, float]


class FallbackExtractor:
    """Pattern-based extractor for one content type."""

    def __init__(self, profile: ExtractionProfile):
        self.profile = profile

    def clean_lines(self, observations: Sequence[TextObservation]) -> List[str]:
        """Reading-order text lines with UI noise removed."""
        lines = []
        for observation in reading_order(observations):
            line = observation.text.strip()
            if len(line) < 2 or _NUMERIC_NOISE.match(line):
                continue
            if self._is_noise(line.lower()):
                continue
            lines.append(line)
        return lines

    def extract(self, observations: Sequence[TextObservation]) -> ExtractedMetadata:
        """
        Extract metadata without a language model.

        Raises:
            TitleNotFoundError: when too few usable lines remain
        """
        lines = self.clean_lines(observations)
        found = self._split_dash_line(lines) or self._by_author(lines) or self._substantial_lines(lines)
        if found is None:
            raise TitleNotFoundError(self.profile.content_type.display_name.lower())

        title, creator, confidence = found
        # Years and ISBNs are numeric noise to the line filter; search the full text
        all_text = [o.text for o in reading_order(observations)]
        auxiliary: Dict[str, Any] = {}
        if self.profile.content_type == ContentType.MOVIE:
            auxiliary["year"] = find_year(all_text)
        elif self.profile.content_type == ContentType.BOOK:
            auxiliary["isbn"] = find_isbn(all_text)

        logger.debug(f"Fallback extracted {self.profile.content_type.value}: '{title}' ({confidence:.2f})")
        return ExtractedMetadata(
            content_type=self.profile.content_type,
            title=title,
            creator=creator,
            auxiliary_fields=auxiliary,
            confidence_score=confidence,
            raw_text=lines,
        )

    def _is_noise(self, lowered: str) -> bool:
        for noise in self.profile.noise_patterns:
            if lowered == noise or lowered.startswith(noise + " "):
                return True
        return False

    def _split_dash_line(self, lines: List[str]) -> Optional[Candidate]:
        if self.profile.dash_order is None:
            return None
        for line in lines:
            for separator in DASH_SEPARATORS:
                parts = line.split(separator)
                if len(parts) != 2:
                    continue
                first, second = parts[0].strip(), parts[1].strip()
                if len(first) < 2 or len(second) < 2:
                    continue
                if self.profile.dash_order == "creator_first":
                    return second, first, DASH_SPLIT_CONFIDENCE
                return first, second, DASH_SPLIT_CONFIDENCE
        return None

    def _by_author(self, lines: List[str]) -> Optional[Candidate]:
        if self.profile.content_type != ContentType.BOOK:
            return None
        for index, line in enumerate(lines):
            if index > 0 and line.lower().startswith("by ") and len(line) > 4:
                return lines[index - 1], line[3:].strip(), BY_AUTHOR_CONFIDENCE
        return None

    def _substantial_lines(self, lines: List[str]) -> Optional[Candidate]:
        substantial = [line for line in lines if len(line) >= SUBSTANTIAL_LENGTH]
        if len(substantial) < self.profile.minimum_fallback_lines:
            return None
        creator = substantial[1] if self.profile.minimum_fallback_lines > 1 else ""
        return substantial[0], creator, SUBSTANTIAL_LINES_CONFIDENCE
