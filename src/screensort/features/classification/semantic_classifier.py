"""
Two-tier screenshot classification.

The semantic model is asked first; its answer is accepted only when it arrives
without error and with enough confidence. Otherwise the deterministic keyword
classifier decides, which cannot fail.
"""

from typing import Optional, Sequence

from pydantic import BaseModel, Field, field_validator

from .content_types import ContentType
from .keyword_classifier import KeywordClassifier
from ..recognition.models import TextObservation, reading_order_text
from ..semantic.interfaces import StructuredModelClient
from ...core.exceptions import ScreenSortError
from ...core.logging import get_logger
from ...core.retry_utils import Attempt, attempt_async, resolve_with_fallback

logger = get_logger(__name__)

DEFAULT_ACCEPTANCE_THRESHOLD = 0.6

CLASSIFICATION_PROMPT = """Analyze this screenshot text and classify what type of content it shows.

CLASSIFICATION RULES:
- "music": Screenshots from music apps (Spotify, Apple Music, Shazam, etc.)
  showing song titles, artists, album art, playback controls, lyrics, playlists
- "movie": Screenshots from streaming apps (Netflix, Disney+, Prime Video, etc.)
  or movie review sites (IMDb, Rotten Tomatoes) showing movie/TV show information
- "book": Screenshots from book/reading apps (Kindle, Apple Books, Goodreads, etc.)
  showing book titles, authors, reviews, reading progress
- "meme": Screenshots containing meme text, captions, or from meme apps
  (Reddit, 9gag, imgflip, etc.)
- "unknown": If none of the above categories clearly apply

IMPORTANT:
- Base your classification on the TEXT content, not assumptions
- Set confidence low (below 0.5) if the content is ambiguous
- Consider app-specific UI text patterns (e.g., "Now Playing" for music)

Screenshot text:
{text}"""


class ClassificationReply(BaseModel):
    """Structured reply requested from the semantic model."""

    content_type: str = Field(..., description="The content type: music, movie, book, meme, or unknown")
    confidence: float = Field(..., description="Confidence from 0.0 to 1.0")
    reasoning: str = Field("", description="Brief reason for this classification")


class ClassificationResult(BaseModel):
    """Classification decision with a confidence always inside [0, 1]."""

    type: ContentType
    confidence: float = 0.0
    rationale: str = ""

    @field_validator('confidence', mode='before')
    @classmethod
    def clamp_confidence(cls, v):
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 0.0
        if value != value:  # NaN
            return 0.0
        return min(max(value, 0.0), 1.0)


def build_classification_prompt(text: str) -> str:
    return CLASSIFICATION_PROMPT.format(text=text)


class ContentClassifier:
    """Semantic classifier with a deterministic keyword fallback."""

    def __init__(
        self,
        model_client: StructuredModelClient,
        keyword_classifier: Optional[KeywordClassifier] = None,
        acceptance_threshold: float = DEFAULT_ACCEPTANCE_THRESHOLD,
    ):
        """
        Args:
            model_client: Semantic model collaborator
            keyword_classifier: Deterministic fallback; a default one is built if omitted
            acceptance_threshold: Minimum semantic confidence to accept without fallback
        """
        self.model_client = model_client
        self.keyword_classifier = keyword_classifier or KeywordClassifier()
        self.acceptance_threshold = acceptance_threshold

    async def classify_with_semantic_model(self, observations: Sequence[TextObservation]) -> ClassificationResult:
        """
        Ask the semantic model for a classification.

        Raises:
            SemanticServiceError or ModelUnavailableError from the model client
        """
        text = reading_order_text(observations)
        if not text.strip():
            return ClassificationResult(type=ContentType.UNKNOWN, confidence=0.0,
                                        rationale="No text detected in screenshot")

        reply = await self.model_client.generate(build_classification_prompt(text), ClassificationReply)
        result = ClassificationResult(
            type=ContentType.parse(reply.content_type),
            confidence=reply.confidence,
            rationale=reply.reasoning,
        )
        logger.debug(f"Semantic classification: {result.type.value} ({result.confidence:.2f}) - {result.rationale}")
        return result

    def classify_deterministic(self, observations: Sequence[TextObservation]) -> ClassificationResult:
        details = self.keyword_classifier.classify_with_details(observations)
        return ClassificationResult(
            type=details.content_type,
            confidence=1.0 if details.is_confident else 0.5,
            rationale=f"{details.best_score} keyword match(es)",
        )

    async def classify_with_fallback(self, observations: Sequence[TextObservation]) -> ClassificationResult:
        """
        Classify, falling back to keywords on any semantic failure or low confidence.

        Never raises for semantic failures.
        """
        primary: Attempt[ClassificationResult] = await attempt_async(
            self.classify_with_semantic_model, observations,
            strategy="semantic", capture=(ScreenSortError,),
        )
        if not primary.ok:
            logger.warning(f"Semantic classification failed: {primary.error}")

        resolved = resolve_with_fallback(
            primary,
            self._should_fall_back,
            lambda: Attempt.succeeded(self.classify_deterministic(observations), "keyword"),
        )
        return resolved.unwrap()

    def _should_fall_back(self, attempt: Attempt[ClassificationResult]) -> bool:
        if not attempt.ok:
            return True
        return attempt.value.confidence < self.acceptance_threshold
