"""
Two-tier metadata extraction for one content type.

Pipeline per call:
    gate (classification must match) -> prepare reading-order text ->
    semantic extraction -> placeholder validation -> confidence gate.

Only a ``SafetyRefusalError`` from the semantic model switches to the
deterministic fallback; every other error propagates unchanged.
"""

from typing import Optional, Sequence

from .fallback_extractor import FallbackExtractor
from .models import ExtractedMetadata, ExtractionConfig
from .profiles import ExtractionProfile, profile_for
from .validator import validate_extraction
from ..classification.content_types import ContentType
from ..classification.keyword_classifier import KeywordClassifier
from ..recognition.models import TextObservation, reading_order_text
from ..semantic.interfaces import StructuredModelClient
from ...core.exceptions import ConfidenceTooLowError, SafetyRefusalError, TitleNotFoundError, WrongContentTypeError
from ...core.logging import get_logger
from ...core.retry_utils import Attempt, attempt_async, attempt_sync, resolve_with_fallback

logger = get_logger(__name__)


class ContentExtractor:
    """Extracts validated title/creator metadata for a single content type."""

    def __init__(
        self,
        content_type: ContentType,
        model_client: StructuredModelClient,
        keyword_classifier: Optional[KeywordClassifier] = None,
        config: Optional[ExtractionConfig] = None,
        profile: Optional[ExtractionProfile] = None,
    ):
        """
        Args:
            content_type: music, movie or book
            model_client: Semantic extraction collaborator
            keyword_classifier: Used for the type gate when no classification is supplied
            config: Thresholds; defaults to ``ExtractionConfig.for_type(content_type)``
            profile: Prompt and reply shape; defaults to the built-in profile for the type
        """
        if not content_type.requires_extraction:
            raise ValueError(f"{content_type.value} screenshots do not carry extractable metadata")
        self.content_type = content_type
        self.model_client = model_client
        self.keyword_classifier = keyword_classifier or KeywordClassifier()
        self.config = config or ExtractionConfig.for_type(content_type)
        self.profile = profile or profile_for(content_type)
        self.fallback = FallbackExtractor(self.profile)

    async def extract(
        self,
        observations: Sequence[TextObservation],
        assumed_type: Optional[ContentType] = None,
        classification: Optional[ContentType] = None,
    ) -> ExtractedMetadata:
        """
        Extract metadata from recognized screenshot text.

        Args:
            observations: Recognized text fragments
            assumed_type: Type the caller expects; defaults to this extractor's type
            classification: Pre-computed classification; the keyword classifier runs when omitted

        Returns:
            Validated metadata above the confidence threshold

        Raises:
            WrongContentTypeError, TitleNotFoundError, CreatorNotFoundError,
            InvalidExtractionResultError, ConfidenceTooLowError, ModelUnavailableError,
            SemanticServiceFailure
        """
        self._check_type(observations, assumed_type or self.content_type, classification)

        text = reading_order_text(observations)
        if not text.strip():
            raise TitleNotFoundError(self.content_type.display_name.lower())

        primary: Attempt[ExtractedMetadata] = await attempt_async(
            self.extract_with_model, observations, text,
            strategy="semantic", capture=(SafetyRefusalError,),
        )
        resolved = resolve_with_fallback(
            primary,
            lambda attempt: isinstance(attempt.error, SafetyRefusalError),
            lambda: attempt_sync(self.fallback.extract, observations, strategy="deterministic",
                                 capture=(TitleNotFoundError,)),
        )
        metadata = resolved.unwrap()

        if metadata.confidence_score < self.config.confidence_threshold:
            raise ConfidenceTooLowError(metadata.confidence_score, self.config.confidence_threshold)

        logger.info(
            f"Extracted {self.content_type.value} via {resolved.strategy}: "
            f"{metadata.display_title} ({metadata.confidence_score:.2f})"
        )
        return metadata

    async def extract_with_model(self, observations: Sequence[TextObservation], text: str) -> ExtractedMetadata:
        """Primary strategy: semantic extraction followed by placeholder validation."""
        reply = await self.model_client.generate(self.profile.build_prompt(text), self.profile.reply_model)
        fields = self.profile.read_reply(reply)

        validate_extraction(
            fields.title, fields.creator, fields.confidence, self.config,
            content_label=self.content_type.display_name.lower(),
            creator_label=self.profile.creator_label,
        )

        return ExtractedMetadata(
            content_type=self.content_type,
            title=fields.title,
            creator=fields.creator,
            auxiliary_fields=fields.auxiliary_fields,
            confidence_score=fields.confidence,
            raw_text=[o.text for o in observations],
        )

    def _check_type(
        self,
        observations: Sequence[TextObservation],
        assumed_type: ContentType,
        classification: Optional[ContentType],
    ) -> None:
        if assumed_type != self.content_type:
            raise WrongContentTypeError(self.content_type.value, assumed_type.value)

        detected = classification if classification is not None else self.keyword_classifier.classify(observations)
        if detected == self.content_type:
            return
        if self.content_type == ContentType.MUSIC and self.keyword_classifier.has_spatial_music_pattern(observations):
            logger.debug("Music layout detected despite classification; continuing")
            return
        raise WrongContentTypeError(self.content_type.value, detected.value)


def build_extractors(model_client: StructuredModelClient, keyword_classifier: Optional[KeywordClassifier] = None,
                     configs: Optional[dict] = None):
    """One extractor per content type that requires extraction."""
    configs = configs or {}
    return {
        content_type: ContentExtractor(
            content_type, model_client, keyword_classifier, config=configs.get(content_type)
        )
        for content_type in ContentType
        if content_type.requires_extraction
    }
