"""
Custom exceptions for ScreenSort.

This module defines domain-specific exceptions for the error conditions that can
occur while recognizing, classifying, extracting, looking up and persisting
screenshot results. Every exception carries a human-readable ``user_message``
and an ``is_retryable`` flag; retryability is a property of the error kind,
never of the call site.
"""

from typing import Any, Dict, Optional


class ScreenSortError(Exception):
    """Base exception for all ScreenSort errors."""

    is_retryable: bool = True
    default_user_message: str = "Something went wrong while processing this screenshot."

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message

    @property
    def user_message(self) -> str:
        """Message safe to show to a user: no provider codes, no internals."""
        return self.message or self.default_user_message


# ---------------------------------------------------------------------------
# Recognition
# ---------------------------------------------------------------------------

class RecognitionError(ScreenSortError):
    """Errors from text recognition."""
    pass


class InvalidImageError(RecognitionError):
    """Raised when the image cannot be opened or decoded."""

    is_retryable = False

    def __init__(self, item_id: Optional[str] = None):
        details = {"item_id": item_id} if item_id else {}
        super().__init__("Could not process the image.", details)


class NoTextFoundError(RecognitionError):
    """Raised when no text was detected in the image."""

    def __init__(self, item_id: Optional[str] = None):
        details = {"item_id": item_id} if item_id else {}
        super().__init__("No text was found in the image.", details)


class RecognitionFailedError(RecognitionError):
    """Raised when the recognition engine fails."""

    def __init__(self, reason: str, item_id: Optional[str] = None):
        self.reason = reason
        details = {"item_id": item_id} if item_id else {}
        super().__init__(f"Text recognition failed: {reason}", details)

    @property
    def user_message(self) -> str:
        return "Text recognition failed."


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

class ClassificationError(ScreenSortError):
    """Internal classification failure; never escapes the keyword fallback."""
    pass


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

class ExtractionError(ScreenSortError):
    """Errors related to structured metadata extraction."""
    pass


class WrongContentTypeError(ExtractionError):
    """Raised when the observations do not belong to the extractor's content type."""

    is_retryable = False

    def __init__(self, expected: str, detected: Optional[str] = None):
        self.expected = expected
        self.detected = detected
        details = {"expected": expected}
        if detected:
            details["detected"] = detected
        super().__init__(f"This does not appear to be a {expected} screenshot.", details)

    @property
    def user_message(self) -> str:
        return self.message


class TitleNotFoundError(ExtractionError):
    """Raised when no usable title could be identified."""

    def __init__(self, content_type: str = "content"):
        self.content_type = content_type
        super().__init__(f"Could not identify the {content_type} title.", {"content_type": content_type})

    @property
    def user_message(self) -> str:
        return self.message


class CreatorNotFoundError(ExtractionError):
    """Raised when no usable creator (artist, director, author) could be identified."""

    def __init__(self, creator_label: str = "creator"):
        self.creator_label = creator_label
        super().__init__(f"Could not identify the {creator_label}.", {"creator_label": creator_label})

    @property
    def user_message(self) -> str:
        return self.message


class ConfidenceTooLowError(ExtractionError):
    """Raised when the extraction confidence is below the content type's threshold."""

    def __init__(self, score: float, threshold: float):
        self.score = score
        self.threshold = threshold
        message = (
            f"Extraction confidence ({int(score * 100)}%) is below the "
            f"{int(threshold * 100)}% threshold."
        )
        super().__init__(message, {"score": score, "threshold": threshold})

    @property
    def user_message(self) -> str:
        return self.message


class ModelUnavailableError(ExtractionError):
    """Raised when the semantic model capability is absent on this host."""

    is_retryable = False

    def __init__(self, provider: Optional[str] = None):
        details = {"provider": provider} if provider else {}
        super().__init__("The language model is not available on this host.", details)

    @property
    def user_message(self) -> str:
        return self.message


class InvalidExtractionResultError(ExtractionError):
    """Raised when the model's answer looks like placeholder or malformed data."""

    def __init__(self, reason: str, field: Optional[str] = None, pattern: Optional[str] = None):
        self.reason = reason
        self.field = field
        self.pattern = pattern
        details = {}
        if field:
            details["field"] = field
        if pattern:
            details["pattern"] = pattern
        super().__init__(f"Invalid extraction result: {reason}", details)

    @property
    def user_message(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Semantic services
# ---------------------------------------------------------------------------

class SemanticServiceError(ScreenSortError):
    """Errors raised by a semantic classification/extraction provider."""

    def __init__(self, message: str, provider: Optional[str] = None):
        self.provider = provider
        details = {"provider": provider} if provider else {}
        super().__init__(message, details)

    @property
    def user_message(self) -> str:
        return "The language model could not process this screenshot."


class SafetyRefusalError(SemanticServiceError):
    """The provider declined the input on content-safety grounds."""
    pass


class SemanticServiceFailure(SemanticServiceError):
    """Any provider failure other than a safety refusal."""
    pass


# ---------------------------------------------------------------------------
# Metadata lookup and routing
# ---------------------------------------------------------------------------

class MetadataLookupError(ScreenSortError):
    """Errors from external metadata lookup services."""

    def __init__(self, message: str, service_name: str, details: Optional[Dict[str, Any]] = None):
        self.service_name = service_name
        merged = {"service_name": service_name}
        merged.update(details or {})
        super().__init__(message, merged)


class LookupNotConfiguredError(MetadataLookupError):
    """Raised when a lookup service has no credentials configured."""

    is_retryable = False

    def __init__(self, service_name: str):
        super().__init__(f"{service_name} is not configured.", service_name)


class NoResultsFoundError(MetadataLookupError):
    """Raised when the lookup returned no match."""

    def __init__(self, service_name: str, query: str):
        self.query = query
        super().__init__(f"No {service_name} results for: {query}", service_name, {"query": query})


class LookupNetworkError(MetadataLookupError):
    """Raised on connectivity problems or timeouts."""

    def __init__(self, service_name: str, reason: str):
        super().__init__(f"Network error talking to {service_name}", service_name, {"reason": reason})


class LookupResponseError(MetadataLookupError):
    """Raised when a lookup service answers with an error status."""

    def __init__(self, service_name: str, status_code: int, response_body: Optional[str] = None):
        self.status_code = status_code
        details: Dict[str, Any] = {"status_code": status_code}
        if response_body:
            details["response_body"] = response_body[:500]
        super().__init__(f"{service_name} returned an error (status: {status_code})", service_name, details)

    @property
    def user_message(self) -> str:
        return f"{self.service_name} returned an error."


class RoutingError(ScreenSortError):
    """Raised when a screenshot cannot be moved to its destination."""

    def __init__(self, reason: str, destination: Optional[str] = None):
        details = {"destination": destination} if destination else {}
        super().__init__(f"Failed to organize screenshot: {reason}", details)

    @property
    def user_message(self) -> str:
        return "Failed to organize screenshot."


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

class StorageError(ScreenSortError):
    """Errors related to persisted state."""
    pass


class StorageOperationError(StorageError):
    """Raised when a storage read/write fails."""

    def __init__(self, message: str, file_path: Optional[str] = None, operation: Optional[str] = None):
        details = {}
        if file_path:
            details["file_path"] = file_path
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class SchemaValidationError(StorageError):
    """Raised when persisted data doesn't match the expected schema."""

    is_retryable = False


# ---------------------------------------------------------------------------
# Batch processing
# ---------------------------------------------------------------------------

class BatchError(ScreenSortError):
    """Errors related to batch orchestration."""
    pass


class BatchAlreadyRunningError(BatchError):
    """Raised when a run is requested while another one is active."""

    def __init__(self):
        super().__init__("A batch run is already in progress.")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class ConfigurationError(ScreenSortError):
    """Errors related to system configuration."""

    is_retryable = False


class InvalidConfigurationError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, config_key: str, value: Any, expected: Optional[str] = None):
        message = f"Invalid configuration for {config_key}: {value}"
        details: Dict[str, Any] = {"config_key": config_key, "value": value}
        if expected:
            details["expected"] = expected
        super().__init__(message, details)
