"""Screenshot content classification."""

from .content_types import ContentType
from .keyword_classifier import ClassificationConfig, KeywordClassification, KeywordClassifier
from .semantic_classifier import ClassificationReply, ClassificationResult, ContentClassifier

__all__ = [
    'ContentType',
    'ClassificationConfig',
    'KeywordClassification',
    'KeywordClassifier',
    'ClassificationReply',
    'ClassificationResult',
    'ContentClassifier',
]
