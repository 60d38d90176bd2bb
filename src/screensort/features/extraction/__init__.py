"""Structured metadata extraction for music, movie and book screenshots."""

from .extractor import ContentExtractor, build_extractors
from .fallback_extractor import FallbackExtractor
from .models import ExtractedMetadata, ExtractionConfig
from .profiles import ExtractionProfile, profile_for
from .validator import validate_extraction

__all__ = [
    'ContentExtractor',
    'build_extractors',
    'FallbackExtractor',
    'ExtractedMetadata',
    'ExtractionConfig',
    'ExtractionProfile',
    'profile_for',
    'validate_extraction',
]
