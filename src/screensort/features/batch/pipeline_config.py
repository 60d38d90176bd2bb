"""
Configuration management for the screenshot sorting pipeline.
"""

from typing import Dict, Any
from dataclasses import dataclass, field
import json
import os

from ..classification.content_types import ContentType
from ..classification.keyword_classifier import ClassificationConfig
from ..extraction.models import ExtractionConfig
from ...core.logging import get_logger

logger = get_logger(__name__)


def _default_extraction_configs() -> Dict[ContentType, ExtractionConfig]:
    return {
        content_type: ExtractionConfig.for_type(content_type)
        for content_type in ContentType
        if content_type.requires_extraction
    }


@dataclass
class PipelineConfig:
    """Configuration for classification, extraction and batch processing."""

    # Classification
    semantic_acceptance_threshold: float = 0.6
    minimum_keyword_matches: int = 1
    spatial_confidence_threshold: float = 0.8
    spatial_minimum_items: int = 2

    # Batch behavior
    progress_interval_seconds: float = 0.1  # At most ~10 progress updates per second

    # Recognition
    recognition_min_confidence: float = 0.0

    # Per-type extraction thresholds
    extraction: Dict[ContentType, ExtractionConfig] = field(default_factory=_default_extraction_configs)

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_config()

    def _validate_config(self):
        """Validate the configuration parameters."""
        for name in ('semantic_acceptance_threshold', 'spatial_confidence_threshold', 'recognition_min_confidence'):
            if not 0 <= getattr(self, name) <= 1:
                raise ValueError(f"{name} must be between 0 and 1")

        if self.minimum_keyword_matches < 1:
            raise ValueError("minimum_keyword_matches must be at least 1")

        if self.spatial_minimum_items < 1:
            raise ValueError("spatial_minimum_items must be at least 1")

        if self.progress_interval_seconds < 0:
            raise ValueError("progress_interval_seconds must not be negative")

        for content_type in self.extraction:
            if not content_type.requires_extraction:
                raise ValueError(f"{content_type.value} does not support extraction settings")

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'PipelineConfig':
        """Create configuration from dictionary."""
        values = dict(config_dict)
        raw_extraction = values.pop('extraction', None) or {}
        extraction = _default_extraction_configs()
        for type_name, type_config in raw_extraction.items():
            content_type = ContentType(type_name)
            extraction[content_type] = ExtractionConfig.from_dict(content_type, type_config)
        return cls(extraction=extraction, **values)

    @classmethod
    def from_json_file(cls, filepath: str) -> 'PipelineConfig':
        """Load configuration from JSON file."""
        with open(filepath, 'r') as f:
            config_dict = json.load(f)
        return cls.from_dict(config_dict)

    @classmethod
    def from_env(cls, prefix: str = 'SCREENSORT_') -> 'PipelineConfig':
        """Load configuration from environment variables."""
        config_dict = {}

        env_mappings = {
            f'{prefix}SEMANTIC_ACCEPTANCE_THRESHOLD': ('semantic_acceptance_threshold', float),
            f'{prefix}MINIMUM_KEYWORD_MATCHES': ('minimum_keyword_matches', int),
            f'{prefix}SPATIAL_CONFIDENCE_THRESHOLD': ('spatial_confidence_threshold', float),
            f'{prefix}SPATIAL_MINIMUM_ITEMS': ('spatial_minimum_items', int),
            f'{prefix}PROGRESS_INTERVAL_SECONDS': ('progress_interval_seconds', float),
            f'{prefix}RECOGNITION_MIN_CONFIDENCE': ('recognition_min_confidence', float),
        }

        for env_var, (field_name, converter) in env_mappings.items():
            value = os.getenv(env_var)
            if value is not None:
                try:
                    config_dict[field_name] = converter(value)
                except (ValueError, TypeError) as e:
                    logger.warning(f"Invalid value for {env_var}: {value} ({e})")

        extraction = _default_extraction_configs()
        for content_type in extraction:
            value = os.getenv(f'{prefix}{content_type.name}_CONFIDENCE_THRESHOLD')
            if value is not None:
                try:
                    extraction[content_type] = ExtractionConfig.for_type(
                        content_type, confidence_threshold=float(value)
                    )
                except (ValueError, TypeError) as e:
                    logger.warning(f"Invalid {content_type.value} confidence threshold: {value} ({e})")

        return cls(extraction=extraction, **config_dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'semantic_acceptance_threshold': self.semantic_acceptance_threshold,
            'minimum_keyword_matches': self.minimum_keyword_matches,
            'spatial_confidence_threshold': self.spatial_confidence_threshold,
            'spatial_minimum_items': self.spatial_minimum_items,
            'progress_interval_seconds': self.progress_interval_seconds,
            'recognition_min_confidence': self.recognition_min_confidence,
            'extraction': {t.value: c.to_dict() for t, c in self.extraction.items()},
        }

    def save_to_json(self, filepath: str):
        """Save configuration to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def classification_config(self) -> ClassificationConfig:
        return ClassificationConfig(
            minimum_keyword_matches=self.minimum_keyword_matches,
            spatial_confidence_threshold=self.spatial_confidence_threshold,
            spatial_minimum_items=self.spatial_minimum_items,
        )

    def extraction_config(self, content_type: ContentType) -> ExtractionConfig:
        return self.extraction.get(content_type) or ExtractionConfig.for_type(content_type)
