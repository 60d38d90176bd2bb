"""Text recognition: observation models and recognizer adapters."""

from .models import BoundingBox, TextObservation, reading_order, reading_order_text
from .interfaces import TextRecognizer

__all__ = [
    'BoundingBox',
    'TextObservation',
    'TextRecognizer',
    'reading_order',
    'reading_order_text',
]
