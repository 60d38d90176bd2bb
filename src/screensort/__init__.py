"""ScreenSort: classify OCR'd screenshots, extract structured metadata and sort them in batches."""

__version__ = "0.1.0"

# Import main modules for easy access
from . import core
from . import features
from . import storage

__all__ = ["core", "features", "storage"]
