"""Semantic (language model) providers used for classification and extraction."""

from .interfaces import StructuredModelClient, UnavailableModelClient
from .factory import create_model_client

__all__ = [
    'StructuredModelClient',
    'UnavailableModelClient',
    'create_model_client',
]
