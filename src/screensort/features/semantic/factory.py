"""
Builds the configured semantic model client.
"""

from typing import Optional

from .interfaces import StructuredModelClient, UnavailableModelClient
from ...core.exceptions import InvalidConfigurationError
from ...core.logging import get_logger

logger = get_logger(__name__)

VALID_PROVIDERS = ['ollama', 'openai', 'gemini', 'none']


def create_model_client(provider: Optional[str] = None) -> StructuredModelClient:
    """
    Create a client for the given provider, or the one selected in settings.

    Args:
        provider: ollama, openai, gemini or none

    Returns:
        A StructuredModelClient
    """
    if provider is None:
        from ...core.settings import backend_settings
        provider = backend_settings.get_semantic_provider()

    provider = (provider or "none").lower()
    if provider not in VALID_PROVIDERS:
        raise InvalidConfigurationError("semantic_provider", provider, f"one of {VALID_PROVIDERS}")

    logger.debug(f"Using semantic provider: {provider}")
    if provider == 'ollama':
        from .ollama_client import OllamaModelClient
        return OllamaModelClient()
    if provider == 'openai':
        from .openai_client import OpenAIModelClient
        return OpenAIModelClient()
    if provider == 'gemini':
        from .gemini_client import GeminiModelClient
        return GeminiModelClient()
    return UnavailableModelClient()
