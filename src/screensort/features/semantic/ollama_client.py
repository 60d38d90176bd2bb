"""
Ollama provider: structured generation against a local Ollama server.
"""

import asyncio
from typing import Any, Dict, Optional, Type

import requests

from .interfaces import M, StructuredModelClient, response_schema
from ...core.exceptions import ModelUnavailableError, SemanticServiceFailure
from ...core.logging import get_logger

logger = get_logger(__name__)


class OllamaModelClient(StructuredModelClient):
    """Calls ``/api/generate`` with a JSON-schema ``format`` constraint."""

    name = "ollama"

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        from ...core.settings import backend_settings

        self.base_url = (base_url or backend_settings.get_ollama_base_url()).rstrip("/")
        self.model = model or backend_settings.get_ollama_model()
        self.options = options if options is not None else {
            "temperature": backend_settings.get_ollama_temperature(),
            "num_ctx": backend_settings.get_ollama_num_ctx(),
        }
        self.timeout = timeout
        self.session = session or requests.Session()

    async def generate(self, prompt: str, response_model: Type[M]) -> M:
        request_data = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "format": response_schema(response_model),
            "options": self.options,
        }
        # requests is blocking; keep the event loop free
        body = await asyncio.to_thread(self._post, request_data)
        return self.parse_reply(body.get("response", ""), response_model)

    def _post(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/api/generate"
        try:
            response = self.session.post(url, json=request_data, timeout=self.timeout)
        except requests.exceptions.ConnectionError as e:
            logger.warning(f"Ollama is not reachable at {self.base_url}: {e}")
            raise ModelUnavailableError(self.name)
        except requests.exceptions.RequestException as e:
            raise SemanticServiceFailure(f"Ollama request failed: {e}", self.name)

        if response.status_code == 404:
            # Unknown model: the capability is not installed on this host
            raise ModelUnavailableError(self.name)
        if response.status_code >= 400:
            raise SemanticServiceFailure(
                f"Ollama returned error (status: {response.status_code})", self.name
            )

        try:
            return response.json()
        except ValueError as e:
            raise SemanticServiceFailure(f"Ollama returned invalid JSON: {e}", self.name)
