"""
Google Gemini provider using the google-genai SDK.

Blocked prompts and candidates stopped for safety reasons are reported through
typed fields (``prompt_feedback.block_reason`` and ``finish_reason``), which
map to SafetyRefusalError.
"""

from typing import Any, Optional, Type

import httpx
from google import genai
from google.genai import errors, types

from .interfaces import M, StructuredModelClient
from ...core.exceptions import ModelUnavailableError, SafetyRefusalError, SemanticServiceFailure
from ...core.logging import get_logger

logger = get_logger(__name__)

_SAFETY_FINISH_REASONS = {
    types.FinishReason.SAFETY,
    types.FinishReason.BLOCKLIST,
    types.FinishReason.PROHIBITED_CONTENT,
    types.FinishReason.SPII,
}


class GeminiModelClient(StructuredModelClient):
    """Asks a Gemini model for JSON constrained by the response model's schema."""

    name = "gemini"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, client: Any = None):
        from ...core.settings import backend_settings

        self.api_key = api_key if api_key is not None else backend_settings.get_gemini_api_key()
        self.model = model or backend_settings.get_gemini_model()
        self._client = client

    def _get_client(self):
        if self._client is None:
            if not self.api_key:
                raise ModelUnavailableError(self.name)
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def generate(self, prompt: str, response_model: Type[M]) -> M:
        client = self._get_client()
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=response_model,
                    temperature=0.2,
                ),
            )
        except errors.ClientError as e:
            if e.code in (401, 403):
                raise ModelUnavailableError(self.name)
            raise SemanticServiceFailure(f"Gemini rejected the request (status: {e.code})", self.name)
        except errors.APIError as e:
            raise SemanticServiceFailure(f"Gemini request failed: {e}", self.name)
        except httpx.TimeoutException:
            raise SemanticServiceFailure("Gemini request timed out", self.name)
        except httpx.TransportError as e:
            # The SDK lets connection errors through unwrapped
            raise SemanticServiceFailure(f"Could not reach Gemini: {e}", self.name)

        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and feedback.block_reason:
            logger.info(f"Gemini blocked the prompt: {feedback.block_reason}")
            raise SafetyRefusalError("Gemini blocked the input", self.name)

        candidates = response.candidates or []
        if candidates and candidates[0].finish_reason in _SAFETY_FINISH_REASONS:
            raise SafetyRefusalError("Gemini stopped the reply for safety reasons", self.name)

        if isinstance(response.parsed, response_model):
            return response.parsed
        return self.parse_reply(response.text or "", response_model)
