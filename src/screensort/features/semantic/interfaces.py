"""
Semantic model collaborator interface.

A provider receives a natural-language instruction plus the pydantic model the
answer must conform to, and returns a validated instance of that model. Provider
failures are reported through exactly three error kinds so that callers can
decide on fallbacks by type:

* ``SafetyRefusalError``: the provider declined the input on safety grounds
* ``ModelUnavailableError``: the capability is absent on this host
* ``SemanticServiceFailure``: anything else
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ...core.exceptions import ModelUnavailableError, SemanticServiceFailure

M = TypeVar('M', bound=BaseModel)


class StructuredModelClient(ABC):
    """Language model that answers with JSON matching a schema."""

    name: str = "model"

    @abstractmethod
    async def generate(self, prompt: str, response_model: Type[M]) -> M:
        """
        Ask the model and parse its structured reply.

        Args:
            prompt: Full instruction including the screenshot text
            response_model: Pydantic model describing the expected reply

        Returns:
            Parsed reply
        """
        raise NotImplementedError

    def parse_reply(self, raw: Any, response_model: Type[M]) -> M:
        """Validate a raw JSON string or dict against the response model."""
        try:
            if isinstance(raw, (str, bytes)):
                raw = json.loads(_sanitize_json(raw if isinstance(raw, str) else raw.decode("utf-8")))
            return response_model.model_validate(raw)
        except (json.JSONDecodeError, ValueError, ValidationError) as e:
            raise SemanticServiceFailure(f"Malformed model reply: {e}", self.name)


class UnavailableModelClient(StructuredModelClient):
    """Client used when no semantic provider is configured; every call reports the capability as absent."""

    name = "none"

    async def generate(self, prompt: str, response_model: Type[M]) -> M:
        raise ModelUnavailableError(self.name)


def response_schema(response_model: Type[BaseModel]) -> Dict[str, Any]:
    """JSON schema handed to providers that support constrained output."""
    return response_model.model_json_schema()


def _sanitize_json(text: str) -> str:
    """
    Extract the JSON object from a text response.
    """
    start_index = text.find('{')
    end_index = text.rfind('}')
    if start_index == -1 or end_index == -1:
        raise ValueError("No JSON object found in the response")

    json_text = text[start_index:end_index + 1]

    # Remove trailing commas
    return re.sub(r',\s*([}\]])', r'\1', json_text)
