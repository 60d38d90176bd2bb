"""
OpenAI provider: structured outputs through the Chat Completions API.

Safety refusals are reported by the API as a typed ``refusal`` field on the
message or a ``content_filter`` finish reason; both map to SafetyRefusalError.
"""

from typing import Any, Optional, Type

from .interfaces import M, StructuredModelClient
from ...core.exceptions import ModelUnavailableError, SafetyRefusalError, SemanticServiceFailure
from ...core.logging import get_logger

logger = get_logger(__name__)


class OpenAIModelClient(StructuredModelClient):
    """Asks an OpenAI chat model for a reply parsed into a pydantic model."""

    name = "openai"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, client: Any = None):
        from ...core.settings import backend_settings

        self.api_key = api_key if api_key is not None else backend_settings.get_openai_api_key()
        self.model = model or backend_settings.get_openai_model()
        self._client = client

    def _get_client(self):
        if self._client is not None:
            return self._client
        if not self.api_key:
            raise ModelUnavailableError(self.name)

        from openai import AsyncOpenAI

        self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def generate(self, prompt: str, response_model: Type[M]) -> M:
        import openai

        client = self._get_client()
        try:
            completion = await client.beta.chat.completions.parse(
                model=self.model,
                messages=[
                    {"role": "system", "content": "You read text recognized from phone screenshots and answer in JSON."},
                    {"role": "user", "content": prompt},
                ],
                response_format=response_model,
                temperature=0.2,
            )
        except openai.ContentFilterFinishReasonError:
            raise SafetyRefusalError("OpenAI content filter stopped the reply", self.name)
        except openai.AuthenticationError:
            raise ModelUnavailableError(self.name)
        except openai.BadRequestError as e:
            if getattr(e, "code", None) == "content_policy_violation":
                raise SafetyRefusalError("OpenAI rejected the input", self.name)
            raise SemanticServiceFailure(f"OpenAI rejected the request: {e}", self.name)
        except openai.OpenAIError as e:
            raise SemanticServiceFailure(f"OpenAI request failed: {e}", self.name)

        choice = completion.choices[0]
        if choice.message.refusal:
            logger.info(f"OpenAI refused the request: {choice.message.refusal}")
            raise SafetyRefusalError("OpenAI refused to answer", self.name)
        if choice.finish_reason == "content_filter":
            raise SafetyRefusalError("OpenAI content filter stopped the reply", self.name)

        if choice.message.parsed is not None:
            return choice.message.parsed
        return self.parse_reply(choice.message.content or "", response_model)
