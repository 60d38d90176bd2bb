"""
Fake collaborators.

Each fake records its calls so tests can assert on what the orchestrator,
classifier and extractors asked for.
"""

from typing import Any, Dict, List, Optional, Sequence, Type, Union

from pydantic import BaseModel

from ..core.exceptions import NoTextFoundError
from ..features.classification.content_types import ContentType
from ..features.extraction.models import ExtractedMetadata
from ..features.lookup.interfaces import ActivityLog, DestinationRouter, LookupResult, MetadataLookup
from ..features.recognition.interfaces import TextRecognizer
from ..features.recognition.models import BoundingBox, TextObservation
from ..features.semantic.interfaces import M, StructuredModelClient

Reply = Union[BaseModel, Dict[str, Any], BaseException]


def observations(*texts: str, confidence: float = 0.95) -> List[TextObservation]:
    """Observations laid out top to bottom in the order given."""
    count = max(len(texts), 1)
    return [
        TextObservation(
            text=text,
            confidence=confidence,
            bounding_box=BoundingBox(x=0.1, y=1.0 - (i + 1) / (count + 1), width=0.8, height=0.05),
        )
        for i, text in enumerate(texts)
    ]


class FakeRecognizer(TextRecognizer):
    """Returns canned observations per handle; unknown handles have no text."""

    def __init__(self, results: Optional[Dict[Any, Union[Sequence[TextObservation], BaseException]]] = None):
        self.results = dict(results or {})
        self.calls: List[Any] = []

    async def recognize(self, item: Any) -> List[TextObservation]:
        self.calls.append(item)
        result = self.results.get(item)
        if result is None:
            raise NoTextFoundError(str(item))
        if isinstance(result, BaseException):
            raise result
        return list(result)


class FakeModelClient(StructuredModelClient):
    """
    Answers each request from a script.

    ``replies`` maps a response model to one reply or a list consumed in order.
    A reply is a model instance, a dict validated against the response model,
    or an exception to raise.
    """

    name = "fake"

    def __init__(self, replies: Optional[Dict[Type[BaseModel], Union[Reply, List[Reply]]]] = None):
        self.replies = {k: (list(v) if isinstance(v, list) else v) for k, v in (replies or {}).items()}
        self.prompts: List[str] = []

    async def generate(self, prompt: str, response_model: Type[M]) -> M:
        self.prompts.append(prompt)
        reply = self.replies.get(response_model)
        if isinstance(reply, list):
            reply = reply.pop(0) if reply else None
        if reply is None:
            raise AssertionError(f"No scripted reply for {response_model.__name__}")
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, BaseModel):
            return reply
        return self.parse_reply(reply, response_model)


class FakeLookup(MetadataLookup):
    service_name = "fake"

    def __init__(self, result: Union[LookupResult, BaseException, None] = None):
        self.result = result or LookupResult(external_id="ext-1", url="https://example.com/ext-1")
        self.calls: List[ExtractedMetadata] = []

    async def lookup(self, metadata: ExtractedMetadata) -> LookupResult:
        self.calls.append(metadata)
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


class FakeRouter(DestinationRouter):
    def __init__(self, error: Optional[BaseException] = None):
        self.error = error
        self.routed: List[tuple] = []

    async def route(self, handle: Any, content_type: ContentType) -> Optional[str]:
        if self.error is not None:
            raise self.error
        self.routed.append((handle, content_type))
        return f"{content_type.destination}/{handle}"


class FakeActivityLog(ActivityLog):
    def __init__(self, error: Optional[BaseException] = None):
        self.error = error
        self.entries: List[Dict[str, Any]] = []

    async def record(self, entry: Dict[str, Any]) -> None:
        if self.error is not None:
            raise self.error
        self.entries.append(entry)


class ManualClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
