"""
Collaborators invoked after a successful extraction: metadata lookup,
destination routing and the activity log.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from ..classification.content_types import ContentType
from ..extraction.models import ExtractedMetadata
from ...core.logging import get_logger

logger = get_logger(__name__)


class LookupResult(BaseModel):
    """Match returned by an external metadata service."""

    external_id: str
    url: Optional[str] = None
    title: Optional[str] = None
    extra: Dict[str, Any] = Field(default_factory=dict)


class MetadataLookup(ABC):
    """Searches an external service for extracted metadata."""

    service_name: str = "lookup"

    @abstractmethod
    async def lookup(self, metadata: ExtractedMetadata) -> LookupResult:
        """
        Find the best match for the metadata.

        Raises:
            MetadataLookupError subclasses
        """
        raise NotImplementedError


class LookupRegistry:
    """Maps content types to their lookup service."""

    def __init__(self, lookups: Optional[Dict[ContentType, MetadataLookup]] = None):
        self._lookups: Dict[ContentType, MetadataLookup] = dict(lookups or {})

    def register(self, content_type: ContentType, lookup: MetadataLookup) -> None:
        self._lookups[content_type] = lookup

    def get(self, content_type: ContentType) -> Optional[MetadataLookup]:
        return self._lookups.get(content_type)

    async def lookup(self, metadata: ExtractedMetadata) -> Optional[LookupResult]:
        """Look the metadata up; a type without a registered service yields no result."""
        service = self.get(metadata.content_type)
        if service is None:
            logger.debug(f"No lookup registered for {metadata.content_type.value}")
            return None
        return await service.lookup(metadata)


class DestinationRouter(ABC):
    """Moves a successfully processed item to its content type's destination."""

    @abstractmethod
    async def route(self, handle: Any, content_type: ContentType) -> Optional[str]:
        """
        Route the item.

        Returns:
            New location of the item, if it has one

        Raises:
            RoutingError
        """
        raise NotImplementedError


class ActivityLog(ABC):
    """Append-only record of sorted screenshots."""

    @abstractmethod
    async def record(self, entry: Dict[str, Any]) -> None:
        raise NotImplementedError
