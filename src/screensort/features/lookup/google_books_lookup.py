"""
Google Books volume search for book screenshots.
"""

from typing import Optional

import requests

from .http_lookup import HttpMetadataLookup
from .interfaces import LookupResult
from ..extraction.models import ExtractedMetadata
from ...core.exceptions import NoResultsFoundError
from ...core.logging import get_logger
from ...core.retry_utils import retry_lookup_call

logger = get_logger(__name__)

GOOGLE_BOOKS_URL = "https://www.googleapis.com/books/v1/volumes"


def build_books_query(metadata: ExtractedMetadata) -> str:
    isbn = metadata.auxiliary_fields.get("isbn")
    if isbn:
        return f"isbn:{isbn}"
    query = f"intitle:{metadata.title}"
    if metadata.creator:
        query += f"+inauthor:{metadata.creator}"
    return query


class GoogleBooksLookup(HttpMetadataLookup):
    """Works without a key at a lower quota; the key is sent when configured."""

    service_name = "Google Books"

    def __init__(self, api_key: Optional[str] = None, session: Optional[requests.Session] = None):
        if api_key is None:
            from ...core.settings import backend_settings
            api_key = backend_settings.get_google_books_api_key()
        super().__init__(api_key=api_key, session=session)

    @retry_lookup_call(max_attempts=3, logger=logger)
    async def lookup(self, metadata: ExtractedMetadata) -> LookupResult:
        query = build_books_query(metadata)
        params = {"q": query, "maxResults": 1, "printType": "books"}
        if self.api_key:
            params["key"] = self.api_key

        data = await self.get_json(GOOGLE_BOOKS_URL, params)
        items = data.get("items") or []
        if not items:
            raise NoResultsFoundError(self.service_name, query)

        volume = items[0]
        info = volume.get("volumeInfo") or {}
        return LookupResult(
            external_id=volume["id"],
            url=info.get("infoLink") or f"https://books.google.com/books?id={volume['id']}",
            title=info.get("title"),
            extra={"authors": info.get("authors") or []},
        )
