"""
The Movie Database (TMDb) search for movie screenshots.
"""

from typing import Any, Dict, Optional

import requests

from .http_lookup import HttpMetadataLookup
from .interfaces import LookupResult
from ..extraction.models import ExtractedMetadata
from ...core.exceptions import NoResultsFoundError
from ...core.logging import get_logger
from ...core.retry_utils import retry_lookup_call

logger = get_logger(__name__)

TMDB_API_URL = "https://api.themoviedb.org/3"
TMDB_WEB_URL = "https://www.themoviedb.org/movie"


class TMDbLookup(HttpMetadataLookup):
    service_name = "TMDb"

    def __init__(self, api_key: Optional[str] = None, session: Optional[requests.Session] = None):
        if api_key is None:
            from ...core.settings import backend_settings
            api_key = backend_settings.get_tmdb_api_key()
        super().__init__(api_key=api_key, session=session)

    @retry_lookup_call(max_attempts=3, logger=logger)
    async def lookup(self, metadata: ExtractedMetadata) -> LookupResult:
        params: Dict[str, Any] = {
            "api_key": self.require_api_key(),
            "query": metadata.title,
            "language": "en-US",
            "page": 1,
            "include_adult": "false",
        }
        year = metadata.auxiliary_fields.get("year")
        if year:
            params["year"] = year

        data = await self.get_json(f"{TMDB_API_URL}/search/movie", params)
        results = data.get("results") or []
        if not results:
            raise NoResultsFoundError(self.service_name, metadata.title)

        movie = results[0]
        movie_id = str(movie["id"])
        return LookupResult(
            external_id=movie_id,
            url=f"{TMDB_WEB_URL}/{movie_id}",
            title=movie.get("title"),
            extra={"release_date": movie.get("release_date")},
        )
