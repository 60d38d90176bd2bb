"""
YouTube search for music screenshots.
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

YOUTUBE_API_URL = "https://www.googleapis.com/youtube/v3"
MUSIC_CATEGORY_ID = "10"


class YouTubeLookup(HttpMetadataLookup):
    service_name = "YouTube"

    def __init__(self, api_key: Optional[str] = None, session: Optional[requests.Session] = None):
        if api_key is None:
            from ...core.settings import backend_settings
            api_key = backend_settings.get_youtube_api_key()
        super().__init__(api_key=api_key, session=session)

    @retry_lookup_call(max_attempts=3, logger=logger)
    async def lookup(self, metadata: ExtractedMetadata) -> LookupResult:
        params = {
            "part": "snippet",
            "q": metadata.search_query,
            "type": "video",
            "videoCategoryId": MUSIC_CATEGORY_ID,
            "maxResults": 1,
            "key": self.require_api_key(),
        }
        data = await self.get_json(f"{YOUTUBE_API_URL}/search", params)
        items = data.get("items") or []
        if not items:
            raise NoResultsFoundError(self.service_name, metadata.search_query)

        video_id = items[0]["id"]["videoId"]
        return LookupResult(
            external_id=video_id,
            url=f"https://music.youtube.com/watch?v={video_id}",
            title=(items[0].get("snippet") or {}).get("title"),
        )
