"""
Shared plumbing for JSON-over-HTTP lookup services.
"""

import asyncio
from typing import Any, Dict, Optional

import requests

from .interfaces import MetadataLookup
from ...core.exceptions import LookupNetworkError, LookupNotConfiguredError, LookupResponseError
from ...core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 15.0


class HttpMetadataLookup(MetadataLookup):
    """MetadataLookup that issues GET requests off the event loop."""

    def __init__(self, api_key: Optional[str] = None, session: Optional[requests.Session] = None,
                 timeout: float = DEFAULT_TIMEOUT):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def require_api_key(self) -> str:
        if not self.api_key:
            raise LookupNotConfiguredError(self.service_name)
        return self.api_key

    async def get_json(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """GET ``url`` in a worker thread and decode the JSON body."""
        return await asyncio.to_thread(self._get_json_sync, url, params)

    def _get_json_sync(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise LookupNetworkError(self.service_name, str(e))

        if response.status_code != 200:
            logger.warning(f"{self.service_name} returned status {response.status_code}")
            raise LookupResponseError(self.service_name, response.status_code, response.text)

        try:
            return response.json()
        except ValueError:
            raise LookupResponseError(self.service_name, response.status_code, "response was not valid JSON")
