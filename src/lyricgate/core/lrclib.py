"""HTTP client for the LRCLIB lyrics catalog.

This module intentionally contains only network logic. Every failure
(transport error, timeout, non-2xx status, malformed body) is reported as
"no data" rather than raised. No retries are performed.
"""

from typing import Any, Dict, List, Optional

import requests  # type: ignore[import-untyped]

from ..config import LRCLIB_BASE_URL, LYRICS_TIMEOUT, USER_AGENT
from ..utils.logging import get_logger

logger = get_logger(__name__)


class LrcLibClient:
    """Thin wrapper around the LRCLIB ``/get`` and ``/search`` endpoints."""

    def __init__(
        self,
        base_url: str = LRCLIB_BASE_URL,
        *,
        timeout: float = LYRICS_TIMEOUT,
        session: Optional[requests.Session] = None,
        user_agent: str = USER_AGENT,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {"User-Agent": user_agent}

    def _get_json(self, path: str, params: Dict[str, str]) -> Any:
        url = f"{self.base_url}/{path}"
        try:
            resp = self.session.get(
                url, params=params, headers=self.headers, timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            logger.warning(f"LRCLIB request timed out after {self.timeout}s: {url}")
            return None
        except requests.exceptions.RequestException as e:
            logger.warning(f"LRCLIB request failed: {e}")
            return None

        status = resp.status_code
        if 400 <= status < 500:
            logger.warning(f"LRCLIB returned {status} for {path} {params}")
            return None
        if status >= 500:
            logger.error(f"LRCLIB server error ({status})")
            return None

        try:
            return resp.json()
        except ValueError as e:
            logger.warning(f"LRCLIB returned a malformed body: {e}")
            return None

    def get_lyrics(self, artist: str, title: str) -> Optional[Dict[str, Any]]:
        """Fetch the best LRCLIB record for an artist and title.

        Returns None when LRCLIB has no record or cannot be reached.
        """
        logger.debug(f"Fetching lyrics from LRCLIB: '{title}' by '{artist}'")
        data = self._get_json("get", {"artist_name": artist, "track_name": title})
        if not isinstance(data, dict):
            return None
        return data

    def search_lyrics(self, query: str) -> List[Dict[str, Any]]:
        """Fuzzy search. Returns an empty list on any failure."""
        logger.debug(f"Searching lyrics on LRCLIB: {query}")
        data = self._get_json("search", {"q": query})
        if not isinstance(data, list):
            return []
        return [item for item in data if isinstance(item, dict)]
