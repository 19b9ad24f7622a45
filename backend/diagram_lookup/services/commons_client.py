"""
Wikimedia Commons search client.
"""
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import requests

from diagram_lookup.config import config
from diagram_lookup.errors import UpstreamError, UpstreamTimeout
from diagram_lookup.services.metadata import description_from_metadata, extract_metadata
from diagram_lookup.types import ImageResult
from diagram_lookup.utils.http import deadline_after, read_json

logger = logging.getLogger(__name__)

FILE_NAMESPACE = "6"
FILE_PREFIX = re.compile(r"^File:")
FILE_FILTER_PATTERN = re.compile(r"\bfiletype:|\bfilemime:", re.IGNORECASE)
IMAGE_ONLY_FILTER = "filetype:bitmap|drawing -filemime:pdf -filemime:application/pdf -filemime:djvu"


def apply_image_filter(query: str) -> str:
    """Restrict a search to image files unless it already names a file type."""
    search = query.strip()
    if FILE_FILTER_PATTERN.search(search):
        return search
    return f"{search} {IMAGE_ONLY_FILTER}"


def _string_field(mapping: Dict[str, Any], name: str) -> str:
    value = mapping.get(name)
    return value if isinstance(value, str) else ""


def parse_page(page: Any) -> Optional[Tuple[ImageResult, str]]:
    """
    Turn one search hit into an image and its description text.

    Returns None for malformed records, records without a URL, and records
    whose mime type is not ``image/*``.
    """
    if not isinstance(page, dict):
        return None
    infos = page.get("imageinfo")
    if not isinstance(infos, list) or not infos or not isinstance(infos[0], dict):
        return None
    info = infos[0]

    mime = _string_field(info, "mime")
    if not mime.startswith("image/"):
        return None
    full_url = _string_field(info, "url")
    if not full_url:
        return None

    extmeta = info.get("extmetadata")
    image = ImageResult(
        title=FILE_PREFIX.sub("", str(page.get("title") or "")),
        thumb_url=_string_field(info, "thumburl") or full_url,
        full_url=full_url,
        mime=mime,
        **extract_metadata(extmeta),
    )
    return image, description_from_metadata(extmeta)


def pages_from_payload(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Extract page records from a query payload; malformed blocks count as empty."""
    query_block = data.get("query")
    if not isinstance(query_block, dict):
        return []
    pages = query_block.get("pages")
    if isinstance(pages, dict):
        records = list(pages.values())
    elif isinstance(pages, list):
        records = list(pages)
    else:
        records = []
    return [r for r in records if isinstance(r, dict)]


class CommonsClient:
    """Issues filtered file searches against the Commons API"""

    def __init__(
        self,
        api_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        search_limit: Optional[int] = None,
        thumb_width: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = config.commons_api_url if api_url is None else api_url
        self.user_agent = config.commons_user_agent if user_agent is None else user_agent
        self.timeout = config.commons_timeout if timeout is None else timeout
        self.search_limit = config.commons_search_limit if search_limit is None else search_limit
        self.thumb_width = config.commons_thumb_width if thumb_width is None else thumb_width
        self.session = requests.Session() if session is None else session

    def _build_params(self, search: str, limit: int) -> Dict[str, str]:
        return {
            "action": "query",
            "format": "json",
            "generator": "search",
            "gsrsearch": search,
            "gsrnamespace": FILE_NAMESPACE,
            "gsrlimit": str(limit),
            "prop": "imageinfo",
            "iiprop": "url|mime|extmetadata",
            "iiurlwidth": str(self.thumb_width),
            "uselang": "en",
        }

    def _get(self, search: str, limit: int) -> Dict[str, Any]:
        deadline = deadline_after(self.timeout)
        try:
            response = self.session.get(
                self.api_url,
                params=self._build_params(search, limit),
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
                stream=True,
            )
        except requests.Timeout as exc:
            raise UpstreamTimeout(
                f"Wikimedia API timed out after {self.timeout}s"
            ) from exc
        except requests.RequestException as exc:
            raise UpstreamError(f"Wikimedia API request failed: {exc}") from exc

        if not response.ok:
            response.close()
            raise UpstreamError(
                f"Wikimedia API error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = read_json(response, deadline)
        except UpstreamTimeout as exc:
            raise UpstreamTimeout(f"Wikimedia API timed out after {self.timeout}s: {exc}") from exc
        except UpstreamError as exc:
            raise UpstreamError(f"Wikimedia API returned an unreadable body: {exc}") from exc
        if not isinstance(data, dict):
            raise UpstreamError("Wikimedia API returned an unexpected payload")
        return data

    def search(self, query: str) -> List[Dict[str, Any]]:
        """
        Run one file search and return the raw page records.

        Raises:
            UpstreamTimeout: the request exceeded the timeout
            UpstreamError: transport failure, non-success status or bad body
        """
        search = apply_image_filter(query)
        logger.info(f"Searching Wikimedia Commons for: '{search}'")
        data = self._get(search, self.search_limit)

        records = pages_from_payload(data)
        logger.debug(f"Commons returned {len(records)} records for '{query}'")
        return records

    def probe(self, query: str = "human heart", limit: int = 5) -> Dict[str, Any]:
        """Unfiltered connectivity check used by the health endpoint."""
        pages = pages_from_payload(self._get(query, limit))
        return {
            "query": query,
            "has_results": bool(pages),
            "result_count": len(pages),
        }


# Global singleton
_commons_client: Optional[CommonsClient] = None


def get_commons_client() -> CommonsClient:
    """Get or create the global Commons client"""
    global _commons_client
    if _commons_client is None:
        _commons_client = CommonsClient()
    return _commons_client
