"""
Downloader for Federal Register API responses and document bodies.

Wraps a requests session. Failures never raise: they are logged and come back
as None so callers can skip the unit of work.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Tuple
from urllib.parse import urlparse

import requests

from .config import config

logger = logging.getLogger(__name__)


class DocumentDownloader:
    """Fetches JSON metadata and raw document bodies, optionally caching them on disk."""

    def __init__(self, timeout: Optional[int] = None, session: Optional[requests.Session] = None) -> None:
        self.timeout = timeout or config.get("registry.timeout", 60)
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": config.get("registry.user_agent", "RegulationsSync/0.1"),
            "Accept": "application/json, text/html, application/xml;q=0.9, text/plain;q=0.8, */*;q=0.5",
        })

    def _validate_url(self, url: str) -> Tuple[bool, Optional[str]]:
        """
        Validate URL format before attempting download.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not url:
            return False, "URL cannot be empty"

        parsed = urlparse(url)
        if parsed.scheme.lower() not in ("http", "https"):
            return False, f"Unsupported URL scheme '{parsed.scheme}' - only http and https are supported"
        if not parsed.netloc:
            return False, "URL missing domain name"
        return True, None

    def fetch(self, url: str) -> Optional[str]:
        """
        GET a URL and return the response body as text.

        Returns:
            The body, or None if the request failed.
        """
        is_valid, error = self._validate_url(url)
        if not is_valid:
            logger.warning(f"Refusing to fetch {url!r}: {error}")
            return None

        try:
            response = self.session.get(url, timeout=self.timeout, allow_redirects=True)
            response.raise_for_status()
            return response.text
        except requests.exceptions.Timeout:
            logger.warning(f"Timeout downloading {url}")
        except requests.exceptions.HTTPError as e:
            logger.warning(f"HTTP error {e.response.status_code}: {url}")
        except requests.exceptions.RequestException as e:
            logger.warning(f"Request error for {url}: {e}")
        return None

    def download(
        self,
        url: str,
        destination: Optional[Path] = None,
        as_json: bool = False,
        cache: bool = False,
    ) -> Any:
        """
        Download a URL, writing the body to ``destination`` when given.

        Args:
            url: URL to fetch.
            destination: File to persist the body to.
            as_json: Decode the body as JSON.
            cache: Reuse an existing ``destination`` instead of fetching.

        Returns:
            Decoded JSON, the body text, or None on any failure.
        """
        body = None
        if cache and destination is not None and destination.exists():
            logger.debug(f"Using cached copy of {url} at {destination}")
            body = destination.read_text(encoding="utf-8")
        else:
            body = self.fetch(url)
            if body is None:
                return None
            if destination is not None:
                write(destination, body)

        if not as_json:
            return body

        try:
            return json.loads(body)
        except ValueError as e:
            logger.warning(f"Could not parse JSON from {url}: {e}")
            return None


def write(destination: Path, content: str) -> Path:
    """Write text to a file, creating parent directories."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    with open(destination, "w", encoding="utf-8") as f:
        f.write(content)
    return destination
