"""
Client for the Federal Register API.

Builds the detail, current public inspection and article search URLs, lays out
the on-disk artifact paths, and turns responses into identifier lists. Every
failure is recorded on the run report and degrades to an empty result.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import urlencode

from .config import config
from .downloader import DocumentDownloader
from .models import DocumentKind
from .report import RunReport

logger = logging.getLogger(__name__)

# The search endpoint serves at most this many documents, however it is paginated
RESULT_CAP = 1000

# current.json can't be filtered by type server-side
PUBLIC_INSPECTION_TYPES = ("proposed rule", "rule")


def destination_for(document_type: str, document_number: str, extension: str, data_dir: Optional[Path] = None) -> Path:
    """Path of one artifact: ``{data}/{yearish}/{number}/{document_type}.{extension}``."""
    yearish = document_number.split("-")[0]
    root = data_dir if data_dir is not None else config.data_dir
    return root / yearish / document_number / f"{document_type}.{extension}"


def citation_cache_for(document_number: str, data_dir: Optional[Path] = None) -> Path:
    return destination_for("citation", document_number, "json", data_dir)


def _query(params: Sequence[Tuple[str, Any]]) -> str:
    return urlencode(list(params), safe="[]/")


class RegistryClient:
    """Federal Register API access for one run."""

    def __init__(
        self,
        downloader: Optional[DocumentDownloader] = None,
        base_url: Optional[str] = None,
        data_dir: Optional[Path] = None,
    ) -> None:
        self.downloader = downloader or DocumentDownloader()
        self.base_url = (base_url or config.registry_url).rstrip("/")
        self.data_dir = data_dir if data_dir is not None else config.data_dir
        self.per_page = config.get("registry.per_page", RESULT_CAP)

    # urls/destinations

    def details_url_for(self, kind: DocumentKind, document_number: str) -> str:
        return f"{self.base_url}/{kind.endpoint}/{document_number}.json"

    def current_public_inspection_url(self) -> str:
        return f"{self.base_url}/public-inspection-documents/current.json?" + _query(
            [("fields[]", "document_number"), ("fields[]", "type")]
        )

    def search_url(self, article_type: str, beginning: date, ending: date) -> str:
        return f"{self.base_url}/articles.json?" + _query([
            ("conditions[type]", article_type),
            ("conditions[publication_date][gte]", beginning.strftime("%m/%d/%Y")),
            ("conditions[publication_date][lte]", ending.strftime("%m/%d/%Y")),
            ("fields[]", "document_number"),
            ("per_page", self.per_page),
        ])

    def destination_for(self, document_type: str, document_number: str, extension: str) -> Path:
        return destination_for(document_type, document_number, extension, self.data_dir)

    def citation_cache_for(self, document_number: str) -> Path:
        return citation_cache_for(document_number, self.data_dir)

    # detail fetcher

    def fetch_details(
        self,
        kind: DocumentKind,
        document_number: str,
        report: RunReport,
        cache: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """
        Fetch the metadata record for one document.

        Returns:
            The decoded metadata, or None after recording a warning.
        """
        url = self.details_url_for(kind, document_number)
        destination = self.destination_for(kind.value, document_number, "json")

        details = self.downloader.download(url, destination=destination, as_json=True, cache=cache)
        if details is None:
            report.warning(
                f"Error while polling FR.gov for article details at {url}, skipping article",
                url=url,
                document_number=document_number,
            )
            return None
        return details

    # listings

    def _listing(self, url: str, report: RunReport, description: str) -> Optional[List[Dict[str, Any]]]:
        """Fetch a listing response and validate its shape. Search listings are never cached."""
        response = self.downloader.download(url, as_json=True, cache=False)
        if response is None:
            report.warning(f"Error while polling FR.gov ({url}), aborting for now", url=url)
            return None

        if not isinstance(response, dict):
            report.error("Unexpected response from FR.gov", url=url, response=str(response))
            return None

        if response.get("errors"):
            report.error("Errors returned from FR.gov", url=url, errors=response["errors"])
            return None

        count = response.get("count")
        if count is None:
            report.error("No count field?", url=url, response=str(response))
            return None

        if isinstance(count, bool) or not isinstance(count, int):
            report.error("Unexpected count field from FR.gov", url=url, count=str(count))
            return None

        if count >= RESULT_CAP:
            report.warning(f"Likely more than {RESULT_CAP} {description}", url=url, count=count)

        results = response.get("results")
        if not results:
            # not an error, just no documents in this timeframe (like future months)
            logger.debug(f"No results for {url}")
            return []

        if not isinstance(results, list) or not all(isinstance(document, dict) for document in results):
            report.error("Unexpected results from FR.gov", url=url, response=str(response))
            return None
        return results

    def current_public_inspection(self, report: RunReport) -> List[str]:
        """Document numbers of today's public inspection rules and proposed rules."""
        url = self.current_public_inspection_url()
        logger.debug("Fetching current public inspection documents...")

        results = self._listing(url, report, "public inspection docs today")
        if not results:
            return []

        numbers = []
        for document in results:
            number = document.get("document_number")
            doc_type = str(document.get("type") or "").lower()
            if doc_type not in PUBLIC_INSPECTION_TYPES:
                logger.debug(f"Skipping non-rule PI doc {number} ({doc_type})")
            elif not number:
                logger.debug(f"Skipping PI doc without a document number ({doc_type})")
            else:
                numbers.append(number)
        return numbers

    def search_articles(self, article_type: str, beginning: date, ending: date, report: RunReport) -> List[str]:
        """Document numbers of one article type published in ``[beginning, ending]``."""
        url = self.search_url(article_type, beginning, ending)
        logger.info(
            f"Fetching {article_type} articles from {beginning.strftime('%m/%d/%Y')} "
            f"to {ending.strftime('%m/%d/%Y')}..."
        )

        results = self._listing(
            url,
            report,
            f"{article_type} articles between {beginning.isoformat()} and {ending.isoformat()}",
        )
        if not results:
            return []
        return [document["document_number"] for document in results if document.get("document_number")]
