"""
Legal citation extraction from regulation text.

Finds references to the US Code, the Code of Federal Regulations and Public
Laws, and caches the result per document number.
"""

import json
import logging
import re
from pathlib import Path
from typing import Iterator, List, Optional

from .downloader import write
from .models import Regulation, RunOptions

logger = logging.getLogger(__name__)

USC_PATTERN = re.compile(
    r"\b(\d{1,2})\s+U\.?\s?S\.?\s?C\.?\s+(?:§+\s*)?(\d+[a-z]*(?:-\d+[a-z]*)?)",
    re.I,
)
CFR_PATTERN = re.compile(
    r"\b(\d{1,2})\s+C\.?\s?F\.?\s?R\.?\s+(?:[Pp]arts?\s+|§+\s*)?(\d+)",
)
PUBLIC_LAW_PATTERN = re.compile(
    r"\bPub(?:lic|\.)?\s*L(?:aw|\.)?\s+(?:No\.\s*)?(\d{2,3})[-–](\d+)",
    re.I,
)


def _matches(text: str) -> Iterator[tuple]:
    for match in USC_PATTERN.finditer(text):
        yield match.start(), f"usc/{match.group(1)}/{match.group(2).lower()}"
    for match in CFR_PATTERN.finditer(text):
        yield match.start(), f"cfr/{match.group(1)}/{match.group(2)}"
    for match in PUBLIC_LAW_PATTERN.finditer(text):
        yield match.start(), f"law/public/{match.group(1)}/{match.group(2)}"


def find_citations(text: str) -> List[str]:
    """Citation IDs in order of first appearance, without duplicates."""
    citation_ids: List[str] = []
    for _, citation_id in sorted(_matches(text), key=lambda item: item[0]):
        if citation_id not in citation_ids:
            citation_ids.append(citation_id)
    return citation_ids


class CitationExtractor:
    """Extracts citation IDs from full text, backed by a per-document JSON cache."""

    def extract(
        self,
        regulation: Regulation,
        text: str,
        cache_path: Path,
        options: RunOptions,
    ) -> Optional[List[str]]:
        """
        Extract citation IDs for one regulation.

        Args:
            regulation: Record the text belongs to.
            text: Normalized full text.
            cache_path: Cache file for this document number.
            options: Run options; ``cache`` reuses an existing cache file.

        Returns:
            List of citation IDs, or None if extraction failed.
        """
        try:
            if options.cache and cache_path.exists():
                with open(cache_path, "r", encoding="utf-8") as f:
                    cached = json.load(f)
                logger.debug(f"[{regulation.document_number}] Using cached citations")
                return list(cached["citation_ids"])

            citation_ids = find_citations(text)
            write(
                cache_path,
                json.dumps({"document_number": regulation.document_number, "citation_ids": citation_ids}),
            )
            return citation_ids

        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"[{regulation.document_number}] Citation extraction failed: {e}")
            return None
