"""
Full text extraction for Federal Register documents.

Downloads the body of a document in its published format and flattens it into
a single line of text suitable for indexing and citation extraction.
"""

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

import lxml.html
from lxml import etree

from .config import config
from .downloader import DocumentDownloader, write
from .models import ArticleDetails, DocumentDetails, DocumentKind, PublicInspectionDetails
from .registry import destination_for
from .report import RunReport

logger = logging.getLogger(__name__)

_LINE_BREAKS = re.compile(r"[\n\r]")


def full_text_for(root) -> str:
    """Join every text node under ``root`` in document order, trimmed, skipping blanks."""
    if root is None:
        return ""
    strings = (text.strip() for text in root.xpath("//*/text()"))
    return " ".join(text for text in strings if text)


def plain_text_for(body: str) -> str:
    """Public inspection raw text only needs its line breaks turned into spaces."""
    return _LINE_BREAKS.sub(" ", body)


class SourceFormat(str, Enum):
    """Formats a document body can be published in."""

    XML = "xml"
    HTML = "html"
    TXT = "txt"

    @property
    def extension(self) -> str:
        """Extension of the raw body file."""
        if self is SourceFormat.TXT:
            # keeps the raw body apart from the normalized {kind}.txt
            return "raw.txt"
        return self.value

    def parse(self, body: str):
        """Parse a markup body into an lxml tree (None for plain text or empty bodies)."""
        if self is SourceFormat.TXT or not body.strip():
            return None
        data = body.encode("utf-8")
        if self is SourceFormat.XML:
            return etree.fromstring(data, parser=etree.XMLParser(recover=True, encoding="utf-8"))
        return lxml.html.document_fromstring(data, parser=lxml.html.HTMLParser(encoding="utf-8"))

    def normalize(self, body: str) -> str:
        """Flatten a raw body into normalized text."""
        if self is SourceFormat.TXT:
            return plain_text_for(body)
        return full_text_for(self.parse(body))


def source_for(
    kind: DocumentKind,
    details: DocumentDetails,
    article_format: Optional[str] = None,
) -> Optional[Tuple[SourceFormat, str]]:
    """
    Pick the body format and URL to extract text from.

    Articles use the HTML body unless ``article_format`` is "xml" and an XML
    full text link exists. Public inspection documents use their raw text.

    Returns:
        (format, url), or None when the registry published no usable link.
    """
    if kind is DocumentKind.ARTICLE and isinstance(details, ArticleDetails):
        preferred = article_format or config.get("text.article_format", "html")
        if preferred == SourceFormat.XML.value and details.full_text_xml_url:
            return SourceFormat.XML, details.full_text_xml_url
        if details.body_html_url:
            return SourceFormat.HTML, details.body_html_url
        return None

    if isinstance(details, PublicInspectionDetails) and details.raw_text_url:
        return SourceFormat.TXT, details.raw_text_url
    return None


class TextExtractor:
    """Downloads document bodies and writes their normalized text next to them."""

    def __init__(self, downloader: Optional[DocumentDownloader] = None, data_dir: Optional[Path] = None) -> None:
        self.downloader = downloader or DocumentDownloader()
        self.data_dir = data_dir if data_dir is not None else config.data_dir

    def text_for(
        self,
        kind: DocumentKind,
        document_number: str,
        source_format: SourceFormat,
        url: str,
        report: RunReport,
        cache: bool = False,
    ) -> Optional[str]:
        """
        Download a document body and return its normalized text.

        Returns:
            The text, or None if the download failed (a warning is recorded).
        """
        destination = destination_for(kind.value, document_number, source_format.extension, self.data_dir)

        body = self.downloader.download(url, destination=destination, cache=cache)
        if body is None:
            report.warning(
                "Error while polling FR.gov for full text, aborting for now",
                url=url,
                document_number=document_number,
            )
            return None

        try:
            text = source_format.normalize(body)
        except etree.LxmlError as e:
            report.warning(
                f"Could not parse {source_format.value} full text: {e}",
                url=url,
                document_number=document_number,
            )
            return None

        write(destination_for(kind.value, document_number, "txt", self.data_dir), text)
        logger.debug(f"[{document_number}] Extracted {len(text)} characters of {source_format.value} text")
        return text
