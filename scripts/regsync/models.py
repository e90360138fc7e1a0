"""
Data model for RegulationsSync.

Hierarchy of regulatory documents:
    All documents:
        document_type: "article", "public_inspection"
        article_type: "regulation", "notice" (or another lowercased registry type)

    For article_type "regulation":
        stage: "proposed", "final"
"""

import json
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

DEFAULT_ARTICLE_TYPES = ["PRORULE", "RULE", "NOTICE"]

# Fields of a regulation that are copied into the search index next to text and citations
BASIC_FIELDS = (
    "document_number",
    "document_type",
    "article_type",
    "stage",
    "title",
    "abstract",
    "agency_names",
    "agency_ids",
    "publication_date",
    "posted_at",
    "effective_on",
    "comments_close_on",
    "docket_ids",
    "rins",
    "url",
    "pdf_url",
)

_LIST_FIELDS = ("agency_names", "agency_ids", "docket_ids", "rins", "citation_ids")


class MetadataError(ValueError):
    """Raised when a registry detail payload does not have the expected shape."""


class DocumentKind(str, Enum):
    """Lifecycle stage a fetched document represents."""

    ARTICLE = "article"
    PUBLIC_INSPECTION = "public_inspection"

    @property
    def endpoint(self) -> str:
        """Path segment of the registry API serving this kind."""
        if self is DocumentKind.ARTICLE:
            return "articles"
        return "public-inspection-documents"


@dataclass
class DocumentDetails:
    """Fields shared by article and public inspection detail responses."""

    type: str
    agencies: List[Dict[str, Any]]
    document_number: Optional[str] = None
    publication_date: Optional[str] = None
    html_url: Optional[str] = None
    pdf_url: Optional[str] = None
    title: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> "DocumentDetails":
        """
        Build the metadata structure from a decoded registry response.

        Unknown keys are ignored and missing optional keys become None.

        Raises:
            MetadataError: If the payload lacks a type or an agency list.
        """
        if not isinstance(data, dict):
            raise MetadataError(f"Expected a JSON object, got {type(data).__name__}")

        doc_type = data.get("type")
        if not isinstance(doc_type, str) or not doc_type.strip():
            raise MetadataError("Missing document type")

        agencies = data.get("agencies")
        if not isinstance(agencies, list) or not all(isinstance(a, dict) for a in agencies):
            raise MetadataError("Missing or malformed agency list")

        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    @property
    def agency_names(self) -> List[Optional[str]]:
        return [agency.get("name") or agency.get("raw_name") for agency in self.agencies]

    @property
    def agency_ids(self) -> List[Optional[int]]:
        return [agency.get("id") for agency in self.agencies]


@dataclass
class ArticleDetails(DocumentDetails):
    """Detail response for a published article."""

    docket_ids: Optional[List[str]] = None
    abstract: Optional[str] = None
    effective_on: Optional[str] = None
    regulation_id_numbers: Optional[List[str]] = None
    comments_close_on: Optional[str] = None
    body_html_url: Optional[str] = None
    full_text_xml_url: Optional[str] = None


@dataclass
class PublicInspectionDetails(DocumentDetails):
    """Detail response for a public inspection (pre-publication) document."""

    toc_subject: Optional[str] = None
    toc_doc: Optional[str] = None
    docket_numbers: Optional[List[str]] = None
    filed_at: Optional[str] = None
    raw_text_url: Optional[str] = None


def details_from_json(kind: DocumentKind, data: Any) -> DocumentDetails:
    """Parse a detail response into the schema for the given document kind."""
    if kind is DocumentKind.ARTICLE:
        return ArticleDetails.from_json(data)
    return PublicInspectionDetails.from_json(data)


@dataclass(frozen=True)
class Regulation:
    """Canonical record of one regulatory document, keyed by document number."""

    document_number: str
    document_type: str
    article_type: str
    stage: Optional[str] = None
    title: Optional[str] = None
    abstract: Optional[str] = None
    agency_names: List[Optional[str]] = field(default_factory=list)
    agency_ids: List[Optional[int]] = field(default_factory=list)
    publication_date: Optional[str] = None
    posted_at: Optional[datetime] = None
    effective_on: Optional[str] = None
    comments_close_on: Optional[str] = None
    docket_ids: Optional[List[str]] = None
    rins: Optional[List[str]] = None
    url: Optional[str] = None
    pdf_url: Optional[str] = None
    citation_ids: Optional[List[str]] = None

    def to_row(self) -> Dict[str, Any]:
        """Convert to the column mapping stored in the database."""
        row: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in _LIST_FIELDS:
                value = json.dumps(value) if value is not None else None
            elif f.name == "posted_at":
                value = value.isoformat() if value is not None else None
            row[f.name] = value
        return row

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Regulation":
        """Rebuild a regulation from a database row."""
        values: Dict[str, Any] = {}
        for f in fields(cls):
            value = row.get(f.name)
            if f.name in _LIST_FIELDS:
                value = json.loads(value) if value is not None else None
            elif f.name == "posted_at" and value is not None:
                value = datetime.fromisoformat(value)
            values[f.name] = value
        if values["agency_names"] is None:
            values["agency_names"] = []
        if values["agency_ids"] is None:
            values["agency_ids"] = []
        return cls(**values)

    def basic_fields(self) -> Dict[str, Any]:
        """Project the fields copied into the search index."""
        result = {}
        for name in BASIC_FIELDS:
            value = getattr(self, name)
            if isinstance(value, datetime):
                value = value.isoformat()
            result[name] = value
        return result


@dataclass
class RunOptions:
    """Options recognised by a sync run."""

    document_number: Optional[str] = None
    article_type: Optional[str] = None
    public_inspection: bool = False
    year: Optional[int] = None
    month: Optional[int] = None
    days: int = 7
    limit: Optional[int] = None
    cache: bool = False  # detail and body fetches only, never search listings
    skip_text: bool = False
    debug: bool = False

    @property
    def document_kind(self) -> DocumentKind:
        if self.public_inspection:
            return DocumentKind.PUBLIC_INSPECTION
        return DocumentKind.ARTICLE

    @property
    def article_types(self) -> List[str]:
        """Registry article types to sweep, upper-cased."""
        if self.article_type:
            return [self.article_type.upper()]
        return list(DEFAULT_ARTICLE_TYPES)
