"""
Maps registry metadata onto canonical regulation records.

A record's document_type may move from public_inspection to article once and
never back. A final article replaces a stored preview from scratch; a preview
arriving for an already published article changes nothing.
"""

import logging
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional, Tuple

from .models import (
    ArticleDetails,
    DocumentDetails,
    DocumentKind,
    MetadataError,
    PublicInspectionDetails,
    Regulation,
)

logger = logging.getLogger(__name__)

# maps FR document type to rule stage
TYPE_TO_STAGE = {
    "Proposed Rule": "proposed",
    "Rule": "final",
}


def article_type_for(registry_type: str) -> Tuple[str, Optional[str]]:
    """
    Return (article_type, stage) for a registry type string.

    "Proposed Rule" and "Rule" are regulations with a stage; anything else is
    its own lowercased category without a stage.
    """
    stage = TYPE_TO_STAGE.get(registry_type)
    if stage:
        return "regulation", stage
    return registry_type.lower(), None


def noon_utc_for(publication_date: Optional[str]) -> Optional[datetime]:
    """Publication dates carry no time of day; anchor them at noon UTC."""
    if not publication_date:
        return None
    try:
        day = date.fromisoformat(publication_date)
    except ValueError as e:
        raise MetadataError(f"Invalid publication date {publication_date!r}") from e
    return datetime(day.year, day.month, day.day, 12, tzinfo=timezone.utc)


def utc_parse(timestamp: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp and normalize it to UTC. Naive values are taken as UTC."""
    if not timestamp:
        return None
    try:
        parsed = datetime.fromisoformat(timestamp.strip().replace("Z", "+00:00"))
    except ValueError as e:
        raise MetadataError(f"Invalid timestamp {timestamp!r}") from e
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def public_inspection_title(details: PublicInspectionDetails) -> Optional[str]:
    """
    Title of a public inspection document.

    The title field is sometimes blank; subject plus document heading gives the
    final title most of the time.
    """
    if details.title and details.title.strip():
        return details.title
    if details.toc_subject and details.toc_subject.strip() and details.toc_doc and details.toc_doc.strip():
        return " ".join([details.toc_subject, details.toc_doc])
    return None


def attributes_for(kind: DocumentKind, details: DocumentDetails) -> Dict[str, Any]:
    """Attributes to persist for a detail response of the given kind."""
    article_type, stage = article_type_for(details.type)

    # common to public inspection documents and to articles
    attributes: Dict[str, Any] = {
        "document_type": kind.value,
        "article_type": article_type,
        "stage": stage,
        "agency_names": details.agency_names,
        "agency_ids": details.agency_ids,
        "publication_date": details.publication_date,
        "url": details.html_url,
        "pdf_url": details.pdf_url,
    }

    if kind is DocumentKind.ARTICLE:
        attributes.update(
            title=details.title,
            docket_ids=details.docket_ids,
            posted_at=noon_utc_for(details.publication_date),
            abstract=details.abstract,
            effective_on=details.effective_on,
            rins=details.regulation_id_numbers,
            comments_close_on=details.comments_close_on,
        )
    else:
        attributes.update(
            title=public_inspection_title(details),
            docket_ids=details.docket_numbers,
            posted_at=utc_parse(details.filed_at),
        )

    return attributes


def reconcile(
    document_number: str,
    existing: Optional[Regulation],
    kind: DocumentKind,
    details: DocumentDetails,
) -> Optional[Regulation]:
    """
    Compute the next stored value of a regulation.

    Args:
        document_number: Identifier shared by preview and final article.
        existing: The stored record, if any.
        kind: Kind of the detail response being applied.
        details: Parsed detail response.

    Returns:
        The record to save, or None when a preview arrives for a document that
        has already been published (the article stays authoritative).
    """
    base = existing

    if existing is not None and kind is DocumentKind.PUBLIC_INSPECTION and existing.document_type != kind.value:
        logger.debug(f"[{document_number}] Not storing public inspection, document already released")
        return None

    if existing is not None and kind is DocumentKind.ARTICLE and existing.document_type != kind.value:
        logger.debug(f"[{document_number}] Article replacing public inspection document, wiping fields")
        base = None

    attributes = attributes_for(kind, details)

    if base is None:
        return Regulation(document_number=document_number, **attributes)
    return replace(base, **attributes)
