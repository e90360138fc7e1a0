"""
Run-scoped report for a sync run.

Collects warnings, errors, missing full-text links and counters across the whole
run. Nothing recorded here changes control flow; it is summarized at the end.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """Results of one sync run."""

    source: str = "regulations"
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    warnings: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)
    missing_links: List[str] = field(default_factory=list)
    citation_warnings: List[Dict[str, Any]] = field(default_factory=list)
    successes: List[str] = field(default_factory=list)
    processed: int = 0
    searchable: int = 0

    def warning(self, message: str, **context: Any) -> None:
        """Record a non-fatal problem with one unit of work."""
        logger.warning("%s %s", message, _format_context(context))
        self.warnings.append({"message": message, **context})

    def error(self, message: str, **context: Any) -> None:
        """Record an unexpected response or failure; the run still continues."""
        logger.error("%s %s", message, _format_context(context))
        self.errors.append({"message": message, **context})

    def citation_warning(self, message: str, **context: Any) -> None:
        logger.warning(message)
        self.citation_warnings.append({"message": message, **context})

    def missing_link(self, document_number: str) -> None:
        logger.info(f"[{document_number}] No full text link published")
        self.missing_links.append(document_number)

    def success(self, message: str) -> None:
        logger.info(message)
        self.successes.append(message)

    def finish(self, article_types: List[str], public_inspection: bool = False) -> None:
        """Close the run and emit the end-of-run summary messages."""
        if self.warnings:
            logger.warning(f"{len(self.warnings)} warnings")

        if self.missing_links:
            logger.warning(f"Missing {len(self.missing_links)} XML and HTML links for full text")

        if self.citation_warnings:
            logger.warning(f"{len(self.citation_warnings)} warnings while extracting citations")

        if public_inspection:
            self.success(
                f"Processed {self.processed} current RULE, PRORULE, and NOTICE public inspection docs"
            )
        else:
            self.success(f"Processed {self.processed} {', '.join(article_types)} regulations")

        self.success(f"Indexed {self.searchable} documents as searchable")
        self.finished_at = datetime.now()

    @property
    def ok(self) -> bool:
        return not self.errors

    def summary_lines(self) -> List[str]:
        """Human-readable summary, one line per message or problem group."""
        lines = list(self.successes)
        if self.warnings:
            lines.append(f"{len(self.warnings)} warnings")
            lines.extend(f"  - {w['message']}" for w in self.warnings)
        if self.errors:
            lines.append(f"{len(self.errors)} errors")
            lines.extend(f"  - {e['message']}" for e in self.errors)
        if self.missing_links:
            lines.append(f"Missing {len(self.missing_links)} XML and HTML links for full text")
            lines.extend(f"  - {number}" for number in self.missing_links)
        if self.citation_warnings:
            lines.append(f"{len(self.citation_warnings)} warnings while extracting citations")
        return lines

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["started_at"] = self.started_at.isoformat()
        data["finished_at"] = self.finished_at.isoformat() if self.finished_at else None
        return data

    def write(self, reports_dir: Path) -> Path:
        """Write the report as JSON and return its path."""
        reports_dir.mkdir(parents=True, exist_ok=True)
        timestamp = self.started_at.strftime("%Y%m%d_%H%M%S")
        path = reports_dir / f"{self.source}_{timestamp}.json"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)
        return path

    def __str__(self) -> str:
        return (
            f"Sync complete: {self.processed} processed, {self.searchable} searchable, "
            f"{len(self.warnings)} warnings, {len(self.errors)} errors"
        )


def _format_context(context: Dict[str, Any]) -> str:
    if not context:
        return ""
    return "(" + ", ".join(f"{key}={value}" for key, value in context.items()) + ")"
