"""
Sync pipeline: Federal Register metadata and full text into the store and index.

Downloads metadata about proposed rules, final rules and notices from
FederalRegister.gov. By default grabs the last 7 days of every article type.

Each document is processed completely (fetch, reconcile, save, extract text,
extract citations, index) before the next one starts. A failure for one
document is recorded on the run report and never stops the run.
"""

import logging
import sqlite3
from datetime import date
from typing import Any, Dict, List, Optional

from tqdm import tqdm

from .citations import CitationExtractor
from .config import config
from .database import Database
from .extraction import TextExtractor, source_for
from .indexer import IndexBatcher
from .models import DocumentKind, MetadataError, RunOptions, details_from_json
from .planner import WindowPlanner
from .reconciler import reconcile
from .registry import RegistryClient
from .report import RunReport
from .search import SearchIndex

logger = logging.getLogger(__name__)


class RegulationsSync:
    """Runs one sync of Federal Register documents."""

    def __init__(
        self,
        client: Optional[RegistryClient] = None,
        database: Optional[Database] = None,
        extractor: Optional[TextExtractor] = None,
        citations: Optional[CitationExtractor] = None,
        index: Optional[SearchIndex] = None,
        index_name: Optional[str] = None,
        batch_size: Optional[int] = None,
        article_format: Optional[str] = None,
    ) -> None:
        self.client = client or RegistryClient()
        self.database = database or Database()
        self.extractor = extractor or TextExtractor(self.client.downloader, self.client.data_dir)
        self.citations = citations or CitationExtractor()
        self.index = index or SearchIndex(self.database.db_path)
        self.index_name = index_name or config.index_name
        self.batch_size = batch_size
        self.article_format = article_format

    def run(self, options: RunOptions, today: Optional[date] = None, progress: bool = False) -> RunReport:
        """
        Sync every document the options select.

        Args:
            options: Run options.
            today: Date the default window ends on (defaults to today).
            progress: Show a progress bar over the documents.

        Returns:
            The run report with warnings, errors and counts.
        """
        package_logger = logging.getLogger("regsync")
        previous_level = package_logger.level
        if options.debug:
            package_logger.setLevel(logging.DEBUG)

        try:
            return self._run(options, today, progress)
        finally:
            package_logger.setLevel(previous_level)

    def _run(self, options: RunOptions, today: Optional[date], progress: bool) -> RunReport:
        report = RunReport()
        kind = options.document_kind

        targets = WindowPlanner(self.client).targets(options, report, today=today)
        batcher = IndexBatcher(self.index, self.batch_size)

        for document_number in tqdm(targets, desc="Syncing", unit="doc", disable=not progress):
            try:
                self.process(document_number, kind, options, report, batcher)
            except (sqlite3.Error, OSError) as e:
                logger.exception(f"[{document_number}] Failed to process")
                report.error(f"Failed to process {document_number}: {e}", document_number=document_number)

        # index any leftover docs
        self._record_index_errors(batcher.flush(), report)
        report.searchable = batcher.indexed

        report.finish(options.article_types, public_inspection=kind is DocumentKind.PUBLIC_INSPECTION)
        return report

    def process(
        self,
        document_number: str,
        kind: DocumentKind,
        options: RunOptions,
        report: RunReport,
        batcher: IndexBatcher,
    ) -> None:
        """Fetch, store, extract and queue for indexing a single document."""
        logger.debug(f"[{kind.value}][{document_number}] Fetching article...")

        raw = self.client.fetch_details(kind, document_number, report, cache=options.cache)
        if raw is None:
            return

        try:
            details = details_from_json(kind, raw)
            regulation = reconcile(document_number, self.database.get_regulation(document_number), kind, details)
        except MetadataError as e:
            report.warning(
                f"Unexpected metadata for {document_number}, skipping article: {e}",
                url=self.client.details_url_for(kind, document_number),
                document_number=document_number,
            )
            return

        if regulation is None:
            return

        logger.info(f"[{document_number}] Saving to database...")
        self.database.save_regulation(regulation)
        report.processed += 1

        if options.skip_text:
            return

        logger.info(f"[{document_number}] Fetching full text...")
        source = source_for(kind, details, self.article_format)
        if source is None:
            report.missing_link(document_number)
            return

        source_format, url = source
        text = self.extractor.text_for(kind, document_number, source_format, url, report, cache=options.cache)
        if text is None:
            # warning will have been filed
            logger.info(f"[{document_number}] No full text to index, moving on...")
            return

        citation_ids = self.citations.extract(
            regulation, text, self.client.citation_cache_for(document_number), options
        )
        if citation_ids is None:
            report.citation_warning(
                f"Failed to extract citations from {document_number}", document_number=document_number
            )
            citation_ids = []

        fields: Dict[str, Any] = regulation.basic_fields()
        fields["text"] = text
        fields["citation_ids"] = citation_ids

        logger.info(f"[{document_number}] Indexing text of regulation...")
        self._record_index_errors(batcher.add(self.index_name, document_number, fields), report)

        # re-save record with citation IDs
        self.database.update_citations(document_number, citation_ids)

    def _record_index_errors(self, errors: List[Dict[str, Any]], report: RunReport) -> None:
        for error in errors:
            report.error(
                f"Failed to index {error['doc_id']} into {error['index_name']}",
                document_number=error["doc_id"],
                error=error["error"],
            )
