"""
Batched writes into the search index.

Entries accumulate until the batch size is reached and are flushed then; a
final flush at the end of the run writes whatever is left over.
"""

import logging
from typing import Any, Dict, List, Optional

from .config import config
from .search import IndexItem, SearchIndex

logger = logging.getLogger(__name__)


class IndexBatcher:
    """Accumulates index entries and writes them in batches."""

    def __init__(self, index: SearchIndex, batch_size: Optional[int] = None) -> None:
        self.index = index
        self.batch_size = max(1, int(batch_size or config.get("index.batch_size", 100)))
        self.pending: List[IndexItem] = []
        self.indexed = 0
        self.failed: List[Dict[str, Any]] = []

    def add(self, index_name: str, doc_id: str, fields: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Queue one entry, flushing if the batch is full.

        Returns:
            Errors from the flush this call triggered, if any.
        """
        self.pending.append((index_name, doc_id, fields))
        if len(self.pending) >= self.batch_size:
            return self.flush()
        return []

    def flush(self) -> List[Dict[str, Any]]:
        """
        Write all pending entries.

        Returns:
            One error entry per document that could not be written.
        """
        if not self.pending:
            return []

        batch, self.pending = self.pending, []
        logger.debug(f"Flushing {len(batch)} documents to the search index")
        success, errors = self.index.bulk_upsert(batch)
        self.indexed += success
        self.failed.extend(errors)
        return errors
