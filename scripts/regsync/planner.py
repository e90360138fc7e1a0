"""
Target planning: which document numbers a run has to process.

The registry's search endpoint silently caps results at 1000 regardless of
pagination, so whole months are swept in 7-day windows. Notices alone can pass
1000 in a single month.
"""

import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional, Tuple

from .models import DocumentKind, RunOptions
from .registry import RegistryClient
from .report import RunReport

logger = logging.getLogger(__name__)

WINDOWS_PER_MONTH = 5
WINDOW_DAYS = 7

Window = Tuple[date, date]


def months_for(month: Optional[int]) -> List[int]:
    """The requested month, or every month of the year newest first."""
    if month:
        return [int(month)]
    return list(range(12, 0, -1))


def weekly_windows(year: int, month: int) -> List[Window]:
    """
    Five inclusive 7-day windows starting on the 1st of the month.

    Windows cover days 1-7, 8-14, 15-21, 22-28 and 29-35, so short months run
    into the next month's first days. Overlap is deduplicated later.
    """
    windows = []
    beginning = date(year, month, 1)
    for _ in range(WINDOWS_PER_MONTH):
        ending = beginning + timedelta(days=WINDOW_DAYS - 1)
        windows.append((beginning, ending))
        beginning += timedelta(days=WINDOW_DAYS)
    return windows


def recent_window(days: int = 7, today: Optional[date] = None) -> Window:
    """The last ``days`` days ending today. Only the date matters, not the time of day."""
    ending = today or date.today()
    return ending - timedelta(days=days), ending


def dedupe(numbers: Iterable[str]) -> List[str]:
    """Remove duplicates, keeping first-seen order."""
    seen = set()
    unique = []
    for number in numbers:
        if number not in seen:
            seen.add(number)
            unique.append(number)
    return unique


class WindowPlanner:
    """Resolves run options into an ordered list of document numbers."""

    def __init__(self, client: RegistryClient) -> None:
        self.client = client

    def windows_for(self, options: RunOptions, today: Optional[date] = None) -> List[Window]:
        if options.year:
            windows = []
            for month in months_for(options.month):
                windows.extend(weekly_windows(int(options.year), month))
            return windows

        days = int(options.days) if options.days else 7
        return [recent_window(days, today)]

    def targets(self, options: RunOptions, report: RunReport, today: Optional[date] = None) -> List[str]:
        """
        Document numbers to process for a run.

        A single document number wins over every other option. Otherwise the
        current public inspection listing or the windowed article search is used.
        """
        if options.document_number:
            targets = [options.document_number]

        elif options.document_kind is DocumentKind.PUBLIC_INSPECTION:
            targets = self.client.current_public_inspection(report)

        else:
            targets = []
            windows = self.windows_for(options, today)
            for article_type in options.article_types:
                for beginning, ending in windows:
                    targets += self.client.search_articles(article_type, beginning, ending, report)

        targets = dedupe(targets)

        if options.limit:
            targets = targets[: int(options.limit)]

        logger.info(f"{len(targets)} documents to process")
        return targets
