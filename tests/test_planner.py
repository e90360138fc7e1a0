"""Tests for window planning and target resolution."""

from datetime import date
from unittest.mock import MagicMock

import pytest
from regsync.models import RunOptions
from regsync.planner import WindowPlanner, dedupe, months_for, recent_window, weekly_windows
from regsync.report import RunReport


@pytest.fixture
def client():
    """Registry client whose searches return one number per window."""
    mock = MagicMock()
    mock.search_articles.side_effect = lambda article_type, beginning, ending, report: [
        f"{article_type}-{beginning.isoformat()}"
    ]
    mock.current_public_inspection.return_value = ["2013-06001", "2013-06002"]
    return mock


class TestMonthsFor:
    def test_single_month(self):
        assert months_for(3) == [3]

    def test_whole_year_newest_first(self):
        assert months_for(None) == list(range(12, 0, -1))


class TestWeeklyWindows:
    def test_five_windows_from_first_of_month(self):
        windows = weekly_windows(2013, 3)
        assert len(windows) == 5
        for k, (beginning, ending) in enumerate(windows, 1):
            assert beginning == date(2013, 3, 7 * (k - 1) + 1)
            assert (ending - beginning).days == 6

    def test_short_month_runs_into_next(self):
        beginning, ending = weekly_windows(2013, 2)[-1]
        assert beginning == date(2013, 3, 1)
        assert ending == date(2013, 3, 7)

    def test_december_crosses_year(self):
        beginning, ending = weekly_windows(2012, 12)[-1]
        assert beginning == date(2012, 12, 29)
        assert ending == date(2013, 1, 4)


class TestRecentWindow:
    def test_default_seven_days(self):
        assert recent_window(7, date(2013, 3, 14)) == (date(2013, 3, 7), date(2013, 3, 14))

    def test_custom_days(self):
        assert recent_window(1, date(2013, 3, 1)) == (date(2013, 2, 28), date(2013, 3, 1))


class TestDedupe:
    def test_keeps_first_seen_order(self):
        assert dedupe(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    def test_empty(self):
        assert dedupe([]) == []


class TestTargets:
    def test_whole_year_issues_sixty_searches_per_type(self, client):
        planner = WindowPlanner(client)
        planner.targets(RunOptions(year=2013, article_type="rule"), RunReport())
        assert client.search_articles.call_count == 60
        assert all(call.args[0] == "RULE" for call in client.search_articles.call_args_list)

    def test_whole_year_every_type(self, client):
        WindowPlanner(client).targets(RunOptions(year=2013), RunReport())
        assert client.search_articles.call_count == 180

    def test_year_and_month_issues_five_searches(self, client):
        WindowPlanner(client).targets(RunOptions(year=2013, month=2, article_type="notice"), RunReport())
        starts = [call.args[1] for call in client.search_articles.call_args_list]
        assert starts == [date(2013, 2, d) for d in (1, 8, 15, 22)] + [date(2013, 3, 1)]

    def test_default_window(self, client):
        targets = WindowPlanner(client).targets(
            RunOptions(article_type="prorule"), RunReport(), today=date(2013, 3, 14)
        )
        client.search_articles.assert_called_once()
        args = client.search_articles.call_args.args
        assert args[:3] == ("PRORULE", date(2013, 3, 7), date(2013, 3, 14))
        assert targets == ["PRORULE-2013-03-07"]

    def test_types_in_default_order(self, client):
        WindowPlanner(client).targets(RunOptions(), RunReport(), today=date(2013, 3, 14))
        types = [call.args[0] for call in client.search_articles.call_args_list]
        assert types == ["PRORULE", "RULE", "NOTICE"]

    def test_month_without_year_uses_default_window(self, client):
        WindowPlanner(client).targets(RunOptions(month=5, article_type="rule"), RunReport(), today=date(2013, 3, 14))
        assert client.search_articles.call_count == 1

    def test_duplicates_removed_across_windows(self, client):
        client.search_articles.side_effect = [["A", "B"], ["B", "C"], ["C"], [], ["D", "A"]]
        targets = WindowPlanner(client).targets(RunOptions(year=2013, month=1, article_type="rule"), RunReport())
        assert targets == ["A", "B", "C", "D"]

    def test_limit_applied_after_dedupe(self, client):
        client.search_articles.side_effect = [["A", "A", "B"], ["B", "C"], ["D"], [], []]
        targets = WindowPlanner(client).targets(
            RunOptions(year=2013, month=1, article_type="rule", limit=3), RunReport()
        )
        assert targets == ["A", "B", "C"]

    def test_document_number_wins(self, client):
        targets = WindowPlanner(client).targets(
            RunOptions(document_number="2013-05432", year=2013, public_inspection=True), RunReport()
        )
        assert targets == ["2013-05432"]
        client.search_articles.assert_not_called()
        client.current_public_inspection.assert_not_called()

    def test_public_inspection_listing(self, client):
        targets = WindowPlanner(client).targets(
            RunOptions(public_inspection=True, article_type="notice"), RunReport()
        )
        assert targets == ["2013-06001", "2013-06002"]
        client.search_articles.assert_not_called()
