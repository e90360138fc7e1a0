"""Tests for legal citation extraction."""

import json

from regsync.citations import CitationExtractor, find_citations
from regsync.models import Regulation, RunOptions


class TestFindCitations:
    def test_us_code(self):
        assert find_citations("authority of 42 U.S.C. 7401 et seq.") == ["usc/42/7401"]

    def test_us_code_with_section_sign(self):
        assert find_citations("under 5 U.S.C. § 553") == ["usc/5/553"]

    def test_cfr_part(self):
        assert find_citations("amending 40 CFR part 52") == ["cfr/40/52"]

    def test_cfr_section(self):
        assert find_citations("see 40 CFR 52.21(b)") == ["cfr/40/52"]

    def test_public_law(self):
        assert find_citations("Pub. L. 111-148 and Public Law 104-13") == ["law/public/111/148", "law/public/104/13"]

    def test_order_of_appearance_without_duplicates(self):
        text = "40 CFR part 52, 42 U.S.C. 7410, 40 CFR 52.1870 and 42 U.S.C. 7410 again"
        assert find_citations(text) == ["cfr/40/52", "usc/42/7410"]

    def test_no_citations(self):
        assert find_citations("Notice of public meeting.") == []


class TestCitationExtractor:
    regulation = Regulation(document_number="2013-05432", document_type="article", article_type="notice")

    def test_writes_cache(self, tmp_path):
        cache = tmp_path / "2013" / "2013-05432" / "citation.json"
        ids = CitationExtractor().extract(self.regulation, "see 42 U.S.C. 7401", cache, RunOptions())
        assert ids == ["usc/42/7401"]
        assert json.loads(cache.read_text(encoding="utf-8")) == {
            "document_number": "2013-05432",
            "citation_ids": ["usc/42/7401"],
        }

    def test_reuses_cache_when_enabled(self, tmp_path):
        cache = tmp_path / "citation.json"
        cache.write_text(json.dumps({"document_number": "2013-05432", "citation_ids": ["cfr/1/1"]}))
        ids = CitationExtractor().extract(self.regulation, "see 42 U.S.C. 7401", cache, RunOptions(cache=True))
        assert ids == ["cfr/1/1"]

    def test_ignores_cache_when_disabled(self, tmp_path):
        cache = tmp_path / "citation.json"
        cache.write_text(json.dumps({"document_number": "2013-05432", "citation_ids": ["cfr/1/1"]}))
        ids = CitationExtractor().extract(self.regulation, "see 42 U.S.C. 7401", cache, RunOptions())
        assert ids == ["usc/42/7401"]

    def test_corrupt_cache_returns_none(self, tmp_path):
        cache = tmp_path / "citation.json"
        cache.write_text("{not json")
        assert CitationExtractor().extract(self.regulation, "text", cache, RunOptions(cache=True)) is None
