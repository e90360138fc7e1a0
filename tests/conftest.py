"""Shared test fixtures for the RegulationsSync test suite."""

from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from regsync.config import Config
from regsync.database import Database
from regsync.downloader import write
from regsync.registry import RegistryClient
from regsync.search import SearchIndex

BASE_URL = "https://fr.example.gov/api/v1"


class FakeDownloader:
    """Stands in for DocumentDownloader: serves canned bodies by URL, records every call."""

    def __init__(self, responses: Optional[Dict[str, Any]] = None) -> None:
        self.responses: Dict[str, Any] = dict(responses or {})
        self.calls: List[Dict[str, Any]] = []

    def download(self, url: str, destination: Optional[Path] = None, as_json: bool = False, cache: bool = False):
        self.calls.append({"url": url, "destination": destination, "as_json": as_json, "cache": cache})
        if url not in self.responses:
            return None
        body = self.responses[url]
        if destination is not None and isinstance(body, str):
            write(destination, body)
        return body

    def urls(self) -> List[str]:
        return [call["url"] for call in self.calls]


def article_details(number: str, doc_type: str = "Rule", **overrides: Any) -> Dict[str, Any]:
    """A detail response for a published article."""
    details = {
        "document_number": number,
        "type": doc_type,
        "title": f"Air Quality Plans {number}",
        "agencies": [
            {"name": "Environmental Protection Agency", "id": 145},
            {"raw_name": "DEPARTMENT OF ENERGY", "id": 136},
        ],
        "publication_date": "2013-03-14",
        "html_url": f"https://www.federalregister.gov/articles/{number}",
        "pdf_url": f"https://www.gpo.gov/fdsys/pkg/{number}.pdf",
        "docket_ids": ["EPA-R05-OAR-2012-0123"],
        "abstract": "EPA is approving a state implementation plan revision.",
        "effective_on": "2013-04-15",
        "regulation_id_numbers": ["2060-AQ01"],
        "comments_close_on": None,
        "body_html_url": f"{BASE_URL}/articles/{number}/body.html",
        "full_text_xml_url": f"{BASE_URL}/articles/{number}/full_text.xml",
    }
    details.update(overrides)
    return details


def public_inspection_details(number: str, doc_type: str = "Rule", **overrides: Any) -> Dict[str, Any]:
    """A detail response for a public inspection document."""
    details = {
        "document_number": number,
        "type": doc_type,
        "title": "",
        "toc_subject": "Air Quality Plans:",
        "toc_doc": "Ohio",
        "agencies": [{"name": "Environmental Protection Agency", "id": 145}],
        "publication_date": "2013-03-14",
        "html_url": f"https://www.federalregister.gov/public-inspection/{number}",
        "pdf_url": f"https://public-inspection.federalregister.gov/{number}.pdf",
        "docket_numbers": ["EPA-R05-OAR-2012-0123"],
        "filed_at": "2013-03-13T08:45:00-04:00",
        "raw_text_url": f"{BASE_URL}/public-inspection-documents/{number}/raw.txt",
    }
    details.update(overrides)
    return details


@pytest.fixture
def fresh_config(tmp_path, monkeypatch):
    """Create a Config instance with reset singleton state pointed at a temp directory."""
    Config._instance = None
    monkeypatch.setenv("REGSYNC_BASE_DIR", str(tmp_path))
    cfg = Config()
    yield cfg
    Config._instance = None


@pytest.fixture
def tmp_db(tmp_path):
    """Create a Database instance using a temp-dir SQLite file."""
    return Database(db_path=tmp_path / "test.db")


@pytest.fixture
def tmp_index(tmp_path):
    """Create a SearchIndex sharing a temp-dir SQLite file."""
    return SearchIndex(db_path=tmp_path / "test.db")


@pytest.fixture
def fake_downloader():
    return FakeDownloader()


@pytest.fixture
def client(fake_downloader, tmp_path):
    """RegistryClient backed by the fake downloader and a temp data dir."""
    return RegistryClient(downloader=fake_downloader, base_url=BASE_URL, data_dir=tmp_path / "data")
