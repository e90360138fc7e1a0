"""Shared service accessors for core RegulationsSync components.

Provides a single place to retrieve the configured services. Each one is
created on first use so importing a module never touches the filesystem.
"""

from functools import lru_cache

from .config import config


def get_config():
    """Return application configuration instance."""
    return config


@lru_cache(maxsize=None)
def get_db():
    """Return regulation store instance."""
    from .database import Database

    return Database()


@lru_cache(maxsize=None)
def get_search_index():
    """Return search index instance (shares the regulation database file)."""
    from .search import SearchIndex

    return SearchIndex(get_db().db_path)


@lru_cache(maxsize=None)
def get_downloader():
    """Return downloader service instance."""
    from .downloader import DocumentDownloader

    return DocumentDownloader()


@lru_cache(maxsize=None)
def get_client():
    """Return Federal Register client instance."""
    from .registry import RegistryClient

    return RegistryClient(get_downloader())


def get_sync():
    """Return a sync pipeline wired to the shared services."""
    from .pipeline import RegulationsSync

    return RegulationsSync(client=get_client(), database=get_db(), index=get_search_index())
