"""
RegulationsSync - Federal Register ingestion for proposed rules, final rules and notices.

Fetches document metadata and full text from the Federal Register API, normalizes it
into canonical regulation records and makes the text searchable.
"""

__version__ = "0.1.0"
