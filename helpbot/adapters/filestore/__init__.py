"""File store adapter - Knowledge base pages as HTML files."""

from .models import KnowledgeEntry
from .store import (
    FileDocumentStore,
    identifier_for_url,
    parse_document,
    render_document,
    url_from_identifier,
)

__all__ = [
    "FileDocumentStore",
    "KnowledgeEntry",
    "identifier_for_url",
    "url_from_identifier",
    "parse_document",
    "render_document",
]
