"""Adapters over language servers, search indexes and files."""

from .base import (
    Diagnostic,
    DocumentSymbol,
    FileReader,
    Hover,
    IndexedFile,
    LanguageServer,
    Position,
    Range,
    SearchIndex,
    SearchMatch,
    SearchResult,
)
from .files import LocalFileReader
from .workspace import WorkspaceIndex, WorkspaceLanguageServer

__all__ = [
    "Diagnostic",
    "DocumentSymbol",
    "FileReader",
    "Hover",
    "IndexedFile",
    "LanguageServer",
    "LocalFileReader",
    "Position",
    "Range",
    "SearchIndex",
    "SearchMatch",
    "SearchResult",
    "WorkspaceIndex",
    "WorkspaceLanguageServer",
]
