"""Base types and interfaces for upstream context providers.

The engine never talks to a language server process or a search backend
directly. It consumes the adapters defined here, which mirror the shapes
those collaborators return (LSP-style zero-based positions, search matches
scored with the "lower is closer" convention).
"""

import json
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

SearchType = Literal["all", "symbols", "content", "files"]
MatchType = Literal["content", "symbol", "filename"]

# Notifications a language server may push to subscribers
DIAGNOSTICS_CHANGED = "diagnostics_changed"
SYMBOLS_CHANGED = "symbols_changed"


@dataclass(frozen=True)
class Position:
    """Zero-based line/character position."""

    line: int
    character: int


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position


@dataclass
class DocumentSymbol:
    """A symbol declared in a document."""

    name: str
    kind: str | int  # LSP SymbolKind number or a descriptive name
    range: Range
    detail: str | None = None


@dataclass
class Diagnostic:
    """A diagnostic reported for a document."""

    range: Range
    message: str
    severity: int | str | None = None  # LSP severity 1-4 when numeric
    source: str | None = None


@dataclass
class Hover:
    """Hover information as returned by a language server.

    ``contents`` may be a plain string, a markup dict (``{"kind", "value"}``)
    or a list mixing both.
    """

    contents: str | dict[str, Any] | list[str | dict[str, Any]]

    @property
    def text(self) -> str:
        """Flatten hover contents into plain text."""
        if isinstance(self.contents, str):
            return self.contents
        if isinstance(self.contents, list):
            return "\n".join(
                part if isinstance(part, str) else str(part.get("value", ""))
                for part in self.contents
            )
        if "value" in self.contents:
            return str(self.contents["value"])
        return json.dumps(self.contents)


@dataclass(frozen=True)
class IndexedFile:
    path: str
    language: str


@dataclass
class SearchMatch:
    """A single match inside a file.

    ``score`` follows the index's distance convention: 0.0 is an exact
    match and larger values are weaker matches.
    """

    type: MatchType
    snippet: str
    score: float = 0.0
    line: int | None = None  # one-based
    column: int | None = None


@dataclass
class SearchResult:
    """Matches grouped by file."""

    file: IndexedFile
    matches: list[SearchMatch] = field(default_factory=list)


EventCallback = Callable[[str, list[Any]], None]


class LanguageServer(ABC):
    """Abstract language-server capability provider."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[EventCallback]] = {}

    @abstractmethod
    async def get_document_symbols(self, path: str) -> list[DocumentSymbol] | None:
        pass

    @abstractmethod
    async def get_diagnostics(self, path: str) -> list[Diagnostic] | None:
        pass

    @abstractmethod
    async def get_hover(self, path: str, position: Position) -> Hover | None:
        pass

    @abstractmethod
    async def get_completions(self, path: str, position: Position) -> list[str]:
        pass

    def subscribe(self, event: str, callback: EventCallback) -> None:
        """Register a callback for ``diagnostics_changed``/``symbols_changed``."""
        self._subscribers.setdefault(event, []).append(callback)

    def notify(self, event: str, path: str, data: list[Any]) -> None:
        """Push a change notification to subscribers."""
        for callback in self._subscribers.get(event, []):
            callback(path, data)


class SearchIndex(ABC):
    """Abstract workspace search provider."""

    @abstractmethod
    async def search(
        self,
        query: str,
        type: SearchType = "all",
        max_results: int = 50,
        language: str | None = None,
    ) -> list[SearchResult]:
        pass


class FileReader(ABC):
    """Abstract source of file contents."""

    @abstractmethod
    async def read_text(self, path: str) -> str:
        """Read a file as text.

        Raises:
            ProviderError: If the file cannot be read
        """
        pass
