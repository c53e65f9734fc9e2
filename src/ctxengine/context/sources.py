"""Candidate sources that gather raw context items for a request."""

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from ctxengine.config import ContextEngineSettings
from ctxengine.config import settings as default_settings
from ctxengine.languages import detect_language
from ctxengine.providers.base import (
    FileReader,
    LanguageServer,
    Position,
    SearchIndex,
)
from ctxengine.providers.files import read_snippet, span_snippet

from .history import SessionHistory
from .models import (
    ContextItem,
    ContextKind,
    ContextRequest,
    DocumentationMetadata,
    ErrorMetadata,
    ItemPosition,
    SymbolMetadata,
)

logger = structlog.get_logger()

# Documentation lookups probe the top of the file rather than a
# query-derived position.
HOVER_PROBE_POSITION = Position(line=0, character=0)


class CandidateCollector:
    """Run every enabled source and concatenate their candidates.

    A source that raises contributes no items; the failure is logged and the
    remaining sources still run.
    """

    def __init__(
        self,
        language_server: LanguageServer,
        search_index: SearchIndex,
        file_reader: FileReader,
        history: SessionHistory,
        settings: ContextEngineSettings | None = None,
    ) -> None:
        self._language_server = language_server
        self._search_index = search_index
        self._file_reader = file_reader
        self._history = history
        self._settings = settings or default_settings
        self._logger = logger.bind(component="candidate_collector")

    def enabled_sources(
        self, request: ContextRequest, max_items: int
    ) -> list[tuple[str, Callable[[], Awaitable[list[ContextItem]]]]]:
        """Sources that apply to ``request``, in collection order."""
        sources: list[tuple[str, Callable[[], Awaitable[list[ContextItem]]]]] = []
        current_file = request.current_file

        if current_file and request.includes(ContextKind.FILE):
            sources.append(
                ("file", lambda: self.file_context(current_file, request))
            )
        if request.includes(ContextKind.SYMBOL):
            sources.append(
                ("symbol_search", lambda: self.symbol_search_context(request.query))
            )
        if request.workspace_scope:
            sources.append(
                (
                    "workspace_search",
                    lambda: self.workspace_search_context(request.query, max_items),
                )
            )
        if current_file and request.includes(ContextKind.ERROR):
            sources.append(("errors", lambda: self.error_context(current_file)))
        if request.includes(ContextKind.DOCUMENTATION):
            sources.append(
                (
                    "documentation",
                    lambda: self.documentation_context(request.query, current_file),
                )
            )
        sources.append(("history", lambda: self.historical_context(request.query)))

        return sources

    async def collect(
        self, request: ContextRequest, max_items: int
    ) -> list[ContextItem]:
        sources = self.enabled_sources(request, max_items)
        names = [name for name, _ in sources]

        if self._settings.concurrent_sources:
            results = await asyncio.gather(
                *(run() for _, run in sources), return_exceptions=True
            )
        else:
            results = []
            for _, run in sources:
                try:
                    results.append(await run())
                except Exception as e:
                    results.append(e)

        candidates: list[ContextItem] = []
        for name, result in zip(names, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                self._logger.warning(
                    "context_source_failed",
                    source=name,
                    error=str(result),
                    error_type=type(result).__name__,
                )
                continue
            self._logger.debug(
                "context_source_collected", source=name, count=len(result)
            )
            candidates.extend(result)

        return candidates

    async def file_context(
        self, path: str, request: ContextRequest
    ) -> list[ContextItem]:
        """Whole file, the selection inside it, and its declared symbols."""
        scoring = self._settings.scoring
        limits = self._settings.sources
        selection = request.current_selection
        language = detect_language(path)

        symbols = await self._language_server.get_document_symbols(path)
        content = await self._file_reader.read_text(path)

        items = [
            ContextItem(
                id=f"file-{path}",
                kind=ContextKind.FILE,
                source_path=path,
                text=content[: limits.file_content_max_chars],
                language=language,
                relevance_score=(
                    scoring.file_with_selection_score
                    if selection
                    else scoring.file_score
                ),
                metadata=SymbolMetadata(symbol_name="current-file"),
            )
        ]

        if selection:
            lines = content.split("\n")
            selected = "\n".join(lines[selection.start_line - 1 : selection.end_line])
            items.append(
                ContextItem(
                    id=f"selection-{path}-{selection.start_line}",
                    kind=ContextKind.SELECTION,
                    source_path=path,
                    text=selected or selection.text,
                    language=language,
                    relevance_score=scoring.selection_score,
                    position=ItemPosition(
                        line=selection.start_line,
                        column=selection.start_column,
                        end_line=selection.end_line,
                        end_column=selection.end_column,
                    ),
                    metadata=SymbolMetadata(symbol_name="current-selection"),
                )
            )

        for symbol in (symbols or [])[: limits.file_symbol_limit]:
            start, end = symbol.range.start, symbol.range.end
            items.append(
                ContextItem(
                    id=f"symbol-{path}-{symbol.name}-{start.line + 1}",
                    kind=ContextKind.SYMBOL,
                    source_path=path,
                    # two trailing lines give a little of the body
                    text=span_snippet(content, start.line, end.line + 2),
                    language=language,
                    relevance_score=scoring.file_symbol_score,
                    position=ItemPosition(
                        line=start.line + 1,
                        column=start.character,
                        end_line=end.line + 1,
                        end_column=end.character,
                    ),
                    metadata=SymbolMetadata(
                        symbol_name=symbol.name,
                        symbol_kind=str(symbol.kind),
                    ),
                )
            )

        return items

    async def symbol_search_context(self, query: str) -> list[ContextItem]:
        scoring = self._settings.scoring
        limits = self._settings.sources

        results = await self._search_index.search(
            query, type="symbols", max_results=limits.symbol_search_limit
        )

        items = []
        for result in results:
            for match in result.matches:
                if match.type != "symbol":
                    continue
                text = await read_snippet(
                    self._file_reader,
                    result.file.path,
                    match.line,
                    limits.search_context_lines,
                    limits.default_snippet_lines,
                )
                items.append(
                    ContextItem(
                        id=f"symbol-search-{result.file.path}-{match.line}",
                        kind=ContextKind.SYMBOL,
                        source_path=result.file.path,
                        text=text,
                        language=result.file.language,
                        relevance_score=(
                            scoring.symbol_search_base
                            + (1 - (match.score or 0)) * scoring.symbol_search_span
                        ),
                        position=_match_position(match.line, match.column),
                        metadata=SymbolMetadata(
                            symbol_name=match.snippet,
                            symbol_kind="symbol",
                        ),
                    )
                )

        return items

    async def workspace_search_context(
        self, query: str, max_items: int
    ) -> list[ContextItem]:
        scoring = self._settings.scoring
        limits = self._settings.sources

        results = await self._search_index.search(
            query, type="all", max_results=max_items
        )

        items = []
        for result in results:
            for match in result.matches:
                is_symbol = match.type == "symbol"
                text = await read_snippet(
                    self._file_reader,
                    result.file.path,
                    match.line,
                    limits.search_context_lines,
                    limits.default_snippet_lines,
                )
                items.append(
                    ContextItem(
                        id=f"search-{result.file.path}-{match.line or 0}",
                        kind=ContextKind.SYMBOL if is_symbol else ContextKind.FILE,
                        source_path=result.file.path,
                        text=text,
                        language=result.file.language,
                        relevance_score=(
                            scoring.workspace_search_base
                            + (1 - (match.score or 0)) * scoring.workspace_search_span
                        ),
                        position=_match_position(match.line, match.column),
                        metadata=SymbolMetadata(
                            symbol_name=match.snippet if is_symbol else None,
                            symbol_kind=match.type,
                        ),
                    )
                )

        return items

    async def error_context(self, path: str) -> list[ContextItem]:
        scoring = self._settings.scoring
        limits = self._settings.sources
        language = detect_language(path)

        diagnostics = await self._language_server.get_diagnostics(path)

        items = []
        for diagnostic in (diagnostics or [])[: limits.diagnostic_limit]:
            start, end = diagnostic.range.start, diagnostic.range.end
            text = await read_snippet(
                self._file_reader,
                path,
                start.line + 1,
                limits.diagnostic_context_lines,
                limits.default_snippet_lines,
            )
            items.append(
                ContextItem(
                    id=f"error-{path}-{start.line}",
                    kind=ContextKind.ERROR,
                    source_path=path,
                    text=text,
                    language=language,
                    relevance_score=scoring.error_score,
                    position=ItemPosition(
                        line=start.line + 1,
                        column=start.character,
                        end_line=end.line + 1,
                        end_column=end.character,
                    ),
                    metadata=ErrorMetadata(
                        error_type=(
                            str(diagnostic.severity)
                            if diagnostic.severity is not None
                            else "unknown"
                        ),
                        message=diagnostic.message,
                    ),
                )
            )

        return items

    async def documentation_context(
        self, query: str, path: str | None
    ) -> list[ContextItem]:
        if not path:
            return []

        hover = await self._language_server.get_hover(path, HOVER_PROBE_POSITION)
        if hover is None:
            return []

        text = hover.text
        return [
            ContextItem(
                id=f"docs-{path}-{query}",
                kind=ContextKind.DOCUMENTATION,
                source_path=path,
                text=text,
                language="markdown",
                relevance_score=self._settings.scoring.documentation_score,
                metadata=DocumentationMetadata(symbol_name=query, documentation=text),
            )
        ]

    async def historical_context(self, query: str) -> list[ContextItem]:
        history = self._settings.history
        return self._history.related_items(
            query,
            threshold=history.similarity_threshold,
            query_limit=history.similar_query_limit,
            items_per_query=history.items_per_similar_query,
            decay=self._settings.scoring.historical_decay,
        )


def _match_position(line: int | None, column: int | None) -> ItemPosition | None:
    if line is None:
        return None
    return ItemPosition(line=line, column=column)
