"""Context engine facade: collect, rank, record and summarize."""

from typing import Any

import structlog

from ctxengine.config import ContextEngineSettings
from ctxengine.config import settings as default_settings
from ctxengine.logging import analysis_context
from ctxengine.providers.base import (
    DIAGNOSTICS_CHANGED,
    SYMBOLS_CHANGED,
    FileReader,
    LanguageServer,
    SearchIndex,
)
from ctxengine.providers.files import LocalFileReader

from .events import (
    ANALYSIS_COMPLETED,
    ANALYSIS_ERROR,
    ANALYSIS_STARTED,
    CONTEXT_CHANGED,
    HISTORY_CLEARED,
    INITIALIZED,
    EventEmitter,
)
from .history import SessionHistory
from .models import (
    ContextAnalysis,
    ContextChange,
    ContextItem,
    ContextRequest,
    EngineStatus,
)
from .ranking import rank_items
from .sources import CandidateCollector
from .summary import related_queries, suggest_actions, summarize

logger = structlog.get_logger()


class ContextEngine(EventEmitter):
    """Gather, rank and summarize context for a chat request.

    One engine owns one ``SessionHistory`` for its lifetime. ``get_context``
    never raises for failures inside the pipeline; it returns a degraded
    analysis instead and emits ``analysis_error``.
    """

    def __init__(
        self,
        language_server: LanguageServer,
        search_index: SearchIndex,
        file_reader: FileReader | None = None,
        settings: ContextEngineSettings | None = None,
        history: SessionHistory | None = None,
    ) -> None:
        super().__init__()
        self._settings = settings or default_settings
        self._language_server = language_server
        self._file_reader = file_reader or LocalFileReader(
            self._settings.workspace_root
        )
        self.history = history or SessionHistory(
            max_queries=self._settings.history.max_queries,
            max_items=self._settings.history.max_items,
        )
        self._collector = CandidateCollector(
            language_server,
            search_index,
            self._file_reader,
            self.history,
            self._settings,
        )
        self._in_flight = 0
        self._logger = logger.bind(component="context_engine")

    def initialize(self) -> None:
        """Forward language-server change notifications as ``context_changed``."""
        self._language_server.subscribe(
            DIAGNOSTICS_CHANGED, self._on_diagnostics_changed
        )
        self._language_server.subscribe(SYMBOLS_CHANGED, self._on_symbols_changed)
        self.emit(INITIALIZED)

    @property
    def is_analyzing(self) -> bool:
        return self._in_flight > 0

    async def get_context(self, request: ContextRequest) -> ContextAnalysis:
        with analysis_context(request.query, request.current_file):
            return await self._run(request)

    async def _run(self, request: ContextRequest) -> ContextAnalysis:
        self._in_flight += 1
        self.emit(ANALYSIS_STARTED, request)
        max_items = request.max_items or self._settings.ranking.default_max_items

        self._logger.info(
            "analysis_started",
            max_items=max_items,
            workspace_scope=request.workspace_scope,
        )

        try:
            candidates = await self._collector.collect(request, max_items)
            items, total_relevance = rank_items(
                candidates,
                max_items,
                deduplicate=self._settings.ranking.deduplicate,
            )
            analysis = self._analyze(items, total_relevance, request.query)

            await self.history.record(
                request.query,
                items[: self._settings.history.items_per_request],
            )
        except Exception as e:
            self._logger.error(
                "analysis_failed",
                error=str(e),
                exc_info=True,
            )
            self.emit(ANALYSIS_ERROR, e)
            return ContextAnalysis.failed(e)
        finally:
            self._in_flight -= 1

        self._logger.info(
            "analysis_completed",
            candidate_count=len(candidates),
            item_count=len(items),
            total_relevance=round(total_relevance, 3),
        )
        self.emit(ANALYSIS_COMPLETED, analysis)
        return analysis

    def get_status(self) -> EngineStatus:
        return EngineStatus(
            is_analyzing=self.is_analyzing,
            history_size=self.history.size,
            last_query=self.history.last_query,
        )

    async def clear_history(self) -> None:
        await self.history.reset()
        self._logger.info("history_cleared")
        self.emit(HISTORY_CLEARED)

    def _analyze(
        self, items: list[ContextItem], total_relevance: float, query: str
    ) -> ContextAnalysis:
        ranking = self._settings.ranking
        return ContextAnalysis(
            items=items,
            total_relevance=total_relevance,
            summary=summarize(items, query),
            suggestions=suggest_actions(
                items,
                narrow_threshold=ranking.narrow_query_threshold,
                broaden_threshold=ranking.broaden_query_threshold,
            ),
            related_queries=related_queries(
                items, query, limit=ranking.max_related_queries
            ),
        )

    def _on_diagnostics_changed(self, path: str, diagnostics: list[Any]) -> None:
        self.emit(
            CONTEXT_CHANGED,
            ContextChange(type="diagnostics", file_path=path, data=diagnostics),
        )

    def _on_symbols_changed(self, path: str, symbols: list[Any]) -> None:
        self.emit(
            CONTEXT_CHANGED,
            ContextChange(type="symbols", file_path=path, data=symbols),
        )
