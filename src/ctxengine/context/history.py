"""Bounded session history of past queries and surfaced items."""

import asyncio
import dataclasses
from collections.abc import Sequence

import structlog

from ctxengine.similarity import string_similarity

from .models import ContextItem

logger = structlog.get_logger()

HISTORICAL_PREFIX = "historical-"


class SessionHistory:
    """Rolling, most-recent-first log of queries and surfaced items.

    Reads work on the current lists; every mutation goes through an
    ``asyncio.Lock`` so concurrent requests fold their results in one at a
    time.
    """

    def __init__(self, max_queries: int = 100, max_items: int = 500) -> None:
        self.max_queries = max_queries
        self.max_items = max_items
        self._queries: list[str] = []
        self._items: list[ContextItem] = []
        self._lock = asyncio.Lock()

    @property
    def queries(self) -> tuple[str, ...]:
        return tuple(self._queries)

    @property
    def items(self) -> tuple[ContextItem, ...]:
        return tuple(self._items)

    @property
    def size(self) -> int:
        return len(self._queries)

    @property
    def last_query(self) -> str | None:
        return self._queries[0] if self._queries else None

    async def record(self, query: str, items: Sequence[ContextItem]) -> None:
        """Prepend a finished request, evicting the oldest entries past the caps."""
        async with self._lock:
            self._queries = [query, *self._queries][: self.max_queries]
            self._items = [*items, *self._items][: self.max_items]

    async def reset(self) -> None:
        async with self._lock:
            self._queries = []
            self._items = []

    def similar_queries(self, query: str, threshold: float) -> list[str]:
        """Past queries whose similarity to ``query`` exceeds ``threshold``."""
        needle = query.lower()
        return [
            previous
            for previous in self._queries
            if string_similarity(needle, previous.lower()) > threshold
        ]

    def related_items(
        self,
        query: str,
        threshold: float = 0.3,
        query_limit: int = 3,
        items_per_query: int = 2,
        decay: float = 0.5,
    ) -> list[ContextItem]:
        """Resurface items from similar past queries at a decayed score.

        Repeated past queries count once and each item is emitted at most
        once, so ids stay unique within the result.
        """
        resurfaced: list[ContextItem] = []
        emitted: set[str] = set()

        similar = list(dict.fromkeys(self.similar_queries(query, threshold)))
        for previous in similar[:query_limit]:
            taken = 0
            for item in self._items:
                if taken >= items_per_query:
                    break
                historical_id = f"{HISTORICAL_PREFIX}{item.id}"
                if historical_id in emitted or not item.mentions(previous):
                    continue
                emitted.add(historical_id)
                taken += 1
                resurfaced.append(
                    dataclasses.replace(
                        item,
                        id=historical_id,
                        relevance_score=item.relevance_score * decay,
                    )
                )

        if resurfaced:
            logger.debug(
                "history_items_resurfaced",
                query=query,
                count=len(resurfaced),
            )
        return resurfaced
