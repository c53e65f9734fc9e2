"""Tests for SessionHistory."""

import asyncio

import pytest

from ctxengine.context.history import HISTORICAL_PREFIX, SessionHistory
from ctxengine.context.models import (
    ContextItem,
    ContextKind,
    SymbolMetadata,
)


def make_item(
    item_id: str,
    text: str = "",
    score: float = 0.8,
    symbol_name: str | None = None,
) -> ContextItem:
    return ContextItem(
        id=item_id,
        kind=ContextKind.SYMBOL,
        source_path="src/users.ts",
        text=text,
        language="typescript",
        relevance_score=score,
        metadata=SymbolMetadata(symbol_name=symbol_name) if symbol_name else None,
    )


class TestRecord:
    @pytest.mark.asyncio
    async def test_most_recent_first(self) -> None:
        history = SessionHistory()

        await history.record("first", [make_item("a")])
        await history.record("second", [make_item("b")])

        assert history.queries == ("second", "first")
        assert [i.id for i in history.items] == ["b", "a"]
        assert history.last_query == "second"
        assert history.size == 2

    @pytest.mark.asyncio
    async def test_caps_evict_oldest(self) -> None:
        history = SessionHistory(max_queries=3, max_items=4)

        for n in range(5):
            await history.record(f"q{n}", [make_item(f"{n}-a"), make_item(f"{n}-b")])

        assert history.queries == ("q4", "q3", "q2")
        assert [i.id for i in history.items] == ["4-a", "4-b", "3-a", "3-b"]

    @pytest.mark.asyncio
    async def test_reset(self) -> None:
        history = SessionHistory()
        await history.record("q", [make_item("a")])

        await history.reset()

        assert history.size == 0
        assert history.items == ()
        assert history.last_query is None

    @pytest.mark.asyncio
    async def test_concurrent_records_all_land(self) -> None:
        history = SessionHistory()

        await asyncio.gather(
            *(history.record(f"q{n}", [make_item(str(n))]) for n in range(20))
        )

        assert history.size == 20
        assert len(history.items) == 20


class TestSimilarQueries:
    @pytest.mark.asyncio
    async def test_case_insensitive(self) -> None:
        history = SessionHistory()
        await history.record("FetchUser", [])

        assert history.similar_queries("fetchuser", 0.3) == ["FetchUser"]

    @pytest.mark.asyncio
    async def test_threshold_is_exclusive(self) -> None:
        history = SessionHistory()
        # distance 1 over length 2
        await history.record("ab", [])

        assert history.similar_queries("ax", 0.5) == []
        assert history.similar_queries("ax", 0.49) == ["ab"]


class TestRelatedItems:
    @pytest.mark.asyncio
    async def test_decay_and_prefix(self) -> None:
        history = SessionHistory()
        await history.record(
            "fetchUser",
            [make_item("sym-1", text="async function fetchUser() {}", score=0.9)],
        )

        items = history.related_items("fetchUsr", decay=0.5)

        assert len(items) == 1
        assert items[0].id == f"{HISTORICAL_PREFIX}sym-1"
        assert items[0].relevance_score == pytest.approx(0.45)
        assert items[0].text == "async function fetchUser() {}"

    @pytest.mark.asyncio
    async def test_matches_symbol_name(self) -> None:
        history = SessionHistory()
        await history.record(
            "parse", [make_item("a", text="nothing here", symbol_name="parseConfig")]
        )

        items = history.related_items("parse")

        assert [i.id for i in items] == ["historical-a"]

    @pytest.mark.asyncio
    async def test_limits_per_query_and_queries(self) -> None:
        history = SessionHistory()
        for n in range(5):
            await history.record(
                f"load{n}",
                [make_item(f"{n}-{k}", text=f"load{n} body") for k in range(3)],
            )

        items = history.related_items(
            "load", threshold=0.3, query_limit=3, items_per_query=2
        )

        # most recent three similar queries, two items each
        assert [i.id for i in items] == [
            "historical-4-0",
            "historical-4-1",
            "historical-3-0",
            "historical-3-1",
            "historical-2-0",
            "historical-2-1",
        ]

    @pytest.mark.asyncio
    async def test_repeated_query_resurfaces_items_once(self) -> None:
        history = SessionHistory()
        recorded = [make_item("sym-1", text="fetchUser()", score=0.8)]
        await history.record("fetchUser", recorded)
        await history.record("fetchUser", recorded)

        items = history.related_items("fetchUsr")

        assert [i.id for i in items] == ["historical-sym-1"]

    @pytest.mark.asyncio
    async def test_item_matched_by_two_queries_emitted_once(self) -> None:
        history = SessionHistory()
        await history.record("fetch", [make_item("shared", text="fetchUser()")])
        await history.record(
            "fetchUser",
            [
                make_item("shared", text="fetchUser()"),
                make_item("other", text="fetchUser(id)"),
            ],
        )

        items = history.related_items("fetchUse", items_per_query=2)

        ids = [i.id for i in items]
        assert ids == ["historical-shared", "historical-other"]
        assert len(ids) == len(set(ids))

    @pytest.mark.asyncio
    async def test_unrelated_query_resurfaces_nothing(self) -> None:
        history = SessionHistory()
        await history.record("fetchUser", [make_item("a", text="fetchUser")])

        assert history.related_items("zzzzzzzz") == []

    def test_empty_history(self) -> None:
        assert SessionHistory().related_items("anything") == []
