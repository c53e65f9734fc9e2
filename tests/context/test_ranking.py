"""Tests for ranking and deduplication."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from ctxengine.context.models import ContextItem, ContextKind, ItemPosition
from ctxengine.context.ranking import deduplicate_items, rank_items


def make_item(
    item_id: str,
    score: float,
    path: str = "a.py",
    kind: ContextKind = ContextKind.FILE,
    line: int | None = None,
) -> ContextItem:
    return ContextItem(
        id=item_id,
        kind=kind,
        source_path=path,
        text=item_id,
        language="python",
        relevance_score=score,
        position=ItemPosition(line=line) if line is not None else None,
    )


class TestRankItems:
    def test_sorted_descending(self) -> None:
        items = [make_item("low", 0.2), make_item("high", 0.9), make_item("mid", 0.5)]

        ranked, total = rank_items(items, 10)

        assert [i.id for i in ranked] == ["high", "mid", "low"]
        assert total == pytest.approx(1.6)

    def test_ties_keep_collection_order(self) -> None:
        items = [make_item("first", 0.8), make_item("second", 0.8), make_item("top", 1.0)]

        ranked, _ = rank_items(items, 10)

        assert [i.id for i in ranked] == ["top", "first", "second"]

    def test_bounded_total_only_counts_kept_items(self) -> None:
        items = [make_item(str(n), n / 10) for n in range(10)]

        ranked, total = rank_items(items, 3)

        assert [i.id for i in ranked] == ["9", "8", "7"]
        assert total == pytest.approx(2.4)

    def test_empty(self) -> None:
        assert rank_items([], 5) == ([], 0)

    def test_dedup_runs_before_bounding(self) -> None:
        items = [
            make_item("a", 0.9, line=3),
            make_item("a-dup", 0.8, line=3),
            make_item("b", 0.7, line=4),
        ]

        ranked, _ = rank_items(items, 2, deduplicate=True)

        assert [i.id for i in ranked] == ["a", "b"]

    def test_dedup_off_keeps_duplicates(self) -> None:
        items = [make_item("a", 0.9, line=3), make_item("a-dup", 0.8, line=3)]

        ranked, _ = rank_items(items, 5)

        assert len(ranked) == 2

    @given(
        scores=st.lists(st.floats(min_value=0.0, max_value=1.0), max_size=40),
        max_items=st.integers(min_value=1, max_value=50),
    )
    @settings(max_examples=100)
    def test_bounded_and_ordered(self, scores: list[float], max_items: int) -> None:
        items = [make_item(str(n), score) for n, score in enumerate(scores)]

        ranked, total = rank_items(items, max_items)

        assert len(ranked) == min(len(items), max_items)
        result_scores = [i.relevance_score for i in ranked]
        assert result_scores == sorted(result_scores, reverse=True)
        assert total == pytest.approx(sum(result_scores))
        if len(items) > max_items:
            dropped = sorted(scores, reverse=True)[max_items:]
            assert all(s <= result_scores[-1] for s in dropped)


class TestDeduplicateItems:
    def test_key_includes_kind_and_path(self) -> None:
        items = [
            make_item("file", 0.9, kind=ContextKind.FILE, line=1),
            make_item("symbol", 0.9, kind=ContextKind.SYMBOL, line=1),
            make_item("other-path", 0.9, path="b.py", line=1),
            make_item("dup", 0.5, kind=ContextKind.FILE, line=1),
        ]

        assert [i.id for i in deduplicate_items(items)] == [
            "file",
            "symbol",
            "other-path",
        ]

    def test_items_without_position_share_a_key(self) -> None:
        items = [make_item("one", 0.9), make_item("two", 0.8)]

        assert [i.id for i in deduplicate_items(items)] == ["one"]
