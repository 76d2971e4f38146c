"""Tests for the recency score table."""

import pytest

from fuzzcomp.core.completion.recent import RECENT_SCORE_CAP, RecentScoreTable


class TestRecentScoreTable:
    def test_first_accept(self) -> None:
        table = RecentScoreTable()
        assert table.add("fo", "foo") == pytest.approx(0.01)
        assert table.get("f", "foo") == pytest.approx(0.01)

    def test_keyed_by_first_input_character(self) -> None:
        table = RecentScoreTable()
        table.add("fo", "foo")
        assert table.snapshot() == {"f|foo": pytest.approx(0.01)}
        assert table.get("o", "foo") == 0.0

    def test_monotonic_up_to_cap(self) -> None:
        table = RecentScoreTable()
        previous = 0.0
        for step in range(1, 11):
            score = table.add("f", "foo")
            assert score == pytest.approx(step * 0.01)
            assert score > previous
            previous = score
        assert table.get("f", "foo") == RECENT_SCORE_CAP

    def test_never_exceeds_cap(self) -> None:
        table = RecentScoreTable()
        for _ in range(25):
            table.add("f", "foo")
        assert table.get("f", "foo") == RECENT_SCORE_CAP
        assert len(table) == 1

    def test_empty_input_is_noop(self) -> None:
        table = RecentScoreTable()
        assert table.add("", "foo") is None
        assert table.add(None, "foo") is None
        assert len(table) == 0

    def test_empty_word_is_noop(self) -> None:
        table = RecentScoreTable()
        assert table.add("f", "") is None
        assert len(table) == 0

    def test_get_with_empty_input(self) -> None:
        table = RecentScoreTable()
        table.add("f", "foo")
        assert table.get("", "foo") == 0.0
