"""Tests for the fuzzy matching primitives."""

from fuzzcomp.core.completion.fuzzy import fuzzy_match, get_char_codes, match_score


class TestFuzzyMatch:
    def test_subsequence_matches(self) -> None:
        assert fuzzy_match(get_char_codes("fb"), "foobar") is True

    def test_order_matters(self) -> None:
        assert fuzzy_match(get_char_codes("bf"), "foobar") is False

    def test_empty_input_matches(self) -> None:
        assert fuzzy_match(get_char_codes(""), "anything") is True

    def test_longer_than_text(self) -> None:
        assert fuzzy_match(get_char_codes("foobar"), "foo") is False

    def test_lower_case_matches_upper(self) -> None:
        assert fuzzy_match(get_char_codes("gcs"), "getCharCodes") is True

    def test_upper_case_is_strict(self) -> None:
        assert fuzzy_match(get_char_codes("F"), "foo") is False
        assert fuzzy_match(get_char_codes("F"), "Foo") is True


class TestMatchScore:
    def test_no_match_scores_zero(self) -> None:
        assert match_score("foo", "z") == 0.0

    def test_empty_input_scores_zero(self) -> None:
        assert match_score("foo", "") == 0.0

    def test_prefix_beats_scattered(self) -> None:
        assert match_score("format", "fo") > match_score("fxo", "fo")

    def test_word_boundary_beats_middle(self) -> None:
        assert match_score("get_value", "gv") > match_score("gavel", "gv")

    def test_shorter_candidate_ranks_higher(self) -> None:
        assert match_score("foo", "fo") > match_score("foobarbaz", "fo")

    def test_exact_case_bonus(self) -> None:
        assert match_score("Foo", "F") > match_score("Foo", "f")

    def test_bounded(self) -> None:
        for word, input in (("f", "f"), ("foo", "foo"), ("getCharCodes", "gcc")):
            assert 0.0 < match_score(word, input) <= 1.0
