"""
Tests for response normalization, edit distance and similarity scoring
"""
import pytest

from offloading.core.scoring import (
    ScoringResult,
    cap_for_scoring,
    edit_distance,
    fold_case,
    normalize,
    score,
    score_response,
    utf8_safe,
)


class TestNormalize:
    """normalize(): NFKC, locale lowercase, trim, collapse whitespace"""

    def test_trims_and_lowercases(self):
        assert normalize("  Memory ", "en") == "memory"

    def test_collapses_inner_whitespace(self):
        assert normalize("data \t\n  base", "en") == "data base"

    def test_empty_and_none(self):
        assert normalize("", "en") == ""
        assert normalize(None, "en") == ""
        assert normalize("   ", "en") == ""

    def test_nfkc_compatibility_forms(self):
        # fullwidth letters and the fi ligature fold to plain ASCII
        assert normalize("\uff23\uff2f\uff2d\uff30\uff35\uff34\uff25\uff32", "en") == "computer"
        assert normalize("\ufb01le", "en") == "file"

    def test_composed_and_decomposed_are_equal(self):
        assert normalize("Cafe\u0301", "fr") == normalize("Caf\u00e9", "fr")

    @pytest.mark.parametrize("text", ["  Hello   World ", "\u0130STANBUL", "\u01c4emal", "\ufb00  x"])
    @pytest.mark.parametrize("locale", ["en", "tr", "lt", "de"])
    def test_idempotent(self, text, locale):
        once = normalize(text, locale)
        assert normalize(once, locale) == once


class TestFoldCase:
    """Locale-specific lowercase mappings"""

    def test_turkish_dotless_and_dotted_i(self):
        assert fold_case("I", "tr") == "\u0131"
        assert fold_case("\u0130", "tr") == "i"
        assert normalize("\u0130STANBUL", "tr") == "istanbul"
        assert normalize("ISPARTA", "tr") == "\u0131sparta"

    def test_turkish_i_with_combining_dot(self):
        assert fold_case("I\u0307", "tr") == "i"

    def test_azerbaijani_follows_turkish(self):
        assert fold_case("I", "az-AZ") == "\u0131"

    def test_english_capital_i(self):
        assert fold_case("I", "en") == "i"

    def test_region_subtag_is_ignored(self):
        assert fold_case("I", "tr_TR") == fold_case("I", "tr")

    def test_lithuanian_accented_capitals_keep_the_dot(self):
        assert fold_case("\u00cc", "lt") == "i\u0307\u0300"
        assert fold_case("\u00cd", "lt") == "i\u0307\u0301"
        assert fold_case("\u0128", "lt") == "i\u0307\u0303"

    def test_lithuanian_dot_retained_before_accent(self):
        assert fold_case("I\u0300", "lt") == "i\u0307\u0300"
        assert fold_case("I", "lt") == "i"

    def test_missing_locale_uses_default(self):
        assert fold_case("ABC", None) == "abc"


class TestEditDistance:
    """Levenshtein distance over code points"""

    def test_single_deletion(self):
        assert edit_distance("computer", "compter") == 1

    def test_classic_example(self):
        assert edit_distance("kitten", "sitting") == 3

    def test_identity_and_empty(self):
        assert edit_distance("abc", "abc") == 0
        assert edit_distance("", "") == 0
        assert edit_distance("", "abc") == 3
        assert edit_distance("abc", None) == 3

    @pytest.mark.parametrize("a,b", [("flaw", "lawn"), ("algorithm", "algorithem"), ("", "x"), ("ab", "ba")])
    def test_symmetric(self, a, b):
        assert edit_distance(a, b) == edit_distance(b, a)

    def test_triangle_inequality(self):
        a, b, c = "algorithm", "algoritm", "logarithm"
        assert edit_distance(a, c) <= edit_distance(a, b) + edit_distance(b, c)

    def test_bounded_by_longer_length(self):
        assert edit_distance("abc", "xyz12") <= 5

    def test_non_latin(self):
        assert edit_distance("\u03bc\u03bd\u03ae\u03bc\u03b7", "\u03bc\u03bd\u03b7\u03bc\u03b7") == 1


class TestScore:
    """score(): 1 - distance / max(1, longest), clamped to [0, 1]"""

    def test_example(self):
        assert score(1, 8, 7) == pytest.approx(0.875)

    def test_zero_distance_scores_one(self):
        assert score(0, 7, 7) == 1.0

    def test_two_empty_strings_score_one(self):
        assert score(0, 0, 0) == 1.0

    def test_clamped_to_zero(self):
        assert score(10, 2, 2) == 0.0

    def test_monotonic_in_distance(self):
        values = [score(d, 8, 8) for d in range(10)]
        assert values == sorted(values, reverse=True)


class TestScoreResponse:
    """score_response(): full pipeline used by the result endpoint"""

    def test_exact_match_after_normalization(self):
        r = score_response("  Computer ", "computer", "en")
        assert isinstance(r, ScoringResult)
        assert r.edit_distance == 0
        assert r.similarity == 1.0
        assert r.normalized_response == "computer"

    def test_misspelling(self):
        r = score_response("compter", "computer", "en")
        assert r.edit_distance == 1
        assert r.similarity == pytest.approx(0.875)

    def test_empty_response(self):
        r = score_response("", "memory", "en")
        assert r.edit_distance == 6
        assert r.similarity == 0.0

    def test_both_empty(self):
        r = score_response(None, "   ", "en")
        assert r.edit_distance == 0
        assert r.similarity == 1.0

    def test_turkish_locale_matters(self):
        assert score_response("ISIK", "\u0131s\u0131k", "tr").similarity == 1.0
        assert score_response("ISIK", "\u0131s\u0131k", "en").similarity < 1.0

    def test_similarity_always_in_bounds(self):
        for resp, corr in [("a", "zzzzzzzz"), ("zzzzzzzz", "a"), ("data base", "database")]:
            r = score_response(resp, corr, "en")
            assert 0.0 <= r.similarity <= 1.0


class TestMalformedInput:
    """Text that cannot be encoded never reaches scoring"""

    def test_lone_surrogate_normalizes_to_empty(self):
        assert normalize("\ud800abc", "en") == ""

    def test_lone_surrogate_scores_as_empty(self):
        r = score_response("\ud800abc", "abc", "en")
        assert r.normalized_response == ""
        assert r.edit_distance == 3
        assert r.similarity == 0.0

    def test_utf8_safe_replaces_surrogates(self):
        cleaned = utf8_safe("\ud800abc")
        assert cleaned == "?abc"
        cleaned.encode("utf-8")

    def test_utf8_safe_keeps_valid_text(self):
        assert utf8_safe("\u03bc\u03bd\u03ae\u03bc\u03b7") == "\u03bc\u03bd\u03ae\u03bc\u03b7"
        assert utf8_safe(None) is None


class TestCapForScoring:

    def test_long_text_is_cut(self):
        assert cap_for_scoring("abcdefgh", 5) == ("abcde", True)

    def test_short_text_untouched(self):
        assert cap_for_scoring("abc", 5) == ("abc", False)
        assert cap_for_scoring(None, 5) == (None, False)

    def test_zero_limit_disables_cap(self):
        assert cap_for_scoring("abcdefgh", 0) == ("abcdefgh", False)
