"""Tests for prospect_dedup.algorithms — business-name similarity module."""

import pytest

from prospect_dedup.algorithms.name_similarity import (
    compare_names,
    compute_name_similarity,
    levenshtein_similarity,
    name_tokens,
    normalize_name,
    token_set_similarity,
)


# ---- normalize_name ---------------------------------------------------------


class TestNormalizeName:
    def test_empty_and_none(self):
        assert normalize_name("") == ""
        assert normalize_name(None) == ""
        assert normalize_name("   ") == ""
        assert normalize_name("!!!") == ""

    def test_lowercase(self):
        assert normalize_name("FAST LUBE") == "fast lube"

    def test_apostrophes_dropped(self):
        assert normalize_name("Joe's Pizza") == "joes pizza"

    def test_punctuation_becomes_space(self):
        assert normalize_name("Smith-Jones & Co.") == "smith jones"

    def test_strips_trailing_legal_suffixes(self):
        assert normalize_name("Joe's Pizza, LLC") == "joes pizza"
        assert normalize_name("Acme Co Inc.") == "acme"
        assert normalize_name("Widget Corporation") == "widget"
        assert normalize_name("Harbor Freight Ltd") == "harbor freight"

    def test_suffix_only_stripped_from_the_end(self):
        assert normalize_name("Inc Media Group") == "inc media group"

    def test_lone_suffix_kept(self):
        assert normalize_name("Company") == "company"

    def test_strips_accents(self):
        assert normalize_name("Café Olé") == "cafe ole"

    def test_collapses_whitespace(self):
        assert normalize_name("  Blue    Heron   Books ") == "blue heron books"


class TestNameTokens:
    def test_order_insensitive(self):
        assert name_tokens("joes pizza") == name_tokens("pizza joes")

    def test_empty(self):
        assert name_tokens("") == frozenset()


# ---- levenshtein_similarity -------------------------------------------------


class TestLevenshteinSimilarity:
    def test_identical(self):
        assert levenshtein_similarity("joes", "joes") == 1.0

    def test_both_empty(self):
        assert levenshtein_similarity("", "") == 1.0

    def test_one_empty(self):
        assert levenshtein_similarity("joes", "") == 0.0
        assert levenshtein_similarity("", "joes") == 0.0

    def test_minor_edit(self):
        assert levenshtein_similarity("emeka", "emaka") == pytest.approx(0.8)

    def test_completely_different(self):
        assert levenshtein_similarity("abc", "xyz") == 0.0


# ---- token_set_similarity ---------------------------------------------------


class TestTokenSetSimilarity:
    def test_word_order_invariance(self):
        assert token_set_similarity(name_tokens("joes pizza"), name_tokens("pizza joes")) == 1.0

    def test_subset_loses_credit(self):
        score = token_set_similarity(name_tokens("pizza"), name_tokens("joes pizza"))
        assert score == pytest.approx(2 / 3)

    def test_disjoint(self):
        assert token_set_similarity(frozenset({"alpha"}), frozenset({"beta"})) == 0.0

    def test_both_empty(self):
        assert token_set_similarity(frozenset(), frozenset()) == 1.0


# ---- compare_names ----------------------------------------------------------


class TestCompareNames:
    def test_exact_flag_only_for_identical_strings(self):
        detail = compare_names("joes pizza", "joes pizza")
        assert detail.exact is True
        assert detail.similarity == 1.0

        reordered = compare_names("joes pizza", "pizza joes")
        assert reordered.exact is False
        assert reordered.similarity == 1.0

    def test_takes_max_of_edit_and_token_ratios(self):
        # edit ratio 0.9, token overlap 0.5
        detail = compare_names("joes pizza", "joe pizza")
        assert detail.similarity == pytest.approx(0.9)

    def test_floor_below_min_similarity(self):
        detail = compare_names("fast lube", "xyz", min_similarity=0.5)
        assert detail.similarity == 0.0
        assert detail.present is True

    def test_above_floor_kept(self):
        detail = compare_names("joes pizza", "joe pizza", min_similarity=0.5)
        assert detail.similarity == pytest.approx(0.9)

    def test_missing_side_not_present(self):
        detail = compare_names("joes pizza", "")
        assert detail.present is False
        assert detail.similarity == 0.0

    def test_symmetric(self):
        a = compare_names("greenfield hardware", "greenfeld hardware store")
        b = compare_names("greenfeld hardware store", "greenfield hardware")
        assert a.similarity == b.similarity

    def test_keeps_compared_values(self):
        detail = compare_names("joes pizza", "joe pizza")
        assert detail.value_a == "joes pizza"
        assert detail.value_b == "joe pizza"


# ---- compute_name_similarity ------------------------------------------------


class TestComputeNameSimilarity:
    def test_same_entity_different_suffixes(self):
        assert compute_name_similarity("Joe's Pizza LLC", "Joes Pizza, Inc.") == 1.0

    def test_reordered_words(self):
        assert compute_name_similarity("Joe's Pizza", "Pizza Joe's") == 1.0

    def test_completely_different_names(self):
        assert compute_name_similarity("Fast Lube", "XYZ Corp", min_similarity=0.5) == 0.0

    def test_scores_are_bounded(self):
        score = compute_name_similarity("any name", "another name")
        assert 0.0 <= score <= 1.0
