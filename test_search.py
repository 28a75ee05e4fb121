#!/usr/bin/env python3
"""
Tests for the help-topic search ranker.

Run with: python3 test_search.py  (or pytest)
"""

import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(__file__))

from r_docs import SearchRanker
from r_docs.models import (
    EXACT_SCORE,
    FUZZY_MAX_SCORE,
    PREFIX_SCORE,
    SUBSTRING_SCORE,
    SYMBOL_BONUS,
    CorpusEntry,
)
from r_docs.search import parse_corpus


MEAN_CORPUS = [
    CorpusEntry("the mean function"),
    CorpusEntry("median of values"),
    CorpusEntry("geometric mean calc"),
]

STATS_DUMP = (
    "\fmad\n"
    "Median Absolute Deviation\n\n"
    "Description:\n\n"
    "     Compute the median absolute deviation.\n"
    "\fmedian\n"
    "Median Value\n\n"
    "Description:\n\n"
    "     Compute the sample median.\n"
    "\fweighted.mean\n"
    "Weighted Arithmetic Mean\n"
)


def test_non_fuzzy_ranks_mean_entries():
    """Only entries containing the query match without fuzzy mode."""
    results = SearchRanker().search(MEAN_CORPUS, "mean", fuzzy=False)

    assert results.error is None
    assert results.total_results == 2
    assert [r.context for r in results.results] == ["the mean function", "geometric mean calc"]
    assert all(r.type == "exact" and r.score == EXACT_SCORE for r in results.results)


def test_fuzzy_includes_median_last():
    results = SearchRanker().search(MEAN_CORPUS, "mean", fuzzy=True)

    assert results.total_results == 3
    last = results.results[-1]
    assert last.context == "median of values"
    assert last.type == "fuzzy"
    assert 0 < last.score < FUZZY_MAX_SCORE
    assert last.score < results.results[0].score
    assert last.match == "median"


def test_tiers_are_ordered():
    """exact > prefix > substring regardless of corpus order."""
    corpus = [
        CorpusEntry("a premedian value", symbol="a"),
        CorpusEntry("group medians", symbol="b"),
        CorpusEntry("the median", symbol="c"),
    ]
    results = SearchRanker().search(corpus, "Median")

    assert [r.symbol for r in results.results] == ["c", "b", "a"]
    assert [r.type for r in results.results] == ["exact", "prefix", "substring"]
    assert [r.score for r in results.results] == [EXACT_SCORE, PREFIX_SCORE, SUBSTRING_SCORE]
    assert results.results[1].match == "medians"


def test_dotted_identifiers_are_single_words():
    corpus = [CorpusEntry("see mean.default for details")]
    result = SearchRanker().search(corpus, "mean").results[0]
    assert result.type == "prefix"
    assert result.match == "mean.default"

    corpus = [CorpusEntry("the arithmetic mean.")]
    assert SearchRanker().search(corpus, "mean").results[0].type == "exact"


def test_ties_keep_corpus_order():
    corpus = [CorpusEntry(f"{name} mean", symbol=name) for name in ("s1", "s2", "s3")]
    results = SearchRanker().search(corpus, "mean")
    assert [r.symbol for r in results.results] == ["s1", "s2", "s3"]


def test_symbol_match_gets_bonus():
    corpus = [
        CorpusEntry("Compute the median of x", symbol="quantile"),
        CorpusEntry("Middle value of a sample", symbol="median"),
    ]
    results = SearchRanker().search(corpus, "median")

    top = results.results[0]
    assert top.symbol == "median"
    assert top.score == EXACT_SCORE + SYMBOL_BONUS
    assert top.match == "median"
    assert results.results[1].score == EXACT_SCORE


def test_bands_stay_disjoint():
    """The best score in a tier stays below the worst of the tier above."""
    assert SUBSTRING_SCORE + SYMBOL_BONUS < PREFIX_SCORE
    assert PREFIX_SCORE + SYMBOL_BONUS < EXACT_SCORE
    assert FUZZY_MAX_SCORE <= SUBSTRING_SCORE


def test_fuzzy_gap_penalty():
    """Tighter subsequences score higher; too-wide ones do not match."""
    corpus = [
        CorpusEntry("m__e__a__n", symbol="wide"),
        CorpusEntry("m_e_a_n", symbol="tight"),
        CorpusEntry("m" + "x" * 20 + "ean", symbol="too-wide"),
    ]
    results = SearchRanker().search(corpus, "mean", fuzzy=True)

    assert [r.symbol for r in results.results] == ["tight", "wide"]
    assert results.results[0].score > results.results[1].score
    assert results.results[0].match == "m_e_a_n"


def test_fuzzy_off_by_default():
    results = SearchRanker().search([CorpusEntry("m_e_a_n")], "mean")
    assert results.results == []
    assert results.total_results == 0
    assert results.error is None


def test_truncation():
    corpus = [CorpusEntry(f"mean value {i}") for i in range(30)]
    results = SearchRanker(max_results=5).search(corpus, "mean")

    assert results.total_results == 30
    assert len(results.results) == 5
    assert results.total_results >= len(results.results)


def test_small_corpus_is_not_truncated():
    results = SearchRanker(max_results=5).search(MEAN_CORPUS, "mean", fuzzy=True)
    assert len(results.results) == results.total_results == 3


def test_empty_query():
    for query in ("", "   "):
        results = SearchRanker().search(MEAN_CORPUS, query)
        assert results.results == []
        assert results.total_results == 0
        assert results.error == "empty query"


def test_context_window():
    text = "a" * 100 + " median " + "b" * 100
    result = SearchRanker(context_chars=10).search([CorpusEntry(text)], "median").results[0]

    assert result.context.startswith("...")
    assert result.context.endswith("...")
    assert "median" in result.context
    assert len(result.context) < 40


def test_parse_corpus():
    dump = "preamble\n" + STATS_DUMP + "\fempty\n\n"
    entries = parse_corpus(dump)

    assert [e.symbol for e in entries] == ["mad", "median", "weighted.mean"]
    assert entries[1].text.startswith("Median Value")
    assert "preamble" not in entries[0].text


def test_stats_median_scenario():
    """A corpus with a median topic puts it in the top band."""
    entries = parse_corpus(STATS_DUMP)
    results = SearchRanker().search(entries, "median", fuzzy=True)

    top = results.results[0]
    assert top.symbol == "median"
    assert top.score >= EXACT_SCORE
    assert results.total_results >= 2


def test_to_dict_shape():
    results = SearchRanker().search([CorpusEntry("mean", symbol="mean")], "mean")
    data = results.to_dict()

    assert set(data) == {"results", "totalResults"}
    assert data["results"][0]["symbol"] == "mean"
    assert data["results"][0]["type"] == "exact"


def main():
    """Run all tests and report results."""
    print("=" * 50)
    print("Search Ranker Tests")
    print("=" * 50)

    tests = [value for name, value in sorted(globals().items()) if name.startswith("test_")]

    failed = 0
    for test in tests:
        try:
            test()
            print(f"✅ PASS: {test.__name__}")
        except AssertionError as e:
            failed += 1
            print(f"❌ FAIL: {test.__name__}: {e}")

    print(f"\n✅ Passed:  {len(tests) - failed}")
    print(f"❌ Failed:  {failed}")
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
