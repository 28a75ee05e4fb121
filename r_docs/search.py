"""
Keyword search over R help topics with a 4-tier cascade.

Each corpus entry is matched against the query from strictest to
loosest:
1. Exact whole-word match
2. Word-prefix match
3. Substring match
4. Fuzzy subsequence match (opt-in), penalised by how spread out the
   query's characters are

Tiers occupy disjoint score bands, so a better tier always outranks a
worse one. Matches on the topic name get a bonus inside their band.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .models import (
    CONTEXT_CHARS,
    EMPTY_QUERY_ERROR,
    EXACT_SCORE,
    FUZZY_MAX_SCORE,
    FUZZY_SPAN_FACTOR,
    MAX_SEARCH_RESULTS,
    PREFIX_SCORE,
    SUBSTRING_SCORE,
    SYMBOL_BONUS,
    CorpusEntry,
    SearchResult,
    SearchResults,
)

# Each record of the corpus dump starts with a form feed and the topic name
RECORD_SEPARATOR = "\f"

# R identifiers may contain dots ("mean.default"); a dot only joins words
# when another word character follows it
_WORD_START = r"(?<!\w)(?<!\w\.)"
_WORD_END = r"(?!\w)(?!\.\w)"


@dataclass
class _Hit:
    """A located match inside one string."""
    start: int
    end: int
    score: float
    tier: str


def parse_corpus(text: str) -> List[CorpusEntry]:
    """
    Split a corpus dump into entries.

    The dump is a sequence of records, each introduced by a line made of
    a form feed followed by the topic name. Text before the first record
    and records without content are ignored.
    """
    entries: List[CorpusEntry] = []
    symbol: Optional[str] = None
    lines: List[str] = []

    def flush() -> None:
        body = "\n".join(lines).strip()
        if symbol is not None and body:
            entries.append(CorpusEntry(text=body, symbol=symbol or None))

    # splitlines() would treat the form feed itself as a line break
    for line in text.replace("\r\n", "\n").split("\n"):
        if line.startswith(RECORD_SEPARATOR):
            flush()
            symbol = line[len(RECORD_SEPARATOR):].strip()
            lines = []
        else:
            lines.append(line)
    flush()

    return entries


class SearchRanker:
    """
    Ranks help topics against a keyword query.

    Results are sorted by score (ties keep corpus order) and silently
    capped at max_results; total_results reports the uncapped count.
    """

    def __init__(
        self,
        max_results: int = MAX_SEARCH_RESULTS,
        context_chars: int = CONTEXT_CHARS,
        fuzzy_span_factor: int = FUZZY_SPAN_FACTOR
    ):
        self._max_results = max_results
        self._context_chars = context_chars
        self._fuzzy_span_factor = fuzzy_span_factor

    def search(
        self,
        entries: Sequence[CorpusEntry],
        query: str,
        fuzzy: bool = False
    ) -> SearchResults:
        """
        Score every corpus entry against the query.

        Args:
            entries: Corpus entries in their original order
            query: Search term (case-insensitive)
            fuzzy: Also accept in-order subsequence matches

        Returns:
            SearchResults with at most one result per matching entry
        """
        query = (query or "").strip()
        if not query:
            return SearchResults.failure(EMPTY_QUERY_ERROR)

        results = []
        for entry in entries:
            result = self._match_entry(entry, query, fuzzy)
            if result is not None:
                results.append(result)

        # sorted() is stable, so equal scores keep corpus order
        ranked = sorted(results, key=lambda r: r.score, reverse=True)

        return SearchResults(
            results=ranked[:self._max_results],
            total_results=len(ranked)
        )

    def _match_entry(self, entry: CorpusEntry, query: str, fuzzy: bool) -> Optional[SearchResult]:
        text_hit = self._best_hit(entry.text, query, fuzzy)
        symbol_hit = self._best_hit(entry.symbol, query, fuzzy) if entry.symbol else None

        if symbol_hit and symbol_hit.tier != "fuzzy":
            symbol_hit.score += SYMBOL_BONUS

        if symbol_hit and (text_hit is None or symbol_hit.score >= text_hit.score):
            return SearchResult(
                match=entry.symbol[symbol_hit.start:symbol_hit.end],
                score=round(symbol_hit.score, 2),
                symbol=entry.symbol,
                context=self._context(entry.text, 0, 0),
                type=symbol_hit.tier
            )

        if text_hit:
            return SearchResult(
                match=entry.text[text_hit.start:text_hit.end],
                score=round(text_hit.score, 2),
                symbol=entry.symbol,
                context=self._context(entry.text, text_hit.start, text_hit.end),
                type=text_hit.tier
            )

        return None

    def _best_hit(self, text: str, query: str, fuzzy: bool) -> Optional[_Hit]:
        """Run the cascade on one string, stopping at the first tier that hits."""
        hit = (
            self._try_exact(text, query)
            or self._try_prefix(text, query)
            or self._try_substring(text, query)
        )
        if hit is None and fuzzy:
            hit = self._try_fuzzy(text, query)
        return hit

    def _try_exact(self, text: str, query: str) -> Optional[_Hit]:
        """Tier 1: query as a whole word."""
        pattern = _WORD_START + re.escape(query) + _WORD_END
        found = re.search(pattern, text, re.IGNORECASE)
        if found:
            return _Hit(found.start(), found.end(), EXACT_SCORE, "exact")
        return None

    def _try_prefix(self, text: str, query: str) -> Optional[_Hit]:
        """Tier 2: a word starting with the query; the match spans the whole word."""
        pattern = _WORD_START + re.escape(query) + r"(?:\w|\.\w)*"
        found = re.search(pattern, text, re.IGNORECASE)
        if found:
            return _Hit(found.start(), found.end(), PREFIX_SCORE, "prefix")
        return None

    def _try_substring(self, text: str, query: str) -> Optional[_Hit]:
        """Tier 3: query anywhere."""
        start = text.lower().find(query.lower())
        if start >= 0:
            return _Hit(start, start + len(query), SUBSTRING_SCORE, "substring")
        return None

    def _try_fuzzy(self, text: str, query: str) -> Optional[_Hit]:
        """
        Tier 4: query characters in order within a bounded window.

        Finds the tightest window; score shrinks as the window widens.
        """
        haystack = text.lower()
        needle = query.lower()
        max_span = len(needle) * self._fuzzy_span_factor

        best = None
        start = haystack.find(needle[0])
        while start >= 0:
            limit = min(len(haystack), start + max_span)
            matched = 1
            pos = start + 1
            while matched < len(needle) and pos < limit:
                if haystack[pos] == needle[matched]:
                    matched += 1
                pos += 1

            if matched == len(needle):
                if best is None or pos - start < best[1] - best[0]:
                    best = (start, pos)
                if pos - start == len(needle):
                    break

            start = haystack.find(needle[0], start + 1)

        if best is None:
            return None

        span = best[1] - best[0]
        score = FUZZY_MAX_SCORE * len(needle) / span
        return _Hit(best[0], best[1], score, "fuzzy")

    def _context(self, text: str, start: int, end: int) -> str:
        """Text around a match, whitespace collapsed, ellipsis where cut."""
        lo = max(0, start - self._context_chars)
        hi = min(len(text), end + self._context_chars)
        snippet = " ".join(text[lo:hi].split())
        if lo > 0:
            snippet = "..." + snippet
        if hi < len(text):
            snippet = snippet + "..."
        return snippet
