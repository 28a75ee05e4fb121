"""
Orchestration of R documentation lookups.

DocsFacade is the only part of r_docs that talks to R. It checks that R
and the requested package are available, fetches raw text through a
RawTextSource, and hands the text to the parser, assembler or search
ranker. Every failure comes back as a structured result; nothing here
raises to the caller.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Tuple

from rapidfuzz import fuzz, process

from .assembler import assemble_full_doc, assemble_package_doc
from .models import (
    EMPTY_QUERY_ERROR,
    MAX_SUGGESTIONS,
    SUGGESTION_FLOOR,
    DocQuery,
    DocResult,
    SearchResults,
)
from .parser import parse_help_text
from .search import SearchRanker, parse_corpus
from .source import RawTextSource, RScriptSource

logger = logging.getLogger(__name__)

R_UNAVAILABLE_ERROR = (
    "R is not installed or not in the PATH. "
    "Please install R and make sure it's available in your PATH."
)


def package_missing_error(package: str) -> str:
    return (
        f"Package {package} is not installed. "
        f"Try installing it with 'install.packages(\"{package}\")' in R."
    )


def parse_exported_symbols(text: str) -> List[str]:
    """Symbol names from the "- name" listing of exported functions."""
    return [
        line[2:].strip()
        for line in text.splitlines()
        if line.startswith("- ") and line[2:].strip()
    ]


def suggest_symbols(symbol: str, candidates: List[str], limit: int = MAX_SUGGESTIONS) -> List[str]:
    """Closest candidate names to an unknown symbol, best first."""
    if not candidates:
        return []
    matches = process.extract(symbol, candidates, scorer=fuzz.ratio, limit=limit)
    return [name for name, score, _ in matches if score >= SUGGESTION_FLOOR]


class DocsFacade:
    """
    Entry point for describe / full-doc / search requests.

    By default a fresh RScriptSource is built per call, running R inside
    the query's project_path. Pass a fixed source (tests, alternative
    runtimes) to bypass the factory.
    """

    def __init__(
        self,
        source: Optional[RawTextSource] = None,
        source_factory: Callable[..., RawTextSource] = RScriptSource,
        ranker: Optional[SearchRanker] = None
    ):
        self._source = source
        self._source_factory = source_factory
        self._ranker = ranker or SearchRanker()

    def _source_for(self, query: DocQuery) -> RawTextSource:
        if self._source is not None:
            return self._source
        return self._source_factory(cwd=query.project_path)

    async def _check_environment(
        self,
        source: RawTextSource,
        package: str
    ) -> Optional[Tuple[str, bool]]:
        """
        Verify R and the package are present.

        Returns:
            (error, suggest_install) when something is missing, else None
        """
        if not await source.is_tool_available():
            return R_UNAVAILABLE_ERROR, False
        if not await source.is_package_available(package):
            return package_missing_error(package), True
        return None

    async def describe(self, query: DocQuery) -> DocResult:
        """
        Summary documentation for a package or one of its symbols.

        Args:
            query: Validated DocQuery

        Returns:
            Parsed DocResult, or a DocResult carrying only error
            (plus suggest_install when the package is missing)
        """
        logger.info(f"Getting R documentation for {query.label}")
        source = self._source_for(query)

        try:
            problem = await self._check_environment(source, query.package)
            if problem:
                return _doc_failure(*problem)
            raw_text = await source.fetch_help_text(query.package, query.symbol)
        except Exception as e:
            logger.error(f"Error getting R documentation for {query.label}: {e}")
            return DocResult(error=f"Failed to fetch R documentation: {e}")

        result = parse_help_text(raw_text, query.package, query.symbol)
        if result.error and query.symbol:
            return await self._with_suggestions(source, query, result)
        return result

    async def get_full_doc(self, query: DocQuery) -> DocResult:
        """
        Full documentation: help page plus examples for a symbol, or
        overview, metadata and export listing for a package.
        """
        logger.info(f"Getting full R documentation for {query.label}")
        source = self._source_for(query)

        try:
            problem = await self._check_environment(source, query.package)
            if problem:
                return _doc_failure(*problem)
            if query.symbol:
                return await self._full_symbol_doc(source, query)
            return await self._full_package_doc(source, query.package)
        except Exception as e:
            logger.error(f"Error getting full R documentation for {query.label}: {e}")
            return DocResult(error=f"Failed to fetch R documentation: {e}")

    async def search(self, query: DocQuery, search_term: str, fuzzy: bool = False) -> SearchResults:
        """
        Rank the package's help topics against a search term.

        Args:
            query: Package to search (symbol is ignored)
            search_term: Keyword to look for
            fuzzy: Also accept subsequence matches

        Returns:
            SearchResults, with error set on any failure
        """
        if not search_term or not search_term.strip():
            return SearchResults.failure(EMPTY_QUERY_ERROR)

        logger.info(f"Searching R documentation of {query.package} for '{search_term}'")
        source = self._source_for(query)

        try:
            problem = await self._check_environment(source, query.package)
            if problem:
                error, suggest_install = problem
                if suggest_install:
                    return SearchResults.unavailable(error)
                return SearchResults.failure(error)
            corpus_text = await source.fetch_corpus_text(query.package)
        except Exception as e:
            logger.error(f"Error loading R documentation corpus for {query.package}: {e}")
            return SearchResults.failure(f"Failed to load R documentation: {e}")

        entries = parse_corpus(corpus_text)
        return self._ranker.search(entries, search_term, fuzzy=fuzzy)

    async def _full_symbol_doc(self, source: RawTextSource, query: DocQuery) -> DocResult:
        help_text = await source.fetch_help_text(query.package, query.symbol)
        result = parse_help_text(help_text, query.package, query.symbol)
        if result.error:
            return await self._with_suggestions(source, query, result)

        examples_text = None
        try:
            examples_text = await source.fetch_examples_text(query.package, query.symbol)
        except Exception as e:
            logger.info(f"No examples found for {query.label}: {e}")

        return assemble_full_doc(result, examples_text)

    async def _full_package_doc(self, source: RawTextSource, package: str) -> DocResult:
        """Fetch overview, metadata and exports together. All three finish before a failure is raised."""
        fetched = await asyncio.gather(
            source.fetch_help_text(package),
            source.fetch_package_metadata_text(package),
            source.fetch_exported_symbols_text(package),
            return_exceptions=True,
        )
        for item in fetched:
            if isinstance(item, BaseException):
                raise item

        overview, description, exports = fetched
        return assemble_package_doc(overview, description, exports)

    async def _with_suggestions(
        self,
        source: RawTextSource,
        query: DocQuery,
        result: DocResult
    ) -> DocResult:
        """Append "Did you mean" hints to a not-found error, best effort."""
        try:
            exports = await source.fetch_exported_symbols_text(query.package)
        except Exception as e:
            logger.warning(f"Could not list exports of {query.package}: {e}")
            return result

        suggestions = suggest_symbols(query.symbol, parse_exported_symbols(exports))
        if not suggestions:
            return result

        hint = ", ".join(suggestions)
        return DocResult(error=f"{result.error}. Did you mean: {hint}?")


def _doc_failure(error: str, suggest_install: bool) -> DocResult:
    return DocResult.failure(error, suggest_install=True if suggest_install else None)
