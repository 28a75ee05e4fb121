"""
R Docs - structured documentation for installed R packages.

Public API for describing, fetching and searching R documentation.
Runs Rscript behind the scenes and turns its plain-text help output
into description / usage / example fields or ranked search matches.
"""

from typing import Optional

from .facade import DocsFacade
from .models import (
    DocQuery,
    DocResult,
    MalformedQueryError,
    RScriptError,
    SearchResult,
    SearchResults,
)
from .parser import parse_help_text
from .search import SearchRanker

__all__ = [
    'describe_r_package',
    'get_r_package_doc',
    'search_r_docs',
    'DocsFacade',
    'DocQuery',
    'DocResult',
    'SearchRanker',
    'SearchResult',
    'SearchResults',
    'MalformedQueryError',
    'RScriptError',
    'parse_help_text',
]


async def describe_r_package(
    package: str,
    symbol: Optional[str] = None,
    project_path: Optional[str] = None
) -> DocResult:
    """
    Summary documentation for an R package or function.

    Example:
        >>> result = await describe_r_package("stats", symbol="median")
        >>> print(result.usage)

    Raises:
        MalformedQueryError: If package is blank, or symbol/project_path
                             are given but blank
    """
    query = DocQuery.create(package, symbol=symbol, project_path=project_path)
    return await DocsFacade().describe(query)


async def get_r_package_doc(
    package: str,
    symbol: Optional[str] = None,
    project_path: Optional[str] = None
) -> DocResult:
    """
    Full documentation: help page plus runnable example output for a
    symbol, or overview, metadata and exports for a whole package.

    Raises:
        MalformedQueryError: On blank query fields
    """
    query = DocQuery.create(package, symbol=symbol, project_path=project_path)
    return await DocsFacade().get_full_doc(query)


async def search_r_docs(
    package: str,
    search_term: str,
    fuzzy: bool = False,
    project_path: Optional[str] = None
) -> SearchResults:
    """
    Search the help topics of an R package.

    Example:
        >>> results = await search_r_docs("stats", "median", fuzzy=True)
        >>> for r in results.results:
        ...     print(r.symbol, r.score)

    Raises:
        MalformedQueryError: On blank package or project_path
    """
    query = DocQuery.create(package, project_path=project_path)
    return await DocsFacade().search(query, search_term, fuzzy=fuzzy)
