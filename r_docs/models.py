"""
Internal types for the r_docs package.

These types are used internally after validation has already occurred
at the MCP boundary (server.py). They are plain dataclasses; the only
validation kept here is DocQuery.create(), which also guards direct
library callers.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# ============================================================================
# Configurable Constants
# ============================================================================

# R front-end used for every documentation lookup
RSCRIPT_BIN = os.getenv("R_DOCS_RSCRIPT", "Rscript")

# Per-call timeout in seconds (0 disables the timeout)
R_TIMEOUT = float(os.getenv("R_DOCS_TIMEOUT", "60"))

# Search limits
MAX_SEARCH_RESULTS = int(os.getenv("R_DOCS_MAX_RESULTS", "20"))
CONTEXT_CHARS = int(os.getenv("R_DOCS_CONTEXT_CHARS", "60"))
FUZZY_SPAN_FACTOR = int(os.getenv("R_DOCS_FUZZY_SPAN_FACTOR", "3"))

# Score bands: each band's bonus stays below the gap to the next band
EXACT_SCORE = 90.0
PREFIX_SCORE = 60.0
SUBSTRING_SCORE = 30.0
FUZZY_MAX_SCORE = 20.0
SYMBOL_BONUS = 10.0

# "Did you mean" suggestions for unknown symbols
SUGGESTION_FLOOR = int(os.getenv("R_DOCS_SUGGESTION_FLOOR", "60"))
MAX_SUGGESTIONS = 3

# MCP response limit
CHARACTER_LIMIT = 25000

EMPTY_QUERY_ERROR = "empty query"


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class DocQuery:
    """
    A documentation request for an R package or one of its symbols.

    Attributes:
        package: R package name (e.g. "stats")
        symbol: Optional function/topic inside the package (e.g. "median")
        project_path: Optional project directory R runs in, so that
                      project-local libraries (renv, .Rprofile) apply
    """
    package: str
    symbol: Optional[str] = None
    project_path: Optional[str] = None

    @classmethod
    def create(
        cls,
        package: str,
        symbol: Optional[str] = None,
        project_path: Optional[str] = None
    ) -> "DocQuery":
        """
        Build a validated query.

        Raises:
            MalformedQueryError: If package is blank, or symbol/project_path
                                 are given but blank
        """
        if not isinstance(package, str) or not package.strip():
            raise MalformedQueryError("package must be a non-empty string")
        if symbol is not None and (not isinstance(symbol, str) or not symbol.strip()):
            raise MalformedQueryError("symbol must be a non-empty string when given")
        if project_path is not None and (
            not isinstance(project_path, str) or not project_path.strip()
        ):
            raise MalformedQueryError("projectPath must be a non-empty string when given")
        return cls(
            package=package.strip(),
            symbol=symbol.strip() if symbol is not None else None,
            project_path=project_path,
        )

    @property
    def label(self) -> str:
        """Human-readable target, e.g. "stats::median" or "stats"."""
        if self.symbol:
            return f"{self.package}::{self.symbol}"
        return self.package


@dataclass(frozen=True)
class SearchResult:
    """
    A single ranked match inside the documentation corpus.

    Attributes:
        match: The matched snippet as it appears in the text
        score: Non-negative ranking score (higher is better)
        symbol: Topic the match came from, when known
        context: Surrounding text, whitespace collapsed
        type: Match class - "exact", "prefix", "substring" or "fuzzy"
    """
    match: str
    score: float
    symbol: Optional[str] = None
    context: Optional[str] = None
    type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "symbol": self.symbol,
            "match": self.match,
            "context": self.context,
            "score": self.score,
            "type": self.type,
        })


@dataclass(frozen=True)
class SearchResults:
    """
    Ranked search results.

    Attributes:
        results: Matches sorted by score descending, ties in corpus order
        total_results: Match count before truncation
        error: Failure reason; results are empty when set
        suggest_install: True when installing the package would fix the error
    """
    results: List[SearchResult] = field(default_factory=list)
    total_results: int = 0
    error: Optional[str] = None
    suggest_install: Optional[bool] = None

    @classmethod
    def failure(cls, error: str) -> "SearchResults":
        return cls(results=[], total_results=0, error=error)

    @classmethod
    def unavailable(cls, reason: str) -> "SearchResults":
        """Result for a corpus that cannot be loaded (package not installed)."""
        return cls(results=[], total_results=0, error=reason, suggest_install=True)

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "results": [r.to_dict() for r in self.results],
            "totalResults": self.total_results,
            "error": self.error,
            "suggestInstall": self.suggest_install,
        })


@dataclass(frozen=True)
class DocResult:
    """
    Structured documentation for a package or symbol.

    When error is set the call failed and the other fields must not be
    relied on. Doc lookups never set search_results; only the search tool
    wraps its SearchResults here.
    """
    description: Optional[str] = None
    usage: Optional[str] = None
    example: Optional[str] = None
    error: Optional[str] = None
    search_results: Optional[SearchResults] = None
    suggest_install: Optional[bool] = None

    @classmethod
    def failure(cls, error: str, suggest_install: Optional[bool] = None) -> "DocResult":
        return cls(error=error, suggest_install=suggest_install)

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "description": self.description,
            "usage": self.usage,
            "example": self.example,
            "error": self.error,
            "searchResults": self.search_results.to_dict() if self.search_results else None,
            "suggestInstall": self.suggest_install,
        })


@dataclass
class Section:
    """A named run of help-text lines; exists only while parsing."""
    name: str
    content_lines: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class CorpusEntry:
    """One searchable unit: a help topic's text plus its topic name."""
    text: str
    symbol: Optional[str] = None


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# ============================================================================
# Custom Exceptions
# ============================================================================

class RDocsError(Exception):
    """Base class for r_docs errors."""


class MalformedQueryError(RDocsError, ValueError):
    """Raised when a query is missing a required field or has a blank one."""


class RScriptError(RDocsError):
    """
    Raised when an Rscript invocation fails.

    Attributes:
        returncode: Process exit code (None when the process never ran
                    or was killed on timeout)
        message: stderr output or failure description
    """
    def __init__(self, returncode: Optional[int], message: str):
        self.returncode = returncode
        self.message = message
        if returncode is None:
            super().__init__(message)
        else:
            super().__init__(f"Rscript exited with status {returncode}: {message}")
