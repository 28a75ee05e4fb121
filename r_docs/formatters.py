"""
Response formatting for R documentation results.

Converts DocResult and SearchResults objects into markdown or JSON
for MCP client consumption.
"""

import json

from .models import (
    CHARACTER_LIMIT,
    DocQuery,
    DocResult,
    MalformedQueryError,
    SearchResults,
)

# Smallest per-field budget JSON truncation will go down to
MIN_FIELD_CHARS = 200


def format_doc_result(
    result: DocResult,
    query: DocQuery,
    response_format: str = "markdown"
) -> str:
    """
    Format a documentation lookup as markdown or JSON.

    Args:
        result: DocResult from DocsFacade
        query: The query that produced it
        response_format: "markdown" or "json"

    Returns:
        Formatted string in requested format
    """
    if response_format == "json":
        return _format_json(result.to_dict())
    if result.error:
        return _format_doc_error_markdown(result, query)
    return truncate_response(_format_doc_markdown(result, query))


def format_search_results(
    results: SearchResults,
    query: DocQuery,
    search_term: str,
    response_format: str = "markdown"
) -> str:
    """
    Format ranked search results.

    Args:
        results: SearchResults from DocsFacade.search
        query: Query naming the searched package
        search_term: Original search term
        response_format: "markdown" or "json"

    Returns:
        Formatted search results
    """
    if response_format == "json":
        wrapped = DocResult(search_results=results)
        return _format_json(wrapped.to_dict())
    return truncate_response(_format_search_markdown(results, query, search_term))


def format_error(error: Exception, context: str) -> str:
    """
    Format an unexpected error for LLM consumption with actionable guidance.

    Args:
        error: The exception that occurred
        context: Context about what operation failed

    Returns:
        Human-readable error message with suggested next steps
    """
    if isinstance(error, MalformedQueryError):
        return f"Error: invalid request - {error}"

    error_msg = f"Error during {context}: {str(error)}"

    if "timed out" in str(error).lower():
        error_msg += "\n\nSuggestion: Raise R_DOCS_TIMEOUT or query a single symbol instead of a whole package"
    elif "not found" in str(error).lower():
        error_msg += "\n\nSuggestion: Check the package and symbol names, or use search_r_docs to find the topic"

    return error_msg


def truncate_response(content: str, limit: int = CHARACTER_LIMIT) -> str:
    """Truncate content if it exceeds character limit."""
    if len(content) <= limit:
        return content

    truncated = content[:limit]
    return (
        f"{truncated}\n\n"
        f"[TRUNCATED - Response exceeds {limit:,} characters. "
        f"Original length: {len(content):,}. "
        f"Try asking for a single symbol instead of the whole package.]"
    )


# ============================================================================
# Private Formatting Functions
# ============================================================================

def _format_doc_markdown(result: DocResult, query: DocQuery) -> str:
    """Format documentation as markdown."""
    output = []
    output.append(f"# R Documentation: {query.label}\n\n")

    if result.description:
        output.append(f"## Description\n\n{result.description}\n\n")

    if result.usage:
        output.append(f"## Usage\n\n{result.usage}\n\n")

    if result.example:
        output.append(f"## Examples\n\n```r\n{result.example.rstrip()}\n```\n")

    return "".join(output)


def _format_doc_error_markdown(result: DocResult, query: DocQuery) -> str:
    """Format a failed lookup as markdown."""
    output = []
    output.append("# Documentation Unavailable\n\n")
    output.append(f"**Target:** {query.label}\n\n")
    output.append(f"**Error:** {result.error}\n")

    if result.suggest_install:
        output.append(
            f"\n**Suggestion:** Run `install.packages(\"{query.package}\")` in R, "
            f"then try again.\n"
        )

    return "".join(output)


def _format_search_markdown(results: SearchResults, query: DocQuery, search_term: str) -> str:
    """Format search results as a markdown table."""
    output = []
    output.append("# R Documentation Search Results\n\n")
    output.append(f"**Package:** {query.package}\n")
    output.append(f"**Query:** \"{search_term}\"\n\n")

    if results.error:
        output.append(f"**Error:** {results.error}\n")
        if results.suggest_install:
            output.append(
                f"\n**Suggestion:** Run `install.packages(\"{query.package}\")` in R, "
                f"then search again.\n"
            )
        return "".join(output)

    if not results.results:
        output.append("No matching topics found. Try `fuzzy=true` or a shorter term.\n")
        return "".join(output)

    output.append(f"Found {results.total_results} matching topics")
    if results.total_results > len(results.results):
        output.append(f" (showing top {len(results.results)})")
    output.append(":\n\n")

    output.append("| Topic | Match | Type | Score | Context |\n")
    output.append("|-------|-------|------|-------|---------|\n")

    for result in results.results:
        context = (result.context or "").replace("|", "\\|")
        match = " ".join(result.match.split()).replace("|", "\\|")
        output.append(
            f"| {result.symbol or '-'} | {match} | {result.type or '-'} "
            f"| {result.score:.1f} | {context} |\n"
        )

    return "".join(output)


def _format_json(data: dict, limit: int = CHARACTER_LIMIT) -> str:
    """
    Serialise data as indented JSON that stays within the character limit.

    Cutting the serialised text would leave invalid JSON, so long string
    fields are shortened instead, halving the per-field budget until the
    output fits.
    """
    content = json.dumps(data, indent=2)
    field_limit = limit
    while len(content) > limit and field_limit > MIN_FIELD_CHARS:
        field_limit //= 2
        content = json.dumps(_truncate_fields(data, field_limit), indent=2)
    return content


def _truncate_fields(value, limit: int):
    """Copy of value with every string longer than limit cut down."""
    if isinstance(value, str) and len(value) > limit:
        return (
            f"{value[:limit]}\n\n"
            f"[TRUNCATED - Field exceeds {limit:,} characters. "
            f"Original length: {len(value):,}.]"
        )
    if isinstance(value, dict):
        return {key: _truncate_fields(item, limit) for key, item in value.items()}
    if isinstance(value, list):
        return [_truncate_fields(item, limit) for item in value]
    return value
