"""
Assembly of full documentation results.

Combines a parsed help page with separately fetched example output, or
builds a package-level document from the overview, metadata and export
listing R produces for a package.
"""

from dataclasses import replace
from typing import Optional

from .models import DocResult


def assemble_full_doc(help_result: DocResult, examples_text: Optional[str] = None) -> DocResult:
    """
    Attach example output to a parsed help page.

    Args:
        help_result: Result of parse_help_text() for a symbol
        examples_text: Output of R's example(); None if the fetch failed

    Returns:
        A copy with example replaced when examples_text has content,
        otherwise help_result itself
    """
    if help_result.error or not examples_text or not examples_text.strip():
        return help_result
    return replace(help_result, example=examples_text)


def assemble_package_doc(overview_text: str, description_text: str, exports_text: str) -> DocResult:
    """
    Build full documentation for a whole package.

    Args:
        overview_text: Output of help(package=...)
        description_text: Package/Version/Title/Description dump
        exports_text: Listing of exported functions

    Returns:
        DocResult with the metadata as description and the overview
        followed by the export listing as usage
    """
    usage = (
        f"# Package Overview\n\n{overview_text}\n\n"
        f"# Exported Functions\n\n{exports_text}"
    )
    return DocResult(description=description_text, usage=usage)
