#!/usr/bin/env python3
"""
R Docs MCP Server

An MCP server exposing documentation for installed R packages.
Enables AI agents to read function help pages, run package examples,
and search a package's help topics by keyword.
"""

import logging
from typing import Literal, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import BaseModel, ConfigDict, Field

from r_docs import DocQuery, DocsFacade
from r_docs.formatters import format_doc_result, format_error, format_search_results

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("r-docs")

# Initialize MCP server
app = FastMCP("r-docs")
docs = DocsFacade()


# ============================================================================
# Input Models (Pydantic v2)
# ============================================================================

class RDocInput(BaseModel):
    """Input model for R package/function documentation lookups."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    package: str = Field(
        ...,
        description="R package name. Examples: 'base', 'stats', 'dplyr'",
        min_length=1,
        max_length=100
    )
    symbol: Optional[str] = Field(
        default=None,
        description="Function or help topic inside the package. Examples: 'mean', 'lm', 'filter'",
        min_length=1,
        max_length=200
    )
    project_path: Optional[str] = Field(
        default=None,
        alias="projectPath",
        description="Project directory to run R in, so project-local libraries (renv) are used",
        min_length=1,
        max_length=2000
    )
    format: Literal["markdown", "json"] = Field(
        default="markdown",
        description="Response format: 'markdown' for human-readable or 'json' for structured data"
    )


class RSearchInput(BaseModel):
    """Input model for keyword search across a package's help topics."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    package: str = Field(
        ...,
        description="R package whose help topics are searched. Examples: 'stats', 'utils'",
        min_length=1,
        max_length=100
    )
    search_term: str = Field(
        ...,
        alias="searchTerm",
        description="Keyword to look for. Examples: 'median', 'regression', 'quantile'",
        min_length=1,
        max_length=200
    )
    fuzzy: bool = Field(
        default=False,
        description="Also match terms whose letters appear in order but not adjacent (e.g. 'mdn' -> 'median')"
    )
    project_path: Optional[str] = Field(
        default=None,
        alias="projectPath",
        description="Project directory to run R in",
        min_length=1,
        max_length=2000
    )
    format: Literal["markdown", "json"] = Field(
        default="markdown",
        description="Response format: 'markdown' for human-readable or 'json' for structured data"
    )


# ============================================================================
# Tool Implementations
# ============================================================================

@app.tool(
    name="describe_r_package",
    description="""
    Get summary documentation for an R package or one of its functions.

    Runs R's help() and splits the help page into description, usage
    (with arguments, return value and details folded in) and examples.

    **Parameters:**
    - `package`: R package name (required)
    - `symbol`: Function or topic inside the package (optional)
    - `projectPath`: Directory to run R in (optional)

    **Examples:**
    - Package overview: `describe_r_package(package="stats")`
    - Function: `describe_r_package(package="base", symbol="mean")`

    **Environment Variables:**
    - `R_DOCS_RSCRIPT`: Rscript binary to use (default "Rscript")
    - `R_DOCS_TIMEOUT`: Seconds before an R call is aborted (default 60)
    """,
    annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=False)
)
async def describe_r_package(input_data: RDocInput) -> str:
    """
    Summary documentation for an R package or function.

    Args:
        input_data: RDocInput with package, symbol, project_path, format

    Returns:
        Formatted documentation or error message
    """
    try:
        query = DocQuery.create(input_data.package, input_data.symbol, input_data.project_path)
        result = await docs.describe(query)
        return format_doc_result(result, query, input_data.format)

    except Exception as e:
        error_msg = format_error(e, "describing R documentation")
        logger.error(error_msg)
        return error_msg


@app.tool(
    name="get_r_package_doc",
    description="""
    Get full documentation for an R package or function.

    For a function, returns the parsed help page plus the output of
    running its examples with R's example(). For a whole package,
    returns its metadata, the package help index and the list of
    exported functions.

    Use describe_r_package for a quicker summary.
    """,
    annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=False)
)
async def get_r_package_doc(input_data: RDocInput) -> str:
    """
    Full documentation for an R package or function.

    Args:
        input_data: RDocInput with package, symbol, project_path, format

    Returns:
        Formatted documentation or error message
    """
    try:
        query = DocQuery.create(input_data.package, input_data.symbol, input_data.project_path)
        result = await docs.get_full_doc(query)
        return format_doc_result(result, query, input_data.format)

    except Exception as e:
        error_msg = format_error(e, "fetching R documentation")
        logger.error(error_msg)
        return error_msg


@app.tool(
    name="search_r_docs",
    description="""
    Search the help topics of an installed R package by keyword.

    Matches are ranked exact word > word prefix > substring > fuzzy
    (letters in order, fuzzy=true only). Matches in a topic's name rank
    above matches in its text. At most R_DOCS_MAX_RESULTS results are
    returned; the total count is always reported.

    **Examples:**
    - `search_r_docs(package="stats", searchTerm="median")`
    - `search_r_docs(package="stats", searchTerm="mdn", fuzzy=true)`
    """,
    annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=False)
)
async def search_r_docs(input_data: RSearchInput) -> str:
    """
    Keyword search over a package's help topics.

    Args:
        input_data: RSearchInput with package, search_term, fuzzy, project_path, format

    Returns:
        Ranked matches or error message
    """
    try:
        query = DocQuery.create(input_data.package, project_path=input_data.project_path)
        results = await docs.search(query, input_data.search_term, fuzzy=input_data.fuzzy)
        return format_search_results(results, query, input_data.search_term, input_data.format)

    except Exception as e:
        error_msg = format_error(e, "searching R documentation")
        logger.error(error_msg)
        return error_msg


# ============================================================================
# Server Entry Point
# ============================================================================

async def main():
    """Run the MCP server using stdio transport."""
    logger.info("Starting R Docs MCP Server")
    await app.run_stdio_async()


def run():
    """Console script entry point."""
    import asyncio
    asyncio.run(main())


if __name__ == "__main__":
    run()
