"""
Rscript-backed source of R help text.

Handles every interaction with the R runtime:
- Availability checks for R itself and for packages
- Help pages, example output and package overviews
- The per-topic text dump used for search

All I/O is async via asyncio subprocesses. Package and topic names are
handed to R as trailing command arguments, never spliced into R code.
"""

import asyncio
import shutil
from typing import List, Optional, Protocol

from .models import R_TIMEOUT, RSCRIPT_BIN, RScriptError


# R snippets; commandArgs(TRUE) holds (package, topic) in that order
R_PACKAGE_AVAILABLE = (
    "cat(requireNamespace(commandArgs(TRUE)[1], quietly = TRUE))"
)

R_HELP_TOPIC = (
    "a <- commandArgs(TRUE); "
    "print(do.call(help, list(a[2], package = a[1])))"
)

R_HELP_PACKAGE = (
    "a <- commandArgs(TRUE); "
    "print(do.call(help, list(package = a[1])))"
)

R_EXAMPLES = (
    "a <- commandArgs(TRUE); "
    "do.call(example, list(a[2], package = a[1], character.only = TRUE, "
    "ask = FALSE, echo = TRUE))"
)

R_PACKAGE_METADATA = (
    "info <- packageDescription(commandArgs(TRUE)[1]); "
    "cat('Package: ', info$Package, '\\n'); "
    "cat('Version: ', info$Version, '\\n'); "
    "cat('Title: ', info$Title, '\\n'); "
    "cat('Description: ', info$Description, '\\n')"
)

R_EXPORTED_SYMBOLS = (
    "p <- commandArgs(TRUE)[1]; "
    "suppressPackageStartupMessages(library(p, character.only = TRUE)); "
    "funcs <- ls(paste0('package:', p)); "
    "cat(sprintf('Functions exported by %s:\\n', p)); "
    "cat(paste('-', funcs), sep = '\\n')"
)

R_CORPUS = (
    "db <- tools::Rd_db(commandArgs(TRUE)[1]); "
    "for (n in names(db)) { "
    "cat('\\f', sub('\\\\.[Rr]d$', '', basename(n)), '\\n', sep = ''); "
    "tools::Rd2txt(db[[n]], options = list(underline_titles = FALSE)) "
    "}"
)


class RawTextSource(Protocol):
    """Anything that can produce R documentation text."""

    async def is_tool_available(self) -> bool: ...

    async def is_package_available(self, name: str) -> bool: ...

    async def fetch_help_text(self, package: str, symbol: Optional[str] = None) -> str: ...

    async def fetch_examples_text(self, package: str, symbol: str) -> str: ...

    async def fetch_package_metadata_text(self, package: str) -> str: ...

    async def fetch_exported_symbols_text(self, package: str) -> str: ...

    async def fetch_corpus_text(self, package: str) -> str: ...


class RScriptSource:
    """
    Fetches R documentation by running Rscript.

    Each call spawns an independent process; instances hold no state
    besides their configuration and can serve concurrent calls.
    """

    def __init__(
        self,
        rscript: str = RSCRIPT_BIN,
        cwd: Optional[str] = None,
        timeout: Optional[float] = R_TIMEOUT
    ):
        """
        Initialize the source.

        Args:
            rscript: Rscript binary name or path
            cwd: Working directory for R (a project directory, so that
                 project-local libraries are picked up)
            timeout: Seconds before a call is killed; 0 or None disables it
        """
        self._rscript = rscript
        self._cwd = cwd
        self._timeout = timeout or None

    async def is_tool_available(self) -> bool:
        return shutil.which(self._rscript) is not None

    async def is_package_available(self, name: str) -> bool:
        try:
            output = await self._run(R_PACKAGE_AVAILABLE, name)
        except RScriptError:
            return False
        return output.strip() == "TRUE"

    async def fetch_help_text(self, package: str, symbol: Optional[str] = None) -> str:
        if symbol:
            return await self._run(R_HELP_TOPIC, package, symbol)
        return await self._run(R_HELP_PACKAGE, package)

    async def fetch_examples_text(self, package: str, symbol: str) -> str:
        return await self._run(R_EXAMPLES, package, symbol)

    async def fetch_package_metadata_text(self, package: str) -> str:
        return await self._run(R_PACKAGE_METADATA, package)

    async def fetch_exported_symbols_text(self, package: str) -> str:
        return await self._run(R_EXPORTED_SYMBOLS, package)

    async def fetch_corpus_text(self, package: str) -> str:
        return await self._run(R_CORPUS, package)

    def build_command(self, expression: str, *args: str) -> List[str]:
        """Argument vector for running one R expression."""
        return [self._rscript, "-e", expression, *args]

    async def _run(self, expression: str, *args: str) -> str:
        """
        Run an R expression and return its stdout.

        Raises:
            RScriptError: If R cannot be started, exits non-zero or times out
        """
        command = self.build_command(expression, *args)
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self._cwd
            )
        except OSError as e:
            raise RScriptError(None, f"could not start {self._rscript}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), self._timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise RScriptError(None, f"{self._rscript} timed out after {self._timeout:g}s")

        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise RScriptError(process.returncode, message or "no error output")

        return stdout.decode("utf-8", errors="replace")
