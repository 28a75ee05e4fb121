"""
Section parser for R plain-text help output.

R renders help pages as loosely structured text:

    mean                  package:base                  R Documentation

    _A_r_i_t_h_m_e_t_i_c _M_e_a_n

    _D_e_s_c_r_i_p_t_i_o_n:

         Generic function for the (trimmed) arithmetic mean.

    _U_s_a_g_e:

         mean(x, ...)

Section headers come in two flavours: emphasis-encoded (every letter
preceded by an underscore) and plain ("Usage:"). The parser splits the
text on those headers and folds each section into a DocResult using the
FOLD_RULES table. Parsing is pure and never raises.
"""

import re
import textwrap
from dataclasses import dataclass
from typing import Dict, List, Optional

from .models import DocResult, Section

# Markers R (or our own scripts) emit when a topic has no help page
NOT_FOUND_MARKERS = (
    "Documentation not found",
    "No documentation for",
)

# Line index of the title in R's help layout (header line, blank, title)
PREAMBLE_LINE = 2

# _D_e_s_c_r_i_p_t_i_o_n:  _S_e_e _A_l_s_o:  _A_u_t_h_o_r(_s):
_EMPHASIS_HEADER = re.compile(r"^_[A-Za-z](?:[ ()]*_[A-Za-z])*[ ()]*:")

# Description:  See Also:  Author(s):
_PLAIN_HEADER = re.compile(r"^[A-Z][a-z]+(?: [A-Z][a-z]+)*(?:\(s\))?:")

# A whole line of emphasis-encoded words, e.g. a title
_EMPHASIS_LINE = re.compile(r"^(?:_[^_\s])+(?:\s+(?:_[^_\s])+)*$")


@dataclass(frozen=True)
class Placement:
    """
    Where a section's content lands in the DocResult.

    Attributes:
        field: Target DocResult field ("description", "usage", "example")
        append: Append under a sub-heading instead of replacing
        heading: Sub-heading text; None means use the section's own name
    """
    field: str
    append: bool = False
    heading: Optional[str] = None


FOLD_RULES: Dict[str, Placement] = {
    "description": Placement("description"),
    "usage": Placement("usage"),
    "arguments": Placement("usage", append=True, heading="Arguments"),
    "value": Placement("usage", append=True, heading="Return Value"),
    "details": Placement("usage", append=True, heading="Details"),
    "examples": Placement("example"),
    "references": Placement("usage", append=True),
    "seealso": Placement("usage", append=True),
    "author": Placement("usage", append=True),
    "authors": Placement("usage", append=True),
    "note": Placement("usage", append=True),
}


def is_emphasis_header(line: str) -> bool:
    return bool(_EMPHASIS_HEADER.match(line))


def is_plain_header(line: str) -> bool:
    return bool(_PLAIN_HEADER.match(line))


def is_section_header(line: str) -> bool:
    """True if the line opens a new help section."""
    return is_emphasis_header(line) or is_plain_header(line)


def normalize_section_name(header: str) -> str:
    """
    Turn a header line into a readable section name.

    "_S_e_e _A_l_s_o:" -> "See Also", "Author(s):" -> "Author(s)".
    """
    name = header.split(":", 1)[0]
    return name.replace("_", "").strip()


def section_key(name: str) -> str:
    """Lookup key for FOLD_RULES: lowercase letters only."""
    return re.sub(r"[^a-z]", "", name.lower())


def strip_emphasis(line: str) -> str:
    """Remove emphasis underscores from a fully emphasised line."""
    stripped = line.strip()
    if _EMPHASIS_LINE.match(stripped):
        return stripped.replace("_", "")
    return stripped


def is_not_found(raw_text: str) -> bool:
    if not raw_text or not raw_text.strip():
        return True
    return any(marker in raw_text for marker in NOT_FOUND_MARKERS)


def not_found_message(package: str, symbol: Optional[str] = None) -> str:
    target = f"{package}::{symbol}" if symbol else f"package {package}"
    return f"Documentation not found for {target}"


def section_content(section: Section) -> str:
    """Re-assemble section lines: common indent removed, blank edges dropped."""
    text = textwrap.dedent("\n".join(line.rstrip() for line in section.content_lines))
    return text.strip("\n")


def fold_section(fields: Dict[str, str], section: Section) -> None:
    """
    Place one section into the field accumulator according to FOLD_RULES.

    Unknown sections and sections without content are dropped.
    """
    placement = FOLD_RULES.get(section_key(section.name))
    if placement is None:
        return

    content = section_content(section)
    if not content:
        return

    if not placement.append:
        fields[placement.field] = content
        return

    heading = placement.heading or section.name
    block = f"## {heading}\n\n{content}"
    existing = fields.get(placement.field)
    fields[placement.field] = f"{existing}\n\n{block}" if existing else block


def split_sections(lines: List[str]) -> List[Section]:
    """
    Split lines into sections.

    Text before the first header is ignored, and so is anything after a
    header's colon: overview metadata lines ("Author:   R Core Team")
    look like headers but carry no section body.
    """
    sections: List[Section] = []
    current: Optional[Section] = None

    for line in lines:
        if is_section_header(line):
            current = Section(name=normalize_section_name(line))
            sections.append(current)
        elif current is not None:
            current.content_lines.append(line)

    return sections


def _find_preamble(lines: List[str]) -> Optional[int]:
    """
    Index of the title line.

    R puts the title on line 2; shorter or unusual output falls back to
    the first non-blank line before any header.
    """
    if len(lines) > PREAMBLE_LINE:
        candidate = lines[PREAMBLE_LINE]
        if candidate.strip() and not is_section_header(candidate):
            return PREAMBLE_LINE

    for index, line in enumerate(lines):
        if is_section_header(line):
            return None
        if line.strip():
            return index
    return None


def parse_help_text(raw_text: str, package: str, symbol: Optional[str] = None) -> DocResult:
    """
    Parse R help text into a DocResult.

    Args:
        raw_text: Output of R's help() for a package or topic
        package: Package the text belongs to
        symbol: Topic name, or None for a package overview

    Returns:
        DocResult with description/usage/example, or with only error set
        when the text is empty or marked as not found
    """
    if is_not_found(raw_text):
        return DocResult(error=not_found_message(package, symbol))

    lines = raw_text.splitlines()
    fields: Dict[str, str] = {}

    preamble = _find_preamble(lines)
    if preamble is not None:
        fields["description"] = strip_emphasis(lines[preamble])
        body = lines[preamble + 1:]
    else:
        body = lines

    sections = split_sections(body)
    for section in sections:
        fold_section(fields, section)

    # Package overviews have no reliable structure; hand back everything.
    # Indented metadata (a multi-line Author: field) can still fold into
    # usage, so only a real Usage section keeps the folded text.
    has_usage_section = any(section_key(s.name) == "usage" for s in sections)
    if not symbol and not (fields.get("usage") and has_usage_section):
        fields["usage"] = raw_text

    return DocResult(**fields)
