# File: schemabridge/formatters.py
"""
Schema Bridge - Output Formatters
==================================

Light-weight text formatters applied to rendered artifacts at write time,
selected by file extension:

    .prisma  → brace-depth re-indentation
    .json    → parse and re-serialise with two-space indentation
    .ts      → whitespace normalisation
    .md      → whitespace normalisation
    other    → unchanged

``format_content`` never raises: a formatter failure logs a warning and
the input text is written as rendered.
"""

from __future__ import annotations

import json
import logging
import posixpath
import re
from typing import Callable, Dict, List

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.formatters")

Formatter = Callable[[str], str]

_BLANK_RUN_RE: re.Pattern[str] = re.compile(r"\n{3,}")

DIALECT_PRISMA: str = "prisma"
DIALECT_JSON: str = "json"
DIALECT_TYPESCRIPT: str = "typescript"
DIALECT_MARKDOWN: str = "markdown"
DIALECT_TEXT: str = "text"

_EXTENSION_DIALECTS: Dict[str, str] = {
    ".prisma": DIALECT_PRISMA,
    ".json": DIALECT_JSON,
    ".ts": DIALECT_TYPESCRIPT,
    ".md": DIALECT_MARKDOWN,
}


# ---------------------------------------------------------------------------
# Individual formatters
# ---------------------------------------------------------------------------


def normalize_whitespace(content: str) -> str:
    """Strip trailing spaces, collapse blank-line runs, end with one newline."""
    lines: List[str] = [line.rstrip() for line in content.splitlines()]
    text: str = _BLANK_RUN_RE.sub("\n\n", "\n".join(lines))
    return text.strip("\n") + "\n"


def format_prisma(content: str) -> str:
    """
    Re-indent a schema document by brace depth (two spaces per level).

    Column alignment inside a block is left untouched.

    Raises:
        ValueError: If the braces do not balance.
    """
    depth: int = 0
    lines: List[str] = []
    for raw in normalize_whitespace(content).splitlines():
        line: str = raw.strip()
        if line.startswith("}"):
            depth -= 1
        if depth < 0:
            raise ValueError("Unbalanced '}' in schema document.")
        lines.append(f"{'  ' * depth}{line}" if line else "")
        if line.endswith("{"):
            depth += 1
    if depth != 0:
        raise ValueError("Unclosed '{' in schema document.")
    return "\n".join(lines) + "\n"


def format_json(content: str) -> str:
    """Parse and re-serialise; raises ``ValueError`` on invalid JSON."""
    return json.dumps(json.loads(content), indent=2, ensure_ascii=False) + "\n"


def format_typescript(content: str) -> str:
    return normalize_whitespace(content.replace("\t", "  "))


def _identity(content: str) -> str:
    return content


FORMATTERS: Dict[str, Formatter] = {
    DIALECT_PRISMA: format_prisma,
    DIALECT_JSON: format_json,
    DIALECT_TYPESCRIPT: format_typescript,
    DIALECT_MARKDOWN: normalize_whitespace,
    DIALECT_TEXT: _identity,
}


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def dialect_for_path(path: str) -> str:
    """Dialect hint for a relative artifact path (``text`` when unknown)."""
    extension: str = posixpath.splitext(path)[1].lower()
    return _EXTENSION_DIALECTS.get(extension, DIALECT_TEXT)


def format_content(content: str, dialect: str) -> str:
    """
    Format *content* for *dialect*, falling back to the input on failure.

    Unknown dialects pass through unchanged.
    """
    formatter: Formatter = FORMATTERS.get(dialect, _identity)
    try:
        return formatter(content)
    except Exception as exc:
        logger.warning(
            "Formatting failed for %s content (%s: %s); keeping unformatted output.",
            dialect,
            type(exc).__name__,
            exc,
        )
        return content


def format_file(path: str, content: str) -> str:
    return format_content(content, dialect_for_path(path))


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DIALECT_PRISMA",
    "DIALECT_JSON",
    "DIALECT_TYPESCRIPT",
    "DIALECT_MARKDOWN",
    "DIALECT_TEXT",
    "FORMATTERS",
    "normalize_whitespace",
    "format_prisma",
    "format_json",
    "format_typescript",
    "dialect_for_path",
    "format_content",
    "format_file",
]

logger.debug("schemabridge.formatters loaded.")
