# File: schemabridge/utils.py
"""
Schema Bridge - Utility Functions & Helpers
============================================
Deterministic string transformations, file I/O and small metrics helpers
used throughout the generation pipeline.

Naming rules:
- ``to_pascal_case`` / ``to_camel_case`` split words on whitespace,
  hyphens and underscores; the rest of each word keeps its casing.
- ``to_snake_case`` / ``to_kebab_case`` insert a separator before every
  uppercase letter, lowercase the result and strip a leading separator.
- ``pluralize`` / ``singularize`` are suffix heuristics with no irregular
  table.  They are not exact inverses (``"Status"`` pluralises to
  ``"Statuses"`` but ``"Bus"`` singularises to ``"Bu"``).

All string functions are pure and decorated with ``@lru_cache`` since the
same model names are converted many times per run.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import List, Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns (compiled once at module load)
# ---------------------------------------------------------------------------

_WORD_SPLIT_RE: re.Pattern[str] = re.compile(r"[\s_-]+")
_UPPER_RE: re.Pattern[str] = re.compile(r"([A-Z])")
_PROJECT_NAME_INVALID_RE: re.Pattern[str] = re.compile(r"[^a-z0-9-]")
_MULTI_HYPHEN_RE: re.Pattern[str] = re.compile(r"-+")
_SLUG_STRIP_RE: re.Pattern[str] = re.compile(r"[^\w\s-]", re.ASCII)
_SLUG_COLLAPSE_RE: re.Pattern[str] = re.compile(r"[\s_-]+", re.ASCII)


# ---------------------------------------------------------------------------
# Cached casing functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def capitalize(value: str) -> str:
    """Uppercase the first character, leave the rest untouched."""
    return value[:1].upper() + value[1:]


@functools.lru_cache(maxsize=None)
def to_pascal_case(value: str) -> str:
    """
    Convert a string to PascalCase.

    Examples:
        >>> to_pascal_case("blog post")
        'BlogPost'
        >>> to_pascal_case("user_profile")
        'UserProfile'
        >>> to_pascal_case("orderItem")
        'OrderItem'
    """
    words: List[str] = [w for w in _WORD_SPLIT_RE.split(value) if w]
    return "".join(capitalize(w) for w in words)


@functools.lru_cache(maxsize=None)
def to_camel_case(value: str) -> str:
    """
    Convert a string to camelCase.

    Examples:
        >>> to_camel_case("BlogPost")
        'blogPost'
        >>> to_camel_case("user-profile")
        'userProfile'
    """
    pascal: str = to_pascal_case(value)
    return pascal[:1].lower() + pascal[1:]


def _separate_upper(value: str, separator: str) -> str:
    result: str = _UPPER_RE.sub(separator + r"\1", value).lower()
    if result.startswith(separator):
        result = result[len(separator):]
    return result


@functools.lru_cache(maxsize=None)
def to_snake_case(value: str) -> str:
    """
    Convert a string to snake_case.

    Examples:
        >>> to_snake_case("BlogPost")
        'blog_post'
        >>> to_snake_case("emailVerified")
        'email_verified'
    """
    return _separate_upper(value, "_")


@functools.lru_cache(maxsize=None)
def to_kebab_case(value: str) -> str:
    """Convert a string to kebab-case (used for file names and URL segments)."""
    return _separate_upper(value, "-")


# ---------------------------------------------------------------------------
# Pluralisation
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def pluralize(word: str) -> str:
    """
    Suffix-based English pluralisation.

    Rule order: ``y`` → ``ies``; ``s``/``x``/``ch``/``sh`` → ``+es``;
    otherwise ``+s``.
    """
    if word.endswith("y"):
        return word[:-1] + "ies"
    if word.endswith(("s", "x", "ch", "sh")):
        return word + "es"
    return word + "s"


@functools.lru_cache(maxsize=None)
def singularize(word: str) -> str:
    """Inverse heuristic of :func:`pluralize`."""
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith("es"):
        return word[:-2]
    if word.endswith("s"):
        return word[:-1]
    return word


# ---------------------------------------------------------------------------
# Misc string helpers
# ---------------------------------------------------------------------------


def truncate(value: str, max_length: int) -> str:
    """
    Cut *value* to at most *max_length* characters, ending with ``...``.

    The result never exceeds *max_length*: below three characters there is
    no room for the ellipsis, so the text is cut without one.
    """
    if len(value) <= max_length:
        return value
    if max_length < 3:
        return value[: max(max_length, 0)]
    return value[: max_length - 3] + "..."


@functools.lru_cache(maxsize=None)
def slugify(value: str) -> str:
    """
    URL-friendly slug.

    Examples:
        >>> slugify("  Hello, World!  ")
        'hello-world'
        >>> slugify("snake_case and-kebab")
        'snake-case-and-kebab'
    """
    slug: str = value.lower().strip()
    slug = _SLUG_STRIP_RE.sub("", slug)
    slug = _SLUG_COLLAPSE_RE.sub("-", slug)
    return slug.strip("-")


@functools.lru_cache(maxsize=None)
def normalize_project_name(name: str) -> str:
    """
    Normalise a project name to a lowercase hyphenated identifier.

    Idempotent; the result always matches ``^[a-z0-9-]*$`` with no
    leading, trailing or repeated hyphens.

    Examples:
        >>> normalize_project_name("My Blog API")
        'my-blog-api'
        >>> normalize_project_name("--Shop__v2!!")
        'shop-v2'
    """
    result: str = _PROJECT_NAME_INVALID_RE.sub("-", name.lower())
    result = _MULTI_HYPHEN_RE.sub("-", result)
    return result.strip("-")


# ---------------------------------------------------------------------------
# Identifiers derived from a model name
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def resource_segment(model_name: str) -> str:
    """URL / route segment for a model: ``BlogPost`` → ``blog-posts``."""
    return pluralize(to_kebab_case(model_name))


@functools.lru_cache(maxsize=None)
def variable_name(model_name: str) -> str:
    """Variable and client accessor name: ``BlogPost`` → ``blogPost``."""
    return to_camel_case(model_name)


@functools.lru_cache(maxsize=None)
def plural_variable_name(model_name: str) -> str:
    """Plural variable name: ``Category`` → ``categories``."""
    return pluralize(to_camel_case(model_name))


@functools.lru_cache(maxsize=None)
def module_name(model_name: str) -> str:
    """File stem for per-model modules: ``BlogPost`` → ``blog-post``."""
    return to_kebab_case(model_name)


# ---------------------------------------------------------------------------
# Indentation helpers
# ---------------------------------------------------------------------------


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path*, creating parent directories as needed.

    When *atomic* is True the bytes go to a temporary sibling first and
    are moved into place with ``os.replace``, so a crash never leaves a
    half-written file behind.

    Returns the number of bytes written.
    """
    ensure_directory(path.parent)
    encoded: bytes = content.encode("utf-8")

    if not atomic:
        path.write_bytes(encoded)
        logger.debug("Wrote %d bytes to %s", len(encoded), path)
        return len(encoded)

    fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent),
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(encoded)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, str(path))
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Context-manager timer for profiling pipeline stages.

    Usage:
        with Timer("render schema") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "capitalize",
    "to_pascal_case",
    "to_camel_case",
    "to_snake_case",
    "to_kebab_case",
    "pluralize",
    "singularize",
    "truncate",
    "slugify",
    "normalize_project_name",
    "resource_segment",
    "variable_name",
    "plural_variable_name",
    "module_name",
    "ensure_directory",
    "write_file",
    "sha256_hex",
    "count_lines",
    "Timer",
]

logger.debug("schemabridge.utils loaded.")
