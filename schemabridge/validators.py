# File: schemabridge/validators.py
"""
Schema Bridge - Configuration Validators
=========================================
Two layers of checks run over a parsed ``ProjectConfig``:

1. **Structural validation** (``validate_config``) is mandatory and
   fail-fast.  It raises ``InvalidConfigError`` on the first violated
   rule, each rule with its own code and message:

   ==========================  ==============================================
   code                        message
   ==========================  ==============================================
   MISSING_PROJECT_NAME        missing project name
   NO_MODELS                   no models defined
   MISSING_MODEL_NAME          missing model name
   MODEL_HAS_NO_FIELDS         model "<name>" has no fields
   FIELD_MISSING_NAME_OR_TYPE  field missing name/type in model "<name>"
   ==========================  ==============================================

2. **Advisory audit** (``audit_config``) collects warnings into a
   ``ValidationResult``: reserved model names, duplicate model or field
   names, casing conventions, unknown field types, dangling relation
   targets, clashes with implicit fields and a user-supplied ``User``
   lacking the auth fields.  The orchestrator logs them
   and only fails on them in strict mode.

Usage by downstream modules:
    from schemabridge.validators import audit_config, validate_config
    validate_config(config)            # raises InvalidConfigError
    result = audit_config(config)      # warnings only
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Any, Callable, Dict, List, Optional

from schemabridge.auth import build_auth_model
from schemabridge.models import (
    AUTH_MODEL_NAME,
    RESERVED_MODEL_NAMES,
    TIMESTAMP_FIELDS,
    FieldType,
    ModelDefinition,
    ProjectConfig,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.validators")

# ---------------------------------------------------------------------------
# Naming patterns
# ---------------------------------------------------------------------------

MODEL_NAME_RE: re.Pattern[str] = re.compile(r"^[A-Z][a-zA-Z0-9]*$")
FIELD_NAME_RE: re.Pattern[str] = re.compile(r"^[a-z][a-zA-Z0-9]*$")

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------

MISSING_PROJECT_NAME: str = "MISSING_PROJECT_NAME"
NO_MODELS: str = "NO_MODELS"
MISSING_MODEL_NAME: str = "MISSING_MODEL_NAME"
MODEL_HAS_NO_FIELDS: str = "MODEL_HAS_NO_FIELDS"
FIELD_MISSING_NAME_OR_TYPE: str = "FIELD_MISSING_NAME_OR_TYPE"
MALFORMED_CONFIG: str = "MALFORMED_CONFIG"
STRICT_AUDIT_FAILED: str = "STRICT_AUDIT_FAILED"


class InvalidConfigError(ValueError):
    """
    Raised when a configuration cannot be generated from.

    ``str(exc)`` reads ``InvalidConfig: <message>``; ``exc.code`` names
    the violated rule.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    def __str__(self) -> str:
        return f"InvalidConfig: {self.message}"

    def __repr__(self) -> str:
        return f"InvalidConfigError({self.code!r}, {self.message!r})"


# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class AuditFinding:
    """One advisory finding: a stable code, a message and its context."""

    __slots__ = ("code", "message", "context")

    def __init__(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    def __repr__(self) -> str:
        return f"[WARNING] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()


class ValidationResult:
    """Accumulates the ``AuditFinding`` warnings produced by the checks."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[AuditFinding] = []

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(AuditFinding(code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    @property
    def warnings(self) -> List[AuditFinding]:
        return list(self._items)

    @property
    def codes(self) -> List[str]:
        return [w.code for w in self._items]

    @property
    def has_warnings(self) -> bool:
        return bool(self._items)

    @property
    def warning_count(self) -> int:
        return len(self._items)

    def summary(self) -> str:
        return f"Audit: {self.warning_count} warning(s)."

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        lines.extend(f"  ⚠ [{w.code}] {w.message}" for w in self._items)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Mandatory structural validation
# ---------------------------------------------------------------------------


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def validate_config(config: ProjectConfig) -> None:
    """
    Check *config* for structural soundness, failing on the first problem.

    Read-only: the configuration is never modified, and name
    normalisation is not part of validation.

    Raises:
        InvalidConfigError: with one of the five structural codes.
    """
    if _blank(config.project_name):
        raise InvalidConfigError(MISSING_PROJECT_NAME, "missing project name")

    if not config.models:
        raise InvalidConfigError(NO_MODELS, "no models defined")

    for index, model in enumerate(config.models):
        if _blank(model.name):
            raise InvalidConfigError(
                MISSING_MODEL_NAME,
                "missing model name",
                {"model_index": index},
            )
        if not model.fields:
            raise InvalidConfigError(
                MODEL_HAS_NO_FIELDS,
                f'model "{model.name}" has no fields',
                {"model": model.name},
            )
        for field_index, fld in enumerate(model.fields):
            if _blank(fld.name) or _blank(fld.type):
                raise InvalidConfigError(
                    FIELD_MISSING_NAME_OR_TYPE,
                    f'field missing name/type in model "{model.name}"',
                    {"model": model.name, "field_index": field_index},
                )

    logger.debug(
        "Structural validation passed for %r (%d models).",
        config.project_name,
        len(config.models),
    )


# ---------------------------------------------------------------------------
# Standalone predicates
# ---------------------------------------------------------------------------


def is_reserved_model_name(name: str) -> bool:
    """True for names that clash with generated type names."""
    return name in RESERVED_MODEL_NAMES


def is_valid_model_name(name: str) -> bool:
    return bool(MODEL_NAME_RE.match(name))


def is_valid_field_name(name: str) -> bool:
    return bool(FIELD_NAME_RE.match(name))


def find_duplicate_field_names(model: ModelDefinition) -> List[str]:
    """Field names declared more than once, in first-seen order."""
    counts: Counter = Counter(model.field_names)
    return [name for name in dict.fromkeys(model.field_names) if counts[name] > 1]


# ---------------------------------------------------------------------------
# Advisory checks
# ---------------------------------------------------------------------------


def check_model_names(config: ProjectConfig) -> ValidationResult:
    """Reserved names, duplicates and upper-camel casing."""
    result: ValidationResult = ValidationResult()
    counts: Counter = Counter(config.model_names)
    reported: set = set()

    for model in config.models:
        if is_reserved_model_name(model.name):
            result.add_warning(
                "RESERVED_MODEL_NAME",
                f'model name "{model.name}" is reserved',
                {"model": model.name},
            )
        if not is_valid_model_name(model.name):
            result.add_warning(
                "MODEL_NAME_CASING",
                f'model name "{model.name}" should be PascalCase '
                "(start with an uppercase letter, letters and digits only)",
                {"model": model.name},
            )
        if counts[model.name] > 1 and model.name not in reported:
            reported.add(model.name)
            result.add_warning(
                "DUPLICATE_MODEL_NAME",
                f'model "{model.name}" is declared {counts[model.name]} times',
                {"model": model.name},
            )
    return result


def check_field_names(config: ProjectConfig) -> ValidationResult:
    """Duplicate field names, casing and clashes with implicit fields."""
    result: ValidationResult = ValidationResult()

    for model in config.models:
        for name in find_duplicate_field_names(model):
            result.add_warning(
                "DUPLICATE_FIELD_NAME",
                f'field "{name}" is declared more than once in model "{model.name}"',
                {"model": model.name, "field": name},
            )

        implicit: List[str] = ["id"]
        if model.timestamps:
            implicit.extend(TIMESTAMP_FIELDS)

        for fld in model.fields:
            if not is_valid_field_name(fld.name):
                result.add_warning(
                    "FIELD_NAME_CASING",
                    f'field "{fld.name}" in model "{model.name}" should be camelCase',
                    {"model": model.name, "field": fld.name},
                )
            if fld.name in implicit:
                result.add_warning(
                    "IMPLICIT_FIELD_CLASH",
                    f'field "{fld.name}" in model "{model.name}" clashes with '
                    "a generated field",
                    {"model": model.name, "field": fld.name},
                )
    return result


def check_field_types(config: ProjectConfig) -> ValidationResult:
    """Unknown types are legal but fall back to ``string`` everywhere."""
    result: ValidationResult = ValidationResult()
    known: str = ", ".join(t.value for t in FieldType)

    for model in config.models:
        for fld in model.fields:
            if not fld.is_known_type:
                result.add_warning(
                    "UNKNOWN_FIELD_TYPE",
                    f'field "{fld.name}" in model "{model.name}" has unknown type '
                    f'"{fld.type}"; it will be treated as string (known: {known})',
                    {"model": model.name, "field": fld.name, "type": fld.type},
                )
    return result


def check_relations(config: ProjectConfig) -> ValidationResult:
    """Relation targets must name a configured (or injected) model."""
    result: ValidationResult = ValidationResult()
    names: set = set(config.model_names)
    if config.authentication:
        names.add(AUTH_MODEL_NAME)

    for model in config.models:
        for fld in model.fields:
            if fld.relation is None:
                continue
            if fld.relation.target_model not in names:
                result.add_warning(
                    "UNKNOWN_RELATION_TARGET",
                    f'field "{fld.name}" in model "{model.name}" relates to unknown '
                    f'model "{fld.relation.target_model}"; it will be rendered as a '
                    "plain field",
                    {
                        "model": model.name,
                        "field": fld.name,
                        "target": fld.relation.target_model,
                    },
                )
    return result


def check_auth_model(config: ProjectConfig) -> ValidationResult:
    """A user-supplied ``User`` must carry the fields the auth service reads."""
    result: ValidationResult = ValidationResult()
    user: Optional[ModelDefinition] = (
        config.get_model(AUTH_MODEL_NAME) if config.authentication else None
    )
    if user is None:
        return result

    present: List[str] = list(user.field_names)
    if user.timestamps:
        present.extend(TIMESTAMP_FIELDS)
    expected: List[str] = [*build_auth_model().field_names, *TIMESTAMP_FIELDS]
    missing: List[str] = [name for name in expected if name not in present]
    if missing:
        result.add_warning(
            "AUTH_MODEL_INCOMPLETE",
            f'model "{AUTH_MODEL_NAME}" is missing field(s) used by the generated '
            f"auth service: {', '.join(missing)}",
            {"model": AUTH_MODEL_NAME, "missing": missing},
        )
    return result


_AUDIT_CHECKS: List[Callable[[ProjectConfig], ValidationResult]] = [
    check_model_names,
    check_field_names,
    check_field_types,
    check_relations,
    check_auth_model,
]


def audit_config(config: ProjectConfig) -> ValidationResult:
    """
    Run every advisory check and merge the findings.

    Expects a configuration that already passed :func:`validate_config`.
    """
    result: ValidationResult = ValidationResult()
    for check in _AUDIT_CHECKS:
        result.merge(check(config))

    logger.debug("Audit for %r: %s", config.project_name, result.summary())
    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "InvalidConfigError",
    "AuditFinding",
    "ValidationResult",
    "validate_config",
    "audit_config",
    "check_model_names",
    "check_field_names",
    "check_field_types",
    "check_relations",
    "check_auth_model",
    "is_reserved_model_name",
    "is_valid_model_name",
    "is_valid_field_name",
    "find_duplicate_field_names",
    "MODEL_NAME_RE",
    "FIELD_NAME_RE",
    "MISSING_PROJECT_NAME",
    "NO_MODELS",
    "MISSING_MODEL_NAME",
    "MODEL_HAS_NO_FIELDS",
    "FIELD_MISSING_NAME_OR_TYPE",
    "MALFORMED_CONFIG",
    "STRICT_AUDIT_FAILED",
]

logger.debug("schemabridge.validators loaded.")
