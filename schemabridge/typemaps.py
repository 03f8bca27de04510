# File: schemabridge/typemaps.py
"""
Schema Bridge - Type-Mapping Tables
====================================
The one place where an abstract field type is translated into the type
token of an output dialect:

    ===========  ===========  ======================  ===================  ==========
    abstract     schema       validation              API document         language
    ===========  ===========  ======================  ===================  ==========
    string       String       z.string()              string               string
    email        String       z.string().email()      string / email       string
    number       Int          z.number().int()        integer              number
    float        Float        z.number()              number               number
    boolean      Boolean      z.boolean()             boolean              boolean
    date         DateTime     z.date()                string / date-time   Date
    json         Json         z.any()                 object               any
    (unknown)    String       z.string()              string               any
    ===========  ===========  ======================  ===================  ==========

Every lookup is case-insensitive and total: an unrecognised type yields
the fallback token instead of raising.  Renderers must go through these
functions rather than keep private mapping dictionaries.

GraphQL scalars are not a fifth table: they are derived from the schema
dialect, narrowed to the built-in scalars.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.typemaps")

# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

SCHEMA_TYPES: Mapping[str, str] = MappingProxyType({
    "string": "String",
    "email": "String",
    "number": "Int",
    "float": "Float",
    "boolean": "Boolean",
    "date": "DateTime",
    "json": "Json",
})
SCHEMA_FALLBACK: str = "String"

VALIDATION_TYPES: Mapping[str, str] = MappingProxyType({
    "string": "z.string()",
    "email": "z.string().email()",
    "number": "z.number().int()",
    "float": "z.number()",
    "boolean": "z.boolean()",
    "date": "z.date()",
    "json": "z.any()",
})
VALIDATION_FALLBACK: str = "z.string()"

API_DOC_TYPES: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "string": MappingProxyType({"type": "string"}),
    "email": MappingProxyType({"type": "string", "format": "email"}),
    "number": MappingProxyType({"type": "integer"}),
    "float": MappingProxyType({"type": "number"}),
    "boolean": MappingProxyType({"type": "boolean"}),
    "date": MappingProxyType({"type": "string", "format": "date-time"}),
    "json": MappingProxyType({"type": "object"}),
})
API_DOC_FALLBACK: Mapping[str, str] = MappingProxyType({"type": "string"})

LANGUAGE_TYPES: Mapping[str, str] = MappingProxyType({
    "string": "string",
    "email": "string",
    "number": "number",
    "float": "number",
    "boolean": "boolean",
    "date": "Date",
    "json": "any",
})
LANGUAGE_FALLBACK: str = "any"

_GRAPHQL_BUILTIN_SCALARS: FrozenSet[str] = frozenset({"String", "Int", "Float", "Boolean"})


def _key(abstract_type: str) -> str:
    return (abstract_type or "").strip().lower()


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def schema_type(abstract_type: str) -> str:
    """Schema-definition (Prisma) scalar for *abstract_type*."""
    return SCHEMA_TYPES.get(_key(abstract_type), SCHEMA_FALLBACK)


def validation_type(abstract_type: str) -> str:
    """Validation-library (Zod) expression for *abstract_type*."""
    return VALIDATION_TYPES.get(_key(abstract_type), VALIDATION_FALLBACK)


def api_doc_type(abstract_type: str) -> Dict[str, str]:
    """
    API-document (OpenAPI) schema fragment for *abstract_type*.

    Returns a fresh dict so callers may extend it with ``description``
    or ``default`` without touching the table.
    """
    return dict(API_DOC_TYPES.get(_key(abstract_type), API_DOC_FALLBACK))


def language_type(abstract_type: str) -> str:
    """General-purpose language (TypeScript) type for *abstract_type*."""
    return LANGUAGE_TYPES.get(_key(abstract_type), LANGUAGE_FALLBACK)


def graphql_type(abstract_type: str) -> str:
    """GraphQL scalar derived from :func:`schema_type`."""
    token: str = schema_type(abstract_type)
    return token if token in _GRAPHQL_BUILTIN_SCALARS else "String"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SCHEMA_TYPES",
    "VALIDATION_TYPES",
    "API_DOC_TYPES",
    "LANGUAGE_TYPES",
    "SCHEMA_FALLBACK",
    "VALIDATION_FALLBACK",
    "API_DOC_FALLBACK",
    "LANGUAGE_FALLBACK",
    "schema_type",
    "validation_type",
    "api_doc_type",
    "language_type",
    "graphql_type",
]

logger.debug("schemabridge.typemaps loaded.")
