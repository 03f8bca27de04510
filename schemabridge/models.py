# File: schemabridge/models.py
"""
Schema Bridge - Core Data Models
=================================
Pydantic V2 models describing a project configuration: the fields, the
models and the project-level options every renderer consumes.  These
models form the single source of truth for the entire pipeline:
Config Input → Validation → Auth Injection → Rendering → Export.

The models are deliberately permissive about *missing* values (an absent
project name or an empty field list parses fine) so that the structural
validator in ``schemabridge.validators`` can report each violation with
its own message.  Enumerated options (``apiType``, ``database``) are
enforced here.

All descriptors are frozen: transformations such as auth-model injection
build new values with ``model_copy`` instead of mutating the caller's.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, FrozenSet, List, Optional, Tuple, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel

from schemabridge.utils import normalize_project_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.models")

# ---------------------------------------------------------------------------
# Constants shared by validators and renderers
# ---------------------------------------------------------------------------

AUTH_MODEL_NAME: str = "User"

RESERVED_MODEL_NAMES: FrozenSet[str] = frozenset({
    "Model", "Schema", "Type", "Input", "Query", "Mutation",
})

# Implicit fields appended to every model declared with ``timestamps``.
TIMESTAMP_FIELDS: Tuple[str, str] = ("createdAt", "updatedAt")

# ---------------------------------------------------------------------------
# Enums: fixed sets used across the entire project
# ---------------------------------------------------------------------------


class FieldType(str, Enum):
    """Abstract field types understood by every output dialect."""

    STRING = "string"
    EMAIL = "email"
    NUMBER = "number"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    JSON = "json"


class Cardinality(str, Enum):
    """Relation cardinalities between two models."""

    ONE_TO_ONE = "one-to-one"
    ONE_TO_MANY = "one-to-many"
    MANY_TO_MANY = "many-to-many"


class ApiType(str, Enum):
    """API surfaces a generated project can expose."""

    REST = "rest"
    GRAPHQL = "graphql"
    BOTH = "both"


class DatabaseKind(str, Enum):
    """Datasource providers for the generated schema document."""

    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    alias_generator=to_camel,
    use_enum_values=True,
    validate_default=True,
    frozen=True,
    extra="forbid",
)


def _none_to_empty(value: Any) -> Any:
    return "" if value is None else value


# ---------------------------------------------------------------------------
# Field & model descriptors
# ---------------------------------------------------------------------------


class RelationSpec(BaseModel):
    """Link from one field to another model."""

    model_config = _SHARED_CONFIG

    target_model: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("targetModel", "target_model", "model"),
        description="Name of the related model.",
    )
    cardinality: Cardinality = Field(
        ...,
        validation_alias=AliasChoices("cardinality", "type"),
        description="one-to-one, one-to-many or many-to-many.",
    )

    @field_validator("cardinality", mode="before")
    @classmethod
    def _normalise_cardinality(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower().replace("_", "-")
        return v

    def __repr__(self) -> str:
        return f"<RelationSpec {self.cardinality} → {self.target_model}>"


class FieldDefinition(BaseModel):
    """
    One attribute of a model.

    ``type`` is kept as free text: unrecognised types are not an error,
    they fall back to the string mapping in every dialect.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(default="", description="Field identifier.")
    type: str = Field(default="", description="Abstract field type.")
    required: bool = Field(default=False, description="Non-optional in every dialect.")
    unique: bool = Field(default=False, description="Uniqueness constraint.")
    default: Optional[Union[bool, int, float, str]] = Field(
        default=None,
        description="Literal default value, emitted verbatim.",
    )
    relation: Optional[RelationSpec] = Field(
        default=None, description="Optional link to another model."
    )

    @field_validator("name", "type", mode="before")
    @classmethod
    def _missing_as_empty(cls, v: Any) -> Any:
        return _none_to_empty(v)

    @property
    def type_key(self) -> str:
        """Lower-cased, trimmed type used for table lookups."""
        return self.type.strip().lower()

    @property
    def is_known_type(self) -> bool:
        return self.type_key in _KNOWN_TYPES

    @property
    def default_literal(self) -> Optional[str]:
        """Default rendered as literal text (``false`` rather than ``False``)."""
        if self.default is None:
            return None
        if isinstance(self.default, bool):
            return "true" if self.default else "false"
        return str(self.default)

    def __repr__(self) -> str:
        flags: str = "!" if self.required else "?"
        return f"<FieldDefinition {self.name}: {self.type}{flags}>"


class ModelDefinition(BaseModel):
    """One entity; field order is preserved in every rendered artifact."""

    model_config = _SHARED_CONFIG

    name: str = Field(default="", description="Model name (upper camel case).")
    fields: List[FieldDefinition] = Field(
        default_factory=list, description="Ordered field descriptors."
    )
    timestamps: bool = Field(
        default=False, description="Append createdAt / updatedAt."
    )

    @field_validator("name", mode="before")
    @classmethod
    def _missing_name(cls, v: Any) -> Any:
        return _none_to_empty(v)

    @field_validator("fields", mode="before")
    @classmethod
    def _missing_fields(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def __repr__(self) -> str:
        return f"<ModelDefinition {self.name} ({len(self.fields)} fields)>"


class ProjectConfig(BaseModel):
    """
    Root input of a generation run.

    Accepts both the camelCase keys of configuration files
    (``projectName``, ``apiType``) and the snake_case attribute names.
    """

    model_config = _SHARED_CONFIG

    project_name: str = Field(default="", description="Human project name.")
    api_type: ApiType = Field(default=ApiType.REST, description="rest, graphql or both.")
    database: DatabaseKind = Field(
        default=DatabaseKind.POSTGRESQL, description="Datasource provider."
    )
    authentication: bool = Field(
        default=False, description="Generate the authentication subsystem."
    )
    models: List[ModelDefinition] = Field(
        default_factory=list, description="Ordered model descriptors."
    )

    @field_validator("project_name", mode="before")
    @classmethod
    def _missing_project_name(cls, v: Any) -> Any:
        return _none_to_empty(v)

    @field_validator("models", mode="before")
    @classmethod
    def _missing_models(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("api_type", "database", mode="before")
    @classmethod
    def _lowercase_option(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    # -- Derived helpers ------------------------------------------------------

    @property
    def package_name(self) -> str:
        """Normalised, hyphenated identifier used for the package manifest."""
        return normalize_project_name(self.project_name)

    @property
    def wants_rest(self) -> bool:
        return self.api_type in (ApiType.REST.value, ApiType.BOTH.value)

    @property
    def wants_graphql(self) -> bool:
        return self.api_type in (ApiType.GRAPHQL.value, ApiType.BOTH.value)

    @property
    def model_names(self) -> List[str]:
        return [m.name for m in self.models]

    def get_model(self, name: str) -> Optional[ModelDefinition]:
        for model in self.models:
            if model.name == name:
                return model
        return None

    def has_model(self, name: str) -> bool:
        return self.get_model(name) is not None

    def __repr__(self) -> str:
        return (
            f"<ProjectConfig {self.project_name!r} api={self.api_type} "
            f"db={self.database} auth={self.authentication} "
            f"models={len(self.models)}>"
        )


_KNOWN_TYPES: FrozenSet[str] = frozenset(t.value for t in FieldType)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "AUTH_MODEL_NAME",
    "RESERVED_MODEL_NAMES",
    "TIMESTAMP_FIELDS",
    "FieldType",
    "Cardinality",
    "ApiType",
    "DatabaseKind",
    "RelationSpec",
    "FieldDefinition",
    "ModelDefinition",
    "ProjectConfig",
]

logger.debug("schemabridge.models loaded.")
