# File: schemabridge/__init__.py
"""
Schema Bridge - TypeScript API Project Generator
=================================================

Turns a declarative project configuration (JSON/YAML) into a runnable
TypeScript backend: a Prisma schema, Zod DTOs, an OpenAPI 3.0 document,
clean-architecture CRUD layers, Express and/or Apollo GraphQL surfaces,
an optional JWT authentication subsystem and the project scaffolding.

Architecture overview::

    ┌──────────────┐     ┌──────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ ProjectGenerator │────▶│    templates/    │
    │   (cli.py)   │     │  (generator.py)  │     │ (renderer pkg)   │
    └──────────────┘     └────────┬─────────┘     └──────────────────┘
                                  │
              ┌───────────┬───────┴────┬────────────┐
              ▼           ▼            ▼            ▼
        ┌──────────┐ ┌─────────┐ ┌──────────┐ ┌───────────┐
        │validators│ │ models  │ │ auth     │ │ exporters │
        │  (.py)   │ │ (.py)   │ │ (.py)    │ │  (.py)    │
        └──────────┘ └─────────┘ └──────────┘ └───────────┘

Usage::

    # As a library
    from schemabridge import ProjectGenerator, parse_config
    config = parse_config({"projectName": "Blog", "models": [...]})
    files = ProjectGenerator().render(config)

    # From the command line
    python -m schemabridge -c blog.yaml -o ./blog-api --verbose

Public API:
    - ProjectGenerator   - Pipeline orchestrator
    - ProjectConfig      - Configuration model
    - validate_config    - Structural validation (raises InvalidConfigError)
    - audit_config       - Advisory checks (warnings)
    - ProjectExporter    - File-system writer
"""

from __future__ import annotations

__version__: str = "1.0.0"
__author__: str = "Diegoproggramer"
__license__: str = "MIT"

from schemabridge.models import (
    AUTH_MODEL_NAME,
    ApiType,
    Cardinality,
    DatabaseKind,
    FieldDefinition,
    FieldType,
    ModelDefinition,
    ProjectConfig,
    RelationSpec,
)
from schemabridge.validators import (
    InvalidConfigError,
    ValidationResult,
    audit_config,
    validate_config,
)
from schemabridge.auth import build_auth_model, crud_models, with_auth_model
from schemabridge.utils import (
    Timer,
    normalize_project_name,
    pluralize,
    singularize,
    to_camel_case,
    to_kebab_case,
    to_pascal_case,
    to_snake_case,
)
from schemabridge.exporters import ExportManifest, ExportResult, ProjectExporter
from schemabridge.generator import (
    GenerationReport,
    GenerationStage,
    ProjectGenerator,
    load_config_file,
    parse_config,
)

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Core orchestrator
    "ProjectGenerator",
    "GenerationReport",
    "GenerationStage",
    "load_config_file",
    "parse_config",
    # Models
    "AUTH_MODEL_NAME",
    "ApiType",
    "Cardinality",
    "DatabaseKind",
    "FieldDefinition",
    "FieldType",
    "ModelDefinition",
    "ProjectConfig",
    "RelationSpec",
    # Validation
    "InvalidConfigError",
    "ValidationResult",
    "audit_config",
    "validate_config",
    # Authentication
    "build_auth_model",
    "crud_models",
    "with_auth_model",
    # Exporters
    "ProjectExporter",
    "ExportManifest",
    "ExportResult",
    # Utilities
    "Timer",
    "normalize_project_name",
    "pluralize",
    "singularize",
    "to_camel_case",
    "to_kebab_case",
    "to_pascal_case",
    "to_snake_case",
]
