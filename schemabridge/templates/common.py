# File: schemabridge/templates/common.py
"""
Shared pieces of the renderer layer: artifact paths, relative import
specifiers, the implicit-field rules and the field view exposed on API
surfaces.
"""

from __future__ import annotations

import posixpath
from typing import List, Tuple

from schemabridge.models import (
    TIMESTAMP_FIELDS,
    Cardinality,
    FieldDefinition,
    ModelDefinition,
    ProjectConfig,
)
from schemabridge.utils import module_name

GENERATED_BANNER: str = "// Generated by schemabridge."

# Signing secret lookup shared by the auth service, middleware and GraphQL context.
JWT_SECRET_EXPR: str = "process.env.JWT_SECRET || 'change-me'"

# ---------------------------------------------------------------------------
# Artifact paths (relative to the output directory, POSIX separators)
# ---------------------------------------------------------------------------

SCHEMA_PATH: str = "prisma/schema.prisma"
OPENAPI_PATH: str = "docs/openapi.json"

REST_APP_PATH: str = "src/infrastructure/web/app.ts"
VALIDATION_MIDDLEWARE_PATH: str = "src/presentation/rest/middleware/validation.middleware.ts"
ERROR_MIDDLEWARE_PATH: str = "src/presentation/rest/middleware/error.middleware.ts"

TYPEDEFS_PATH: str = "src/presentation/graphql/typeDefs.ts"
GRAPHQL_SERVER_PATH: str = "src/infrastructure/graphql/server.ts"
GRAPHQL_APP_PATH: str = "src/infrastructure/graphql/app.ts"

AUTH_SERVICE_PATH: str = "src/application/services/AuthService.ts"
AUTH_CONTROLLER_PATH: str = "src/presentation/rest/controllers/AuthController.ts"
AUTH_MIDDLEWARE_PATH: str = "src/presentation/rest/middleware/auth.middleware.ts"
AUTH_ROUTES_PATH: str = "src/presentation/rest/routes/auth.routes.ts"

ENTRYPOINT_PATH: str = "src/index.ts"

PROJECT_DIRECTORIES: Tuple[str, ...] = (
    "prisma",
    "docs",
    "src/domain/entities",
    "src/domain/repositories",
    "src/application/dto",
    "src/application/use-cases",
    "src/application/services",
    "src/infrastructure/database/repositories",
    "src/infrastructure/web",
    "src/infrastructure/graphql",
    "src/presentation/rest/controllers",
    "src/presentation/rest/routes",
    "src/presentation/rest/middleware",
    "src/presentation/graphql/resolvers",
)


def dto_path(model_name: str) -> str:
    return f"src/application/dto/{module_name(model_name)}.dto.ts"


def entity_path(model_name: str) -> str:
    return f"src/domain/entities/{model_name}Entity.ts"


def repository_path(model_name: str) -> str:
    return f"src/domain/repositories/I{model_name}Repository.ts"


def repository_impl_path(model_name: str) -> str:
    return f"src/infrastructure/database/repositories/{model_name}RepositoryImpl.ts"


def use_cases_path(model_name: str) -> str:
    return f"src/application/use-cases/{model_name}UseCases.ts"


def controller_path(model_name: str) -> str:
    return f"src/presentation/rest/controllers/{model_name}Controller.ts"


def routes_path(model_name: str) -> str:
    return f"src/presentation/rest/routes/{module_name(model_name)}.routes.ts"


def resolvers_path(model_name: str) -> str:
    return f"src/presentation/graphql/resolvers/{module_name(model_name)}.resolvers.ts"


def import_path(from_file: str, to_file: str) -> str:
    """
    Relative module specifier from one artifact to another.

    >>> import_path("src/index.ts", "src/infrastructure/web/app.ts")
    './infrastructure/web/app'
    """
    target: str = posixpath.splitext(to_file)[0]
    relative: str = posixpath.relpath(target, posixpath.dirname(from_file))
    if not relative.startswith("."):
        relative = f"./{relative}"
    return relative


def join_lines(lines: List[str]) -> str:
    """Join rendered lines into a blob ending with exactly one newline."""
    return "\n".join(lines).rstrip("\n") + "\n"


def async_handler(name: str, body: List[str]) -> List[str]:
    """Express handler property wrapping *body* in ``try`` / ``next(error)``."""
    lines: List[str] = [
        f"  {name} = async (req: Request, res: Response, next: NextFunction): Promise<void> => {{",
        "    try {",
    ]
    lines.extend(f"      {line}" for line in body)
    lines.extend([
        "    } catch (error) {",
        "      next(error);",
        "    }",
        "  };",
    ])
    return lines


# ---------------------------------------------------------------------------
# Field views
# ---------------------------------------------------------------------------


def timestamp_fields(model: ModelDefinition) -> Tuple[str, ...]:
    """Implicit timestamp fields of *model*, in rendering order."""
    return TIMESTAMP_FIELDS if model.timestamps else ()


def resolved_relation(config: ProjectConfig, fld: FieldDefinition) -> bool:
    """True when *fld* links to a model present in *config*."""
    return fld.relation is not None and config.has_model(fld.relation.target_model)


def surface_fields(config: ProjectConfig, model: ModelDefinition) -> List[FieldDefinition]:
    """
    Fields exposed on validation, API-document, entity and GraphQL surfaces.

    A one-to-one relation shows up as its ``<name>Id`` foreign key; to-many
    relations are managed from the schema document only.  Relations to
    unknown models stay plain fields.
    """
    fields: List[FieldDefinition] = []
    for fld in model.fields:
        if not resolved_relation(config, fld):
            fields.append(fld)
            continue
        if fld.relation.cardinality == Cardinality.ONE_TO_ONE.value:
            fields.append(
                FieldDefinition(
                    name=f"{fld.name}Id",
                    type="string",
                    required=fld.required,
                    unique=True,
                )
            )
    return fields


__all__: List[str] = [
    "GENERATED_BANNER",
    "JWT_SECRET_EXPR",
    "SCHEMA_PATH",
    "OPENAPI_PATH",
    "REST_APP_PATH",
    "VALIDATION_MIDDLEWARE_PATH",
    "ERROR_MIDDLEWARE_PATH",
    "TYPEDEFS_PATH",
    "GRAPHQL_SERVER_PATH",
    "GRAPHQL_APP_PATH",
    "AUTH_SERVICE_PATH",
    "AUTH_CONTROLLER_PATH",
    "AUTH_MIDDLEWARE_PATH",
    "AUTH_ROUTES_PATH",
    "ENTRYPOINT_PATH",
    "PROJECT_DIRECTORIES",
    "dto_path",
    "entity_path",
    "repository_path",
    "repository_impl_path",
    "use_cases_path",
    "controller_path",
    "routes_path",
    "resolvers_path",
    "import_path",
    "join_lines",
    "async_handler",
    "timestamp_fields",
    "resolved_relation",
    "surface_fields",
]
