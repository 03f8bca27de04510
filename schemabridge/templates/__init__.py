# File: schemabridge/templates/__init__.py
"""
Schema Bridge - Artifact Renderers
===================================

Stateless renderer functions grouped by artifact family.  Every
``render_*_artifacts`` / ``render_*_layer`` function returns a mapping of
relative output path to rendered text and performs no I/O.

    schema       Prisma schema document
    validation   Zod DTO modules
    openapi      OpenAPI 3.0 document
    crud         repository contract, Prisma repository, use cases, entity
    rest         Express controllers, routers, middleware, app wiring
    graphql      type definitions, resolvers, Apollo server, app wiring
    auth         authentication service, controller, middleware, routes
    project      package manifest, tsconfig, env template, readme, entrypoint
"""

from __future__ import annotations

from typing import List

from schemabridge.templates.auth import render_auth_system
from schemabridge.templates.crud import render_crud_layer
from schemabridge.templates.graphql import render_graphql_layer
from schemabridge.templates.openapi import build_openapi_document, render_openapi_artifacts
from schemabridge.templates.project import render_entrypoint_artifacts, render_project_files
from schemabridge.templates.rest import render_rest_layer
from schemabridge.templates.schema import render_schema_artifacts
from schemabridge.templates.validation import render_validation_artifacts

__all__: List[str] = [
    "render_schema_artifacts",
    "render_validation_artifacts",
    "render_openapi_artifacts",
    "build_openapi_document",
    "render_crud_layer",
    "render_rest_layer",
    "render_graphql_layer",
    "render_auth_system",
    "render_project_files",
    "render_entrypoint_artifacts",
]
