# File: schemabridge/templates/openapi.py
"""
Schema Bridge - API Document Renderer
======================================
Builds the OpenAPI 3.0 document as a plain ``dict`` and serialises it
with ``json.dumps(indent=2)``.  Insertion order is the rendering order,
so identical configurations give byte-identical documents.

Paths:
    - six ``/auth/*`` paths first when authentication is enabled;
    - ``/<segment>`` and ``/<segment>/{id}`` for every CRUD model, where
      ``<segment>`` comes from ``resource_segment`` (``Category`` →
      ``/categories``).

Component schemas cover every model, ``User`` included, as ``X``,
``CreateX`` and ``UpdateX``.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, List

from schemabridge.auth import crud_models
from schemabridge.models import FieldDefinition, ModelDefinition, ProjectConfig
from schemabridge.templates.common import (
    OPENAPI_PATH,
    surface_fields,
    timestamp_fields,
)
from schemabridge.typemaps import api_doc_type
from schemabridge.utils import resource_segment

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.templates.openapi")

AUTH_PATHS: List[str] = [
    "/auth/register",
    "/auth/login",
    "/auth/verify-email",
    "/auth/forgot-password",
    "/auth/reset-password",
    "/auth/profile",
]

_JSON: str = "application/json"


def _ref(name: str) -> Dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}


def _response_ref(name: str) -> Dict[str, str]:
    return {"$ref": f"#/components/responses/{name}"}


def _json_body(schema: Dict[str, Any], description: str = "Successful response") -> Dict[str, Any]:
    return {"description": description, "content": {_JSON: {"schema": schema}}}


def _request_body(schema: Dict[str, Any]) -> Dict[str, Any]:
    return {"required": True, "content": {_JSON: {"schema": schema}}}


def _object(properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def _message_schema() -> Dict[str, Any]:
    return _object({"message": {"type": "string"}}, ["message"])


def _id_parameter(model: ModelDefinition) -> Dict[str, Any]:
    return {
        "name": "id",
        "in": "path",
        "required": True,
        "schema": {"type": "string", "format": "uuid"},
        "description": f"The {model.name} ID.",
    }


# ---------------------------------------------------------------------------
# Component schemas
# ---------------------------------------------------------------------------


def field_schema(fld: FieldDefinition) -> Dict[str, Any]:
    schema: Dict[str, Any] = api_doc_type(fld.type)
    if not fld.required:
        schema["nullable"] = True
    if fld.default_literal is not None:
        schema["default"] = _default_value(fld.default_literal)
    return schema


def _reject_non_finite(token: str) -> float:
    raise ValueError(f"non-finite number {token!r}")


def _finite_float(token: str) -> float:
    value: float = float(token)
    if not math.isfinite(value):
        _reject_non_finite(token)
    return value


def _default_value(literal: str) -> Any:
    # "false" / "3" / '"draft"' become JSON values; bare words and
    # non-finite numbers stay strings
    try:
        return json.loads(
            literal, parse_constant=_reject_non_finite, parse_float=_finite_float
        )
    except ValueError:
        return literal


def model_schemas(config: ProjectConfig, model: ModelDefinition) -> Dict[str, Dict[str, Any]]:
    """``X``, ``CreateX`` and ``UpdateX`` schemas for *model*."""
    fields: List[FieldDefinition] = surface_fields(config, model)

    properties: Dict[str, Any] = {
        "id": {
            "type": "string",
            "format": "uuid",
            "description": f"Unique identifier of the {model.name}.",
        }
    }
    input_properties: Dict[str, Any] = {}
    for fld in fields:
        properties[fld.name] = field_schema(fld)
        input_properties[fld.name] = field_schema(fld)
    for name in timestamp_fields(model):
        properties[name] = api_doc_type("date")

    required_fields: List[str] = [f.name for f in fields if f.required]

    return {
        model.name: _object(
            properties, ["id", *required_fields, *timestamp_fields(model)]
        ),
        f"Create{model.name}": _object(dict(input_properties), required_fields),
        f"Update{model.name}": _object(dict(input_properties), []),
    }


def common_responses() -> Dict[str, Any]:
    error: Dict[str, Any] = _object(
        {"error": {"type": "string"}, "details": {"type": "string"}}, ["error"]
    )
    return {
        "BadRequest": _json_body(error, "Invalid request payload"),
        "Unauthorized": _json_body(error, "Missing or invalid credentials"),
        "NotFound": _json_body(error, "Resource not found"),
        "InternalServerError": _json_body(error, "Unexpected server error"),
    }


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


def collection_path(model: ModelDefinition) -> Dict[str, Any]:
    tag: str = model.name
    return {
        "get": {
            "summary": f"List {model.name} records",
            "tags": [tag],
            "operationId": f"list{model.name}",
            "responses": {
                "200": _json_body({"type": "array", "items": _ref(model.name)}),
                "500": _response_ref("InternalServerError"),
            },
        },
        "post": {
            "summary": f"Create a {model.name}",
            "tags": [tag],
            "operationId": f"create{model.name}",
            "requestBody": _request_body(_ref(f"Create{model.name}")),
            "responses": {
                "201": _json_body(_ref(model.name), "Created"),
                "400": _response_ref("BadRequest"),
                "500": _response_ref("InternalServerError"),
            },
        },
    }


def item_path(model: ModelDefinition) -> Dict[str, Any]:
    tag: str = model.name
    return {
        "get": {
            "summary": f"Get a {model.name} by ID",
            "tags": [tag],
            "operationId": f"get{model.name}",
            "parameters": [_id_parameter(model)],
            "responses": {
                "200": _json_body(_ref(model.name)),
                "404": _response_ref("NotFound"),
                "500": _response_ref("InternalServerError"),
            },
        },
        "put": {
            "summary": f"Update a {model.name}",
            "tags": [tag],
            "operationId": f"update{model.name}",
            "parameters": [_id_parameter(model)],
            "requestBody": _request_body(_ref(f"Update{model.name}")),
            "responses": {
                "200": _json_body(_ref(model.name), "Updated"),
                "400": _response_ref("BadRequest"),
                "404": _response_ref("NotFound"),
                "500": _response_ref("InternalServerError"),
            },
        },
        "delete": {
            "summary": f"Delete a {model.name}",
            "tags": [tag],
            "operationId": f"delete{model.name}",
            "parameters": [_id_parameter(model)],
            "responses": {
                "204": {"description": "Deleted"},
                "404": _response_ref("NotFound"),
                "500": _response_ref("InternalServerError"),
            },
        },
    }


def auth_paths() -> Dict[str, Any]:
    """The six fixed authentication paths."""
    tags: List[str] = ["Auth"]
    public: List[Any] = []
    credentials: Dict[str, Any] = {
        "email": {"type": "string", "format": "email"},
        "password": {"type": "string", "minLength": 8},
    }
    return {
        "/auth/register": {
            "post": {
                "summary": "Register a new user",
                "tags": tags,
                "security": public,
                "requestBody": _request_body(
                    _object(
                        {**credentials, "name": {"type": "string"}},
                        ["email", "password", "name"],
                    )
                ),
                "responses": {
                    "201": _json_body(_message_schema(), "Registered"),
                    "400": _response_ref("BadRequest"),
                },
            }
        },
        "/auth/login": {
            "post": {
                "summary": "Log in and receive a JWT",
                "tags": tags,
                "security": public,
                "requestBody": _request_body(
                    _object(credentials, ["email", "password"])
                ),
                "responses": {
                    "200": _json_body(
                        _object(
                            {"token": {"type": "string"}, "user": _ref("User")},
                            ["token", "user"],
                        )
                    ),
                    "401": _response_ref("Unauthorized"),
                },
            }
        },
        "/auth/verify-email": {
            "get": {
                "summary": "Verify an email address",
                "tags": tags,
                "security": public,
                "parameters": [
                    {
                        "name": "token",
                        "in": "query",
                        "required": True,
                        "schema": {"type": "string"},
                    }
                ],
                "responses": {
                    "200": _json_body(_message_schema()),
                    "400": _response_ref("BadRequest"),
                },
            }
        },
        "/auth/forgot-password": {
            "post": {
                "summary": "Request a password reset",
                "tags": tags,
                "security": public,
                "requestBody": _request_body(
                    _object({"email": credentials["email"]}, ["email"])
                ),
                "responses": {"200": _json_body(_message_schema())},
            }
        },
        "/auth/reset-password": {
            "post": {
                "summary": "Reset a password with a reset token",
                "tags": tags,
                "security": public,
                "requestBody": _request_body(
                    _object(
                        {
                            "token": {"type": "string"},
                            "password": credentials["password"],
                        },
                        ["token", "password"],
                    )
                ),
                "responses": {
                    "200": _json_body(_message_schema()),
                    "400": _response_ref("BadRequest"),
                },
            }
        },
        "/auth/profile": {
            "get": {
                "summary": "Current user profile",
                "tags": tags,
                "responses": {
                    "200": _json_body(_ref("User")),
                    "401": _response_ref("Unauthorized"),
                },
            }
        },
    }


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


def build_openapi_document(config: ProjectConfig) -> Dict[str, Any]:
    """The API document as a JSON-ready ``dict``."""
    paths: Dict[str, Any] = {}
    if config.authentication:
        paths.update(auth_paths())
    for model in crud_models(config):
        base: str = f"/{resource_segment(model.name)}"
        paths[base] = collection_path(model)
        paths[f"{base}/{{id}}"] = item_path(model)

    schemas: Dict[str, Any] = {}
    for model in config.models:
        schemas.update(model_schemas(config, model))

    components: Dict[str, Any] = {
        "schemas": schemas,
        "responses": common_responses(),
    }
    document: Dict[str, Any] = {
        "openapi": "3.0.0",
        "info": {
            "title": f"{config.project_name} API",
            "version": "1.0.0",
            "description": f"API specification for {config.project_name}",
        },
        "servers": [
            {"url": "http://localhost:3000/api", "description": "Development server"},
            {"url": "https://api.example.com", "description": "Production server"},
        ],
        "paths": paths,
        "components": components,
    }
    if config.authentication:
        components["securitySchemes"] = {
            "bearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
                "description": "JWT issued by /auth/login",
            }
        }
        document["security"] = [{"bearerAuth": []}]

    logger.debug("Built API document with %d paths.", len(paths))
    return document


def render_openapi(config: ProjectConfig) -> str:
    return json.dumps(build_openapi_document(config), indent=2) + "\n"


def render_openapi_artifacts(config: ProjectConfig) -> Dict[str, str]:
    return {OPENAPI_PATH: render_openapi(config)}


__all__: List[str] = [
    "AUTH_PATHS",
    "field_schema",
    "model_schemas",
    "common_responses",
    "collection_path",
    "item_path",
    "auth_paths",
    "build_openapi_document",
    "render_openapi",
    "render_openapi_artifacts",
]
