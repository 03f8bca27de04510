# File: schemabridge/templates/rest.py
"""
Schema Bridge - REST Layer Renderer
====================================
Express controllers and routers for every CRUD model, the shared
validation and error middleware, and the application wiring file.

Routing contract per model (segment from ``resource_segment``):

    GET    /api/<segment>         controller.getAll
    GET    /api/<segment>/:id     controller.getById
    POST   /api/<segment>         validateBody(Create<Name>Schema), controller.create
    PUT    /api/<segment>/:id     validateBody(Update<Name>Schema), controller.update
    DELETE /api/<segment>/:id     controller.delete

When authentication is enabled every model route is guarded by the
``authenticate`` middleware.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from schemabridge.auth import crud_models
from schemabridge.models import ModelDefinition, ProjectConfig
from schemabridge.templates.common import (
    AUTH_CONTROLLER_PATH,
    AUTH_MIDDLEWARE_PATH,
    AUTH_ROUTES_PATH,
    AUTH_SERVICE_PATH,
    ERROR_MIDDLEWARE_PATH,
    GENERATED_BANNER,
    REST_APP_PATH,
    VALIDATION_MIDDLEWARE_PATH,
    async_handler,
    controller_path,
    dto_path,
    import_path,
    join_lines,
    repository_impl_path,
    routes_path,
    use_cases_path,
)
from schemabridge.utils import resource_segment, variable_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.templates.rest")


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


def render_controller(model: ModelDefinition) -> str:
    name: str = model.name
    path: str = controller_path(name)
    lines: List[str] = [
        GENERATED_BANNER,
        "import { Request, Response, NextFunction } from 'express';",
        f"import {{ {name}UseCases }} from '{import_path(path, use_cases_path(name))}';",
        "",
        "/**",
        f" * HTTP handlers for the {name} resource.",
        " * Request bodies are validated by the router before reaching here.",
        " */",
        f"export class {name}Controller {{",
        f"  constructor(private readonly useCases: {name}UseCases) {{}}",
        "",
    ]
    lines.extend(async_handler("getAll", ["res.json(await this.useCases.getAll());"]))
    lines.append("")
    lines.extend(async_handler("getById", ["res.json(await this.useCases.getById(req.params.id));"]))
    lines.append("")
    lines.extend(async_handler("create", ["res.status(201).json(await this.useCases.create(req.body));"]))
    lines.append("")
    lines.extend(
        async_handler("update", ["res.json(await this.useCases.update(req.params.id, req.body));"])
    )
    lines.append("")
    lines.extend(
        async_handler("delete", ["await this.useCases.delete(req.params.id);", "res.status(204).send();"])
    )
    lines.append("}")
    return join_lines(lines)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


def render_routes(config: ProjectConfig, model: ModelDefinition) -> str:
    name: str = model.name
    path: str = routes_path(name)
    segment: str = resource_segment(name)
    guard: str = "authenticate, " if config.authentication else ""

    lines: List[str] = [
        GENERATED_BANNER,
        "import { Router } from 'express';",
        f"import {{ {name}Controller }} from '{import_path(path, controller_path(name))}';",
        f"import {{ Create{name}Schema, Update{name}Schema }} from '{import_path(path, dto_path(name))}';",
        f"import {{ validateBody }} from '{import_path(path, VALIDATION_MIDDLEWARE_PATH)}';",
    ]
    if config.authentication:
        lines.append(
            f"import {{ authenticate }} from '{import_path(path, AUTH_MIDDLEWARE_PATH)}';"
        )
    lines.extend([
        "",
        f"export function create{name}Routes(controller: {name}Controller): Router {{",
        "  const router = Router();",
        "",
        f"  router.get('/{segment}', {guard}controller.getAll);",
        f"  router.get('/{segment}/:id', {guard}controller.getById);",
        f"  router.post('/{segment}', {guard}validateBody(Create{name}Schema), controller.create);",
        f"  router.put('/{segment}/:id', {guard}validateBody(Update{name}Schema), controller.update);",
        f"  router.delete('/{segment}/:id', {guard}controller.delete);",
        "",
        "  return router;",
        "}",
    ])
    return join_lines(lines)


# ---------------------------------------------------------------------------
# Shared middleware
# ---------------------------------------------------------------------------


def render_validation_middleware() -> str:
    lines: List[str] = [
        GENERATED_BANNER,
        "import { Request, Response, NextFunction } from 'express';",
        "import { ZodSchema } from 'zod';",
        "",
        "/**",
        " * Validates req.body against a Zod schema and replaces it with the parsed value.",
        " */",
        "export const validateBody =",
        "  (schema: ZodSchema) =>",
        "  (req: Request, res: Response, next: NextFunction): void => {",
        "    const result = schema.safeParse(req.body);",
        "    if (!result.success) {",
        "      res.status(400).json({ error: 'Validation failed', details: result.error.message });",
        "      return;",
        "    }",
        "    req.body = result.data;",
        "    next();",
        "  };",
    ]
    return join_lines(lines)


def render_error_middleware() -> str:
    lines: List[str] = [
        GENERATED_BANNER,
        "import { Request, Response, NextFunction } from 'express';",
        "",
        "/**",
        " * Error carrying an HTTP status code.",
        " */",
        "export class AppError extends Error {",
        "  constructor(public readonly statusCode: number, message: string) {",
        "    super(message);",
        "    Object.setPrototypeOf(this, AppError.prototype);",
        "  }",
        "}",
        "",
        "export const notFoundHandler = (req: Request, res: Response): void => {",
        "  res.status(404).json({ error: 'Route not found' });",
        "};",
        "",
        "export const errorHandler = (",
        "  err: Error,",
        "  req: Request,",
        "  res: Response,",
        "  _next: NextFunction,",
        "): void => {",
        "  const statusCode = (err as { statusCode?: unknown }).statusCode;",
        "  if (typeof statusCode === 'number') {",
        "    res.status(statusCode).json({ error: err.message });",
        "    return;",
        "  }",
        "  if (err.message.endsWith('not found')) {",
        "    res.status(404).json({ error: err.message });",
        "    return;",
        "  }",
        "",
        "  console.error('Unexpected error:', err);",
        "  res.status(500).json({",
        "    error: 'Internal Server Error',",
        "    details: process.env.NODE_ENV === 'development' ? err.message : undefined,",
        "  });",
        "};",
    ]
    return join_lines(lines)


# ---------------------------------------------------------------------------
# Application wiring
# ---------------------------------------------------------------------------


def render_rest_app(config: ProjectConfig) -> str:
    """``createApp`` mounts every router; ``finalizeApp`` adds the fallbacks."""
    path: str = REST_APP_PATH
    models: List[ModelDefinition] = crud_models(config)
    helmet_call: str = (
        "helmet({ contentSecurityPolicy: false })" if config.wants_graphql else "helmet()"
    )

    lines: List[str] = [
        GENERATED_BANNER,
        "import express, { Express, Request, Response } from 'express';",
        "import cors from 'cors';",
        "import helmet from 'helmet';",
        "import { PrismaClient } from '@prisma/client';",
        "import { errorHandler, notFoundHandler } from "
        f"'{import_path(path, ERROR_MIDDLEWARE_PATH)}';",
    ]
    for model in models:
        name: str = model.name
        lines.append(
            f"import {{ {name}RepositoryImpl }} from '{import_path(path, repository_impl_path(name))}';"
        )
        lines.append(f"import {{ {name}UseCases }} from '{import_path(path, use_cases_path(name))}';")
        lines.append(
            f"import {{ {name}Controller }} from '{import_path(path, controller_path(name))}';"
        )
        lines.append(f"import {{ create{name}Routes }} from '{import_path(path, routes_path(name))}';")
    if config.authentication:
        lines.append(f"import {{ AuthService }} from '{import_path(path, AUTH_SERVICE_PATH)}';")
        lines.append(
            f"import {{ AuthController }} from '{import_path(path, AUTH_CONTROLLER_PATH)}';"
        )
        lines.append(f"import {{ createAuthRoutes }} from '{import_path(path, AUTH_ROUTES_PATH)}';")

    lines.extend([
        "",
        "/**",
        " * Builds the Express application with every REST router mounted.",
        " */",
        "export function createApp(prisma: PrismaClient = new PrismaClient()): {",
        "  app: Express;",
        "  prisma: PrismaClient;",
        "} {",
        "  const app = express();",
        "",
        f"  app.use({helmet_call});",
        "  app.use(cors());",
        "  app.use(express.json());",
        "  app.use(express.urlencoded({ extended: true }));",
        "",
        "  app.get('/health', (req: Request, res: Response) => {",
        "    res.json({ status: 'OK', timestamp: new Date().toISOString() });",
        "  });",
    ])

    for model in models:
        name = model.name
        var: str = variable_name(name)
        lines.extend([
            "",
            f"  const {var}UseCases = new {name}UseCases(new {name}RepositoryImpl(prisma));",
            f"  app.use('/api', create{name}Routes(new {name}Controller({var}UseCases)));",
        ])

    if config.authentication:
        lines.extend([
            "",
            "  const authController = new AuthController(new AuthService(prisma));",
            "  app.use('/api/auth', createAuthRoutes(authController));",
        ])

    lines.extend([
        "",
        "  return { app, prisma };",
        "}",
        "",
        "/**",
        " * Registers the 404 and error handlers. Call after every router is mounted.",
        " */",
        "export function finalizeApp(app: Express): Express {",
        "  app.use(notFoundHandler);",
        "  app.use(errorHandler);",
        "  return app;",
        "}",
    ])
    return join_lines(lines)


def render_middleware_artifacts() -> Dict[str, str]:
    return {
        VALIDATION_MIDDLEWARE_PATH: render_validation_middleware(),
        ERROR_MIDDLEWARE_PATH: render_error_middleware(),
    }


def render_rest_layer(config: ProjectConfig) -> Dict[str, str]:
    """Controllers, routers, shared middleware and the app wiring file."""
    files: Dict[str, str] = {}
    for model in crud_models(config):
        files[controller_path(model.name)] = render_controller(model)
        files[routes_path(model.name)] = render_routes(config, model)
    files.update(render_middleware_artifacts())
    files[REST_APP_PATH] = render_rest_app(config)
    logger.debug("Rendered REST layer: %d files.", len(files))
    return files


__all__: List[str] = [
    "render_controller",
    "render_routes",
    "render_validation_middleware",
    "render_error_middleware",
    "render_rest_app",
    "render_middleware_artifacts",
    "render_rest_layer",
]
