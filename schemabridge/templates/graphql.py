# File: schemabridge/templates/graphql.py
"""
Schema Bridge - GraphQL Layer Renderer
=======================================
Type definitions, one resolver factory per CRUD model, the Apollo server
factory and the Express integration file.

Naming per model ``BlogPost``:

    type BlogPost / input CreateBlogPostInput / input UpdateBlogPostInput
    Query.blogPosts, Query.blogPost(id)
    Mutation.createBlogPost, Mutation.updateBlogPost, Mutation.deleteBlogPost

Scalar tokens come from ``typemaps.graphql_type``; timestamps are exposed
as ``String!``.  ``Query.health`` is always present so the document stays
valid when authentication leaves no CRUD model behind.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from schemabridge.auth import crud_models
from schemabridge.models import ModelDefinition, ProjectConfig
from schemabridge.templates.common import (
    AUTH_CONTROLLER_PATH,
    AUTH_ROUTES_PATH,
    AUTH_SERVICE_PATH,
    ERROR_MIDDLEWARE_PATH,
    GENERATED_BANNER,
    GRAPHQL_APP_PATH,
    GRAPHQL_SERVER_PATH,
    JWT_SECRET_EXPR,
    TYPEDEFS_PATH,
    dto_path,
    import_path,
    join_lines,
    repository_impl_path,
    resolvers_path,
    surface_fields,
    timestamp_fields,
    use_cases_path,
)
from schemabridge.templates.rest import render_middleware_artifacts
from schemabridge.typemaps import graphql_type
from schemabridge.utils import plural_variable_name, variable_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.templates.graphql")


# ---------------------------------------------------------------------------
# Type definitions
# ---------------------------------------------------------------------------


def type_block(config: ProjectConfig, model: ModelDefinition) -> List[str]:
    """
    Object type plus create / update input types for *model*.

    Input types are omitted when the model exposes no surface fields.
    """
    name: str = model.name
    fields = surface_fields(config, model)

    lines: List[str] = [f"  type {name} {{", "    id: ID!"]
    for fld in fields:
        marker: str = "!" if fld.required else ""
        lines.append(f"    {fld.name}: {graphql_type(fld.type)}{marker}")
    for ts in timestamp_fields(model):
        lines.append(f"    {ts}: String!")
    lines.append("  }")
    if not fields:
        return lines
    lines.append("")

    lines.append(f"  input Create{name}Input {{")
    for fld in fields:
        marker = "!" if fld.required else ""
        lines.append(f"    {fld.name}: {graphql_type(fld.type)}{marker}")
    lines.append("  }")
    lines.append("")

    lines.append(f"  input Update{name}Input {{")
    for fld in fields:
        lines.append(f"    {fld.name}: {graphql_type(fld.type)}")
    lines.append("  }")
    return lines


def render_type_defs(config: ProjectConfig) -> str:
    models: List[ModelDefinition] = crud_models(config)
    lines: List[str] = [
        GENERATED_BANNER,
        "import { gql } from 'apollo-server-express';",
        "",
        "export const typeDefs = gql`",
    ]
    for model in models:
        lines.extend(type_block(config, model))
        lines.append("")

    lines.append("  type Query {")
    lines.append("    health: String!")
    for model in models:
        lines.append(f"    {plural_variable_name(model.name)}: [{model.name}!]!")
        lines.append(f"    {variable_name(model.name)}(id: ID!): {model.name}")
    lines.append("  }")

    if models:
        lines.append("")
        lines.append("  type Mutation {")
        for model in models:
            name: str = model.name
            if surface_fields(config, model):
                lines.append(f"    create{name}(input: Create{name}Input!): {name}!")
                lines.append(f"    update{name}(id: ID!, input: Update{name}Input!): {name}!")
            else:
                lines.append(f"    create{name}: {name}!")
                lines.append(f"    update{name}(id: ID!): {name}!")
            lines.append(f"    delete{name}(id: ID!): Boolean!")
        lines.append("  }")

    lines.append("`;")
    return join_lines(lines)


# ---------------------------------------------------------------------------
# Resolvers
# ---------------------------------------------------------------------------

# (resolver name, argument pattern, argument type, body lines)
Resolver = Tuple[str, str, str, List[str]]


def _resolver_lines(resolver: Resolver, guarded: bool) -> List[str]:
    field, pattern, arg_type, body = resolver
    if guarded:
        signature: str = f"async (_parent: unknown, {pattern}: {arg_type}, context: ResolverContext) => {{"
        statements: List[str] = ["requireUser(context);", *body]
    else:
        signature = f"async (_parent: unknown, {pattern}: {arg_type}) => {{"
        statements = body
    lines: List[str] = [f"    {field}: {signature}"]
    lines.extend(f"      {s}" for s in statements)
    lines.append("    },")
    return lines


def render_resolvers(config: ProjectConfig, model: ModelDefinition) -> str:
    name: str = model.name
    path: str = resolvers_path(name)
    guarded: bool = config.authentication

    queries: List[Resolver] = [
        (plural_variable_name(name), "_args", "unknown", ["return useCases.getAll();"]),
        (variable_name(name), "{ id }", "{ id: string }", ["return useCases.getById(id);"]),
    ]
    has_input: bool = bool(surface_fields(config, model))
    if has_input:
        mutations: List[Resolver] = [
            (f"create{name}", "{ input }", f"{{ input: Create{name} }}",
             ["return useCases.create(input);"]),
            (f"update{name}", "{ id, input }", f"{{ id: string; input: Update{name} }}",
             ["return useCases.update(id, input);"]),
        ]
    else:
        mutations = [
            (f"create{name}", "_args", "unknown", ["return useCases.create({});"]),
            (f"update{name}", "{ id }", "{ id: string }", ["return useCases.update(id, {});"]),
        ]
    mutations.append(
        (f"delete{name}", "{ id }", "{ id: string }",
         ["await useCases.delete(id);", "return true;"])
    )

    lines: List[str] = [GENERATED_BANNER]
    if guarded:
        lines.append("import { AuthenticationError } from 'apollo-server-express';")
    lines.append(f"import {{ {name}UseCases }} from '{import_path(path, use_cases_path(name))}';")
    if has_input:
        lines.append(
            f"import {{ Create{name}, Update{name} }} from "
            f"'{import_path(path, dto_path(name))}';"
        )
    lines.append("")

    if guarded:
        lines.extend([
            "interface ResolverContext {",
            "  user: unknown | null;",
            "}",
            "",
            "const requireUser = (context: ResolverContext): void => {",
            "  if (!context.user) {",
            "    throw new AuthenticationError('Authentication required');",
            "  }",
            "};",
            "",
        ])

    lines.extend([
        "/**",
        f" * Query and mutation resolvers for {name}.",
        " */",
        f"export const create{name}Resolvers = (useCases: {name}UseCases) => ({{",
        "  Query: {",
    ])
    for resolver in queries:
        lines.extend(_resolver_lines(resolver, guarded))
    lines.append("  },")
    lines.append("  Mutation: {")
    for resolver in mutations:
        lines.extend(_resolver_lines(resolver, guarded))
    lines.append("  },")
    lines.append("});")
    return join_lines(lines)


# ---------------------------------------------------------------------------
# Server & application
# ---------------------------------------------------------------------------


def _context_lines(config: ProjectConfig) -> List[str]:
    if not config.authentication:
        return ["    context: () => ({}),"]
    return [
        "    context: ({ req }: { req: Request }) => {",
        "      const header = req.headers.authorization;",
        "      if (!header || !header.startsWith('Bearer ')) {",
        "        return { user: null };",
        "      }",
        "      try {",
        f"        return {{ user: jwt.verify(header.slice(7), {JWT_SECRET_EXPR}) }};",
        "      } catch (error) {",
        "        return { user: null };",
        "      }",
        "    },",
    ]


def render_apollo_server(config: ProjectConfig) -> str:
    path: str = GRAPHQL_SERVER_PATH
    models: List[ModelDefinition] = crud_models(config)

    lines: List[str] = [
        GENERATED_BANNER,
        "import { ApolloServer } from 'apollo-server-express';",
        "import { PrismaClient } from '@prisma/client';",
    ]
    if config.authentication:
        lines.append("import { Request } from 'express';")
        lines.append("import jwt from 'jsonwebtoken';")
    lines.append(f"import {{ typeDefs }} from '{import_path(path, TYPEDEFS_PATH)}';")
    for model in models:
        name: str = model.name
        lines.append(
            f"import {{ {name}RepositoryImpl }} from '{import_path(path, repository_impl_path(name))}';"
        )
        lines.append(f"import {{ {name}UseCases }} from '{import_path(path, use_cases_path(name))}';")
        lines.append(
            f"import {{ create{name}Resolvers }} from '{import_path(path, resolvers_path(name))}';"
        )

    lines.extend([
        "",
        "/**",
        " * Builds the Apollo server with every model's resolvers merged in.",
        " */",
        "export function createApolloServer(prisma: PrismaClient): ApolloServer {",
    ])
    for model in models:
        name = model.name
        lines.append(
            f"  const {variable_name(name)}Resolvers = create{name}Resolvers("
            f"new {name}UseCases(new {name}RepositoryImpl(prisma)));"
        )
    if models:
        lines.append("")

    lines.extend([
        "  return new ApolloServer({",
        "    typeDefs,",
        "    resolvers: {",
        "      Query: {",
        "        health: () => 'OK',",
    ])
    for model in models:
        lines.append(f"        ...{variable_name(model.name)}Resolvers.Query,")
    lines.append("      },")
    if models:
        lines.append("      Mutation: {")
        for model in models:
            lines.append(f"        ...{variable_name(model.name)}Resolvers.Mutation,")
        lines.append("      },")
    lines.append("    },")
    lines.extend(_context_lines(config))
    lines.extend([
        "  });",
        "}",
    ])
    return join_lines(lines)


def render_graphql_app(config: ProjectConfig) -> str:
    """``mountGraphQL`` attaches Apollo to an app; ``createGraphQLApp`` builds one."""
    path: str = GRAPHQL_APP_PATH
    auth: bool = config.authentication

    lines: List[str] = [
        GENERATED_BANNER,
        "import express, { Express, Request, Response } from 'express';",
        "import { PrismaClient } from '@prisma/client';",
        f"import {{ createApolloServer }} from '{import_path(path, GRAPHQL_SERVER_PATH)}';",
    ]
    if auth:
        lines.extend([
            "import { errorHandler, notFoundHandler } from "
            f"'{import_path(path, ERROR_MIDDLEWARE_PATH)}';",
            f"import {{ AuthService }} from '{import_path(path, AUTH_SERVICE_PATH)}';",
            f"import {{ AuthController }} from '{import_path(path, AUTH_CONTROLLER_PATH)}';",
            f"import {{ createAuthRoutes }} from '{import_path(path, AUTH_ROUTES_PATH)}';",
        ])

    lines.extend([
        "",
        "/**",
        " * Starts Apollo and mounts it on /graphql.",
        " */",
        "export async function mountGraphQL(app: Express, prisma: PrismaClient): Promise<void> {",
        "  const server = createApolloServer(prisma);",
        "  await server.start();",
        "  server.applyMiddleware({ app, path: '/graphql' });",
        "}",
        "",
        "/**",
        " * Standalone Express application serving only GraphQL.",
        " */",
        "export async function createGraphQLApp(",
        "  prisma: PrismaClient = new PrismaClient(),",
        "): Promise<{ app: Express; prisma: PrismaClient }> {",
        "  const app = express();",
        "  app.use(express.json());",
        "",
        "  app.get('/health', (req: Request, res: Response) => {",
        "    res.json({ status: 'OK', timestamp: new Date().toISOString() });",
        "  });",
    ])
    if auth:
        lines.extend([
            "",
            "  const authController = new AuthController(new AuthService(prisma));",
            "  app.use('/api/auth', createAuthRoutes(authController));",
        ])
    lines.extend([
        "",
        "  await mountGraphQL(app, prisma);",
    ])
    if auth:
        lines.extend([
            "  app.use(notFoundHandler);",
            "  app.use(errorHandler);",
        ])
    lines.extend([
        "  return { app, prisma };",
        "}",
    ])
    return join_lines(lines)


def render_graphql_layer(config: ProjectConfig) -> Dict[str, str]:
    """
    Type definitions, resolvers, server and app files.

    A GraphQL-only project with authentication also receives the shared
    REST middleware, since its ``/api/auth`` routes depend on it.
    """
    files: Dict[str, str] = {TYPEDEFS_PATH: render_type_defs(config)}
    for model in crud_models(config):
        files[resolvers_path(model.name)] = render_resolvers(config, model)
    files[GRAPHQL_SERVER_PATH] = render_apollo_server(config)
    files[GRAPHQL_APP_PATH] = render_graphql_app(config)
    if config.authentication and not config.wants_rest:
        files.update(render_middleware_artifacts())
    logger.debug("Rendered GraphQL layer: %d files.", len(files))
    return files


__all__: List[str] = [
    "type_block",
    "render_type_defs",
    "render_resolvers",
    "render_apollo_server",
    "render_graphql_app",
    "render_graphql_layer",
]
