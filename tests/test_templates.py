"""
tests/test_templates.py
Renderer tests, one class per artifact family.

Schema rows are column-aligned, so schema assertions compare lines with
whitespace runs collapsed.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

import pytest

from schemabridge.auth import with_auth_model
from schemabridge.generator import parse_config
from schemabridge.models import ProjectConfig
from schemabridge.templates import (
    build_openapi_document,
    render_openapi_artifacts,
    render_auth_system,
    render_crud_layer,
    render_entrypoint_artifacts,
    render_graphql_layer,
    render_project_files,
    render_rest_layer,
    render_schema_artifacts,
    render_validation_artifacts,
)
from schemabridge.templates.common import (
    AUTH_CONTROLLER_PATH,
    AUTH_MIDDLEWARE_PATH,
    AUTH_ROUTES_PATH,
    AUTH_SERVICE_PATH,
    ENTRYPOINT_PATH,
    ERROR_MIDDLEWARE_PATH,
    GRAPHQL_APP_PATH,
    GRAPHQL_SERVER_PATH,
    OPENAPI_PATH,
    REST_APP_PATH,
    SCHEMA_PATH,
    TYPEDEFS_PATH,
    VALIDATION_MIDDLEWARE_PATH,
    controller_path,
    dto_path,
    entity_path,
    import_path,
    repository_impl_path,
    repository_path,
    resolvers_path,
    routes_path,
    use_cases_path,
)
from schemabridge.templates.crud import render_entity, render_repository_impl, render_use_cases
from schemabridge.templates.graphql import render_resolvers, render_type_defs
from schemabridge.templates.openapi import AUTH_PATHS
from schemabridge.templates.project import build_package_manifest, render_env_example
from schemabridge.templates.rest import (
    render_error_middleware,
    render_rest_app,
    render_routes,
    render_validation_middleware,
)
from schemabridge.templates.schema import render_schema
from schemabridge.templates.validation import render_validation_module


def _squash(text: str) -> List[str]:
    """Lines with runs of whitespace collapsed to one space."""
    return [" ".join(line.split()) for line in text.splitlines()]


def _block(text: str, header: str) -> List[str]:
    """Squashed lines of the ``header { ... }`` block."""
    lines = _squash(text)
    start = lines.index(f"{header} {{")
    end = lines.index("}", start)
    return lines[start + 1:end]


@pytest.fixture()
def blog_injected(blog_config: ProjectConfig) -> ProjectConfig:
    return with_auth_model(blog_config)


@pytest.fixture()
def example_injected(example_config: ProjectConfig) -> ProjectConfig:
    return with_auth_model(example_config)


# ===========================================================================
# Shared helpers
# ===========================================================================


class TestCommonPaths:
    def test_artifact_paths(self) -> None:
        assert dto_path("BlogPost") == "src/application/dto/blog-post.dto.ts"
        assert entity_path("Post") == "src/domain/entities/PostEntity.ts"
        assert repository_path("Post") == "src/domain/repositories/IPostRepository.ts"
        assert routes_path("BlogPost") == "src/presentation/rest/routes/blog-post.routes.ts"
        assert resolvers_path("Post") == "src/presentation/graphql/resolvers/post.resolvers.ts"

    def test_import_path(self) -> None:
        assert import_path("src/index.ts", REST_APP_PATH) == "./infrastructure/web/app"
        assert (
            import_path(repository_impl_path("Post"), repository_path("Post"))
            == "../../../domain/repositories/IPostRepository"
        )
        assert import_path(controller_path("Post"), AUTH_SERVICE_PATH) == (
            "../../../application/services/AuthService"
        )


# ===========================================================================
# Schema document
# ===========================================================================


class TestSchemaRenderer:
    def test_single_artifact(self, blog_injected: ProjectConfig) -> None:
        assert list(render_schema_artifacts(blog_injected)) == [SCHEMA_PATH]

    def test_datasource(self, blog_injected: ProjectConfig) -> None:
        lines = _squash(render_schema(blog_injected))
        assert 'provider = "sqlite"' in lines
        assert 'url = env("DATABASE_URL")' in lines
        assert 'provider = "prisma-client-js"' in lines

    def test_user_rendered_first(self, blog_injected: ProjectConfig) -> None:
        text = render_schema(blog_injected)
        assert text.index("model User {") < text.index("model Post {")

    def test_post_block(self, blog_injected: ProjectConfig) -> None:
        assert _block(render_schema(blog_injected), "model Post") == [
            "id String @id @default(uuid())",
            "title String",
            "published Boolean @default(false)",
            "createdAt DateTime @default(now())",
            "updatedAt DateTime @updatedAt",
        ]

    def test_user_block(self, blog_injected: ProjectConfig) -> None:
        block = _block(render_schema(blog_injected), "model User")
        assert "email String @unique" in block
        assert "emailVerified Boolean @default(false)" in block
        assert "resetPasswordExpires DateTime?" in block
        assert block[-2:] == ["createdAt DateTime @default(now())", "updatedAt DateTime @updatedAt"]

    def test_optional_and_default_fields(self, example_config: ProjectConfig) -> None:
        block = _block(render_schema(example_config), "model Post")
        assert "content String?" in block
        assert "views Int? @default(0)" in block

    def test_relations(self, relation_config: ProjectConfig) -> None:
        text = render_schema(relation_config)
        author = _block(text, "model Author")
        assert 'books Book[] @relation("AuthorBooks")' in author
        assert 'profile Profile? @relation("AuthorProfile", fields: [profileId], references: [id])' in author
        assert "profileId String? @unique" in author

        book = _block(text, "model Book")
        assert 'authorBooks Author? @relation("AuthorBooks", fields: [authorBooksId], references: [id])' in book
        assert "authorBooksId String?" in book
        assert 'genres Genre[] @relation("BookGenres")' in book

        assert 'authorProfile Author? @relation("AuthorProfile")' in _block(text, "model Profile")
        assert 'bookGenres Book[] @relation("BookGenres")' in _block(text, "model Genre")

    def test_unknown_relation_target_is_plain_field(self, minimal_dict: Dict[str, Any]) -> None:
        minimal_dict["models"][0]["fields"].append(
            {"name": "owner", "type": "string", "relation": {"targetModel": "Ghost", "cardinality": "one-to-one"}}
        )
        block = _block(render_schema(parse_config(minimal_dict)), "model Item")
        assert "owner String?" in block
        assert not any("@relation" in line for line in block)

    def test_unknown_type_falls_back_to_string(self, minimal_dict: Dict[str, Any]) -> None:
        minimal_dict["models"][0]["fields"].append({"name": "blob", "type": "hyperblob", "required": True})
        assert "blob String" in _block(render_schema(parse_config(minimal_dict)), "model Item")


# ===========================================================================
# Validation modules
# ===========================================================================


class TestValidationRenderer:
    def test_one_module_per_model_including_user(self, blog_injected: ProjectConfig) -> None:
        assert list(render_validation_artifacts(blog_injected)) == [dto_path("User"), dto_path("Post")]

    def test_post_module(self, blog_injected: ProjectConfig) -> None:
        text = render_validation_module(blog_injected, blog_injected.get_model("Post"))
        assert "import { z } from 'zod';" in text
        assert "export const PostSchema = z.object({" in text
        assert "  id: z.string().uuid().optional()," in text
        assert "  title: z.string()," in text
        assert "  published: z.boolean()," in text
        assert "  createdAt: z.date().optional()," in text
        assert "export const CreatePostSchema = PostSchema.omit({" in text
        assert "  updatedAt: true," in text
        assert "export const UpdatePostSchema = CreatePostSchema.partial();" in text
        assert "export type CreatePost = z.infer<typeof CreatePostSchema>;" in text

    def test_optional_fields_are_nullish(self, example_config: ProjectConfig) -> None:
        text = render_validation_module(example_config, example_config.get_model("Post"))
        assert "  content: z.string().nullish()," in text
        assert "  views: z.number().int().nullish()," in text
        assert "tags" not in text

    def test_one_to_one_relation_exposed_as_foreign_key(self, relation_config: ProjectConfig) -> None:
        text = render_validation_module(relation_config, relation_config.get_model("Author"))
        assert "  profileId: z.string().nullish()," in text
        assert "books" not in text

    def test_without_timestamps_only_id_is_omitted(self, minimal_config: ProjectConfig) -> None:
        text = render_validation_module(minimal_config, minimal_config.models[0])
        assert "export const CreateItemSchema = ItemSchema.omit({\n  id: true,\n});" in text


# ===========================================================================
# API document
# ===========================================================================


class TestOpenApiRenderer:
    def test_paths(self, blog_injected: ProjectConfig) -> None:
        document = build_openapi_document(blog_injected)
        assert list(document["paths"]) == [*AUTH_PATHS, "/posts", "/posts/{id}"]
        assert len(AUTH_PATHS) == 6

    def test_no_auth_paths_without_authentication(self, minimal_config: ProjectConfig) -> None:
        document = build_openapi_document(minimal_config)
        assert list(document["paths"]) == ["/items", "/items/{id}"]
        assert "security" not in document
        assert "securitySchemes" not in document["components"]

    def test_pluralised_segments(self, example_injected: ProjectConfig) -> None:
        paths = build_openapi_document(example_injected)["paths"]
        assert "/categories" in paths
        assert "/categories/{id}" in paths
        assert "/users" not in paths

    def test_component_schemas(self, blog_injected: ProjectConfig) -> None:
        schemas = build_openapi_document(blog_injected)["components"]["schemas"]
        assert list(schemas) == ["User", "CreateUser", "UpdateUser", "Post", "CreatePost", "UpdatePost"]
        post = schemas["Post"]
        assert post["required"] == ["id", "title", "published", "createdAt", "updatedAt"]
        assert post["properties"]["published"] == {"type": "boolean", "default": False}
        assert post["properties"]["createdAt"] == {"type": "string", "format": "date-time"}
        assert schemas["CreatePost"]["required"] == ["title", "published"]
        assert "required" not in schemas["UpdatePost"]

    def test_nullable_optional_field(self, example_config: ProjectConfig) -> None:
        schemas = build_openapi_document(example_config)["components"]["schemas"]
        assert schemas["Post"]["properties"]["content"] == {"type": "string", "nullable": True}
        assert schemas["Post"]["properties"]["views"] == {"type": "integer", "nullable": True, "default": 0}

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity", "1e400"])
    def test_non_finite_default_stays_a_string(self, literal: str) -> None:
        config = parse_config({
            "projectName": "x",
            "models": [{"name": "Reading", "fields": [{"name": "value", "type": "float", "default": literal}]}],
        })
        text = render_openapi_artifacts(config)[OPENAPI_PATH]

        def reject(token: str) -> None:
            raise ValueError(token)

        document = json.loads(text, parse_constant=reject)
        assert document["components"]["schemas"]["Reading"]["properties"]["value"]["default"] == literal

    def test_item_operations(self, blog_injected: ProjectConfig) -> None:
        item = build_openapi_document(blog_injected)["paths"]["/posts/{id}"]
        assert sorted(item) == ["delete", "get", "put"]
        assert item["delete"]["responses"]["204"] == {"description": "Deleted"}
        assert item["get"]["parameters"][0]["schema"] == {"type": "string", "format": "uuid"}

    def test_bearer_security(self, blog_injected: ProjectConfig) -> None:
        document = build_openapi_document(blog_injected)
        assert document["security"] == [{"bearerAuth": []}]
        assert document["components"]["securitySchemes"]["bearerAuth"]["scheme"] == "bearer"
        assert document["paths"]["/auth/login"]["post"]["security"] == []

    def test_serialised_document(self, blog_injected: ProjectConfig) -> None:
        text = render_openapi_artifacts(blog_injected)[OPENAPI_PATH]
        assert json.loads(text)["openapi"] == "3.0.0"
        assert json.loads(text)["info"]["title"] == "blog-api API"


# ===========================================================================
# CRUD layer
# ===========================================================================


class TestCrudRenderer:
    def test_four_artifacts_per_crud_model(self, blog_injected: ProjectConfig) -> None:
        assert list(render_crud_layer(blog_injected)) == [
            repository_path("Post"),
            repository_impl_path("Post"),
            use_cases_path("Post"),
            entity_path("Post"),
        ]

    def test_user_gets_crud_without_authentication(self) -> None:
        config = parse_config({
            "projectName": "x",
            "models": [{"name": "User", "fields": [{"name": "email", "type": "email"}]}],
        })
        assert repository_path("User") in render_crud_layer(config)

    def test_repository_impl(self, blog_injected: ProjectConfig) -> None:
        text = render_repository_impl(blog_injected.get_model("Post"))
        assert "export class PostRepositoryImpl implements IPostRepository {" in text
        assert "return this.prisma.post.findMany({ orderBy: { createdAt: 'desc' } });" in text
        assert "import { IPostRepository } from '../../../domain/repositories/IPostRepository';" in text

    def test_repository_impl_without_timestamps(self, minimal_config: ProjectConfig) -> None:
        text = render_repository_impl(minimal_config.models[0])
        assert "return this.prisma.item.findMany();" in text

    def test_use_cases_raise_not_found(self, blog_injected: ProjectConfig) -> None:
        text = render_use_cases(blog_injected.get_model("Post"))
        assert "throw new Error('Post not found');" in text
        assert "import { Post, CreatePost, UpdatePost } from '../dto/post.dto';" in text

    def test_entity(self, example_config: ProjectConfig) -> None:
        text = render_entity(example_config, example_config.get_model("Post"))
        assert "export class PostEntity {" in text
        assert "  title!: string;" in text
        assert "  content?: string | null;" in text
        assert "  published!: boolean;" in text
        assert "  createdAt!: Date;" in text


# ===========================================================================
# REST layer
# ===========================================================================


class TestRestRenderer:
    def test_artifacts(self, blog_injected: ProjectConfig) -> None:
        assert list(render_rest_layer(blog_injected)) == [
            controller_path("Post"),
            routes_path("Post"),
            VALIDATION_MIDDLEWARE_PATH,
            ERROR_MIDDLEWARE_PATH,
            REST_APP_PATH,
        ]

    def test_guarded_routes(self, blog_injected: ProjectConfig) -> None:
        text = render_routes(blog_injected, blog_injected.get_model("Post"))
        assert "router.get('/posts', authenticate, controller.getAll);" in text
        assert "router.post('/posts', authenticate, validateBody(CreatePostSchema), controller.create);" in text
        assert "router.delete('/posts/:id', authenticate, controller.delete);" in text

    def test_open_routes(self, minimal_config: ProjectConfig) -> None:
        text = render_routes(minimal_config, minimal_config.models[0])
        assert "router.get('/items', controller.getAll);" in text
        assert "router.put('/items/:id', validateBody(UpdateItemSchema), controller.update);" in text
        assert "authenticate" not in text

    def test_app_wiring(self, blog_injected: ProjectConfig) -> None:
        text = render_rest_app(blog_injected)
        assert "app.use(helmet());" in text
        assert "app.use('/api', createPostRoutes(new PostController(postUseCases)));" in text
        assert "app.use('/api/auth', createAuthRoutes(authController));" in text
        assert "export function finalizeApp(app: Express): Express {" in text
        assert "UserController" not in text

    def test_helmet_relaxed_with_graphql(self, example_injected: ProjectConfig) -> None:
        assert "helmet({ contentSecurityPolicy: false })" in render_rest_app(example_injected)

    def test_error_middleware_maps_status_codes(self) -> None:
        text = render_error_middleware()
        assert "res.status(statusCode).json({ error: err.message });" in text
        assert "if (err.message.endsWith('not found')) {" in text

    def test_validation_middleware_exports_body_validator_only(self) -> None:
        text = render_validation_middleware()
        assert "export const validateBody =" in text
        assert "req.body = result.data;" in text
        assert "validateQuery" not in text


# ===========================================================================
# GraphQL layer
# ===========================================================================


class TestGraphQLRenderer:
    def test_artifacts(self, example_injected: ProjectConfig) -> None:
        assert list(render_graphql_layer(example_injected)) == [
            TYPEDEFS_PATH,
            resolvers_path("Post"),
            resolvers_path("Category"),
            resolvers_path("Tag"),
            GRAPHQL_SERVER_PATH,
            GRAPHQL_APP_PATH,
        ]

    def test_type_defs(self, example_injected: ProjectConfig) -> None:
        text = render_type_defs(example_injected)
        assert "  type Post {" in text
        assert "    title: String!" in text
        assert "    views: Int" in text
        assert "    createdAt: String!" in text
        assert "    categories: [Category!]!" in text
        assert "    post(id: ID!): Post" in text
        assert "    createPost(input: CreatePostInput!): Post!" in text
        assert "    deleteTag(id: ID!): Boolean!" in text
        assert "    health: String!" in text
        assert "type User" not in text

    def test_no_mutation_type_without_crud_models(self) -> None:
        config = with_auth_model(parse_config({
            "projectName": "x",
            "apiType": "graphql",
            "authentication": True,
            "models": [{"name": "User", "fields": [{"name": "email", "type": "email"}]}],
        }))
        text = render_type_defs(config)
        assert "type Query {" in text
        assert "type Mutation" not in text

    def test_model_with_only_to_many_relations(self) -> None:
        config = parse_config({
            "projectName": "x",
            "apiType": "graphql",
            "models": [
                {
                    "name": "Author",
                    "fields": [
                        {
                            "name": "posts",
                            "type": "string",
                            "relation": {"targetModel": "Post", "cardinality": "one-to-many"},
                        }
                    ],
                },
                {"name": "Post", "fields": [{"name": "title", "type": "string", "required": True}]},
            ],
        })
        text = render_type_defs(config)
        assert "CreateAuthorInput" not in text
        assert "UpdateAuthorInput" not in text
        assert "    createAuthor: Author!" in text
        assert "    updateAuthor(id: ID!): Author!" in text
        assert "    createPost(input: CreatePostInput!): Post!" in text
        assert "{\n  }" not in text

        resolvers = render_resolvers(config, config.get_model("Author"))
        assert "      return useCases.create({});" in resolvers
        assert "      return useCases.update(id, {});" in resolvers
        assert "CreateAuthor" not in resolvers

    def test_guarded_resolvers(self, example_injected: ProjectConfig) -> None:
        text = render_resolvers(example_injected, example_injected.get_model("Post"))
        assert "export const createPostResolvers = (useCases: PostUseCases) => ({" in text
        assert "      requireUser(context);" in text
        assert "throw new AuthenticationError('Authentication required');" in text

    def test_open_resolvers(self) -> None:
        config = parse_config({
            "projectName": "x",
            "apiType": "graphql",
            "models": [{"name": "Category", "fields": [{"name": "label", "type": "string"}]}],
        })
        text = render_resolvers(config, config.models[0])
        assert "    categories: async (_parent: unknown, _args: unknown) => {" in text
        assert "requireUser" not in text

    def test_graphql_only_with_auth_gets_middleware(self, blog_dict: Dict[str, Any]) -> None:
        blog_dict["apiType"] = "graphql"
        files = render_graphql_layer(with_auth_model(parse_config(blog_dict)))
        assert VALIDATION_MIDDLEWARE_PATH in files
        assert ERROR_MIDDLEWARE_PATH in files
        assert "app.use('/api/auth', createAuthRoutes(authController));" in files[GRAPHQL_APP_PATH]

    def test_server_context_verifies_jwt(self, example_injected: ProjectConfig) -> None:
        text = render_graphql_layer(example_injected)[GRAPHQL_SERVER_PATH]
        assert "jwt.verify(header.slice(7), process.env.JWT_SECRET || 'change-me')" in text
        assert "...postResolvers.Mutation," in text


# ===========================================================================
# Authentication subsystem
# ===========================================================================


class TestAuthRenderer:
    def test_four_artifacts(self) -> None:
        assert list(render_auth_system()) == [
            AUTH_SERVICE_PATH,
            AUTH_CONTROLLER_PATH,
            AUTH_MIDDLEWARE_PATH,
            AUTH_ROUTES_PATH,
        ]

    def test_routes(self) -> None:
        text = render_auth_system()[AUTH_ROUTES_PATH]
        for route in (
            "router.post('/register', validateBody(RegisterSchema), controller.register);",
            "router.post('/login', validateBody(LoginSchema), controller.login);",
            "router.get('/verify-email', controller.verifyEmail);",
            "router.get('/profile', authenticate, controller.profile);",
        ):
            assert route in text

    def test_service_uses_user_accessor(self) -> None:
        text = render_auth_system()[AUTH_SERVICE_PATH]
        assert "this.prisma.user." in text
        assert "const JWT_SECRET = process.env.JWT_SECRET || 'change-me';" in text
        assert "export class AuthService {" in text

    def test_middleware(self) -> None:
        text = render_auth_system()[AUTH_MIDDLEWARE_PATH]
        assert "export const authenticate = (req: Request, res: Response, next: NextFunction): void => {" in text
        assert "res.status(401).json({ error: 'Invalid or expired token' });" in text


# ===========================================================================
# Project files & entrypoint
# ===========================================================================


class TestProjectRenderer:
    def test_files(self, blog_injected: ProjectConfig) -> None:
        assert list(render_project_files(blog_injected)) == [
            "package.json",
            "tsconfig.json",
            ".env.example",
            ".gitignore",
            "README.md",
        ]

    def test_package_manifest_rest_with_auth(self, blog_injected: ProjectConfig) -> None:
        manifest = build_package_manifest(blog_injected)
        assert manifest["name"] == "blog-api"
        deps = manifest["dependencies"]
        assert "bcryptjs" in deps
        assert "jsonwebtoken" in deps
        assert "apollo-server-express" not in deps
        assert list(deps) == sorted(deps)

    def test_package_manifest_graphql_without_auth(self, relation_config: ProjectConfig) -> None:
        deps = build_package_manifest(relation_config)["dependencies"]
        assert "apollo-server-express" in deps
        assert "graphql" in deps
        assert "bcryptjs" not in deps

    def test_json_files_parse(self, blog_injected: ProjectConfig) -> None:
        files = render_project_files(blog_injected)
        assert json.loads(files["package.json"])["scripts"]["build"] == "tsc"
        assert json.loads(files["tsconfig.json"])["compilerOptions"]["strict"] is True

    def test_env_example(self, blog_injected: ProjectConfig, minimal_config: ProjectConfig) -> None:
        env = render_env_example(blog_injected)
        assert 'DATABASE_URL="file:./dev.db"' in env
        assert 'JWT_SECRET="change-me"' in env
        assert "JWT_SECRET" not in render_env_example(minimal_config)
        assert "/minimal_app?schema=public" in render_env_example(minimal_config)

    def test_entrypoint_rest_only(self, blog_injected: ProjectConfig) -> None:
        text = render_entrypoint_artifacts(blog_injected)[ENTRYPOINT_PATH]
        assert "import { createApp, finalizeApp } from './infrastructure/web/app';" in text
        assert "mountGraphQL" not in text
        assert "process.on('SIGTERM', shutdown);" in text

    def test_entrypoint_both(self, example_injected: ProjectConfig) -> None:
        text = render_entrypoint_artifacts(example_injected)[ENTRYPOINT_PATH]
        assert "  await mountGraphQL(app, prisma);" in text
        assert text.index("mountGraphQL(app, prisma)") < text.index("finalizeApp(app)")

    def test_entrypoint_graphql_only(self, relation_config: ProjectConfig) -> None:
        config = relation_config.model_copy(update={"api_type": "graphql"})
        text = render_entrypoint_artifacts(config)[ENTRYPOINT_PATH]
        assert "const { app, prisma } = await createGraphQLApp();" in text
        assert "createApp" not in text.replace("createGraphQLApp", "")
