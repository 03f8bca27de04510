# File: schemabridge/templates/crud.py
"""
Schema Bridge - CRUD Layer Renderer
====================================
Four modules per CRUD model (``User`` is skipped when authentication is
enabled):

    domain/repositories/I<Name>Repository.ts           repository contract
    infrastructure/database/repositories/<Name>RepositoryImpl.ts
                                                       Prisma implementation
    application/use-cases/<Name>UseCases.ts            business rules
    domain/entities/<Name>Entity.ts                    domain entity class

Every import specifier is computed from the artifact paths, so moving a
layer only means changing ``templates.common``.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from schemabridge.auth import crud_models
from schemabridge.models import ModelDefinition, ProjectConfig
from schemabridge.templates.common import (
    GENERATED_BANNER,
    dto_path,
    entity_path,
    import_path,
    join_lines,
    repository_impl_path,
    repository_path,
    surface_fields,
    timestamp_fields,
    use_cases_path,
)
from schemabridge.typemaps import language_type
from schemabridge.utils import variable_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.templates.crud")


def _dto_import(from_file: str, name: str) -> str:
    source: str = import_path(from_file, dto_path(name))
    return f"import {{ {name}, Create{name}, Update{name} }} from '{source}';"


# ---------------------------------------------------------------------------
# Repository contract
# ---------------------------------------------------------------------------


def render_repository_interface(model: ModelDefinition) -> str:
    name: str = model.name
    path: str = repository_path(name)
    lines: List[str] = [
        GENERATED_BANNER,
        _dto_import(path, name),
        "",
        "/**",
        f" * Data access contract for {name}.",
        " */",
        f"export interface I{name}Repository {{",
        f"  findAll(): Promise<{name}[]>;",
        f"  findById(id: string): Promise<{name} | null>;",
        f"  create(data: Create{name}): Promise<{name}>;",
        f"  update(id: string, data: Update{name}): Promise<{name}>;",
        "  delete(id: string): Promise<void>;",
        "}",
    ]
    return join_lines(lines)


# ---------------------------------------------------------------------------
# Prisma implementation
# ---------------------------------------------------------------------------


def render_repository_impl(model: ModelDefinition) -> str:
    name: str = model.name
    var: str = variable_name(name)
    path: str = repository_impl_path(name)
    find_all_args: str = "{ orderBy: { createdAt: 'desc' } }" if model.timestamps else ""

    lines: List[str] = [
        GENERATED_BANNER,
        "import { PrismaClient } from '@prisma/client';",
        f"import {{ I{name}Repository }} from '{import_path(path, repository_path(name))}';",
        _dto_import(path, name),
        "",
        "/**",
        f" * Prisma-backed implementation of I{name}Repository.",
        " */",
        f"export class {name}RepositoryImpl implements I{name}Repository {{",
        "  constructor(private readonly prisma: PrismaClient) {}",
        "",
        f"  async findAll(): Promise<{name}[]> {{",
        f"    return this.prisma.{var}.findMany({find_all_args});",
        "  }",
        "",
        f"  async findById(id: string): Promise<{name} | null> {{",
        f"    return this.prisma.{var}.findUnique({{ where: {{ id }} }});",
        "  }",
        "",
        f"  async create(data: Create{name}): Promise<{name}> {{",
        f"    return this.prisma.{var}.create({{ data }});",
        "  }",
        "",
        f"  async update(id: string, data: Update{name}): Promise<{name}> {{",
        f"    return this.prisma.{var}.update({{ where: {{ id }}, data }});",
        "  }",
        "",
        "  async delete(id: string): Promise<void> {",
        f"    await this.prisma.{var}.delete({{ where: {{ id }} }});",
        "  }",
        "}",
    ]
    return join_lines(lines)


# ---------------------------------------------------------------------------
# Use cases
# ---------------------------------------------------------------------------


def render_use_cases(model: ModelDefinition) -> str:
    name: str = model.name
    var: str = variable_name(name)
    path: str = use_cases_path(name)

    lines: List[str] = [
        GENERATED_BANNER,
        f"import {{ I{name}Repository }} from '{import_path(path, repository_path(name))}';",
        _dto_import(path, name),
        "",
        "/**",
        f" * Application use cases for {name}.",
        " */",
        f"export class {name}UseCases {{",
        f"  constructor(private readonly repository: I{name}Repository) {{}}",
        "",
        f"  async getAll(): Promise<{name}[]> {{",
        "    return this.repository.findAll();",
        "  }",
        "",
        "  /**",
        f"   * @throws Error when the {name} does not exist",
        "   */",
        f"  async getById(id: string): Promise<{name}> {{",
        f"    const {var} = await this.repository.findById(id);",
        f"    if (!{var}) {{",
        f"      throw new Error('{name} not found');",
        "    }",
        f"    return {var};",
        "  }",
        "",
        f"  async create(data: Create{name}): Promise<{name}> {{",
        "    return this.repository.create(data);",
        "  }",
        "",
        f"  async update(id: string, data: Update{name}): Promise<{name}> {{",
        "    await this.getById(id);",
        "    return this.repository.update(id, data);",
        "  }",
        "",
        "  async delete(id: string): Promise<void> {",
        "    await this.getById(id);",
        "    await this.repository.delete(id);",
        "  }",
        "}",
    ]
    return join_lines(lines)


# ---------------------------------------------------------------------------
# Domain entity
# ---------------------------------------------------------------------------


def render_entity(config: ProjectConfig, model: ModelDefinition) -> str:
    name: str = model.name
    lines: List[str] = [
        GENERATED_BANNER,
        "/**",
        f" * {name} domain entity.",
        " */",
        f"export class {name}Entity {{",
        "  id!: string;",
    ]
    for fld in surface_fields(config, model):
        ts_type: str = language_type(fld.type)
        if fld.required:
            lines.append(f"  {fld.name}!: {ts_type};")
        else:
            lines.append(f"  {fld.name}?: {ts_type} | null;")
    for ts in timestamp_fields(model):
        lines.append(f"  {ts}!: {language_type('date')};")
    lines.extend([
        "",
        f"  constructor(data: Partial<{name}Entity>) {{",
        "    Object.assign(this, data);",
        "  }",
        "}",
    ])
    return join_lines(lines)


def render_crud_layer(config: ProjectConfig) -> Dict[str, str]:
    """All CRUD-layer artifacts, model by model."""
    files: Dict[str, str] = {}
    for model in crud_models(config):
        files[repository_path(model.name)] = render_repository_interface(model)
        files[repository_impl_path(model.name)] = render_repository_impl(model)
        files[use_cases_path(model.name)] = render_use_cases(model)
        files[entity_path(model.name)] = render_entity(config, model)
        logger.debug("Rendered CRUD layer for %s.", model.name)
    return files


__all__: List[str] = [
    "render_repository_interface",
    "render_repository_impl",
    "render_use_cases",
    "render_entity",
    "render_crud_layer",
]
