# File: schemabridge/templates/validation.py
"""
Validation-schema modules: one Zod DTO module per model, ``User``
included.  Each module exports the entity schema, the create schema
(entity minus generated fields), the partial update schema and the
inferred TypeScript types.
"""

from __future__ import annotations

from typing import Dict, List

from schemabridge.models import ModelDefinition, ProjectConfig
from schemabridge.templates.common import (
    GENERATED_BANNER,
    dto_path,
    join_lines,
    surface_fields,
    timestamp_fields,
)
from schemabridge.typemaps import validation_type


def zod_field(name: str, abstract_type: str, required: bool) -> str:
    expr: str = validation_type(abstract_type)
    if not required:
        expr = f"{expr}.nullish()"
    return f"  {name}: {expr},"


def render_validation_module(config: ProjectConfig, model: ModelDefinition) -> str:
    name: str = model.name
    generated: List[str] = ["id", *timestamp_fields(model)]

    lines: List[str] = [
        GENERATED_BANNER,
        "import { z } from 'zod';",
        "",
        "/**",
        f" * Validation schemas for {name}.",
        " */",
        f"export const {name}Schema = z.object({{",
        "  id: z.string().uuid().optional(),",
    ]
    for fld in surface_fields(config, model):
        lines.append(zod_field(fld.name, fld.type, fld.required))
    for ts in timestamp_fields(model):
        lines.append(f"  {ts}: {validation_type('date')}.optional(),")
    lines.append("});")
    lines.append("")

    lines.append(f"export const Create{name}Schema = {name}Schema.omit({{")
    for key in generated:
        lines.append(f"  {key}: true,")
    lines.append("});")
    lines.append("")
    lines.append(f"export const Update{name}Schema = Create{name}Schema.partial();")
    lines.append("")
    lines.append(f"export type {name} = z.infer<typeof {name}Schema>;")
    lines.append(f"export type Create{name} = z.infer<typeof Create{name}Schema>;")
    lines.append(f"export type Update{name} = z.infer<typeof Update{name}Schema>;")
    return join_lines(lines)


def render_validation_artifacts(config: ProjectConfig) -> Dict[str, str]:
    return {
        dto_path(model.name): render_validation_module(config, model)
        for model in config.models
    }
