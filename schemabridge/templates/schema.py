# File: schemabridge/templates/schema.py
"""
Schema Bridge - Schema Document Renderer
=========================================
Renders the Prisma schema: the client generator block, the datasource
block and one ``model`` block per configured model, ``User`` included.

Each model block lists, in order:
    1. ``id String @id @default(uuid())``
    2. the declared fields (relations expanded, see below)
    3. back-relation fields contributed by other models
    4. ``createdAt`` / ``updatedAt`` when the model has timestamps

Relations are named ``"<Owner><Field>"`` on both sides so several links
between the same pair of models never collide.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from schemabridge.models import (
    Cardinality,
    FieldDefinition,
    ModelDefinition,
    ProjectConfig,
)
from schemabridge.templates.common import (
    GENERATED_BANNER,
    SCHEMA_PATH,
    join_lines,
    resolved_relation,
    timestamp_fields,
)
from schemabridge.typemaps import schema_type
from schemabridge.utils import capitalize, variable_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.templates.schema")

# (name, type, attributes)
Row = Tuple[str, str, str]


def _optional(token: str, required: bool) -> str:
    return token if required else f"{token}?"


def _relation_name(owner: ModelDefinition, fld: FieldDefinition) -> str:
    return f"{owner.name}{capitalize(fld.name)}"


def _back_field_name(owner: ModelDefinition, fld: FieldDefinition) -> str:
    return f"{variable_name(owner.name)}{capitalize(fld.name)}"


# ---------------------------------------------------------------------------
# Row builders
# ---------------------------------------------------------------------------


def scalar_row(fld: FieldDefinition) -> Row:
    """``name Type[?][ @unique][ @default(x)]`` for a plain field."""
    attrs: List[str] = []
    if fld.unique:
        attrs.append("@unique")
    if fld.default_literal is not None:
        attrs.append(f"@default({fld.default_literal})")
    return (fld.name, _optional(schema_type(fld.type), fld.required), " ".join(attrs))


def relation_rows(owner: ModelDefinition, fld: FieldDefinition) -> List[Row]:
    """Owner-side rows of a resolved relation field."""
    target: str = fld.relation.target_model
    rel: str = _relation_name(owner, fld)

    if fld.relation.cardinality == Cardinality.ONE_TO_ONE.value:
        fk: str = f"{fld.name}Id"
        return [
            (
                fld.name,
                _optional(target, fld.required),
                f'@relation("{rel}", fields: [{fk}], references: [id])',
            ),
            (fk, _optional("String", fld.required), "@unique"),
        ]
    return [(fld.name, f"{target}[]", f'@relation("{rel}")')]


def back_relation_rows(owner: ModelDefinition, fld: FieldDefinition) -> List[Row]:
    """Rows the relation target receives for *owner*.*fld*."""
    rel: str = _relation_name(owner, fld)
    back: str = _back_field_name(owner, fld)
    cardinality: str = fld.relation.cardinality

    if cardinality == Cardinality.ONE_TO_ONE.value:
        return [(back, f"{owner.name}?", f'@relation("{rel}")')]
    if cardinality == Cardinality.ONE_TO_MANY.value:
        fk: str = f"{back}Id"
        return [
            (
                back,
                f"{owner.name}?",
                f'@relation("{rel}", fields: [{fk}], references: [id])',
            ),
            (fk, "String?", ""),
        ]
    return [(back, f"{owner.name}[]", f'@relation("{rel}")')]


def _collect_back_relations(config: ProjectConfig) -> Dict[str, List[Row]]:
    back: Dict[str, List[Row]] = {}
    for owner in config.models:
        for fld in owner.fields:
            if resolved_relation(config, fld):
                back.setdefault(fld.relation.target_model, []).extend(
                    back_relation_rows(owner, fld)
                )
    return back


def _format_rows(rows: List[Row]) -> List[str]:
    name_width: int = max(len(r[0]) for r in rows)
    type_width: int = max(len(r[1]) for r in rows)
    lines: List[str] = []
    for name, token, attrs in rows:
        line: str = f"  {name.ljust(name_width)} {token.ljust(type_width)} {attrs}"
        lines.append(line.rstrip())
    return lines


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


def render_model_block(
    config: ProjectConfig,
    model: ModelDefinition,
    back_rows: List[Row],
) -> List[str]:
    """Lines of one ``model`` block."""
    rows: List[Row] = [("id", "String", "@id @default(uuid())")]

    for fld in model.fields:
        if resolved_relation(config, fld):
            rows.extend(relation_rows(model, fld))
        else:
            rows.append(scalar_row(fld))

    rows.extend(back_rows)

    for name in timestamp_fields(model):
        attrs: str = "@default(now())" if name == "createdAt" else "@updatedAt"
        rows.append((name, schema_type("date"), attrs))

    return [f"model {model.name} {{", *_format_rows(rows), "}"]


def render_schema(config: ProjectConfig) -> str:
    """Full schema document for *config*."""
    lines: List[str] = [
        GENERATED_BANNER,
        "",
        "generator client {",
        '  provider = "prisma-client-js"',
        "}",
        "",
        "datasource db {",
        f'  provider = "{config.database}"',
        '  url      = env("DATABASE_URL")',
        "}",
    ]

    back: Dict[str, List[Row]] = _collect_back_relations(config)
    for model in config.models:
        lines.append("")
        lines.extend(render_model_block(config, model, back.get(model.name, [])))

    logger.debug("Rendered schema with %d models.", len(config.models))
    return join_lines(lines)


def render_schema_artifacts(config: ProjectConfig) -> Dict[str, str]:
    return {SCHEMA_PATH: render_schema(config)}


__all__: List[str] = [
    "scalar_row",
    "relation_rows",
    "back_relation_rows",
    "render_model_block",
    "render_schema",
    "render_schema_artifacts",
]
