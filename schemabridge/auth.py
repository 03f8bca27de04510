# File: schemabridge/auth.py
"""
Schema Bridge - Authentication Model
=====================================
The built-in ``User`` model and the rules deciding where it appears.

``with_auth_model`` is a pure transformation: it returns a new
``ProjectConfig`` with ``User`` prepended when authentication is enabled
and no model of that name exists, and leaves the caller's configuration
untouched.  Applying it twice is the same as applying it once.

``User`` is a real persisted entity, so the schema and validation
renderers include it.  Its API surface is the dedicated auth endpoints,
so every CRUD, REST, GraphQL and API-path renderer iterates
``crud_models(config)`` instead of ``config.models``.
"""

from __future__ import annotations

import logging
from typing import List

from schemabridge.models import (
    AUTH_MODEL_NAME,
    FieldDefinition,
    ModelDefinition,
    ProjectConfig,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.auth")


def build_auth_model() -> ModelDefinition:
    """Canonical ``User`` model used by the generated auth subsystem."""
    return ModelDefinition(
        name=AUTH_MODEL_NAME,
        timestamps=True,
        fields=[
            FieldDefinition(name="email", type="string", required=True, unique=True),
            FieldDefinition(name="name", type="string", required=True),
            FieldDefinition(name="password", type="string", required=True),
            FieldDefinition(
                name="emailVerified", type="boolean", required=True, default=False
            ),
            FieldDefinition(name="verificationToken", type="string", required=False),
            FieldDefinition(name="resetPasswordToken", type="string", required=False),
            FieldDefinition(name="resetPasswordExpires", type="date", required=False),
        ],
    )


def needs_auth_model(config: ProjectConfig) -> bool:
    return config.authentication and not config.has_model(AUTH_MODEL_NAME)


def with_auth_model(config: ProjectConfig) -> ProjectConfig:
    """
    Return *config* with the ``User`` model injected at the front if needed.

    The input is never mutated; when nothing needs injecting the same
    object is returned.
    """
    if not needs_auth_model(config):
        return config

    models: List[ModelDefinition] = [build_auth_model(), *config.models]
    logger.info("Added %s model for authentication.", AUTH_MODEL_NAME)
    return config.model_copy(update={"models": models})


def is_auth_model(config: ProjectConfig, model: ModelDefinition) -> bool:
    """True when *model* is served by the auth endpoints instead of CRUD."""
    return config.authentication and model.name == AUTH_MODEL_NAME


def crud_models(config: ProjectConfig) -> List[ModelDefinition]:
    """Models exposed through generic CRUD / API surfaces."""
    return [m for m in config.models if not is_auth_model(config, m)]


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "build_auth_model",
    "needs_auth_model",
    "with_auth_model",
    "is_auth_model",
    "crud_models",
]

logger.debug("schemabridge.auth loaded.")
