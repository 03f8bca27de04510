"""
tests/test_auth.py
Injection of the built-in User model and the CRUD skip rule.
"""

from __future__ import annotations

from schemabridge.auth import (
    build_auth_model,
    crud_models,
    is_auth_model,
    needs_auth_model,
    with_auth_model,
)
from schemabridge.generator import parse_config
from schemabridge.models import AUTH_MODEL_NAME, ProjectConfig


class TestAuthModel:
    def test_canonical_fields(self) -> None:
        user = build_auth_model()
        assert user.name == AUTH_MODEL_NAME
        assert user.timestamps is True
        assert user.field_names == [
            "email",
            "name",
            "password",
            "emailVerified",
            "verificationToken",
            "resetPasswordToken",
            "resetPasswordExpires",
        ]
        fields = {fld.name: fld for fld in user.fields}
        assert fields["email"].unique
        assert fields["emailVerified"].default_literal == "false"
        assert not fields["resetPasswordExpires"].required


class TestInjection:
    def test_user_prepended(self, blog_config: ProjectConfig) -> None:
        injected = with_auth_model(blog_config)
        assert injected.model_names == ["User", "Post"]
        assert len(injected.models) == 2

    def test_input_not_mutated(self, blog_config: ProjectConfig) -> None:
        with_auth_model(blog_config)
        assert blog_config.model_names == ["Post"]

    def test_idempotent(self, blog_config: ProjectConfig) -> None:
        once = with_auth_model(blog_config)
        twice = with_auth_model(once)
        assert twice is once
        assert twice.model_names.count("User") == 1

    def test_existing_user_not_duplicated(self, blog_dict) -> None:
        blog_dict["models"].append(
            {"name": "User", "fields": [{"name": "email", "type": "email", "required": True}]}
        )
        config = parse_config(blog_dict)
        assert not needs_auth_model(config)
        injected = with_auth_model(config)
        assert injected is config
        assert injected.model_names == ["Post", "User"]

    def test_no_injection_without_authentication(self, minimal_config: ProjectConfig) -> None:
        assert with_auth_model(minimal_config) is minimal_config


class TestCrudSkipRule:
    def test_user_excluded_when_authentication_on(self, blog_config: ProjectConfig) -> None:
        injected = with_auth_model(blog_config)
        assert [m.name for m in crud_models(injected)] == ["Post"]
        assert is_auth_model(injected, injected.models[0])

    def test_user_is_plain_model_without_authentication(self) -> None:
        config = parse_config({
            "projectName": "x",
            "models": [{"name": "User", "fields": [{"name": "email", "type": "email"}]}],
        })
        assert [m.name for m in crud_models(config)] == ["User"]
