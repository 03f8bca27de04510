"""
tests/conftest.py
Shared fixtures for the schemabridge test suite.

No external mocking libraries are used; real file I/O is performed
inside temporary directories managed by pytest's tmp_path fixtures.
"""

from __future__ import annotations

import copy
import json
import pathlib
from typing import Any, Dict

import pytest
import yaml

from schemabridge.generator import parse_config
from schemabridge.models import ProjectConfig


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
CONFIG_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "schema_example.yaml"


# ---------------------------------------------------------------------------
# Reference configuration
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_example_dict() -> Dict[str, Any]:
    """Load the reference schema_example.yaml once per session and return as dict."""
    assert CONFIG_EXAMPLE_PATH.exists(), (
        f"Reference configuration not found at {CONFIG_EXAMPLE_PATH}. "
        "Make sure schema_example.yaml is in the project root."
    )
    with open(CONFIG_EXAMPLE_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def example_dict(raw_example_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_example_dict)


@pytest.fixture()
def example_config(example_dict: Dict[str, Any]) -> ProjectConfig:
    return parse_config(example_dict)


@pytest.fixture()
def example_yaml_path(example_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the example dict to a temporary YAML file and return its path."""
    path = tmp_path / "config.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.safe_dump(example_dict, fh, sort_keys=False, allow_unicode=True)
    return path


# ---------------------------------------------------------------------------
# Blog scenario (rest + sqlite + auth, one Post model)
# ---------------------------------------------------------------------------


@pytest.fixture()
def blog_dict() -> Dict[str, Any]:
    return {
        "projectName": "blog-api",
        "apiType": "rest",
        "database": "sqlite",
        "authentication": True,
        "models": [
            {
                "name": "Post",
                "timestamps": True,
                "fields": [
                    {"name": "title", "type": "string", "required": True},
                    {
                        "name": "published",
                        "type": "boolean",
                        "required": True,
                        "default": "false",
                    },
                ],
            }
        ],
    }


@pytest.fixture()
def blog_config(blog_dict: Dict[str, Any]) -> ProjectConfig:
    return parse_config(blog_dict)


@pytest.fixture()
def blog_json_path(blog_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "blog.json"
    path.write_text(json.dumps(blog_dict, indent=2), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Minimal / edge-case configurations
# ---------------------------------------------------------------------------


@pytest.fixture()
def minimal_dict() -> Dict[str, Any]:
    """Smallest valid configuration: one model, one field, no auth."""
    return {
        "projectName": "Minimal App",
        "models": [
            {"name": "Item", "fields": [{"name": "title", "type": "string", "required": True}]},
        ],
    }


@pytest.fixture()
def minimal_config(minimal_dict: Dict[str, Any]) -> ProjectConfig:
    return parse_config(minimal_dict)


@pytest.fixture()
def relation_config() -> ProjectConfig:
    """Author / Book / Profile / Genre covering every cardinality."""
    return parse_config({
        "projectName": "library",
        "apiType": "both",
        "models": [
            {
                "name": "Author",
                "fields": [
                    {"name": "name", "type": "string", "required": True},
                    {
                        "name": "books",
                        "type": "string",
                        "relation": {"targetModel": "Book", "cardinality": "one-to-many"},
                    },
                    {
                        "name": "profile",
                        "type": "string",
                        "relation": {"targetModel": "Profile", "cardinality": "one-to-one"},
                    },
                ],
            },
            {
                "name": "Book",
                "fields": [
                    {"name": "title", "type": "string", "required": True},
                    {
                        "name": "genres",
                        "type": "string",
                        "relation": {"model": "Genre", "type": "many-to-many"},
                    },
                ],
            },
            {"name": "Profile", "fields": [{"name": "bio", "type": "string"}]},
            {"name": "Genre", "fields": [{"name": "label", "type": "string", "required": True}]},
        ],
    })


# ---------------------------------------------------------------------------
# Output directory fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Provide an output directory path inside tmp_path (not yet created)."""
    return tmp_path / "generated_output"
