"""
tests/test_utils.py
Unit tests for schemabridge.utils: casing, pluralisation, project-name
normalisation, derived identifiers and file helpers.
"""

from __future__ import annotations

import pathlib
import re

import pytest

from schemabridge.utils import (
    Timer,
    count_lines,
    module_name,
    normalize_project_name,
    plural_variable_name,
    pluralize,
    resource_segment,
    sha256_hex,
    singularize,
    slugify,
    to_camel_case,
    to_kebab_case,
    to_pascal_case,
    to_snake_case,
    truncate,
    variable_name,
    write_file,
)

_NORMALIZED_RE = re.compile(r"^[a-z0-9-]*$")


class TestCasing:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("blog post", "BlogPost"),
            ("user_profile", "UserProfile"),
            ("order-item", "OrderItem"),
            ("orderItem", "OrderItem"),
            ("Post", "Post"),
        ],
    )
    def test_pascal_case(self, value: str, expected: str) -> None:
        assert to_pascal_case(value) == expected

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("BlogPost", "blogPost"),
            ("user-profile", "userProfile"),
            ("User", "user"),
        ],
    )
    def test_camel_case(self, value: str, expected: str) -> None:
        assert to_camel_case(value) == expected

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("BlogPost", "blog_post"),
            ("emailVerified", "email_verified"),
            ("post", "post"),
        ],
    )
    def test_snake_case(self, value: str, expected: str) -> None:
        assert to_snake_case(value) == expected

    def test_kebab_case(self) -> None:
        assert to_kebab_case("BlogPost") == "blog-post"
        assert to_kebab_case("resetPasswordToken") == "reset-password-token"

    def test_empty_string(self) -> None:
        assert to_pascal_case("") == ""
        assert to_camel_case("") == ""
        assert to_snake_case("") == ""


class TestPluralisation:
    @pytest.mark.parametrize(
        "singular, plural",
        [
            ("Post", "Posts"),
            ("Category", "Categories"),
            ("Status", "Statuses"),
            ("Box", "Boxes"),
            ("Match", "Matches"),
            ("Wish", "Wishes"),
        ],
    )
    def test_pluralize(self, singular: str, plural: str) -> None:
        assert pluralize(singular) == plural

    def test_round_trip_for_regular_nouns(self) -> None:
        assert singularize(pluralize("Post")) == "Post"
        assert singularize(pluralize("Category")) == "Category"

    def test_singularize_is_a_heuristic(self) -> None:
        assert singularize("Posts") == "Post"
        assert singularize("Categories") == "Category"
        assert singularize("Bus") == "Bu"
        assert singularize("Sheep") == "Sheep"


class TestProjectNameNormalisation:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("My Blog API", "my-blog-api"),
            ("--Shop__v2!!", "shop-v2"),
            ("blog-api", "blog-api"),
            ("   ", ""),
            ("Ünïcode Name", "n-code-name"),
        ],
    )
    def test_examples(self, value: str, expected: str) -> None:
        assert normalize_project_name(value) == expected

    @pytest.mark.parametrize(
        "value",
        ["My Blog API", "a--b", "-x-", "", "!!!", "Café 2.0 / beta", "UPPER_snake-Case"],
    )
    def test_idempotent_and_well_formed(self, value: str) -> None:
        once = normalize_project_name(value)
        assert normalize_project_name(once) == once
        assert _NORMALIZED_RE.match(once)
        assert "--" not in once
        assert not once.startswith("-")
        assert not once.endswith("-")


class TestDerivedIdentifiers:
    def test_resource_segment(self) -> None:
        assert resource_segment("Post") == "posts"
        assert resource_segment("Category") == "categories"
        assert resource_segment("BlogPost") == "blog-posts"

    def test_variable_names(self) -> None:
        assert variable_name("BlogPost") == "blogPost"
        assert plural_variable_name("Category") == "categories"

    def test_module_name(self) -> None:
        assert module_name("BlogPost") == "blog-post"


class TestMiscHelpers:
    def test_truncate(self) -> None:
        assert truncate("abcdef", 10) == "abcdef"
        assert truncate("abcdef", 5) == "ab..."
        assert truncate("abcdef", 3) == "..."

    @pytest.mark.parametrize("limit", [0, 1, 2])
    def test_truncate_never_exceeds_limit(self, limit: int) -> None:
        assert truncate("abcdef", limit) == "abcdef"[:limit]

    def test_slugify(self) -> None:
        assert slugify("  Hello, World!  ") == "hello-world"
        assert slugify("snake_case and-kebab") == "snake-case-and-kebab"

    def test_count_lines(self) -> None:
        assert count_lines("") == 0
        assert count_lines("a") == 1
        assert count_lines("a\nb") == 2
        assert count_lines("a\nb\n") == 2

    def test_sha256_hex_is_stable(self) -> None:
        assert sha256_hex("abc") == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )

    def test_timer_measures_elapsed(self) -> None:
        with Timer("noop") as t:
            sum(range(100))
        assert t.elapsed >= 0.0
        assert "noop" in repr(t)


class TestWriteFile:
    def test_atomic_write_creates_parents(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "a" / "b" / "file.txt"
        written = write_file(target, "héllo\n")
        assert target.read_text(encoding="utf-8") == "héllo\n"
        assert written == len("héllo\n".encode("utf-8"))

    def test_atomic_write_leaves_no_temp_files(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "file.txt"
        write_file(target, "one")
        write_file(target, "two")
        assert target.read_text(encoding="utf-8") == "two"
        assert [p.name for p in tmp_path.iterdir()] == ["file.txt"]

    def test_plain_write(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "plain.txt"
        write_file(target, "x", atomic=False)
        assert target.read_text(encoding="utf-8") == "x"
