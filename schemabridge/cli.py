# File: schemabridge/cli.py
"""
Schema Bridge - Command-Line Interface
=======================================

CLI built on the standard-library ``argparse`` module.

Usage examples::

    # Generate into ./blog-api (the normalised project name)
    python -m schemabridge -c blog.yaml

    # Explicit output directory, verbose, wipe previous output
    python -m schemabridge -c blog.json -o ./out -v --clean

    # Validate only (no file output)
    python -m schemabridge -c blog.yaml --validate-only

    # Write a starter configuration
    python -m schemabridge --init blog.yaml

Exit codes:
    0 - success
    1 - validation error
    2 - generation error
    3 - export error
    4 - input/argument error
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence

import yaml

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Starter configuration written by --init
# ---------------------------------------------------------------------------

EXAMPLE_CONFIG: Dict[str, Any] = {
    "projectName": "Blog API",
    "apiType": "both",
    "database": "postgresql",
    "authentication": True,
    "models": [
        {
            "name": "Post",
            "timestamps": True,
            "fields": [
                {"name": "title", "type": "string", "required": True},
                {"name": "content", "type": "string"},
                {"name": "published", "type": "boolean", "required": True, "default": False},
                {"name": "views", "type": "number", "default": 0},
                {
                    "name": "tags",
                    "type": "string",
                    "relation": {"targetModel": "Tag", "cardinality": "many-to-many"},
                },
            ],
        },
        {
            "name": "Category",
            "fields": [
                {"name": "name", "type": "string", "required": True, "unique": True},
                {"name": "description", "type": "string"},
                {
                    "name": "posts",
                    "type": "string",
                    "relation": {"targetModel": "Post", "cardinality": "one-to-many"},
                },
            ],
        },
        {
            "name": "Tag",
            "fields": [
                {"name": "label", "type": "string", "required": True, "unique": True},
            ],
        },
    ],
}


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root schemabridge logger based on verbosity level.

    Args:
        verbosity: -1 = ERROR, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    elif verbosity == 0:
        level = logging.WARNING
    else:
        level = logging.ERROR

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("schemabridge")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def create_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from schemabridge import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="schemabridge",
        description=(
            "Schema Bridge - TypeScript API project generator.\n\n"
            "Turns a project configuration (JSON/YAML) into a Prisma schema, "
            "Zod DTOs, an OpenAPI document and an Express / Apollo project."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -c blog.yaml\n"
            "  %(prog)s -c blog.json -o ./out --verbose --clean\n"
            "  %(prog)s -c blog.yaml --validate-only\n"
            "  %(prog)s --init blog.yaml\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Schema Bridge v{__version__}",
    )

    # --- Input / output ---
    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        metavar="PATH",
        help="Path to the project configuration file (JSON or YAML).",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help=(
            "Output directory for the generated project. "
            "Defaults to ./<normalised project name>."
        ),
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Only validate the configuration without generating code.",
    )
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Render every artifact but create no directories and write no files.",
    )
    mode_group.add_argument(
        "--init",
        type=str,
        default=None,
        metavar="PATH",
        help="Write a starter configuration (YAML, or JSON for a .json path) and exit.",
    )

    # --- Behaviour flags ---
    behaviour_group = parser.add_argument_group("behaviour flags")
    behaviour_group.add_argument(
        "--strict",
        action="store_true",
        default=False,
        help="Treat advisory warnings (reserved names, duplicates, casing) as errors.",
    )
    behaviour_group.add_argument(
        "--clean",
        action="store_true",
        default=False,
        help="Clean output directory before generation.",
    )
    behaviour_group.add_argument(
        "--no-format",
        action="store_true",
        default=False,
        help="Write artifacts exactly as rendered.",
    )
    behaviour_group.add_argument(
        "--no-manifest",
        action="store_true",
        default=False,
        help="Do not write the checksum manifest.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Init mode
# ---------------------------------------------------------------------------


def _run_init(target: Path) -> int:
    """Write the starter configuration to *target*, refusing to overwrite."""
    if target.exists():
        logger.error("Refusing to overwrite existing file: %s", target)
        return EXIT_INPUT_ERROR

    if target.suffix.lower() == ".json":
        content: str = json.dumps(EXAMPLE_CONFIG, indent=2) + "\n"
    else:
        content = yaml.safe_dump(EXAMPLE_CONFIG, sort_keys=False, allow_unicode=True)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    except OSError as exc:
        logger.error("Could not write %s: %s", target, exc)
        return EXIT_INPUT_ERROR

    print(f"Starter configuration written to {target}")
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Validate-only mode
# ---------------------------------------------------------------------------


def _run_validate_only(config_path: Path, strict: bool) -> int:
    """
    Run validation only (no code generation).

    Returns the appropriate exit code.
    """
    from schemabridge.generator import load_config_file, parse_config
    from schemabridge.utils import Timer
    from schemabridge.validators import (
        InvalidConfigError,
        ValidationResult,
        audit_config,
        validate_config,
    )

    logger.info("Running validation-only mode for: %s", config_path)

    try:
        raw: Dict[str, Any] = load_config_file(config_path)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load configuration: %s", exc)
        return EXIT_INPUT_ERROR

    audit: Optional[ValidationResult] = None
    failure: Optional[InvalidConfigError] = None
    models: int = 0
    with Timer("validation") as t:
        try:
            config = parse_config(raw)
            models = len(config.models)
            validate_config(config)
            audit = audit_config(config)
        except InvalidConfigError as exc:
            failure = exc

    valid: bool = failure is None and not (strict and audit is not None and audit.has_warnings)

    print(f"\n{'=' * 50}")
    print("  Configuration Validation Report")
    print(f"{'=' * 50}")
    print(f"  File:     {config_path.name}")
    print(f"  Models:   {models}")
    print(f"  Time:     {t.elapsed:.3f}s")
    print(f"  Valid:    {'Yes' if valid else 'No'}")

    if failure is not None:
        print("\n  Errors (1):")
        print(f"    ✗ [{failure.code}] {failure.message}")

    if audit is not None and audit.has_warnings:
        print()
        print(audit.format_report())

    if valid and (audit is None or not audit.has_warnings):
        print("\n  ✅ All validations passed!")

    print(f"{'=' * 50}\n")

    return EXIT_SUCCESS if valid else EXIT_VALIDATION_ERROR


# ---------------------------------------------------------------------------
# Full generation mode
# ---------------------------------------------------------------------------


def _run_generation(
    config_path: Path,
    output_dir: Optional[Path],
    args: argparse.Namespace,
) -> int:
    """
    Run the full generation pipeline.

    Returns the appropriate exit code.
    """
    from schemabridge.generator import GenerationReport, ProjectGenerator

    generator: ProjectGenerator = ProjectGenerator(
        strict_validation=args.strict,
        format_output=not args.no_format,
        dry_run=args.dry_run,
        clean_output=args.clean,
        write_manifest=not args.no_manifest,
    )

    if args.dry_run:
        logger.info("Dry-run mode: files will not be written to disk.")

    report: GenerationReport = generator.generate_from_file(config_path, output_dir)

    if not args.quiet:
        print(report.summary())

    if not report.success:
        if report.input_errors:
            return EXIT_INPUT_ERROR
        if report.validation_errors:
            return EXIT_VALIDATION_ERROR
        if report.export_errors:
            return EXIT_EXPORT_ERROR
        return EXIT_GENERATION_ERROR

    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry points
# ---------------------------------------------------------------------------


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Parse *argv*, run the selected mode and return its exit code.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = create_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    verbosity: int = -1 if args.quiet else args.verbose
    _setup_logging(verbosity)

    if args.init is not None:
        return _run_init(Path(args.init).resolve())

    if args.config is None:
        logger.error("A configuration file is required. Use -c/--config or --init.")
        parser.print_usage(sys.stderr)
        return EXIT_INPUT_ERROR

    config_path: Path = Path(args.config).resolve()
    if not config_path.is_file():
        logger.error("Configuration file not found: %s", config_path)
        return EXIT_INPUT_ERROR

    if args.validate_only:
        return _run_validate_only(config_path, args.strict)

    output_dir: Optional[Path] = Path(args.output).resolve() if args.output else None

    logger.info("Config:  %s", config_path)
    logger.info("Output:  %s", output_dir or "./<project name>")
    logger.info("Clean:   %s", args.clean)
    logger.info("Strict:  %s", args.strict)

    exit_code: int = _run_generation(config_path, output_dir, args)
    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)
    return exit_code


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """Run :func:`main` and exit the interpreter with its code."""
    sys.exit(main(argv))


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "main",
    "cli_main",
    "create_parser",
    "EXAMPLE_CONFIG",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("schemabridge.cli loaded.")
