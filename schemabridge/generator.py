# File: schemabridge/generator.py
"""
Schema Bridge - Generation Pipeline (Orchestrator)
===================================================
Connects every phase of a run:

    Config Input → Validate → InjectAuthModel → CreateDirectories
        → RenderSchema → RenderValidation → RenderAPIDoc → RenderCrudLayer
        → RenderAPISurface → RenderAuthSystem → RenderProjectFiles
        → RenderEntrypoint → WriteArtifacts → Done

Stages run strictly in that order and never go back.  ``render`` runs the
validation and rendering stages only and returns the artifacts in memory;
``generate`` adds the file-system stages through ``ProjectExporter``.

Error handling strategy:
    - Configuration errors stop the run before any directory or file is
      created and are recorded in ``validation_errors``.
    - Rendering errors indicate a defect and propagate uncaught.
    - Writer errors stop the remaining writes and are recorded in
      ``export_errors``; files already written are kept.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import yaml
from pydantic import ValidationError

from schemabridge.auth import crud_models, with_auth_model
from schemabridge.exporters import ExportManifest, ExportResult, ProjectExporter
from schemabridge.models import ProjectConfig
from schemabridge.templates import (
    render_auth_system,
    render_crud_layer,
    render_entrypoint_artifacts,
    render_graphql_layer,
    render_openapi_artifacts,
    render_project_files,
    render_rest_layer,
    render_schema_artifacts,
    render_validation_artifacts,
)
from schemabridge.utils import Timer, count_lines
from schemabridge.validators import (
    MALFORMED_CONFIG,
    STRICT_AUDIT_FAILED,
    InvalidConfigError,
    ValidationResult,
    audit_config,
    validate_config,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.generator")


class GenerationStage(str, Enum):
    """Pipeline states, in execution order."""

    VALIDATE = "Validate"
    INJECT_AUTH_MODEL = "InjectAuthModel"
    CREATE_DIRECTORIES = "CreateDirectories"
    RENDER_SCHEMA = "RenderSchema"
    RENDER_VALIDATION = "RenderValidation"
    RENDER_API_DOC = "RenderAPIDoc"
    RENDER_CRUD_LAYER = "RenderCrudLayer"
    RENDER_API_SURFACE = "RenderAPISurface"
    RENDER_AUTH_SYSTEM = "RenderAuthSystem"
    RENDER_PROJECT_FILES = "RenderProjectFiles"
    RENDER_ENTRYPOINT = "RenderEntrypoint"
    WRITE_ARTIFACTS = "WriteArtifacts"
    DONE = "Done"


Artifacts = Dict[str, str]


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline stage."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``ProjectGenerator.generate()``.

    Contains per-stage timings, artifact totals, audit findings and any
    errors encountered.
    """

    success: bool = False
    project_name: str = ""
    output_directory: str = ""
    dry_run: bool = False

    # Metrics
    model_names: List[str] = field(default_factory=list)
    artifact_paths: List[str] = field(default_factory=list)
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    total_elapsed_seconds: float = 0.0

    # Sub-reports
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    input_errors: List[str] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)

    manifest: Optional[ExportManifest] = None

    @property
    def stages(self) -> List[str]:
        return [m.step_name for m in self.step_metrics]

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        if self.dry_run and self.success:
            status += " (dry run)"

        lines.append(f"{'=' * 60}")
        lines.append("  Schema Bridge - Generation Report")
        lines.append(f"{'=' * 60}")
        lines.append(f"  Status:           {status}")
        lines.append(f"  Project:          {self.project_name}")
        lines.append(f"  Output:           {self.output_directory or '-'}")
        lines.append(f"  Models:           {', '.join(self.model_names) or '-'}")
        lines.append(f"  Files generated:  {self.total_files}")
        lines.append(f"  Total lines:      {self.total_lines:,}")
        lines.append(f"  Total bytes:      {self.total_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─' * 60}")

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<22s} "
                    f"{step.elapsed_seconds:>7.3f}s  {step.detail}"
                )

        sections = (
            ("Input Errors", self.input_errors, "✗"),
            ("Validation Errors", self.validation_errors, "✗"),
            ("Validation Warnings", self.validation_warnings, "⚠"),
            ("Export Errors", self.export_errors, "✗"),
        )
        for title, items, icon in sections:
            if not items:
                continue
            lines.append(f"{'─' * 60}")
            lines.append(f"  {title} ({len(items)}):")
            for item in items:
                lines.append(f"    {icon} {item}")

        lines.append(f"{'=' * 60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Configuration loading
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_config_file(path: Path) -> Dict[str, Any]:
    """
    Load a project configuration file (JSON or YAML).

    Dispatches on the file extension; any other extension is tried as
    JSON first, then YAML.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Config path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s', trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


def _describe_validation_error(exc: ValidationError) -> str:
    parts: List[str] = []
    for error in exc.errors():
        location: str = ".".join(str(p) for p in error.get("loc", ())) or "<root>"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def parse_config(raw: Any) -> ProjectConfig:
    """
    Parse a raw mapping (from JSON/YAML) into a ``ProjectConfig``.

    Missing names and empty lists parse fine and are reported later by
    ``validate_config``.  Values of the wrong shape are not.

    Raises:
        InvalidConfigError: ``MALFORMED_CONFIG`` when parsing fails.
    """
    if isinstance(raw, ProjectConfig):
        return raw
    if not isinstance(raw, dict):
        raise InvalidConfigError(
            MALFORMED_CONFIG,
            f"configuration must be a mapping, got {type(raw).__name__}",
        )
    try:
        return ProjectConfig.model_validate(raw)
    except ValidationError as exc:
        raise InvalidConfigError(
            MALFORMED_CONFIG,
            f"malformed configuration: {_describe_validation_error(exc)}",
            {"error_count": exc.error_count()},
        ) from exc


# ---------------------------------------------------------------------------
# ProjectGenerator - master orchestrator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """
    Pipeline orchestrator for project generation.

    Usage::

        generator = ProjectGenerator()

        # In memory
        files = generator.render(config)

        # To disk
        report = generator.generate(config, Path("./blog-api"))
        print(report.summary())

    The generator is reusable: create once, call generate() many times.
    """

    def __init__(
        self,
        *,
        strict_validation: bool = False,
        format_output: bool = True,
        dry_run: bool = False,
        clean_output: bool = False,
        write_manifest: bool = True,
    ) -> None:
        """
        Args:
            strict_validation: Treat advisory audit warnings as errors.
            format_output: Format artifacts by file extension when writing.
            dry_run: Render only; create no directories and write no files.
            clean_output: Wipe the output directory before writing.
            write_manifest: Write the checksum manifest next to the artifacts.
        """
        self._strict_validation: bool = strict_validation
        self._format_output: bool = format_output
        self._dry_run: bool = dry_run
        self._clean_output: bool = clean_output
        self._write_manifest: bool = write_manifest

        logger.debug(
            "ProjectGenerator initialised: strict=%s, format=%s, dry_run=%s, clean=%s.",
            strict_validation,
            format_output,
            dry_run,
            clean_output,
        )

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def render(self, config: ProjectConfig) -> Artifacts:
        """
        Validate *config* and render every artifact without touching disk.

        Returns relative path → text in stage order.

        Raises:
            InvalidConfigError: If the configuration fails validation.
        """
        report: GenerationReport = GenerationReport(project_name=config.project_name)
        prepared: ProjectConfig = self._prepare(config, report)
        return self._render_all(prepared, report)

    def generate(
        self,
        config: ProjectConfig,
        output_dir: Optional[Path] = None,
    ) -> GenerationReport:
        """
        Full pipeline from a parsed configuration.

        Args:
            config: The project configuration; never modified.
            output_dir: Target directory, ``./<package name>`` by default.
        """
        if output_dir is None:
            output_dir = Path.cwd() / (config.package_name or "generated-project")
        report: GenerationReport = GenerationReport(
            project_name=config.project_name,
            output_directory=str(Path(output_dir).resolve()),
            dry_run=self._dry_run,
        )
        return self._run_pipeline(config, Path(output_dir), report)

    def generate_from_file(
        self,
        config_path: Path,
        output_dir: Optional[Path] = None,
    ) -> GenerationReport:
        """Load, parse and generate. Load failures land in ``input_errors``."""
        start: float = time.perf_counter()
        try:
            raw: Dict[str, Any] = load_config_file(Path(config_path))
        except (FileNotFoundError, ValueError) as exc:
            report = GenerationReport(dry_run=self._dry_run)
            report.input_errors.append(str(exc))
            logger.error("Could not load %s: %s", config_path, exc)
            return self._finalise_report(report, time.perf_counter() - start)

        try:
            config: ProjectConfig = parse_config(raw)
        except InvalidConfigError as exc:
            report = GenerationReport(dry_run=self._dry_run)
            report.validation_errors.append(str(exc))
            logger.error("%s", exc)
            return self._finalise_report(report, time.perf_counter() - start)

        logger.info("Loaded config file: %s (%d models).", config_path, len(config.models))
        return self.generate(config, output_dir)

    # -----------------------------------------------------------------
    # Internal: master pipeline
    # -----------------------------------------------------------------

    def _run_pipeline(
        self,
        config: ProjectConfig,
        output_dir: Path,
        report: GenerationReport,
    ) -> GenerationReport:
        pipeline_start: float = time.perf_counter()

        try:
            prepared: ProjectConfig = self._prepare(config, report)
        except InvalidConfigError as exc:
            report.validation_errors.append(str(exc))
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        exporter: Optional[ProjectExporter] = None
        if not self._dry_run:
            exporter = ProjectExporter(
                output_dir,
                project_name=prepared.package_name,
                clean_before_export=self._clean_output,
                format_output=self._format_output,
                write_manifest=self._write_manifest,
            )
            if not self._step_create_directories(exporter, report):
                return self._finalise_report(report, time.perf_counter() - pipeline_start)

        files: Artifacts = self._render_all(prepared, report)
        report.artifact_paths = list(files)

        if exporter is None:
            report.total_files = len(files)
            report.total_bytes = sum(len(c.encode("utf-8")) for c in files.values())
            report.total_lines = sum(count_lines(c) for c in files.values())
            logger.info("Dry run: %d artifact(s) rendered, nothing written.", len(files))
        else:
            self._step_write_artifacts(exporter, files, report)

        return self._finalise_report(report, time.perf_counter() - pipeline_start)

    def _prepare(self, config: ProjectConfig, report: GenerationReport) -> ProjectConfig:
        self._step_validate(config, report)
        prepared: ProjectConfig = self._step_inject_auth_model(config, report)
        report.model_names = prepared.model_names
        return prepared

    def _render_all(self, config: ProjectConfig, report: GenerationReport) -> Artifacts:
        files: Artifacts = {}
        self._step_render_schema(config, report, files)
        self._step_render_validation(config, report, files)
        self._step_render_api_doc(config, report, files)
        self._step_render_crud_layer(config, report, files)
        self._step_render_api_surface(config, report, files)
        if config.authentication:
            self._step_render_auth_system(config, report, files)
        self._step_render_project_files(config, report, files)
        self._step_render_entrypoint(config, report, files)
        return files

    def _record(
        self,
        report: GenerationReport,
        stage: GenerationStage,
        elapsed: float,
        detail: str,
        success: bool = True,
    ) -> None:
        report.step_metrics.append(GenerationStepMetric(
            step_name=stage.value,
            success=success,
            elapsed_seconds=elapsed,
            detail=detail,
        ))

    def _run_stage(
        self,
        stage: GenerationStage,
        report: GenerationReport,
        files: Artifacts,
        renderer: Callable[[], Artifacts],
    ) -> None:
        with Timer(stage.value) as t:
            produced: Artifacts = renderer()
        files.update(produced)
        self._record(report, stage, t.elapsed, f"{len(produced)} file(s)")
        logger.info("%s: %d file(s) in %.3fs.", stage.value, len(produced), t.elapsed)

    # -----------------------------------------------------------------
    # Pipeline steps: validation & preparation
    # -----------------------------------------------------------------

    def _step_validate(self, config: ProjectConfig, report: GenerationReport) -> None:
        """Structural validation, then the advisory audit."""
        failure: Optional[InvalidConfigError] = None
        audit: ValidationResult = ValidationResult()
        with Timer("validate") as t:
            try:
                validate_config(config)
                audit = audit_config(config)
            except InvalidConfigError as exc:
                failure = exc

        if failure is not None:
            self._record(report, GenerationStage.VALIDATE, t.elapsed, failure.message, False)
            logger.error("Validation failed: %s", failure.message)
            raise failure

        for issue in audit.warnings:
            report.validation_warnings.append(f"[{issue.code}] {issue.message}")
            logger.warning("  ⚠ %s", issue.message)

        if self._strict_validation and audit.has_warnings:
            message: str = (
                f"{audit.warning_count} advisory warning(s) reported in strict mode"
            )
            self._record(report, GenerationStage.VALIDATE, t.elapsed, message, False)
            raise InvalidConfigError(STRICT_AUDIT_FAILED, message)

        detail: str = (
            f"{audit.warning_count} warning(s)" if audit.has_warnings else "all checks passed"
        )
        self._record(report, GenerationStage.VALIDATE, t.elapsed, detail)
        logger.info(
            "Validation passed: %d model(s), %d warning(s) in %.3fs.",
            len(config.models),
            audit.warning_count,
            t.elapsed,
        )

    def _step_inject_auth_model(
        self, config: ProjectConfig, report: GenerationReport
    ) -> ProjectConfig:
        with Timer("inject_auth_model") as t:
            prepared: ProjectConfig = with_auth_model(config)
        injected: bool = prepared is not config
        self._record(
            report,
            GenerationStage.INJECT_AUTH_MODEL,
            t.elapsed,
            "User model added" if injected else "no change",
        )
        logger.info(
            "InjectAuthModel: %s.",
            "User model added" if injected else "no model added",
        )
        return prepared

    # -----------------------------------------------------------------
    # Pipeline steps: rendering
    # -----------------------------------------------------------------

    def _step_render_schema(
        self, config: ProjectConfig, report: GenerationReport, files: Artifacts
    ) -> None:
        self._run_stage(
            GenerationStage.RENDER_SCHEMA, report, files,
            lambda: render_schema_artifacts(config),
        )

    def _step_render_validation(
        self, config: ProjectConfig, report: GenerationReport, files: Artifacts
    ) -> None:
        self._run_stage(
            GenerationStage.RENDER_VALIDATION, report, files,
            lambda: render_validation_artifacts(config),
        )

    def _step_render_api_doc(
        self, config: ProjectConfig, report: GenerationReport, files: Artifacts
    ) -> None:
        self._run_stage(
            GenerationStage.RENDER_API_DOC, report, files,
            lambda: render_openapi_artifacts(config),
        )

    def _step_render_crud_layer(
        self, config: ProjectConfig, report: GenerationReport, files: Artifacts
    ) -> None:
        self._run_stage(
            GenerationStage.RENDER_CRUD_LAYER, report, files,
            lambda: render_crud_layer(config),
        )
        logger.debug("CRUD models: %s", [m.name for m in crud_models(config)])

    def _step_render_api_surface(
        self, config: ProjectConfig, report: GenerationReport, files: Artifacts
    ) -> None:
        def render_surface() -> Artifacts:
            surface: Artifacts = {}
            if config.wants_rest:
                surface.update(render_rest_layer(config))
            if config.wants_graphql:
                surface.update(render_graphql_layer(config))
            return surface

        self._run_stage(GenerationStage.RENDER_API_SURFACE, report, files, render_surface)

    def _step_render_auth_system(
        self, config: ProjectConfig, report: GenerationReport, files: Artifacts
    ) -> None:
        self._run_stage(
            GenerationStage.RENDER_AUTH_SYSTEM, report, files,
            render_auth_system,
        )

    def _step_render_project_files(
        self, config: ProjectConfig, report: GenerationReport, files: Artifacts
    ) -> None:
        self._run_stage(
            GenerationStage.RENDER_PROJECT_FILES, report, files,
            lambda: render_project_files(config),
        )

    def _step_render_entrypoint(
        self, config: ProjectConfig, report: GenerationReport, files: Artifacts
    ) -> None:
        self._run_stage(
            GenerationStage.RENDER_ENTRYPOINT, report, files,
            lambda: render_entrypoint_artifacts(config),
        )

    # -----------------------------------------------------------------
    # Pipeline steps: file system
    # -----------------------------------------------------------------

    def _step_create_directories(
        self, exporter: ProjectExporter, report: GenerationReport
    ) -> bool:
        with Timer("create_directories") as t:
            try:
                created = exporter.prepare()
            except (OSError, ValueError) as exc:
                created = []
                report.export_errors.append(f"Could not create directories: {exc}")
                logger.error("Could not create directories under %s: %s", exporter.output_dir, exc)

        ok: bool = not report.export_errors
        self._record(
            report,
            GenerationStage.CREATE_DIRECTORIES,
            t.elapsed,
            f"{len(created)} directories" if ok else "failed",
            ok,
        )
        return ok

    def _step_write_artifacts(
        self, exporter: ProjectExporter, files: Artifacts, report: GenerationReport
    ) -> None:
        with Timer("write_artifacts") as t:
            result: ExportResult = exporter.export(files)

        report.total_files = result.manifest.total_files
        report.total_bytes = result.manifest.total_bytes
        report.total_lines = result.manifest.total_lines
        report.export_errors.extend(result.errors)
        report.manifest = result.manifest

        self._record(
            report,
            GenerationStage.WRITE_ARTIFACTS,
            t.elapsed,
            f"{result.manifest.total_files} files, {result.manifest.total_bytes:,} bytes",
            result.success,
        )
        if result.success:
            logger.info(
                "WriteArtifacts: %d files to %s in %.3fs.",
                result.manifest.total_files,
                exporter.output_dir,
                t.elapsed,
            )

    # -----------------------------------------------------------------
    # Internal: finalise report
    # -----------------------------------------------------------------

    def _finalise_report(
        self,
        report: GenerationReport,
        total_elapsed: float,
    ) -> GenerationReport:
        report.total_elapsed_seconds = total_elapsed
        report.success = not (
            report.input_errors or report.validation_errors or report.export_errors
        )
        if report.success:
            report.step_metrics.append(
                GenerationStepMetric(step_name=GenerationStage.DONE.value, detail="")
            )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "GenerationStage",
    "GenerationStepMetric",
    "GenerationReport",
    "ProjectGenerator",
    "load_config_file",
    "parse_config",
]

logger.debug("schemabridge.generator loaded.")
