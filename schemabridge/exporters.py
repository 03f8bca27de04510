# File: schemabridge/exporters.py
"""
Schema Bridge - Project Exporter (File-System Writer)
======================================================

Responsible for:
    1. Creating the output directory layout.
    2. Formatting each artifact by its file extension.
    3. Writing every artifact atomically (temp file, then ``os.replace``).
    4. Producing a manifest with sizes and checksums.

A failed write aborts the remaining writes.  Files written before the
failure stay on disk; no file is ever left half-written.  The manifest
carries no timestamps or absolute paths, so exporting the same artifacts
twice yields the same manifest.
"""

from __future__ import annotations

import json
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Sequence, Tuple

from schemabridge import __version__
from schemabridge.formatters import format_file
from schemabridge.templates.common import PROJECT_DIRECTORIES
from schemabridge.utils import Timer, count_lines, ensure_directory, sha256_hex, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.exporters")

MANIFEST_FILENAME: str = ".schemabridge-manifest.json"

# Entries never removed by ``clean_before_export``.
_PRESERVED_ON_CLEAN: FrozenSet[str] = frozenset({".git", ".gitkeep", ".env"})


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    relative_path: str
    size_bytes: int
    line_count: int
    sha256: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.relative_path,
            "size_bytes": self.size_bytes,
            "line_count": self.line_count,
            "sha256": self.sha256,
        }


@dataclass(frozen=False, slots=True)
class ExportManifest:
    """Every exported file with its checksum, in write order."""

    project_name: str = ""
    generator_version: str = __version__
    files: List[FileRecord] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)

    @property
    def total_lines(self) -> int:
        return sum(f.line_count for f in self.files)

    def to_dict(self) -> Dict[str, Any]:
        """Convert manifest to a JSON-serialisable dictionary."""
        return {
            "project_name": self.project_name,
            "generator_version": self.generator_version,
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "total_lines": self.total_lines,
            "files": [f.to_dict() for f in self.files],
        }

    def to_json(self, indent_size: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False) + "\n"


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Outcome of ``ProjectExporter.export()``."""

    success: bool
    manifest: ExportManifest
    errors: Tuple[str, ...]
    warnings: Tuple[str, ...]
    elapsed_seconds: float


# ---------------------------------------------------------------------------
# ProjectExporter class
# ---------------------------------------------------------------------------


class ProjectExporter:
    """
    Writes rendered artifacts under one output directory.

    Usage::

        exporter = ProjectExporter(Path("./blog-api"), project_name="blog-api")
        result = exporter.export(files)
        print(result.manifest.to_json())

    Thread-safety: NOT thread-safe.  Use one exporter per output directory.
    """

    def __init__(
        self,
        output_dir: Path,
        *,
        project_name: str = "",
        clean_before_export: bool = False,
        format_output: bool = True,
        atomic_writes: bool = True,
        write_manifest: bool = True,
        directories: Sequence[str] = PROJECT_DIRECTORIES,
    ) -> None:
        """
        Args:
            output_dir: Root directory for output files.
            project_name: Recorded in the manifest.
            clean_before_export: Wipe the output directory first.
            format_output: Run each artifact through ``format_file``.
            atomic_writes: Use the temp-file-then-rename pattern.
            write_manifest: Write ``.schemabridge-manifest.json``.
            directories: Layout created before any file is written.
        """
        self._output_dir: Path = Path(output_dir).resolve()
        self._project_name: str = project_name
        self._clean_before_export: bool = clean_before_export
        self._format_output: bool = format_output
        self._atomic_writes: bool = atomic_writes
        self._write_manifest: bool = write_manifest
        self._directories: Tuple[str, ...] = tuple(directories)

        self._errors: List[str] = []
        self._warnings: List[str] = []
        self._file_records: List[FileRecord] = []
        self._prepared: bool = False

        logger.debug(
            "ProjectExporter initialised: output_dir=%s, atomic=%s, format=%s.",
            self._output_dir,
            self._atomic_writes,
            self._format_output,
        )

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    # -----------------------------------------------------------------
    # Collaborator operations
    # -----------------------------------------------------------------

    def prepare(self) -> List[Path]:
        """Clean the output directory (when configured) and create the layout."""
        self._pre_export_cleanup()
        created: List[Path] = self.create_directories(self._directories)
        self._prepared = True
        return created

    def create_directories(self, directories: Sequence[str]) -> List[Path]:
        """Create *directories* (relative to the output root) and their parents."""
        created: List[Path] = []
        ensure_directory(self._output_dir)
        for rel_dir in directories:
            dir_path: Path = self._resolve(rel_dir)
            ensure_directory(dir_path)
            created.append(dir_path)
        logger.info("Directory structure created under: %s", self._output_dir)
        return created

    def write_text(self, relative_path: str, content: str) -> FileRecord:
        """
        Format and write one artifact, returning its record.

        Raises:
            ValueError: If *relative_path* escapes the output directory.
            OSError: If the write fails.
        """
        target: Path = self._resolve(relative_path)
        if self._format_output:
            content = format_file(relative_path, content)

        size_bytes: int = write_file(target, content, atomic=self._atomic_writes)
        record: FileRecord = FileRecord(
            relative_path=relative_path,
            size_bytes=size_bytes,
            line_count=count_lines(content),
            sha256=sha256_hex(content),
        )
        self._file_records.append(record)
        logger.debug(
            "Wrote file: %s (%d bytes, %d lines).",
            relative_path,
            record.size_bytes,
            record.line_count,
        )
        return record

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def export(self, files: Dict[str, str]) -> ExportResult:
        """
        Write every artifact of *files* (relative path → text) in order.

        The first failing write stops the export; its error is reported
        in the result rather than raised.
        """
        with Timer("export") as timer:
            try:
                if not self._prepared:
                    self.prepare()
                for rel_path, content in files.items():
                    self.write_text(rel_path, content)
                if self._write_manifest:
                    self._write_manifest_file()
            except (OSError, ValueError) as exc:
                error_msg: str = f"Export aborted: {type(exc).__name__}: {exc}"
                self._errors.append(error_msg)
                logger.error(error_msg)

        manifest: ExportManifest = self.build_manifest()
        success: bool = not self._errors
        if success:
            logger.info(
                "Export completed: %d files, %d bytes, %.3fs.",
                manifest.total_files,
                manifest.total_bytes,
                timer.elapsed,
            )
        else:
            logger.error(
                "Export stopped after %d file(s) with %d error(s).",
                manifest.total_files,
                len(self._errors),
            )
        return ExportResult(
            success=success,
            manifest=manifest,
            errors=tuple(self._errors),
            warnings=tuple(self._warnings),
            elapsed_seconds=timer.elapsed,
        )

    def build_manifest(self) -> ExportManifest:
        return ExportManifest(
            project_name=self._project_name,
            files=list(self._file_records),
        )

    # -----------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------

    def _resolve(self, relative_path: str) -> Path:
        target: Path = (self._output_dir / relative_path).resolve()
        if target != self._output_dir and self._output_dir not in target.parents:
            raise ValueError(f"Path escapes the output directory: {relative_path}")
        return target

    def _pre_export_cleanup(self) -> None:
        if not self._clean_before_export or not self._output_dir.exists():
            return

        logger.info("Cleaning output directory: %s", self._output_dir)
        for item in self._output_dir.iterdir():
            if item.name in _PRESERVED_ON_CLEAN:
                continue
            try:
                if item.is_dir():
                    shutil.rmtree(item)
                else:
                    item.unlink()
            except OSError as exc:
                warning_msg: str = f"Could not remove {item}: {exc}"
                self._warnings.append(warning_msg)
                logger.warning(warning_msg)

    def _write_manifest_file(self) -> None:
        manifest_path: Path = self._output_dir / MANIFEST_FILENAME
        write_file(manifest_path, self.build_manifest().to_json(), atomic=self._atomic_writes)
        logger.debug("Manifest written to %s.", manifest_path)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "MANIFEST_FILENAME",
    "FileRecord",
    "ExportManifest",
    "ExportResult",
    "ProjectExporter",
]

logger.debug("schemabridge.exporters loaded.")
