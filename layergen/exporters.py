# File: layergen/exporters.py
"""
layergen - Project Exporter (File-System Manager)
=================================================

Responsible for:
    1. Resolving each artifact's relative path under the project root.
    2. Writing files atomically (write-to-temp then ``os.replace``).
    3. Producing an export manifest with checksums.

Existing files at the same path are overwritten, never merged.  A failed
write raises ``ExportError`` and stops the export; files written before the
failure stay on disk (each individual file is atomic, the batch is not).

Complexity: O(F) where F = total number of output files.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Iterable, List

from layergen.exceptions import ExportError
from layergen.models import GeneratedArtifact
from layergen.utils import Timer

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("layergen.exporters")

MANIFEST_FILENAME: str = "layergen-manifest.json"


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    sha256: str


@dataclass(frozen=False, slots=True)
class ExportManifest:
    """
    Complete manifest of all exported files.

    Serialisable to JSON so two runs can be compared file by file.
    """

    project_name: str = ""
    project_version: str = ""
    generator_version: str = ""
    export_timestamp: str = ""
    output_directory: str = ""
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
            "project_version": self.project_version,
            "generator_version": self.generator_version,
            "export_timestamp": self.export_timestamp,
            "output_directory": self.output_directory,
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "total_lines": self.total_lines,
            "files": [
                {
                    "relative_path": f.relative_path,
                    "size_bytes": f.size_bytes,
                    "line_count": f.line_count,
                    "sha256": f.sha256,
                }
                for f in self.files
            ],
        }

    def to_json(self, indent_size: int = 2) -> str:
        """Serialise manifest to pretty-printed JSON."""
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)


# ---------------------------------------------------------------------------
# ProjectExporter class
# ---------------------------------------------------------------------------


class ProjectExporter:
    """
    Writes generated artifacts under one project root.

    Usage::

        exporter = ProjectExporter(Path("./out/shop"))
        manifest = exporter.export(artifacts)
        print(manifest.to_json())

    Thread-safety: NOT thread-safe.  Use one exporter per output directory.
    """

    def __init__(
        self,
        project_root: Path,
        *,
        project_name: str = "",
        project_version: str = "",
        generator_version: str = "",
        write_manifest: bool = False,
    ) -> None:
        """
        Initialise the exporter.

        Args:
            project_root: Directory the relative artifact paths resolve against.
            project_name: Recorded in the manifest.
            project_version: Recorded in the manifest.
            generator_version: Recorded in the manifest.
            write_manifest: If True, also write ``layergen-manifest.json``.
        """
        self._root: Path = Path(project_root).resolve()
        self._project_name: str = project_name
        self._project_version: str = project_version
        self._generator_version: str = generator_version
        self._write_manifest: bool = write_manifest

        logger.debug("ProjectExporter initialised: root=%s.", self._root)

    @property
    def project_root(self) -> Path:
        return self._root

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def export(self, artifacts: Iterable[GeneratedArtifact]) -> ExportManifest:
        """
        Write every artifact, in order.

        Raises:
            ExportError: On the first path or I/O failure.
        """
        manifest: ExportManifest = ExportManifest(
            project_name=self._project_name,
            project_version=self._project_version,
            generator_version=self._generator_version,
            export_timestamp=datetime.now(timezone.utc).isoformat(),
            output_directory=str(self._root),
        )

        with Timer("export") as timer:
            for artifact in artifacts:
                manifest.files.append(self._write_artifact(artifact))

            if self._write_manifest:
                self._write_manifest_file(manifest)

        logger.info(
            "Export completed: %d files, %d bytes, %.3fs.",
            manifest.total_files,
            manifest.total_bytes,
            timer.elapsed,
        )
        return manifest

    def resolve(self, relative_path: str) -> Path:
        """
        Map a POSIX relative path onto the project root.

        Raises:
            ExportError: If the path is absolute or escapes the root.
        """
        rel: PurePosixPath = PurePosixPath(relative_path)
        if rel.is_absolute() or ".." in rel.parts:
            raise ExportError(f"Refusing to write outside the project root: {relative_path}")
        return self._root.joinpath(*rel.parts)

    # -----------------------------------------------------------------
    # Internal: file writing
    # -----------------------------------------------------------------

    def _write_artifact(self, artifact: GeneratedArtifact) -> FileRecord:
        full_path: Path = self.resolve(artifact.relative_path)
        encoded: bytes = artifact.content.encode("utf-8")
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            self._atomic_write(full_path, encoded)
        except OSError as exc:
            raise ExportError(
                f"Failed to write {artifact.relative_path}: {type(exc).__name__}: {exc}"
            ) from exc

        logger.debug(
            "Wrote file: %s (%d bytes, %d lines).",
            artifact.relative_path,
            len(encoded),
            artifact.line_count,
        )
        return FileRecord(
            relative_path=artifact.relative_path,
            absolute_path=str(full_path),
            size_bytes=len(encoded),
            line_count=artifact.line_count,
            sha256=artifact.sha256,
        )

    @staticmethod
    def _atomic_write(target_path: Path, data: bytes) -> None:
        """
        Write data to target_path atomically using a temporary file.

        The temp file lives in the target directory so ``os.replace`` never
        crosses a filesystem boundary.
        """
        fd, tmp_path = tempfile.mkstemp(
            dir=str(target_path.parent),
            prefix=f".{target_path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, str(target_path))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _write_manifest_file(self, manifest: ExportManifest) -> None:
        path: Path = self._root / MANIFEST_FILENAME
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            self._atomic_write(path, manifest.to_json().encode("utf-8"))
        except OSError as exc:
            raise ExportError(f"Failed to write manifest: {exc}") from exc
        logger.info("Manifest written: %s", path)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "MANIFEST_FILENAME",
    "FileRecord",
    "ExportManifest",
    "ProjectExporter",
]

logger.debug("layergen.exporters loaded — %d public symbols.", len(__all__))
