# File: layergen/generator.py
"""
layergen - Generation Pipeline (Orchestrator)
=============================================

Connects every phase together:

    Config → Introspection → Validation → Rendering → Export

Workflow::

    1. Validate the configuration (validators.py).
    2. Introspect the metadata source once; the connection is closed
       before anything is rendered (introspector.py).
    3. Validate the schema; key-less tables are skipped or rejected.
    4. Render the project files and then every table, in provider order
       (templates.py).
    5. Hand the artifacts to ``ProjectExporter`` (exporters.py), unless
       running dry.
    6. Return a ``GenerationReport`` with metrics.

Error handling strategy:
    - A run is all-or-nothing: the first fatal error propagates to the
      caller as a ``LayergenError`` subclass.
    - Nothing is retried.
    - Files written before an export failure stay on disk.

Complexity: O(T × C) where T = tables, C = columns per table.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from layergen.exceptions import ConfigurationError, MalformedSchemaError
from layergen.exporters import ExportManifest, ProjectExporter
from layergen.introspector import (
    MetadataProvider,
    SchemaIntrospector,
    SqlAlchemyMetadataProvider,
    database_user_from,
    jdbc_url_from,
)
from layergen.models import GeneratedArtifact, GenerationConfig, TableModel
from layergen.templates import TemplateGenerator
from layergen.utils import Timer, load_structured_file
from layergen.validators import ValidationResult, validate_config, validate_tables

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("layergen.generator")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``ProjectGenerator.generate()``.

    Only returned for completed runs; fatal errors raise instead.
    """

    success: bool = False
    dry_run: bool = False
    project_name: str = ""
    output_directory: str = ""

    # Metrics
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    total_elapsed_seconds: float = 0.0

    tables: List[str] = field(default_factory=list)
    skipped_tables: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    artifacts: List[GeneratedArtifact] = field(default_factory=list)

    # Export manifest reference (None on dry runs)
    manifest: Optional[ExportManifest] = None

    def artifacts_for(self, table_name: str) -> List[GeneratedArtifact]:
        return [a for a in self.artifacts if a.table_name == table_name]

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "SUCCESS" if self.success else "FAILED"
        if self.dry_run:
            status += " (dry run, nothing written)"
        lines.append(f"{'=' * 60}")
        lines.append("  layergen - Generation Report")
        lines.append(f"{'=' * 60}")
        lines.append(f"  Status:           {status}")
        lines.append(f"  Project:          {self.project_name}")
        lines.append(f"  Output:           {self.output_directory}")
        lines.append(f"  Tables rendered:  {len(self.tables)}")
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
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        if self.warnings:
            lines.append(f"{'─' * 60}")
            lines.append(f"  Warnings ({len(self.warnings)}):")
            for warn in self.warnings:
                lines.append(f"    ⚠ {warn}")

        if self.skipped_tables:
            lines.append(f"{'─' * 60}")
            lines.append(f"  Skipped Tables ({len(self.skipped_tables)}):")
            for tbl in self.skipped_tables:
                lines.append(f"    ⊘ {tbl}")

        lines.append(f"{'=' * 60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def load_config_file(path: Path) -> Dict[str, Any]:
    """
    Load raw configuration values from a JSON or YAML file.

    Values may sit at top level or under a ``layergen:`` key.

    Raises:
        ConfigurationError: If the file is missing or unparseable.
    """
    try:
        data: Dict[str, Any] = load_structured_file(Path(path))
    except (FileNotFoundError, ValueError) as exc:
        raise ConfigurationError(str(exc)) from exc

    section: Any = data.get("layergen", data)
    if not isinstance(section, dict):
        raise ConfigurationError(f"'layergen' section in {path} must be a mapping.")
    logger.info("Loaded config file: %s (%d keys).", path, len(section))
    return dict(section)


def build_config(
    file_values: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> GenerationConfig:
    """
    Merge file values with overrides (overrides win) into a GenerationConfig.

    Raises:
        ConfigurationError: If the merged values fail model validation.
    """
    merged: Dict[str, Any] = dict(file_values or {})
    merged.update({k: v for k, v in (overrides or {}).items() if v is not None})
    try:
        return GenerationConfig.model_validate(merged)
    except ValidationError as exc:
        problems: List[str] = [
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in exc.errors()
        ]
        raise ConfigurationError("Invalid configuration: " + "; ".join(problems)) from exc


# ---------------------------------------------------------------------------
# ProjectGenerator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """
    Master pipeline orchestrator.

    Usage::

        config = GenerationConfig(group_id="com.acme.shop", artifact_id="shop",
                                  database_url="mysql+pymysql://root@localhost/shop")
        report = ProjectGenerator(config).generate()
        print(report.summary())

    Pass ``provider`` to generate from something other than
    ``config.database_url`` (a snapshot, a prepared engine).
    """

    def __init__(
        self,
        config: GenerationConfig,
        provider: Optional[MetadataProvider] = None,
        *,
        dry_run: bool = False,
    ) -> None:
        self._config: GenerationConfig = self._resolve_connection_settings(config)
        self._provider: Optional[MetadataProvider] = provider
        self._dry_run: bool = dry_run
        logger.debug(
            "ProjectGenerator initialised: artifact=%s, provider=%s, dry_run=%s.",
            config.artifact_id,
            type(provider).__name__ if provider else "SqlAlchemyMetadataProvider",
            dry_run,
        )

    @property
    def config(self) -> GenerationConfig:
        return self._config

    @property
    def project_root(self) -> Path:
        return Path(self._config.project_dir) / self._config.artifact_id

    @staticmethod
    def _resolve_connection_settings(config: GenerationConfig) -> GenerationConfig:
        updates: Dict[str, Any] = {}
        if config.jdbc_url is None:
            derived: Optional[str] = jdbc_url_from(config.database_url)
            if derived is not None:
                updates["jdbc_url"] = derived
        if config.database_user is None:
            user: Optional[str] = database_user_from(config.database_url)
            if user is not None:
                updates["database_user"] = user
        return config.model_copy(update=updates) if updates else config

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def generate(self) -> GenerationReport:
        """
        Run the full pipeline.

        Raises:
            ConfigurationError: Invalid settings.
            ConnectivityError: The metadata source failed.
            MalformedSchemaError: A table cannot be rendered consistently.
            ExportError: A file could not be written.
        """
        start: float = time.perf_counter()
        report: GenerationReport = GenerationReport(
            dry_run=self._dry_run,
            project_name=self._config.artifact_id,
            output_directory=str(self.project_root.resolve()),
        )

        self._step_validate_config(report)
        tables: List[TableModel] = self._step_introspect(report)
        renderable: List[TableModel] = self._step_validate_schema(tables, report)
        artifacts: List[GeneratedArtifact] = self._step_render(renderable, report)

        report.artifacts = artifacts
        report.total_files = len(artifacts)
        report.total_lines = sum(a.line_count for a in artifacts)
        report.total_bytes = sum(len(a.content.encode("utf-8")) for a in artifacts)

        if self._dry_run:
            logger.info("Dry run: %d artifacts rendered, none written.", len(artifacts))
        else:
            self._step_export(artifacts, report)

        report.success = True
        report.total_elapsed_seconds = time.perf_counter() - start
        logger.info(
            "Generation finished: %d tables, %d files in %.3fs.",
            len(report.tables),
            report.total_files,
            report.total_elapsed_seconds,
        )
        return report

    # -----------------------------------------------------------------
    # Pipeline steps
    # -----------------------------------------------------------------

    def _step_validate_config(self, report: GenerationReport) -> None:
        with Timer("validate_config") as t:
            result: ValidationResult = validate_config(
                self._config, require_database_url=self._provider is None
            )
        result.log_issues()
        report.warnings.extend(w.message for w in result.warnings)
        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Validate Config",
                success=result.is_valid,
                elapsed_seconds=t.elapsed,
                detail=result.summary(),
            )
        )
        if result.has_errors:
            raise ConfigurationError("; ".join(e.message for e in result.errors))

    def _make_provider(self) -> MetadataProvider:
        if self._provider is not None:
            return self._provider
        cfg: GenerationConfig = self._config
        return SqlAlchemyMetadataProvider(
            cfg.database_url,
            user=cfg.database_user,
            password=cfg.database_password,
            catalog=cfg.catalog,
        )

    def _step_introspect(self, report: GenerationReport) -> List[TableModel]:
        introspector: SchemaIntrospector = SchemaIntrospector(
            self._make_provider(), table_filter=self._config.wants_table
        )
        with Timer("introspect") as t:
            tables: List[TableModel] = introspector.introspect()
        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Introspect",
                elapsed_seconds=t.elapsed,
                detail=f"{len(tables)} table(s)",
            )
        )
        return tables

    def _step_validate_schema(
        self,
        tables: List[TableModel],
        report: GenerationReport,
    ) -> List[TableModel]:
        with Timer("validate_schema") as t:
            result: ValidationResult = validate_tables(tables, self._config)
        result.log_issues()
        report.warnings.extend(w.message for w in result.warnings)
        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Validate Schema",
                success=result.is_valid,
                elapsed_seconds=t.elapsed,
                detail=result.summary(),
            )
        )
        if result.has_errors:
            first = result.errors[0]
            raise MalformedSchemaError(first.context.get("table", "<schema>"), first.message)

        renderable: List[TableModel] = []
        for table in tables:
            if table.has_primary_key:
                renderable.append(table)
            else:
                report.skipped_tables.append(table.source_name)
        return renderable

    def _step_render(
        self,
        tables: List[TableModel],
        report: GenerationReport,
    ) -> List[GeneratedArtifact]:
        renderer: TemplateGenerator = TemplateGenerator(self._config)
        artifacts: List[GeneratedArtifact] = []
        with Timer("render") as t:
            if self._config.generate_project_files:
                artifacts.extend(renderer.generate_project_files())
            for table in tables:
                artifacts.extend(renderer.render_table(table))
                report.tables.append(table.source_name)
                logger.info("Rendered table '%s' as %s.", table.source_name, table.entity_type_name)
        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Render",
                elapsed_seconds=t.elapsed,
                detail=f"{len(artifacts)} artifact(s)",
            )
        )
        return artifacts

    def _step_export(
        self,
        artifacts: List[GeneratedArtifact],
        report: GenerationReport,
    ) -> None:
        from layergen import __version__

        exporter: ProjectExporter = ProjectExporter(
            self.project_root,
            project_name=self._config.artifact_id,
            project_version=self._config.version,
            generator_version=__version__,
            write_manifest=self._config.write_manifest,
        )
        with Timer("export") as t:
            manifest: ExportManifest = exporter.export(artifacts)
        report.manifest = manifest
        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Export",
                elapsed_seconds=t.elapsed,
                detail=f"{manifest.total_files} files, {manifest.total_bytes:,} bytes",
            )
        )


def generate_project(
    config: Union[GenerationConfig, Mapping[str, Any]],
    provider: Optional[MetadataProvider] = None,
    *,
    dry_run: bool = False,
) -> GenerationReport:
    """One-call convenience wrapper around ``ProjectGenerator``."""
    if not isinstance(config, GenerationConfig):
        config = build_config(config)
    return ProjectGenerator(config, provider, dry_run=dry_run).generate()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "GenerationStepMetric",
    "GenerationReport",
    "load_config_file",
    "build_config",
    "ProjectGenerator",
    "generate_project",
]

logger.debug("layergen.generator loaded — %d public symbols.", len(__all__))
