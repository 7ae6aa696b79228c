# File: layergen/validators.py
"""
layergen - Schema & Configuration Validators
============================================
Semantic checks layered on top of the pydantic models in ``layergen.models``.

Pydantic (and the freeze-time validators of ``TableModel``) guarantee that
each model is internally consistent.  This module looks across models and
at the generated Java: names that will not compile, two tables rendering to
the same files, tables that cannot be rendered at all.

Usage by downstream modules:
    from layergen.validators import validate_tables
    result = validate_tables(tables, config)
    if result.has_errors:
        raise MalformedSchemaError(...)
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from layergen.models import GenerationConfig, TableModel
from layergen.templates import RESULT_CLASS
from layergen.utils import JAVA_KEYWORDS

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("layergen.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationIssue:
    """Lightweight issue descriptor (no pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()


class ValidationResult:
    """Accumulates ``ValidationIssue`` instances."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationIssue] = []

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("error", code, message, context))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("warning", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self._items if i.is_error]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self._items if i.is_warning]

    @property
    def has_errors(self) -> bool:
        return any(i.is_error for i in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self._items if i.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self._items if i.is_warning)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def codes(self) -> List[str]:
        return [i.code for i in self._items]

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s)."
        )

    def log_issues(self) -> None:
        """Emit every issue on the module logger at its own level."""
        for item in self._items:
            if item.is_error:
                logger.error("[%s] %s", item.code, item.message)
            else:
                logger.warning("[%s] %s", item.code, item.message)

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)


# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

_JAVA_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_MAVEN_VERSION_RE: re.Pattern[str] = re.compile(r"^\d+(\.\d+)*([.-][A-Za-z0-9]+)*$")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def validate_config(
    config: GenerationConfig,
    require_database_url: bool = True,
) -> ValidationResult:
    """
    Checks beyond what the pydantic field validators enforce.

    Args:
        config: The run configuration.
        require_database_url: False when the caller supplies its own
            metadata provider.
    """
    result: ValidationResult = ValidationResult()

    if require_database_url and not config.database_url:
        result.add_error(
            "NO_METADATA_SOURCE",
            "No database URL configured and no metadata provider given.",
        )

    for segment in config.resolved_package.split("."):
        if segment in JAVA_KEYWORDS:
            result.add_error(
                "PACKAGE_SEGMENT_RESERVED",
                f"Package '{config.resolved_package}' contains the Java keyword "
                f"'{segment}'.",
                {"package": config.resolved_package},
            )

    if not _MAVEN_VERSION_RE.match(config.version):
        result.add_warning(
            "UNUSUAL_VERSION",
            f"Version '{config.version}' does not look like a Maven version "
            f"(e.g. 1.0.0-SNAPSHOT).",
            {"version": config.version},
        )

    overlap: List[str] = sorted(set(config.include_tables) & set(config.exclude_tables))
    if overlap:
        result.add_warning(
            "INCLUDE_EXCLUDE_OVERLAP",
            f"Tables both included and excluded (exclude wins): {overlap}",
            {"tables": overlap},
        )

    if config.generate_project_files and not config.jdbc_url:
        result.add_warning(
            "JDBC_URL_UNKNOWN",
            "No JDBC URL could be determined; application.yml will have an "
            "empty datasource url.",
        )

    if not config.project_dir:
        result.add_error("EMPTY_PROJECT_DIR", "project_dir must not be empty.")

    app_class: str = config.application_class_name
    if config.generate_project_files and not _JAVA_IDENTIFIER_RE.match(app_class):
        result.add_error(
            "INVALID_APPLICATION_CLASS",
            f"artifactId '{config.artifact_id}' derives the application class "
            f"'{app_class}', which is not a Java identifier.",
            {"artifact_id": config.artifact_id},
        )

    logger.debug("Config validation complete: %s", result.summary())
    return result


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


def validate_table(table: TableModel, config: GenerationConfig) -> ValidationResult:
    """Checks for one table.  O(C) in its column count."""
    result: ValidationResult = ValidationResult()
    ctx: Dict[str, Any] = {"table": table.source_name}

    if not table.columns:
        result.add_warning(
            "NO_COLUMNS",
            f"Table '{table.source_name}' has no columns.",
            ctx,
        )

    if not table.has_primary_key:
        message: str = f"Table '{table.source_name}' has no primary key."
        if config.skip_tables_without_primary_key:
            result.add_warning("MISSING_PRIMARY_KEY", message + " It will be skipped.", ctx)
        else:
            result.add_error("MISSING_PRIMARY_KEY", message, ctx)
        # Name checks apply only to tables that get rendered
        return result

    if table.entity_type_name == RESULT_CLASS:
        result.add_error(
            "ENTITY_SHADOWS_RESULT",
            f"Table '{table.source_name}' derives the entity name "
            f"'{RESULT_CLASS}', which clashes with the response envelope "
            f"in its controller.",
            ctx,
        )

    if not _JAVA_IDENTIFIER_RE.match(table.entity_type_name):
        result.add_error(
            "INVALID_ENTITY_NAME",
            f"Table '{table.source_name}' derives '{table.entity_type_name}', "
            f"which is not a Java identifier.",
            ctx,
        )

    for col in table.columns:
        member: str = col.target_member_name
        col_ctx: Dict[str, Any] = {"table": table.source_name, "column": col.source_name}
        if member in JAVA_KEYWORDS:
            result.add_error(
                "MEMBER_JAVA_KEYWORD",
                f"Column '{table.source_name}.{col.source_name}' derives the "
                f"Java keyword '{member}'.",
                col_ctx,
            )
        elif not _JAVA_IDENTIFIER_RE.match(member):
            result.add_error(
                "INVALID_MEMBER_NAME",
                f"Column '{table.source_name}.{col.source_name}' derives "
                f"'{member}', which is not a Java identifier.",
                col_ctx,
            )

    return result


def validate_tables(
    tables: Sequence[TableModel],
    config: GenerationConfig,
) -> ValidationResult:
    """
    Run every table check plus the cross-table ones.

    Complexity: O(T + C).
    """
    result: ValidationResult = ValidationResult()

    if not tables:
        result.add_warning("NO_TABLES", "No tables found in scope; nothing to generate.")

    owners: Dict[str, str] = {}
    for table in tables:
        result.merge(validate_table(table, config))
        if not table.has_primary_key:
            continue
        entity: str = table.entity_type_name
        if entity in owners:
            result.add_error(
                "ENTITY_NAME_CLASH",
                f"Tables '{owners[entity]}' and '{table.source_name}' both "
                f"derive the entity name '{entity}'.",
                {"table": table.source_name, "other": owners[entity]},
            )
        else:
            owners[entity] = table.source_name

    logger.info("Schema validation complete: %s", result.summary())
    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationIssue",
    "ValidationResult",
    "validate_config",
    "validate_table",
    "validate_tables",
]

logger.debug("layergen.validators loaded — %d public symbols.", len(__all__))
