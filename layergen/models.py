# File: layergen/models.py
"""
layergen - Core Data Models
===========================
Pydantic V2 models representing introspected schema elements, rendered
artifacts and generation configuration.  These models are the single source
of truth for the pipeline:

    Introspection → TableModel → Rendering → GeneratedArtifact → Export

``ColumnModel`` and ``TableModel`` are frozen.  Every name or type a renderer
needs is a ``computed_field`` derived through ``layergen.utils`` and
``layergen.typemap``, so all six artifacts of a table read the same values.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from layergen.exceptions import MalformedSchemaError
from layergen.typemap import (
    JavaType,
    SemanticType,
    SqlTypeCode,
    map_semantic_type,
    target_type_for,
)
from layergen.utils import (
    count_lines,
    derive_member_name,
    derive_pascal_name,
    derive_route_segment,
    package_to_path,
    sha256_hex,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("layergen.models")

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ArtifactKind(str, Enum):
    """Every kind of file the renderer can emit."""

    ENTITY = "entity"
    ACCESS_INTERFACE = "access_interface"
    QUERY_MAPPING = "query_mapping"
    SERVICE_INTERFACE = "service_interface"
    SERVICE_IMPL = "service_impl"
    API_CONTROLLER = "api_controller"
    PROJECT_FILE = "project_file"


# Fixed module tiers of the generated project
MODULE_COMMON: str = "common"
MODULE_DAO: str = "dao"
MODULE_SERVICE: str = "service"
MODULE_WEB: str = "web"
MODULES: Tuple[str, ...] = (MODULE_COMMON, MODULE_DAO, MODULE_SERVICE, MODULE_WEB)

# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_FROZEN_CONFIG: ConfigDict = ConfigDict(
    frozen=True,
    extra="forbid",
    populate_by_name=True,
)

_SETTINGS_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    extra="forbid",
)


def _normalise_comment(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


# ---------------------------------------------------------------------------
# Column
# ---------------------------------------------------------------------------


class ColumnModel(BaseModel):
    """
    One database column, created once during introspection of its table.

    ``semantic_type`` is the only type information carried; the Java member
    type is always looked up from it.
    """

    model_config = _FROZEN_CONFIG

    source_name: str = Field(..., min_length=1, description="Raw column identifier.")
    semantic_type: SemanticType = Field(
        default=SemanticType.OPAQUE, description="Normalised type category."
    )
    comment: str = Field(default="", description="Column comment, may be empty.")

    @field_validator("comment", mode="before")
    @classmethod
    def _strip_comment(cls, v: Any) -> str:
        return _normalise_comment(v)

    @classmethod
    def from_metadata(
        cls,
        name: str,
        type_code: Union[SqlTypeCode, int, None],
        comment: Optional[str] = None,
    ) -> "ColumnModel":
        """Build a column straight from a metadata provider row."""
        return cls(
            source_name=name,
            semantic_type=map_semantic_type(type_code),
            comment=comment,
        )

    @computed_field  # type: ignore[misc]
    @property
    def target_member_name(self) -> str:
        return derive_member_name(self.source_name)

    @property
    def java_type(self) -> JavaType:
        return target_type_for(self.semantic_type)

    def __repr__(self) -> str:
        return f"<Column {self.source_name} {self.semantic_type.value}>"


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------


class TableModel(BaseModel):
    """
    Normalised representation of one table.

    Constructed by the introspector after both the column list and the
    primary key are known, then frozen.  Freeze-time validation rejects a
    primary key that names no column and two columns that derive the same
    member name, so renderers never see a half-linked model.
    """

    model_config = _FROZEN_CONFIG

    source_name: str = Field(..., min_length=1, description="Raw table identifier.")
    comment: str = Field(default="", description="Table comment, may be empty.")
    columns: Tuple[ColumnModel, ...] = Field(
        default=(), description="Columns in provider order."
    )
    primary_key_column_name: Optional[str] = Field(
        default=None, description="Primary key column, when the provider reports one."
    )

    @field_validator("comment", mode="before")
    @classmethod
    def _strip_comment(cls, v: Any) -> str:
        return _normalise_comment(v)

    # -- Validators ---------------------------------------------------------

    @model_validator(mode="after")
    def _validate_unique_names(self) -> "TableModel":
        seen_sources: Set[str] = set()
        seen_members: Dict[str, str] = {}
        for col in self.columns:
            if col.source_name in seen_sources:
                raise MalformedSchemaError(
                    self.source_name,
                    f"column '{col.source_name}' is reported more than once.",
                )
            seen_sources.add(col.source_name)
            member: str = col.target_member_name
            if member in seen_members:
                raise MalformedSchemaError(
                    self.source_name,
                    f"columns '{seen_members[member]}' and '{col.source_name}' "
                    f"both derive the member name '{member}'.",
                )
            seen_members[member] = col.source_name
        return self

    @model_validator(mode="after")
    def _validate_primary_key_link(self) -> "TableModel":
        pk: Optional[str] = self.primary_key_column_name
        if pk is not None and self.get_column(pk) is None:
            raise MalformedSchemaError(
                self.source_name,
                f"primary key '{pk}' does not match any column. "
                f"Available columns: {[c.source_name for c in self.columns]}",
            )
        return self

    @model_validator(mode="after")
    def _warn_degenerate(self) -> "TableModel":
        if not self.columns:
            logger.warning(
                "Table '%s' has no columns; its artifacts will be degenerate.",
                self.source_name,
            )
        return self

    # -- Lookups ------------------------------------------------------------

    def get_column(self, name: str) -> Optional[ColumnModel]:
        for col in self.columns:
            if col.source_name == name:
                return col
        return None

    # -- Derived names ------------------------------------------------------

    @computed_field  # type: ignore[misc]
    @property
    def entity_type_name(self) -> str:
        return derive_pascal_name(self.source_name)

    @computed_field  # type: ignore[misc]
    @property
    def instance_name(self) -> str:
        return derive_member_name(self.source_name)

    @computed_field  # type: ignore[misc]
    @property
    def route_path(self) -> str:
        return derive_route_segment(self.source_name)

    @property
    def has_primary_key(self) -> bool:
        return self.primary_key_column_name is not None

    @property
    def primary_key_column(self) -> Optional[ColumnModel]:
        if self.primary_key_column_name is None:
            return None
        return self.get_column(self.primary_key_column_name)

    @property
    def primary_key_type(self) -> Optional[JavaType]:
        col: Optional[ColumnModel] = self.primary_key_column
        return col.java_type if col is not None else None

    @property
    def primary_key_member_name(self) -> Optional[str]:
        col: Optional[ColumnModel] = self.primary_key_column
        return col.target_member_name if col is not None else None

    @property
    def non_key_columns(self) -> List[ColumnModel]:
        return [c for c in self.columns if c.source_name != self.primary_key_column_name]

    def __repr__(self) -> str:
        return (
            f"<Table {self.source_name} ({len(self.columns)} cols, "
            f"pk={self.primary_key_column_name})>"
        )


# ---------------------------------------------------------------------------
# Rendered output
# ---------------------------------------------------------------------------


class GeneratedArtifact(BaseModel):
    """One rendered file: a project-relative path plus its literal content."""

    model_config = _FROZEN_CONFIG

    kind: ArtifactKind = Field(..., description="What this file is.")
    relative_path: str = Field(..., min_length=1, description="POSIX path under the project root.")
    content: str = Field(..., description="Full file content.")
    table_name: Optional[str] = Field(
        default=None, description="Source table, None for project files."
    )

    @computed_field  # type: ignore[misc]
    @property
    def line_count(self) -> int:
        return count_lines(self.content)

    @computed_field  # type: ignore[misc]
    @property
    def sha256(self) -> str:
        return sha256_hex(self.content)

    def __repr__(self) -> str:
        return f"<Artifact {self.kind.value} {self.relative_path}>"


# ---------------------------------------------------------------------------
# Generation Configuration
# ---------------------------------------------------------------------------

_PACKAGE_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")
_ARTIFACT_ID_RE: re.Pattern[str] = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


class GenerationConfig(BaseModel):
    """
    Master configuration for one generation run.

    Combined with a metadata source this is all the generator needs.
    """

    model_config = _SETTINGS_CONFIG

    # -- Project coordinates ------------------------------------------------
    group_id: str = Field(..., min_length=1, description="Maven groupId.")
    artifact_id: str = Field(..., min_length=1, description="Maven artifactId / project folder.")
    version: str = Field(default="1.0.0-SNAPSHOT", description="Project version.")
    package_name: Optional[str] = Field(
        default=None, description="Root Java package (defaults to group_id)."
    )
    project_dir: str = Field(default=".", description="Directory the project folder is created in.")

    # -- Metadata source ----------------------------------------------------
    database_url: Optional[str] = Field(
        default=None, description="SQLAlchemy URL of the database to introspect."
    )
    database_user: Optional[str] = Field(default=None, description="Overrides the URL user.")
    database_password: Optional[str] = Field(
        default=None, description="Overrides the URL password.", repr=False
    )
    database_driver: str = Field(
        default="com.mysql.cj.jdbc.Driver",
        description="JDBC driver class written into application.yml.",
    )
    jdbc_url: Optional[str] = Field(
        default=None, description="JDBC URL written into application.yml."
    )
    catalog: Optional[str] = Field(default=None, description="Schema / catalog scope.")
    include_tables: List[str] = Field(
        default_factory=list, description="Only generate these tables (empty = all)."
    )
    exclude_tables: List[str] = Field(
        default_factory=list, description="Never generate these tables."
    )
    skip_tables_without_primary_key: bool = Field(
        default=True,
        description="Skip key-less tables with a warning instead of failing the run.",
    )

    # -- API ----------------------------------------------------------------
    api_prefix: str = Field(default="/api", description="Route prefix of every controller.")
    default_page_size: int = Field(
        default=10, ge=1, le=10000, description="pageSize used when absent."
    )

    # -- Output -------------------------------------------------------------
    generate_project_files: bool = Field(
        default=True, description="Write poms, Result, application class and yml."
    )
    write_manifest: bool = Field(
        default=False, description="Write layergen-manifest.json to the project root."
    )

    # -- Validators ---------------------------------------------------------

    @field_validator("group_id", "package_name")
    @classmethod
    def _validate_package(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not _PACKAGE_RE.match(v):
            raise ValueError(f"'{v}' is not a valid Java package name.")
        return v

    @field_validator("artifact_id")
    @classmethod
    def _validate_artifact_id(cls, v: str) -> str:
        if not _ARTIFACT_ID_RE.match(v):
            raise ValueError(f"'{v}' is not a valid artifactId.")
        return v

    @field_validator("api_prefix")
    @classmethod
    def _normalise_prefix(cls, v: str) -> str:
        v = "/" + v.strip("/")
        return "" if v == "/" else v

    # -- Helpers ------------------------------------------------------------

    @computed_field  # type: ignore[misc]
    @property
    def resolved_package(self) -> str:
        return self.package_name or self.group_id

    @property
    def package_path(self) -> str:
        return package_to_path(self.resolved_package)

    @property
    def application_class_name(self) -> str:
        # '.' is legal in an artifactId but splits words here like '-'
        return derive_pascal_name(self.artifact_id.replace(".", "-")) + "Application"

    def module_artifact_id(self, module: str) -> str:
        return f"{self.artifact_id}-{module}"

    def wants_table(self, table_name: str) -> bool:
        """Apply include/exclude filters (O(k) over the filter lists)."""
        if self.include_tables and table_name not in self.include_tables:
            return False
        return table_name not in self.exclude_tables


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ArtifactKind",
    "MODULE_COMMON",
    "MODULE_DAO",
    "MODULE_SERVICE",
    "MODULE_WEB",
    "MODULES",
    "ColumnModel",
    "TableModel",
    "GeneratedArtifact",
    "GenerationConfig",
]

logger.debug("layergen.models loaded — %d public symbols.", len(__all__))
