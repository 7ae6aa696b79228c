# File: layergen/__init__.py
"""
layergen - Spring Boot / MyBatis Layered CRUD Generator
=======================================================

Reads database metadata (tables, columns, SQL types, comments, primary keys)
and writes a multi-module Maven project with, for every table, an entity, a
mapper interface, a mapper XML, a service interface and implementation, and
a REST controller.  All six artifacts of a table agree on the entity name,
the primary-key type and the column-to-member mapping.

Architecture overview::

    ┌──────────────┐     ┌──────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ ProjectGenerator │────▶│ TemplateGenerator│
    │   (cli.py)   │     │  (generator.py)  │     │  (templates.py)  │
    └──────────────┘     └────────┬─────────┘     └────────┬─────────┘
                                  │                        │
                 ┌────────────────┼────────────┐           ▼
                 ▼                ▼            ▼     ┌───────────┐
          ┌─────────────┐  ┌───────────┐ ┌──────────┐│  mapping  │
          │introspector │  │validators │ │exporters ││  (.py)    │
          │   (.py)     │  │  (.py)    │ │  (.py)   │└───────────┘
          └──────┬──────┘  └───────────┘ └──────────┘
                 ▼
          ┌─────────────┐
          │models/typemap│
          └─────────────┘

Usage::

    # As a library
    from layergen import GenerationConfig, ProjectGenerator
    config = GenerationConfig(group_id="com.acme.shop", artifact_id="shop",
                              database_url="sqlite:///shop.db")
    print(ProjectGenerator(config).generate().summary())

    # From the command line
    python -m layergen -g com.acme.shop -a shop --db-url sqlite:///shop.db -v
"""

from __future__ import annotations

from typing import List

__version__: str = "1.0.0"
__author__: str = "Diegoproggramer"
__license__: str = "MIT"

from layergen.exceptions import (
    ConfigurationError,
    ConnectivityError,
    ExportError,
    LayergenError,
    MalformedSchemaError,
)
from layergen.typemap import JavaType, SemanticType, SqlTypeCode, map_semantic_type, target_type_for
from layergen.utils import (
    Timer,
    derive_member_name,
    derive_pascal_name,
    derive_route_segment,
)
from layergen.models import (
    ArtifactKind,
    ColumnModel,
    GeneratedArtifact,
    GenerationConfig,
    TableModel,
)
from layergen.mapping import PageRequest, QueryMapping, page_offset
from layergen.introspector import (
    MetadataProvider,
    SchemaIntrospector,
    SnapshotMetadataProvider,
    SqlAlchemyMetadataProvider,
)
from layergen.templates import TemplateGenerator
from layergen.exporters import ExportManifest, ProjectExporter
from layergen.validators import ValidationResult, validate_config, validate_tables
from layergen.generator import GenerationReport, ProjectGenerator, generate_project

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: List[str] = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Errors
    "LayergenError",
    "ConfigurationError",
    "ConnectivityError",
    "MalformedSchemaError",
    "ExportError",
    # Type and naming mapper
    "SqlTypeCode",
    "SemanticType",
    "JavaType",
    "map_semantic_type",
    "target_type_for",
    "derive_member_name",
    "derive_pascal_name",
    "derive_route_segment",
    # Models
    "ArtifactKind",
    "ColumnModel",
    "TableModel",
    "GeneratedArtifact",
    "GenerationConfig",
    # Query mapping
    "QueryMapping",
    "PageRequest",
    "page_offset",
    # Introspection
    "MetadataProvider",
    "SqlAlchemyMetadataProvider",
    "SnapshotMetadataProvider",
    "SchemaIntrospector",
    # Rendering and export
    "TemplateGenerator",
    "ProjectExporter",
    "ExportManifest",
    # Validation
    "ValidationResult",
    "validate_config",
    "validate_tables",
    # Orchestrator
    "ProjectGenerator",
    "GenerationReport",
    "generate_project",
    # Utilities
    "Timer",
]
