# File: layergen/typemap.py
"""
layergen - SQL Type Mapping
===========================
The single source of truth for type fidelity.

Two enum-keyed tables live here:

    SqlTypeCode ──(_SEMANTIC_TYPE_MAP)──▶ SemanticType ──(_JAVA_TYPE_MAP)──▶ JavaType

Every generated member type for a column comes from ``target_type_for``;
nothing else in the package re-derives a Java type from a SQL type.  Adding
support for a new database type means adding one row to
``_SEMANTIC_TYPE_MAP``.
"""

from __future__ import annotations

import logging
from enum import Enum, IntEnum
from typing import Dict, List, NamedTuple, Optional, Union

logger: logging.Logger = logging.getLogger("layergen.typemap")


class SqlTypeCode(IntEnum):
    """Generic SQL type codes (numeric values follow ``java.sql.Types``)."""

    BIT = -7
    TINYINT = -6
    SMALLINT = 5
    INTEGER = 4
    BIGINT = -5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    NUMERIC = 2
    DECIMAL = 3
    CHAR = 1
    VARCHAR = 12
    LONGVARCHAR = -1
    NCHAR = -15
    NVARCHAR = -9
    LONGNVARCHAR = -16
    CLOB = 2005
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    BOOLEAN = 16
    BINARY = -2
    VARBINARY = -3
    BLOB = 2004
    OTHER = 1111


class SemanticType(str, Enum):
    """Target-language-neutral column type categories."""

    TEXT = "text"
    INT32 = "int32"
    INT64 = "int64"
    DOUBLE = "double"
    FLOAT = "float"
    DECIMAL = "decimal"
    DATE = "date"
    TIME = "time"
    TIMESTAMP = "timestamp"
    BOOLEAN = "boolean"
    OPAQUE = "opaque"


class JavaType(NamedTuple):
    """A Java member type plus the import it needs (``None`` for java.lang)."""

    simple_name: str
    import_name: Optional[str] = None


_SEMANTIC_TYPE_MAP: Dict[SqlTypeCode, SemanticType] = {
    SqlTypeCode.CHAR: SemanticType.TEXT,
    SqlTypeCode.VARCHAR: SemanticType.TEXT,
    SqlTypeCode.LONGVARCHAR: SemanticType.TEXT,
    SqlTypeCode.NCHAR: SemanticType.TEXT,
    SqlTypeCode.NVARCHAR: SemanticType.TEXT,
    SqlTypeCode.LONGNVARCHAR: SemanticType.TEXT,
    SqlTypeCode.CLOB: SemanticType.TEXT,
    SqlTypeCode.TINYINT: SemanticType.INT32,
    SqlTypeCode.SMALLINT: SemanticType.INT32,
    SqlTypeCode.INTEGER: SemanticType.INT32,
    SqlTypeCode.BIGINT: SemanticType.INT64,
    SqlTypeCode.DOUBLE: SemanticType.DOUBLE,
    SqlTypeCode.FLOAT: SemanticType.FLOAT,
    SqlTypeCode.REAL: SemanticType.FLOAT,
    SqlTypeCode.DECIMAL: SemanticType.DECIMAL,
    SqlTypeCode.NUMERIC: SemanticType.DECIMAL,
    SqlTypeCode.DATE: SemanticType.DATE,
    SqlTypeCode.TIME: SemanticType.TIME,
    SqlTypeCode.TIMESTAMP: SemanticType.TIMESTAMP,
    SqlTypeCode.BIT: SemanticType.BOOLEAN,
    SqlTypeCode.BOOLEAN: SemanticType.BOOLEAN,
}

_JAVA_TYPE_MAP: Dict[SemanticType, JavaType] = {
    SemanticType.TEXT: JavaType("String"),
    SemanticType.INT32: JavaType("Integer"),
    SemanticType.INT64: JavaType("Long"),
    SemanticType.DOUBLE: JavaType("Double"),
    SemanticType.FLOAT: JavaType("Float"),
    SemanticType.DECIMAL: JavaType("BigDecimal", "java.math.BigDecimal"),
    SemanticType.DATE: JavaType("LocalDate", "java.time.LocalDate"),
    SemanticType.TIME: JavaType("LocalTime", "java.time.LocalTime"),
    SemanticType.TIMESTAMP: JavaType("LocalDateTime", "java.time.LocalDateTime"),
    SemanticType.BOOLEAN: JavaType("Boolean"),
    SemanticType.OPAQUE: JavaType("Object"),
}

# Primary keys of these types are database-generated on insert
GENERATED_KEY_TYPES: frozenset = frozenset({SemanticType.INT32, SemanticType.INT64})


def map_semantic_type(type_code: Union[SqlTypeCode, int, None]) -> SemanticType:
    """
    Map a SQL type code onto its SemanticType.

    Total: any code outside the table (including ``None``) maps to
    ``SemanticType.OPAQUE``.
    """
    if type_code is None:
        return SemanticType.OPAQUE
    try:
        code: SqlTypeCode = SqlTypeCode(int(type_code))
    except ValueError:
        logger.debug("Unrecognised SQL type code %r mapped to opaque.", type_code)
        return SemanticType.OPAQUE
    return _SEMANTIC_TYPE_MAP.get(code, SemanticType.OPAQUE)


def target_type_for(semantic_type: SemanticType) -> JavaType:
    """Java member type for a SemanticType."""
    return _JAVA_TYPE_MAP[SemanticType(semantic_type)]


def parse_type_code(value: Union[str, int]) -> Union[SqlTypeCode, int]:
    """
    Accept a type code as an integer or as a ``SqlTypeCode`` name.

    ``"varchar"``, ``"VARCHAR"`` and ``12`` all give ``SqlTypeCode.VARCHAR``.
    Unknown integers pass through unchanged (they map to opaque later);
    unknown names raise ``ValueError``.
    """
    if isinstance(value, int):
        try:
            return SqlTypeCode(value)
        except ValueError:
            return value
    key: str = str(value).strip().upper()
    if key.lstrip("-").isdigit():
        return parse_type_code(int(key))
    try:
        return SqlTypeCode[key]
    except KeyError:
        raise ValueError(f"Unknown SQL type name: {value!r}") from None


__all__: List[str] = [
    "SqlTypeCode",
    "SemanticType",
    "JavaType",
    "GENERATED_KEY_TYPES",
    "map_semantic_type",
    "target_type_for",
    "parse_type_code",
]
