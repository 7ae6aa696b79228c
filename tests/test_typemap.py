"""
tests/test_typemap.py
Unit tests for layergen.typemap: the SQL type code → SemanticType → Java
type tables.
"""

from __future__ import annotations

import pytest

from layergen.typemap import (
    GENERATED_KEY_TYPES,
    JavaType,
    SemanticType,
    SqlTypeCode,
    map_semantic_type,
    parse_type_code,
    target_type_for,
)


class TestMapSemanticType:

    @pytest.mark.parametrize("code", list(SqlTypeCode))
    def test_total_over_every_known_code(self, code: SqlTypeCode) -> None:
        assert isinstance(map_semantic_type(code), SemanticType)

    @pytest.mark.parametrize(
        "code, expected",
        [
            (SqlTypeCode.VARCHAR, SemanticType.TEXT),
            (SqlTypeCode.LONGVARCHAR, SemanticType.TEXT),
            (SqlTypeCode.TINYINT, SemanticType.INT32),
            (SqlTypeCode.INTEGER, SemanticType.INT32),
            (SqlTypeCode.BIGINT, SemanticType.INT64),
            (SqlTypeCode.DECIMAL, SemanticType.DECIMAL),
            (SqlTypeCode.NUMERIC, SemanticType.DECIMAL),
            (SqlTypeCode.DOUBLE, SemanticType.DOUBLE),
            (SqlTypeCode.REAL, SemanticType.FLOAT),
            (SqlTypeCode.DATE, SemanticType.DATE),
            (SqlTypeCode.TIME, SemanticType.TIME),
            (SqlTypeCode.TIMESTAMP, SemanticType.TIMESTAMP),
            (SqlTypeCode.BIT, SemanticType.BOOLEAN),
            (SqlTypeCode.BLOB, SemanticType.OPAQUE),
        ],
    )
    def test_known_codes(self, code: SqlTypeCode, expected: SemanticType) -> None:
        assert map_semantic_type(code) is expected

    def test_plain_int_codes_accepted(self) -> None:
        assert map_semantic_type(12) is SemanticType.TEXT
        assert map_semantic_type(-5) is SemanticType.INT64

    @pytest.mark.parametrize("code", [99999, -12345, None])
    def test_unrecognised_is_opaque(self, code: object) -> None:
        assert map_semantic_type(code) is SemanticType.OPAQUE  # type: ignore[arg-type]


class TestTargetTypeFor:

    def test_every_semantic_type_has_a_java_type(self) -> None:
        for semantic in SemanticType:
            assert isinstance(target_type_for(semantic), JavaType)

    def test_imports(self) -> None:
        assert target_type_for(SemanticType.TEXT) == JavaType("String", None)
        assert target_type_for(SemanticType.INT64).simple_name == "Long"
        assert target_type_for(SemanticType.DECIMAL).import_name == "java.math.BigDecimal"
        assert target_type_for(SemanticType.TIMESTAMP) == JavaType(
            "LocalDateTime", "java.time.LocalDateTime"
        )
        assert target_type_for(SemanticType.OPAQUE).simple_name == "Object"

    def test_accepts_string_value(self) -> None:
        assert target_type_for("int32").simple_name == "Integer"  # type: ignore[arg-type]

    def test_generated_key_types(self) -> None:
        assert GENERATED_KEY_TYPES == {SemanticType.INT32, SemanticType.INT64}


class TestParseTypeCode:

    @pytest.mark.parametrize("value", ["VARCHAR", "varchar", " VarChar ", 12, "12"])
    def test_varchar_spellings(self, value: object) -> None:
        assert parse_type_code(value) is SqlTypeCode.VARCHAR  # type: ignore[arg-type]

    def test_negative_numeric_string(self) -> None:
        assert parse_type_code("-5") is SqlTypeCode.BIGINT

    def test_unknown_integer_passes_through(self) -> None:
        assert parse_type_code(4242) == 4242

    def test_unknown_name_raises(self) -> None:
        with pytest.raises(ValueError, match="HYPERBLOB"):
            parse_type_code("HYPERBLOB")
