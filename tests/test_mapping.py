"""
tests/test_mapping.py
Unit tests for layergen.mapping: pagination, dynamic-SQL binding and the
MyBatis XML rendering of a QueryMapping.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest
from pydantic import ValidationError

from layergen.exceptions import MalformedSchemaError
from layergen.mapping import (
    BASE_COLUMN_LIST,
    Fragment,
    PageRequest,
    QueryMapping,
    TrimBlock,
    page_offset,
)
from layergen.models import TableModel

NAMESPACE = "com.acme.shop.dao.mapper.UserInfoMapper"
ENTITY = "com.acme.shop.dao.entity.UserInfo"


@pytest.fixture()
def mapping(user_table: TableModel) -> QueryMapping:
    return QueryMapping.from_table(user_table, namespace=NAMESPACE, entity_class=ENTITY)


# ===========================================================================
# Pagination
# ===========================================================================


class TestPagination:

    @pytest.mark.parametrize("page, size, offset", [(1, 10, 0), (3, 20, 40), (2, 1, 1)])
    def test_offset_law(self, page: int, size: int, offset: int) -> None:
        assert page_offset(page, size) == offset

    def test_unchecked_below_one_is_negative(self) -> None:
        assert page_offset(0, 10) == -10

    def test_page_request(self) -> None:
        req = PageRequest(page_number=3, page_size=20)
        assert req.offset == 40
        assert req.limit == 20

    def test_page_request_defaults(self) -> None:
        assert PageRequest().offset == 0

    @pytest.mark.parametrize("page, size", [(0, 10), (-1, 10), (1, 0), (1, -5)])
    def test_page_request_rejects_bad_input(self, page: int, size: int) -> None:
        with pytest.raises(ValidationError):
            PageRequest(page_number=page, page_size=size)


# ===========================================================================
# Building blocks
# ===========================================================================


class TestTrimBlock:

    def test_strips_trailing_comma_and_wraps(self) -> None:
        block = TrimBlock(
            fragments=(Fragment("a,", guard="a"), Fragment("b,", guard="b")),
            prefix="(",
            suffix=")",
        )
        assert block.resolve({"a": 1, "b": 2}) == "(a, b)"
        assert block.resolve({"b": 2}) == "(b)"

    def test_empty_when_nothing_survives(self) -> None:
        block = TrimBlock(fragments=(Fragment("a,", guard="a"),), prefix="(", suffix=")")
        assert block.resolve({"a": None}) == ""

    def test_set_tag(self) -> None:
        block = TrimBlock(fragments=(Fragment("x = #{x},", guard="x"),), tag="set")
        assert block.resolve({"x": 0}) == "SET x = #{x}"
        assert block.open_tag() == "<set>"
        assert block.close_tag() == "</set>"

    def test_fragment_xml(self) -> None:
        assert Fragment("a,", guard="a").to_xml() == '<if test="a != null">a,</if>'
        assert Fragment("a < b").to_xml() == "a &lt; b"


# ===========================================================================
# QueryMapping
# ===========================================================================


class TestQueryMapping:

    def test_requires_primary_key(self, keyless_table: TableModel) -> None:
        with pytest.raises(MalformedSchemaError):
            QueryMapping.from_table(keyless_table, namespace=NAMESPACE, entity_class=ENTITY)

    def test_statement_ids(self, mapping: QueryMapping) -> None:
        assert mapping.statement_ids == [
            "insertSelective",
            "deleteById",
            "updateByIdSelective",
            "findById",
            "findList",
        ]

    def test_result_map_has_every_column_once(self, mapping: QueryMapping) -> None:
        assert [e.column for e in mapping.result_entries] == ["id", "user_name", "created_at"]
        assert [e.member for e in mapping.result_entries] == ["id", "userName", "createdAt"]
        assert sum(1 for e in mapping.result_entries if e.is_identity) == 1
        assert mapping.identity_entry.column == "id"

    def test_base_column_list(self, mapping: QueryMapping) -> None:
        assert mapping.sql_blocks[BASE_COLUMN_LIST] == "id, user_name, created_at"

    def test_unknown_statement(self, mapping: QueryMapping) -> None:
        with pytest.raises(KeyError, match="findAll"):
            mapping.statement("findAll")

    def test_selective_insert_only_set_member(self, mapping: QueryMapping) -> None:
        bound = mapping.bind("insertSelective", {"userName": "alice", "id": None})
        assert bound.sql == "INSERT INTO user_info (user_name) VALUES (?)"
        assert bound.parameter_names == ("userName",)

    def test_selective_insert_all_members(self, mapping: QueryMapping) -> None:
        bound = mapping.bind(
            "insertSelective", {"id": 1, "userName": "alice", "createdAt": "2024-01-01"}
        )
        assert bound.sql == (
            "INSERT INTO user_info (id, user_name, created_at) VALUES (?, ?, ?)"
        )
        assert bound.parameter_names == ("id", "userName", "createdAt")

    def test_selective_update_only_set_member(self, mapping: QueryMapping) -> None:
        bound = mapping.bind("updateByIdSelective", {"id": 7, "userName": "bob"})
        assert bound.sql == "UPDATE user_info SET user_name = ? WHERE id = ?"
        assert bound.parameter_names == ("userName", "id")

    def test_update_never_sets_primary_key(self, mapping: QueryMapping) -> None:
        bound = mapping.bind("updateByIdSelective", {"id": 7, "userName": "b", "createdAt": "t"})
        set_clause = bound.sql.split(" WHERE ")[0]
        assert "id =" not in set_clause
        assert set_clause == "UPDATE user_info SET user_name = ?, created_at = ?"

    def test_delete_and_find_by_id(self, mapping: QueryMapping) -> None:
        assert mapping.bind("deleteById").sql == "DELETE FROM user_info WHERE id = ?"
        found = mapping.bind("findById", {"id": 1})
        assert found.sql == "SELECT id, user_name, created_at FROM user_info WHERE id = ?"
        assert found.parameter_names == ("id",)

    def test_find_list_orders_by_key_descending(self, mapping: QueryMapping) -> None:
        bound = mapping.bind("findList", {"offset": 0, "limit": 10})
        assert bound.sql == (
            "SELECT id, user_name, created_at FROM user_info ORDER BY id DESC LIMIT ?, ?"
        )
        assert bound.parameter_names == ("offset", "limit")

    def test_generated_keys_for_integer_key(self, mapping: QueryMapping) -> None:
        attrs = dict(mapping.statement("insertSelective").attributes)
        assert attrs["useGeneratedKeys"] == "true"
        assert attrs["keyProperty"] == "id"

    def test_no_generated_keys_for_text_key(self, string_key_table: TableModel) -> None:
        mapping = QueryMapping.from_table(string_key_table, namespace="n", entity_class="e")
        attrs = dict(mapping.statement("insertSelective").attributes)
        assert "useGeneratedKeys" not in attrs


class TestQueryMappingXml:

    def test_is_well_formed(self, mapping: QueryMapping) -> None:
        root = ET.fromstring(mapping.to_xml().split("\n", 2)[2])
        assert root.tag == "mapper"
        assert root.get("namespace") == NAMESPACE

    def test_result_map(self, mapping: QueryMapping) -> None:
        root = ET.fromstring(mapping.to_xml().split("\n", 2)[2])
        result_map = root.find("resultMap")
        assert result_map is not None
        assert result_map.get("type") == ENTITY
        ids = result_map.findall("id")
        assert len(ids) == 1
        assert ids[0].get("column") == "id"
        assert [r.get("property") for r in result_map.findall("result")] == [
            "userName",
            "createdAt",
        ]

    def test_dynamic_sql_elements(self, mapping: QueryMapping) -> None:
        xml = mapping.to_xml()
        assert '<if test="userName != null">user_name,</if>' in xml
        assert '<if test="userName != null">#{userName},</if>' in xml
        assert '<if test="createdAt != null">created_at = #{createdAt},</if>' in xml
        assert "<set>" in xml
        assert '<include refid="Base_Column_List"/>' in xml
        assert "ORDER BY id DESC LIMIT #{offset}, #{limit}" in xml

    def test_doctype(self, mapping: QueryMapping) -> None:
        assert "mybatis-3-mapper.dtd" in mapping.to_xml()
