# File: layergen/mapping.py
"""
layergen - Query Mapping Descriptor
===================================
An in-memory model of the MyBatis mapper XML generated for one table.

The mapper is held as data rather than as a string so that the same
description can be rendered to XML (``QueryMapping.to_xml``) and also bound
against a concrete parameter mapping (``QueryMapping.bind``).  Binding follows
MyBatis dynamic-SQL semantics:

    <if test="m != null">   → kept only when ``values[m]`` is present and not None
    <trim suffixOverrides> → trailing separator stripped, prefix/suffix only
                              when something survived
    <set>                  → ``SET`` prefix, trailing comma stripped

``#{name}`` placeholders become ``?`` in the bound SQL and ``name`` is added to
the ordered parameter list.

Statements:
    insertSelective, deleteById, updateByIdSelective, findById, findList
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

from layergen.exceptions import MalformedSchemaError
from layergen.models import TableModel
from layergen.typemap import GENERATED_KEY_TYPES
from layergen.utils import join_lines, xml_escape

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("layergen.mapping")

_PLACEHOLDER_RE: re.Pattern[str] = re.compile(r"#\{([A-Za-z_][A-Za-z0-9_]*)\}")

BASE_RESULT_MAP: str = "BaseResultMap"
BASE_COLUMN_LIST: str = "Base_Column_List"

# Mapper parameter names shared with the generated access interface
ID_PARAM: str = "id"
OFFSET_PARAM: str = "offset"
LIMIT_PARAM: str = "limit"


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


def page_offset(page_number: int, page_size: int) -> int:
    """
    Zero-based row offset of a 1-based page.

    Unchecked: ``page_number < 1`` yields a negative offset.  Use
    ``PageRequest`` where the inputs come from outside.
    """
    return (page_number - 1) * page_size


class PageRequest(BaseModel):
    """A checked page request: ``page_number >= 1`` and ``page_size > 0``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    page_number: int = Field(default=1, ge=1, description="1-based page number.")
    page_size: int = Field(default=10, gt=0, description="Rows per page.")

    @computed_field  # type: ignore[misc]
    @property
    def offset(self) -> int:
        return page_offset(self.page_number, self.page_size)

    @property
    def limit(self) -> int:
        return self.page_size


# ---------------------------------------------------------------------------
# Descriptor building blocks
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Fragment:
    """A piece of SQL text, optionally guarded by a member null-check."""

    text: str
    guard: Optional[str] = None

    def is_active(self, values: Mapping[str, Any]) -> bool:
        return self.guard is None or values.get(self.guard) is not None

    def to_xml(self) -> str:
        body: str = xml_escape(self.text)
        if self.guard is None:
            return body
        return f'<if test="{self.guard} != null">{body}</if>'


@dataclass(frozen=True, slots=True)
class IncludeRef:
    """Reference to a named ``<sql>`` block."""

    refid: str

    def to_xml(self) -> str:
        return f'<include refid="{self.refid}"/>'


@dataclass(frozen=True, slots=True)
class TrimBlock:
    """
    A ``<trim>`` (or ``<set>``) group of fragments.

    With ``tag="set"`` the prefix is ``SET`` and only the trailing comma is
    stripped, exactly as MyBatis does.
    """

    fragments: Tuple[Fragment, ...]
    prefix: str = ""
    suffix: str = ""
    suffix_overrides: str = ","
    tag: str = "trim"

    def resolve(self, values: Mapping[str, Any]) -> str:
        kept: List[str] = [f.text for f in self.fragments if f.is_active(values)]
        body: str = " ".join(kept).strip()
        if self.suffix_overrides and body.endswith(self.suffix_overrides):
            body = body[: -len(self.suffix_overrides)].rstrip()
        if not body:
            return ""
        if self.tag == "set":
            return f"SET {body}"
        return f"{self.prefix}{body}{self.suffix}"

    def open_tag(self) -> str:
        if self.tag == "set":
            return "<set>"
        return (
            f'<trim prefix="{xml_escape(self.prefix)}" '
            f'suffix="{xml_escape(self.suffix)}" '
            f'suffixOverrides="{xml_escape(self.suffix_overrides)}">'
        )

    def close_tag(self) -> str:
        return f"</{self.tag}>"


Part = Union[Fragment, IncludeRef, TrimBlock]


@dataclass(frozen=True, slots=True)
class ResultEntry:
    """One ``<id>`` / ``<result>`` line of the result map."""

    column: str
    member: str
    is_identity: bool = False


@dataclass(frozen=True, slots=True)
class Statement:
    """One mapped statement (``<insert>``, ``<delete>``, ``<update>``, ``<select>``)."""

    statement_id: str
    element: str
    parts: Tuple[Part, ...]
    attributes: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True, slots=True)
class BoundStatement:
    """A statement resolved against concrete values."""

    statement_id: str
    sql: str
    parameter_names: Tuple[str, ...]


# ---------------------------------------------------------------------------
# QueryMapping
# ---------------------------------------------------------------------------


class QueryMapping:
    """
    The complete mapper descriptor for one table.

    Build it with ``QueryMapping.from_table``; the table must have a primary
    key because three of the five statements filter on it.
    """

    def __init__(
        self,
        table_name: str,
        namespace: str,
        entity_class: str,
        result_entries: Tuple[ResultEntry, ...],
        statements: Tuple[Statement, ...],
    ) -> None:
        self.table_name: str = table_name
        self.namespace: str = namespace
        self.entity_class: str = entity_class
        self.result_entries: Tuple[ResultEntry, ...] = result_entries
        self.statements: Dict[str, Statement] = {s.statement_id: s for s in statements}
        self.sql_blocks: Dict[str, str] = {
            BASE_COLUMN_LIST: ", ".join(e.column for e in result_entries),
        }

    # -----------------------------------------------------------------
    # Construction
    # -----------------------------------------------------------------

    @classmethod
    def from_table(
        cls,
        table: TableModel,
        namespace: str,
        entity_class: str,
    ) -> "QueryMapping":
        """
        Derive the mapper for *table*.

        Args:
            table: Frozen table model.
            namespace: Fully qualified name of the mapper interface.
            entity_class: Fully qualified name of the entity class.

        Raises:
            MalformedSchemaError: If the table has no primary key.
        """
        pk = table.primary_key_column
        if pk is None:
            raise MalformedSchemaError(
                table.source_name,
                "no primary key; by-id statements cannot be mapped.",
            )
        name: str = table.source_name
        pk_col: str = pk.source_name
        pk_member: str = pk.target_member_name

        entries: Tuple[ResultEntry, ...] = tuple(
            ResultEntry(
                column=c.source_name,
                member=c.target_member_name,
                is_identity=c.source_name == pk_col,
            )
            for c in table.columns
        )

        insert_attrs: List[Tuple[str, str]] = [("parameterType", entity_class)]
        if pk.semantic_type in GENERATED_KEY_TYPES:
            insert_attrs.append(("useGeneratedKeys", "true"))
            insert_attrs.append(("keyProperty", pk_member))

        insert = Statement(
            statement_id="insertSelective",
            element="insert",
            parts=(
                Fragment(f"INSERT INTO {name}"),
                TrimBlock(
                    fragments=tuple(
                        Fragment(f"{c.source_name},", guard=c.target_member_name)
                        for c in table.columns
                    ),
                    prefix="(",
                    suffix=")",
                ),
                TrimBlock(
                    fragments=tuple(
                        Fragment(f"#{{{c.target_member_name}}},", guard=c.target_member_name)
                        for c in table.columns
                    ),
                    prefix="VALUES (",
                    suffix=")",
                ),
            ),
            attributes=tuple(insert_attrs),
        )

        delete = Statement(
            statement_id="deleteById",
            element="delete",
            parts=(Fragment(f"DELETE FROM {name} WHERE {pk_col} = #{{{ID_PARAM}}}"),),
        )

        update = Statement(
            statement_id="updateByIdSelective",
            element="update",
            parts=(
                Fragment(f"UPDATE {name}"),
                TrimBlock(
                    fragments=tuple(
                        Fragment(
                            f"{c.source_name} = #{{{c.target_member_name}}},",
                            guard=c.target_member_name,
                        )
                        for c in table.non_key_columns
                    ),
                    tag="set",
                ),
                Fragment(f"WHERE {pk_col} = #{{{pk_member}}}"),
            ),
            attributes=(("parameterType", entity_class),),
        )

        find_by_id = Statement(
            statement_id="findById",
            element="select",
            parts=(
                Fragment("SELECT"),
                IncludeRef(BASE_COLUMN_LIST),
                Fragment(f"FROM {name} WHERE {pk_col} = #{{{ID_PARAM}}}"),
            ),
            attributes=(("resultMap", BASE_RESULT_MAP),),
        )

        find_list = Statement(
            statement_id="findList",
            element="select",
            parts=(
                Fragment("SELECT"),
                IncludeRef(BASE_COLUMN_LIST),
                Fragment(
                    f"FROM {name} ORDER BY {pk_col} DESC "
                    f"LIMIT #{{{OFFSET_PARAM}}}, #{{{LIMIT_PARAM}}}"
                ),
            ),
            attributes=(("resultMap", BASE_RESULT_MAP),),
        )

        logger.debug("Built query mapping for '%s' (%d columns).", name, len(entries))
        return cls(
            table_name=name,
            namespace=namespace,
            entity_class=entity_class,
            result_entries=entries,
            statements=(insert, delete, update, find_by_id, find_list),
        )

    # -----------------------------------------------------------------
    # Accessors
    # -----------------------------------------------------------------

    @property
    def statement_ids(self) -> List[str]:
        return list(self.statements)

    @property
    def identity_entry(self) -> ResultEntry:
        return next(e for e in self.result_entries if e.is_identity)

    def statement(self, statement_id: str) -> Statement:
        try:
            return self.statements[statement_id]
        except KeyError:
            raise KeyError(
                f"Unknown statement '{statement_id}'. Available: {self.statement_ids}"
            ) from None

    # -----------------------------------------------------------------
    # Binding
    # -----------------------------------------------------------------

    def bind(
        self,
        statement_id: str,
        values: Optional[Mapping[str, Any]] = None,
    ) -> BoundStatement:
        """
        Resolve a statement's dynamic SQL against *values*.

        Returns the SQL with ``?`` placeholders and the parameter names in
        placeholder order.
        """
        values = values or {}
        stmt: Statement = self.statement(statement_id)
        pieces: List[str] = []
        for part in stmt.parts:
            if isinstance(part, TrimBlock):
                resolved: str = part.resolve(values)
            elif isinstance(part, IncludeRef):
                resolved = self.sql_blocks[part.refid]
            elif part.is_active(values):
                resolved = part.text
            else:
                resolved = ""
            if resolved:
                pieces.append(resolved)

        template: str = " ".join(pieces)
        names: Tuple[str, ...] = tuple(_PLACEHOLDER_RE.findall(template))
        sql: str = _PLACEHOLDER_RE.sub("?", template)
        return BoundStatement(statement_id=statement_id, sql=sql, parameter_names=names)

    # -----------------------------------------------------------------
    # XML rendering
    # -----------------------------------------------------------------

    def to_xml(self, indent_size: int = 4) -> str:
        """Render the MyBatis mapper XML document."""
        ind: str = " " * indent_size
        lines: List[str] = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<!DOCTYPE mapper PUBLIC "-//mybatis.org//DTD Mapper 3.0//EN" '
            '"http://mybatis.org/dtd/mybatis-3-mapper.dtd">',
            f'<mapper namespace="{xml_escape(self.namespace)}">',
            "",
            f'{ind}<resultMap id="{BASE_RESULT_MAP}" type="{xml_escape(self.entity_class)}">',
        ]
        for entry in self.result_entries:
            tag: str = "id" if entry.is_identity else "result"
            lines.append(
                f'{ind * 2}<{tag} column="{xml_escape(entry.column)}" '
                f'property="{entry.member}"/>'
            )
        lines.append(f"{ind}</resultMap>")
        lines.append("")

        for block_id, body in self.sql_blocks.items():
            lines.append(f'{ind}<sql id="{block_id}">')
            lines.append(f"{ind * 2}{xml_escape(body)}")
            lines.append(f"{ind}</sql>")
            lines.append("")

        for stmt in self.statements.values():
            attrs: str = "".join(
                f' {key}="{xml_escape(value)}"' for key, value in stmt.attributes
            )
            lines.append(f'{ind}<{stmt.element} id="{stmt.statement_id}"{attrs}>')
            lines.extend(self._render_parts(stmt.parts, ind))
            lines.append(f"{ind}</{stmt.element}>")
            lines.append("")

        lines.append("</mapper>")
        return join_lines(lines)

    @staticmethod
    def _render_parts(parts: Tuple[Part, ...], ind: str) -> List[str]:
        out: List[str] = []
        for part in parts:
            if isinstance(part, TrimBlock):
                out.append(f"{ind * 2}{part.open_tag()}")
                out.extend(f"{ind * 3}{f.to_xml()}" for f in part.fragments)
                out.append(f"{ind * 2}{part.close_tag()}")
            else:
                out.append(f"{ind * 2}{part.to_xml()}")
        return out

    def __repr__(self) -> str:
        return f"<QueryMapping {self.table_name} ({len(self.statements)} statements)>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "BASE_RESULT_MAP",
    "BASE_COLUMN_LIST",
    "ID_PARAM",
    "OFFSET_PARAM",
    "LIMIT_PARAM",
    "page_offset",
    "PageRequest",
    "Fragment",
    "IncludeRef",
    "TrimBlock",
    "ResultEntry",
    "Statement",
    "BoundStatement",
    "QueryMapping",
]

logger.debug("layergen.mapping loaded — %d public symbols.", len(__all__))
