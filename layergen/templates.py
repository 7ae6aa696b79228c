# File: layergen/templates.py
"""
layergen - Artifact Renderer
============================
Turns one frozen ``TableModel`` into the six Java/XML source files of its
CRUD slice, plus the once-per-project scaffolding:

    1. Entity                 (dao)      lombok ``@Data`` POJO
    2. Mapper interface       (dao)      MyBatis ``@Mapper``
    3. Mapper XML             (dao)      rendered from ``QueryMapping``
    4. Service interface      (service)
    5. Service implementation (service)  delegates 1:1 to the mapper
    6. REST controller        (web)      wraps everything in ``Result<T>``

**Determinism contract:**
    - Every method is a pure function of its arguments and the config.
    - All string assembly uses ``List[str]`` + ``join_lines()``.
    - No ``str += str`` concatenation, no shared builder state.

Every name and type written into any file comes from the ``TableModel``
computed fields, so the six files always agree on entity name, instance
name, primary-key type and member names.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

import yaml

from layergen.exceptions import MalformedSchemaError
from layergen.mapping import (
    ID_PARAM,
    LIMIT_PARAM,
    OFFSET_PARAM,
    QueryMapping,
)
from layergen.models import (
    MODULE_COMMON,
    MODULE_DAO,
    MODULE_SERVICE,
    MODULE_WEB,
    MODULES,
    ArtifactKind,
    GeneratedArtifact,
    GenerationConfig,
    TableModel,
)
from layergen.typemap import JavaType
from layergen.utils import javadoc, join_lines, xml_escape

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("layergen.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_INDENT: str = "    "
_DOUBLE_INDENT: str = "        "

# Versions pinned in the generated parent pom
SPRING_BOOT_VERSION: str = "2.7.12"
MYBATIS_SPRING_BOOT_VERSION: str = "2.3.0"
MYSQL_CONNECTOR_VERSION: str = "8.0.33"
DRUID_VERSION: str = "1.2.16"
LOMBOK_VERSION: str = "1.18.28"
JAVA_VERSION: str = "1.8"

SERVER_PORT: int = 8080
RESULT_CLASS: str = "Result"

_POM_HEADER: Tuple[str, ...] = (
    '<?xml version="1.0" encoding="UTF-8"?>',
    '<project xmlns="http://maven.apache.org/POM/4.0.0" '
    'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"',
    '         xsi:schemaLocation="http://maven.apache.org/POM/4.0.0 '
    'http://maven.apache.org/xsd/maven-4.0.0.xsd">',
    "    <modelVersion>4.0.0</modelVersion>",
)


def _dependency(
    group_id: str,
    artifact_id: str,
    version: Optional[str] = None,
    scope: Optional[str] = None,
    indent_level: int = 2,
) -> List[str]:
    ind: str = _INDENT * indent_level
    lines: List[str] = [
        f"{ind}<dependency>",
        f"{ind}{_INDENT}<groupId>{group_id}</groupId>",
        f"{ind}{_INDENT}<artifactId>{artifact_id}</artifactId>",
    ]
    if version is not None:
        lines.append(f"{ind}{_INDENT}<version>{version}</version>")
    if scope is not None:
        lines.append(f"{ind}{_INDENT}<scope>{scope}</scope>")
    lines.append(f"{ind}</dependency>")
    return lines


# ---------------------------------------------------------------------------
# TemplateGenerator class
# ---------------------------------------------------------------------------


class TemplateGenerator:
    """
    Stateless renderer.

    Accepts ``TableModel`` instances and a ``GenerationConfig`` and returns
    ``GeneratedArtifact`` values.  No I/O, no randomness: the same table
    always renders byte-identical content.
    """

    def __init__(self, config: GenerationConfig) -> None:
        self._config: GenerationConfig = config
        self._package: str = config.resolved_package
        self._package_path: str = config.package_path
        logger.debug(
            "TemplateGenerator initialised (package=%s, api_prefix=%r).",
            self._package,
            config.api_prefix,
        )

    # -----------------------------------------------------------------
    # Package / path helpers
    # -----------------------------------------------------------------

    def _pkg(self, *segments: str) -> str:
        return ".".join((self._package,) + segments)

    def _java_path(self, module: str, segments: Sequence[str], class_name: str) -> str:
        sub: str = "/".join(segments)
        return f"{module}/src/main/java/{self._package_path}/{sub}/{class_name}.java"

    def entity_fqn(self, table: TableModel) -> str:
        return self._pkg(MODULE_DAO, "entity", table.entity_type_name)

    def mapper_fqn(self, table: TableModel) -> str:
        return self._pkg(MODULE_DAO, "mapper", f"{table.entity_type_name}Mapper")

    def service_fqn(self, table: TableModel) -> str:
        return self._pkg(MODULE_SERVICE, f"{table.entity_type_name}Service")

    def artifact_path(self, kind: ArtifactKind, table: TableModel) -> str:
        """Project-relative path of one per-table artifact."""
        e: str = table.entity_type_name
        if kind is ArtifactKind.ENTITY:
            return self._java_path(MODULE_DAO, (MODULE_DAO, "entity"), e)
        if kind is ArtifactKind.ACCESS_INTERFACE:
            return self._java_path(MODULE_DAO, (MODULE_DAO, "mapper"), f"{e}Mapper")
        if kind is ArtifactKind.QUERY_MAPPING:
            return f"{MODULE_DAO}/src/main/resources/mapper/{e}Mapper.xml"
        if kind is ArtifactKind.SERVICE_INTERFACE:
            return self._java_path(MODULE_SERVICE, (MODULE_SERVICE,), f"{e}Service")
        if kind is ArtifactKind.SERVICE_IMPL:
            return self._java_path(
                MODULE_SERVICE, (MODULE_SERVICE, "impl"), f"{e}ServiceImpl"
            )
        if kind is ArtifactKind.API_CONTROLLER:
            return self._java_path(MODULE_WEB, (MODULE_WEB, "controller"), f"{e}Controller")
        raise ValueError(f"{kind.value} is not a per-table artifact.")

    def _artifact(self, kind: ArtifactKind, table: TableModel, lines: List[str]) -> GeneratedArtifact:
        return GeneratedArtifact(
            kind=kind,
            relative_path=self.artifact_path(kind, table),
            content=join_lines(lines),
            table_name=table.source_name,
        )

    @staticmethod
    def _type_doc(table: TableModel, role: str) -> List[str]:
        subject: str = table.comment or table.entity_type_name
        return javadoc(f"{subject} - {role}")

    @staticmethod
    def _require_primary_key(table: TableModel) -> JavaType:
        pk_type: Optional[JavaType] = table.primary_key_type
        if pk_type is None:
            raise MalformedSchemaError(
                table.source_name,
                "no primary key; by-id operations cannot be typed.",
            )
        return pk_type

    # ===================================================================
    # 1. Entity
    # ===================================================================

    def generate_entity(self, table: TableModel) -> GeneratedArtifact:
        """One private member per column, typed through the type map."""
        lines: List[str] = [f"package {self._pkg(MODULE_DAO, 'entity')};", ""]

        type_imports: Set[str] = {
            c.java_type.import_name for c in table.columns if c.java_type.import_name
        }
        lines.append("import lombok.Data;")
        lines.append("")
        lines.append("import java.io.Serializable;")
        lines.extend(f"import {name};" for name in sorted(type_imports))
        lines.append("")

        if table.comment:
            lines.extend(javadoc(table.comment))
        lines.append("@Data")
        lines.append(f"public class {table.entity_type_name} implements Serializable {{")
        lines.append("")
        lines.append(f"{_INDENT}private static final long serialVersionUID = 1L;")

        for col in table.columns:
            lines.append("")
            if col.comment:
                lines.extend(javadoc(col.comment, indent_level=1))
            lines.append(
                f"{_INDENT}private {col.java_type.simple_name} {col.target_member_name};"
            )

        lines.append("}")
        return self._artifact(ArtifactKind.ENTITY, table, lines)

    # ===================================================================
    # 2. Mapper interface
    # ===================================================================

    def generate_mapper_interface(self, table: TableModel) -> GeneratedArtifact:
        pk: str = self._require_primary_key(table).simple_name
        e: str = table.entity_type_name

        lines: List[str] = [
            f"package {self._pkg(MODULE_DAO, 'mapper')};",
            "",
            f"import {self.entity_fqn(table)};",
            "import org.apache.ibatis.annotations.Mapper;",
            "import org.apache.ibatis.annotations.Param;",
            "",
            "import java.util.List;",
            "",
        ]
        lines.extend(self._type_doc(table, "data access interface"))
        lines.append("@Mapper")
        lines.append(f"public interface {e}Mapper {{")
        lines.append("")

        operations: List[Tuple[str, str]] = [
            (
                "Insert a record, writing only the non-null members.\n"
                "@param record entity\n@return affected rows",
                f"int insertSelective({e} record);",
            ),
            (
                "Delete a record by primary key.\n@param id primary key\n@return affected rows",
                f'int deleteById(@Param("{ID_PARAM}") {pk} id);',
            ),
            (
                "Update the non-null members of a record by primary key.\n"
                "@param record entity\n@return affected rows",
                f"int updateByIdSelective({e} record);",
            ),
            (
                "Find a record by primary key.\n@param id primary key\n@return entity, or null",
                f'{e} findById(@Param("{ID_PARAM}") {pk} id);',
            ),
            (
                "List records, newest primary key first.\n"
                "@param offset zero-based row offset\n@param limit  maximum rows\n"
                "@return entities",
                f'List<{e}> findList(@Param("{OFFSET_PARAM}") int offset, '
                f'@Param("{LIMIT_PARAM}") int limit);',
            ),
        ]
        for doc, signature in operations:
            lines.extend(javadoc(doc, indent_level=1))
            lines.append(f"{_INDENT}{signature}")
            lines.append("")

        lines.append("}")
        return self._artifact(ArtifactKind.ACCESS_INTERFACE, table, lines)

    # ===================================================================
    # 3. Mapper XML
    # ===================================================================

    def build_query_mapping(self, table: TableModel) -> QueryMapping:
        return QueryMapping.from_table(
            table,
            namespace=self.mapper_fqn(table),
            entity_class=self.entity_fqn(table),
        )

    def generate_mapper_xml(self, table: TableModel) -> GeneratedArtifact:
        mapping: QueryMapping = self.build_query_mapping(table)
        return GeneratedArtifact(
            kind=ArtifactKind.QUERY_MAPPING,
            relative_path=self.artifact_path(ArtifactKind.QUERY_MAPPING, table),
            content=mapping.to_xml(),
            table_name=table.source_name,
        )

    # ===================================================================
    # 4-5. Service interface and implementation
    # ===================================================================

    def generate_service_interface(self, table: TableModel) -> GeneratedArtifact:
        pk: str = self._require_primary_key(table).simple_name
        e: str = table.entity_type_name

        lines: List[str] = [
            f"package {self._pkg(MODULE_SERVICE)};",
            "",
            f"import {self.entity_fqn(table)};",
            "",
            "import java.util.List;",
            "",
        ]
        lines.extend(self._type_doc(table, "service interface"))
        lines.append(f"public interface {e}Service {{")
        lines.append("")
        lines.append(f"{_INDENT}boolean create({e} record);")
        lines.append("")
        lines.append(f"{_INDENT}boolean removeById({pk} id);")
        lines.append("")
        lines.append(f"{_INDENT}boolean updateById({e} record);")
        lines.append("")
        lines.append(f"{_INDENT}{e} getById({pk} id);")
        lines.append("")
        lines.extend(
            javadoc(
                "@param pageNum  1-based page number\n@param pageSize rows per page",
                indent_level=1,
            )
        )
        lines.append(f"{_INDENT}List<{e}> getList(int pageNum, int pageSize);")
        lines.append("")
        lines.append("}")
        return self._artifact(ArtifactKind.SERVICE_INTERFACE, table, lines)

    def generate_service_impl(self, table: TableModel) -> GeneratedArtifact:
        pk: str = self._require_primary_key(table).simple_name
        e: str = table.entity_type_name
        mapper: str = f"{table.instance_name}Mapper"

        lines: List[str] = [
            f"package {self._pkg(MODULE_SERVICE, 'impl')};",
            "",
            f"import {self.entity_fqn(table)};",
            f"import {self.mapper_fqn(table)};",
            f"import {self.service_fqn(table)};",
            "import org.springframework.beans.factory.annotation.Autowired;",
            "import org.springframework.stereotype.Service;",
            "",
            "import java.util.List;",
            "",
        ]
        lines.extend(self._type_doc(table, "service implementation"))
        lines.append("@Service")
        lines.append(f"public class {e}ServiceImpl implements {e}Service {{")
        lines.append("")
        lines.append(f"{_INDENT}@Autowired")
        lines.append(f"{_INDENT}private {e}Mapper {mapper};")

        methods: List[Tuple[str, str]] = [
            (f"public boolean create({e} record)", f"return {mapper}.insertSelective(record) > 0;"),
            (f"public boolean removeById({pk} id)", f"return {mapper}.deleteById(id) > 0;"),
            (
                f"public boolean updateById({e} record)",
                f"return {mapper}.updateByIdSelective(record) > 0;",
            ),
            (f"public {e} getById({pk} id)", f"return {mapper}.findById(id);"),
        ]
        for signature, body in methods:
            lines.append("")
            lines.append(f"{_INDENT}@Override")
            lines.append(f"{_INDENT}{signature} {{")
            lines.append(f"{_DOUBLE_INDENT}{body}")
            lines.append(f"{_INDENT}}}")

        # Unchecked: pageNum < 1 gives a negative offset; the controller guards it
        lines.append("")
        lines.append(f"{_INDENT}@Override")
        lines.append(f"{_INDENT}public List<{e}> getList(int pageNum, int pageSize) {{")
        lines.append(f"{_DOUBLE_INDENT}int offset = (pageNum - 1) * pageSize;")
        lines.append(f"{_DOUBLE_INDENT}return {mapper}.findList(offset, pageSize);")
        lines.append(f"{_INDENT}}}")
        lines.append("}")
        return self._artifact(ArtifactKind.SERVICE_IMPL, table, lines)

    # ===================================================================
    # 6. REST controller
    # ===================================================================

    def request_mapping(self, table: TableModel) -> str:
        return f"{self._config.api_prefix}/{table.route_path}"

    def generate_controller(self, table: TableModel) -> GeneratedArtifact:
        pk: str = self._require_primary_key(table).simple_name
        e: str = table.entity_type_name
        service: str = f"{table.instance_name}Service"
        page_size: int = self._config.default_page_size

        lines: List[str] = [
            f"package {self._pkg(MODULE_WEB, 'controller')};",
            "",
            f"import {self._pkg(MODULE_COMMON, RESULT_CLASS)};",
            f"import {self.entity_fqn(table)};",
            f"import {self.service_fqn(table)};",
            "import org.springframework.beans.factory.annotation.Autowired;",
            "import org.springframework.web.bind.annotation.*;",
            "",
            "import java.util.List;",
            "",
        ]
        lines.extend(self._type_doc(table, "REST API"))
        lines.append("@RestController")
        lines.append(f'@RequestMapping("{self.request_mapping(table)}")')
        lines.append(f"public class {e}Controller {{")
        lines.append("")
        lines.append(f"{_INDENT}@Autowired")
        lines.append(f"{_INDENT}private {e}Service {service};")
        lines.append("")

        lines.append(f"{_INDENT}@PostMapping")
        lines.append(f"{_INDENT}public Result<Boolean> create(@RequestBody {e} record) {{")
        lines.append(f"{_DOUBLE_INDENT}return Result.success({service}.create(record));")
        lines.append(f"{_INDENT}}}")
        lines.append("")

        lines.append(f'{_INDENT}@DeleteMapping("/{{id}}")')
        lines.append(f'{_INDENT}public Result<Boolean> delete(@PathVariable("id") {pk} id) {{')
        lines.append(f"{_DOUBLE_INDENT}return Result.success({service}.removeById(id));")
        lines.append(f"{_INDENT}}}")
        lines.append("")

        lines.append(f"{_INDENT}@PutMapping")
        lines.append(f"{_INDENT}public Result<Boolean> update(@RequestBody {e} record) {{")
        lines.append(f"{_DOUBLE_INDENT}return Result.success({service}.updateById(record));")
        lines.append(f"{_INDENT}}}")
        lines.append("")

        lines.append(f'{_INDENT}@GetMapping("/{{id}}")')
        lines.append(f'{_INDENT}public Result<{e}> getById(@PathVariable("id") {pk} id) {{')
        lines.append(f"{_DOUBLE_INDENT}{e} entity = {service}.getById(id);")
        lines.append(f"{_DOUBLE_INDENT}return Result.success(entity);")
        lines.append(f"{_INDENT}}}")
        lines.append("")

        lines.append(f'{_INDENT}@GetMapping("/list")')
        lines.append(
            f'{_INDENT}public Result<List<{e}>> getList('
            f'@RequestParam(defaultValue = "1") int pageNum,'
        )
        lines.append(
            f'{_INDENT}{" " * len(f"public Result<List<{e}>> getList(")}'
            f'@RequestParam(defaultValue = "{page_size}") int pageSize) {{'
        )
        lines.append(f"{_DOUBLE_INDENT}if (pageNum < 1) {{")
        lines.append(
            f'{_DOUBLE_INDENT}{_INDENT}return Result.error(400, "pageNum must be >= 1");'
        )
        lines.append(f"{_DOUBLE_INDENT}}}")
        lines.append(f"{_DOUBLE_INDENT}if (pageSize <= 0) {{")
        lines.append(
            f'{_DOUBLE_INDENT}{_INDENT}return Result.error(400, "pageSize must be > 0");'
        )
        lines.append(f"{_DOUBLE_INDENT}}}")
        lines.append(f"{_DOUBLE_INDENT}List<{e}> list = {service}.getList(pageNum, pageSize);")
        lines.append(f"{_DOUBLE_INDENT}return Result.success(list);")
        lines.append(f"{_INDENT}}}")
        lines.append("}")
        return self._artifact(ArtifactKind.API_CONTROLLER, table, lines)

    # ===================================================================
    # Aggregate: all artifacts for one table
    # ===================================================================

    def render_table(self, table: TableModel) -> Tuple[GeneratedArtifact, ...]:
        """
        Render the six artifacts of one table, in a fixed order.

        Raises:
            MalformedSchemaError: If the table has no primary key.
        """
        self._require_primary_key(table)
        artifacts: Tuple[GeneratedArtifact, ...] = (
            self.generate_entity(table),
            self.generate_mapper_interface(table),
            self.generate_mapper_xml(table),
            self.generate_service_interface(table),
            self.generate_service_impl(table),
            self.generate_controller(table),
        )
        logger.debug(
            "Rendered table '%s': %d artifacts, %d lines.",
            table.source_name,
            len(artifacts),
            sum(a.line_count for a in artifacts),
        )
        return artifacts

    # ===================================================================
    # Project scaffolding (once per run)
    # ===================================================================

    def _project_artifact(self, relative_path: str, lines: List[str]) -> GeneratedArtifact:
        return GeneratedArtifact(
            kind=ArtifactKind.PROJECT_FILE,
            relative_path=relative_path,
            content=join_lines(lines),
        )

    def generate_parent_pom(self) -> GeneratedArtifact:
        cfg: GenerationConfig = self._config
        group: str = cfg.group_id
        lines: List[str] = list(_POM_HEADER)
        lines.append("")
        lines.append(f"{_INDENT}<groupId>{group}</groupId>")
        lines.append(f"{_INDENT}<artifactId>{cfg.artifact_id}</artifactId>")
        lines.append(f"{_INDENT}<version>{xml_escape(cfg.version)}</version>")
        lines.append(f"{_INDENT}<packaging>pom</packaging>")
        lines.append("")
        lines.append(f"{_INDENT}<modules>")
        lines.extend(f"{_DOUBLE_INDENT}<module>{m}</module>" for m in MODULES)
        lines.append(f"{_INDENT}</modules>")
        lines.append("")
        lines.append(f"{_INDENT}<properties>")
        for key, value in (
            ("java.version", JAVA_VERSION),
            ("maven.compiler.source", JAVA_VERSION),
            ("maven.compiler.target", JAVA_VERSION),
            ("project.build.sourceEncoding", "UTF-8"),
            ("spring.boot.version", SPRING_BOOT_VERSION),
            ("mybatis.spring.boot.version", MYBATIS_SPRING_BOOT_VERSION),
            ("mysql.connector.version", MYSQL_CONNECTOR_VERSION),
            ("druid.version", DRUID_VERSION),
            ("lombok.version", LOMBOK_VERSION),
        ):
            lines.append(f"{_DOUBLE_INDENT}<{key}>{value}</{key}>")
        lines.append(f"{_INDENT}</properties>")
        lines.append("")

        lines.append(f"{_INDENT}<dependencyManagement>")
        lines.append(f"{_DOUBLE_INDENT}<dependencies>")
        boot_bom: List[str] = _dependency(
            "org.springframework.boot",
            "spring-boot-dependencies",
            "${spring.boot.version}",
            "import",
            indent_level=3,
        )
        boot_bom.insert(-2, f"{_INDENT * 4}<type>pom</type>")
        lines.extend(boot_bom)
        for module in (MODULE_COMMON, MODULE_DAO, MODULE_SERVICE):
            lines.extend(
                _dependency(
                    group,
                    cfg.module_artifact_id(module),
                    "${project.version}",
                    indent_level=3,
                )
            )
        lines.append(f"{_DOUBLE_INDENT}</dependencies>")
        lines.append(f"{_INDENT}</dependencyManagement>")
        lines.append("")

        lines.append(f"{_INDENT}<dependencies>")
        lines.extend(
            _dependency("org.projectlombok", "lombok", "${lombok.version}", "provided")
        )
        lines.append(f"{_INDENT}</dependencies>")
        lines.append("")

        lines.append(f"{_INDENT}<build>")
        lines.append(f"{_DOUBLE_INDENT}<pluginManagement>")
        lines.append(f"{_DOUBLE_INDENT}{_INDENT}<plugins>")
        lines.append(f"{_DOUBLE_INDENT}{_DOUBLE_INDENT}<plugin>")
        lines.append(f"{_INDENT * 5}<groupId>org.springframework.boot</groupId>")
        lines.append(f"{_INDENT * 5}<artifactId>spring-boot-maven-plugin</artifactId>")
        lines.append(f"{_INDENT * 5}<version>${{spring.boot.version}}</version>")
        lines.append(f"{_DOUBLE_INDENT}{_DOUBLE_INDENT}</plugin>")
        lines.append(f"{_DOUBLE_INDENT}{_INDENT}</plugins>")
        lines.append(f"{_DOUBLE_INDENT}</pluginManagement>")
        lines.append(f"{_INDENT}</build>")
        lines.append("</project>")
        return self._project_artifact("pom.xml", lines)

    def generate_module_pom(self, module: str) -> GeneratedArtifact:
        cfg: GenerationConfig = self._config
        group: str = cfg.group_id
        lines: List[str] = list(_POM_HEADER)
        lines.append("")
        lines.append(f"{_INDENT}<parent>")
        lines.append(f"{_DOUBLE_INDENT}<groupId>{group}</groupId>")
        lines.append(f"{_DOUBLE_INDENT}<artifactId>{cfg.artifact_id}</artifactId>")
        lines.append(f"{_DOUBLE_INDENT}<version>{xml_escape(cfg.version)}</version>")
        lines.append(f"{_INDENT}</parent>")
        lines.append(f"{_INDENT}<artifactId>{cfg.module_artifact_id(module)}</artifactId>")
        lines.append("")

        deps: List[List[str]] = []
        if module == MODULE_DAO:
            deps = [
                _dependency(group, cfg.module_artifact_id(MODULE_COMMON)),
                _dependency(
                    "org.mybatis.spring.boot",
                    "mybatis-spring-boot-starter",
                    "${mybatis.spring.boot.version}",
                ),
                _dependency("mysql", "mysql-connector-java", "${mysql.connector.version}"),
                _dependency("com.alibaba", "druid-spring-boot-starter", "${druid.version}"),
            ]
        elif module == MODULE_SERVICE:
            deps = [
                _dependency(group, cfg.module_artifact_id(MODULE_DAO)),
                _dependency("org.springframework.boot", "spring-boot-starter"),
            ]
        elif module == MODULE_WEB:
            deps = [
                _dependency(group, cfg.module_artifact_id(MODULE_SERVICE)),
                _dependency("org.springframework.boot", "spring-boot-starter-web"),
                _dependency(
                    "org.springframework.boot", "spring-boot-starter-test", scope="test"
                ),
            ]

        lines.append(f"{_INDENT}<dependencies>")
        for dep in deps:
            lines.extend(dep)
        lines.append(f"{_INDENT}</dependencies>")

        if module == MODULE_WEB:
            lines.append("")
            lines.append(f"{_INDENT}<build>")
            lines.append(f"{_DOUBLE_INDENT}<plugins>")
            lines.append(f"{_DOUBLE_INDENT}{_INDENT}<plugin>")
            lines.append(f"{_DOUBLE_INDENT}{_DOUBLE_INDENT}<groupId>org.springframework.boot</groupId>")
            lines.append(
                f"{_DOUBLE_INDENT}{_DOUBLE_INDENT}<artifactId>spring-boot-maven-plugin</artifactId>"
            )
            lines.append(f"{_DOUBLE_INDENT}{_INDENT}</plugin>")
            lines.append(f"{_DOUBLE_INDENT}</plugins>")
            lines.append(f"{_INDENT}</build>")
        lines.append("</project>")
        return self._project_artifact(f"{module}/pom.xml", lines)

    def generate_result_class(self) -> GeneratedArtifact:
        """The ``Result<T>`` response envelope shared by every controller."""
        lines: List[str] = [
            f"package {self._pkg(MODULE_COMMON)};",
            "",
            "import lombok.Data;",
            "",
            "import java.io.Serializable;",
            "",
        ]
        lines.extend(javadoc("Uniform API response envelope: code, message and payload."))
        lines.extend(
            [
                "@Data",
                f"public class {RESULT_CLASS}<T> implements Serializable {{",
                "",
                f"{_INDENT}private static final long serialVersionUID = 1L;",
                "",
                f"{_INDENT}private int code;",
                f"{_INDENT}private String message;",
                f"{_INDENT}private T data;",
                "",
                f"{_INDENT}private {RESULT_CLASS}(int code, String message, T data) {{",
                f"{_DOUBLE_INDENT}this.code = code;",
                f"{_DOUBLE_INDENT}this.message = message;",
                f"{_DOUBLE_INDENT}this.data = data;",
                f"{_INDENT}}}",
                "",
                f"{_INDENT}public static <T> {RESULT_CLASS}<T> success(T data) {{",
                f'{_DOUBLE_INDENT}return new {RESULT_CLASS}<>(200, "Success", data);',
                f"{_INDENT}}}",
                "",
                f"{_INDENT}public static {RESULT_CLASS}<Void> success() {{",
                f'{_DOUBLE_INDENT}return new {RESULT_CLASS}<>(200, "Success", null);',
                f"{_INDENT}}}",
                "",
                f"{_INDENT}public static <T> {RESULT_CLASS}<T> error(int code, String message) {{",
                f"{_DOUBLE_INDENT}return new {RESULT_CLASS}<>(code, message, null);",
                f"{_INDENT}}}",
                "}",
            ]
        )
        path: str = self._java_path(MODULE_COMMON, (MODULE_COMMON,), RESULT_CLASS)
        return self._project_artifact(path, lines)

    def generate_application_class(self) -> GeneratedArtifact:
        app: str = self._config.application_class_name
        lines: List[str] = [
            f"package {self._pkg(MODULE_WEB)};",
            "",
            "import org.mybatis.spring.annotation.MapperScan;",
            "import org.springframework.boot.SpringApplication;",
            "import org.springframework.boot.autoconfigure.SpringBootApplication;",
            "",
            f'@SpringBootApplication(scanBasePackages = "{self._package}")',
            f'@MapperScan("{self._pkg(MODULE_DAO, "mapper")}")',
            f"public class {app} {{",
            "",
            f"{_INDENT}public static void main(String[] args) {{",
            f"{_DOUBLE_INDENT}SpringApplication.run({app}.class, args);",
            f"{_INDENT}}}",
            "}",
        ]
        path: str = self._java_path(MODULE_WEB, (MODULE_WEB,), app)
        return self._project_artifact(path, lines)

    def application_settings(self) -> Dict[str, Any]:
        """The ``application.yml`` content as a plain mapping."""
        cfg: GenerationConfig = self._config
        return {
            "server": {"port": SERVER_PORT},
            "spring": {
                "application": {"name": cfg.artifact_id},
                "datasource": {
                    "type": "com.alibaba.druid.pool.DruidDataSource",
                    "driver-class-name": cfg.database_driver,
                    "url": cfg.jdbc_url or "",
                    "username": cfg.database_user or "",
                    "password": cfg.database_password or "",
                },
            },
            "mybatis": {
                "mapper-locations": "classpath:mapper/*.xml",
                "configuration": {"map-underscore-to-camel-case": True},
            },
            "logging": {
                "level": {self._package: "debug", "org.springframework": "warn"},
            },
        }

    def generate_application_yml(self) -> GeneratedArtifact:
        content: str = yaml.safe_dump(
            self.application_settings(),
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
        )
        return GeneratedArtifact(
            kind=ArtifactKind.PROJECT_FILE,
            relative_path=f"{MODULE_WEB}/src/main/resources/application.yml",
            content=content,
        )

    def generate_project_files(self) -> Tuple[GeneratedArtifact, ...]:
        """Parent pom, four module poms, Result, application class and yml."""
        artifacts: List[GeneratedArtifact] = [self.generate_parent_pom()]
        artifacts.extend(self.generate_module_pom(m) for m in MODULES)
        artifacts.append(self.generate_result_class())
        artifacts.append(self.generate_application_class())
        artifacts.append(self.generate_application_yml())
        logger.debug("Rendered %d project files.", len(artifacts))
        return tuple(artifacts)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "RESULT_CLASS",
    "SERVER_PORT",
    "JAVA_VERSION",
    "SPRING_BOOT_VERSION",
    "MYBATIS_SPRING_BOOT_VERSION",
    "MYSQL_CONNECTOR_VERSION",
    "DRUID_VERSION",
    "LOMBOK_VERSION",
    "TemplateGenerator",
]

logger.debug("layergen.templates loaded — %d public symbols.", len(__all__))
