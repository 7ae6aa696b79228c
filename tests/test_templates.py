"""
tests/test_templates.py
Tests for layergen.templates.TemplateGenerator: artifact content, paths,
cross-artifact consistency and determinism.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from typing import Dict, List

import pytest
import yaml

from layergen.exceptions import MalformedSchemaError
from layergen.models import ArtifactKind, GeneratedArtifact, GenerationConfig, TableModel
from layergen.templates import RESULT_CLASS, SPRING_BOOT_VERSION, TemplateGenerator


@pytest.fixture()
def renderer(config: GenerationConfig) -> TemplateGenerator:
    return TemplateGenerator(config)


@pytest.fixture()
def rendered(renderer: TemplateGenerator, user_table: TableModel) -> Dict[ArtifactKind, GeneratedArtifact]:
    return {a.kind: a for a in renderer.render_table(user_table)}


# ===========================================================================
# render_table
# ===========================================================================


class TestRenderTable:

    def test_six_artifacts_in_fixed_order(self, renderer: TemplateGenerator, user_table: TableModel) -> None:
        kinds = [a.kind for a in renderer.render_table(user_table)]
        assert kinds == [
            ArtifactKind.ENTITY,
            ArtifactKind.ACCESS_INTERFACE,
            ArtifactKind.QUERY_MAPPING,
            ArtifactKind.SERVICE_INTERFACE,
            ArtifactKind.SERVICE_IMPL,
            ArtifactKind.API_CONTROLLER,
        ]

    def test_paths(self, rendered: Dict[ArtifactKind, GeneratedArtifact]) -> None:
        base = "src/main/java/com/acme/shop"
        assert rendered[ArtifactKind.ENTITY].relative_path == f"dao/{base}/dao/entity/UserInfo.java"
        assert (
            rendered[ArtifactKind.ACCESS_INTERFACE].relative_path
            == f"dao/{base}/dao/mapper/UserInfoMapper.java"
        )
        assert (
            rendered[ArtifactKind.QUERY_MAPPING].relative_path
            == "dao/src/main/resources/mapper/UserInfoMapper.xml"
        )
        assert (
            rendered[ArtifactKind.SERVICE_INTERFACE].relative_path
            == f"service/{base}/service/UserInfoService.java"
        )
        assert (
            rendered[ArtifactKind.SERVICE_IMPL].relative_path
            == f"service/{base}/service/impl/UserInfoServiceImpl.java"
        )
        assert (
            rendered[ArtifactKind.API_CONTROLLER].relative_path
            == f"web/{base}/web/controller/UserInfoController.java"
        )

    def test_artifacts_carry_table_name(self, rendered: Dict[ArtifactKind, GeneratedArtifact]) -> None:
        assert {a.table_name for a in rendered.values()} == {"user_info"}

    def test_deterministic(self, config: GenerationConfig, user_table: TableModel) -> None:
        first = TemplateGenerator(config).render_table(user_table)
        second = TemplateGenerator(config).render_table(user_table)
        assert [a.content for a in first] == [a.content for a in second]
        assert [a.sha256 for a in first] == [a.sha256 for a in second]

    def test_key_less_table_rejected(self, renderer: TemplateGenerator, keyless_table: TableModel) -> None:
        with pytest.raises(MalformedSchemaError, match="audit_log"):
            renderer.render_table(keyless_table)

    def test_artifact_path_rejects_project_file_kind(
        self, renderer: TemplateGenerator, user_table: TableModel
    ) -> None:
        with pytest.raises(ValueError):
            renderer.artifact_path(ArtifactKind.PROJECT_FILE, user_table)

    def test_package_override(self, user_table: TableModel) -> None:
        cfg = GenerationConfig(group_id="com.acme", artifact_id="shop", package_name="org.demo")
        entity = TemplateGenerator(cfg).generate_entity(user_table)
        assert entity.relative_path == "dao/src/main/java/org/demo/dao/entity/UserInfo.java"
        assert entity.content.startswith("package org.demo.dao.entity;")


# ===========================================================================
# Individual artifacts
# ===========================================================================


class TestEntity:

    def test_members(self, rendered: Dict[ArtifactKind, GeneratedArtifact]) -> None:
        content = rendered[ArtifactKind.ENTITY].content
        members = re.findall(r"^    private (\w+) (\w+);$", content, flags=re.MULTILINE)
        assert members == [("Long", "id"), ("String", "userName"), ("LocalDateTime", "createdAt")]

    def test_imports_and_annotations(self, rendered: Dict[ArtifactKind, GeneratedArtifact]) -> None:
        content = rendered[ArtifactKind.ENTITY].content
        assert "import java.time.LocalDateTime;" in content
        assert "import lombok.Data;" in content
        assert "@Data" in content
        assert "public class UserInfo implements Serializable {" in content

    def test_comments_verbatim(self, rendered: Dict[ArtifactKind, GeneratedArtifact]) -> None:
        content = rendered[ArtifactKind.ENTITY].content
        assert " * Registered users" in content
        assert "     * Login name" in content

    def test_degenerate_zero_column_entity(self, renderer: TemplateGenerator) -> None:
        entity = renderer.generate_entity(TableModel(source_name="empty_table"))
        assert "public class EmptyTable implements Serializable {" in entity.content
        assert "private static final long serialVersionUID" in entity.content


class TestMapperInterface:

    def test_signatures(self, rendered: Dict[ArtifactKind, GeneratedArtifact]) -> None:
        content = rendered[ArtifactKind.ACCESS_INTERFACE].content
        assert "@Mapper" in content
        assert "public interface UserInfoMapper {" in content
        assert "int insertSelective(UserInfo record);" in content
        assert 'int deleteById(@Param("id") Long id);' in content
        assert "int updateByIdSelective(UserInfo record);" in content
        assert 'UserInfo findById(@Param("id") Long id);' in content
        assert (
            'List<UserInfo> findList(@Param("offset") int offset, @Param("limit") int limit);'
            in content
        )

    def test_string_key(self, renderer: TemplateGenerator, string_key_table: TableModel) -> None:
        content = renderer.generate_mapper_interface(string_key_table).content
        assert 'int deleteById(@Param("id") String id);' in content
        assert 'Product findById(@Param("id") String id);' in content


class TestMapperXml:

    def test_namespace_and_types(self, rendered: Dict[ArtifactKind, GeneratedArtifact]) -> None:
        body = rendered[ArtifactKind.QUERY_MAPPING].content.split("\n", 2)[2]
        root = ET.fromstring(body)
        assert root.get("namespace") == "com.acme.shop.dao.mapper.UserInfoMapper"
        result_map = root.find("resultMap")
        assert result_map is not None
        assert result_map.get("type") == "com.acme.shop.dao.entity.UserInfo"
        assert [s.get("id") for s in root if s.tag in ("insert", "delete", "update", "select")] == [
            "insertSelective",
            "deleteById",
            "updateByIdSelective",
            "findById",
            "findList",
        ]

    def test_find_list_order(self, rendered: Dict[ArtifactKind, GeneratedArtifact]) -> None:
        assert "ORDER BY id DESC LIMIT #{offset}, #{limit}" in rendered[ArtifactKind.QUERY_MAPPING].content


class TestService:

    def test_interface(self, rendered: Dict[ArtifactKind, GeneratedArtifact]) -> None:
        content = rendered[ArtifactKind.SERVICE_INTERFACE].content
        assert "public interface UserInfoService {" in content
        assert "boolean create(UserInfo record);" in content
        assert "boolean removeById(Long id);" in content
        assert "boolean updateById(UserInfo record);" in content
        assert "UserInfo getById(Long id);" in content
        assert "List<UserInfo> getList(int pageNum, int pageSize);" in content

    def test_impl_delegates_to_mapper(self, rendered: Dict[ArtifactKind, GeneratedArtifact]) -> None:
        content = rendered[ArtifactKind.SERVICE_IMPL].content
        assert "public class UserInfoServiceImpl implements UserInfoService {" in content
        assert "private UserInfoMapper userInfoMapper;" in content
        assert "return userInfoMapper.insertSelective(record) > 0;" in content
        assert "return userInfoMapper.deleteById(id) > 0;" in content
        assert "return userInfoMapper.updateByIdSelective(record) > 0;" in content
        assert "return userInfoMapper.findById(id);" in content
        assert "int offset = (pageNum - 1) * pageSize;" in content
        assert "return userInfoMapper.findList(offset, pageSize);" in content
        assert "import com.acme.shop.dao.mapper.UserInfoMapper;" in content
        assert "import com.acme.shop.service.UserInfoService;" in content


class TestController:

    def test_routes(self, rendered: Dict[ArtifactKind, GeneratedArtifact]) -> None:
        content = rendered[ArtifactKind.API_CONTROLLER].content
        assert '@RequestMapping("/api/user-info")' in content
        assert "@PostMapping" in content
        assert "@PutMapping" in content
        assert '@DeleteMapping("/{id}")' in content
        assert '@GetMapping("/{id}")' in content
        assert '@GetMapping("/list")' in content

    def test_typed_against_entity_and_key(self, rendered: Dict[ArtifactKind, GeneratedArtifact]) -> None:
        content = rendered[ArtifactKind.API_CONTROLLER].content
        assert 'public Result<Boolean> delete(@PathVariable("id") Long id) {' in content
        assert 'public Result<UserInfo> getById(@PathVariable("id") Long id) {' in content
        assert "public Result<Boolean> create(@RequestBody UserInfo record) {" in content
        assert "private UserInfoService userInfoService;" in content

    def test_paging_defaults_and_guards(self, rendered: Dict[ArtifactKind, GeneratedArtifact]) -> None:
        content = rendered[ArtifactKind.API_CONTROLLER].content
        assert '@RequestParam(defaultValue = "1") int pageNum' in content
        assert '@RequestParam(defaultValue = "10") int pageSize' in content
        assert 'return Result.error(400, "pageNum must be >= 1");' in content
        assert 'return Result.error(400, "pageSize must be > 0");' in content
        guard = content.index("pageNum < 1")
        call = content.index("userInfoService.getList(pageNum, pageSize)")
        assert guard < call

    def test_custom_prefix_and_page_size(self, user_table: TableModel) -> None:
        cfg = GenerationConfig(
            group_id="com.acme", artifact_id="shop", api_prefix="/api/v1", default_page_size=25
        )
        content = TemplateGenerator(cfg).generate_controller(user_table).content
        assert '@RequestMapping("/api/v1/user-info")' in content
        assert '@RequestParam(defaultValue = "25") int pageSize' in content

    def test_imports_result_envelope(self, rendered: Dict[ArtifactKind, GeneratedArtifact]) -> None:
        assert f"import com.acme.shop.common.{RESULT_CLASS};" in rendered[ArtifactKind.API_CONTROLLER].content


# ===========================================================================
# Cross-artifact consistency
# ===========================================================================


class TestCrossConsistency:

    def test_key_type_everywhere(self, renderer: TemplateGenerator, string_key_table: TableModel) -> None:
        for artifact in renderer.render_table(string_key_table):
            if artifact.kind in (ArtifactKind.ENTITY, ArtifactKind.QUERY_MAPPING):
                continue
            assert "Long id" not in artifact.content
            assert "String id" in artifact.content, artifact.relative_path

    def test_two_tables_share_no_identifiers(
        self,
        renderer: TemplateGenerator,
        user_table: TableModel,
        string_key_table: TableModel,
    ) -> None:
        users = renderer.render_table(user_table)
        products = renderer.render_table(string_key_table)
        assert not {a.relative_path for a in users} & {a.relative_path for a in products}
        for artifact in products:
            assert "UserInfo" not in artifact.content
            assert "userInfo" not in artifact.content
        for artifact in users:
            assert "Product" not in artifact.content

    def test_order_independent(
        self,
        config: GenerationConfig,
        user_table: TableModel,
        string_key_table: TableModel,
    ) -> None:
        gen_a = TemplateGenerator(config)
        a_users = gen_a.render_table(user_table)
        gen_a.render_table(string_key_table)
        gen_b = TemplateGenerator(config)
        gen_b.render_table(string_key_table)
        b_users = gen_b.render_table(user_table)
        assert [a.content for a in a_users] == [b.content for b in b_users]


# ===========================================================================
# Project files
# ===========================================================================


class TestProjectFiles:

    def test_paths(self, renderer: TemplateGenerator) -> None:
        paths: List[str] = [a.relative_path for a in renderer.generate_project_files()]
        assert paths == [
            "pom.xml",
            "common/pom.xml",
            "dao/pom.xml",
            "service/pom.xml",
            "web/pom.xml",
            "common/src/main/java/com/acme/shop/common/Result.java",
            "web/src/main/java/com/acme/shop/web/ShopApplication.java",
            "web/src/main/resources/application.yml",
        ]

    def test_all_project_files_have_no_table(self, renderer: TemplateGenerator) -> None:
        for artifact in renderer.generate_project_files():
            assert artifact.kind is ArtifactKind.PROJECT_FILE
            assert artifact.table_name is None

    def test_poms_are_well_formed(self, renderer: TemplateGenerator) -> None:
        ns = "{http://maven.apache.org/POM/4.0.0}"
        parent = ET.fromstring(renderer.generate_parent_pom().content.split("\n", 1)[1])
        assert parent.findtext(f"{ns}artifactId") == "shop"
        assert parent.findtext(f"{ns}packaging") == "pom"
        modules = [m.text for m in parent.iter(f"{ns}module")]
        assert modules == ["common", "dao", "service", "web"]
        properties = parent.find(f"{ns}properties")
        assert properties is not None
        values = {child.tag[len(ns):]: child.text for child in properties}
        assert values["spring.boot.version"] == SPRING_BOOT_VERSION
        assert values["java.version"] == "1.8"

        dao = ET.fromstring(renderer.generate_module_pom("dao").content.split("\n", 1)[1])
        assert dao.findtext(f"{ns}artifactId") == "shop-dao"
        dep_ids = [d.findtext(f"{ns}artifactId") for d in dao.iter(f"{ns}dependency")]
        assert "shop-common" in dep_ids
        assert "mybatis-spring-boot-starter" in dep_ids

    def test_result_envelope(self, renderer: TemplateGenerator) -> None:
        content = renderer.generate_result_class().content
        assert "public class Result<T> implements Serializable {" in content
        assert 'return new Result<>(200, "Success", data);' in content
        assert "public static <T> Result<T> error(int code, String message) {" in content
        assert "return new Result<>(code, message, null);" in content

    def test_application_class(self, renderer: TemplateGenerator) -> None:
        content = renderer.generate_application_class().content
        assert '@MapperScan("com.acme.shop.dao.mapper")' in content
        assert "public class ShopApplication {" in content

    def test_application_yml(self, config: GenerationConfig) -> None:
        cfg = config.model_copy(
            update={"jdbc_url": "jdbc:mysql://db.local:3306/shop", "database_user": "app"}
        )
        data = yaml.safe_load(TemplateGenerator(cfg).generate_application_yml().content)
        datasource = data["spring"]["datasource"]
        assert datasource["url"] == "jdbc:mysql://db.local:3306/shop"
        assert datasource["username"] == "app"
        assert datasource["driver-class-name"] == "com.mysql.cj.jdbc.Driver"
        assert data["mybatis"]["mapper-locations"] == "classpath:mapper/*.xml"
        assert data["server"]["port"] == 8080
        assert list(data) == ["server", "spring", "mybatis", "logging"]
