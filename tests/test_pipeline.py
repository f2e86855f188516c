import logging
import re

import pytest

from entity_metadata.config import GenerationConfig, JavaLanguageLevel
from entity_metadata.errors import (
    ConfigurationError,
    GeneratorResolutionError,
    MetadataGenerationError,
    ScanError,
)
from entity_metadata.pipeline import generate_metadata, scan_entities

CONSTANT = re.compile(r"public static final Column (\w+) =")


def _config(project_dir, tmp_path, package, **overrides):
    options = dict(
        base_dir=project_dir,
        package_name=package,
        output_directory=tmp_path / "generated",
        language_level=JavaLanguageLevel.JAVA_21,
    )
    options.update(overrides)
    return GenerationConfig.from_options(**options)


def _constants(path):
    return CONSTANT.findall(path.read_text(encoding="utf-8"))


def test_generates_simple_entity(project_dir, tmp_path):
    result = generate_metadata(_config(project_dir, tmp_path, "com.example.entities"))

    out = tmp_path / "generated" / "com" / "example" / "entities"
    assert _constants(out / "MyEntity_.java") == ["ID", "NAME"]
    assert _constants(out / "RecordEntity_.java") == ["ID", "NAME"]
    assert _constants(out / "EntityWithCollection_.java") == ["ID"]
    assert result.output_directory.is_absolute()
    # holder plus one file per entity
    assert len(result.generated_files) == 4


def test_generates_nested_entities(project_dir, tmp_path):
    generate_metadata(_config(project_dir, tmp_path, "com/example/nested"))

    out = tmp_path / "generated" / "com" / "example" / "nested"
    assert _constants(out / "EntityWithNestedClass_.java") == ["ID", "VALUE"]
    assert _constants(out / "EntityWithNestedRecord_.java") == ["KEY", "FIELD"]
    assert not (out / "Nested_.java").exists()


def test_generates_inherited_fields(project_dir, tmp_path):
    result = generate_metadata(_config(project_dir, tmp_path, "com.example.inherited"))

    out = tmp_path / "generated" / "com" / "example" / "inherited"
    assert _constants(out / "SubEntity_.java") == ["SUB_FIELD", "MIDDLE_FIELD", "ID"]
    assert not (out / "BaseEntity_.java").exists()

    complex_text = (out / "ComplexStructure_.java").read_text(encoding="utf-8")
    assert CONSTANT.findall(complex_text) == ["TOP_LEVEL", "LEVEL1_FIELD", "LEVEL2_FIELD", "RECORD_FIELD"]
    assert "public static final class NestedLevel2_ {" in complex_text
    assert "getTable(ComplexStructure.NestedLevel1.NestedLevel2.class)" in complex_text
    assert result.graph.format_hierarchy() == (
        "• ComplexStructure\n"
        "  ↳ NestedLevel1\n"
        "    ↳ NestedLevel2\n"
        "  ↳ EmbeddedRecord\n"
        "• SubEntity"
    )


def test_generates_readme_example(project_dir, tmp_path):
    generate_metadata(_config(project_dir, tmp_path, "com.example.readme"))

    out = tmp_path / "generated" / "com" / "example" / "readme"
    assert _constants(out / "User_.java") == ["ID", "NAME"]
    assert _constants(out / "UserAttribute_.java") == ["ATTRIBUTE_ID", "USER_ID", "VALUE"]


def test_java_11_drops_records(project_dir, tmp_path):
    result = generate_metadata(
        _config(project_dir, tmp_path, "com.example.entities", language_level="JAVA_11")
    )

    assert sorted(n.name for n in result.graph.nodes()) == ["EntityWithCollection", "MyEntity"]


def test_scan_only(project_dir, tmp_path):
    scan = scan_entities(_config(project_dir, tmp_path, "com.example.inherited"))

    sub = scan.graph.find("com.example.inherited.SubEntity")
    assert scan.fields_of(sub) == ["subField", "middleField", "id"]
    assert not (tmp_path / "generated").exists()


def test_summary_is_logged(project_dir, tmp_path, caplog):
    with caplog.at_level(logging.INFO, logger="entity_metadata.pipeline"):
        generate_metadata(_config(project_dir, tmp_path, "com.example.nested"))

    assert "Generated metadata for 4 entity classes" in caplog.text
    assert "• EntityWithNestedClass" in caplog.text


def test_missing_package_fails_the_run(project_dir, tmp_path):
    with pytest.raises(MetadataGenerationError, match="Error generating metadata") as excinfo:
        generate_metadata(_config(project_dir, tmp_path, "com.example.nothing"))

    assert isinstance(excinfo.value.__cause__, ScanError)


def test_unknown_generator_fails_the_run(project_dir, tmp_path):
    with pytest.raises(MetadataGenerationError) as excinfo:
        generate_metadata(_config(project_dir, tmp_path, "com.example.entities", generator="jpa"))

    assert isinstance(excinfo.value.__cause__, GeneratorResolutionError)
    assert not (tmp_path / "generated").exists()


def test_invalid_settings():
    with pytest.raises(ConfigurationError, match="language_level"):
        GenerationConfig.from_options(
            base_dir=".", package_name="p", output_directory="out", language_level="JAVA_5",
        )
    with pytest.raises(ConfigurationError, match="base_dir"):
        GenerationConfig.from_options(package_name="p", output_directory="out")


def test_package_name_is_normalized(tmp_path):
    config = GenerationConfig.from_options(
        base_dir=tmp_path, package_name="/com/example/model/", output_directory=tmp_path,
    )

    assert config.package_name == "com.example.model"
    assert config.source_root == tmp_path / "src" / "main" / "java"


def test_directories_are_required_settings(tmp_path):
    with pytest.raises(ConfigurationError, match="output_directory"):
        GenerationConfig.from_options(base_dir=tmp_path, package_name="p")
    with pytest.raises(ConfigurationError, match="base_dir"):
        GenerationConfig.from_options(base_dir=None, package_name="p", output_directory=tmp_path)
