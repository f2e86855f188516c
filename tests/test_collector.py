import logging

import pytest

from entity_metadata.config import JavaLanguageLevel
from entity_metadata.errors import ConfigurationError, ScanError
from entity_metadata.scanner.collector import MetadataCollector
from entity_metadata.scanner.file_finder import FileSystemJavaFileFinder


def _names(decls):
    return [d.name for d in decls]


def test_finds_entities_in_walk_order(source_root):
    collector = MetadataCollector(source_root)

    found = collector.extract_annotated_classes("com.example.entities")

    assert _names(found) == ["EntityWithCollection", "RecordEntity", "MyEntity"]


def test_slash_delimited_package(source_root):
    collector = MetadataCollector(source_root)

    assert _names(collector.extract_annotated_classes("com/example/entities/")) == [
        "EntityWithCollection", "RecordEntity", "MyEntity",
    ]


def test_java_8_skips_record_sources(source_root, caplog):
    collector = MetadataCollector(source_root, JavaLanguageLevel.JAVA_8)

    with caplog.at_level(logging.ERROR, logger="entity_metadata.scanner.collector"):
        found = collector.extract_annotated_classes("com.example.entities")

    assert _names(found) == ["EntityWithCollection", "MyEntity"]
    assert any("RecordEntity.java" in r.getMessage() for r in caplog.records)


def test_nested_entities_at_any_depth(source_root):
    collector = MetadataCollector(source_root, "JAVA_21")

    found = collector.extract_annotated_classes("com.example.inherited")

    assert _names(found) == [
        "ComplexStructure", "NestedLevel1", "NestedLevel2", "EmbeddedRecord", "SubEntity",
    ]


def test_column_fields_of_classes_and_records(source_root):
    collector = MetadataCollector(source_root)
    by_name = {d.name: d for d in collector.extract_annotated_classes("com.example.entities")}

    assert collector.collect_column_annotated_field_names(by_name["MyEntity"]) == ["id", "name"]
    assert collector.collect_column_annotated_field_names(by_name["RecordEntity"]) == ["id", "name"]
    # unmarked tags/codes are not columns
    assert collector.collect_column_annotated_field_names(by_name["EntityWithCollection"]) == ["id"]


def test_column_fields_are_own_members_only(source_root):
    collector = MetadataCollector(source_root)
    sub = collector.find_by_qualified_name("com.example.inherited.SubEntity")
    outer = collector.find_by_qualified_name("com.example.inherited.ComplexStructure")

    assert collector.collect_column_annotated_field_names(sub) == ["subField"]
    assert collector.collect_column_annotated_field_names(outer) == ["topLevel"]


def test_enum_has_no_column_fields(java_sources):
    root = java_sources({
        "p/Status.java": """
            package p;

            @Table("status")
            enum Status {
                A;
                @Column("code") private int code;
            }
        """,
    })
    collector = MetadataCollector(root)
    status = collector.extract_annotated_classes("p")[0]

    assert status.kind == "enum"
    assert collector.collect_column_annotated_field_names(status) == []


def test_custom_predicate_finds_unmarked_types(source_root):
    collector = MetadataCollector(source_root)

    found = collector.extract_classes("com.example.inherited", lambda t: not collector.is_entity(t))

    assert _names(found) == ["BaseEntity", "MiddleEntity"]


def test_lookup_by_name_scans_whole_root(source_root):
    collector = MetadataCollector(source_root)

    assert _names(collector.find_by_simple_name("BaseEntity")) == ["BaseEntity"]
    assert collector.find_by_qualified_name("com.example.entities.MyEntity").name == "MyEntity"
    assert collector.find_by_qualified_name("com.example.entities.Missing") is None


def test_malformed_file_is_skipped_with_warning(source_root, caplog):
    collector = MetadataCollector(source_root)

    with caplog.at_level(logging.WARNING, logger="entity_metadata.scanner.collector"):
        found = collector.extract_annotated_classes("com.example.broken")

    assert _names(found) == ["ValidEntity"]
    assert any("Garbage.java" in r.getMessage() for r in caplog.records)


def test_missing_package_directory_is_a_scan_error(source_root):
    collector = MetadataCollector(source_root)

    with pytest.raises(ScanError) as excinfo:
        collector.extract_annotated_classes("com.example.nope")

    assert excinfo.value.package_name == "com.example.nope"
    assert isinstance(excinfo.value.__cause__, OSError)


def test_empty_package_is_the_source_root(source_root):
    collector = MetadataCollector(source_root)

    assert collector.path_for_package("") == source_root
    assert collector.path_for_package("com.example") == source_root / "com" / "example"


def test_invalid_language_level():
    with pytest.raises(ConfigurationError, match="JAVA_8, JAVA_11, JAVA_17, JAVA_21"):
        MetadataCollector(".", "JAVA_5")


def test_file_finder_is_sorted_and_filters_extension(tmp_path):
    (tmp_path / "b").mkdir()
    (tmp_path / "b" / "Z.java").write_text("class Z {}")
    (tmp_path / "A.java").write_text("class A {}")
    (tmp_path / "notes.txt").write_text("x")

    found = list(FileSystemJavaFileFinder().find_java_files(tmp_path))

    assert [p.name for p in found] == ["A.java", "Z.java"]


def test_file_finder_fails_eagerly(tmp_path):
    with pytest.raises(FileNotFoundError):
        FileSystemJavaFileFinder().find_java_files(tmp_path / "missing")
