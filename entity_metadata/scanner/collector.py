"""Source model extractor.

Parses the Java sources below a package directory and answers "which
declarations match this predicate" and "which direct members carry the
column marker" questions about them.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from entity_metadata.cir.model import ClassDecl, CompilationUnit, RecordDecl, TypeDecl
from entity_metadata.config import (
    COLUMN_MARKER,
    DEFAULT_LANGUAGE_LEVEL,
    ENTITY_MARKER,
    JavaLanguageLevel,
    normalize_package,
)
from entity_metadata.errors import ScanError
from entity_metadata.registry import adapter_for, resolve_language_level
from entity_metadata.scanner.file_finder import FileSystemJavaFileFinder

logger = logging.getLogger(__name__)

TypePredicate = Callable[[TypeDecl], bool]


class MetadataCollector:
    """
    Finds entity declarations and their column-marked fields.

    The syntax level is fixed at construction; every scan re-reads and
    re-parses the files it needs.
    """

    def __init__(
        self,
        source_directory: Union[str, Path],
        language_level: Union[str, JavaLanguageLevel] = DEFAULT_LANGUAGE_LEVEL,
        java_file_finder: Optional[FileSystemJavaFileFinder] = None,
        entity_marker: str = ENTITY_MARKER,
        column_marker: str = COLUMN_MARKER,
    ):
        self.source_directory = Path(source_directory)
        self.language_level = resolve_language_level(language_level)
        self.java_file_finder = java_file_finder or FileSystemJavaFileFinder()
        self.entity_marker = entity_marker
        self.column_marker = column_marker
        self._adapter = adapter_for(self.language_level)

    # ---------------- Scanning ----------------

    def extract_annotated_classes(self, package_name: str) -> List[TypeDecl]:
        logger.debug(
            "Collecting entities in package '%s' with language level '%s'",
            package_name,
            self.language_level.value,
        )
        return self.extract_classes(package_name, self.is_entity)

    def extract_classes(self, package_name: str, predicate: TypePredicate) -> List[TypeDecl]:
        """
        Every declaration (top-level or nested at any depth) below the
        package directory that satisfies ``predicate``, in walk order.
        """
        start_path = self.path_for_package(package_name)
        logger.debug("Scanning classes in path: '%s'", start_path)

        matches: Dict[TypeDecl, None] = {}
        try:
            for path in self.java_file_finder.find_java_files(start_path):
                unit = self.parse_java_file(path)
                if unit is None:
                    continue
                for decl in unit.iter_types():
                    if predicate(decl):
                        matches.setdefault(decl, None)
        except OSError as e:
            logger.error("Error while scanning classes in package '%s': %s", package_name, e)
            raise ScanError(
                f"Error while scanning classes in package '{package_name}' at '{start_path}': {e}",
                package_name=package_name,
                path=start_path,
            ) from e

        return list(matches)

    def find_by_simple_name(self, name: str) -> List[TypeDecl]:
        return self.extract_classes("", lambda t: t.name == name)

    def find_by_qualified_name(self, qualified_name: str) -> Optional[TypeDecl]:
        found = self.extract_classes("", lambda t: t.qualified_name == qualified_name)
        return found[0] if found else None

    def is_entity(self, decl: TypeDecl) -> bool:
        return decl.has_marker(self.entity_marker)

    # ---------------- Fields ----------------

    def collect_column_annotated_field_names(self, entity: TypeDecl) -> List[str]:
        """
        Names of the entity's own (not inherited) members carrying the column
        marker, in declaration order. Enums and annotation types have none.
        """
        if isinstance(entity, RecordDecl):
            members = entity.parameters
        elif isinstance(entity, ClassDecl):
            members = entity.fields
        else:
            return []
        return [m.name for m in members if m.has_marker(self.column_marker)]

    # ---------------- Parsing ----------------

    def parse_java_file(self, path: Path) -> Optional[CompilationUnit]:
        logger.debug("Parsing file: '%s'", path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                code = f.read()
            outcome = self._adapter.parse(code, source_file=str(path))
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.error("Error parsing file '%s': %s", path, e)
            return None

        for problem in outcome.problems:
            logger.warning("Parsing issue in '%s': %s", path, problem)
        return outcome.unit

    def path_for_package(self, package_name: str) -> Path:
        package_name = normalize_package(package_name)
        if not package_name:
            return self.source_directory
        return self.source_directory.joinpath(*package_name.split("."))
