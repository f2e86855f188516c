import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List

from entity_metadata.cir.graph import EntityGraph
from entity_metadata.cir.model import TypeDecl

NamingStrategy = Callable[[str], str]
EntityFieldsResolver = Callable[[TypeDecl], List[str]]

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def default_naming_strategy(entity_class_name: str) -> str:
    return entity_class_name + "_"


def to_constant_name(field_name: str) -> str:
    """`middleField` -> `MIDDLE_FIELD`, `level1Field` -> `LEVEL1_FIELD`"""
    return _WORD_BOUNDARY.sub("_", field_name).upper()


class EntityMetadataGenerator(ABC):
    """Writes metadata sources for a finished entity graph."""

    @abstractmethod
    def generate_metadata_classes(
        self,
        graph: EntityGraph,
        entity_fields_resolver: EntityFieldsResolver,
    ) -> List[Path]:
        """Generate sources and return the paths written."""


class EntityMetadataGeneratorFactory(ABC):
    """One entry of the generator registry, looked up by ``name``."""

    name: str = ""

    @abstractmethod
    def create(self, naming_strategy: NamingStrategy, output_dir: Path) -> EntityMetadataGenerator:
        ...
