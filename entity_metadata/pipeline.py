"""One generation run: scan, build the entity graph, hand it to a generator."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from entity_metadata.builder import NestedEntityGraphBuilder
from entity_metadata.cir.graph import EntityGraph
from entity_metadata.cir.model import TypeDecl
from entity_metadata.config import GenerationConfig
from entity_metadata.errors import MetadataError, MetadataGenerationError
from entity_metadata.generators.factory import MetadataGeneratorFactory
from entity_metadata.scanner.collector import MetadataCollector

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    graph: EntityGraph
    entity_fields: Dict[TypeDecl, List[str]] = field(default_factory=dict)

    def fields_of(self, entity: TypeDecl) -> List[str]:
        return self.entity_fields.get(entity, [])


@dataclass
class GenerationResult(ScanResult):
    output_directory: Path = Path(".")
    generated_files: List[Path] = field(default_factory=list)


def scan_entities(config: GenerationConfig) -> ScanResult:
    collector = MetadataCollector(config.source_root, config.language_level)
    builder = NestedEntityGraphBuilder(config.package_name, collector)

    entity_fields: Dict[TypeDecl, List[str]] = {}
    graph = builder.build_entity_graph(entity_fields.__setitem__)
    return ScanResult(graph=graph, entity_fields=entity_fields)


def generate_metadata(config: GenerationConfig) -> GenerationResult:
    """
    Full run. Any failure is logged and re-raised as MetadataGenerationError
    chained to its cause.
    """
    try:
        logger.info(
            "Generating metadata for '%s' package with language level '%s'",
            config.package_name, config.language_level.value,
        )
        output_directory = config.output_directory.absolute()
        generator = MetadataGeneratorFactory(config.generator, output_directory).resolve()

        scan = scan_entities(config)
        generated = generator.generate_metadata_classes(scan.graph, scan.fields_of)

        logger.info(
            "Generated metadata for %d entity classes into: '%s'\nIncluded entities:\n%s",
            len(scan.graph), output_directory, scan.graph.format_hierarchy(),
        )
        return GenerationResult(
            graph=scan.graph,
            entity_fields=scan.entity_fields,
            output_directory=output_directory,
            generated_files=generated,
        )
    except (MetadataError, OSError, ValueError) as e:
        logger.error("Metadata generation failed: %s", e)
        raise MetadataGenerationError(f"Error generating metadata: {e}") from e

