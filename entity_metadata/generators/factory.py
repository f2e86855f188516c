import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from entity_metadata.errors import GeneratorResolutionError
from entity_metadata.generators.base import (
    EntityMetadataGenerator,
    EntityMetadataGeneratorFactory,
    NamingStrategy,
    default_naming_strategy,
)
from entity_metadata.generators.r2dbc import R2dbcMetadataGeneratorFactory

logger = logging.getLogger(__name__)

# every generator shipped with the tool; selected by name at run time
KNOWN_FACTORIES: List[EntityMetadataGeneratorFactory] = [
    R2dbcMetadataGeneratorFactory(),
]


class MetadataGeneratorFactory:
    """
    Picks the generator named ``selected_name``. With no name given, the
    only registered generator is used; several registered generators then
    require an explicit choice.
    """

    def __init__(
        self,
        selected_name: Optional[str],
        output_dir: Path,
        naming_strategy: NamingStrategy = default_naming_strategy,
        factories: Optional[Iterable[EntityMetadataGeneratorFactory]] = None,
    ):
        self.selected_name = selected_name
        self.output_dir = output_dir
        self.naming_strategy = naming_strategy
        self.factories: Dict[str, EntityMetadataGeneratorFactory] = {}
        self._register(KNOWN_FACTORIES if factories is None else factories)

    def _register(self, factories: Iterable[EntityMetadataGeneratorFactory]) -> None:
        for factory in factories:
            logger.debug("Registered generator factory: %s -> %s", factory.name, type(factory).__name__)
            if factory.name in self.factories:
                raise GeneratorResolutionError(f"Duplicate generator factory name: {factory.name}")
            self.factories[factory.name] = factory

    def supported_generator_names(self) -> List[str]:
        return sorted(self.factories)

    def resolve(self) -> EntityMetadataGenerator:
        if not self.factories:
            raise GeneratorResolutionError("No generator factories registered.")

        if self.selected_name is None or not self.selected_name.strip():
            if len(self.factories) == 1:
                only = next(iter(self.factories.values()))
                return only.create(self.naming_strategy, self.output_dir)
            raise GeneratorResolutionError(
                "Multiple generator factories found. Specify one of: "
                f"{self.supported_generator_names()}"
            )

        factory = self.factories.get(self.selected_name.strip())
        if factory is None:
            raise GeneratorResolutionError(
                f"Unknown generator: '{self.selected_name}'. "
                f"Supported: {self.supported_generator_names()}"
            )
        return factory.create(self.naming_strategy, self.output_dir)
