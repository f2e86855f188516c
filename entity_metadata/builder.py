"""Entity graph construction.

Builds the directed graph of ``@Table`` entities found in a package, linking
each entity to the entities declared directly inside it, and resolves for
every entity the column-marked field names it exposes, its own first and
then those inherited along the ``extends`` chain.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Set

import networkx as nx # type: ignore

from entity_metadata.cir.graph import EntityGraph
from entity_metadata.cir.model import TypeDecl
from entity_metadata.config import normalize_package
from entity_metadata.scanner.collector import MetadataCollector
from entity_metadata.scanner.resolver import SupertypeResolverChain

logger = logging.getLogger(__name__)

FieldsSink = Callable[[TypeDecl, List[str]], None]


class EntityGraphBuilder(ABC):
    @abstractmethod
    def build_entity_graph(self, fields_sink: FieldsSink) -> EntityGraph:
        """Scan, build the graph, and report each entity's fields to ``fields_sink``."""


class NestedEntityGraphBuilder(EntityGraphBuilder):
    """
    Entities come from one scan of ``package_name``; supertypes are looked
    up anywhere below the collector's source root.
    """

    def __init__(
        self,
        package_name: str,
        collector: MetadataCollector,
        resolver: Optional[SupertypeResolverChain] = None,
    ):
        self.package_name = normalize_package(package_name)
        self.collector = collector
        self.resolver = resolver or SupertypeResolverChain.default(collector, self.package_name)

    def build_entity_graph(self, fields_sink: FieldsSink) -> EntityGraph:
        g = nx.DiGraph()

        for parent in self.collector.extract_annotated_classes(self.package_name):
            g.add_node(parent)
            fields_sink(parent, self.collect_column_fields(parent))

            for child in parent.nested_types:
                if not self.collector.is_entity(child):
                    continue
                g.add_node(child)
                g.add_edge(parent, child)

        logger.debug(
            "Entity graph for '%s': %d nodes, %d edges",
            self.package_name, g.number_of_nodes(), g.number_of_edges(),
        )
        return EntityGraph(nx.freeze(g))

    def collect_column_fields(self, entity: TypeDecl) -> List[str]:
        """
        Own column fields, then the nearest ancestor's, and so on. Names
        repeated on several levels are kept once per level.
        """
        fields: List[str] = []
        visited: Set[str] = set()
        self._collect_fields(entity, fields, visited)
        return fields

    def _collect_fields(self, decl: TypeDecl, fields: List[str], visited: Set[str]) -> None:
        # iterative walk; `visited` holds qualified names so a cycle stops at
        # its first repeated type
        current: Optional[TypeDecl] = decl
        while current is not None:
            fqn = current.qualified_name
            if fqn in visited:
                logger.debug("Inheritance of '%s' revisits '%s', stopping", decl.qualified_name, fqn)
                return
            visited.add(fqn)

            fields.extend(self.collector.collect_column_annotated_field_names(current))
            current = self.resolver.find_super_type(current)
