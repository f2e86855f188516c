import networkx as nx # type: ignore
from typing import Any, Dict, Iterable, List, Optional, Set

from entity_metadata.cir.model import TypeDecl
from entity_metadata.config import ENTITY_MARKER


class EntityGraph:
    """
    Read-only directed graph of entity declarations.
    Nodes: TypeDecl objects carrying the entity marker.
    Edges: parent -> child, where child is declared directly inside parent.

    The wrapped networkx graph is frozen; add_node/add_edge on it raise
    networkx.NetworkXError.
    """
    def __init__(self, g: nx.DiGraph) -> None:
        self.g = g if nx.is_frozen(g) else nx.freeze(g.copy())

    @classmethod
    def build(cls, nodes: Iterable[TypeDecl], edges: Iterable[tuple]) -> "EntityGraph":
        g = nx.DiGraph()
        g.add_nodes_from(nodes)
        g.add_edges_from(edges)
        return cls(nx.freeze(g))

    def nodes(self) -> List[TypeDecl]:
        return list(self.g.nodes)

    def edges(self) -> List[tuple]:
        return list(self.g.edges)

    def successors(self, node: TypeDecl) -> List[TypeDecl]:
        return list(self.g.successors(node))

    def roots(self) -> List[TypeDecl]:
        return [n for n in self.g.nodes if self.g.in_degree(n) == 0]

    def find(self, qualified_name: str) -> Optional[TypeDecl]:
        return next((n for n in self.g.nodes if n.qualified_name == qualified_name), None)

    def __len__(self) -> int:
        return self.g.number_of_nodes()

    def __contains__(self, node: object) -> bool:
        return node in self.g

    def format_hierarchy(self) -> str:
        """
        Human readable forest, one line per entity:

            • RootClass
              ↳ ChildClass
                ↳ GrandChildClass
        """
        lines: List[str] = []
        visited: Set[TypeDecl] = set()

        def _render(node: TypeDecl, depth: int) -> None:
            if node in visited:
                return
            visited.add(node)
            indent = "• " if depth == 0 else "  " * depth + "↳ "
            lines.append(indent + node.name)
            for child in self.g.successors(node):
                _render(child, depth + 1)

        for root in self.roots():
            _render(root, 0)

        return "\n".join(lines)

    def to_debug_json(self, fields: Optional[Dict[TypeDecl, List[str]]] = None) -> Dict[str, Any]:
        """
        Convert graph to JSON-like dict for debugging / API responses.
        """
        nodes = []
        for node in self.g.nodes:
            attrs: Dict[str, Any] = {
                "name": node.name,
                "kind": node.kind,
                "package": node.package,
                "source_file": node.source_file,
            }
            table = node.marker(ENTITY_MARKER)
            if table is not None and table.value:
                attrs["table"] = table.value
            if fields is not None:
                attrs["fields"] = list(fields.get(node, []))
            nodes.append({
                "id": node.qualified_name,
                "kind": "Entity",
                "attrs": attrs,
            })

        edges = []
        for src, dst in self.g.edges:
            edges.append({
                "src": src.qualified_name,
                "dst": dst.qualified_name,
                "type": "NESTS",
            })

        return {"nodes": nodes, "edges": edges}
