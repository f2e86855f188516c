import networkx as nx

from entity_metadata.cir.graph import EntityGraph
from entity_metadata.cir.model import ClassDecl, Marker


def _entity(name, package="com.acme", table=None):
    args = (("value", table),) if table else ()
    return ClassDecl(name=name, kind="class", package=package, markers=(Marker("Table", args),))


def test_hierarchy_lines():
    a, b, c, d = _entity("A"), _entity("B"), _entity("C"), _entity("D")
    graph = EntityGraph.build([a, b, c, d], [(a, b), (b, c)])

    assert graph.format_hierarchy() == "• A\n  ↳ B\n    ↳ C\n• D"


def test_hierarchy_renders_each_node_once():
    r, a, b = _entity("R"), _entity("A"), _entity("B")
    graph = EntityGraph.build([r, a, b], [(r, a), (a, b), (b, a)])

    assert graph.format_hierarchy() == "• R\n  ↳ A\n    ↳ B"


def test_empty_graph():
    graph = EntityGraph.build([], [])

    assert len(graph) == 0
    assert graph.roots() == []
    assert graph.format_hierarchy() == ""


def test_wrapping_freezes_a_copy():
    a = _entity("A")
    g = nx.DiGraph()
    g.add_node(a)

    graph = EntityGraph(g)
    g.add_node(_entity("B"))

    assert nx.is_frozen(graph.g)
    assert graph.nodes() == [a]
    assert a in graph


def test_same_name_declarations_stay_distinct():
    first, second = _entity("Dup"), _entity("Dup")
    graph = EntityGraph.build([first, second], [])

    assert len(graph) == 2
    assert graph.find("com.acme.Dup") is first


def test_debug_json():
    order = _entity("Order", table="orders")
    line = _entity("Line")
    graph = EntityGraph.build([order, line], [(order, line)])

    data = graph.to_debug_json({order: ["id", "total"]})

    assert data["nodes"][0] == {
        "id": "com.acme.Order",
        "kind": "Entity",
        "attrs": {
            "name": "Order",
            "kind": "class",
            "package": "com.acme",
            "source_file": None,
            "table": "orders",
            "fields": ["id", "total"],
        },
    }
    assert "table" not in data["nodes"][1]["attrs"]
    assert data["nodes"][1]["attrs"]["fields"] == []
    assert data["edges"] == [{"src": "com.acme.Order", "dst": "com.acme.Line", "type": "NESTS"}]
