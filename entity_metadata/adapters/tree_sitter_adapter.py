"""Lenient Java parsing for modern language levels, backed by tree-sitter.

tree-sitter always produces a tree: syntax problems surface as ``ERROR`` or
missing nodes, which are reported as problems while the rest of the tree is
still converted into the declaration model.
"""

from typing import Iterator, List, Optional, Tuple

import tree_sitter_java as ts_java
from tree_sitter import Language as TSLanguage, Node, Parser

from entity_metadata.cir.model import (
    ClassDecl,
    CompilationUnit,
    FieldDecl,
    Marker,
    ParseOutcome,
    RecordDecl,
    TypeDecl,
    TypeRef,
)

TYPE_NODES = {
    "class_declaration": "class",
    "interface_declaration": "interface",
    "enum_declaration": "enum",
    "record_declaration": "record",
    "annotation_type_declaration": "annotation",
}

FIELD_NODES = ("field_declaration", "constant_declaration")
MARKER_NODES = ("marker_annotation", "annotation")


class TreeSitterJavaAdapter:
    """Java 11+ source -> declaration model."""

    language = "java"

    def __init__(self, allow_records: bool = True):
        self.allow_records = allow_records
        self._parser = Parser(TSLanguage(ts_java.language()))

    # ---------------- Helpers ----------------

    @staticmethod
    def _text(node: Node, source: bytes) -> str:
        return source[node.start_byte : node.end_byte].decode("utf-8")

    @staticmethod
    def _child_of_type(node: Node, *types: str) -> Optional[Node]:
        return next((c for c in node.children if c.type in types), None)

    def _type_name(self, node: Node, source: bytes) -> str:
        """Type reference text without generic arguments or annotations."""
        if node.type == "generic_type":
            base = self._child_of_type(node, "type_identifier", "scoped_type_identifier")
            return self._type_name(base, source) if base is not None else self._text(node, source)
        if node.type == "scoped_type_identifier":
            parts = [
                self._type_name(c, source)
                for c in node.named_children
                if c.type in ("type_identifier", "scoped_type_identifier", "generic_type")
            ]
            return ".".join(parts)
        return self._text(node, source)

    def _element_text(self, node: Node, source: bytes) -> str:
        text = self._text(node, source)
        if node.type in ("string_literal", "character_literal") and len(text) >= 2:
            return text[1:-1]
        if node.type == "element_value_array_initializer":
            return ",".join(self._element_text(c, source) for c in node.named_children)
        return text

    def _markers(self, node: Node, source: bytes) -> Tuple[Marker, ...]:
        modifiers = self._child_of_type(node, "modifiers")
        if modifiers is None:
            return ()

        markers: List[Marker] = []
        for child in modifiers.named_children:
            if child.type not in MARKER_NODES:
                continue
            name_node = child.child_by_field_name("name")
            if name_node is None:
                continue
            arguments: List[Tuple[str, str]] = []
            args = child.child_by_field_name("arguments")
            if args is not None:
                for arg in args.named_children:
                    if arg.type == "element_value_pair":
                        key = arg.child_by_field_name("key")
                        value = arg.child_by_field_name("value")
                        if key is not None and value is not None:
                            arguments.append((self._text(key, source), self._element_text(value, source)))
                    elif arg.type not in ("comment", "line_comment", "block_comment"):
                        arguments.append(("value", self._element_text(arg, source)))
            markers.append(Marker(name=self._text(name_node, source), arguments=tuple(arguments)))
        return tuple(markers)

    def _problems(self, root: Node) -> Iterator[str]:
        stack = [root]
        while stack:
            node = stack.pop()
            if node.is_missing:
                row, col = node.start_point
                yield f"line {row + 1}, column {col + 1}: missing '{node.type}'"
                continue
            if node.type == "ERROR":
                row, col = node.start_point
                yield f"line {row + 1}, column {col + 1}: unexpected syntax"
                continue
            if node.has_error:
                stack.extend(reversed(node.children))

    def _body_members(self, body: Optional[Node]) -> Iterator[Node]:
        if body is None:
            return
        for child in body.named_children:
            # enums nest their non-constant members one level deeper
            if child.type == "enum_body_declarations":
                yield from child.named_children
            else:
                yield child

    # ---------------- Parsing entry point ----------------

    def parse(self, code: str, source_file: Optional[str] = None) -> ParseOutcome:
        source = code.encode("utf-8")
        tree = self._parser.parse(source)
        root = tree.root_node

        problems: List[str] = list(self._problems(root)) if root.has_error else []

        package_name: Optional[str] = None
        imports: List[str] = []
        for child in root.named_children:
            if child.type == "package_declaration":
                name_node = self._child_of_type(child, "scoped_identifier", "identifier")
                if name_node is not None:
                    package_name = self._text(name_node, source)
            elif child.type == "import_declaration":
                if self._child_of_type(child, "static") is not None:
                    continue
                name_node = self._child_of_type(child, "scoped_identifier", "identifier")
                if name_node is None:
                    continue
                path = self._text(name_node, source)
                if self._child_of_type(child, "asterisk") is not None:
                    path = f"{path}.*"
                imports.append(path)

        unit = CompilationUnit(path=source_file, package=package_name, imports=tuple(imports))
        for child in root.named_children:
            if child.type in TYPE_NODES:
                decl = self._process_type(child, source, unit, problems)
                if decl is not None:
                    unit.types.append(decl)

        return ParseOutcome(unit=unit, problems=problems)

    # ---------------- Core processing ----------------

    def _fields(self, node: Node, source: bytes) -> List[FieldDecl]:
        markers = self._markers(node, source)
        fields: List[FieldDecl] = []
        for declarator in node.children_by_field_name("declarator"):
            name_node = declarator.child_by_field_name("name")
            if name_node is not None:
                fields.append(FieldDecl(name=self._text(name_node, source), markers=markers))
        return fields

    def _record_components(self, node: Node, source: bytes) -> List[FieldDecl]:
        params = node.child_by_field_name("parameters")
        if params is None:
            return []
        components: List[FieldDecl] = []
        for p in params.named_children:
            if p.type not in ("formal_parameter", "spread_parameter"):
                continue
            name_node = p.child_by_field_name("name")
            if name_node is None:
                continue
            components.append(
                FieldDecl(
                    name=self._text(name_node, source),
                    markers=self._markers(p, source),
                )
            )
        return components

    def _extends(self, node: Node, source: bytes) -> Optional[TypeRef]:
        superclass = node.child_by_field_name("superclass")
        if superclass is None:
            # interfaces: first entry of `extends A, B`
            superclass = self._child_of_type(node, "extends_interfaces")
            if superclass is not None:
                superclass = self._child_of_type(superclass, "type_list")
        if superclass is None:
            return None
        type_node = next((c for c in superclass.named_children if c.type != "annotation"), None)
        if type_node is None:
            return None
        return TypeRef(self._type_name(type_node, source))

    def _process_type(
        self,
        node: Node,
        source: bytes,
        unit: CompilationUnit,
        problems: List[str],
        enclosing: Tuple[str, ...] = (),
    ) -> Optional[TypeDecl]:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        kind = TYPE_NODES[node.type]
        name = self._text(name_node, source)

        if kind == "record" and not self.allow_records:
            row, col = node.start_point
            problems.append(
                f"line {row + 1}, column {col + 1}: record '{name}' is not supported "
                f"at this language level"
            )
            return None

        common = dict(
            name=name,
            package=unit.package,
            markers=self._markers(node, source),
            imports=unit.imports,
            source_file=unit.path,
            enclosing=enclosing,
        )
        if kind in ("class", "interface"):
            decl: TypeDecl = ClassDecl(kind=kind, extends=self._extends(node, source), **common)
        elif kind == "record":
            decl = RecordDecl(kind=kind, parameters=self._record_components(node, source), **common)
        else:
            decl = TypeDecl(kind=kind, **common)

        for member in self._body_members(node.child_by_field_name("body")):
            if member.type in FIELD_NODES:
                decl.members.extend(self._fields(member, source))
            elif member.type in TYPE_NODES:
                nested = self._process_type(member, source, unit, problems, enclosing + (name,))
                if nested is not None:
                    decl.members.append(nested)

        return decl
