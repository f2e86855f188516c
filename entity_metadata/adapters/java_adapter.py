import javalang  # type: ignore
from typing import Any, List, Optional, Tuple

from entity_metadata.cir.model import (
    ClassDecl,
    CompilationUnit,
    FieldDecl,
    Marker,
    ParseOutcome,
    TypeDecl,
    TypeRef,
)


class JavaAdapter:
    """
    Java 8 source -> declaration model, backed by javalang.

    javalang has no error recovery: any syntax problem fails the whole
    compilation unit with ValueError. Records are not part of its grammar,
    so record sources always fail at this level.

    Produces, per compilation unit:
      - package name and single-type / on-demand imports
      - class, interface, enum and annotation declarations (nested at any depth)
      - annotations ("markers") with their literal arguments
      - field declarations in source order
      - the first extended type of classes and interfaces
    """

    language = "java"

    # ---------------- Helpers ----------------

    def _reference_type_name(self, t) -> str:
        """
        javalang splits `com.x.Base<T>` into a chain of ReferenceType nodes
        linked through `sub_type`; join them back, dropping generics.
        """
        parts: List[str] = []
        while t is not None:
            parts.append(getattr(t, "name", ""))
            t = getattr(t, "sub_type", None)
        return ".".join(p for p in parts if p)

    def _element_text(self, element) -> str:
        if isinstance(element, javalang.tree.Literal):
            value = element.value
            if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
                return value[1:-1]
            return value
        if isinstance(element, javalang.tree.MemberReference):
            return f"{element.qualifier}.{element.member}" if element.qualifier else element.member
        if isinstance(element, javalang.tree.ElementArrayValue):
            return ",".join(self._element_text(v) for v in element.values or [])
        return str(element)

    def _markers(self, annotations) -> Tuple[Marker, ...]:
        markers: List[Marker] = []
        for a in annotations or []:
            element = a.element
            if element is None:
                arguments: Tuple[Tuple[str, str], ...] = ()
            elif isinstance(element, list):
                arguments = tuple((pair.name, self._element_text(pair.value)) for pair in element)
            else:
                arguments = (("value", self._element_text(element)),)
            markers.append(Marker(name=a.name, arguments=arguments))
        return tuple(markers)

    def _body_declarations(self, t) -> List[Any]:
        body = getattr(t, "body", None)
        if body is None:
            return []
        # enums keep constants and members apart
        if isinstance(body, javalang.tree.EnumBody):
            return list(body.declarations or [])
        return list(body)

    # ---------------- Parsing entry points ----------------

    def parse_to_ast(self, code: str):
        try:
            return javalang.parse.parse(code)
        except javalang.parser.JavaSyntaxError as e:
            at = getattr(e, "at", None)
            position = getattr(at, "position", None)
            where = f" at line {position[0]}" if position else ""
            raise ValueError(f"Java syntax error{where}: {e.description}")
        except javalang.tokenizer.LexerError as e:
            raise ValueError(f"Java lexer error: {e}")
        except Exception as e:
            raise ValueError(f"Failed to parse Java code: {e}")

    def parse(self, code: str, source_file: Optional[str] = None) -> ParseOutcome:
        tree = self.parse_to_ast(code)
        package_name = getattr(getattr(tree, "package", None), "name", None)

        imports = tuple(
            f"{imp.path}.*" if imp.wildcard else imp.path
            for imp in tree.imports or []
            if not imp.static
        )

        unit = CompilationUnit(path=source_file, package=package_name, imports=imports)
        for t in tree.types:
            decl = self._process_type(t, package_name, imports, source_file)
            if decl is not None:
                unit.types.append(decl)

        return ParseOutcome(unit=unit)

    # ---------------- Core processing ----------------

    def _process_type(
        self,
        t,
        package_name: Optional[str],
        imports: Tuple[str, ...],
        source_file: Optional[str],
        enclosing: Tuple[str, ...] = (),
    ) -> Optional[TypeDecl]:
        common = dict(
            name=t.name,
            package=package_name,
            markers=self._markers(t.annotations),
            imports=imports,
            source_file=source_file,
            enclosing=enclosing,
        )

        if isinstance(t, javalang.tree.ClassDeclaration):
            extends = TypeRef(self._reference_type_name(t.extends)) if t.extends else None
            decl: TypeDecl = ClassDecl(kind="class", extends=extends, **common)
        elif isinstance(t, javalang.tree.InterfaceDeclaration):
            first = t.extends[0] if t.extends else None
            extends = TypeRef(self._reference_type_name(first)) if first else None
            decl = ClassDecl(kind="interface", extends=extends, **common)
        elif isinstance(t, javalang.tree.EnumDeclaration):
            decl = TypeDecl(kind="enum", **common)
        elif isinstance(t, javalang.tree.AnnotationDeclaration):
            decl = TypeDecl(kind="annotation", **common)
        else:
            return None

        # ---------- members (fields + nested types, source order) ----------
        for member in self._body_declarations(t):
            if isinstance(member, javalang.tree.FieldDeclaration):
                if not member.declarators:
                    continue
                markers = self._markers(member.annotations)
                for declarator in member.declarators:
                    decl.members.append(
                        FieldDecl(name=declarator.name, markers=markers)
                    )
            elif isinstance(member, javalang.tree.TypeDeclaration):
                nested = self._process_type(
                    member, package_name, imports, source_file, enclosing + (t.name,)
                )
                if nested is not None:
                    decl.members.append(nested)

        return decl
