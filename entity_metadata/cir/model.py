from dataclasses import dataclass, field
from typing import Iterator, List, Literal, Optional, Tuple, Union

TypeKind = Literal["class", "interface", "enum", "record", "annotation"]


def marker_matches(marker_name: str, wanted: str) -> bool:
    """
    `@Table` and `@org.springframework...Table` both count as `Table`.
    """
    return marker_name == wanted or marker_name.endswith("." + wanted)


@dataclass(frozen=True)
class Marker:
    name: str
    # ordered (key, value) pairs; a lone positional argument is keyed "value"
    arguments: Tuple[Tuple[str, str], ...] = ()

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    @property
    def value(self) -> Optional[str]:
        for key, val in self.arguments:
            if key in ("value", "name"):
                return val
        return None


@dataclass(frozen=True)
class TypeRef:
    name: str                 # as written, generics stripped (e.g. com.x.Base)

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    @property
    def is_qualified(self) -> bool:
        return "." in self.name


def _has_marker(markers: Tuple[Marker, ...], name: str) -> bool:
    return any(marker_matches(m.name, name) for m in markers)


@dataclass(eq=False)
class FieldDecl:
    name: str
    markers: Tuple[Marker, ...] = ()

    def has_marker(self, name: str) -> bool:
        return _has_marker(self.markers, name)

    def marker(self, name: str) -> Optional[Marker]:
        return next((m for m in self.markers if marker_matches(m.name, name)), None)


@dataclass(eq=False)
class TypeDecl:
    name: str
    kind: TypeKind
    package: Optional[str] = None
    markers: Tuple[Marker, ...] = ()
    # fields and nested types, in source order; owned by this declaration
    members: List[Union[FieldDecl, "TypeDecl"]] = field(default_factory=list)
    imports: Tuple[str, ...] = ()
    source_file: Optional[str] = None
    # simple names of the enclosing declarations, outermost first
    enclosing: Tuple[str, ...] = ()

    @property
    def qualified_name(self) -> str:
        # enclosing types are not part of the qualified name
        return f"{self.package}.{self.name}" if self.package else self.name

    @property
    def nested_name(self) -> str:
        """`Outer.Inner` as written in Java source."""
        return ".".join(self.enclosing + (self.name,))

    @property
    def fields(self) -> List[FieldDecl]:
        return [m for m in self.members if isinstance(m, FieldDecl)]

    @property
    def nested_types(self) -> List["TypeDecl"]:
        return [m for m in self.members if isinstance(m, TypeDecl)]

    def has_marker(self, name: str) -> bool:
        return _has_marker(self.markers, name)

    def marker(self, name: str) -> Optional[Marker]:
        return next((m for m in self.markers if marker_matches(m.name, name)), None)

    def walk(self) -> Iterator["TypeDecl"]:
        """
        Pre-order traversal over this declaration and every nested one.
        """
        yield self
        for nested in self.nested_types:
            yield from nested.walk()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.qualified_name!r})"


@dataclass(eq=False, repr=False)
class ClassDecl(TypeDecl):
    extends: Optional[TypeRef] = None   # first extended type only


@dataclass(eq=False, repr=False)
class RecordDecl(TypeDecl):
    parameters: List[FieldDecl] = field(default_factory=list)


@dataclass(eq=False)
class CompilationUnit:
    path: Optional[str]
    package: Optional[str] = None
    imports: Tuple[str, ...] = ()
    types: List[TypeDecl] = field(default_factory=list)

    def iter_types(self) -> Iterator[TypeDecl]:
        for t in self.types:
            yield from t.walk()


@dataclass
class ParseOutcome:
    unit: Optional[CompilationUnit]
    problems: List[str] = field(default_factory=list)
