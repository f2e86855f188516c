"""Supertype resolution.

A supertype is only known by the name written in the ``extends`` clause.
Turning that name into a declaration goes through a chain of stages, each
of which either proposes a qualified name or passes; the first proposal
that names a declaration in the source root wins.
"""

import logging
from typing import Iterator, List, Optional, Sequence, Set, Tuple

from entity_metadata.cir.model import ClassDecl, TypeDecl, TypeRef
from entity_metadata.errors import MetadataError
from entity_metadata.scanner.collector import MetadataCollector

logger = logging.getLogger(__name__)


def _pkg(full_name: str) -> str:
    parts = full_name.split(".")
    return ".".join(parts[:-1]) if len(parts) > 1 else ""


def _is_type_segment(segment: str) -> bool:
    return segment[:1].isupper()


def _model_name(path: str) -> str:
    """
    `q.Outer.Inner` -> `q.Inner`: the declaration model leaves enclosing
    types out of qualified names. Package segments are the leading
    lower-case ones.
    """
    parts = path.split(".")
    package: List[str] = []
    for part in parts[:-1]:
        if _is_type_segment(part):
            break
        package.append(part)
    return ".".join(package + [parts[-1]])


class SupertypeResolver:
    name = "base"

    def resolve(self, ref: TypeRef, owner: TypeDecl) -> Optional[str]:
        raise NotImplementedError


class ImportSupertypeResolver(SupertypeResolver):
    """
    Uses what the declaring file states explicitly: a package-qualified
    reference, a single-type import whose last segment matches the simple
    name, or an imported outer type of a `Outer.Inner` reference.
    """

    name = "imports"

    def resolve(self, ref: TypeRef, owner: TypeDecl) -> Optional[str]:
        if ref.is_qualified:
            head = ref.name.split(".", 1)[0]
            if not _is_type_segment(head):
                return _model_name(ref.name)
            # Outer.Inner
            suffix = "." + head
            for imp in owner.imports:
                if imp.endswith(suffix):
                    return _model_name(f"{imp}.{ref.simple_name}")
            return None

        suffix = "." + ref.simple_name
        for imp in owner.imports:
            if imp.endswith(suffix):
                return _model_name(imp)
        return None


class SourceScanSupertypeResolver(SupertypeResolver):
    """
    Scans the whole source root for declarations with the same simple name,
    entity-marked or not. Several candidates: prefer the owner's package.
    """

    name = "source-scan"

    def __init__(self, collector: MetadataCollector):
        self.collector = collector

    def resolve(self, ref: TypeRef, owner: TypeDecl) -> Optional[str]:
        candidates = self.collector.find_by_simple_name(ref.simple_name)
        if not candidates:
            return None
        if len(candidates) == 1:
            return candidates[0].qualified_name

        same_pkg = [c for c in candidates if _pkg(c.qualified_name) == (owner.package or "")]
        return (same_pkg or candidates)[0].qualified_name


class SynthesizedNameResolver(SupertypeResolver):
    """Last resort: assume the supertype lives in the scanned package."""

    name = "synthesized"

    def __init__(self, package_name: str):
        self.package_name = package_name

    def resolve(self, ref: TypeRef, owner: TypeDecl) -> Optional[str]:
        if not self.package_name:
            return ref.simple_name
        return f"{self.package_name}.{ref.simple_name}"


class SupertypeResolverChain:
    def __init__(self, collector: MetadataCollector, stages: Sequence[SupertypeResolver]):
        self.collector = collector
        self.stages: List[SupertypeResolver] = list(stages)

    @classmethod
    def default(cls, collector: MetadataCollector, package_name: str) -> "SupertypeResolverChain":
        return cls(
            collector,
            [
                ImportSupertypeResolver(),
                SourceScanSupertypeResolver(collector),
                SynthesizedNameResolver(package_name),
            ],
        )

    def _proposals(self, ref: TypeRef, owner: TypeDecl) -> Iterator[Tuple[str, str]]:
        """(stage name, qualified name) for every stage that answers, in order."""
        for stage in self.stages:
            try:
                fqn = stage.resolve(ref, owner)
            except (MetadataError, OSError) as e:
                logger.warning(
                    "Supertype stage '%s' failed for '%s' in '%s': %s",
                    stage.name, ref.name, owner.qualified_name, e,
                )
                continue
            if fqn:
                yield stage.name, fqn

    def resolve_qualified_name(self, ref: TypeRef, owner: TypeDecl) -> Optional[str]:
        first = next(self._proposals(ref, owner), None)
        return first[1] if first else None

    def find_super_type(self, decl: TypeDecl) -> Optional[TypeDecl]:
        """
        The declaration of ``decl``'s first extended type, or None when there
        is none or no stage names a declaration of the source root. A name
        that is not found falls through to the next stage.
        """
        if not isinstance(decl, ClassDecl) or decl.extends is None:
            return None

        tried: Set[str] = set()
        for stage_name, fqn in self._proposals(decl.extends, decl):
            if fqn in tried:
                continue
            tried.add(fqn)

            try:
                found = self.collector.find_by_qualified_name(fqn)
            except MetadataError as e:
                logger.warning("Could not look up supertype '%s' of '%s': %s", fqn, decl.qualified_name, e)
                continue

            if found is not None:
                logger.debug(
                    "Resolved supertype '%s' of '%s' to '%s' (%s)",
                    decl.extends.name, decl.qualified_name, fqn, stage_name,
                )
                return found
            logger.debug("Supertype '%s' of '%s' not found in sources (%s)", fqn, decl.qualified_name, stage_name)

        return None
