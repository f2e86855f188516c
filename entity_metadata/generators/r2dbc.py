"""Spring Data R2DBC metadata classes.

For every root entity ``com.example.MyEntity`` a ``com/example/MyEntity_.java``
is written next to a shared ``StaticR2dbcEntityTemplateAccessor_`` holder:

    public final class MyEntity_ {
      private static final Table TABLE_ = StaticR2dbcEntityTemplateAccessor_.getTable(MyEntity.class);
      public static final Column ID = column("id");
      ...
    }

Entities nested inside a root become nested ``<Name>_`` holder classes.
"""

import datetime
import logging
from pathlib import Path
from typing import Dict, List, Optional, Set

from entity_metadata.cir.graph import EntityGraph
from entity_metadata.cir.model import TypeDecl
from entity_metadata.generators.base import (
    EntityFieldsResolver,
    EntityMetadataGenerator,
    EntityMetadataGeneratorFactory,
    NamingStrategy,
    to_constant_name,
)

logger = logging.getLogger(__name__)

INDENT = "  "

HOLDER_PACKAGE = "org.springframework.data.r2dbc.config"
HOLDER_CLASS = "StaticR2dbcEntityTemplateAccessor_"

FILE_HEADER = (
    "// Generated by entity-metadata - DO NOT EDIT. Any modifications will be overwritten.\n"
    "// Generated on [{date}].\n"
)

HOLDER_SOURCE = """\
package org.springframework.data.r2dbc.config;

import org.springframework.beans.BeansException;
import org.springframework.context.ApplicationContext;
import org.springframework.context.ApplicationContextAware;
import org.springframework.data.mapping.PersistentEntity;
import org.springframework.data.r2dbc.core.R2dbcEntityTemplate;
import org.springframework.data.relational.core.mapping.RelationalPersistentEntity;
import org.springframework.data.relational.core.sql.SqlIdentifier;
import org.springframework.data.relational.core.sql.Table;
import org.springframework.data.util.Lazy;
import org.springframework.stereotype.Component;

@Component
public final class StaticR2dbcEntityTemplateAccessor_ implements ApplicationContextAware {

  private static Lazy<R2dbcEntityTemplate> r2dbcEntityTemplate;

  public static R2dbcEntityTemplate getTemplate() {
    if (r2dbcEntityTemplate == null) {
      throw new IllegalStateException(
          "StaticR2dbcEntityTemplateAccessor_ has not been initialized yet. Ensure it is registered as a Spring bean.");
    }
    return r2dbcEntityTemplate.get();
  }

  public static <T> RelationalPersistentEntity<T> getPersistentEntity(Class<T> entityType) {
    PersistentEntity<?, ?> persistentEntity = getTemplate()
        .getConverter()
        .getMappingContext()
        .getPersistentEntity(entityType);
    if (persistentEntity == null) {
      throw new IllegalArgumentException("Entity '" + entityType.getSimpleName()
          + "' is not managed by the current mapping context.");
    }
    return (RelationalPersistentEntity<T>) persistentEntity;
  }

  public static Table getTable(Class entityType) {
    return getTable(entityType, null);
  }

  public static Table getTable(Class entityType, String tableNamePrefix) {
    tableNamePrefix = (tableNamePrefix == null || tableNamePrefix.trim().isEmpty())
        ? "_"
        : "_" + tableNamePrefix.trim().toLowerCase() + "_";
    SqlIdentifier tableName = getPersistentEntity(entityType).getTableName();
    String alias = tableNamePrefix + entityType.getSimpleName().toLowerCase();
    return Table.aliased(tableName.getReference(), alias);
  }

  @Override
  public void setApplicationContext(ApplicationContext applicationContext) throws BeansException {
    r2dbcEntityTemplate = Lazy.of(() -> applicationContext.getBean(R2dbcEntityTemplate.class));
  }
}
"""


def _file_header(today: Optional[datetime.date] = None) -> str:
    return FILE_HEADER.format(date=(today or datetime.date.today()).isoformat())


def _package_dir(output_dir: Path, package: Optional[str]) -> Path:
    return output_dir.joinpath(*package.split(".")) if package else output_dir


class R2dbcEntityTemplateStaticHolderGenerator:
    """Writes the Spring bean that gives metadata classes access to the mapping context."""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    def generate_source_file(self) -> Path:
        target = _package_dir(self.output_dir, HOLDER_PACKAGE) / f"{HOLDER_CLASS}.java"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(_file_header() + HOLDER_SOURCE, encoding="utf-8")
        logger.debug("%s.java has been generated at: %s", HOLDER_CLASS, self.output_dir)
        return target


class R2dbcEntityMetadataGenerator(EntityMetadataGenerator):
    def __init__(self, naming_strategy: NamingStrategy, output_dir: Path):
        self.naming_strategy = naming_strategy
        self.output_dir = Path(output_dir)
        self.holder = R2dbcEntityTemplateStaticHolderGenerator(self.output_dir)

    def generate_metadata_classes(
        self,
        graph: EntityGraph,
        entity_fields_resolver: EntityFieldsResolver,
    ) -> List[Path]:
        written = [self.holder.generate_source_file()]
        owners: Dict[Path, TypeDecl] = {}
        for root in graph.roots():
            target = self._target_path(root)
            previous = owners.get(target)
            if previous is not None:
                logger.warning(
                    "Entities '%s' and '%s' both generate '%s'; keeping the first",
                    previous.nested_name, root.nested_name, target,
                )
                continue
            owners[target] = root
            written.append(self._write_entity_file(graph, root, entity_fields_resolver))
        return written

    def _target_path(self, entity: TypeDecl) -> Path:
        return _package_dir(self.output_dir, entity.package) / f"{self.naming_strategy(entity.name)}.java"

    # ---------------- Rendering ----------------

    def _write_entity_file(
        self,
        graph: EntityGraph,
        entity: TypeDecl,
        entity_fields_resolver: EntityFieldsResolver,
    ) -> Path:
        class_name = self.naming_strategy(entity.name)
        lines: List[str] = []
        if entity.package:
            lines += [f"package {entity.package};", ""]
        lines += [
            f"import {HOLDER_PACKAGE}.{HOLDER_CLASS};",
            "import org.springframework.data.relational.core.sql.Column;",
            "import org.springframework.data.relational.core.sql.Table;",
            "",
        ]
        lines += self._render_class(graph, entity, entity_fields_resolver, depth=0, visited=set())

        target = self._target_path(entity)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(_file_header() + "\n".join(lines) + "\n", encoding="utf-8")
        logger.debug("Generated '%s' for entity '%s'", target, entity.qualified_name)
        return target

    def _render_class(
        self,
        graph: EntityGraph,
        entity: TypeDecl,
        entity_fields_resolver: EntityFieldsResolver,
        depth: int,
        visited: Set[TypeDecl],
    ) -> List[str]:
        visited.add(entity)
        pad = INDENT * depth
        body = pad + INDENT
        class_name = self.naming_strategy(entity.name)
        entity_ref = f"{entity.nested_name}.class"
        modifiers = "public final class" if depth == 0 else "public static final class"

        lines = [f"{pad}{modifiers} {class_name} {{", ""]
        lines.append(
            f"{body}private static final Table TABLE_ = {HOLDER_CLASS}.getTable({entity_ref});"
        )
        lines.append("")

        emitted: Set[str] = set()
        for field_name in entity_fields_resolver(entity):
            constant = to_constant_name(field_name)
            if constant in emitted:
                logger.warning(
                    "Entity '%s' inherits field '%s' more than once; generating a single constant",
                    entity.qualified_name, field_name,
                )
                continue
            emitted.add(constant)
            lines.append(
                f'{body}public static final Column {constant} = column("{field_name}");'
            )

        lines += [
            "",
            f"{body}private {class_name}() {{",
            f"{body}}}",
            "",
            f"{body}public static Table table() {{",
            f"{body}{INDENT}return TABLE_;",
            f"{body}}}",
            "",
            f"{body}private static Column column(String property) {{",
            f"{body}{INDENT}return Column.create({HOLDER_CLASS}.getPersistentEntity({entity_ref})",
            f"{body}{INDENT}{INDENT}{INDENT}.getRequiredPersistentProperty(property).getColumnName(), TABLE_);",
            f"{body}}}",
        ]

        for child in graph.successors(entity):
            if child in visited:
                continue
            lines.append("")
            lines += self._render_class(graph, child, entity_fields_resolver, depth + 1, visited)

        lines.append(f"{pad}}}")
        return lines


class R2dbcMetadataGeneratorFactory(EntityMetadataGeneratorFactory):
    name = "r2dbc"

    def create(self, naming_strategy: NamingStrategy, output_dir: Path) -> EntityMetadataGenerator:
        return R2dbcEntityMetadataGenerator(naming_strategy, output_dir)
