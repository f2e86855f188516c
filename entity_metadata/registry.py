from typing import Union

from entity_metadata.adapters.java_adapter import JavaAdapter
from entity_metadata.adapters.tree_sitter_adapter import TreeSitterJavaAdapter
from entity_metadata.config import JavaLanguageLevel
from entity_metadata.errors import ConfigurationError

JavaParserAdapter = Union[JavaAdapter, TreeSitterJavaAdapter]


def resolve_language_level(level: Union[str, JavaLanguageLevel]) -> JavaLanguageLevel:
    try:
        return JavaLanguageLevel(level)
    except ValueError:
        valid = ", ".join(lvl.value for lvl in JavaLanguageLevel)
        raise ConfigurationError(f"Invalid Java language level '{level}', available levels: {valid}")


def adapter_for(level: Union[str, JavaLanguageLevel]) -> JavaParserAdapter:
    level = resolve_language_level(level)
    if level is JavaLanguageLevel.JAVA_8:
        return JavaAdapter()
    return TreeSitterJavaAdapter(allow_records=level.supports_records)
