from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from entity_metadata.errors import ConfigurationError

ENTITY_MARKER = "Table"
COLUMN_MARKER = "Column"

DEFAULT_SOURCE_DIRECTORY = Path("src/main/java")
DEFAULT_GENERATOR = "r2dbc"


class JavaLanguageLevel(str, Enum):
    """Java syntax level used to parse source files."""

    JAVA_8 = "JAVA_8"
    JAVA_11 = "JAVA_11"
    JAVA_17 = "JAVA_17"
    JAVA_21 = "JAVA_21"

    @property
    def version(self) -> int:
        return int(self.value.split("_", 1)[1])

    @property
    def supports_records(self) -> bool:
        return self.version >= 16


DEFAULT_LANGUAGE_LEVEL = JavaLanguageLevel.JAVA_17


def normalize_package(package_name: str) -> str:
    """`com/example/model/` -> `com.example.model`"""
    return package_name.strip().replace("/", ".").replace("\\", ".").strip(".")


class GenerationConfig(BaseModel):
    base_dir: Path
    package_name: str
    output_directory: Path
    source_directory: Path = DEFAULT_SOURCE_DIRECTORY
    language_level: JavaLanguageLevel = DEFAULT_LANGUAGE_LEVEL
    generator: str = DEFAULT_GENERATOR

    @field_validator("package_name")
    @classmethod
    def _normalize_package(cls, v: str) -> str:
        return normalize_package(v)

    @property
    def source_root(self) -> Path:
        return self.base_dir / self.source_directory

    @classmethod
    def from_options(cls, **options: Any) -> "GenerationConfig":
        try:
            return cls(**options)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(f"Invalid generation settings: {problems}") from e
