from pathlib import Path
from typing import Optional, Union


class MetadataError(Exception):
    """Base class for every error raised by entity-metadata."""


class ConfigurationError(MetadataError):
    """Missing or invalid settings; raised before any scanning starts."""


class GeneratorResolutionError(ConfigurationError):
    """Unknown, duplicate or ambiguous metadata generator name."""


class ScanError(MetadataError):
    """
    A source directory could not be enumerated.
    Always chained to the underlying OSError.
    """

    def __init__(self, message: str, package_name: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.package_name = package_name
        self.path = path


class MetadataGenerationError(MetadataError):
    """Terminal failure of a generation run."""
