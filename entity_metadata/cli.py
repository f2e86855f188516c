#!/usr/bin/env python3
"""
entity-metadata CLI

Scans a Java source tree for @Table entities and generates static metadata
classes exposing their @Column fields.
"""

import argparse
import logging
import sys
from typing import Optional

from entity_metadata.config import (
    DEFAULT_GENERATOR,
    DEFAULT_LANGUAGE_LEVEL,
    DEFAULT_SOURCE_DIRECTORY,
    GenerationConfig,
    JavaLanguageLevel,
)
from entity_metadata.errors import MetadataError
from entity_metadata.pipeline import generate_metadata


def parse_args(args=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="entity-metadata",
        description="Generate static metadata classes for @Table entities of a Java package.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  entity-metadata com.example.model                      # scan ./src/main/java
  entity-metadata com/example/model -b ./service -o target/generated-sources
  entity-metadata com.example.model -l JAVA_8            # legacy syntax level
        """,
    )

    parser.add_argument(
        "package_name",
        help="Package to scan, dot or slash delimited (e.g. com.example.model)",
    )
    parser.add_argument(
        "-b", "--base-dir",
        default=".",
        help="Project base directory (default: current directory)",
    )
    parser.add_argument(
        "-s", "--source-dir",
        default=str(DEFAULT_SOURCE_DIRECTORY),
        help=f"Java source directory relative to the base directory (default: {DEFAULT_SOURCE_DIRECTORY})",
    )
    parser.add_argument(
        "-o", "--output-dir",
        default="target/generated-sources/entity-metadata",
        help="Directory receiving the generated sources",
    )
    parser.add_argument(
        "-l", "--language-level",
        choices=[lvl.value for lvl in JavaLanguageLevel],
        default=DEFAULT_LANGUAGE_LEVEL.value,
        help=f"Java language level used to parse sources (default: {DEFAULT_LANGUAGE_LEVEL.value})",
    )
    parser.add_argument(
        "-g", "--generator",
        default=DEFAULT_GENERATOR,
        help=f"Metadata generator to use (default: {DEFAULT_GENERATOR})",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(args)


def main(args: Optional[list] = None) -> int:
    """Main entry point."""
    parsed = parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = GenerationConfig.from_options(
            base_dir=parsed.base_dir,
            source_directory=parsed.source_dir,
            package_name=parsed.package_name,
            output_directory=parsed.output_dir,
            language_level=parsed.language_level,
            generator=parsed.generator,
        )
        result = generate_metadata(config)
    except MetadataError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Generated {len(result.generated_files)} file(s) into {result.output_directory}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
