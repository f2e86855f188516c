import os
from pathlib import Path
from typing import Iterator

JAVA_EXTENSION = ".java"


class FileSystemJavaFileFinder:
    """
    Finds Java source files (*.java) under a root directory.

    Each call returns a fresh lazy iterator. Directory entries are visited in
    sorted order so scans are reproducible; every directory handle is closed
    as soon as its listing has been read, including when the caller stops
    iterating early or an error is raised.
    """

    def __init__(self, extension: str = JAVA_EXTENSION):
        self.extension = extension

    def find_java_files(self, root: Path) -> Iterator[Path]:
        root = Path(root)
        if not root.is_dir():
            # surface the problem when the scan is requested, not on first next()
            raise FileNotFoundError(f"Source directory does not exist: '{root}'")
        return self._walk(root)

    def _walk(self, directory: Path) -> Iterator[Path]:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)

        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                yield from self._walk(Path(entry.path))
            elif entry.is_file() and entry.name.endswith(self.extension):
                yield Path(entry.path)
