import textwrap
from pathlib import Path

import pytest

PROJECT_DIR = Path(__file__).parent / "resources" / "simple-project"
SOURCE_ROOT = PROJECT_DIR / "src" / "main" / "java"


@pytest.fixture
def project_dir() -> Path:
    return PROJECT_DIR


@pytest.fixture
def source_root() -> Path:
    return SOURCE_ROOT


@pytest.fixture
def java_sources(tmp_path):
    """Write {relative path: java code} below tmp_path/src and return that root."""
    def _write(files):
        root = tmp_path / "src"
        root.mkdir(exist_ok=True)
        for rel, code in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(code), encoding="utf-8")
        return root
    return _write
