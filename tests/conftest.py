from collections.abc import Callable
from pathlib import Path

import pytest

from mailsmith.compiler.processor import TemplateProcessor
from mailsmith.core.settings import get_settings

type WriteFile = Callable[[str, str], Path]


@pytest.fixture(name="templates_dir")
def templates_dir_fixture(tmp_path: Path) -> Path:
    """Empty template tree rooted in a temporary directory."""
    root = tmp_path / "emails"
    root.mkdir()
    return root


@pytest.fixture(name="write")
def write_fixture(templates_dir: Path) -> WriteFile:
    """Write a file below the template tree and return its path."""

    def _write(relative: str, content: str) -> Path:
        path = templates_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture(name="processor")
def processor_fixture() -> TemplateProcessor:
    return TemplateProcessor()


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; tests that patch env need a fresh copy."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
