"""
pollmon Test Configuration.

Pytest fixtures and configuration.
Requires Python 3.11+.
"""

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from pollmon.utils.config import get_settings

# Far enough in the future that files written by the tests are stale
CLOCK_START = 2_000_000_000.0


class FakeClock:
    """Manually advanced clock for deterministic debounce tests."""

    def __init__(self, start: float = CLOCK_START) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture(autouse=True)
def fresh_settings() -> Generator[None, None, None]:
    """Drop cached settings so environment changes in a test do not leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    """A fake clock starting at CLOCK_START."""
    return FakeClock()


@pytest.fixture
def touch() -> Callable[..., Path]:
    """Create (or update) a file and set its modification time."""

    def _touch(path: Path, mtime: float, content: str = "x") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if not path.exists():
            path.write_text(content)
        os.utime(path, (mtime, mtime))
        return path

    return _touch


@pytest.fixture
def project_tree(tmp_path: Path) -> Path:
    """
    Create a small project tree with stale modification times.

    Layout:
        app.txt
        app.log
        Makefile
        notes.bck
        src/main.lua
        src/util/helpers.lua
        build/out.txt
    """
    root = tmp_path / "project"
    files = [
        "app.txt",
        "app.log",
        "Makefile",
        "notes.bck",
        "src/main.lua",
        "src/util/helpers.lua",
        "build/out.txt",
    ]
    for name in files:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(name)
        os.utime(path, (CLOCK_START - 100, CLOCK_START - 100))
    return root
