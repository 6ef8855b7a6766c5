"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages,
and resets logging state between tests.
"""

import logging
import os
import sys
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of gocview modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("gocview"):
        del sys.modules[module_name]


@pytest.fixture(autouse=True)
def reset_logging_and_env() -> Generator[None, None, None]:
    """Reset structlog/stdlib logging and GOCVIEW__ env vars around each test."""
    from gocview.core.logging import clear_cycle_id

    structlog.reset_defaults()
    logging.getLogger().handlers.clear()
    clear_cycle_id()
    saved = {k: v for k, v in os.environ.items() if k.startswith("GOCVIEW__")}
    for k in saved:
        del os.environ[k]
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()
    clear_cycle_id()
    for k in list(os.environ):
        if k.startswith("GOCVIEW__"):
            del os.environ[k]
    os.environ.update(saved)


@pytest.fixture
def go_workspace(tmp_path: Path) -> Path:
    """A small Go module workspace declared as example.org/proj."""
    root = tmp_path / "proj"
    (root / "sub").mkdir(parents=True)
    (root / "internal" / "handler").mkdir(parents=True)
    (root / "go.mod").write_text("module example.org/proj\n\ngo 1.21\n")
    (root / "main.go").write_text("package main\n")
    (root / "sub" / "file.go").write_text("package sub\n")
    (root / "internal" / "handler" / "handler.go").write_text("package handler\n")
    return root
