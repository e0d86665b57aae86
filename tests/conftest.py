"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import logging
import sys
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

# Insert local src directory at the beginning of sys.path
# This ensures that the local ccd package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of ccd modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name == "ccd" or module_name.startswith("ccd."):
        del sys.modules[module_name]


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    """Undo handlers installed by configure_logging (the CLI installs them per run)."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
            handler.close()
    structlog.reset_defaults()


@pytest.fixture
def make_tree(tmp_path: Path):
    """Create a directory tree from relative paths under tmp_path/tree.

    Entries ending in '/' are directories; anything else is a file whose
    parent directories are created. Returns the tree root.
    """

    def _make(*entries: str, contents: dict[str, str] | None = None) -> Path:
        root = tmp_path / "tree"
        root.mkdir(exist_ok=True)
        for entry in entries:
            target = root / entry
            if entry.endswith("/"):
                target.mkdir(parents=True, exist_ok=True)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text((contents or {}).get(entry, ""))
        return root

    return _make
