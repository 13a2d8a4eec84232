"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local statelint package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of statelint modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("statelint"):
        del sys.modules[module_name]


@pytest.fixture(autouse=True)
def _isolated_import_cache() -> Generator[None, None, None]:
    """Every test starts and ends with an empty process-wide import cache."""
    from statelint.resolver.imports import clear_import_cache

    clear_import_cache()
    yield
    clear_import_cache()
