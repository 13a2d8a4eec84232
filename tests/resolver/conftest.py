"""Shared fixtures for resolver tests."""

from __future__ import annotations

import os
from collections import Counter

import pytest

from statelint.resolver import BindingTable, build_binding_table, parse_module


class MemoryFileAccess:
    """In-memory FileAccess that counts reads per path."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self.files: dict[str, str] = {os.path.normpath(p): c for p, c in (files or {}).items()}
        self.reads: Counter[str] = Counter()
        self.unreadable: set[str] = set()

    def exists(self, path: str) -> bool:
        return path in self.files

    def read(self, path: str) -> str:
        self.reads[path] += 1
        if path in self.unreadable:
            raise PermissionError(f"Permission denied: {path}")
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(path) from None


@pytest.fixture
def build_table():
    """Parse source and build its binding table."""

    def _build(
        source: str,
        *,
        path: str = "/project/src/Component.tsx",
        current_file_path: str | None = None,
        follow_imports: bool = True,
        file_access: MemoryFileAccess | None = None,
    ) -> BindingTable:
        module = parse_module(source, path)
        return build_binding_table(
            module,
            current_file_path=current_file_path,
            follow_imports=follow_imports,
            file_access=file_access,
        )

    return _build


@pytest.fixture
def memory_files():
    """Factory for in-memory file systems: ``memory_files({path: content})``."""
    return MemoryFileAccess
