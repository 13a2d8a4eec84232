"""Import resolution: locate, parse and extract bindings from imported modules.

Imports are chased exactly one level deep. The imported module's own table
is built with ``follow_imports=False``, so a cyclic or deep import chain
degrades to unresolved bindings instead of recursing; no visited-set is kept.

Every failure (missing file, unreadable or unparseable file, unsupported
language, missing export) is converted to ``None`` at this module's boundary.
Callers map ``None`` to ``UNRESOLVED``.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import structlog

from statelint.core.errors import ResolutionError
from statelint.resolver.parsing import parse_module
from statelint.resolver.values import BindingTable, ObjectValue, ResolvedValue, is_unresolved

if TYPE_CHECKING:
    from statelint.resolver.nodes import Module

log = structlog.get_logger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx")
DEFAULT_INDEX_BASENAME = "index"

NAMESPACE_EXPORT = "*"
DEFAULT_EXPORT = "default"


class FileAccess(Protocol):
    """File system capability used to locate and read imported modules."""

    def exists(self, path: str) -> bool:
        """True if path names a readable regular file."""
        ...

    def read(self, path: str) -> str:
        """Return the file's text. Raises OSError (or a subclass) on failure."""
        ...


class LocalFileAccess:
    """FileAccess backed by the real file system."""

    def exists(self, path: str) -> bool:
        return Path(path).is_file()

    def read(self, path: str) -> str:
        return Path(path).read_text(encoding="utf-8")


DEFAULT_FILE_ACCESS: FileAccess = LocalFileAccess()


class ImportCache:
    """Absolute module path -> binding table, shared across files of one run.

    Thread-safe. ``get_or_build`` holds a per-path lock while building, so two
    threads importing the same module parse it once and see the same table.
    Clear it between independent runs: a stale entry keeps serving the
    bindings of a file that has since changed.
    """

    def __init__(self) -> None:
        self._tables: dict[str, BindingTable] = {}
        self._lock = threading.Lock()
        self._path_locks: dict[str, threading.Lock] = {}

    def get(self, path: str) -> BindingTable | None:
        with self._lock:
            return self._tables.get(path)

    def put(self, path: str, table: BindingTable) -> None:
        with self._lock:
            self._tables[path] = table

    def get_or_build(self, path: str, build: Callable[[], BindingTable]) -> BindingTable:
        """Return the cached table for path, building and storing it on a miss.

        If build raises, nothing is stored and the error propagates.
        """
        cached = self.get(path)
        if cached is not None:
            return cached
        with self._lock:
            path_lock = self._path_locks.setdefault(path, threading.Lock())
        with path_lock:
            cached = self.get(path)
            if cached is not None:
                return cached
            try:
                table = build()
                self.put(path, table)
                return table
            finally:
                # Waiters already hold the lock object; later callers hit the table
                with self._lock:
                    self._path_locks.pop(path, None)

    def pending_builds(self) -> int:
        """Number of paths whose table is being built right now."""
        with self._lock:
            return len(self._path_locks)

    def clear(self) -> None:
        with self._lock:
            self._tables.clear()
            self._path_locks.clear()

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._tables

    def __len__(self) -> int:
        with self._lock:
            return len(self._tables)


_default_cache = ImportCache()


def get_import_cache() -> ImportCache:
    """The process-wide cache used when no cache is passed explicitly."""
    return _default_cache


def clear_import_cache() -> None:
    """Forget every cached module; call between independent runs and tests."""
    _default_cache.clear()


def is_relative_specifier(specifier: str) -> bool:
    return specifier.startswith(("./", "../", "/")) or specifier in (".", "..")


def locate_module(
    current_file_path: str,
    specifier: str,
    file_access: FileAccess,
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    index_basename: str = DEFAULT_INDEX_BASENAME,
) -> str | None:
    """Find the file a relative specifier points to.

    First match wins: the path as written, then the path with each extension
    appended, then ``<path>/index<ext>`` for each extension.

    Returns:
        Normalized absolute path, or None if nothing exists.
    """
    if not is_relative_specifier(specifier):
        return None

    base_dir = os.path.dirname(os.path.abspath(current_file_path))
    target = os.path.normpath(os.path.join(base_dir, specifier))

    candidates = [target]
    candidates.extend(target + ext for ext in extensions)
    candidates.extend(os.path.join(target, index_basename + ext) for ext in extensions)

    for candidate in candidates:
        if file_access.exists(candidate):
            return candidate
    return None


def get_exported_value(table: BindingTable, export_name: str) -> ResolvedValue | None:
    """Extract the binding an import asks for from a module's table.

    ``"*"`` yields an object of every binding that is not unresolved; a
    namespace object claims no knowledge it doesn't have.
    """
    if export_name == NAMESPACE_EXPORT:
        return ObjectValue(
            properties={name: value for name, value in table.items() if not is_unresolved(value)}
        )
    return table.get(export_name)


def resolve_import(
    current_file_path: str,
    specifier: str,
    export_name: str,
    build_table: Callable[[Module, str], BindingTable],
    file_access: FileAccess = DEFAULT_FILE_ACCESS,
    *,
    cache: ImportCache | None = None,
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    index_basename: str = DEFAULT_INDEX_BASENAME,
) -> ResolvedValue | None:
    """Resolve one imported binding.

    Args:
        current_file_path: File containing the import statement.
        specifier: Module specifier as written (``./tokens``).
        export_name: Requested export, ``"default"`` or ``"*"``.
        build_table: Builds the imported module's table; must not chase
            that module's own imports.
        file_access: File system capability.
        cache: Import cache; the process-wide one if omitted.
        extensions: Extensions probed when the specifier has none.
        index_basename: Entry file probed for directory specifiers.

    Returns:
        The exported value, or None when it cannot be determined.
    """
    cache = cache if cache is not None else _default_cache
    try:
        path = locate_module(current_file_path, specifier, file_access, extensions, index_basename)
        if path is None:
            raise ResolutionError.module_not_found(specifier, current_file_path)
        table = cache.get_or_build(path, lambda: _build_module_table(path, file_access, build_table))
        value = get_exported_value(table, export_name)
        if value is None:
            raise ResolutionError.export_missing(path, export_name)
        return value
    except ResolutionError as e:
        log.debug(
            "import_unresolved",
            error=e.error_name,
            specifier=specifier,
            export=export_name,
            importer=current_file_path,
        )
        return None


def _build_module_table(
    path: str,
    file_access: FileAccess,
    build_table: Callable[[Module, str], BindingTable],
) -> BindingTable:
    try:
        source = file_access.read(path)
    except (OSError, UnicodeDecodeError) as e:
        raise ResolutionError.read_failed(path, str(e)) from e

    try:
        module = parse_module(source, path)
        log.debug("import_parsed", path=path, errors=module.error_count)
        return build_table(module, path)
    except (ValueError, RecursionError) as e:
        raise ResolutionError.parse_failed(path, str(e) or type(e).__name__) from e
