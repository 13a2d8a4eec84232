"""Tests for resolver/imports.py.

Covers:
- locate_module probing order (as written, extensions, index files)
- get_exported_value for named, default and namespace exports
- resolve_import failure modes (all degrade to None)
- ImportCache idempotence, clearing and concurrent builds
"""

from __future__ import annotations

import threading
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from statelint.core.errors import ErrorCode, ResolutionError
from statelint.resolver import (
    UNRESOLVED,
    BindingTable,
    ImportCache,
    LocalFileAccess,
    ObjectValue,
    StringValue,
    build_binding_table,
    clear_import_cache,
    get_exported_value,
    get_import_cache,
    locate_module,
    parse_module,
    resolve_import,
)
from statelint.resolver.imports import is_relative_specifier

COMPONENT = "/project/src/Component.tsx"


def build_shallow(module, path: str) -> BindingTable:
    return build_binding_table(module, current_file_path=path, follow_imports=False)


class TestIsRelativeSpecifier:
    @pytest.mark.parametrize("specifier", ["./tokens", "../theme", "/abs/path", ".", ".."])
    def test_relative(self, specifier: str) -> None:
        assert is_relative_specifier(specifier) is True

    @pytest.mark.parametrize("specifier", ["react", "@scope/pkg", "clsx/lite", ".hidden", ""])
    def test_bare(self, specifier: str) -> None:
        assert is_relative_specifier(specifier) is False


class TestLocateModule:
    """First existing candidate wins."""

    def test_path_as_written(self, memory_files) -> None:
        files = memory_files({"/project/src/tokens.ts": ""})

        assert locate_module(COMPONENT, "./tokens.ts", files) == "/project/src/tokens.ts"

    def test_extension_order(self, memory_files) -> None:
        files = memory_files({"/project/src/tokens.js": "", "/project/src/tokens.tsx": ""})

        assert locate_module(COMPONENT, "./tokens", files) == "/project/src/tokens.tsx"

    def test_ts_before_everything(self, memory_files) -> None:
        files = memory_files(
            {
                "/project/src/tokens.ts": "",
                "/project/src/tokens.jsx": "",
                "/project/src/tokens/index.ts": "",
            }
        )

        assert locate_module(COMPONENT, "./tokens", files) == "/project/src/tokens.ts"

    def test_index_file(self, memory_files) -> None:
        files = memory_files({"/project/src/theme/index.js": ""})

        assert locate_module(COMPONENT, "./theme", files) == "/project/src/theme/index.js"

    def test_sibling_file_beats_index(self, memory_files) -> None:
        files = memory_files({"/project/src/theme/index.ts": "", "/project/src/theme.jsx": ""})

        assert locate_module(COMPONENT, "./theme", files) == "/project/src/theme.jsx"

    def test_parent_directory(self, memory_files) -> None:
        files = memory_files({"/project/shared/tokens.ts": ""})

        assert locate_module(COMPONENT, "../shared/tokens", files) == "/project/shared/tokens.ts"

    def test_not_found(self, memory_files) -> None:
        assert locate_module(COMPONENT, "./missing", memory_files()) is None

    def test_bare_specifier_is_not_probed(self, memory_files) -> None:
        files = memory_files({"/project/src/react.ts": ""})

        assert locate_module(COMPONENT, "react", files) is None

    def test_custom_extensions_and_index(self, memory_files) -> None:
        files = memory_files({"/project/src/theme/main.mjs": "", "/project/src/theme/index.ts": ""})

        found = locate_module(COMPONENT, "./theme", files, extensions=(".mjs",), index_basename="main")

        assert found == "/project/src/theme/main.mjs"

    def test_directory_falls_through_to_index(self, tmp_path: Path) -> None:
        """A directory named like the specifier is not a module."""
        (tmp_path / "theme").mkdir()
        (tmp_path / "theme" / "index.ts").write_text('export const a = "x";')
        component = tmp_path / "Button.tsx"

        found = locate_module(str(component), "./theme", LocalFileAccess())

        assert found == str(tmp_path / "theme" / "index.ts")


class TestGetExportedValue:
    def test_named(self) -> None:
        table: BindingTable = {"a": StringValue("x")}

        assert get_exported_value(table, "a") == StringValue("x")

    def test_missing(self) -> None:
        assert get_exported_value({"a": StringValue("x")}, "b") is None

    def test_unresolved_binding_is_returned(self) -> None:
        assert get_exported_value({"a": UNRESOLVED}, "a") is UNRESOLVED

    def test_default(self) -> None:
        table: BindingTable = {"default": ObjectValue({"k": StringValue("v")})}

        assert get_exported_value(table, "default") == ObjectValue({"k": StringValue("v")})

    def test_namespace_excludes_unresolved(self) -> None:
        table: BindingTable = {
            "a": StringValue("x"),
            "b": UNRESOLVED,
            "c": ObjectValue({"d": StringValue("y")}),
        }

        value = get_exported_value(table, "*")

        assert value == ObjectValue({"a": StringValue("x"), "c": ObjectValue({"d": StringValue("y")})})

    def test_namespace_of_empty_module(self) -> None:
        assert get_exported_value({}, "*") == ObjectValue({})


class TestResolveImport:
    """resolve_import never raises; every failure is None."""

    def test_resolves_named_export(self, memory_files) -> None:
        files = memory_files({"/project/src/tokens.ts": 'export const ring = "ring-2";'})

        value = resolve_import(COMPONENT, "./tokens", "ring", build_shallow, files)

        assert value == StringValue("ring-2")

    def test_missing_module(self, memory_files) -> None:
        assert resolve_import(COMPONENT, "./tokens", "ring", build_shallow, memory_files()) is None

    def test_missing_export(self, memory_files) -> None:
        files = memory_files({"/project/src/tokens.ts": 'export const ring = "ring-2";'})

        assert resolve_import(COMPONENT, "./tokens", "shadow", build_shallow, files) is None

    def test_unreadable_file(self, memory_files) -> None:
        files = memory_files({"/project/src/tokens.ts": 'export const ring = "ring-2";'})
        files.unreadable.add("/project/src/tokens.ts")

        assert resolve_import(COMPONENT, "./tokens", "ring", build_shallow, files) is None

    def test_failed_read_is_not_cached(self, memory_files) -> None:
        files = memory_files({"/project/src/tokens.ts": 'export const ring = "ring-2";'})
        files.unreadable.add("/project/src/tokens.ts")
        resolve_import(COMPONENT, "./tokens", "ring", build_shallow, files)

        files.unreadable.clear()
        value = resolve_import(COMPONENT, "./tokens", "ring", build_shallow, files)

        assert value == StringValue("ring-2")
        assert "/project/src/tokens.ts" in get_import_cache()

    def test_unsupported_language(self, memory_files) -> None:
        files = memory_files({"/project/src/styles.css": ".btn { color: red; }"})

        assert resolve_import(COMPONENT, "./styles.css", "default", build_shallow, files) is None

    def test_unsupported_language_is_not_cached(self, memory_files) -> None:
        files = memory_files({"/project/src/Button.module.css": ".btn { color: red; }"})

        resolve_import(COMPONENT, "./Button.module.css", "default", build_shallow, files)

        assert "/project/src/Button.module.css" not in get_import_cache()
        assert get_import_cache().pending_builds() == 0

    def test_out_of_range_code_point_escape_is_kept_raw(self, memory_files) -> None:
        files = memory_files({"/project/src/icons.ts": 'export const icon = "a\\u{FFFFFF}b";'})

        value = resolve_import(COMPONENT, "./icons", "icon", build_shallow, files)

        assert value == StringValue("a\\u{FFFFFF}b")

    def test_deeply_nested_module_is_unresolved(self, memory_files) -> None:
        nested = "(" * 3000 + '"x"' + ")" * 3000
        files = memory_files({"/project/src/deep.ts": f'export const ok = "y";\nexport const deep = {nested};'})

        with patch("statelint.resolver.imports.log") as mock_log:
            value = resolve_import(COMPONENT, "./deep", "ok", build_shallow, files)

        assert value is None
        assert mock_log.debug.call_args.kwargs["error"] == "MODULE_PARSE_ERROR"
        assert "/project/src/deep.ts" not in get_import_cache()

    def test_syntax_errors_do_not_abort(self, memory_files) -> None:
        files = memory_files({"/project/src/tokens.ts": 'export const ok = "yes";\nconst broken = {;'})

        value = resolve_import(COMPONENT, "./tokens", "ok", build_shallow, files)

        assert value == StringValue("yes")

    def test_failure_is_logged_at_debug(self, memory_files) -> None:
        with patch("statelint.resolver.imports.log") as mock_log:
            resolve_import(COMPONENT, "./missing", "a", build_shallow, memory_files())

        mock_log.debug.assert_called_once()
        event = mock_log.debug.call_args.args[0]
        assert event == "import_unresolved"
        assert mock_log.debug.call_args.kwargs["error"] == "MODULE_NOT_FOUND"

    def test_reads_real_files(self, tmp_path: Path) -> None:
        (tmp_path / "tokens.ts").write_text('export const tokens = { ring: "ring-2" };', encoding="utf-8")

        value = resolve_import(str(tmp_path / "Button.tsx"), "./tokens", "tokens", build_shallow)

        assert value == ObjectValue({"ring": StringValue("ring-2")})


class TestImportCaching:
    """Each module is read and parsed once per cache lifetime."""

    def test_module_parsed_once(self, memory_files) -> None:
        files = memory_files({"/project/src/tokens.ts": 'export const a = "x";\nexport const b = "y";'})

        with patch("statelint.resolver.imports.parse_module", wraps=parse_module) as spy:
            first = resolve_import(COMPONENT, "./tokens", "a", build_shallow, files)
            second = resolve_import("/project/src/Other.tsx", "./tokens.ts", "b", build_shallow, files)

        assert first == StringValue("x")
        assert second == StringValue("y")
        assert spy.call_count == 1
        assert files.reads["/project/src/tokens.ts"] == 1

    def test_cached_table_ignores_later_edits(self, memory_files) -> None:
        files = memory_files({"/project/src/tokens.ts": 'export const a = "old";'})
        resolve_import(COMPONENT, "./tokens", "a", build_shallow, files)

        files.files["/project/src/tokens.ts"] = 'export const a = "new";'

        assert resolve_import(COMPONENT, "./tokens", "a", build_shallow, files) == StringValue("old")

    def test_clear_import_cache_picks_up_edits(self, memory_files) -> None:
        files = memory_files({"/project/src/tokens.ts": 'export const a = "old";'})
        resolve_import(COMPONENT, "./tokens", "a", build_shallow, files)
        files.files["/project/src/tokens.ts"] = 'export const a = "new";'

        clear_import_cache()

        assert resolve_import(COMPONENT, "./tokens", "a", build_shallow, files) == StringValue("new")

    def test_explicit_cache_is_isolated(self, memory_files) -> None:
        files = memory_files({"/project/src/tokens.ts": 'export const a = "x";'})
        cache = ImportCache()

        resolve_import(COMPONENT, "./tokens", "a", build_shallow, files, cache=cache)

        assert "/project/src/tokens.ts" in cache
        assert len(get_import_cache()) == 0

    def test_cache_keyed_by_resolved_path(self, memory_files) -> None:
        files = memory_files({"/project/src/theme/index.ts": 'export const a = "x";'})
        cache = ImportCache()

        resolve_import(COMPONENT, "./theme", "a", build_shallow, files, cache=cache)
        resolve_import("/project/src/theme/Button.tsx", "./index", "a", build_shallow, files, cache=cache)
        resolve_import("/project/src/nested/Deep.tsx", "../theme/index.ts", "a", build_shallow, files, cache=cache)

        assert len(cache) == 1
        assert files.reads["/project/src/theme/index.ts"] == 1


class TestImportCache:
    def test_get_or_build_stores(self) -> None:
        cache = ImportCache()
        table: BindingTable = {"a": StringValue("x")}

        assert cache.get_or_build("/m.ts", lambda: table) is table
        assert cache.get("/m.ts") is table
        assert cache.get_or_build("/m.ts", lambda: {}) is table

    def test_failed_build_stores_nothing(self) -> None:
        cache = ImportCache()

        def fail() -> BindingTable:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            cache.get_or_build("/m.ts", fail)

        assert "/m.ts" not in cache
        assert cache.pending_builds() == 0

    def test_resolution_error_propagates(self) -> None:
        cache = ImportCache()

        def fail() -> BindingTable:
            raise ResolutionError.read_failed("/m.ts", "denied")

        with pytest.raises(ResolutionError) as exc_info:
            cache.get_or_build("/m.ts", fail)

        assert exc_info.value.code == ErrorCode.MODULE_READ_ERROR
        assert "/m.ts" not in cache

    def test_path_lock_released_after_build(self) -> None:
        cache = ImportCache()

        for i in range(5):
            cache.get_or_build(f"/m{i}.ts", dict)

        assert len(cache) == 5
        assert cache.pending_builds() == 0

    def test_clear(self) -> None:
        cache = ImportCache()
        cache.put("/m.ts", {})

        cache.clear()

        assert len(cache) == 0
        assert cache.get("/m.ts") is None

    def test_concurrent_builds_run_once(self) -> None:
        cache = ImportCache()
        calls = 0
        calls_lock = threading.Lock()
        results: list[BindingTable] = []

        def build() -> BindingTable:
            nonlocal calls
            with calls_lock:
                calls += 1
            time.sleep(0.05)
            return {"a": StringValue("x")}

        def worker() -> None:
            results.append(cache.get_or_build("/m.ts", build))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert calls == 1
        assert len(results) == 8
        assert all(r is results[0] for r in results)

    def test_different_paths_build_independently(self) -> None:
        cache = ImportCache()

        cache.get_or_build("/a.ts", lambda: {"a": StringValue("1")})
        cache.get_or_build("/b.ts", lambda: {"b": StringValue("2")})

        assert len(cache) == 2


class TestImportedModuleDepth:
    """Imported modules never chase their own imports."""

    def test_reexport_is_unresolved(self, build_table, memory_files) -> None:
        files = memory_files(
            {
                "/project/src/index.ts": 'export { ring } from "./tokens";\nimport { ring } from "./tokens";',
                "/project/src/tokens.ts": 'export const ring = "ring-2";',
            }
        )

        table = build_table('import { ring } from "./index";', current_file_path=COMPONENT, file_access=files)

        assert table["ring"] is UNRESOLVED
        assert files.reads["/project/src/tokens.ts"] == 0

    def test_cyclic_imports_terminate(self, build_table, memory_files) -> None:
        files = memory_files(
            {
                "/project/src/a.ts": 'import { b } from "./b";\nexport const a = "from-a";',
                "/project/src/b.ts": 'import { a } from "./a";\nexport const b = "from-b";',
            }
        )

        table = build_table(
            'import { a } from "./a";\nimport { b } from "./b";',
            current_file_path=COMPONENT,
            file_access=files,
        )

        assert table == {"a": StringValue("from-a"), "b": StringValue("from-b")}
