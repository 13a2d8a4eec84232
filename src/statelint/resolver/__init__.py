"""Expression resolution engine.

Decides which literal class-name text a dynamically built class expression
can evaluate to, across local bindings, object property access,
conditionals, template strings and one level of relative imports.

Typical use, once per file::

    module = parse_module(source, path)
    table = build_binding_table(module, current_file_path=path)
    result = resolve_expression(expr, table)

Public API:
- build_binding_table: local name -> ResolvedValue for one file
- resolve_expression: ResolutionResult for one expression
- resolve_import / ImportCache / clear_import_cache: cross-file bindings
"""

from statelint.resolver.bindings import build_binding_table, extract_value
from statelint.resolver.expressions import (
    PASSTHROUGH_METHODS,
    render_expression,
    resolve_expression,
)
from statelint.resolver.imports import (
    DEFAULT_EXTENSIONS,
    DEFAULT_FILE_ACCESS,
    FileAccess,
    ImportCache,
    LocalFileAccess,
    clear_import_cache,
    get_exported_value,
    get_import_cache,
    locate_module,
    resolve_import,
)
from statelint.resolver.parsing import parse_expression, parse_module, parse_source
from statelint.resolver.values import (
    UNRESOLVED,
    BindingTable,
    ObjectValue,
    ResolutionResult,
    ResolvedValue,
    StringValue,
    UnresolvedValue,
)

__all__ = [
    # Bindings
    "build_binding_table",
    "extract_value",
    # Expressions
    "PASSTHROUGH_METHODS",
    "render_expression",
    "resolve_expression",
    # Imports
    "DEFAULT_EXTENSIONS",
    "DEFAULT_FILE_ACCESS",
    "FileAccess",
    "ImportCache",
    "LocalFileAccess",
    "clear_import_cache",
    "get_exported_value",
    "get_import_cache",
    "locate_module",
    "resolve_import",
    # Parsing
    "parse_expression",
    "parse_module",
    "parse_source",
    # Values
    "UNRESOLVED",
    "BindingTable",
    "ObjectValue",
    "ResolutionResult",
    "ResolvedValue",
    "StringValue",
    "UnresolvedValue",
]
