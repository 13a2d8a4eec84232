"""Binding table construction for one file.

Declarations are evaluated in source order against the table built so far,
so a template initializer can use any string declared before it. Imports are
queued during the walk and resolved afterwards: reaching them needs file
I/O, and the local bindings must not depend on whether an import is found.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from statelint.resolver.expressions import resolve_expression
from statelint.resolver.imports import (
    DEFAULT_EXPORT,
    DEFAULT_EXTENSIONS,
    DEFAULT_FILE_ACCESS,
    DEFAULT_INDEX_BASENAME,
    FileAccess,
    ImportCache,
    resolve_import,
)
from statelint.resolver.nodes import (
    ExportDeclaration,
    ExportDefault,
    Expression,
    Identifier,
    ImportDeclaration,
    Module,
    ObjectExpression,
    StringLiteral,
    TemplateLiteral,
    TypeAssertion,
    VariableDeclaration,
)
from statelint.resolver.values import (
    UNRESOLVED,
    BindingTable,
    ObjectValue,
    ResolvedValue,
    StringValue,
)

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PendingImport:
    local: str
    imported: str
    source: str


def build_binding_table(
    module: Module,
    *,
    current_file_path: str | None = None,
    follow_imports: bool = True,
    file_access: FileAccess | None = None,
    cache: ImportCache | None = None,
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    index_basename: str = DEFAULT_INDEX_BASENAME,
) -> BindingTable:
    """Build the binding table of one file.

    Args:
        module: Lowered syntax tree of the file.
        current_file_path: Path of the file; imports are only chased with it.
        follow_imports: Chase relative imports (one level deep).
        file_access: File system capability for imported modules.
        cache: Import cache; the process-wide one if omitted.
        extensions: Extensions probed for extensionless specifiers.
        index_basename: Entry file probed for directory specifiers.

    Returns:
        Mapping of local name to resolved value. Re-declarations overwrite.
    """
    table: BindingTable = {}
    pending: list[PendingImport] = []

    for statement in module.body:
        if isinstance(statement, ImportDeclaration):
            pending.extend(
                PendingImport(local=spec.local, imported=spec.imported, source=statement.source)
                for spec in statement.specifiers
            )
        elif isinstance(statement, ExportDeclaration):
            _declare(statement.declaration, table)
        elif isinstance(statement, VariableDeclaration):
            _declare(statement, table)
        elif isinstance(statement, ExportDefault):
            table[DEFAULT_EXPORT] = extract_value(statement.expression, table)

    if not pending:
        return table

    if current_file_path is None or not follow_imports:
        for item in pending:
            table[item.local] = UNRESOLVED
        return table

    access = file_access if file_access is not None else DEFAULT_FILE_ACCESS

    def build_imported(imported: Module, path: str) -> BindingTable:
        # Imported modules never chase their own imports
        return build_binding_table(
            imported,
            current_file_path=path,
            follow_imports=False,
            file_access=access,
            cache=cache,
            extensions=extensions,
            index_basename=index_basename,
        )

    for item in pending:
        value = resolve_import(
            current_file_path,
            item.source,
            item.imported,
            build_imported,
            access,
            cache=cache,
            extensions=extensions,
            index_basename=index_basename,
        )
        table[item.local] = value if value is not None else UNRESOLVED

    log.debug(
        "bindings_built",
        path=current_file_path,
        bindings=len(table),
        imports=len(pending),
    )
    return table


def _declare(declaration: VariableDeclaration, table: BindingTable) -> None:
    for declarator in declaration.declarators:
        if declarator.name is not None and declarator.init is not None:
            table[declarator.name] = extract_value(declarator.init, table)


def extract_value(init: Expression, table: BindingTable) -> ResolvedValue:
    """Static shape of an initializer, given the bindings declared before it."""
    if isinstance(init, TypeAssertion):
        return extract_value(init.expression, table)

    if isinstance(init, StringLiteral):
        return StringValue(init.value)

    if isinstance(init, TemplateLiteral):
        # All or nothing: a binding is only usable as a single deterministic string
        parts: list[str] = []
        for index, quasi in enumerate(init.quasis):
            parts.append(quasi)
            if index < len(init.expressions):
                result = resolve_expression(init.expressions[index], table)
                if not result.fully_resolved:
                    return UNRESOLVED
                parts.append(result.text)
        return StringValue("".join(parts))

    if isinstance(init, ObjectExpression):
        properties: dict[str, ResolvedValue] = {}
        for prop in init.properties:
            if isinstance(prop.key, Identifier):
                key = prop.key.name
            elif isinstance(prop.key, StringLiteral):
                key = prop.key.value
            else:
                continue
            properties[key] = extract_value(prop.value, table)
        return ObjectValue(properties=properties)

    return UNRESOLVED
