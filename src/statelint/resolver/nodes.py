"""Dialect-neutral syntax tree consumed by the resolver.

Front ends (see ``parsing``) lower their concrete trees into these nodes. Only
the shapes the resolver distinguishes get their own class; every other
expression becomes an ``OpaqueExpression`` that keeps its kind and source
text for diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StringLiteral:
    value: str  # Cooked value (escapes decoded)


@dataclass(frozen=True, slots=True)
class TemplateLiteral:
    """A template string; ``quasis`` has exactly one more entry than ``expressions``."""

    quasis: tuple[str, ...]  # Raw text between substitutions
    expressions: tuple[Expression, ...] = ()


@dataclass(frozen=True, slots=True)
class Identifier:
    name: str


@dataclass(frozen=True, slots=True)
class MemberExpression:
    """``object.property`` (static) or ``object[property]`` (computed)."""

    object: Expression
    property: Expression
    computed: bool = False


@dataclass(frozen=True, slots=True)
class ConditionalExpression:
    test: Expression
    consequent: Expression
    alternate: Expression


@dataclass(frozen=True, slots=True)
class CallExpression:
    callee: Expression
    arguments: tuple[Expression, ...] = ()


@dataclass(frozen=True, slots=True)
class Property:
    key: Expression
    value: Expression


@dataclass(frozen=True, slots=True)
class ObjectExpression:
    properties: tuple[Property, ...] = ()


@dataclass(frozen=True, slots=True)
class TypeAssertion:
    """A type-only wrapper such as ``x as const`` or ``x satisfies T``."""

    expression: Expression


@dataclass(frozen=True, slots=True)
class OpaqueExpression:
    kind: str  # Front-end node type, e.g. "array", "binary_expression"
    text: str = ""


Expression: TypeAlias = (
    StringLiteral
    | TemplateLiteral
    | Identifier
    | MemberExpression
    | ConditionalExpression
    | CallExpression
    | ObjectExpression
    | TypeAssertion
    | OpaqueExpression
)

# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class VariableDeclarator:
    name: str | None  # None for destructuring patterns
    init: Expression | None = None


@dataclass(frozen=True, slots=True)
class VariableDeclaration:
    kind: str  # const, let, var
    declarators: tuple[VariableDeclarator, ...] = ()


@dataclass(frozen=True, slots=True)
class ExportDeclaration:
    declaration: VariableDeclaration


@dataclass(frozen=True, slots=True)
class ExportDefault:
    expression: Expression


@dataclass(frozen=True, slots=True)
class ImportSpecifier:
    local: str
    imported: str  # Exported name, "default", or "*" for a namespace import


@dataclass(frozen=True, slots=True)
class ImportDeclaration:
    source: str  # Module specifier as written
    specifiers: tuple[ImportSpecifier, ...] = ()


Statement: TypeAlias = VariableDeclaration | ExportDeclaration | ExportDefault | ImportDeclaration


@dataclass(frozen=True)
class Module:
    """Binding-relevant statements of one file, in depth-first source order."""

    body: tuple[Statement, ...] = ()
    path: str | None = None
    error_count: int = 0  # Syntax errors recovered while parsing
