"""Lower tree-sitter JavaScript/TypeScript trees to resolver nodes.

Expressions keep only the structure the resolver distinguishes; everything
else becomes ``OpaqueExpression``. Statements are collected from the whole
file (function bodies included) in depth-first source order.
"""

from __future__ import annotations

import re
import sys
from typing import Any

from statelint.resolver.nodes import (
    CallExpression,
    ConditionalExpression,
    ExportDeclaration,
    ExportDefault,
    Expression,
    Identifier,
    ImportDeclaration,
    ImportSpecifier,
    MemberExpression,
    ObjectExpression,
    OpaqueExpression,
    Property,
    Statement,
    StringLiteral,
    TemplateLiteral,
    TypeAssertion,
    VariableDeclaration,
    VariableDeclarator,
)

_DECLARATION_TYPES = frozenset({"lexical_declaration", "variable_declaration"})

# TS wrappers that only carry type information
_TYPE_WRAPPERS = frozenset({"as_expression", "satisfies_expression", "non_null_expression"})

_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|[0-7]{1,3}|\r\n|[\s\S])")

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "\n": "",  # line continuation
    "\r\n": "",
    "\r": "",
    "\u2028": "",
    "\u2029": "",
}


def cook_string(raw: str) -> str:
    """Decode JavaScript escape sequences in a string literal body."""

    def replace(match: re.Match[str]) -> str:
        seq = match.group(1)
        if seq in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[seq]
        if seq.startswith("u{"):
            code_point = int(seq[2:-1], 16)
            if code_point > sys.maxunicode:
                return match.group(0)
            return chr(code_point)
        if seq[0] in "ux" and len(seq) > 1:
            return chr(int(seq[1:], 16))
        if seq[0] in "01234567":
            return chr(int(seq, 8))
        return seq

    return _ESCAPE_RE.sub(replace, raw)


def node_text(node: Any, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def _named(node: Any) -> list[Any]:
    return [child for child in node.named_children if child.type != "comment"]


def _string_value(node: Any, source: bytes) -> str:
    return cook_string(node_text(node, source)[1:-1])


def lower_expression(node: Any, source: bytes) -> Expression:
    """Lower one tree-sitter expression node."""
    kind = node.type

    if kind == "parenthesized_expression":
        inner = _named(node)
        if len(inner) == 1:
            return lower_expression(inner[0], source)

    elif kind == "string":
        return StringLiteral(_string_value(node, source))

    elif kind == "template_string":
        return _lower_template(node, source)

    elif kind in ("identifier", "undefined"):
        return Identifier(node_text(node, source))

    elif kind == "member_expression":
        obj = node.child_by_field_name("object")
        prop = node.child_by_field_name("property")
        if obj is not None and prop is not None:
            return MemberExpression(
                object=lower_expression(obj, source),
                property=Identifier(node_text(prop, source)),
            )

    elif kind == "subscript_expression":
        obj = node.child_by_field_name("object")
        index = node.child_by_field_name("index")
        if obj is not None and index is not None:
            return MemberExpression(
                object=lower_expression(obj, source),
                property=lower_expression(index, source),
                computed=True,
            )

    elif kind == "ternary_expression":
        test = node.child_by_field_name("condition")
        consequent = node.child_by_field_name("consequence")
        alternate = node.child_by_field_name("alternative")
        if test is not None and consequent is not None and alternate is not None:
            return ConditionalExpression(
                test=lower_expression(test, source),
                consequent=lower_expression(consequent, source),
                alternate=lower_expression(alternate, source),
            )

    elif kind == "call_expression":
        callee = node.child_by_field_name("function")
        args = node.child_by_field_name("arguments")
        if callee is not None:
            if args is None:
                arguments: tuple[Expression, ...] = ()
            elif args.type == "template_string":
                arguments = (lower_expression(args, source),)
            else:
                arguments = tuple(lower_expression(arg, source) for arg in _named(args))
            return CallExpression(callee=lower_expression(callee, source), arguments=arguments)

    elif kind == "object":
        return _lower_object(node, source)

    elif kind in _TYPE_WRAPPERS:
        inner = _named(node)
        if inner:
            return TypeAssertion(lower_expression(inner[0], source))

    return OpaqueExpression(kind=kind, text=node_text(node, source))


def _lower_template(node: Any, source: bytes) -> TemplateLiteral:
    # Quasis are sliced from the source between substitutions so they stay raw
    quasis: list[str] = []
    expressions: list[Expression] = []
    cursor = node.start_byte + 1  # past the opening backtick

    for child in node.children:
        if child.type != "template_substitution":
            continue
        quasis.append(source[cursor : child.start_byte].decode("utf-8", errors="replace"))
        inner = _named(child)
        if inner:
            expressions.append(lower_expression(inner[0], source))
        else:
            expressions.append(OpaqueExpression(kind="template_substitution"))
        cursor = child.end_byte

    quasis.append(source[cursor : max(cursor, node.end_byte - 1)].decode("utf-8", errors="replace"))
    return TemplateLiteral(quasis=tuple(quasis), expressions=tuple(expressions))


def _lower_object(node: Any, source: bytes) -> ObjectExpression:
    properties: list[Property] = []
    for child in _named(node):
        if child.type == "pair":
            key = child.child_by_field_name("key")
            value = child.child_by_field_name("value")
            if key is None or value is None:
                continue
            properties.append(Property(key=_lower_key(key, source), value=lower_expression(value, source)))
        elif child.type == "shorthand_property_identifier":
            name = node_text(child, source)
            properties.append(Property(key=Identifier(name), value=Identifier(name)))
        # Spreads and methods carry no literal key/value pair
    return ObjectExpression(properties=tuple(properties))


def _lower_key(node: Any, source: bytes) -> Expression:
    if node.type == "property_identifier":
        return Identifier(node_text(node, source))
    if node.type == "string":
        return StringLiteral(_string_value(node, source))
    return OpaqueExpression(kind=node.type, text=node_text(node, source))


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


def lower_statements(root: Any, source: bytes) -> tuple[Statement, ...]:
    """Collect declarations, exports and imports in depth-first pre-order."""
    statements: list[Statement] = []
    stack = [root]

    while stack:
        node = stack.pop()
        children = node.named_children

        if node.type == "import_statement":
            statements.append(_lower_import(node, source))
            continue

        if node.type in _DECLARATION_TYPES:
            statements.append(_lower_declaration(node, source))
        elif node.type == "export_statement":
            declaration = node.child_by_field_name("declaration")
            value = node.child_by_field_name("value")
            if declaration is not None and declaration.type in _DECLARATION_TYPES:
                statements.append(ExportDeclaration(_lower_declaration(declaration, source)))
                # Only descend into the initializers, not the declaration itself again
                children = declaration.named_children
            elif value is not None:
                statements.append(ExportDefault(lower_expression(value, source)))

        stack.extend(reversed(children))

    return tuple(statements)


def _lower_declaration(node: Any, source: bytes) -> VariableDeclaration:
    kind = node_text(node.children[0], source) if node.children else "var"
    declarators: list[VariableDeclarator] = []
    for child in _named(node):
        if child.type != "variable_declarator":
            continue
        name_node = child.child_by_field_name("name")
        value_node = child.child_by_field_name("value")
        name = node_text(name_node, source) if name_node is not None and name_node.type == "identifier" else None
        init = lower_expression(value_node, source) if value_node is not None else None
        declarators.append(VariableDeclarator(name=name, init=init))
    return VariableDeclaration(kind=kind, declarators=tuple(declarators))


def _lower_import(node: Any, source: bytes) -> ImportDeclaration:
    source_node = node.child_by_field_name("source")
    specifier = _string_value(source_node, source) if source_node is not None else ""
    specifiers: list[ImportSpecifier] = []

    for clause in _named(node):
        if clause.type != "import_clause":
            continue
        for part in _named(clause):
            if part.type == "identifier":
                specifiers.append(ImportSpecifier(local=node_text(part, source), imported="default"))
            elif part.type == "namespace_import":
                names = [c for c in _named(part) if c.type == "identifier"]
                if names:
                    specifiers.append(ImportSpecifier(local=node_text(names[0], source), imported="*"))
            elif part.type == "named_imports":
                specifiers.extend(_lower_named_imports(part, source))

    return ImportDeclaration(source=specifier, specifiers=tuple(specifiers))


def _lower_named_imports(node: Any, source: bytes) -> list[ImportSpecifier]:
    specifiers: list[ImportSpecifier] = []
    for spec in _named(node):
        if spec.type != "import_specifier":
            continue
        name = spec.child_by_field_name("name")
        if name is None:
            continue
        alias = spec.child_by_field_name("alias")
        imported = _export_name(name, source)
        local = _export_name(alias, source) if alias is not None else imported
        specifiers.append(ImportSpecifier(local=local, imported=imported))
    return specifiers


def _export_name(node: Any, source: bytes) -> str:
    # import { "quoted name" as x } is legal
    if node.type == "string":
        return _string_value(node, source)
    return node_text(node, source)
