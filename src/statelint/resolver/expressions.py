"""Expression resolution: reduce a class expression to literal text.

``resolve_expression`` is a pure function of an expression node and a binding
table. It never raises for unknown shapes; whatever it cannot reduce is
reported as an unresolved fragment rendered by ``render_expression``.

Conditionals and computed member access are resolved by unioning every
branch. That over-approximates on purpose: a state class present in any
branch counts as present, even though the branch taken at runtime is unknown.
"""

from __future__ import annotations

from statelint.resolver.nodes import (
    CallExpression,
    ConditionalExpression,
    Expression,
    Identifier,
    MemberExpression,
    StringLiteral,
    TemplateLiteral,
    TypeAssertion,
)
from statelint.resolver.values import (
    BindingTable,
    ObjectValue,
    ResolutionResult,
    ResolvedValue,
    StringValue,
    collect_strings,
)

# String methods that don't change which class names a string contains
PASSTHROUGH_METHODS = frozenset(
    {
        "trim",
        "trimStart",
        "trimEnd",
        "trimLeft",
        "trimRight",
        "replace",
        "replaceAll",
        "normalize",
        "toLowerCase",
        "toUpperCase",
    }
)

PLACEHOLDER = "<expr>"


def resolve_expression(expr: Expression, table: BindingTable) -> ResolutionResult:
    """Resolve an expression against a file's binding table.

    Args:
        expr: Expression node, typically a class attribute value.
        table: Bindings of the file the expression appears in.

    Returns:
        ResolutionResult with the reconstructed text and the rendering of
        every sub-expression that could not be reduced.
    """
    if isinstance(expr, StringLiteral):
        return ResolutionResult.resolved(expr.value)

    if isinstance(expr, Identifier):
        value = table.get(expr.name)
        if isinstance(value, StringValue):
            return ResolutionResult.resolved(value.value)
        return ResolutionResult.unresolved(expr.name)

    if isinstance(expr, MemberExpression):
        return _resolve_member(expr, table)

    if isinstance(expr, ConditionalExpression):
        consequent = resolve_expression(expr.consequent, table)
        alternate = resolve_expression(expr.alternate, table)
        text = " ".join(part for part in (consequent.text, alternate.text) if part)
        return ResolutionResult(
            text=text,
            unresolved_fragments=consequent.unresolved_fragments + alternate.unresolved_fragments,
        )

    if isinstance(expr, TemplateLiteral):
        return _resolve_template(expr, table)

    if isinstance(expr, CallExpression):
        return _resolve_call(expr, table)

    if isinstance(expr, TypeAssertion):
        return resolve_expression(expr.expression, table)

    return ResolutionResult.unresolved(render_expression(expr))


def _resolve_member(expr: MemberExpression, table: BindingTable) -> ResolutionResult:
    base = _member_base(expr.object, table)

    if isinstance(base, ObjectValue):
        if expr.computed:
            # The selected key is only known at runtime: union every leaf.
            return ResolutionResult.resolved(" ".join(collect_strings(base)))
        if isinstance(expr.property, Identifier):
            leaf = base.get(expr.property.name)
            if isinstance(leaf, StringValue):
                return ResolutionResult.resolved(leaf.value)

    # Unknown base, missing key, or an object leaf where a string is needed
    return ResolutionResult.unresolved(render_expression(expr))


def _member_base(expr: Expression, table: BindingTable) -> ResolvedValue | None:
    """Walk a chain of static property accesses down to the value it names."""
    if isinstance(expr, Identifier):
        return table.get(expr.name)
    if isinstance(expr, TypeAssertion):
        return _member_base(expr.expression, table)
    if isinstance(expr, MemberExpression) and not expr.computed:
        parent = _member_base(expr.object, table)
        if isinstance(parent, ObjectValue) and isinstance(expr.property, Identifier):
            return parent.get(expr.property.name)
    return None


def _resolve_template(expr: TemplateLiteral, table: BindingTable) -> ResolutionResult:
    parts: list[str] = []
    unresolved: list[str] = []

    for index, quasi in enumerate(expr.quasis):
        parts.append(quasi)
        if index < len(expr.expressions):
            result = resolve_expression(expr.expressions[index], table)
            # Keep whatever text was recovered, resolved or not
            parts.append(result.text)
            unresolved.extend(result.unresolved_fragments)

    return ResolutionResult(text="".join(parts), unresolved_fragments=tuple(unresolved))


def _resolve_call(expr: CallExpression, table: BindingTable) -> ResolutionResult:
    callee = expr.callee
    if (
        isinstance(callee, MemberExpression)
        and not callee.computed
        and isinstance(callee.property, Identifier)
        and callee.property.name in PASSTHROUGH_METHODS
    ):
        # Arguments are ignored: replace("a", "b") is treated as identity.
        return resolve_expression(callee.object, table)

    return ResolutionResult.unresolved(render_expression(expr))


def render_expression(expr: Expression) -> str:
    """Human-readable pointer to an expression, for diagnostics only.

    Names and property chains are reproduced exactly
    (``tokens.effects.focusRing``, ``variantClasses[variant]``); anything
    else becomes a placeholder.
    """
    if isinstance(expr, Identifier):
        return expr.name
    if isinstance(expr, MemberExpression):
        base = render_expression(expr.object)
        if expr.computed:
            return f"{base}[{render_expression(expr.property)}]"
        if isinstance(expr.property, Identifier):
            return f"{base}.{expr.property.name}"
        return f"{base}.{PLACEHOLDER}"
    if isinstance(expr, StringLiteral):
        return f'"{expr.value}"'
    return PLACEHOLDER
