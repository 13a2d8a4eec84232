"""Class attribute extraction for JSX/TSX component markup.

Builds the file's binding table once, then resolves every class attribute
(``className`` by default) on every JSX element. String attribute values are
literal; ``{expr}`` values go through the expression resolver.

``extract_interactive_elements`` goes one step further and reports the
elements a user can interact with, together with the state variants their
resolved class list carries and the attributes that make a state relevant
(``disabled``, validation constraints, ``placeholder``).
"""

from __future__ import annotations

import html
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

import structlog

from statelint.core.errors import ResolutionError
from statelint.markup.states import (
    INTERACTIVE_TAGS,
    extract_states,
    has_state_variant,
    is_non_interactive,
    is_visually_hidden,
)
from statelint.resolver.bindings import build_binding_table
from statelint.resolver.expressions import PLACEHOLDER, resolve_expression
from statelint.resolver.imports import (
    DEFAULT_EXTENSIONS,
    DEFAULT_INDEX_BASENAME,
    FileAccess,
    ImportCache,
)
from statelint.resolver.lowering import lower_expression, node_text
from statelint.resolver.parsing import lower_module, parse_source
from statelint.resolver.values import BindingTable, ResolutionResult

log = structlog.get_logger(__name__)

DEFAULT_ATTRIBUTE_NAMES: tuple[str, ...] = ("className", "class")

_ELEMENT_TYPES = frozenset({"jsx_opening_element", "jsx_self_closing_element"})

# Attributes that let the browser flag the element as :invalid
_VALIDATION_ATTRIBUTES = frozenset({"required", "pattern", "min", "max", "minLength", "maxLength"})
_VALIDATED_INPUT_TYPES = frozenset({"email", "url", "number"})

_ROLE_ELEMENT_TYPES = {"button": "role-button", "link": "role-link"}


@dataclass(frozen=True)
class ClassAttribute:
    """One resolved class attribute on a JSX element."""

    tag: str
    attribute: str
    line: int  # 1-indexed line of the element
    result: ResolutionResult

    @property
    def states(self) -> tuple[str, ...]:
        return extract_states(self.result.text)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tag": self.tag,
            "attribute": self.attribute,
            "line": self.line,
            **self.result.to_dict(),
            "states": list(self.states),
        }


@dataclass(frozen=True)
class InteractiveElement:
    """A JSX element that takes focus or pointer input.

    ``element_type`` is the tag for native controls, ``role-button`` or
    ``role-link`` for elements given those roles, and the plain tag for
    content regions (non-interactive elements with ``tabIndex={0}``).
    """

    element_type: str
    tag: str
    line: int
    class_name: ResolutionResult
    is_content_region: bool = False
    can_be_disabled: bool = False
    has_conditional_disabled: bool = False
    can_be_invalid: bool = False
    has_placeholder: bool = False
    is_radio_or_checkbox: bool = False

    @property
    def states(self) -> tuple[str, ...]:
        return extract_states(self.class_name.text)

    def to_dict(self) -> dict[str, Any]:
        return {
            "element_type": self.element_type,
            "tag": self.tag,
            "line": self.line,
            **self.class_name.to_dict(),
            "states": list(self.states),
            "is_content_region": self.is_content_region,
            "can_be_disabled": self.can_be_disabled,
            "has_conditional_disabled": self.has_conditional_disabled,
            "can_be_invalid": self.can_be_invalid,
            "has_placeholder": self.has_placeholder,
            "is_radio_or_checkbox": self.is_radio_or_checkbox,
        }


def extract_class_attributes(
    source: str | bytes,
    file_path: str,
    *,
    follow_imports: bool = True,
    file_access: FileAccess | None = None,
    cache: ImportCache | None = None,
    attribute_names: Iterable[str] = DEFAULT_ATTRIBUTE_NAMES,
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    index_basename: str = DEFAULT_INDEX_BASENAME,
) -> list[ClassAttribute]:
    """Resolve every class attribute in a component file.

    Args:
        source: File content.
        file_path: Path of the file; relative imports are resolved from it.
        follow_imports: Chase relative imports one level deep.
        file_access: File system capability for imported modules.
        cache: Import cache; the process-wide one if omitted.
        attribute_names: JSX attribute names that carry class lists.
        extensions: Extensions probed for extensionless import specifiers.
        index_basename: Entry file probed for directory specifiers.

    Returns:
        ClassAttribute per attribute, in source order.

    Raises:
        ResolutionError: file_path has no supported grammar, or its
            expressions nest too deeply to lower.
    """
    root, source_bytes, table = _load(
        source,
        file_path,
        follow_imports=follow_imports,
        file_access=file_access,
        cache=cache,
        extensions=extensions,
        index_basename=index_basename,
    )

    names = frozenset(attribute_names)
    attributes: list[ClassAttribute] = []
    for element in _elements(root):
        attributes.extend(_element_attributes(element, source_bytes, table, names))

    log.debug(
        "class_attributes_extracted",
        path=file_path,
        count=len(attributes),
        unresolved=sum(1 for a in attributes if not a.result.fully_resolved),
    )
    return attributes


def extract_interactive_elements(
    source: str | bytes,
    file_path: str,
    *,
    follow_imports: bool = True,
    file_access: FileAccess | None = None,
    cache: ImportCache | None = None,
    attribute_names: Iterable[str] = DEFAULT_ATTRIBUTE_NAMES,
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    index_basename: str = DEFAULT_INDEX_BASENAME,
) -> list[InteractiveElement]:
    """Report the interactive elements of a component file.

    An element is reported when it is a native control (``button``, ``a``,
    ``input``, ``select``, ``textarea``), has ``role="button"`` or
    ``role="link"``, or is a content region (``tabIndex={0}``). Skipped:
    visually hidden or ``pointer-events-none`` elements, ``tabIndex={-1}``,
    file inputs, labels, and non-interactive wrappers that only carry
    state styling.

    Takes the same arguments as extract_class_attributes. When an element
    has several class attributes the last one is used.
    """
    root, source_bytes, table = _load(
        source,
        file_path,
        follow_imports=follow_imports,
        file_access=file_access,
        cache=cache,
        extensions=extensions,
        index_basename=index_basename,
    )

    names = frozenset(attribute_names)
    elements = [
        found
        for element in _elements(root)
        if (found := _classify(element, source_bytes, table, names)) is not None
    ]
    log.debug("interactive_elements_extracted", path=file_path, count=len(elements))
    return elements


def _load(
    source: str | bytes,
    file_path: str,
    *,
    follow_imports: bool,
    file_access: FileAccess | None,
    cache: ImportCache | None,
    extensions: tuple[str, ...],
    index_basename: str,
) -> tuple[Any, bytes, BindingTable]:
    parsed = parse_source(source, file_path)
    module = lower_module(parsed, file_path)
    try:
        table = build_binding_table(
            module,
            current_file_path=file_path,
            follow_imports=follow_imports,
            file_access=file_access,
            cache=cache,
            extensions=extensions,
            index_basename=index_basename,
        )
    except RecursionError as e:
        raise ResolutionError.parse_failed(file_path, "expression nesting too deep") from e
    return parsed.root_node, parsed.source, table


def _elements(root: Any) -> Iterator[Any]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type in _ELEMENT_TYPES:
            yield node
        stack.extend(reversed(node.named_children))


def _attributes(element: Any, source: bytes) -> Iterator[tuple[str, Any | None]]:
    """(name, value node) per attribute; value is None for bare attributes."""
    for attr in element.named_children:
        if attr.type != "jsx_attribute":
            continue
        parts = attr.named_children
        yield node_text(parts[0], source), parts[1] if len(parts) > 1 else None


def _element_attributes(
    element: Any,
    source: bytes,
    table: BindingTable,
    names: frozenset[str],
) -> list[ClassAttribute]:
    name_node = element.child_by_field_name("name")
    if name_node is None:
        return []
    tag = node_text(name_node, source)
    line = element.start_point[0] + 1

    found: list[ClassAttribute] = []
    for attr_name, value in _attributes(element, source):
        if value is None or attr_name not in names:
            continue
        result = _resolve_attribute_value(value, source, table)
        if result is not None:
            found.append(ClassAttribute(tag=tag, attribute=attr_name, line=line, result=result))
    return found


def _classify(
    element: Any,
    source: bytes,
    table: BindingTable,
    names: frozenset[str],
) -> InteractiveElement | None:
    name_node = element.child_by_field_name("name")
    if name_node is None or name_node.type != "identifier":
        return None
    tag = node_text(name_node, source)

    class_name = ResolutionResult.resolved("")
    role: str | None = None
    input_type: str | None = None
    tab_index: float | None = None
    can_be_disabled = False
    has_conditional_disabled = False
    can_be_invalid = False
    has_placeholder = False

    for attr_name, value in _attributes(element, source):
        if attr_name in names:
            result = _resolve_attribute_value(value, source, table) if value is not None else None
            if result is not None:
                class_name = result
        elif attr_name == "role":
            role = _string_value(value, source)
        elif attr_name == "type":
            input_type = _string_value(value, source)
        elif attr_name == "tabIndex":
            tab_index = _tab_index(value, source)
        elif attr_name == "disabled":
            can_be_disabled = True
            # Bare `disabled` and `disabled={true}` are static
            inner = _expression_of(value)
            if inner is not None and inner.type != "true":
                has_conditional_disabled = True
        elif attr_name in _VALIDATION_ATTRIBUTES:
            can_be_invalid = True
        elif attr_name == "placeholder":
            has_placeholder = True

    text = class_name.text
    if is_visually_hidden(text) or is_non_interactive(text):
        return None
    if tab_index == -1:
        return None
    if tag == "input" and input_type == "file":
        return None
    if tag == "label" and role not in _ROLE_ELEMENT_TYPES:
        return None

    if input_type in _VALIDATED_INPUT_TYPES:
        can_be_invalid = True

    is_interactive = tag in INTERACTIVE_TAGS or role in _ROLE_ELEMENT_TYPES
    is_content_region = tab_index == 0 and not is_interactive
    if not is_interactive and not is_content_region:
        if has_state_variant(text):
            log.debug("visual_container_skipped", tag=tag, line=element.start_point[0] + 1)
        return None

    return InteractiveElement(
        element_type=_ROLE_ELEMENT_TYPES.get(role or "", tag),
        tag=tag,
        line=element.start_point[0] + 1,
        class_name=class_name,
        is_content_region=is_content_region,
        can_be_disabled=can_be_disabled,
        has_conditional_disabled=has_conditional_disabled,
        can_be_invalid=can_be_invalid,
        has_placeholder=has_placeholder,
        is_radio_or_checkbox=tag == "input" and input_type in ("radio", "checkbox"),
    )


def _expression_of(value: Any | None) -> Any | None:
    if value is None or value.type != "jsx_expression":
        return None
    inner = [child for child in value.named_children if child.type != "comment"]
    return inner[0] if inner else None


def _string_value(value: Any | None, source: bytes) -> str | None:
    if value is None or value.type != "string":
        return None
    return html.unescape(node_text(value, source)[1:-1])


def _tab_index(value: Any | None, source: bytes) -> float | None:
    inner = _expression_of(value)
    if inner is None:
        return None
    sign = 1
    operator = inner.child_by_field_name("operator") if inner.type == "unary_expression" else None
    if operator is not None and node_text(operator, source) == "-":
        sign = -1
        inner = inner.child_by_field_name("argument")
    if inner is None or inner.type != "number":
        return None
    try:
        return sign * float(node_text(inner, source))
    except ValueError:
        return None


def _resolve_attribute_value(value: Any, source: bytes, table: BindingTable) -> ResolutionResult | None:
    if value.type == "string":
        # JSX strings take no backslash escapes, only HTML entities
        return ResolutionResult.resolved(html.unescape(node_text(value, source)[1:-1]))
    if value.type == "jsx_expression":
        inner = _expression_of(value)
        if inner is None:
            return None
        value = inner
    try:
        return resolve_expression(lower_expression(value, source), table)
    except RecursionError:
        log.debug("attribute_too_deep", line=value.start_point[0] + 1)
        return ResolutionResult.unresolved(PLACEHOLDER)
