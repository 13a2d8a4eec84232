"""Component markup front ends."""

from statelint.markup.jsx import (
    DEFAULT_ATTRIBUTE_NAMES,
    ClassAttribute,
    InteractiveElement,
    extract_class_attributes,
    extract_interactive_elements,
)
from statelint.markup.states import extract_states, has_state_variant

__all__ = [
    "DEFAULT_ATTRIBUTE_NAMES",
    "ClassAttribute",
    "InteractiveElement",
    "extract_class_attributes",
    "extract_interactive_elements",
    "extract_states",
    "has_state_variant",
]
