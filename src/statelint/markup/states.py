"""Interactive state variants in resolved class lists.

A class carries a state when it starts with a Tailwind variant prefix
(``hover:bg-blue-600``) or contains an arbitrary pseudo-class variant
(``[&:hover]:underline``).
"""

from __future__ import annotations

import re

STATE_VARIANTS: dict[str, str] = {
    "hover:": "hover",
    "focus:": "focus",
    "focus-visible:": "focus-visible",
    "focus-within:": "focus-within",
    "active:": "active",
    "disabled:": "disabled",
    "invalid:": "invalid",
    "checked:": "checked",
    "placeholder:": "placeholder",
}

# Longest first: focus-visible: must win over focus:
VARIANT_PREFIXES: tuple[str, ...] = tuple(sorted(STATE_VARIANTS, key=len, reverse=True))

INTERACTIVE_TAGS = frozenset({"button", "a", "input", "select", "textarea"})

HIDDEN_CLASSES = frozenset({"hidden", "sr-only", "invisible"})

NON_INTERACTIVE_CLASSES = frozenset({"pointer-events-none"})

_ARBITRARY_VARIANT_RE = re.compile(r"\[&:([\w-]+)\]")


def _prefix_state(cls: str) -> str | None:
    for prefix in VARIANT_PREFIXES:
        if cls.startswith(prefix):
            return STATE_VARIANTS[prefix]
    return None


def extract_states(class_name: str) -> tuple[str, ...]:
    """States named by the classes in class_name, first occurrence order."""
    states: list[str] = []
    for cls in class_name.split():
        found = [_prefix_state(cls)]
        found.extend(STATE_VARIANTS.get(m.group(1) + ":") for m in _ARBITRARY_VARIANT_RE.finditer(cls))
        for state in found:
            if state is not None and state not in states:
                states.append(state)
    return tuple(states)


def has_state_variant(class_name: str) -> bool:
    """True if any class has a variant prefix or any arbitrary ``[&:...]`` variant.

    Unlike extract_states, arbitrary variants count even when the pseudo-class
    is not a tracked state (``[&:first-child]``).
    """
    return any(
        _prefix_state(cls) is not None or _ARBITRARY_VARIANT_RE.search(cls) is not None
        for cls in class_name.split()
    )


def is_visually_hidden(class_name: str) -> bool:
    return not HIDDEN_CLASSES.isdisjoint(class_name.split())


def is_non_interactive(class_name: str) -> bool:
    return not NON_INTERACTIVE_CLASSES.isdisjoint(class_name.split())
