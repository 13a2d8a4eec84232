"""Resolved values, binding tables and resolution results.

``ResolvedValue`` is a closed sum type over what is statically known about a
binding: exactly one string, a nested literal object, or nothing at all.
Consumers branch on it with ``isinstance`` over the three variants.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final, TypeAlias


@dataclass(frozen=True, slots=True)
class StringValue:
    """The binding provably evaluates to ``value``."""

    value: str


@dataclass(frozen=True, slots=True)
class ObjectValue:
    """A nested literal structure, each property itself a resolved value.

    Built from object literal syntax only, so it can never contain itself.
    """

    properties: dict[str, ResolvedValue] = field(default_factory=dict)

    def get(self, name: str) -> ResolvedValue | None:
        return self.properties.get(name)


@dataclass(frozen=True, slots=True)
class UnresolvedValue:
    """No static information; the binding may hold anything."""

    def __repr__(self) -> str:
        return "UNRESOLVED"


UNRESOLVED: Final = UnresolvedValue()

ResolvedValue: TypeAlias = StringValue | ObjectValue | UnresolvedValue

# Local name -> value, for one file. Later declarations overwrite earlier ones.
BindingTable: TypeAlias = dict[str, ResolvedValue]


def is_unresolved(value: ResolvedValue | None) -> bool:
    return value is None or isinstance(value, UnresolvedValue)


def collect_strings(value: ResolvedValue) -> list[str]:
    """Every non-empty string leaf reachable from value, at any depth, in insertion order."""
    if isinstance(value, StringValue):
        return [value.value] if value.value else []
    if isinstance(value, ObjectValue):
        leaves: list[str] = []
        for child in value.properties.values():
            leaves.extend(collect_strings(child))
        return leaves
    return []


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of resolving one expression.

    ``text`` is the best-effort literal reconstruction; ``unresolved_fragments``
    renders every sub-expression that could not be reduced to a literal.
    """

    text: str
    unresolved_fragments: tuple[str, ...] = ()

    @property
    def fully_resolved(self) -> bool:
        return not self.unresolved_fragments

    @classmethod
    def resolved(cls, text: str) -> ResolutionResult:
        return cls(text=text)

    @classmethod
    def unresolved(cls, *fragments: str, text: str = "") -> ResolutionResult:
        return cls(text=text, unresolved_fragments=tuple(fragments))

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "fully_resolved": self.fully_resolved,
            "unresolved_fragments": list(self.unresolved_fragments),
        }
