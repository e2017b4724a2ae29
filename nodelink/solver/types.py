"""Target values for constrained lengths and angles.

A target is one of three variants:

``Fixed``
    a plain number, frozen at construction.
``Current``
    a marker asking the constraint to freeze the geometric value it sees
    when it is created; it is turned into ``Fixed`` at that point.
``Combinator``
    a callable evaluated against the owning constraint on every access.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from .model import ConstraintDefinitionError

if TYPE_CHECKING:  # pragma: no cover
    from .constraints import Constraint

TargetFunc = Callable[["Constraint"], float]

_CURRENT_MARKERS = {"const", "current"}


@dataclass(frozen=True)
class Fixed:
    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(self.value))

    def evaluate(self, constraint: "Constraint") -> float:
        return self.value


class Current:
    """Marker for "use the current geometric value"."""

    _instance: Optional["Current"] = None

    def __new__(cls) -> "Current":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "CURRENT"


CURRENT = Current()


class Combinator:
    """Lazily evaluated target computed from the owning constraint."""

    __slots__ = ("func", "name")

    def __init__(self, func: TargetFunc, name: Optional[str] = None):
        self.func = func
        self.name = name or getattr(func, "__name__", "combinator")

    def evaluate(self, constraint: "Constraint") -> float:
        return float(self.func(constraint))

    def __repr__(self) -> str:
        return f"Combinator({self.name})"


Target = Union[Fixed, Current, Combinator]
TargetSpec = Union[Target, float, int, str, TargetFunc, None]


def coerce_target(value: Any) -> Optional[Target]:
    """Map a user supplied target value onto a ``Target`` variant."""

    if value is None:
        return None
    if isinstance(value, (Fixed, Current, Combinator)):
        return value
    if isinstance(value, bool):
        raise ConstraintDefinitionError(f"boolean is not a valid target value: {value!r}")
    if isinstance(value, numbers.Real):
        return Fixed(float(value))
    if isinstance(value, str):
        if value.lower() in _CURRENT_MARKERS:
            return CURRENT
        raise ConstraintDefinitionError(f"unknown target marker {value!r}")
    if callable(value):
        return Combinator(value)
    raise ConstraintDefinitionError(f"unsupported target type {type(value).__name__}")


__all__ = [
    "CURRENT",
    "Combinator",
    "Current",
    "Fixed",
    "Target",
    "TargetFunc",
    "TargetSpec",
    "coerce_target",
]
