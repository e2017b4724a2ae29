"""Core data structures for the relaxation solver."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

ConstraintId = str


class NodelinkError(Exception):
    """Base class for configuration errors raised by the solver."""


class ConstraintDefinitionError(NodelinkError, ValueError):
    """Raised when a constraint is built from invalid arguments."""


class ConstraintReferenceError(NodelinkError, LookupError):
    """Raised when a lazy target references a constraint that cannot be found."""

    def __init__(self, constraint_id: Optional[ConstraintId], message: str):
        super().__init__(message)
        self.constraint_id = constraint_id


@dataclass(eq=False)
class Node:
    """Mutable 2D point mass shared between constraints.

    ``base`` nodes never move. ``iter_mass_boost`` grows by one for every
    correction applied to the node within a relaxation sweep and is reset
    at the start of the next sweep.
    """

    x: float
    y: float
    base: bool = False
    mass: float = 1.0
    name: Optional[str] = None
    iter_mass_boost: float = field(default=0.0, repr=False)

    def __post_init__(self) -> None:
        self.x = float(self.x)
        self.y = float(self.y)
        self.mass = float(self.mass) if self.mass else 1.0

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y

    @position.setter
    def position(self, value: Tuple[float, float]) -> None:
        self.x, self.y = float(value[0]), float(value[1])

    def move_to(self, x: float, y: float) -> None:
        self.x = float(x)
        self.y = float(y)

    def inverse_mass(self) -> float:
        if self.base:
            return 0.0
        return 1.0 / (self.mass + self.iter_mass_boost)

    def boost(self) -> None:
        if not self.base:
            self.iter_mass_boost += 1.0

    def reset_boost(self) -> None:
        if not self.base:
            self.iter_mass_boost = 0.0

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


@dataclass
class ConstraintResidual:
    """Remaining deviation of one constrained quantity."""

    constraint_id: Optional[ConstraintId]
    kind: str
    error: float


@dataclass
class SolveReport:
    iterations: int
    converged: bool
    dof: int
    max_residual: float
    worst: List[ConstraintResidual] = field(default_factory=list)


__all__ = [
    "ConstraintDefinitionError",
    "ConstraintId",
    "ConstraintReferenceError",
    "ConstraintResidual",
    "Node",
    "NodelinkError",
    "SolveReport",
]
