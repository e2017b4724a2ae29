"""Lazily evaluated length and angle targets.

Every factory returns a :class:`~nodelink.solver.types.Combinator` that is
evaluated against the constraint owning it each time the target is read.
Factories taking a constraint id look the referenced constraint up through
the owner's system on first evaluation and keep the reference for that
system afterwards, so a constraint may reference another one that is
registered later.
"""

from __future__ import annotations

import logging
import math
import warnings
import weakref
from types import SimpleNamespace
from typing import TYPE_CHECKING, Optional

from ..logging_utils import apply_debug_logging
from .math_utils import _clamp, to_pi
from .model import ConstraintId, ConstraintReferenceError
from .types import Combinator

if TYPE_CHECKING:  # pragma: no cover
    from .constraints import Constraint
    from .system import System

logger = logging.getLogger(__name__)

_HALF_PI = 0.5 * math.pi


class _LazyRef:
    """Reference to another constraint, resolved by id on first use.

    The resolved constraint is remembered per owning system, so one
    combinator may be shared between systems. ``attr`` names the quantity
    read from the referenced constraint; a constraint lacking it is a
    configuration error.
    """

    __slots__ = ("constraint_id", "attr", "_refs")

    def __init__(self, constraint_id: ConstraintId, attr: str = "angle"):
        self.constraint_id = constraint_id
        self.attr = attr
        self._refs: "weakref.WeakKeyDictionary[System, Constraint]" = weakref.WeakKeyDictionary()

    def __call__(self, owner: "Constraint") -> "Constraint":
        ref = self._refs.get(owner.system) if owner.system is not None else None
        if ref is None:
            ref = owner.resolve(self.constraint_id)
            if not hasattr(ref, self.attr):
                raise ConstraintReferenceError(
                    self.constraint_id,
                    f"constraint {owner.id!r} reads the {self.attr} of {self.constraint_id!r}, "
                    f"but a {type(ref).__name__} has no {self.attr}",
                )
            self._refs[owner.system] = ref
            logger.debug("Resolved reference %r for constraint %r", self.constraint_id, owner.id)
        return ref


# length functions


def len_min(minimum: float) -> Combinator:
    return Combinator(lambda c: max(c.length, minimum), f"len.min({minimum})")


def len_max(maximum: float) -> Combinator:
    return Combinator(lambda c: min(c.length, maximum), f"len.max({maximum})")


def len_range(minimum: float, maximum: float) -> Combinator:
    return Combinator(lambda c: _clamp(c.length, minimum, maximum), f"len.range({minimum},{maximum})")


def len_from(constraint_id: ConstraintId, scl: Optional[float] = None) -> Combinator:
    """Target length proportional to the length of another constraint."""

    ref = _LazyRef(constraint_id, "length")
    factor = 1.0 if scl is None else float(scl)
    return Combinator(lambda c: ref(c).length * factor, f"len.from({constraint_id!r},{factor})")


# angular functions


def ang_min(minimum: float) -> Combinator:
    return Combinator(lambda c: max(c.angle, minimum), f"ang.min({minimum})")


def ang_max(maximum: float) -> Combinator:
    return Combinator(lambda c: min(c.angle, maximum), f"ang.max({maximum})")


def ang_range(minimum: float, maximum: float) -> Combinator:
    return Combinator(lambda c: _clamp(c.angle, minimum, maximum), f"ang.range({minimum},{maximum})")


def ang_from(constraint_id: ConstraintId, offset: float = 0.0) -> Combinator:
    """Target angle at a fixed ``offset`` from the angle of another constraint."""

    ref = _LazyRef(constraint_id)
    return Combinator(lambda c: to_pi(ref(c).angle + offset), f"ang.from({constraint_id!r},{offset})")


def _delta_clamp(constraint_id: ConstraintId, lo: float, hi: float, name: str) -> Combinator:
    ref = _LazyRef(constraint_id)

    def target(c: "Constraint") -> float:
        w = ref(c).angle
        return _clamp(to_pi(c.angle - w), lo, hi) + w

    return Combinator(target, name)


def ang_pos_from(constraint_id: ConstraintId) -> Combinator:
    return _delta_clamp(constraint_id, 0.0, math.pi, f"ang.posFrom({constraint_id!r})")


def ang_neg_from(constraint_id: ConstraintId) -> Combinator:
    return _delta_clamp(constraint_id, -math.pi, 0.0, f"ang.negFrom({constraint_id!r})")


def ang_acute_from(constraint_id: ConstraintId) -> Combinator:
    return _delta_clamp(constraint_id, -_HALF_PI, _HALF_PI, f"ang.acuteFrom({constraint_id!r})")


def ang_obtuse_from(constraint_id: ConstraintId) -> Combinator:
    """Keep the angle to another constraint between 90 and 180 degrees, either side."""

    ref = _LazyRef(constraint_id)

    def target(c: "Constraint") -> float:
        w = ref(c).angle
        dw = to_pi(c.angle - w)
        if dw >= 0:
            return _clamp(dw, _HALF_PI, math.pi) + w
        return _clamp(dw, -math.pi, -_HALF_PI) + w

    return Combinator(target, f"ang.obtuseFrom({constraint_id!r})")


def ang_range_from(constraint_id: ConstraintId, minimum: float, maximum: float) -> Combinator:
    return _delta_clamp(
        constraint_id, minimum, maximum, f"ang.rangeFrom({constraint_id!r},{minimum},{maximum})"
    )


def ang_delta(from_id: ConstraintId, to_id: ConstraintId, scl: float = 1.0) -> Combinator:
    """Interpolate between the angles of two constraints.

    ``scl=0`` follows ``from_id``, ``scl=1`` follows ``to_id`` and ``scl=0.5``
    bisects the (normalised) angle between them.
    """

    ref_from = _LazyRef(from_id)
    ref_to = _LazyRef(to_id)

    def target(c: "Constraint") -> float:
        w1 = ref_from(c).angle
        w2 = ref_to(c).angle
        return w1 + scl * to_pi(w2 - w1)

    return Combinator(target, f"ang.delta({from_id!r},{to_id!r},{scl})")


def ang_include(constraint_id: ConstraintId, offset: float) -> Combinator:
    warnings.warn("angle.include is deprecated; use angle.from_", DeprecationWarning, stacklevel=2)
    return ang_from(constraint_id, offset)


def ang_incl_range(constraint_id: ConstraintId, minimum: float, maximum: float) -> Combinator:
    warnings.warn("angle.incl_range is deprecated; use angle.range_from", DeprecationWarning, stacklevel=2)
    return ang_range_from(constraint_id, minimum, maximum)


apply_debug_logging(globals(), logger=logger, skip={"_LazyRef", "ang_include", "ang_incl_range"})


length = SimpleNamespace(
    min=len_min,
    max=len_max,
    range=len_range,
    from_=len_from,
)

angle = SimpleNamespace(
    min=ang_min,
    max=ang_max,
    range=ang_range,
    from_=ang_from,
    pos_from=ang_pos_from,
    neg_from=ang_neg_from,
    acute_from=ang_acute_from,
    obtuse_from=ang_obtuse_from,
    range_from=ang_range_from,
    delta=ang_delta,
    include=ang_include,
    incl_range=ang_incl_range,
)


__all__ = [
    "angle",
    "ang_acute_from",
    "ang_delta",
    "ang_from",
    "ang_incl_range",
    "ang_include",
    "ang_max",
    "ang_min",
    "ang_neg_from",
    "ang_obtuse_from",
    "ang_pos_from",
    "ang_range",
    "ang_range_from",
    "len_from",
    "len_max",
    "len_min",
    "len_range",
    "length",
]
