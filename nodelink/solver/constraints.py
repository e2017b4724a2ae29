"""Pair and triple node constraints with mass-weighted positional correction."""

from __future__ import annotations

import logging
import math
import warnings
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from .config import SolverConfig, _default_config
from .math_utils import _EPS, _SQRT_EPS, _bearing, _included_angle, _mass_shares, _norm2, _sign, _vec2, to_pi
from .model import (
    ConstraintDefinitionError,
    ConstraintId,
    ConstraintReferenceError,
    ConstraintResidual,
    Node,
)
from .types import Current, Fixed, Target, TargetSpec, coerce_target

if TYPE_CHECKING:  # pragma: no cover
    from .system import System

logger = logging.getLogger(__name__)


class Constraint:
    """Common bookkeeping shared by every constraint kind."""

    kind = "constraint"

    def __init__(self, id: Optional[ConstraintId] = None):
        self.id = id
        self.system: Optional["System"] = None
        self._undo: List[Tuple[Node, float, float, float]] = []
        self._len_target: Optional[Target] = None
        self._ang_target: Optional[Target] = None

    @property
    def nodes(self) -> Tuple[Node, ...]:
        raise NotImplementedError

    @property
    def len_target(self) -> Optional[Target]:
        return self._len_target

    @property
    def ang_target(self) -> Optional[Target]:
        return self._ang_target

    @ang_target.setter
    def ang_target(self, value: TargetSpec) -> None:
        target = coerce_target(value)
        if isinstance(target, Current):
            target = Fixed(self.angle)
        self._ang_target = target

    @property
    def angle(self) -> float:
        raise NotImplementedError

    def target_angle(self) -> Optional[float]:
        if self._ang_target is None:
            return None
        return self._ang_target.evaluate(self)

    def config(self) -> SolverConfig:
        if self.system is not None:
            return self.system.config
        return _default_config()

    def resolve(self, constraint_id: ConstraintId) -> "Constraint":
        """Look up another constraint of the owning system by ``constraint_id``."""

        if self.system is None:
            raise ConstraintReferenceError(
                constraint_id,
                f"constraint {self.id!r} is not registered with a System; "
                f"cannot resolve reference {constraint_id!r}",
            )
        ref = self.system.by_id(constraint_id)
        if ref is None:
            raise ConstraintReferenceError(
                constraint_id,
                f"constraint {self.id!r} references unknown constraint {constraint_id!r}",
            )
        return ref

    def init_itr_seq(self, first: bool = False) -> None:
        """Prepare an iteration: snapshot nodes on the first one, reset mass boosts."""

        if first:
            self._undo = [(n, n.x, n.y, n.iter_mass_boost) for n in self.nodes]
        for n in self.nodes:
            n.reset_boost()

    def undo_itr_seq(self) -> None:
        for n, x, y, boost in self._undo:
            n.x = x
            n.y = y
            n.iter_mass_boost = boost

    def correct(self) -> bool:
        raise NotImplementedError

    def residuals(self) -> List[ConstraintResidual]:
        raise NotImplementedError

    def describe(self) -> Dict[str, Any]:
        raise NotImplementedError

    def __repr__(self) -> str:
        names = ",".join(n.name or f"({n.x:.3g},{n.y:.3g})" for n in self.nodes)
        return f"{type(self).__name__}(id={self.id!r}, nodes={names})"


class PairConstraint(Constraint):
    """Target length and/or bearing of the vector from ``n1`` to ``n2``.

    ``directional`` restricts the angle correction: ``+1`` keeps the vector
    pointing along the target bearing, ``-1`` against it and ``0`` lets it
    settle on either side.
    """

    kind = "pair"

    def __init__(
        self,
        n1: Node,
        n2: Node,
        *,
        id: Optional[ConstraintId] = None,
        length: TargetSpec = None,
        angle: TargetSpec = None,
        directional: int = 0,
    ):
        super().__init__(id)
        if n1 is n2:
            raise ConstraintDefinitionError(f"constraint {id!r} connects a node to itself")
        if directional not in (-1, 0, 1):
            raise ConstraintDefinitionError(
                f"constraint {id!r}: directional must be -1, 0 or 1 (got {directional!r})"
            )
        self.n1 = n1
        self.n2 = n2
        self.directional = int(directional)
        self.len_target = length
        self.ang_target = angle

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return (self.n1, self.n2)

    @property
    def len_target(self) -> Optional[Target]:
        return self._len_target

    @len_target.setter
    def len_target(self, value: TargetSpec) -> None:
        target = coerce_target(value)
        if isinstance(target, Current):
            target = Fixed(self.length)
        self._len_target = target

    @property
    def length(self) -> float:
        return _norm2(_vec2(self.n1, self.n2))

    @property
    def angle(self) -> float:
        return _bearing(_vec2(self.n1, self.n2))

    def target_length(self) -> Optional[float]:
        if self._len_target is None:
            return None
        return self._len_target.evaluate(self)

    def mass_shares(self) -> Tuple[float, float]:
        return _mass_shares(self.n1.inverse_mass(), self.n2.inverse_mass())

    def _shift(self, mc1: float, mc2: float, dx: float, dy: float) -> None:
        # n1 moves along (dx, dy), n2 against it
        self.n1.x += mc1 * dx
        self.n1.y += mc1 * dy
        self.n2.x -= mc2 * dx
        self.n2.y -= mc2 * dy

    def _correct_angle(self, cfg: SolverConfig) -> bool:
        n1, n2 = self.n1, self.n2
        a = self.target_angle()
        ca, sa = math.cos(a), math.sin(a)
        x12, y12 = _vec2(n1, n2)
        de = -x12 * sa + y12 * ca
        mc1, mc2 = self.mass_shares()

        if self.directional:
            along = x12 * ca + y12 * sa
            re = _sign(self.directional) * along
            if re > 0:
                dx, dy = -de * sa, de * ca
            else:
                # mirror the along-track part instead of rotating through the forbidden half-plane
                dx = 2.0 * along * ca - de * sa
                dy = 2.0 * along * sa + de * ca
        else:
            dx, dy = -de * sa, de * ca

        self._shift(mc1, mc2, dx, dy)

        x12, y12 = _vec2(n1, n2)
        r = math.hypot(x12, y12)
        clamped = False
        if r > cfg.lenmax:
            dlen = cfg.lenmax - r
            self._shift(mc1, mc2, -dlen * x12 / r, -dlen * y12 / r)
            clamped = abs(dlen) >= cfg.lentol

        n1.boost()
        n2.boost()

        # a clamp that moved the nodes invalidates the sweep like the angle step does
        return not clamped and abs(dx) < cfg.lentol and abs(dy) < cfg.lentol

    def _correct_length(self, cfg: SolverConfig) -> bool:
        n1, n2 = self.n1, self.n2
        x12, y12 = _vec2(n1, n2)
        r = math.hypot(x12, y12)
        dr = self.target_length() - r

        if abs(dr) < cfg.lentol:
            return True

        if r > _EPS:
            ex, ey = x12 / r, y12 / r
        else:
            # coincident nodes with a non-zero target length
            ex, ey = 1.0, 0.0
        mc1, mc2 = self.mass_shares()
        self._shift(mc1, mc2, -dr * ex, -dr * ey)

        n1.boost()
        n2.boost()
        return False

    def correct(self) -> bool:
        cfg = self.config()
        valid = True
        # angle first, it may change the length
        if self._ang_target is not None:
            valid = self._correct_angle(cfg) and valid
        if self._len_target is not None:
            valid = self._correct_length(cfg) and valid
        return valid

    def residuals(self) -> List[ConstraintResidual]:
        out: List[ConstraintResidual] = []
        if self._len_target is not None:
            out.append(ConstraintResidual(self.id, "length", self.length - self.target_length()))
        if self._ang_target is not None:
            out.append(ConstraintResidual(self.id, "angle", to_pi(self.angle - self.target_angle())))
        return out

    def describe(self) -> Dict[str, Any]:
        mc1, mc2 = self.mass_shares()
        info: Dict[str, Any] = {
            "id": self.id,
            "kind": self.kind,
            "im1": self.n1.inverse_mass(),
            "im2": self.n2.inverse_mass(),
            "mc_m1": mc1,
            "mc_m2": mc2,
            "r": self.length,
            "w": math.degrees(self.angle),
        }
        if self._len_target is not None:
            info["dr"] = self.target_length() - self.length
        if self._ang_target is not None:
            info["dw"] = math.degrees(to_pi(self.target_angle() - self.angle))
        if self.directional:
            info["dir"] = self.directional
        return info


class TripleConstraint(Constraint):
    """Included angle at ``n1`` between ``n1->n2`` and ``n1->n3``.

    Deprecated: two ``PairConstraint`` objects with angle targets express the
    same relation. Only ``n3`` is moved.
    """

    kind = "triple"

    def __init__(
        self,
        n1: Node,
        n2: Node,
        n3: Node,
        *,
        id: Optional[ConstraintId] = None,
        angle: TargetSpec = None,
    ):
        warnings.warn(
            "TripleConstraint is deprecated; use two PairConstraint angle targets instead",
            DeprecationWarning,
            stacklevel=2,
        )
        super().__init__(id)
        if n1 is n2 or n1 is n3 or n2 is n3:
            raise ConstraintDefinitionError(f"constraint {id!r} needs three distinct nodes")
        self.n1 = n1
        self.n2 = n2
        self.n3 = n3
        self.ang_target = angle

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return (self.n1, self.n2, self.n3)

    @property
    def angle(self) -> float:
        return _included_angle(_vec2(self.n1, self.n2), _vec2(self.n1, self.n3))

    def correct(self) -> bool:
        if self._ang_target is None:
            return True
        cfg = self.config()
        n1, n3 = self.n1, self.n3
        x12, y12 = _vec2(n1, self.n2)
        r12 = math.hypot(x12, y12)
        if r12 <= _SQRT_EPS:
            return True

        x13, y13 = _vec2(n1, n3)
        c12, s12 = x12 / r12, y12 / r12
        a = self.target_angle()
        ca, sa = math.cos(a), math.sin(a)
        c12a = c12 * ca - s12 * sa
        s12a = s12 * ca + c12 * sa
        o13 = -x13 * s12a + y13 * c12a

        dx, dy = -o13 * s12a, o13 * c12a
        im1, im3 = n1.inverse_mass(), n3.inverse_mass()
        mc3 = im3 / (im1 + im3) if (im1 + im3) else im3

        n3.x -= mc3 * dx
        n3.y -= mc3 * dy
        n3.boost()

        return abs(dx) < cfg.lentol and abs(dy) < cfg.lentol

    def residuals(self) -> List[ConstraintResidual]:
        if self._ang_target is None:
            return []
        return [ConstraintResidual(self.id, "angle", to_pi(self.angle - self.target_angle()))]

    def describe(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "id": self.id,
            "kind": self.kind,
            "im1": self.n1.inverse_mass(),
            "im2": self.n2.inverse_mass(),
            "im3": self.n3.inverse_mass(),
            "w": math.degrees(self.angle),
        }
        if self._ang_target is not None:
            target = self.target_angle()
            info["ang"] = math.degrees(target)
            info["dw"] = math.degrees(to_pi(target - self.angle))
        return info


__all__ = [
    "Constraint",
    "PairConstraint",
    "TripleConstraint",
]
