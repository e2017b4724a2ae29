"""Relaxation loop owning the node and constraint collections."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional

import numpy as np

from ..logging_utils import apply_debug_logging
from .config import SolverConfig, get_solver_config
from .constraints import Constraint, PairConstraint, TripleConstraint
from .model import ConstraintDefinitionError, ConstraintId, ConstraintResidual, Node, SolveReport
from .types import TargetSpec

logger = logging.getLogger(__name__)


class System:
    """Set of nodes and the ordered constraints acting on them.

    Constraints are corrected in insertion order once per sweep. A call to
    :meth:`correct` either converges and returns the number of sweeps used
    or restores every node to its state before the call and returns ``0``.
    """

    def __init__(self, config: Optional[SolverConfig] = None):
        self.config = config if config is not None else get_solver_config()
        self.nodes: List[Node] = []
        self.constraints: List[Constraint] = []
        self._node_ids: Dict[int, Node] = {}
        self._by_id: Dict[ConstraintId, Constraint] = {}

    def add_node(self, node: Node) -> Node:
        if id(node) not in self._node_ids:
            self._node_ids[id(node)] = node
            self.nodes.append(node)
        return node

    def node(self, x: float, y: float, *, base: bool = False, mass: float = 1.0, name: Optional[str] = None) -> Node:
        return self.add_node(Node(x, y, base=base, mass=mass, name=name))

    def add(self, constraint: Constraint) -> Constraint:
        if constraint.system is not None and constraint.system is not self:
            raise ConstraintDefinitionError(
                f"constraint {constraint.id!r} is already registered with another System"
            )
        if constraint.id is not None:
            existing = self._by_id.get(constraint.id)
            if existing is not None and existing is not constraint:
                raise ConstraintDefinitionError(f"duplicate constraint id {constraint.id!r}")
            self._by_id[constraint.id] = constraint
        for node in constraint.nodes:
            self.add_node(node)
        constraint.system = self
        self.constraints.append(constraint)
        logger.debug("Registered %r (%d constraints)", constraint, len(self.constraints))
        return constraint

    def pair(
        self,
        n1: Node,
        n2: Node,
        *,
        id: Optional[ConstraintId] = None,
        length: TargetSpec = None,
        angle: TargetSpec = None,
        directional: int = 0,
    ) -> PairConstraint:
        constraint = PairConstraint(n1, n2, id=id, length=length, angle=angle, directional=directional)
        self.add(constraint)
        return constraint

    def triple(
        self,
        n1: Node,
        n2: Node,
        n3: Node,
        *,
        id: Optional[ConstraintId] = None,
        angle: TargetSpec = None,
    ) -> TripleConstraint:
        constraint = TripleConstraint(n1, n2, n3, id=id, angle=angle)
        self.add(constraint)
        return constraint

    def by_id(self, constraint_id: ConstraintId) -> Optional[Constraint]:
        return self._by_id.get(constraint_id)

    @property
    def dof(self) -> int:
        """Remaining degrees of freedom; diagnostic only."""

        free = 2 * sum(1 for n in self.nodes if not n.base)
        for c in self.constraints:
            if c.len_target is not None:
                free -= 1
            if c.ang_target is not None:
                free -= 1
        return free

    def positions(self) -> np.ndarray:
        """Return node positions as an ``(n, 2)`` array in node order."""

        if not self.nodes:
            return np.zeros((0, 2), dtype=float)
        return np.array([(n.x, n.y) for n in self.nodes], dtype=float)

    def _finite(self) -> bool:
        return bool(np.all(np.isfinite(self.positions())))

    def _rollback(self) -> None:
        # every constraint restores its own nodes; shared nodes get the same values
        for c in self.constraints:
            c.undo_itr_seq()

    def correct(self) -> int:
        """Relax all constraints; return the sweeps used, or ``0`` after rollback."""

        itrmax = self.config.itrmax
        valid = False
        itr = 0
        try:
            while not valid and itr < itrmax:
                for c in self.constraints:
                    c.init_itr_seq(first=itr == 0)
                valid = True
                for c in self.constraints:
                    valid = c.correct() and valid
                itr += 1
                if not self._finite():
                    logger.warning("Non-finite node position after sweep %d; rolling back", itr)
                    valid = False
                    break
        except Exception:
            # configuration errors surface to the caller with the geometry untouched
            self._rollback()
            raise

        if not valid:
            self._rollback()
            logger.info(
                "No convergence after %d sweep(s) over %d constraints; positions restored",
                itr,
                len(self.constraints),
            )
            return 0

        logger.debug("Converged after %d sweep(s)", itr)
        return itr

    def residuals(self) -> List[ConstraintResidual]:
        """Current deviations of every constrained quantity, largest first."""

        out: List[ConstraintResidual] = []
        for c in self.constraints:
            out.extend(c.residuals())
        out.sort(key=lambda item: abs(item.error), reverse=True)
        return out

    def solve(self, worst_limit: int = 5) -> SolveReport:
        iterations = self.correct()
        residuals = self.residuals()
        max_residual = abs(residuals[0].error) if residuals else 0.0
        return SolveReport(
            iterations=iterations,
            converged=iterations > 0,
            dof=self.dof,
            max_residual=max_residual,
            worst=residuals[:worst_limit],
        )

    def log(self, level: int = logging.INFO) -> None:
        for c in self.constraints:
            logger.log(level, "%s", c.describe())

    def __len__(self) -> int:
        return len(self.constraints)

    def __iter__(self) -> Iterator[Constraint]:
        return iter(self.constraints)


apply_debug_logging(globals(), logger=logger, skip={"System._finite", "System.positions", "System.__iter__"})


__all__ = ["System"]
