"""Solver façade for node-link relaxation."""

from __future__ import annotations

import logging

from .combinators import angle, length
from .config import SolverConfig, get_solver_config, set_solver_config
from .constraints import Constraint, PairConstraint, TripleConstraint
from .math_utils import to_pi
from .model import (
    ConstraintDefinitionError,
    ConstraintReferenceError,
    ConstraintResidual,
    Node,
    NodelinkError,
    SolveReport,
)
from .system import System
from .types import CURRENT, Combinator, Current, Fixed, coerce_target

logger = logging.getLogger(__name__)


def solve(system: System) -> SolveReport:
    """Relax ``system`` once and summarise the outcome."""

    logger.info(
        "Solving system with %d nodes and %d constraints (dof=%d)",
        len(system.nodes),
        len(system.constraints),
        system.dof,
    )
    report = system.solve()
    logger.info(
        "Solve finished converged=%s iterations=%d max_residual=%.3g",
        report.converged,
        report.iterations,
        report.max_residual,
    )
    return report


__all__ = [
    "CURRENT",
    "Combinator",
    "Constraint",
    "ConstraintDefinitionError",
    "ConstraintReferenceError",
    "ConstraintResidual",
    "Current",
    "Fixed",
    "Node",
    "NodelinkError",
    "PairConstraint",
    "SolveReport",
    "SolverConfig",
    "System",
    "TripleConstraint",
    "angle",
    "coerce_target",
    "get_solver_config",
    "length",
    "set_solver_config",
    "solve",
    "to_pi",
]
