"""Configuration helpers for solver components."""

from __future__ import annotations

import copy
from dataclasses import dataclass


@dataclass
class SolverConfig:
    """Solver-wide tuning constants.

    ``itrmax`` caps the number of relaxation sweeps per ``correct()`` call,
    ``lentol`` is the length tolerance used by every convergence check and
    ``lenmax`` is the hard upper bound on the distance between two nodes of
    a pair constraint.
    """

    itrmax: int = 256
    lentol: float = 0.1
    lenmax: float = 1.0e6

    def __post_init__(self) -> None:
        if int(self.itrmax) < 1:
            raise ValueError(f"itrmax must be at least 1 (got {self.itrmax})")
        if not self.lentol > 0.0:
            raise ValueError(f"lentol must be positive (got {self.lentol})")
        if not self.lenmax > 0.0:
            raise ValueError(f"lenmax must be positive (got {self.lenmax})")
        self.itrmax = int(self.itrmax)
        self.lentol = float(self.lentol)
        self.lenmax = float(self.lenmax)


_SOLVER_CONFIG = SolverConfig()


def get_solver_config() -> SolverConfig:
    return copy.deepcopy(_SOLVER_CONFIG)


def set_solver_config(config: SolverConfig) -> None:
    global _SOLVER_CONFIG
    _SOLVER_CONFIG = copy.deepcopy(config)


def _default_config() -> SolverConfig:
    # shared instance for constraints that are not attached to a System
    return _SOLVER_CONFIG
