from .solver import (
    CURRENT,
    Combinator,
    Constraint,
    ConstraintDefinitionError,
    ConstraintReferenceError,
    ConstraintResidual,
    Current,
    Fixed,
    Node,
    NodelinkError,
    PairConstraint,
    SolveReport,
    SolverConfig,
    System,
    TripleConstraint,
    angle,
    coerce_target,
    get_solver_config,
    length,
    set_solver_config,
    solve,
    to_pi,
)
from .mechanisms import Mechanism, SweepStep, four_bar, slider_crank, sweep

__all__ = [
    'CURRENT',
    'Combinator',
    'Constraint',
    'ConstraintDefinitionError',
    'ConstraintReferenceError',
    'ConstraintResidual',
    'Current',
    'Fixed',
    'Mechanism',
    'Node',
    'NodelinkError',
    'PairConstraint',
    'SolveReport',
    'SolverConfig',
    'SweepStep',
    'System',
    'TripleConstraint',
    'angle',
    'coerce_target',
    'four_bar',
    'get_solver_config',
    'length',
    'set_solver_config',
    'slider_crank',
    'solve',
    'sweep',
    'to_pi',
]
