"""Ready-made planar mechanisms driven by a crank angle."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, Tuple

from .solver import PairConstraint, System, angle

logger = logging.getLogger(__name__)


@dataclass
class Mechanism:
    name: str
    system: System
    driver: PairConstraint
    nodes: Dict[str, object] = field(default_factory=dict)

    def coords(self) -> Dict[str, Tuple[float, float]]:
        return {name: (node.x, node.y) for name, node in self.nodes.items()}


@dataclass
class SweepStep:
    step: int
    phi: float
    iterations: int
    coords: Dict[str, Tuple[float, float]]


def four_bar(
    ground: float = 40.0,
    crank: float = 10.0,
    coupler: float = 40.0,
    rocker: float = 30.0,
) -> Mechanism:
    """Crank-rocker four-bar linkage with the crank starting at 0 rad."""

    ax, ay = crank, 0.0
    bx0 = ground
    # coupler joint: intersection of the coupler and rocker circles (upper branch)
    d = bx0 - ax
    if not abs(coupler - rocker) <= d <= coupler + rocker:
        raise ValueError("four-bar lengths do not close at the start position")
    u = (d * d + coupler * coupler - rocker * rocker) / (2.0 * d)
    h = math.sqrt(max(coupler * coupler - u * u, 0.0))

    system = System()
    a0 = system.node(0.0, 0.0, base=True, name="A0")
    b0 = system.node(bx0, 0.0, base=True, name="B0")
    a = system.node(ax, ay, name="A")
    b = system.node(ax + u, h, name="B")

    driver = system.pair(a0, a, id="crank", length="const", angle=0.0)
    system.pair(a, b, id="coupler", length="const")
    system.pair(b0, b, id="rocker", length="const", angle=angle.pos_from("ground"))
    system.pair(a0, b0, id="ground")

    logger.info("Built four-bar linkage with dof=%d", system.dof)
    return Mechanism("four-bar", system, driver, {"A0": a0, "B0": b0, "A": a, "B": b})


def slider_crank(crank: float = 10.0, coupler: float = 30.0) -> Mechanism:
    """Crank and coupler driving a slider along the positive x-axis."""

    if coupler <= crank:
        raise ValueError("coupler must be longer than the crank")

    system = System()
    a0 = system.node(0.0, 0.0, base=True, name="A0")
    a = system.node(crank, 0.0, name="A")
    b = system.node(crank + coupler, 0.0, name="B")

    driver = system.pair(a0, a, id="crank", length="const", angle=0.0)
    system.pair(a, b, id="coupler", length="const")
    system.pair(a0, b, id="slider", angle=0.0, directional=1)

    logger.info("Built slider-crank with dof=%d", system.dof)
    return Mechanism("slider-crank", system, driver, {"A0": a0, "A": a, "B": b})


MECHANISMS: Dict[str, Callable[[], Mechanism]] = {
    "four-bar": four_bar,
    "slider-crank": slider_crank,
}


def sweep(mechanism: Mechanism, steps: int = 36, turns: float = 1.0) -> Iterator[SweepStep]:
    """Drive the crank through ``turns`` revolutions, relaxing after every step."""

    if steps < 1:
        raise ValueError("steps must be positive")
    for step in range(1, steps + 1):
        phi = 2.0 * math.pi * turns * step / steps
        mechanism.driver.ang_target = phi
        iterations = mechanism.system.correct()
        if not iterations:
            logger.warning("%s: step %d (phi=%.3f) did not converge", mechanism.name, step, phi)
        yield SweepStep(step, phi, iterations, mechanism.coords())
