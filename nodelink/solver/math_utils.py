from __future__ import annotations

import math
import sys
from typing import Tuple

_PI2 = 2.0 * math.pi
_EPS = sys.float_info.epsilon
_SQRT_EPS = math.sqrt(_EPS)


def to_pi(w: float) -> float:
    """Normalise the angle ``w`` into ``(-pi, pi]``."""

    w = w % _PI2
    return w - _PI2 if w > math.pi else w


def _clamp(value: float, lo: float, hi: float) -> float:
    return min(max(value, lo), hi)


def _sign(value: float) -> float:
    if value > 0:
        return 1.0
    if value < 0:
        return -1.0
    return 0.0


def _vec2(a, b) -> Tuple[float, float]:
    return b.x - a.x, b.y - a.y


def _norm2(v: Tuple[float, float]) -> float:
    return math.hypot(v[0], v[1])


def _bearing(v: Tuple[float, float]) -> float:
    return math.atan2(v[1], v[0])


def _included_angle(u: Tuple[float, float], v: Tuple[float, float]) -> float:
    # signed angle from u to v
    return math.atan2(u[0] * v[1] - u[1] * v[0], u[0] * v[0] + u[1] * v[1])


def _mass_shares(im1: float, im2: float) -> Tuple[float, float]:
    imc = im1 + im2
    if imc:
        return im1 / imc, im2 / imc
    return im1, im2


__all__ = [
    "to_pi",
    "_EPS",
    "_PI2",
    "_SQRT_EPS",
    "_bearing",
    "_clamp",
    "_included_angle",
    "_mass_shares",
    "_norm2",
    "_sign",
    "_vec2",
]
