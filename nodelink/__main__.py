import argparse
import json
import logging
import math
from typing import Optional, Sequence

from nodelink.mechanisms import MECHANISMS, sweep
from nodelink.solver import SolverConfig

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Drive a demo mechanism through one crank revolution")
    parser.add_argument(
        "--mechanism",
        choices=sorted(MECHANISMS),
        default="four-bar",
        help="Mechanism to simulate (default: four-bar)",
    )
    parser.add_argument(
        "--steps",
        type=int,
        default=36,
        help="Number of crank steps per revolution (default: 36)",
    )
    parser.add_argument(
        "--itrmax",
        type=int,
        default=None,
        help="Maximum relaxation sweeps per step",
    )
    parser.add_argument(
        "--lentol",
        type=float,
        default=None,
        help="Length tolerance used by the convergence checks",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit one JSON object per step instead of a table",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    mechanism = MECHANISMS[args.mechanism]()
    if args.itrmax is not None or args.lentol is not None:
        current = mechanism.system.config
        mechanism.system.config = SolverConfig(
            itrmax=args.itrmax if args.itrmax is not None else current.itrmax,
            lentol=args.lentol if args.lentol is not None else current.lentol,
            lenmax=current.lenmax,
        )
    logger.info("Running %s for %d steps", mechanism.name, args.steps)

    names = list(mechanism.nodes)
    if not args.json:
        header = ["step", "phi[deg]", "itr"] + [f"{name}.x" for name in names] + [f"{name}.y" for name in names]
        print(" ".join(f"{col:>9}" for col in header))

    failures = 0
    for result in sweep(mechanism, steps=args.steps):
        if not result.iterations:
            failures += 1
        if args.json:
            print(json.dumps({
                "step": result.step,
                "phi": result.phi,
                "iterations": result.iterations,
                "coords": {name: list(xy) for name, xy in result.coords.items()},
            }))
            continue
        row = [f"{result.step:>9d}", f"{math.degrees(result.phi):>9.2f}", f"{result.iterations:>9d}"]
        row += [f"{result.coords[name][0]:>9.3f}" for name in names]
        row += [f"{result.coords[name][1]:>9.3f}" for name in names]
        print(" ".join(row))

    if failures:
        logger.warning("%d of %d steps did not converge", failures, args.steps)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
