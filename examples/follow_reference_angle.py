"""Example: a bar that stays perpendicular to a driven crank."""

import math

from nodelink import System, angle


def main() -> None:
    system = System()
    o = system.node(0.0, 0.0, base=True, name="O")
    p = system.node(10.0, 0.0, name="P")
    q = system.node(0.0, 10.0, name="Q")

    crank = system.pair(o, p, id="crank", length="const", angle=0.0)
    system.pair(o, q, id="follower", length="const", angle=angle.from_("crank", math.pi / 2))

    for deg in range(0, 181, 30):
        crank.ang_target = math.radians(deg)
        iterations = system.correct()
        follower = system.by_id("follower")
        print(
            f"crank={deg:4d} deg  itr={iterations:3d}  "
            f"follower={math.degrees(follower.angle):8.2f} deg  Q=({q.x:7.3f}, {q.y:7.3f})"
        )


if __name__ == "__main__":
    main()
