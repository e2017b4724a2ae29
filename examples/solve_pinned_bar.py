"""Example: pull a free node onto a fixed distance from a pinned one."""

from nodelink import Node, System


def main() -> None:
    system = System()
    a = system.add_node(Node(0.0, 0.0, base=True, name="A"))
    b = system.add_node(Node(10.0, 0.0, name="B"))
    system.pair(a, b, id="bar", length=5.0)

    iterations = system.correct()
    print("Iterations:", iterations)
    print("DOF:", system.dof)
    for node in system.nodes:
        print(f"{node.name}: ({node.x:.6f}, {node.y:.6f})")


if __name__ == "__main__":
    main()
