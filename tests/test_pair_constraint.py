import math

import pytest

from nodelink.solver import (
    Combinator,
    ConstraintDefinitionError,
    Fixed,
    Node,
    PairConstraint,
    SolverConfig,
    System,
)


def test_length_correction_moves_only_free_node():
    a = Node(0, 0, base=True)
    b = Node(10, 0)
    c = PairConstraint(a, b, length=5)

    assert c.correct() is False
    assert (a.x, a.y) == (0.0, 0.0)
    assert b.x == pytest.approx(5.0)
    assert b.y == pytest.approx(0.0)

    assert c.correct() is True


def test_length_correction_splits_by_inverse_mass():
    a = Node(0, 0)
    b = Node(10, 0)
    PairConstraint(a, b, length=4).correct()
    assert a.x == pytest.approx(3.0)
    assert b.x == pytest.approx(7.0)

    heavy = Node(0, 0, mass=3)
    light = Node(10, 0)
    PairConstraint(heavy, light, length=6).correct()
    assert heavy.x == pytest.approx(1.0)
    assert light.x == pytest.approx(7.0)


def test_applied_correction_boosts_mass_of_free_endpoints():
    a = Node(0, 0, base=True)
    b = Node(10, 0)
    PairConstraint(a, b, length=5).correct()
    assert a.iter_mass_boost == 0.0
    assert b.iter_mass_boost == 1.0


def test_satisfied_length_leaves_nodes_untouched():
    a = Node(0, 0)
    b = Node(5.05, 0)
    assert PairConstraint(a, b, length=5).correct() is True
    assert (a.x, b.x) == (0.0, 5.05)
    assert b.iter_mass_boost == 0.0


def test_coincident_nodes_separate_along_x_axis():
    a = Node(0, 0, base=True)
    b = Node(0, 0)
    PairConstraint(a, b, length=3).correct()
    assert b.x == pytest.approx(3.0)
    assert b.y == pytest.approx(0.0)


def test_angle_correction_projects_onto_target_bearing():
    a = Node(0, 0, base=True)
    b = Node(10, 10)
    c = PairConstraint(a, b, angle=math.pi / 2)

    assert c.correct() is False
    assert b.x == pytest.approx(0.0, abs=1e-9)
    assert b.y == pytest.approx(10.0)
    assert c.correct() is True


def test_undirected_angle_may_settle_against_the_bearing():
    a = Node(0, 0, base=True)
    b = Node(-10, 1)
    PairConstraint(a, b, angle=0.0).correct()
    assert b.x == pytest.approx(-10.0)
    assert b.y == pytest.approx(0.0, abs=1e-9)


def test_directional_angle_flips_vector_to_permitted_side():
    a = Node(0, 0, base=True)
    b = Node(-10, 1)
    PairConstraint(a, b, angle=0.0, directional=1).correct()
    assert b.x == pytest.approx(10.0)
    assert b.y == pytest.approx(0.0, abs=1e-9)


def test_antidirectional_angle_points_against_bearing():
    a = Node(0, 0, base=True)
    b = Node(10, 1)
    PairConstraint(a, b, angle=0.0, directional=-1).correct()
    assert b.x == pytest.approx(-10.0)
    assert b.y == pytest.approx(0.0, abs=1e-9)


def test_directional_angle_on_permitted_side_only_removes_deviation():
    a = Node(0, 0, base=True)
    b = Node(10, 1)
    PairConstraint(a, b, angle=0.0, directional=1).correct()
    assert b.x == pytest.approx(10.0)
    assert b.y == pytest.approx(0.0, abs=1e-9)


def test_angle_correction_clamps_to_maximum_length():
    system = System(SolverConfig(lenmax=5.0))
    a = system.node(0, 0, base=True)
    b = system.node(10, 0.5)
    c = system.pair(a, b, angle=0.0)

    assert c.correct() is False
    assert b.x == pytest.approx(5.0)
    assert b.y == pytest.approx(0.0, abs=1e-9)


def test_current_marker_freezes_geometry_at_construction():
    a = Node(0, 0)
    b = Node(3, 4)
    c = PairConstraint(a, b, length="const", angle="current")
    assert c.len_target == Fixed(5.0)
    assert c.target_angle() == pytest.approx(math.atan2(4, 3))

    b.move_to(6, 8)
    assert c.target_length() == pytest.approx(5.0)


def test_callable_target_is_evaluated_against_constraint():
    a = Node(0, 0, base=True)
    b = Node(4, 0)
    c = PairConstraint(a, b, length=lambda con: con.length / 2)
    assert isinstance(c.len_target, Combinator)
    assert c.target_length() == pytest.approx(2.0)


def test_targets_can_be_reassigned():
    a = Node(0, 0, base=True)
    b = Node(10, 0)
    c = PairConstraint(a, b, length=10)
    c.len_target = 7
    assert c.target_length() == 7.0
    c.len_target = None
    assert c.len_target is None
    assert c.correct() is True


@pytest.mark.parametrize("directional", [2, -3])
def test_directional_must_be_unit(directional):
    with pytest.raises(ConstraintDefinitionError):
        PairConstraint(Node(0, 0), Node(1, 0), directional=directional)


def test_constraint_needs_two_nodes():
    n = Node(0, 0)
    with pytest.raises(ConstraintDefinitionError):
        PairConstraint(n, n, length=1)


def test_residuals_and_describe():
    a = Node(0, 0, base=True)
    b = Node(0, 10)
    c = PairConstraint(a, b, id="c", length=8, angle=0.0)

    residuals = {r.kind: r.error for r in c.residuals()}
    assert residuals["length"] == pytest.approx(2.0)
    assert residuals["angle"] == pytest.approx(math.pi / 2)

    info = c.describe()
    assert info["id"] == "c"
    assert info["mc_m1"] == 0.0
    assert info["mc_m2"] == 1.0
    assert info["r"] == pytest.approx(10.0)
    assert info["w"] == pytest.approx(90.0)
    assert info["dr"] == pytest.approx(-2.0)
    assert info["dw"] == pytest.approx(-90.0)


def test_constraint_without_targets_is_always_satisfied():
    a = Node(0, 0)
    b = Node(1, 1)
    assert PairConstraint(a, b).correct() is True
    assert (b.x, b.y) == (1.0, 1.0)
