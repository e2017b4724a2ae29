import math

import pytest

from nodelink.mechanisms import MECHANISMS, four_bar, slider_crank, sweep


def _distance(p, q):
    return math.hypot(q[0] - p[0], q[1] - p[1])


def test_four_bar_starts_closed():
    mechanism = four_bar()
    coords = mechanism.coords()
    assert _distance(coords["A0"], coords["A"]) == pytest.approx(10.0)
    assert _distance(coords["A"], coords["B"]) == pytest.approx(40.0)
    assert _distance(coords["B0"], coords["B"]) == pytest.approx(30.0)
    assert mechanism.system.correct() == 1


def test_four_bar_rejects_open_chain():
    with pytest.raises(ValueError):
        four_bar(ground=100.0)


def test_four_bar_sweep_keeps_link_lengths():
    mechanism = four_bar()
    steps = list(sweep(mechanism, steps=36))

    assert len(steps) == 36
    assert all(step.iterations > 0 for step in steps)
    for step in steps:
        coords = step.coords
        assert _distance(coords["A0"], coords["A"]) == pytest.approx(10.0, abs=0.25)
        assert _distance(coords["A"], coords["B"]) == pytest.approx(40.0, abs=0.25)
        assert _distance(coords["B0"], coords["B"]) == pytest.approx(30.0, abs=0.25)
        # crank follows the drive angle
        ax, ay = coords["A"]
        assert math.cos(math.atan2(ay, ax) - step.phi) == pytest.approx(1.0, abs=1e-3)
        # rocker stays above the ground link
        assert coords["B"][1] > 0


def test_slider_stays_on_positive_axis():
    mechanism = slider_crank()
    for step in sweep(mechanism, steps=24):
        assert step.iterations > 0
        bx, by = step.coords["B"]
        assert by == pytest.approx(0.0, abs=0.1)
        assert bx > 0
        assert _distance(step.coords["A"], step.coords["B"]) == pytest.approx(30.0, abs=0.25)


def test_slider_crank_requires_longer_coupler():
    with pytest.raises(ValueError):
        slider_crank(crank=10.0, coupler=5.0)


def test_sweep_rejects_non_positive_steps():
    with pytest.raises(ValueError):
        list(sweep(slider_crank(), steps=0))


def test_registry_builds_each_mechanism():
    for name, factory in MECHANISMS.items():
        assert factory().name == name
