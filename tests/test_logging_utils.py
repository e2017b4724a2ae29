import logging

import numpy as np
import pytest

from nodelink.logging_utils import _safe_repr, apply_debug_logging, debug_log_call
from nodelink.solver import Node, PairConstraint


def _double(value):
    return value * 2


def _explode():
    raise RuntimeError("boom")


def test_safe_repr_summarises_arrays():
    small = _safe_repr(np.array([1.0, 2.0]))
    assert "shape=(2,)" in small and "values=[1.0, 2.0]" in small

    large = _safe_repr(np.arange(10.0))
    assert "min=0" in large and "max=9" in large


def test_safe_repr_of_nodes_and_constraints():
    a = Node(1, 2, base=True, name="A")
    b = Node(3, 4)
    assert _safe_repr(a) == "<A (1, 2) base>"
    assert _safe_repr(b) == "<node (3, 4)>"
    assert _safe_repr(PairConstraint(a, b, id="ab")) == "<PairConstraint 'ab'>"


def test_safe_repr_truncates_sequences():
    rendered = _safe_repr(list(range(10)))
    assert rendered.startswith("[0, 1, 2, 3")
    assert "(10 items)" in rendered


def test_debug_log_call_traces_entry_and_exit(caplog):
    logger = logging.getLogger("nodelink.tests.trace")
    wrapped = debug_log_call(logger)(_double)

    with caplog.at_level(logging.DEBUG, logger=logger.name):
        assert wrapped(21) == 42

    messages = [record.getMessage() for record in caplog.records]
    assert messages == ["Entering _double (args=[21])", "Exiting _double -> 42"]
    assert debug_log_call(logger)(wrapped) is wrapped


def test_debug_log_call_is_silent_above_debug(caplog):
    logger = logging.getLogger("nodelink.tests.quiet")
    wrapped = debug_log_call(logger)(_double)
    with caplog.at_level(logging.INFO, logger=logger.name):
        wrapped(1)
    assert caplog.records == []


def test_debug_log_call_reraises(caplog):
    logger = logging.getLogger("nodelink.tests.raise")
    wrapped = debug_log_call(logger)(_explode)
    with caplog.at_level(logging.DEBUG, logger=logger.name):
        with pytest.raises(RuntimeError):
            wrapped()
    assert any(record.getMessage() == "Exception in _explode" for record in caplog.records)


def test_apply_debug_logging_honours_skip():
    namespace = {"__name__": __name__, "_double": _double, "_explode": _explode}
    apply_debug_logging(namespace, skip={"_explode"})

    assert getattr(namespace["_double"], "_debug_logging_wrapped", False)
    assert namespace["_explode"] is _explode
