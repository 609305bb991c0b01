import numpy as np
import pytest

from mcstate.core.model import ScoringProtocol, validate_log_probability
from mcstate.core.parameter import RealParameter
from mcstate.core.reference import Component, Reference
from mcstate.core.state import State


class Normal(Component):
    """Standard normal log density over a parameter, recomputed only when dirty."""

    def __init__(self, x):
        self.x = Reference("x", x, required=True)
        self.evaluations = 0
        self._cached = None

    def __call__(self, state: State) -> float:
        if self._cached is None or state.is_dirty(self.x):
            self.evaluations += 1
            self._cached = -0.5 * float(np.sum(self.x.resolve().get_values() ** 2))
        return self._cached


def test_function_and_component_satisfy_protocol():
    def log_posterior(state):
        return 0.0

    assert isinstance(log_posterior, ScoringProtocol)
    assert isinstance(Normal(RealParameter("x", 0.0)), ScoringProtocol)


def test_scoring_skips_clean_state():
    x = RealParameter("x", [1.0, 2.0])
    state = State([x])
    score = Normal(x)
    state.connect(score)

    state.set_dirty(True)
    assert score(state) == -2.5
    state.set_dirty(False)
    assert score(state) == -2.5
    assert score.evaluations == 1

    x.set_value(0, 0.0)
    assert score(state) == -2.0
    assert score.evaluations == 2


@pytest.mark.parametrize("value", [0.0, -3, np.float64(-1.5), np.array([-2.0]), -np.inf])
def test_valid_scores(value):
    assert isinstance(validate_log_probability(value), float)


def test_invalid_scores():
    with pytest.raises(TypeError):
        validate_log_probability("high")
    with pytest.raises(TypeError):
        validate_log_probability(True)
    with pytest.raises(TypeError):
        validate_log_probability({"log_posterior": 0.0})
    with pytest.raises(ValueError):
        validate_log_probability(np.nan)
    with pytest.raises(ValueError):
        validate_log_probability(np.inf)
