import unittest

import numpy as np
import pytest
from numpy.testing import assert_equal, assert_raises, assert_array_almost_equal, assert_array_equal, assert_

from freqhmm.hmm import viterbi, forward, backward, reestimate, BaumWelchReestimator, Reestimation
from freqhmm.tables import LabeledTable, UNDEFINED
from freqhmm.util.exceptions import ShapeMismatchError, UndefinedRatioWarning, DataQualityWarning


class TestTwoStateReestimation(unittest.TestCase):

    @pytest.fixture(autouse=True)
    def _model(self, two_state_model):
        self.model = two_state_model
        self.result = reestimate(self.model, forward(self.model), backward(self.model))

    def test_gamma(self):
        gamma = self.result.gamma
        assert_equal(gamma.name, 'gamma')
        assert_equal(gamma.row_labels, ('A', 'B'))
        assert_equal(gamma.column_labels, ('token1', 'token2'))
        expected = np.array([[.261, .3915], [.187, .0565]]) / .448
        assert_array_almost_equal(gamma.values, expected, decimal=12)

    def test_xi(self):
        xi = self.result.xi
        assert_equal(len(xi), 1)
        assert_equal(xi[0].name, 'xi_ij (1)')
        assert_equal(xi[0].row_labels, ('A', 'B'))
        assert_equal(xi[0].column_labels, ('A', 'B'))
        expected = np.array([[.243, .018], [.1485, .0385]]) / .448
        assert_array_almost_equal(xi[0].values, expected, decimal=12)

    def test_transition_prime(self):
        a = self.result.transition_prime
        assert_equal(a.name, 'a_ij')
        assert_equal(a.shape, (2, 2))
        expected = np.array([[.243 / .261, .018 / .261], [.1485 / .187, .0385 / .187]])
        assert_array_almost_equal(a.values, expected, decimal=10)
        assert_(not a.has_undefined)

    def test_emission_prime(self):
        b = self.result.emission_prime
        assert_equal(b.name, 'b_i')
        assert_equal(b.row_labels, ('token1',))
        assert_equal(b.column_labels, ('A', 'B'))
        assert_array_almost_equal(b.values, [[1., 1.]], decimal=10)

    def test_keeps_trellises(self):
        assert_(self.result.forward == forward(self.model))
        assert_(self.result.backward == backward(self.model))


def test_single_position(model_factory):
    model = model_factory([[1, 2], [3, 1]], [[2, 5]])
    with pytest.warns(UndefinedRatioWarning):
        result = reestimate(model, forward(model), backward(model))
    assert_equal(result.xi, [])
    # alpha_1 is the emission scaled by the column sums 13/12 and 11/12 of the transition matrix
    assert_array_almost_equal(result.gamma.values, [[26 / 81], [55 / 81]])
    assert_(np.all(result.transition_prime.undefined))
    assert_equal(result.emission_prime.shape, (0, 2))


def test_zero_denominator(model_factory):
    # s1 cannot emit the first token, so its gamma vanishes on all but the last position
    model = model_factory([[1, 1], [1, 1]], [[1, 0], [1, 1]])
    with pytest.warns(UndefinedRatioWarning):
        result = reestimate(model, forward(model), backward(model))
    assert_array_almost_equal(result.xi[0].values, [[.5, .5], [0., 0.]])
    a = result.transition_prime
    assert_array_equal(a.undefined, [[False, False], [True, True]])
    assert_array_almost_equal(a.row('s0'), [.5, .5])
    assert_(a.cell('s1', 's0') is np.ma.masked)
    b = result.emission_prime
    assert_array_equal(b.undefined, [[False, True]])
    assert_equal(b.cell('w1', 's0'), 1.)


def test_non_finite_probabilities_become_undefined(model_factory):
    # w2 has no counts, so its relative frequencies are 0/0
    with pytest.warns(DataQualityWarning, match='w2'):
        model = model_factory([[1, 1], [1, 1]], [[1, 1], [0, 0], [1, 1]])
    alpha = forward(model)
    beta = backward(model)
    delta = viterbi(model)
    assert_array_equal(alpha.position(1), [.5, .5])
    assert_(np.all(np.isnan(alpha.values[:, 2:])))
    assert_(np.all(np.isnan(delta.values[:, 2:])))
    assert_(np.all(np.isnan(beta.filled()[:, 1])))
    assert_array_equal(beta.filled()[:, 2:], [[.5, 1.], [.5, 1.]])

    with pytest.warns(UndefinedRatioWarning):
        result = reestimate(model, alpha, beta)
    assert_(np.all(result.gamma.undefined))
    assert_(np.all(result.xi[0].undefined) and np.all(result.xi[1].undefined))
    assert_(np.all(result.transition_prime.undefined))
    assert_(np.all(result.emission_prime.undefined))
    assert_(result.transition_prime.cell('s0', 's0') is UNDEFINED)
    assert_(result.emission_prime.cell('w1', 's1') is UNDEFINED)


def test_posteriors_are_normalized(random_model):
    result = reestimate(random_model, forward(random_model), backward(random_model))
    assert_array_almost_equal(result.gamma.values.sum(axis=0), np.ones(random_model.n_positions), decimal=9)
    assert_equal(len(result.xi), random_model.n_positions - 1)
    for xi in result.xi:
        assert_(np.abs(xi.values.sum() - 1.) < 1e-9)
    assert_equal(result.emission_prime.shape, (random_model.n_positions - 1, random_model.n_states))


def test_transition_prime_rows_sum_to_one(model_factory):
    # rows of a' are normalized when summing xi over t < T matches gamma over t < T
    model = model_factory([[2, 3, 1], [1, 1, 4], [5, 2, 2]], [[1, 2, 3], [4, 1, 1], [2, 2, 2], [3, 1, 5]])
    result = reestimate(model, forward(model), backward(model))
    assert_array_almost_equal(result.transition_prime.values.sum(axis=1), np.ones(3), decimal=9)


def test_trellis_shape_mismatch(two_state_model, model_factory):
    other = model_factory([[1, 1], [1, 1]], [[1, 1], [1, 1], [1, 1]])
    with assert_raises(ShapeMismatchError):
        reestimate(two_state_model, forward(other), backward(two_state_model))
    with assert_raises(ShapeMismatchError):
        reestimate(two_state_model, forward(two_state_model), backward(other))


def test_invalid_arguments(two_state_model):
    alpha = forward(two_state_model)
    beta = backward(two_state_model)
    with assert_raises(TypeError):
        reestimate(alpha, alpha, beta)
    with assert_raises(TypeError):
        reestimate(two_state_model, alpha.values, beta)


def test_viterbi_trellis_is_accepted_as_shape(two_state_model):
    # any trellis of matching shape is accepted, the result is only meaningful for forward/backward
    result = reestimate(two_state_model, viterbi(two_state_model), backward(two_state_model))
    assert_(isinstance(result, Reestimation))


class TestBaumWelchReestimator(unittest.TestCase):

    @pytest.fixture(autouse=True)
    def _model(self, two_state_model):
        self.model = two_state_model

    def test_fit(self):
        estimator = BaumWelchReestimator()
        assert_(not estimator.has_model)
        assert_(estimator.fetch_model() is None)
        assert_(estimator.fit(self.model) is estimator)
        assert_(estimator.has_model)
        result = estimator.fetch_model()
        expected = reestimate(self.model, forward(self.model), backward(self.model))
        assert_(result.transition_prime == expected.transition_prime)
        assert_(result.emission_prime == expected.emission_prime)
        assert_(result.gamma == expected.gamma)
        assert_(estimator.model is result)

    def test_fit_with_trellises(self):
        alpha = forward(self.model)
        beta = backward(self.model)
        result = BaumWelchReestimator().fit_fetch(self.model, forward=alpha, backward=beta)
        assert_(result.forward is alpha)
        assert_(result.backward is beta)

    def test_refit_replaces_model(self):
        estimator = BaumWelchReestimator()
        first = estimator.fit_fetch(self.model)
        second = estimator.fit_fetch(self.model)
        assert_(first is not second)
        assert_(isinstance(second.transition_prime, LabeledTable))


def test_trellis_properties(two_state_model):
    result = reestimate(two_state_model, forward(two_state_model), backward(two_state_model))
    bare = Reestimation(result.gamma, result.xi, result.transition_prime, result.emission_prime)
    assert_(bare.forward is None and bare.backward is None)
    for prop in (Reestimation.forward, Reestimation.backward):
        assert_('trellis' in prop.__doc__)
