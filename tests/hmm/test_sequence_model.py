import unittest

import numpy as np
import pytest
from numpy.testing import assert_equal, assert_raises, assert_array_equal, assert_

from freqhmm.hmm import SequenceModel, build_model
from freqhmm.tables import FrequencyTable, LabeledTable, normalize
from freqhmm.util.exceptions import ShapeMismatchError, MalformedTableError, DataQualityWarning


def test_lookups(two_state_model):
    m = two_state_model
    assert_equal(m.states, ('A', 'B'))
    assert_equal(m.tokens, ('token1', 'token2'))
    assert_equal(m.n_states, 2)
    assert_equal(m.n_positions, 2)
    assert_equal(m.transition('A', 'B'), .4)
    assert_equal(m.transition(1, 0), .3)
    assert_equal(m.emission('A', 1), .5)
    assert_equal(m.emission('B', 2), .1)
    assert_array_equal(m.transition_matrix, [[.6, .4], [.3, .7]])
    assert_array_equal(m.emission_matrix, [[.5, .5], [.9, .1]])


def test_lookups_invalid(two_state_model):
    with assert_raises(KeyError):
        two_state_model.transition('A', 'C')
    with assert_raises(IndexError):
        two_state_model.transition(2, 0)
    with assert_raises(IndexError):
        two_state_model.emission('A', 0)
    with assert_raises(IndexError):
        two_state_model.emission('A', 3)
    with assert_raises(TypeError):
        two_state_model.emission('A', 1.)


def test_model_is_immutable(two_state_model):
    with assert_raises(ValueError):
        two_state_model.transition_matrix[0, 0] = 1.
    with assert_raises(ValueError):
        two_state_model.emission_matrix[0, 0] = 1.


def test_zero_copy(two_state_model):
    assert_(two_state_model.transition_matrix is two_state_model.state_table.values)


class TestConstruction(unittest.TestCase):

    def setUp(self) -> None:
        self.states = normalize(FrequencyTable('text', ['A', 'B'], ['A', 'B'], [[1, 1], [1, 3]]))
        self.phrase = normalize(FrequencyTable('phrase', ['w1'], ['A', 'B'], [[1, 4]]))

    def test_build(self):
        model = build_model(self.states, self.phrase)
        assert_(isinstance(model, SequenceModel))
        assert_(model.state_table is self.states)
        assert_(model.observation_table is self.phrase)

    def test_state_table_not_square(self):
        states = normalize(FrequencyTable('text', ['A', 'B'], ['A', 'B', 'C'], [[1, 1, 1], [1, 3, 1]]))
        with assert_raises(ShapeMismatchError):
            build_model(states, self.phrase)

    def test_observation_columns_mismatch(self):
        phrase = normalize(FrequencyTable('phrase', ['w1'], ['A', 'B', 'C'], [[1, 4, 1]]))
        with assert_raises(ShapeMismatchError):
            build_model(self.states, phrase)

    def test_empty_phrase(self):
        phrase = LabeledTable('phrase', [], ['A', 'B'], np.empty((0, 2)))
        with assert_raises(MalformedTableError):
            build_model(self.states, phrase)

    def test_no_tables(self):
        with assert_raises(TypeError):
            build_model(np.eye(2), self.phrase)

    def test_label_mismatch_warns(self):
        phrase = normalize(FrequencyTable('phrase', ['w1'], ['X', 'Y'], [[1, 4]]))
        with pytest.warns(DataQualityWarning):
            model = build_model(self.states, phrase)
        assert_equal(model.states, ('A', 'B'))

    def test_non_finite_probabilities_warn(self):
        phrase = normalize(FrequencyTable('phrase', ['w1', 'w2'], ['A', 'B'], [[0, 0], [1, 4]]))
        with pytest.warns(DataQualityWarning, match='w1'):
            model = build_model(self.states, phrase)
        assert_(np.isnan(model.emission('A', 1)))
