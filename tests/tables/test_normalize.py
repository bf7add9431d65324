import warnings

import numpy as np
import pytest
from numpy.testing import assert_equal, assert_array_equal, assert_allclose, assert_raises, assert_

from freqhmm.tables import FrequencyTable, ProbabilityTable, LabeledTable, normalize, transpose
from freqhmm.util.exceptions import MalformedTableError


def test_relative_frequencies():
    table = FrequencyTable('text', ['NOUN', 'VERB'], ['NOUN', 'VERB', 'ADJ'], [[1, 3, 4], [5, 0, 5]])
    relative = normalize(table)
    assert_(isinstance(relative, ProbabilityTable))
    assert_equal(relative.name, 'text')
    assert_equal(relative.row_labels, table.row_labels)
    assert_equal(relative.column_labels, table.column_labels)
    assert_equal(relative.sum_label, table.sum_label)
    assert_array_equal(relative.probabilities, [[.125, .375, .5], [.5, 0., .5]])
    assert_array_equal(relative.sums, [1., 1.])


def test_input_is_not_modified():
    table = FrequencyTable('text', ['a'], ['a', 'b'], [[1, 3]])
    normalize(table)
    assert_array_equal(table.counts, [[1., 3.]])
    assert_array_equal(table.sums, [4.])


@pytest.mark.parametrize("n_rows,n_columns", [(1, 1), (3, 3), (7, 4), (20, 11)])
def test_rows_sum_to_one(fixed_seed, n_rows, n_columns):
    counts = np.random.randint(0, 1000, size=(n_rows, n_columns))
    counts[:, 0] += 1
    labels = [str(i) for i in range(n_columns)]
    relative = normalize(FrequencyTable('t', [str(i) for i in range(n_rows)], labels, counts))
    assert_allclose(relative.probabilities.sum(axis=1), 1., atol=1e-9)
    assert_allclose(relative.sums, 1., atol=1e-9)
    assert_(np.all(relative.probabilities >= 0))


def test_zero_row_sum_propagates():
    table = FrequencyTable('phrase', ['w1', 'w2'], ['a', 'b'], [[0, 0], [1, 1]])
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        relative = normalize(table)
    assert_(np.all(np.isnan(relative.probabilities[0])))
    assert_(np.isnan(relative.sums[0]))
    assert_array_equal(relative.probabilities[1], [.5, .5])


def test_only_frequency_tables():
    with assert_raises(TypeError):
        normalize(LabeledTable('t', ['a'], ['a'], [[1.]]))


def test_transposed_tables_are_rejected():
    table = FrequencyTable('text', ['a', 'b'], ['a', 'b'], [[1, 3], [2, 2]])
    with assert_raises(MalformedTableError):
        normalize(table.transpose())
    relative = normalize(table.transpose().transpose())
    assert_(transpose(transpose(relative)) == relative)
