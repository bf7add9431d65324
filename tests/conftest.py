# pytest specific configuration file containing eg fixtures.
import os
import random

import numpy as np
import pytest

from freqhmm.hmm import build_model
from freqhmm.tables import FrequencyTable, normalize


@pytest.fixture
def fixed_seed():
    random.seed(42)
    np.random.mtrand.seed(42)
    yield
    new_seed = int.from_bytes(os.urandom(16), 'big') % (2 ** 32 - 1)
    random.seed(new_seed)
    np.random.mtrand.seed(new_seed)


def make_model(state_counts, observation_counts, states=None, tokens=None):
    r""" Builds a model from count matrices, labels default to s0, s1, ... and w1, w2, ... """
    state_counts = np.asarray(state_counts, dtype=float)
    observation_counts = np.asarray(observation_counts, dtype=float)
    if states is None:
        states = [f's{i}' for i in range(state_counts.shape[0])]
    if tokens is None:
        tokens = [f'w{t}' for t in range(1, observation_counts.shape[0] + 1)]
    state_table = normalize(FrequencyTable('text', states, states, state_counts))
    observation_table = normalize(FrequencyTable('phrase', tokens, states, observation_counts))
    return build_model(state_table, observation_table)


@pytest.fixture
def two_state_model():
    r""" Transitions A->A=.6, A->B=.4, B->A=.3, B->B=.7 and a phrase of two tokens with emissions
    (.5, .5) and (.9, .1). """
    return make_model([[6, 4], [3, 7]], [[1, 1], [9, 1]], states=['A', 'B'], tokens=['token1', 'token2'])


@pytest.fixture(params=[(2, 1), (2, 5), (3, 4), (5, 12)], ids=lambda p: f"n_states={p[0]}-n_positions={p[1]}")
def random_model(request, fixed_seed):
    n_states, n_positions = request.param
    state_counts = np.random.randint(1, 20, size=(n_states, n_states))
    observation_counts = np.random.randint(1, 20, size=(n_positions, n_states))
    return make_model(state_counts, observation_counts)


@pytest.fixture
def model_factory():
    return make_model
