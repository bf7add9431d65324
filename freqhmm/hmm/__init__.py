r"""
.. currentmodule: freqhmm.hmm

Hidden Markov models over a fixed phrase, estimated from a state table (transition probabilities between hidden
states) and an observation table (emission probabilities of each phrase token per hidden state).

Model
-----

.. autosummary::
    :toctree: generated/
    :template: class_nomodule.rst

    SequenceModel
    build_model

Trellis procedures
------------------

All procedures start from a uniform seed of one for every hidden state rather than from an initial
distribution.

.. autosummary::
    :toctree: generated/
    :template: class_nomodule.rst

    Trellis
    viterbi
    forward
    backward

Baum-Welch re-estimation
------------------------

.. autosummary::
    :toctree: generated/
    :template: class_nomodule.rst

    reestimate
    state_probabilities
    transition_probabilities
    Reestimation
    BaumWelchReestimator
"""

from ._sequence_model import SequenceModel, build_model
from ._trellis import Trellis, viterbi, forward, backward
from ._baum_welch import Reestimation, reestimate, state_probabilities, transition_probabilities, \
    BaumWelchReestimator
