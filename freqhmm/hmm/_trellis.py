import logging

import numpy as np

from .. import config
from ..tables import LabeledTable
from ..util.numeric import ordered_sum, round_half_away
from ._sequence_model import SequenceModel

log = logging.getLogger(__name__)


class Trellis(LabeledTable):
    r""" State-by-position table of partial probabilities. Rows are the hidden states, columns are the synthetic
    start column (position 0) followed by one column per phrase token (positions 1 to T).

    Parameters
    ----------
    name : str
        Name of the procedure that produced the trellis.
    row_labels : sequence of str
        Hidden states.
    column_labels : sequence of str
        Start label and phrase tokens.
    values : (n_states, n_positions + 1) array_like
        Partial probabilities.
    """

    @property
    def n_positions(self) -> int:
        r""" Number of phrase positions, i.e., columns without the start column. """
        return self.n_columns - 1

    def position(self, t: int):
        r""" Column of phrase position `t`, where 0 is the start column. """
        return self.values[:, self.column_index(t)]

    def terminal(self):
        r""" Column of the last phrase position. """
        return self.values[:, -1]

    def terminal_sum(self) -> float:
        r""" Sum over all states of the last column, for the forward trellis this is the phrase probability. """
        return float(ordered_sum(np.ma.getdata(self.terminal())))


def _make_trellis(name: str, model: SequenceModel, values) -> Trellis:
    return Trellis(name, model.states, (config.start_label, *model.tokens), values)


def viterbi(model: SequenceModel) -> Trellis:
    r""" Computes the Viterbi trellis, i.e., for each phrase position and hidden state the maximal probability of
    any state path ending in that state.

    The start column is a uniform seed :math:`\delta_0(s) = 1`. Each following column is

    .. math::
        \delta_t(s) = \max_{s'} \mathrm{round}(\delta_{t-1}(s') a_{s's} b_s(t), 10),

    where rounding is applied to each candidate before the maximum is selected, halves are rounded away from
    zero (see :func:`round_half_away <freqhmm.util.numeric.round_half_away>`). Only the maximal values are
    kept, no backpointers are stored, hence the trellis does not allow to reconstruct a path.

    Parameters
    ----------
    model : SequenceModel
        The model.

    Returns
    -------
    trellis : Trellis
        The Viterbi trellis of shape (n_states, n_positions + 1).
    """
    A = model.transition_matrix
    B = model.emission_matrix
    delta = np.empty((model.n_states, model.n_positions + 1), dtype=config.dtype)
    delta[:, 0] = 1.
    for t in range(1, model.n_positions + 1):
        # candidates[s', s] for predecessor s' and state s
        candidates = round_half_away(delta[:, t - 1, None] * A * B[t - 1], config.viterbi_decimals)
        delta[:, t] = np.max(candidates, axis=0)
    log.debug("Computed Viterbi trellis over %d positions.", model.n_positions)
    return _make_trellis('viterbi', model, delta)


def forward(model: SequenceModel) -> Trellis:
    r""" Computes the forward trellis.

    Starting from the uniform seed :math:`\alpha_0(s) = 1`, the columns are

    .. math::
        \alpha_t(s) = b_s(t) \sum_{s'} \alpha_{t-1}(s') a_{s's}.

    No scaling or rounding is applied.

    Parameters
    ----------
    model : SequenceModel
        The model.

    Returns
    -------
    trellis : Trellis
        The forward trellis of shape (n_states, n_positions + 1).
    """
    A = model.transition_matrix
    B = model.emission_matrix
    alpha = np.empty((model.n_states, model.n_positions + 1), dtype=config.dtype)
    alpha[:, 0] = 1.
    for t in range(1, model.n_positions + 1):
        alpha[:, t] = B[t - 1] * ordered_sum(alpha[:, t - 1, None] * A, axis=0)
    log.debug("Computed forward trellis over %d positions.", model.n_positions)
    return _make_trellis('forward', model, alpha)


def backward(model: SequenceModel) -> Trellis:
    r""" Computes the backward trellis.

    The last column is :math:`\beta_T(s) = 1`, the columns before are filled right to left by

    .. math::
        \beta_t(s) = \sum_j \beta_{t+1}(j) a_{sj} b_j(t+1)

    for :math:`t = T-1, \ldots, 1`. The start column is not computed and is undefined.

    Parameters
    ----------
    model : SequenceModel
        The model.

    Returns
    -------
    trellis : Trellis
        The backward trellis of shape (n_states, n_positions + 1) with an undefined start column.
    """
    A = model.transition_matrix
    B = model.emission_matrix
    T = model.n_positions
    beta = np.empty((model.n_states, T + 1), dtype=config.dtype)
    beta[:, T] = 1.
    for t in range(T - 1, 0, -1):
        # B[t] belongs to position t + 1
        beta[:, t] = ordered_sum(beta[None, :, t + 1] * A * B[t], axis=1)
    beta[:, 0] = np.nan
    mask = np.zeros_like(beta, dtype=bool)
    mask[:, 0] = True
    log.debug("Computed backward trellis over %d positions.", T)
    return _make_trellis('backward', model, np.ma.MaskedArray(beta, mask=mask))
