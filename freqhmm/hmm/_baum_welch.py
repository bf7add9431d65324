import logging
import warnings
from typing import List, Optional

import numpy as np

from ..base import Estimator, Model
from ..tables import LabeledTable
from ..util.exceptions import ShapeMismatchError, UndefinedRatioWarning
from ..util.numeric import ordered_sum
from ._sequence_model import SequenceModel
from ._trellis import Trellis, forward as forward_procedure, backward as backward_procedure

log = logging.getLogger(__name__)


class Reestimation(Model):
    r""" Result of one Baum-Welch re-estimation step.

    Parameters
    ----------
    gamma : LabeledTable
        State posteriors, rows are hidden states and columns are the phrase tokens.
    xi : list of LabeledTable
        Pairwise transition posteriors, one (n_states, n_states) table per phrase position except the last.
    transition_prime : LabeledTable
        Re-estimated transition probabilities.
    emission_prime : LabeledTable
        Re-estimated emission probabilities, rows are the phrase tokens except the last, columns the hidden states.
    forward : Trellis, optional, default=None
        The forward trellis the step was computed from.
    backward : Trellis, optional, default=None
        The backward trellis the step was computed from.
    """

    def __init__(self, gamma: LabeledTable, xi: List[LabeledTable], transition_prime: LabeledTable,
                 emission_prime: LabeledTable, forward: Optional[Trellis] = None,
                 backward: Optional[Trellis] = None):
        super().__init__()
        self._gamma = gamma
        self._xi = list(xi)
        self._transition_prime = transition_prime
        self._emission_prime = emission_prime
        self._forward = forward
        self._backward = backward

    @property
    def gamma(self) -> LabeledTable:
        r""" The state posteriors :math:`\gamma_t(s)`, each column sums to one. """
        return self._gamma

    @property
    def xi(self) -> List[LabeledTable]:
        r""" The pairwise transition posteriors :math:`\xi_t(i, j)`, each table sums to one. """
        return list(self._xi)

    @property
    def transition_prime(self) -> LabeledTable:
        r""" Re-estimated transition table :math:`a'_{ij}`. """
        return self._transition_prime

    @property
    def emission_prime(self) -> LabeledTable:
        r""" Re-estimated emission table :math:`b'_j(t)`. """
        return self._emission_prime

    @property
    def forward(self) -> Optional[Trellis]:
        r""" The forward trellis the step was computed from, None if it was not recorded. """
        return self._forward

    @property
    def backward(self) -> Optional[Trellis]:
        r""" The backward trellis the step was computed from, None if it was not recorded. """
        return self._backward


def _check_trellis(model: SequenceModel, trellis, name):
    if not isinstance(trellis, LabeledTable):
        raise TypeError(f"The {name} trellis must be a labeled table, got {type(trellis).__name__}.")
    expected = (model.n_states, model.n_positions + 1)
    if trellis.shape != expected:
        raise ShapeMismatchError(f"The {name} trellis has shape {trellis.shape} but the model requires {expected}.")
    # drop the start column, column t - 1 belongs to position t
    return trellis.filled()[:, 1:]


def _ratio(numerator, denominator, undefined, name):
    r""" Divides and marks cells as undefined where the denominator vanishes or the result is not finite. """
    with np.errstate(divide='ignore', invalid='ignore'):
        values = numerator / denominator
    undefined = undefined | ~np.isfinite(values)
    if np.any(undefined):
        msg = f"{np.count_nonzero(undefined)} of {undefined.size} cells of '{name}' are undefined."
        log.debug(msg)
        warnings.warn(msg, UndefinedRatioWarning, stacklevel=3)
        values = np.where(undefined, np.nan, values)
        return np.ma.MaskedArray(values, mask=undefined)
    return values


def state_probabilities(model: SequenceModel, alpha: np.ndarray, beta: np.ndarray) -> LabeledTable:
    r""" Computes the state posteriors

    .. math::
        \gamma_t(s) = \frac{\alpha_t(s)\beta_t(s)}{\sum_{s'} \alpha_t(s')\beta_t(s')}

    for the phrase positions :math:`t = 1, \ldots, T`.

    Parameters
    ----------
    model : SequenceModel
        The model.
    alpha : (n_states, n_positions) ndarray
        Forward trellis without start column.
    beta : (n_states, n_positions) ndarray
        Backward trellis without start column.

    Returns
    -------
    gamma : LabeledTable
        Table with the hidden states as rows and the phrase tokens as columns.
    """
    products = alpha * beta
    denominators = ordered_sum(products, axis=0)
    gamma = _ratio(products, denominators[None, :], np.zeros(products.shape, dtype=bool), 'gamma')
    return LabeledTable('gamma', model.states, model.tokens, gamma)


def transition_probabilities(model: SequenceModel, alpha: np.ndarray, beta: np.ndarray) -> List[LabeledTable]:
    r""" Computes the pairwise transition posteriors

    .. math::
        \xi_t(i, j) = \frac{\alpha_t(i) a_{ij} \beta_{t+1}(j) b_j(t+1)}
                           {\sum_{k,l} \alpha_t(k) a_{kl} \beta_{t+1}(l) b_l(t+1)}

    for every phrase position :math:`t = 1, \ldots, T-1`. Each matrix is normalized by its grand total.

    Parameters
    ----------
    model : SequenceModel
        The model.
    alpha : (n_states, n_positions) ndarray
        Forward trellis without start column.
    beta : (n_states, n_positions) ndarray
        Backward trellis without start column.

    Returns
    -------
    xi : list of LabeledTable
        The n_positions - 1 transition posterior tables, empty for phrases of length one.
    """
    A = model.transition_matrix
    B = model.emission_matrix
    xi = []
    for t in range(1, model.n_positions):
        # alpha[:, t - 1] is position t, beta[:, t] and B[t] are position t + 1
        numerator = alpha[:, t - 1, None] * A * beta[None, :, t] * B[t]
        total = ordered_sum(numerator)
        name = f'xi_ij ({t})'
        values = _ratio(numerator, total, np.full(numerator.shape, total == 0.), name)
        xi.append(LabeledTable(name, model.states, model.states, values))
    return xi


def reestimate(model: SequenceModel, forward: LabeledTable, backward: LabeledTable) -> Reestimation:
    r""" Performs one Baum-Welch re-estimation step from the forward and backward trellises of a model.

    With :math:`\gamma` from :func:`state_probabilities` and :math:`\xi` from :func:`transition_probabilities`,
    the re-estimated tables are

    .. math::
        a'_{ij} = \frac{\sum_t \xi_t(i, j)}{\sum_{t<T} \gamma_t(i)},\quad
        b'_j(t) = \frac{\gamma_t(j)}{\sum_{t'<T} \gamma_{t'}(j)},

    where :math:`b'` has a row for each position :math:`t = 1, \ldots, T-1`. The denominators are accumulated over
    all positions and then reduced by the last one. Cells with a denominator of exactly zero are undefined, so
    for a phrase of length one the whole transition table is undefined.

    Parameters
    ----------
    model : SequenceModel
        The model.
    forward : LabeledTable
        Forward trellis of the model, see :func:`forward <freqhmm.hmm.forward>`.
    backward : LabeledTable
        Backward trellis of the model, see :func:`backward <freqhmm.hmm.backward>`.

    Returns
    -------
    result : Reestimation
        Gamma, xi and the re-estimated transition and emission tables.

    Raises
    ------
    ShapeMismatchError
        If a trellis does not fit the model.
    """
    if not isinstance(model, SequenceModel):
        raise TypeError(f"Expected a SequenceModel, got {type(model).__name__}.")
    alpha = _check_trellis(model, forward, 'forward')
    beta = _check_trellis(model, backward, 'backward')

    gamma = state_probabilities(model, alpha, beta)
    xi = transition_probabilities(model, alpha, beta)

    gamma_values = gamma.filled()
    denominators = ordered_sum(gamma_values, axis=1) - gamma_values[:, -1]
    zero_denominators = denominators == 0.

    if len(xi) > 0:
        numerators = ordered_sum(np.stack([x.filled() for x in xi]), axis=0)
    else:
        numerators = np.zeros((model.n_states, model.n_states), dtype=gamma_values.dtype)
    transition_prime = _ratio(numerators, denominators[:, None],
                              np.broadcast_to(zero_denominators[:, None], numerators.shape), 'a_ij')

    emission_numerators = gamma_values[:, :-1].T
    emission_prime = _ratio(emission_numerators, denominators[None, :],
                            np.broadcast_to(zero_denominators[None, :], emission_numerators.shape), 'b_i')

    log.debug("Re-estimated model over %d positions with %d xi tables.", model.n_positions, len(xi))
    return Reestimation(
        gamma=gamma,
        xi=xi,
        transition_prime=LabeledTable('a_ij', model.states, model.states, transition_prime),
        emission_prime=LabeledTable('b_i', model.tokens[:-1], model.states, emission_prime),
        forward=forward,
        backward=backward
    )


class BaumWelchReestimator(Estimator):
    r""" Estimator performing a single Baum-Welch re-estimation step on a :class:`SequenceModel`.

    Examples
    --------
    >>> from freqhmm.tables import FrequencyTable, normalize
    >>> from freqhmm.hmm import build_model
    >>> states = normalize(FrequencyTable('text', ['A', 'B'], ['A', 'B'], [[6, 4], [3, 7]]))
    >>> phrase = normalize(FrequencyTable('phrase', ['w1', 'w2'], ['A', 'B'], [[1, 1], [9, 1]]))
    >>> result = BaumWelchReestimator().fit(build_model(states, phrase)).fetch_model()
    >>> len(result.xi)
    1

    See Also
    --------
    reestimate
    """

    def __init__(self):
        super().__init__()

    def fit(self, data: SequenceModel, forward: Optional[LabeledTable] = None,
            backward: Optional[LabeledTable] = None, **kwargs):
        r""" Runs the forward and backward procedures where the trellises are not given and re-estimates.

        Parameters
        ----------
        data : SequenceModel
            The model.
        forward : LabeledTable, optional, default=None
            Precomputed forward trellis.
        backward : LabeledTable, optional, default=None
            Precomputed backward trellis.
        **kwargs
            Ignored kwargs for scikit-learn compatibility.

        Returns
        -------
        self : BaumWelchReestimator
            Reference to self.
        """
        if forward is None:
            forward = forward_procedure(data)
        if backward is None:
            backward = backward_procedure(data)
        self._model = reestimate(data, forward, backward)
        return self

    def fetch_model(self) -> Optional[Reestimation]:
        r""" Yields the latest re-estimation result.

        Returns
        -------
        result : Reestimation or None
            The result, None if :meth:`fit` was not called.
        """
        return super().fetch_model()
