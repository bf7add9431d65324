import logging
import warnings
from numbers import Integral
from typing import Tuple, Union

import numpy as np

from ..base import Model
from ..tables import LabeledTable
from ..util.exceptions import ShapeMismatchError, MalformedTableError, DataQualityWarning

log = logging.getLogger(__name__)


class SequenceModel(Model):
    r""" Hidden Markov model over a fixed phrase, composed of a state table (transition source) and an
    observation table (emission source).

    The state table is square over the hidden state alphabet, row :math:`i` holds the transition probabilities
    out of state :math:`i`. The observation table has one row per phrase position in left-to-right order and
    one column per hidden state, in the same order as the state table.

    Parameters
    ----------
    state_table : LabeledTable
        Transition probabilities, usually a normalized :class:`ProbabilityTable <freqhmm.tables.ProbabilityTable>`.
    observation_table : LabeledTable
        Emission probabilities per phrase position.

    Raises
    ------
    ShapeMismatchError
        If the state table is not square or the number of observation table columns does not match
        the number of hidden states.
    MalformedTableError
        If the state alphabet or the phrase is empty.

    See Also
    --------
    build_model
    """

    def __init__(self, state_table: LabeledTable, observation_table: LabeledTable):
        super().__init__()
        for name, table in (('state_table', state_table), ('observation_table', observation_table)):
            if not isinstance(table, LabeledTable):
                raise TypeError(f"{name} must be a labeled table, got {type(table).__name__}.")
        if state_table.n_rows != state_table.n_columns:
            raise ShapeMismatchError(f"The state table must be square over the hidden states, but has shape "
                                     f"{state_table.shape}.")
        if state_table.n_rows == 0:
            raise MalformedTableError("The state table does not contain any hidden states.")
        if observation_table.n_columns != state_table.n_rows:
            raise ShapeMismatchError(f"The observation table has {observation_table.n_columns} state columns, but "
                                     f"there are {state_table.n_rows} hidden states.")
        if observation_table.n_rows == 0:
            raise MalformedTableError("The observation table does not contain any phrase positions.")

        states = state_table.row_labels
        if state_table.column_labels != states or observation_table.column_labels != states:
            msg = (f"Hidden state labels differ between state table rows {states}, state table columns "
                   f"{state_table.column_labels} and observation table columns {observation_table.column_labels}. "
                   f"States are matched by position.")
            warnings.warn(msg, DataQualityWarning, stacklevel=2)
        for table in (state_table, observation_table):
            finite = np.isfinite(table.filled())
            if not np.all(finite):
                rows = [table.row_labels[i] for i in np.flatnonzero(~np.all(finite, axis=1))]
                msg = f"Table '{table.name}' contains non-finite probabilities in rows {rows}."
                warnings.warn(msg, DataQualityWarning, stacklevel=2)

        self._state_table = state_table
        self._observation_table = observation_table

    @property
    def state_table(self) -> LabeledTable:
        r""" The table of transition probabilities. """
        return self._state_table

    @property
    def observation_table(self) -> LabeledTable:
        r""" The table of emission probabilities per phrase position. """
        return self._observation_table

    @property
    def states(self) -> Tuple[str, ...]:
        r""" The hidden state alphabet, taken from the state table's row labels. """
        return self._state_table.row_labels

    @property
    def tokens(self) -> Tuple[str, ...]:
        r""" The phrase tokens in left-to-right order. """
        return self._observation_table.row_labels

    @property
    def n_states(self) -> int:
        return self._state_table.n_rows

    @property
    def n_positions(self) -> int:
        r""" Number of phrase positions :math:`T`. """
        return self._observation_table.n_rows

    @property
    def transition_matrix(self) -> np.ndarray:
        r""" Read-only (n_states, n_states) transition matrix, entry :math:`(i, j)` is the probability to go
        from state :math:`i` to state :math:`j`. """
        return self._state_table.filled()

    @property
    def emission_matrix(self) -> np.ndarray:
        r""" Read-only (n_positions, n_states) emission matrix, row :math:`t-1` belongs to phrase position
        :math:`t`. """
        return self._observation_table.filled()

    def state_index(self, state: Union[int, str]) -> int:
        r""" Resolves a hidden state label or index to its index. """
        return self._state_table.row_index(state)

    def transition(self, from_state: Union[int, str], to_state: Union[int, str]) -> float:
        r""" Probability to move from one hidden state to another.

        Parameters
        ----------
        from_state : int or str
            Index or label of the source state.
        to_state : int or str
            Index or label of the target state.

        Returns
        -------
        probability : float
            The transition probability.
        """
        return float(self.transition_matrix[self.state_index(from_state), self.state_index(to_state)])

    def emission(self, state: Union[int, str], position: int) -> float:
        r""" Probability of the token at a phrase position given a hidden state.

        Parameters
        ----------
        state : int or str
            Index or label of the hidden state.
        position : int
            Phrase position, counted from 1 so that it coincides with the trellis column.

        Returns
        -------
        probability : float
            The emission probability.
        """
        if not isinstance(position, (Integral, np.integer)) or isinstance(position, bool):
            raise TypeError(f"Positions must be integers, got {type(position).__name__}.")
        if not 1 <= position <= self.n_positions:
            raise IndexError(f"Position {position} out of range, the phrase has positions 1 to {self.n_positions}.")
        return float(self.emission_matrix[position - 1, self.state_index(state)])


def build_model(state_table: LabeledTable, observation_table: LabeledTable) -> SequenceModel:
    r""" Builds a sequence model from a state table and an observation table.

    Parameters
    ----------
    state_table : LabeledTable
        Transition probabilities between hidden states.
    observation_table : LabeledTable
        Emission probabilities, one row per phrase position and one column per hidden state.

    Returns
    -------
    model : SequenceModel
        The model.
    """
    model = SequenceModel(state_table, observation_table)
    log.debug("Built model with %d hidden states over a phrase of %d positions.", model.n_states,
              model.n_positions)
    return model
