import logging

import numpy as np

from ._labeled_table import FrequencyTable, ProbabilityTable
from ..util.exceptions import MalformedTableError
from ..util.numeric import ordered_sum

log = logging.getLogger(__name__)


def normalize(table: FrequencyTable) -> ProbabilityTable:
    r""" Turns a frequency table into a row-stochastic probability table (relative frequencies).

    Every count cell is divided by the stored sum of its row, the sum column of the result holds the running
    sum of the normalized cells. Rows whose sum is zero yield non-finite cells; these are not guarded here and
    propagate to the consumers of the table.

    Parameters
    ----------
    table : FrequencyTable
        The frequency table.

    Returns
    -------
    probabilities : ProbabilityTable
        Table of identical shape and labels with normalized rows.

    Raises
    ------
    MalformedTableError
        If the table is a transposed frequency table, whose sums belong to the columns.

    Examples
    --------
    >>> from freqhmm.tables import FrequencyTable
    >>> table = FrequencyTable('text', ['a', 'b'], ['a', 'b'], [[1, 3], [2, 2]])
    >>> normalize(table).probabilities
    array([[0.25, 0.75],
           [0.5 , 0.5 ]])
    """
    if not isinstance(table, FrequencyTable):
        raise TypeError(f"Can only normalize frequency tables, got {type(table).__name__}.")
    if table.pivoted:
        raise MalformedTableError(f"Table '{table.name}' is transposed, its sums belong to the columns. "
                                  "Transpose it back before normalizing.")
    with np.errstate(divide='ignore', invalid='ignore'):
        probabilities = table.counts / table.sums[:, None]
    sums = ordered_sum(probabilities, axis=1)
    if not np.all(np.isfinite(probabilities)):
        empty_rows = [table.row_labels[i] for i in np.flatnonzero(~np.all(np.isfinite(probabilities), axis=1))]
        log.debug("Table '%s' has rows without counts, their relative frequencies are not finite: %s",
                  table.name, empty_rows)
    log.debug("Normalized table '%s' of shape %s.", table.name, table.shape)
    return ProbabilityTable(table.name, table.row_labels, table.column_labels, probabilities,
                            sums=sums, sum_label=table.sum_label)
