from numbers import Integral
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from scipy.sparse import issparse

from .. import config
from ..base import Model
from ..util.exceptions import MalformedTableError
from ..util.numeric import ordered_sum
from ..util.types import ensure_number_array, ensure_labels

#: Marker for cells that do not hold a probability, e.g., ratios with a vanishing denominator.
UNDEFINED = np.ma.masked

Key = Union[int, str]


def _freeze(values):
    r""" Copies values into a read-only float array. Masked arrays stay masked (with NaN underneath the mask)
    if at least one cell is masked, otherwise a plain ndarray is returned. """
    if np.ma.isMaskedArray(values) and np.ma.is_masked(values):
        mask = np.ma.getmaskarray(values).copy()
        data = np.ma.getdata(values).astype(config.dtype, copy=True)
        data[mask] = np.nan
        data.setflags(write=False)
        mask.setflags(write=False)
        return np.ma.MaskedArray(data, mask=mask, copy=False)
    if np.ma.isMaskedArray(values):
        values = np.ma.getdata(values)
    data = ensure_number_array(values).astype(config.dtype, copy=True)
    data.setflags(write=False)
    return data


def _parse_cell(cell, row_index, column_index, allow_undefined=True):
    if cell is UNDEFINED or (allow_undefined and isinstance(cell, str) and cell == config.undefined_marker):
        if not allow_undefined:
            raise MalformedTableError(f"Row {row_index}, column {column_index}: undefined cell is not allowed.")
        return np.nan, True
    if cell is None or (isinstance(cell, str) and not cell.strip()):
        raise MalformedTableError(f"Row {row_index}, column {column_index}: missing value.")
    try:
        return float(cell), False
    except (TypeError, ValueError) as e:
        raise MalformedTableError(f"Row {row_index}, column {column_index}: {cell!r} is not a number.") from e


def _split_rows(rows, min_columns):
    rows = [list(row) for row in rows]
    if len(rows) == 0:
        raise MalformedTableError("A table needs at least a header row.")
    header = rows[0]
    if len(header) < min_columns:
        raise MalformedTableError(f"The header row must have at least {min_columns} cells but has {len(header)}.")
    for i, row in enumerate(rows[1:], start=1):
        if len(row) != len(header):
            raise MalformedTableError(f"Row {i} has {len(row)} cells but the header has {len(header)}.")
        if row[0] is None or not str(row[0]).strip():
            raise MalformedTableError(f"Row {i} is missing its label.")
    return header, rows[1:]


class LabeledTable(Model):
    r""" A two-dimensional table of real values with labeled rows and columns and a name.

    The external representation of such a table is a list of rows where the first row is the header
    (table name followed by the column labels) and every other row starts with its label, see
    :meth:`from_rows` and :meth:`to_rows`.

    Parameters
    ----------
    name : str
        Name of the table, corresponds to the first cell of the header row.
    row_labels : sequence of str
        Labels of the rows. Labels do not have to be unique, lookups by label yield the first match.
    column_labels : sequence of str
        Labels of the columns.
    values : (n_rows, n_columns) array_like
        Cell values. Masked arrays are accepted, masked cells are :data:`UNDEFINED`.
        The values are copied and stored read-only.
    """

    def __init__(self, name: str, row_labels: Sequence[str], column_labels: Sequence[str], values):
        super().__init__()
        self._name = str(name)
        self._row_labels = ensure_labels(row_labels, 'row_labels')
        self._column_labels = ensure_labels(column_labels, 'column_labels')
        shape = (len(self._row_labels), len(self._column_labels))
        if 0 in shape and not issparse(values) and np.size(values) == 0:
            values = np.zeros(shape, dtype=config.dtype)
        values = _freeze(values)
        if values.shape != shape:
            raise MalformedTableError(f"Values of table '{self._name}' have shape {values.shape} but the labels "
                                      f"require {shape}.")
        self._values = values

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence]) -> "LabeledTable":
        r""" Creates a table from a header row followed by labeled data rows. Cells equal to
        :data:`UNDEFINED` or to the configured undefined marker become undefined cells.

        Parameters
        ----------
        rows : sequence of sequences
            Header row and data rows.

        Returns
        -------
        table : LabeledTable
            The table.

        Raises
        ------
        MalformedTableError
            If rows have different lengths, a label is missing or a cell is not a number.
        """
        header, data = _split_rows(rows, min_columns=1)
        values = np.empty((len(data), len(header) - 1), dtype=config.dtype)
        mask = np.zeros_like(values, dtype=bool)
        for i, row in enumerate(data):
            for j, cell in enumerate(row[1:]):
                values[i, j], mask[i, j] = _parse_cell(cell, i + 1, j + 1)
        return cls(header[0], [row[0] for row in data], header[1:], np.ma.MaskedArray(values, mask=mask))

    def to_rows(self) -> list:
        r""" Converts this table to a header row followed by labeled data rows. Undefined cells are
        represented by :data:`UNDEFINED`, all other cells by floats.

        Returns
        -------
        rows : list of lists
            Header row and data rows.
        """
        rows = [[self.name, *self.column_labels]]
        for label, values in zip(self.row_labels, self._cells()):
            rows.append([label, *values])
        return rows

    def _cells(self):
        undefined = self.undefined
        data = np.ma.getdata(self.values)
        for i in range(self.n_rows):
            yield [UNDEFINED if undefined[i, j] else float(data[i, j]) for j in range(self.n_columns)]

    @property
    def name(self) -> str:
        r""" The table's name. """
        return self._name

    @property
    def row_labels(self) -> Tuple[str, ...]:
        r""" The row labels. """
        return self._row_labels

    @property
    def column_labels(self) -> Tuple[str, ...]:
        r""" The column labels. """
        return self._column_labels

    @property
    def values(self) -> Union[np.ndarray, np.ma.MaskedArray]:
        r""" The read-only cell values, a masked array if the table contains undefined cells. """
        return self._values

    @property
    def undefined(self) -> np.ndarray:
        r""" Boolean array which is True for undefined cells. """
        return np.ma.getmaskarray(self._values)

    @property
    def has_undefined(self) -> bool:
        r""" Whether at least one cell of this table is undefined. """
        return bool(np.any(self.undefined))

    @property
    def shape(self) -> Tuple[int, int]:
        return self._values.shape

    @property
    def n_rows(self) -> int:
        return self._values.shape[0]

    @property
    def n_columns(self) -> int:
        return self._values.shape[1]

    def filled(self, fill_value=np.nan) -> np.ndarray:
        r""" Cell values as plain array with undefined cells replaced by `fill_value`.

        Parameters
        ----------
        fill_value : float, optional, default=nan
            The replacement.

        Returns
        -------
        values : ndarray
            The cell values.
        """
        if np.ma.isMaskedArray(self._values):
            return self._values.filled(fill_value)
        return self._values

    def row_index(self, key: Key) -> int:
        r""" Resolves a row label or a (non-negative) row index to a row index. """
        return self._index(key, self._row_labels, 'row')

    def column_index(self, key: Key) -> int:
        r""" Resolves a column label or a (non-negative) column index to a column index. """
        return self._index(key, self._column_labels, 'column')

    @staticmethod
    def _index(key, labels, kind):
        if isinstance(key, (Integral, np.integer)) and not isinstance(key, bool):
            if not 0 <= key < len(labels):
                raise IndexError(f"{kind} index {key} out of range for {len(labels)} {kind}s.")
            return int(key)
        if isinstance(key, str):
            try:
                return labels.index(key)
            except ValueError:
                raise KeyError(f"Unknown {kind} label {key!r}.") from None
        raise TypeError(f"{kind} keys must be labels or integer indices, got {type(key).__name__}.")

    def row(self, key: Key):
        r""" Values of one row, selected by label or index. """
        return self._values[self.row_index(key)]

    def column(self, key: Key):
        r""" Values of one column, selected by label or index. """
        return self._values[:, self.column_index(key)]

    def cell(self, row: Key, column: Key):
        r""" Value of a single cell, :data:`UNDEFINED` if the cell is undefined. """
        i, j = self.row_index(row), self.column_index(column)
        if self.undefined[i, j]:
            return UNDEFINED
        return float(np.ma.getdata(self._values)[i, j])

    def transpose(self) -> "LabeledTable":
        r""" Pivots rows and columns.

        Returns
        -------
        transposed : LabeledTable
            Table with the same name, rows and columns swapped.
        """
        return LabeledTable(self.name, self.column_labels, self.row_labels, self._values.T)

    def __eq__(self, other):
        if not isinstance(other, LabeledTable):
            return NotImplemented
        return (self.name == other.name
                and self.row_labels == other.row_labels
                and self.column_labels == other.column_labels
                and np.array_equal(self.undefined, other.undefined)
                and np.array_equal(self.filled(), other.filled(), equal_nan=True))

    __hash__ = None


class FrequencyTable(LabeledTable):
    r""" A labeled table of non-negative counts with a trailing row-sum column.

    Parameters
    ----------
    name : str
        Name of the table.
    row_labels : sequence of str
        Labels of the rows (hidden states or phrase tokens).
    column_labels : sequence of str
        Labels of the count columns (hidden states). The sum column is not part of them.
    counts : (n_rows, n_columns) array_like or sparse matrix
        The counts, non-negative.
    sums : (n_rows,) array_like, optional, default=None
        Row sums. If None, they are accumulated from the counts, otherwise they must agree with them.
    sum_label : str, optional, default=None
        Header label of the sum column, defaults to :attr:`freqhmm.config.sum_label`.
    pivoted : bool, optional, default=False
        Whether the table is a transposed frequency table. Its sums then belong to the columns and form a
        trailing sum row instead of a sum column.
    """

    _check_counts = True

    def __init__(self, name: str, row_labels: Sequence[str], column_labels: Sequence[str], counts,
                 sums: Optional[np.ndarray] = None, sum_label: Optional[str] = None, pivoted: bool = False):
        super().__init__(name, row_labels, column_labels, counts)
        if self.has_undefined:
            raise MalformedTableError(f"Table '{self.name}' must not contain undefined cells.")
        if self._check_counts and not np.all(np.isfinite(self._values)):
            raise MalformedTableError(f"Table '{self.name}' contains non-finite counts.")
        if self._check_counts and np.any(self._values < 0):
            raise MalformedTableError(f"Table '{self.name}' contains negative counts.")
        self._pivoted = bool(pivoted)
        # sums run along the rows, or along the columns of a transposed table
        kind, labels = ('column', self.column_labels) if self._pivoted else ('row', self.row_labels)
        accumulated = ordered_sum(self._values, axis=0 if self._pivoted else 1)
        if sums is None:
            sums = accumulated
        sums = np.asarray(sums, dtype=config.dtype).copy()
        if sums.shape != (len(labels),):
            raise MalformedTableError(f"Table '{self.name}' has {len(labels)} {kind}s but {sums.shape} sums.")
        if self._check_counts and not np.allclose(sums, accumulated, rtol=1e-9, atol=1e-12):
            bad = [labels[i] for i in np.flatnonzero(~np.isclose(sums, accumulated, rtol=1e-9, atol=1e-12))]
            raise MalformedTableError(f"Sums of table '{self.name}' disagree with the counts in {kind}s {bad}.")
        sums.setflags(write=False)
        self._sums = sums
        self._sum_label = config.sum_label if sum_label is None else str(sum_label)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence]) -> "FrequencyTable":
        r""" Creates a table from a header row followed by labeled data rows, where the last cell of each row
        is the row sum (the header's last cell is the sum column's label).

        Parameters
        ----------
        rows : sequence of sequences
            Header row and data rows.

        Returns
        -------
        table : FrequencyTable
            The table.

        Raises
        ------
        MalformedTableError
            If rows have different lengths, the label or sum cell is missing, a cell is not a number
            or the sum column disagrees with the counts.
        """
        header, data = _split_rows(rows, min_columns=3)
        values = np.empty((len(data), len(header) - 2), dtype=config.dtype)
        sums = np.empty(len(data), dtype=config.dtype)
        for i, row in enumerate(data):
            for j, cell in enumerate(row[1:-1]):
                values[i, j], _ = _parse_cell(cell, i + 1, j + 1, allow_undefined=False)
            sums[i], _ = _parse_cell(row[-1], i + 1, len(row) - 1, allow_undefined=False)
        return cls(header[0], [row[0] for row in data], header[1:-1], values, sums=sums, sum_label=header[-1])

    def to_rows(self) -> list:
        rows = super().to_rows()
        if self.pivoted:
            rows.append([self.sum_label, *(float(s) for s in self.sums)])
            return rows
        rows[0].append(self.sum_label)
        for row, row_sum in zip(rows[1:], self.sums):
            row.append(float(row_sum))
        return rows

    @property
    def counts(self) -> np.ndarray:
        r""" The count cells (without the sum column). """
        return self._values

    @property
    def sums(self) -> np.ndarray:
        r""" The row sums, or the column sums if the table is :attr:`pivoted`. """
        return self._sums

    @property
    def sum_label(self) -> str:
        r""" Header label of the sum column. """
        return self._sum_label

    @property
    def pivoted(self) -> bool:
        r""" Whether this table was obtained by transposing a frequency table, i.e., carries a sum row. """
        return self._pivoted

    def transpose(self) -> "FrequencyTable":
        r""" Pivots rows and columns, the sum column becomes a sum row and vice versa.

        Returns
        -------
        transposed : FrequencyTable
            Table of the same type with rows and columns swapped.
        """
        return type(self)(self.name, self.column_labels, self.row_labels, self._values.T, sums=self._sums,
                          sum_label=self._sum_label, pivoted=not self._pivoted)

    def __eq__(self, other):
        if not isinstance(other, FrequencyTable):
            return False if isinstance(other, LabeledTable) else NotImplemented
        if not super().__eq__(other):
            return False
        return (self.sum_label == other.sum_label and self.pivoted == other.pivoted
                and np.array_equal(self.sums, other.sums, equal_nan=True))

    __hash__ = None


class ProbabilityTable(FrequencyTable):
    r""" A row-stochastic table as produced by :func:`normalize <freqhmm.tables.normalize>`. Its sum column holds
    the sum of each normalized row, which is only a diagnostic. Cells may be non-finite if the frequency table had
    rows without counts.

    Parameters
    ----------
    name : str
        Name of the table.
    row_labels : sequence of str
        Row labels.
    column_labels : sequence of str
        Column labels.
    counts : (n_rows, n_columns) array_like
        The probabilities.
    sums : (n_rows,) array_like, optional, default=None
        Sums of the normalized rows.
    sum_label : str, optional, default=None
        Header label of the sum column.
    """

    _check_counts = False

    @property
    def probabilities(self) -> np.ndarray:
        r""" The probability cells, same as :attr:`counts`. """
        return self._values


def transpose(table: LabeledTable) -> LabeledTable:
    r""" Pivots rows and columns of a labeled table. Frequency tables keep their type and sums, so transposing
    twice restores an equal table.

    Parameters
    ----------
    table : LabeledTable
        The table.

    Returns
    -------
    transposed : LabeledTable
        The transposed table.
    """
    if not isinstance(table, LabeledTable):
        raise TypeError(f"Can only transpose labeled tables, got {type(table).__name__}.")
    return table.transpose()
