r""" Reading frequency tables from delimited text files. """
import csv
import logging
import os
from typing import Iterable, Optional, Union

from ._labeled_table import FrequencyTable
from .. import config
from ..util.exceptions import MalformedTableError
from ..util.numeric import ordered_sum

log = logging.getLogger(__name__)


def read_frequency_table(lines: Iterable[str], delimiter: str = ',',
                         sum_label: Optional[str] = None) -> FrequencyTable:
    r""" Parses a delimited table of counts and appends the row-sum column.

    The first non-empty line is the header: the table name followed by one label per count column. Every other
    non-empty line holds a row label followed by the counts of that row.

    Parameters
    ----------
    lines : iterable of str
        The lines of the table, e.g., an open file.
    delimiter : str, optional, default=','
        Cell delimiter.
    sum_label : str, optional, default=None
        Header label of the appended sum column, defaults to :attr:`freqhmm.config.sum_label`.

    Returns
    -------
    table : FrequencyTable
        The parsed table.

    Raises
    ------
    MalformedTableError
        If the table is empty, rows have a different number of cells than the header or a count is not a number.
        The message names the offending line of the input.
    """
    if sum_label is None:
        sum_label = config.sum_label
    header = None
    rows = []
    try:
        reader = csv.reader(lines, delimiter=delimiter)
        for cells in reader:
            if not any(cell.strip() for cell in cells):
                continue
            cells = [cell.strip() for cell in cells]
            if header is None:
                header = cells
                continue
            if len(cells) != len(header):
                raise MalformedTableError(f"Line {reader.line_num} ({cells[0]!r}) has {len(cells)} cells but the "
                                          f"header has {len(header)}.")
            try:
                counts = [float(cell) for cell in cells[1:]]
            except ValueError as e:
                raise MalformedTableError(f"Line {reader.line_num} ({cells[0]!r}): {e}") from e
            rows.append([cells[0], *counts, float(ordered_sum(counts))])
    except csv.Error as e:
        raise MalformedTableError(f"Could not parse table: {e}") from e
    if header is None:
        raise MalformedTableError("The table is empty.")
    return FrequencyTable.from_rows([[*header, sum_label], *rows])


def load_frequency_table(path: Union[str, os.PathLike], delimiter: str = ',', encoding: str = 'utf-8-sig',
                         sum_label: Optional[str] = None) -> FrequencyTable:
    r""" Loads a frequency table from a delimited text file, see :func:`read_frequency_table` for the format.

    Parameters
    ----------
    path : str or path-like
        Path to the file.
    delimiter : str, optional, default=','
        Cell delimiter.
    encoding : str, optional, default='utf-8-sig'
        File encoding. The default skips a leading byte order mark.
    sum_label : str, optional, default=None
        Header label of the appended sum column.

    Returns
    -------
    table : FrequencyTable
        The loaded table.
    """
    with open(path, newline='', encoding=encoding) as f:
        table = read_frequency_table(f, delimiter=delimiter, sum_label=sum_label)
    log.debug("Loaded table '%s' with %d rows and %d columns from %s.", table.name, table.n_rows,
              table.n_columns, path)
    return table
