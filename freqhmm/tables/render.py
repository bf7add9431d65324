r""" Text rendering of labeled tables. """
import numbers

from ._labeled_table import LabeledTable, UNDEFINED
from .. import config


def format_cell(cell) -> str:
    r""" Formats a single table cell: undefined cells as :attr:`freqhmm.config.undefined_marker`, numbers
    with :attr:`freqhmm.config.float_format` and everything else as string. """
    if cell is UNDEFINED:
        return config.undefined_marker
    if isinstance(cell, numbers.Real) and not isinstance(cell, bool):
        return format(float(cell), config.float_format)
    return str(cell)


def render_table(table: LabeledTable) -> str:
    r""" Renders a labeled table as a boxed text table.

    Parameters
    ----------
    table : LabeledTable
        The table, frequency tables are rendered including their sum column.

    Returns
    -------
    text : str
        The rendered table without trailing newline.

    Examples
    --------
    >>> from freqhmm.tables import LabeledTable
    >>> print(render_table(LabeledTable('t', ['x'], ['a', 'b'], [[0.5, 0.25]])))
    +---+-----+------+
    | t | a   | b    |
    +---+-----+------+
    | x | 0.5 | 0.25 |
    +---+-----+------+
    """
    if not isinstance(table, LabeledTable):
        raise TypeError(f"Can only render labeled tables, got {type(table).__name__}.")
    cells = [[format_cell(cell) for cell in row] for row in table.to_rows()]
    widths = [max(len(row[j]) for row in cells) for j in range(len(cells[0]))]
    border = '+' + '+'.join('-' * (width + 2) for width in widths) + '+'

    def line(row):
        return '| ' + ' | '.join(cell.ljust(width) for cell, width in zip(row, widths)) + ' |'

    lines = [border, line(cells[0]), border]
    lines.extend(line(row) for row in cells[1:])
    lines.append(border)
    return '\n'.join(lines)
