r"""
.. currentmodule: freqhmm.tables

===============================================================================
Labeled tables
===============================================================================

Tables with a name, labeled rows and labeled columns. Frequency tables carry a trailing row-sum column,
probability tables are their row-normalized counterpart.

.. autosummary::
    :toctree: generated/
    :template: class_nomodule.rst

    LabeledTable
    FrequencyTable
    ProbabilityTable
    UNDEFINED

    transpose
    normalize

===============================================================================
Input and output
===============================================================================

.. autosummary::
    :toctree: generated/
    :template: class_nomodule.rst

    load_frequency_table
    read_frequency_table
    render_table
"""

from ._labeled_table import LabeledTable, FrequencyTable, ProbabilityTable, UNDEFINED, transpose
from ._normalize import normalize
from .io import load_frequency_table, read_frequency_table
from .render import render_table, format_cell
