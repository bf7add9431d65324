r"""
.. currentmodule: freqhmm.util

===============================================================================
Exceptions and warnings
===============================================================================

.. autosummary::
    :toctree: generated/
    :template: class_nomodule.rst

    exceptions.MalformedTableError
    exceptions.ShapeMismatchError
    exceptions.DataQualityWarning
    exceptions.UndefinedRatioWarning

===============================================================================
Helpers
===============================================================================

.. autosummary::
    :toctree: generated/
    :template: class_nomodule.rst

    numeric.ordered_sum
    numeric.round_half_away
    types.ensure_array
    log.logger
"""

from . import exceptions
from . import types
from .numeric import ordered_sum
