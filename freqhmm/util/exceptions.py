class MalformedTableError(ValueError):
    r"""
    Raised when a table does not have the expected layout: rows of different length, a missing label
    or sum cell, counts that are not numeric or negative, or a sum column that disagrees with the counts.
    """
    pass


class ShapeMismatchError(ValueError):
    r"""
    Raised when tables (or trellises) do not fit together, e.g., a state table that is not square or an
    observation table whose number of state columns differs from the hidden state alphabet size.
    """
    pass


class DataQualityWarning(RuntimeWarning):
    r"""
    This warning indicates that input data contains values which make parts of the results undefined,
    for example non-finite probabilities caused by a row of zero counts.
    """
    pass


class UndefinedRatioWarning(RuntimeWarning):
    r"""
    This warning indicates that a ratio could not be computed because its denominator vanished. The
    affected cells are marked as undefined instead of aborting the computation.
    """
    pass
