from decimal import Decimal, ROUND_HALF_UP

import numpy as np


def ordered_sum(a, axis=None):
    r""" Sums array elements strictly in index order along an axis.

    :func:`numpy.sum` uses pairwise summation along contiguous axes, which groups additions differently
    than a running sum and can change the last bits of the result. Cumulative sums are always evaluated as a
    running sum, so their last element reproduces :code:`s = 0; for x in a: s += x`.

    Parameters
    ----------
    a : array_like
        Input data.
    axis : int, optional, default=None
        Axis along which is summed. If None, the flattened (row-major) array is summed.

    Returns
    -------
    sum : ndarray or scalar
        The sum with `axis` removed.
    """
    a = np.asarray(a)
    if axis is None:
        a = a.ravel()
        axis = 0
    if a.shape[axis] == 0:
        return np.sum(a, axis=axis)
    return np.cumsum(a, axis=axis).take(-1, axis=axis)


def round_half_away(a, decimals):
    r""" Rounds to a number of decimals with halves rounded away from zero.

    Each finite element is first reduced to 15 significant digits, so that binary representation noise such as
    :code:`0.30000000000000004` does not decide the direction of a half. The result is then rounded with
    :data:`decimal.ROUND_HALF_UP`. Unlike :func:`numpy.round`, which scales by a power of ten and rounds halves
    to even, this yields e.g. :code:`2.5e-10 -> 3e-10` at ten decimals. Non-finite elements are passed through.

    Parameters
    ----------
    a : array_like
        Input data.
    decimals : int
        Number of decimals to keep.

    Returns
    -------
    rounded : ndarray
        Float array of the same shape.

    Examples
    --------
    >>> round_half_away([5e-11, 2.5e-10, 1.25e-9], 10).tolist()
    [1e-10, 3e-10, 1.3e-09]
    """
    a = np.array(a, dtype=np.float64)
    quantum = Decimal(1).scaleb(-decimals)
    finite = np.isfinite(a)
    a[finite] = [float(Decimal(format(x, '.15g')).quantize(quantum, rounding=ROUND_HALF_UP)) for x in a[finite]]
    return a
